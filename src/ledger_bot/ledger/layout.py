"""Sheet layout variants, A1 addressing and presentation helpers."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import StrEnum

MONTH_BLOCK_WIDTH = 5
MONTH_WINDOW_WIDTH = 4
CURRENCY_GLYPH = "₫"

_VND_FRACTION = Decimal("0.001")


class SheetLayout(StrEnum):
    """Column conventions a ledger sheet can use.

    ``single_amount`` is ``[category-or-date, "157.000 ₫", note]`` on one
    fixed range. ``split_amount`` is ``[date-or-category, expense, income, note]``
    inside a per-month block of columns.
    """

    SINGLE_AMOUNT = "single_amount"
    SPLIT_AMOUNT = "split_amount"

    @property
    def width(self) -> int:
        return 3 if self is SheetLayout.SINGLE_AMOUNT else MONTH_WINDOW_WIDTH


def column_letter(index: int) -> str:
    """Return the A1 letters for a 0-based column index (``0 -> A``, ``26 -> AA``)."""

    if index < 0:
        raise ValueError("Column index cannot be negative.")
    letters: list[str] = []
    number = index + 1
    while number:
        number, offset = divmod(number - 1, 26)
        letters.append(chr(ord("A") + offset))
    return "".join(reversed(letters))


def month_column_range(month_index: int) -> tuple[str, str]:
    """Return the first/last column letters of the 4-column window for a 0-based month."""

    if not 0 <= month_index <= 11:
        raise ValueError("month_index must be between 0 and 11.")
    start = MONTH_BLOCK_WIDTH * month_index
    return column_letter(start), column_letter(start + MONTH_WINDOW_WIDTH - 1)


def sheet_range(sheet_name: str, layout: SheetLayout, month_index: int) -> str:
    """Build the A1 range read from and appended to for the given month."""

    quoted = "'" + sheet_name.replace("'", "''") + "'"
    if layout is SheetLayout.SINGLE_AMOUNT:
        return f"{quoted}!A:C"
    first, last = month_column_range(month_index)
    return f"{quoted}!{first}:{last}"


def format_ledger_date(day: date) -> str:
    """Format a date as the ``DD/MM/YYYY`` header marker."""
    return f"{day.day:02d}/{day.month:02d}/{day.year:04d}"


def format_vnd(amount: Decimal | int | float) -> str:
    """Render an amount the way vi-VN locales do, e.g. ``157000 -> "157.000 ₫"``."""

    value = Decimal(amount)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 8)
        ctx.rounding = ROUND_HALF_UP
        rounded = value.quantize(_VND_FRACTION)

    integer_part, _, fraction = f"{rounded:f}".partition(".")
    grouped = f"{int(integer_part):,}".replace(",", ".")
    fraction = fraction.rstrip("0")
    text = f"{grouped},{fraction}" if fraction else grouped
    return f"{text} {CURRENCY_GLYPH}"


__all__ = [
    "CURRENCY_GLYPH",
    "MONTH_BLOCK_WIDTH",
    "MONTH_WINDOW_WIDTH",
    "SheetLayout",
    "column_letter",
    "format_ledger_date",
    "format_vnd",
    "month_column_range",
    "sheet_range",
]
