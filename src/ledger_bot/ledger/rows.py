"""Compose the rows appended to a date-grouped ledger sheet."""

from __future__ import annotations

from decimal import Decimal
import re
from typing import Sequence, Union

from ledger_bot.ledger.layout import SheetLayout, format_vnd
from ledger_bot.parsing.entry import ParsedEntry

Cell = Union[str, int, float]
TableRow = list[Cell]

DATE_HEADER_PATTERN = re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}")


def is_date_header(row: Sequence[object] | None) -> bool:
    """True when the first cell is a ``DD/MM/YYYY`` marker."""

    if not row:
        return False
    first = row[0]
    return isinstance(first, str) and DATE_HEADER_PATTERN.fullmatch(first) is not None


def find_last_date_header(rows: Sequence[Sequence[object] | None]) -> str | None:
    """Scan backwards through ``rows`` and return the most recent date marker."""

    for row in reversed(rows):
        if is_date_header(row):
            return str(row[0])  # type: ignore[index]
    return None


def compose_rows(
    existing_rows: Sequence[Sequence[object] | None],
    entry: ParsedEntry,
    today: str,
    *,
    layout: SheetLayout = SheetLayout.SINGLE_AMOUNT,
) -> list[TableRow]:
    """Return the rows to append for ``entry`` given the sheet's recent rows.

    A new day starts with a blank spacer (only when the sheet already has rows)
    followed by a ``today`` header; the entry's data row always comes last.
    Existing rows are never modified.
    """

    if DATE_HEADER_PATTERN.fullmatch(today or "") is None:
        raise ValueError(f"today must be formatted as DD/MM/YYYY, got {today!r}")

    width = layout.width
    rows: list[TableRow] = []
    if find_last_date_header(existing_rows) != today:
        if existing_rows:
            rows.append(_blank_row(width))
        header = _blank_row(width)
        header[0] = today
        rows.append(header)

    rows.append(build_data_row(entry, layout=layout))
    return rows


def build_data_row(entry: ParsedEntry, *, layout: SheetLayout) -> TableRow:
    """Lay out a single entry according to ``layout``."""

    note = entry.note or ""
    if layout is SheetLayout.SINGLE_AMOUNT:
        return [entry.category, format_vnd(entry.amount), note]

    amount = _numeric_cell(entry.amount)
    if entry.is_income:
        return [entry.category, "", amount, note]
    return [entry.category, amount, "", note]


def _blank_row(width: int) -> TableRow:
    return [""] * width


def _numeric_cell(amount: Decimal) -> int | float:
    integral = amount.to_integral_value()
    if integral == amount:
        return int(integral)
    return float(amount)


__all__ = [
    "Cell",
    "DATE_HEADER_PATTERN",
    "TableRow",
    "build_data_row",
    "compose_rows",
    "find_last_date_header",
    "is_date_header",
]
