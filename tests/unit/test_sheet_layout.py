"""Unit tests for A1 addressing and presentation helpers."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_bot.ledger import (
    SheetLayout,
    column_letter,
    format_ledger_date,
    format_vnd,
    month_column_range,
    sheet_range,
)


@pytest.mark.parametrize(
    ("index", "letters"),
    [(0, "A"), (3, "D"), (25, "Z"), (26, "AA"), (51, "AZ"), (52, "BA"), (701, "ZZ"), (702, "AAA")],
)
def test_column_letter_uses_bijective_base_26(index: int, letters: str) -> None:
    assert column_letter(index) == letters


def test_column_letter_rejects_negative_index() -> None:
    with pytest.raises(ValueError):
        column_letter(-1)


@pytest.mark.parametrize(
    ("month_index", "expected"),
    [(0, ("A", "D")), (1, ("F", "I")), (5, ("Z", "AC")), (11, ("BD", "BG"))],
)
def test_month_column_range_spans_four_of_five_columns(
    month_index: int, expected: tuple[str, str]
) -> None:
    assert month_column_range(month_index) == expected


@pytest.mark.parametrize("month_index", [-1, 12])
def test_month_column_range_rejects_out_of_range_months(month_index: int) -> None:
    with pytest.raises(ValueError):
        month_column_range(month_index)


def test_sheet_range_per_layout() -> None:
    assert sheet_range("1", SheetLayout.SINGLE_AMOUNT, 7) == "'1'!A:C"
    assert sheet_range("Chi tiêu", SheetLayout.SPLIT_AMOUNT, 1) == "'Chi tiêu'!F:I"
    assert sheet_range("Bob's", SheetLayout.SINGLE_AMOUNT, 0) == "'Bob''s'!A:C"


def test_layout_widths() -> None:
    assert SheetLayout.SINGLE_AMOUNT.width == 3
    assert SheetLayout.SPLIT_AMOUNT.width == 4
    assert SheetLayout("split_amount") is SheetLayout.SPLIT_AMOUNT


def test_format_ledger_date_zero_pads() -> None:
    assert format_ledger_date(date(2026, 2, 5)) == "05/02/2026"
    assert format_ledger_date(date(2026, 12, 31)) == "31/12/2026"


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (157000, "157.000 ₫"),
        (Decimal("1200000"), "1.200.000 ₫"),
        (Decimal("1200000.0"), "1.200.000 ₫"),
        (999, "999 ₫"),
        (0, "0 ₫"),
        (Decimal("1234.5"), "1.234,5 ₫"),
        (Decimal("0.0005"), "0,001 ₫"),
    ],
)
def test_format_vnd(amount: Decimal | int, expected: str) -> None:
    assert format_vnd(amount) == expected
