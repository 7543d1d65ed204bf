"""Unit tests for informal amount resolution rules."""

from __future__ import annotations

from decimal import Decimal

import pytest

from ledger_bot.parsing.amount import SUFFIX_MULTIPLIERS, resolve_amount


@pytest.mark.parametrize(
    ("number", "suffix", "remainder", "expected"),
    [
        ("157", "k", None, Decimal("157000")),
        ("1.2", "tr", None, Decimal("1200000")),
        ("1,5", "m", None, Decimal("1500000")),
        ("144", "tr", "300", Decimal("144300000")),
        ("2", "k", "5", Decimal("2500")),
        ("1.5", "k", "3", Decimal("15300")),
        ("2.839.000", None, None, Decimal("2839000")),
        ("2,839,000", None, None, Decimal("2839000")),
        ("1.5", None, None, Decimal("15")),
        ("50", "đ", None, Decimal("50")),
        ("1.5", "d", None, Decimal("15")),
        ("0.5", "k", None, Decimal("500")),
        ("1.2345", "k", None, Decimal("1234.5")),
    ],
)
def test_resolve_amount(
    number: str, suffix: str | None, remainder: str | None, expected: Decimal
) -> None:
    assert resolve_amount(number, suffix, remainder) == expected


@pytest.mark.parametrize("grouped", ["1.234", "12,345", "999.000.000", "1,000.000"])
@pytest.mark.parametrize("suffix", ["k", "tr", "m"])
def test_thousands_grouped_literals_drop_separators(grouped: str, suffix: str) -> None:
    digits = grouped.replace(".", "").replace(",", "")

    assert resolve_amount(grouped, suffix) == Decimal(digits) * SUFFIX_MULTIPLIERS[suffix]


@pytest.mark.parametrize(
    ("number", "suffix", "remainder"),
    [
        (".", None, None),
        (",,", "k", None),
        ("1.2.3", "k", None),
        ("5", "đ", "300"),
        ("5", None, "300"),
        ("5", "x", None),
    ],
)
def test_resolve_amount_rejects_unusable_input(
    number: str, suffix: str | None, remainder: str | None
) -> None:
    assert resolve_amount(number, suffix, remainder) is None


def test_resolved_amounts_are_integral_when_possible() -> None:
    amount = resolve_amount("1.2", "tr")

    assert amount is not None
    assert str(amount) == "1200000"
