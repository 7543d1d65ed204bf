"""Unit tests for the deterministic expense/income message parser."""

from __future__ import annotations

from decimal import Decimal
import unicodedata

import pytest

from ledger_bot.parsing import EntryTokens, ParsedEntry, parse_entry_text, tokenize_entry
from ledger_bot.parsing.entry import detect_entry_kind


def test_parse_entry_text_reads_category_and_thousands_suffix() -> None:
    result = parse_entry_text("ăn tối 157k")

    assert result == ParsedEntry(
        category="Ăn tối", amount=Decimal("157000"), kind="expense", note=None
    )


def test_parse_entry_text_keeps_trailing_note() -> None:
    result = parse_entry_text("ăn trưa 45k cùng đồng nghiệp")

    assert result is not None
    assert result.category == "Ăn trưa"
    assert result.amount == 45000
    assert result.note == "cùng đồng nghiệp"


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("siêu thị 1.2tr", 1_200_000),
        ("chi tiêu 2.839.000", 2_839_000),
        ("ăn tối 144tr300", 144_300_000),
        ("cafe 2k5", 2_500),
        ("xăng 50.000đ", 50_000),
        ("gửi xe 5D", 5),
        ("quà 12,345k", 12_345_000),
        ("điện thoại 1,5m", 1_500_000),
        ("bánh mì 25 K", 25_000),
    ],
)
def test_parse_entry_text_resolves_informal_amounts(message: str, expected: int) -> None:
    result = parse_entry_text(message)

    assert result is not None
    assert result.amount == expected


def test_parse_entry_text_with_separator_amount_and_note() -> None:
    result = parse_entry_text("chi tiêu 2.839.000 tiền thuê nhà")

    assert result == ParsedEntry(
        category="Chi tiêu",
        amount=Decimal("2839000"),
        kind="expense",
        note="tiền thuê nhà",
    )


def test_parse_entry_text_detects_income_prefix() -> None:
    result = parse_entry_text("thu lương 10tr")

    assert result is not None
    assert result.kind == "income"
    assert result.category == "Lương"
    assert result.amount == 10_000_000


def test_parse_entry_text_income_prefix_is_case_insensitive() -> None:
    result = parse_entry_text("  NHẬN   thưởng 2,5tr tết  ")

    assert result is not None
    assert result.kind == "income"
    assert result.category == "Thưởng"
    assert result.amount == 2_500_000
    assert result.note == "tết"


def test_parse_entry_text_accepts_decomposed_diacritics() -> None:
    result = parse_entry_text(unicodedata.normalize("NFD", "nhận lương 1tr"))

    assert result is not None
    assert result.kind == "income"


def test_words_starting_with_thu_are_not_income() -> None:
    result = parse_entry_text("thuốc cảm 50k")

    assert result is not None
    assert result.kind == "expense"
    assert result.category == "Thuốc cảm"


def test_suffix_lookalike_word_becomes_note() -> None:
    result = parse_entry_text("ăn 50 trưa")

    assert result is not None
    assert result.amount == 50
    assert result.note == "trưa"


def test_spaced_suffix_never_takes_compound_digits() -> None:
    result = parse_entry_text("sơn tường 30 m2 500k")

    assert result is not None
    assert result.category == "Sơn tường"
    assert result.amount == 30
    assert result.note == "m2 500k"


def test_tokenize_entry_keeps_spaced_unit_in_note() -> None:
    assert tokenize_entry("thuê kho 30 m2") == EntryTokens(
        category="thuê kho", number="30", note="m2"
    )
    assert tokenize_entry("thuê kho 30m2") == EntryTokens(
        category="thuê kho", number="30", suffix="m", remainder="2"
    )


def test_first_number_after_category_wins() -> None:
    result = parse_entry_text("mua 2 cái áo 300k")

    assert result is not None
    assert result.category == "Mua"
    assert result.amount == 2
    assert result.note == "cái áo 300k"


@pytest.mark.parametrize(
    "message",
    [
        "xin chào",
        "",
        "   ",
        "157k",
        "thu 500k",
        "ăn .",
        "ăn 1.2.3k",
        "phí 5đ300",
        "hôm nay trời đẹp quá",
    ],
)
def test_parse_entry_text_returns_none_for_non_entries(message: str) -> None:
    assert parse_entry_text(message) is None


@pytest.mark.parametrize(
    "message",
    [
        "ăn tối 157k",
        "a 0",
        "b ,,,k",
        "c 1,2,3tr",
        "d 99999999999999999999999999999999999m",
        "e 1.k",
        "f .5tr",
        "g 7tr0001",
    ],
)
def test_parsed_amounts_are_finite_and_non_negative(message: str) -> None:
    result = parse_entry_text(message)

    if result is not None:
        assert result.amount.is_finite()
        assert result.amount >= 0
        assert result.category[:1].isupper() or not result.category[:1].isalpha()


def test_parsed_entry_rejects_invalid_values() -> None:
    with pytest.raises(ValueError):
        ParsedEntry(category="", amount=Decimal("1"))
    with pytest.raises(ValueError):
        ParsedEntry(category="Ăn", amount=Decimal("NaN"))
    with pytest.raises(ValueError):
        ParsedEntry(category="Ăn", amount=Decimal("-1"))


def test_detect_entry_kind_strips_marker_and_whitespace() -> None:
    assert detect_entry_kind("thu \t tiền nhà 5tr") == ("income", "tiền nhà 5tr")
    assert detect_entry_kind(" cafe 20k ") == ("expense", "cafe 20k")


def test_tokenize_entry_splits_message_parts() -> None:
    assert tokenize_entry("ăn tối 157k") == EntryTokens(
        category="ăn tối", number="157", suffix="k"
    )
    assert tokenize_entry("cafe 30 K với bạn") == EntryTokens(
        category="cafe", number="30", suffix="k", note="với bạn"
    )
    assert tokenize_entry("ăn \t 2Tr5") == EntryTokens(
        category="ăn", number="2", suffix="tr", remainder="5"
    )


def test_tokenize_entry_requires_category_and_number() -> None:
    assert tokenize_entry("157k") is None
    assert tokenize_entry("xin chào") is None
