"""Deterministic parser turning chat messages into ledger entries."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import re
from typing import Literal
import unicodedata

from .amount import resolve_amount
from .tokens import tokenize_entry

EntryKind = Literal["expense", "income"]

_INCOME_PREFIX = re.compile(r"^(?:thu|nhận)\s+", re.IGNORECASE)


@dataclass(slots=True, frozen=True)
class ParsedEntry:
    """Structured expense or income extracted from one message."""

    category: str
    amount: Decimal
    kind: EntryKind = "expense"
    note: str | None = None

    def __post_init__(self) -> None:
        if not self.category:
            raise ValueError("ParsedEntry category cannot be empty.")
        if not self.amount.is_finite() or self.amount < 0:
            raise ValueError("ParsedEntry amount must be a finite, non-negative number.")
        if self.kind not in ("expense", "income"):
            raise ValueError(f"Unknown entry kind: {self.kind!r}")

    @property
    def is_income(self) -> bool:
        return self.kind == "income"


def detect_entry_kind(text: str) -> tuple[EntryKind, str]:
    """Split an income marker (``thu``/``nhận``) off the front of ``text``."""

    # Some keyboards emit decomposed diacritics ("nhâ" + combining dot).
    trimmed = unicodedata.normalize("NFC", text).strip()
    marker = _INCOME_PREFIX.match(trimmed)
    if marker is None:
        return "expense", trimmed
    return "income", trimmed[marker.end() :]


def parse_entry_text(text: str) -> ParsedEntry | None:
    """Parse ``"ăn tối 157k cùng bạn"`` style messages.

    Returns ``None`` when the message is not an expense/income statement; that is
    the normal outcome for everyday chat and never raises.
    """

    kind, body = detect_entry_kind(text)
    tokens = tokenize_entry(body)
    if tokens is None:
        return None

    amount = resolve_amount(tokens.number, tokens.suffix, tokens.remainder)
    if amount is None:
        return None

    note = (tokens.note or "").strip() or None
    return ParsedEntry(
        category=capitalize_first(tokens.category),
        amount=amount,
        kind=kind,
        note=note,
    )


def capitalize_first(value: str) -> str:
    """Upper-case only the first character, leaving the rest untouched."""
    return value[:1].upper() + value[1:]


__all__ = [
    "EntryKind",
    "ParsedEntry",
    "capitalize_first",
    "detect_entry_kind",
    "parse_entry_text",
]
