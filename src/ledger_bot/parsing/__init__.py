"""Parsing helpers for the ledger bot."""

from .amount import SUFFIX_MULTIPLIERS, resolve_amount
from .entry import (
    EntryKind,
    ParsedEntry,
    capitalize_first,
    detect_entry_kind,
    parse_entry_text,
)
from .tokens import EntryTokens, tokenize_entry

__all__ = [
    "EntryKind",
    "EntryTokens",
    "ParsedEntry",
    "SUFFIX_MULTIPLIERS",
    "capitalize_first",
    "detect_entry_kind",
    "parse_entry_text",
    "resolve_amount",
    "tokenize_entry",
]
