"""Tokenizer that splits a chat message into category, amount and note parts."""

from __future__ import annotations

from dataclasses import dataclass
import re

_WHITESPACE_RUN = re.compile(r"\s+")

# Everything after the category: "<number>[<suffix><remainder>|[ ]<suffix>][ <note>]".
# Compound digits only count when number, suffix and remainder touch ("1tr2", not "30 m2").
_AMOUNT_CLAUSE = re.compile(
    r"""
    (?P<number>[0-9.,]+)                        # digits with "." / "," separators
    (?:
        (?P<compound>k|tr|m)(?P<remainder>[0-9]+)  # compound shorthand, no gaps
        |
        \s*
        (?:
            (?P<scale>k|tr|m)                   # magnitude shorthand
            |
            (?P<currency>đ|d)                   # decorative currency marker
        )
    )?
    (?:\s+(?P<note>.*))?
    """,
    re.IGNORECASE | re.VERBOSE | re.DOTALL,
)


@dataclass(slots=True, frozen=True)
class EntryTokens:
    """Raw lexical pieces of an entry message before numeric resolution."""

    category: str
    number: str
    suffix: str | None = None
    remainder: str | None = None
    note: str | None = None


def tokenize_entry(text: str) -> EntryTokens | None:
    """Split ``text`` at the first whitespace run followed by a valid amount clause.

    The category is the shortest non-empty prefix for which the remainder of the
    message forms a complete amount clause. Returns ``None`` when no split works.
    """

    for gap in _WHITESPACE_RUN.finditer(text):
        if gap.start() == 0:
            continue
        clause = _AMOUNT_CLAUSE.fullmatch(text, gap.end())
        if clause is None:
            continue

        category = text[: gap.start()].strip()
        if not category:
            continue
        suffix = (
            clause.group("compound") or clause.group("scale") or clause.group("currency")
        )
        return EntryTokens(
            category=category,
            number=clause.group("number"),
            suffix=suffix.lower() if suffix else None,
            remainder=clause.group("remainder"),
            note=clause.group("note"),
        )
    return None


__all__ = ["EntryTokens", "tokenize_entry"]
