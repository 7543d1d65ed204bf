"""Numeric resolution for informal Vietnamese amount notation (``157k``, ``1.2tr``, ``2k5``)."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
import re

SUFFIX_MULTIPLIERS: dict[str, int] = {
    "k": 1_000,
    "tr": 1_000_000,
    "m": 1_000_000,
    "đ": 1,
    "d": 1,
}
SCALING_SUFFIXES = frozenset({"k", "tr", "m"})

_THOUSANDS_GROUPED = re.compile(r"[0-9]{1,3}(?:[.,][0-9]{3})+")
_SEPARATORS = re.compile(r"[.,]")


def resolve_amount(
    number: str,
    suffix: str | None = None,
    remainder: str | None = None,
) -> Decimal | None:
    """Turn the numeric tokens of a message into an amount in dong.

    Resolution order:

    * compound form (``144tr300``): the remainder digits become the fractional
      part of the main number;
    * with a scaling suffix, ``2.839.000k``-style grouping drops the separators
      while any other separator is read as a decimal point (``1.2tr``);
    * without a scaling suffix every separator is dropped, bare numbers are
      never decimals.

    ``đ``/``d`` only decorate the number and behave exactly like no suffix.
    Returns ``None`` for anything that does not resolve to a finite number.
    """

    normalized_suffix = (suffix or "").lower()
    if normalized_suffix and normalized_suffix not in SUFFIX_MULTIPLIERS:
        return None
    scaling = normalized_suffix in SCALING_SUFFIXES

    if scaling and remainder:
        literal = f"{_strip_separators(number)}.{remainder}"
    elif scaling and _SEPARATORS.search(number):
        if _THOUSANDS_GROUPED.fullmatch(number):
            literal = _strip_separators(number)
        else:
            literal = number.replace(",", ".")
    else:
        if remainder:
            return None
        literal = _strip_separators(number)

    try:
        value = Decimal(literal)
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None

    factor = SUFFIX_MULTIPLIERS.get(normalized_suffix, 1)
    return _normalize(value * factor)


def _strip_separators(number: str) -> str:
    return _SEPARATORS.sub("", number)


def _normalize(value: Decimal) -> Decimal:
    integral = value.to_integral_value()
    return integral if integral == value else value.normalize()


__all__ = ["SCALING_SUFFIXES", "SUFFIX_MULTIPLIERS", "resolve_amount"]
