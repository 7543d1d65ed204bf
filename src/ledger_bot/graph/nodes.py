"""Node helpers for the parse -> fallback -> record message pipeline."""

from __future__ import annotations

from typing import Protocol

from ledger_bot import get_logger
from ledger_bot.graph.state import LedgerState
from ledger_bot.ledger.rows import TableRow
from ledger_bot.parsing import ParsedEntry, parse_entry_text

LOGGER = get_logger("graph.nodes")


class EntryLedger(Protocol):
    """Anything able to persist an entry (``LedgerSheet`` in production)."""

    def append_entry(self, entry: ParsedEntry) -> list[TableRow]: ...


class EntryOracle(Protocol):
    """Fallback reader consulted only when the deterministic parser gives up."""

    @property
    def enabled(self) -> bool: ...

    def parse_entry(self, message: str) -> ParsedEntry | None: ...


def parse_message(state: LedgerState) -> LedgerState:
    """Run the deterministic parser on the pending message."""

    message = (state.pending_message or "").strip()
    state.entry = parse_entry_text(message) if message else None
    state.used_ai = False
    if state.entry is None:
        LOGGER.debug("Message did not match the entry pattern (thread=%s)", state.thread_id)
    return state


def apply_ai_fallback(state: LedgerState, *, oracle: EntryOracle) -> LedgerState:
    """Ask the fallback oracle to read a message the parser rejected."""

    message = (state.pending_message or "").strip()
    if not message or not oracle.enabled:
        return state
    entry = oracle.parse_entry(message)
    if entry is None:
        LOGGER.debug("AI fallback could not read message (thread=%s)", state.thread_id)
        return state
    state.entry = entry
    state.used_ai = True
    LOGGER.info("AI fallback parsed '%s' (thread=%s)", entry.category, state.thread_id)
    return state


def record_entry(state: LedgerState, *, ledger: EntryLedger) -> LedgerState:
    """Append the parsed entry; ledger failures propagate to the caller."""

    if state.entry is None:
        raise ValueError("record_entry requires a parsed entry.")
    state.appended_rows = ledger.append_entry(state.entry)
    state.pending_message = None
    return state


__all__ = [
    "EntryLedger",
    "EntryOracle",
    "apply_ai_fallback",
    "parse_message",
    "record_entry",
]
