"""LangGraph pipeline that turns a chat message into appended ledger rows."""

from .builder import FALLBACK_NODE, PARSE_NODE, RECORD_NODE, build_ledger_graph
from .nodes import EntryLedger, EntryOracle, apply_ai_fallback, parse_message, record_entry
from .state import LedgerState

__all__ = [
    "EntryLedger",
    "EntryOracle",
    "FALLBACK_NODE",
    "LedgerState",
    "PARSE_NODE",
    "RECORD_NODE",
    "apply_ai_fallback",
    "build_ledger_graph",
    "parse_message",
    "record_entry",
]
