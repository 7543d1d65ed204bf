"""LangGraph wiring for the message -> ledger pipeline."""

from __future__ import annotations

from typing import Any, Callable, Literal

from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph

from ledger_bot import get_logger
from ledger_bot.config import Settings, get_settings
from ledger_bot.graph.nodes import (
    EntryLedger,
    EntryOracle,
    apply_ai_fallback,
    parse_message,
    record_entry,
)
from ledger_bot.graph.state import LedgerState

LOGGER = get_logger("graph.builder")
PARSE_NODE = "parse_message"
FALLBACK_NODE = "ai_fallback"
RECORD_NODE = "record_entry"


def build_ledger_graph(
    *,
    settings: Settings | None = None,
    ledger: EntryLedger | None = None,
    oracle: EntryOracle | None = None,
) -> CompiledStateGraph[LedgerState, Any, Any, Any]:
    """Compile the parse/fallback/record graph.

    Collaborators default to the Google Sheets ledger and the OpenRouter
    fallback configured in ``settings``. No checkpointer is attached: each
    message is processed once and nothing is persisted between runs.
    """

    if ledger is None or oracle is None:
        resolved_settings = settings or get_settings()
        if ledger is None:
            from ledger_bot.integrations.sheets import LedgerSheet

            ledger = LedgerSheet.from_settings(resolved_settings)
        if oracle is None:
            from ledger_bot.integrations.ai_fallback import AiEntryAssistant

            oracle = AiEntryAssistant.from_settings(resolved_settings)

    builder = StateGraph(LedgerState)
    builder.add_node(PARSE_NODE, parse_message)
    builder.add_node(FALLBACK_NODE, _create_fallback_node(oracle))
    builder.add_node(RECORD_NODE, _create_record_node(ledger))

    builder.add_edge(START, PARSE_NODE)
    builder.add_conditional_edges(
        PARSE_NODE,
        _create_parse_router(oracle),
        path_map={"record": RECORD_NODE, "fallback": FALLBACK_NODE, "skip": END},
    )
    builder.add_conditional_edges(
        FALLBACK_NODE,
        _route_after_fallback,
        path_map={"record": RECORD_NODE, "skip": END},
    )
    builder.add_edge(RECORD_NODE, END)

    graph = builder.compile()
    LOGGER.info(
        "Ledger graph compiled (ai_fallback=%s)", "on" if oracle.enabled else "off"
    )
    return graph


def _create_fallback_node(
    oracle: EntryOracle,
) -> Callable[[LedgerState], LedgerState]:
    def _node(state: LedgerState) -> LedgerState:
        return apply_ai_fallback(state, oracle=oracle)

    return _node


def _create_record_node(
    ledger: EntryLedger,
) -> Callable[[LedgerState], LedgerState]:
    def _node(state: LedgerState) -> LedgerState:
        return record_entry(state, ledger=ledger)

    return _node


def _create_parse_router(
    oracle: EntryOracle,
) -> Callable[[LedgerState], Literal["record", "fallback", "skip"]]:
    def _route(state: LedgerState) -> Literal["record", "fallback", "skip"]:
        if state.entry is not None:
            return "record"
        if oracle.enabled:
            return "fallback"
        return "skip"

    return _route


def _route_after_fallback(state: LedgerState) -> Literal["record", "skip"]:
    return "record" if state.entry is not None else "skip"


__all__ = ["FALLBACK_NODE", "PARSE_NODE", "RECORD_NODE", "build_ledger_graph"]
