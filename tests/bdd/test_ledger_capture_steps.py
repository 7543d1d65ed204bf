from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from ledger_bot.graph import LedgerState, build_ledger_graph
from ledger_bot.integrations.telegram import default_success_reply, format_entry_summary
from ledger_bot.ledger import compose_rows
from ledger_bot.parsing import ParsedEntry

scenarios("features/ledger_capture.feature")


class InMemoryLedger:
    """Sheet stand-in that composes rows exactly like the Google Sheets ledger."""

    def __init__(self) -> None:
        self.rows: list[list[Any]] = []
        self.today = "01/01/2026"

    def append_entry(self, entry: ParsedEntry) -> list[list[Any]]:
        appended = compose_rows(self.rows, entry, self.today)
        self.rows.extend(appended)
        return appended


class SilentOracle:
    enabled = False

    def parse_entry(self, message: str) -> ParsedEntry | None:  # pragma: no cover
        return None


@dataclass
class LedgerScenarioState:
    ledger: InMemoryLedger = field(default_factory=InMemoryLedger)
    replies: list[str] = field(default_factory=list)
    entries: list[ParsedEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.graph = build_ledger_graph(ledger=self.ledger, oracle=SilentOracle())

    def send(self, message: str) -> None:
        result = LedgerState(
            **self.graph.invoke(LedgerState(thread_id="bdd", pending_message=message))
        )
        if result.entry is not None:
            self.entries.append(result.entry)
            self.replies.append(default_success_reply(result.entry, used_ai=result.used_ai))

    def row(self, index: int) -> list[Any]:
        assert 1 <= index <= len(self.ledger.rows), f"Sheet has no row {index}."
        return self.ledger.rows[index - 1]


@pytest.fixture
def ledger_state() -> LedgerScenarioState:
    return LedgerScenarioState()


@given("an empty ledger sheet")
def given_empty_sheet(ledger_state: LedgerScenarioState) -> None:
    assert ledger_state.ledger.rows == []


@given(parsers.parse('the date is "{today}"'))
def given_date(ledger_state: LedgerScenarioState, today: str) -> None:
    ledger_state.ledger.today = today


@when(parsers.parse('the date changes to "{today}"'))
def when_date_changes(ledger_state: LedgerScenarioState, today: str) -> None:
    ledger_state.ledger.today = today


@when(parsers.parse('the chat sends "{message}"'))
def when_chat_sends(ledger_state: LedgerScenarioState, message: str) -> None:
    ledger_state.send(message)


@then(parsers.parse("the sheet has {count:d} rows"))
def then_row_count(ledger_state: LedgerScenarioState, count: int) -> None:
    assert len(ledger_state.ledger.rows) == count


@then(parsers.parse('row {index:d} is the date header "{today}"'))
def then_date_header(ledger_state: LedgerScenarioState, index: int, today: str) -> None:
    assert ledger_state.row(index) == [today, "", ""]


@then(parsers.parse("row {index:d} is blank"))
def then_blank_row(ledger_state: LedgerScenarioState, index: int) -> None:
    assert ledger_state.row(index) == ["", "", ""]


@then(parsers.parse('row {index:d} records "{category}" for "{amount}"'))
def then_data_row(
    ledger_state: LedgerScenarioState, index: int, category: str, amount: str
) -> None:
    row = ledger_state.row(index)
    assert row[:2] == [category, amount]


@then(parsers.parse('row {index:d} has note "{note}"'))
def then_row_note(ledger_state: LedgerScenarioState, index: int, note: str) -> None:
    assert ledger_state.row(index)[2] == note


@then(parsers.parse('the bot confirms the {label} "{summary}"'))
def then_bot_confirms(ledger_state: LedgerScenarioState, label: str, summary: str) -> None:
    entry = ledger_state.entries[-1]
    assert format_entry_summary(entry) == summary
    assert ledger_state.replies[-1] == default_success_reply(entry, used_ai=False)
    assert ledger_state.replies[-1].startswith(f"✅ Đã nhập {label} ")


@then("the bot stays silent")
def then_bot_silent(ledger_state: LedgerScenarioState) -> None:
    assert ledger_state.replies == []
