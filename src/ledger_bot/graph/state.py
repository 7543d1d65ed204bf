"""Pipeline state for one inbound ledger message."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from ledger_bot.parsing.entry import ParsedEntry


def _default_thread_id() -> str:
    return f"local-{uuid4().hex}"


@dataclass(slots=True)
class LedgerState:
    """Values flowing between graph nodes for a single message."""

    thread_id: str = field(default_factory=_default_thread_id)
    pending_message: str | None = None
    entry: ParsedEntry | None = None
    used_ai: bool = False
    appended_rows: list[list[Any]] = field(default_factory=list)
    error_log: list[str] = field(default_factory=list)

    @property
    def recorded(self) -> bool:
        return self.entry is not None and bool(self.appended_rows)

    def record_error(self, message: str) -> None:
        if message:
            self.error_log.append(message)


__all__ = ["LedgerState"]
