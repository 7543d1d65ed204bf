"""Integration clients for Google Sheets, the AI fallback, and Telegram."""

from .ai_fallback import (
    AiEntryAssistant,
    AiEntryPayload,
    ChatCompletionClient,
    entry_from_completion,
)
from .sheets import (
    GoogleSheetsClient,
    LedgerSheet,
    SheetsClientError,
    build_service_account_credentials,
)
from .telegram import (
    create_application,
    default_success_reply,
    format_entry_summary,
    handle_ledger_message,
    register_ledger_handler,
    set_reply_assistant,
    set_state_graph,
)

__all__ = [
    "AiEntryAssistant",
    "AiEntryPayload",
    "ChatCompletionClient",
    "GoogleSheetsClient",
    "LedgerSheet",
    "SheetsClientError",
    "build_service_account_credentials",
    "create_application",
    "default_success_reply",
    "entry_from_completion",
    "format_entry_summary",
    "handle_ledger_message",
    "register_ledger_handler",
    "set_reply_assistant",
    "set_state_graph",
]
