"""Telegram Application factory and the ledger message handler."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Protocol

from langgraph.graph.state import CompiledStateGraph
from langsmith import traceable
from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import (
    Application,
    ApplicationBuilder,
    ContextTypes,
    MessageHandler,
    filters,
)
from telegram.helpers import escape_markdown

from ledger_bot import get_logger
from ledger_bot.config import Settings, get_settings
from ledger_bot.graph.state import LedgerState
from ledger_bot.ledger.layout import format_vnd
from ledger_bot.parsing.entry import ParsedEntry

LOGGER = get_logger("integrations.telegram")
GRAPH_KEY = "ledger_bot.graph"
REPLY_ASSISTANT_KEY = "ledger_bot.reply_assistant"
SETTINGS_KEY = "ledger_bot.settings"

FAILURE_PREFIX = "❌ Đã xảy ra lỗi"
AI_NOTICE = "🤖 AI đã giúp đọc tin nhắn này."


class ReplyAssistant(Protocol):
    """Optional helper that words the success reply."""

    @property
    def enabled(self) -> bool: ...

    def playful_success(self, summary: str, *, used_ai: bool) -> str | None: ...


def create_application(*, settings: Settings | None = None) -> Application:
    """Return a python-telegram-bot Application with Settings attached."""

    resolved_settings = settings or get_settings()
    token = resolved_settings.telegram_token.get_secret_value()
    application = ApplicationBuilder().token(token).build()
    application.bot_data[SETTINGS_KEY] = resolved_settings
    LOGGER.info("Telegram application ready.")
    return application


def register_ledger_handler(
    application: Application,
    *,
    allowed_chat_ids: Iterable[int] | None = None,
    group: int = 0,
) -> MessageHandler:
    """Route new plain text messages (optionally from listed chats only) to the ledger.

    Edits are not routed: every handled message appends a row, so an edited
    message would be booked twice.
    """

    message_filter = filters.UpdateType.MESSAGE & filters.TEXT & ~filters.COMMAND
    chat_ids = [int(chat_id) for chat_id in allowed_chat_ids or ()]
    if chat_ids:
        message_filter = message_filter & filters.Chat(chat_id=chat_ids)
    handler = MessageHandler(message_filter, handle_ledger_message)
    application.add_handler(handler, group=group)
    LOGGER.debug("Registered ledger handler (allowed chats=%s)", chat_ids or "any")
    return handler


def _resolve_application(source: Any) -> Any | None:
    if isinstance(source, Application):
        return source
    application = getattr(source, "application", None)
    if application is not None and hasattr(application, "bot_data"):
        return application
    if hasattr(source, "bot_data"):
        return source
    return None


def set_state_graph(
    application: Any, graph: CompiledStateGraph[LedgerState, Any, Any, Any]
) -> None:
    """Store the compiled graph inside the Application for handler reuse."""

    application.bot_data[GRAPH_KEY] = graph


def get_state_graph(source: Any) -> CompiledStateGraph[LedgerState, Any, Any, Any] | None:
    application = _resolve_application(source)
    if application is None:
        return None
    return application.bot_data.get(GRAPH_KEY)


def set_reply_assistant(application: Any, assistant: ReplyAssistant | None) -> None:
    application.bot_data[REPLY_ASSISTANT_KEY] = assistant


def get_reply_assistant(source: Any) -> ReplyAssistant | None:
    application = _resolve_application(source)
    if application is None:
        return None
    return application.bot_data.get(REPLY_ASSISTANT_KEY)


def _escape(text: str) -> str:
    return escape_markdown(text, version=2)


def format_entry_summary(entry: ParsedEntry, *, markdown: bool = False) -> str:
    """``Ăn tối - 157.000 ₫ (cùng bạn)``, bolded for Telegram MarkdownV2 when asked."""

    category = entry.category
    amount = format_vnd(entry.amount)
    note = f" ({entry.note})" if entry.note else ""
    if not markdown:
        return f"{category} - {amount}{note}"
    return f"*{_escape(category)}*{_escape(' - ')}*{_escape(amount)}*{_escape(note)}"


def default_success_reply(entry: ParsedEntry, *, used_ai: bool) -> str:
    """MarkdownV2 confirmation; every literal outside the bold spans is escaped."""

    label = "khoản thu" if entry.is_income else "khoản chi"
    text = _escape(f"✅ Đã nhập {label} vào Google Sheet: ")
    text += format_entry_summary(entry, markdown=True)
    if used_ai:
        text += "\n" + _escape(AI_NOTICE)
    return text


def _make_thread_id(chat_id: int | None) -> str | None:
    return f"telegram:{int(chat_id)}" if chat_id is not None else None


def _extract_message_data(update: Update) -> tuple[str | None, int | None, int | None]:
    message = getattr(update, "message", None)
    text = getattr(message, "text", None) if message is not None else None
    text = text.strip() if isinstance(text, str) and text.strip() else None
    chat = getattr(update, "effective_chat", None) or getattr(message, "chat", None)
    chat_id = getattr(chat, "id", None)
    message_id = getattr(message, "message_id", None)
    return text, chat_id, message_id


async def _reply_text(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    text: str,
    chat_id: int | None,
    *,
    markdown: bool = False,
) -> None:
    if not text:
        return
    parse_mode = ParseMode.MARKDOWN_V2 if markdown else None
    target = getattr(update, "effective_message", None)
    if target is not None and hasattr(target, "reply_text"):
        await target.reply_text(text, parse_mode=parse_mode)
        return
    if chat_id is not None:
        await context.bot.send_message(chat_id=chat_id, text=text, parse_mode=parse_mode)


@traceable(run_type="chain", name="telegram.ledger_message")
async def _process_ledger_update(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> LedgerState | None:
    graph = get_state_graph(context)
    if graph is None:
        raise RuntimeError("Ledger graph is not configured for Telegram handlers.")

    text, chat_id, message_id = _extract_message_data(update)
    thread_id = _make_thread_id(chat_id)
    if not text or thread_id is None:
        return None

    state = LedgerState(thread_id=thread_id, pending_message=text)
    try:
        raw_result = await graph.ainvoke(state)
    except Exception as exc:
        state.record_error(str(exc))
        LOGGER.exception(
            "Failed to record ledger message chat_id=%s message_id=%s", chat_id, message_id
        )
        await _reply_text(update, context, f"{FAILURE_PREFIX}: {exc}", chat_id)
        return state

    if not isinstance(raw_result, dict):
        LOGGER.warning("Ledger graph returned unexpected response: %s", raw_result)
        return None
    result = LedgerState(**raw_result)
    if not result.recorded or result.entry is None:
        LOGGER.debug("Ignoring non-ledger message chat_id=%s", chat_id)
        return result

    reply: str | None = None
    assistant = get_reply_assistant(context)
    if assistant is not None and assistant.enabled:
        summary = format_entry_summary(result.entry)
        reply = await asyncio.to_thread(
            assistant.playful_success, summary, used_ai=result.used_ai
        )
    if reply:
        await _reply_text(update, context, reply, chat_id)
    else:
        await _reply_text(
            update,
            context,
            default_success_reply(result.entry, used_ai=result.used_ai),
            chat_id,
            markdown=True,
        )
    return result


async def handle_ledger_message(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Record free-form expense/income messages in the ledger sheet."""

    await _process_ledger_update(update, context)


__all__ = [
    "create_application",
    "default_success_reply",
    "format_entry_summary",
    "get_reply_assistant",
    "get_state_graph",
    "handle_ledger_message",
    "register_ledger_handler",
    "set_reply_assistant",
    "set_state_graph",
]
