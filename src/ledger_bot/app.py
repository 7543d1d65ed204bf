"""CLI entrypoint for the ledger bot."""

from __future__ import annotations

import argparse
from typing import Sequence
from urllib.parse import urlparse

from ledger_bot import configure_log_level, get_logger
from ledger_bot.config import get_settings
from ledger_bot.graph import build_ledger_graph
from ledger_bot.integrations import (
    AiEntryAssistant,
    LedgerSheet,
    create_application,
    register_ledger_handler,
    set_reply_assistant,
    set_state_graph,
)

LOGGER = get_logger("app")


class _RunMode:
    POLLING = "polling"
    WEBHOOK = "webhook"


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the ledger bot in polling or webhook mode."
    )
    parser.add_argument(
        "--mode",
        choices=(_RunMode.POLLING, _RunMode.WEBHOOK),
        default=_RunMode.POLLING,
        help="Bot execution mode (default: polling).",
    )
    parser.add_argument(
        "--listen",
        default="0.0.0.0",
        help="Interface the webhook server binds to.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8443,
        help="TCP port for the webhook listener (default: 8443).",
    )
    parser.add_argument(
        "--webhook-url",
        help="Public HTTPS URL Telegram should call in webhook mode.",
    )
    parser.add_argument(
        "--drop-pending-updates",
        action="store_true",
        help="Discard updates queued while the bot was offline.",
    )
    args = parser.parse_args(argv)
    if args.mode == _RunMode.WEBHOOK and not args.webhook_url:
        parser.error("--webhook-url is required when --mode webhook")
    return args


def _webhook_path(webhook_url: str) -> str:
    return (urlparse(webhook_url).path or "").strip("/")


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = get_settings()
    configure_log_level(settings.log_level)

    ledger = LedgerSheet.from_settings(settings)
    assistant = AiEntryAssistant.from_settings(settings)

    application = create_application(settings=settings)
    graph = build_ledger_graph(settings=settings, ledger=ledger, oracle=assistant)
    set_state_graph(application, graph)
    set_reply_assistant(application, assistant)
    register_ledger_handler(
        application, allowed_chat_ids=settings.telegram_allowed_chats
    )

    drop_pending = True if args.drop_pending_updates else None
    try:
        if args.mode == _RunMode.POLLING:
            LOGGER.info("Starting Telegram polling (dropping pending=%s)", drop_pending)
            application.run_polling(drop_pending_updates=drop_pending)
            return
        url_path = _webhook_path(args.webhook_url)
        LOGGER.info(
            "Starting Telegram webhook listener on %s:%d/%s", args.listen, args.port, url_path
        )
        application.run_webhook(
            listen=args.listen,
            port=args.port,
            url_path=url_path,
            webhook_url=args.webhook_url,
            drop_pending_updates=drop_pending,
            secret_token=settings.telegram_webhook_secret,
        )
    finally:
        ledger.close()
        assistant.close()


if __name__ == "__main__":
    main()
