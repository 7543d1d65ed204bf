"""Chat-driven ledger bot that records Vietnamese expense messages in Google Sheets.

Importing the package configures the ``ledger_bot`` root logger once so every
submodule can call :func:`get_logger` without repeating handler setup.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_ROOT_LOGGER_NAME = "ledger_bot"


def _bootstrap_logging() -> None:
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    if logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logger.setLevel(level if level in logging.getLevelNamesMapping() else "INFO")
    logger.propagate = False


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """Return a logger namespaced under ``ledger_bot``."""
    if not component:
        return logging.getLogger(_ROOT_LOGGER_NAME)
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{component.strip('.')}")


def configure_log_level(level: str) -> None:
    """Apply a level coming from Settings after the environment bootstrap."""
    normalized = (level or "INFO").upper()
    if normalized not in logging.getLevelNamesMapping():
        normalized = "INFO"
    logging.getLogger(_ROOT_LOGGER_NAME).setLevel(normalized)


_bootstrap_logging()

__all__ = ["configure_log_level", "get_logger"]
