"""Typed configuration loader for the ledger bot."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ledger_bot.ledger.layout import SheetLayout

DEFAULT_AI_MODEL = "z-ai/glm-4.5-air:free"
DEFAULT_AI_BASE_URL = "https://openrouter.ai/api/v1"


class Settings(BaseSettings):
    """Environment-backed settings using Pydantic's BaseSettings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    telegram_token: SecretStr = Field(alias="TELEGRAM_TOKEN")
    telegram_webhook_secret: str | None = Field(
        default=None, alias="TELEGRAM_WEBHOOK_SECRET"
    )
    telegram_allowed_chats: Annotated[list[int], NoDecode] = Field(
        default_factory=list, alias="TELEGRAM_ALLOWED_CHATS"
    )

    google_service_account_email: str = Field(alias="GOOGLE_SERVICE_ACCOUNT_EMAIL")
    google_private_key: SecretStr = Field(alias="GOOGLE_PRIVATE_KEY")
    google_sheet_id: str = Field(alias="GOOGLE_SHEET_ID")
    ledger_sheet_name: str = Field(default="1", alias="LEDGER_SHEET_NAME")
    ledger_layout: SheetLayout = Field(
        default=SheetLayout.SINGLE_AMOUNT, alias="LEDGER_LAYOUT"
    )
    ledger_timezone: str = Field(default="Asia/Ho_Chi_Minh", alias="LEDGER_TIMEZONE")

    openrouter_api_key: SecretStr | None = Field(default=None, alias="OPENROUTER_API_KEY")
    openrouter_model: str = Field(default=DEFAULT_AI_MODEL, alias="OPENROUTER_MODEL")
    openrouter_base_url: str = Field(
        default=DEFAULT_AI_BASE_URL, alias="OPENROUTER_BASE_URL"
    )
    openrouter_referer: str | None = Field(default=None, alias="OPENROUTER_REFERER")
    openrouter_app_name: str = Field(default="ledger-bot", alias="OPENROUTER_APP_NAME")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("telegram_allowed_chats", mode="before")
    @classmethod
    def _parse_allowed_chats(cls, value: object) -> list[int]:
        if value in (None, ""):
            return []
        if isinstance(value, str):
            chunks = [chunk.strip() for chunk in value.split(",")]
            return [int(chunk) for chunk in chunks if chunk]
        if isinstance(value, Iterable):
            return [int(item) for item in value]
        raise TypeError("TELEGRAM_ALLOWED_CHATS must be a CSV string or list")

    @field_validator("google_private_key", mode="before")
    @classmethod
    def _expand_private_key_newlines(cls, value: object) -> object:
        # Keys pasted into .env files usually carry literal "\n" sequences.
        if isinstance(value, str):
            return value.replace("\\n", "\n")
        return value

    @field_validator("ledger_layout", mode="before")
    @classmethod
    def _normalize_layout(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("ledger_timezone", mode="after")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown LEDGER_TIMEZONE: {value}") from exc
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str | None) -> str:
        return (value or "INFO").upper()

    @field_validator("openrouter_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def ai_fallback_enabled(self) -> bool:
        """True when an OpenRouter key is configured."""
        if self.openrouter_api_key is None:
            return False
        return bool(self.openrouter_api_key.get_secret_value().strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
