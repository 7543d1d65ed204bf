"""LLM fallback for messages the deterministic parser cannot read."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
import re
from typing import TYPE_CHECKING, Any, Literal, Sequence, TypedDict

import httpx
from langsmith import traceable
from pydantic import BaseModel, ConfigDict, SecretStr, StrictFloat, StrictInt, ValidationError

from ledger_bot import get_logger
from ledger_bot.parsing.entry import ParsedEntry, capitalize_first, detect_entry_kind

if TYPE_CHECKING:
    from ledger_bot.config import Settings

LOGGER = get_logger("integrations.ai_fallback")

_JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)

PARSE_SYSTEM_PROMPT = (
    "You read short Vietnamese chat messages about spending or income and reply with JSON. "
    'Reply ONLY with minified JSON such as {"category":"Ăn tối","amount":150000,"note":"pizza"}. '
    "The amount is an integer number of Vietnamese dong; expand shorthand such as 50k or 1tr2. "
    'If the message is not about money, reply {"error":"unknown"}.'
)
SUCCESS_SYSTEM_PROMPT = (
    "Bạn là bot ghi chép thu chi vui tính trong nhóm chat. "
    "Trả lời dưới 30 từ, có emoji, xác nhận khoản tiền đã được lưu vào Google Sheets. "
    "Nếu được báo là AI đã giúp đọc tin nhắn thì nhắc điều đó."
)


class ChatMessage(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


class AiEntryPayload(BaseModel):
    """Shape of the JSON object the model is asked to return."""

    model_config = ConfigDict(extra="ignore")

    category: str | None = None
    amount: StrictInt | StrictFloat | None = None
    note: str | None = None
    error: str | None = None


class ChatCompletionClient:
    """Minimal client for OpenAI-compatible ``/chat/completions`` endpoints."""

    def __init__(
        self,
        *,
        api_key: str | SecretStr | None,
        model: str,
        base_url: str = "https://openrouter.ai/api/v1",
        referer: str | None = None,
        app_name: str = "ledger-bot",
        timeout: float = 20.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = _secret_value(api_key)
        self.model = model
        self._base_url = base_url.rstrip("/")
        self._referer = referer
        self._app_name = app_name

        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: "Settings", **client_kwargs: Any
    ) -> "ChatCompletionClient":
        return cls(
            api_key=settings.openrouter_api_key,
            model=settings.openrouter_model,
            base_url=settings.openrouter_base_url,
            referer=settings.openrouter_referer,
            app_name=settings.openrouter_app_name,
            **client_kwargs,
        )

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def __enter__(self) -> "ChatCompletionClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    @traceable(run_type="llm", name="ai_fallback.chat")
    def chat(
        self, messages: Sequence[ChatMessage], *, temperature: float = 0.2
    ) -> str | None:
        """Return the first completion's text, or ``None`` when unavailable."""

        if not self.enabled:
            return None

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "X-Title": self._app_name,
        }
        if self._referer:
            headers["HTTP-Referer"] = self._referer
        body = {
            "model": self.model,
            "messages": [dict(message) for message in messages],
            "temperature": temperature,
        }

        try:
            response = self._client.post(
                f"{self._base_url}/chat/completions", headers=headers, json=body
            )
        except httpx.HTTPError as exc:
            LOGGER.warning("Chat completion request failed: %s", exc)
            return None
        if response.is_error:
            LOGGER.error(
                "Chat completion API error (%s): %s", response.status_code, response.text
            )
            return None

        try:
            payload = response.json()
        except ValueError:
            LOGGER.warning("Chat completion response was not valid JSON.")
            return None
        return _first_choice_content(payload)


class AiEntryAssistant:
    """Asks the model to read unparsed messages and to word success replies."""

    def __init__(self, client: ChatCompletionClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: "Settings", **client_kwargs: Any) -> "AiEntryAssistant":
        return cls(ChatCompletionClient.from_settings(settings, **client_kwargs))

    @property
    def enabled(self) -> bool:
        return self._client.enabled

    def close(self) -> None:
        self._client.close()

    def parse_entry(self, message: str) -> ParsedEntry | None:
        """Return the model's reading of ``message`` or ``None`` if it is unsure."""

        if not self.enabled:
            return None
        completion = self._client.chat(
            [
                {"role": "system", "content": PARSE_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": f'Message:\n"""\n{message}\n"""\nExtract the entry.',
                },
            ]
        )
        if not completion:
            return None
        return entry_from_completion(completion, message=message)

    def playful_success(self, summary: str, *, used_ai: bool) -> str | None:
        if not self.enabled:
            return None
        return self._client.chat(
            [
                {"role": "system", "content": SUCCESS_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": (
                        f"Khoản vừa ghi: {summary}. "
                        f"AI đã giúp đọc tin nhắn: {'có' if used_ai else 'không'}."
                    ),
                },
            ],
            temperature=0.6,
        )


def entry_from_completion(completion: str, *, message: str) -> ParsedEntry | None:
    """Validate the JSON object embedded in ``completion`` and build an entry."""

    block = _JSON_BLOCK.search(completion)
    if block is None:
        return None
    try:
        payload = AiEntryPayload.model_validate_json(block.group(0))
    except ValidationError:
        LOGGER.warning("Discarding malformed AI entry payload: %s", block.group(0)[:200])
        return None

    if payload.error or payload.amount is None:
        return None
    category = (payload.category or "").strip()
    if not category:
        return None
    try:
        amount = Decimal(str(payload.amount))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0:
        return None

    kind, _ = detect_entry_kind(message)
    return ParsedEntry(
        category=capitalize_first(category),
        amount=amount,
        kind=kind,
        note=(payload.note or "").strip() or None,
    )


def _first_choice_content(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        return None
    return content.strip() or None


def _secret_value(value: str | SecretStr | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    return value.get_secret_value().strip() or None


__all__ = [
    "AiEntryAssistant",
    "AiEntryPayload",
    "ChatCompletionClient",
    "entry_from_completion",
]
