"""Google Sheets values API client and the day-grouped ledger sheet built on it."""

from __future__ import annotations

from datetime import datetime
import threading
from typing import TYPE_CHECKING, Any, Callable, Mapping, Protocol, Sequence
from urllib.parse import quote
from zoneinfo import ZoneInfo

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as AuthRequest
from google.oauth2 import service_account
import httpx
from langsmith import traceable
from pydantic import SecretStr

from ledger_bot import get_logger
from ledger_bot.ledger.layout import SheetLayout, format_ledger_date, sheet_range
from ledger_bot.ledger.rows import TableRow, compose_rows
from ledger_bot.parsing.entry import ParsedEntry

if TYPE_CHECKING:
    from ledger_bot.config import Settings


LOGGER = get_logger("integrations.sheets")

SCOPES: Sequence[str] = ("https://www.googleapis.com/auth/spreadsheets",)
SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
TOKEN_URI = "https://oauth2.googleapis.com/token"


class SheetsClientError(RuntimeError):
    """Raised when Google Sheets (or its token endpoint) fails or misbehaves."""


class TokenCredentials(Protocol):
    """Subset of ``google.auth.credentials.Credentials`` used by the client."""

    token: str | None

    @property
    def valid(self) -> bool: ...

    def refresh(self, request: Any) -> None: ...


class GoogleSheetsClient:
    """Synchronous client for reading and appending cell values."""

    def __init__(
        self,
        *,
        spreadsheet_id: str,
        credentials: TokenCredentials,
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
        auth_request_factory: Callable[[], Any] = AuthRequest,
        user_agent: str = "ledger-bot/0.1",
    ) -> None:
        if not spreadsheet_id:
            raise ValueError("spreadsheet_id is required.")
        self.spreadsheet_id = spreadsheet_id
        self._base_url = f"{SHEETS_API_BASE}/{quote(spreadsheet_id, safe='')}"
        self._credentials = credentials
        self._auth_request_factory = auth_request_factory

        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    @classmethod
    def from_settings(
        cls, settings: "Settings", **client_kwargs: Any
    ) -> "GoogleSheetsClient":
        """Instantiate a client with service-account credentials from Settings."""

        credentials = build_service_account_credentials(
            email=settings.google_service_account_email,
            private_key=settings.google_private_key,
        )
        return cls(
            spreadsheet_id=settings.google_sheet_id,
            credentials=credentials,
            **client_kwargs,
        )

    def __enter__(self) -> "GoogleSheetsClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if we created it."""
        if self._owns_client:
            self._client.close()

    @traceable(run_type="tool", name="sheets.read_values")
    def read_values(self, a1_range: str) -> list[list[str]]:
        """Return the rows stored in ``a1_range``; trailing empty cells are omitted by Google."""

        response = self._request("GET", self._values_url(a1_range))
        payload = self._safe_json(response)
        values = payload.get("values", [])
        if not isinstance(values, list):
            raise SheetsClientError("Unexpected Sheets response format for values.")

        rows: list[list[str]] = []
        for row in values:
            if not isinstance(row, list):
                raise SheetsClientError("Sheets returned a non-list row.")
            rows.append(["" if cell is None else str(cell) for cell in row])
        LOGGER.debug("Read %d row(s) from %s", len(rows), a1_range)
        return rows

    @traceable(run_type="tool", name="sheets.append_values")
    def append_values(
        self, a1_range: str, rows: Sequence[Sequence[Any]]
    ) -> dict[str, Any]:
        """Insert ``rows`` after the table found in ``a1_range`` without overwriting."""

        if not rows:
            return {}
        response = self._request(
            "POST",
            f"{self._values_url(a1_range)}:append",
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": [list(row) for row in rows]},
        )
        payload = self._safe_json(response)
        updates = payload.get("updates")
        updated_range = updates.get("updatedRange") if isinstance(updates, Mapping) else None
        LOGGER.info("Appended %d row(s) to %s", len(rows), updated_range or a1_range)
        return payload

    def _values_url(self, a1_range: str) -> str:
        return f"{self._base_url}/values/{quote(a1_range, safe='')}"

    def _access_token(self) -> str:
        if not self._credentials.valid:
            try:
                self._credentials.refresh(self._auth_request_factory())
            except GoogleAuthError as exc:
                raise SheetsClientError(f"Failed to obtain Google access token: {exc}") from exc
        token = self._credentials.token
        if not token:
            raise SheetsClientError("Failed to obtain Google access token.")
        return token

    def _request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._access_token()}",
        }
        try:
            response = self._client.request(method.upper(), url, headers=headers, **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as exc:
            raise SheetsClientError("Google Sheets request timed out.") from exc
        except httpx.HTTPStatusError as exc:
            detail = self._extract_error(exc.response)
            raise SheetsClientError(
                f"Google Sheets API error ({exc.response.status_code}): {detail}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SheetsClientError(f"Google Sheets request failed: {exc}") from exc

    @staticmethod
    def _safe_json(response: httpx.Response) -> dict[str, Any]:
        if response.status_code == 204 or not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise SheetsClientError("Google Sheets response was not valid JSON.") from exc
        if not isinstance(data, dict):
            raise SheetsClientError("Expected Google Sheets response to be an object.")
        return data

    @staticmethod
    def _extract_error(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return response.text or f"HTTP {response.status_code}"


def build_service_account_credentials(
    *, email: str, private_key: str | SecretStr
) -> service_account.Credentials:
    """Create scoped service-account credentials from an email and PEM key."""

    key = private_key if isinstance(private_key, str) else private_key.get_secret_value()
    if not email or not key:
        raise ValueError("Google service account email and private key are required.")
    info = {
        "type": "service_account",
        "client_email": email,
        "private_key": key,
        "token_uri": TOKEN_URI,
    }
    return service_account.Credentials.from_service_account_info(info, scopes=list(SCOPES))


class LedgerSheet:
    """One ledger worksheet: reads its recent rows and appends composed entries."""

    def __init__(
        self,
        client: GoogleSheetsClient,
        *,
        sheet_name: str = "1",
        layout: SheetLayout = SheetLayout.SINGLE_AMOUNT,
        timezone: str = "Asia/Ho_Chi_Minh",
    ) -> None:
        self._client = client
        self.sheet_name = sheet_name
        self.layout = SheetLayout(layout)
        self._timezone = ZoneInfo(timezone)
        # Header detection and append must not interleave for the same sheet.
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls, settings: "Settings", *, client: GoogleSheetsClient | None = None
    ) -> "LedgerSheet":
        return cls(
            client or GoogleSheetsClient.from_settings(settings),
            sheet_name=settings.ledger_sheet_name,
            layout=settings.ledger_layout,
            timezone=settings.ledger_timezone,
        )

    def close(self) -> None:
        self._client.close()

    def current_range(self, now: datetime | None = None) -> str:
        """A1 range holding this month's data, recomputed on every call."""
        moment = self._local_now(now)
        return sheet_range(self.sheet_name, self.layout, moment.month - 1)

    def append_entry(
        self, entry: ParsedEntry, *, now: datetime | None = None
    ) -> list[TableRow]:
        """Append ``entry`` (plus spacer/header rows for a new day) and return the rows written.

        Raises:
            SheetsClientError: reading or appending failed.
        """

        moment = self._local_now(now)
        a1_range = sheet_range(self.sheet_name, self.layout, moment.month - 1)
        today = format_ledger_date(moment.date())

        with self._lock:
            existing = self._client.read_values(a1_range)
            rows = compose_rows(existing, entry, today, layout=self.layout)
            self._client.append_values(a1_range, rows)

        LOGGER.info(
            "Recorded %s '%s' on %s (%d row(s), range=%s)",
            entry.kind,
            entry.category,
            today,
            len(rows),
            a1_range,
        )
        return rows

    def _local_now(self, now: datetime | None) -> datetime:
        if now is None:
            return datetime.now(self._timezone)
        if now.tzinfo is None:
            return now.replace(tzinfo=self._timezone)
        return now.astimezone(self._timezone)


__all__ = [
    "GoogleSheetsClient",
    "LedgerSheet",
    "SheetsClientError",
    "build_service_account_credentials",
]
