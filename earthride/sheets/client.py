"""Google Sheets client used as the datastore for blog, drive and admin tabs.

The spreadsheet has one tab per entity.  This module only knows about A1
ranges and rows of strings; mapping rows to records lives in
``earthride.records`` and the read-then-write orchestration in
``earthride.store``.

Every Sheets call is a blocking ``execute()`` on the discovery client, so it
is pushed to a worker thread with ``asyncio.to_thread`` to keep the event
loop free.  Failures are surfaced to callers as ``UpstreamError``; nothing
is retried.
"""

from __future__ import annotations

import asyncio
import json
import logging
from functools import lru_cache
from typing import Any

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from earthride.config import Settings, get_settings

logger = logging.getLogger(__name__)

SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/spreadsheets",)

# Fallback numeric sheet id when a tab title cannot be resolved from
# spreadsheet metadata: the first sheet of a spreadsheet always has id 0.
FIRST_SHEET_ID = 0


class UpstreamError(Exception):
    """The Sheets API (or its auth layer) failed to serve a request."""


class SheetsUnavailableError(UpstreamError):
    """The Sheets API service could not be constructed."""


def load_credentials(settings: Settings) -> Any:
    """Build service-account credentials from settings.

    ``GOOGLE_SERVICE_ACCOUNT_JSON`` (inline key) wins over
    ``GOOGLE_SERVICE_ACCOUNT_FILE``.  Returns ``None`` when neither is set so
    the discovery client falls back to Application Default Credentials.
    """
    raw = settings.GOOGLE_SERVICE_ACCOUNT_JSON.get_secret_value()
    if raw:
        info = json.loads(raw)
        return service_account.Credentials.from_service_account_info(info, scopes=list(SCOPES))
    if settings.GOOGLE_SERVICE_ACCOUNT_FILE:
        return service_account.Credentials.from_service_account_file(
            settings.GOOGLE_SERVICE_ACCOUNT_FILE, scopes=list(SCOPES)
        )
    return None


class SheetsClient:
    """Read/write/append/delete primitives against one spreadsheet.

    The Sheets v4 service is created lazily on first use and the outcome is
    cached: a client that failed to build stays unavailable and every call
    raises ``SheetsUnavailableError``.

    Args:
        spreadsheet_id: Google Sheets spreadsheet ID.
        credentials: Optional Google API credentials object.  When ``None``,
            the client uses Application Default Credentials (ADC).
    """

    def __init__(self, spreadsheet_id: str, credentials: Any = None) -> None:
        self.spreadsheet_id = spreadsheet_id
        self._credentials = credentials
        self._service: Any = None
        self._available: bool | None = None

    def _ensure_service(self) -> bool:
        """Lazily create the Sheets API service.

        Returns:
            ``True`` if the service is available, ``False`` otherwise.
        """
        if self._available is not None:
            return self._available

        if not self.spreadsheet_id:
            logger.warning("GOOGLE_SHEETS_ID is not set; Sheets API unavailable.")
            self._available = False
            return False

        try:
            kwargs: dict[str, Any] = {
                "serviceName": "sheets",
                "version": "v4",
                "cache_discovery": False,
            }
            if self._credentials:
                kwargs["credentials"] = self._credentials
            self._service = build(**kwargs)
            self._available = True
            logger.info("Google Sheets API service initialized.")
        except (GoogleAuthError, HttpError, OSError):
            logger.warning(
                "Failed to initialize Google Sheets API service.",
                exc_info=True,
            )
            self._available = False

        return self._available

    def is_available(self) -> bool:
        return self._ensure_service()

    def _spreadsheets(self) -> Any:
        if not self._ensure_service():
            raise SheetsUnavailableError("Google Sheets API is not available")
        return self._service.spreadsheets()

    async def _execute(self, request: Any, operation: str) -> dict[str, Any]:
        try:
            result = await asyncio.to_thread(request.execute)
        except (HttpError, GoogleAuthError, OSError) as exc:
            logger.warning(
                "Sheets %s failed for sheet=%s",
                operation,
                self.spreadsheet_id[:12],
                exc_info=True,
            )
            raise UpstreamError(f"Sheets {operation} failed: {exc}") from exc
        return result or {}

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    async def get_values(self, a1_range: str) -> list[list[str]]:
        """Read a range; returns rows of cell strings (trailing blanks trimmed by the API)."""
        request = self._spreadsheets().values().get(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range,
        )
        result = await self._execute(request, "values.get")
        rows: list[list[str]] = result.get("values", [])
        logger.debug("Read %d rows from %s", len(rows), a1_range)
        return rows

    async def update_values(self, a1_range: str, rows: list[list[str]]) -> None:
        request = self._spreadsheets().values().update(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range,
            valueInputOption="RAW",
            body={"values": rows},
        )
        await self._execute(request, "values.update")

    async def append_values(self, a1_range: str, rows: list[list[str]]) -> None:
        """Append rows after the last row of the table found in ``a1_range``."""
        request = self._spreadsheets().values().append(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range,
            valueInputOption="RAW",
            insertDataOption="INSERT_ROWS",
            body={"values": rows},
        )
        await self._execute(request, "values.append")

    async def clear_values(self, a1_range: str) -> None:
        request = self._spreadsheets().values().clear(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range,
            body={},
        )
        await self._execute(request, "values.clear")

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------

    async def get_tab_ids(self) -> dict[str, int]:
        """Map tab title -> numeric sheet id from spreadsheet metadata."""
        request = self._spreadsheets().get(
            spreadsheetId=self.spreadsheet_id,
            fields="sheets.properties(sheetId,title)",
        )
        metadata = await self._execute(request, "get")
        tabs: dict[str, int] = {}
        for sheet in metadata.get("sheets", []):
            props = sheet.get("properties", {})
            title = props.get("title")
            if isinstance(title, str):
                tabs[title] = int(props.get("sheetId", 0))
        return tabs

    async def add_tab(self, title: str, row_count: int, column_count: int) -> None:
        request = self._spreadsheets().batchUpdate(
            spreadsheetId=self.spreadsheet_id,
            body={
                "requests": [
                    {
                        "addSheet": {
                            "properties": {
                                "title": title,
                                "gridProperties": {
                                    "rowCount": row_count,
                                    "columnCount": column_count,
                                },
                            }
                        }
                    }
                ]
            },
        )
        await self._execute(request, "batchUpdate.addSheet")
        logger.info("Created tab %s (%dx%d)", title, row_count, column_count)

    async def delete_row(self, tab: str, row_number: int) -> None:
        """Physically remove one row (1-based ``row_number``) from ``tab``.

        The tab's numeric sheet id is resolved by title.  When the title is
        missing from the metadata the first sheet is assumed.
        """
        tabs = await self.get_tab_ids()
        sheet_id = tabs.get(tab)
        if sheet_id is None:
            logger.warning(
                "Tab %r not found in spreadsheet metadata; deleting from first sheet",
                tab,
            )
            sheet_id = FIRST_SHEET_ID

        request = self._spreadsheets().batchUpdate(
            spreadsheetId=self.spreadsheet_id,
            body={
                "requests": [
                    {
                        "deleteDimension": {
                            "range": {
                                "sheetId": sheet_id,
                                "dimension": "ROWS",
                                "startIndex": row_number - 1,
                                "endIndex": row_number,
                            }
                        }
                    }
                ]
            },
        )
        await self._execute(request, "batchUpdate.deleteDimension")
        logger.info("Deleted row %d from tab %s", row_number, tab)


@lru_cache(maxsize=1)
def get_sheets_client() -> SheetsClient:
    """Return the process-wide SheetsClient built from settings."""
    settings = get_settings()
    return SheetsClient(settings.GOOGLE_SHEETS_ID, credentials=load_credentials(settings))
