"""Admin records stored as a header row plus data rows in one fixed range."""

from __future__ import annotations

import logging
from typing import Any

from earthride.errors import RecordValidationError
from earthride.records.admin import (
    AdminRecord,
    admin_headers,
    admins_to_rows,
    rows_to_admins,
    validate_admins,
)
from earthride.sheets import SheetsClient, range_shape, split_range

logger = logging.getLogger(__name__)


class AdminStore:
    """Read and replace the admin table.

    Args:
        client: Sheets client bound to the content spreadsheet.
        a1_range: Range holding the table, header in its first row.
        required_fields: Keys every record must carry on write.
    """

    def __init__(
        self,
        client: SheetsClient,
        a1_range: str = "admins!A1:G1000",
        required_fields: list[str] | tuple[str, ...] = (),
    ) -> None:
        self.client = client
        self.a1_range = a1_range
        self.required_fields = tuple(required_fields)
        _, cells = split_range(a1_range)
        self._max_columns, self._max_rows = range_shape(cells)

    async def list(self) -> list[AdminRecord]:
        rows = await self.client.get_values(self.a1_range)
        return rows_to_admins(rows)

    async def replace_all(self, records: list[Any]) -> int:
        """Overwrite the table with ``records``; returns the number written.

        The range is cleared first so a shorter list leaves no stale rows.
        Headers are the union of record keys in first-seen order.

        Raises:
            RecordValidationError: a record is not an object, lacks a
                required key, or the table does not fit the range.
        """
        validate_admins(records, self.required_fields)

        headers = admin_headers(records)
        errors: list[str] = []
        if len(headers) > self._max_columns:
            errors.append(
                f"{len(headers)} fields do not fit {self.a1_range} ({self._max_columns} columns)"
            )
        if self._max_rows is not None and len(records) + 1 > self._max_rows:
            errors.append(
                f"{len(records)} records do not fit {self.a1_range} ({self._max_rows - 1} data rows)"
            )
        if errors:
            raise RecordValidationError(errors)

        rows = admins_to_rows(records)
        await self.client.clear_values(self.a1_range)
        if rows:
            await self.client.update_values(self.a1_range, rows)
        logger.info("Wrote %d admin records to %s", len(records), self.a1_range)
        return len(records)
