"""Drive CRUD against the ``drives`` tab (header row + data rows).

Row numbers are never cached: each mutation re-reads the tab, finds the
row by id and writes to ``index + 2`` (header in row 1, 0-based index).
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from earthride.errors import ConflictError, NotFoundError, RecordValidationError
from earthride.records.common import cell, utc_now_iso
from earthride.records.drive import (
    DRIVE_COLUMN_COUNT,
    DRIVE_SHEET_HEADERS,
    DriveData,
    drive_to_row,
    has_drive_changed,
    reject_null_drive_fields,
    row_to_drive,
    validate_drive,
)
from earthride.sheets import SheetsClient, row_range, tab_range

from .blog import UpsertResult

logger = logging.getLogger(__name__)

HEADER_ROW = 1
NEW_TAB_ROWS = 1000


def _millis() -> int:
    return time.time_ns() // 1_000_000


class DriveStore:
    """Sheet-backed drive repository.

    Args:
        client: Sheets client bound to the content spreadsheet.
        tab: Tab name holding drive rows.
        clock: Returns the ISO-8601 timestamp stamped on writes.
        id_source: Returns the epoch-millisecond base for new ids.
    """

    def __init__(
        self,
        client: SheetsClient,
        tab: str = "drives",
        clock: Callable[[], str] = utc_now_iso,
        id_source: Callable[[], int] = _millis,
    ) -> None:
        self.client = client
        self.tab = tab
        self._clock = clock
        self._id_source = id_source

    @property
    def full_range(self) -> str:
        return tab_range(self.tab, DRIVE_COLUMN_COUNT)

    @property
    def header_range(self) -> str:
        return f"{self.tab}!{HEADER_ROW}:{HEADER_ROW}"

    async def initialize_sheet(self) -> bool:
        """Create the tab and its header row when missing.  Idempotent."""
        tabs = await self.client.get_tab_ids()
        if self.tab not in tabs:
            await self.client.add_tab(self.tab, NEW_TAB_ROWS, DRIVE_COLUMN_COUNT)

        header = await self.client.get_values(self.header_range)
        if not header:
            await self.client.update_values(self.header_range, [list(DRIVE_SHEET_HEADERS)])
            logger.info("Wrote drive headers to %s", self.header_range)
        return True

    async def _rows(self) -> list[tuple[DriveData, int]]:
        """``(drive, row number)`` for every non-blank data row.

        Rows whose id cell is blank all share one id generated for this
        read.  That id changes on the next read, so such rows show up in
        listings but ``get``, ``update`` and ``delete`` cannot reach them
        until an id is typed into the sheet.
        """
        values = await self.client.get_values(self.full_range)
        if len(values) <= 1:
            return []
        headers, data_rows = values[0], values[1:]
        id_col = next((i for i, h in enumerate(headers) if str(h).strip() == "id"), None)
        default_id = str(self._id_source())
        located: list[tuple[DriveData, int]] = []
        for i, row in enumerate(data_rows):
            if not any(str(v).strip() for v in row):
                continue
            row_number = i + HEADER_ROW + 1
            if id_col is None or not cell(row, id_col).strip():
                logger.warning(
                    "Drive row %d has no id; using unaddressable id=%s for this read",
                    row_number,
                    default_id,
                )
            located.append((row_to_drive(headers, row, default_id=default_id), row_number))
        return located

    async def _locate(self, drive_id: str) -> tuple[DriveData, int] | None:
        target = str(drive_id)
        for drive, row_number in await self._rows():
            if drive.id == target:
                return drive, row_number
        return None

    async def list(self) -> list[DriveData]:
        return [drive for drive, _ in await self._rows()]

    async def get(self, drive_id: str) -> DriveData | None:
        found = await self._locate(drive_id)
        return found[0] if found else None

    async def list_by_status(self, status: str) -> list[DriveData]:
        return [d for d in await self.list() if d.status == status]

    def _prepare_new(self, drive: DriveData, drive_id: str, now: str) -> DriveData:
        return drive.model_copy(
            update={
                "id": drive_id,
                "created_at": now,
                "updated_at": now,
                "status": drive.status or "upcoming",
                "difficulty": drive.difficulty or "Easy",
            }
        )

    async def add(self, drive: DriveData) -> DriveData:
        """Validate, fill defaults and append one drive.

        Raises:
            RecordValidationError: a required field is blank.
            ConflictError: an explicit id is already in the sheet.
        """
        validate_drive(drive)
        if drive.id and await self._locate(drive.id) is not None:
            raise ConflictError(f"Drive id already exists: {drive.id}")

        new_drive = self._prepare_new(drive, drive.id or str(self._id_source()), self._clock())
        await self.client.append_values(self.full_range, [drive_to_row(new_drive)])
        logger.info("Added drive id=%s title=%r", new_drive.id, new_drive.title)
        return new_drive

    async def update(self, drive_id: str, changes: dict[str, Any]) -> DriveData:
        """Merge ``changes`` (snake_case field names) into the stored drive.

        Raises:
            NotFoundError: no row has ``drive_id``.
            RecordValidationError: a required field in ``changes`` is blank,
                a non-optional field is ``None`` or a value has the wrong type.
        """
        reject_null_drive_fields(changes)
        found = await self._locate(drive_id)
        if found is None:
            raise NotFoundError("drive", drive_id)
        current, row_number = found

        try:
            merged = DriveData.model_validate(
                {
                    **current.model_dump(),
                    **changes,
                    "id": current.id,
                    "created_at": current.created_at,
                    "updated_at": self._clock(),
                }
            )
        except ValidationError as exc:
            raise RecordValidationError(
                [f"Invalid value for field: {to_camel(str(err['loc'][0]))}" for err in exc.errors()]
            ) from exc
        validate_drive(merged, fields=set(changes))

        await self.client.update_values(
            row_range(self.tab, row_number, DRIVE_COLUMN_COUNT),
            [drive_to_row(merged)],
        )
        logger.info("Updated drive id=%s (row %d)", drive_id, row_number)
        return merged

    async def upsert_batch(self, drives: list[DriveData]) -> UpsertResult:
        """Same partition as blogs: changed rows rewritten, new rows appended.

        New drives get a time-based id unless they carry one not yet used;
        ids generated within one batch are made unique by counting up.
        """
        for drive in drives:
            validate_drive(drive)

        located = await self._rows()
        by_id: dict[str, tuple[DriveData, int]] = {}
        for drive, row_number in located:
            by_id.setdefault(drive.id or "", (drive, row_number))

        now = self._clock()
        claimed: set[str] = set(by_id)
        next_id = self._id_source()

        updates: list[tuple[DriveData, int]] = []
        additions: list[DriveData] = []

        for drive in drives:
            existing = by_id.get(drive.id) if drive.id else None
            if existing is not None:
                current, row_number = existing
                if has_drive_changed(current, drive):
                    updates.append(
                        (
                            drive.model_copy(
                                update={"created_at": current.created_at, "updated_at": now}
                            ),
                            row_number,
                        )
                    )
                continue

            drive_id = drive.id
            if not drive_id or drive_id in claimed:
                while str(next_id) in claimed:
                    next_id += 1
                drive_id = str(next_id)
            claimed.add(drive_id)
            additions.append(self._prepare_new(drive, drive_id, now))

        logger.info(
            "Found %d new drives and %d drives to update",
            len(additions),
            len(updates),
        )

        for drive, row_number in updates:
            await self.client.update_values(
                row_range(self.tab, row_number, DRIVE_COLUMN_COUNT),
                [drive_to_row(drive)],
            )

        if additions:
            await self.client.append_values(
                self.full_range,
                [drive_to_row(drive) for drive in additions],
            )

        return UpsertResult(updated=len(updates), added=len(additions))

    async def delete(self, drive_id: str) -> None:
        found = await self._locate(drive_id)
        if found is None:
            raise NotFoundError("drive", drive_id)
        await self.client.delete_row(self.tab, found[1])
        logger.info("Deleted drive id=%s (row %d)", drive_id, found[1])
