"""Drive (ride event / campaign) record and its header-driven row layout.

The ``drives`` tab carries a header row.  Reads map columns by header name,
so a reordered or partial sheet still loads; writes always use
``DRIVE_SHEET_HEADERS`` order, which ``DriveStore.initialize_sheet`` writes
to row 1.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from earthride.errors import RecordValidationError

from .common import bool_cell, cell, epoch_millis_id, parse_bool, parse_int

logger = logging.getLogger(__name__)

DriveStatus = Literal["upcoming", "ongoing", "completed", "cancelled"]
Difficulty = Literal["Easy", "Moderate", "Challenging", "Expert"]
DRIVE_STATUSES: tuple[str, ...] = get_args(DriveStatus)
DIFFICULTIES: tuple[str, ...] = get_args(Difficulty)


class DriveData(BaseModel):
    """One drive row.  ``None`` marks an optional cell that is empty."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    title: str = ""
    location: str = ""
    date: str = ""
    participants: int = 0
    trees_target: int = 0
    status: DriveStatus | None = None
    registration_open: bool = True
    description: str | None = None
    organizer: str = ""
    contact_email: str = ""
    registration_deadline: str | None = None
    meeting_point: str | None = None
    duration: str | None = None
    difficulty: Difficulty | None = None
    logo: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


_FIELD_BY_HEADER: dict[str, str] = {
    to_camel(name): name for name in DriveData.model_fields
}

DRIVE_SHEET_HEADERS: tuple[str, ...] = tuple(_FIELD_BY_HEADER)
DRIVE_COLUMN_COUNT = len(DRIVE_SHEET_HEADERS)

REQUIRED_DRIVE_FIELDS: tuple[str, ...] = (
    "title",
    "location",
    "date",
    "organizer",
    "contact_email",
)

DRIVE_COMPARED_FIELDS: tuple[str, ...] = tuple(
    name
    for name in DriveData.model_fields
    if name not in ("id", "created_at", "updated_at")
)

NON_NULLABLE_DRIVE_FIELDS: frozenset[str] = frozenset(
    name for name, info in DriveData.model_fields.items() if info.default is not None
)

_INT_FIELDS = frozenset({"participants", "trees_target"})


def _coerce(field: str, value: str, record_id: str) -> Any:
    if field in _INT_FIELDS:
        return parse_int(value)
    if field == "registration_open":
        return parse_bool(value)
    if field == "status":
        if value and value not in DRIVE_STATUSES:
            logger.warning("Drive id=%s has unknown status %r; ignoring", record_id, value)
            return None
        return value or None
    if field == "difficulty":
        if value and value not in DIFFICULTIES:
            logger.warning("Drive id=%s has unknown difficulty %r; ignoring", record_id, value)
            return None
        return value or None
    if field in ("title", "location", "date", "organizer", "contact_email"):
        return value
    return value or None


def row_to_drive(headers: list[str], row: list[Any], *, default_id: str | None = None) -> DriveData:
    """Map one data row to ``DriveData`` using the sheet's header row.

    Args:
        headers: Row 1 of the tab.  Unknown header names are ignored.
        row: Cell values aligned with ``headers`` (may be short).
        default_id: Id used when the id cell is empty; defaults to a
            time-based id.
    """
    values: dict[str, Any] = {}
    for i, header in enumerate(headers):
        field = _FIELD_BY_HEADER.get(str(header).strip())
        if field is not None:
            values[field] = cell(row, i)

    record_id = values.pop("id", "").strip() or default_id or epoch_millis_id()
    data = {field: _coerce(field, value, record_id) for field, value in values.items()}
    return DriveData(id=record_id, **data)


def _to_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return bool_cell(value)
    return str(value)


def drive_to_row(drive: DriveData) -> list[str]:
    """Serialize in ``DRIVE_SHEET_HEADERS`` order."""
    return [_to_cell(getattr(drive, _FIELD_BY_HEADER[h])) for h in DRIVE_SHEET_HEADERS]


def validate_drive(drive: DriveData, fields: set[str] | None = None) -> None:
    """Presence check for required drive fields.

    Args:
        drive: The record to check.
        fields: When given, only these fields are checked (partial update).

    Raises:
        RecordValidationError: listing every missing field by its JSON name.
    """
    to_check = REQUIRED_DRIVE_FIELDS if fields is None else [
        f for f in REQUIRED_DRIVE_FIELDS if f in fields
    ]
    errors = [
        f"Missing required field: {to_camel(field)}"
        for field in to_check
        if not str(getattr(drive, field) or "").strip()
    ]
    if errors:
        logger.warning("Rejected drive id=%s errors=%s", drive.id, errors)
        raise RecordValidationError(errors)


def has_drive_changed(existing: DriveData, incoming: DriveData) -> bool:
    return any(
        _to_cell(getattr(existing, field)) != _to_cell(getattr(incoming, field))
        for field in DRIVE_COMPARED_FIELDS
    )


def reject_null_drive_fields(changes: dict[str, Any]) -> None:
    """Partial updates may clear optional cells only.

    Raises:
        RecordValidationError: a field without an empty state was set to ``None``.
    """
    errors = [
        f"Missing required field: {to_camel(field)}"
        if field in REQUIRED_DRIVE_FIELDS
        else f"Field cannot be null: {to_camel(field)}"
        for field, value in changes.items()
        if value is None and field in NON_NULLABLE_DRIVE_FIELDS
    ]
    if errors:
        logger.warning("Rejected drive changes errors=%s", errors)
        raise RecordValidationError(errors)
