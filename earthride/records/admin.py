"""Admin records: a ``dict[str, str]`` per row, keyed by the header row.

The admin tab has no fixed schema.  Row 1 names the keys; every following
row becomes one mapping.  Which keys are mandatory is configuration
(``ADMIN_REQUIRED_FIELDS``), checked on write by ``validate_admins``.
"""

from __future__ import annotations

from typing import Any

from earthride.errors import RecordValidationError

from .common import cell

AdminRecord = dict[str, str]


def rows_to_admins(rows: list[list[Any]]) -> list[AdminRecord]:
    """Header row + data rows -> list of mappings (short rows padded with ``""``)."""
    if not rows:
        return []
    headers = [str(h).strip() for h in rows[0]]
    records: list[AdminRecord] = []
    for row in rows[1:]:
        if not any(str(v).strip() for v in row):
            continue
        records.append({h: cell(row, i) for i, h in enumerate(headers) if h})
    return records


def admin_headers(records: list[dict[str, Any]]) -> list[str]:
    """Union of all record keys in first-seen order."""
    headers: list[str] = []
    seen: set[str] = set()
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                headers.append(key)
    return headers


def admins_to_rows(records: list[dict[str, Any]]) -> list[list[str]]:
    """Mappings -> header row + one row per record.  ``None`` becomes ``""``."""
    if not records:
        return []
    headers = admin_headers(records)
    rows = [headers]
    for record in records:
        rows.append(["" if record.get(h) is None else str(record.get(h)) for h in headers])
    return rows


def validate_admins(records: list[Any], required: list[str] | tuple[str, ...] = ()) -> None:
    """Every record must be a JSON object carrying each required key.

    Raises:
        RecordValidationError: one message per offending record/key.
    """
    errors: list[str] = []
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            errors.append(f"Record {i} is not an object")
            continue
        for key in required:
            value = record.get(key)
            if value is None or not str(value).strip():
                errors.append(f"Record {i} is missing required field: {key}")
    if errors:
        raise RecordValidationError(errors)
