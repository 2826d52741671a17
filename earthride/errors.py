"""Domain errors raised by the record mappers and the sheet-backed stores.

Route handlers translate these into HTTP status codes; see
``earthride.api.errors``.  Upstream (Sheets API) failures are
``earthride.sheets.UpstreamError``.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for record/store failures."""


class NotFoundError(StoreError):
    """No row carries the requested id."""

    def __init__(self, entity: str, record_id: object) -> None:
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity.capitalize()} not found: {record_id}")


class ConflictError(StoreError):
    """A record collides with an existing one (e.g. duplicate blog title)."""


class RecordValidationError(StoreError):
    """A record is missing required fields or carries malformed values."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors))
