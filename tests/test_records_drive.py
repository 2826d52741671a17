"""Tests for drive row mapping and validation (earthride/records/drive.py)."""

import pytest

from earthride.errors import RecordValidationError
from earthride.records.drive import (
    DRIVE_COLUMN_COUNT,
    DRIVE_SHEET_HEADERS,
    DriveData,
    drive_to_row,
    has_drive_changed,
    row_to_drive,
    validate_drive,
)

from conftest import DRIVE_HEADER, drive_row


class TestHeaders:
    def test_header_order(self):
        """Sheet headers are the camelCase field names in declaration order."""
        assert list(DRIVE_SHEET_HEADERS) == DRIVE_HEADER
        assert DRIVE_COLUMN_COUNT == 18


class TestRowToDrive:
    def test_full_row(self):
        drive = row_to_drive(DRIVE_HEADER, drive_row("d1", "Pune Plant"))
        assert drive.id == "d1"
        assert drive.participants == 20
        assert drive.trees_target == 100
        assert drive.registration_open is True
        assert drive.status == "upcoming"
        assert drive.difficulty == "Easy"
        assert drive.registration_deadline is None
        assert drive.logo is None

    def test_reordered_headers(self):
        """Columns are matched by header name, not position."""
        headers = ["title", "id", "participants"]
        drive = row_to_drive(headers, ["Swapped", "x9", "7"])
        assert drive.id == "x9"
        assert drive.title == "Swapped"
        assert drive.participants == 7

    def test_unknown_headers_ignored(self):
        drive = row_to_drive(["id", "notes", "title"], ["a", "ignored", "T"])
        assert drive.title == "T"

    def test_blank_id_uses_default(self):
        drive = row_to_drive(DRIVE_HEADER, drive_row("", "No id"), default_id="1700000000000")
        assert drive.id == "1700000000000"

    def test_lenient_numbers(self):
        drive = row_to_drive(DRIVE_HEADER, drive_row("d", "T", participants="abc", treesTarget="50 trees"))
        assert drive.participants == 0
        assert drive.trees_target == 50

    def test_registration_open_only_literal_true(self):
        drive = row_to_drive(DRIVE_HEADER, drive_row("d", "T", registrationOpen="yes"))
        assert drive.registration_open is False

    def test_unknown_enum_values_read_as_none(self):
        drive = row_to_drive(DRIVE_HEADER, drive_row("d", "T", status="postponed", difficulty="Hard"))
        assert drive.status is None
        assert drive.difficulty is None


class TestDriveToRow:
    def test_round_trip_cells(self):
        row = drive_row("d1", "Pune Plant")
        assert drive_to_row(row_to_drive(DRIVE_HEADER, row)) == row

    def test_none_and_bool_cells(self):
        row = drive_to_row(DriveData(id="x", title="T", registration_open=False))
        assert row[DRIVE_HEADER.index("registrationOpen")] == "false"
        assert row[DRIVE_HEADER.index("status")] == ""
        assert row[DRIVE_HEADER.index("participants")] == "0"


class TestValidateDrive:
    def _valid(self, **overrides):
        values = dict(
            title="T",
            location="L",
            date="2025-01-01",
            organizer="O",
            contact_email="o@example.org",
        )
        values.update(overrides)
        return DriveData(**values)

    def test_valid_drive_passes(self):
        validate_drive(self._valid())

    def test_lists_every_missing_field(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_drive(self._valid(title="", contact_email="  "))
        assert exc_info.value.errors == [
            "Missing required field: title",
            "Missing required field: contactEmail",
        ]

    def test_partial_check_only_named_fields(self):
        """A partial update only validates the fields it touches."""
        drive = self._valid(location="")
        validate_drive(drive, fields={"title"})
        with pytest.raises(RecordValidationError, match="location"):
            validate_drive(drive, fields={"location"})


class TestHasDriveChanged:
    def test_timestamps_and_id_ignored(self):
        drive = row_to_drive(DRIVE_HEADER, drive_row("d1", "T"))
        same = drive.model_copy(update={"updated_at": "now", "created_at": "then"})
        assert has_drive_changed(drive, same) is False

    def test_participants_change_detected(self):
        drive = row_to_drive(DRIVE_HEADER, drive_row("d1", "T"))
        assert has_drive_changed(drive, drive.model_copy(update={"participants": 21})) is True
