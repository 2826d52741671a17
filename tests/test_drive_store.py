"""Tests for sheet-backed drive CRUD (earthride/store/drive.py)."""

import logging

import pytest

from earthride.errors import ConflictError, NotFoundError, RecordValidationError
from earthride.records.drive import DriveData
from earthride.store import DriveStore

from conftest import DRIVE_HEADER, FakeSheetsClient, drive_row

NOW = "2025-06-01T12:00:00.000Z"
BASE_ID = 1_700_000_000_000


def _store(*rows, tabs=None):
    client = FakeSheetsClient(tabs=tabs if tabs is not None else {"drives": [DRIVE_HEADER, *rows]})
    return client, DriveStore(client, clock=lambda: NOW, id_source=lambda: BASE_ID)


def _new_drive(**overrides):
    values = dict(
        title="Green Ride",
        location="Delhi",
        date="2025-04-01",
        organizer="Delhi Riders",
        contact_email="delhi@example.org",
    )
    values.update(overrides)
    return DriveData(**values)


class TestInitializeSheet:
    @pytest.mark.asyncio
    async def test_creates_missing_tab_and_headers(self):
        client, store = _store(tabs={"blog": []})
        assert await store.initialize_sheet() is True
        assert client.ops("add_tab") == [("add_tab", "drives", (1000, 18))]
        [(_, a1, rows)] = client.ops("update")
        assert a1 == "drives!1:1"
        assert rows == [DRIVE_HEADER]

    @pytest.mark.asyncio
    async def test_idempotent(self):
        client, store = _store(drive_row("d1", "One"))
        await store.initialize_sheet()
        await store.initialize_sheet()
        assert client.mutations == []

    @pytest.mark.asyncio
    async def test_existing_empty_tab_gets_headers(self):
        client, store = _store(tabs={"drives": []})
        await store.initialize_sheet()
        assert client.ops("add_tab") == []
        assert len(client.ops("update")) == 1


class TestReads:
    @pytest.mark.asyncio
    async def test_list_skips_blank_rows(self):
        _, store = _store(drive_row("d1", "One"), [""] * 18, drive_row("d2", "Two"))
        drives = await store.list()
        assert [d.id for d in drives] == ["d1", "d2"]

    @pytest.mark.asyncio
    async def test_header_only_tab_is_empty(self):
        _, store = _store()
        assert await store.list() == []

    @pytest.mark.asyncio
    async def test_get_returns_none_when_missing(self):
        _, store = _store(drive_row("d1", "One"))
        assert (await store.get("d1")).title == "One"
        assert await store.get("nope") is None

    @pytest.mark.asyncio
    async def test_list_by_status(self):
        _, store = _store(
            drive_row("d1", "One"),
            drive_row("d2", "Two", status="completed"),
        )
        assert [d.id for d in await store.list_by_status("completed")] == ["d2"]

    @pytest.mark.asyncio
    async def test_blank_id_rows_warn_and_share_read_id(self, caplog):
        _, store = _store(drive_row("", "One"), drive_row("d2", "Two"), drive_row("", "Three"))
        with caplog.at_level(logging.WARNING, logger="earthride.store.drive"):
            drives = await store.list()
        assert [d.id for d in drives] == [str(BASE_ID), "d2", str(BASE_ID)]
        assert "Drive row 2 has no id" in caplog.text
        assert "Drive row 4 has no id" in caplog.text
        assert "row 3" not in caplog.text


class TestAdd:
    @pytest.mark.asyncio
    async def test_assigns_id_and_defaults(self):
        client, store = _store()
        created = await store.add(_new_drive(status=None))
        assert created.id == str(BASE_ID)
        assert created.status == "upcoming"
        assert created.difficulty == "Easy"
        assert created.created_at == created.updated_at == NOW
        [(_, a1, rows)] = client.ops("append")
        assert a1 == "drives!A:R"
        assert rows[0][0] == str(BASE_ID)

    @pytest.mark.asyncio
    async def test_missing_fields_rejected_without_write(self):
        client, store = _store()
        with pytest.raises(RecordValidationError, match="contactEmail"):
            await store.add(_new_drive(contact_email=""))
        assert client.mutations == []

    @pytest.mark.asyncio
    async def test_existing_explicit_id_conflicts(self):
        client, store = _store(drive_row("d1", "One"))
        with pytest.raises(ConflictError):
            await store.add(_new_drive(id="d1"))
        assert client.mutations == []


class TestUpdate:
    @pytest.mark.asyncio
    async def test_merges_changes_in_place(self):
        client, store = _store(drive_row("d1", "One"), drive_row("d2", "Two"))
        updated = await store.update("d2", {"participants": 45})
        assert updated.participants == 45
        assert updated.title == "Two"
        assert updated.created_at == "2025-01-01T00:00:00.000Z"
        assert updated.updated_at == NOW
        [(_, a1, rows)] = client.ops("update")
        assert a1 == "drives!A3:R3"
        assert rows[0][DRIVE_HEADER.index("participants")] == "45"

    @pytest.mark.asyncio
    async def test_id_cannot_change(self):
        _, store = _store(drive_row("d1", "One"))
        updated = await store.update("d1", {"id": "other", "title": "Renamed"})
        assert updated.id == "d1"

    @pytest.mark.asyncio
    async def test_missing_id_raises(self):
        client, store = _store(drive_row("d1", "One"))
        with pytest.raises(NotFoundError, match="Drive not found: zz"):
            await store.update("zz", {"title": "x"})
        assert client.mutations == []

    @pytest.mark.asyncio
    async def test_blanking_required_field_rejected(self):
        client, store = _store(drive_row("d1", "One"))
        with pytest.raises(RecordValidationError, match="title"):
            await store.update("d1", {"title": ""})
        assert client.mutations == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "changes, message",
        [
            ({"title": None}, "Missing required field: title"),
            ({"participants": None}, "Field cannot be null: participants"),
            ({"registration_open": None}, "Field cannot be null: registrationOpen"),
        ],
    )
    async def test_null_for_non_optional_field_rejected(self, changes, message):
        client, store = _store(drive_row("d1", "One"))
        with pytest.raises(RecordValidationError) as exc_info:
            await store.update("d1", changes)
        assert exc_info.value.errors == [message]
        assert client.mutations == []

    @pytest.mark.asyncio
    async def test_null_clears_optional_field(self):
        client, store = _store(drive_row("d1", "One"))
        updated = await store.update("d1", {"description": None})
        assert updated.description is None
        [(_, _, rows)] = client.ops("update")
        assert rows[0][DRIVE_HEADER.index("description")] == ""

    @pytest.mark.asyncio
    async def test_wrong_type_is_validation_error(self):
        client, store = _store(drive_row("d1", "One"))
        with pytest.raises(RecordValidationError, match="Invalid value for field: treesTarget"):
            await store.update("d1", {"trees_target": "many"})
        assert client.mutations == []


class TestUpsertBatch:
    @pytest.mark.asyncio
    async def test_partition(self):
        client, store = _store(drive_row("d1", "One"), drive_row("d2", "Two"))
        batch = await store.list()
        batch[0] = batch[0].model_copy(update={"trees_target": 250})
        batch.append(_new_drive())

        result = await store.upsert_batch(batch)

        assert (result.updated, result.added) == (1, 1)
        [(_, a1, rows)] = client.ops("update")
        assert a1 == "drives!A2:R2"
        assert rows[0][DRIVE_HEADER.index("createdAt")] == "2025-01-01T00:00:00.000Z"
        [(_, _, appended)] = client.ops("append")
        assert appended[0][0] == str(BASE_ID)

    @pytest.mark.asyncio
    async def test_generated_ids_unique_within_batch(self):
        client, store = _store(drive_row(str(BASE_ID), "Taken"))
        await store.upsert_batch([_new_drive(), _new_drive(title="Second")])
        [(_, _, appended)] = client.ops("append")
        assert [r[0] for r in appended] == [str(BASE_ID + 1), str(BASE_ID + 2)]

    @pytest.mark.asyncio
    async def test_invalid_record_rejects_whole_batch(self):
        client, store = _store()
        with pytest.raises(RecordValidationError):
            await store.upsert_batch([_new_drive(), _new_drive(location="")])
        assert client.mutations == []


class TestDelete:
    @pytest.mark.asyncio
    async def test_deletes_row(self):
        client, store = _store(drive_row("d1", "One"), drive_row("d2", "Two"))
        await store.delete("d1")
        assert client.ops("delete") == [("delete", "drives", 2)]
        assert [d.id for d in await store.list()] == ["d2"]

    @pytest.mark.asyncio
    async def test_missing_id_mutates_nothing(self):
        client, store = _store(drive_row("d1", "One"))
        with pytest.raises(NotFoundError):
            await store.delete("nope")
        assert client.mutations == []
