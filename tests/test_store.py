"""Tests for the record store and its storage backends."""

import json

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from labcash.audit import AuditLogger
from labcash.config import StorageSettings
from labcash.models.audit import AuditEventType
from labcash.models.records import RecordSnapshot, ShiftType
from labcash.services.storage import (
    CorruptDataError,
    InMemoryAuditStorage,
    InMemorySnapshotStorage,
    JsonFileAuditStorage,
    JsonFileClient,
    JsonFileSnapshotStorage,
    NotFoundError,
    StorageError,
)
from labcash.store import RecordStore


class FailingSnapshotStorage(InMemorySnapshotStorage):
    async def save_snapshot(self, snapshot):
        raise StorageError("disk full")


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def store(audit_storage):
    return RecordStore(InMemorySnapshotStorage(), AuditLogger(audit_storage))


@pytest.fixture
def json_client(tmp_path):
    return JsonFileClient(StorageSettings(data_dir=tmp_path / "records"))


class TestRecordStore:
    """Tests for add/delete operations."""

    @pytest.mark.asyncio
    async def test_add_returns_new_snapshot(self, store):
        """Test that adding leaves the previous snapshot unchanged."""
        before = await store.load()
        after = await store.add_revenue_entry(date(2024, 5, 2), "Morning", "2500")

        assert before.entries == ()
        assert len(after.entries) == 1
        assert after.entries[0].shift == ShiftType.MORNING
        assert after.entries[0].amount == Decimal("2500")
        assert await store.load() is after

    @pytest.mark.asyncio
    async def test_add_persists(self):
        """Test that each mutation is saved."""
        storage = InMemorySnapshotStorage()
        store = RecordStore(storage, AuditLogger())

        await store.add_expense(date(2024, 5, 3), "500", "Tea")
        await store.add_staff("Ali")

        assert storage.save_count == 2
        saved = await storage.load_snapshot()
        assert saved.expenses[0].description == "Tea"

    @pytest.mark.asyncio
    async def test_invalid_record_is_not_saved(self, store):
        """Test that a model error leaves the store untouched."""
        with pytest.raises(ValidationError):
            await store.add_revenue_entry(date(2024, 5, 2), "Morning", "-1")
        assert (await store.load()).entries == ()

    @pytest.mark.asyncio
    async def test_delete(self, store):
        """Test deleting an entry by id."""
        snapshot = await store.add_revenue_entry(date(2024, 5, 2), "Night", "100")
        snapshot = await store.add_revenue_entry(date(2024, 5, 2), "Night", "200")
        first, second = snapshot.entries

        after = await store.delete_revenue_entry(first.id)

        assert after.entries == (second,)
        assert snapshot.entries == (first, second)

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, store):
        """Test that unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await store.delete_expense(uuid4())
        with pytest.raises(NotFoundError):
            await store.remove_staff(uuid4())

    @pytest.mark.asyncio
    async def test_advance_copies_staff_name(self, store):
        """Test that an advance snapshots the staff member's name."""
        snapshot = await store.add_staff("Sana", role="Technician")
        member = snapshot.staff[0]

        snapshot = await store.add_advance(date(2024, 5, 4), "300", member.id, "rent")

        advance = snapshot.advances[0]
        assert advance.staff_id == member.id
        assert advance.staff_name == "Sana"
        assert advance.remarks == "rent"

    @pytest.mark.asyncio
    async def test_advance_for_unknown_staff(self, store):
        """Test that advances need a roster member."""
        with pytest.raises(NotFoundError):
            await store.add_advance(date(2024, 5, 4), "300", uuid4())

    @pytest.mark.asyncio
    async def test_remove_staff_keeps_advances(self, store, audit_storage):
        """Test that removing staff keeps their advances and names."""
        snapshot = await store.add_staff("Hina")
        member = snapshot.staff[0]
        snapshot = await store.add_advance(date(2024, 5, 4), "300", member.id)
        advance = snapshot.advances[0]

        after = await store.remove_staff(member.id)

        assert after.staff == ()
        assert after.advances == (advance,)
        assert after.advances[0].staff_name == "Hina"

        removed = [e for e in audit_storage.events if e.event_type == AuditEventType.STAFF_REMOVED]
        assert removed[0].details["retained_advances"] == 1

    @pytest.mark.asyncio
    async def test_mutations_are_audited(self, store, audit_storage):
        """Test that every change creates an audit event."""
        snapshot = await store.add_revenue_entry(date(2024, 5, 2), "Morning", "100")
        await store.delete_revenue_entry(snapshot.entries[0].id)

        types = [e.event_type for e in audit_storage.events]
        assert types == [AuditEventType.ENTRY_ADDED, AuditEventType.ENTRY_DELETED]
        assert audit_storage.events[0].details["shift"] == "Morning"

    @pytest.mark.asyncio
    async def test_save_failure(self, audit_storage):
        """Test that a failed save is audited, raised and not applied."""
        store = RecordStore(FailingSnapshotStorage(), AuditLogger(audit_storage))

        with pytest.raises(StorageError):
            await store.add_staff("Ali")

        assert (await store.load()).staff == ()
        assert audit_storage.events[0].event_type == AuditEventType.SAVE_FAILED


class TestJsonFileStorage:
    """Tests for the local JSON file backend."""

    @pytest.mark.asyncio
    async def test_missing_files_load_empty(self, json_client):
        """Test that a fresh data directory is an empty snapshot."""
        snapshot = await JsonFileSnapshotStorage(json_client).load_snapshot()
        assert snapshot == RecordSnapshot()

    @pytest.mark.asyncio
    async def test_round_trip(self, json_client):
        """Test that a saved snapshot loads back equal."""
        store = RecordStore(JsonFileSnapshotStorage(json_client), AuditLogger())
        await store.add_staff("Ali")
        member = (await store.load()).staff[0]
        await store.add_revenue_entry(date(2024, 5, 2), "Evening", "2500.50")
        await store.add_expense(date(2024, 5, 3), "500", "Tea", "biscuits too")
        saved = await store.add_advance(date(2024, 5, 4), "300", member.id)

        loaded = await JsonFileSnapshotStorage(json_client).load_snapshot()

        assert loaded == saved
        rows = json.loads(json_client.path_for("entries.json").read_text())
        assert rows[0]["amount"] == "2500.50"
        assert rows[0]["shift"] == "Evening"

    @pytest.mark.asyncio
    async def test_invalid_json_is_corrupt(self, json_client):
        """Test that unreadable blobs raise CorruptDataError."""
        json_client.ensure_data_dir()
        json_client.path_for("staff.json").write_text("{not json")

        with pytest.raises(CorruptDataError):
            await JsonFileSnapshotStorage(json_client).load_snapshot()

    @pytest.mark.asyncio
    async def test_invalid_record_is_corrupt(self, json_client):
        """Test that a bad row is refused rather than skipped."""
        json_client.write_blob("entries.json", [
            {"record_date": "2024-05-02", "shift": "Morning", "amount": "-5"},
        ])

        with pytest.raises(CorruptDataError):
            await JsonFileSnapshotStorage(json_client).load_snapshot()

    @pytest.mark.asyncio
    async def test_non_list_blob_is_corrupt(self, json_client):
        """Test that each blob must be a JSON list."""
        json_client.write_blob("expenses.json", [])
        json_client.path_for("expenses.json").write_text('{"a": 1}')

        with pytest.raises(CorruptDataError):
            await JsonFileSnapshotStorage(json_client).load_snapshot()

    def test_write_leaves_no_temp_files(self, json_client):
        """Test that atomic writes clean up after themselves."""
        json_client.write_blob("staff.json", [{"name": "Ali"}])
        assert [p.name for p in json_client.data_dir.iterdir()] == ["staff.json"]

    @pytest.mark.asyncio
    async def test_audit_log_append_and_read(self, json_client):
        """Test the JSON-lines audit log."""
        audit_storage = JsonFileAuditStorage(json_client)
        store = RecordStore(JsonFileSnapshotStorage(json_client), AuditLogger(audit_storage))

        snapshot = await store.add_staff("Ali")
        member = snapshot.staff[0]
        await store.remove_staff(member.id)

        recent = await audit_storage.get_recent_events(limit=1)
        history = await audit_storage.get_events_by_entity("staff", member.id)

        assert len(recent) == 1
        assert [e.event_type for e in history] == [
            AuditEventType.STAFF_ADDED,
            AuditEventType.STAFF_REMOVED,
        ]

    @pytest.mark.asyncio
    async def test_audit_log_skips_malformed_lines(self, json_client):
        """Test that a damaged audit line does not hide the rest."""
        audit_storage = JsonFileAuditStorage(json_client)
        await AuditLogger(audit_storage).log_error("test", "first")
        json_client.append_line("audit.jsonl", "garbage")

        events = await audit_storage.get_recent_events()
        assert len(events) == 1
        assert events[0].error_message == "first"
