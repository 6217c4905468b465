"""
In-Memory Storage Implementation

Used by the tests and when the app runs without a writable data
directory. Nothing survives a restart.
"""

from typing import Optional
from uuid import UUID

from labcash.models.audit import AuditEvent
from labcash.models.records import RecordSnapshot
from labcash.services.storage.interface import (
    AuditStorageInterface,
    SnapshotStorageInterface,
)


class InMemorySnapshotStorage(SnapshotStorageInterface):
    """Keeps the last saved snapshot in memory."""

    def __init__(self, initial: Optional[RecordSnapshot] = None):
        self._snapshot = initial or RecordSnapshot()
        self.save_count = 0

    async def load_snapshot(self) -> RecordSnapshot:
        return self._snapshot

    async def save_snapshot(self, snapshot: RecordSnapshot) -> bool:
        # Snapshots are immutable, so holding the reference is safe
        self._snapshot = snapshot
        self.save_count += 1
        return True


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            e for e in self.events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return sorted(self.events, key=lambda e: e.timestamp, reverse=True)[:limit]
