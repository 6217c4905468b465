"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the local JSON files today, swap in something else later
2. Use in-memory storage for testing
3. Keep the record store and the engine decoupled from files

The interface is intentionally tiny: the four collections are loaded
and saved as a whole snapshot, one JSON blob per collection.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from labcash.models.audit import AuditEvent
from labcash.models.records import RecordSnapshot


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for record persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def load_snapshot(self) -> RecordSnapshot:
        """
        Load all four collections.

        Returns:
            The stored snapshot (empty if nothing was saved yet)

        Raises:
            CorruptDataError: If stored data cannot be read back
            StorageError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def save_snapshot(self, snapshot: RecordSnapshot) -> bool:
        """
        Replace the stored collections with this snapshot.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, in chronological order.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but cannot be parsed back into records."""
    pass
