"""Services package."""

from labcash.services.storage import (
    AuditStorageInterface,
    CorruptDataError,
    InMemoryAuditStorage,
    InMemorySnapshotStorage,
    JsonFileAuditStorage,
    JsonFileClient,
    JsonFileSnapshotStorage,
    NotFoundError,
    SnapshotStorageInterface,
    StorageError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "CorruptDataError",
    "InMemoryAuditStorage",
    "InMemorySnapshotStorage",
    "JsonFileAuditStorage",
    "JsonFileClient",
    "JsonFileSnapshotStorage",
    "NotFoundError",
    "SnapshotStorageInterface",
    "StorageError",
]
