"""
Storage Services Package

Provides abstract interfaces and concrete implementations for record
and audit storage. Local JSON files are the default backend, with an
in-memory backend for tests.
"""

from labcash.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    NotFoundError,
    SnapshotStorageInterface,
    StorageError,
)
from labcash.services.storage.json_files import (
    JsonFileAuditStorage,
    JsonFileClient,
    JsonFileSnapshotStorage,
)
from labcash.services.storage.memory import (
    InMemoryAuditStorage,
    InMemorySnapshotStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SnapshotStorageInterface",
    # Exceptions
    "CorruptDataError",
    "NotFoundError",
    "StorageError",
    # JSON file implementation
    "JsonFileAuditStorage",
    "JsonFileClient",
    "JsonFileSnapshotStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemorySnapshotStorage",
]
