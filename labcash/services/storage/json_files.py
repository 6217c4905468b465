"""
Local JSON File Storage Implementation

DESIGN DECISION: Records live in four JSON files, one per collection,
under a single data directory:
1. One blob per collection, matching how the records are edited
2. No database setup required
3. Files can be copied as a backup or inspected by hand

TRADEOFFS:
- Every save rewrites a whole collection (fine for a month of shifts)
- Single writer assumed; no file locking
- Writes go to a temp file first and are renamed into place, so a
  crash never leaves a half-written blob behind

The audit log is a separate append-only JSON-lines file.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from labcash.config import StorageSettings, get_settings
from labcash.models.audit import AuditEvent
from labcash.models.records import (
    AdvanceRecord,
    ExpenseRecord,
    RecordSnapshot,
    RevenueEntry,
    StaffMember,
)
from labcash.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    SnapshotStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class JsonFileClient:
    """
    Low-level file access for the data directory.

    Handles directory creation, atomic writes and retry logic.
    """

    def __init__(self, settings: Optional[StorageSettings] = None):
        self._settings = settings or get_settings().storage
        self._data_dir = Path(self._settings.data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def settings(self) -> StorageSettings:
        return self._settings

    def path_for(self, file_name: str) -> Path:
        return self._data_dir / file_name

    def ensure_data_dir(self) -> Path:
        """Create the data directory if needed."""
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self._data_dir}: {e}")
        return self._data_dir

    def read_blob(self, file_name: str) -> list[dict[str, Any]]:
        """Read one collection. A missing file is an empty collection."""
        path = self.path_for(file_name)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8") or "[]")
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"{path} is not valid JSON: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")
        if not isinstance(data, list):
            raise CorruptDataError(f"{path} must contain a JSON list")
        return data

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
        reraise=True,
    )
    def write_blob(self, file_name: str, data: list[dict[str, Any]]) -> None:
        """Atomically replace one collection file."""
        self.ensure_data_dir()
        path = self.path_for(file_name)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._data_dir, prefix=f".{file_name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
        reraise=True,
    )
    def append_line(self, file_name: str, line: str) -> None:
        self.ensure_data_dir()
        with self.path_for(file_name).open("a", encoding="utf-8") as fh:
            fh.write(line.rstrip("\n") + "\n")

    def read_lines(self, file_name: str) -> list[str]:
        path = self.path_for(file_name)
        if not path.exists():
            return []
        try:
            return [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")


class JsonFileSnapshotStorage(SnapshotStorageInterface):
    """
    JSON file implementation of record storage.

    Each collection is a JSON list of records serialized by pydantic
    (Decimals as strings, dates as ISO strings).
    """

    def __init__(self, client: Optional[JsonFileClient] = None):
        self._client = client or JsonFileClient()

    def _collections(self) -> list[tuple[str, str, type]]:
        settings = self._client.settings
        return [
            ("entries", settings.entries_file_name, RevenueEntry),
            ("expenses", settings.expenses_file_name, ExpenseRecord),
            ("advances", settings.advances_file_name, AdvanceRecord),
            ("staff", settings.staff_file_name, StaffMember),
        ]

    async def load_snapshot(self) -> RecordSnapshot:
        """Load all four collection files."""
        collections = {}
        for attr, file_name, model in self._collections():
            rows = self._client.read_blob(file_name)
            try:
                collections[attr] = tuple(model.model_validate(row) for row in rows)
            except ValidationError as e:
                # A bad row would silently change the month's totals: refuse
                raise CorruptDataError(
                    f"Invalid record in {self._client.path_for(file_name)}: {e}"
                )

        snapshot = RecordSnapshot(**collections)
        logger.debug(
            "snapshot_loaded",
            data_dir=str(self._client.data_dir),
            entries=len(snapshot.entries),
            expenses=len(snapshot.expenses),
            advances=len(snapshot.advances),
            staff=len(snapshot.staff),
        )
        return snapshot

    async def save_snapshot(self, snapshot: RecordSnapshot) -> bool:
        """Write every collection file."""
        try:
            for attr, file_name, _ in self._collections():
                records = getattr(snapshot, attr)
                self._client.write_blob(
                    file_name,
                    [record.model_dump(mode="json") for record in records],
                )
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save records: {e}")


class JsonFileAuditStorage(AuditStorageInterface):
    """
    JSON-lines implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[JsonFileClient] = None):
        self._client = client or JsonFileClient()

    @property
    def _file_name(self) -> str:
        return self._client.settings.audit_file_name

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            self._client.append_line(self._file_name, event.model_dump_json())
            return True
        except Exception as e:
            # Don't raise - audit logging should not break the main flow
            logger.warning("audit_append_failed", error=str(e), event_id=str(event.event_id))
            return False

    def _read_events(self) -> list[AuditEvent]:
        events = []
        for line in self._client.read_lines(self._file_name):
            try:
                events.append(AuditEvent.model_validate_json(line))
            except ValidationError:
                continue  # Skip malformed lines
        return events

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by entity."""
        events = [
            e for e in self._read_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        events = self._read_events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
