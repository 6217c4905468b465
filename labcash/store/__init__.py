"""Record store package."""

from labcash.store.record_store import RecordStore

__all__ = ["RecordStore"]
