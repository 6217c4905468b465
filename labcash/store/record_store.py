"""
Record Store

DESIGN DECISION: The four collections are owned by one object that
hands out immutable snapshots.

- Every mutation builds a NEW snapshot; the previous one is untouched
- The new snapshot is persisted BEFORE it becomes current, so a failed
  save never leaves the app showing data that isn't on disk
- Every successful mutation is audited

Records are only ever added or deleted. There is no edit: a wrong
entry is deleted and entered again, which keeps the audit trail simple.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

import structlog

from labcash.audit import AuditLogger
from labcash.models.records import (
    AdvanceRecord,
    ExpenseRecord,
    RecordSnapshot,
    RevenueEntry,
    ShiftType,
    StaffMember,
)
from labcash.services.storage import (
    NotFoundError,
    SnapshotStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

Amount = Union[Decimal, int, str]


class RecordStore:
    """
    Add/delete operations over the revenue, expense, advance and staff
    collections.

    Usage:
        store = RecordStore(JsonFileSnapshotStorage(), AuditLogger())
        snapshot = await store.add_revenue_entry(date.today(), "Morning", "2500")
    """

    def __init__(
        self,
        storage: SnapshotStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._snapshot: Optional[RecordSnapshot] = None

    async def load(self, refresh: bool = False) -> RecordSnapshot:
        """
        Get the current snapshot, reading storage on first use.

        Raises:
            StorageError: If the stored data cannot be read
        """
        if self._snapshot is None or refresh:
            self._snapshot = await self._storage.load_snapshot()
        return self._snapshot

    async def _commit(
        self,
        snapshot: RecordSnapshot,
        operation: str,
        correlation_id: Optional[UUID],
    ) -> RecordSnapshot:
        try:
            await self._storage.save_snapshot(snapshot)
        except StorageError as e:
            await self._audit.log_save_failed(
                operation=operation,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        self._snapshot = snapshot
        logger.debug("records_committed", operation=operation)
        return snapshot

    # =========================================================================
    # REVENUE ENTRIES
    # =========================================================================

    async def add_revenue_entry(
        self,
        record_date: date,
        shift: Union[ShiftType, str],
        amount: Amount,
        correlation_id: Optional[UUID] = None,
    ) -> RecordSnapshot:
        """
        Record cash for one shift.

        Raises:
            pydantic.ValidationError: bad shift or non-positive amount
        """
        current = await self.load()
        entry = RevenueEntry(record_date=record_date, shift=shift, amount=amount)

        snapshot = await self._commit(
            current.model_copy(update={"entries": current.entries + (entry,)}),
            "add_revenue_entry",
            correlation_id,
        )
        await self._audit.log_record_added(entry, correlation_id)
        return snapshot

    async def delete_revenue_entry(
        self,
        entry_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> RecordSnapshot:
        current = await self.load()
        entry, remaining = _split_out(current.entries, entry_id, "Revenue entry")

        snapshot = await self._commit(
            current.model_copy(update={"entries": remaining}),
            "delete_revenue_entry",
            correlation_id,
        )
        await self._audit.log_record_deleted(entry, correlation_id)
        return snapshot

    # =========================================================================
    # EXPENSES
    # =========================================================================

    async def add_expense(
        self,
        record_date: date,
        amount: Amount,
        description: str,
        remarks: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> RecordSnapshot:
        """Record a shared expense (paid out of the staff pool)."""
        current = await self.load()
        expense = ExpenseRecord(
            record_date=record_date,
            amount=amount,
            description=description,
            remarks=remarks,
        )

        snapshot = await self._commit(
            current.model_copy(update={"expenses": current.expenses + (expense,)}),
            "add_expense",
            correlation_id,
        )
        await self._audit.log_record_added(expense, correlation_id)
        return snapshot

    async def delete_expense(
        self,
        expense_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> RecordSnapshot:
        current = await self.load()
        expense, remaining = _split_out(current.expenses, expense_id, "Expense")

        snapshot = await self._commit(
            current.model_copy(update={"expenses": remaining}),
            "delete_expense",
            correlation_id,
        )
        await self._audit.log_record_deleted(expense, correlation_id)
        return snapshot

    # =========================================================================
    # ADVANCES
    # =========================================================================

    async def add_advance(
        self,
        record_date: date,
        amount: Amount,
        staff_id: UUID,
        remarks: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> RecordSnapshot:
        """
        Record a personal advance.

        The staff member's current name is copied onto the advance.

        Raises:
            NotFoundError: staff_id is not on the roster
        """
        current = await self.load()
        member = current.find_staff(staff_id)
        if member is None:
            raise NotFoundError(f"Staff member not found: {staff_id}")

        advance = AdvanceRecord(
            staff_id=member.id,
            staff_name=member.name,
            record_date=record_date,
            amount=amount,
            remarks=remarks,
        )

        snapshot = await self._commit(
            current.model_copy(update={"advances": current.advances + (advance,)}),
            "add_advance",
            correlation_id,
        )
        await self._audit.log_record_added(advance, correlation_id)
        return snapshot

    async def delete_advance(
        self,
        advance_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> RecordSnapshot:
        current = await self.load()
        advance, remaining = _split_out(current.advances, advance_id, "Advance")

        snapshot = await self._commit(
            current.model_copy(update={"advances": remaining}),
            "delete_advance",
            correlation_id,
        )
        await self._audit.log_record_deleted(advance, correlation_id)
        return snapshot

    # =========================================================================
    # STAFF
    # =========================================================================

    async def add_staff(
        self,
        name: str,
        role: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> RecordSnapshot:
        current = await self.load()
        member = StaffMember(name=name, role=role or None)

        snapshot = await self._commit(
            current.model_copy(update={"staff": current.staff + (member,)}),
            "add_staff",
            correlation_id,
        )
        await self._audit.log_staff_added(member, correlation_id)
        return snapshot

    async def remove_staff(
        self,
        staff_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> RecordSnapshot:
        """
        Take a member off the roster.

        Their advances are kept, still carrying the name they were
        recorded under.
        """
        current = await self.load()
        member, remaining = _split_out(current.staff, staff_id, "Staff member")

        snapshot = await self._commit(
            current.model_copy(update={"staff": remaining}),
            "remove_staff",
            correlation_id,
        )
        retained = sum(1 for a in snapshot.advances if a.staff_id == staff_id)
        await self._audit.log_staff_removed(member, retained, correlation_id)
        return snapshot


def _split_out(records: tuple, record_id: UUID, label: str):
    """Return (the record with record_id, all the others)."""
    found = None
    remaining = []
    for record in records:
        if found is None and record.id == record_id:
            found = record
        else:
            remaining.append(record)

    if found is None:
        raise NotFoundError(f"{label} not found: {record_id}")
    return found, tuple(remaining)
