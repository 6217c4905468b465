"""
Record Models for LabCash

These are the four raw collections the business records by hand:
revenue entries, expenses, advances and the staff roster.

They are designed to:
1. Reject bad money at the boundary (non-positive, NaN, infinite)
2. Be immutable once created (records are added or deleted, never edited)
3. Serialize to plain JSON for the local blob storage

DESIGN DECISION: Amounts are Decimal, never float.
Sums of many small cash amounts must not drift.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)


# =============================================================================
# ENUMS
# =============================================================================

class ShiftType(str, Enum):
    """
    The three fixed daily work periods.

    Values are the labels shown on the entry form and stored in the JSON files.
    """
    MORNING = "Morning"
    EVENING = "Evening"
    NIGHT = "Night"


# =============================================================================
# RECORDS
# =============================================================================

def _utcnow() -> datetime:
    return datetime.utcnow()


class RevenueEntry(BaseModel):
    """
    One recorded cash amount for a single shift on a single day.

    Several entries for the same day and shift are allowed
    (e.g. two cash drops during the night shift).
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique entry ID"
    )
    record_date: date = Field(
        ...,
        description="Day the cash was collected"
    )
    shift: ShiftType = Field(
        ...,
        description="Shift the cash belongs to"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Cash amount"
    )
    recorded_at: datetime = Field(
        default_factory=_utcnow,
        description="When the entry was submitted"
    )


class ExpenseRecord(BaseModel):
    """A shared operating expense, paid out of the staff pool."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    record_date: date
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Expense amount"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was spent on (required)"
    )
    remarks: str = Field(
        default="",
        max_length=500,
    )
    recorded_at: datetime = Field(default_factory=_utcnow)


class AdvanceRecord(BaseModel):
    """
    A personal cash draw against one staff member's share.

    DESIGN DECISION: staff_name is a copy taken when the advance is
    recorded, not a live lookup. When the staff member is later removed
    from the roster the advance still reads correctly in every ledger.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    staff_id: UUID = Field(
        ...,
        description="Staff member the advance was paid to"
    )
    staff_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Name of the staff member at the time of the advance"
    )
    record_date: date
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Advance amount"
    )
    remarks: str = Field(
        default="",
        max_length=500,
    )
    recorded_at: datetime = Field(default_factory=_utcnow)


class StaffMember(BaseModel):
    """A member of the staff pool."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name (required)"
    )
    role: Optional[str] = Field(
        default=None,
        max_length=100,
    )
    joined_date: date = Field(default_factory=date.today)


# =============================================================================
# SNAPSHOT
# =============================================================================

class RecordSnapshot(BaseModel):
    """
    Immutable view of all four collections at one point in time.

    The record store hands these out; the engine only ever reads them.
    Collections keep insertion order.
    """
    model_config = ConfigDict(frozen=True)

    entries: tuple[RevenueEntry, ...] = ()
    expenses: tuple[ExpenseRecord, ...] = ()
    advances: tuple[AdvanceRecord, ...] = ()
    staff: tuple[StaffMember, ...] = ()

    def find_staff(self, staff_id: UUID) -> Optional[StaffMember]:
        """Look up an active staff member by ID."""
        for member in self.staff:
            if member.id == staff_id:
                return member
        return None

    @property
    def is_empty(self) -> bool:
        return not (self.entries or self.expenses or self.advances or self.staff)
