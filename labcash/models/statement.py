"""
Derived Models for LabCash

Everything in this module is COMPUTED from records, never stored.
Recomputing on every read keeps the numbers honest: there is no
cached statement that can fall out of sync with the records.
"""

import re
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from labcash.models.records import (
    AdvanceRecord,
    ExpenseRecord,
    RevenueEntry,
    ShiftType,
)


_PERIOD_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


# =============================================================================
# PERIOD AND SPLIT
# =============================================================================

class Period(BaseModel):
    """A calendar month, written as YYYY-MM."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    @classmethod
    def parse(cls, value: str) -> "Period":
        """Parse a YYYY-MM string (the format of the month picker)."""
        match = _PERIOD_PATTERN.match(value.strip()) if value else None
        if not match:
            raise ValueError(f"Invalid period {value!r}, expected YYYY-MM")
        return cls(year=int(match.group(1)), month=int(match.group(2)))

    @classmethod
    def from_date(cls, value: date) -> "Period":
        return cls(year=value.year, month=value.month)

    @classmethod
    def current(cls) -> "Period":
        return cls.from_date(date.today())

    def contains(self, value: date) -> bool:
        """Exact calendar-month membership. No timezone involved."""
        return value.year == self.year and value.month == self.month

    def previous(self) -> "Period":
        if self.month == 1:
            return Period(year=self.year - 1, month=12)
        return Period(year=self.year, month=self.month - 1)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def label(self) -> str:
        """Human label, e.g. 'May 2024'."""
        return self.first_day.strftime("%B %Y")

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class RevenueSplit(BaseModel):
    """
    How revenue is divided between the government and the staff pool.

    CRITICAL: the two fractions must add up to exactly one, otherwise
    money would appear or vanish in the split.
    """
    model_config = ConfigDict(frozen=True)

    government_fraction: Decimal = Field(..., ge=0, le=1, allow_inf_nan=False)
    staff_fraction: Decimal = Field(..., ge=0, le=1, allow_inf_nan=False)

    @model_validator(mode="after")
    def validate_total(self) -> "RevenueSplit":
        if self.government_fraction + self.staff_fraction != Decimal("1"):
            raise ValueError(
                "Government and staff fractions must add up to exactly 1 "
                f"(got {self.government_fraction} + {self.staff_fraction})"
            )
        return self


# =============================================================================
# STATEMENT
# =============================================================================

class FinancialStatement(BaseModel):
    """
    The aggregate monthly statement.

    Note: total_advances is reported for information only. Advances are
    personal debts and are netted per person in the ledger, they do NOT
    reduce the distributable pool.
    """
    model_config = ConfigDict(frozen=True)

    total_revenue: Decimal
    government_share: Decimal
    gross_staff_pool: Decimal
    total_expenses: Decimal
    total_advances: Decimal
    distributable_pool: Decimal = Field(
        ...,
        description="Gross staff pool minus shared expenses (may be negative)"
    )
    base_share_per_staff: Decimal = Field(
        ...,
        description="Distributable pool divided by staff count"
    )
    staff_count: int = Field(
        ...,
        ge=1,
        description="Active staff count, floored at 1"
    )

    @property
    def has_deficit(self) -> bool:
        """Expenses exceeded the staff pool this month."""
        return self.distributable_pool < 0


# =============================================================================
# LEDGER
# =============================================================================

class LedgerEntryKind(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class LedgerEntry(BaseModel):
    """One signed line on a personal sheet."""
    model_config = ConfigDict(frozen=True)

    kind: LedgerEntryKind
    description: str
    amount: Decimal = Field(
        ...,
        description="Signed amount: credits positive, debits negative"
    )
    entry_date: Optional[date] = None
    advance_id: Optional[UUID] = None
    remarks: str = ""


class StaffLedger(BaseModel):
    """A staff member's personal sheet for one month."""
    model_config = ConfigDict(frozen=True)

    staff_id: UUID
    staff_name: str
    period: Optional[Period] = None
    base_share: Decimal
    personal_advance_total: Decimal
    net_payable: Decimal = Field(
        ...,
        description="Base share minus personal advances (may be negative)"
    )
    entries: tuple[LedgerEntry, ...] = ()

    @property
    def owes_money(self) -> bool:
        """Advances exceeded the share: the member owes money back."""
        return self.net_payable < 0

    @property
    def advances(self) -> tuple[LedgerEntry, ...]:
        return tuple(e for e in self.entries if e.kind == LedgerEntryKind.DEBIT)


# =============================================================================
# AGGREGATIONS
# =============================================================================

class DailyTotal(BaseModel):
    """Revenue for one day of the month (chart bar)."""
    model_config = ConfigDict(frozen=True)

    day: int = Field(..., ge=1, le=31)
    amount: Decimal

    @property
    def label(self) -> str:
        return f"Day {self.day}"


class ShiftTotal(BaseModel):
    """Revenue for one shift across the month."""
    model_config = ConfigDict(frozen=True)

    shift: ShiftType
    amount: Decimal
    entry_count: int = Field(..., ge=0)


class DayGroup(BaseModel):
    """All entries of one date, in shift order, with the day's total."""
    model_config = ConfigDict(frozen=True)

    record_date: date
    total: Decimal
    entries: tuple[RevenueEntry, ...]


# =============================================================================
# CASH COUNT
# =============================================================================

class CashCountLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    denomination: int = Field(..., gt=0)
    count: int = Field(..., ge=0)

    @property
    def subtotal(self) -> int:
        return self.denomination * self.count


class CashCount(BaseModel):
    """Result of counting a drawer by denomination."""
    model_config = ConfigDict(frozen=True)

    lines: tuple[CashCountLine, ...]

    @property
    def total(self) -> int:
        return sum(line.subtotal for line in self.lines)

    @property
    def note_count(self) -> int:
        return sum(line.count for line in self.lines)


# =============================================================================
# MONTHLY REPORT
# =============================================================================

class MonthlyReport(BaseModel):
    """
    Everything the UI and the summary agent need for one month.

    Built deterministically by labcash.reports.builder.
    """
    model_config = ConfigDict(frozen=True)

    period: Period
    statement: FinancialStatement
    ledgers: tuple[StaffLedger, ...] = ()
    daily_totals: tuple[DailyTotal, ...] = ()
    day_groups: tuple[DayGroup, ...] = ()
    shift_totals: tuple[ShiftTotal, ...] = ()

    # Period subsets of the raw records
    entries: tuple[RevenueEntry, ...] = ()
    expenses: tuple[ExpenseRecord, ...] = ()
    advances: tuple[AdvanceRecord, ...] = ()
    orphaned_advances: tuple[AdvanceRecord, ...] = Field(
        default=(),
        description="Advances whose staff member is no longer on the roster"
    )

    @property
    def has_revenue(self) -> bool:
        return len(self.entries) > 0

    @property
    def best_shift(self) -> Optional[ShiftTotal]:
        """Highest earning shift; earliest shift wins a tie."""
        best = None
        for total in self.shift_totals:
            if total.entry_count and (best is None or total.amount > best.amount):
                best = total
        return best
