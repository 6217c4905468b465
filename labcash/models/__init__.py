"""
Data Models Package

This package contains all Pydantic models used in LabCash.
Raw records, derived statements and audit events all live here.
"""

from labcash.models.records import (
    AdvanceRecord,
    ExpenseRecord,
    RecordSnapshot,
    RevenueEntry,
    ShiftType,
    StaffMember,
)
from labcash.models.statement import (
    CashCount,
    CashCountLine,
    DailyTotal,
    DayGroup,
    FinancialStatement,
    LedgerEntry,
    LedgerEntryKind,
    MonthlyReport,
    Period,
    RevenueSplit,
    ShiftTotal,
    StaffLedger,
)
from labcash.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from labcash.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Records
    "AdvanceRecord",
    "ExpenseRecord",
    "RecordSnapshot",
    "RevenueEntry",
    "ShiftType",
    "StaffMember",
    # Derived
    "CashCount",
    "CashCountLine",
    "DailyTotal",
    "DayGroup",
    "FinancialStatement",
    "LedgerEntry",
    "LedgerEntryKind",
    "MonthlyReport",
    "Period",
    "RevenueSplit",
    "ShiftTotal",
    "StaffLedger",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
