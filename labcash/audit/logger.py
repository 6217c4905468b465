"""
Audit Logger

DESIGN DECISION: Every change to the records is logged.
This provides:
1. A trail of who-added-what when a payout is questioned
2. Debugging capability
3. Evidence that a removed staff member's advances were kept

The audit logger:
- Is async to match the storage interface
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from labcash.models.audit import AuditEvent, AuditEventBuilder
from labcash.models.records import (
    AdvanceRecord,
    ExpenseRecord,
    RevenueEntry,
    StaffMember,
)
from labcash.models.statement import FinancialStatement, Period
from labcash.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def _record_type(record) -> str:
    if isinstance(record, RevenueEntry):
        return "entry"
    if isinstance(record, ExpenseRecord):
        return "expense"
    if isinstance(record, AdvanceRecord):
        return "advance"
    raise TypeError(f"Not an auditable record: {type(record).__name__}")


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("labcash.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_record_added(
        self,
        record: RevenueEntry | ExpenseRecord | AdvanceRecord,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new entry, expense or advance."""
        details = {}
        if isinstance(record, RevenueEntry):
            details["shift"] = record.shift.value
        elif isinstance(record, ExpenseRecord):
            details["description"] = record.description
        elif isinstance(record, AdvanceRecord):
            details["staff_id"] = str(record.staff_id)
            details["staff_name"] = record.staff_name

        event = AuditEventBuilder.record_added(
            record_type=_record_type(record),
            record_id=record.id,
            amount=str(record.amount),
            record_date=record.record_date.isoformat(),
            correlation_id=correlation_id,
            details=details,
        )
        await self.log(event)

    async def log_record_deleted(
        self,
        record: RevenueEntry | ExpenseRecord | AdvanceRecord,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a deleted entry, expense or advance."""
        event = AuditEventBuilder.record_deleted(
            record_type=_record_type(record),
            record_id=record.id,
            amount=str(record.amount),
            record_date=record.record_date.isoformat(),
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_staff_added(
        self,
        member: StaffMember,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.staff_added(
            staff_id=member.id,
            name=member.name,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_staff_removed(
        self,
        member: StaffMember,
        retained_advances: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.staff_removed(
            staff_id=member.id,
            name=member.name,
            retained_advances=retained_advances,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        record_type: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log rejected form input."""
        event = AuditEventBuilder.validation_failed(
            record_type=record_type,
            issues=issues,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_statement_computed(
        self,
        period: Period,
        statement: FinancialStatement,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.statement_computed(
            period=str(period),
            total_revenue=str(statement.total_revenue),
            distributable_pool=str(statement.distributable_pool),
            staff_count=statement.staff_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_summary_generated(
        self,
        period: Period,
        model_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.summary_generated(
            period=str(period),
            model_name=model_name,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_summary_failed(
        self,
        period: Period,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.summary_failed(
            period=str(period),
            reason=reason,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_save_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.save_failed(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., one form submission).
    Pass it through all subsequent operations.
    """
    return uuid4()
