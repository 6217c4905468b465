"""
Audit Models for LabCash

Every change to the records is logged for audit purposes.
When the month's payout is disputed, the audit log answers
"who added that advance, and when?".

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Revenue entries
    ENTRY_ADDED = "entry_added"
    ENTRY_DELETED = "entry_deleted"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"

    # Advances
    ADVANCE_ADDED = "advance_added"
    ADVANCE_DELETED = "advance_deleted"

    # Roster
    STAFF_ADDED = "staff_added"
    STAFF_REMOVED = "staff_removed"

    # Input checks
    VALIDATION_FAILED = "validation_failed"

    # Reporting
    STATEMENT_COMPUTED = "statement_computed"
    SUMMARY_GENERATED = "summary_generated"
    SUMMARY_FAILED = "summary_failed"

    # Persistence
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every record change creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'advance', 'staff')"
    )
    entity_id: Optional[UUID] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one form submission)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


_ADDED_EVENTS = {
    "entry": AuditEventType.ENTRY_ADDED,
    "expense": AuditEventType.EXPENSE_ADDED,
    "advance": AuditEventType.ADVANCE_ADDED,
}

_DELETED_EVENTS = {
    "entry": AuditEventType.ENTRY_DELETED,
    "expense": AuditEventType.EXPENSE_DELETED,
    "advance": AuditEventType.ADVANCE_DELETED,
}


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_added("entry", entry.id, "2500", correlation_id)
        event = AuditEventBuilder.staff_removed(staff_id, "Ali", 3, correlation_id)
    """

    @staticmethod
    def record_added(
        record_type: str,
        record_id: UUID,
        amount: str,
        record_date: str,
        correlation_id: Optional[UUID] = None,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=_ADDED_EVENTS[record_type],
            entity_type=record_type,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"{record_type.capitalize()} added: {amount} on {record_date}",
            details={
                "amount": amount,
                "record_date": record_date,
                **(details or {}),
            },
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(
        record_type: str,
        record_id: UUID,
        amount: str,
        record_date: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=_DELETED_EVENTS[record_type],
            severity=AuditSeverity.WARNING,
            entity_type=record_type,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"{record_type.capitalize()} deleted: {amount} on {record_date}",
            details={
                "amount": amount,
                "record_date": record_date,
            },
            is_user_action=True,
        )

    @staticmethod
    def staff_added(
        staff_id: UUID,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STAFF_ADDED,
            entity_type="staff",
            entity_id=staff_id,
            correlation_id=correlation_id,
            description=f"Staff member added: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def staff_removed(
        staff_id: UUID,
        name: str,
        retained_advances: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STAFF_REMOVED,
            severity=AuditSeverity.WARNING,
            entity_type="staff",
            entity_id=staff_id,
            correlation_id=correlation_id,
            description=(
                f"Staff member removed: {name} "
                f"({retained_advances} advances kept)"
            ),
            details={
                "name": name,
                "retained_advances": retained_advances,
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        record_type: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=record_type,
            correlation_id=correlation_id,
            description=f"{record_type.capitalize()} rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def statement_computed(
        period: str,
        total_revenue: str,
        distributable_pool: str,
        staff_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATEMENT_COMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="statement",
            correlation_id=correlation_id,
            description=f"Statement computed for {period}",
            details={
                "period": period,
                "total_revenue": total_revenue,
                "distributable_pool": distributable_pool,
                "staff_count": staff_count,
            },
        )

    @staticmethod
    def summary_generated(
        period: str,
        model_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_GENERATED,
            entity_type="summary",
            correlation_id=correlation_id,
            description=f"AI summary generated for {period}",
            details={
                "period": period,
                "model_name": model_name,
            },
            is_user_action=True,
        )

    @staticmethod
    def summary_failed(
        period: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="summary",
            correlation_id=correlation_id,
            description=f"AI summary not generated for {period}",
            error_message=reason,
            details={"period": period},
        )

    @staticmethod
    def save_failed(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Failed to persist records during {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
