"""
Main Orchestrator for LabCash

This module ties together all the components and defines the
end-to-end flows for:
1. Ledger (form input → validate → store → monthly report)
2. Summary (monthly report → AI narrative)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No record is saved unless it passed stage 1 validation
- Every number shown comes from the engine, never from the AI
- Every step is audited

The UI talks ONLY to these flows.
"""

from typing import Any, Mapping, Optional, Union
from uuid import UUID

import structlog

from labcash.agents import MonthlySummary, SummaryAgent
from labcash.audit import AuditLogger, create_correlation_id
from labcash.engine import count_cash
from labcash.models.records import RecordSnapshot
from labcash.models.statement import CashCount, MonthlyReport, Period
from labcash.models.validation import ValidationResult
from labcash.reports import build_monthly_report
from labcash.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemorySnapshotStorage,
    JsonFileAuditStorage,
    JsonFileClient,
    JsonFileSnapshotStorage,
    SnapshotStorageInterface,
    StorageError,
)
from labcash.store import RecordStore
from labcash.validation import RecordValidator


logger = structlog.get_logger(__name__)

# Outcome of a form submission: (validation, message for the user, new snapshot or None)
Submission = tuple[ValidationResult, str, Optional[RecordSnapshot]]

# Summary errors that are expected states rather than service failures
_EXPECTED_SUMMARY_ERRORS = {"missing_api_key", "no_data"}


class LedgerFlow:
    """
    Orchestrates record entry and the monthly report.

    Flow for every form:
    1. Validate → Two-stage validation against the current records
    2. Reject → Errors are audited and reported, nothing is saved
    3. Save → Cleaned values go to the record store (persisted + audited)
    """

    def __init__(
        self,
        store: RecordStore,
        validator: Optional[RecordValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or RecordValidator()
        self._audit_logger = audit_logger

    @property
    def store(self) -> RecordStore:
        return self._store

    async def load(self) -> RecordSnapshot:
        return await self._store.load()

    async def _reject(
        self,
        result: ValidationResult,
        correlation_id: UUID,
    ) -> Submission:
        if self._audit_logger:
            issues = [
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in result.issues
                if i.severity == "error"
            ]
            await self._audit_logger.log_validation_failed(
                record_type=result.record_type,
                issues=issues,
                correlation_id=correlation_id,
            )
        return result, self._validator.get_user_friendly_summary(result), None

    async def submit_revenue_entry(
        self,
        record_date: Any,
        shift: Any,
        amount: Any,
        correlation_id: Optional[UUID] = None,
    ) -> Submission:
        """
        Validate and save a revenue entry.

        Returns:
            (validation_result, user_message, snapshot)
            snapshot is None when nothing was saved.
        """
        correlation_id = correlation_id or create_correlation_id()
        current = await self._store.load()

        result = self._validator.validate_revenue_entry(
            record_date, shift, amount, snapshot=current
        )
        if not result.is_valid:
            return await self._reject(result, correlation_id)

        snapshot = await self._store.add_revenue_entry(
            correlation_id=correlation_id, **result.cleaned
        )
        return result, self._validator.get_user_friendly_summary(result), snapshot

    async def submit_expense(
        self,
        record_date: Any,
        amount: Any,
        description: Any,
        remarks: Any = "",
        correlation_id: Optional[UUID] = None,
    ) -> Submission:
        """Validate and save a shared expense."""
        correlation_id = correlation_id or create_correlation_id()

        result = self._validator.validate_expense(
            record_date, amount, description, remarks
        )
        if not result.is_valid:
            return await self._reject(result, correlation_id)

        snapshot = await self._store.add_expense(
            correlation_id=correlation_id, **result.cleaned
        )
        return result, self._validator.get_user_friendly_summary(result), snapshot

    async def submit_advance(
        self,
        record_date: Any,
        amount: Any,
        staff_id: Any,
        remarks: Any = "",
        correlation_id: Optional[UUID] = None,
    ) -> Submission:
        """Validate and save a personal advance."""
        correlation_id = correlation_id or create_correlation_id()
        current = await self._store.load()

        result = self._validator.validate_advance(
            record_date, amount, staff_id, remarks, snapshot=current
        )
        if not result.is_valid:
            return await self._reject(result, correlation_id)

        snapshot = await self._store.add_advance(
            correlation_id=correlation_id, **result.cleaned
        )
        return result, self._validator.get_user_friendly_summary(result), snapshot

    async def submit_staff(
        self,
        name: Any,
        role: Any = None,
        correlation_id: Optional[UUID] = None,
    ) -> Submission:
        """Validate and add a staff member."""
        correlation_id = correlation_id or create_correlation_id()
        current = await self._store.load()

        result = self._validator.validate_staff(name, role, snapshot=current)
        if not result.is_valid:
            return await self._reject(result, correlation_id)

        snapshot = await self._store.add_staff(
            correlation_id=correlation_id, **result.cleaned
        )
        return result, self._validator.get_user_friendly_summary(result), snapshot

    async def delete_revenue_entry(self, entry_id: UUID) -> RecordSnapshot:
        return await self._store.delete_revenue_entry(entry_id, create_correlation_id())

    async def delete_expense(self, expense_id: UUID) -> RecordSnapshot:
        return await self._store.delete_expense(expense_id, create_correlation_id())

    async def delete_advance(self, advance_id: UUID) -> RecordSnapshot:
        return await self._store.delete_advance(advance_id, create_correlation_id())

    async def remove_staff(self, staff_id: UUID) -> RecordSnapshot:
        return await self._store.remove_staff(staff_id, create_correlation_id())

    async def monthly_report(
        self,
        period: Period,
        correlation_id: Optional[UUID] = None,
    ) -> MonthlyReport:
        """
        Run the engine over the current records for one month.

        Raises:
            StorageError: The saved records could not be read (audited)
        """
        try:
            snapshot = await self._store.load()
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type="storage_read",
                    error_message=str(e),
                    details={"period": str(period)},
                    correlation_id=correlation_id,
                )
            raise

        report = build_monthly_report(snapshot, period)

        if self._audit_logger:
            await self._audit_logger.log_statement_computed(
                period=period,
                statement=report.statement,
                correlation_id=correlation_id,
            )
        return report

    def count_cash(
        self,
        counts: Mapping[int, Union[int, str, None]],
    ) -> CashCount:
        """Total a drawer count. Raises CashCountError on bad input."""
        return count_cash(counts)


class SummaryFlow:
    """
    Orchestrates the AI summary.

    The agent only ever sees a finished MonthlyReport.
    Failures come back as a MonthlySummary with a message, and are audited.
    """

    def __init__(
        self,
        agent: Optional[SummaryAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._agent = agent or SummaryAgent()
        self._audit_logger = audit_logger

    @property
    def is_available(self) -> bool:
        return self._agent.is_available

    async def summarize(
        self,
        report: MonthlyReport,
        correlation_id: Optional[UUID] = None,
    ) -> MonthlySummary:
        correlation_id = correlation_id or create_correlation_id()

        summary = await self._agent.generate_summary(report)

        if self._audit_logger:
            if summary.generated:
                await self._audit_logger.log_summary_generated(
                    period=report.period,
                    model_name=self._agent.model_name,
                    correlation_id=correlation_id,
                )
            else:
                await self._audit_logger.log_summary_failed(
                    period=report.period,
                    reason=summary.error or "unknown",
                    correlation_id=correlation_id,
                )
                if summary.error not in _EXPECTED_SUMMARY_ERRORS:
                    await self._audit_logger.log_external_service_error(
                        service="gemini",
                        error_message=summary.error or "unknown",
                        correlation_id=correlation_id,
                    )

        return summary


def create_app_components(
    use_storage: bool = True,
) -> tuple[LedgerFlow, SummaryFlow, Optional[JsonFileClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the JSON files in the data directory.
                    Set to False for an in-memory session.

    Returns:
        (ledger_flow, summary_flow, json_client)
        json_client is None when running in memory.
    """
    json_client: Optional[JsonFileClient] = None
    snapshot_storage: SnapshotStorageInterface
    audit_storage: AuditStorageInterface

    if use_storage:
        try:
            json_client = JsonFileClient()
            json_client.ensure_data_dir()
            snapshot_storage = JsonFileSnapshotStorage(json_client)
            audit_storage = JsonFileAuditStorage(json_client)
        except StorageError as e:
            # Data directory not usable - continue in memory
            logger.warning("storage_unavailable", error=str(e))
            json_client = None
            snapshot_storage = InMemorySnapshotStorage()
            audit_storage = InMemoryAuditStorage()
    else:
        snapshot_storage = InMemorySnapshotStorage()
        audit_storage = InMemoryAuditStorage()

    audit_logger = AuditLogger(audit_storage)
    store = RecordStore(snapshot_storage, audit_logger)

    ledger_flow = LedgerFlow(store=store, audit_logger=audit_logger)
    summary_flow = SummaryFlow(audit_logger=audit_logger)

    return ledger_flow, summary_flow, json_client
