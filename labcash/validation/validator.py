"""
Two-Stage Validation Pipeline

DESIGN DECISION: Form input is checked in two distinct stages before
it becomes a record:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Amount is a finite number above zero
- Date is a real YYYY-MM-DD date
- Shift is one of the three shifts
- Text fits the record's length limits
- This catches typos and malformed input

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Absurd amount detection
- Duplicate revenue entry detection
- This catches input that is possible but suspicious

Stage 2 only ever produces warnings. The user may save anyway.

IMPORTANT: Validation NEVER silently fixes issues.
A bad amount is reported, not read as zero.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import UUID

from labcash.config import get_settings
from labcash.models.records import (
    AdvanceRecord,
    ExpenseRecord,
    RecordSnapshot,
    ShiftType,
    StaffMember,
)
from labcash.models.validation import ValidationIssue, ValidationResult


DATE_FORMAT = "%Y-%m-%d"


def _is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _max_length(model: type, field: str) -> Optional[int]:
    """Length limit declared on a record model field."""
    for constraint in model.model_fields[field].metadata:
        limit = getattr(constraint, "max_length", None)
        if limit is not None:
            return limit
    return None


class RecordValidator:
    """
    Validates raw form values for the four record types.

    Each validate_* method returns a ValidationResult. When stage 1
    passed, result.cleaned holds the parsed values keyed the way the
    record store's add_* methods expect them.
    """

    def __init__(self):
        self._settings = get_settings().app

    # =========================================================================
    # FIELD PARSERS (stage 1)
    # =========================================================================

    def _parse_amount(
        self,
        raw: Any,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        if _is_blank(raw):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter the amount in whole rupees",
            ))
            return None

        if isinstance(raw, bool):
            value = None
        elif isinstance(raw, Decimal):
            value = raw
        elif isinstance(raw, (int, float)):
            value = Decimal(str(raw))
        else:
            try:
                value = Decimal(str(raw).strip().replace(",", ""))
            except InvalidOperation:
                value = None

        if value is None or not value.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount ({raw}) is not a number",
                severity="error",
                suggested_fix="Use digits only, e.g. 2500",
            ))
            return None

        if value <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="To undo a record, delete it instead",
            ))
            return None

        return value

    def _parse_date(
        self,
        raw: Any,
        issues: list[ValidationIssue],
    ) -> Optional[date]:
        if _is_blank(raw):
            issues.append(ValidationIssue(
                field="record_date",
                issue_type="missing",
                message="Date is required",
                severity="error",
            ))
            return None

        if isinstance(raw, datetime):
            return raw.date()
        if isinstance(raw, date):
            return raw

        try:
            return datetime.strptime(str(raw).strip(), DATE_FORMAT).date()
        except ValueError:
            issues.append(ValidationIssue(
                field="record_date",
                issue_type="invalid_format",
                message=f"Date ({raw}) is not a valid date",
                severity="error",
                suggested_fix="Use the format YYYY-MM-DD",
            ))
            return None

    def _parse_shift(
        self,
        raw: Any,
        issues: list[ValidationIssue],
    ) -> Optional[ShiftType]:
        if isinstance(raw, ShiftType):
            return raw

        if not _is_blank(raw):
            text = str(raw).strip().lower()
            for shift in ShiftType:
                if shift.value.lower() == text:
                    return shift

        choices = ", ".join(s.value for s in ShiftType)
        issues.append(ValidationIssue(
            field="shift",
            issue_type="missing" if _is_blank(raw) else "invalid_value",
            message=f"Shift must be one of: {choices}",
            severity="error",
        ))
        return None

    def _parse_text(
        self,
        field: str,
        label: str,
        raw: Any,
        issues: list[ValidationIssue],
        max_length: Optional[int] = None,
        required: bool = True,
    ) -> Optional[str]:
        if _is_blank(raw):
            if required:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{label} is required",
                    severity="error",
                ))
            return None

        text = str(raw).strip()
        if max_length is not None and len(text) > max_length:
            issues.append(ValidationIssue(
                field=field,
                issue_type="too_long",
                message=f"{label} must be at most {max_length} characters (got {len(text)})",
                severity="error",
                suggested_fix="Please shorten it",
            ))
            return None
        return text

    # =========================================================================
    # STAGE 2 CHECKS
    # =========================================================================

    def _check_date_semantics(self, value: date) -> list[ValidationIssue]:
        issues = []
        max_future_days = self._settings.future_date_tolerance_days
        max_future_date = date.today() + timedelta(days=max_future_days)

        if value > max_future_date:
            issues.append(ValidationIssue(
                field="record_date",
                issue_type="future_date",
                message=f"Date ({value}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))
        return issues

    def _check_amount_semantics(self, value: Decimal) -> list[ValidationIssue]:
        issues = []
        max_amount = Decimal(str(self._settings.max_amount))
        if value > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({value:,}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))
        return issues

    def _check_duplicate_entry(
        self,
        record_date: date,
        shift: ShiftType,
        amount: Decimal,
        snapshot: Optional[RecordSnapshot],
    ) -> list[ValidationIssue]:
        """Same day, same shift, same amount is most likely entered twice."""
        if snapshot is None:
            return []

        for entry in snapshot.entries:
            if (
                entry.record_date == record_date
                and entry.shift == shift
                and entry.amount == amount
            ):
                return [ValidationIssue(
                    field="duplicate",
                    issue_type="potential_duplicate",
                    message=(
                        f"{shift.value} shift on {record_date} already has "
                        f"an entry of {amount:,}"
                    ),
                    severity="warning",
                    suggested_fix="Please verify this isn't a duplicate entry",
                )]
        return []

    # =========================================================================
    # RESULT
    # =========================================================================

    def _result(
        self,
        record_type: str,
        schema_issues: list[ValidationIssue],
        semantic_issues: list[ValidationIssue],
        cleaned: dict[str, Any],
    ) -> ValidationResult:
        schema_valid = not any(i.severity == "error" for i in schema_issues)

        # Stage 2 only runs when stage 1 passed
        semantic_valid = False
        all_issues = list(schema_issues)
        if schema_valid:
            all_issues.extend(semantic_issues)
            semantic_valid = not any(i.severity == "error" for i in semantic_issues)

        warnings = [i.message for i in all_issues if i.severity == "warning"]

        return ValidationResult(
            record_type=record_type,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
            cleaned=cleaned if schema_valid else {},
        )

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def validate_revenue_entry(
        self,
        record_date: Any,
        shift: Any,
        amount: Any,
        snapshot: Optional[RecordSnapshot] = None,
    ) -> ValidationResult:
        """
        Validate a revenue entry form.

        Args:
            snapshot: Current records, used for the duplicate check.
                      If None, duplicate checking is skipped.
        """
        issues: list[ValidationIssue] = []
        parsed_date = self._parse_date(record_date, issues)
        parsed_shift = self._parse_shift(shift, issues)
        parsed_amount = self._parse_amount(amount, issues)

        semantic: list[ValidationIssue] = []
        cleaned: dict[str, Any] = {}
        if not issues:
            semantic.extend(self._check_date_semantics(parsed_date))
            semantic.extend(self._check_amount_semantics(parsed_amount))
            semantic.extend(self._check_duplicate_entry(
                parsed_date, parsed_shift, parsed_amount, snapshot
            ))
            cleaned = {
                "record_date": parsed_date,
                "shift": parsed_shift,
                "amount": parsed_amount,
            }

        return self._result("entry", issues, semantic, cleaned)

    def validate_expense(
        self,
        record_date: Any,
        amount: Any,
        description: Any,
        remarks: Any = "",
    ) -> ValidationResult:
        """Validate an expense form. A description is mandatory."""
        issues: list[ValidationIssue] = []
        parsed_date = self._parse_date(record_date, issues)
        parsed_amount = self._parse_amount(amount, issues)
        parsed_description = self._parse_text(
            "description", "Description", description, issues,
            max_length=_max_length(ExpenseRecord, "description"),
        )
        parsed_remarks = self._parse_text(
            "remarks", "Remarks", remarks, issues,
            max_length=_max_length(ExpenseRecord, "remarks"), required=False,
        )

        semantic: list[ValidationIssue] = []
        cleaned: dict[str, Any] = {}
        if not issues:
            semantic.extend(self._check_date_semantics(parsed_date))
            semantic.extend(self._check_amount_semantics(parsed_amount))
            cleaned = {
                "record_date": parsed_date,
                "amount": parsed_amount,
                "description": parsed_description,
                "remarks": parsed_remarks or "",
            }

        return self._result("expense", issues, semantic, cleaned)

    def validate_advance(
        self,
        record_date: Any,
        amount: Any,
        staff_id: Any,
        remarks: Any = "",
        snapshot: Optional[RecordSnapshot] = None,
    ) -> ValidationResult:
        """
        Validate an advance form.

        Args:
            snapshot: Current records. When given, staff_id must be on
                      its roster.
        """
        issues: list[ValidationIssue] = []
        parsed_date = self._parse_date(record_date, issues)
        parsed_amount = self._parse_amount(amount, issues)
        parsed_remarks = self._parse_text(
            "remarks", "Remarks", remarks, issues,
            max_length=_max_length(AdvanceRecord, "remarks"), required=False,
        )

        parsed_staff_id: Optional[UUID] = None
        if _is_blank(staff_id):
            issues.append(ValidationIssue(
                field="staff_id",
                issue_type="missing",
                message="Please select a staff member",
                severity="error",
            ))
        else:
            try:
                parsed_staff_id = staff_id if isinstance(staff_id, UUID) else UUID(str(staff_id))
            except ValueError:
                parsed_staff_id = None

            if parsed_staff_id is None or (
                snapshot is not None and snapshot.find_staff(parsed_staff_id) is None
            ):
                issues.append(ValidationIssue(
                    field="staff_id",
                    issue_type="not_found",
                    message="Selected staff member does not exist",
                    severity="error",
                    suggested_fix="Add them on the Staff page first",
                ))

        semantic: list[ValidationIssue] = []
        cleaned: dict[str, Any] = {}
        if not issues:
            semantic.extend(self._check_date_semantics(parsed_date))
            semantic.extend(self._check_amount_semantics(parsed_amount))
            cleaned = {
                "record_date": parsed_date,
                "amount": parsed_amount,
                "staff_id": parsed_staff_id,
                "remarks": parsed_remarks or "",
            }

        return self._result("advance", issues, semantic, cleaned)

    def validate_staff(
        self,
        name: Any,
        role: Any = None,
        snapshot: Optional[RecordSnapshot] = None,
    ) -> ValidationResult:
        """Validate a new staff member. Warns when the name is already on the roster."""
        issues: list[ValidationIssue] = []
        parsed_name = self._parse_text(
            "name", "Name", name, issues,
            max_length=_max_length(StaffMember, "name"),
        )
        parsed_role = self._parse_text(
            "role", "Role", role, issues,
            max_length=_max_length(StaffMember, "role"), required=False,
        )

        semantic: list[ValidationIssue] = []
        cleaned: dict[str, Any] = {}
        if not issues:
            if snapshot is not None and any(
                m.name.casefold() == parsed_name.casefold() for m in snapshot.staff
            ):
                semantic.append(ValidationIssue(
                    field="name",
                    issue_type="potential_duplicate",
                    message=f"{parsed_name} is already on the staff list",
                    severity="warning",
                    suggested_fix="Two members with the same name will be hard to tell apart",
                ))
            cleaned = {
                "name": parsed_name,
                "role": parsed_role,
            }

        return self._result("staff", issues, semantic, cleaned)

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what we show next to the form.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if not result.schema_valid:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        if result.is_valid:
            lines.append("")
            lines.append("You can still save, but please double-check.")

        return "\n".join(lines)
