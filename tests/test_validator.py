"""Tests for the two-stage form validation."""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

from labcash.models.records import RecordSnapshot, ShiftType
from labcash.validation import RecordValidator


@pytest.fixture
def validator():
    return RecordValidator()


class TestRevenueEntryValidation:
    """Tests for validate_revenue_entry."""

    def test_valid_entry_is_cleaned(self, validator):
        """Test that raw strings become typed values."""
        result = validator.validate_revenue_entry("2024-05-02", "evening", "2,500")

        assert result.is_valid
        assert result.schema_valid and result.semantic_valid
        assert result.cleaned == {
            "record_date": date(2024, 5, 2),
            "shift": ShiftType.EVENING,
            "amount": Decimal("2500"),
        }
        assert validator.get_user_friendly_summary(result).startswith("✅")

    @pytest.mark.parametrize("amount", ["0", "-5", "abc", "NaN", "inf", "", None, True])
    def test_rejects_bad_amounts(self, validator, amount):
        """Test that unusable amounts are errors."""
        result = validator.validate_revenue_entry(date(2024, 5, 2), "Morning", amount)

        assert not result.is_valid
        assert not result.schema_valid
        assert result.cleaned == {}
        assert any(i.field == "amount" and i.severity == "error" for i in result.issues)

    @pytest.mark.parametrize("value", ["2024-02-30", "02/05/2024", "tomorrow", ""])
    def test_rejects_bad_dates(self, validator, value):
        """Test that impossible or malformed dates are errors."""
        result = validator.validate_revenue_entry(value, "Morning", "100")
        assert not result.is_valid
        assert any(i.field == "record_date" for i in result.issues)

    def test_rejects_unknown_shift(self, validator):
        """Test that shifts outside the three are errors."""
        result = validator.validate_revenue_entry("2024-05-02", "Afternoon", "100")
        assert not result.is_valid
        assert result.issues[0].field == "shift"

    def test_reports_every_error_at_once(self, validator):
        """Test that stage 1 collects all field errors."""
        result = validator.validate_revenue_entry("bad", "bad", "bad")
        assert result.error_count == 3
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("❌")

    def test_duplicate_is_a_warning(self, validator, make_entry):
        """Test that the same date, shift and amount is flagged but allowed."""
        snapshot = RecordSnapshot(entries=(make_entry(2, "2500", ShiftType.NIGHT),))

        result = validator.validate_revenue_entry(
            "2024-05-02", "Night", "2500", snapshot=snapshot
        )

        assert result.is_valid
        assert len(result.warnings) == 1
        assert result.issues[0].issue_type == "potential_duplicate"

    def test_future_date_is_a_warning(self, validator):
        """Test that dates beyond the tolerance are flagged."""
        result = validator.validate_revenue_entry(
            date.today() + timedelta(days=5), "Morning", "100"
        )
        assert result.is_valid
        assert any(i.issue_type == "future_date" for i in result.issues)

    def test_tomorrow_is_within_tolerance(self, validator):
        """Test the default one-day tolerance."""
        result = validator.validate_revenue_entry(
            date.today() + timedelta(days=1), "Morning", "100"
        )
        assert result.warnings == []

    def test_huge_amount_is_a_warning(self, validator):
        """Test the sanity ceiling."""
        result = validator.validate_revenue_entry("2024-05-02", "Morning", "9000000")
        assert result.is_valid
        assert result.issues[0].issue_type == "suspicious_value"


class TestOtherValidation:
    """Tests for expenses, advances and staff."""

    def test_expense_requires_description(self, validator):
        """Test that a blank description is an error."""
        result = validator.validate_expense("2024-05-02", "500", "  ")
        assert not result.is_valid
        assert result.issues[0].field == "description"

    def test_expense_cleaned(self, validator):
        """Test expense cleaning with optional remarks."""
        result = validator.validate_expense("2024-05-02", 500, " Tea ", None)
        assert result.cleaned == {
            "record_date": date(2024, 5, 2),
            "amount": Decimal("500"),
            "description": "Tea",
            "remarks": "",
        }

    def test_advance_requires_existing_staff(self, validator, make_staff):
        """Test that the staff member must be on the roster."""
        member = make_staff()
        snapshot = RecordSnapshot(staff=(member,))

        ok = validator.validate_advance("2024-05-02", "300", str(member.id), snapshot=snapshot)
        missing = validator.validate_advance("2024-05-02", "300", uuid4(), snapshot=snapshot)
        garbage = validator.validate_advance("2024-05-02", "300", "not-an-id")

        assert ok.is_valid
        assert ok.cleaned["staff_id"] == member.id
        assert not missing.is_valid
        assert missing.issues[0].issue_type == "not_found"
        assert not garbage.is_valid

    def test_advance_requires_staff_selection(self, validator):
        """Test that an empty staff selection is an error."""
        result = validator.validate_advance("2024-05-02", "300", None)
        assert result.issues[0].issue_type == "missing"

    def test_staff_name_required(self, validator):
        """Test that a blank name is an error."""
        assert not validator.validate_staff("").is_valid

    def test_duplicate_staff_name_is_a_warning(self, validator, make_staff):
        """Test that a repeated name is flagged but allowed."""
        snapshot = RecordSnapshot(staff=(make_staff("Ali"),))
        result = validator.validate_staff("ali", "Technician", snapshot=snapshot)

        assert result.is_valid
        assert result.warnings
        assert result.cleaned == {"name": "ali", "role": "Technician"}
        assert "⚠️" in validator.get_user_friendly_summary(result)

    @pytest.mark.parametrize("form, field", [
        (lambda v: v.validate_expense("2024-05-02", "500", "x" * 201), "description"),
        (lambda v: v.validate_expense("2024-05-02", "500", "Tea", "r" * 501), "remarks"),
        (lambda v: v.validate_advance("2024-05-02", "300", uuid4(), "r" * 501), "remarks"),
        (lambda v: v.validate_staff("n" * 101), "name"),
        (lambda v: v.validate_staff("Ali", "r" * 101), "role"),
    ])
    def test_text_over_record_limits_is_an_error(self, validator, form, field):
        """Test that text longer than the record allows fails stage 1."""
        result = form(validator)

        assert not result.schema_valid
        assert result.cleaned == {}
        assert [i.field for i in result.issues] == [field]
        assert result.issues[0].issue_type == "too_long"

    def test_text_at_record_limits_is_accepted(self, validator):
        """Test the limits themselves are allowed, measured after trimming."""
        result = validator.validate_expense("2024-05-02", "500", " " + "x" * 200 + " ", "r" * 500)
        assert result.is_valid
        assert len(result.cleaned["description"]) == 200
        assert validator.validate_staff("n" * 100, "r" * 100).is_valid
