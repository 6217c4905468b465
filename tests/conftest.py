"""
Shared fixtures.

Settings are isolated from the developer's environment: no .env file is
read, no Gemini key is present and the data directory is temporary.
"""

from datetime import date
from decimal import Decimal

import pytest

from labcash.config import get_settings
from labcash.models.records import (
    AdvanceRecord,
    ExpenseRecord,
    RevenueEntry,
    ShiftType,
    StaffMember,
)
from labcash.models.statement import Period


_ENV_VARS = (
    "GEMINI_API_KEY",
    "GEMINI_MODEL_NAME",
    "GEMINI_TIMEOUT_SECONDS",
    "LABCASH_STORAGE_DATA_DIR",
    "APP_ENVIRONMENT",
    "LOG_LEVEL",
    "CURRENCY_CODE",
    "MAX_AMOUNT",
    "FUTURE_DATE_TOLERANCE_DAYS",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test in an empty directory with a clean environment."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LABCASH_STORAGE_DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def may() -> Period:
    return Period(year=2024, month=5)


@pytest.fixture
def make_entry():
    def _make(day, amount="1000", shift=ShiftType.MORNING, month=5, year=2024):
        return RevenueEntry(
            record_date=date(year, month, day),
            shift=shift,
            amount=Decimal(str(amount)),
        )
    return _make


@pytest.fixture
def make_expense():
    def _make(day, amount="100", description="Supplies", month=5, year=2024):
        return ExpenseRecord(
            record_date=date(year, month, day),
            amount=Decimal(str(amount)),
            description=description,
        )
    return _make


@pytest.fixture
def make_staff():
    def _make(name="Ali", role=None):
        return StaffMember(name=name, role=role)
    return _make


@pytest.fixture
def make_advance():
    def _make(member, day, amount="100", month=5, year=2024, remarks=""):
        return AdvanceRecord(
            staff_id=member.id,
            staff_name=member.name,
            record_date=date(year, month, day),
            amount=Decimal(str(amount)),
            remarks=remarks,
        )
    return _make
