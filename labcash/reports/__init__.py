"""Monthly reports and display formatting."""

from labcash.reports.builder import build_monthly_report
from labcash.reports.formatting import (
    format_currency,
    format_day,
    format_ledger_day,
    format_signed,
)

__all__ = [
    "build_monthly_report",
    "format_currency",
    "format_day",
    "format_ledger_day",
    "format_signed",
]
