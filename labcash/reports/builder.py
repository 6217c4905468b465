"""
Monthly Report Builder

DESIGN DECISION: The report is assembled DETERMINISTICALLY from the
engine. The UI and the AI summary both read this object; neither
recomputes any money on its own.
"""

from labcash.engine import (
    DEFAULT_SPLIT,
    build_ledgers,
    compute_statement,
    daily_totals,
    filter_snapshot,
    group_by_day_and_shift,
    orphaned_advances,
    shift_totals,
)
from labcash.models.records import RecordSnapshot
from labcash.models.statement import MonthlyReport, Period, RevenueSplit


def build_monthly_report(
    snapshot: RecordSnapshot,
    period: Period,
    split: RevenueSplit = DEFAULT_SPLIT,
) -> MonthlyReport:
    """
    Run the whole engine for one month.

    Args:
        snapshot: All records (any months)
        period: The month to report on
        split: Government/staff fractions

    Returns:
        MonthlyReport with the statement, one ledger per active staff
        member, chart and history groupings, and the period's records
    """
    month = filter_snapshot(snapshot, period)

    statement = compute_statement(
        month.entries,
        month.expenses,
        month.advances,
        month.staff,
        split=split,
    )

    return MonthlyReport(
        period=period,
        statement=statement,
        ledgers=tuple(build_ledgers(month.staff, statement, month.advances, period)),
        daily_totals=tuple(daily_totals(month.entries)),
        day_groups=tuple(group_by_day_and_shift(month.entries)),
        shift_totals=tuple(shift_totals(month.entries)),
        entries=month.entries,
        expenses=month.expenses,
        advances=month.advances,
        orphaned_advances=tuple(orphaned_advances(month.advances, month.staff)),
    )
