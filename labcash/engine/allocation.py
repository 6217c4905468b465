"""
Allocation Engine

Turns one month of records into the aggregate FinancialStatement.

    revenue ──► government share (85%)
           └──► gross staff pool (15%) ──► minus shared expenses
                                           = distributable pool
                                           ÷ staff count
                                           = base share per staff

DESIGN DECISION: Advances are NOT deducted here. They are personal
debts and are netted against each person's base share in the ledger
(labcash.engine.ledger). total_advances is reported for information.

GUARANTEES:
- Pure: no I/O, no mutation of the inputs
- Deterministic: same inputs give identical Decimals
- Nothing is clamped: a pool deficit or an empty roster is computed,
  not hidden
"""

from decimal import Decimal
from typing import Iterable, Sequence

from labcash.engine.constants import DEFAULT_SPLIT
from labcash.models.records import (
    AdvanceRecord,
    ExpenseRecord,
    RevenueEntry,
    StaffMember,
)
from labcash.models.statement import FinancialStatement, RevenueSplit


def _sum_amounts(records: Iterable) -> Decimal:
    return sum((record.amount for record in records), Decimal("0"))


def effective_staff_count(staff: Sequence[StaffMember]) -> int:
    """
    Active staff count with a floor of one.

    With an empty roster the whole distributable pool is reported as the
    single (unassigned) share instead of dividing by zero.
    """
    return max(len(staff), 1)


def compute_statement(
    entries: Sequence[RevenueEntry],
    expenses: Sequence[ExpenseRecord],
    advances: Sequence[AdvanceRecord],
    staff: Sequence[StaffMember],
    split: RevenueSplit = DEFAULT_SPLIT,
) -> FinancialStatement:
    """
    Compute the monthly statement.

    Args:
        entries: Revenue entries of the period
        expenses: Expenses of the period
        advances: Advances of the period (statistic only)
        staff: The full active roster
        split: Government/staff fractions (defaults to 85/15)

    Returns:
        The FinancialStatement, in full Decimal precision
    """
    total_revenue = _sum_amounts(entries)
    government_share = total_revenue * split.government_fraction
    gross_staff_pool = total_revenue * split.staff_fraction

    total_expenses = _sum_amounts(expenses)
    total_advances = _sum_amounts(advances)

    distributable_pool = gross_staff_pool - total_expenses
    staff_count = effective_staff_count(staff)
    base_share_per_staff = distributable_pool / staff_count

    return FinancialStatement(
        total_revenue=total_revenue,
        government_share=government_share,
        gross_staff_pool=gross_staff_pool,
        total_expenses=total_expenses,
        total_advances=total_advances,
        distributable_pool=distributable_pool,
        base_share_per_staff=base_share_per_staff,
        staff_count=staff_count,
    )
