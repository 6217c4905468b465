"""
Financial Engine Package

The pure core of LabCash. Every function here takes immutable
snapshots and returns new values: no storage, no clock, no network.
"""

from labcash.engine.aggregation import (
    daily_totals,
    group_by_day_and_shift,
    shift_totals,
)
from labcash.engine.allocation import (
    compute_statement,
    effective_staff_count,
)
from labcash.engine.cash_count import CashCountError, count_cash
from labcash.engine.constants import (
    DEFAULT_SPLIT,
    DENOMINATIONS,
    GOVT_FRACTION,
    SHIFT_RANK,
    STAFF_FRACTION,
)
from labcash.engine.ledger import (
    advances_for_staff,
    build_ledgers,
    build_staff_ledger,
    orphaned_advances,
)
from labcash.engine.period import filter_by_period, filter_snapshot

__all__ = [
    # Constants
    "DEFAULT_SPLIT",
    "DENOMINATIONS",
    "GOVT_FRACTION",
    "SHIFT_RANK",
    "STAFF_FRACTION",
    # Period filter
    "filter_by_period",
    "filter_snapshot",
    # Allocation
    "compute_statement",
    "effective_staff_count",
    # Ledger
    "advances_for_staff",
    "build_ledgers",
    "build_staff_ledger",
    "orphaned_advances",
    # Aggregation
    "daily_totals",
    "group_by_day_and_shift",
    "shift_totals",
    # Cash counter
    "CashCountError",
    "count_cash",
]
