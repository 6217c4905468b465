"""
Daily Aggregator

Groupings of the month's revenue entries for the chart and the
history table.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Sequence

from labcash.engine.constants import SHIFT_RANK
from labcash.models.records import RevenueEntry
from labcash.models.statement import DailyTotal, DayGroup, ShiftTotal


def daily_totals(entries: Sequence[RevenueEntry]) -> list[DailyTotal]:
    """
    Revenue per day of the month, for the trend chart.

    Ordered by the numeric day (2, 3, 10), never by string order.
    """
    totals: dict[int, Decimal] = defaultdict(lambda: Decimal("0"))
    for entry in entries:
        totals[entry.record_date.day] += entry.amount

    return [
        DailyTotal(day=day, amount=totals[day])
        for day in sorted(totals)
    ]


def group_by_day_and_shift(entries: Sequence[RevenueEntry]) -> list[DayGroup]:
    """
    Entries grouped under their date for the history view.

    - Dates newest first
    - Within a date, Morning, Evening, Night (stable for same shift)
    - Each group carries its own total
    """
    groups: dict[date, list[RevenueEntry]] = defaultdict(list)
    for entry in entries:
        groups[entry.record_date].append(entry)

    result = []
    for record_date in sorted(groups, reverse=True):
        items = sorted(groups[record_date], key=lambda e: SHIFT_RANK[e.shift])
        result.append(
            DayGroup(
                record_date=record_date,
                total=sum((e.amount for e in items), Decimal("0")),
                entries=tuple(items),
            )
        )
    return result


def shift_totals(entries: Sequence[RevenueEntry]) -> list[ShiftTotal]:
    """Revenue per shift across the month, in shift order."""
    amounts = {shift: Decimal("0") for shift in SHIFT_RANK}
    counts = {shift: 0 for shift in SHIFT_RANK}
    for entry in entries:
        amounts[entry.shift] += entry.amount
        counts[entry.shift] += 1

    return [
        ShiftTotal(shift=shift, amount=amounts[shift], entry_count=counts[shift])
        for shift in sorted(SHIFT_RANK, key=SHIFT_RANK.get)
    ]
