"""Calendar-month selection of dated records."""

from datetime import date
from typing import Iterable, Protocol, TypeVar

from labcash.models.records import RecordSnapshot
from labcash.models.statement import Period


class Dated(Protocol):
    record_date: date


T = TypeVar("T", bound=Dated)


def filter_by_period(records: Iterable[T], period: Period) -> list[T]:
    """
    Return the records dated inside the period, in their original order.

    Membership is exact year+month equality on the record's calendar
    date; no timezone conversion and no day rounding.
    """
    return [record for record in records if period.contains(record.record_date)]


def filter_snapshot(snapshot: RecordSnapshot, period: Period) -> RecordSnapshot:
    """
    Restrict the dated collections of a snapshot to one month.

    The staff roster is NOT filtered: whoever is on the roster now
    shares this month's pool.
    """
    return RecordSnapshot(
        entries=tuple(filter_by_period(snapshot.entries, period)),
        expenses=tuple(filter_by_period(snapshot.expenses, period)),
        advances=tuple(filter_by_period(snapshot.advances, period)),
        staff=snapshot.staff,
    )
