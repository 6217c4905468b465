"""
Ledger Builder

Produces a staff member's personal sheet for one month: the base share
as a single credit, each advance as a debit, and the net payable.

A negative net payable means the member took more in advances than
their share and owes the difference back. It is reported as-is.
"""

from decimal import Decimal
from typing import Optional, Sequence
from uuid import UUID

from labcash.engine.constants import MONTHLY_DISTRIBUTION_LABEL
from labcash.models.records import AdvanceRecord, StaffMember
from labcash.models.statement import (
    FinancialStatement,
    LedgerEntry,
    LedgerEntryKind,
    Period,
    StaffLedger,
)


def advances_for_staff(
    advances: Sequence[AdvanceRecord],
    staff_id: UUID,
) -> list[AdvanceRecord]:
    """Advances paid to one staff member, in insertion order."""
    return [advance for advance in advances if advance.staff_id == staff_id]


def orphaned_advances(
    advances: Sequence[AdvanceRecord],
    staff: Sequence[StaffMember],
) -> list[AdvanceRecord]:
    """Advances whose staff member has since been removed from the roster."""
    active_ids = {member.id for member in staff}
    return [advance for advance in advances if advance.staff_id not in active_ids]


def build_staff_ledger(
    member: StaffMember,
    statement: FinancialStatement,
    advances: Sequence[AdvanceRecord],
    period: Optional[Period] = None,
) -> StaffLedger:
    """
    Build one member's ledger.

    Args:
        member: The staff member
        statement: The month's statement (provides the base share)
        advances: The month's advances (any staff; filtered here)
        period: Month label carried onto the ledger

    Returns:
        StaffLedger with entries ordered: credit first (dated the first
        of the month when a period is given), then advances
        newest first (same-day advances keep insertion order)
    """
    personal = advances_for_staff(advances, member.id)
    personal_total = sum((a.amount for a in personal), Decimal("0"))
    base_share = statement.base_share_per_staff

    # sorted() stays stable with reverse=True: same-day ties keep insertion order
    newest_first = sorted(personal, key=lambda a: a.record_date, reverse=True)

    entries = [
        LedgerEntry(
            kind=LedgerEntryKind.CREDIT,
            description=MONTHLY_DISTRIBUTION_LABEL,
            amount=base_share,
            entry_date=period.first_day if period else None,
        )
    ]
    entries.extend(
        LedgerEntry(
            kind=LedgerEntryKind.DEBIT,
            description="Advance",
            amount=-advance.amount,
            entry_date=advance.record_date,
            advance_id=advance.id,
            remarks=advance.remarks,
        )
        for advance in newest_first
    )

    return StaffLedger(
        staff_id=member.id,
        staff_name=member.name,
        period=period,
        base_share=base_share,
        personal_advance_total=personal_total,
        net_payable=base_share - personal_total,
        entries=tuple(entries),
    )


def build_ledgers(
    staff: Sequence[StaffMember],
    statement: FinancialStatement,
    advances: Sequence[AdvanceRecord],
    period: Optional[Period] = None,
) -> list[StaffLedger]:
    """One ledger per roster member, in roster order."""
    return [
        build_staff_ledger(member, statement, advances, period)
        for member in staff
    ]
