"""
Tests for the financial engine: period filter, allocation, ledger and
daily aggregation.
"""

import pytest
from datetime import date
from decimal import Decimal

from labcash.engine import (
    DEFAULT_SPLIT,
    build_ledgers,
    build_staff_ledger,
    compute_statement,
    daily_totals,
    effective_staff_count,
    filter_by_period,
    filter_snapshot,
    group_by_day_and_shift,
    orphaned_advances,
    shift_totals,
)
from labcash.models.records import RecordSnapshot, ShiftType
from labcash.models.statement import LedgerEntryKind, RevenueSplit


@pytest.fixture
def roster(make_staff):
    return [make_staff(name) for name in ("Ali", "Bilal", "Sana", "Hina")]


@pytest.fixture
def ten_thousand(make_entry):
    """Four entries adding up to 10,000."""
    return [
        make_entry(1, "2500", ShiftType.MORNING),
        make_entry(1, "2500", ShiftType.NIGHT),
        make_entry(2, "3000", ShiftType.EVENING),
        make_entry(3, "2000", ShiftType.MORNING),
    ]


class TestPeriodFilter:
    """Tests for calendar-month selection."""

    def test_keeps_only_the_month_in_order(self, make_entry, may):
        """Test boundaries and preserved order."""
        entries = [
            make_entry(30, month=4),
            make_entry(31),
            make_entry(1),
            make_entry(1, month=6),
            make_entry(15, year=2023),
        ]
        selected = filter_by_period(entries, may)
        assert selected == [entries[1], entries[2]]

    def test_filter_snapshot_keeps_whole_roster(
        self, make_entry, make_expense, make_staff, make_advance, may
    ):
        """Test that the staff roster is never filtered by month."""
        member = make_staff()
        snapshot = RecordSnapshot(
            entries=(make_entry(3), make_entry(3, month=4)),
            expenses=(make_expense(4, month=6),),
            advances=(make_advance(member, 5),),
            staff=(member,),
        )
        month = filter_snapshot(snapshot, may)

        assert len(month.entries) == 1
        assert month.expenses == ()
        assert len(month.advances) == 1
        assert month.staff == (member,)


class TestAllocation:
    """Tests for the monthly statement."""

    def test_ten_thousand_four_staff_scenario(self, ten_thousand, roster, make_expense):
        """Test the reference month: 10,000 revenue, 4 staff, 500 expenses."""
        statement = compute_statement(
            ten_thousand, [make_expense(5, "500")], [], roster
        )
        assert statement.total_revenue == Decimal("10000")
        assert statement.government_share == Decimal("8500")
        assert statement.gross_staff_pool == Decimal("1500")
        assert statement.total_expenses == Decimal("500")
        assert statement.distributable_pool == Decimal("1000")
        assert statement.base_share_per_staff == Decimal("250")
        assert statement.staff_count == 4
        assert not statement.has_deficit

    def test_split_adds_up_exactly(self, make_entry):
        """Test that government share plus staff pool equals revenue exactly."""
        entries = [make_entry(1, "1234.57"), make_entry(2, "333.33"), make_entry(3, "0.01")]
        statement = compute_statement(entries, [], [], [])
        assert statement.government_share + statement.gross_staff_pool == statement.total_revenue

    def test_zero_staff_floors_count_to_one(self, ten_thousand, make_expense):
        """Test that an empty roster gets the whole pool as one share."""
        statement = compute_statement(ten_thousand, [make_expense(5, "500")], [], [])
        assert statement.staff_count == 1
        assert statement.base_share_per_staff == Decimal("1000")
        assert effective_staff_count([]) == 1

    def test_deficit_is_not_clamped(self, make_entry, make_expense, roster):
        """Test that expenses larger than the pool give a negative pool."""
        statement = compute_statement(
            [make_entry(1, "1000")], [make_expense(2, "350")], [], roster[:2]
        )
        assert statement.distributable_pool == Decimal("-200")
        assert statement.base_share_per_staff == Decimal("-100")
        assert statement.has_deficit

    def test_advances_do_not_reduce_the_pool(
        self, ten_thousand, roster, make_expense, make_advance
    ):
        """Test that advances are reported but not deducted from the pool."""
        advances = [make_advance(roster[0], 6, "300")]
        statement = compute_statement(ten_thousand, [make_expense(5, "500")], advances, roster)
        assert statement.total_advances == Decimal("300")
        assert statement.distributable_pool == Decimal("1000")

    def test_empty_month(self):
        """Test that no records gives an all-zero statement."""
        statement = compute_statement([], [], [], [])
        assert statement.total_revenue == 0
        assert statement.base_share_per_staff == 0

    def test_idempotent(self, ten_thousand, roster, make_expense):
        """Test that computing twice gives identical statements."""
        expenses = [make_expense(5, "500")]
        first = compute_statement(ten_thousand, expenses, [], roster)
        second = compute_statement(ten_thousand, expenses, [], roster)
        assert first == second

    def test_custom_split(self, ten_thousand):
        """Test passing another split."""
        split = RevenueSplit(
            government_fraction=Decimal("0.8"),
            staff_fraction=Decimal("0.2"),
        )
        statement = compute_statement(ten_thousand, [], [], [], split=split)
        assert statement.government_share == Decimal("8000")
        assert statement.gross_staff_pool == Decimal("2000")
        assert DEFAULT_SPLIT.staff_fraction == Decimal("0.15")


class TestLedger:
    """Tests for personal staff sheets."""

    def test_advance_can_make_net_negative(
        self, ten_thousand, roster, make_expense, make_advance, may
    ):
        """Test 250 base share minus a 300 advance is -50."""
        advances = [make_advance(roster[0], 6, "300")]
        statement = compute_statement(ten_thousand, [make_expense(5, "500")], advances, roster)

        ledger = build_staff_ledger(roster[0], statement, advances, may)
        assert ledger.base_share == Decimal("250")
        assert ledger.personal_advance_total == Decimal("300")
        assert ledger.net_payable == Decimal("-50")
        assert ledger.owes_money
        assert ledger.period == may
        assert ledger.entries[0].entry_date == date(2024, 5, 1)

    def test_net_payables_do_not_sum_to_pool_when_advances_exist(
        self, ten_thousand, roster, make_expense, make_advance
    ):
        """Test that advances are personal deductions, not pool deductions."""
        advances = [make_advance(roster[0], 6, "300"), make_advance(roster[1], 7, "100")]
        statement = compute_statement(ten_thousand, [make_expense(5, "500")], advances, roster)

        ledgers = build_ledgers(roster, statement, advances)
        total_net = sum(ledger.net_payable for ledger in ledgers)

        assert statement.distributable_pool == Decimal("1000")
        assert total_net == Decimal("600")
        assert total_net == statement.distributable_pool - statement.total_advances
        assert [ledger.net_payable for ledger in ledgers[2:]] == [Decimal("250")] * 2

    def test_entry_order_credit_then_newest_advances(
        self, roster, make_advance
    ):
        """Test credit first, advances newest first, ties in insertion order."""
        member = roster[0]
        first_same_day = make_advance(member, 10, "50", remarks="first")
        second_same_day = make_advance(member, 10, "60", remarks="second")
        oldest = make_advance(member, 2, "70")
        other = make_advance(roster[1], 20, "999")
        advances = [oldest, first_same_day, other, second_same_day]
        statement = compute_statement([], [], advances, roster)

        ledger = build_staff_ledger(member, statement, advances)

        assert ledger.entries[0].kind == LedgerEntryKind.CREDIT
        assert ledger.entries[0].description == "Monthly distribution"
        assert [e.advance_id for e in ledger.advances] == [
            first_same_day.id,
            second_same_day.id,
            oldest.id,
        ]
        assert ledger.advances[0].amount == Decimal("-50")
        assert ledger.advances[0].remarks == "first"

    def test_orphaned_advances(self, roster, make_advance):
        """Test that advances of removed staff are found."""
        removed = roster[3]
        kept = make_advance(roster[0], 3)
        orphan = make_advance(removed, 4)

        assert orphaned_advances([kept, orphan], roster[:3]) == [orphan]
        assert orphan.staff_name == "Hina"


class TestAggregation:
    """Tests for chart and history groupings."""

    def test_daily_totals_numeric_day_order(self, make_entry):
        """Test that days sort 2, 3, 10 and not as strings."""
        entries = [
            make_entry(2, "100"),
            make_entry(10, "300"),
            make_entry(3, "200"),
            make_entry(10, "50", ShiftType.NIGHT),
        ]
        totals = daily_totals(entries)
        assert [t.day for t in totals] == [2, 3, 10]
        assert totals[2].amount == Decimal("350")
        assert totals[0].label == "Day 2"

    def test_group_by_day_and_shift(self, make_entry):
        """Test dates newest first and shifts in Morning/Evening/Night order."""
        night = make_entry(5, "300", ShiftType.NIGHT)
        morning = make_entry(5, "100", ShiftType.MORNING)
        evening = make_entry(5, "200", ShiftType.EVENING)
        older = make_entry(1, "50")

        groups = group_by_day_and_shift([older, night, morning, evening])

        assert [g.record_date for g in groups] == [date(2024, 5, 5), date(2024, 5, 1)]
        assert groups[0].entries == (morning, evening, night)
        assert groups[0].total == Decimal("600")
        assert groups[1].total == Decimal("50")

    def test_shift_totals_include_every_shift(self, make_entry):
        """Test that shifts without entries are reported with zero."""
        totals = shift_totals([make_entry(1, "100"), make_entry(2, "150")])
        assert [t.shift for t in totals] == [
            ShiftType.MORNING,
            ShiftType.EVENING,
            ShiftType.NIGHT,
        ]
        assert totals[0].amount == Decimal("250")
        assert totals[0].entry_count == 2
        assert totals[2].entry_count == 0
