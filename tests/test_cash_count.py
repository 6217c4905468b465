"""Tests for the drawer cash counter."""

import pytest

from labcash.engine import DENOMINATIONS, CashCountError, count_cash


class TestCountCash:
    """Tests for count_cash."""

    def test_totals_mixed_input(self):
        """Test digit strings, ints and blanks together."""
        cash = count_cash({5000: "2", 1000: 3, 100: "", 10: " 4 "})

        assert cash.total == 13040
        assert cash.note_count == 9
        assert [line.denomination for line in cash.lines] == list(DENOMINATIONS)

    def test_missing_denominations_count_as_zero(self):
        """Test that an empty count is a zero total."""
        cash = count_cash({})
        assert cash.total == 0
        assert all(line.count == 0 for line in cash.lines)

    def test_none_is_zero(self):
        """Test that None reads as zero."""
        assert count_cash({500: None}).total == 0

    @pytest.mark.parametrize("raw", ["abc", "-1", "1.5", -1, True, 2.0])
    def test_rejects_bad_counts(self, raw):
        """Test that unreadable counts are rejected, not zeroed."""
        with pytest.raises(CashCountError):
            count_cash({100: raw})

    def test_rejects_unknown_denomination(self):
        """Test that a note outside the list is rejected."""
        with pytest.raises(CashCountError):
            count_cash({75: 1})

    def test_error_is_value_error(self):
        """Test that callers can catch it as ValueError."""
        assert issubclass(CashCountError, ValueError)

    def test_custom_denominations(self):
        """Test counting another set of notes."""
        cash = count_cash({20: "5"}, denominations=(50, 20))
        assert cash.total == 100
        assert len(cash.lines) == 2
