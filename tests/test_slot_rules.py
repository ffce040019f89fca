"""
Tests for the slot rule evaluator.
"""

import pytest

from slotbooking.domain.models import BusinessHours, TimeRange
from slotbooking.domain.slot_rules import SlotRuleEvaluator
from slotbooking.domain.temporal import Duration, Instant


def _range(local_time: str, minutes: int, date: str = "2026-11-02") -> TimeRange:
    return TimeRange(
        start=Instant.parse(f"{date}T{local_time}:00.000+09:00"),
        duration=Duration(minutes),
    )


@pytest.fixture
def evaluator() -> SlotRuleEvaluator:
    return SlotRuleEvaluator()


class TestBusinessHours:
    """Tests for the opening-hours part of the rules."""

    def test_start_before_opening(self, evaluator):
        """09:00 is before the 10:00 opening."""
        result = evaluator.can_book(_range("09:00", 60), 1)

        assert not result.ok
        assert "before opening" in result.reason

    def test_end_after_closing(self, evaluator):
        """17:00 + 2h ends at 19:00."""
        result = evaluator.can_book(_range("17:00", 120), 1)

        assert not result.ok
        assert "after closing" in result.reason

    def test_end_exactly_on_close_is_allowed(self, evaluator):
        """Closing time is inclusive for the end."""
        assert evaluator.can_book(_range("17:00", 60), 1).ok
        assert evaluator.can_book(_range("10:00", 480), 0).ok

    def test_slot_crossing_midnight(self, evaluator):
        """Start and end must share a local date."""
        result = evaluator.can_book(_range("23:00", 120), 1)

        assert not result.ok
        assert "same day" in result.reason

    def test_custom_business_hours(self):
        """Rules follow the configured opening hours."""
        evaluator = SlotRuleEvaluator(BusinessHours(open_hour=9, close_hour=17))

        assert evaluator.can_book(_range("09:00", 60), 0).ok
        assert evaluator.can_book(_range("13:00", 60), 0).ok
        assert not evaluator.can_book(_range("14:00", 60), 0).ok
        assert not evaluator.can_book(_range("16:00", 120), 1).ok


class TestEmptyDay:
    """Tests for days without bookings."""

    @pytest.mark.parametrize("start", ["10:00", "14:00"])
    def test_normal_slot_at_allowed_hours(self, evaluator, start):
        """Opening and opening+4."""
        assert evaluator.can_book(_range(start, 60), 0).ok

    @pytest.mark.parametrize("start", ["11:00", "12:00", "13:00", "15:00"])
    def test_normal_slot_at_other_hours(self, evaluator, start):
        """Anything else is rejected on an empty day."""
        result = evaluator.can_book(_range(start, 60), 0)

        assert not result.ok
        assert "10:00, 14:00" in result.reason

    @pytest.mark.parametrize("start", ["10:00", "11:00", "12:00"])
    def test_long_slot_at_allowed_hours(self, evaluator, start):
        """Long slots may start at opening, +1 or +2."""
        assert evaluator.can_book(_range(start, 360), 0).ok

    def test_long_slot_too_late(self, evaluator):
        """A six-hour slot from 13:00 would leave no room, and ends at 19:00."""
        assert not evaluator.can_book(_range("13:00", 360), 0).ok

    def test_five_hour_slot_is_normal(self, evaluator):
        """Exactly 300 minutes is not long."""
        assert evaluator.can_book(_range("10:00", 300), 0).ok
        assert not evaluator.can_book(_range("11:00", 300), 0).ok


class TestBusyDay:
    """Tests for days that already hold a booking."""

    @pytest.mark.parametrize("start", ["10:00", "11:00", "13:00", "16:00"])
    def test_normal_slot_at_any_hour(self, evaluator, start):
        """Start hour restrictions are lifted."""
        assert evaluator.can_book(_range(start, 60), 1).ok

    @pytest.mark.parametrize("start", ["10:00", "11:00", "12:00"])
    def test_long_slot_is_rejected(self, evaluator, start):
        """A day with a booking cannot take a long slot."""
        result = evaluator.can_book(_range(start, 360), 1)

        assert not result.ok
        assert "long slot" in result.reason

    def test_several_bookings(self, evaluator):
        """Counts above one behave like one."""
        assert evaluator.can_book(_range("15:00", 120), 3).ok


class TestBookingCount:
    """Tests for the existing-bookings argument."""

    @pytest.mark.parametrize("count", [-1, 1.5, "1", None, True])
    def test_invalid_count(self, evaluator, count):
        """Counts must be non-negative integers."""
        result = evaluator.can_book(_range("10:00", 60), count)

        assert not result.ok
        assert "non-negative integer" in result.reason
