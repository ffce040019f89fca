"""
Tests for the temporal primitives (Instant, Duration).
"""

from datetime import datetime

import pendulum
import pytest

from slotbooking.domain.exceptions import FormatError
from slotbooking.domain.temporal import BUSINESS_TIMEZONE, Duration, Instant


class TestInstantParsing:
    """Tests for canonical text parsing."""

    def test_parse_canonical_text(self):
        """Canonical text maps to the expected epoch value."""
        instant = Instant.parse("1970-01-01T09:00:00.000+09:00")

        assert instant.epoch_ms == 0

    def test_round_trip(self):
        """Formatting and re-parsing yields an equal instant."""
        text = "2026-11-02T10:15:30.123+09:00"
        instant = Instant.parse(text)

        assert instant.value == text
        assert Instant.parse(instant.value) == instant
        assert str(instant) == text

    @pytest.mark.parametrize(
        "text",
        [
            "2026-11-02T10:00:00+09:00",
            "2026-11-02T10:00:00.000Z",
            "2026-11-02T10:00:00.000+00:00",
            "2026-11-02 10:00:00.000+09:00",
            "2026-11-02T10:00:00.0000+09:00",
            "２０２６-11-02T10:00:00.000+09:00",
            "2026-11-02T10:00:00.000+09:00\n",
            "2026-11-02",
            "",
        ],
    )
    def test_non_canonical_text_raises_format_error(self, text):
        """Anything but the exact canonical pattern is rejected."""
        with pytest.raises(FormatError):
            Instant.parse(text)

    def test_non_string_raises_format_error(self):
        """Parsing a non-string is a format error."""
        with pytest.raises(FormatError):
            Instant.parse(1234567890)

    def test_format_error_is_value_error(self):
        """Callers catching ValueError also see format errors."""
        with pytest.raises(ValueError):
            Instant.parse("not a date")

    @pytest.mark.parametrize(
        "text",
        [
            "2026-02-30T10:00:00.000+09:00",
            "2026-13-01T10:00:00.000+09:00",
            "2026-11-02T24:00:00.000+09:00",
            "2026-11-02T10:60:00.000+09:00",
        ],
    )
    def test_impossible_date_raises_value_error(self, text):
        """Structurally valid text naming a non-existent time is a ValueError."""
        with pytest.raises(ValueError) as exc_info:
            Instant.parse(text)

        assert not isinstance(exc_info.value, FormatError)


class TestInstantConstruction:
    """Tests for the other constructors."""

    def test_from_datetime_truncates_to_milliseconds(self):
        """Microseconds below a millisecond are dropped."""
        dt = pendulum.datetime(2026, 11, 2, 10, 0, 0, 123999, tz=BUSINESS_TIMEZONE)

        assert Instant.from_datetime(dt).value == "2026-11-02T10:00:00.123+09:00"

    def test_from_datetime_converts_other_offsets(self):
        """An aware datetime in UTC is rendered on the business clock."""
        dt = pendulum.datetime(2026, 11, 2, 1, 0, 0, tz="UTC")

        assert Instant.from_datetime(dt).value == "2026-11-02T10:00:00.000+09:00"

    def test_from_naive_datetime_raises(self):
        """Naive datetimes are ambiguous."""
        with pytest.raises(ValueError, match="timezone-aware"):
            Instant.from_datetime(datetime(2026, 11, 2, 10, 0))

    def test_from_epoch_ms_rejects_non_integers(self):
        """Epoch values must be plain integers."""
        with pytest.raises(ValueError):
            Instant.from_epoch_ms(1.5)
        with pytest.raises(ValueError):
            Instant.from_epoch_ms(True)

    def test_now_is_canonical(self):
        """now() produces text that parses back."""
        now = Instant.now()

        assert Instant.parse(now.value) == now


class TestInstantArithmetic:
    """Tests for arithmetic and comparisons."""

    def test_add_minutes_returns_new_instant(self):
        """Adding minutes leaves the original untouched."""
        start = Instant.parse("2026-11-02T10:00:00.000+09:00")
        later = start.add_minutes(90)

        assert later.value == "2026-11-02T11:30:00.000+09:00"
        assert start.value == "2026-11-02T10:00:00.000+09:00"

    def test_add_days(self):
        """Days are fixed 24-hour steps on a DST-free clock."""
        start = Instant.parse("2026-11-02T10:00:00.000+09:00")

        assert start.add_days(14).value == "2026-11-16T10:00:00.000+09:00"

    def test_comparisons_follow_epoch_order(self):
        """before/after/same agree with the ordering operators."""
        a = Instant.parse("2026-11-02T10:00:00.000+09:00")
        b = Instant.parse("2026-11-02T10:00:00.001+09:00")

        assert a.is_before(b) and a < b
        assert b.is_after(a) and b > a
        assert a.is_same(Instant.from_epoch_ms(a.epoch_ms))
        assert not a.is_same(b)

    def test_day_key_uses_business_clock(self):
        """Just after local midnight is still the local date, not the UTC one."""
        instant = Instant.parse("2026-11-02T00:30:00.000+09:00")

        assert instant.day_key() == "2026-11-02"

    def test_is_hour_aligned(self):
        """Only whole hours on the business clock are aligned."""
        assert Instant.parse("2026-11-02T10:00:00.000+09:00").is_hour_aligned()
        assert not Instant.parse("2026-11-02T10:00:00.001+09:00").is_hour_aligned()
        assert not Instant.parse("2026-11-02T10:30:00.000+09:00").is_hour_aligned()

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("2026-11-02T10:00:00.000+09:00", "2026-11-02T10:00:00.000+09:00"),
            ("2026-11-02T10:10:00.000+09:00", "2026-11-02T11:00:00.000+09:00"),
            ("2026-11-02T10:00:00.001+09:00", "2026-11-02T11:00:00.000+09:00"),
            ("2026-11-02T23:30:00.000+09:00", "2026-11-03T00:00:00.000+09:00"),
        ],
    )
    def test_ceil_to_hour(self, text, expected):
        """Rounds up to the next full hour; aligned values stay put."""
        assert Instant.parse(text).ceil_to_hour().value == expected


class TestDuration:
    """Tests for Duration."""

    def test_valid_duration(self):
        """Whole hours are accepted."""
        duration = Duration(180)

        assert duration.minutes == 180
        assert duration.hours == 3
        assert str(duration) == "3h"

    @pytest.mark.parametrize("minutes", [0, 30, 59, 90, 61, -60])
    def test_invalid_minutes_raise(self, minutes):
        """Below an hour or not a whole number of hours."""
        with pytest.raises(ValueError):
            Duration(minutes)

    @pytest.mark.parametrize("minutes", [60.0, "60", True, None])
    def test_non_integer_raises(self, minutes):
        """Only plain integers are accepted."""
        with pytest.raises(ValueError):
            Duration(minutes)

    def test_from_hours(self):
        """Hours convert to minutes."""
        assert Duration.from_hours(6) == Duration(360)

    def test_add_and_subtract(self):
        """Arithmetic re-validates the result."""
        assert Duration(120).add(Duration(60)) == Duration(180)
        assert Duration(180).subtract(Duration(60)) == Duration(120)

    def test_subtract_below_one_hour_raises(self):
        """Subtraction may not drop below 60 minutes."""
        with pytest.raises(ValueError):
            Duration(60).subtract(Duration(60))

    def test_ordering(self):
        """Durations compare by length."""
        assert Duration(60) < Duration(120)
