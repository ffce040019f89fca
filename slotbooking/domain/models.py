"""
Domain models for time ranges, business hours and slot results.
"""

from dataclasses import dataclass
from typing import Tuple

import pendulum

from .temporal import BUSINESS_TIMEZONE, Duration, Instant


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable bookable interval [start, start + duration).

    Invariant: start falls exactly on an hour of the business clock.
    """
    start: Instant
    duration: Duration

    def __post_init__(self):
        if not self.start.is_hour_aligned():
            raise ValueError(
                f"TimeRange start {self.start} must be on an hour boundary"
            )

    @property
    def end(self) -> Instant:
        """Exclusive end of the range."""
        return self.start.add_minutes(self.duration.minutes)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.duration.minutes

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another. Touching ranges do not."""
        return self.start < other.end and other.start < self.end

    def contains(self, instant: Instant) -> bool:
        """Start inclusive, end exclusive."""
        return self.start <= instant < self.end

    def __str__(self) -> str:
        return f"{self.start.local.format('YYYY-MM-DD HH:mm')} - {self.end.local.format('HH:mm')}"


@dataclass(frozen=True)
class OccupiedInterval:
    """
    Time held by an event in the external calendar.

    Unlike TimeRange it carries no alignment rule: calendar events may start
    at any minute.
    """
    start: Instant
    end: Instant

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def overlaps(self, time_range: TimeRange, buffer_minutes: int = 0) -> bool:
        """
        Check whether the range, widened by ``buffer_minutes`` on both sides,
        intersects this interval.
        """
        padded_start = time_range.start.add_minutes(-buffer_minutes)
        padded_end = time_range.end.add_minutes(buffer_minutes)
        return self.start < padded_end and padded_start < self.end

    def overlaps_window(self, window_start: Instant, window_end: Instant) -> bool:
        return self.start < window_end and window_start < self.end


@dataclass(frozen=True)
class BusinessHours:
    """
    Opening hours of the shop on the business clock.

    ``close_hour`` is an inclusive upper bound only for a slot ending exactly
    on it.
    """
    open_hour: int = 10
    close_hour: int = 18
    long_duration_threshold_minutes: int = 300

    def __post_init__(self):
        if not 0 <= self.open_hour <= 23:
            raise ValueError(f"open_hour must be between 0 and 23, got {self.open_hour}")
        if not 1 <= self.close_hour <= 23:
            raise ValueError(f"close_hour must be between 1 and 23, got {self.close_hour}")
        if self.close_hour <= self.open_hour:
            raise ValueError("close_hour must be later than open_hour")
        if self.long_duration_threshold_minutes < 60:
            raise ValueError("long_duration_threshold_minutes must be at least 60")

    @property
    def normal_start_hours(self) -> Tuple[int, ...]:
        """Start hours allowed for a normal slot on an empty day."""
        return (self.open_hour, self.open_hour + 4)

    @property
    def long_start_hours(self) -> Tuple[int, ...]:
        """Start hours allowed for a long slot on an empty day."""
        return (self.open_hour, self.open_hour + 1, self.open_hour + 2)

    def is_long(self, duration: Duration) -> bool:
        return duration.minutes > self.long_duration_threshold_minutes

    def window_for_day(self, day_key: str) -> Tuple[Instant, Instant]:
        """
        Get the business-hours window for a local date (``YYYY-MM-DD``).
        """
        day = pendulum.from_format(day_key, "YYYY-MM-DD", tz=BUSINESS_TIMEZONE)
        opening = day.set(hour=self.open_hour, minute=0, second=0, microsecond=0)
        closing = day.set(hour=self.close_hour, minute=0, second=0, microsecond=0)
        return Instant.from_datetime(opening), Instant.from_datetime(closing)


@dataclass(frozen=True)
class AvailableSlot:
    """
    Represents a found bookable slot.
    """
    time_range: TimeRange

    @property
    def start_at(self) -> str:
        return self.time_range.start.value

    @property
    def end_at(self) -> str:
        return self.time_range.end.value

    def to_dict(self) -> dict:
        return {"start_at": self.start_at, "end_at": self.end_at}

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, YYYY-MM-DD | HH:mm - HH:mm (3h)
        """
        start = self.time_range.start.local
        end = self.time_range.end.local
        weekday = start.format("dddd", locale="en")
        return (
            f"{weekday}, {start.format('YYYY-MM-DD')} | "
            f"{start.format('HH:mm')} - {end.format('HH:mm')} ({self.time_range.duration})"
        )
