"""
Temporal primitives: an absolute instant with one canonical text form, and a
duration restricted to whole hours.

The business runs on a single fixed offset (JST, UTC+09:00, no DST). Every
instant is rendered as ``YYYY-MM-DDTHH:mm:ss.SSS+09:00`` and nothing else is
accepted when parsing.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import datetime

import pendulum
from pendulum import DateTime

from .exceptions import FormatError

BUSINESS_UTC_OFFSET_HOURS = 9
CANONICAL_OFFSET = "+09:00"
BUSINESS_TIMEZONE = pendulum.timezone(BUSINESS_UTC_OFFSET_HOURS * 3600)

_CANONICAL_PATTERN = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})\.([0-9]{3})"
    + re.escape(CANONICAL_OFFSET)
)

_MS_PER_MINUTE = 60 * 1000
_MS_PER_HOUR = 60 * _MS_PER_MINUTE


def _require_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


@dataclass(frozen=True, order=True)
class Instant:
    """
    An absolute point in time with millisecond precision.

    Equality and ordering follow the epoch-millisecond value only.
    """
    epoch_ms: int

    def __post_init__(self):
        _require_int(self.epoch_ms, "epoch_ms")

    @classmethod
    def parse(cls, text: str) -> "Instant":
        """
        Parse canonical text.

        Raises:
            FormatError: If the text is not exactly the canonical pattern
            ValueError: If the text names a date or time that does not exist
        """
        if not isinstance(text, str):
            raise FormatError(f"Instant text must be a string, got {type(text).__name__}")

        match = _CANONICAL_PATTERN.fullmatch(text)
        if not match:
            raise FormatError(
                f"Invalid instant format: {text!r} "
                f"(expected YYYY-MM-DDTHH:mm:ss.SSS{CANONICAL_OFFSET})"
            )

        year, month, day, hour, minute, second, millis = (int(g) for g in match.groups())
        try:
            dt = pendulum.datetime(
                year, month, day, hour, minute, second, millis * 1000,
                tz=BUSINESS_TIMEZONE,
            )
        except ValueError as exc:
            raise ValueError(f"Invalid instant value: {text!r} ({exc})") from exc

        return cls.from_datetime(dt)

    @classmethod
    def from_epoch_ms(cls, epoch_ms: int) -> "Instant":
        return cls(epoch_ms=_require_int(epoch_ms, "epoch_ms"))

    @classmethod
    def from_datetime(cls, dt: datetime) -> "Instant":
        """Build from a timezone-aware datetime, truncating to milliseconds."""
        if dt.tzinfo is None or dt.utcoffset() is None:
            raise ValueError(f"Datetime must be timezone-aware, got {dt!r}")

        seconds = calendar.timegm(dt.utctimetuple())
        return cls(epoch_ms=seconds * 1000 + dt.microsecond // 1000)

    @classmethod
    def now(cls) -> "Instant":
        return cls.from_datetime(pendulum.now(BUSINESS_TIMEZONE))

    @property
    def local(self) -> DateTime:
        """This instant on the business clock."""
        seconds, millis = divmod(self.epoch_ms, 1000)
        return pendulum.from_timestamp(seconds, tz=BUSINESS_TIMEZONE).set(
            microsecond=millis * 1000
        )

    @property
    def value(self) -> str:
        """Canonical text form."""
        local = self.local
        return (
            f"{local.year:04d}-{local.month:02d}-{local.day:02d}"
            f"T{local.hour:02d}:{local.minute:02d}:{local.second:02d}"
            f".{local.microsecond // 1000:03d}{CANONICAL_OFFSET}"
        )

    def day_key(self) -> str:
        """Local calendar date as ``YYYY-MM-DD``."""
        return self.local.to_date_string()

    def add_minutes(self, minutes: int) -> "Instant":
        _require_int(minutes, "minutes")
        return Instant(epoch_ms=self.epoch_ms + minutes * _MS_PER_MINUTE)

    def add_days(self, days: int) -> "Instant":
        _require_int(days, "days")
        return self.add_minutes(days * 24 * 60)

    def is_before(self, other: "Instant") -> bool:
        return self.epoch_ms < other.epoch_ms

    def is_after(self, other: "Instant") -> bool:
        return self.epoch_ms > other.epoch_ms

    def is_same(self, other: "Instant") -> bool:
        return self.epoch_ms == other.epoch_ms

    def is_hour_aligned(self) -> bool:
        local = self.local
        return local.minute == 0 and local.second == 0 and local.microsecond == 0

    def ceil_to_hour(self) -> "Instant":
        """
        Round up to the next full hour on the business clock.

        10:00 stays 10:00; 10:10 becomes 11:00.
        """
        if self.is_hour_aligned():
            return self

        local = self.local
        into_hour = (
            local.minute * _MS_PER_MINUTE
            + local.second * 1000
            + local.microsecond // 1000
        )
        return Instant(epoch_ms=self.epoch_ms - into_hour + _MS_PER_HOUR)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class Duration:
    """
    A length of time in whole hours, stored as minutes.

    Invariant: minutes >= 60 and minutes is a multiple of 60.
    """
    minutes: int

    MIN_MINUTES = 60

    def __post_init__(self):
        if isinstance(self.minutes, bool) or not isinstance(self.minutes, int):
            raise ValueError(f"Duration must be a whole number of minutes, got {self.minutes!r}")
        if self.minutes < self.MIN_MINUTES:
            raise ValueError(f"Duration must be at least 60 minutes, got {self.minutes}")
        if self.minutes % 60 != 0:
            raise ValueError(f"Duration must be a multiple of 60 minutes, got {self.minutes}")

    @classmethod
    def from_hours(cls, hours: int) -> "Duration":
        return cls(minutes=_require_int(hours, "hours") * 60)

    @property
    def hours(self) -> int:
        return self.minutes // 60

    def add(self, other: "Duration") -> "Duration":
        return Duration(minutes=self.minutes + other.minutes)

    def subtract(self, other: "Duration") -> "Duration":
        return Duration(minutes=self.minutes - other.minutes)

    def __str__(self) -> str:
        return f"{self.hours}h"
