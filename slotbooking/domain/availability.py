"""
Occupancy checks against the external calendar.

The calendar is the source of truth for occupied time, so the domain only
describes the question it needs answered (``SlotOccupancyQuery``) and leaves
the lookup to an adapter.
"""

from typing import Iterable, Protocol

from .models import OccupiedInterval, TimeRange

DEFAULT_BUFFER_MINUTES = 60


class SlotOccupancyQuery(Protocol):
    """Protocol describing the occupancy lookup needed by the checkers."""

    async def has_overlapping_event(self, *, time_range: TimeRange, buffer_minutes: int) -> bool:
        """
        Return True if the range, widened by ``buffer_minutes`` on both sides,
        overlaps any non-cancelled event.
        """


def validate_buffer_minutes(buffer_minutes: int) -> int:
    if isinstance(buffer_minutes, bool) or not isinstance(buffer_minutes, int):
        raise ValueError(f"buffer_minutes must be an integer, got {buffer_minutes!r}")
    if buffer_minutes < 0:
        raise ValueError(f"buffer_minutes must not be negative, got {buffer_minutes}")
    return buffer_minutes


def overlaps_any(
    time_range: TimeRange,
    intervals: Iterable[OccupiedInterval],
    buffer_minutes: int = 0,
) -> bool:
    """Check the range against already-fetched intervals (any order)."""
    return any(interval.overlaps(time_range, buffer_minutes) for interval in intervals)


class DuplicationChecker:
    """Is the exact range already taken? No spacing is enforced."""

    def __init__(self, occupancy_query: SlotOccupancyQuery):
        self._occupancy_query = occupancy_query

    async def is_duplicated(self, time_range: TimeRange) -> bool:
        return await self._occupancy_query.has_overlapping_event(
            time_range=time_range,
            buffer_minutes=0,
        )


class AvailabilityChecker:
    """
    Is the range unusable, either because it overlaps an event or because
    the required gap to a neighbouring event cannot be kept?
    """

    def __init__(
        self,
        occupancy_query: SlotOccupancyQuery,
        default_buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
    ):
        self._occupancy_query = occupancy_query
        self.default_buffer_minutes = validate_buffer_minutes(default_buffer_minutes)

    async def is_unavailable(self, time_range: TimeRange, buffer_minutes: int | None = None) -> bool:
        if buffer_minutes is None:
            buffer_minutes = self.default_buffer_minutes
        validate_buffer_minutes(buffer_minutes)

        return await self._occupancy_query.has_overlapping_event(
            time_range=time_range,
            buffer_minutes=buffer_minutes,
        )
