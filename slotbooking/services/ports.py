"""
Protocols for the calendar collaborators the services depend on.

Adapters in ``slotbooking.adapters`` implement these; tests plug in
in-memory fakes.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from ..domain.models import OccupiedInterval, TimeRange
from ..domain.temporal import Instant


class CalendarEventQueryProtocol(Protocol):
    """Read side of the calendar."""

    async def list_active_events(
        self,
        time_min: Instant,
        time_max: Instant,
    ) -> List[OccupiedInterval]:
        """Return non-cancelled events intersecting [time_min, time_max)."""

    async def count_events_overlapping_business_hours(self, day_key: str) -> int:
        """Count non-cancelled events overlapping that local day's business hours."""

    async def has_overlapping_event(self, *, time_range: TimeRange, buffer_minutes: int) -> bool:
        """Return True if the buffered range overlaps any non-cancelled event."""


class CalendarEventRepositoryProtocol(Protocol):
    """Write side of the calendar."""

    async def create_provisional_event(
        self,
        time_range: TimeRange,
        title: str,
        description: Optional[str] = None,
    ) -> str:
        """Create an event holding the range and return its id."""
