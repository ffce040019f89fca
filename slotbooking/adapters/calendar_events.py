"""
Calendar event query and repository backed by a Google Calendar client.

The client is synchronous (requests); calls are moved off the event loop
with ``asyncio.to_thread`` so the services can stay async.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol

import pendulum
from pendulum import DateTime

from ..domain.availability import overlaps_any, validate_buffer_minutes
from ..domain.exceptions import CalendarAPIError
from ..domain.models import BusinessHours, OccupiedInterval, TimeRange
from ..domain.temporal import BUSINESS_TIMEZONE, Instant

logger = logging.getLogger(__name__)

# Events that started up to a day before a window may still run into it.
LOOKBACK_MINUTES = 24 * 60

CANCELLED_STATUS = "cancelled"


class CalendarClientProtocol(Protocol):
    """The subset of the Google Calendar client the adapters rely on."""

    def list_events(self, calendar_id: str, time_min: str, time_max: str) -> List[Dict[str, Any]]:
        ...

    def insert_event(
        self,
        calendar_id: str,
        summary: str,
        start: str,
        end: str,
        description: Optional[str] = None,
    ) -> str:
        ...


def _parse_boundary(boundary: Dict[str, Any], event_id: str) -> Optional[DateTime]:
    """
    Parse an event ``start``/``end`` object. All-day values (``date``) are
    taken as local midnight on the business clock.
    """
    try:
        if boundary.get("dateTime"):
            parsed = pendulum.parse(boundary["dateTime"])
        elif boundary.get("date"):
            parsed = pendulum.from_format(boundary["date"], "YYYY-MM-DD", tz=BUSINESS_TIMEZONE)
        else:
            return None
    except ValueError as exc:
        raise CalendarAPIError(f"Event {event_id} has an unreadable time: {exc}") from exc

    if not isinstance(parsed, DateTime):
        raise CalendarAPIError(f"Event {event_id} has an unreadable time: {boundary!r}")
    return parsed


def parse_event_interval(event: Dict[str, Any]) -> Optional[OccupiedInterval]:
    """
    Convert a raw event resource into the time it occupies.

    Returns None for cancelled events, events without start/end and
    zero-length events. Times that are present but cannot be parsed raise
    ``CalendarAPIError``: an event we cannot read must not make a slot look
    free.
    """
    if event.get("status") == CANCELLED_STATUS:
        return None

    event_id = event.get("id", "<unknown>")
    start = _parse_boundary(event.get("start") or {}, event_id)
    end = _parse_boundary(event.get("end") or {}, event_id)
    if start is None or end is None:
        return None

    start_instant = Instant.from_datetime(start)
    end_instant = Instant.from_datetime(end)
    if start_instant >= end_instant:
        return None

    return OccupiedInterval(start=start_instant, end=end_instant)


class GoogleCalendarEventQuery:
    """
    Answers occupancy questions for one calendar.
    """

    def __init__(
        self,
        client: CalendarClientProtocol,
        calendar_id: str,
        business_hours: Optional[BusinessHours] = None,
    ):
        self.client = client
        self.calendar_id = calendar_id
        self.business_hours = business_hours or BusinessHours()

    async def list_active_events(self, time_min: Instant, time_max: Instant) -> List[OccupiedInterval]:
        """All non-cancelled events intersecting [time_min, time_max)."""
        raw_events = await asyncio.to_thread(
            self.client.list_events, self.calendar_id, time_min.value, time_max.value
        )

        intervals: List[OccupiedInterval] = []
        for raw in raw_events:
            interval = parse_event_interval(raw)
            if interval is not None and interval.overlaps_window(time_min, time_max):
                intervals.append(interval)

        logger.debug("%d active events between %s and %s", len(intervals), time_min, time_max)
        return intervals

    async def count_events_overlapping_business_hours(self, day_key: str) -> int:
        """Number of events touching the business-hours window of a local date."""
        opening, closing = self.business_hours.window_for_day(day_key)
        events = await self.list_active_events(opening.add_minutes(-LOOKBACK_MINUTES), closing)
        return sum(1 for event in events if event.overlaps_window(opening, closing))

    async def has_overlapping_event(self, *, time_range: TimeRange, buffer_minutes: int) -> bool:
        validate_buffer_minutes(buffer_minutes)
        time_min = time_range.start.add_minutes(-(buffer_minutes + LOOKBACK_MINUTES))
        time_max = time_range.end.add_minutes(buffer_minutes)

        events = await self.list_active_events(time_min, time_max)
        return overlaps_any(time_range, events, buffer_minutes)


class GoogleCalendarEventRepository:
    """
    Writes provisional holds into the calendar.
    """

    def __init__(self, client: CalendarClientProtocol, calendar_id: str):
        self.client = client
        self.calendar_id = calendar_id

    async def create_provisional_event(
        self,
        time_range: TimeRange,
        title: str,
        description: Optional[str] = None,
    ) -> str:
        event_id = await asyncio.to_thread(
            self.client.insert_event,
            self.calendar_id,
            title,
            time_range.start.value,
            time_range.end.value,
            description,
        )
        logger.info("Created calendar event %s for %s", event_id, time_range)
        return event_id
