"""
Nearest-slot search.

Walks hour-aligned candidate start times forward from a reference instant
and keeps the ones that pass the business rules and stay clear of calendar
events (with the buffer). Calendar events are fetched once for the whole
window, so the scan itself is pure computation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..domain.availability import DEFAULT_BUFFER_MINUTES, overlaps_any, validate_buffer_minutes
from ..domain.models import AvailableSlot, OccupiedInterval, TimeRange
from ..domain.slot_rules import SlotRuleEvaluator
from ..domain.temporal import Duration, Instant
from .ports import CalendarEventQueryProtocol

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
MIN_LIMIT = 1
MAX_LIMIT = 20
DEFAULT_SEARCH_DAYS = 14
MIN_SEARCH_DAYS = 1
MAX_SEARCH_DAYS = 90


@dataclass(frozen=True)
class SlotSearchResult:
    from_at: str
    duration_minutes: int
    slots: List[AvailableSlot]

    def to_dict(self) -> dict:
        return {
            "from": self.from_at,
            "duration_minutes": self.duration_minutes,
            "slots": [slot.to_dict() for slot in self.slots],
        }


def clamp_int(value: int, minimum: int, maximum: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return max(minimum, min(maximum, value))


class NearestSlotSearchService:
    """
    Finds the first N bookable slots after a reference time.

    Algorithm:
    1. Round the reference time up to the next full hour
    2. Fetch all active events around the search window in one call
    3. Count, per local day, the events touching that day's business hours
    4. Step through candidates hour by hour, applying the rules and the
       buffered overlap test, until the window or the limit is exhausted
    """

    def __init__(
        self,
        event_query: CalendarEventQueryProtocol,
        rule_evaluator: Optional[SlotRuleEvaluator] = None,
        buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
        default_limit: int = DEFAULT_LIMIT,
        default_search_days: int = DEFAULT_SEARCH_DAYS,
    ) -> None:
        self._event_query = event_query
        self._rule_evaluator = rule_evaluator or SlotRuleEvaluator()
        self.buffer_minutes = validate_buffer_minutes(buffer_minutes)
        self.default_limit = default_limit
        self.default_search_days = default_search_days

    async def find_nearest_slots(
        self,
        *,
        duration_minutes: int,
        from_at: Union[str, Instant, None] = None,
        limit: Optional[int] = None,
        search_days: Optional[int] = None,
    ) -> SlotSearchResult:
        duration = Duration(duration_minutes)
        limit = clamp_int(
            self.default_limit if limit is None else limit, MIN_LIMIT, MAX_LIMIT, "limit"
        )
        search_days = clamp_int(
            self.default_search_days if search_days is None else search_days,
            MIN_SEARCH_DAYS,
            MAX_SEARCH_DAYS,
            "search_days",
        )

        if from_at is None:
            raw_from = Instant.now()
        elif isinstance(from_at, Instant):
            raw_from = from_at
        else:
            raw_from = Instant.parse(from_at)

        from_aligned = raw_from.ceil_to_hour()
        window_end = from_aligned.add_days(search_days)

        day_keys = self._day_keys(from_aligned, window_end)
        fetch_min, fetch_max = self._fetch_window(from_aligned, window_end, duration, day_keys)

        events = await self._event_query.list_active_events(fetch_min, fetch_max)
        logger.debug(
            "Searching %s slots from %s to %s against %d events",
            duration, from_aligned, window_end, len(events),
        )

        counts = self._count_by_day(events, day_keys)

        slots = self.scan(
            from_aligned=from_aligned,
            window_end=window_end,
            duration=duration,
            events=events,
            bookings_per_day=counts,
            limit=limit,
        )

        return SlotSearchResult(
            from_at=from_aligned.value,
            duration_minutes=duration.minutes,
            slots=slots,
        )

    def scan(
        self,
        *,
        from_aligned: Instant,
        window_end: Instant,
        duration: Duration,
        events: Sequence[OccupiedInterval],
        bookings_per_day: Dict[str, int],
        limit: int,
    ) -> List[AvailableSlot]:
        """Step through hour-aligned candidates; pure computation."""
        slots: List[AvailableSlot] = []
        cursor = from_aligned

        while cursor < window_end and len(slots) < limit:
            candidate = TimeRange(start=cursor, duration=duration)
            existing = bookings_per_day.get(cursor.day_key(), 0)

            rule = self._rule_evaluator.can_book(candidate, existing)
            if rule.ok and not overlaps_any(candidate, events, self.buffer_minutes):
                slots.append(AvailableSlot(time_range=candidate))

            cursor = cursor.add_minutes(60)

        return slots

    def _fetch_window(
        self,
        from_aligned: Instant,
        window_end: Instant,
        duration: Duration,
        day_keys: List[str],
    ) -> Tuple[Instant, Instant]:
        """
        Widen [from_aligned, window_end) so the single listing also covers
        the buffer around edge candidates and the business hours of every
        scanned day.
        """
        business_hours = self._rule_evaluator.business_hours
        first_open, _ = business_hours.window_for_day(day_keys[0])
        _, last_close = business_hours.window_for_day(day_keys[-1])

        fetch_min = min(from_aligned.add_minutes(-self.buffer_minutes), first_open)
        fetch_max = max(
            window_end.add_minutes(duration.minutes + self.buffer_minutes),
            last_close,
        )
        return fetch_min, fetch_max

    def _count_by_day(
        self,
        events: Sequence[OccupiedInterval],
        day_keys: List[str],
    ) -> Dict[str, int]:
        """
        Existing bookings per day, counted as events overlapping that day's
        business-hours window. An event starting the previous evening still
        counts for the next morning.
        """
        business_hours = self._rule_evaluator.business_hours
        counts: Dict[str, int] = {}

        for day_key in day_keys:
            opening, closing = business_hours.window_for_day(day_key)
            counts[day_key] = sum(
                1 for event in events if event.overlaps_window(opening, closing)
            )

        return counts

    @staticmethod
    def _day_keys(from_aligned: Instant, window_end: Instant) -> List[str]:
        """Local dates touched by candidate starts in [from_aligned, window_end)."""
        current = from_aligned.local.start_of("day")
        last = window_end.add_minutes(-1).local.start_of("day")

        keys: List[str] = []
        while current <= last:
            keys.append(current.to_date_string())
            current = current.add(days=1)
        return keys
