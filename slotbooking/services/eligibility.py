"""
Eligibility check for a single requested slot.

A slot is bookable when it passes the business rules for its day and the
calendar holds nothing within the buffer around it. Business rejections are
returned as data; malformed input still raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..domain.availability import AvailabilityChecker
from ..domain.models import TimeRange
from ..domain.slot_rules import SlotRuleEvaluator
from ..domain.temporal import Duration, Instant
from .ports import CalendarEventQueryProtocol

logger = logging.getLogger(__name__)

REJECTED_BY_RULE = "rule"
REJECTED_BY_AVAILABILITY = "availability"

UNAVAILABLE_REASON = "slot already occupied or insufficient buffer"


@dataclass(frozen=True)
class NormalizedSlot:
    start_at: str
    end_at: str
    duration_minutes: int

    @classmethod
    def from_time_range(cls, time_range: TimeRange) -> "NormalizedSlot":
        return cls(
            start_at=time_range.start.value,
            end_at=time_range.end.value,
            duration_minutes=time_range.duration.minutes,
        )


@dataclass(frozen=True)
class EligibilityResult:
    bookable: bool
    reasons: List[str] = field(default_factory=list)
    normalized: Optional[NormalizedSlot] = None
    rejected_by: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"bookable": self.bookable, "reasons": list(self.reasons)}
        if self.normalized is not None:
            data["normalized"] = {
                "start_at": self.normalized.start_at,
                "end_at": self.normalized.end_at,
                "duration_minutes": self.normalized.duration_minutes,
            }
        return data


def build_time_range(start_at: Union[str, Instant], duration_minutes: int) -> TimeRange:
    """Validate raw request values into a TimeRange (FormatError / ValueError)."""
    start = start_at if isinstance(start_at, Instant) else Instant.parse(start_at)
    return TimeRange(start=start, duration=Duration(duration_minutes))


class BookingEligibilityService:
    """
    Composes the slot rules and the buffered availability check into one
    verdict.
    """

    def __init__(
        self,
        event_query: CalendarEventQueryProtocol,
        availability_checker: AvailabilityChecker,
        rule_evaluator: Optional[SlotRuleEvaluator] = None,
    ) -> None:
        self._event_query = event_query
        self._availability_checker = availability_checker
        self._rule_evaluator = rule_evaluator or SlotRuleEvaluator()

    async def check(
        self,
        start_at: Union[str, Instant],
        duration_minutes: int,
    ) -> EligibilityResult:
        time_range = build_time_range(start_at, duration_minutes)
        normalized = NormalizedSlot.from_time_range(time_range)

        day_key = time_range.start.day_key()
        existing_count = await self._event_query.count_events_overlapping_business_hours(day_key)

        rule = self._rule_evaluator.can_book(time_range, existing_count)
        if not rule.ok:
            logger.debug("Slot %s rejected by rules: %s", time_range, rule.reason)
            return EligibilityResult(
                bookable=False,
                reasons=[rule.reason or "slot is not permitted by booking rules"],
                normalized=normalized,
                rejected_by=REJECTED_BY_RULE,
            )

        if await self._availability_checker.is_unavailable(time_range):
            logger.debug("Slot %s rejected: calendar is occupied", time_range)
            return EligibilityResult(
                bookable=False,
                reasons=[UNAVAILABLE_REASON],
                normalized=normalized,
                rejected_by=REJECTED_BY_AVAILABILITY,
            )

        return EligibilityResult(bookable=True, reasons=[], normalized=normalized)
