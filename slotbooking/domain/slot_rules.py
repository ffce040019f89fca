"""
Business rules deciding whether a time range may be booked at all.

Pure domain logic: no calendar access. The caller supplies how many
bookings already occupy the same local day.

Rules (with the default 10:00-18:00 day):
- start >= 10:00 and end <= 18:00, on a single local date
- empty day: normal slots start at 10:00 or 14:00, long slots (> 5h)
  start at 10:00, 11:00 or 12:00
- day with bookings: normal slots are fine, long slots are refused
"""

from dataclasses import dataclass
from typing import Optional

from .models import BusinessHours, TimeRange


@dataclass(frozen=True)
class SlotRuleResult:
    ok: bool
    reason: Optional[str] = None


_OK = SlotRuleResult(ok=True)


class SlotRuleEvaluator:
    """
    Decides if a TimeRange is permitted given business hours and how busy
    the day already is.
    """

    def __init__(self, business_hours: Optional[BusinessHours] = None):
        self.business_hours = business_hours or BusinessHours()

    def can_book(self, time_range: TimeRange, existing_bookings_count: int) -> SlotRuleResult:
        if (
            isinstance(existing_bookings_count, bool)
            or not isinstance(existing_bookings_count, int)
            or existing_bookings_count < 0
        ):
            return SlotRuleResult(
                ok=False,
                reason="existing bookings count must be a non-negative integer",
            )

        business_hours = self._check_business_hours(time_range)
        if not business_hours.ok:
            return business_hours

        hours = self.business_hours
        is_long = hours.is_long(time_range.duration)

        if existing_bookings_count >= 1:
            if is_long:
                return SlotRuleResult(
                    ok=False,
                    reason="long slot: cannot be booked on a day that already has a booking",
                )
            return _OK

        start_hour = time_range.start.local.hour

        if is_long:
            if start_hour in hours.long_start_hours:
                return _OK
            return SlotRuleResult(
                ok=False,
                reason=(
                    "long slot: on a day without bookings it must start at "
                    + _format_hours(hours.long_start_hours)
                ),
            )

        if start_hour in hours.normal_start_hours:
            return _OK
        return SlotRuleResult(
            ok=False,
            reason=(
                "normal slot: on a day without bookings it must start at "
                + _format_hours(hours.normal_start_hours)
            ),
        )

    def _check_business_hours(self, time_range: TimeRange) -> SlotRuleResult:
        start = time_range.start.local
        end = time_range.end.local
        hours = self.business_hours

        if start.date() != end.date():
            return SlotRuleResult(ok=False, reason="slot must start and end on the same day")

        if start.hour < hours.open_hour:
            return SlotRuleResult(
                ok=False,
                reason=f"outside business hours: starts before opening ({hours.open_hour:02d}:00)",
            )

        ends_on_close = (
            end.hour == hours.close_hour
            and end.minute == 0
            and end.second == 0
            and end.microsecond == 0
        )
        if not (end.hour < hours.close_hour or ends_on_close):
            return SlotRuleResult(
                ok=False,
                reason=f"outside business hours: ends after closing ({hours.close_hour:02d}:00)",
            )

        return _OK


def _format_hours(hours) -> str:
    return ", ".join(f"{hour:02d}:00" for hour in hours)
