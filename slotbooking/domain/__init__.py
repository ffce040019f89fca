"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityChecker, DuplicationChecker, SlotOccupancyQuery
from .booking import Booking, BookingLifecycle, BookingStatus
from .models import AvailableSlot, BusinessHours, OccupiedInterval, TimeRange
from .slot_rules import SlotRuleEvaluator, SlotRuleResult
from .temporal import Duration, Instant

__all__ = [
    "AvailabilityChecker",
    "AvailableSlot",
    "Booking",
    "BookingLifecycle",
    "BookingStatus",
    "BusinessHours",
    "Duration",
    "DuplicationChecker",
    "Instant",
    "OccupiedInterval",
    "SlotOccupancyQuery",
    "SlotRuleEvaluator",
    "SlotRuleResult",
    "TimeRange",
]
