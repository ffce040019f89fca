"""
Service layer helpers that orchestrate calendar adapters and domain logic.
"""

from .booking_draft import BookingDraftCommand, BookingDraftService
from .eligibility import BookingEligibilityService, EligibilityResult
from .ports import CalendarEventQueryProtocol, CalendarEventRepositoryProtocol
from .provisional_booking import ProvisionalBooking, ProvisionalBookingCommand, ProvisionalBookingService
from .slot_search import NearestSlotSearchService, SlotSearchResult

__all__ = [
    "BookingDraftCommand",
    "BookingDraftService",
    "BookingEligibilityService",
    "CalendarEventQueryProtocol",
    "CalendarEventRepositoryProtocol",
    "EligibilityResult",
    "NearestSlotSearchService",
    "ProvisionalBooking",
    "ProvisionalBookingCommand",
    "ProvisionalBookingService",
    "SlotSearchResult",
]
