"""
Create a draft booking after a plain duplication check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..domain.availability import DuplicationChecker
from ..domain.booking import Booking
from ..domain.exceptions import Unavailable
from ..domain.identifiers import BookingId, CarId, Money, OptionId, ServiceId
from ..domain.temporal import Instant
from .eligibility import build_time_range

logger = logging.getLogger(__name__)


@dataclass
class BookingDraftCommand:
    car_id: str
    service_id: str
    start_at: Union[str, Instant]
    duration_minutes: int
    price_amount: int
    option_ids: List[str] = field(default_factory=list)
    booking_id: Optional[str] = None


class BookingDraftService:
    """Turns a request into a Draft ``Booking`` if the exact slot is free."""

    def __init__(self, duplication_checker: DuplicationChecker) -> None:
        self._duplication_checker = duplication_checker

    async def create_draft(self, command: BookingDraftCommand) -> Booking:
        booking_id = BookingId(command.booking_id) if command.booking_id else BookingId.generate()
        time_range = build_time_range(command.start_at, command.duration_minutes)

        booking = Booking.create(
            booking_id=booking_id,
            car_id=CarId(command.car_id),
            service_id=ServiceId(command.service_id),
            option_ids=[OptionId(option_id) for option_id in command.option_ids],
            time_range=time_range,
            price=Money(command.price_amount),
        )

        if await self._duplication_checker.is_duplicated(time_range):
            raise Unavailable(f"slot {time_range} is already booked")

        logger.info("Created draft booking %s for %s", booking_id, time_range)
        return booking
