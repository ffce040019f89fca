"""
Provisional booking: hold a slot by creating a placeholder event in the
shop calendar once the slot is confirmed eligible.

The eligibility check and the event creation are two separate calendar
calls, so two concurrent requests can still both succeed; the calendar
remains the final arbiter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..domain.exceptions import RuleViolation, Unavailable
from ..domain.identifiers import CarId, CustomerName, PhoneNumber
from .eligibility import REJECTED_BY_RULE, BookingEligibilityService, build_time_range
from .ports import CalendarEventRepositoryProtocol

logger = logging.getLogger(__name__)

TITLE_PREFIX = "[Provisional]"


@dataclass
class ProvisionalBookingCommand:
    car_id: str
    start_at: str
    duration_minutes: int
    customer_name: str
    phone_number: str
    car_model_name: Optional[str] = None
    service_label: Optional[str] = None
    channel: Optional[str] = None


@dataclass(frozen=True)
class ProvisionalBooking:
    car_id: str
    start_at: str
    duration_minutes: int
    calendar_event_id: str

    def to_dict(self) -> dict:
        return {
            "car_id": self.car_id,
            "start_at": self.start_at,
            "duration_minutes": self.duration_minutes,
            "calendar_event_id": self.calendar_event_id,
        }


class ProvisionalBookingService:
    def __init__(
        self,
        eligibility_service: BookingEligibilityService,
        event_repository: CalendarEventRepositoryProtocol,
    ) -> None:
        self._eligibility_service = eligibility_service
        self._event_repository = event_repository

    async def create(self, command: ProvisionalBookingCommand) -> ProvisionalBooking:
        """
        Validate the command, check eligibility and create the calendar event.

        Raises:
            FormatError / ValueError: If the command is malformed
            RuleViolation: If the slot breaks the booking rules
            Unavailable: If the slot is occupied or too close to another event
        """
        car_id = CarId(command.car_id)
        customer_name = CustomerName(command.customer_name.strip())
        phone_number = PhoneNumber(command.phone_number)
        time_range = build_time_range(command.start_at, command.duration_minutes)

        eligibility = await self._eligibility_service.check(time_range.start, time_range.duration.minutes)
        if not eligibility.bookable:
            reason = " / ".join(eligibility.reasons)
            if eligibility.rejected_by == REJECTED_BY_RULE:
                raise RuleViolation(reason)
            raise Unavailable(reason)

        title = self.build_title(command, customer_name)
        description = self.build_description(command, car_id, customer_name, phone_number)

        event_id = await self._event_repository.create_provisional_event(
            time_range, title, description
        )
        logger.info("Held %s with calendar event %s", time_range, event_id)

        return ProvisionalBooking(
            car_id=car_id.value,
            start_at=time_range.start.value,
            duration_minutes=time_range.duration.minutes,
            calendar_event_id=event_id,
        )

    @staticmethod
    def build_title(command: ProvisionalBookingCommand, customer_name: CustomerName) -> str:
        """e.g. "[Provisional] Prius Rear set (Tanahara)" """
        parts: List[str] = [TITLE_PREFIX]
        if command.car_model_name:
            parts.append(command.car_model_name)
        if command.service_label:
            parts.append(command.service_label)
        parts.append(f"({customer_name})")
        return " ".join(parts)

    @staticmethod
    def build_description(
        command: ProvisionalBookingCommand,
        car_id: CarId,
        customer_name: CustomerName,
        phone_number: PhoneNumber,
    ) -> str:
        lines = [
            f"Name: {customer_name}",
            f"Phone: {phone_number.to_display()}",
        ]
        if command.car_model_name:
            lines.append(f"Car model: {command.car_model_name}")
        if command.service_label:
            lines.append(f"Service: {command.service_label}")
        if command.channel:
            lines.append(f"Channel: {command.channel}")
        lines.append(f"car_id: {car_id}")
        return "\n".join(lines)
