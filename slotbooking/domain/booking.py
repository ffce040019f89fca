"""
Booking aggregate and its status lifecycle.

The lifecycle is a plain lookup table (status -> allowed next statuses);
the aggregate consults it for every status change.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional

from .exceptions import BookingStateError, TransitionError
from .identifiers import BookingId, CalendarEventId, CarId, Money, OptionId, ServiceId
from .models import TimeRange


class BookingStatus(str, Enum):
    DRAFT = "Draft"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"

    @classmethod
    def initial(cls) -> "BookingStatus":
        return cls.DRAFT


_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.DRAFT: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def _require_status(status) -> BookingStatus:
    if not isinstance(status, BookingStatus):
        raise ValueError(f"Invalid booking status: {status!r}")
    return status


class BookingLifecycle:
    """
    Stateless transition rules for BookingStatus.

    Draft -> Confirmed | Cancelled
    Confirmed -> Completed | Cancelled
    Completed and Cancelled are terminal.
    """

    @staticmethod
    def can_transition(from_status: BookingStatus, to_status: BookingStatus) -> bool:
        return _require_status(to_status) in _TRANSITIONS[_require_status(from_status)]

    @staticmethod
    def transition(from_status: BookingStatus, to_status: BookingStatus) -> BookingStatus:
        if not BookingLifecycle.can_transition(from_status, to_status):
            raise TransitionError(from_status, to_status)
        return to_status

    @staticmethod
    def next_statuses(from_status: BookingStatus) -> List[BookingStatus]:
        """Return a fresh list of legal next statuses, in declaration order."""
        allowed = _TRANSITIONS[_require_status(from_status)]
        return [status for status in BookingStatus if status in allowed]

    @staticmethod
    def is_terminal(status: BookingStatus) -> bool:
        return not _TRANSITIONS[_require_status(status)]


def _owned_option_ids(option_ids: Iterable[OptionId]) -> FrozenSet[OptionId]:
    """Copy option ids into an owned set, rejecting duplicates."""
    items = list(option_ids)
    unique = frozenset(items)
    if len(unique) != len(items):
        raise ValueError("option_ids must not contain duplicates")
    return unique


class Booking:
    """
    Aggregate root for a single booking.

    Build new bookings with ``Booking.create`` (always Draft, no calendar
    link) and stored ones with ``Booking.reconstruct``. State only changes
    through the methods below.
    """

    def __init__(
        self,
        booking_id: BookingId,
        car_id: CarId,
        service_id: ServiceId,
        option_ids: Iterable[OptionId],
        time_range: TimeRange,
        price: Money,
        status: BookingStatus,
        calendar_event_id: Optional[CalendarEventId] = None,
    ) -> None:
        _require_status(status)

        self._booking_id = booking_id
        self._car_id = car_id
        self._service_id = service_id
        self._option_ids = _owned_option_ids(option_ids)
        self._time_range = time_range
        self._price = price
        self._status = status
        self._calendar_event_id = calendar_event_id

    @classmethod
    def create(
        cls,
        *,
        booking_id: BookingId,
        car_id: CarId,
        service_id: ServiceId,
        option_ids: Iterable[OptionId],
        time_range: TimeRange,
        price: Money,
    ) -> "Booking":
        return cls(
            booking_id,
            car_id,
            service_id,
            option_ids,
            time_range,
            price,
            BookingStatus.initial(),
            calendar_event_id=None,
        )

    @classmethod
    def reconstruct(
        cls,
        *,
        booking_id: BookingId,
        car_id: CarId,
        service_id: ServiceId,
        option_ids: Iterable[OptionId],
        time_range: TimeRange,
        price: Money,
        status: BookingStatus,
        calendar_event_id: Optional[CalendarEventId] = None,
    ) -> "Booking":
        return cls(
            booking_id,
            car_id,
            service_id,
            option_ids,
            time_range,
            price,
            status,
            calendar_event_id=calendar_event_id,
        )

    # Draft-only mutations

    def change_price(self, price: Money) -> None:
        self._assert_draft("price")
        self._price = price

    def reschedule(self, time_range: TimeRange) -> None:
        self._assert_draft("time_range")
        self._time_range = time_range

    def change_car_id(self, car_id: CarId) -> None:
        self._assert_draft("car_id")
        self._car_id = car_id

    def change_service_id(self, service_id: ServiceId) -> None:
        self._assert_draft("service_id")
        self._service_id = service_id

    def change_option_ids(self, option_ids: Iterable[OptionId]) -> None:
        self._assert_draft("option_ids")
        self._option_ids = _owned_option_ids(option_ids)

    # Status transitions

    def change_status(self, next_status: BookingStatus) -> None:
        self._status = BookingLifecycle.transition(self._status, next_status)

    def confirm(self) -> None:
        self.change_status(BookingStatus.CONFIRMED)

    def cancel(self) -> None:
        self.change_status(BookingStatus.CANCELLED)

    def complete(self) -> None:
        self.change_status(BookingStatus.COMPLETED)

    # External calendar link

    def link_calendar_event(self, calendar_event_id: CalendarEventId) -> None:
        if self._status is BookingStatus.DRAFT:
            raise BookingStateError(
                "Cannot link a calendar event to a draft booking",
                status=self._status,
                field="calendar_event_id",
            )
        if self._calendar_event_id is not None:
            raise BookingStateError(
                f"Calendar event {self._calendar_event_id} is already linked",
                status=self._status,
                field="calendar_event_id",
            )
        self._calendar_event_id = calendar_event_id

    def unlink_calendar_event(self) -> None:
        if self._status is BookingStatus.COMPLETED:
            raise BookingStateError(
                "Cannot unlink the calendar event of a completed booking",
                status=self._status,
                field="calendar_event_id",
            )
        self._calendar_event_id = None

    def _assert_draft(self, field: str) -> None:
        if self._status is not BookingStatus.DRAFT:
            raise BookingStateError(
                f"Cannot change {field}",
                status=self._status,
                field=field,
            )

    @property
    def booking_id(self) -> BookingId:
        return self._booking_id

    @property
    def car_id(self) -> CarId:
        return self._car_id

    @property
    def service_id(self) -> ServiceId:
        return self._service_id

    @property
    def option_ids(self) -> FrozenSet[OptionId]:
        return self._option_ids

    @property
    def time_range(self) -> TimeRange:
        return self._time_range

    @property
    def price(self) -> Money:
        return self._price

    @property
    def status(self) -> BookingStatus:
        return self._status

    @property
    def calendar_event_id(self) -> Optional[CalendarEventId]:
        return self._calendar_event_id

    def to_dict(self) -> dict:
        return {
            "booking_id": self._booking_id.value,
            "car_id": self._car_id.value,
            "service_id": self._service_id.value,
            "option_ids": sorted(option.value for option in self._option_ids),
            "start_at": self._time_range.start.value,
            "duration_minutes": self._time_range.duration.minutes,
            "price_amount": self._price.amount,
            "price_currency": self._price.currency,
            "status": self._status.value,
            "calendar_event_id": (
                self._calendar_event_id.value if self._calendar_event_id else None
            ),
        }

    def __repr__(self) -> str:
        return f"Booking(id={self._booking_id}, status={self._status.value}, range={self._time_range})"
