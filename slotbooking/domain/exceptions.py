"""
Domain-specific exception hierarchy for the booking application.
"""


class BookingError(Exception):
    """Base class for all application-level errors."""


class FormatError(BookingError, ValueError):
    """Raised when textual input does not match its canonical form."""


class TransitionError(BookingError):
    """Raised when a booking status change is not allowed by the lifecycle."""

    def __init__(self, from_status, to_status):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Booking status cannot transition from {from_status.value} to {to_status.value}"
        )


class BookingStateError(BookingError):
    """Raised when an operation is not permitted in the booking's current status."""

    def __init__(self, message: str, *, status, field: str | None = None):
        self.status = status
        self.field = field
        super().__init__(f"{message} (status={status.value})")


class RuleViolation(BookingError):
    """Raised when a slot breaks business-hours or start-time rules."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class Unavailable(BookingError):
    """Raised when a slot collides with occupied time in the calendar."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class CalendarAPIError(BookingError):
    """Raised when calendar data cannot be fetched, parsed or written."""
