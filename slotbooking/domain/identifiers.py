"""
Small validated value objects used by the booking aggregate and flows.
"""

import re
import secrets
from dataclasses import dataclass

_URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def _check_length(name: str, value: str, min_length: int, max_length: int) -> None:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {type(value).__name__}")
    if not min_length <= len(value) <= max_length:
        raise ValueError(
            f"{name} must be {min_length}-{max_length} characters, got {len(value)}"
        )


def _check_url_safe(name: str, value: str) -> None:
    _check_length(name, value, 10, 50)
    if not _URL_SAFE.match(value):
        raise ValueError(f"{name} may only contain letters, digits, '-' and '_': {value!r}")


def _check_label(name: str, value: str) -> None:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {type(value).__name__}")
    _check_length(name, value.strip(), 1, 100)
    # checked on the raw value so a trailing newline is still caught
    if _CONTROL_CHARS.search(value):
        raise ValueError(f"{name} must not contain control characters")


@dataclass(frozen=True)
class BookingId:
    """Opaque booking identity token."""
    value: str

    def __post_init__(self):
        _check_url_safe("BookingId", self.value)

    @classmethod
    def generate(cls) -> "BookingId":
        return cls(secrets.token_urlsafe(16))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class OptionId:
    value: str

    def __post_init__(self):
        _check_url_safe("OptionId", self.value)

    @classmethod
    def generate(cls) -> "OptionId":
        return cls(secrets.token_urlsafe(16))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CarId:
    """
    Car model identifier, same free-form shape as the price list uses
    (e.g. "toyota-prius").
    """
    value: str

    def __post_init__(self):
        _check_label("CarId", self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ServiceId:
    """Identifier of a service menu entry (e.g. "rear-set")."""
    value: str

    def __post_init__(self):
        _check_label("ServiceId", self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CalendarEventId:
    """
    Event id assigned by the external calendar. The format belongs to the
    provider, so only the length is checked.
    """
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise ValueError(f"CalendarEventId must be a string, got {type(self.value).__name__}")
        _check_length("CalendarEventId", self.value.strip(), 1, 255)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Integer amount of yen."""
    amount: int
    currency: str = "JPY"

    MIN_AMOUNT = 0
    MAX_AMOUNT = 1_000_000_000

    def __post_init__(self):
        if self.currency != "JPY":
            raise ValueError(f"Unsupported currency: {self.currency!r}")
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValueError(f"Money amount must be an integer, got {self.amount!r}")
        if not self.MIN_AMOUNT <= self.amount <= self.MAX_AMOUNT:
            raise ValueError(f"Money amount out of range: {self.amount}")

    def add(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        if other.amount > self.amount:
            raise ValueError("Money cannot become negative")
        return Money(self.amount - other.amount, self.currency)

    def _assert_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"Currency mismatch: {self.currency} vs {other.currency}")

    def __str__(self) -> str:
        return f"{self.amount:,} {self.currency}"


@dataclass(frozen=True)
class CustomerName:
    value: str

    def __post_init__(self):
        _check_length("CustomerName", self.value, 1, 100)
        if not self.value.strip():
            raise ValueError("CustomerName must not be blank")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PhoneNumber:
    """
    Japanese phone number, held as ``+81`` followed by the national digits.

    Accepts "090-1234-5678", "09012345678", "+81 90 1234 5678",
    "+81(0)90-1234-5678" and "(03)1234-5678".
    """
    value: str

    COUNTRY_CODE = "81"
    _CANONICAL = re.compile(r"\+81[0-9]{9,10}")
    _MOBILE = re.compile(r"(090|080|070|060|050)[0-9]{8}")

    def __post_init__(self):
        canonical = self.normalize(self.value)
        if not self._CANONICAL.fullmatch(canonical):
            raise ValueError(f"Invalid phone number: {self.value!r}")
        object.__setattr__(self, "value", canonical)

    @classmethod
    def normalize(cls, raw: str) -> str:
        if not isinstance(raw, str):
            raise ValueError(f"Phone number must be a string, got {type(raw).__name__}")

        cleaned = re.sub(r"[()\s　-]", "", raw.strip())

        if cleaned.startswith("+"):
            if not cleaned.startswith(f"+{cls.COUNTRY_CODE}"):
                raise ValueError("Only Japanese phone numbers are supported")
            return re.sub(r"^\+810", "+81", cleaned)

        if not (cleaned.isascii() and cleaned.isdigit()) or not cleaned.startswith("0"):
            raise ValueError(f"Invalid phone number: {raw!r}")

        return f"+{cls.COUNTRY_CODE}{cleaned[1:]}"

    def domestic_digits(self) -> str:
        return "0" + self.value[len(self.COUNTRY_CODE) + 1:]

    def to_display(self) -> str:
        """Mobile numbers get hyphens, landlines stay as plain digits."""
        digits = self.domestic_digits()
        if self._MOBILE.fullmatch(digits):
            return f"{digits[:3]}-{digits[3:7]}-{digits[7:]}"
        return digits

    def __str__(self) -> str:
        return self.value
