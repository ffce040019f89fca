"""
Adapters for the Google Calendar API.
"""

from .calendar_events import (
    GoogleCalendarEventQuery,
    GoogleCalendarEventRepository,
    parse_event_interval,
)
from .google_calendar_client import GoogleCalendarClient
from .mock_calendar_client import MockCalendarClient

__all__ = [
    "GoogleCalendarClient",
    "GoogleCalendarEventQuery",
    "GoogleCalendarEventRepository",
    "MockCalendarClient",
    "parse_event_interval",
]
