"""
Mock Google Calendar client for running without service-account credentials.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Mock client that simulates Google Calendar API responses.

    Events are loaded from mock_calendar_data.json (or passed in directly)
    and kept in memory; inserted events are appended to the same list, so a
    later lookup sees them.
    """

    def __init__(
        self,
        events: Optional[List[Dict[str, Any]]] = None,
        data_file: Optional[Path] = None,
    ):
        if events is not None:
            self.events = [dict(event) for event in events]
        else:
            self.events = self._load_events(data_file or DEFAULT_DATA_FILE)
        self._next_id = 1

    @staticmethod
    def _load_events(data_file: Path) -> List[Dict[str, Any]]:
        if not data_file.exists():
            return []
        with open(data_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def list_events(self, calendar_id: str, time_min: str, time_max: str) -> List[Dict[str, Any]]:
        """
        Return events of ``calendar_id`` intersecting the window, sorted by start.

        Events without a ``calendarId`` belong to every calendar. Cancelled and
        all-day events are returned as-is, like the real API does.
        """
        window_start = pendulum.parse(time_min)
        window_end = pendulum.parse(time_max)

        matching = []
        for event in self.events:
            if event.get("calendarId", calendar_id) != calendar_id:
                continue
            start, end = self._bounds(event)
            if start is None or end is None:
                matching.append(event)
            elif start < window_end and end > window_start:
                matching.append(event)

        return sorted(matching, key=self._sort_key)

    def insert_event(
        self,
        calendar_id: str,
        summary: str,
        start: str,
        end: str,
        description: Optional[str] = None,
    ) -> str:
        event_id = f"mock_event_{self._next_id}"
        self._next_id += 1

        event: Dict[str, Any] = {
            "id": event_id,
            "calendarId": calendar_id,
            "status": "confirmed",
            "summary": summary,
            "start": {"dateTime": start},
            "end": {"dateTime": end},
        }
        if description:
            event["description"] = description

        self.events.append(event)
        logger.debug("Mock inserted %s: %s", event_id, summary)
        return event_id

    def check_connection(self, calendar_id: str) -> Dict[str, Any]:
        return {
            "id": calendar_id,
            "summary": "Mock Shop Calendar",
            "timeZone": "Asia/Tokyo",
        }

    @staticmethod
    def _bounds(event: Dict[str, Any]):
        """Start/end of a fixture event, or (None, None) if it has no readable times."""
        try:
            start = event["start"].get("dateTime") or event["start"]["date"]
            end = event["end"].get("dateTime") or event["end"]["date"]
            return pendulum.parse(start, tz="Asia/Tokyo"), pendulum.parse(end, tz="Asia/Tokyo")
        except (KeyError, AttributeError, ValueError):
            return None, None

    def _sort_key(self, event: Dict[str, Any]) -> str:
        start, _ = self._bounds(event)
        return start.in_timezone("UTC").isoformat() if start is not None else ""
