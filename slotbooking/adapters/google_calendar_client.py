"""
Google Calendar API client for reading and writing shop calendar events.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from ..domain.exceptions import CalendarAPIError

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """
    Client for Google Calendar API v3 event operations.

    Authenticates as a service account; the shop calendar must be shared
    with the service account's email address.
    """

    CALENDAR_API_ENDPOINT = "https://www.googleapis.com/calendar/v3"
    SCOPES = ["https://www.googleapis.com/auth/calendar"]
    TOKEN_URI = "https://oauth2.googleapis.com/token"
    MAX_RESULTS = 2500

    def __init__(self, session: requests.Session):
        """
        Initialize the client.

        Args:
            session: An authorized requests session (normally an
                ``AuthorizedSession`` built by one of the constructors below)
        """
        self.session = session

    @classmethod
    def from_service_account_file(cls, path: Path) -> "GoogleCalendarClient":
        try:
            credentials = service_account.Credentials.from_service_account_file(
                str(path), scopes=cls.SCOPES
            )
        except (OSError, ValueError) as exc:
            raise CalendarAPIError(f"Could not load service account file {path}: {exc}") from exc
        return cls(AuthorizedSession(credentials))

    @classmethod
    def from_service_account_key(cls, email: str, private_key: str) -> "GoogleCalendarClient":
        """
        Build from a service account email and PEM key. Keys copied from
        environment files often carry literal ``\\n`` sequences; those are
        restored to newlines.
        """
        info = {
            "type": "service_account",
            "client_email": email,
            "private_key": private_key.replace("\\n", "\n"),
            "token_uri": cls.TOKEN_URI,
        }
        try:
            credentials = service_account.Credentials.from_service_account_info(
                info, scopes=cls.SCOPES
            )
        except ValueError as exc:
            raise CalendarAPIError(f"Invalid service account key: {exc}") from exc
        return cls(AuthorizedSession(credentials))

    def _events_url(self, calendar_id: str) -> str:
        return f"{self.CALENDAR_API_ENDPOINT}/calendars/{quote(calendar_id, safe='')}/events"

    def list_events(
        self,
        calendar_id: str,
        time_min: str,
        time_max: str,
    ) -> List[Dict[str, Any]]:
        """
        List single (expanded) events whose time intersects the window.

        Args:
            calendar_id: Calendar to read
            time_min: RFC 3339 lower bound
            time_max: RFC 3339 upper bound

        Returns:
            Raw event resources, across all result pages

        Raises:
            CalendarAPIError: If the API call fails
        """
        params: Dict[str, Any] = {
            "timeMin": time_min,
            "timeMax": time_max,
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": self.MAX_RESULTS,
        }
        events: List[Dict[str, Any]] = []

        while True:
            data = self._request("GET", self._events_url(calendar_id), params=params)
            events.extend(data.get("items", []))

            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params["pageToken"] = page_token

        logger.debug("Listed %d events from %s (%s - %s)", len(events), calendar_id, time_min, time_max)
        return events

    def insert_event(
        self,
        calendar_id: str,
        summary: str,
        start: str,
        end: str,
        description: Optional[str] = None,
    ) -> str:
        """
        Create a timed event and return its id.

        Raises:
            CalendarAPIError: If the API call fails or returns no id
        """
        body: Dict[str, Any] = {
            "summary": summary,
            "start": {"dateTime": start},
            "end": {"dateTime": end},
        }
        if description:
            body["description"] = description

        data = self._request("POST", self._events_url(calendar_id), json=body)

        event_id = data.get("id")
        if not event_id:
            raise CalendarAPIError("Google Calendar did not return an event id")
        return event_id

    def check_connection(self, calendar_id: str) -> Dict[str, Any]:
        """
        Test credentials and calendar sharing by fetching calendar metadata.

        Raises:
            CalendarAPIError: If the calendar cannot be read
        """
        url = f"{self.CALENDAR_API_ENDPOINT}/calendars/{quote(calendar_id, safe='')}"
        return self._request("GET", url)

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(method, url, timeout=30, **kwargs)
            response.raise_for_status()
            return response.json()

        except (requests.exceptions.RequestException, GoogleAuthError) as e:
            raise CalendarAPIError(f"Google Calendar request failed ({method} {url}): {e}") from e
