"""
Client for a remote calendar API, usable wherever a local store is.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from pendulum import DateTime

from ..api.models.responses import EventResponse
from ..domain.exceptions import RemoteStoreError, ValidationError
from ..domain.models import CalendarSettings, Event, EventCreate, EventUpdate

logger = logging.getLogger(__name__)


class HttpCalendarStore:
    """
    Calendar storage that talks to a running calview API server.

    Implements the same protocol as the SQLite store, so the CLI can
    browse a calendar hosted elsewhere.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Server root, e.g. ``http://127.0.0.1:8000``
            timeout: Seconds to wait for each response
            session: Optional pre-configured session (shared connection pool)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(
                method, url, headers=self.headers, timeout=self.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise RemoteStoreError(f"Failed to reach calendar API at {url}: {e}") from e

        if response.status_code == 400:
            body = self._json(response)
            raise ValidationError(
                body.get("error", "Invalid request"),
                list(body.get("details", [])),
            )

        return response

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError:
            return {}

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise RemoteStoreError(f"Calendar API error: {e}") from e

    def _parse_events(self, payload: List[Dict[str, Any]]) -> List[Event]:
        return [EventResponse.model_validate(item).to_event() for item in payload]

    # Events

    def get_event(self, event_id: int) -> Optional[Event]:
        response = self._request("GET", f"/api/events/{event_id}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return EventResponse.model_validate(response.json()).to_event()

    def list_events(self, user_id: int) -> List[Event]:
        response = self._request("GET", "/api/events", params={"userId": user_id})
        self._raise_for_status(response)
        return self._parse_events(response.json())

    def get_events_in_range(self, user_id: int, start: DateTime, end: DateTime) -> List[Event]:
        response = self._request(
            "GET",
            "/api/events",
            params={
                "userId": user_id,
                "start": start.to_iso8601_string(),
                "end": end.to_iso8601_string(),
            },
        )
        self._raise_for_status(response)
        events = self._parse_events(response.json())
        logger.debug("Fetched %d events from %s", len(events), self.base_url)
        return events

    def create_event(self, draft: EventCreate) -> Event:
        response = self._request(
            "POST", "/api/events", json=draft.model_dump(mode="json", by_alias=True)
        )
        self._raise_for_status(response)
        return EventResponse.model_validate(response.json()).to_event()

    def update_event(self, event_id: int, patch: EventUpdate) -> Optional[Event]:
        response = self._request(
            "PUT",
            f"/api/events/{event_id}",
            json=patch.model_dump(mode="json", by_alias=True, exclude_unset=True),
        )
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return EventResponse.model_validate(response.json()).to_event()

    def delete_event(self, event_id: int) -> bool:
        response = self._request("DELETE", f"/api/events/{event_id}")
        if response.status_code == 404:
            return False
        self._raise_for_status(response)
        return True

    # Settings

    def get_settings(self, user_id: int) -> Optional[CalendarSettings]:
        """
        Settings as the server resolves them.

        The server already substitutes defaults, so this never returns None.
        """
        response = self._request("GET", "/api/settings", params={"userId": user_id})
        self._raise_for_status(response)
        return CalendarSettings.model_validate(response.json())

    def save_settings(self, user_id: int, settings: CalendarSettings) -> CalendarSettings:
        response = self._request(
            "POST",
            "/api/settings",
            params={"userId": user_id},
            json=settings.model_dump(mode="json", by_alias=True),
        )
        self._raise_for_status(response)
        return CalendarSettings.model_validate(response.json())

    def test_connection(self) -> Dict[str, Any]:
        """
        Check that the server is up.

        Returns:
            Health payload reported by the server

        Raises:
            RemoteStoreError: If the server cannot be reached or is unhealthy
        """
        response = self._request("GET", "/health")
        self._raise_for_status(response)
        return response.json()
