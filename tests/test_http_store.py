"""
Tests for the remote calendar API client.
"""

from typing import Any, Dict, List

import pytest
import requests

from calview.adapters.http_store import HttpCalendarStore
from calview.domain.exceptions import RemoteStoreError, ValidationError
from calview.domain.models import CalendarSettings, EventUpdate, Theme

from conftest import at

EVENT_JSON = {
    "id": 5,
    "userId": 1,
    "title": "Standup",
    "description": None,
    "location": "Room 4",
    "startDate": "2024-03-15T10:00:00Z",
    "endDate": "2024-03-15T10:15:00Z",
    "allDay": False,
    "color": "#3498db",
    "notifications": False,
    "createdAt": "2024-03-01T08:00:00Z",
    "updatedAt": "2024-03-01T08:00:00Z",
}


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Records requests and replays queued responses."""

    def __init__(self, *responses: FakeResponse):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _store(*responses) -> tuple:
    session = FakeSession(*responses)
    return HttpCalendarStore("http://calendar.test/", timeout=3, session=session), session


class TestEvents:
    """Event calls."""

    def test_get_event(self):
        store, session = _store(FakeResponse(200, EVENT_JSON))

        event = store.get_event(5)

        assert event.title == "Standup"
        assert event.start_date == at("2024-03-15 10:00")
        assert session.calls[0]["url"] == "http://calendar.test/api/events/5"
        assert session.calls[0]["timeout"] == 3

    def test_get_missing_event(self):
        store, _ = _store(FakeResponse(404, {"error": "Event not found"}))

        assert store.get_event(5) is None

    def test_range_query_params(self):
        store, session = _store(FakeResponse(200, [EVENT_JSON]))

        events = store.get_events_in_range(1, at("2024-03-15"), at("2024-03-16"))

        assert len(events) == 1
        params = session.calls[0]["params"]
        assert params["userId"] == 1
        assert params["start"].startswith("2024-03-15T00:00:00")

    def test_create_sends_camel_case(self, draft):
        store, session = _store(FakeResponse(201, EVENT_JSON))

        store.create_event(draft())

        body = session.calls[0]["json"]
        assert body["userId"] == 1
        assert "startDate" in body

    def test_update_sends_only_supplied_fields(self):
        store, session = _store(FakeResponse(200, EVENT_JSON))

        store.update_event(5, EventUpdate(title="Retro", location=None))

        assert session.calls[0]["json"] == {"title": "Retro", "location": None}

    def test_delete(self):
        store, _ = _store(FakeResponse(204), FakeResponse(404, {}))

        assert store.delete_event(5)
        assert not store.delete_event(5)


class TestErrors:
    """Transport and server failures."""

    def test_validation_error_is_rebuilt(self, draft):
        store, _ = _store(
            FakeResponse(400, {"error": "Invalid EventCreate data", "details": ["title: required"]})
        )

        with pytest.raises(ValidationError) as exc_info:
            store.create_event(draft())

        assert exc_info.value.details == ["title: required"]

    def test_server_error(self):
        store, _ = _store(FakeResponse(503, {"error": "Storage unavailable"}))

        with pytest.raises(RemoteStoreError, match="Calendar API error"):
            store.list_events(1)

    def test_connection_failure(self):
        store, _ = _store(requests.exceptions.ConnectionError("refused"))

        with pytest.raises(RemoteStoreError, match="Failed to reach calendar API"):
            store.test_connection()


class TestSettings:
    """Settings calls."""

    def test_get_settings(self):
        store, session = _store(FakeResponse(200, {
            "theme": "light",
            "startOfWeek": "monday",
            "timeFormat": "24h",
            "eventDisplayMode": "text",
        }))

        settings = store.get_settings(1)

        assert settings.theme is Theme.LIGHT
        assert session.calls[0]["params"] == {"userId": 1}

    def test_save_settings(self):
        store, session = _store(FakeResponse(200, {
            "theme": "light",
            "startOfWeek": "sunday",
            "timeFormat": "12h",
            "eventDisplayMode": "dots",
        }))

        saved = store.save_settings(1, CalendarSettings(theme=Theme.LIGHT))

        assert saved.theme is Theme.LIGHT
        assert session.calls[0]["json"]["theme"] == "light"
