"""
Tests for the HTTP API.
"""

import pendulum
import pytest
from fastapi.testclient import TestClient

from calview import __version__
from calview.api.dependencies import get_config, get_service
from calview.api.main import create_app
from calview.config import AppConfig
from calview.domain.exceptions import StorageError
from calview.services.calendar_service import CalendarService

from conftest import InMemoryStore

EVENT = {
    "title": "Standup",
    "startDate": "2024-03-15T09:00:00Z",
    "endDate": "2024-03-15T09:15:00Z",
}


@pytest.fixture
def config():
    return AppConfig(default_user_id=7)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def client(config, store):
    app = create_app()
    service = CalendarService(store, timezone=config.timezone)
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_service] = lambda: service
    return TestClient(app)


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["version"] == __version__


class TestEventRoutes:
    """CRUD and range queries."""

    def test_create_uses_default_user(self, client):
        response = client.post("/api/events", json=EVENT)

        assert response.status_code == 201
        body = response.json()
        assert body["userId"] == 7
        assert body["color"] == "#3498db"
        assert body["allDay"] is False

    def test_create_rejects_empty_title(self, client):
        response = client.post("/api/events", json={**EVENT, "title": " "})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"][0].startswith("title")

    def test_get_update_delete(self, client):
        event_id = client.post("/api/events", json=EVENT).json()["id"]

        assert client.get(f"/api/events/{event_id}").json()["title"] == "Standup"

        updated = client.put(f"/api/events/{event_id}", json={"location": "Room 4"})
        assert updated.json()["location"] == "Room 4"
        assert updated.json()["title"] == "Standup"

        assert client.delete(f"/api/events/{event_id}").status_code == 204
        assert client.get(f"/api/events/{event_id}").status_code == 404

    def test_missing_event(self, client):
        response = client.put("/api/events/999", json={"title": "x"})

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_range_query(self, client):
        client.post("/api/events", json=EVENT)
        client.post("/api/events", json={
            **EVENT,
            "startDate": "2024-03-16T00:00:00Z",
            "endDate": "2024-03-16T01:00:00Z",
        })

        response = client.get("/api/events", params={"start": "2024-03-15", "end": "2024-03-16"})

        assert response.status_code == 200
        assert [e["startDate"][:10] for e in response.json()] == ["2024-03-15"]

    def test_range_query_needs_both_bounds(self, client):
        response = client.get("/api/events", params={"start": "2024-03-15"})

        assert response.status_code == 400

    def test_bad_date(self, client):
        response = client.get("/api/events", params={"start": "yesterday", "end": "2024-03-16"})

        assert response.status_code == 400
        assert "Invalid date format" in response.json()["error"]

    def test_other_user(self, client):
        client.post("/api/events", json={**EVENT, "userId": 3})

        assert client.get("/api/events").json() == []
        assert len(client.get("/api/events", params={"userId": 3}).json()) == 1


class TestSettingsRoutes:
    """Per-user settings."""

    def test_defaults(self, client):
        assert client.get("/api/settings").json() == {
            "theme": "dark",
            "startOfWeek": "sunday",
            "timeFormat": "12h",
            "eventDisplayMode": "dots",
        }

    def test_partial_update(self, client, store):
        client.post("/api/settings", json={"theme": "light"})
        response = client.post("/api/settings", json={"timeFormat": "24h"})

        assert response.json()["theme"] == "light"
        assert response.json()["timeFormat"] == "24h"
        assert store.settings[7].theme.value == "light"

    def test_invalid_value(self, client):
        response = client.post("/api/settings", json={"startOfWeek": "wednesday"})

        assert response.status_code == 400


class TestViewRoutes:
    """Render-ready views."""

    def test_day_view(self, client):
        client.post("/api/events", json=EVENT)

        body = client.get("/api/views/day", params={"date": "2024-03-15"}).json()

        assert body["label"] == "Friday, Mar 15, 2024"
        timed = body["days"][0]["timed"][0]
        assert timed["topPercentage"] == pytest.approx(37.5)
        assert timed["heightPercentage"] == pytest.approx(15 / 1440 * 100)
        assert timed["displayStartTime"] == "9:00 AM"

    def test_month_view(self, client):
        client.post("/api/events", json=EVENT)

        body = client.get("/api/views/month", params={"date": "2024-03-15"}).json()

        grid = body["months"][0]
        assert grid["eventCount"] == 1
        assert len(grid["weeks"]) == 6
        assert grid["weeks"][0][0]["inCurrentMonth"] is False

    def test_unknown_granularity(self, client):
        response = client.get("/api/views/decade")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"


def test_storage_failure_is_503(config):
    class BrokenStore(InMemoryStore):
        def list_events(self, user_id):
            raise StorageError("disk full")

    app = create_app()
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_service] = lambda: CalendarService(BrokenStore())

    response = TestClient(app).get("/api/events")

    assert response.status_code == 503
    assert response.json()["code"] == "STORAGE_ERROR"


def test_health_reports_unreachable_store(config):
    class BrokenStore(InMemoryStore):
        def get_settings(self, user_id):
            raise StorageError("database is locked")

    app = create_app()
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_service] = lambda: CalendarService(BrokenStore())

    response = TestClient(app).get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"
    assert response.json()["error"] == "database is locked"


class TestBerlinDisplayTimezone:
    """Offset-less datetimes mean the same instant at every endpoint."""

    NAIVE_EVENT = {
        "title": "Lunch",
        "startDate": "2024-03-15T12:00:00",
        "endDate": "2024-03-15T13:00:00",
    }

    @pytest.fixture
    def config(self):
        return AppConfig(timezone="Europe/Berlin")

    def test_created_event_is_found_by_same_strings(self, client):
        created = client.post("/api/events", json=self.NAIVE_EVENT)

        assert created.status_code == 201
        assert pendulum.parse(created.json()["startDate"]) == pendulum.datetime(2024, 3, 15, 11, tz="UTC")

        response = client.get("/api/events", params={
            "start": "2024-03-15T12:00:00",
            "end": "2024-03-15T13:00:00",
        })

        assert [e["title"] for e in response.json()] == ["Lunch"]

    def test_day_view_shows_entered_clock_time(self, client):
        client.post("/api/events", json=self.NAIVE_EVENT)

        body = client.get("/api/views/day", params={"date": "2024-03-15"}).json()

        timed = body["days"][0]["timed"][0]
        assert timed["displayStartTime"] == "12:00 PM"
        assert timed["topPercentage"] == pytest.approx(50.0)

    def test_update_reads_naive_time_in_display_timezone(self, client):
        event_id = client.post("/api/events", json=self.NAIVE_EVENT).json()["id"]

        updated = client.put(f"/api/events/{event_id}", json={"endDate": "2024-03-15T14:00:00"})

        assert pendulum.parse(updated.json()["endDate"]) == pendulum.datetime(2024, 3, 15, 13, tz="UTC")
