"""
Shared fixtures: event factory, in-memory store and a temporary SQLite store.
"""

from itertools import count
from typing import Dict, List, Optional

import pendulum
import pytest

from calview.adapters.sqlite_store import SqliteCalendarStore
from calview.domain.event_selector import event_overlaps
from calview.domain.models import CalendarSettings, Event, EventCreate, EventUpdate

TZ = "UTC"


def at(value: str, tz: str = TZ) -> pendulum.DateTime:
    return pendulum.parse(value, tz=tz)


def make_event(
    start: str,
    end: str,
    *,
    event_id: int = 1,
    user_id: int = 1,
    title: str = "Event",
    all_day: bool = False,
    tz: str = TZ,
    **extra,
) -> Event:
    return Event(
        id=event_id,
        user_id=user_id,
        title=title,
        start_date=at(start, tz),
        end_date=at(end, tz),
        all_day=all_day,
        **extra,
    )


class InMemoryStore:
    """Minimal store matching CalendarStoreProtocol."""

    def __init__(self, events: Optional[List[Event]] = None):
        self.events: Dict[int, Event] = {e.id: e for e in events or []}
        self.settings: Dict[int, CalendarSettings] = {}
        self.range_calls: List[tuple] = []
        self._ids = count(max(self.events, default=0) + 1)

    def get_event(self, event_id):
        return self.events.get(event_id)

    def list_events(self, user_id):
        return sorted(
            (e for e in self.events.values() if e.user_id == user_id),
            key=lambda e: e.start_date,
            reverse=True,
        )

    def get_events_in_range(self, user_id, start, end):
        self.range_calls.append((user_id, start, end))
        return [
            e for e in self.events.values()
            if e.user_id == user_id and e.start_date < end and e.end_date > start
        ]

    def create_event(self, draft: EventCreate):
        event = Event(id=next(self._ids), **draft.model_dump())
        self.events[event.id] = event
        return event

    def update_event(self, event_id, patch: EventUpdate):
        current = self.events.get(event_id)
        if current is None:
            return None
        fields = {**current.__dict__, **patch.changes()}
        self.events[event_id] = Event(**fields)
        return self.events[event_id]

    def delete_event(self, event_id):
        return self.events.pop(event_id, None) is not None

    def get_settings(self, user_id):
        return self.settings.get(user_id)

    def save_settings(self, user_id, settings):
        self.settings[user_id] = settings
        return settings


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def sqlite_store(tmp_path):
    store = SqliteCalendarStore(tmp_path / "calendar.db")
    store.initialize()
    return store


@pytest.fixture
def draft():
    """Factory for EventCreate payloads with sensible defaults."""

    def _draft(start="2024-03-15 10:00", end="2024-03-15 11:00", **fields):
        data = {"user_id": 1, "title": "Standup", "start_date": at(start), "end_date": at(end)}
        data.update(fields)
        return EventCreate(**data)

    return _draft


def overlapping(events, start, end):
    return [e for e in events if event_overlaps(e, start, end)]
