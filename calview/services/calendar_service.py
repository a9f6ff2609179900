"""
Application services for browsing and editing a user's calendar.

The service coordinates fetching events via a storage adapter and delegates
window resolution, selection and layout to the domain layer. This keeps the
CLI and the HTTP API thin and allows the storage dependency to be swapped
(local SQLite, remote API, in-memory stub in tests) via a simple protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Protocol, Union

from pendulum import DateTime

from ..domain import range_resolver
from ..domain.event_selector import event_overlaps, sort_chronologically
from ..domain.exceptions import ValidationError
from ..domain.layout_engine import LayoutEngine
from ..domain.models import (
    CalendarSettings,
    DayLayout,
    Event,
    EventCreate,
    EventUpdate,
    Granularity,
    MonthGrid,
    SettingsUpdate,
    ViewWindow,
)
from ..domain.settings import merge_settings, resolve_settings

logger = logging.getLogger(__name__)


class CalendarStoreProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    def get_event(self, event_id: int) -> Optional[Event]:
        """Return the event, or None if it does not exist."""

    def list_events(self, user_id: int) -> List[Event]:
        """Return all of a user's events, newest first."""

    def get_events_in_range(self, user_id: int, start: DateTime, end: DateTime) -> List[Event]:
        """Return at least every event overlapping ``[start, end)``."""

    def create_event(self, draft: EventCreate) -> Event:
        """Insert an event and return it with server-set fields."""

    def update_event(self, event_id: int, patch: EventUpdate) -> Optional[Event]:
        """Apply a partial update; None if the event does not exist."""

    def delete_event(self, event_id: int) -> bool:
        """Delete an event; False if it did not exist."""

    def get_settings(self, user_id: int) -> Optional[CalendarSettings]:
        """Return the stored settings row, or None if the user has none."""

    def save_settings(self, user_id: int, settings: CalendarSettings) -> CalendarSettings:
        """Insert or replace the user's settings row."""


@dataclass
class CalendarView:
    """Render-ready content of one view."""
    window: ViewWindow
    settings: CalendarSettings
    events: List[Event] = field(default_factory=list)
    days: List[DayLayout] = field(default_factory=list)
    months: List[MonthGrid] = field(default_factory=list)


class CalendarService:
    """
    Orchestrates storage access, range resolution and layout.

    Every operation takes an explicit user id; choosing a default user is
    left to the caller.
    """

    def __init__(
        self,
        store: CalendarStoreProtocol,
        layout_engine: Optional[LayoutEngine] = None,
        timezone: str = "UTC",
    ) -> None:
        self._store = store
        self._layout_engine = layout_engine or LayoutEngine()
        self._timezone = timezone

    @property
    def timezone(self) -> str:
        return self._timezone

    # Views

    def events_in_window(self, user_id: int, window: ViewWindow) -> List[Event]:
        """Events overlapping the window, in chronological order."""
        return self.events_between(user_id, window.start, window.end)

    def render_view(self, user_id: int, granularity: Granularity, anchor: DateTime) -> CalendarView:
        """
        Resolve the window around ``anchor`` and lay out its events.

        Week and day views get per-day vertical layouts; month and year views
        get day buckets.
        """
        anchor = anchor.in_timezone(self._timezone)
        settings = self.get_settings(user_id)
        window = range_resolver.resolve_window(anchor, granularity, settings.start_of_week)
        view = CalendarView(window=window, settings=settings)

        if granularity is Granularity.MONTH:
            grid_start, grid_end = range_resolver.grid_span(anchor, settings.start_of_week)
            grid_events = self.events_between(user_id, grid_start, grid_end)
            view.events = [e for e in grid_events if event_overlaps(e, window.start, window.end)]
            view.months = [
                self._layout_engine.month_grid(
                    grid_events, anchor, settings.start_of_week, settings.event_display_mode
                )
            ]
        elif granularity is Granularity.YEAR:
            view.events = self.events_in_window(user_id, window)
            view.months = self._layout_engine.year_grids(
                view.events, anchor, settings.start_of_week, settings.event_display_mode
            )
        else:
            view.events = self.events_in_window(user_id, window)
            view.days = self._layout_engine.layout_days(
                view.events, window.start, window.end, settings.time_format
            )

        logger.debug(
            "Rendered %s view %r for user %s with %d events",
            granularity.value, window.label, user_id, len(view.events),
        )
        return view

    def events_between(self, user_id: int, start: DateTime, end: DateTime) -> List[Event]:
        """Events overlapping ``[start, end)``, in chronological order."""
        # Widen the query by a day so all-day events stored with clock times
        # on their boundary days are not lost, then re-check exactly.
        candidates = self._store.get_events_in_range(
            user_id, start.subtract(days=1), end.add(days=1)
        )
        selected = [e for e in candidates if event_overlaps(e, start, end)]
        logger.debug("Selected %d of %d candidate events", len(selected), len(candidates))
        return sort_chronologically(selected)

    # Events

    def get_event(self, event_id: int) -> Optional[Event]:
        return self._store.get_event(event_id)

    def list_events(self, user_id: int) -> List[Event]:
        return self._store.list_events(user_id)

    def create_event(self, draft: EventCreate) -> Event:
        if draft.user_id is None:
            raise ValidationError("Event has no user id", ["userId: field required"])
        event = self._store.create_event(draft)
        logger.info("Created event %s for user %s", event.id, event.user_id)
        return event

    def update_event(self, event_id: int, patch: EventUpdate) -> Optional[Event]:
        event = self._store.update_event(event_id, patch)
        if event is None:
            logger.info("Update skipped, event %s not found", event_id)
        return event

    def delete_event(self, event_id: int) -> bool:
        deleted = self._store.delete_event(event_id)
        if deleted:
            logger.info("Deleted event %s", event_id)
        return deleted

    # Settings

    def get_settings(self, user_id: int) -> CalendarSettings:
        """Stored settings, or the defaults if the user has never saved any."""
        return resolve_settings(self._store.get_settings(user_id))

    def update_settings(
        self,
        user_id: int,
        partial: Union[SettingsUpdate, Mapping[str, Any]],
    ) -> CalendarSettings:
        """
        Read-modify-write merge of a partial settings update.

        Concurrent updates are last-write-wins.
        """
        merged = merge_settings(self.get_settings(user_id), partial)
        return self._store.save_settings(user_id, merged)
