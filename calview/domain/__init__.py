"""
Domain layer - Pure business logic without external dependencies.
"""

from .event_selector import partition_all_day, select_in_window, sort_chronologically
from .exceptions import CalendarError, RemoteStoreError, StorageError, ValidationError
from .layout_engine import MIN_VISIBLE_HEIGHT, LayoutEngine
from .models import (
    CalendarSettings,
    DayBucket,
    DayLayout,
    Event,
    EventCreate,
    EventDisplayMode,
    EventUpdate,
    Granularity,
    MonthGrid,
    PositionedEvent,
    SettingsUpdate,
    Theme,
    TimeFormat,
    TimeRange,
    ViewWindow,
    WeekStart,
)
from .range_resolver import grid_span, resolve_window, shift_anchor
from .settings import DEFAULT_SETTINGS, merge_settings, resolve_settings

__all__ = [
    "CalendarError",
    "CalendarSettings",
    "DayBucket",
    "DayLayout",
    "DEFAULT_SETTINGS",
    "Event",
    "EventCreate",
    "EventDisplayMode",
    "EventUpdate",
    "Granularity",
    "LayoutEngine",
    "MIN_VISIBLE_HEIGHT",
    "MonthGrid",
    "PositionedEvent",
    "RemoteStoreError",
    "SettingsUpdate",
    "StorageError",
    "Theme",
    "TimeFormat",
    "TimeRange",
    "ValidationError",
    "ViewWindow",
    "WeekStart",
    "grid_span",
    "merge_settings",
    "partition_all_day",
    "resolve_settings",
    "resolve_window",
    "select_in_window",
    "shift_anchor",
    "sort_chronologically",
]
