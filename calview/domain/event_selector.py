"""
Selects the events that intersect a view window.
"""

from typing import Iterable, List, Tuple

from pendulum import DateTime

from . import interval_math
from .models import Event, ViewWindow


def event_overlaps(event: Event, start: DateTime, end: DateTime) -> bool:
    """
    Half-open overlap of an event with ``[start, end)``.

    All-day events are compared on whole days of the window's timezone,
    ignoring their clock times.
    """
    if event.all_day:
        span = interval_math.all_day_span(
            interval_math.in_zone_of(event.start_date, start),
            interval_math.in_zone_of(event.end_date, start),
        )
        if span is None:
            return False
        return interval_math.overlaps(span[0], span[1], start, end)

    return interval_math.overlaps(event.start_date, event.end_date, start, end)


def select_in_window(events: Iterable[Event], window: ViewWindow) -> List[Event]:
    """Filter events overlapping the window, preserving input order."""
    return [
        event for event in events
        if event_overlaps(event, window.start, window.end)
    ]


def partition_all_day(events: Iterable[Event]) -> Tuple[List[Event], List[Event]]:
    """Split events into ``(all_day, timed)`` lists, each in input order."""
    all_day: List[Event] = []
    timed: List[Event] = []

    for event in events:
        if event.all_day:
            all_day.append(event)
        else:
            timed.append(event)

    return all_day, timed


def sort_chronologically(events: Iterable[Event]) -> List[Event]:
    """Sort by start date ascending; ties keep their input order."""
    return sorted(events, key=lambda e: e.start_date)


def is_degenerate(event: Event) -> bool:
    """Timed events ending at or before their start have nothing to render."""
    return not event.all_day and event.end_date <= event.start_date
