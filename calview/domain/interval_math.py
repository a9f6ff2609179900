"""
Primitive interval operations on pendulum datetimes.

All intervals are half-open: ``[start, end)``. Period boundaries are
computed in the timezone the input datetime carries.
"""

from typing import Iterator, Optional, Tuple

from pendulum import DateTime

from .models import TimeRange, WeekStart

MINUTES_PER_DAY = 24 * 60


def start_of_day(dt: DateTime) -> DateTime:
    return dt.start_of("day")


def end_of_day(dt: DateTime) -> DateTime:
    return dt.end_of("day")


def start_of_week(dt: DateTime, week_start: WeekStart) -> DateTime:
    """Most recent ``week_start`` weekday at or before ``dt``, at midnight."""
    offset = (dt.weekday() - week_start.weekday) % 7
    return dt.start_of("day").subtract(days=offset)


def end_of_week(dt: DateTime, week_start: WeekStart) -> DateTime:
    return start_of_week(dt, week_start).add(days=6).end_of("day")


def start_of_month(dt: DateTime) -> DateTime:
    return dt.start_of("month")


def end_of_month(dt: DateTime) -> DateTime:
    return dt.end_of("month")


def start_of_year(dt: DateTime) -> DateTime:
    return dt.start_of("year")


def end_of_year(dt: DateTime) -> DateTime:
    return dt.end_of("year")


def overlaps(
    start: DateTime,
    end: DateTime,
    window_start: DateTime,
    window_end: DateTime,
) -> bool:
    """Half-open overlap test. Touching boundaries do not overlap."""
    return start < window_end and end > window_start


def minutes_since_midnight(dt: DateTime) -> float:
    """Wall-clock minutes elapsed since 00:00 of the datetime's own day."""
    return dt.hour * 60 + dt.minute + dt.second / 60 + dt.microsecond / 60_000_000


def clamp_to_day(start: DateTime, end: DateTime, day: DateTime) -> Optional[TimeRange]:
    """
    Clip ``[start, end)`` to the day containing ``day``.

    Returns None if nothing of positive length remains.
    """
    first = start_of_day(day)
    last = end_of_day(day)

    clamped_start = max(start, first)
    clamped_end = min(end, last)

    if clamped_end <= clamped_start:
        return None

    return TimeRange(start=clamped_start, end=clamped_end)


def in_zone_of(dt: DateTime, reference: DateTime) -> DateTime:
    """Express ``dt`` in the timezone ``reference`` carries, if it carries one."""
    tz = reference.timezone
    return dt.in_timezone(tz) if tz is not None else dt


def iter_days(start: DateTime, end: DateTime) -> Iterator[DateTime]:
    """Yield the midnight of every day touched by ``[start, end]``."""
    current = start_of_day(start)
    while current <= end:
        yield current
        current = current.add(days=1)


def all_day_span(start: DateTime, end: DateTime) -> Optional[Tuple[DateTime, DateTime]]:
    """
    Whole-day span of an all-day event, ignoring clock times.

    An end at exactly midnight after the start does not claim the following
    day. Returns None when the end falls on a day before the start.
    """
    last = end
    if end > start and end == start_of_day(end):
        last = end.subtract(microseconds=1)

    first_day = start_of_day(start)
    last_day = end_of_day(last)

    if last_day < first_day:
        return None

    return first_day, last_day
