"""
Resolves the visible window of a calendar view from an anchor date.
"""

from typing import Tuple

from pendulum import DateTime

from . import interval_math
from .models import Granularity, ViewWindow, WeekStart


def resolve_window(
    anchor: DateTime,
    granularity: Granularity,
    week_start: WeekStart = WeekStart.SUNDAY,
) -> ViewWindow:
    """
    Compute the window shown by a view anchored at ``anchor``.

    Args:
        anchor: Any instant inside the period to display
        granularity: Zoom level of the view
        week_start: First day of the week (only relevant for week views)

    Returns:
        ViewWindow with start at the first instant and end at the last
        instant of the period, plus a display label
    """
    if granularity is Granularity.YEAR:
        start = interval_math.start_of_year(anchor)
        end = interval_math.end_of_year(anchor)
    elif granularity is Granularity.MONTH:
        start = interval_math.start_of_month(anchor)
        end = interval_math.end_of_month(anchor)
    elif granularity is Granularity.WEEK:
        start = interval_math.start_of_week(anchor, week_start)
        end = interval_math.end_of_week(anchor, week_start)
    else:
        start = interval_math.start_of_day(anchor)
        end = interval_math.end_of_day(anchor)

    return ViewWindow(
        start=start,
        end=end,
        label=format_label(start, end, granularity),
        granularity=granularity,
    )


def format_label(start: DateTime, end: DateTime, granularity: Granularity) -> str:
    """Human-readable title for a resolved window."""
    if granularity is Granularity.YEAR:
        return start.format("YYYY")
    if granularity is Granularity.MONTH:
        return start.format("MMMM YYYY")
    if granularity is Granularity.WEEK:
        return f"{start.format('MMM D')} - {end.format('MMM D, YYYY')}"
    return start.format("dddd, MMM D, YYYY")


def shift_anchor(anchor: DateTime, granularity: Granularity, steps: int = 1) -> DateTime:
    """
    Move the anchor by ``steps`` periods (negative steps go back).

    Year navigation lands on January 1st of the target year.
    """
    if granularity is Granularity.YEAR:
        return anchor.start_of("year").add(years=steps)
    if granularity is Granularity.MONTH:
        return anchor.add(months=steps)
    if granularity is Granularity.WEEK:
        return anchor.add(weeks=steps)
    return anchor.add(days=steps)


def grid_span(anchor: DateTime, week_start: WeekStart = WeekStart.SUNDAY) -> Tuple[DateTime, DateTime]:
    """
    Span of the month grid around ``anchor``: whole weeks covering the month.

    Includes trailing days of the previous month and leading days of the
    next one so that every grid row has seven cells.
    """
    first = interval_math.start_of_month(anchor)
    last = interval_math.end_of_month(anchor)
    return (
        interval_math.start_of_week(first, week_start),
        interval_math.end_of_week(last, week_start),
    )
