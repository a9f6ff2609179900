"""
Core layout logic: turns events into render-ready positions.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

from typing import Dict, Iterable, List, Mapping, Optional

from pendulum import DateTime

from . import interval_math
from .event_selector import event_overlaps, is_degenerate, partition_all_day
from .models import (
    DayBucket,
    DayLayout,
    Event,
    EventDisplayMode,
    MonthGrid,
    PositionedEvent,
    TimeFormat,
    WeekStart,
)

MIN_VISIBLE_HEIGHT = 1.0

DEFAULT_PREVIEW_LIMITS: Dict[EventDisplayMode, int] = {
    EventDisplayMode.DOTS: 5,
    EventDisplayMode.COLOR: 4,
    EventDisplayMode.BOX: 2,
    EventDisplayMode.TEXT: 2,
}


class LayoutEngine:
    """
    Positions events on a normalized 24-hour axis and buckets them per day.

    Algorithm for a timed event E on day D:
    1. Clamp E to D (start no earlier than 00:00, end no later than end of day)
    2. Skip the pair if the clamped duration is not positive
    3. top = minutes since midnight / 1440, height = duration / 1440 (in %)
    4. Floor the height at ``min_visible_height`` so short events stay visible
    5. Label the bar with E's original, unclamped start and end times

    Multi-day events yield one independent record per day they touch.
    """

    def __init__(
        self,
        min_visible_height: float = MIN_VISIBLE_HEIGHT,
        preview_limits: Optional[Mapping[EventDisplayMode, int]] = None,
    ):
        if not 0 < min_visible_height <= 100:
            raise ValueError(f"min_visible_height must be in (0, 100], got {min_visible_height}")
        self.min_visible_height = min_visible_height
        self.preview_limits = dict(DEFAULT_PREVIEW_LIMITS)
        if preview_limits:
            self.preview_limits.update(preview_limits)

    def position_event(
        self,
        event: Event,
        day: DateTime,
        time_format: TimeFormat = TimeFormat.TWELVE_HOUR,
    ) -> Optional[PositionedEvent]:
        """
        Place a timed event on the axis of the day containing ``day``.

        Returns None when the event has no positive-length overlap with the day.
        """
        day_start = interval_math.start_of_day(day)
        day_end = interval_math.end_of_day(day)

        clamped = interval_math.clamp_to_day(event.start_date, event.end_date, day_start)
        if clamped is None:
            return None

        start_minutes = interval_math.minutes_since_midnight(
            interval_math.in_zone_of(clamped.start, day_start)
        )
        top = start_minutes / interval_math.MINUTES_PER_DAY * 100
        height = clamped.duration_minutes() / interval_math.MINUTES_PER_DAY * 100
        height = min(max(height, self.min_visible_height), 100.0)

        # The height floor must not push the bar past the end of the axis.
        top = max(min(top, 100.0 - height), 0.0)

        return PositionedEvent(
            event=event,
            day=day_start.date(),
            top_percentage=top,
            height_percentage=height,
            display_start_time=self.format_time(event.start_date, day_start, time_format),
            display_end_time=self.format_time(event.end_date, day_start, time_format),
            continues_before=event.start_date < day_start,
            continues_after=event.end_date > day_end,
        )

    @staticmethod
    def format_time(value: DateTime, reference: DateTime, time_format: TimeFormat) -> str:
        return interval_math.in_zone_of(value, reference).format(time_format.pattern)

    def layout_day(
        self,
        events: Iterable[Event],
        day: DateTime,
        time_format: TimeFormat = TimeFormat.TWELVE_HOUR,
    ) -> DayLayout:
        """Full-resolution layout of a single day column."""
        day_start = interval_math.start_of_day(day)
        day_end = interval_math.end_of_day(day)
        all_day, timed = partition_all_day(events)

        layout = DayLayout(day=day_start.date())
        layout.all_day = [
            event for event in all_day
            if event_overlaps(event, day_start, day_end)
        ]

        for event in timed:
            positioned = self.position_event(event, day_start, time_format)
            if positioned is not None:
                layout.timed.append(positioned)

        return layout

    def layout_days(
        self,
        events: Iterable[Event],
        start: DateTime,
        end: DateTime,
        time_format: TimeFormat = TimeFormat.TWELVE_HOUR,
    ) -> List[DayLayout]:
        """Layout every day touched by ``[start, end]`` (week and day views)."""
        event_list = list(events)
        return [
            self.layout_day(event_list, day, time_format)
            for day in interval_math.iter_days(start, end)
        ]

    def bucket_day(
        self,
        events: Iterable[Event],
        day: DateTime,
        display_mode: EventDisplayMode = EventDisplayMode.DOTS,
        in_current_month: bool = True,
    ) -> DayBucket:
        """Count the events touching a day and keep the first few as previews."""
        day_start = interval_math.start_of_day(day)
        day_end = interval_math.end_of_day(day)

        matching = [
            e for e in events
            if not is_degenerate(e) and event_overlaps(e, day_start, day_end)
        ]
        limit = self.preview_limits[display_mode]

        return DayBucket(
            day=day_start.date(),
            count=len(matching),
            previews=matching[:limit],
            in_current_month=in_current_month,
        )

    def month_grid(
        self,
        events: Iterable[Event],
        anchor: DateTime,
        week_start: WeekStart = WeekStart.SUNDAY,
        display_mode: EventDisplayMode = EventDisplayMode.DOTS,
    ) -> MonthGrid:
        """
        Month view: whole weeks around the anchor's month.

        Days from adjacent months are included and flagged with
        ``in_current_month=False``.
        """
        event_list = list(events)
        month_start = interval_math.start_of_month(anchor)
        month_end = interval_math.end_of_month(anchor)
        grid_start = interval_math.start_of_week(month_start, week_start)
        grid_end = interval_math.end_of_week(month_end, week_start)

        weeks: List[List[Optional[DayBucket]]] = []
        week: List[Optional[DayBucket]] = []

        for day in interval_math.iter_days(grid_start, grid_end):
            week.append(
                self.bucket_day(
                    event_list,
                    day,
                    display_mode,
                    in_current_month=day.month == month_start.month,
                )
            )
            if len(week) == 7:
                weeks.append(week)
                week = []

        return MonthGrid(
            month=month_start.date(),
            weeks=weeks,
            event_count=self._count_in_month(event_list, month_start, month_end),
        )

    def year_grids(
        self,
        events: Iterable[Event],
        anchor: DateTime,
        week_start: WeekStart = WeekStart.SUNDAY,
        display_mode: EventDisplayMode = EventDisplayMode.DOTS,
    ) -> List[MonthGrid]:
        """Year view: twelve mini months padded with ``None`` to whole weeks."""
        event_list = list(events)
        year_start = interval_math.start_of_year(anchor)

        return [
            self._mini_month(event_list, year_start.add(months=offset), week_start, display_mode)
            for offset in range(12)
        ]

    def _mini_month(
        self,
        events: List[Event],
        month_start: DateTime,
        week_start: WeekStart,
        display_mode: EventDisplayMode,
    ) -> MonthGrid:
        month_end = interval_math.end_of_month(month_start)
        leading = (month_start.weekday() - week_start.weekday) % 7

        cells: List[Optional[DayBucket]] = [None] * leading
        for day in interval_math.iter_days(month_start, month_end):
            cells.append(self.bucket_day(events, day, display_mode))

        cells.extend([None] * ((7 - len(cells) % 7) % 7))

        return MonthGrid(
            month=month_start.date(),
            weeks=[cells[i:i + 7] for i in range(0, len(cells), 7)],
            event_count=self._count_in_month(events, month_start, month_end),
        )

    @staticmethod
    def _count_in_month(events: List[Event], month_start: DateTime, month_end: DateTime) -> int:
        return sum(
            1 for e in events
            if not is_degenerate(e) and event_overlaps(e, month_start, month_end)
        )
