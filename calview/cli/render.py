"""
Rich renderables for calendar views.
"""

from typing import List

from rich.console import Group, RenderableType
from rich.errors import StyleSyntaxError
from rich.style import Style
from rich.table import Table
from rich.text import Text

from ..domain.models import DayBucket, DayLayout, Event, EventDisplayMode, Granularity, MonthGrid, WeekStart
from ..services.calendar_service import CalendarView

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
AXIS_WIDTH = 24


def color_style(color: str) -> str:
    """Event colors are free text; fall back to white for anything rich cannot parse."""
    try:
        Style.parse(color)
    except StyleSyntaxError:
        return "white"
    return color


def weekday_headers(week_start: WeekStart) -> List[str]:
    first = week_start.weekday
    return [WEEKDAY_NAMES[(first + i) % 7] for i in range(7)]


def _axis_bar(top: float, height: float, color: str) -> Text:
    """A one-line sketch of where the event sits on the 24h axis."""
    first = min(int(top / 100 * AXIS_WIDTH), AXIS_WIDTH - 1)
    last = max(first + 1, min(round((top + height) / 100 * AXIS_WIDTH), AXIS_WIDTH))
    bar = Text("·" * first, style="dim")
    bar.append("█" * (last - first), style=color)
    bar.append("·" * (AXIS_WIDTH - last), style="dim")
    return bar


def render_day(layout: DayLayout) -> Table:
    table = Table(
        title=layout.day.strftime("%A, %b %d, %Y"),
        show_header=True,
        header_style="bold cyan",
        expand=True,
    )
    table.add_column("Time", style="bold yellow", no_wrap=True)
    table.add_column("Event")
    table.add_column("00h ─── 24h", no_wrap=True)

    for event in layout.all_day:
        table.add_row("all day", Text(event.title, style=color_style(event.color)), "")

    for positioned in layout.timed:
        event = positioned.event
        label = f"{positioned.display_start_time} – {positioned.display_end_time}"
        title = Text(event.title, style=color_style(event.color))
        if positioned.continues_before:
            title = Text("↑ ") + title
        if positioned.continues_after:
            title.append(" ↓")
        table.add_row(
            label,
            title,
            _axis_bar(positioned.top_percentage, positioned.height_percentage, color_style(event.color)),
        )

    if not layout.all_day and not layout.timed:
        table.add_row("", Text("No events", style="dim"), "")

    return table


def _bucket_cell(bucket: DayBucket, mode: EventDisplayMode) -> Text:
    style = "bold" if bucket.in_current_month else "dim"
    cell = Text(str(bucket.day.day), style=style)
    if not bucket.count:
        return cell

    cell.append("\n")
    if mode is EventDisplayMode.DOTS:
        for event in bucket.previews:
            cell.append("●", style=color_style(event.color))
    elif mode is EventDisplayMode.COLOR:
        for event in bucket.previews:
            cell.append("▬", style=color_style(event.color))
    else:
        titles = [e.title for e in bucket.previews]
        cell.append("\n".join(titles))

    if bucket.overflow:
        more = f" +{bucket.overflow}" if mode in (EventDisplayMode.DOTS, EventDisplayMode.COLOR) else f"\n+{bucket.overflow} more"
        cell.append(more, style="dim")
    return cell


def render_month(grid: MonthGrid, week_start: WeekStart, mode: EventDisplayMode, title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan", show_lines=True, expand=True)
    for name in weekday_headers(week_start):
        table.add_column(name, vertical="top")

    for week in grid.weeks:
        table.add_row(*[_bucket_cell(cell, mode) if cell else Text("") for cell in week])

    return table


def render_mini_month(grid: MonthGrid, week_start: WeekStart) -> Table:
    table = Table(
        title=f"{grid.month.strftime('%B')} ({grid.event_count})",
        show_header=True,
        header_style="dim",
        box=None,
        padding=(0, 1),
    )
    for name in weekday_headers(week_start):
        table.add_column(name[:2], justify="right")

    for week in grid.weeks:
        cells = []
        for cell in week:
            if cell is None:
                cells.append(Text(""))
            elif cell.count:
                cells.append(Text(str(cell.day.day), style="bold green"))
            else:
                cells.append(Text(str(cell.day.day)))
        table.add_row(*cells)

    return table


def render_year(view: CalendarView) -> Table:
    outer = Table.grid(padding=(1, 2))
    for _ in range(3):
        outer.add_column()

    minis = [render_mini_month(grid, view.settings.start_of_week) for grid in view.months]
    for i in range(0, len(minis), 3):
        outer.add_row(*minis[i:i + 3])

    return outer


def render_view(view: CalendarView) -> RenderableType:
    """Pick the renderable matching the view's granularity."""
    if view.window.granularity is Granularity.YEAR:
        return Group(Text(view.window.label, style="bold cyan"), render_year(view))
    if view.window.granularity is Granularity.MONTH:
        return render_month(
            view.months[0],
            view.settings.start_of_week,
            view.settings.event_display_mode,
            view.window.label,
        )
    return Group(
        Text(view.window.label, style="bold cyan"),
        *[render_day(layout) for layout in view.days],
    )


def event_table(events: List[Event], time_pattern: str, tz: str, title: str = "Events") -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow", justify="right")
    table.add_column("Title")
    table.add_column("Start", style="dim")
    table.add_column("End", style="dim")
    table.add_column("Location", style="dim")

    for event in events:
        event_start = event.start_date.in_timezone(tz)
        event_end = event.end_date.in_timezone(tz)
        if event.all_day:
            start = event_start.format("YYYY-MM-DD")
            end = event_end.format("YYYY-MM-DD") + " (all day)"
        else:
            start = event_start.format(f"YYYY-MM-DD {time_pattern}")
            end = event_end.format(f"YYYY-MM-DD {time_pattern}")
        table.add_row(
            str(event.id),
            Text(event.title, style=color_style(event.color)),
            start,
            end,
            event.location or "",
        )

    return table
