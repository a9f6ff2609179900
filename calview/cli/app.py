"""
Main CLI application using Typer.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import pendulum
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..adapters.http_store import HttpCalendarStore
from ..adapters.sqlite_store import SqliteCalendarStore
from ..config import AppConfig, load_config
from ..domain.exceptions import CalendarError, ValidationError
from ..domain.layout_engine import LayoutEngine
from ..domain.models import (
    EventCreate,
    EventDisplayMode,
    EventUpdate,
    Granularity,
    Theme,
    TimeFormat,
    WeekStart,
)
from ..domain.range_resolver import shift_anchor
from ..domain.validation import parse_datetime, parse_model
from ..logging_setup import configure_logging
from ..services.calendar_service import CalendarService
from . import render

app = typer.Typer(
    name="calview",
    help="Browse and edit calendar events as year, month, week and day views",
    add_completion=False
)
events_app = typer.Typer(help="Create, inspect, edit and delete events", add_completion=False)
settings_app = typer.Typer(help="Show or change per-user display settings", add_completion=False)
app.add_typer(events_app, name="events")
app.add_typer(settings_app, name="settings")

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class CliState:
    """Options shared by every command, set by the main callback."""
    config: AppConfig
    config_path: Optional[Path] = None
    remote: bool = False
    user_id: int = 1


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    for detail in getattr(error, "details", None) or []:
        console.print(f"  [red]•[/red] {escape(detail)}")
    raise typer.Exit(1)


def _build_service(state: CliState) -> CalendarService:
    """Wire the service against the local database or the remote API."""
    config = state.config
    logger.debug("Using %s store", "remote" if state.remote else "local")
    if state.remote:
        store = HttpCalendarStore(config.remote.base_url, timeout=config.remote.timeout_seconds)
    else:
        store = SqliteCalendarStore(config.storage.database_path, timeout=config.storage.timeout_seconds)
        store.initialize()

    engine = LayoutEngine(
        min_visible_height=config.layout.min_visible_height,
        preview_limits=config.layout.preview_limits,
    )
    return CalendarService(store, engine, timezone=config.timezone)


def _parse_optional(value: Optional[str], tz: str):
    return parse_datetime(value, tz=tz) if value else None


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    ),
    remote: bool = typer.Option(
        False,
        "--remote",
        help="Talk to the calview API at remote.base_url instead of the local database"
    ),
    user: Optional[int] = typer.Option(
        None,
        "--user", "-u",
        help="User id (defaults to default_user_id from the config)"
    ),
):
    """
    calview - calendar layout and range queries.
    """
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        _fail(e)

    configure_logging(config.log_level)
    ctx.obj = CliState(
        config=config,
        config_path=config_file,
        remote=remote,
        user_id=user if user is not None else config.default_user_id,
    )


@app.command()
def view(
    ctx: typer.Context,
    granularity: Granularity = typer.Argument(
        Granularity.MONTH,
        help="year, month, week or day"
    ),
    date: Optional[str] = typer.Option(
        None,
        "--date", "-d",
        help="Any date inside the wanted view (YYYY-MM-DD), default today"
    ),
    offset: int = typer.Option(
        0,
        "--offset", "-o",
        help="Move the view by this many periods (negative goes back)"
    ),
):
    """
    Render a year, month, week or day view.
    """
    state: CliState = ctx.obj
    try:
        service = _build_service(state)
        tz = state.config.timezone
        anchor = parse_datetime(date, tz=tz) if date else pendulum.now(tz)
        if offset:
            anchor = shift_anchor(anchor, granularity, offset)

        calendar_view = service.render_view(state.user_id, granularity, anchor)
        console.print()
        console.print(render.render_view(calendar_view))
        console.print()

    except CalendarError as e:
        _fail(e)


@events_app.command("list")
def list_events(
    ctx: typer.Context,
    start: Optional[str] = typer.Option(None, "--start", "-s", help="Range start (ISO date or datetime)"),
    end: Optional[str] = typer.Option(None, "--end", "-e", help="Range end, exclusive (ISO date or datetime)"),
):
    """
    List events, optionally only those overlapping [start, end).
    """
    state: CliState = ctx.obj
    try:
        if bool(start) != bool(end):
            raise ValidationError("Both --start and --end are required for a range query")

        service = _build_service(state)
        tz = state.config.timezone
        if start and end:
            events = service.events_between(
                state.user_id, parse_datetime(start, tz=tz), parse_datetime(end, tz=tz)
            )
        else:
            events = service.list_events(state.user_id)

        if not events:
            console.print("[yellow]No events found.[/yellow]")
            return

        settings = service.get_settings(state.user_id)
        console.print()
        console.print(render.event_table(events, settings.time_format.pattern, tz))
        console.print()

    except CalendarError as e:
        _fail(e)


@events_app.command("show")
def show_event(ctx: typer.Context, event_id: int = typer.Argument(..., help="Event id")):
    """
    Show one event in detail.
    """
    state: CliState = ctx.obj
    try:
        service = _build_service(state)
        event = service.get_event(event_id)
        if event is None:
            console.print(f"[yellow]Event {event_id} not found.[/yellow]")
            raise typer.Exit(1)

        tz = state.config.timezone
        pattern = "YYYY-MM-DD" if event.all_day else f"YYYY-MM-DD {service.get_settings(event.user_id).time_format.pattern}"
        lines = [
            f"[bold]{escape(event.title)}[/bold]",
            "",
            f"[bold]Start:[/bold] {event.start_date.in_timezone(tz).format(pattern)}",
            f"[bold]End:[/bold] {event.end_date.in_timezone(tz).format(pattern)}",
        ]
        if event.all_day:
            lines.append("[bold]All day[/bold]")
        if event.location:
            lines.append(f"[bold]Location:[/bold] {escape(event.location)}")
        if event.description:
            lines.append(f"[bold]Description:[/bold] {escape(event.description)}")
        lines.append(f"[bold]Color:[/bold] [{render.color_style(event.color)}]{event.color}[/]")
        lines.append(f"[bold]Notifications:[/bold] {'on' if event.notifications else 'off'}")

        console.print(Panel.fit("\n".join(lines), title=f"Event {event.id}"))

    except CalendarError as e:
        _fail(e)


@events_app.command("add")
def add_event(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Event title"),
    start: str = typer.Option(..., "--start", "-s", help="Start (ISO date or datetime)"),
    end: str = typer.Option(..., "--end", "-e", help="End (ISO date or datetime)"),
    all_day: bool = typer.Option(False, "--all-day", help="Span whole days"),
    description: Optional[str] = typer.Option(None, "--description"),
    location: Optional[str] = typer.Option(None, "--location"),
    color: Optional[str] = typer.Option(None, "--color", help="Display color, e.g. #e74c3c"),
    notifications: bool = typer.Option(False, "--notify", help="Enable notifications"),
):
    """
    Create an event.
    """
    state: CliState = ctx.obj
    try:
        tz = state.config.timezone
        draft = parse_model(EventCreate, {
            "user_id": state.user_id,
            "title": title,
            "description": description,
            "location": location,
            "start_date": parse_datetime(start, tz=tz),
            "end_date": parse_datetime(end, tz=tz),
            "all_day": all_day,
            "color": color,
            "notifications": notifications,
        })
        event = _build_service(state).create_event(draft)
        console.print(f"[green]✓ Created event {event.id}:[/green] {escape(event.title)}")

    except CalendarError as e:
        _fail(e)


@events_app.command("edit")
def edit_event(
    ctx: typer.Context,
    event_id: int = typer.Argument(..., help="Event id"),
    title: Optional[str] = typer.Option(None, "--title"),
    start: Optional[str] = typer.Option(None, "--start", "-s"),
    end: Optional[str] = typer.Option(None, "--end", "-e"),
    all_day: Optional[bool] = typer.Option(None, "--all-day/--timed"),
    description: Optional[str] = typer.Option(None, "--description", help="Empty string clears it"),
    location: Optional[str] = typer.Option(None, "--location", help="Empty string clears it"),
    color: Optional[str] = typer.Option(None, "--color"),
    notifications: Optional[bool] = typer.Option(None, "--notify/--no-notify"),
):
    """
    Change the given fields of an event; everything else is kept.
    """
    state: CliState = ctx.obj
    try:
        tz = state.config.timezone
        supplied: Dict[str, Any] = {
            "title": title,
            "start_date": _parse_optional(start, tz),
            "end_date": _parse_optional(end, tz),
            "all_day": all_day,
            "description": description,
            "location": location,
            "color": color,
            "notifications": notifications,
        }
        changes = {name: value for name, value in supplied.items() if value is not None}
        if not changes:
            console.print("[yellow]Nothing to update.[/yellow]")
            return

        event = _build_service(state).update_event(event_id, parse_model(EventUpdate, changes))
        if event is None:
            console.print(f"[yellow]Event {event_id} not found.[/yellow]")
            raise typer.Exit(1)
        console.print(f"[green]✓ Updated event {event.id}:[/green] {escape(event.title)}")

    except CalendarError as e:
        _fail(e)


@events_app.command("delete")
def delete_event(
    ctx: typer.Context,
    event_id: int = typer.Argument(..., help="Event id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """
    Delete an event.
    """
    state: CliState = ctx.obj
    if not yes:
        typer.confirm(f"Delete event {event_id}?", abort=True)

    try:
        if not _build_service(state).delete_event(event_id):
            console.print(f"[yellow]Event {event_id} not found.[/yellow]")
            raise typer.Exit(1)
        console.print(f"[green]✓ Deleted event {event_id}.[/green]")

    except CalendarError as e:
        _fail(e)


@settings_app.command("show")
def show_settings(ctx: typer.Context):
    """
    Show the display settings of the current user.
    """
    state: CliState = ctx.obj
    try:
        settings = _build_service(state).get_settings(state.user_id)

        table = Table(
            title=f"Settings for user {state.user_id}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Setting", style="bold yellow")
        table.add_column("Value")
        for name, value in settings.model_dump(mode="json").items():
            table.add_row(name, str(value))

        console.print()
        console.print(table)
        console.print()

    except CalendarError as e:
        _fail(e)


@settings_app.command("set")
def set_settings(
    ctx: typer.Context,
    theme: Optional[Theme] = typer.Option(None, "--theme"),
    start_of_week: Optional[WeekStart] = typer.Option(None, "--week-start"),
    time_format: Optional[TimeFormat] = typer.Option(None, "--time-format"),
    event_display_mode: Optional[EventDisplayMode] = typer.Option(None, "--display-mode"),
):
    """
    Change some settings; the ones not given keep their value.
    """
    state: CliState = ctx.obj
    partial = {
        "theme": theme,
        "start_of_week": start_of_week,
        "time_format": time_format,
        "event_display_mode": event_display_mode,
    }
    partial = {name: value for name, value in partial.items() if value is not None}
    if not partial:
        console.print("[yellow]Nothing to update.[/yellow]")
        return

    try:
        settings = _build_service(state).update_settings(state.user_id, partial)
        changed = ", ".join(f"{name}={getattr(settings, name).value}" for name in partial)
        console.print(f"[green]✓ Settings saved:[/green] {changed}")

    except CalendarError as e:
        _fail(e)


@app.command()
def init_db(ctx: typer.Context):
    """
    Create the local database tables if they do not exist.
    """
    state: CliState = ctx.obj
    try:
        path = state.config.storage.database_path
        SqliteCalendarStore(path, timeout=state.config.storage.timeout_seconds).initialize()
        console.print(f"[green]✓ Database ready:[/green] {path}")

    except CalendarError as e:
        _fail(e)


@app.command()
def status(ctx: typer.Context):
    """
    Show which backend is in use and check that it answers.
    """
    state: CliState = ctx.obj
    config = state.config
    try:
        if state.remote:
            health = HttpCalendarStore(
                config.remote.base_url, timeout=config.remote.timeout_seconds
            ).test_connection()
            console.print(Panel.fit(
                f"[bold green]✓ Server reachable[/bold green]\n\n"
                f"[bold]URL:[/bold] {config.remote.base_url}\n"
                f"[bold]Status:[/bold] {health.get('status', 'N/A')}\n"
                f"[bold]Version:[/bold] {health.get('version', 'N/A')}",
                title="✓ Connection test"
            ))
        else:
            store = SqliteCalendarStore(config.storage.database_path, timeout=config.storage.timeout_seconds)
            store.initialize()
            events = store.list_events(state.user_id)
            console.print(Panel.fit(
                f"[bold green]✓ Local database OK[/bold green]\n\n"
                f"[bold]Path:[/bold] {config.storage.database_path}\n"
                f"[bold]Events for user {state.user_id}:[/bold] {len(events)}",
                title="✓ Storage check"
            ))

    except CalendarError as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(e))}\n")
        raise typer.Exit(1)


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: Optional[int] = typer.Option(None, "--port", help="Port (default from config)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """
    Run the HTTP API with uvicorn.
    """
    import uvicorn

    from ..api.dependencies import CONFIG_ENV_VAR

    state: CliState = ctx.obj
    if state.config_path is not None:
        # The app module loads its own config on import.
        os.environ[CONFIG_ENV_VAR] = str(state.config_path.resolve())

    api = state.config.api
    uvicorn.run(
        "calview.api.main:app",
        host=host or api.host,
        port=port or api.port,
        reload=reload,
        log_level=state.config.log_level.lower(),
    )


@app.command()
def version():
    """
    Show version information.
    """
    console.print(f"\n[bold cyan]calview[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
