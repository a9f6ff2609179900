"""
SQLite persistence for events and settings.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pendulum
from pendulum import DateTime

from ..domain.exceptions import StorageError
from ..domain.models import (
    CalendarSettings,
    DEFAULT_EVENT_COLOR,
    Event,
    EventCreate,
    EventDisplayMode,
    EventUpdate,
    Theme,
    TimeFormat,
    WeekStart,
)

logger = logging.getLogger(__name__)

# Fixed-width UTC timestamps compare correctly as strings.
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS events (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        location TEXT,
        start_date TEXT NOT NULL,
        end_date TEXT NOT NULL,
        all_day INTEGER NOT NULL DEFAULT 0,
        color TEXT NOT NULL DEFAULT '#3498db',
        notifications INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS settings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER UNIQUE NOT NULL,
        theme TEXT NOT NULL DEFAULT 'dark' CHECK(theme IN ('dark', 'light')),
        start_of_week TEXT NOT NULL DEFAULT 'sunday' CHECK(start_of_week IN ('sunday', 'monday')),
        time_format TEXT NOT NULL DEFAULT '12h' CHECK(time_format IN ('12h', '24h')),
        event_display_mode TEXT NOT NULL DEFAULT 'dots'
            CHECK(event_display_mode IN ('dots', 'text', 'box', 'color'))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_events_user_start ON events(user_id, start_date)",
)


def encode_timestamp(value: DateTime) -> str:
    """Serialize an aware datetime as a fixed-width UTC string."""
    return value.in_timezone("UTC").strftime(TIMESTAMP_FORMAT)


def decode_timestamp(value: str) -> DateTime:
    parsed = pendulum.parse(value)
    if not isinstance(parsed, DateTime):
        raise ValueError(f"Not a timestamp: {value!r}")
    return parsed


class SqliteCalendarStore:
    """
    Calendar storage backed by a single SQLite file.

    Each call opens its own connection, bounded by ``timeout`` seconds when
    the database is locked, and closes it before returning.
    """

    def __init__(self, database_path: Path, timeout: float = 5.0):
        self.database_path = Path(database_path)
        self.timeout = timeout

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.database_path, timeout=self.timeout)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database {self.database_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the database file and tables if they don't exist."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            for statement in SCHEMA:
                conn.execute(statement)
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to initialize database: {exc}") from exc
        finally:
            conn.close()
        logger.info("Database ready at %s", self.database_path)

    def _query(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        conn = self._connect()
        try:
            return conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Query failed: {exc}") from exc
        finally:
            conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> Tuple[Optional[int], int]:
        """Run a write statement and return ``(lastrowid, rowcount)``."""
        conn = self._connect()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.lastrowid, cursor.rowcount
        except sqlite3.Error as exc:
            raise StorageError(f"Write failed: {exc}") from exc
        finally:
            conn.close()

    # Events

    def get_event(self, event_id: int) -> Optional[Event]:
        rows = self._query("SELECT * FROM events WHERE id = ?", (event_id,))
        if not rows:
            return None
        return self._row_to_event(rows[0])

    def list_events(self, user_id: int) -> List[Event]:
        rows = self._query(
            "SELECT * FROM events WHERE user_id = ? ORDER BY start_date DESC",
            (user_id,),
        )
        return self._rows_to_events(rows)

    def get_events_in_range(self, user_id: int, start: DateTime, end: DateTime) -> List[Event]:
        """Events whose ``[start_date, end_date)`` overlaps ``[start, end)``."""
        rows = self._query(
            """
            SELECT * FROM events
            WHERE user_id = ? AND start_date < ? AND end_date > ?
            ORDER BY start_date
            """,
            (user_id, encode_timestamp(end), encode_timestamp(start)),
        )
        return self._rows_to_events(rows)

    def create_event(self, draft: EventCreate) -> Event:
        if draft.user_id is None:
            raise StorageError("Cannot store an event without a user id")

        now = encode_timestamp(pendulum.now("UTC"))
        row_id, _ = self._execute(
            """
            INSERT INTO events (
                user_id, title, description, location, start_date, end_date,
                all_day, color, notifications, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                draft.user_id,
                draft.title,
                draft.description,
                draft.location,
                encode_timestamp(draft.start_date),
                encode_timestamp(draft.end_date),
                int(draft.all_day),
                draft.color or DEFAULT_EVENT_COLOR,
                int(draft.notifications),
                now,
                now,
            ),
        )
        created = self.get_event(row_id) if row_id is not None else None
        if created is None:
            raise StorageError("Inserted event could not be read back")
        return created

    def update_event(self, event_id: int, patch: EventUpdate) -> Optional[Event]:
        if self.get_event(event_id) is None:
            return None

        columns: Dict[str, Any] = {}
        for name, value in patch.changes().items():
            if name in ("start_date", "end_date"):
                value = encode_timestamp(value)
            elif name in ("all_day", "notifications"):
                value = int(value)
            columns[name] = value
        columns["updated_at"] = encode_timestamp(pendulum.now("UTC"))

        assignments = ", ".join(f"{name} = ?" for name in columns)
        self._execute(
            f"UPDATE events SET {assignments} WHERE id = ?",
            (*columns.values(), event_id),
        )
        return self.get_event(event_id)

    def delete_event(self, event_id: int) -> bool:
        _, deleted = self._execute("DELETE FROM events WHERE id = ?", (event_id,))
        return deleted > 0

    # Settings

    def get_settings(self, user_id: int) -> Optional[CalendarSettings]:
        rows = self._query("SELECT * FROM settings WHERE user_id = ?", (user_id,))
        if not rows:
            return None
        row = rows[0]
        return CalendarSettings(
            theme=Theme(row["theme"]),
            start_of_week=WeekStart(row["start_of_week"]),
            time_format=TimeFormat(row["time_format"]),
            event_display_mode=EventDisplayMode(row["event_display_mode"] or "dots"),
        )

    def save_settings(self, user_id: int, settings: CalendarSettings) -> CalendarSettings:
        self._execute(
            """
            INSERT INTO settings (user_id, theme, start_of_week, time_format, event_display_mode)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                theme = excluded.theme,
                start_of_week = excluded.start_of_week,
                time_format = excluded.time_format,
                event_display_mode = excluded.event_display_mode
            """,
            (
                user_id,
                settings.theme.value,
                settings.start_of_week.value,
                settings.time_format.value,
                settings.event_display_mode.value,
            ),
        )
        return settings

    # Row mapping

    def _rows_to_events(self, rows: List[sqlite3.Row]) -> List[Event]:
        events: List[Event] = []
        for row in rows:
            try:
                events.append(self._row_to_event(row))
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping malformed event row %s: %s", row["id"], exc)
        return events

    @staticmethod
    def _row_to_event(row: sqlite3.Row) -> Event:
        return Event(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"] or None,
            location=row["location"] or None,
            start_date=decode_timestamp(row["start_date"]),
            end_date=decode_timestamp(row["end_date"]),
            all_day=bool(row["all_day"]),
            color=row["color"] or DEFAULT_EVENT_COLOR,
            notifications=bool(row["notifications"]),
            created_at=decode_timestamp(row["created_at"]),
            updated_at=decode_timestamp(row["updated_at"]),
        )
