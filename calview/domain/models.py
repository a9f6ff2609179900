"""
Domain models for calendar events, settings and view layouts.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_EVENT_COLOR = "#3498db"


class Granularity(str, Enum):
    """Zoom level of a calendar view."""
    YEAR = "year"
    MONTH = "month"
    WEEK = "week"
    DAY = "day"


class Theme(str, Enum):
    DARK = "dark"
    LIGHT = "light"


class WeekStart(str, Enum):
    SUNDAY = "sunday"
    MONDAY = "monday"

    @property
    def weekday(self) -> int:
        """Weekday number of the first day of the week (0=Monday, 6=Sunday)."""
        return 6 if self is WeekStart.SUNDAY else 0


class TimeFormat(str, Enum):
    TWELVE_HOUR = "12h"
    TWENTY_FOUR_HOUR = "24h"

    @property
    def pattern(self) -> str:
        """pendulum format pattern for clock times."""
        return "h:mm A" if self is TimeFormat.TWELVE_HOUR else "HH:mm"


class EventDisplayMode(str, Enum):
    DOTS = "dots"
    TEXT = "text"
    BOX = "box"
    COLOR = "color"


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> float:
        """Return the duration in minutes."""
        return (self.end - self.start).total_seconds() / 60

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another (half-open)."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('YYYY-MM-DD HH:mm')}"


@dataclass(frozen=True)
class ViewWindow:
    """The visible span of a view: [start, end) plus a display label."""
    start: DateTime
    end: DateTime
    label: str
    granularity: Granularity


@dataclass(frozen=True)
class Event:
    """
    A stored calendar event.

    ``start_date < end_date`` is expected but not enforced; the layout engine
    treats non-positive durations as degenerate and skips them.
    """
    id: int
    user_id: int
    title: str
    start_date: DateTime
    end_date: DateTime
    description: Optional[str] = None
    location: Optional[str] = None
    all_day: bool = False
    color: str = DEFAULT_EVENT_COLOR
    notifications: bool = False
    created_at: Optional[DateTime] = None
    updated_at: Optional[DateTime] = None


def _to_pendulum(value: datetime, info: ValidationInfo) -> DateTime:
    # Naive datetimes are wall-clock times in the "timezone" validation
    # context, UTC when none is given.
    tz = (info.context or {}).get("timezone") or "UTC"
    return pendulum.instance(value, tz=tz)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class _BoundaryModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class EventCreate(_BoundaryModel):
    """Fields accepted when creating an event."""
    user_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: datetime
    end_date: datetime
    all_day: bool = False
    color: Optional[str] = Field(default=None, validate_default=True)
    notifications: bool = False

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("description", "location")
    @classmethod
    def normalize_optional_text(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def to_pendulum(cls, value: datetime, info: ValidationInfo) -> DateTime:
        return _to_pendulum(value, info)

    @field_validator("color")
    @classmethod
    def default_color(cls, value: Optional[str]) -> str:
        return _blank_to_none(value) or DEFAULT_EVENT_COLOR


class EventUpdate(_BoundaryModel):
    """
    Partial event update. Only fields that were actually supplied override.

    ``description`` and ``location`` may be cleared with an explicit null;
    a null for any other field means "keep the current value".
    """
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    all_day: Optional[bool] = None
    color: Optional[str] = None
    notifications: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("description", "location")
    @classmethod
    def normalize_optional_text(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def to_pendulum(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[DateTime]:
        if value is None:
            return None
        return _to_pendulum(value, info)

    def changes(self) -> Dict[str, Any]:
        """Return the supplied fields, keyed by attribute name."""
        nullable = {"description", "location"}
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in nullable
        }


class CalendarSettings(_BoundaryModel):
    """Per-user display preferences."""
    model_config = ConfigDict(frozen=True)

    theme: Theme = Theme.DARK
    start_of_week: WeekStart = WeekStart.SUNDAY
    time_format: TimeFormat = TimeFormat.TWELVE_HOUR
    event_display_mode: EventDisplayMode = EventDisplayMode.DOTS


class SettingsUpdate(_BoundaryModel):
    """Partial settings update; invalid enum values are rejected."""
    theme: Optional[Theme] = None
    start_of_week: Optional[WeekStart] = None
    time_format: Optional[TimeFormat] = None
    event_display_mode: Optional[EventDisplayMode] = None


@dataclass(frozen=True)
class PositionedEvent:
    """An event placed on one day's 24-hour axis."""
    event: Event
    day: date
    top_percentage: float
    height_percentage: float
    display_start_time: str
    display_end_time: str
    continues_before: bool = False
    continues_after: bool = False


@dataclass
class DayLayout:
    """Everything a week or day column needs to render one day."""
    day: date
    all_day: List[Event] = field(default_factory=list)
    timed: List[PositionedEvent] = field(default_factory=list)


@dataclass
class DayBucket:
    """A month/year grid cell: how many events touch the day, plus previews."""
    day: date
    count: int = 0
    previews: List[Event] = field(default_factory=list)
    in_current_month: bool = True

    @property
    def overflow(self) -> int:
        return self.count - len(self.previews)


@dataclass
class MonthGrid:
    """A month laid out as whole weeks. Padding cells are ``None`` in year view."""
    month: date
    weeks: List[List[Optional[DayBucket]]]
    event_count: int = 0
