"""Pydantic response models for API endpoints."""

from datetime import date, datetime
from typing import List, Optional

import pendulum
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ...domain.models import (
    CalendarSettings,
    DayBucket,
    DayLayout,
    Event,
    Granularity,
    MonthGrid,
    PositionedEvent,
)
from ...services.calendar_service import CalendarView


class ApiModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class HealthResponse(ApiModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    STORAGE_ERROR = "STORAGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class EventResponse(ApiModel):
    """An event as it crosses the API boundary."""

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: datetime
    end_date: datetime
    all_day: bool = False
    color: str
    notifications: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_event(cls, event: Event) -> "EventResponse":
        return cls(
            id=event.id,
            user_id=event.user_id,
            title=event.title,
            description=event.description,
            location=event.location,
            start_date=event.start_date,
            end_date=event.end_date,
            all_day=event.all_day,
            color=event.color,
            notifications=event.notifications,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )

    def to_event(self) -> Event:
        return Event(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description or None,
            location=self.location or None,
            start_date=pendulum.instance(self.start_date),
            end_date=pendulum.instance(self.end_date),
            all_day=self.all_day,
            color=self.color,
            notifications=self.notifications,
            created_at=pendulum.instance(self.created_at) if self.created_at else None,
            updated_at=pendulum.instance(self.updated_at) if self.updated_at else None,
        )


class PositionedEventResponse(ApiModel):
    event: EventResponse
    day: date
    top_percentage: float
    height_percentage: float
    display_start_time: str
    display_end_time: str
    continues_before: bool
    continues_after: bool

    @classmethod
    def from_positioned(cls, positioned: PositionedEvent) -> "PositionedEventResponse":
        return cls(
            event=EventResponse.from_event(positioned.event),
            day=positioned.day,
            top_percentage=positioned.top_percentage,
            height_percentage=positioned.height_percentage,
            display_start_time=positioned.display_start_time,
            display_end_time=positioned.display_end_time,
            continues_before=positioned.continues_before,
            continues_after=positioned.continues_after,
        )


class DayLayoutResponse(ApiModel):
    day: date
    all_day: List[EventResponse]
    timed: List[PositionedEventResponse]

    @classmethod
    def from_layout(cls, layout: DayLayout) -> "DayLayoutResponse":
        return cls(
            day=layout.day,
            all_day=[EventResponse.from_event(e) for e in layout.all_day],
            timed=[PositionedEventResponse.from_positioned(p) for p in layout.timed],
        )


class DayBucketResponse(ApiModel):
    day: date
    count: int
    overflow: int
    in_current_month: bool
    previews: List[EventResponse]

    @classmethod
    def from_bucket(cls, bucket: DayBucket) -> "DayBucketResponse":
        return cls(
            day=bucket.day,
            count=bucket.count,
            overflow=bucket.overflow,
            in_current_month=bucket.in_current_month,
            previews=[EventResponse.from_event(e) for e in bucket.previews],
        )


class MonthGridResponse(ApiModel):
    month: date
    event_count: int
    weeks: List[List[Optional[DayBucketResponse]]]

    @classmethod
    def from_grid(cls, grid: MonthGrid) -> "MonthGridResponse":
        return cls(
            month=grid.month,
            event_count=grid.event_count,
            weeks=[
                [DayBucketResponse.from_bucket(cell) if cell else None for cell in week]
                for week in grid.weeks
            ],
        )


class ViewResponse(ApiModel):
    """A rendered view: window, the user's settings and the layout."""

    granularity: Granularity
    label: str
    start: datetime
    end: datetime
    settings: CalendarSettings
    events: List[EventResponse]
    days: List[DayLayoutResponse] = []
    months: List[MonthGridResponse] = []

    @classmethod
    def from_view(cls, view: CalendarView) -> "ViewResponse":
        return cls(
            granularity=view.window.granularity,
            label=view.window.label,
            start=view.window.start,
            end=view.window.end,
            settings=view.settings,
            events=[EventResponse.from_event(e) for e in view.events],
            days=[DayLayoutResponse.from_layout(d) for d in view.days],
            months=[MonthGridResponse.from_grid(m) for m in view.months],
        )
