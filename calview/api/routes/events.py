"""Event CRUD and range query endpoints."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from ...config import AppConfig
from ...domain.exceptions import ValidationError
from ...domain.models import EventCreate, EventUpdate
from ...domain.validation import parse_model
from ...services.calendar_service import CalendarService
from ..dependencies import get_config, get_service, not_found, parse_query_datetime, resolve_user_id
from ..models.responses import EventResponse

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("")
def list_events(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    user_id: int = Depends(resolve_user_id),
    config: AppConfig = Depends(get_config),
    service: CalendarService = Depends(get_service),
) -> List[Dict[str, Any]]:
    """
    Events of a user.

    With ``start`` and ``end`` only events overlapping ``[start, end)`` are
    returned, oldest first; without them all events, newest first.
    """
    if start and end:
        range_start = parse_query_datetime(start, config)
        range_end = parse_query_datetime(end, config)
        events = service.events_between(user_id, range_start, range_end)
    elif start or end:
        raise ValidationError("Both start and end are required for a range query")
    else:
        events = service.list_events(user_id)

    return [EventResponse.from_event(e).to_json() for e in events]


@router.get("/{event_id}")
def get_event(event_id: int, service: CalendarService = Depends(get_service)):
    event = service.get_event(event_id)
    if event is None:
        return not_found("Event", event_id)
    return EventResponse.from_event(event).to_json()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_event(
    payload: Dict[str, Any] = Body(...),
    config: AppConfig = Depends(get_config),
    service: CalendarService = Depends(get_service),
):
    draft = parse_model(EventCreate, payload, timezone=config.timezone)
    if draft.user_id is None:
        draft = draft.model_copy(update={"user_id": config.default_user_id})
    event = service.create_event(draft)
    return EventResponse.from_event(event).to_json()


@router.put("/{event_id}")
def update_event(
    event_id: int,
    payload: Dict[str, Any] = Body(...),
    config: AppConfig = Depends(get_config),
    service: CalendarService = Depends(get_service),
):
    patch = parse_model(EventUpdate, payload, timezone=config.timezone)
    event = service.update_event(event_id, patch)
    if event is None:
        return not_found("Event", event_id)
    return EventResponse.from_event(event).to_json()


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: int, service: CalendarService = Depends(get_service)):
    if not service.delete_event(event_id):
        return not_found("Event", event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
