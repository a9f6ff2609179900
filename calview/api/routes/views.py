"""Render-ready calendar views."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ...config import AppConfig
from ...domain.models import Granularity
from ...services.calendar_service import CalendarService
from ..dependencies import get_config, get_service, parse_query_datetime, resolve_user_id, today
from ..models.responses import ViewResponse

router = APIRouter(prefix="/api/views", tags=["views"])


@router.get("/{granularity}")
def render_view(
    granularity: Granularity,
    date: Optional[str] = Query(None, description="Anchor date (ISO 8601), defaults to today"),
    user_id: int = Depends(resolve_user_id),
    config: AppConfig = Depends(get_config),
    service: CalendarService = Depends(get_service),
) -> Dict[str, Any]:
    """
    Window, selected events and layout for one view.

    Week and day views carry per-day vertical positions, month and year
    views carry day buckets.
    """
    anchor = parse_query_datetime(date, config) if date else today(config)
    view = service.render_view(user_id, granularity, anchor)
    return ViewResponse.from_view(view).to_json()
