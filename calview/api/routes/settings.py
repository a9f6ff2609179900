"""Per-user calendar settings endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from ...services.calendar_service import CalendarService
from ..dependencies import get_service, resolve_user_id

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("")
def get_settings(
    user_id: int = Depends(resolve_user_id),
    service: CalendarService = Depends(get_service),
) -> Dict[str, Any]:
    """Stored settings, or the defaults for users who never saved any."""
    return service.get_settings(user_id).model_dump(mode="json", by_alias=True)


@router.post("")
def update_settings(
    payload: Dict[str, Any] = Body(...),
    user_id: int = Depends(resolve_user_id),
    service: CalendarService = Depends(get_service),
) -> Dict[str, Any]:
    """Merge the supplied fields into the user's settings."""
    return service.update_settings(user_id, payload).model_dump(mode="json", by_alias=True)
