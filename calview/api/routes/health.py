"""Health check endpoint."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ... import __version__
from ...config import AppConfig
from ...domain.exceptions import StorageError
from ...services.calendar_service import CalendarService
from ..dependencies import get_config, get_service
from ..models.responses import HealthResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(
    config: AppConfig = Depends(get_config),
    service: CalendarService = Depends(get_service),
):
    """
    Health check endpoint for monitoring.

    Returns 200 if the store answers, 503 if it does not.
    """
    timestamp = datetime.now(timezone.utc).isoformat()

    try:
        service.get_settings(config.default_user_id)
    except StorageError as e:
        logger.warning("Health check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=__version__,
                timestamp=timestamp,
                error=str(e),
            ).to_json(),
        )

    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=timestamp,
    ).to_json()
