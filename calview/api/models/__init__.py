"""API Pydantic models."""

from .responses import (
    ErrorCodes,
    ErrorResponse,
    EventResponse,
    HealthResponse,
    ViewResponse,
)

__all__ = ["ErrorCodes", "ErrorResponse", "EventResponse", "HealthResponse", "ViewResponse"]
