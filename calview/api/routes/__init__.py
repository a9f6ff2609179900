"""API route modules."""

from .events import router as events_router
from .health import router as health_router
from .settings import router as settings_router
from .views import router as views_router

__all__ = ["events_router", "health_router", "settings_router", "views_router"]
