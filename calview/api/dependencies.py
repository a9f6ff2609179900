"""FastAPI dependencies for configuration, the calendar service and request parsing."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

import pendulum
from fastapi import Depends, Query
from fastapi.responses import JSONResponse
from pendulum import DateTime

from ..adapters.sqlite_store import SqliteCalendarStore
from ..config import AppConfig, load_config
from ..domain.layout_engine import LayoutEngine
from ..domain.validation import parse_datetime
from ..services.calendar_service import CalendarService
from .models.responses import ErrorCodes, ErrorResponse

CONFIG_ENV_VAR = "CALVIEW_CONFIG"


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Configuration loaded once per process, from $CALVIEW_CONFIG if set."""
    path = os.environ.get(CONFIG_ENV_VAR)
    return load_config(Path(path) if path else None)


@lru_cache(maxsize=1)
def _build_service() -> CalendarService:
    config = get_config()
    store = SqliteCalendarStore(
        config.storage.database_path,
        timeout=config.storage.timeout_seconds,
    )
    store.initialize()
    engine = LayoutEngine(
        min_visible_height=config.layout.min_visible_height,
        preview_limits=config.layout.preview_limits,
    )
    return CalendarService(store, engine, timezone=config.timezone)


def get_service() -> CalendarService:
    return _build_service()


def resolve_user_id(
    user_id: Optional[int] = Query(None, alias="userId"),
    config: AppConfig = Depends(get_config),
) -> int:
    """The requested user, or the configured default user."""
    return user_id if user_id is not None else config.default_user_id


def parse_query_datetime(value: str, config: AppConfig) -> DateTime:
    return parse_datetime(value, tz=config.timezone)


def today(config: AppConfig) -> DateTime:
    return pendulum.now(config.timezone)


def not_found(what: str, identifier: object) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(
            error=f"{what} not found",
            code=ErrorCodes.NOT_FOUND,
            details=[f"id: {identifier}"],
        ).model_dump(),
    )
