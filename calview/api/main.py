"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..domain.exceptions import StorageError, ValidationError
from ..logging_setup import configure_logging
from .dependencies import get_config
from .models.responses import ErrorCodes, ErrorResponse
from .routes import events_router, health_router, settings_router, views_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    configure_logging(get_config().log_level)
    logger.info("calview API %s starting", __version__)
    yield


def _error(status_code: int, error: str, code: str, details: list[str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code, details=details or []).model_dump(),
    )


def create_app(debug: bool = False) -> FastAPI:
    app = FastAPI(
        title="calview API",
        description="Calendar events, per-user settings and render-ready view layouts",
        version=__version__,
        debug=debug,
        lifespan=lifespan,
    )

    # CORS middleware (for development)
    if debug:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(400, str(exc), ErrorCodes.VALIDATION_ERROR, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
            for error in exc.errors()
        ]
        return _error(400, "Invalid request", ErrorCodes.INVALID_REQUEST, details)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return _error(503, "Storage unavailable", ErrorCodes.STORAGE_ERROR)

    # Global exception handler for unexpected errors
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error", ErrorCodes.INTERNAL_ERROR)

    app.include_router(health_router)
    app.include_router(events_router)
    app.include_router(settings_router)
    app.include_router(views_router)

    return app


app = create_app(debug=get_config().api.debug)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(
        "calview.api.main:app",
        host=config.api.host,
        port=config.api.port,
        reload=config.api.debug,
    )
