"""FastAPI application for the Save Earth Ride content API.

Uses lifespan context manager and pure ASGI middleware
(no BaseHTTPMiddleware).  Store errors are mapped to status codes by the
exception handlers registered in ``create_app``.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from earthride.config import get_settings
from earthride.errors import ConflictError, NotFoundError, RecordValidationError
from earthride.presentation import CurrentDrivesCache, RunningBanner
from earthride.sheets import SheetsClient, UpstreamError, get_sheets_client
from earthride.store import AdminStore, BlogStore, DriveStore

from .errors import ErrorCode, error_response
from .middleware import (
    ErrorHandlingMiddleware,
    RequestBodyLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from .models import HealthResponse, LiveResponse
from .routes import admins_router, banner_router, blog_router, drives_router

# Note: settings are accessed via get_settings() at call sites rather than
# frozen at module level so test monkeypatching works.
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Wire stores, the drives cache and the banner; start rotation."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    client: SheetsClient = app.state.sheets_client or get_sheets_client()
    app.state.sheets_client = client
    app.state.blog_store = BlogStore(client, tab=settings.BLOG_SHEET_NAME)
    app.state.drive_store = DriveStore(client, tab=settings.DRIVE_SHEET_NAME)
    app.state.admin_store = AdminStore(
        client,
        a1_range=settings.ADMIN_SHEET_RANGE,
        required_fields=settings.ADMIN_REQUIRED_FIELDS,
    )

    try:
        await app.state.drive_store.initialize_sheet()
    except UpstreamError:
        logger.warning("Could not initialize the drives tab; continuing.", exc_info=True)

    app.state.drives_cache = CurrentDrivesCache(
        loader=app.state.drive_store.list,
        ttl=settings.DRIVES_CACHE_TTL_SECONDS,
    )
    app.state.banner = RunningBanner(
        app.state.drives_cache,
        interval=settings.BANNER_ROTATE_SECONDS,
    )
    await app.state.banner.mount()
    app.state.banner.start()

    app.state.ready = True
    yield
    app.state.ready = False
    await app.state.banner.unmount()
    logger.info("Application shutdown complete.")


_HTTP_ERROR_CODES = {
    401: ErrorCode.UNAUTHORIZED,
    404: ErrorCode.NOT_FOUND,
    413: ErrorCode.PAYLOAD_TOO_LARGE,
}


def _error(status_code: int, code: ErrorCode, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_response(code, message))


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return _error(404, ErrorCode.NOT_FOUND, str(exc))

    @app.exception_handler(ConflictError)
    async def conflict(request: Request, exc: ConflictError):
        return _error(409, ErrorCode.CONFLICT, str(exc))

    @app.exception_handler(RecordValidationError)
    async def invalid_record(request: Request, exc: RecordValidationError):
        return _error(400, ErrorCode.VALIDATION_ERROR, str(exc))

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return _error(400, ErrorCode.VALIDATION_ERROR, details or "Invalid request")

    @app.exception_handler(UpstreamError)
    async def upstream(request: Request, exc: UpstreamError):
        logger.error("Upstream failure on %s %s: %s", request.method, request.url.path, exc)
        return _error(500, ErrorCode.UPSTREAM_ERROR, "Spreadsheet backend request failed")

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            code = ErrorCode.INTERNAL_ERROR
        else:
            code = _HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.VALIDATION_ERROR)
        return _error(exc.status_code, code, str(exc.detail))


def create_app(sheets_client: SheetsClient | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        sheets_client: Client to use instead of the settings-built one
            (tests pass an in-memory fake).
    """
    settings = get_settings()
    app = FastAPI(
        title="Save Earth Ride Content API",
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.sheets_client = sheets_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID", "X-API-Key"],
    )

    # Starlette executes middleware in REVERSE add order: BodyLimit runs
    # first (outermost), Security last (innermost).
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestBodyLimitMiddleware)

    _register_exception_handlers(app)

    app.include_router(blog_router)
    app.include_router(drives_router)
    app.include_router(admins_router)
    app.include_router(banner_router)

    # ------------------------------------------------------------------
    # GET /live: liveness probe, always 200
    # ------------------------------------------------------------------
    @app.get("/live", response_model=LiveResponse)
    async def liveness():
        return LiveResponse()

    # ------------------------------------------------------------------
    # GET /health: readiness, 503 when the spreadsheet is unreachable
    # ------------------------------------------------------------------
    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        ready = getattr(request.app.state, "ready", False)
        client = getattr(request.app.state, "sheets_client", None)
        sheets_available = bool(client is not None and client.is_available())
        banner = getattr(request.app.state, "banner", None)

        healthy = ready and sheets_available
        current = get_settings()
        body = HealthResponse(
            status="healthy" if healthy else "degraded",
            version=current.VERSION,
            sheets_available=sheets_available,
            banner_running=bool(banner is not None and banner.running),
            environment=current.ENVIRONMENT,
        )
        return JSONResponse(content=body.model_dump(), status_code=200 if healthy else 503)

    return app


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "earthride.api.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8080")),
        reload=True,
    )
