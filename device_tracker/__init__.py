"""Application factory and top-level wiring for the device tracker.

This module brings together configuration, the database lifecycle, the page
and JSON routers, middleware and error handling. ``create_app`` is used by
``device_tracker.main`` for the real server and by the tests with their own
settings.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import AppSettings, get_settings
from .core.errors import TrackerError, http_exception_handler, tracker_error_handler
from .db.bootstrap import Database
from .middlewares import PermissiveCorsMiddleware, RequestIdMiddleware
from .routers import api_devices as api_devices_router
from .routers import ui as ui_router


def create_app(settings: AppSettings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or get_settings()
    # The schema is not touched here; the first request that needs data calls
    # ``database.ensure_ready()``.
    database = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        database.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        # "/api/devices/" is an unknown route, not a redirect.
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.database = database

    # Last added runs first: request ids wrap the CORS short-circuit so OPTIONS
    # requests are logged too.
    app.add_middleware(PermissiveCorsMiddleware, allow_origin=settings.CORS_ALLOW_ORIGIN)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(ui_router.router)
    app.include_router(api_devices_router.router)

    app.add_exception_handler(TrackerError, tracker_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    return app


__all__ = ["create_app"]
