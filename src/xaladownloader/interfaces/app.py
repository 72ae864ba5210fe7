"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from xaladownloader import __version__
from xaladownloader.domain.entities import XalaError
from xaladownloader.infrastructure.config import AppConfig
from xaladownloader.infrastructure.graceful_shutdown import GracefulShutdown
from xaladownloader.interfaces.app_state import AppState
from xaladownloader.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


async def _xala_error_handler(request: Request, exc: XalaError) -> Response:
    log_fn = log.error if exc.status_code >= 500 else log.warning
    log_fn(
        "request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        error=str(exc),
    )
    return JSONResponse({"detail": str(exc)}, status_code=exc.status_code)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration only, no resource initialization.

    Resources (HTTP client, origin, use cases) are created in lifespan().
    """
    app = FastAPI(
        title="xaladownloader",
        description="Catalog resolution and streaming download proxy",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config
    app.state.graceful_shutdown = GracefulShutdown()

    app.add_exception_handler(XalaError, _xala_error_handler)

    from xaladownloader.interfaces.api.admin.router import router as admin_router
    from xaladownloader.interfaces.api.catalog.router import router as catalog_router
    from xaladownloader.interfaces.api.download.router import router as download_router
    from xaladownloader.interfaces.api.series.router import router as series_router

    app.include_router(catalog_router)
    app.include_router(download_router)
    app.include_router(series_router)
    app.include_router(admin_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str | int]:
        """Liveness check; returns 200 as long as the process is running."""
        gs: GracefulShutdown = app.state.graceful_shutdown
        return {"status": "ok", "active_transfers": gs.active_transfers}

    @app.get("/readyz")
    async def readyz() -> Response:
        """Readiness check: 200 after startup complete, 503 otherwise."""
        gs: GracefulShutdown = app.state.graceful_shutdown
        if gs.is_ready:
            return JSONResponse({"status": "ready"}, status_code=200)
        return JSONResponse({"status": "not_ready"}, status_code=503)

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = response.status_code if response is not None else 500

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
