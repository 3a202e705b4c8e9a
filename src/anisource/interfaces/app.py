"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from anisource.infrastructure.config import AppConfig
from anisource.interfaces.app_state import AppState
from anisource.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration ONLY, NO resource initialization.

    Resources (fetcher, providers, resolver) are created in lifespan().
    """
    app = FastAPI(
        title="anisource",
        description="Multi-provider anime search, episode and stream resolution",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from anisource.interfaces.api.anime.router import router as anime_router

    app.include_router(anime_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str | list[str]]:
        """Liveness probe: returns 200 as long as the process is running."""
        state = app.state
        providers = getattr(state, "providers", None)
        resolver = getattr(state, "stream_resolver", None)
        return {
            "status": "ok",
            "providers": providers.list_names() if providers else [],
            "decoders": resolver.supported_decoders if resolver else [],
        }

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
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
