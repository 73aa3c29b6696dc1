"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from blogvid.infrastructure.config import AppConfig
from blogvid.interfaces.app_state import AppState
from blogvid.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration only, resources are created in lifespan()."""
    app = FastAPI(
        title="blogvid",
        description="Direct MP4 source extraction for Blogger-hosted videos",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from blogvid.interfaces.api.blogger import router as blogger_router
    from blogvid.interfaces.api.debug import router as debug_router

    app.include_router(blogger_router, prefix="/api/v1")
    app.include_router(debug_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, Any]:
        """Liveness probe, reports which strategies are wired."""
        state = app.state
        observer = getattr(state, "browser_observer", None)
        extract_uc = getattr(state, "extract_uc", None)
        return {
            "status": "ok",
            "browser": bool(observer and observer.available),
            "strategies": extract_uc.strategy_names if extract_uc else [],
        }

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
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path[:80],
                status_code=response.status_code if response is not None else 500,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
