"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import structlog
from fastapi import FastAPI

from blogvid.application.use_cases import ExtractVideoUseCase, InspectTokenUseCase
from blogvid.infrastructure.blogger import (
    BrowserObservationStrategy,
    LegacyConfigStrategy,
    RpcStrategy,
    SessionContextBuilder,
    resolve_candidates,
)
from blogvid.infrastructure.browser import (
    PlaywrightBrowserObserver,
    UnavailableBrowserObserver,
)
from blogvid.infrastructure.config.schema import AppConfig
from blogvid.infrastructure.transport import HttpxTransport, create_http_client
from blogvid.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def wire_services(state: AppState) -> None:
    """Create every resource and use case from ``state.config``.

    Order matters:
        1. HTTP client (shared connection pool, never stores cookies)
        2. Transport (TransportPort over the client)
        3. Browser observer (Playwright or no-op)
        4. Session builder + strategies in fallback order
        5. Use cases
    """
    config: AppConfig = state.config

    # 1) HTTP client
    state.http_client = create_http_client(
        timeout_seconds=config.http_timeout_seconds,
        user_agent=config.http_user_agent,
    )
    log.info("http_client_initialized", timeout_s=config.http_timeout_seconds)

    # 2) Transport
    state.transport = HttpxTransport(
        state.http_client, default_timeout_ms=config.http_timeout_ms
    )

    # 3) Browser observer
    if config.browser_enabled:
        state.browser_observer = PlaywrightBrowserObserver(
            enabled=True, headless=config.browser_headless
        )
    else:
        state.browser_observer = UnavailableBrowserObserver()
    log.info("browser_observer_configured", available=state.browser_observer.available)

    # 4) Session builder + strategies
    session_builder = SessionContextBuilder(
        state.transport,
        base_url=config.provider_base_url,
        user_agent=config.http_user_agent,
        default_build_label=config.provider_build_label,
        timeout_ms=config.http_timeout_ms,
    )
    rpc = RpcStrategy(
        state.transport,
        candidates=resolve_candidates(config.rpc_candidates),
        base_url=config.provider_base_url,
        user_agent=config.http_user_agent,
        timeout_ms=config.http_timeout_ms,
    )
    strategies = [
        LegacyConfigStrategy(),
        rpc,
        BrowserObservationStrategy(
            state.browser_observer,
            user_agent=config.http_user_agent,
            window_seconds=config.browser_observe_seconds,
        ),
    ]

    # 5) Use cases
    state.extract_uc = ExtractVideoUseCase(
        session_builder=session_builder, strategies=strategies
    )
    state.inspect_uc = InspectTokenUseCase(session_builder=session_builder, rpc=rpc)
    log.info(
        "extract_use_case_initialized",
        strategies=state.extract_uc.strategy_names,
        rpc_candidates=[c.name for c in rpc.candidates],
    )


async def release_services(state: AppState) -> None:
    await state.http_client.aclose()
    log.info("http_client_closed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root)."""
    state = cast(AppState, app.state)
    wire_services(state)
    log.info("app_startup_complete")

    try:
        yield
    finally:
        await release_services(state)
        log.info("app_shutdown_complete")
