"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from blogvid.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from blogvid.application.use_cases import ExtractVideoUseCase, InspectTokenUseCase
    from blogvid.domain.ports import BrowserObserverPort, TransportPort


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    transport: TransportPort
    browser_observer: BrowserObserverPort

    # Application Services
    extract_uc: ExtractVideoUseCase
    inspect_uc: InspectTokenUseCase
