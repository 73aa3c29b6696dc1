"""Shared fixtures for integration tests.

These tests wire real components (HttpxTransport, session builder,
strategies, use case) together with HTTP mocked via respx.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from blogvid.infrastructure.transport import create_http_client


@pytest.fixture()
async def http_client() -> httpx.AsyncClient:
    """Real shared client (cookie-less jar) for use with respx mocking."""
    client = create_http_client(timeout_seconds=5.0, user_agent="TestAgent/1.0")
    yield client
    await client.aclose()


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router
