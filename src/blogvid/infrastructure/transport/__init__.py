"""Outbound HTTP transport."""

from __future__ import annotations

from .httpx_transport import HttpxTransport, create_http_client, flatten_set_cookies

__all__ = ["HttpxTransport", "create_http_client", "flatten_set_cookies"]
