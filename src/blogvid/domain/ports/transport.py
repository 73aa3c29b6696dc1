"""Port for single HTTP request/response exchanges."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class TransportResponse:
    """Outcome of one HTTP exchange.

    ``set_cookies`` holds the raw Set-Cookie entries in server order;
    interpreting them is the caller's job.
    """

    status_code: int
    text: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    set_cookies: tuple[str, ...] = ()

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@runtime_checkable
class TransportPort(Protocol):
    """Performs exactly one request; never retries.

    Implementations raise ``TransportError`` on network failure or timeout.
    """

    async def request(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: str | None = None,
        timeout_ms: int | None = None,
        follow_redirects: bool = True,
    ) -> TransportResponse: ...
