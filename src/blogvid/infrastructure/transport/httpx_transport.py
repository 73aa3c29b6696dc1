"""httpx-backed transport: one request, one response, no retries."""

from __future__ import annotations

from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Iterable

import httpx
import structlog

from blogvid.domain.exceptions import TransportError
from blogvid.domain.ports.transport import TransportResponse

log = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_MS = 20_000


def flatten_set_cookies(entries: Iterable[str]) -> str:
    """Collapse raw Set-Cookie entries into a single Cookie header value.

    Keeps only the ``name=value`` part before the first ``;`` of each
    entry, in server order: ``["a=1; Path=/", "b=2; Secure"]`` -> ``"a=1; b=2"``.
    """
    pairs: list[str] = []
    for entry in entries:
        pair = entry.split(";", 1)[0].strip()
        if pair:
            pairs.append(pair)
    return "; ".join(pairs)


def _collect_set_cookies(resp: httpx.Response) -> tuple[str, ...]:
    """Set-Cookie entries of the redirect chain and the final response."""
    entries: list[str] = []
    for hop in (*resp.history, resp):
        entries.extend(hop.headers.get_list("set-cookie"))
    return tuple(entries)


def create_http_client(*, timeout_seconds: float, user_agent: str) -> httpx.AsyncClient:
    """Build the shared client.

    The cookie jar rejects every cookie: session cookies are request-scoped
    and always sent explicitly, so the pooled client must never replay
    one request's cookies on another.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        headers={"User-Agent": user_agent},
        cookies=CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
    )


class HttpxTransport:
    """TransportPort implementation over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self._http = http_client
        self._default_timeout_ms = default_timeout_ms

    async def request(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: str | None = None,
        timeout_ms: int | None = None,
        follow_redirects: bool = True,
    ) -> TransportResponse:
        """Send one request and return the raw outcome.

        Raises ``TransportError`` on connection errors and timeouts.
        """
        timeout = (timeout_ms or self._default_timeout_ms) / 1000
        try:
            resp = await self._http.request(
                method,
                url,
                headers=headers,
                content=body.encode("utf-8") if body is not None else None,
                timeout=timeout,
                follow_redirects=follow_redirects,
            )
        except httpx.TimeoutException as exc:
            log.warning("transport_timeout", method=method, url=url[:120], timeout_s=timeout)
            raise TransportError(f"timeout after {timeout:g}s: {url}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.warning(
                "transport_request_failed",
                method=method,
                url=url[:120],
                error=str(exc),
            )
            raise TransportError(str(exc) or type(exc).__name__) from exc

        log.debug(
            "transport_response",
            method=method,
            url=url[:120],
            status=resp.status_code,
            body_length=len(resp.content),
        )
        return TransportResponse(
            status_code=resp.status_code,
            text=resp.text,
            url=str(resp.url),
            headers=dict(resp.headers),
            set_cookies=_collect_set_cookies(resp),
        )
