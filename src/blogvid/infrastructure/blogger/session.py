"""Session context builder: impersonates a browser opening the player page.

The player page embeds everything the RPC call needs: a backend build
label ("cfb2h") and an anti-forgery token ("at"). Neither is documented,
so each value is scraped with pure regex functions tried in a fixed
order (first hit wins). None of them raises; a miss just hands over to
the next pattern.

Anti-forgery token patterns, in priority order:
1. Named key in the WIZ global data blob: ``"SNlM0e":"<token>"``
2. Positional triplet from the internal value lists: ``'X','<token>','DEFAULT'``
3. Nonce lookup: the list entry right after a quoted copy of the page's
   script ``nonce`` attribute value
"""

from __future__ import annotations

import re
from typing import Callable

import structlog

from blogvid.domain.entities.video import ExtractionContext, SessionContext
from blogvid.domain.ports.transport import TransportPort, TransportResponse
from blogvid.infrastructure.blogger.constants import (
    BASE_URL,
    DEFAULT_BUILD_LABEL,
    DEFAULT_USER_AGENT,
    NAVIGATION_HEADERS,
    page_url,
)
from blogvid.infrastructure.transport.httpx_transport import flatten_set_cookies

log = structlog.get_logger(__name__)

_BUILD_LABEL_RE = re.compile(r'"cfb2h"\s*:\s*"([^"]+)"')
_AT_NAMED_RE = re.compile(r'"SNlM0e"\s*:\s*"([^"]+)"')
_AT_POSITIONAL_RE = re.compile(
    r"""["'][^"']*["']\s*,\s*["']([^"']+)["']\s*,\s*["']DEFAULT["']"""
)
_NONCE_ATTR_RE = re.compile(r"""\bnonce\s*=\s*["']([^"']+)["']""")


def extract_build_label(html: str) -> str | None:
    """Backend build label (``"cfb2h"`` key), ``None`` if absent."""
    m = _BUILD_LABEL_RE.search(html)
    return m.group(1) if m else None


def extract_at_named(html: str) -> str | None:
    m = _AT_NAMED_RE.search(html)
    return m.group(1) if m else None


def extract_at_positional(html: str) -> str | None:
    """Second value of the first ``'X','Y','DEFAULT'`` triplet."""
    m = _AT_POSITIONAL_RE.search(html)
    return m.group(1) if m else None


def extract_at_after_nonce(html: str) -> str | None:
    """Value following a quoted occurrence of the script nonce."""
    m = _NONCE_ATTR_RE.search(html)
    if not m:
        return None
    nonce = re.escape(m.group(1))
    follow = re.search(
        rf"""["']{nonce}["']\s*,\s*["']([^"']+)["']""",
        html,
    )
    return follow.group(1) if follow else None


ANTI_FORGERY_EXTRACTORS: tuple[tuple[str, Callable[[str], str | None]], ...] = (
    ("named_key", extract_at_named),
    ("positional_triplet", extract_at_positional),
    ("nonce_follow", extract_at_after_nonce),
)


def extract_anti_forgery_token(html: str) -> tuple[str | None, str | None]:
    """Run the extractors in priority order.

    Returns ``(token, method_name)``; both ``None`` when nothing matched.
    """
    for method, extractor in ANTI_FORGERY_EXTRACTORS:
        value = extractor(html)
        if value:
            return value, method
    return None, None


class SessionContextBuilder:
    """Fetches the player page once and derives the session context.

    A ``TransportError`` from the page fetch propagates: without the page
    there is nothing for any strategy to work with.
    """

    def __init__(
        self,
        transport: TransportPort,
        *,
        base_url: str = BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        default_build_label: str = DEFAULT_BUILD_LABEL,
        timeout_ms: int | None = None,
    ) -> None:
        self._transport = transport
        self._base_url = base_url
        self._user_agent = user_agent
        self._default_build_label = default_build_label
        self._timeout_ms = timeout_ms

    async def fetch_page(self, token: str) -> tuple[str, TransportResponse]:
        """GET the player page like a browser navigation; returns ``(url, response)``."""
        url = page_url(token, base_url=self._base_url)
        resp = await self._transport.request(
            url,
            method="GET",
            headers={"User-Agent": self._user_agent, **NAVIGATION_HEADERS},
            timeout_ms=self._timeout_ms,
            follow_redirects=True,
        )
        if not resp.is_success:
            log.warning("page_fetch_http_error", status=resp.status_code, url=url[:120])
        return url, resp

    async def build(self, token: str) -> ExtractionContext:
        url, resp = await self.fetch_page(token)
        html = resp.text
        session = self.session_from_page(html, resp.set_cookies)
        log.debug(
            "session_context_built",
            cookies=len(resp.set_cookies),
            build_label=session.build_label,
            has_at=session.has_anti_forgery_token,
            html_length=len(html),
        )
        return ExtractionContext(token=token, page_url=url, html=html, session=session)

    def session_from_page(self, html: str, set_cookies: tuple[str, ...]) -> SessionContext:
        """Derive the session context from page HTML and raw Set-Cookie entries."""
        build_label = extract_build_label(html)
        if build_label is None:
            log.info("build_label_fallback", build_label=self._default_build_label)
            build_label = self._default_build_label

        at_token, method = extract_anti_forgery_token(html)
        if at_token is None:
            log.debug("anti_forgery_token_missing")
        else:
            log.debug("anti_forgery_token_found", method=method)

        return SessionContext(
            cookies=flatten_set_cookies(set_cookies),
            build_label=build_label,
            anti_forgery_token=at_token,
        )
