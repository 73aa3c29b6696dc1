"""Playwright network observer for the browser-observation strategy.

Opens the player page in a stealth Chromium session and records every
``googlevideo.com/videoplayback`` URL carrying an ``itag`` that shows up
either as an outgoing request or inside an RPC response body. A fresh
browser is launched per observation and always torn down afterwards.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from playwright.async_api import (
    BrowserContext,
    Request,
    Response,
    Route,
    async_playwright,
)
from playwright_stealth import Stealth

from blogvid.infrastructure.blogger.constants import RPC_PATH

log = structlog.get_logger(__name__)

# Images, fonts and CSS are never needed to get the player to request media.
_BLOCKED_RESOURCE_TYPES = frozenset({"image", "font", "stylesheet"})

_MEDIA_URL_RE = re.compile(
    r"https?://[^\s\"'<>\\]+googlevideo\.com/videoplayback\?[^\s\"'<>\\]*itag=\d+[^\s\"'<>\\]*"
)
_RPC_RESPONSE_MARKERS = (RPC_PATH, "batchexecute")

# Extra time to keep listening once the first media URL appeared, so the
# remaining quality variants can show up too.
DEFAULT_GRACE_SECONDS = 1.5


def _unescape_js(text: str) -> str:
    return text.replace("\\u0026", "&").replace("\\u003d", "=").replace("\\/", "/")


def find_media_urls(text: str) -> list[str]:
    """Media URLs embedded in *text* (JSON/JS escapes resolved), in order."""
    return _MEDIA_URL_RE.findall(_unescape_js(text))


def _is_rpc_response(url: str) -> bool:
    return any(marker in url for marker in _RPC_RESPONSE_MARKERS)


async def _cancel_pending(tasks: list[asyncio.Task[None]]) -> None:
    """Cancel body reads that are still running so none outlives the session."""
    pending = [task for task in list(tasks) if not task.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
        log.debug("browser_body_reads_cancelled", count=len(pending))


async def _block_resources(route: Route) -> None:
    """Abort requests for heavy resource types."""
    if route.request.resource_type in _BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


class PlaywrightBrowserObserver:
    """BrowserObserverPort backed by headless Chromium + stealth evasions.

    Usage::

        observer = PlaywrightBrowserObserver(headless=True)
        urls = await observer.observe(page_url, user_agent=UA, window_seconds=12)
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        headless: bool = True,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
    ) -> None:
        self._enabled = enabled
        self._headless = headless
        self._grace_seconds = grace_seconds

    @property
    def available(self) -> bool:
        return self._enabled

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _browser_session(self, user_agent: str) -> AsyncIterator[BrowserContext]:
        """Launch browser + stealth context; released on every exit path."""
        playwright = await async_playwright().start()
        browser = None
        context = None
        try:
            browser = await playwright.chromium.launch(headless=self._headless)
            context = await browser.new_context(user_agent=user_agent)
            await Stealth().apply_stealth_async(context)
            await context.route("**/*", _block_resources)
            log.debug("browser_session_started", headless=self._headless)
            yield context
        finally:
            if context is not None:
                await context.close()
            if browser is not None:
                await browser.close()
            await playwright.stop()
            log.debug("browser_session_closed")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def observe(
        self,
        url: str,
        *,
        user_agent: str,
        window_seconds: float,
    ) -> list[str]:
        """Load *url* and collect media URLs for at most *window_seconds*."""
        seen: list[str] = []
        found = asyncio.Event()
        body_reads: list[asyncio.Task[None]] = []

        def _record(candidates: list[str]) -> None:
            for media_url in candidates:
                if media_url not in seen:
                    seen.append(media_url)
            if seen:
                found.set()

        def _on_request(request: Request) -> None:
            _record(find_media_urls(request.url))

        async def _scan_body(response: Response) -> None:
            try:
                _record(find_media_urls(await response.text()))
            except Exception:  # noqa: BLE001
                log.debug("browser_response_body_unavailable", url=response.url[:120])

        def _on_response(response: Response) -> None:
            if _is_rpc_response(response.url):
                body_reads.append(asyncio.ensure_future(_scan_body(response)))

        loop = asyncio.get_running_loop()
        deadline = loop.time() + window_seconds

        async with self._browser_session(user_agent) as context:
            page = await context.new_page()
            page.on("request", _on_request)
            page.on("response", _on_response)
            try:
                try:
                    await page.goto(
                        url,
                        wait_until="domcontentloaded",
                        timeout=int(window_seconds * 1000),
                    )
                except Exception:  # noqa: BLE001
                    log.debug("browser_navigation_incomplete", url=url[:120], exc_info=True)

                try:
                    await asyncio.wait_for(
                        found.wait(), timeout=max(0.0, deadline - loop.time())
                    )
                    await asyncio.sleep(
                        min(self._grace_seconds, max(0.0, deadline - loop.time()))
                    )
                except asyncio.TimeoutError:
                    log.debug("browser_observation_window_elapsed", url=url[:120])

                # Body reads still get the rest of the window, never more.
                if body_reads:
                    await asyncio.wait(
                        list(body_reads), timeout=max(0.0, deadline - loop.time())
                    )
            finally:
                await _cancel_pending(body_reads)

        log.info("browser_observation_done", url=url[:120], media_urls=len(seen))
        return seen
