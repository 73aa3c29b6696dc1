"""Browser-observation strategy (capability-gated last resort).

Loads the player page in a real browser and collects the media URLs the
player requests (or receives inside RPC responses). Only runs when a
browser observer is available; otherwise it is skipped at zero cost.
"""

from __future__ import annotations

import structlog

from blogvid.domain.entities.quality import quality_label
from blogvid.domain.entities.video import ExtractionContext, StrategyOutcome, VideoSource
from blogvid.domain.normalizer import dedupe_by_quality, quality_key, sort_by_quality
from blogvid.domain.ports.browser import BrowserObserverPort
from blogvid.infrastructure.blogger.constants import DEFAULT_USER_AGENT

log = structlog.get_logger(__name__)

DEFAULT_OBSERVE_SECONDS = 12.0


def sources_from_media_urls(urls: list[str]) -> list[VideoSource]:
    """Dedupe by ``itag`` (first seen), label via QUALITY_MAP, best first."""
    sources = [VideoSource(file=url, label=quality_label(quality_key(url))) for url in urls]
    return sort_by_quality(dedupe_by_quality(sources))


class BrowserObservationStrategy:
    """Delegates to a ``BrowserObserverPort`` and normalizes what it saw."""

    def __init__(
        self,
        observer: BrowserObserverPort,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        window_seconds: float = DEFAULT_OBSERVE_SECONDS,
    ) -> None:
        self._observer = observer
        self._user_agent = user_agent
        self._window_seconds = window_seconds

    @property
    def name(self) -> str:
        return "browser"

    @property
    def requires_browser(self) -> bool:
        return True

    async def attempt(self, context: ExtractionContext) -> StrategyOutcome | None:
        if not self._observer.available:
            log.debug("browser_strategy_unavailable")
            return None

        try:
            urls = await self._observer.observe(
                context.page_url,
                user_agent=self._user_agent,
                window_seconds=self._window_seconds,
            )
        except Exception:
            log.warning("browser_observation_failed", exc_info=True)
            return None

        sources = sources_from_media_urls(urls)
        if not sources:
            log.info("browser_observation_empty", url=context.page_url[:120])
            return None
        return StrategyOutcome(sources=tuple(sources))
