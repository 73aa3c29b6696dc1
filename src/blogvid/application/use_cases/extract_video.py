"""Video extraction use case.

Token -> session context (one page fetch) -> strategies in priority
order, first one with sources wins -> normalized ExtractionResult.
"""

from __future__ import annotations

from typing import Protocol, Sequence

import structlog

from blogvid.domain.entities.video import ExtractionContext, ExtractionResult
from blogvid.domain.exceptions import InputError
from blogvid.domain.normalizer import build_result
from blogvid.domain.ports.strategy import ExtractionStrategyPort

log = structlog.get_logger(__name__)


class _SessionBuilder(Protocol):
    """Builds the per-request extraction context from the player page."""

    async def build(self, token: str) -> ExtractionContext: ...


class ExtractVideoUseCase:
    """Runs the ordered fallback chain of extraction strategies.

    Strategies run strictly one after another, never concurrently.
    Anything a strategy raises is logged
    and treated as "not applicable". The only errors that leave
    ``execute`` are ``InputError`` (empty token) and ``TransportError``
    from the initial page fetch.

    Only per-call timeouts apply; there is no deadline for the whole chain.
    """

    def __init__(
        self,
        *,
        session_builder: _SessionBuilder,
        strategies: Sequence[ExtractionStrategyPort],
    ) -> None:
        self._session_builder = session_builder
        self._strategies = tuple(strategies)

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    async def execute(self, token: str, *, browser_available: bool = True) -> ExtractionResult:
        token = (token or "").strip()
        if not token:
            raise InputError("No token")

        with structlog.contextvars.bound_contextvars(token=token[:20]):
            context = await self._session_builder.build(token)

            for strategy in self._strategies:
                if strategy.requires_browser and not browser_available:
                    log.debug("strategy_skipped_no_browser", strategy=strategy.name)
                    continue

                try:
                    outcome = await strategy.attempt(context)
                except Exception:
                    log.warning("strategy_failed", strategy=strategy.name, exc_info=True)
                    continue

                if outcome is None or not outcome.sources:
                    log.debug("strategy_not_applicable", strategy=strategy.name)
                    continue

                result = build_result(outcome, strategy=strategy.name)
                log.info(
                    "extraction_succeeded",
                    strategy=strategy.name,
                    sources=len(result.sources),
                )
                return result

            log.info("extraction_not_found", tried=self.strategy_names)
            return build_result(None)
