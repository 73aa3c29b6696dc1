"""Port for a single extraction strategy."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from blogvid.domain.entities.video import ExtractionContext, StrategyOutcome


@runtime_checkable
class ExtractionStrategyPort(Protocol):
    """One independent way of turning a page context into video sources.

    Strategies are stateless between attempts. ``None`` means "not
    applicable or failed"; the pipeline then moves to the next strategy.
    """

    @property
    def name(self) -> str:
        """Strategy name used in logs (e.g. 'legacy_config', 'rpc')."""
        ...

    @property
    def requires_browser(self) -> bool:
        """True when the strategy needs the headless-browser capability."""
        ...

    async def attempt(self, context: ExtractionContext) -> StrategyOutcome | None:
        ...
