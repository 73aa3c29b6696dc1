"""No-op observer used when no headless browser can be launched."""

from __future__ import annotations


class UnavailableBrowserObserver:
    """BrowserObserverPort stand-in that never observes anything."""

    @property
    def available(self) -> bool:
        return False

    async def observe(
        self,
        url: str,
        *,
        user_agent: str,
        window_seconds: float,
    ) -> list[str]:
        return []
