"""Port for the headless-browser network observer."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class BrowserObserverPort(Protocol):
    """Loads a page in a real browser and reports media URLs seen on the wire.

    Implementations own the whole browser lifecycle for one call: the
    session is acquired and released inside ``observe``.
    """

    @property
    def available(self) -> bool:
        """Whether a browser can be launched in this environment."""
        ...

    async def observe(
        self,
        url: str,
        *,
        user_agent: str,
        window_seconds: float,
    ) -> list[str]:
        """Return media URLs observed within *window_seconds* (may be empty)."""
        ...
