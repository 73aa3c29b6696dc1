"""Browser observer implementations."""

from __future__ import annotations

from .playwright_observer import PlaywrightBrowserObserver
from .unavailable import UnavailableBrowserObserver

__all__ = ["PlaywrightBrowserObserver", "UnavailableBrowserObserver"]
