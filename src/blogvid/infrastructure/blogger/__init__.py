"""Blogger video player extraction strategies."""

from __future__ import annotations

from .browser import BrowserObservationStrategy
from .legacy import LegacyConfigStrategy
from .rpc import DEFAULT_CANDIDATES, RpcArgumentCandidate, RpcStrategy, resolve_candidates
from .session import SessionContextBuilder

__all__ = [
    "DEFAULT_CANDIDATES",
    "BrowserObservationStrategy",
    "LegacyConfigStrategy",
    "RpcArgumentCandidate",
    "RpcStrategy",
    "SessionContextBuilder",
    "resolve_candidates",
]
