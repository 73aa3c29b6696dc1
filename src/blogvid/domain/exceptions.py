"""Extraction error taxonomy."""

from __future__ import annotations


class BlogvidError(Exception):
    """Base class for all extraction errors."""


class InputError(BlogvidError):
    """Raised when the request precondition fails (empty or missing token)."""


class TransportError(BlogvidError):
    """Raised on network failure or when no response arrives within the timeout."""


class ParseError(BlogvidError):
    """Raised when a provider payload (JSON, HTML marker, envelope) is malformed."""


class NotFoundError(BlogvidError):
    """Raised when every extraction strategy was exhausted without sources."""
