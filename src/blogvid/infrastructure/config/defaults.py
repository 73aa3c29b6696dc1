"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

from blogvid.infrastructure.blogger.constants import (
    BASE_URL,
    DEFAULT_BUILD_LABEL,
    DEFAULT_USER_AGENT,
)
from blogvid.infrastructure.blogger.rpc import DEFAULT_CANDIDATE_NAMES

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "blogvid",
    "environment": "dev",
    "http": {
        "timeout_seconds": 20.0,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "provider": {
        "base_url": BASE_URL,
        "build_label": DEFAULT_BUILD_LABEL,
        "rpc_candidates": list(DEFAULT_CANDIDATE_NAMES),
    },
    "browser": {
        "enabled": True,
        "headless": True,
        "observe_seconds": 12.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "debug_endpoint": False,
}
