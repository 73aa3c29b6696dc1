"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from blogvid.infrastructure.blogger.constants import (
    BASE_URL,
    DEFAULT_BUILD_LABEL,
    DEFAULT_USER_AGENT,
)
from blogvid.infrastructure.blogger.rpc import DEFAULT_CANDIDATE_NAMES

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/provider/browser/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="blogvid", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=20.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Per-call timeout for provider requests (seconds).",
    )
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="Browser User-Agent presented to the provider.",
    )

    # Provider (YAML section: provider.*)
    provider_base_url: str = Field(
        default=BASE_URL,
        validation_alias=AliasChoices(
            "provider_base_url",
            AliasPath("provider", "base_url"),
        ),
        description="Origin of the video player and RPC endpoint.",
    )
    provider_build_label: str = Field(
        default=DEFAULT_BUILD_LABEL,
        validation_alias=AliasChoices(
            "provider_build_label",
            AliasPath("provider", "build_label"),
        ),
        description="Fallback build label when the page does not expose one.",
    )
    rpc_candidates: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CANDIDATE_NAMES),
        validation_alias=AliasChoices(
            "rpc_candidates",
            AliasPath("provider", "rpc_candidates"),
        ),
        description="RPC argument candidates to try, in order.",
    )

    # Browser observation (YAML section: browser.*)
    browser_enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "browser_enabled",
            AliasPath("browser", "enabled"),
        ),
        description="Allow the headless-browser strategy.",
    )
    browser_headless: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "browser_headless",
            AliasPath("browser", "headless"),
        ),
        description="Run Chromium headless.",
    )
    browser_observe_seconds: float = Field(
        default=12.0,
        validation_alias=AliasChoices(
            "browser_observe_seconds",
            AliasPath("browser", "observe_seconds"),
        ),
        description="How long to watch network traffic for media URLs.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    debug_endpoint: bool = Field(
        default=False,
        description="Expose the /api/v1/debug token inspector.",
    )

    @field_validator("http_timeout_seconds", "browser_observe_seconds")
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("rpc_candidates")
    @classmethod
    def _validate_candidates(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("rpc_candidates must not be empty")
        unknown = [name for name in v if name not in DEFAULT_CANDIDATE_NAMES]
        if unknown:
            raise ValueError(f"unknown rpc_candidates: {', '.join(unknown)}")
        return v

    @field_validator("provider_base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("provider_base_url must be an http(s) URL")
        return v.rstrip("/")

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    @property
    def http_timeout_ms(self) -> int:
        return int(self.http_timeout_seconds * 1000)

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "provider": {
                "base_url": self.provider_base_url,
                "build_label": self.provider_build_label,
                "rpc_candidates": list(self.rpc_candidates),
            },
            "browser": {
                "enabled": self.browser_enabled,
                "headless": self.browser_headless,
                "observe_seconds": self.browser_observe_seconds,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "debug_endpoint": self.debug_endpoint,
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read BLOGVID_* variables, keeps only
    the values that were set, merges them over YAML/defaults, then
    validates AppConfig.

    Supported env var examples (flat, explicit):
    - BLOGVID_HTTP_TIMEOUT_SECONDS
    - BLOGVID_PROVIDER_BUILD_LABEL
    - BLOGVID_RPC_CANDIDATES='["B","A"]'
    - BLOGVID_BROWSER_ENABLED
    - BLOGVID_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOGVID_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    provider_base_url: Optional[str] = None
    provider_build_label: Optional[str] = None
    rpc_candidates: Optional[list[str]] = None

    browser_enabled: Optional[bool] = None
    browser_headless: Optional[bool] = None
    browser_observe_seconds: Optional[float] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    debug_endpoint: Optional[bool] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
