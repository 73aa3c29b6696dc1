"""Domain entities for video extraction.

Pure value objects, no framework dependencies and no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from blogvid.domain.exceptions import NotFoundError

ExtractionStatus = Literal["ok", "fail"]

VIDEO_MIME_TYPE = "video/mp4"
NOT_FOUND_ERROR = "Video config not found"


@dataclass(frozen=True)
class VideoSource:
    """A single playable stream variant."""

    file: str  # Direct media URL
    label: str  # "720p", "Original", "Auto", ...
    type: str = VIDEO_MIME_TYPE

    def to_dict(self) -> dict[str, str]:
        return {"file": self.file, "label": self.label, "type": self.type}


@dataclass(frozen=True)
class SessionContext:
    """Browser-impersonation context derived from the initial page fetch.

    Request-scoped; never persisted or shared between extractions.
    """

    cookies: str = ""  # "a=1; b=2", server order
    build_label: str = ""
    anti_forgery_token: str | None = None

    @property
    def has_anti_forgery_token(self) -> bool:
        return bool(self.anti_forgery_token)


@dataclass(frozen=True)
class ExtractionContext:
    """Everything a strategy may look at for one extraction request."""

    token: str
    page_url: str
    html: str
    session: SessionContext


@dataclass(frozen=True)
class StrategyOutcome:
    """Sources produced by a single strategy attempt."""

    sources: tuple[VideoSource, ...]
    image: str = ""


@dataclass(frozen=True)
class ExtractionResult:
    """Terminal artifact of the extraction pipeline."""

    status: ExtractionStatus
    sources: tuple[VideoSource, ...] = ()
    image: str = ""
    error: str | None = None
    strategy: str | None = None  # Name of the winning strategy (diagnostics)

    @classmethod
    def ok(
        cls,
        sources: tuple[VideoSource, ...],
        *,
        image: str = "",
        strategy: str | None = None,
    ) -> ExtractionResult:
        return cls(status="ok", sources=sources, image=image, strategy=strategy)

    @classmethod
    def not_found(cls, error: str = NOT_FOUND_ERROR) -> ExtractionResult:
        return cls(status="fail", error=error)

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"

    def raise_for_status(self) -> None:
        """Raise NotFoundError for a ``fail`` result."""
        if not self.is_ok:
            raise NotFoundError(self.error or NOT_FOUND_ERROR)

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the ``data`` part of the response envelope."""
        if not self.is_ok:
            return {"status": self.status, "error": self.error or NOT_FOUND_ERROR}
        return {
            "status": self.status,
            "image": self.image,
            "sources": [s.to_dict() for s in self.sources],
        }


@dataclass(frozen=True)
class InspectionStep:
    """One step of a diagnostic inspection run."""

    step: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"step": self.step, **self.details}
