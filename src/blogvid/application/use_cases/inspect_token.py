"""Diagnostic inspection of a token.

Fetches the player page and sends a single RPC call with the first
candidate, then reports raw observations (status codes, what the session
scraper found, body excerpts, media URLs in the raw body) so a broken
extraction can be diagnosed without attaching a debugger.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog

from blogvid.domain.entities.video import (
    ExtractionContext,
    InspectionStep,
    SessionContext,
)
from blogvid.domain.exceptions import InputError, TransportError
from blogvid.domain.ports.transport import TransportResponse

log = structlog.get_logger(__name__)

_MEDIA_URL_RE = re.compile(r"https://[^\"'\s]+googlevideo\.com[^\"'\s]+")


class _PageSession(Protocol):
    async def fetch_page(self, token: str) -> tuple[str, TransportResponse]: ...

    def session_from_page(
        self, html: str, set_cookies: tuple[str, ...]
    ) -> SessionContext: ...


class _Candidate(Protocol):
    name: str

    def encode(self, token: str) -> str: ...


class _RpcCaller(Protocol):
    @property
    def candidates(self) -> tuple[Any, ...]: ...

    async def call(self, candidate: Any, context: ExtractionContext) -> TransportResponse: ...


def _truncate(value: str, limit: int) -> str:
    return value[:limit] + "..." if len(value) > limit else value


@dataclass
class InspectionReport:
    token: str
    steps: list[InspectionStep] = field(default_factory=list)
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {"token": self.token, "steps": [s.to_dict() for s in self.steps]}


class InspectTokenUseCase:
    """Single-shot page fetch + RPC call, reported step by step."""

    def __init__(self, *, session_builder: _PageSession, rpc: _RpcCaller) -> None:
        self._session_builder = session_builder
        self._rpc = rpc

    async def execute(self, token: str) -> InspectionReport:
        token = (token or "").strip()
        if not token:
            raise InputError("Pass ?token=YOUR_TOKEN")

        report = InspectionReport(token=token[:20] + "...")
        try:
            await self._run(token, report)
        except TransportError as exc:
            log.warning("inspection_transport_error", error=str(exc))
            report.error = str(exc)
        return report

    async def _run(self, token: str, report: InspectionReport) -> None:
        page_url, page = await self._session_builder.fetch_page(token)
        html = page.text
        session = self._session_builder.session_from_page(html, page.set_cookies)
        report.steps.append(
            InspectionStep(
                "GET page",
                {
                    "http_code": page.status_code,
                    "cookies_collected": (
                        session.cookies[:100] + "..." if session.cookies else "NONE"
                    ),
                    "bl_found": session.build_label,
                    "at_found": session.anti_forgery_token or "NOT FOUND",
                    "has_video_config": "VIDEO_CONFIG" in html,
                    "has_c_data": "c-data" in html,
                    "html_length": len(html),
                },
            )
        )

        candidate: _Candidate = self._rpc.candidates[0]
        context = ExtractionContext(token=token, page_url=page_url, html=html, session=session)
        rpc = await self._rpc.call(candidate, context)
        raw = rpc.text
        clean = raw.removeprefix(")]}'").lstrip()
        media_urls = _MEDIA_URL_RE.findall(raw)
        report.steps.append(
            InspectionStep(
                "RPC POST",
                {
                    "http_code": rpc.status_code,
                    "args_used": candidate.encode(token)[:50],
                    "body_length": len(raw),
                    "raw_first_200": raw[:200],
                    "clean_first_500": clean[:500],
                    "googlevideo_urls_found": len(media_urls),
                    "googlevideo_urls": media_urls[:3],
                },
            )
        )
