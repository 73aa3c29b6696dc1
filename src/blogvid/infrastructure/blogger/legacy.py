"""Legacy ``VIDEO_CONFIG`` strategy.

Older player pages inline the whole stream list as a JS assignment::

    <script>var VIDEO_CONFIG = {"streams":[{"play_url":...,"format_id":22}],
    "thumbnail":"https://..."}</script>

Still served for some tokens, and free once the page is fetched, so it
runs first.
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog

from blogvid.domain.entities.quality import quality_label
from blogvid.domain.entities.video import ExtractionContext, StrategyOutcome, VideoSource
from blogvid.domain.exceptions import ParseError
from blogvid.infrastructure.blogger.constants import LEGACY_MARKER

log = structlog.get_logger(__name__)

_ASSIGNMENT_RE = re.compile(rf"{LEGACY_MARKER}\s*=\s*")
_SCRIPT_END = "</script>"


def parse_legacy_config(html: str) -> dict[str, Any]:
    """Cut the ``VIDEO_CONFIG = {...}`` literal out of *html* and decode it.

    Raises ``ParseError`` when the assignment is missing or not a JSON object.
    """
    m = _ASSIGNMENT_RE.search(html)
    if not m:
        raise ParseError(f"no {LEGACY_MARKER} assignment")

    raw = html[m.end() :].split(_SCRIPT_END, 1)[0].strip().rstrip(";").strip()
    raw = raw.replace("\\u0026", "&").replace("\\u003d", "=")
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ParseError(f"{LEGACY_MARKER} is not valid JSON: {exc}") from exc
    if not isinstance(decoded, dict):
        raise ParseError(f"{LEGACY_MARKER} is not an object")
    return decoded


def sources_from_config(config: dict[str, Any]) -> list[VideoSource]:
    streams = config.get("streams")
    if not isinstance(streams, list):
        return []
    sources: list[VideoSource] = []
    for stream in streams:
        if not isinstance(stream, dict):
            continue
        url = stream.get("play_url")
        if not isinstance(url, str) or not url:
            continue
        sources.append(VideoSource(file=url, label=quality_label(stream.get("format_id"))))
    return sources


class LegacyConfigStrategy:
    """Reads sources from an inline ``VIDEO_CONFIG`` block, if the page has one."""

    @property
    def name(self) -> str:
        return "legacy_config"

    @property
    def requires_browser(self) -> bool:
        return False

    async def attempt(self, context: ExtractionContext) -> StrategyOutcome | None:
        html = context.html
        if LEGACY_MARKER not in html:
            return None

        try:
            config = parse_legacy_config(html)
        except ParseError as exc:
            log.debug("legacy_config_unparseable", error=str(exc))
            return None

        sources = sources_from_config(config)
        if not sources:
            log.debug("legacy_config_no_streams")
            return None

        thumbnail = config.get("thumbnail")
        return StrategyOutcome(
            sources=tuple(sources),
            image=thumbnail if isinstance(thumbnail, str) else "",
        )
