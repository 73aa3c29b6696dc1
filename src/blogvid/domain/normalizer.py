"""Result normalization: dedup, ordering and assembly of ExtractionResult.

Pure functions over domain value objects.
"""

from __future__ import annotations

from typing import Iterable
from urllib.parse import parse_qs, urlsplit

from blogvid.domain.entities.quality import quality_rank
from blogvid.domain.entities.video import ExtractionResult, StrategyOutcome, VideoSource


def quality_key(url: str) -> str:
    """Quality identifier of a media URL: its ``itag`` parameter, else the URL."""
    itags = parse_qs(urlsplit(url).query).get("itag")
    if itags and itags[0]:
        return itags[0]
    return url


def dedupe_by_file(sources: Iterable[VideoSource]) -> list[VideoSource]:
    seen: set[str] = set()
    unique: list[VideoSource] = []
    for source in sources:
        if source.file in seen:
            continue
        seen.add(source.file)
        unique.append(source)
    return unique


def dedupe_by_quality(sources: Iterable[VideoSource]) -> list[VideoSource]:
    """Collapse repeated observations of the same quality, first seen wins."""
    seen: set[str] = set()
    unique: list[VideoSource] = []
    for source in sources:
        key = quality_key(source.file)
        if key in seen:
            continue
        seen.add(key)
        unique.append(source)
    return unique


def sort_by_quality(sources: Iterable[VideoSource]) -> list[VideoSource]:
    """Best quality first; stable for equal ranks."""
    return sorted(sources, key=lambda s: quality_rank(s.label), reverse=True)


def build_result(outcome: StrategyOutcome | None, *, strategy: str | None = None) -> ExtractionResult:
    """Terminal result for the winning strategy, or the ``fail`` result."""
    if outcome is None:
        return ExtractionResult.not_found()
    sources = tuple(dedupe_by_file(outcome.sources))
    if not sources:
        return ExtractionResult.not_found()
    return ExtractionResult.ok(sources, image=outcome.image, strategy=strategy)
