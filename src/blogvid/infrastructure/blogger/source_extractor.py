"""Recursive video source search over schema-less nested payloads.

The decoded RPC payload is a deeply nested list whose layout changes
between provider releases, so instead of indexing into it we search it
level by level for shapes that look like stream entries:

(a) mapping with ``play_url`` + ``format_id``   -> label via QUALITY_MAP
(b) ``[url, label, ...]`` where url contains ``googlevideo.com``
(c) ``[url, label, ...]`` where url is any ``http(s)://...mp4`` link

All matches of the shallowest level that has any are returned; deeper
levels are never visited once a level matched. Traversal stops below
``MAX_DEPTH`` (the root container is depth 0).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from blogvid.domain.entities.quality import AUTO_LABEL, quality_label
from blogvid.domain.entities.video import VideoSource
from blogvid.infrastructure.blogger.constants import MEDIA_HOST_MARKER

MAX_DEPTH = 10

_MP4_URL_RE = re.compile(r"^https?://.+\.mp4", re.IGNORECASE)


def _is_container(value: Any) -> bool:
    return isinstance(value, (list, tuple, Mapping))


def _children(container: Any) -> list[Any]:
    if isinstance(container, Mapping):
        return list(container.values())
    return list(container)


def _pair_label(item: list[Any] | tuple[Any, ...]) -> str:
    return item[1] if isinstance(item[1], str) and item[1] else AUTO_LABEL


def match_source(item: Any) -> VideoSource | None:
    """Match one element against the recognised leaf shapes."""
    if isinstance(item, Mapping):
        url = item.get("play_url")
        if isinstance(url, str) and url and "format_id" in item:
            return VideoSource(file=url, label=quality_label(item.get("format_id")))
        return None

    if not isinstance(item, (list, tuple)) or len(item) < 2:
        return None
    head = item[0]
    if not isinstance(head, str):
        return None
    if MEDIA_HOST_MARKER in head or _MP4_URL_RE.match(head):
        return VideoSource(file=head, label=_pair_label(item))
    return None


def extract_sources(data: Any, *, max_depth: int = MAX_DEPTH) -> list[VideoSource]:
    """Level-first search for stream entries; empty list when nothing matched."""
    if not _is_container(data):
        return []

    level: list[Any] = [data]
    depth = 0
    while level and depth <= max_depth:
        found: list[VideoSource] = []
        next_level: list[Any] = []
        for container in level:
            for item in _children(container):
                source = match_source(item)
                if source is not None:
                    found.append(source)
                elif _is_container(item):
                    next_level.append(item)
        if found:
            return found
        level = next_level
        depth += 1
    return []
