"""Format-id to resolution label mapping.

The provider tags every stream with a numeric format id ("itag").
The table is a process-wide constant; lookups never mutate it.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Any, Mapping

AUTO_LABEL = "Auto"
ORIGINAL_LABEL = "Original"

QUALITY_MAP: Mapping[str, str] = MappingProxyType(
    {
        "18": "360p",
        "22": "720p",
        "37": "1080p",
        "59": "480p",
        "5": "240p",
        "17": "144p",
        "34": "360p",
        "35": "480p",
        "36": "240p",
        "38": ORIGINAL_LABEL,
        "43": "360p",
        "44": "480p",
        "45": "720p",
        "46": "1080p",
        "132": "144p",
        "133": "240p",
        "134": "360p",
        "135": "480p",
        "136": "720p",
        "137": "1080p",
    }
)

_RESOLUTION_RE = re.compile(r"(\d+)p", re.IGNORECASE)
_ORIGINAL_RANK = 100_000


def quality_label(format_id: Any) -> str:
    """Map a format id (str or int) to its label, ``"Auto"`` when unknown."""
    if format_id is None or isinstance(format_id, bool):
        return AUTO_LABEL
    return QUALITY_MAP.get(str(format_id).strip(), AUTO_LABEL)


def quality_rank(label: str) -> int:
    """Numeric rank of a label for sorting (higher = better).

    ``Original`` ranks above every resolution, unparseable labels rank 0.
    """
    if label == ORIGINAL_LABEL:
        return _ORIGINAL_RANK
    m = _RESOLUTION_RE.search(label)
    return int(m.group(1)) if m else 0
