from .quality import AUTO_LABEL, QUALITY_MAP, quality_label, quality_rank
from .video import (
    NOT_FOUND_ERROR,
    VIDEO_MIME_TYPE,
    ExtractionContext,
    ExtractionResult,
    ExtractionStatus,
    InspectionStep,
    SessionContext,
    StrategyOutcome,
    VideoSource,
)

__all__ = [
    "AUTO_LABEL",
    "NOT_FOUND_ERROR",
    "QUALITY_MAP",
    "VIDEO_MIME_TYPE",
    "ExtractionContext",
    "ExtractionResult",
    "ExtractionStatus",
    "InspectionStep",
    "SessionContext",
    "StrategyOutcome",
    "VideoSource",
    "quality_label",
    "quality_rank",
]
