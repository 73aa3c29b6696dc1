"""Response envelopes shared by the HTTP edge and the CLI."""

from __future__ import annotations

from typing import Any

from blogvid.domain.entities.video import ExtractionResult


def result_envelope(result: ExtractionResult) -> dict[str, Any]:
    """``{success: true, data: ...}`` for both ``ok`` and ``fail`` results."""
    return {"success": True, "data": result.to_dict()}


def error_envelope(message: str) -> dict[str, Any]:
    """``{success: false, data: {status: "fail", error}}`` for request-level faults."""
    return {"success": False, "data": {"status": "fail", "error": message}}
