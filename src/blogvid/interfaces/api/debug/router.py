"""Token inspector: ``GET /api/v1/debug?token=...`` (opt-in via ``debug_endpoint``)."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from blogvid.domain.exceptions import InputError
from blogvid.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["debug"])


@router.get("/debug")
async def debug_inspect(request: Request, token: str | None = None) -> JSONResponse:
    """Run one page fetch and one RPC call and report what came back.

    Transport failures are reported in the body, never as an HTTP error.
    """
    state = cast(AppState, request.app.state)
    if not state.config.debug_endpoint:
        raise HTTPException(status_code=404, detail="Not Found")

    try:
        report = await state.inspect_uc.execute(token or "")
    except InputError as exc:
        return JSONResponse(content={"error": str(exc)})

    log.info("debug_inspection_done", success=report.success, steps=len(report.steps))
    if report.success:
        return JSONResponse(content={"success": True, "debug": report.to_dict()})
    return JSONResponse(
        content={"success": False, "error": report.error, "debug": report.to_dict()}
    )
