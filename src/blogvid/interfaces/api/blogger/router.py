"""Video extraction endpoint: ``GET /api/v1/blogger/{token}``."""

from __future__ import annotations

from typing import cast
from urllib.parse import unquote

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from blogvid.domain.exceptions import InputError, TransportError
from blogvid.infrastructure.blogger.constants import PAGE_URL_PREFIX
from blogvid.interfaces.api.envelope import error_envelope, result_envelope
from blogvid.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/blogger", tags=["blogger"])


def normalize_token(raw: str, *, decode: bool = True) -> str:
    """Reduce whatever the caller passed to the bare token.

    Accepts a bare token, a URL-encoded token, or a full player page URL
    (``https://www.blogger.com/video.g?token=...``). Query strings are dropped.
    Path parameters arrive already percent-decoded, so the HTTP edge passes
    ``decode=False`` to keep a literal ``%xx`` in the token intact.
    """
    token = unquote(raw or "") if decode else (raw or "")
    token = token.strip()
    if token.startswith(PAGE_URL_PREFIX):
        token = token[len(PAGE_URL_PREFIX):].split("&", 1)[0]
    return token.split("?", 1)[0].strip()


@router.get("")
@router.get("/{token:path}")
async def blogger_extract(request: Request, token: str = "") -> JSONResponse:
    """Resolve a player token to direct MP4 sources.

    Status codes:
        200: ``ok`` or ``fail`` extraction result (``success: true``)
        400: empty token
        500: the player page could not be fetched
    """
    state = cast(AppState, request.app.state)
    token = normalize_token(token, decode=False)

    try:
        result = await state.extract_uc.execute(
            token, browser_available=state.browser_observer.available
        )
    except InputError as exc:
        log.info("blogger_request_rejected", reason=str(exc))
        return JSONResponse(status_code=400, content=error_envelope(str(exc)))
    except TransportError as exc:
        log.error("blogger_page_fetch_failed", token=token[:20], error=str(exc))
        return JSONResponse(status_code=500, content=error_envelope(str(exc)))

    log.info(
        "blogger_request_done",
        token=token[:20],
        status=result.status,
        strategy=result.strategy,
    )
    return JSONResponse(content=result_envelope(result))
