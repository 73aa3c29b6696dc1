"""Shared test fixtures for blogvid test suite."""

from __future__ import annotations

import json
from typing import Any, Callable

import pytest

from blogvid.domain.entities.video import ExtractionContext, SessionContext
from blogvid.infrastructure.blogger.constants import page_url

TOKEN = "AD6v5dzQ1xbtL4Jm0Bq9_tokenSample-XYZ"

# ---------------------------------------------------------------------------
# Provider payload fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def token() -> str:
    return TOKEN


@pytest.fixture()
def player_html() -> str:
    """Modern player page: build label + named anti-forgery token, no legacy block."""
    return (
        "<html><head><script nonce=\"n0nce\">"
        'window.WIZ_global_data = {"cfb2h":"boq_bloggeruiserver_20991231.00_p1",'
        '"SNlM0e":"AF1_QpN-named-at","FdrFJe":"-123"};'
        "</script></head><body>"
        '<div class="c-data" data-p="%.@.&quot;TOKEN&quot;]"></div>'
        "</body></html>"
    )


@pytest.fixture()
def legacy_html() -> str:
    """Player page with an inline VIDEO_CONFIG assignment (one 720p stream)."""
    config = (
        '{"thumbnail":"https://x/t.jpg","streams":'
        '[{"play_url":"https://v/1.mp4?a=1\\u0026b=2","format_id":22}]}'
    )
    return f"<html><script>var VIDEO_CONFIG = {config};</script></html>"


@pytest.fixture()
def make_rpc_body() -> Callable[..., str]:
    """Build a batchexecute response body wrapping *payload*."""

    def _make(payload: Any, *, chunked: bool = False) -> str:
        fragment = ["wrb.fr", "W8PsLe", json.dumps(payload), None, None, None, "generic"]
        envelope = json.dumps([fragment, ["di", 57], ["af.httprm", 56, "-1", 3]])
        if not chunked:
            return ")]}'\n\n" + envelope
        trailer = json.dumps([["e", 4, None, None, 131]])
        return f")]}}'\n\n{len(envelope)}\n{envelope}\n{len(trailer)}\n{trailer}\n"

    return _make


@pytest.fixture()
def media_payload() -> list[Any]:
    """Decoded RPC payload with two googlevideo streams at nesting depth 2."""
    return [
        None,
        "title",
        [
            [
                ["https://rr3---sn.googlevideo.com/videoplayback?itag=22&id=a", "720p"],
                ["https://rr3---sn.googlevideo.com/videoplayback?itag=18&id=a", "360p"],
            ]
        ],
    ]


@pytest.fixture()
def make_context() -> Callable[..., ExtractionContext]:
    def _make(
        *,
        html: str = "<html></html>",
        cookies: str = "NID=1; AEC=2",
        build_label: str = "boq_test_label",
        anti_forgery_token: str | None = "AT123",
        token: str = TOKEN,
    ) -> ExtractionContext:
        return ExtractionContext(
            token=token,
            page_url=page_url(token),
            html=html,
            session=SessionContext(
                cookies=cookies,
                build_label=build_label,
                anti_forgery_token=anti_forgery_token,
            ),
        )

    return _make
