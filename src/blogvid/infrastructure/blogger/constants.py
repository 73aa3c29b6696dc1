"""Provider constants for the Blogger video player."""

from __future__ import annotations

from urllib.parse import quote

BASE_URL = "https://www.blogger.com"
PAGE_PATH = "/video.g"
RPC_PATH = "/_/BloggerVideoPlayerUi/data"
RPC_ID = "W8PsLe"
RPC_CALL_TYPE = "generic"
RPC_FRAGMENT_TAG = "wrb.fr"
RPC_REQ_ID = "12345"

# Hardcoded fallback for the "cfb2h" build label. Goes stale when the
# provider redeploys; the RPC strategy then degrades.
DEFAULT_BUILD_LABEL = "boq_bloggeruiserver_20260218.01_p0"

# Anti-hijacking prefix in front of every batchexecute response.
XSSI_PREFIX = ")]}'"

LEGACY_MARKER = "VIDEO_CONFIG"
MEDIA_HOST_MARKER = "googlevideo.com"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/132.0.0.0 Safari/537.36"
)

NAVIGATION_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Upgrade-Insecure-Requests": "1",
}

PAGE_URL_PREFIX = f"{BASE_URL}{PAGE_PATH}?token="


def page_url(token: str, *, base_url: str = BASE_URL) -> str:
    """Player page URL for *token* (token is sent verbatim, as the player does)."""
    return f"{base_url.rstrip('/')}{PAGE_PATH}?token={token}"


def rpc_url(build_label: str, *, base_url: str = BASE_URL) -> str:
    """batchexecute endpoint addressed to the given backend build."""
    return (
        f"{base_url.rstrip('/')}{RPC_PATH}"
        f"?rpcids={RPC_ID}"
        f"&source-path={quote(PAGE_PATH, safe='')}"
        f"&bl={quote(build_label, safe='')}"
        "&hl=en&soc-app=1&soc-platform=1&soc-device=1"
        f"&_reqid={RPC_REQ_ID}&rt=c"
    )
