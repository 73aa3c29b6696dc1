"""batchexecute RPC strategy.

The player fetches its stream list through Google's internal batch RPC
endpoint. Request shape::

    POST /_/BloggerVideoPlayerUi/data?rpcids=W8PsLe&bl=<build>&...&rt=c
    f.req=[[["W8PsLe","<json args>",null,"generic"]]]&at=<anti-forgery token>

Response shape (after the ``)]}'`` anti-hijacking prefix)::

    [["wrb.fr","W8PsLe","<json payload>",null,null,null,"generic"], ...]

With ``rt=c`` the envelope may also arrive as length-prefixed chunks.

The argument array is not documented and has drifted between provider
releases, so several candidate encodings are tried in order; each one is
an independent request (retry-with-variation, no backoff). The payload
is searched with the recursive source extractor.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Sequence
from urllib.parse import quote

import structlog

from blogvid.domain.entities.video import (
    ExtractionContext,
    StrategyOutcome,
    VideoSource,
)
from blogvid.domain.exceptions import ParseError, TransportError
from blogvid.domain.normalizer import dedupe_by_quality
from blogvid.domain.ports.transport import TransportPort, TransportResponse
from blogvid.infrastructure.blogger.constants import (
    BASE_URL,
    DEFAULT_USER_AGENT,
    RPC_CALL_TYPE,
    RPC_FRAGMENT_TAG,
    RPC_ID,
    XSSI_PREFIX,
    rpc_url,
)
from blogvid.infrastructure.blogger.source_extractor import extract_sources

log = structlog.get_logger(__name__)

_CHUNK_LENGTH_RE = re.compile(r"\d+")
_JSON_DECODER = json.JSONDecoder()


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


# ---------------------------------------------------------------------------
# Candidate argument encodings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RpcArgumentCandidate:
    """One guess at the positional argument array of the RPC call."""

    name: str
    build: Callable[[str], list[Any]]

    def encode(self, token: str) -> str:
        return _compact_json(self.build(token))


DEFAULT_CANDIDATES: tuple[RpcArgumentCandidate, ...] = (
    # Same layout as the player's data-p attribute
    RpcArgumentCandidate("A", lambda token: [token, "", False, False]),
    RpcArgumentCandidate("B", lambda token: [token, "", [False], [False, 1]]),
    RpcArgumentCandidate("C", lambda token: [None, token, "", False, False]),
    RpcArgumentCandidate("D", lambda token: [token, "", [[False]], [False, 1]]),
)

DEFAULT_CANDIDATE_NAMES: tuple[str, ...] = tuple(c.name for c in DEFAULT_CANDIDATES)


def resolve_candidates(
    names: Sequence[str] | None = None,
    *,
    extra: Iterable[RpcArgumentCandidate] = (),
) -> tuple[RpcArgumentCandidate, ...]:
    """Candidates in the order given by *names*.

    *extra* candidates extend the known set and may be referenced by name.
    Without *names*, the defaults come first, then *extra* in given order.
    """
    known: dict[str, RpcArgumentCandidate] = {c.name: c for c in DEFAULT_CANDIDATES}
    extra = tuple(extra)
    for candidate in extra:
        known[candidate.name] = candidate

    if names is None:
        return (*DEFAULT_CANDIDATES, *(c for c in extra if c.name not in DEFAULT_CANDIDATE_NAMES))

    unknown = [n for n in names if n not in known]
    if unknown:
        raise ValueError(f"Unknown RPC candidate(s): {', '.join(unknown)}")
    return tuple(known[n] for n in names)


# ---------------------------------------------------------------------------
# Wire codec
# ---------------------------------------------------------------------------


def encode_envelope(args_json: str, *, rpc_id: str = RPC_ID) -> str:
    """``[[[rpc_id, args_json, null, "generic"]]]`` as compact JSON."""
    return _compact_json([[[rpc_id, args_json, None, RPC_CALL_TYPE]]])


def encode_form_body(envelope: str, anti_forgery_token: str | None) -> str:
    body = f"f.req={quote(envelope, safe='')}"
    if anti_forgery_token:
        body += f"&at={quote(anti_forgery_token, safe='')}"
    return body


def strip_xssi_prefix(text: str) -> str:
    """Remove the ``)]}'`` prefix and any whitespace that follows it."""
    if text.startswith(XSSI_PREFIX):
        text = text[len(XSSI_PREFIX) :]
    return text.lstrip()


def _decode_chunks(text: str) -> list[Any]:
    """Decode ``<length>\\n<json>\\n<length>\\n<json>...`` framing.

    The declared lengths count UTF-16 units, so they are skipped rather
    than used for slicing.
    """
    entries: list[Any] = []
    pos = 0
    size = len(text)
    while pos < size:
        while pos < size and text[pos].isspace():
            pos += 1
        if pos >= size:
            break
        length = _CHUNK_LENGTH_RE.match(text, pos)
        if length:
            pos = length.end()
            continue
        try:
            value, pos = _JSON_DECODER.raw_decode(text, pos)
        except json.JSONDecodeError as exc:
            raise ParseError(f"malformed RPC chunk at offset {pos}") from exc
        if isinstance(value, list):
            entries.extend(value)
    return entries


def decode_envelope(text: str) -> list[Any]:
    """Decode a batchexecute response body into its list of envelope entries.

    Raises ``ParseError`` when the body is neither a JSON array nor
    chunk-framed JSON arrays.
    """
    clean = strip_xssi_prefix(text)
    if not clean:
        raise ParseError("empty RPC body")
    try:
        decoded = json.loads(clean)
    except json.JSONDecodeError:
        entries = _decode_chunks(clean)
        if not entries:
            raise ParseError("RPC body has no JSON array") from None
        return entries
    if not isinstance(decoded, list):
        raise ParseError("RPC body is not a JSON array")
    return decoded


def iter_fragment_payloads(
    entries: Iterable[Any], *, rpc_id: str = RPC_ID
) -> Iterator[Any]:
    """Yield the decoded payload of every ``wrb.fr`` fragment answering *rpc_id*.

    Fragments for other RPC ids, or with an empty or undecodable payload,
    are skipped.
    """
    for entry in entries:
        if not isinstance(entry, list) or len(entry) < 3:
            continue
        if entry[0] != RPC_FRAGMENT_TAG or entry[1] != rpc_id:
            continue
        raw = entry[2]
        if not isinstance(raw, str) or not raw:
            continue
        try:
            yield json.loads(raw)
        except json.JSONDecodeError:
            log.debug("rpc_fragment_unparseable", length=len(raw))
            continue


# ---------------------------------------------------------------------------
# Strategy
# ---------------------------------------------------------------------------


class RpcStrategy:
    """Emulates the player's batchexecute call with candidate argument shapes."""

    def __init__(
        self,
        transport: TransportPort,
        *,
        candidates: Sequence[RpcArgumentCandidate] = DEFAULT_CANDIDATES,
        base_url: str = BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_ms: int | None = None,
    ) -> None:
        if not candidates:
            raise ValueError("RpcStrategy needs at least one candidate")
        self._transport = transport
        self._candidates = tuple(candidates)
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout_ms = timeout_ms

    @property
    def name(self) -> str:
        return "rpc"

    @property
    def requires_browser(self) -> bool:
        return False

    @property
    def candidates(self) -> tuple[RpcArgumentCandidate, ...]:
        return self._candidates

    async def attempt(self, context: ExtractionContext) -> StrategyOutcome | None:
        for candidate in self._candidates:
            sources = await self._try_candidate(candidate, context)
            if sources:
                log.info(
                    "rpc_candidate_succeeded",
                    candidate=candidate.name,
                    sources=len(sources),
                )
                return StrategyOutcome(sources=tuple(sources))
        log.info("rpc_all_candidates_failed", tried=len(self._candidates))
        return None

    async def call(
        self, candidate: RpcArgumentCandidate, context: ExtractionContext
    ) -> TransportResponse:
        """Send one RPC request for *candidate*; never follows redirects."""
        session = context.session
        envelope = encode_envelope(candidate.encode(context.token))
        headers = {
            "User-Agent": self._user_agent,
            "Accept": "*/*",
            "Accept-Language": "en-US,en;q=0.9",
            "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
            "Origin": self._base_url,
            "Referer": context.page_url,
            "X-Same-Domain": "1",
        }
        if session.cookies:
            headers["Cookie"] = session.cookies
        return await self._transport.request(
            rpc_url(session.build_label, base_url=self._base_url),
            method="POST",
            headers=headers,
            body=encode_form_body(envelope, session.anti_forgery_token),
            timeout_ms=self._timeout_ms,
            follow_redirects=False,
        )

    async def _try_candidate(
        self, candidate: RpcArgumentCandidate, context: ExtractionContext
    ) -> list[VideoSource]:
        try:
            resp = await self.call(candidate, context)
        except TransportError as exc:
            log.warning("rpc_candidate_transport_error", candidate=candidate.name, error=str(exc))
            return []

        if not resp.is_success:
            log.warning("rpc_candidate_http_error", candidate=candidate.name, status=resp.status_code)
            return []

        try:
            entries = decode_envelope(resp.text)
        except ParseError as exc:
            log.warning("rpc_candidate_unparseable", candidate=candidate.name, error=str(exc))
            return []

        for payload in iter_fragment_payloads(entries):
            sources = extract_sources(payload)
            if sources:
                return dedupe_by_quality(sources)

        log.debug("rpc_candidate_no_sources", candidate=candidate.name)
        return []
