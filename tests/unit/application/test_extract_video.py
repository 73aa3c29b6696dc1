"""Tests for ExtractVideoUseCase (the ordered fallback chain)."""

from __future__ import annotations

import asyncio
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from blogvid.application.use_cases.extract_video import ExtractVideoUseCase
from blogvid.domain.entities.video import (
    ExtractionContext,
    StrategyOutcome,
    VideoSource,
)
from blogvid.domain.exceptions import InputError, ParseError, TransportError

_SOURCE = VideoSource(file="https://v/1.mp4", label="720p")


def _make_strategy(
    name: str,
    outcome: StrategyOutcome | None | Exception = None,
    *,
    requires_browser: bool = False,
) -> MagicMock:
    strategy = MagicMock()
    strategy.name = name
    strategy.requires_browser = requires_browser
    if isinstance(outcome, Exception):
        strategy.attempt = AsyncMock(side_effect=outcome)
    else:
        strategy.attempt = AsyncMock(return_value=outcome)
    return strategy


def _make_use_case(
    context: ExtractionContext, *strategies: MagicMock
) -> tuple[ExtractVideoUseCase, MagicMock]:
    session_builder = MagicMock()
    session_builder.build = AsyncMock(return_value=context)
    uc = ExtractVideoUseCase(session_builder=session_builder, strategies=list(strategies))
    return uc, session_builder


class TestExtractVideoUseCase:
    async def test_first_strategy_short_circuits(
        self, make_context: Callable[..., ExtractionContext]
    ) -> None:
        legacy = _make_strategy("legacy_config", StrategyOutcome((_SOURCE,), image="https://x/t.jpg"))
        rpc = _make_strategy("rpc")
        browser = _make_strategy("browser", requires_browser=True)
        uc, _ = _make_use_case(make_context(), legacy, rpc, browser)

        result = await uc.execute("TOKEN")

        assert result.status == "ok"
        assert result.sources == (_SOURCE,)
        assert result.image == "https://x/t.jpg"
        assert result.strategy == "legacy_config"
        rpc.attempt.assert_not_awaited()
        browser.attempt.assert_not_awaited()

    async def test_falls_through_to_later_strategy(
        self, make_context: Callable[..., ExtractionContext]
    ) -> None:
        legacy = _make_strategy("legacy_config", None)
        rpc = _make_strategy("rpc", StrategyOutcome(()))
        browser = _make_strategy("browser", StrategyOutcome((_SOURCE,)), requires_browser=True)
        context = make_context()
        uc, _ = _make_use_case(context, legacy, rpc, browser)

        result = await uc.execute("TOKEN")

        assert result.strategy == "browser"
        for strategy in (legacy, rpc, browser):
            strategy.attempt.assert_awaited_once_with(context)

    async def test_all_strategies_exhausted(
        self, make_context: Callable[..., ExtractionContext]
    ) -> None:
        uc, _ = _make_use_case(
            make_context(), _make_strategy("legacy_config"), _make_strategy("rpc")
        )

        result = await uc.execute("TOKEN")

        assert result.status == "fail"
        assert result.error == "Video config not found"
        assert result.sources == ()

    async def test_browser_strategy_skipped_without_capability(
        self, make_context: Callable[..., ExtractionContext]
    ) -> None:
        browser = _make_strategy("browser", StrategyOutcome((_SOURCE,)), requires_browser=True)
        uc, _ = _make_use_case(make_context(), _make_strategy("rpc"), browser)

        result = await uc.execute("TOKEN", browser_available=False)

        assert result.status == "fail"
        browser.attempt.assert_not_awaited()

    @pytest.mark.parametrize(
        "exc", [RuntimeError("boom"), ParseError("bad json"), TransportError("timeout")]
    )
    async def test_strategy_exception_absorbed(
        self, make_context: Callable[..., ExtractionContext], exc: Exception
    ) -> None:
        failing = _make_strategy("legacy_config", exc)
        rpc = _make_strategy("rpc", StrategyOutcome((_SOURCE,)))
        uc, _ = _make_use_case(make_context(), failing, rpc)

        result = await uc.execute("TOKEN")

        assert result.status == "ok"
        assert result.strategy == "rpc"

    @pytest.mark.parametrize("token", ["", "   ", None])
    async def test_empty_token_rejected(
        self, make_context: Callable[..., ExtractionContext], token: str | None
    ) -> None:
        uc, session_builder = _make_use_case(make_context(), _make_strategy("rpc"))

        with pytest.raises(InputError, match="No token"):
            await uc.execute(token)  # type: ignore[arg-type]
        session_builder.build.assert_not_awaited()

    async def test_token_is_stripped(
        self, make_context: Callable[..., ExtractionContext]
    ) -> None:
        uc, session_builder = _make_use_case(make_context(), _make_strategy("rpc"))

        await uc.execute("  TOKEN \n")

        session_builder.build.assert_awaited_once_with("TOKEN")

    async def test_page_transport_error_propagates(self) -> None:
        session_builder = MagicMock()
        session_builder.build = AsyncMock(side_effect=TransportError("timeout after 20s"))
        rpc = _make_strategy("rpc")
        uc = ExtractVideoUseCase(session_builder=session_builder, strategies=[rpc])

        with pytest.raises(TransportError):
            await uc.execute("TOKEN")
        rpc.attempt.assert_not_awaited()

    async def test_duplicate_files_removed(
        self, make_context: Callable[..., ExtractionContext]
    ) -> None:
        outcome = StrategyOutcome((_SOURCE, _SOURCE))
        uc, _ = _make_use_case(make_context(), _make_strategy("rpc", outcome))

        result = await uc.execute("TOKEN")

        assert result.sources == (_SOURCE,)

    async def test_no_overall_deadline(
        self, make_context: Callable[..., ExtractionContext]
    ) -> None:
        async def _slow(_: ExtractionContext) -> StrategyOutcome:
            await asyncio.sleep(0.05)
            return StrategyOutcome((_SOURCE,))

        slow = _make_strategy("rpc")
        slow.attempt = AsyncMock(side_effect=_slow)
        uc, _ = _make_use_case(make_context(), _make_strategy("legacy_config"), slow)

        result = await uc.execute("TOKEN")

        assert result.status == "ok"

    def test_strategy_names(self, make_context: Callable[..., ExtractionContext]) -> None:
        uc, _ = _make_use_case(
            make_context(), _make_strategy("legacy_config"), _make_strategy("rpc")
        )
        assert uc.strategy_names == ["legacy_config", "rpc"]
