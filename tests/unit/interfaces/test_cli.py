"""Tests for the blogvid command line entrypoint."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from blogvid.domain.entities.video import ExtractionResult, VideoSource
from blogvid.domain.exceptions import InputError, TransportError
from blogvid.infrastructure.config import AppConfig
from blogvid.interfaces.app_state import AppState
from blogvid.interfaces.cli import cli

_CLI = "blogvid.interfaces.cli.cli"


def _fake_wiring(outcome: ExtractionResult | Exception) -> tuple[Any, AsyncMock]:
    """Stand-in for wire_services() that installs a mocked use case."""
    execute = AsyncMock()
    if isinstance(outcome, Exception):
        execute.side_effect = outcome
    else:
        execute.return_value = outcome

    def _wire(state: AppState) -> None:
        state.extract_uc = MagicMock()
        state.extract_uc.execute = execute
        state.browser_observer = MagicMock()
        state.browser_observer.available = False

    return _wire, execute


class TestParseArgs:
    def test_serve_defaults(self) -> None:
        args = cli._parse_args(["serve"])
        assert args.command == "serve"
        assert args.host is None
        assert args.port is None
        assert args.no_browser is False

    def test_extract_token(self) -> None:
        args = cli._parse_args(["extract", "AD6v5dzQ", "--no-browser", "--log-level", "DEBUG"])
        assert args.command == "extract"
        assert args.token == "AD6v5dzQ"
        assert args.no_browser is True
        assert args.log_level == "DEBUG"

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            cli._parse_args([])

    def test_cli_flags_become_overrides(self) -> None:
        args = cli._parse_args(["extract", "x", "--no-browser", "--log-format", "json"])
        with patch(f"{_CLI}.load_config") as load_config:
            cli._load(args)
        overrides = load_config.call_args.kwargs["cli_overrides"]
        assert overrides == {"log_format": "json", "browser_enabled": False}
        assert load_config.call_args.kwargs["config_path"] is None


class TestExtractOnce:
    async def test_ok_exit_zero(self) -> None:
        result = ExtractionResult.ok((VideoSource(file="https://v/1.mp4", label="720p"),))
        wire, execute = _fake_wiring(result)
        with (
            patch(f"{_CLI}.wire_services", side_effect=wire),
            patch(f"{_CLI}.release_services", new_callable=AsyncMock) as release,
        ):
            code, envelope = await cli.extract_once(
                AppConfig(), "https://www.blogger.com/video.g?token=AD6v5dzQ"
            )

        assert code == 0
        assert envelope["success"] is True
        assert envelope["data"]["sources"][0]["label"] == "720p"
        execute.assert_awaited_once_with("AD6v5dzQ", browser_available=False)
        release.assert_awaited_once()

    @pytest.mark.parametrize(
        ("outcome", "expected_code", "success"),
        [
            (ExtractionResult.not_found(), 1, True),
            (InputError("No token"), 2, False),
            (TransportError("timeout after 20s"), 3, False),
        ],
    )
    async def test_failure_exit_codes(
        self, outcome: Any, expected_code: int, success: bool
    ) -> None:
        wire, _ = _fake_wiring(outcome)
        with (
            patch(f"{_CLI}.wire_services", side_effect=wire),
            patch(f"{_CLI}.release_services", new_callable=AsyncMock) as release,
        ):
            code, envelope = await cli.extract_once(AppConfig(), "tok")

        assert code == expected_code
        assert envelope["success"] is success
        assert envelope["data"]["status"] == "fail"
        release.assert_awaited_once()


class TestStart:
    def test_extract_prints_envelope(self, capsys: pytest.CaptureFixture[str]) -> None:
        envelope = {"success": True, "data": {"status": "fail", "error": "Video config not found"}}
        with (
            patch(f"{_CLI}.configure_logging", return_value={}),
            patch(f"{_CLI}.extract_once", new=AsyncMock(return_value=(1, envelope))),
        ):
            code = cli.start(["extract", "tok", "--no-browser"])

        assert code == 1
        assert json.loads(capsys.readouterr().out) == envelope

    def test_serve_uses_env_host_and_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", "9001")
        with (
            patch(f"{_CLI}.configure_logging", return_value={"version": 1}),
            patch(f"{_CLI}.create_app") as create_app,
            patch(f"{_CLI}.uvicorn.run") as run,
        ):
            assert cli.start(["serve"]) == 0

        run.assert_called_once_with(
            create_app.return_value,
            host="127.0.0.1",
            port=9001,
            log_config={"version": 1},
        )

    def test_serve_flags_override_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "9001")
        with (
            patch(f"{_CLI}.configure_logging", return_value={}),
            patch(f"{_CLI}.create_app"),
            patch(f"{_CLI}.uvicorn.run") as run,
        ):
            cli.start(["serve", "--host", "localhost", "--port", "7000"])

        assert run.call_args.kwargs["host"] == "localhost"
        assert run.call_args.kwargs["port"] == 7000
