"""Tests for AppConfig validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from blogvid.infrastructure.config.schema import AppConfig, EnvOverrides


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.http_timeout_seconds == 20.0
        assert config.http_timeout_ms == 20_000
        assert config.provider_base_url == "https://www.blogger.com"
        assert config.rpc_candidates == ["A", "B", "C", "D"]
        assert config.browser_enabled is True
        assert config.browser_observe_seconds == 12.0
        assert config.debug_endpoint is False
        assert config.log_format == "console"

    def test_sectioned_input(self) -> None:
        config = AppConfig.model_validate(
            {
                "http": {"timeout_seconds": 5},
                "provider": {"rpc_candidates": ["B"]},
                "browser": {"enabled": False},
                "logging": {"level": "DEBUG"},
            }
        )
        assert config.http_timeout_seconds == 5.0
        assert config.rpc_candidates == ["B"]
        assert config.browser_enabled is False
        assert config.log_level == "DEBUG"

    def test_prod_derives_json_logs(self) -> None:
        assert AppConfig(environment="prod").log_format == "json"

    def test_explicit_log_format_kept(self) -> None:
        assert AppConfig(environment="prod", log_format="console").log_format == "console"

    @pytest.mark.parametrize("field", ["http_timeout_seconds", "browser_observe_seconds"])
    @pytest.mark.parametrize("value", [0, -1.5])
    def test_rejects_non_positive_timeouts(self, field: str, value: float) -> None:
        with pytest.raises(ValidationError):
            AppConfig.model_validate({field: value})

    def test_rejects_unknown_candidate(self) -> None:
        with pytest.raises(ValidationError, match="unknown rpc_candidates"):
            AppConfig.model_validate({"rpc_candidates": ["A", "Q"]})

    def test_rejects_empty_candidates(self) -> None:
        with pytest.raises(ValidationError, match="must not be empty"):
            AppConfig.model_validate({"rpc_candidates": []})

    def test_rejects_non_http_base_url(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig.model_validate({"provider_base_url": "ftp://blogger.com"})

    def test_base_url_trailing_slash_stripped(self) -> None:
        config = AppConfig.model_validate({"provider_base_url": "http://localhost:9000/"})
        assert config.provider_base_url == "http://localhost:9000"

    def test_sectioned_dict_round_trip(self) -> None:
        config = AppConfig(environment="test", debug_endpoint=True)
        again = AppConfig.model_validate(config.to_sectioned_dict())
        assert again == config


class TestEnvOverrides:
    def test_only_set_values_reported(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOGVID_BROWSER_ENABLED", "false")
        monkeypatch.setenv("BLOGVID_RPC_CANDIDATES", '["D","A"]')
        assert EnvOverrides().to_update_dict() == {
            "browser_enabled": False,
            "rpc_candidates": ["D", "A"],
        }
