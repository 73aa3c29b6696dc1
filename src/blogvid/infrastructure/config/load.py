"""Layered configuration loading: defaults < YAML < BLOGVID_* env < CLI."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_SECTIONS: tuple[str, ...] = ("http", "provider", "browser", "logging")
_TOP_LEVEL_KEYS: tuple[str, ...] = ("app_name", "environment", "debug_endpoint")

# Flat field name (env vars, CLI flags) -> (section, key) in the YAML layout.
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_user_agent": ("http", "user_agent"),
    "provider_base_url": ("provider", "base_url"),
    "provider_build_label": ("provider", "build_label"),
    "rpc_candidates": ("provider", "rpc_candidates"),
    "browser_enabled": ("browser", "enabled"),
    "browser_headless": ("browser", "headless"),
    "browser_observe_seconds": ("browser", "observe_seconds"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
}


def _merge_into(target: dict[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay *layer* on *target* in place; nested sections merge key by key."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = value
    return target


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the sectioned YAML shape, whatever shape it came in."""
    out: dict[str, Any] = {
        section: dict(layer[section])
        for section in _SECTIONS
        if isinstance(layer.get(section), Mapping)
    }
    out.update({key: layer[key] for key in _TOP_LEVEL_KEYS if key in layer})

    for flat_key, (section, key) in _FLAT_KEYS.items():
        if flat_key in layer:
            out.setdefault(section, {})[key] = layer[flat_key]
    return out


def _require_file(path: Path) -> Path:
    if not path.exists():
        raise FileNotFoundError(path)
    return path


def _yaml_layer(path: Path) -> dict[str, Any]:
    parsed = yaml.safe_load(_require_file(path).read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Merge every layer and validate the result once.

    Only reads the given files; a path that does not exist raises
    ``FileNotFoundError``. Values from *dotenv_path* never replace variables
    already present in the process environment.
    """
    if dotenv_path is not None:
        load_dotenv(_require_file(dotenv_path), override=False)

    merged = _sectioned(deepcopy(DEFAULT_CONFIG))
    if config_path is not None:
        _merge_into(merged, _sectioned(_yaml_layer(config_path)))
    _merge_into(merged, _sectioned(EnvOverrides().to_update_dict()))
    _merge_into(merged, _sectioned(cli_overrides or {}))

    return AppConfig.model_validate(merged)
