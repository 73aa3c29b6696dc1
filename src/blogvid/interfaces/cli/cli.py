from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from blogvid.domain.exceptions import InputError, TransportError
from blogvid.infrastructure.config import AppConfig, load_config
from blogvid.infrastructure.logging.setup import configure_logging
from blogvid.interfaces.api.blogger.router import normalize_token
from blogvid.interfaces.api.envelope import error_envelope, result_envelope
from blogvid.interfaces.app import create_app
from blogvid.interfaces.app_state import AppState
from blogvid.interfaces.composition import release_services, wire_services

log = structlog.get_logger(__name__)


def _add_config_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Disable the headless-browser strategy.",
    )


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="blogvid")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    serve.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env).",
    )
    _add_config_flags(serve)

    extract = sub.add_parser("extract", help="Extract sources for one token.")
    extract.add_argument("token", help="Player token or full video.g URL.")
    _add_config_flags(extract)

    return parser.parse_args(argv)


def _load(args: argparse.Namespace) -> AppConfig:
    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    if args.no_browser:
        cli_overrides["browser_enabled"] = False

    return load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=cli_overrides,
    )


async def extract_once(config: AppConfig, token: str) -> tuple[int, dict[str, Any]]:
    """Run one extraction outside the server; returns ``(exit_code, envelope)``."""
    state = AppState()
    state.config = config
    wire_services(state)
    try:
        result = await state.extract_uc.execute(
            normalize_token(token),
            browser_available=state.browser_observer.available,
        )
    except InputError as exc:
        return 2, error_envelope(str(exc))
    except TransportError as exc:
        return 3, error_envelope(str(exc))
    finally:
        await release_services(state)
    return (0 if result.is_ok else 1), result_envelope(result)


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Exit codes for ``extract``: 0 ok, 1 not found, 2 empty token,
    3 page fetch failed.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)
    config = _load(args)
    log_config = configure_logging(config)

    if args.command == "extract":
        code, envelope = asyncio.run(extract_once(config, args.token))
        print(json.dumps(envelope, indent=2, ensure_ascii=False))
        return code

    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "8080"))

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=log_config,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
