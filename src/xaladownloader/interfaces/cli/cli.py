from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from xaladownloader.domain.entities import UpstreamGeneration
from xaladownloader.infrastructure.config import load_config
from xaladownloader.infrastructure.logging.setup import configure_logging
from xaladownloader.interfaces.app import create_app

log = structlog.get_logger(__name__)

DEFAULT_PORT = 8080


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="xaladownloader")

    # Server options
    parser.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    parser.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env, default 8080).",
    )

    # Config wiring flags (no business logic)
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
        "--generation",
        default=None,
        choices=[g.value for g in UpstreamGeneration],
        help="Override the upstream catalog generation.",
    )
    parser.add_argument(
        "--no-discovery",
        action="store_true",
        help="Skip origin discovery and use the persisted origin.",
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

    return parser.parse_args(argv)


def build_cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    cli_overrides: dict[str, Any] = {}
    if args.generation:
        cli_overrides["upstream_generation"] = args.generation
    if args.no_discovery:
        cli_overrides["upstream_discovery_enabled"] = False
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    return cli_overrides


def start(argv: Iterable[str] | None = None) -> None:
    """Process entrypoint: load config once, configure logging, serve."""

    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    host = args.host or os.getenv("HOST", "127.0.0.1")
    port = int(args.port or os.getenv("PORT", str(DEFAULT_PORT)))

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=build_cli_overrides(args),
    )

    log_config = configure_logging(config)
    log.debug("config_loaded", config=config.to_sectioned_dict())
    log.info(
        "server_starting",
        host=host,
        port=port,
        generation=config.upstream.generation.value,
    )

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=log_config,
    )


if __name__ == "__main__":
    raise SystemExit(start())
