"""Command-line entry point: load configuration, then serve stdio or HTTP."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from infomaniak_mcp import __version__
from infomaniak_mcp.config import (
    ConfigError,
    InfomaniakMcpConfig,
    load_config,
    validate_config,
)
from infomaniak_mcp.log import configure_logging
from infomaniak_mcp.server import create_app
from infomaniak_mcp.stdio import run_stdio

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="infomaniak-mcp-server",
        description="MCP server exposing the Infomaniak API as tools.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--transport", help="stdio (default) or http")
    parser.add_argument("--host", help="HTTP bind address")
    parser.add_argument("--port", type=int, help="HTTP port (default 3000)")
    parser.add_argument("--session-mode", dest="session_mode", help="stateful (default) or stateless")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (default INFO)")
    return parser


def resolve_config(argv: Optional[List[str]] = None) -> InfomaniakMcpConfig:
    """Environment first, command-line flags override; raises ``ConfigError``."""
    args = build_parser().parse_args(argv)
    config = load_config()
    if args.transport:
        config.transport = args.transport.strip().lower()
    if args.host:
        config.http_host = args.host
    if args.port is not None:
        config.http_port = args.port
    if args.session_mode:
        config.session_mode = args.session_mode.strip().lower()
    if args.log_level:
        config.log_level = args.log_level
    validate_config(config)
    return config


def serve_http(config: InfomaniakMcpConfig) -> None:
    app = create_app(config)
    logger.info(
        "Infomaniak MCP Server running on http://%s:%d/mcp", config.http_host, config.http_port
    )
    logger.info("Session mode: %s", config.session_mode)
    logger.info("Health check: http://%s:%d/health", config.http_host, config.http_port)
    # log_config=None keeps uvicorn on the stderr handlers installed by configure_logging.
    uvicorn.run(
        app,
        host=config.http_host,
        port=config.http_port,
        log_config=None,
        log_level=logging.getLogger().level,
    )


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = resolve_config(argv)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    configure_logging(config)
    if config.transport == "http":
        serve_http(config)
    else:
        asyncio.run(run_stdio(config))
    return 0
