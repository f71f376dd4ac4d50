"""
Configuration helpers for the Infomaniak MCP server.

This module centralizes base URL selection, API token loading, transport
selection and the HTTP session options. No secrets are stored in the
repository; the token is read from the environment or a local file if present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

# Default connection settings
DEFAULT_BASE_URL = "https://api.infomaniak.com"
DEFAULT_TIMEOUT = 30.0

# API token handling
API_TOKEN_ENV_VAR = "INFOMANIAK_API_TOKEN"
API_TOKEN_FILE_ENV_VAR = "INFOMANIAK_API_TOKEN_FILE"
API_TOKEN_URL = "https://manager.infomaniak.com/v3/ng/accounts/token/list"

# Transport settings
TRANSPORTS = ("stdio", "http")
SESSION_MODES = ("stateful", "stateless")
DEFAULT_TRANSPORT = "stdio"
DEFAULT_HTTP_HOST = "127.0.0.1"
DEFAULT_HTTP_PORT = 3000
DEFAULT_SESSION_MODE = "stateful"
DEFAULT_SSE_KEEPALIVE = 15.0

LOG_LEVEL = "INFO"
LOG_FORMAT = "json"  # json or plain


class ConfigError(Exception):
    """Raised when the process configuration cannot be used to start serving."""


def _load_timeout(env: Mapping[str, str]) -> Optional[float]:
    raw_timeout = env.get("INFOMANIAK_HTTP_TIMEOUT")
    if raw_timeout:
        if raw_timeout.strip().lower() in {"0", "none", "off"}:
            return None
        try:
            value = float(raw_timeout)
        except ValueError:
            return DEFAULT_TIMEOUT
        return value if value > 0 else None
    return DEFAULT_TIMEOUT


def _load_keepalive(env: Mapping[str, str]) -> float:
    raw = env.get("MCP_SSE_KEEPALIVE")
    if raw:
        try:
            value = float(raw)
        except ValueError:
            return DEFAULT_SSE_KEEPALIVE
        if value > 0:
            return value
    return DEFAULT_SSE_KEEPALIVE


def _parse_port(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_HTTP_PORT
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid HTTP port: {raw!r}") from exc


def load_api_token(env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Load the Infomaniak API token from environment or a local file.

    Returns:
        The token string if available, otherwise None. The token is never
        logged or returned to callers.
    """
    env = os.environ if env is None else env
    env_token = env.get(API_TOKEN_ENV_VAR)
    if env_token and env_token.strip():
        return env_token.strip()

    token_path = env.get(API_TOKEN_FILE_ENV_VAR)
    if token_path:
        path = Path(token_path)
        if path.is_file():
            return path.read_text(encoding="utf-8").strip() or None

    return None


@dataclass(slots=True)
class InfomaniakMcpConfig:
    """Runtime configuration for API access and the serving transport."""

    api_token: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: Optional[float] = DEFAULT_TIMEOUT
    transport: str = DEFAULT_TRANSPORT
    http_host: str = DEFAULT_HTTP_HOST
    http_port: int = DEFAULT_HTTP_PORT
    session_mode: str = DEFAULT_SESSION_MODE
    sse_keepalive: float = DEFAULT_SSE_KEEPALIVE
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT

    def __repr__(self) -> str:
        token_state = "set" if self.api_token else "missing"
        return (
            f"InfomaniakMcpConfig(api_token=<{token_state}>, base_url={self.base_url!r}, "
            f"transport={self.transport!r}, session_mode={self.session_mode!r}, "
            f"http_port={self.http_port})"
        )


def load_config(env: Optional[Mapping[str, str]] = None) -> InfomaniakMcpConfig:
    """Build a config from environment variables without validating it."""
    env = os.environ if env is None else env
    port_raw = env.get("MCP_HTTP_PORT") or env.get("PORT")
    return InfomaniakMcpConfig(
        api_token=load_api_token(env),
        base_url=(env.get("INFOMANIAK_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        timeout=_load_timeout(env),
        transport=(env.get("MCP_TRANSPORT") or DEFAULT_TRANSPORT).strip().lower(),
        http_host=env.get("MCP_HTTP_HOST") or DEFAULT_HTTP_HOST,
        http_port=_parse_port(port_raw),
        session_mode=(env.get("MCP_SESSION_MODE") or DEFAULT_SESSION_MODE).strip().lower(),
        sse_keepalive=_load_keepalive(env),
        log_level=env.get("INFOMANIAK_MCP_LOG_LEVEL", LOG_LEVEL),
        log_format=env.get("INFOMANIAK_MCP_LOG_FORMAT", LOG_FORMAT),
    )


def validate_config(config: InfomaniakMcpConfig) -> None:
    """Fail fast on configuration that would prevent serving any request."""
    if not config.api_token:
        raise ConfigError(
            f"{API_TOKEN_ENV_VAR} environment variable is required. "
            f"Get your API token from: {API_TOKEN_URL}"
        )
    if config.transport not in TRANSPORTS:
        raise ConfigError(
            f"Unknown transport {config.transport!r} (expected one of: {', '.join(TRANSPORTS)})"
        )
    if config.session_mode not in SESSION_MODES:
        raise ConfigError(
            f"Unknown session mode {config.session_mode!r} "
            f"(expected one of: {', '.join(SESSION_MODES)})"
        )
    if not 0 < config.http_port < 65536:
        raise ConfigError(f"Invalid HTTP port: {config.http_port}")
