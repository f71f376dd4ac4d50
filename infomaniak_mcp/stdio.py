"""Newline-delimited JSON-RPC over stdin/stdout."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Callable, Dict, Optional

from infomaniak_mcp.config import InfomaniakMcpConfig
from infomaniak_mcp.infomaniak_api import InfomaniakApiClient
from infomaniak_mcp.mcp import ToolDispatcher
from infomaniak_mcp.protocol import PARSE_ERROR, McpChannel, jsonrpc_error_payload

logger = logging.getLogger(__name__)

# One message per line; allow large tool payloads.
STDIO_LINE_LIMIT = 16 * 1024 * 1024

Writer = Callable[[str], None]


def _stdout_writer(line: str) -> None:
    sys.stdout.write(line)
    sys.stdout.flush()


def _write(write: Writer, payload: Dict[str, Any]) -> None:
    write(json.dumps(payload, ensure_ascii=False) + "\n")


async def _handle_line(channel: McpChannel, line: str, write: Writer) -> None:
    try:
        message = json.loads(line)
    except json.JSONDecodeError:
        _write(write, jsonrpc_error_payload(None, PARSE_ERROR, "Parse error"))
        return
    response = await channel.handle_message(message)
    if response is not None:
        _write(write, response)


async def _read_frame(reader: asyncio.StreamReader) -> tuple[bytes, int]:
    """
    Return the next line and how many bytes of it were dropped.

    A line longer than the reader limit is drained through its newline, so its
    tail is never read back as a message of its own.
    """
    dropped = 0
    while True:
        try:
            line_bytes = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            # EOF; partial is whatever trailed the last newline.
            return exc.partial, dropped
        except asyncio.LimitOverrunError as exc:
            dropped += len(await reader.readexactly(exc.consumed))
            continue
        return line_bytes, dropped


async def serve_lines(
    channel: McpChannel,
    reader: asyncio.StreamReader,
    write: Writer = _stdout_writer,
) -> None:
    """Read framed messages until EOF, answering each before reading the next."""
    while True:
        line_bytes, dropped = await _read_frame(reader)
        if dropped:
            logger.warning(
                "stdio message over line limit discarded (%d bytes)",
                dropped + len(line_bytes),
            )
            _write(write, jsonrpc_error_payload(None, PARSE_ERROR, "Parse error"))
            if line_bytes.endswith(b"\n"):
                continue
            break
        if not line_bytes:
            break
        line = line_bytes.decode(errors="replace").strip()
        if line:
            await _handle_line(channel, line, write)
    channel.close()


async def _connect_stdin() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=STDIO_LINE_LIMIT)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    return reader


async def run_stdio(
    config: InfomaniakMcpConfig,
    *,
    client: Optional[InfomaniakApiClient] = None,
    reader: Optional[asyncio.StreamReader] = None,
    write: Writer = _stdout_writer,
) -> None:
    api_client = client or InfomaniakApiClient(config)
    channel = McpChannel(ToolDispatcher(api_client))
    logger.info("Infomaniak MCP Server running on stdio")
    try:
        if reader is None:
            reader = await _connect_stdin()
        await serve_lines(channel, reader, write)
    finally:
        await api_client.aclose()
