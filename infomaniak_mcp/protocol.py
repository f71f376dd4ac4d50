"""JSON-RPC 2.0 message handling for one MCP channel."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional

from infomaniak_mcp import __version__, mcp
from infomaniak_mcp.mcp import ToolDispatcher

logger = logging.getLogger(__name__)

MCP_SERVER_NAME = "infomaniak-mcp-server"
MCP_SERVER_VERSION = __version__

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

# RFC 5424 severities, least to most severe, as used by MCP logging.
LOG_LEVELS = ("debug", "info", "notice", "warning", "error", "critical", "alert", "emergency")
DEFAULT_LOG_LEVEL = "info"
MAX_QUEUED_EVENTS = 100


def jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def jsonrpc_error_payload(rpc_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


class McpChannel:
    """
    One logical MCP connection bound to a shared ``ToolDispatcher``.

    ``handle_message`` returns the response payload for requests and ``None``
    for notifications. Server-initiated notifications are queued for an attached
    event stream and discarded when no stream is listening.
    """

    def __init__(self, dispatcher: ToolDispatcher, *, session_id: Optional[str] = None) -> None:
        self.dispatcher = dispatcher
        self.session_id = session_id
        self.protocol_version: Optional[str] = None
        self.log_level = DEFAULT_LOG_LEVEL
        self.closed = False
        self._events: asyncio.Queue[Optional[Dict[str, Any]]] = asyncio.Queue(maxsize=MAX_QUEUED_EVENTS)
        self._listeners = 0

    @property
    def initialized(self) -> bool:
        return self.protocol_version is not None

    def _log_extra(self, request_id: Optional[str]) -> Dict[str, Any]:
        return {"request_id": request_id, "session_id": self.session_id}

    async def handle_message(self, message: Any, *, request_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        if not isinstance(message, dict):
            return jsonrpc_error_payload(None, INVALID_REQUEST, "Invalid request")

        rpc_id = message.get("id")
        method = message.get("method")
        if not isinstance(method, str) or not method:
            return jsonrpc_error_payload(rpc_id, INVALID_REQUEST, "Invalid request")

        if "id" not in message:
            self._handle_notification(method, request_id)
            return None

        raw_params = message.get("params")
        if raw_params is None:
            params: Dict[str, Any] = {}
        elif isinstance(raw_params, dict):
            params = raw_params
        else:
            return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")

        if method == "initialize":
            return self._initialize(rpc_id, params, request_id)
        if method == "ping":
            return jsonrpc_success_payload(rpc_id, {})
        if method in ("list_tools", "tools/list"):
            return jsonrpc_success_payload(rpc_id, {"tools": mcp.list_tools()})
        if method in ("call_tool", "tools/call"):
            return await self._call_tool(rpc_id, params, request_id)
        if method == "logging/setLevel":
            return self._set_level(rpc_id, params)

        logger.debug("mcp unknown method=%s", method, extra=self._log_extra(request_id))
        return jsonrpc_error_payload(rpc_id, METHOD_NOT_FOUND, "Method not found")

    def _handle_notification(self, method: str, request_id: Optional[str]) -> None:
        # Notifications never produce a response body.
        logger.debug("mcp notification method=%s", method, extra=self._log_extra(request_id))

    def _initialize(self, rpc_id: Any, params: Dict[str, Any], request_id: Optional[str]) -> Dict[str, Any]:
        protocol_version = params.get("protocolVersion")
        if not isinstance(protocol_version, str) or not protocol_version:
            return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")
        self.protocol_version = protocol_version
        logger.debug(
            "mcp initialize requested protocol=%s",
            protocol_version,
            extra=self._log_extra(request_id),
        )
        result = {
            "protocolVersion": protocol_version,
            "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
            "capabilities": {"tools": {"listChanged": False}, "logging": {}},
        }
        return jsonrpc_success_payload(rpc_id, result)

    async def _call_tool(self, rpc_id: Any, params: Dict[str, Any], request_id: Optional[str]) -> Dict[str, Any]:
        tool_name = params.get("name") or params.get("tool")
        tool_args = params.get("arguments")
        if tool_args is None:
            tool_args = params.get("params") or {}
        if not isinstance(tool_name, str) or not tool_name.strip():
            return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")
        if not isinstance(tool_args, dict):
            return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")

        result = await self.dispatcher.dispatch(tool_name, tool_args, request_id=request_id)
        is_error = bool(result.get("isError"))
        self.notify_log("error" if is_error else "info", {"tool": tool_name, "isError": is_error})
        return jsonrpc_success_payload(rpc_id, result)

    def _set_level(self, rpc_id: Any, params: Dict[str, Any]) -> Dict[str, Any]:
        level = params.get("level")
        if level not in LOG_LEVELS:
            return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")
        self.log_level = level
        return jsonrpc_success_payload(rpc_id, {})

    def notify(self, method: str, params: Dict[str, Any]) -> bool:
        """Queue a server notification; returns False when nothing is listening."""
        if self.closed or self._listeners == 0:
            return False
        event = {"jsonrpc": "2.0", "method": method, "params": params}
        if self._events.full():
            # Slow reader: keep the newest events.
            self._events.get_nowait()
        self._events.put_nowait(event)
        return True

    def notify_log(self, level: str, data: Dict[str, Any]) -> bool:
        if LOG_LEVELS.index(level) < LOG_LEVELS.index(self.log_level):
            return False
        return self.notify(
            "notifications/message",
            {"level": level, "logger": MCP_SERVER_NAME, "data": data},
        )

    async def events(self, keepalive: Optional[float] = None) -> AsyncIterator[Optional[Dict[str, Any]]]:
        """
        Yield queued notifications until the channel closes.

        ``None`` is yielded whenever ``keepalive`` seconds pass without an event.
        """
        self._listeners += 1
        try:
            while not self.closed:
                try:
                    event = await asyncio.wait_for(self._events.get(), timeout=keepalive)
                except asyncio.TimeoutError:
                    yield None
                    continue
                if event is None:
                    break
                yield event
        finally:
            self._listeners -= 1

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        while not self._events.empty():
            self._events.get_nowait()
        # Wake any stream blocked on the queue.
        self._events.put_nowait(None)
