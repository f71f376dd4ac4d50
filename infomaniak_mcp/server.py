"""FastAPI application exposing the MCP channel over streamable HTTP."""

from __future__ import annotations

import json
import logging
import time
import uuid
from contextlib import aclosing, asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from infomaniak_mcp import __version__
from infomaniak_mcp.config import InfomaniakMcpConfig, load_config, validate_config
from infomaniak_mcp.infomaniak_api import InfomaniakApiClient
from infomaniak_mcp.log import configure_logging
from infomaniak_mcp.mcp import ToolDispatcher
from infomaniak_mcp.metrics import MetricsRecorder, default_metrics
from infomaniak_mcp.protocol import (
    INVALID_REQUEST,
    PARSE_ERROR,
    McpChannel,
    jsonrpc_error_payload,
)
from infomaniak_mcp.sessions import Session, SessionRegistry, new_session_id

logger = logging.getLogger(__name__)

MCP_SESSION_HEADER = "Mcp-Session-Id"
METHOD_NOT_ALLOWED = -32000
HEALTH_STATUS = "ok"


def _error_response(
    status_code: int,
    code: int,
    message: str,
    *,
    rpc_id: Any = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonrpc_error_payload(rpc_id, code, message))


def _method_not_allowed() -> JSONResponse:
    return _error_response(405, METHOD_NOT_ALLOWED, "Method not allowed.")


def _format_event(event: Dict[str, Any]) -> str:
    return f"event: message\ndata: {json.dumps(event, ensure_ascii=False)}\n\n"


async def event_stream(
    channel: McpChannel,
    request: Request,
    keepalive: Optional[float],
) -> AsyncIterator[str]:
    """Render channel notifications as SSE frames until close or disconnect."""
    async with aclosing(channel.events(keepalive)) as events:
        async for event in events:
            if await request.is_disconnected():
                logger.debug(
                    "event stream client disconnected",
                    extra={"session_id": channel.session_id},
                )
                break
            if event is None:
                yield ": keepalive\n\n"
            else:
                yield _format_event(event)


def create_app(
    config: Optional[InfomaniakMcpConfig] = None,
    *,
    client: Optional[InfomaniakApiClient] = None,
    metrics: MetricsRecorder = default_metrics,
) -> FastAPI:
    """
    Build the HTTP application.

    When ``config`` is omitted it is loaded from the environment, validated
    and used to set up logging, so
    ``uvicorn --factory infomaniak_mcp.server:create_app`` fails fast on a
    missing token and logs the same way as the CLI.
    """
    if config is None:
        config = load_config()
        validate_config(config)
        configure_logging(config)
    api_client = client or InfomaniakApiClient(config)
    dispatcher = ToolDispatcher(api_client, metrics=metrics)
    sessions = SessionRegistry(metrics=metrics)
    stateful = config.session_mode == "stateful"

    def _new_channel(session_id: str) -> McpChannel:
        return McpChannel(dispatcher, session_id=session_id)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        await sessions.close_all()
        await api_client.aclose()

    app = FastAPI(
        title="Infomaniak MCP Server",
        description="Infomaniak API tool surface for LLM agents.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.sessions = sessions
    app.state.dispatcher = dispatcher

    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.time()
        metrics.incr_request()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000
        metrics.record_duration(request_id, duration_ms)
        response.headers["X-Request-ID"] = request_id
        return response

    def _lookup_session(request: Request) -> Session | JSONResponse:
        session_id = request.headers.get(MCP_SESSION_HEADER)
        if not session_id:
            return _error_response(400, INVALID_REQUEST, "Bad Request: No valid session ID provided")
        session = sessions.get(session_id)
        if session is None:
            return _error_response(404, INVALID_REQUEST, "Session not found")
        return session

    @app.get("/health")
    async def health() -> JSONResponse:
        """Lightweight health endpoint for monitoring."""
        return JSONResponse(
            content={"status": HEALTH_STATUS, "transport": "http", "sessionMode": config.session_mode}
        )

    @app.get("/metrics")
    async def metrics_snapshot() -> JSONResponse:
        """Return in-process metrics snapshot."""
        return JSONResponse(content=metrics.snapshot())

    @app.post("/mcp")
    async def mcp_post(request: Request) -> Response:
        """Submit one JSON-RPC message, creating a session on ``initialize``."""
        request_id = getattr(request.state, "request_id", None)
        start_time = time.time()

        try:
            body = await request.json()
        except ValueError:
            return _error_response(400, PARSE_ERROR, "Parse error")
        if not isinstance(body, dict):
            return _error_response(400, INVALID_REQUEST, "Invalid request")

        method = body.get("method")
        created = False
        if not stateful:
            channel = _new_channel(new_session_id())
            try:
                payload = await channel.handle_message(body, request_id=request_id)
            finally:
                channel.close()
        else:
            if request.headers.get(MCP_SESSION_HEADER):
                found = _lookup_session(request)
                if isinstance(found, JSONResponse):
                    return found
                session = found
            elif method == "initialize":
                session = await sessions.create(_new_channel)
                created = True
            else:
                return _error_response(
                    400,
                    INVALID_REQUEST,
                    "Bad Request: No valid session ID provided",
                    rpc_id=body.get("id"),
                )
            channel = session.channel
            payload = await channel.handle_message(body, request_id=request_id)
            if created and (payload is None or "error" in payload):
                # A rejected initialize never becomes a live session.
                await sessions.remove(session.session_id)
                return JSONResponse(content=payload) if payload else Response(status_code=202)

        logger.debug(
            "mcp method=%s id=%s duration_ms=%.2f",
            method,
            body.get("id"),
            (time.time() - start_time) * 1000,
            extra={"request_id": request_id, "session_id": channel.session_id},
        )
        headers = {MCP_SESSION_HEADER: channel.session_id}
        if payload is None:
            return Response(status_code=202, headers=headers)
        return JSONResponse(content=payload, headers=headers)

    @app.get("/mcp")
    async def mcp_stream(request: Request) -> Response:
        """Open the server-to-client event stream for an active session."""
        if not stateful:
            return _method_not_allowed()
        found = _lookup_session(request)
        if isinstance(found, JSONResponse):
            return found
        return StreamingResponse(
            event_stream(found.channel, request, config.sse_keepalive),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", MCP_SESSION_HEADER: found.session_id},
        )

    async def _close_session(session_id: str) -> JSONResponse:
        if await sessions.remove(session_id):
            return JSONResponse(content={"message": "Session closed"})
        return JSONResponse(status_code=404, content={"error": "Session not found"})

    @app.delete("/mcp")
    async def mcp_delete(request: Request) -> Response:
        """Terminate the session named by the session header."""
        if not stateful:
            return _method_not_allowed()
        session_id = request.headers.get(MCP_SESSION_HEADER)
        if not session_id:
            return _error_response(400, INVALID_REQUEST, "Bad Request: No valid session ID provided")
        return await _close_session(session_id)

    if stateful:

        @app.delete("/mcp/session/{session_id}")
        async def delete_session(session_id: str) -> JSONResponse:
            return await _close_session(session_id)

        @app.get("/mcp/sessions")
        async def list_sessions() -> JSONResponse:
            active = sessions.ids()
            return JSONResponse(content={"activeSessions": active, "count": len(active)})

    return app


# Run with: uvicorn --factory infomaniak_mcp.server:create_app
