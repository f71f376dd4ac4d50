import json

import pytest
from fastapi.testclient import TestClient

from infomaniak_mcp.config import InfomaniakMcpConfig
from infomaniak_mcp.mcp import ToolDispatcher
from infomaniak_mcp.protocol import McpChannel
from infomaniak_mcp.server import MCP_SESSION_HEADER, create_app, event_stream

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {"protocolVersion": "2025-03-26", "capabilities": {}, "clientInfo": {"name": "pytest", "version": "0"}},
}


def _rpc(method, params=None, rpc_id=2):
    message = {"jsonrpc": "2.0", "id": rpc_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


@pytest.fixture
def app(api_client):
    return create_app(InfomaniakMcpConfig(api_token="test-token"), client=api_client)


@pytest.fixture
def http(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def stateless_http(api_client):
    app = create_app(InfomaniakMcpConfig(api_token="test-token", session_mode="stateless"), client=api_client)
    with TestClient(app) as client:
        yield client


def _open_session(http):
    resp = http.post("/mcp", json=INITIALIZE)
    assert resp.status_code == 200
    return resp.headers[MCP_SESSION_HEADER]


def test_health_reports_session_mode(http):
    resp = http.get("/health")
    assert resp.json() == {"status": "ok", "transport": "http", "sessionMode": "stateful"}
    assert resp.headers["X-Request-ID"]


def test_initialize_creates_distinct_sessions(http, app):
    first = _open_session(http)
    second = _open_session(http)
    assert first != second
    assert len(app.state.sessions) == 2
    listing = http.get("/mcp/sessions").json()
    assert sorted(listing["activeSessions"]) == sorted([first, second])
    assert listing["count"] == 2


def test_requests_route_to_their_own_session(http, app):
    first = _open_session(http)
    second = _open_session(http)
    resp = http.post(
        "/mcp",
        json=_rpc("logging/setLevel", {"level": "error"}),
        headers={MCP_SESSION_HEADER: first},
    )
    assert resp.status_code == 200
    assert resp.headers[MCP_SESSION_HEADER] == first
    assert app.state.sessions.get(first).channel.log_level == "error"
    assert app.state.sessions.get(second).channel.log_level == "info"


def test_tools_call_round_trip(http, transport):
    session_id = _open_session(http)
    resp = http.post(
        "/mcp",
        json=_rpc(
            "tools/call",
            {
                "name": "infomaniak_create_dns_record",
                "arguments": {"domain": "example.com", "source": "www", "type": "A", "target": "1.2.3.4"},
            },
        ),
        headers={MCP_SESSION_HEADER: session_id},
    )
    result = resp.json()["result"]
    assert "isError" not in result
    assert json.loads(result["content"][0]["text"]) == {"result": "success", "data": {"ok": True}}
    assert len(transport.requests) == 1
    request = transport.requests[0]
    assert (request.method, request.url.path) == ("POST", "/1/domain/example.com/dns/record")
    assert json.loads(request.content) == {"source": "www", "type": "A", "target": "1.2.3.4"}


def test_non_initialize_without_session_is_rejected(http, app):
    resp = http.post("/mcp", json=_rpc("tools/list"))
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32600
    assert len(app.state.sessions) == 0


def test_unknown_session_is_not_found(http, app):
    resp = http.post("/mcp", json=_rpc("tools/list"), headers={MCP_SESSION_HEADER: "nope"})
    assert resp.status_code == 404
    assert resp.json()["error"] == {"code": -32600, "message": "Session not found"}
    assert len(app.state.sessions) == 0


def test_invalid_initialize_does_not_register(http, app):
    resp = http.post("/mcp", json=_rpc("initialize", {}))
    assert resp.json()["error"]["code"] == -32602
    assert MCP_SESSION_HEADER not in resp.headers
    assert len(app.state.sessions) == 0


def test_parse_error(http):
    resp = http.post("/mcp", content=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32700


def test_non_object_body_is_invalid_request(http):
    resp = http.post("/mcp", json=[INITIALIZE])
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32600


def test_notification_is_accepted_without_body(http):
    session_id = _open_session(http)
    resp = http.post(
        "/mcp",
        json={"jsonrpc": "2.0", "method": "notifications/initialized"},
        headers={MCP_SESSION_HEADER: session_id},
    )
    assert resp.status_code == 202
    assert resp.content == b""


def test_delete_session_by_header_and_path(http, app):
    first = _open_session(http)
    second = _open_session(http)
    resp = http.delete("/mcp", headers={MCP_SESSION_HEADER: first})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Session closed"}
    resp = http.delete(f"/mcp/session/{second}")
    assert resp.json() == {"message": "Session closed"}
    assert len(app.state.sessions) == 0
    follow_up = http.post("/mcp", json=_rpc("ping"), headers={MCP_SESSION_HEADER: first})
    assert follow_up.status_code == 404


def test_delete_unknown_session_leaves_registry_size(http, app):
    _open_session(http)
    resp = http.delete("/mcp/session/not-a-session")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Session not found"}
    assert http.delete("/mcp", headers={MCP_SESSION_HEADER: "not-a-session"}).status_code == 404
    assert len(app.state.sessions) == 1


def test_delete_without_header(http):
    assert http.delete("/mcp").status_code == 400


def test_event_stream_requires_known_session(http):
    assert http.get("/mcp").status_code == 400
    assert http.get("/mcp", headers={MCP_SESSION_HEADER: "missing"}).status_code == 404


def test_lifespan_closes_sessions(api_client):
    app = create_app(InfomaniakMcpConfig(api_token="test-token"), client=api_client)
    with TestClient(app) as client:
        session_id = _open_session(client)
        channel = app.state.sessions.get(session_id).channel
    assert channel.closed
    assert len(app.state.sessions) == 0


def test_metrics_endpoint_counts_sessions_and_tools(http):
    session_id = _open_session(http)
    http.post(
        "/mcp",
        json=_rpc("tools/call", {"name": "infomaniak_ping"}),
        headers={MCP_SESSION_HEADER: session_id},
    )
    data = http.get("/metrics").json()
    assert data["sessions_opened"] == 1
    assert data["tool_success"] == {"infomaniak_ping": 1}
    assert data["requests"] >= 3


def test_stateless_never_reuses_identifiers(stateless_http):
    first = stateless_http.post("/mcp", json=INITIALIZE)
    issued = first.headers[MCP_SESSION_HEADER]
    second = stateless_http.post("/mcp", json=_rpc("tools/list"), headers={MCP_SESSION_HEADER: issued})
    assert second.status_code == 200
    assert len(second.json()["result"]["tools"]) == 49
    assert second.headers[MCP_SESSION_HEADER] != issued
    assert len(stateless_http.app.state.sessions) == 0


def test_stateless_has_no_session_routes(stateless_http):
    assert stateless_http.get("/health").json()["sessionMode"] == "stateless"
    assert stateless_http.get("/mcp").status_code == 405
    assert stateless_http.delete("/mcp", headers={MCP_SESSION_HEADER: "x"}).status_code == 405
    assert stateless_http.get("/mcp/sessions").status_code == 404


class _ConnectedRequest:
    def __init__(self):
        self.disconnected = False

    async def is_disconnected(self):
        return self.disconnected


@pytest.mark.asyncio
async def test_event_stream_frames(stub_gateway):
    channel = McpChannel(ToolDispatcher(stub_gateway), session_id="s-1")
    request = _ConnectedRequest()
    frames = event_stream(channel, request, keepalive=0.01)

    assert await frames.__anext__() == ": keepalive\n\n"
    channel.notify_log("info", {"tool": "infomaniak_ping", "isError": False})
    frame = await frames.__anext__()
    assert frame.startswith("event: message\ndata: ")
    assert frame.endswith("\n\n")
    payload = json.loads(frame[len("event: message\ndata: "):].strip())
    assert payload["method"] == "notifications/message"

    channel.close()
    with pytest.raises(StopAsyncIteration):
        await frames.__anext__()


@pytest.mark.asyncio
async def test_event_stream_stops_on_disconnect(stub_gateway):
    channel = McpChannel(ToolDispatcher(stub_gateway), session_id="s-2")
    request = _ConnectedRequest()
    frames = event_stream(channel, request, keepalive=0.01)
    await frames.__anext__()
    request.disconnected = True
    with pytest.raises(StopAsyncIteration):
        await frames.__anext__()
    assert channel.notify("notifications/message", {}) is False


def test_factory_without_config_sets_up_logging(monkeypatch):
    calls = []
    monkeypatch.setenv("INFOMANIAK_API_TOKEN", "env-token")
    monkeypatch.setattr("infomaniak_mcp.server.configure_logging", calls.append)

    app = create_app()

    assert calls == [app.state.config]
    assert app.state.config.api_token == "env-token"


def test_factory_with_config_leaves_logging_alone(monkeypatch, api_client):
    calls = []
    monkeypatch.setattr("infomaniak_mcp.server.configure_logging", calls.append)

    create_app(InfomaniakMcpConfig(api_token="test-token"), client=api_client)

    assert calls == []
