import os
import sys
from typing import Any, List, Optional

import httpx
import pytest

# Ensure repository root is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from infomaniak_mcp.config import InfomaniakMcpConfig  # noqa: E402
from infomaniak_mcp.infomaniak_api import InfomaniakApiClient  # noqa: E402
from infomaniak_mcp.metrics import default_metrics  # noqa: E402

TEST_BASE_URL = "https://api.infomaniak.test"


@pytest.fixture(autouse=True)
def reset_metrics():
    default_metrics.reset()
    yield
    default_metrics.reset()


class RecordingTransport:
    """httpx.MockTransport handler that records requests and replays canned responses."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.responses: List[Any] = []

    def queue(self, response: Any) -> None:
        self.responses.append(response)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return httpx.Response(200, json={"result": "success", "data": {"ok": True}})


class StubGateway:
    """Stands in for InfomaniakApiClient; every method records its call."""

    def __init__(self, result: Any = None, error: Optional[Exception] = None) -> None:
        self.result = {"result": "success", "data": []} if result is None else result
        self.error = error
        self.calls: List[tuple] = []

    def __getattr__(self, name: str):
        async def _method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            if self.error is not None:
                raise self.error
            return self.result

        return _method

    async def aclose(self) -> None:
        return None


@pytest.fixture
def config():
    return InfomaniakMcpConfig(api_token="test-token")


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def api_client(config, transport):
    async_client = httpx.AsyncClient(base_url=TEST_BASE_URL, transport=httpx.MockTransport(transport))
    return InfomaniakApiClient(config, async_client=async_client)


@pytest.fixture
def stub_gateway():
    return StubGateway()
