"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport

from teahouse.config.loader import get_settings
from teahouse.handlers.tea import TeaHandler
from teahouse.mcp.dispatcher import Dispatcher
from teahouse.mcp.models import JsonRpcResponse, ServerInfo
from teahouse.mcp.senders import ResponseSender
from teahouse.transport.http import HTTPTransport


class RecordingSender(ResponseSender):
    """Collects every response it is asked to send."""

    def __init__(self):
        self.responses: list[JsonRpcResponse] = []

    async def send_response(self, response: JsonRpcResponse) -> None:
        self.responses.append(response)

    @property
    def last(self) -> dict:
        return self.responses[-1].model_dump()


@pytest.fixture
def tea_handler():
    return TeaHandler()


@pytest.fixture
def server_info():
    return ServerInfo(name="Test Teahouse", version="0.0.1")


@pytest.fixture
def dispatcher(tea_handler, server_info):
    """Dispatcher with the tea handler wired as every capability."""
    return Dispatcher(
        tools=tea_handler,
        resources=tea_handler,
        prompts=tea_handler,
        server_info=server_info,
    )


@pytest.fixture
def recording_sender():
    return RecordingSender()


@pytest.fixture
def http_transport():
    """HTTP transport with short timeouts; never bound to a socket in tests."""
    return HTTPTransport(
        port=18080,
        request_timeout=2.0,
        read_timeout=2.0,
        write_timeout=2.0,
        shutdown_timeout=1.0,
    )


@pytest.fixture
def app(http_transport, dispatcher):
    return http_transport.create_app(dispatcher)


@pytest.fixture
def client(app):
    """Synchronous test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
async def async_client(app):
    """Async test client for the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; start every test from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_jsonrpc_request():
    """Sample JSON-RPC request factory."""
    def _make_request(method: str, params: dict = None, id: int = 1):
        return {
            "jsonrpc": "2.0",
            "id": id,
            "method": method,
            "params": params or {},
        }
    return _make_request
