"""Pytest configuration and fixtures."""

import json
import pytest
from typing import Any, Dict, List

from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from mcp_hello.core.exceptions import ChannelClosedError
from mcp_hello.mcp.broker import SessionBroker
from mcp_hello.mcp.channel import StreamingChannel, format_sse
from mcp_hello.mcp.dispatcher import ToolDispatcher
from mcp_hello.mcp.main import create_mcp_app
from mcp_hello.mcp.session import MCPSessionHandler
from mcp_hello.mcp.tools import create_default_registry


class RecordingChannel(StreamingChannel):
    """In-memory channel recording what it is sent."""

    def __init__(self, session_id: str):
        self._session_id = session_id
        self._closed = False
        self._callbacks = []
        self.sent: List[Dict[str, Any]] = []
        self.received: List[Any] = []

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def closed(self) -> bool:
        return self._closed

    async def events(self):
        yield format_sse("endpoint", f"/sse?sessionId={self._session_id}")

    def send(self, message):
        if self._closed:
            raise ChannelClosedError(self._session_id)
        self.sent.append(message)

    async def handle_post_message(self, request):
        if self._closed:
            raise ChannelClosedError(self._session_id)
        self.received.append(json.loads(await request.body()))
        return PlainTextResponse("Accepted")

    def on_close(self, callback):
        self._callbacks.append(callback)

    def close(self):
        if self._closed:
            return
        self._closed = True
        for callback in self._callbacks:
            callback(self)

    def __repr__(self) -> str:
        return f"RecordingChannel({self._session_id!r})"


@pytest.fixture
def make_channel():
    """Factory for recording channels."""
    counter = iter(range(1, 1000))

    def factory(session_id: str = None) -> RecordingChannel:
        return RecordingChannel(session_id or f"minted-{next(counter)}")

    return factory


@pytest.fixture
def broker() -> SessionBroker:
    return SessionBroker()


@pytest.fixture
def tool_registry():
    return create_default_registry()


@pytest.fixture
def dispatcher(tool_registry) -> ToolDispatcher:
    return ToolDispatcher(tool_registry)


@pytest.fixture
def session_handler(dispatcher) -> MCPSessionHandler:
    return MCPSessionHandler(dispatcher)


@pytest.fixture
def test_config() -> Dict[str, Any]:
    """Configuration for the app under test."""
    return {
        "server": {"host": "127.0.0.1", "port": 8787, "sse_path": "/sse"},
        "logging": {"level": "DEBUG", "format": "text", "file": None},
    }


@pytest.fixture
def app(test_config):
    return create_mcp_app(config=test_config)


@pytest.fixture
def test_client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def make_tool_call():
    """Build a tools/call JSON-RPC request."""

    def factory(name: str, arguments: Any = None, request_id: int = 1) -> Dict[str, Any]:
        params = {"name": name}
        if arguments is not None:
            params["arguments"] = arguments
        return {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": params}

    return factory
