"""Tests for MCP server wiring and startup."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from mcp import types

from linear_mcp.config import Settings
from linear_mcp.dispatch import Dispatcher
from linear_mcp.mcp_server import _run, create_mcp_app, create_server
from tests.conftest import make_team


@pytest.fixture
def server(dispatcher: Dispatcher) -> Any:
    return create_server(dispatcher)


def _read_request(uri: str) -> types.ReadResourceRequest:
    return types.ReadResourceRequest(method="resources/read", params=types.ReadResourceRequestParams(uri=uri))


class TestCreateServer:
    def test_registers_request_handlers(self, server: Any) -> None:
        for request_type in (
            types.ListToolsRequest,
            types.CallToolRequest,
            types.ListResourcesRequest,
            types.ListResourceTemplatesRequest,
            types.ReadResourceRequest,
            types.ListPromptsRequest,
            types.GetPromptRequest,
        ):
            assert request_type in server.request_handlers

    async def test_read_resource_returns_contents(self, server: Any, client: AsyncMock) -> None:
        client.team.return_value = make_team()
        result = await server.request_handlers[types.ReadResourceRequest](_read_request("linear-team:///team-1"))
        read = result.root
        assert isinstance(read, types.ReadResourceResult)
        assert len(read.contents) == 1
        assert str(read.contents[0].uri) == "linear-team:///team-1"
        assert json.loads(read.contents[0].text)["name"] == "Engineering"

    async def test_read_resource_keeps_error_envelope(self, server: Any) -> None:
        result = await server.request_handlers[types.ReadResourceRequest](_read_request("linear-nothing:///x"))
        read = result.root
        assert read.contents == []
        assert read.isError is True
        assert read.errorMessage == "Resource not found: linear-nothing:///x"


class _FakeSessionManager:
    started = False

    def __init__(self, app: Any, json_response: bool, stateless: bool) -> None:
        self.app = app
        self.stateless = stateless

    @asynccontextmanager
    async def run(self) -> Any:
        type(self).started = True
        yield

    async def handle_request(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        if not type(self).started:
            msg = "Task group is not initialized. Make sure to use run()."
            raise RuntimeError(msg)
        await send({"type": "http.response.start", "status": 200, "headers": [(b"content-type", b"text/plain")]})
        await send({"type": "http.response.body", "body": b"ok"})


class TestCreateMcpApp:
    @pytest.fixture(autouse=True)
    def _reset(self) -> None:
        _FakeSessionManager.started = False

    async def test_returns_503_before_lifespan(self, server: Any) -> None:
        with patch("mcp.server.streamable_http_manager.StreamableHTTPSessionManager", _FakeSessionManager):
            handler, _lifespan = create_mcp_app(server)
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=handler), base_url="http://test") as http:
            response = await http.post("/mcp", json={})
        assert response.status_code == 503
        assert response.json() == {"error": "MCP session manager not initialized"}

    async def test_delegates_once_running(self, server: Any) -> None:
        with patch("mcp.server.streamable_http_manager.StreamableHTTPSessionManager", _FakeSessionManager):
            handler, lifespan = create_mcp_app(server)
        async with lifespan():
            async with httpx.AsyncClient(transport=httpx.ASGITransport(app=handler), base_url="http://test") as http:
                response = await http.post("/mcp", json={})
        assert response.status_code == 200
        assert response.text == "ok"


class TestRun:
    async def test_missing_api_key_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            await _run(Settings(api_key=""))
        assert exc_info.value.code == 1
        assert "Startup error: Missing required environment variables: LINEAR_API_KEY" in capsys.readouterr().err
