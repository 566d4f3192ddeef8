"""MCP server for the Linear issue tracker.

Exposes Linear teams, issues, projects, labels, milestones, and
attachments as MCP tools, resources, and prompts.

Usage:
    linear-mcp-server                  # stdio transport
    linear-mcp-server --http           # streamable HTTP on $PORT (default 3124)
    linear-mcp-server --http --port 8080
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import dataclasses
import logging
import sys
from collections.abc import AsyncIterator
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from linear_mcp import __version__
from linear_mcp.capabilities import build_registry
from linear_mcp.config import ConfigError, Settings, load_settings, validate_settings
from linear_mcp.dispatch import Dispatcher
from linear_mcp.linear import LinearClient
from linear_mcp.logging import setup_logging

SERVER_NAME = "linear-mcp"


def create_server(dispatcher: Dispatcher) -> Server:
    """Wire a low-level MCP ``Server`` to *dispatcher*."""
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()  # type: ignore[untyped-decorator,no-untyped-call]
    async def list_tools() -> list[types.Tool]:
        return dispatcher.list_tools()

    # Handlers report bad arguments in their own words, so schema validation is off.
    @server.call_tool(validate_input=False)  # type: ignore[untyped-decorator]
    async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        return await dispatcher.call_tool(name, arguments)

    @server.list_resources()  # type: ignore[untyped-decorator,no-untyped-call]
    async def list_resources() -> list[types.Resource]:
        return dispatcher.list_resources()

    @server.list_resource_templates()  # type: ignore[untyped-decorator,no-untyped-call]
    async def list_resource_templates() -> list[types.ResourceTemplate]:
        return dispatcher.list_resource_templates()

    @server.list_prompts()  # type: ignore[untyped-decorator,no-untyped-call]
    async def list_prompts() -> list[types.Prompt]:
        return dispatcher.list_prompts()

    @server.get_prompt()  # type: ignore[untyped-decorator,no-untyped-call]
    async def get_prompt(name: str, arguments: dict[str, str] | None = None) -> types.GetPromptResult:
        return dispatcher.get_prompt(name, arguments)

    # The read_resource decorator wraps return values in fresh contents and
    # drops the error envelope, so the request handler is installed directly.
    async def read_resource(req: types.ReadResourceRequest) -> types.ServerResult:
        return types.ServerResult(await dispatcher.read_resource(str(req.params.uri)))

    server.request_handlers[types.ReadResourceRequest] = read_resource
    return server


# ---------------------------------------------------------------------------
# HTTP transport factory
# ---------------------------------------------------------------------------


def create_mcp_app(server: Server) -> Any:
    """Create an ASGI app + lifespan hook for MCP streamable-HTTP.

    Returns ``(asgi_app, lifespan_context_manager)`` where:

    * **asgi_app** is an ASGI callable to mount at ``/mcp``.
    * **lifespan_context_manager** is an async-context-manager that
      must be entered during the parent application's lifespan so the
      underlying ``StreamableHTTPSessionManager`` task-group is
      running before the first request arrives.
    """
    from mcp.server.streamable_http_manager import StreamableHTTPSessionManager

    session_manager = StreamableHTTPSessionManager(
        app=server,
        json_response=False,
        stateless=True,
    )

    async def _handle_mcp(scope: Any, receive: Any, send: Any) -> None:
        try:
            await session_manager.handle_request(scope, receive, send)
        except RuntimeError:
            # Session manager not started: the lifespan was never entered.
            from starlette.responses import JSONResponse

            resp = JSONResponse(
                {"error": "MCP session manager not initialized"},
                status_code=503,
            )
            await resp(scope, receive, send)

    return _handle_mcp, session_manager.run


def create_http_app(server: Server) -> Any:
    """Starlette app serving the MCP endpoint at ``/mcp``."""
    from starlette.applications import Starlette
    from starlette.routing import Mount

    mcp_handler, mcp_lifespan_factory = create_mcp_app(server)

    @contextlib.asynccontextmanager
    async def _lifespan(app: Starlette) -> AsyncIterator[None]:
        async with mcp_lifespan_factory():
            yield

    return Starlette(routes=[Mount("/mcp", app=mcp_handler)], lifespan=_lifespan)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def _startup(settings: Settings) -> tuple[Server, LinearClient, logging.Logger]:
    validate_settings(settings)
    logger = setup_logging(settings.log_level, settings.log_file)
    client = LinearClient.from_settings(settings)
    dispatcher = Dispatcher(build_registry(client), logger=logger)
    return create_server(dispatcher), client, logger


async def _run(settings: Settings, *, http: bool = False) -> None:
    try:
        server, client, logger = _startup(settings)
    except ConfigError as exc:
        print(f"Startup error: {exc}", file=sys.stderr)
        sys.exit(1)

    logger.info("mcp_server_start", extra={"tool": "server", "args_data": {"http": http, "port": settings.port}})
    async with client:
        if http:
            import uvicorn

            config = uvicorn.Config(create_http_app(server), host="127.0.0.1", port=settings.port, log_level="warning")
            await uvicorn.Server(config).serve()
        else:
            async with stdio_server() as (read_stream, write_stream):
                await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    parser = argparse.ArgumentParser(description="Linear MCP server")
    parser.add_argument("--http", action="store_true", help="Serve streamable HTTP instead of stdio")
    parser.add_argument("--port", type=int, default=None, help="HTTP port (default: $PORT or 3124)")
    args = parser.parse_args()

    settings = load_settings()
    if args.port is not None:
        settings = dataclasses.replace(settings, port=args.port)

    asyncio.run(_run(settings, http=args.http))


if __name__ == "__main__":
    main()
