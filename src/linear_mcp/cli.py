"""Management CLI for linear-mcp.

Usage:
    linear-mcp serve                              # MCP over stdio
    linear-mcp serve --http --port 8080           # MCP over streamable HTTP
    linear-mcp capabilities --kind tools          # List registered capabilities
    linear-mcp call linear_get_teams --args '{}'  # Invoke one tool
    linear-mcp read linear-viewer:                # Read one resource
"""

from __future__ import annotations

import asyncio
import dataclasses
import json as json_mod
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click

from linear_mcp import __version__
from linear_mcp.capabilities import build_registry
from linear_mcp.config import ConfigError, Settings, load_settings, validate_settings
from linear_mcp.dispatch import Dispatcher
from linear_mcp.linear import LinearClient
from linear_mcp.logging import setup_logging

_T = TypeVar("_T")

_KINDS = ("tools", "resources", "templates", "prompts")


def _settings(require_key: bool = True) -> Settings:
    settings = load_settings()
    if require_key:
        try:
            validate_settings(settings)
        except ConfigError as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(1)
    return settings


def _with_dispatcher(settings: Settings, action: Callable[[Dispatcher], Awaitable[_T]]) -> _T:
    """Build a dispatcher over a fresh client, run *action*, and close the client."""

    async def _go() -> _T:
        async with LinearClient.from_settings(settings) as client:
            return await action(Dispatcher(build_registry(client)))

    return asyncio.run(_go())


def _dump(data: Any) -> None:
    click.echo(json_mod.dumps(data, indent=2, default=str))


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="linear-mcp")
def cli() -> None:
    """linear-mcp: expose Linear to MCP clients."""


@cli.command()
@click.option("--http", "use_http", is_flag=True, help="Serve streamable HTTP instead of stdio")
@click.option("--port", type=int, default=None, help="HTTP port (default: $PORT or 3124)")
def serve(use_http: bool, port: int | None) -> None:
    """Run the MCP server."""
    from linear_mcp.mcp_server import _run

    settings = _settings()
    if port is not None:
        settings = dataclasses.replace(settings, port=port)
    asyncio.run(_run(settings, http=use_http))


@cli.command()
@click.option("--kind", type=click.Choice(_KINDS), default=None, help="Only list one kind of capability")
def capabilities(kind: str | None) -> None:
    """List registered tools, resources, resource templates, and prompts as JSON."""
    settings = _settings(require_key=False)

    async def _list(dispatcher: Dispatcher) -> dict[str, Any]:
        listing = {
            "tools": [t.model_dump(exclude_none=True) for t in dispatcher.list_tools()],
            "resources": [r.model_dump(mode="json", exclude_none=True) for r in dispatcher.list_resources()],
            "templates": [t.model_dump(exclude_none=True) for t in dispatcher.list_resource_templates()],
            "prompts": [p.model_dump(exclude_none=True) for p in dispatcher.list_prompts()],
        }
        return {kind: listing[kind]} if kind else listing

    _dump(_with_dispatcher(settings, _list))


@cli.command()
@click.argument("tool")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object")
def call(tool: str, raw_args: str) -> None:
    """Invoke TOOL once and print its result."""
    try:
        arguments = json_mod.loads(raw_args)
    except json_mod.JSONDecodeError as exc:
        click.echo(f"Error: invalid JSON for --args: {exc}", err=True)
        sys.exit(1)
    if not isinstance(arguments, dict):
        click.echo("Error: --args must be a JSON object", err=True)
        sys.exit(1)

    settings = _settings()
    setup_logging(settings.log_level, settings.log_file)
    result = _with_dispatcher(settings, lambda d: d.call_tool(tool, arguments))
    for block in result.content:
        click.echo(getattr(block, "text", ""))
    if result.isError:
        sys.exit(1)


@cli.command()
@click.argument("uri")
def read(uri: str) -> None:
    """Read resource URI and print its content."""
    settings = _settings()
    setup_logging(settings.log_level, settings.log_file)
    result = _with_dispatcher(settings, lambda d: d.read_resource(uri))
    if getattr(result, "isError", False) or not result.contents:
        click.echo(f"Error: {getattr(result, 'errorMessage', None) or f'Could not read {uri}'}", err=True)
        sys.exit(1)
    for content in result.contents:
        click.echo(getattr(content, "text", None) or getattr(content, "blob", ""))


if __name__ == "__main__":
    cli()
