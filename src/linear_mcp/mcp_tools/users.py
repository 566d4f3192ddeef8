"""MCP tool for the authenticated user."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.types import CallToolResult

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_tools.common import _error, _ok, _register_all
from linear_mcp.types.capabilities import ToolDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register user tools."""
    tools = [
        ToolDescriptor(
            name="linear_get_viewer",
            description="Get information about the currently authenticated Linear user",
            input_schema={"type": "object", "properties": {}},
        ),
    ]

    handlers = {
        "linear_get_viewer": _handle_get_viewer,
    }

    _register_all(registry, client, tools, handlers)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_get_viewer(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    viewer = await client.viewer()
    if viewer is None:
        return _error("Failed to get authenticated user")
    return _ok(
        {
            key: viewer.get(key)
            for key in ("id", "name", "displayName", "email", "active", "admin", "avatarUrl", "url")
        }
    )
