"""Shared test helpers for MCP tests.

Extracted from conftest.py so test modules can import directly
(``from tests.mcp._helpers import _parse``) instead of reaching
into conftest, which pytest discourages.
"""

from __future__ import annotations

import json
from typing import Any

from mcp.types import CallToolResult

from linear_mcp.registry import CapabilityRegistry


def _parse(result: CallToolResult) -> Any:
    """Extract text content from MCP response and parse as JSON if possible."""
    text = result.content[0].text  # type: ignore[union-attr]
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


async def _call(registry: CapabilityRegistry, name: str, arguments: dict[str, Any]) -> CallToolResult:
    handler = registry.get_tool_handler(name)
    assert handler is not None, f"tool {name} not registered"
    return await handler(arguments)


async def _read(registry: CapabilityRegistry, uri: str) -> Any:
    """Read *uri* and parse its JSON text; fails the test on a read error."""
    result = await registry.read_resource(uri)
    assert not result.is_error, result.error_message
    assert result.content is not None
    assert result.content.uri == uri
    return json.loads(result.content.text or "")
