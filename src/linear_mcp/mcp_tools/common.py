"""Pure helpers and constants shared across MCP tool modules.

This module has NO dependency on ``mcp_server`` or ``dispatch``, so it can
be imported freely without triggering circular-import issues.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from mcp.types import CallToolResult, TextContent

from linear_mcp.linear import LinearAPIError, LinearClient
from linear_mcp.types.api import IssueSummary, PageInfo
from linear_mcp.types.capabilities import ToolArgs, ToolDescriptor, ToolHandler

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

logger = logging.getLogger(__name__)

ClientHandler = Callable[[LinearClient, ToolArgs], Awaitable[CallToolResult]]

# Default page sizes; Linear caps ``first`` at 250.
_DEFAULT_LIMIT = 50
_DEFAULT_SEARCH_LIMIT = 10
_MAX_LIMIT = 250

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

PRIORITY_LABELS = ("No priority", "Urgent", "High", "Medium", "Low")

_PRIORITY_SCHEMA = {
    "type": "number",
    "description": "Priority level (0-4), where 0=no priority, 1=urgent, 4=low",
}


def _text(content: object) -> list[TextContent]:
    if isinstance(content, str):
        return [TextContent(type="text", text=content)]
    return [TextContent(type="text", text=json.dumps(content, indent=2, default=str))]


def _ok(content: object) -> CallToolResult:
    return CallToolResult(content=_text(content))


def _error(message: str) -> CallToolResult:
    return CallToolResult(content=_text(f"Error: {message}"), isError=True)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def _bind(handler: ClientHandler, client: LinearClient) -> ToolHandler:
    """Close *handler* over *client*; upstream API failures become error results."""

    async def _call(arguments: ToolArgs) -> CallToolResult:
        try:
            return await handler(client, arguments)
        except LinearAPIError as exc:
            logger.warning("Linear API error in %s: %s", handler.__name__, exc)
            return _error(str(exc))

    _call.__name__ = handler.__name__
    return _call


def _register_all(
    registry: CapabilityRegistry,
    client: LinearClient,
    tools: Iterable[ToolDescriptor],
    handlers: Mapping[str, ClientHandler],
) -> None:
    for tool in tools:
        registry.register_tool(tool, _bind(handlers[tool.name], client))


# ---------------------------------------------------------------------------
# Argument validation: each returns an error result, or None when valid
# ---------------------------------------------------------------------------


def _require_str(arguments: ToolArgs, key: str, message: str) -> CallToolResult | None:
    value = arguments.get(key)
    if not value or not isinstance(value, str):
        return _error(message)
    return None


def _validate_str(value: Any, name: str) -> CallToolResult | None:
    """Return a validation error if *value* is not ``None`` and not a ``str``."""
    if value is not None and not isinstance(value, str):
        return _error(f"{name} must be a string")
    return None


def _validate_priority(value: Any) -> CallToolResult | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float) or value != int(value):
        return _error("priority must be an integer")
    if not 0 <= value <= 4:
        return _error("priority must be between 0 and 4")
    return None


def _validate_date(value: Any, name: str) -> CallToolResult | None:
    if value is None:
        return None
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return _error(f"{name} must be in ISO format (YYYY-MM-DD)")
    return None


def _resolve_limit(arguments: ToolArgs, default: int = _DEFAULT_LIMIT) -> int:
    """Effective page size: the caller's ``limit`` if a positive integer, capped at ``_MAX_LIMIT``."""
    requested = arguments.get("limit")
    if isinstance(requested, bool) or not isinstance(requested, int | float) or requested < 1:
        return default
    return min(int(requested), _MAX_LIMIT)


def _flag(arguments: ToolArgs, key: str) -> bool:
    return arguments.get(key) is True


# ---------------------------------------------------------------------------
# Reshaping Linear nodes
# ---------------------------------------------------------------------------


def _nodes(connection: Any) -> list[dict[str, Any]]:
    if not isinstance(connection, dict):
        return []
    nodes = connection.get("nodes")
    return [n for n in nodes if isinstance(n, dict)] if isinstance(nodes, list) else []


def _page_info(connection: Any) -> PageInfo:
    info = connection.get("pageInfo") if isinstance(connection, dict) else None
    if not isinstance(info, dict):
        return PageInfo(hasNextPage=False, endCursor=None)
    return PageInfo(hasNextPage=bool(info.get("hasNextPage")), endCursor=info.get("endCursor"))


def _field(node: Any, key: str = "name") -> Any:
    """``node[key]`` for a nested object that may be null."""
    return node.get(key) if isinstance(node, dict) else None


def _user_ref(node: Any) -> dict[str, Any] | None:
    if not isinstance(node, dict):
        return None
    return {"id": node.get("id"), "name": node.get("name"), "displayName": node.get("displayName")}


def _issue_summary(issue: dict[str, Any]) -> IssueSummary:
    """Flat issue row used by team, project, and search listings."""
    return IssueSummary(
        id=issue["id"],
        identifier=issue.get("identifier", ""),
        title=issue.get("title", ""),
        description=issue.get("description"),
        state=_field(issue.get("state")),
        assignee=_field(issue.get("assignee")),
        priority=issue.get("priority", 0),
        url=issue.get("url", ""),
        createdAt=issue.get("createdAt", ""),
        updatedAt=issue.get("updatedAt", ""),
    )


def _find_state(team: dict[str, Any], status: str) -> dict[str, Any] | None:
    """Case-insensitive lookup of a workflow state by name among *team*'s states."""
    wanted = status.lower()
    for state in _nodes(team.get("states")):
        name = state.get("name")
        if isinstance(name, str) and name.lower() == wanted:
            return state
    return None
