"""MCP tools for issue labels."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.types import CallToolResult

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_tools.common import (
    _error,
    _field,
    _flag,
    _nodes,
    _ok,
    _page_info,
    _register_all,
    _require_str,
    _resolve_limit,
    _validate_str,
)
from linear_mcp.types.api import LabelsResponse, LabelSummary, TeamRef
from linear_mcp.types.capabilities import ToolDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

_LABEL_FIELDS = ("name", "color", "description", "parentId")


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register label tools."""
    tools = [
        ToolDescriptor(
            name="linear_get_labels",
            description="Get labels from Linear, optionally filtered by team",
            input_schema={
                "type": "object",
                "properties": {
                    "teamId": {"type": "string", "description": "Filter labels by team ID"},
                    "includeArchived": {"type": "boolean", "description": "Whether to include archived labels"},
                    "limit": {"type": "number", "description": "Maximum number of labels to return (default: 50)"},
                },
            },
        ),
        ToolDescriptor(
            name="linear_create_label",
            description="Create a new label in Linear",
            input_schema={
                "type": "object",
                "properties": {
                    "teamId": {"type": "string", "description": "The ID of the team to create the label for"},
                    "name": {"type": "string", "description": "The name of the label"},
                    "color": {"type": "string", "description": 'The color for the label in hex format (e.g. "#FF0000")'},
                    "description": {"type": "string", "description": "A description for the label"},
                    "parentId": {"type": "string", "description": "The ID of a parent label to create a nested label"},
                },
                "required": ["teamId", "name"],
            },
        ),
        ToolDescriptor(
            name="linear_update_label",
            description="Update an existing label in Linear",
            input_schema={
                "type": "object",
                "properties": {
                    "labelId": {"type": "string", "description": "The ID of the label to update"},
                    "name": {"type": "string", "description": "The new name for the label"},
                    "color": {
                        "type": "string",
                        "description": 'The new color for the label in hex format (e.g. "#FF0000")',
                    },
                    "description": {"type": "string", "description": "The new description for the label"},
                    "parentId": {"type": "string", "description": "The ID of a new parent label"},
                },
                "required": ["labelId"],
            },
        ),
    ]

    handlers = {
        "linear_get_labels": _handle_get_labels,
        "linear_create_label": _handle_create_label,
        "linear_update_label": _handle_update_label,
    }

    _register_all(registry, client, tools, handlers)


def _label_summary(label: dict[str, Any]) -> LabelSummary:
    team = label.get("team")
    parent = label.get("parent")
    return LabelSummary(
        id=label["id"],
        name=label.get("name", ""),
        color=label.get("color", ""),
        description=label.get("description") or "",
        teamId=_field(team, "id"),
        teamName=_field(team),
        teamKey=_field(team, "key"),
        createdAt=label.get("createdAt", ""),
        updatedAt=label.get("updatedAt", ""),
        archived=label.get("archivedAt") is not None,
        archivedAt=label.get("archivedAt"),
        parentId=_field(parent, "id"),
        parentName=_field(parent),
    )


def _team_ref(team: Any) -> TeamRef | None:
    if not isinstance(team, dict):
        return None
    return TeamRef(id=team.get("id", ""), name=team.get("name", ""), key=team.get("key", ""))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_get_labels(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    team_err = _validate_str(arguments.get("teamId"), "teamId")
    if team_err:
        return team_err
    team_id = arguments.get("teamId") or None
    limit = _resolve_limit(arguments)

    team = None
    if team_id:
        team = await client.team(team_id)
        if team is None:
            return _error(f"Team with ID {team_id} not found")

    result = await client.issue_labels(team_id=team_id, first=limit, include_archived=_flag(arguments, "includeArchived"))
    labels = [_label_summary(label) for label in _nodes(result)]
    response = LabelsResponse(
        labels=labels,
        pagination={"hasMore": _page_info(result)["hasNextPage"], "limit": limit, "totalCount": len(labels)},
    )
    team_ref = _team_ref(team)
    if team_ref is not None:
        response["team"] = team_ref
    return _ok(response)


async def _handle_create_label(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _require_str(arguments, "teamId", "Team ID is required and must be a string"),
        _require_str(arguments, "name", "Label name is required and must be a string"),
        _validate_str(arguments.get("color"), "color"),
        _validate_str(arguments.get("description"), "description"),
        _validate_str(arguments.get("parentId"), "parentId"),
    ):
        if err is not None:
            return err
    team_id = arguments["teamId"]

    team = await client.team(team_id)
    if team is None:
        return _error(f"Team with ID {team_id} not found")
    parent_id = arguments.get("parentId")
    if parent_id and await client.issue_label(parent_id) is None:
        return _error(f"Parent label with ID {parent_id} not found")

    data: dict[str, Any] = {"teamId": team_id, "name": arguments["name"]}
    for key in ("color", "description", "parentId"):
        if arguments.get(key):
            data[key] = arguments[key]

    payload = await client.create_issue_label(data)
    label = payload.get("issueLabel")
    if not payload.get("success") or not isinstance(label, dict):
        return _error("Failed to create label")
    summary = _label_summary(label)
    return _ok(
        {
            "label": {
                "id": summary["id"],
                "name": summary["name"],
                "color": summary["color"],
                "description": summary["description"],
                "teamId": summary["teamId"] or team.get("id"),
                "teamName": summary["teamName"] or team.get("name"),
                "createdAt": summary["createdAt"],
                "parentId": summary["parentId"],
                "parentName": summary["parentName"],
            },
            "team": _team_ref(team),
        }
    )


async def _handle_update_label(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    id_err = _require_str(arguments, "labelId", "Label ID is required")
    if id_err:
        return id_err
    for key in _LABEL_FIELDS:
        err = _validate_str(arguments.get(key), key)
        if err is not None:
            return err
    label_id = arguments["labelId"]
    data: dict[str, Any] = {key: arguments[key] for key in _LABEL_FIELDS if arguments.get(key)}
    if not data:
        return _error("At least one field to update must be provided")
    if data.get("parentId") == label_id:
        return _error("A label cannot be its own parent")

    if await client.issue_label(label_id) is None:
        return _error(f"Label with ID {label_id} not found")
    parent_id = data.get("parentId")
    if parent_id and await client.issue_label(parent_id) is None:
        return _error(f"Parent label with ID {parent_id} not found")

    payload = await client.update_issue_label(label_id, data)
    label = payload.get("issueLabel")
    if not payload.get("success") or not isinstance(label, dict):
        return _error("Failed to update label")
    summary = _label_summary(label)
    return _ok(
        {
            "label": {
                "id": summary["id"],
                "name": summary["name"],
                "color": summary["color"],
                "description": summary["description"],
                "teamId": summary["teamId"],
                "teamName": summary["teamName"],
                "archived": summary["archived"],
                "archivedAt": summary["archivedAt"],
                "createdAt": summary["createdAt"],
                "updatedAt": summary["updatedAt"],
                "parentId": summary["parentId"],
                "parentName": summary["parentName"],
            },
            "team": _team_ref(label.get("team")),
        }
    )
