"""MCP tools for teams and their issue lists."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.types import CallToolResult

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_tools.common import (
    _PRIORITY_SCHEMA,
    _error,
    _find_state,
    _flag,
    _issue_summary,
    _nodes,
    _ok,
    _register_all,
    _require_str,
    _resolve_limit,
    _validate_priority,
)
from linear_mcp.types.api import TeamSummary
from linear_mcp.types.capabilities import ToolDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register team-domain tools."""
    tools = [
        ToolDescriptor(
            name="linear_get_teams",
            description="Get teams in the organization",
            input_schema={
                "type": "object",
                "properties": {
                    "includeArchived": {"type": "boolean", "description": "Include archived teams"},
                    "limit": {"type": "number", "description": "Maximum number of teams to return (default: 50)"},
                },
            },
        ),
        ToolDescriptor(
            name="linear_get_team",
            description="Get details about a specific team, including workflow states and members",
            input_schema={
                "type": "object",
                "properties": {
                    "teamId": {"type": "string", "description": "Team ID to get details for"},
                },
                "required": ["teamId"],
            },
        ),
        ToolDescriptor(
            name="linear_get_team_issues",
            description="Get issues for a specific team",
            input_schema={
                "type": "object",
                "properties": {
                    "teamId": {"type": "string", "description": "Team ID to get issues for"},
                    "includeArchived": {"type": "boolean", "description": "Include archived issues"},
                    "limit": {"type": "number", "description": "Maximum number of issues to return (default: 50)"},
                    "status": {"type": "string", "description": "Filter by issue status name"},
                    "priority": _PRIORITY_SCHEMA,
                    "assigneeId": {"type": "string", "description": "Filter by assignee ID"},
                },
                "required": ["teamId"],
            },
        ),
    ]

    handlers = {
        "linear_get_teams": _handle_get_teams,
        "linear_get_team": _handle_get_team,
        "linear_get_team_issues": _handle_get_team_issues,
    }

    _register_all(registry, client, tools, handlers)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_get_teams(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    teams = await client.teams(first=_resolve_limit(arguments), include_archived=_flag(arguments, "includeArchived"))
    return _ok(
        [
            TeamSummary(id=t["id"], name=t.get("name", ""), key=t.get("key", ""), description=t.get("description") or "")
            for t in teams
        ]
    )


async def _handle_get_team(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    team_err = _require_str(arguments, "teamId", "Team ID is required")
    if team_err:
        return team_err
    team_id = arguments["teamId"]
    team = await client.team(team_id)
    if team is None:
        return _error(f"Team with ID {team_id} not found")
    return _ok(
        {
            "id": team["id"],
            "name": team.get("name"),
            "key": team.get("key"),
            "description": team.get("description"),
            "color": team.get("color"),
            "icon": team.get("icon"),
            "private": team.get("private"),
            "states": [
                {
                    "id": s.get("id"),
                    "name": s.get("name"),
                    "color": s.get("color"),
                    "type": s.get("type"),
                    "position": s.get("position"),
                }
                for s in _nodes(team.get("states"))
            ],
            "members": [
                {"id": m.get("id"), "name": m.get("name"), "displayName": m.get("displayName"), "email": m.get("email")}
                for m in _nodes(team.get("members"))
            ],
            "createdAt": team.get("createdAt"),
            "updatedAt": team.get("updatedAt"),
        }
    )


async def _handle_get_team_issues(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _require_str(arguments, "teamId", "Team ID is required"),
        _validate_priority(arguments.get("priority")),
    ):
        if err is not None:
            return err
    team_id = arguments["teamId"]

    issue_filter: dict[str, Any] = {}
    status = arguments.get("status")
    if status:
        # Workflow state names are scoped to the team.
        team = await client.team(team_id)
        if team is None:
            return _error(f"Team with ID {team_id} not found")
        state = _find_state(team, str(status))
        if state is None:
            return _error(f'Status "{status}" not found for team {team.get("name")}')
        issue_filter["state"] = {"id": {"eq": state["id"]}}
    if arguments.get("priority") is not None:
        issue_filter["priority"] = {"eq": int(arguments["priority"])}
    if arguments.get("assigneeId"):
        issue_filter["assignee"] = {"id": {"eq": arguments["assigneeId"]}}

    result = await client.team_issues(
        team_id,
        first=_resolve_limit(arguments),
        include_archived=_flag(arguments, "includeArchived"),
        filter=issue_filter or None,
    )
    if result is None:
        return _error(f"Team with ID {team_id} not found")
    return _ok(
        {
            "id": result["id"],
            "name": result.get("name"),
            "key": result.get("key"),
            "issues": [_issue_summary(i) for i in _nodes(result.get("issues"))],
        }
    )

