"""Resources for teams and team issue boards."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_resources.common import JSON_MIME, _fail, _id_arg, _json, _register_all, _status_counts
from linear_mcp.mcp_tools.common import PRIORITY_LABELS, _field, _nodes
from linear_mcp.types.capabilities import ResourceResponse, ResourceTemplateDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

TEAM_TEMPLATE = "linear-team:///{teamId}"
TEAM_ISSUES_TEMPLATE = "linear-team:///{teamId}/issues"

_ISSUES_LIMIT = 50


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register team resources."""
    resources = [
        ResourceTemplateDescriptor(
            uri_template=TEAM_TEMPLATE,
            name="linear-team",
            description="Linear team details",
            mime_type=JSON_MIME,
        ),
        ResourceTemplateDescriptor(
            uri_template=TEAM_ISSUES_TEMPLATE,
            name="linear-team-issues",
            description="Linear team issues",
            mime_type=JSON_MIME,
        ),
    ]

    handlers = {
        TEAM_TEMPLATE: _read_team,
        TEAM_ISSUES_TEMPLATE: _read_team_issues,
    }

    _register_all(registry, client, resources, handlers)


def _priority_label(priority: Any) -> str:
    if isinstance(priority, int) and 0 <= priority < len(PRIORITY_LABELS):
        return PRIORITY_LABELS[priority]
    return "Unknown"


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _read_team(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    team_id = _id_arg(args, "teamId")
    if team_id is None:
        return _fail("Invalid team ID")
    team = await client.team(team_id)
    if team is None:
        return _fail(f"Team with ID {team_id} not found")
    return _json(
        {
            "id": team["id"],
            "name": team.get("name"),
            "key": team.get("key"),
            "description": team.get("description"),
            "color": team.get("color"),
            "icon": team.get("icon"),
            "private": team.get("private"),
            "members": [
                {key: m.get(key) for key in ("id", "name", "displayName", "email")} for m in _nodes(team.get("members"))
            ],
            "states": [
                {key: s.get(key) for key in ("id", "name", "color", "type", "position")}
                for s in _nodes(team.get("states"))
            ],
            "createdAt": team.get("createdAt"),
            "updatedAt": team.get("updatedAt"),
        }
    )


async def _read_team_issues(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    team_id = _id_arg(args, "teamId")
    if team_id is None:
        return _fail("Invalid team ID")
    team = await client.team_issues(team_id, first=_ISSUES_LIMIT)
    if team is None:
        return _fail(f"Team with ID {team_id} not found")

    raw = _nodes(team.get("issues"))
    issues = [
        {
            "id": issue["id"],
            "identifier": issue.get("identifier"),
            "title": issue.get("title"),
            "status": _field(issue.get("state")),
            "priority": issue.get("priority"),
            "assignee": (
                {"id": _field(issue.get("assignee"), "id"), "name": _field(issue.get("assignee"))}
                if issue.get("assignee")
                else None
            ),
            "url": issue.get("url"),
            "createdAt": issue.get("createdAt"),
            "updatedAt": issue.get("updatedAt"),
        }
        for issue in raw
    ]
    stats = {
        "total": len(issues),
        "byStatus": _status_counts(i["status"] for i in issues),
        "byPriority": _status_counts(_priority_label(i["priority"]) for i in issues),
        "byAssignee": _status_counts(_field(i.get("assignee"), "displayName") or "Unassigned" for i in raw),
    }
    return _json(
        {
            "team": {"id": team["id"], "name": team.get("name"), "key": team.get("key")},
            "issues": issues,
            "stats": stats,
        }
    )
