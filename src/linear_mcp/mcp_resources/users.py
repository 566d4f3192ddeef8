"""Resources for another user's assigned issues."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_resources.common import JSON_MIME, _fail, _id_arg, _json, _register_all
from linear_mcp.mcp_tools.common import _field, _nodes, _user_ref
from linear_mcp.types.capabilities import ResourceResponse, ResourceTemplateDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

USER_ASSIGNED_TEMPLATE = "linear-user:///{userId}/assigned"
USER_ISSUES_TEMPLATE = "linear-user:///{userId}/issues"

_ISSUES_LIMIT = 50


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register user resources."""
    resources = [
        ResourceTemplateDescriptor(
            uri_template=USER_ASSIGNED_TEMPLATE,
            name="linear-user-assigned",
            description="Linear user assigned issues",
            mime_type=JSON_MIME,
        ),
        ResourceTemplateDescriptor(
            uri_template=USER_ISSUES_TEMPLATE,
            name="linear-user-issues",
            description="Linear user issues",
            mime_type=JSON_MIME,
        ),
    ]

    handlers = {
        USER_ASSIGNED_TEMPLATE: _read_user_assigned,
        USER_ISSUES_TEMPLATE: _read_user_issues,
    }

    _register_all(registry, client, resources, handlers)


async def _fetch(client: LinearClient, args: dict[str, Any]) -> dict[str, Any] | ResourceResponse:
    user_id = _id_arg(args, "userId")
    if user_id is None:
        return _fail("Invalid user ID")
    user = await client.user_assigned_issues(user_id, first=_ISSUES_LIMIT)
    if user is None:
        return _fail(f"User with ID {user_id} not found")
    return user


def _base_row(issue: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": issue["id"],
        "identifier": issue.get("identifier"),
        "title": issue.get("title"),
        "status": _field(issue.get("state")),
        "priority": issue.get("priority"),
        "url": issue.get("url"),
        "createdAt": issue.get("createdAt"),
        "updatedAt": issue.get("updatedAt"),
    }


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _read_user_assigned(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    user = await _fetch(client, args)
    if isinstance(user, ResourceResponse):
        return user
    issues = []
    for issue in _nodes(user.get("assignedIssues")):
        row = _base_row(issue)
        project = issue.get("project")
        team = issue.get("team")
        row["project"] = {"id": project.get("id"), "name": project.get("name")} if isinstance(project, dict) else None
        row["team"] = (
            {"id": team.get("id"), "name": team.get("name"), "key": team.get("key")} if isinstance(team, dict) else None
        )
        issues.append(row)
    return _json({"user": _user_ref(user), "issues": issues})


async def _read_user_issues(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    user = await _fetch(client, args)
    if isinstance(user, ResourceResponse):
        return user
    return _json({"user": _user_ref(user), "issues": [_base_row(i) for i in _nodes(user.get("assignedIssues"))]})
