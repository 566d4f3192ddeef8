"""Resources for the authenticated user and their organization."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_resources.common import JSON_MIME, _fail, _json, _register_all
from linear_mcp.mcp_tools.common import _field, _nodes, _user_ref
from linear_mcp.types.capabilities import ResourceDescriptor, ResourceResponse

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

ORGANIZATION_URI = "linear-organization:"
VIEWER_URI = "linear-viewer:"
VIEWER_TEAMS_URI = "linear-viewer:///teams"
VIEWER_PROJECTS_URI = "linear-viewer:///projects"
VIEWER_ASSIGNED_URI = "linear-viewer:///assigned"

_ASSIGNED_LIMIT = 50


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register viewer and organization resources."""
    resources = [
        ResourceDescriptor(
            uri=ORGANIZATION_URI,
            name="linear-organization",
            description="Linear organization information",
            mime_type=JSON_MIME,
        ),
        ResourceDescriptor(uri=VIEWER_URI, name="linear-viewer", description="Current Linear user", mime_type=JSON_MIME),
        ResourceDescriptor(
            uri=VIEWER_TEAMS_URI,
            name="linear-viewer-teams",
            description="Current Linear user's teams",
            mime_type=JSON_MIME,
        ),
        ResourceDescriptor(
            uri=VIEWER_PROJECTS_URI,
            name="linear-viewer-projects",
            description="Current Linear user's projects",
            mime_type=JSON_MIME,
        ),
        ResourceDescriptor(
            uri=VIEWER_ASSIGNED_URI,
            name="linear-viewer-assigned",
            description="Issues assigned to the current Linear user",
            mime_type=JSON_MIME,
        ),
    ]

    handlers = {
        ORGANIZATION_URI: _read_organization,
        VIEWER_URI: _read_viewer,
        VIEWER_TEAMS_URI: _read_viewer_teams,
        VIEWER_PROJECTS_URI: _read_viewer_projects,
        VIEWER_ASSIGNED_URI: _read_viewer_assigned,
    }

    _register_all(registry, client, resources, handlers)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _read_organization(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    org = await client.organization()
    if org is None:
        return _fail("Failed to fetch organization")
    return _json({key: org.get(key) for key in ("id", "name", "urlKey", "logoUrl")})


async def _read_viewer(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    viewer = await client.viewer()
    if viewer is None:
        return _fail("Failed to fetch viewer")
    return _json({key: viewer.get(key) for key in ("id", "name", "displayName", "email", "active")})


async def _read_viewer_teams(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    viewer = await client.viewer_teams()
    if viewer is None:
        return _fail("Failed to fetch current user")
    teams = [
        {key: team.get(key) for key in ("id", "name", "key", "description", "icon", "color")}
        for team in _nodes(viewer.get("teams"))
    ]
    return _json({"teams": teams, "user": _user_ref(viewer)})


async def _read_viewer_projects(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    viewer = await client.viewer_projects()
    if viewer is None:
        return _fail("Failed to fetch current user")

    # A project shared by several teams appears once per team.
    seen: set[str] = set()
    projects: list[dict[str, Any]] = []
    for team in _nodes(viewer.get("teams")):
        for project in _nodes(team.get("projects")):
            if project.get("id") in seen:
                continue
            member_ids = {m.get("id") for m in _nodes(project.get("members"))}
            if viewer.get("id") not in member_ids:
                continue
            seen.add(project["id"])
            projects.append(
                {
                    "id": project["id"],
                    "name": project.get("name"),
                    "description": project.get("description"),
                    "state": _field(project.get("status")) or "Unknown",
                    "startDate": project.get("startDate"),
                    "targetDate": project.get("targetDate"),
                    "lead": _user_ref(project.get("lead")),
                }
            )
    return _json({"projects": projects, "user": _user_ref(viewer)})


async def _read_viewer_assigned(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    viewer = await client.user_assigned_issues(None, first=_ASSIGNED_LIMIT)
    if viewer is None:
        return _fail("Failed to fetch current user")
    issues = [
        {
            "id": issue["id"],
            "title": issue.get("title"),
            "identifier": issue.get("identifier"),
            "description": issue.get("description"),
            "status": _field(issue.get("state")),
            "priority": issue.get("priority"),
            "url": issue.get("url"),
            "createdAt": issue.get("createdAt"),
            "updatedAt": issue.get("updatedAt"),
        }
        for issue in _nodes(viewer.get("assignedIssues"))
    ]
    return _json({"assignedIssues": issues, "user": _user_ref(viewer)})
