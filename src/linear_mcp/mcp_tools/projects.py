"""MCP tools for projects and project issue lists."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.types import CallToolResult

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_tools.common import (
    _PRIORITY_SCHEMA,
    _error,
    _field,
    _flag,
    _issue_summary,
    _nodes,
    _ok,
    _register_all,
    _require_str,
    _resolve_limit,
    _user_ref,
    _validate_priority,
    _validate_str,
)
from linear_mcp.types.api import ProjectSummary
from linear_mcp.types.capabilities import ToolDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register project-domain tools."""
    tools = [
        ToolDescriptor(
            name="linear_get_projects",
            description="Get projects in the organization",
            input_schema={
                "type": "object",
                "properties": {
                    "teamId": {"type": "string", "description": "Filter projects by team ID"},
                    "includeArchived": {"type": "boolean", "description": "Include archived projects"},
                    "limit": {"type": "number", "description": "Maximum number of projects to return (default: 50)"},
                    "status": {
                        "type": "string",
                        "description": "Filter by project status (e.g., 'completed', 'in progress')",
                    },
                },
            },
        ),
        ToolDescriptor(
            name="linear_get_project",
            description="Get details about a specific project",
            input_schema={
                "type": "object",
                "properties": {
                    "projectId": {"type": "string", "description": "Project ID to get details for"},
                },
                "required": ["projectId"],
            },
        ),
        ToolDescriptor(
            name="linear_get_project_issues",
            description="Get issues for a specific project",
            input_schema={
                "type": "object",
                "properties": {
                    "projectId": {"type": "string", "description": "Project ID to get issues for"},
                    "includeArchived": {"type": "boolean", "description": "Include archived issues"},
                    "limit": {"type": "number", "description": "Maximum number of issues to return (default: 50)"},
                    "status": {"type": "string", "description": "Filter by issue status name"},
                    "priority": _PRIORITY_SCHEMA,
                },
                "required": ["projectId"],
            },
        ),
    ]

    handlers = {
        "linear_get_projects": _handle_get_projects,
        "linear_get_project": _handle_get_project,
        "linear_get_project_issues": _handle_get_project_issues,
    }

    _register_all(registry, client, tools, handlers)


def _project_summary(project: dict[str, Any]) -> ProjectSummary:
    teams = _nodes(project.get("teams"))
    team = teams[0] if teams else None
    return ProjectSummary(
        id=project["id"],
        name=project.get("name", ""),
        description=project.get("description"),
        status=_field(project.get("status")),
        teamId=_field(team, "id"),
        teamName=_field(team),
        startDate=project.get("startDate"),
        targetDate=project.get("targetDate"),
        url=project.get("url", ""),
        progress=project.get("progress", 0),
        priority=project.get("priority", 0),
        color=project.get("color"),
        icon=project.get("icon"),
        createdAt=project.get("createdAt", ""),
        updatedAt=project.get("updatedAt", ""),
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_get_projects(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _validate_str(arguments.get("teamId"), "teamId"),
        _validate_str(arguments.get("status"), "status"),
    ):
        if err is not None:
            return err
    first = _resolve_limit(arguments)
    include_archived = _flag(arguments, "includeArchived")

    team_id = arguments.get("teamId")
    if team_id:
        team = await client.team_projects(team_id, first=first, include_archived=include_archived)
        if team is None:
            return _error(f"Team with ID {team_id} not found")
        projects = _nodes(team.get("projects"))
    else:
        projects = await client.projects(first=first, include_archived=include_archived)

    status = arguments.get("status")
    if status:
        wanted = status.lower()
        projects = [p for p in projects if str(_field(p.get("status")) or "").lower() == wanted]

    return _ok([_project_summary(p) for p in projects])


async def _handle_get_project(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    id_err = _require_str(arguments, "projectId", "Project ID is required")
    if id_err:
        return id_err
    project_id = arguments["projectId"]
    project = await client.project(project_id)
    if project is None:
        return _error(f"Project with ID {project_id} not found")

    status = project.get("status")
    teams = _nodes(project.get("teams"))
    team = teams[0] if teams else None
    return _ok(
        {
            "id": project["id"],
            "name": project.get("name"),
            "description": project.get("description"),
            "content": project.get("content"),
            "url": project.get("url"),
            "color": project.get("color"),
            "icon": project.get("icon"),
            "status": (
                {"id": status.get("id"), "name": status.get("name"), "color": status.get("color"), "type": status.get("type")}
                if isinstance(status, dict)
                else None
            ),
            "team": {"id": team.get("id"), "name": team.get("name"), "key": team.get("key")} if team else None,
            "creator": _user_ref(project.get("creator")),
            "lead": _user_ref(project.get("lead")),
            "progress": project.get("progress"),
            "startDate": project.get("startDate"),
            "targetDate": project.get("targetDate"),
            "createdAt": project.get("createdAt"),
            "updatedAt": project.get("updatedAt"),
            "completedAt": project.get("completedAt"),
            "canceledAt": project.get("canceledAt"),
            "archivedAt": project.get("archivedAt"),
            "priority": project.get("priority"),
            "slugId": project.get("slugId"),
            "sortOrder": project.get("sortOrder"),
        }
    )


async def _handle_get_project_issues(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _require_str(arguments, "projectId", "Project ID is required"),
        _validate_priority(arguments.get("priority")),
        _validate_str(arguments.get("status"), "status"),
    ):
        if err is not None:
            return err
    project_id = arguments["projectId"]
    project = await client.project_issues(
        project_id,
        first=_resolve_limit(arguments),
        include_archived=_flag(arguments, "includeArchived"),
    )
    if project is None:
        return _error(f"Project with ID {project_id} not found")

    # Status and priority are applied to the fetched page, not pushed upstream.
    issues = _nodes(project.get("issues"))
    status = arguments.get("status")
    if status:
        wanted = status.lower()
        issues = [i for i in issues if str(_field(i.get("state")) or "").lower() == wanted]
    priority = arguments.get("priority")
    if priority is not None:
        issues = [i for i in issues if i.get("priority") == priority]

    return _ok(
        {
            "id": project["id"],
            "name": project.get("name"),
            "status": _field(project.get("status")),
            "issues": [_issue_summary(i) for i in issues],
        }
    )
