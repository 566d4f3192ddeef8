"""MCP tools for project milestones."""

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
    _validate_date,
    _validate_str,
)
from linear_mcp.types.api import MilestonesResponse, MilestoneSummary
from linear_mcp.types.capabilities import ToolDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register milestone tools."""
    tools = [
        ToolDescriptor(
            name="linear_get_milestones",
            description="Get project milestones from Linear, optionally filtered by project",
            input_schema={
                "type": "object",
                "properties": {
                    "projectId": {"type": "string", "description": "Filter milestones by project ID"},
                    "includeArchived": {"type": "boolean", "description": "Include archived milestones"},
                    "limit": {"type": "number", "description": "Maximum number of milestones to return (default: 50)"},
                },
            },
        ),
        ToolDescriptor(
            name="linear_create_milestone",
            description="Create a new milestone in a Linear project",
            input_schema={
                "type": "object",
                "properties": {
                    "projectId": {"type": "string", "description": "The ID of the project to add the milestone to"},
                    "name": {"type": "string", "description": "The name of the milestone"},
                    "targetDate": {"type": "string", "description": "The target date (YYYY-MM-DD)"},
                    "description": {"type": "string", "description": "A description for the milestone"},
                    "sortOrder": {"type": "number", "description": "Sort order within the project"},
                },
                "required": ["projectId", "name", "targetDate"],
            },
        ),
        ToolDescriptor(
            name="linear_update_milestone",
            description="Update an existing project milestone in Linear",
            input_schema={
                "type": "object",
                "properties": {
                    "id": {"type": "string", "description": "The ID of the milestone to update"},
                    "name": {"type": "string", "description": "The new name for the milestone"},
                    "targetDate": {"type": "string", "description": "The new target date (YYYY-MM-DD)"},
                    "description": {"type": "string", "description": "The new description for the milestone"},
                    "sortOrder": {"type": "number", "description": "The new sort order within the project"},
                },
                "required": ["id"],
            },
        ),
    ]

    handlers = {
        "linear_get_milestones": _handle_get_milestones,
        "linear_create_milestone": _handle_create_milestone,
        "linear_update_milestone": _handle_update_milestone,
    }

    _register_all(registry, client, tools, handlers)


def _milestone_summary(milestone: dict[str, Any]) -> MilestoneSummary:
    project = milestone.get("project")
    return MilestoneSummary(
        id=milestone["id"],
        name=milestone.get("name", ""),
        description=milestone.get("description") or "",
        targetDate=milestone.get("targetDate"),
        status=milestone.get("status"),
        sortOrder=milestone.get("sortOrder", 0),
        projectId=_field(project, "id"),
        projectName=_field(project),
        createdAt=milestone.get("createdAt", ""),
        updatedAt=milestone.get("updatedAt", ""),
        archivedAt=milestone.get("archivedAt"),
    )


def _validate_sort_order(value: Any) -> CallToolResult | None:
    if value is not None and (isinstance(value, bool) or not isinstance(value, int | float)):
        return _error("sortOrder must be a number")
    return None


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_get_milestones(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    project_err = _validate_str(arguments.get("projectId"), "projectId")
    if project_err:
        return project_err
    project_id = arguments.get("projectId") or None

    result = await client.project_milestones(
        project_id,
        first=_resolve_limit(arguments),
        include_archived=_flag(arguments, "includeArchived"),
    )
    if result is None:
        return _error(f"Project with ID {project_id} not found")

    connection = result.get("projectMilestones")
    milestones = [_milestone_summary(m) for m in _nodes(connection)]
    return _ok(MilestonesResponse(milestones=milestones, pageInfo=_page_info(connection), totalCount=len(milestones)))


async def _handle_create_milestone(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _require_str(arguments, "name", "Milestone name is required and must be a string"),
        _require_str(arguments, "projectId", "Project ID is required and must be a string"),
        _require_str(arguments, "targetDate", "Target date is required and must be a string"),
        _validate_date(arguments.get("targetDate"), "Target date"),
        _validate_str(arguments.get("description"), "description"),
        _validate_sort_order(arguments.get("sortOrder")),
    ):
        if err is not None:
            return err
    project_id = arguments["projectId"]

    if await client.project(project_id) is None:
        return _error(f"Project with ID {project_id} not found")

    data: dict[str, Any] = {
        "projectId": project_id,
        "name": arguments["name"],
        "targetDate": arguments["targetDate"],
    }
    if arguments.get("description"):
        data["description"] = arguments["description"]
    if arguments.get("sortOrder") is not None:
        data["sortOrder"] = arguments["sortOrder"]

    payload = await client.create_project_milestone(data)
    milestone = payload.get("projectMilestone")
    if not payload.get("success") or not isinstance(milestone, dict):
        return _error("Failed to create milestone")
    return _ok({"success": True, "milestone": _milestone_summary(milestone)})


async def _handle_update_milestone(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _require_str(arguments, "id", "Milestone ID is required and must be a string"),
        _validate_str(arguments.get("name"), "name"),
        _validate_date(arguments.get("targetDate"), "Target date"),
        _validate_str(arguments.get("description"), "description"),
        _validate_sort_order(arguments.get("sortOrder")),
    ):
        if err is not None:
            return err
    milestone_id = arguments["id"]

    data: dict[str, Any] = {key: arguments[key] for key in ("name", "targetDate", "description") if arguments.get(key)}
    if arguments.get("sortOrder") is not None:
        data["sortOrder"] = arguments["sortOrder"]
    if not data:
        return _error("At least one field to update must be provided")

    if await client.project_milestone(milestone_id) is None:
        return _error(f"Milestone with ID {milestone_id} not found")

    payload = await client.update_project_milestone(milestone_id, data)
    milestone = payload.get("projectMilestone")
    if not payload.get("success") or not isinstance(milestone, dict):
        return _error("Failed to update milestone")
    return _ok({"success": True, "milestone": _milestone_summary(milestone)})
