"""Resources for projects, project issue lists, and milestones."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_resources.common import JSON_MIME, _fail, _id_arg, _json, _register_all, _status_counts
from linear_mcp.mcp_tools.common import _field, _issue_summary, _nodes, _user_ref
from linear_mcp.types.capabilities import ResourceResponse, ResourceTemplateDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

PROJECT_TEMPLATE = "linear-project:///{projectId}"
PROJECT_ISSUES_TEMPLATE = "linear-project:///{projectId}/issues"
PROJECT_MILESTONES_TEMPLATE = "linear-project:///{projectId}/milestones"
MILESTONE_TEMPLATE = "linear-milestone:///{milestoneId}"

_MILESTONE_DONE = "done"
_NOT_STARTED_STATES = frozenset({"backlog", "unstarted", "triage"})


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register project and milestone resources."""
    resources = [
        ResourceTemplateDescriptor(
            uri_template=PROJECT_TEMPLATE,
            name="linear-project",
            description="Linear project details",
            mime_type=JSON_MIME,
        ),
        ResourceTemplateDescriptor(
            uri_template=PROJECT_ISSUES_TEMPLATE,
            name="linear-project-issues",
            description="Linear project issues",
            mime_type=JSON_MIME,
        ),
        ResourceTemplateDescriptor(
            uri_template=PROJECT_MILESTONES_TEMPLATE,
            name="linear-project-milestones",
            description="Linear project milestones",
            mime_type=JSON_MIME,
        ),
        ResourceTemplateDescriptor(
            uri_template=MILESTONE_TEMPLATE,
            name="linear-milestone",
            description="Linear project milestone with issue progress",
            mime_type=JSON_MIME,
        ),
    ]

    handlers = {
        PROJECT_TEMPLATE: _read_project,
        PROJECT_ISSUES_TEMPLATE: _read_project_issues,
        PROJECT_MILESTONES_TEMPLATE: _read_project_milestones,
        MILESTONE_TEMPLATE: _read_milestone,
    }

    _register_all(registry, client, resources, handlers)


def _milestone_row(milestone: dict[str, Any]) -> dict[str, Any]:
    return {
        key: milestone.get(key)
        for key in ("id", "name", "description", "targetDate", "status", "sortOrder", "createdAt", "updatedAt")
    }


def _parse_date(value: Any) -> date | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _milestone_stats(milestones: list[dict[str, Any]], today: date) -> dict[str, Any]:
    """Counts by status, plus which open milestones are upcoming or overdue relative to *today*."""
    stats: dict[str, Any] = {
        "total": len(milestones),
        "byStatus": _status_counts(m.get("status") for m in milestones),
        "upcoming": 0,
        "overdue": 0,
        "completed": 0,
    }
    for milestone in milestones:
        if milestone.get("status") == _MILESTONE_DONE:
            stats["completed"] += 1
            continue
        target = _parse_date(milestone.get("targetDate"))
        if target is None:
            continue
        if target > today:
            stats["upcoming"] += 1
        elif target < today:
            stats["overdue"] += 1
    return stats


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _read_project(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    project_id = _id_arg(args, "projectId")
    if project_id is None:
        return _fail("Invalid project ID")
    project = await client.project(project_id)
    if project is None:
        return _fail(f"Project with ID {project_id} not found")
    return _json(
        {
            "id": project["id"],
            "name": project.get("name"),
            "description": project.get("description"),
            "url": project.get("url"),
            "status": _field(project.get("status")),
            "progress": project.get("progress"),
            "startDate": project.get("startDate"),
            "targetDate": project.get("targetDate"),
            "lead": _user_ref(project.get("lead")),
            "teams": [{key: t.get(key) for key in ("id", "name", "key")} for t in _nodes(project.get("teams"))],
            "members": [_user_ref(m) for m in _nodes(project.get("members"))],
            "createdAt": project.get("createdAt"),
            "updatedAt": project.get("updatedAt"),
        }
    )


async def _read_project_issues(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    project_id = _id_arg(args, "projectId")
    if project_id is None:
        return _fail("Invalid project ID")
    project = await client.project_issues(project_id)
    if project is None:
        return _fail(f"Project with ID {project_id} not found")
    return _json(
        {
            "project": {"id": project["id"], "name": project.get("name"), "description": project.get("description")},
            "issues": [_issue_summary(i) for i in _nodes(project.get("issues"))],
        }
    )


async def _read_project_milestones(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    project_id = _id_arg(args, "projectId")
    if project_id is None:
        return _fail("Invalid project ID")
    project = await client.project_milestones(project_id)
    if project is None:
        return _fail(f"Project with ID {project_id} not found")
    milestones = [_milestone_row(m) for m in _nodes(project.get("projectMilestones"))]
    return _json(
        {
            "project": {"id": project.get("id"), "name": project.get("name"), "description": project.get("description")},
            "milestones": milestones,
            "stats": _milestone_stats(milestones, date.today()),
        }
    )


async def _read_milestone(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    milestone_id = _id_arg(args, "milestoneId")
    if milestone_id is None:
        return _fail("Invalid milestone ID")
    milestone = await client.project_milestone(milestone_id)
    if milestone is None:
        return _fail(f"Milestone with ID {milestone_id} not found")

    issues = _nodes(milestone.get("issues"))
    state_types = [_field(i.get("state"), "type") for i in issues]
    completed = state_types.count("completed")
    project = milestone.get("project")
    return _json(
        {
            "milestone": {**_milestone_row(milestone), "archivedAt": milestone.get("archivedAt")},
            "project": {"id": _field(project, "id"), "name": _field(project)},
            "issues": [
                {
                    "id": issue.get("id"),
                    "title": issue.get("title"),
                    "identifier": issue.get("identifier"),
                    "status": _field(issue.get("state")),
                    "priority": issue.get("priority"),
                    "assignee": _field(issue.get("assignee")),
                }
                for issue in issues
            ],
            "stats": {
                "totalIssues": len(issues),
                "completed": completed,
                "inProgress": state_types.count("started"),
                "notStarted": sum(1 for t in state_types if t in _NOT_STARTED_STATES),
                "percentComplete": round(completed / len(issues) * 100) if issues else 0,
            },
        }
    )
