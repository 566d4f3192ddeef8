"""MCP tools for issue creation, updates, search, assignment lists, and comments."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.types import CallToolResult

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_tools.common import (
    _DEFAULT_SEARCH_LIMIT,
    _PRIORITY_SCHEMA,
    _error,
    _field,
    _find_state,
    _flag,
    _nodes,
    _ok,
    _page_info,
    _register_all,
    _require_str,
    _resolve_limit,
    _user_ref,
    _validate_date,
    _validate_priority,
    _validate_str,
)
from linear_mcp.types.api import AssignedIssue, IssueSearchResponse, UserIssuesResponse, UserRef
from linear_mcp.types.capabilities import ToolDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

_UPDATE_FIELDS = ("title", "description", "stateId", "teamId", "assigneeId", "dueDate")


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register issue-domain tools."""
    tools = [
        ToolDescriptor(
            name="linear_create_issue",
            description="Create a new Linear issue",
            input_schema={
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Issue title"},
                    "teamId": {"type": "string", "description": "Team ID to create issue in"},
                    "description": {"type": "string", "description": "Issue description (markdown supported)"},
                    "priority": _PRIORITY_SCHEMA,
                    "status": {"type": "string", "description": "Initial status name (e.g., 'Todo', 'In Progress')"},
                    "stateId": {"type": "string", "description": "Initial workflow state ID (takes precedence over status)"},
                    "assigneeId": {"type": "string", "description": "User ID to assign the issue to"},
                    "labelIds": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Label IDs to attach at creation",
                    },
                },
                "required": ["title", "teamId"],
            },
        ),
        ToolDescriptor(
            name="linear_update_issue",
            description="Update an existing Linear issue",
            input_schema={
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "Issue ID to update"},
                    "title": {"type": "string", "description": "New issue title"},
                    "description": {"type": "string", "description": "New issue description (markdown supported)"},
                    "stateId": {"type": "string", "description": "New state ID"},
                    "teamId": {"type": "string", "description": "New team ID"},
                    "assigneeId": {"type": "string", "description": "User ID to assign the issue to"},
                    "priority": {
                        "type": "number",
                        "description": "New priority level (0-4), where 0=no priority, 1=urgent, 4=low",
                    },
                    "dueDate": {"type": "string", "description": "New due date (YYYY-MM-DD)"},
                },
                "required": ["issueId"],
            },
        ),
        ToolDescriptor(
            name="linear_search_issues",
            description="Search issues in Linear by text in title and description",
            input_schema={
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Text to search in title/description"},
                    "includeArchived": {"type": "boolean", "description": "Include archived issues"},
                    "limit": {"type": "number", "description": "Maximum number of issues to return (default: 10)"},
                },
                "required": ["query"],
            },
        ),
        ToolDescriptor(
            name="linear_get_user_issues",
            description="Get issues assigned to a user",
            input_schema={
                "type": "object",
                "properties": {
                    "userId": {"type": "string", "description": "User ID (omit for authenticated user)"},
                    "includeArchived": {"type": "boolean", "description": "Include archived issues"},
                    "limit": {"type": "number", "description": "Maximum number of issues to return (default: 50)"},
                },
            },
        ),
        ToolDescriptor(
            name="linear_add_comment",
            description="Add a comment to a Linear issue",
            input_schema={
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "Issue ID to comment on"},
                    "body": {"type": "string", "description": "Comment text (markdown supported)"},
                    "createAsUser": {"type": "string", "description": "Custom username for the comment creator"},
                    "displayIconUrl": {"type": "string", "description": "Custom avatar URL for the comment creator"},
                },
                "required": ["issueId", "body"],
            },
        ),
    ]

    handlers = {
        "linear_create_issue": _handle_create_issue,
        "linear_update_issue": _handle_update_issue,
        "linear_search_issues": _handle_search_issues,
        "linear_get_user_issues": _handle_get_user_issues,
        "linear_add_comment": _handle_add_comment,
    }

    _register_all(registry, client, tools, handlers)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_create_issue(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _require_str(arguments, "teamId", "Team ID is required"),
        _require_str(arguments, "title", "Title is required"),
        _validate_str(arguments.get("description"), "description"),
        _validate_priority(arguments.get("priority")),
    ):
        if err is not None:
            return err

    data: dict[str, Any] = {"teamId": arguments["teamId"], "title": arguments["title"]}
    if arguments.get("description"):
        data["description"] = arguments["description"]
    if arguments.get("assigneeId"):
        data["assigneeId"] = arguments["assigneeId"]
    if arguments.get("priority") is not None:
        data["priority"] = int(arguments["priority"])
    label_ids = arguments.get("labelIds")
    if isinstance(label_ids, list) and label_ids:
        data["labelIds"] = [str(label_id) for label_id in label_ids]

    if arguments.get("stateId"):
        data["stateId"] = arguments["stateId"]
    elif arguments.get("status"):
        team = await client.team(arguments["teamId"])
        if team is None:
            return _error(f"Team with ID {arguments['teamId']} not found")
        state = _find_state(team, str(arguments["status"]))
        if state is None:
            return _error(f'Status "{arguments["status"]}" not found for team {team.get("name")}')
        data["stateId"] = state["id"]

    payload = await client.create_issue(data)
    issue = payload.get("issue")
    if not payload.get("success") or not isinstance(issue, dict):
        return _error("Failed to create issue")
    return _ok(
        {
            "id": issue["id"],
            "title": issue.get("title"),
            "identifier": issue.get("identifier"),
            "url": issue.get("url"),
            "createdAt": issue.get("createdAt"),
        }
    )


async def _handle_update_issue(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _require_str(arguments, "issueId", "Issue ID is required"),
        _validate_priority(arguments.get("priority")),
        _validate_date(arguments.get("dueDate"), "dueDate"),
    ):
        if err is not None:
            return err
    issue_id = arguments["issueId"]

    data: dict[str, Any] = {key: arguments[key] for key in _UPDATE_FIELDS if arguments.get(key)}
    if arguments.get("priority") is not None:
        data["priority"] = int(arguments["priority"])
    if not data:
        return _error("At least one field to update must be provided")

    if await client.issue(issue_id) is None:
        return _error(f"Issue with ID {issue_id} not found")

    payload = await client.update_issue(issue_id, data)
    if not payload.get("success"):
        return _error("Failed to update issue")
    issue = payload.get("issue")
    if not isinstance(issue, dict):
        return _error("Failed to retrieve updated issue data")
    return _ok(
        {
            "id": issue["id"],
            "title": issue.get("title"),
            "description": issue.get("description"),
            "state": _field(issue.get("state")),
            "team": _field(issue.get("team")),
            "assignee": _field(issue.get("assignee")),
            "priority": issue.get("priority"),
            "url": issue.get("url"),
        }
    )


async def _handle_search_issues(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    query_err = _require_str(arguments, "query", "Search query is required")
    if query_err:
        return query_err
    result = await client.issue_search(
        arguments["query"],
        first=_resolve_limit(arguments, _DEFAULT_SEARCH_LIMIT),
        include_archived=_flag(arguments, "includeArchived"),
    )
    response = IssueSearchResponse(
        pageInfo=_page_info(result),
        issues=[
            {
                "id": issue["id"],
                "identifier": issue.get("identifier"),
                "title": issue.get("title"),
                "description": issue.get("description"),
                "url": issue.get("url"),
                "state": _field(issue.get("state")),
                "team": _field(issue.get("team")),
                "assignee": _field(issue.get("assignee")),
                "createdAt": issue.get("createdAt"),
                "updatedAt": issue.get("updatedAt"),
            }
            for issue in _nodes(result)
        ],
    )
    return _ok(response)


async def _handle_get_user_issues(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    user_err = _validate_str(arguments.get("userId"), "userId")
    if user_err:
        return user_err
    user_id = arguments.get("userId") or None
    user = await client.user_assigned_issues(
        user_id,
        first=_resolve_limit(arguments),
        include_archived=_flag(arguments, "includeArchived"),
    )
    if user is None:
        if user_id is None:
            return _error("Failed to get authenticated user")
        return _error(f"User with ID {user_id} not found")

    connection = user.get("assignedIssues")
    ref = _user_ref(user) or {}
    response = UserIssuesResponse(
        user=UserRef(id=ref.get("id", ""), name=ref.get("name", ""), displayName=ref.get("displayName", "")),
        pageInfo=_page_info(connection),
        issues=[
            AssignedIssue(
                id=issue["id"],
                number=issue.get("number", 0),
                title=issue.get("title", ""),
                url=issue.get("url", ""),
                priority=issue.get("priority", 0),
                state=_field(issue.get("state")),
                teamName=_field(issue.get("team")),
                createdAt=issue.get("createdAt", ""),
            )
            for issue in _nodes(connection)
        ],
    )
    return _ok(response)


async def _handle_add_comment(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _require_str(arguments, "issueId", "Issue ID is required"),
        _require_str(arguments, "body", "Comment body is required"),
    ):
        if err is not None:
            return err
    issue_id = arguments["issueId"]

    issue = await client.issue(issue_id)
    if issue is None:
        return _error(f"Issue with ID {issue_id} not found")

    data: dict[str, Any] = {"issueId": issue_id, "body": arguments["body"]}
    for key in ("createAsUser", "displayIconUrl"):
        if arguments.get(key):
            data[key] = arguments[key]

    payload = await client.create_comment(data)
    comment = payload.get("comment")
    if not payload.get("success") or not isinstance(comment, dict):
        return _error("Failed to create comment")
    return _ok(
        {
            "id": comment.get("id"),
            "body": arguments["body"],
            "url": comment.get("url") or issue.get("url"),
            "createdAt": comment.get("createdAt"),
        }
    )
