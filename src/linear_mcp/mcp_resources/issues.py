"""Resources for single issues and their attachments."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_resources.common import JSON_MIME, _fail, _id_arg, _json, _register_all
from linear_mcp.mcp_tools.common import _field, _nodes, _user_ref
from linear_mcp.types.capabilities import ResourceResponse, ResourceTemplateDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

ISSUE_TEMPLATE = "linear-issue:///{issueId}"
ATTACHMENT_TEMPLATE = "linear-attachment:///{attachmentId}"


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register issue and attachment resources."""
    resources = [
        ResourceTemplateDescriptor(
            uri_template=ISSUE_TEMPLATE,
            name="linear-issue",
            description="Linear issue",
            mime_type=JSON_MIME,
        ),
        ResourceTemplateDescriptor(
            uri_template=ATTACHMENT_TEMPLATE,
            name="linear-attachment",
            description="Linear issue attachment",
            mime_type=JSON_MIME,
        ),
    ]

    handlers = {
        ISSUE_TEMPLATE: _read_issue,
        ATTACHMENT_TEMPLATE: _read_attachment,
    }

    _register_all(registry, client, resources, handlers)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _read_issue(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    issue_id = _id_arg(args, "issueId")
    if issue_id is None:
        return _fail("Invalid issue ID")
    issue = await client.issue(issue_id)
    if issue is None:
        return _fail(f"Issue with ID {issue_id} not found")
    return _json(
        {
            "id": issue["id"],
            "title": issue.get("title"),
            "description": issue.get("description"),
            "identifier": issue.get("identifier"),
            "status": _field(issue.get("state")),
            "assignee": _user_ref(issue.get("assignee")),
            "priority": issue.get("priority"),
            "url": issue.get("url"),
            "comments": [
                {
                    "id": comment.get("id"),
                    "body": comment.get("body"),
                    "createdAt": comment.get("createdAt"),
                    "user": _user_ref(comment.get("user")),
                }
                for comment in _nodes(issue.get("comments"))
            ],
            "createdAt": issue.get("createdAt"),
            "updatedAt": issue.get("updatedAt"),
        }
    )


async def _read_attachment(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    attachment_id = _id_arg(args, "attachmentId")
    if attachment_id is None:
        return _fail("Invalid attachment ID")
    attachment = await client.attachment(attachment_id)
    if attachment is None:
        return _fail(f"Attachment with ID {attachment_id} not found")
    issue = attachment.get("issue")
    return _json(
        {
            "attachment": {
                key: attachment.get(key)
                for key in ("id", "url", "title", "subtitle", "sourceType", "createdAt", "updatedAt")
            },
            "issue": (
                {"id": issue.get("id"), "title": issue.get("title"), "identifier": issue.get("identifier")}
                if isinstance(issue, dict)
                else None
            ),
        }
    )
