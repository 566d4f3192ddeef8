"""MCP tools for issue attachments (external links shown on an issue)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

from mcp.types import CallToolResult

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_tools.common import _error, _nodes, _ok, _register_all, _require_str, _validate_str
from linear_mcp.types.api import AttachmentSummary
from linear_mcp.types.capabilities import ToolDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register attachment tools."""
    tools = [
        ToolDescriptor(
            name="linear_get_attachments",
            description="Get attachments for an issue in Linear",
            input_schema={
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "The ID of the issue to get attachments for"},
                },
                "required": ["issueId"],
            },
        ),
        ToolDescriptor(
            name="linear_add_attachment",
            description="Add a link attachment to an issue in Linear",
            input_schema={
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "The ID of the issue to attach to"},
                    "url": {"type": "string", "description": "The URL of the attachment"},
                    "title": {"type": "string", "description": "The title of the attachment"},
                    "subtitle": {"type": "string", "description": "A subtitle for the attachment"},
                    "icon": {"type": "string", "description": "URL of an icon to show for the attachment"},
                },
                "required": ["issueId", "url", "title"],
            },
        ),
    ]

    handlers = {
        "linear_get_attachments": _handle_get_attachments,
        "linear_add_attachment": _handle_add_attachment,
    }

    _register_all(registry, client, tools, handlers)


def _attachment_summary(attachment: dict[str, Any]) -> AttachmentSummary:
    summary = AttachmentSummary(
        id=attachment["id"],
        url=attachment.get("url", ""),
        title=attachment.get("title", ""),
        createdAt=attachment.get("createdAt", ""),
    )
    if attachment.get("subtitle"):
        summary["subtitle"] = attachment["subtitle"]
    if attachment.get("iconUrl"):
        summary["icon"] = attachment["iconUrl"]
    return summary


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_get_attachments(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    id_err = _require_str(arguments, "issueId", "Issue ID is required and must be a string")
    if id_err:
        return id_err
    issue_id = arguments["issueId"]
    issue = await client.issue_attachments(issue_id)
    if issue is None:
        return _error(f"Issue with ID {issue_id} not found")

    attachments = [_attachment_summary(a) for a in _nodes(issue.get("attachments"))]
    return _ok(
        {
            "success": True,
            "issueId": issue_id,
            "issueTitle": issue.get("title"),
            "attachments": attachments,
            "totalCount": len(attachments),
        }
    )


async def _handle_add_attachment(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _require_str(arguments, "issueId", "Issue ID is required and must be a string"),
        _require_str(arguments, "url", "URL is required and must be a string"),
        _require_str(arguments, "title", "Title is required and must be a string"),
        _validate_str(arguments.get("subtitle"), "subtitle"),
        _validate_str(arguments.get("icon"), "icon"),
    ):
        if err is not None:
            return err
    if not _is_url(arguments["url"]):
        return _error("Invalid URL format")
    issue_id = arguments["issueId"]

    if await client.issue(issue_id) is None:
        return _error(f"Issue with ID {issue_id} not found")

    data: dict[str, Any] = {"issueId": issue_id, "url": arguments["url"], "title": arguments["title"]}
    if arguments.get("subtitle"):
        data["subtitle"] = arguments["subtitle"]
    if arguments.get("icon"):
        data["iconUrl"] = arguments["icon"]

    payload = await client.create_attachment(data)
    attachment = payload.get("attachment")
    if not payload.get("success") or not isinstance(attachment, dict):
        return _error("Failed to create attachment")
    summary = _attachment_summary(attachment)
    if "icon" not in summary and arguments.get("icon"):
        summary["icon"] = arguments["icon"]
    return _ok({"success": True, "attachment": summary})
