"""MCP tools for issue relations (blocks / duplicates / related)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.types import CallToolResult

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_tools.common import _error, _nodes, _ok, _register_all, _require_str
from linear_mcp.types.api import RelationsResponse, RelationSummary
from linear_mcp.types.capabilities import ToolDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

VALID_RELATION_TYPES = (
    "blocks",
    "related",
    "duplicate",
    "blocked_by",
    "relates_to",
    "duplicates",
    "is_duplicated_by",
)

# Accepted name -> (Linear relation type, swap source and target).
_LINEAR_RELATION: dict[str, tuple[str, bool]] = {
    "blocks": ("blocks", False),
    "blocked_by": ("blocks", True),
    "related": ("related", False),
    "relates_to": ("related", False),
    "duplicate": ("duplicate", False),
    "duplicates": ("duplicate", False),
    "is_duplicated_by": ("duplicate", True),
}

# How a relation reads from the target issue's side.
INVERSE_RELATION_TYPES = {
    "blocks": "blocked_by",
    "blocked_by": "blocks",
    "duplicate": "is_duplicated_by",
    "duplicates": "is_duplicated_by",
    "is_duplicated_by": "duplicates",
}


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register relation tools."""
    tools = [
        ToolDescriptor(
            name="linear_link_issues",
            description="Create a relationship between issues in Linear",
            input_schema={
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "Source issue ID"},
                    "relatedIssueId": {"type": "string", "description": "Target issue ID"},
                    "type": {
                        "type": "string",
                        "description": f"Relationship type, one of: {', '.join(VALID_RELATION_TYPES)}",
                    },
                },
                "required": ["issueId", "relatedIssueId", "type"],
            },
        ),
        ToolDescriptor(
            name="linear_get_issue_relations",
            description="Get relationships for an issue in Linear",
            input_schema={
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "Issue ID to get relationships for"},
                    "type": {"type": "string", "description": "Filter by relationship type"},
                },
                "required": ["issueId"],
            },
        ),
    ]

    handlers = {
        "linear_link_issues": _handle_link_issues,
        "linear_get_issue_relations": _handle_get_issue_relations,
    }

    _register_all(registry, client, tools, handlers)


def _validate_relation_type(value: Any) -> CallToolResult | None:
    if not isinstance(value, str) or value.lower() not in VALID_RELATION_TYPES:
        return _error(f"Invalid relationship type. Must be one of: {', '.join(VALID_RELATION_TYPES)}")
    return None


def _issue_ref(issue: dict[str, Any]) -> dict[str, Any]:
    return {"id": issue.get("id"), "title": issue.get("title"), "identifier": issue.get("identifier")}


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_link_issues(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    for err in (
        _require_str(arguments, "issueId", "Source issue ID is required and must be a string"),
        _require_str(arguments, "relatedIssueId", "Target issue ID is required and must be a string"),
        _require_str(arguments, "type", "Relationship type is required and must be a string"),
    ):
        if err is not None:
            return err
    type_err = _validate_relation_type(arguments["type"])
    if type_err:
        return type_err

    issue_id = arguments["issueId"]
    related_id = arguments["relatedIssueId"]
    relation_type = arguments["type"].lower()
    if issue_id == related_id:
        return _error("Cannot create a relationship between an issue and itself")

    source = await client.issue(issue_id)
    if source is None:
        return _error(f"Source issue with ID {issue_id} not found")
    target = await client.issue(related_id)
    if target is None:
        return _error(f"Target issue with ID {related_id} not found")

    linear_type, swap = _LINEAR_RELATION[relation_type]
    first, second = (target, source) if swap else (source, target)
    payload = await client.create_issue_relation(
        {"issueId": first["id"], "relatedIssueId": second["id"], "type": linear_type}
    )
    relation = payload.get("issueRelation")
    if not payload.get("success") or not isinstance(relation, dict):
        return _error("Failed to create issue relation")

    return _ok(
        {
            "success": True,
            "relation": {
                "id": relation.get("id"),
                "type": relation_type,
                "sourceIssueId": source["id"],
                "targetIssueId": target["id"],
                "createdAt": relation.get("createdAt"),
            },
            "sourceIssue": _issue_ref(source),
            "targetIssue": _issue_ref(target),
        }
    )


async def _handle_get_issue_relations(client: LinearClient, arguments: dict[str, Any]) -> CallToolResult:
    id_err = _require_str(arguments, "issueId", "Issue ID is required and must be a string")
    if id_err:
        return id_err
    type_filter = arguments.get("type") if isinstance(arguments.get("type"), str) else None
    if type_filter:
        type_err = _validate_relation_type(type_filter)
        if type_err:
            return type_err
        type_filter = type_filter.lower()

    issue_id = arguments["issueId"]
    issue = await client.issue_relations(issue_id)
    if issue is None:
        return _error(f"Issue with ID {issue_id} not found")

    relations: list[RelationSummary] = []
    for node in _nodes(issue.get("relations")):
        relations.append(
            RelationSummary(
                id=node.get("id", ""),
                type=str(node.get("type", "")),
                direction="outgoing",
                createdAt=node.get("createdAt", ""),
                relatedIssue=_issue_ref(node.get("relatedIssue") or {}),
            )
        )
    for node in _nodes(issue.get("inverseRelations")):
        raw_type = str(node.get("type", ""))
        relations.append(
            RelationSummary(
                id=node.get("id", ""),
                type=INVERSE_RELATION_TYPES.get(raw_type, raw_type),
                direction="incoming",
                createdAt=node.get("createdAt", ""),
                relatedIssue=_issue_ref(node.get("issue") or {}),
            )
        )
    if type_filter:
        relations = [r for r in relations if r["type"].lower() == type_filter]

    return _ok(
        RelationsResponse(
            success=True,
            issueId=issue_id,
            issueTitle=issue.get("title", ""),
            issueIdentifier=issue.get("identifier", ""),
            relations=relations,
            totalCount=len(relations),
        )
    )
