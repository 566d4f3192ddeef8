"""Resource for a single issue label and the issues carrying it."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from linear_mcp.linear import LinearClient
from linear_mcp.mcp_resources.common import JSON_MIME, _fail, _id_arg, _json, _register_all
from linear_mcp.mcp_tools.common import _field, _nodes
from linear_mcp.types.capabilities import ResourceResponse, ResourceTemplateDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

LABEL_TEMPLATE = "linear-label:///{labelId}"


def register(registry: CapabilityRegistry, client: LinearClient) -> None:
    """Register label resources."""
    resources = [
        ResourceTemplateDescriptor(
            uri_template=LABEL_TEMPLATE,
            name="linear-label",
            description="Linear issue label with its issues",
            mime_type=JSON_MIME,
        ),
    ]

    handlers = {
        LABEL_TEMPLATE: _read_label,
    }

    _register_all(registry, client, resources, handlers)


async def _read_label(client: LinearClient, args: dict[str, Any]) -> ResourceResponse:
    label_id = _id_arg(args, "labelId")
    if label_id is None:
        return _fail("Invalid label ID")
    label = await client.issue_label(label_id)
    if label is None:
        return _fail(f"Label with ID {label_id} not found")
    team = label.get("team")
    parent = label.get("parent")
    return _json(
        {
            "label": {
                "id": label["id"],
                "name": label.get("name"),
                "color": label.get("color"),
                "description": label.get("description"),
                "parentId": _field(parent, "id"),
                "parentName": _field(parent),
                "createdAt": label.get("createdAt"),
                "updatedAt": label.get("updatedAt"),
                "archivedAt": label.get("archivedAt"),
            },
            "team": {"id": team.get("id"), "name": team.get("name"), "key": team.get("key")} if isinstance(team, dict) else None,
            "issues": [
                {"id": i.get("id"), "title": i.get("title"), "identifier": i.get("identifier")}
                for i in _nodes(label.get("issues"))
            ],
        }
    )
