"""Helpers shared across MCP resource modules."""

from __future__ import annotations

import functools
import json
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from linear_mcp.linear import LinearClient
from linear_mcp.types.capabilities import AnyResourceDescriptor, ResourceArgs, ResourceContent, ResourceResponse

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

ClientResourceHandler = Callable[[LinearClient, ResourceArgs], Awaitable[ResourceResponse]]

JSON_MIME = "application/json"


def _register_all(
    registry: CapabilityRegistry,
    client: LinearClient,
    resources: Iterable[AnyResourceDescriptor],
    handlers: Mapping[str, ClientResourceHandler],
) -> None:
    for resource in resources:
        registry.register_resource(resource, functools.partial(handlers[resource.key], client))


def _json(data: object) -> ResourceResponse:
    """Successful JSON read. The reader stamps the requested URI onto the content."""
    return ResourceResponse(data=ResourceContent(mime_type=JSON_MIME, text=json.dumps(data, indent=2, default=str)))


def _fail(message: str) -> ResourceResponse:
    return ResourceResponse(is_error=True, error_message=message)


def _id_arg(args: ResourceArgs, key: str) -> str | None:
    value = args.get(key)
    return value if isinstance(value, str) and value else None


def _status_counts(values: Iterable[Any]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for value in values:
        label = str(value) if value is not None else "Unknown"
        counts[label] = counts.get(label, 0) + 1
    return counts
