"""Capability descriptors, handler shapes, and resource envelopes.

Descriptors are frozen value types. Each converts to its ``mcp.types``
counterpart only at the protocol boundary (``to_mcp``), so the registry
never depends on pydantic URL validation of its keys.

IMPORT CONSTRAINT: this module imports only from typing, stdlib and
``mcp.types``. Never import from registry.py or the capability modules.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from mcp.types import (
    BlobResourceContents,
    CallToolResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    Resource,
    ResourceTemplate,
    TextResourceContents,
    Tool,
)

# ---------------------------------------------------------------------------
# Handler shapes
# ---------------------------------------------------------------------------

ToolArgs = dict[str, Any]
PromptArgs = dict[str, str]
ResourceArgs = dict[str, Any]

ToolHandler = Callable[[ToolArgs], Awaitable[CallToolResult]]
PromptHandler = Callable[[PromptArgs], list[PromptMessage]]
ResourceHandler = Callable[[ResourceArgs], Awaitable["ResourceResponse"]]


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str | None = None
    input_schema: Mapping[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})

    @property
    def key(self) -> str:
        return self.name

    def to_mcp(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=dict(self.input_schema))


@dataclass(frozen=True)
class PromptArgumentSpec:
    name: str
    description: str | None = None
    required: bool = False


@dataclass(frozen=True)
class PromptDescriptor:
    name: str
    description: str | None = None
    arguments: tuple[PromptArgumentSpec, ...] = ()

    @property
    def key(self) -> str:
        return self.name

    def to_mcp(self) -> Prompt:
        return Prompt(
            name=self.name,
            description=self.description,
            arguments=[PromptArgument(name=a.name, description=a.description, required=a.required) for a in self.arguments],
        )


@dataclass(frozen=True)
class ResourceDescriptor:
    """A resource addressed by a literal URI."""

    uri: str
    name: str
    description: str | None = None
    mime_type: str | None = None

    @property
    def key(self) -> str:
        return self.uri

    def to_mcp(self) -> Resource:
        return Resource(
            uri=self.uri,  # type: ignore[arg-type]
            name=self.name,
            description=self.description,
            mimeType=self.mime_type,
        )


@dataclass(frozen=True)
class ResourceTemplateDescriptor:
    """A resource addressed by an RFC 6570 URI template such as ``thing:///{id}``."""

    uri_template: str
    name: str
    description: str | None = None
    mime_type: str | None = None

    @property
    def key(self) -> str:
        return self.uri_template

    def to_mcp(self) -> ResourceTemplate:
        return ResourceTemplate(
            uriTemplate=self.uri_template,
            name=self.name,
            description=self.description,
            mimeType=self.mime_type,
        )


AnyResourceDescriptor = ResourceDescriptor | ResourceTemplateDescriptor


# ---------------------------------------------------------------------------
# Registry entries: descriptor and handler always travel together
# ---------------------------------------------------------------------------

_D = TypeVar("_D")
_H = TypeVar("_H")


@dataclass(frozen=True)
class Entry(Generic[_D, _H]):
    descriptor: _D
    handler: _H


ToolEntry = Entry[ToolDescriptor, ToolHandler]
PromptEntry = Entry[PromptDescriptor, PromptHandler]
ResourceEntry = Entry[AnyResourceDescriptor, ResourceHandler]


# ---------------------------------------------------------------------------
# Resource envelopes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResourceContent:
    """Content envelope for a resource read.

    Exactly one of ``text`` or ``blob`` (base64) is expected. ``uri`` may be
    left unset by handlers; the reader stamps the requested URI.
    """

    uri: str | None = None
    mime_type: str | None = None
    text: str | None = None
    blob: str | None = None

    def to_mcp(self) -> TextResourceContents | BlobResourceContents:
        if self.text:
            return TextResourceContents(uri=self.uri, mimeType=self.mime_type, text=self.text)  # type: ignore[arg-type]
        return BlobResourceContents(uri=self.uri, mimeType=self.mime_type, blob=self.blob or "")  # type: ignore[arg-type]


@dataclass(frozen=True)
class ResourceResponse:
    """What a resource handler returns."""

    data: ResourceContent | None = None
    is_error: bool = False
    error_message: str | None = None


@dataclass(frozen=True)
class ReadResult:
    """Normalized outcome of ``CapabilityRegistry.read_resource``."""

    content: ResourceContent | None = None
    is_error: bool = False
    error_message: str | None = None
