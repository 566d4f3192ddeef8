"""Typed contracts for the capability registry and the MCP payloads."""

from __future__ import annotations

from linear_mcp.types.capabilities import (
    PromptArgumentSpec,
    PromptDescriptor,
    ReadResult,
    ResourceContent,
    ResourceDescriptor,
    ResourceResponse,
    ResourceTemplateDescriptor,
    ToolDescriptor,
)

__all__ = [
    "PromptArgumentSpec",
    "PromptDescriptor",
    "ReadResult",
    "ResourceContent",
    "ResourceDescriptor",
    "ResourceResponse",
    "ResourceTemplateDescriptor",
    "ToolDescriptor",
]
