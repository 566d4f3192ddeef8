"""Protocol dispatch: turns MCP requests into registry lookups and handler calls.

The dispatcher is the only layer that converts registry values into
``mcp.types`` models. Every failure is reported inside the protocol
result; nothing a handler raises reaches the transport.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from mcp.types import (
    CallToolResult,
    GetPromptResult,
    Prompt,
    ReadResourceResult,
    Resource,
    ResourceTemplate,
    TextContent,
    Tool,
)

from linear_mcp.registry import CapabilityRegistry


def _error_result(message: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=f"Error: {message}")], isError=True)


class Dispatcher:
    """Routes list/call/read/get requests through a :class:`CapabilityRegistry`."""

    def __init__(self, registry: CapabilityRegistry, logger: logging.Logger | None = None) -> None:
        self.registry = registry
        self._logger = logger or logging.getLogger(__name__)

    # -- listings -------------------------------------------------------------

    def list_tools(self) -> list[Tool]:
        return [t.to_mcp() for t in self.registry.get_all_tools()]

    def list_prompts(self) -> list[Prompt]:
        return [p.to_mcp() for p in self.registry.get_all_prompts()]

    def list_resources(self) -> list[Resource]:
        return [r.to_mcp() for r in self.registry.get_all_resources()]

    def list_resource_templates(self) -> list[ResourceTemplate]:
        return [t.to_mcp() for t in self.registry.get_resource_templates()]

    # -- tools ----------------------------------------------------------------

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> CallToolResult:
        arguments = arguments or {}
        handler = self.registry.get_tool_handler(name)
        if handler is None:
            self._logger.warning("tool_error", extra={"tool": name, "args_data": arguments, "error": "unknown tool"})
            return _error_result(f"Unknown tool: {name}")

        t0 = time.monotonic()
        try:
            result = await handler(arguments)
        except Exception as exc:
            self._logger.error("tool_error", extra={"tool": name, "args_data": arguments}, exc_info=True)
            return _error_result(str(exc) or f"Unknown error calling tool: {name}")
        duration_ms = round((time.monotonic() - t0) * 1000, 1)
        self._logger.info("tool_call", extra={"tool": name, "args_data": arguments, "duration_ms": duration_ms})
        return result

    # -- resources --------------------------------------------------------------

    async def read_resource(self, uri: str) -> ReadResourceResult:
        t0 = time.monotonic()
        result = await self.registry.read_resource(uri)
        duration_ms = round((time.monotonic() - t0) * 1000, 1)
        if result.is_error or result.content is None:
            self._logger.warning(
                "resource_error",
                extra={"uri": uri, "error": result.error_message, "duration_ms": duration_ms},
            )
            # The protocol model has no error fields; the extras ride along on the envelope.
            return ReadResourceResult(contents=[], isError=True, errorMessage=result.error_message)  # type: ignore[call-arg]
        self._logger.info("resource_read", extra={"uri": uri, "duration_ms": duration_ms})
        return ReadResourceResult(contents=[result.content.to_mcp()])

    # -- prompts ----------------------------------------------------------------

    def get_prompt(self, name: str, arguments: dict[str, str] | None) -> GetPromptResult:
        descriptor = self.registry.get_prompt_by_name(name)
        handler = self.registry.get_prompt_handler(name)
        if descriptor is None or handler is None:
            return GetPromptResult(messages=[], isError=True, errorMessage=f"Prompt not found: {name}")  # type: ignore[call-arg]
        try:
            messages = handler(dict(arguments or {}))
        except Exception as exc:
            self._logger.error("prompt_error", extra={"tool": name, "args_data": arguments}, exc_info=True)
            return GetPromptResult(  # type: ignore[call-arg]
                messages=[],
                isError=True,
                errorMessage=f"Error generating prompt: {exc}",
            )
        return GetPromptResult(description=descriptor.description, messages=messages)
