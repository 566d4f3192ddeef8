"""Capability registry: tools, prompts, and resources keyed by name or URI.

Capability modules register (descriptor, handler) pairs at start-up via
``linear_mcp.capabilities.build_registry``; the dispatch layer later
resolves protocol requests through the accessors below. Registration is
last-write-wins and never warns, so tests can override a capability by
registering the same key again.

Each registration is a single dict assignment of an immutable entry, so a
reader suspended in ``read_resource`` can never observe a descriptor
without its handler. Accessors hand out deep copies of descriptors; callers
cannot alter registry state through a returned reference.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import replace
from functools import lru_cache
from typing import Generic, TypeVar
from urllib.parse import unquote

from linear_mcp.types.capabilities import (
    AnyResourceDescriptor,
    Entry,
    PromptDescriptor,
    PromptHandler,
    ReadResult,
    ResourceArgs,
    ResourceContent,
    ResourceDescriptor,
    ResourceHandler,
    ResourceResponse,
    ResourceTemplateDescriptor,
    ToolDescriptor,
    ToolHandler,
)

logger = logging.getLogger(__name__)

_D = TypeVar("_D", ToolDescriptor, PromptDescriptor, AnyResourceDescriptor)
_H = TypeVar("_H")


class _KeyedRegistry(Generic[_D, _H]):
    """One capability kind: key -> (descriptor, handler)."""

    kind = "capability"

    def __init__(self) -> None:
        self._entries: dict[str, Entry[_D, _H]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def register(self, descriptor: _D, handler: _H) -> _D:
        """Insert or overwrite the entry under ``descriptor.key``.

        Returns *descriptor* unchanged so call sites can chain.
        """
        key = descriptor.key
        if not isinstance(key, str) or not key:
            msg = f"{self.kind} key must be a non-empty string, got {key!r}"
            raise ValueError(msg)
        if key in self._entries:
            logger.debug("Replacing %s registration for %s", self.kind, key)
        self._entries[key] = Entry(copy.deepcopy(descriptor), handler)
        return descriptor

    def get_all(self) -> list[_D]:
        """Snapshot of every descriptor, in registration order."""
        return [copy.deepcopy(entry.descriptor) for entry in self._entries.values()]

    def get(self, key: str) -> _D | None:
        entry = self._entries.get(key)
        return copy.deepcopy(entry.descriptor) if entry is not None else None

    def get_handler(self, key: str) -> _H | None:
        entry = self._entries.get(key)
        return entry.handler if entry is not None else None


class ToolRegistry(_KeyedRegistry[ToolDescriptor, ToolHandler]):
    kind = "tool"


class PromptRegistry(_KeyedRegistry[PromptDescriptor, PromptHandler]):
    kind = "prompt"


class ResourceRegistry(_KeyedRegistry[AnyResourceDescriptor, ResourceHandler]):
    """Literal-URI resources and URI templates share one key space."""

    kind = "resource"

    def resources(self) -> list[ResourceDescriptor]:
        return [d for d in self.get_all() if isinstance(d, ResourceDescriptor)]

    def templates(self) -> list[ResourceTemplateDescriptor]:
        return [d for d in self.get_all() if isinstance(d, ResourceTemplateDescriptor)]

    def match_template(self, uri: str) -> tuple[ResourceHandler, ResourceArgs] | None:
        """Find the first registered template that matches *uri* in full.

        Templates are tried in registration order, so when two overlap the
        one registered first wins. Returns the template's handler and the
        extracted variables.
        """
        for key, entry in self._entries.items():
            if not isinstance(entry.descriptor, ResourceTemplateDescriptor):
                continue
            m = _compile_template(key).fullmatch(uri)
            if m is not None:
                return entry.handler, {name: unquote(value) for name, value in m.groupdict().items()}
        return None


# ---------------------------------------------------------------------------
# URI templates (RFC 6570 level 1: simple ``{var}`` expansion only)
# ---------------------------------------------------------------------------

_TEMPLATE_VAR = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


@lru_cache(maxsize=256)
def _compile_template(template: str) -> re.Pattern[str]:
    """Turn ``thing:///{id}/issues`` into a regex with one group per variable.

    Each variable matches a single path segment. A repeated variable must
    match the same text every time it appears.
    """
    parts: list[str] = []
    seen: set[str] = set()
    pos = 0
    for m in _TEMPLATE_VAR.finditer(template):
        name = m.group(1)
        parts.append(re.escape(template[pos : m.start()]))
        parts.append(f"(?P={name})" if name in seen else f"(?P<{name}>[^/]+)")
        seen.add(name)
        pos = m.end()
    parts.append(re.escape(template[pos:]))
    return re.compile("".join(parts))


# ---------------------------------------------------------------------------
# Aggregate registry
# ---------------------------------------------------------------------------


class CapabilityRegistry:
    """The three capability registries plus the resource reader.

    Construct one per server (or per test) and pass it to every
    capability module's ``register`` function.
    """

    def __init__(self) -> None:
        self._tools = ToolRegistry()
        self._prompts = PromptRegistry()
        self._resources = ResourceRegistry()

    # -- registration -------------------------------------------------------

    def register_tool(self, tool: ToolDescriptor, handler: ToolHandler) -> ToolDescriptor:
        return self._tools.register(tool, handler)

    def register_prompt(self, prompt: PromptDescriptor, handler: PromptHandler) -> PromptDescriptor:
        return self._prompts.register(prompt, handler)

    def register_resource(self, resource: AnyResourceDescriptor, handler: ResourceHandler) -> AnyResourceDescriptor:
        return self._resources.register(resource, handler)

    # -- tools --------------------------------------------------------------

    def get_all_tools(self) -> list[ToolDescriptor]:
        return self._tools.get_all()

    def get_tool_by_name(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def get_tool_handler(self, name: str) -> ToolHandler | None:
        return self._tools.get_handler(name)

    # -- prompts ------------------------------------------------------------

    def get_all_prompts(self) -> list[PromptDescriptor]:
        return self._prompts.get_all()

    def get_prompt_by_name(self, name: str) -> PromptDescriptor | None:
        return self._prompts.get(name)

    def get_prompt_handler(self, name: str) -> PromptHandler | None:
        return self._prompts.get_handler(name)

    # -- resources ----------------------------------------------------------

    def get_all_resources(self) -> list[ResourceDescriptor]:
        return self._resources.resources()

    def get_resource_templates(self) -> list[ResourceTemplateDescriptor]:
        return self._resources.templates()

    def get_resource_by_uri(self, uri: str) -> AnyResourceDescriptor | None:
        return self._resources.get(uri)

    def get_resource_handler(self, uri: str) -> ResourceHandler | None:
        """Exact-key lookup. Template keys resolve only by their template string."""
        return self._resources.get_handler(uri)

    async def read_resource(self, uri: str, args: ResourceArgs | None = None) -> ReadResult:
        """Resolve *uri*, invoke its handler once, and normalize the outcome.

        Exact keys are tried first; otherwise the URI is matched against the
        registered templates and the template variables are merged under the
        caller's *args*. Never raises.
        """
        call_args: ResourceArgs = dict(args) if args else {}
        handler = self._resources.get_handler(uri)
        if handler is None:
            matched = self._resources.match_template(uri)
            if matched is None:
                return ReadResult(is_error=True, error_message=f"Resource not found: {uri}")
            handler, variables = matched
            call_args = {**variables, **call_args}

        try:
            response = await handler(call_args)
        except Exception as exc:
            logger.warning("Resource handler for %s raised", uri, exc_info=True)
            return ReadResult(is_error=True, error_message=str(exc) or f"Unknown error reading resource: {uri}")

        if not isinstance(response, ResourceResponse):
            logger.warning("Resource handler for %s returned %s, not a ResourceResponse", uri, type(response).__name__)
            return ReadResult(is_error=True, error_message=f"Unknown error reading resource: {uri}")
        if response.is_error:
            return ReadResult(is_error=True, error_message=response.error_message or f"Error reading resource: {uri}")

        content = response.data
        if not isinstance(content, ResourceContent) or (not content.text and not content.blob):
            logger.warning("Resource handler for %s returned neither text nor blob", uri)
            return ReadResult(
                is_error=True,
                error_message=f"Invalid resource content: missing both text and blob for {uri}",
            )
        if not content.uri:
            content = replace(content, uri=uri)
        return ReadResult(content=content, is_error=False)
