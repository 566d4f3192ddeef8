"""Assembles the capability registry from every tool, resource, and prompt module."""

from __future__ import annotations

import logging

from linear_mcp import mcp_prompts
from linear_mcp.linear import LinearClient
from linear_mcp.mcp_resources import issues as issue_resources
from linear_mcp.mcp_resources import labels as label_resources
from linear_mcp.mcp_resources import projects as project_resources
from linear_mcp.mcp_resources import teams as team_resources
from linear_mcp.mcp_resources import users as user_resources
from linear_mcp.mcp_resources import viewer as viewer_resources
from linear_mcp.mcp_tools import attachments, issues, labels, milestones, projects, relations, teams, users
from linear_mcp.registry import CapabilityRegistry

logger = logging.getLogger(__name__)

_TOOL_MODULES = (teams, issues, relations, projects, labels, milestones, attachments, users)
_RESOURCE_MODULES = (
    viewer_resources,
    issue_resources,
    team_resources,
    project_resources,
    user_resources,
    label_resources,
)


def build_registry(client: LinearClient, registry: CapabilityRegistry | None = None) -> CapabilityRegistry:
    """Register every capability against *client* and return the registry."""
    registry = registry if registry is not None else CapabilityRegistry()
    for module in _TOOL_MODULES:
        module.register(registry, client)
    for module in _RESOURCE_MODULES:
        module.register(registry, client)
    mcp_prompts.register(registry)
    logger.debug(
        "Registered %d tools, %d resources, %d resource templates, %d prompts",
        len(registry.get_all_tools()),
        len(registry.get_all_resources()),
        len(registry.get_resource_templates()),
        len(registry.get_all_prompts()),
    )
    return registry
