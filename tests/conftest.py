"""Shared pytest fixtures for linear-mcp tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from linear_mcp.capabilities import build_registry
from linear_mcp.dispatch import Dispatcher
from linear_mcp.linear import LinearClient
from linear_mcp.registry import CapabilityRegistry


def make_issue(**overrides: Any) -> dict[str, Any]:
    """A Linear issue node as the GraphQL client returns it."""
    issue: dict[str, Any] = {
        "id": "issue-1",
        "identifier": "ENG-1",
        "number": 1,
        "title": "Crash on save",
        "description": "Saving a draft crashes the editor",
        "priority": 2,
        "url": "https://linear.app/acme/issue/ENG-1",
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-01-02T00:00:00.000Z",
        "state": {"id": "state-todo", "name": "Todo", "type": "unstarted"},
        "assignee": {"id": "user-1", "name": "Ada", "displayName": "ada", "email": "ada@example.com"},
        "team": {"id": "team-1", "name": "Engineering", "key": "ENG"},
        "project": {"id": "project-1", "name": "Editor"},
    }
    issue.update(overrides)
    return issue


def make_team(**overrides: Any) -> dict[str, Any]:
    team: dict[str, Any] = {
        "id": "team-1",
        "name": "Engineering",
        "key": "ENG",
        "description": "Builds the product",
        "color": "#5e6ad2",
        "icon": None,
        "private": False,
        "createdAt": "2023-01-01T00:00:00.000Z",
        "updatedAt": "2023-06-01T00:00:00.000Z",
        "states": {
            "nodes": [
                {"id": "state-todo", "name": "Todo", "color": "#ccc", "type": "unstarted", "position": 1},
                {"id": "state-doing", "name": "In Progress", "color": "#f2c94c", "type": "started", "position": 2},
                {"id": "state-done", "name": "Done", "color": "#5e6ad2", "type": "completed", "position": 3},
            ]
        },
        "members": {"nodes": [{"id": "user-1", "name": "Ada", "displayName": "ada", "email": "ada@example.com"}]},
    }
    team.update(overrides)
    return team


def connection(*nodes: dict[str, Any], has_next: bool = False) -> dict[str, Any]:
    return {"nodes": list(nodes), "pageInfo": {"hasNextPage": has_next, "endCursor": "cursor-1" if has_next else None}}


@pytest.fixture
def client() -> AsyncMock:
    """A LinearClient double: every accessor is an AsyncMock."""
    return AsyncMock(spec=LinearClient)


@pytest.fixture
def registry(client: AsyncMock) -> CapabilityRegistry:
    """Registry with every capability bound to the fake client."""
    return build_registry(client)


@pytest.fixture
def dispatcher(registry: CapabilityRegistry) -> Dispatcher:
    return Dispatcher(registry)
