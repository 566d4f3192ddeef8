"""Fixtures for MCP capability tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from linear_mcp.linear import LinearAPIError


@pytest.fixture
def not_found_error() -> LinearAPIError:
    return LinearAPIError("Entity not found: Issue", status_code=200)


@pytest.fixture
def failing_client(client: AsyncMock) -> AsyncMock:
    """Fake client whose every read fails upstream."""
    error = LinearAPIError("Linear API returned HTTP 500", status_code=500)
    for name in ("team", "teams", "issue", "issue_search", "project", "projects", "viewer"):
        getattr(client, name).side_effect = error
    return client
