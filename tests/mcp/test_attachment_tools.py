"""Tests for attachment tools."""

from __future__ import annotations

from unittest.mock import AsyncMock

from linear_mcp.registry import CapabilityRegistry
from tests.conftest import connection, make_issue
from tests.mcp._helpers import _call, _parse


class TestGetAttachments:
    async def test_lists(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.issue_attachments.return_value = {
            "id": "issue-1",
            "title": "Crash on save",
            "attachments": connection(
                {
                    "id": "att-1",
                    "url": "https://github.com/acme/editor/pull/1",
                    "title": "PR #1",
                    "subtitle": "Open",
                    "iconUrl": None,
                    "createdAt": "2024-01-03T00:00:00.000Z",
                }
            ),
        }
        data = _parse(await _call(registry, "linear_get_attachments", {"issueId": "issue-1"}))
        assert data["success"] is True
        assert data["issueTitle"] == "Crash on save"
        assert data["totalCount"] == 1
        assert data["attachments"][0] == {
            "id": "att-1",
            "url": "https://github.com/acme/editor/pull/1",
            "title": "PR #1",
            "createdAt": "2024-01-03T00:00:00.000Z",
            "subtitle": "Open",
        }

    async def test_not_found(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.issue_attachments.return_value = None
        result = await _call(registry, "linear_get_attachments", {"issueId": "ghost"})
        assert _parse(result) == "Error: Issue with ID ghost not found"


class TestAddAttachment:
    async def test_adds(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.issue.return_value = make_issue()
        client.create_attachment.return_value = {
            "success": True,
            "attachment": {"id": "att-1", "url": "https://example.com/spec", "title": "Design", "createdAt": "2024-01-03"},
        }
        data = _parse(
            await _call(
                registry,
                "linear_add_attachment",
                {"issueId": "issue-1", "url": "https://example.com/spec", "title": "Design", "icon": "https://example.com/i.png"},
            )
        )
        assert data["success"] is True
        assert data["attachment"]["icon"] == "https://example.com/i.png"
        client.create_attachment.assert_awaited_once_with(
            {
                "issueId": "issue-1",
                "url": "https://example.com/spec",
                "title": "Design",
                "iconUrl": "https://example.com/i.png",
            }
        )

    async def test_invalid_url(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        result = await _call(registry, "linear_add_attachment", {"issueId": "issue-1", "url": "not a url", "title": "x"})
        assert _parse(result) == "Error: Invalid URL format"
        client.issue.assert_not_awaited()

    async def test_requires_title(self, registry: CapabilityRegistry) -> None:
        result = await _call(registry, "linear_add_attachment", {"issueId": "issue-1", "url": "https://example.com"})
        assert _parse(result) == "Error: Title is required and must be a string"

    async def test_issue_not_found(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.issue.return_value = None
        result = await _call(registry, "linear_add_attachment", {"issueId": "ghost", "url": "https://example.com", "title": "x"})
        assert _parse(result) == "Error: Issue with ID ghost not found"
        client.create_attachment.assert_not_awaited()
