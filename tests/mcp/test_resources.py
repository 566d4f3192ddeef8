"""Tests for viewer, issue, attachment, label, and user resources."""

from __future__ import annotations

from unittest.mock import AsyncMock

from linear_mcp.registry import CapabilityRegistry
from tests.conftest import connection, make_issue
from tests.mcp._helpers import _read

_VIEWER = {"id": "user-1", "name": "Ada", "displayName": "ada", "email": "ada@example.com", "active": True}


class TestOrganizationAndViewer:
    async def test_organization(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.organization.return_value = {"id": "org-1", "name": "Acme", "urlKey": "acme", "logoUrl": None, "extra": 1}
        assert await _read(registry, "linear-organization:") == {
            "id": "org-1",
            "name": "Acme",
            "urlKey": "acme",
            "logoUrl": None,
        }

    async def test_viewer(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.viewer.return_value = {**_VIEWER, "admin": True}
        assert await _read(registry, "linear-viewer:") == _VIEWER

    async def test_viewer_missing(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.viewer.return_value = None
        result = await registry.read_resource("linear-viewer:")
        assert result.is_error
        assert result.error_message == "Failed to fetch viewer"

    async def test_viewer_teams(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.viewer_teams.return_value = {
            **_VIEWER,
            "teams": connection({"id": "team-1", "name": "Engineering", "key": "ENG", "description": None}),
        }
        data = await _read(registry, "linear-viewer:///teams")
        assert data["user"] == {"id": "user-1", "name": "Ada", "displayName": "ada"}
        assert data["teams"][0]["key"] == "ENG"

    async def test_viewer_projects_dedupes_and_filters_membership(
        self, registry: CapabilityRegistry, client: AsyncMock
    ) -> None:
        shared = {
            "id": "project-1",
            "name": "Editor",
            "status": None,
            "members": connection({"id": "user-1"}),
        }
        other = {"id": "project-2", "name": "Billing", "status": {"name": "Started"}, "members": connection({"id": "user-9"})}
        client.viewer_projects.return_value = {
            **_VIEWER,
            "teams": connection(
                {"id": "team-1", "projects": connection(shared, other)},
                {"id": "team-2", "projects": connection(shared)},
            ),
        }
        data = await _read(registry, "linear-viewer:///projects")
        assert [p["id"] for p in data["projects"]] == ["project-1"]
        assert data["projects"][0]["state"] == "Unknown"

    async def test_viewer_assigned(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.user_assigned_issues.return_value = {**_VIEWER, "assignedIssues": connection(make_issue())}
        data = await _read(registry, "linear-viewer:///assigned")
        assert data["assignedIssues"][0]["status"] == "Todo"
        client.user_assigned_issues.assert_awaited_once_with(None, first=50)


class TestIssueResources:
    async def test_issue_with_comments(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.issue.return_value = make_issue(
            comments=connection(
                {
                    "id": "comment-1",
                    "body": "Repro attached",
                    "createdAt": "2024-01-03T00:00:00.000Z",
                    "user": {"id": "user-2", "name": "Grace", "displayName": "grace"},
                }
            )
        )
        data = await _read(registry, "linear-issue:///issue-1")
        assert data["status"] == "Todo"
        assert data["assignee"] == {"id": "user-1", "name": "Ada", "displayName": "ada"}
        assert data["comments"][0]["user"]["name"] == "Grace"
        client.issue.assert_awaited_once_with("issue-1")

    async def test_issue_not_found(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.issue.return_value = None
        result = await registry.read_resource("linear-issue:///ghost")
        assert result.error_message == "Issue with ID ghost not found"

    async def test_caller_args_override_uri_variables(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        result = await registry.read_resource("linear-issue:///issue-1", {"issueId": ""})
        assert result.is_error
        assert result.error_message == "Invalid issue ID"
        client.issue.assert_not_awaited()

    async def test_attachment(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.attachment.return_value = {
            "id": "att-1",
            "url": "https://example.com/spec",
            "title": "Design",
            "subtitle": None,
            "sourceType": "unknown",
            "issue": {"id": "issue-1", "title": "Crash on save", "identifier": "ENG-1"},
        }
        data = await _read(registry, "linear-attachment:///att-1")
        assert data["attachment"]["title"] == "Design"
        assert data["issue"]["identifier"] == "ENG-1"


class TestLabelResource:
    async def test_label_with_issues(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.issue_label.return_value = {
            "id": "label-1",
            "name": "Crash",
            "color": "#eb5757",
            "parent": {"id": "label-0", "name": "Bug"},
            "team": {"id": "team-1", "name": "Engineering", "key": "ENG"},
            "issues": connection(make_issue()),
        }
        data = await _read(registry, "linear-label:///label-1")
        assert data["label"]["parentName"] == "Bug"
        assert data["team"]["key"] == "ENG"
        assert data["issues"] == [{"id": "issue-1", "title": "Crash on save", "identifier": "ENG-1"}]

    async def test_workspace_label_has_no_team(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.issue_label.return_value = {"id": "label-1", "name": "Bug", "team": None}
        data = await _read(registry, "linear-label:///label-1")
        assert data["team"] is None
        assert data["issues"] == []


class TestUserResources:
    async def test_assigned_includes_refs(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.user_assigned_issues.return_value = {**_VIEWER, "assignedIssues": connection(make_issue(project=None))}
        data = await _read(registry, "linear-user:///user-1/assigned")
        row = data["issues"][0]
        assert row["project"] is None
        assert row["team"] == {"id": "team-1", "name": "Engineering", "key": "ENG"}
        client.user_assigned_issues.assert_awaited_once_with("user-1", first=50)

    async def test_issues(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.user_assigned_issues.return_value = {**_VIEWER, "assignedIssues": connection(make_issue())}
        data = await _read(registry, "linear-user:///user-1/issues")
        assert "team" not in data["issues"][0]
        assert data["user"]["displayName"] == "ada"

    async def test_unknown_user(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.user_assigned_issues.return_value = None
        result = await registry.read_resource("linear-user:///ghost/issues")
        assert result.error_message == "User with ID ghost not found"
