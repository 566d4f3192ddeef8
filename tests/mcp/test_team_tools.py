"""Tests for team tools."""

from __future__ import annotations

from unittest.mock import AsyncMock

from linear_mcp.registry import CapabilityRegistry
from tests.conftest import connection, make_issue, make_team
from tests.mcp._helpers import _call, _parse


class TestGetTeams:
    async def test_lists_teams(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.teams.return_value = [
            {"id": "team-1", "name": "Engineering", "key": "ENG", "description": None},
            {"id": "team-2", "name": "Design", "key": "DES", "description": "Pixels"},
        ]
        result = await _call(registry, "linear_get_teams", {})
        assert not result.isError
        assert _parse(result) == [
            {"id": "team-1", "name": "Engineering", "key": "ENG", "description": ""},
            {"id": "team-2", "name": "Design", "key": "DES", "description": "Pixels"},
        ]
        client.teams.assert_awaited_once_with(first=50, include_archived=False)

    async def test_limit_is_capped(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.teams.return_value = []
        await _call(registry, "linear_get_teams", {"limit": 1000, "includeArchived": True})
        client.teams.assert_awaited_once_with(first=250, include_archived=True)

    async def test_bad_limit_falls_back_to_default(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.teams.return_value = []
        await _call(registry, "linear_get_teams", {"limit": "ten"})
        client.teams.assert_awaited_once_with(first=50, include_archived=False)


class TestGetTeam:
    async def test_details(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.team.return_value = make_team()
        data = _parse(await _call(registry, "linear_get_team", {"teamId": "team-1"}))
        assert data["key"] == "ENG"
        assert [s["name"] for s in data["states"]] == ["Todo", "In Progress", "Done"]
        assert data["members"] == [{"id": "user-1", "name": "Ada", "displayName": "ada", "email": "ada@example.com"}]

    async def test_missing_id(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        result = await _call(registry, "linear_get_team", {})
        assert result.isError
        assert _parse(result) == "Error: Team ID is required"
        client.team.assert_not_awaited()

    async def test_not_found(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.team.return_value = None
        result = await _call(registry, "linear_get_team", {"teamId": "nope"})
        assert result.isError
        assert _parse(result) == "Error: Team with ID nope not found"


class TestGetTeamIssues:
    async def test_lists_issues(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.team_issues.return_value = {"id": "team-1", "name": "Engineering", "key": "ENG", "issues": connection(make_issue())}
        data = _parse(await _call(registry, "linear_get_team_issues", {"teamId": "team-1"}))
        assert data["key"] == "ENG"
        assert data["issues"][0]["identifier"] == "ENG-1"
        assert data["issues"][0]["state"] == "Todo"
        assert data["issues"][0]["assignee"] == "Ada"
        client.team_issues.assert_awaited_once_with("team-1", first=50, include_archived=False, filter=None)

    async def test_status_resolves_to_state_filter(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.team.return_value = make_team()
        client.team_issues.return_value = {"id": "team-1", "issues": connection()}
        await _call(
            registry,
            "linear_get_team_issues",
            {"teamId": "team-1", "status": "in progress", "priority": 1, "assigneeId": "user-1"},
        )
        _, kwargs = client.team_issues.call_args
        assert kwargs["filter"] == {
            "state": {"id": {"eq": "state-doing"}},
            "priority": {"eq": 1},
            "assignee": {"id": {"eq": "user-1"}},
        }

    async def test_unknown_status(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.team.return_value = make_team()
        result = await _call(registry, "linear_get_team_issues", {"teamId": "team-1", "status": "Shipped"})
        assert result.isError
        assert _parse(result) == 'Error: Status "Shipped" not found for team Engineering'
        client.team_issues.assert_not_awaited()

    async def test_invalid_priority(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        result = await _call(registry, "linear_get_team_issues", {"teamId": "team-1", "priority": 9})
        assert result.isError
        assert _parse(result) == "Error: priority must be between 0 and 4"

    async def test_team_not_found(self, registry: CapabilityRegistry, client: AsyncMock) -> None:
        client.team_issues.return_value = None
        result = await _call(registry, "linear_get_team_issues", {"teamId": "nope"})
        assert _parse(result) == "Error: Team with ID nope not found"
