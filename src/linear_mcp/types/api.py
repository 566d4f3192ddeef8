"""TypedDicts for the flat JSON payloads MCP tools and resources return.

Linear's GraphQL graph is nested (issue -> state -> name); these shapes
flatten it to what an assistant needs. Keys are camelCase to match the
upstream API field names.

IMPORT CONSTRAINT: types/ modules import only from typing, stdlib, and
each other.
"""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict

# ---------------------------------------------------------------------------
# Shared types
# ---------------------------------------------------------------------------


class PageInfo(TypedDict):
    hasNextPage: bool
    endCursor: str | None


class UserRef(TypedDict):
    id: str
    name: str
    displayName: str


class TeamRef(TypedDict):
    id: str
    name: str
    key: str


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class TeamSummary(TeamRef):
    description: str


class IssueSummary(TypedDict):
    """Issue row used by team/project/search listings."""

    id: str
    identifier: str
    title: str
    description: str | None
    state: str | None
    assignee: str | None
    priority: int
    url: str
    createdAt: str
    updatedAt: str


class AssignedIssue(TypedDict):
    """Issue row in a user's assigned-issues listing."""

    id: str
    number: int
    title: str
    url: str
    priority: int
    state: str | None
    teamName: str | None
    createdAt: str


class ProjectSummary(TypedDict):
    id: str
    name: str
    description: str | None
    status: str | None
    teamId: str | None
    teamName: str | None
    startDate: str | None
    targetDate: str | None
    url: str
    progress: float
    priority: int
    color: str | None
    icon: str | None
    createdAt: str
    updatedAt: str


class LabelSummary(TypedDict):
    id: str
    name: str
    color: str
    description: str
    teamId: str | None
    teamName: str | None
    teamKey: str | None
    createdAt: str
    updatedAt: str
    archived: bool
    archivedAt: str | None
    parentId: str | None
    parentName: str | None


class MilestoneSummary(TypedDict):
    id: str
    name: str
    description: str
    targetDate: str | None
    status: str | None
    sortOrder: float
    projectId: str | None
    projectName: str | None
    createdAt: str
    updatedAt: str
    archivedAt: str | None


class AttachmentSummary(TypedDict):
    id: str
    url: str
    title: str
    subtitle: NotRequired[str | None]
    icon: NotRequired[str | None]
    createdAt: str


class RelationSummary(TypedDict):
    id: str
    type: str
    direction: str
    createdAt: str
    relatedIssue: dict[str, Any]


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class IssueSearchResponse(TypedDict):
    pageInfo: PageInfo
    issues: list[dict[str, Any]]


class UserIssuesResponse(TypedDict):
    user: UserRef
    pageInfo: PageInfo
    issues: list[AssignedIssue]


class LabelsResponse(TypedDict):
    labels: list[LabelSummary]
    pagination: dict[str, Any]
    team: NotRequired[TeamRef]


class MilestonesResponse(TypedDict):
    milestones: list[MilestoneSummary]
    pageInfo: PageInfo
    totalCount: int


class RelationsResponse(TypedDict):
    success: bool
    issueId: str
    issueTitle: str
    issueIdentifier: str
    relations: list[RelationSummary]
    totalCount: int
