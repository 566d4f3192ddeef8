"""Async client for the Linear GraphQL API.

Thin by design: each accessor sends one GraphQL document and returns the
selected node as a plain dict (``None`` when Linear reports the entity
missing). Reshaping for MCP output happens in the tool and resource
modules, not here.

Usage::

    async with LinearClient(api_key) as client:
        teams = await client.teams(first=10)
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

from linear_mcp.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, Settings

logger = logging.getLogger(__name__)

_NOT_FOUND_MARKER = "Entity not found"


class LinearAPIError(Exception):
    """Transport failure, non-2xx response, or a GraphQL ``errors`` payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return _NOT_FOUND_MARKER in str(self)


# ---------------------------------------------------------------------------
# Fragments
# ---------------------------------------------------------------------------

_USER_REF = """
fragment UserRef on User { id name displayName }
"""

_ISSUE_FIELDS = """
fragment IssueFields on Issue {
  id identifier number title description priority url createdAt updatedAt
  state { id name type }
  assignee { id name displayName email }
  team { id name key }
  project { id name }
}
"""

_PROJECT_FIELDS = """
fragment ProjectFields on Project {
  id name description url color icon progress priority
  startDate targetDate createdAt updatedAt
  status { id name color type }
  teams(first: 1) { nodes { id name key } }
}
"""

_LABEL_FIELDS = """
fragment LabelFields on IssueLabel {
  id name color description createdAt updatedAt archivedAt
  team { id name key }
  parent { id name }
}
"""

_MILESTONE_FIELDS = """
fragment MilestoneFields on ProjectMilestone {
  id name description targetDate status sortOrder createdAt updatedAt archivedAt
  project { id name }
}
"""

_ATTACHMENT_FIELDS = """
fragment AttachmentFields on Attachment {
  id url title subtitle sourceType createdAt updatedAt
}
"""

_ISSUE_REF = """
fragment IssueRef on Issue { id title identifier }
"""

_PAGE_INFO = "pageInfo { hasNextPage endCursor }"


class LinearClient:
    """GraphQL over ``httpx.AsyncClient``; the API key is sent verbatim as ``Authorization``."""

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self._http = httpx.AsyncClient(
            headers={"Authorization": api_key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> LinearClient:
        return cls(settings.api_key, api_url=settings.api_url, timeout=settings.timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> LinearClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # -- transport ----------------------------------------------------------

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """POST one GraphQL document and return its ``data`` object.

        Raises :class:`LinearAPIError` on transport errors, non-2xx status,
        or when the response carries ``errors``.
        """
        payload = {"query": query, "variables": {k: v for k, v in (variables or {}).items() if v is not None}}
        try:
            response = await self._http.post(self.api_url, json=payload)
        except httpx.HTTPError as exc:
            msg = f"Linear API request failed: {exc}"
            raise LinearAPIError(msg) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            first = errors[0] if isinstance(errors, list) and errors else {}
            message = first.get("message") if isinstance(first, dict) else None
            raise LinearAPIError(message or "Unknown GraphQL error", status_code=response.status_code)
        if response.is_error:
            msg = f"Linear API returned HTTP {response.status_code}"
            raise LinearAPIError(msg, status_code=response.status_code)
        if not isinstance(body, dict) or not isinstance(body.get("data"), dict):
            msg = "Linear API returned a malformed response"
            raise LinearAPIError(msg, status_code=response.status_code)
        data: dict[str, Any] = body["data"]
        return data

    async def _node(self, query: str, field: str, variables: dict[str, Any] | None = None) -> dict[str, Any] | None:
        try:
            data = await self.execute(query, variables)
        except LinearAPIError as exc:
            if exc.is_not_found:
                logger.debug("Linear reported %s missing: %s", field, exc)
                return None
            raise
        node = data.get(field)
        return node if isinstance(node, dict) else None

    async def _mutate(self, query: str, field: str, variables: dict[str, Any]) -> dict[str, Any]:
        data = await self.execute(query, variables)
        payload = data.get(field)
        if not isinstance(payload, dict):
            msg = f"Linear API returned no payload for {field}"
            raise LinearAPIError(msg)
        return payload

    # -- organization / users -------------------------------------------------

    async def viewer(self) -> dict[str, Any] | None:
        query = "query Viewer { viewer { id name displayName email active admin avatarUrl url } }"
        return await self._node(query, "viewer")

    async def viewer_teams(self) -> dict[str, Any] | None:
        query = """
        query ViewerTeams {
          viewer { ...UserRef teams { nodes { id name key description icon color } } }
        }
        """ + _USER_REF
        return await self._node(query, "viewer")

    async def viewer_projects(self, *, team_limit: int = 5, project_limit: int = 20) -> dict[str, Any] | None:
        """The viewer plus the projects of their first teams, with member ids for filtering."""
        query = """
        query ViewerProjects($teams: Int, $projects: Int) {
          viewer {
            ...UserRef
            teams(first: $teams) {
              nodes {
                projects(first: $projects) {
                  nodes {
                    id name description startDate targetDate
                    status { name }
                    lead { ...UserRef }
                    members { nodes { id } }
                  }
                }
              }
            }
          }
        }
        """ + _USER_REF
        return await self._node(query, "viewer", {"teams": team_limit, "projects": project_limit})

    async def organization(self) -> dict[str, Any] | None:
        query = "query Organization { organization { id name urlKey logoUrl } }"
        return await self._node(query, "organization")

    async def user(self, user_id: str) -> dict[str, Any] | None:
        query = "query User($id: String!) { user(id: $id) { id name displayName email active admin avatarUrl url } }"
        return await self._node(query, "user", {"id": user_id})

    async def user_assigned_issues(
        self,
        user_id: str | None = None,
        *,
        first: int = 50,
        include_archived: bool = False,
    ) -> dict[str, Any] | None:
        """A user (the viewer when *user_id* is None) with ``assignedIssues``."""
        selection = """
            ...UserRef
            assignedIssues(first: $first, includeArchived: $includeArchived) {
              nodes { ...IssueFields }
              %s
            }
        """ % _PAGE_INFO
        if user_id is None:
            query = "query ViewerIssues($first: Int, $includeArchived: Boolean) { viewer { %s } }" % selection
            field = "viewer"
        else:
            query = (
                "query UserIssues($id: String!, $first: Int, $includeArchived: Boolean) { user(id: $id) { %s } }"
                % selection
            )
            field = "user"
        variables = {"id": user_id, "first": first, "includeArchived": include_archived}
        return await self._node(query + _USER_REF + _ISSUE_FIELDS, field, variables)

    # -- teams ------------------------------------------------------------------

    async def teams(self, *, first: int = 50, include_archived: bool = False) -> list[dict[str, Any]]:
        query = """
        query Teams($first: Int, $includeArchived: Boolean) {
          teams(first: $first, includeArchived: $includeArchived) { nodes { id name key description } }
        }
        """
        data = await self.execute(query, {"first": first, "includeArchived": include_archived})
        nodes: list[dict[str, Any]] = (data.get("teams") or {}).get("nodes") or []
        return nodes

    async def team(self, team_id: str) -> dict[str, Any] | None:
        query = """
        query Team($id: String!) {
          team(id: $id) {
            id name key description color icon private createdAt updatedAt
            states { nodes { id name color type position } }
            members { nodes { id name displayName email } }
          }
        }
        """
        return await self._node(query, "team", {"id": team_id})

    async def team_issues(
        self,
        team_id: str,
        *,
        first: int = 50,
        include_archived: bool = False,
        filter: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        query = """
        query TeamIssues($id: String!, $first: Int, $includeArchived: Boolean, $filter: IssueFilter) {
          team(id: $id) {
            id name key
            issues(first: $first, includeArchived: $includeArchived, filter: $filter) {
              nodes { ...IssueFields }
              %s
            }
          }
        }
        """ % _PAGE_INFO
        variables = {"id": team_id, "first": first, "includeArchived": include_archived, "filter": filter or None}
        return await self._node(query + _ISSUE_FIELDS, "team", variables)

    async def team_projects(self, team_id: str, *, first: int = 50, include_archived: bool = False) -> dict[str, Any] | None:
        query = """
        query TeamProjects($id: String!, $first: Int, $includeArchived: Boolean) {
          team(id: $id) {
            id name key
            projects(first: $first, includeArchived: $includeArchived) { nodes { ...ProjectFields } }
          }
        }
        """
        variables = {"id": team_id, "first": first, "includeArchived": include_archived}
        return await self._node(query + _PROJECT_FIELDS, "team", variables)

    # -- projects -----------------------------------------------------------------

    async def projects(self, *, first: int = 50, include_archived: bool = False) -> list[dict[str, Any]]:
        query = """
        query Projects($first: Int, $includeArchived: Boolean) {
          projects(first: $first, includeArchived: $includeArchived) { nodes { ...ProjectFields } }
        }
        """
        data = await self.execute(query + _PROJECT_FIELDS, {"first": first, "includeArchived": include_archived})
        nodes: list[dict[str, Any]] = (data.get("projects") or {}).get("nodes") or []
        return nodes

    async def project(self, project_id: str) -> dict[str, Any] | None:
        query = """
        query Project($id: String!) {
          project(id: $id) {
            id name description content url color icon progress priority slugId sortOrder
            startDate targetDate createdAt updatedAt completedAt canceledAt archivedAt
            status { id name color type }
            creator { ...UserRef }
            lead { ...UserRef }
            teams { nodes { id name key } }
            members { nodes { ...UserRef } }
          }
        }
        """
        return await self._node(query + _USER_REF, "project", {"id": project_id})

    async def project_issues(self, project_id: str, *, first: int = 50, include_archived: bool = False) -> dict[str, Any] | None:
        query = """
        query ProjectIssues($id: String!, $first: Int, $includeArchived: Boolean) {
          project(id: $id) {
            id name description
            status { name }
            issues(first: $first, includeArchived: $includeArchived) {
              nodes { ...IssueFields }
              %s
            }
          }
        }
        """ % _PAGE_INFO
        variables = {"id": project_id, "first": first, "includeArchived": include_archived}
        return await self._node(query + _ISSUE_FIELDS, "project", variables)

    async def project_milestones(
        self,
        project_id: str | None = None,
        *,
        first: int = 50,
        include_archived: bool = False,
    ) -> dict[str, Any] | None:
        """Milestone connection: a project's (project dict with ``projectMilestones``) or the workspace's."""
        connection = """
            projectMilestones(first: $first, includeArchived: $includeArchived) {
              nodes { ...MilestoneFields }
              %s
            }
        """ % _PAGE_INFO
        variables: dict[str, Any] = {"first": first, "includeArchived": include_archived}
        if project_id is None:
            query = "query Milestones($first: Int, $includeArchived: Boolean) { %s }" % connection
            data = await self.execute(query + _MILESTONE_FIELDS, variables)
            return data
        query = (
            "query ProjectMilestones($id: String!, $first: Int, $includeArchived: Boolean) "
            "{ project(id: $id) { id name description %s } }" % connection
        )
        variables["id"] = project_id
        return await self._node(query + _MILESTONE_FIELDS, "project", variables)

    async def project_milestone(self, milestone_id: str) -> dict[str, Any] | None:
        query = """
        query Milestone($id: String!) {
          projectMilestone(id: $id) {
            ...MilestoneFields
            issues(first: 50) {
              nodes { id title identifier priority state { name type } assignee { id name email } }
            }
          }
        }
        """
        return await self._node(query + _MILESTONE_FIELDS, "projectMilestone", {"id": milestone_id})

    # -- issues -----------------------------------------------------------------

    async def issue(self, issue_id: str) -> dict[str, Any] | None:
        query = """
        query Issue($id: String!) {
          issue(id: $id) {
            ...IssueFields
            comments { nodes { id body createdAt user { ...UserRef } } }
          }
        }
        """
        return await self._node(query + _ISSUE_FIELDS + _USER_REF, "issue", {"id": issue_id})

    async def issue_search(self, term: str, *, first: int = 10, include_archived: bool = False) -> dict[str, Any]:
        query = """
        query SearchIssues($term: String!, $first: Int, $includeArchived: Boolean) {
          searchIssues(term: $term, first: $first, includeArchived: $includeArchived) {
            nodes {
              id identifier number title description priority url createdAt updatedAt
              state { id name type }
              assignee { id name displayName email }
              team { id name key }
            }
            %s
          }
        }
        """ % _PAGE_INFO
        data = await self.execute(query, {"term": term, "first": first, "includeArchived": include_archived})
        result: dict[str, Any] = data.get("searchIssues") or {"nodes": [], "pageInfo": {"hasNextPage": False, "endCursor": None}}
        return result

    async def issue_relations(self, issue_id: str) -> dict[str, Any] | None:
        query = """
        query IssueRelations($id: String!) {
          issue(id: $id) {
            ...IssueRef
            relations { nodes { id type createdAt relatedIssue { ...IssueRef } } }
            inverseRelations { nodes { id type createdAt issue { ...IssueRef } } }
          }
        }
        """
        return await self._node(query + _ISSUE_REF, "issue", {"id": issue_id})

    async def issue_attachments(self, issue_id: str) -> dict[str, Any] | None:
        query = """
        query IssueAttachments($id: String!) {
          issue(id: $id) { ...IssueRef attachments { nodes { ...AttachmentFields } } }
        }
        """
        return await self._node(query + _ISSUE_REF + _ATTACHMENT_FIELDS, "issue", {"id": issue_id})

    async def attachment(self, attachment_id: str) -> dict[str, Any] | None:
        query = """
        query Attachment($id: String!) {
          attachment(id: $id) { ...AttachmentFields issue { ...IssueRef } }
        }
        """
        return await self._node(query + _ATTACHMENT_FIELDS + _ISSUE_REF, "attachment", {"id": attachment_id})

    # -- labels -----------------------------------------------------------------

    async def issue_labels(
        self,
        *,
        team_id: str | None = None,
        first: int = 50,
        include_archived: bool = False,
    ) -> dict[str, Any]:
        query = """
        query Labels($first: Int, $includeArchived: Boolean, $filter: IssueLabelFilter) {
          issueLabels(first: $first, includeArchived: $includeArchived, filter: $filter) {
            nodes { ...LabelFields }
            %s
          }
        }
        """ % _PAGE_INFO
        label_filter = {"team": {"id": {"eq": team_id}}} if team_id else None
        data = await self.execute(
            query + _LABEL_FIELDS,
            {"first": first, "includeArchived": include_archived, "filter": label_filter},
        )
        result: dict[str, Any] = data.get("issueLabels") or {"nodes": [], "pageInfo": {"hasNextPage": False, "endCursor": None}}
        return result

    async def issue_label(self, label_id: str) -> dict[str, Any] | None:
        query = """
        query Label($id: String!) {
          issueLabel(id: $id) { ...LabelFields issues(first: 50) { nodes { ...IssueRef } } }
        }
        """
        return await self._node(query + _LABEL_FIELDS + _ISSUE_REF, "issueLabel", {"id": label_id})

    # -- mutations ----------------------------------------------------------------

    async def create_issue(self, data: dict[str, Any]) -> dict[str, Any]:
        query = """
        mutation CreateIssue($input: IssueCreateInput!) {
          issueCreate(input: $input) { success issue { ...IssueFields } }
        }
        """
        return await self._mutate(query + _ISSUE_FIELDS, "issueCreate", {"input": data})

    async def update_issue(self, issue_id: str, data: dict[str, Any]) -> dict[str, Any]:
        query = """
        mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) {
          issueUpdate(id: $id, input: $input) { success issue { ...IssueFields } }
        }
        """
        return await self._mutate(query + _ISSUE_FIELDS, "issueUpdate", {"id": issue_id, "input": data})

    async def create_comment(self, data: dict[str, Any]) -> dict[str, Any]:
        query = """
        mutation CreateComment($input: CommentCreateInput!) {
          commentCreate(input: $input) { success comment { id body url createdAt } }
        }
        """
        return await self._mutate(query, "commentCreate", {"input": data})

    async def create_issue_label(self, data: dict[str, Any]) -> dict[str, Any]:
        query = """
        mutation CreateLabel($input: IssueLabelCreateInput!) {
          issueLabelCreate(input: $input) { success issueLabel { ...LabelFields } }
        }
        """
        return await self._mutate(query + _LABEL_FIELDS, "issueLabelCreate", {"input": data})

    async def update_issue_label(self, label_id: str, data: dict[str, Any]) -> dict[str, Any]:
        query = """
        mutation UpdateLabel($id: String!, $input: IssueLabelUpdateInput!) {
          issueLabelUpdate(id: $id, input: $input) { success issueLabel { ...LabelFields } }
        }
        """
        return await self._mutate(query + _LABEL_FIELDS, "issueLabelUpdate", {"id": label_id, "input": data})

    async def create_project_milestone(self, data: dict[str, Any]) -> dict[str, Any]:
        query = """
        mutation CreateMilestone($input: ProjectMilestoneCreateInput!) {
          projectMilestoneCreate(input: $input) { success projectMilestone { ...MilestoneFields } }
        }
        """
        return await self._mutate(query + _MILESTONE_FIELDS, "projectMilestoneCreate", {"input": data})

    async def update_project_milestone(self, milestone_id: str, data: dict[str, Any]) -> dict[str, Any]:
        query = """
        mutation UpdateMilestone($id: String!, $input: ProjectMilestoneUpdateInput!) {
          projectMilestoneUpdate(id: $id, input: $input) { success projectMilestone { ...MilestoneFields } }
        }
        """
        return await self._mutate(
            query + _MILESTONE_FIELDS, "projectMilestoneUpdate", {"id": milestone_id, "input": data}
        )

    async def create_attachment(self, data: dict[str, Any]) -> dict[str, Any]:
        query = """
        mutation CreateAttachment($input: AttachmentCreateInput!) {
          attachmentCreate(input: $input) { success attachment { ...AttachmentFields } }
        }
        """
        return await self._mutate(query + _ATTACHMENT_FIELDS, "attachmentCreate", {"input": data})

    async def create_issue_relation(self, data: dict[str, Any]) -> dict[str, Any]:
        query = """
        mutation CreateRelation($input: IssueRelationCreateInput!) {
          issueRelationCreate(input: $input) {
            success
            issueRelation { id type createdAt issue { ...IssueRef } relatedIssue { ...IssueRef } }
          }
        }
        """
        return await self._mutate(query + _ISSUE_REF, "issueRelationCreate", {"input": data})
