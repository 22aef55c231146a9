"""Jira Cloud REST API client wrapper for the MCP server."""

import logging
import os
from typing import Any

import requests  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

REST_API_PATH = "/rest/api/3"
AGILE_API_PATH = "/rest/agile/1.0"
DEFAULT_TIMEOUT = 30.0
DEFAULT_SEARCH_FIELDS = ["summary", "status", "assignee", "priority", "issuetype", "created", "updated"]
SPRINT_PAGE_SIZE = 50
SPRINT_ISSUE_PAGE_SIZE = 100


class ConfigException(ValueError):
    """Raised when the client is missing required configuration."""


class JiraAPIError(Exception):
    """Raised when Jira answers with a non-success status code.

    Attributes:
        method: HTTP method of the failed request
        path: Request path relative to the API root
        status_code: HTTP status returned by Jira
        body: Raw response body text
    """

    def __init__(self, method: str, path: str, status_code: int, body: str, api_name: str = "Jira API") -> None:
        """Initialize the error with request context."""
        self.method = method
        self.path = path
        self.status_code = status_code
        self.body = body
        super().__init__(f"{api_name} {method} {path} returned {status_code}: {body}")


class JiraClient:
    """Thin wrapper over the Jira Cloud REST and Agile APIs.

    Every method issues exactly one HTTP request and returns the decoded
    JSON body. There is no session reuse, retry or caching.
    """

    def __init__(
        self,
        url: str | None = None,
        email: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the client from arguments or environment variables.

        Args:
            url: Jira site URL, e.g. https://example.atlassian.net (default: JIRA_BASE_URL)
            email: Account email used for basic auth (default: JIRA_EMAIL)
            api_token: API token used for basic auth (default: JIRA_API_TOKEN)
            timeout: Per-request timeout in seconds (default: JIRA_TIMEOUT or 30)

        Raises:
            ConfigException: If the URL or credentials are missing
        """
        self.url = (url or os.getenv("JIRA_BASE_URL") or "").rstrip("/")
        self.email = email or os.getenv("JIRA_EMAIL")
        self.api_token = api_token or os.getenv("JIRA_API_TOKEN")
        self.timeout = timeout if timeout is not None else self._timeout_from_env()

        if not self.url:
            raise ConfigException("JIRA_BASE_URL environment variable is required")
        if not self.email or not self.api_token:
            raise ConfigException("No authentication method provided. Set JIRA_EMAIL and JIRA_API_TOKEN")

        self._auth = (self.email, self.api_token)
        self._headers = {"Accept": "application/json", "Content-Type": "application/json"}

    @staticmethod
    def _timeout_from_env() -> float:
        raw = os.getenv("JIRA_TIMEOUT")
        if not raw:
            return DEFAULT_TIMEOUT
        try:
            return float(raw)
        except ValueError:
            logger.warning("Invalid JIRA_TIMEOUT '%s', defaulting to %s seconds", raw, DEFAULT_TIMEOUT)
            return DEFAULT_TIMEOUT

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any = None,
        api_path: str = REST_API_PATH,
        api_name: str = "Jira API",
    ) -> Any:
        """Send one request and decode the response.

        Returns:
            Decoded JSON, or None when the response carries no JSON body (e.g. 204)

        Raises:
            JiraAPIError: On any non-2xx status
        """
        url = f"{self.url}{api_path}{path}"
        logger.debug("%s %s", method, url)
        response = requests.request(
            method,
            url,
            params=params,
            json=body,
            auth=self._auth,
            headers=self._headers,
            timeout=self.timeout,
        )
        if not response.ok:
            raise JiraAPIError(method, path, response.status_code, response.text, api_name=api_name)

        content_type = response.headers.get("content-type") or ""
        if "application/json" in content_type:
            return response.json()
        return None

    def _agile_request(self, path: str, params: dict[str, Any]) -> Any:
        return self._request("GET", path, params=params, api_path=AGILE_API_PATH, api_name="Jira Agile API")

    # Users

    def get_current_user(self) -> dict[str, Any]:
        """Get the user the credentials belong to."""
        return self._request("GET", "/myself")

    def find_users(self, query: str, max_results: int = 10) -> list[dict[str, Any]]:
        """Search users by name or email."""
        return self._request("GET", "/user/search", params={"query": query, "maxResults": max_results})

    # Issues

    def get_issue(self, issue_key: str, fields: list[str] | None = None) -> dict[str, Any]:
        """Get a single issue by key or ID."""
        params = {"fields": ",".join(fields)} if fields else None
        return self._request("GET", f"/issue/{issue_key}", params=params)

    def create_issue(
        self,
        project_key: str,
        summary: str,
        issue_type: str,
        description: dict[str, Any] | None = None,
        assignee: str | None = None,
        labels: list[str] | None = None,
        priority: str | None = None,
        parent_key: str | None = None,
    ) -> dict[str, Any]:
        """Create an issue.

        Args:
            project_key: Key of the project to create the issue in
            summary: Issue summary
            issue_type: Issue type name (Task, Bug, Story, ...)
            description: Description as an ADF document
            assignee: Assignee account ID
            labels: Labels to set
            priority: Priority name
            parent_key: Parent issue key for sub-tasks

        Returns:
            Created issue reference with id, key and self URL
        """
        fields: dict[str, Any] = {
            "project": {"key": project_key},
            "summary": summary,
            "issuetype": {"name": issue_type},
        }
        if description:
            fields["description"] = description
        if assignee:
            fields["assignee"] = {"accountId": assignee}
        if labels is not None:
            fields["labels"] = labels
        if priority:
            fields["priority"] = {"name": priority}
        if parent_key:
            fields["parent"] = {"key": parent_key}
        return self._request("POST", "/issue", body={"fields": fields})

    def update_issue(self, issue_key: str, fields: dict[str, Any]) -> None:
        """Set fields on an existing issue."""
        self._request("PUT", f"/issue/{issue_key}", body={"fields": fields})

    def search_issues(
        self,
        jql: str,
        fields: list[str] | None = None,
        max_results: int = 20,
        next_page_token: str | None = None,
    ) -> dict[str, Any]:
        """Search issues with JQL.

        Args:
            jql: JQL query
            fields: Fields to return (default: DEFAULT_SEARCH_FIELDS)
            max_results: Page size
            next_page_token: Token from a previous page, passed through as-is

        Returns:
            Search result with "issues" and, when more pages exist, "nextPageToken"
        """
        params: dict[str, Any] = {
            "jql": jql,
            "fields": ",".join(fields or DEFAULT_SEARCH_FIELDS),
            "maxResults": max_results,
        }
        if next_page_token:
            params["nextPageToken"] = next_page_token
        return self._request("GET", "/search/jql", params=params)

    def assign_issue(self, issue_key: str, account_id: str | None) -> None:
        """Assign an issue, or unassign it when account_id is None."""
        self._request("PUT", f"/issue/{issue_key}/assignee", body={"accountId": account_id})

    def link_issues(self, link_type: str, inward_issue_key: str, outward_issue_key: str) -> None:
        """Create a link of the given type between two issues."""
        self._request(
            "POST",
            "/issueLink",
            body={
                "type": {"name": link_type},
                "inwardIssue": {"key": inward_issue_key},
                "outwardIssue": {"key": outward_issue_key},
            },
        )

    # Comments

    def get_comments(self, issue_key: str, max_results: int = 50, start_at: int = 0) -> dict[str, Any]:
        """Get one page of comments on an issue."""
        return self._request(
            "GET",
            f"/issue/{issue_key}/comment",
            params={"maxResults": max_results, "startAt": start_at},
        )

    def add_comment(self, issue_key: str, body: dict[str, Any]) -> dict[str, Any]:
        """Add a comment whose body is an ADF document."""
        return self._request("POST", f"/issue/{issue_key}/comment", body={"body": body})

    # Transitions

    def get_transitions(self, issue_key: str) -> dict[str, Any]:
        """List transitions available from the issue's current status."""
        return self._request("GET", f"/issue/{issue_key}/transitions")

    def transition_issue(self, issue_key: str, transition_id: str, comment: dict[str, Any] | None = None) -> None:
        """Move an issue through a transition, optionally commenting in the same request."""
        payload: dict[str, Any] = {"transition": {"id": transition_id}}
        if comment:
            payload["update"] = {"comment": [{"add": {"body": comment}}]}
        self._request("POST", f"/issue/{issue_key}/transitions", body=payload)

    # Projects

    def list_projects(self, max_results: int = 50, start_at: int = 0) -> dict[str, Any]:
        """List projects visible to the authenticated user."""
        return self._request("GET", "/project/search", params={"maxResults": max_results, "startAt": start_at})

    # Worklogs

    def get_worklogs(self, issue_key: str) -> dict[str, Any]:
        """Get worklogs recorded on an issue."""
        return self._request("GET", f"/issue/{issue_key}/worklog")

    def add_worklog(self, issue_key: str, time_spent: str, comment: dict[str, Any] | None = None) -> dict[str, Any]:
        """Log time on an issue, optionally with an ADF comment."""
        payload: dict[str, Any] = {"timeSpent": time_spent}
        if comment:
            payload["comment"] = comment
        return self._request("POST", f"/issue/{issue_key}/worklog", body=payload)

    # Boards and sprints

    def get_boards(self, max_results: int = 50) -> dict[str, Any]:
        """List Scrum and Kanban boards."""
        return self._agile_request("/board", {"maxResults": max_results})

    def get_sprints_for_board(self, board_id: int, state: str | None = None) -> dict[str, Any]:
        """List sprints of a board, optionally filtered by state (active, future, closed)."""
        params: dict[str, Any] = {"maxResults": SPRINT_PAGE_SIZE}
        if state:
            params["state"] = state
        return self._agile_request(f"/board/{board_id}/sprint", params)

    def get_sprint_issues(self, sprint_id: int, fields: list[str] | None = None) -> dict[str, Any]:
        """List issues in a sprint."""
        params: dict[str, Any] = {"maxResults": SPRINT_ISSUE_PAGE_SIZE}
        if fields:
            params["fields"] = ",".join(fields)
        return self._agile_request(f"/sprint/{sprint_id}/issue", params)
