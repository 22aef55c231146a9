"""Jira MCP Server implementation."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from http import HTTPStatus
from pathlib import Path
from typing import Any, NoReturn

import requests  # type: ignore[import-untyped]
from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.requests import Request
from starlette.responses import JSONResponse

from .adf import adf_to_text, text_to_adf
from .client import JiraAPIError, JiraClient
from .models import (
    AddCommentParams,
    AddWorklogParams,
    AssignIssueParams,
    CreateIssueParams,
    FindUsersParams,
    GetCommentsParams,
    IssueKeyParams,
    IssueNotFoundError,
    LinkIssuesParams,
    ListSprintsParams,
    SearchIssuesParams,
    SprintIssuesParams,
    TransitionIssueParams,
    UpdateIssueParams,
)

# Configure logging
logger = logging.getLogger(__name__)

# Constants
CHARACTER_LIMIT = 25000  # Maximum response size per MCP best practices
ITEM_SEPARATOR = "\n\n---\n\n"
SPRINT_ISSUE_FIELDS = ["summary", "status", "assignee", "priority", "issuetype"]


# Tool annotation constants
def _read_only_annotations(title: str) -> ToolAnnotations:
    """Create read-only tool annotations with title."""
    return ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=True,
        title=title,
    )


def _write_annotations(title: str) -> ToolAnnotations:
    """Create write tool annotations with title."""
    return ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
        title=title,
    )


def _idempotent_write_annotations(title: str) -> ToolAnnotations:
    """Create idempotent write tool annotations with title."""
    return ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=True,
        title=title,
    )


def _handle_issue_not_found_error(issue_key: str, error: JiraAPIError) -> NoReturn:
    """Turn a 404 from Jira into IssueNotFoundError, re-raise anything else.

    Raises:
        IssueNotFoundError: If Jira answered 404
        JiraAPIError: The original error otherwise
    """
    if error.status_code == HTTPStatus.NOT_FOUND:
        raise IssueNotFoundError(issue_key) from error
    raise error


def _or_default(value: Any, default: Any) -> Any:
    """Substitute default only when the value is absent (None)."""
    return default if value is None else value


def _nested(payload: dict[str, Any], key: str, attr: str, default: Any) -> Any:
    """Read payload[key][attr], falling back to default when either level is missing."""
    value = payload.get(key)
    if isinstance(value, dict):
        return _or_default(value.get(attr), default)
    return default


def truncate_response(content: str, limit: int = CHARACTER_LIMIT) -> str:
    """Truncate response with helpful message if over limit.

    Args:
        content: The content to potentially truncate
        limit: Maximum character limit (default: CHARACTER_LIMIT)

    Returns:
        Original content if under limit, truncated content with warning if over
    """
    if len(content) <= limit:
        return content

    truncated = content[:limit]
    truncated += "\n\n⚠️ **Response Truncated**\n"
    truncated += f"Response size ({len(content)} chars) exceeds limit ({limit} chars).\n"
    truncated += "Lower max_results, narrow the JQL query, or fetch the next page to see more results."
    return truncated


def format_issue(issue: dict[str, Any]) -> str:
    """Format an issue payload for display.

    Optional lines (assignee, reporter, labels, dates, description) are
    only emitted when the issue carries the corresponding field.

    Args:
        issue: Issue as returned by the Jira REST API

    Returns:
        Human-readable multi-line summary
    """
    fields = issue.get("fields") or {}
    lines = [
        f"**{issue.get('key')}** — {_or_default(fields.get('summary'), '(no summary)')}",
        f"Type: {_nested(fields, 'issuetype', 'name', '?')}  |  "
        f"Status: {_nested(fields, 'status', 'name', '?')}  |  "
        f"Priority: {_nested(fields, 'priority', 'name', '?')}",
    ]
    if assignee := fields.get("assignee"):
        lines.append(f"Assignee: {assignee.get('displayName')} ({assignee.get('accountId')})")
    if reporter := fields.get("reporter"):
        lines.append(f"Reporter: {reporter.get('displayName')}")
    if labels := fields.get("labels"):
        lines.append(f"Labels: {', '.join(str(label) for label in labels)}")
    if created := fields.get("created"):
        lines.append(f"Created: {created}  |  Updated: {_or_default(fields.get('updated'), '?')}")
    if (description := fields.get("description")) is not None:
        lines.append(f"\nDescription:\n{adf_to_text(description)}")
    return "\n".join(lines)


def format_comment(comment: dict[str, Any]) -> str:
    """Format a comment payload as "[created] author:" followed by its body."""
    author = _nested(comment, "author", "displayName", "Unknown")
    created = _or_default(comment.get("created"), "")
    body = comment.get("body")
    text = adf_to_text(body) if body is not None else "(empty)"
    return f"[{created}] {author}:\n{text}"


def format_worklog(worklog: dict[str, Any]) -> str:
    """Format a worklog payload, including its comment when present."""
    author = _nested(worklog, "author", "displayName", "Unknown")
    started = _or_default(worklog.get("started"), "")
    time_spent = _or_default(worklog.get("timeSpent"), "?")
    line = f"[{started}] {author}: {time_spent}"
    if (comment := worklog.get("comment")) is not None:
        line += f"\n{adf_to_text(comment)}"
    return line


def _format_issue_list(issues: list[dict[str, Any]]) -> str:
    return ITEM_SEPARATOR.join(format_issue(issue) for issue in issues)


_GUIDANCE = {
    "not_found": "Error: Resource not found during {context}. Please verify the key is correct and you have access.",
    "forbidden": "Error: Permission denied for {context}. Your credentials lack access to this resource.",
    "unauthorized": "Error: Authentication failed for {context}. Check JIRA_EMAIL and JIRA_API_TOKEN are valid.",
    "timeout": "Error: Request timeout during {context}. The server may be slow - try again or reduce the scope.",
    "network": "Error: Network issue during {context}. Check JIRA_BASE_URL is correct and the server is reachable.",
}

_STATUS_GUIDANCE: dict[int, str] = {
    HTTPStatus.NOT_FOUND: "not_found",
    HTTPStatus.FORBIDDEN: "forbidden",
    HTTPStatus.UNAUTHORIZED: "unauthorized",
    HTTPStatus.REQUEST_TIMEOUT: "timeout",
    HTTPStatus.GATEWAY_TIMEOUT: "timeout",
}


def _guidance_from_message(error_msg: str) -> str | None:
    if "not found" in error_msg:
        return "not_found"
    if "forbidden" in error_msg:
        return "forbidden"
    if "unauthorized" in error_msg:
        return "unauthorized"
    if "timeout" in error_msg or "timed out" in error_msg:
        return "timeout"
    if "connection" in error_msg or "network" in error_msg:
        return "network"
    return None


def _handle_api_error(e: Exception, context: str = "operation") -> str:
    """Format errors with actionable guidance for LLM agents.

    Jira errors are classified by status code only, since their message
    also carries the request path. Other errors are matched on their text.

    Args:
        e: The exception that occurred
        context: Description of what was being attempted

    Returns:
        Formatted error message with guidance
    """
    if isinstance(e, JiraAPIError):
        guidance = _STATUS_GUIDANCE.get(e.status_code)
    else:
        guidance = _guidance_from_message(str(e).lower())

    if guidance:
        return _GUIDANCE[guidance].format(context=context)

    # Generic error with type information
    return f"Error during {context}: {type(e).__name__} - {e}"


class JiraMCPServer:
    """Jira MCP Server with proper client lifecycle management."""

    def __init__(self, host: str = "127.0.0.1", port: int = 8000) -> None:
        """Initialize the server.

        Args:
            host: Host to bind for HTTP transport (default: 127.0.0.1)
            port: Port to bind for HTTP transport (default: 8000)
        """
        self.client: JiraClient | None = None
        # Create FastMCP with lifespan configured
        self.mcp = FastMCP("jira_mcp", host=host, port=port, lifespan=self._create_lifespan())
        self._setup_tools()
        self._setup_resources()
        self._setup_prompts()

    def _create_lifespan(self) -> Any:
        """Create the lifespan context manager for the server."""

        @asynccontextmanager
        async def lifespan(_app: FastMCP) -> AsyncIterator[None]:
            """Initialize resources on startup and cleanup on shutdown."""
            await self.initialize()
            try:
                yield
            finally:
                if self.client is not None:
                    self.client = None
                    logger.info("Jira client cleaned up")

        return lifespan

    def get_client(self) -> JiraClient:
        """Get the Jira client, ensuring it's initialized."""
        if not self.client:
            raise RuntimeError("Jira client not initialized")
        return self.client

    async def initialize(self) -> None:
        """Initialize the Jira client on server startup."""
        # Load environment variables from .env files
        # First, try to load from current working directory
        cwd_env = Path.cwd() / ".env"
        if cwd_env.exists():
            load_dotenv(cwd_env)
            logger.info("Loaded environment from %s", cwd_env)

        envrc_path = Path.cwd() / ".envrc"
        if envrc_path.exists() and not os.environ.get("JIRA_BASE_URL"):
            # If .envrc exists but env vars aren't set, warn the user
            logger.warning(
                "Found .envrc but environment variables not loaded. Consider using direnv or creating a .env file"
            )

        # Also support loading from parent directories (for when running from subdirs)
        load_dotenv()

        try:
            self.client = JiraClient()
            logger.info("Jira client initialized for %s", self.client.url)

            # Test connection
            current_user = self.client.get_current_user() or {}
            logger.info("Connected as %s", current_user.get("displayName", "unknown"))
        except Exception:
            logger.exception("Failed to initialize Jira client")
            raise

    def _setup_tools(self) -> None:
        """Register all tools with the MCP server."""
        self._setup_issue_tools()
        self._setup_comment_tools()
        self._setup_workflow_tools()
        self._setup_user_project_tools()
        self._setup_agile_tools()

    def _setup_issue_tools(self) -> None:
        """Register issue read/write tools."""

        @self.mcp.tool(annotations=_read_only_annotations("Get Issue Details"))
        def jira_get_issue(params: IssueKeyParams) -> str:
            """Fetch full details for a Jira issue by its key (e.g. PROJ-123).

            Args:
                params (IssueKeyParams): Validated parameters containing:
                    - issue_key (str): Issue key such as PROJ-123 (required)

            Returns:
                str: Issue summary in the following form:

                ```
                **PROJ-123** — Login page times out
                Type: Bug  |  Status: In Progress  |  Priority: High
                Assignee: Alice Smith (5b10a2844c20165700ede21g)
                Reporter: Bob Jones
                Labels: frontend, auth
                Created: 2024-01-15T10:30:00.000+0000  |  Updated: 2024-01-16T08:00:00.000+0000

                Description:
                Plain-text rendering of the issue description
                ```

            Examples:
                - Use when: "Show me PROJ-123" -> issue_key="PROJ-123"
                - Don't use when: Searching by criteria (use jira_search_issues)

            Error Handling:
                - Raises IssueNotFoundError if the issue does not exist or is not visible
            """
            client = self.get_client()
            try:
                issue = client.get_issue(params.issue_key)
            except JiraAPIError as e:
                _handle_issue_not_found_error(params.issue_key, e)
            return truncate_response(format_issue(issue))

        @self.mcp.tool(annotations=_read_only_annotations("Search Issues"))
        def jira_search_issues(params: SearchIssuesParams) -> str:
            """Search Jira issues using JQL (Jira Query Language).

            Args:
                params (SearchIssuesParams): Validated search parameters containing:
                    - jql (str): JQL query, e.g. 'project = PROJ AND status = "In Progress"'
                    - max_results (int): Results per page, 1-100 (default: 10)
                    - next_page_token (str | None): Token from a previous page

            Returns:
                str: "Found N issue(s) (showing M):" followed by formatted issues
                separated by "---" lines, and a "Next page token" line when more
                results are available.

            Examples:
                - Use when: "Open bugs in PROJ" -> jql="project = PROJ AND type = Bug AND statusCategory != Done"
                - Use when: "What is assigned to me" -> jql="assignee = currentUser()"
                - Don't use when: You already have the issue key (use jira_get_issue)

            Error Handling:
                - Returns "No issues found for that query." if nothing matches
                - May be truncated if results exceed 25,000 characters (lower max_results)
            """
            client = self.get_client()
            result = client.search_issues(
                params.jql, max_results=params.max_results, next_page_token=params.next_page_token
            ) or {}
            issues = result.get("issues") or []
            if not issues:
                return "No issues found for that query."

            total = _or_default(result.get("total"), len(issues))
            text = f"Found {total} issue(s) (showing {len(issues)}):\n\n{_format_issue_list(issues)}"
            if next_page_token := result.get("nextPageToken"):
                text += f"\n\nNext page token: {next_page_token}"
            return truncate_response(text)

        @self.mcp.tool(annotations=_write_annotations("Create New Issue"))
        def jira_create_issue(params: CreateIssueParams) -> str:
            """Create a new Jira issue in a project.

            Args:
                params (CreateIssueParams): Validated creation parameters containing:
                    - project_key (str): Project key, e.g. PROJ (required)
                    - summary (str): Issue summary (required)
                    - issue_type (str): Task, Bug, Story, Epic, ... (default: "Task")
                    - description (str | None): Plain-text description
                    - assignee_account_id (str | None): Assignee account ID
                    - labels (list[str] | None): Labels to set
                    - priority (str | None): Priority name
                    - parent_key (str | None): Parent issue key for sub-tasks

            Returns:
                str: "Issue created: **PROJ-124** — https://example.atlassian.net/browse/PROJ-124"

            Examples:
                - Use when: "File a bug for the login timeout in PROJ"
                - Don't use when: The issue exists already (use jira_update_issue)

            Note:
                Use jira_find_users to look up account IDs before assigning.
            """
            client = self.get_client()
            result = client.create_issue(
                project_key=params.project_key,
                summary=params.summary,
                issue_type=params.issue_type,
                description=text_to_adf(params.description) if params.description else None,
                assignee=params.assignee_account_id,
                labels=params.labels,
                priority=params.priority,
                parent_key=params.parent_key,
            )
            key = result["key"]
            return f"Issue created: **{key}** — {client.url}/browse/{key}"

        @self.mcp.tool(annotations=_idempotent_write_annotations("Update Issue"))
        def jira_update_issue(params: UpdateIssueParams) -> str:
            """Update fields on an existing Jira issue.

            Args:
                params (UpdateIssueParams): Validated update parameters containing:
                    - issue_key (str): Issue key (required)
                    - summary (str | None): New summary
                    - description (str | None): New plain-text description
                    - priority (str | None): New priority name
                    - labels (list[str] | None): Replacement labels (empty list clears them)
                    - assignee_account_id (str | None): New assignee, explicit null unassigns

            Returns:
                str: "PROJ-123 updated successfully (fields: summary, priority)." or
                "No fields to update." when nothing was given.

            Examples:
                - Use when: "Raise PROJ-123 to High" -> priority="High"
                - Don't use when: Changing status (use jira_transition_issue)
            """
            fields: dict[str, Any] = {}
            if params.summary:
                fields["summary"] = params.summary
            if params.description:
                fields["description"] = text_to_adf(params.description)
            if params.priority:
                fields["priority"] = {"name": params.priority}
            if params.labels is not None:
                fields["labels"] = params.labels
            if "assignee_account_id" in params.model_fields_set:
                fields["assignee"] = {"accountId": params.assignee_account_id}

            if not fields:
                return "No fields to update."

            self.get_client().update_issue(params.issue_key, fields)
            return f"{params.issue_key} updated successfully (fields: {', '.join(fields)})."

        @self.mcp.tool(annotations=_write_annotations("Link Issues"))
        def jira_link_issues(params: LinkIssuesParams) -> str:
            """Create a link between two Jira issues (e.g. "Blocks", "Relates", "Duplicate").

            Returns:
                str: "Linked PROJ-1 → (Blocks) → PROJ-2."
            """
            self.get_client().link_issues(params.link_type, params.inward_issue_key, params.outward_issue_key)
            return f"Linked {params.inward_issue_key} → ({params.link_type}) → {params.outward_issue_key}."

    def _setup_comment_tools(self) -> None:
        """Register comment and worklog tools."""

        @self.mcp.tool(annotations=_read_only_annotations("Get Issue Comments"))
        def jira_get_issue_comments(params: GetCommentsParams) -> str:
            """Get comments on a Jira issue.

            Args:
                params (GetCommentsParams): Validated parameters containing:
                    - issue_key (str): Issue key (required)
                    - max_results (int): Maximum comments to fetch, 1-100 (default: 20)
                    - start_at (int): Comments to skip for pagination (default: 0)

            Returns:
                str: "N comment(s) on PROJ-123:" followed by entries of the form
                "[created] Author Name:" and the comment text, separated by "---" lines.
            """
            result = self.get_client().get_comments(
                params.issue_key, max_results=params.max_results, start_at=params.start_at
            ) or {}
            comments = result.get("comments") or []
            if not comments:
                return f"No comments on {params.issue_key}."
            text = ITEM_SEPARATOR.join(format_comment(comment) for comment in comments)
            return truncate_response(f"{len(comments)} comment(s) on {params.issue_key}:\n\n{text}")

        @self.mcp.tool(annotations=_write_annotations("Add Comment"))
        def jira_add_comment(params: AddCommentParams) -> str:
            """Add a comment to a Jira issue.

            The comment is plain text: blank lines start new paragraphs and
            single newlines become line breaks.

            Returns:
                str: "Comment added to PROJ-123 (id: 10042)."
            """
            result = self.get_client().add_comment(params.issue_key, text_to_adf(params.comment)) or {}
            return f"Comment added to {params.issue_key} (id: {result.get('id')})."

        @self.mcp.tool(annotations=_read_only_annotations("Get Worklogs"))
        def jira_get_worklogs(params: IssueKeyParams) -> str:
            """List time logged on a Jira issue.

            Returns:
                str: "N worklog(s) on PROJ-123:" followed by entries of the form
                "[started] Author Name: 2h 30m" and the worklog comment, if any.
            """
            result = self.get_client().get_worklogs(params.issue_key) or {}
            worklogs = result.get("worklogs") or []
            if not worklogs:
                return f"No worklogs on {params.issue_key}."
            text = ITEM_SEPARATOR.join(format_worklog(worklog) for worklog in worklogs)
            return truncate_response(f"{len(worklogs)} worklog(s) on {params.issue_key}:\n\n{text}")

        @self.mcp.tool(annotations=_write_annotations("Add Worklog"))
        def jira_add_worklog(params: AddWorklogParams) -> str:
            """Log time spent on a Jira issue.

            Args:
                params (AddWorklogParams): Validated parameters containing:
                    - issue_key (str): Issue key (required)
                    - time_spent (str): Jira duration, e.g. "2h 30m" or "1d" (required)
                    - comment (str | None): Optional plain-text worklog comment

            Returns:
                str: "Logged 2h 30m on PROJ-123."
            """
            self.get_client().add_worklog(
                params.issue_key,
                params.time_spent,
                text_to_adf(params.comment) if params.comment else None,
            )
            return f"Logged {params.time_spent} on {params.issue_key}."

    def _setup_workflow_tools(self) -> None:
        """Register transition and assignment tools."""

        @self.mcp.tool(annotations=_read_only_annotations("Get Transitions"))
        def jira_get_transitions(params: IssueKeyParams) -> str:
            """List available status transitions for a Jira issue.

            Call this before jira_transition_issue to find the transition ID.

            Returns:
                str: One line per transition: '• **Start Progress** (id: 11) → moves to "In Progress"'
            """
            result = self.get_client().get_transitions(params.issue_key) or {}
            transitions = result.get("transitions") or []
            if not transitions:
                return f"No transitions available for {params.issue_key}."
            text = "\n".join(
                f"• **{t.get('name')}** (id: {t.get('id')}) → moves to \"{_nested(t, 'to', 'name', '?')}\""
                for t in transitions
            )
            return truncate_response(f"Available transitions for {params.issue_key}:\n{text}")

        @self.mcp.tool(annotations=_write_annotations("Transition Issue"))
        def jira_transition_issue(params: TransitionIssueParams) -> str:
            """Transition a Jira issue to a new status.

            Args:
                params (TransitionIssueParams): Validated parameters containing:
                    - issue_key (str): Issue key (required)
                    - transition_id (str): ID from jira_get_transitions (required)
                    - comment (str | None): Optional plain-text comment added with the transition

            Returns:
                str: "PROJ-123 transitioned successfully."
            """
            self.get_client().transition_issue(
                params.issue_key,
                params.transition_id,
                text_to_adf(params.comment) if params.comment else None,
            )
            return f"{params.issue_key} transitioned successfully."

        @self.mcp.tool(annotations=_idempotent_write_annotations("Assign Issue"))
        def jira_assign_issue(params: AssignIssueParams) -> str:
            """Assign (or unassign) a Jira issue to a user.

            Pass account_id as null to unassign. Use jira_find_users to look up account IDs.
            """
            self.get_client().assign_issue(params.issue_key, params.account_id)
            if params.account_id:
                return f"{params.issue_key} assigned to account {params.account_id}."
            return f"{params.issue_key} unassigned."

    def _setup_user_project_tools(self) -> None:
        """Register user and project lookup tools."""

        @self.mcp.tool(annotations=_read_only_annotations("Find Users"))
        def jira_find_users(params: FindUsersParams) -> str:
            """Search for Jira users by name or email.

            Useful for finding the accountId needed to assign issues.

            Returns:
                str: One line per user: "• Alice Smith — accountId: 5b10... (alice@example.com)"
            """
            users = self.get_client().find_users(params.query, max_results=params.max_results) or []
            if not users:
                return f'No users found for "{params.query}".'
            text = "\n".join(
                f"• {u.get('displayName')} — accountId: {u.get('accountId')} "
                f"({_or_default(u.get('emailAddress'), 'no email')})"
                for u in users
            )
            return truncate_response(text)

        @self.mcp.tool(annotations=_read_only_annotations("List Projects"))
        def jira_list_projects() -> str:
            """List Jira projects accessible to the authenticated user.

            Returns:
                str: "N project(s):" followed by lines like "• **PROJ** — Project Name"
            """
            result = self.get_client().list_projects() or {}
            projects = result.get("values") or []
            if not projects:
                return "No projects found."
            text = "\n".join(f"• **{p.get('key')}** — {p.get('name')}" for p in projects)
            return truncate_response(f"{len(projects)} project(s):\n{text}")

    def _setup_agile_tools(self) -> None:
        """Register board and sprint tools (Agile REST API)."""

        @self.mcp.tool(annotations=_read_only_annotations("List Boards"))
        def jira_list_boards() -> str:
            """List Jira boards (Scrum / Kanban).

            Use this to find board IDs for sprint queries.

            Returns:
                str: One line per board: "• **Team Board** (id: 7) — type: scrum"
            """
            result = self.get_client().get_boards() or {}
            boards = result.get("values") or []
            if not boards:
                return "No boards found."
            text = "\n".join(f"• **{b.get('name')}** (id: {b.get('id')}) — type: {b.get('type')}" for b in boards)
            return truncate_response(text)

        @self.mcp.tool(annotations=_read_only_annotations("List Sprints"))
        def jira_list_sprints(params: ListSprintsParams) -> str:
            """List sprints for a Jira board.

            Use jira_list_boards first to find the board ID.

            Returns:
                str: One line per sprint: "• **Sprint 12** (id: 42) — state: active, <start> to <end>"
            """
            result = self.get_client().get_sprints_for_board(params.board_id, params.state) or {}
            sprints = result.get("values") or []
            if not sprints:
                return "No sprints found."
            text = "\n".join(
                f"• **{s.get('name')}** (id: {s.get('id')}) — state: {s.get('state')}, "
                f"{_or_default(s.get('startDate'), '?')} to {_or_default(s.get('endDate'), '?')}"
                for s in sprints
            )
            return truncate_response(text)

        @self.mcp.tool(annotations=_read_only_annotations("Get Sprint Issues"))
        def jira_get_sprint_issues(params: SprintIssuesParams) -> str:
            """Get all issues in a specific sprint.

            Returns:
                str: "N issue(s) in sprint ID:" followed by formatted issues separated by "---" lines
            """
            result = self.get_client().get_sprint_issues(params.sprint_id, SPRINT_ISSUE_FIELDS) or {}
            issues = result.get("issues") or []
            if not issues:
                return "No issues in this sprint."
            return truncate_response(
                f"{len(issues)} issue(s) in sprint {params.sprint_id}:\n\n{_format_issue_list(issues)}"
            )

    def _setup_resources(self) -> None:
        """Register all resources with the MCP server."""

        @self.mcp.resource("jira://issue/{issue_key}")
        def get_issue_resource(issue_key: str) -> str:
            """Get an issue as a resource."""
            try:
                issue = self.get_client().get_issue(issue_key)
                return truncate_response(format_issue(issue))
            except (requests.exceptions.RequestException, JiraAPIError, ValueError) as e:
                return _handle_api_error(e, context=f"retrieving issue {issue_key}")

        @self.mcp.resource("jira://issue/{issue_key}/comments")
        def get_issue_comments_resource(issue_key: str) -> str:
            """Get the first page of an issue's comments as a resource."""
            try:
                result = self.get_client().get_comments(issue_key) or {}
                comments = result.get("comments") or []
                lines = [f"Comments on {issue_key}", ""]
                if comments:
                    lines.append(ITEM_SEPARATOR.join(format_comment(comment) for comment in comments))
                else:
                    lines.append("No comments.")
                return truncate_response("\n".join(lines))
            except (requests.exceptions.RequestException, JiraAPIError, ValueError) as e:
                return _handle_api_error(e, context=f"retrieving comments for issue {issue_key}")

    def _setup_prompts(self) -> None:
        """Register all prompts with the MCP server."""

        @self.mcp.prompt()
        def analyze_issue(issue_key: str) -> str:
            """Generate a prompt to analyze an issue."""
            return f"""Please analyze Jira issue {issue_key}.
Use the jira_get_issue tool to retrieve the issue details and jira_get_issue_comments for the discussion.

After retrieving the issue, provide:
1. A summary of the problem or request
2. Current status, priority and assignee
3. Key points from the comment history
4. Suggested next steps

Use jira_get_transitions if a status change looks appropriate."""

        @self.mcp.prompt()
        def draft_comment(issue_key: str, tone: str = "professional") -> str:
            """Generate a prompt to draft a comment on an issue."""
            return f"""Please help draft a {tone} comment for Jira issue {issue_key}.

First, use jira_get_issue and jira_get_issue_comments to understand the issue and the discussion so far.
Then draft a comment that:
1. Addresses the latest open question or request
2. States concrete next steps or a resolution
3. Maintains a {tone} tone throughout
4. Is concise; separate paragraphs with a blank line

After drafting, you can use jira_add_comment to post it if approved."""

        @self.mcp.prompt()
        def sprint_summary(board_id: int) -> str:
            """Generate a prompt to summarize the active sprint of a board."""
            return f"""Please summarize the active sprint on Jira board {board_id}.

Use jira_list_sprints with state="active" to find the sprint, then jira_get_sprint_issues to list its issues.
Report:
1. Sprint name and dates
2. Issues grouped by status
3. Unassigned or high-priority issues that need attention
4. Risks to completing the sprint

Keep the summary short and actionable."""


# Create the server instance with host/port from environment
# This allows HTTP transport to bind to the configured address
_host = os.getenv("MCP_HOST", "127.0.0.1")
_port = int(os.getenv("MCP_PORT", "8000"))
server = JiraMCPServer(host=_host, port=_port)

# Export the MCP server instance
mcp = server.mcp


# Health check endpoint for HTTP transport
@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> JSONResponse:  # noqa: ARG001
    """Health check endpoint for HTTP transport.

    Args:
        request: The incoming HTTP request (required by FastMCP).

    Returns:
        JSONResponse with health status.
    """
    return JSONResponse({"status": "healthy", "transport": "http"})


def _configure_logging() -> None:
    """Configure logging from LOG_LEVEL environment variable.

    Reads LOG_LEVEL environment variable (default: INFO) and configures
    the root logger. Valid values: DEBUG, INFO, WARNING, ERROR, CRITICAL.
    """
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    if log_level_str not in valid_levels:
        invalid_level = log_level_str
        log_level_str = "INFO"
        logger.warning(
            "Invalid LOG_LEVEL '%s', defaulting to INFO. Valid values: %s",
            invalid_level,
            ", ".join(sorted(valid_levels)),
        )

    log_level = getattr(logging, log_level_str)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # stderr only: stdout carries the stdio transport
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        root_logger.addHandler(handler)


def main() -> None:
    """Main entry point for the server."""
    _configure_logging()
    mcp.run()
