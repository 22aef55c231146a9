"""Pydantic models for Jira tool parameters."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

ISSUE_KEY_DESCRIPTION = "The issue key, e.g. PROJ-123"


class StrictBaseModel(BaseModel):
    """Base model with strict validation that forbids extra fields.

    This ensures that typos or incorrect field names in request parameters
    are caught early with clear validation errors rather than being silently ignored.
    String fields are automatically stripped of leading/trailing whitespace.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class IssueNotFoundError(ValueError):
    """Exception raised when an issue is not found, with lookup guidance.

    Attributes:
        issue_key: The issue key that was not found
        message: Explanation with guidance
    """

    def __init__(self, issue_key: str) -> None:
        """Initialize the exception with helpful guidance."""
        self.issue_key = issue_key
        self.message = (
            f"Issue {issue_key} not found or not visible to the configured account. "
            f"Note: Issue keys are case-sensitive and include the project prefix (e.g. PROJ-123). "
            f"Use jira_search_issues with a JQL query to locate the issue first."
        )
        super().__init__(self.message)


class IssueKeyParams(StrictBaseModel):
    """Parameters for tools that act on a single issue."""

    issue_key: str = Field(min_length=1, max_length=255, description=ISSUE_KEY_DESCRIPTION)


class SearchIssuesParams(StrictBaseModel):
    """JQL search parameters."""

    jql: str = Field(
        min_length=1,
        description="JQL query string, e.g. 'project = PROJ AND status = \"In Progress\"'",
    )
    max_results: int = Field(default=10, ge=1, le=100, description="Maximum number of results to return (1-100)")
    next_page_token: str | None = Field(None, description="Token from a previous search to fetch the next page")


class GetCommentsParams(StrictBaseModel):
    """Get issue comments parameters."""

    issue_key: str = Field(min_length=1, max_length=255, description=ISSUE_KEY_DESCRIPTION)
    max_results: int = Field(default=20, ge=1, le=100, description="Maximum comments to fetch (1-100)")
    start_at: int = Field(default=0, ge=0, description="Number of comments to skip for pagination")


class AddCommentParams(StrictBaseModel):
    """Add comment parameters."""

    issue_key: str = Field(min_length=1, max_length=255, description=ISSUE_KEY_DESCRIPTION)
    comment: str = Field(min_length=1, description="The comment text (plain text, converted to ADF)")


class CreateIssueParams(StrictBaseModel):
    """Create issue parameters."""

    project_key: str = Field(min_length=1, max_length=255, description="The project key, e.g. PROJ")
    summary: str = Field(min_length=1, max_length=255, description="Issue summary / title")
    issue_type: str = Field(default="Task", description="Issue type name (Task, Bug, Story, Epic, etc.)")
    description: str | None = Field(None, description="Issue description in plain text")
    assignee_account_id: str | None = Field(None, description="Assignee Jira account ID")
    labels: list[str] | None = Field(None, description="Labels to add")
    priority: str | None = Field(None, description="Priority name (Highest, High, Medium, Low, Lowest)")
    parent_key: str | None = Field(None, description="Parent issue key for sub-tasks")

    @field_validator("description")
    @classmethod
    def blank_description_to_none(cls, v: str | None) -> str | None:
        """Treat an empty description as omitted."""
        return v or None


class UpdateIssueParams(StrictBaseModel):
    """Update issue parameters.

    Only fields that are given are sent. Passing assignee_account_id
    explicitly as null unassigns the issue.
    """

    issue_key: str = Field(min_length=1, max_length=255, description=ISSUE_KEY_DESCRIPTION)
    summary: str | None = Field(None, max_length=255, description="New summary")
    description: str | None = Field(None, description="New description (plain text)")
    priority: str | None = Field(None, description="New priority name")
    labels: list[str] | None = Field(None, description="Replace labels")
    assignee_account_id: str | None = Field(None, description="New assignee account ID (null to unassign)")

    @field_validator("description")
    @classmethod
    def blank_description_to_none(cls, v: str | None) -> str | None:
        """Treat an empty description as omitted."""
        return v or None


class TransitionIssueParams(StrictBaseModel):
    """Transition issue parameters."""

    issue_key: str = Field(min_length=1, max_length=255, description=ISSUE_KEY_DESCRIPTION)
    transition_id: str = Field(min_length=1, description="Transition ID (from jira_get_transitions)")
    comment: str | None = Field(None, description="Optional comment to add with the transition")

    @field_validator("comment")
    @classmethod
    def blank_comment_to_none(cls, v: str | None) -> str | None:
        """Treat an empty comment as omitted."""
        return v or None


class AssignIssueParams(StrictBaseModel):
    """Assign issue parameters."""

    issue_key: str = Field(min_length=1, max_length=255, description=ISSUE_KEY_DESCRIPTION)
    account_id: str | None = Field(description="The Jira account ID of the assignee, or null to unassign")


class FindUsersParams(StrictBaseModel):
    """Find users parameters."""

    query: str = Field(min_length=1, description="Name or email to search for")
    max_results: int = Field(default=10, ge=1, le=100, description="Maximum users to return (1-100)")


class LinkIssuesParams(StrictBaseModel):
    """Link issues parameters."""

    link_type: str = Field(min_length=1, description='Link type name, e.g. "Blocks", "Relates", "Duplicate"')
    inward_issue_key: str = Field(min_length=1, max_length=255, description="The inward issue key")
    outward_issue_key: str = Field(min_length=1, max_length=255, description="The outward issue key")


class AddWorklogParams(StrictBaseModel):
    """Add worklog parameters."""

    issue_key: str = Field(min_length=1, max_length=255, description=ISSUE_KEY_DESCRIPTION)
    time_spent: str = Field(min_length=1, description='Time spent in Jira format, e.g. "2h 30m", "1d"')
    comment: str | None = Field(None, description="Optional worklog comment")

    @field_validator("comment")
    @classmethod
    def blank_comment_to_none(cls, v: str | None) -> str | None:
        """Treat an empty comment as omitted."""
        return v or None


class ListSprintsParams(StrictBaseModel):
    """List sprints parameters."""

    board_id: int = Field(gt=0, description="The Jira board ID (from jira_list_boards)")
    state: str | None = Field(None, description='Filter by state: "active", "future", "closed"')


class SprintIssuesParams(StrictBaseModel):
    """Get sprint issues parameters."""

    sprint_id: int = Field(gt=0, description="The sprint ID (from jira_list_sprints)")
