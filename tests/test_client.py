"""Tests for the Jira REST client wrapper."""

import os
from unittest.mock import Mock, patch

import pytest
import requests

from mcp_jira.client import (
    DEFAULT_SEARCH_FIELDS,
    DEFAULT_TIMEOUT,
    ConfigException,
    JiraAPIError,
    JiraClient,
)

BASE_URL = "https://example.atlassian.net"


def _response(status_code=200, json_data=None, content_type="application/json", text=""):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.headers = {"content-type": content_type} if content_type else {}
    response.json.return_value = json_data
    response.text = text
    return response


@pytest.fixture
def client():
    """Client built from explicit arguments."""
    return JiraClient(url=f"{BASE_URL}/", email="bot@example.com", api_token="secret", timeout=5)


@pytest.fixture
def mock_request():
    """Patch requests.request as used by the client."""
    with patch("mcp_jira.client.requests.request") as mock:
        mock.return_value = _response(json_data={})
        yield mock


# ==================== CONFIGURATION ====================


def test_client_strips_trailing_slashes():
    """Test that the base URL is normalized."""
    client = JiraClient(url=f"{BASE_URL}///", email="a@b.c", api_token="t")

    assert client.url == BASE_URL


def test_client_reads_environment():
    """Test configuration from environment variables."""
    env = {
        "JIRA_BASE_URL": BASE_URL,
        "JIRA_EMAIL": "env@example.com",
        "JIRA_API_TOKEN": "env-token",
        "JIRA_TIMEOUT": "12.5",
    }
    with patch.dict(os.environ, env, clear=True):
        client = JiraClient()

    assert client.url == BASE_URL
    assert client.email == "env@example.com"
    assert client.api_token == "env-token"
    assert client.timeout == 12.5


def test_client_invalid_timeout_falls_back_to_default():
    """Test that an unparsable JIRA_TIMEOUT uses the default."""
    env = {"JIRA_BASE_URL": BASE_URL, "JIRA_EMAIL": "a@b.c", "JIRA_API_TOKEN": "t", "JIRA_TIMEOUT": "soon"}
    with patch.dict(os.environ, env, clear=True):
        client = JiraClient()

    assert client.timeout == DEFAULT_TIMEOUT


def test_client_requires_url():
    """Test that a missing base URL is a configuration error."""
    with patch.dict(os.environ, {}, clear=True), pytest.raises(ConfigException, match="JIRA_BASE_URL"):
        JiraClient(email="a@b.c", api_token="t")


@pytest.mark.parametrize("email,token", [(None, "t"), ("a@b.c", None), (None, None)])
def test_client_requires_credentials(email, token):
    """Test that missing credentials are a configuration error."""
    with patch.dict(os.environ, {}, clear=True), pytest.raises(ConfigException, match="No authentication method"):
        JiraClient(url=BASE_URL, email=email, api_token=token)


# ==================== REQUEST HANDLING ====================


def test_request_sends_auth_headers_and_timeout(client, mock_request):
    """Test that every request carries basic auth, JSON headers and the timeout."""
    mock_request.return_value = _response(json_data={"accountId": "1"})

    result = client.get_current_user()

    assert result == {"accountId": "1"}
    mock_request.assert_called_once_with(
        "GET",
        f"{BASE_URL}/rest/api/3/myself",
        params=None,
        json=None,
        auth=("bot@example.com", "secret"),
        headers={"Accept": "application/json", "Content-Type": "application/json"},
        timeout=5,
    )


def test_request_error_raises_jira_api_error(client, mock_request):
    """Test that non-2xx responses raise with method, path, status and body."""
    mock_request.return_value = _response(status_code=404, text='{"errorMessages":["Issue does not exist"]}')

    with pytest.raises(JiraAPIError) as exc_info:
        client.get_issue("PROJ-999")

    error = exc_info.value
    assert error.status_code == 404
    assert error.method == "GET"
    assert error.path == "/issue/PROJ-999"
    assert str(error) == 'Jira API GET /issue/PROJ-999 returned 404: {"errorMessages":["Issue does not exist"]}'


def test_request_without_json_body_returns_none(client, mock_request):
    """Test that 204 No Content responses decode to None."""
    mock_request.return_value = _response(status_code=204, content_type=None)

    assert client.update_issue("PROJ-1", {"summary": "x"}) is None
    mock_request.return_value.json.assert_not_called()


def test_network_errors_propagate(client, mock_request):
    """Test that transport failures are not retried or swallowed."""
    mock_request.side_effect = requests.exceptions.ConnectionError("Connection refused")

    with pytest.raises(requests.exceptions.ConnectionError):
        client.get_issue("PROJ-1")

    assert mock_request.call_count == 1


# ==================== ENDPOINTS ====================


def test_get_issue_with_fields(client, mock_request):
    """Test that requested fields are joined into one query parameter."""
    client.get_issue("PROJ-1", fields=["summary", "status"])

    args, kwargs = mock_request.call_args
    assert args == ("GET", f"{BASE_URL}/rest/api/3/issue/PROJ-1")
    assert kwargs["params"] == {"fields": "summary,status"}


def test_create_issue_minimal_payload(client, mock_request):
    """Test that only required fields are sent when nothing optional is given."""
    mock_request.return_value = _response(json_data={"id": "10001", "key": "PROJ-2"})

    result = client.create_issue("PROJ", "Broken login", "Bug")

    assert result["key"] == "PROJ-2"
    args, kwargs = mock_request.call_args
    assert args == ("POST", f"{BASE_URL}/rest/api/3/issue")
    assert kwargs["json"] == {
        "fields": {"project": {"key": "PROJ"}, "summary": "Broken login", "issuetype": {"name": "Bug"}}
    }


def test_create_issue_full_payload(client, mock_request):
    """Test that optional fields are mapped to Jira's field shapes."""
    description = {"type": "doc", "version": 1, "content": []}

    client.create_issue(
        "PROJ",
        "Sub work",
        "Sub-task",
        description=description,
        assignee="acc-1",
        labels=["backend"],
        priority="High",
        parent_key="PROJ-1",
    )

    fields = mock_request.call_args.kwargs["json"]["fields"]
    assert fields["description"] == description
    assert fields["assignee"] == {"accountId": "acc-1"}
    assert fields["labels"] == ["backend"]
    assert fields["priority"] == {"name": "High"}
    assert fields["parent"] == {"key": "PROJ-1"}


def test_search_issues_defaults(client, mock_request):
    """Test default search fields and page size."""
    client.search_issues("project = PROJ")

    args, kwargs = mock_request.call_args
    assert args == ("GET", f"{BASE_URL}/rest/api/3/search/jql")
    assert kwargs["params"] == {
        "jql": "project = PROJ",
        "fields": ",".join(DEFAULT_SEARCH_FIELDS),
        "maxResults": 20,
    }


def test_search_issues_passes_page_token(client, mock_request):
    """Test that the provider's page token is passed through untouched."""
    client.search_issues("project = PROJ", fields=["summary"], max_results=5, next_page_token="tok==")

    params = mock_request.call_args.kwargs["params"]
    assert params["fields"] == "summary"
    assert params["maxResults"] == 5
    assert params["nextPageToken"] == "tok=="


def test_comments_endpoints(client, mock_request):
    """Test comment listing and creation."""
    body = {"type": "doc", "version": 1, "content": []}

    client.get_comments("PROJ-1", max_results=10, start_at=20)
    assert mock_request.call_args.kwargs["params"] == {"maxResults": 10, "startAt": 20}

    client.add_comment("PROJ-1", body)
    args, kwargs = mock_request.call_args
    assert args == ("POST", f"{BASE_URL}/rest/api/3/issue/PROJ-1/comment")
    assert kwargs["json"] == {"body": body}


def test_transition_issue_with_and_without_comment(client, mock_request):
    """Test that a transition comment is nested under update.comment."""
    client.transition_issue("PROJ-1", "31")
    assert mock_request.call_args.kwargs["json"] == {"transition": {"id": "31"}}

    comment = {"type": "doc", "version": 1, "content": []}
    client.transition_issue("PROJ-1", "31", comment)
    assert mock_request.call_args.kwargs["json"] == {
        "transition": {"id": "31"},
        "update": {"comment": [{"add": {"body": comment}}]},
    }


@pytest.mark.parametrize("account_id", ["acc-1", None])
def test_assign_issue(client, mock_request, account_id):
    """Test assignment and unassignment payloads."""
    client.assign_issue("PROJ-1", account_id)

    args, kwargs = mock_request.call_args
    assert args == ("PUT", f"{BASE_URL}/rest/api/3/issue/PROJ-1/assignee")
    assert kwargs["json"] == {"accountId": account_id}


def test_find_users(client, mock_request):
    """Test user search parameters."""
    client.find_users("alice")

    args, kwargs = mock_request.call_args
    assert args == ("GET", f"{BASE_URL}/rest/api/3/user/search")
    assert kwargs["params"] == {"query": "alice", "maxResults": 10}


def test_list_projects(client, mock_request):
    """Test project listing parameters."""
    client.list_projects()

    args, kwargs = mock_request.call_args
    assert args == ("GET", f"{BASE_URL}/rest/api/3/project/search")
    assert kwargs["params"] == {"maxResults": 50, "startAt": 0}


def test_worklog_endpoints(client, mock_request):
    """Test worklog listing and creation."""
    client.get_worklogs("PROJ-1")
    assert mock_request.call_args.args == ("GET", f"{BASE_URL}/rest/api/3/issue/PROJ-1/worklog")

    client.add_worklog("PROJ-1", "2h")
    assert mock_request.call_args.kwargs["json"] == {"timeSpent": "2h"}

    comment = {"type": "doc", "version": 1, "content": []}
    client.add_worklog("PROJ-1", "1d", comment)
    assert mock_request.call_args.kwargs["json"] == {"timeSpent": "1d", "comment": comment}


def test_link_issues(client, mock_request):
    """Test issue link payload."""
    client.link_issues("Blocks", "PROJ-1", "PROJ-2")

    args, kwargs = mock_request.call_args
    assert args == ("POST", f"{BASE_URL}/rest/api/3/issueLink")
    assert kwargs["json"] == {
        "type": {"name": "Blocks"},
        "inwardIssue": {"key": "PROJ-1"},
        "outwardIssue": {"key": "PROJ-2"},
    }


def test_agile_endpoints_use_agile_api(client, mock_request):
    """Test that board and sprint calls go to the Agile REST API."""
    client.get_boards()
    assert mock_request.call_args.args == ("GET", f"{BASE_URL}/rest/agile/1.0/board")
    assert mock_request.call_args.kwargs["params"] == {"maxResults": 50}

    client.get_sprints_for_board(7, state="active")
    assert mock_request.call_args.args == ("GET", f"{BASE_URL}/rest/agile/1.0/board/7/sprint")
    assert mock_request.call_args.kwargs["params"] == {"maxResults": 50, "state": "active"}

    client.get_sprint_issues(42, fields=["summary", "status"])
    assert mock_request.call_args.args == ("GET", f"{BASE_URL}/rest/agile/1.0/sprint/42/issue")
    assert mock_request.call_args.kwargs["params"] == {"maxResults": 100, "fields": "summary,status"}


def test_agile_error_message(client, mock_request):
    """Test that Agile API failures name the Agile API."""
    mock_request.return_value = _response(status_code=403, text="Forbidden")

    with pytest.raises(JiraAPIError, match="Jira Agile API GET /board returned 403"):
        client.get_boards()
