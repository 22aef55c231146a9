"""Shared fixtures for Jira MCP tests."""

from collections.abc import Callable
from typing import Any
from unittest.mock import Mock, patch

import pytest

from mcp_jira.server import JiraMCPServer


@pytest.fixture
def mock_jira_client():
    """Fixture that provides a properly initialized mock client."""
    with patch("mcp_jira.server.JiraClient") as mock_client_class:
        mock_instance = Mock()
        mock_instance.url = "https://example.atlassian.net"
        mock_instance.get_current_user.return_value = {
            "accountId": "5b10a2844c20165700ede21g",
            "displayName": "Test User",
            "emailAddress": "test@example.com",
        }
        mock_client_class.return_value = mock_instance
        yield mock_instance, mock_client_class


@pytest.fixture
def server_instance(mock_jira_client):
    """Fixture that provides a JiraMCPServer wired to the mock client."""
    mock_instance, _ = mock_jira_client
    server_inst = JiraMCPServer()
    server_inst.client = mock_instance
    return server_inst


@pytest.fixture
def decorator_capturer():
    """Factory replacing a FastMCP decorator with one that records functions by name.

    Returns (captured, capture): install ``capture`` in place of e.g.
    ``mcp.tool``, re-run the setup method, then call ``captured[name]``.
    Functions registered with a positional argument (resource URIs) are
    keyed by that argument, all others by function name.
    """

    def _make(_original: Callable[..., Any]) -> tuple[dict[str, Callable[..., Any]], Callable[..., Any]]:
        captured: dict[str, Callable[..., Any]] = {}

        def capture(*args: Any, **_kwargs: Any) -> Callable[..., Any]:
            def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
                captured[args[0] if args else func.__name__] = func
                return func

            return decorator

        return captured, capture

    return _make


@pytest.fixture
def tools(server_instance, decorator_capturer):
    """Tool functions of server_instance keyed by tool name."""
    captured, capture = decorator_capturer(server_instance.mcp.tool)
    server_instance.mcp.tool = capture  # type: ignore[method-assign, assignment]
    server_instance._setup_tools()
    return captured


@pytest.fixture
def issue_factory():
    """Factory fixture to create issue payloads with custom fields."""

    def _make_issue(key: str = "PROJ-1", **fields: Any) -> dict[str, Any]:
        base_fields: dict[str, Any] = {
            "summary": "Login page times out",
            "issuetype": {"name": "Bug"},
            "status": {"name": "In Progress"},
            "priority": {"name": "High"},
        }
        base_fields.update(fields)
        return {"id": "10001", "key": key, "fields": base_fields}

    return _make_issue


@pytest.fixture
def sample_comment():
    """Provides a sample comment payload."""
    return {
        "id": "10042",
        "author": {"accountId": "acc-1", "displayName": "Alice Smith"},
        "created": "2024-01-15T10:30:00.000+0000",
        "body": {
            "type": "doc",
            "version": 1,
            "content": [{"type": "paragraph", "content": [{"type": "text", "text": "Looking into it."}]}],
        },
    }
