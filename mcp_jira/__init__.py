"""Jira MCP Server - Model Context Protocol server for Jira Cloud."""

__version__ = "0.1.0"
