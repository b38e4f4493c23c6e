"""Placeholder handlers for third-party service domains.

These describe the action they would take. Real SDK calls plug in by
registering replacement descriptors under the same domain/name.
"""

from typing import Any

from conduit_core.tools.registry import ToolRegistry


def _placeholder(message: str, integration: str) -> dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "note": f"This requires proper {integration} integration",
    }


def register(registry: ToolRegistry) -> None:
    """Register calendar, github, notion and slack placeholders."""

    @registry.tool(
        "calendar",
        "create_event",
        "Create a calendar event",
        {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Event title"},
                "start": {"type": "string", "description": "Start date/time (ISO format)"},
                "end": {"type": "string", "description": "End date/time (ISO format)"},
                "description": {"type": "string", "description": "Event description"},
            },
            "required": ["title", "start", "end"],
        },
    )
    def create_event(params: dict[str, Any]) -> dict[str, Any]:
        return _placeholder(
            f"Would create event \"{params.get('title')}\" "
            f"from {params.get('start')} to {params.get('end')}",
            "system calendar",
        )

    @registry.tool(
        "github",
        "list_repositories",
        "List user repositories",
        {
            "type": "object",
            "properties": {
                "username": {"type": "string", "description": "GitHub username"},
                "type": {
                    "type": "string",
                    "enum": ["all", "owner", "public", "private"],
                    "default": "all",
                },
            },
            "required": ["username"],
        },
    )
    def list_repositories(params: dict[str, Any]) -> dict[str, Any]:
        repo_type = params.get("type", "all")
        return _placeholder(
            f"Would list {repo_type} repositories for {params.get('username')}",
            "GitHub API",
        )

    @registry.tool(
        "github",
        "create_issue",
        "Create a new GitHub issue",
        {
            "type": "object",
            "properties": {
                "owner": {"type": "string", "description": "Repository owner"},
                "repo": {"type": "string", "description": "Repository name"},
                "title": {"type": "string", "description": "Issue title"},
                "body": {"type": "string", "description": "Issue description"},
                "labels": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["owner", "repo", "title"],
        },
    )
    def create_issue(params: dict[str, Any]) -> dict[str, Any]:
        return _placeholder(
            f"Would create issue \"{params.get('title')}\" "
            f"in {params.get('owner')}/{params.get('repo')}",
            "GitHub API",
        )

    @registry.tool(
        "notion",
        "query_database",
        "Query a Notion database",
        {
            "type": "object",
            "properties": {
                "database_id": {"type": "string", "description": "Database ID"},
                "filter": {"type": "object", "description": "Query filter"},
                "sorts": {"type": "array", "description": "Sort criteria"},
            },
            "required": ["database_id"],
        },
    )
    def query_database(params: dict[str, Any]) -> dict[str, Any]:
        return _placeholder(
            f"Would query Notion database {params.get('database_id')}",
            "Notion API",
        )

    @registry.tool(
        "slack",
        "send_message",
        "Send a message to a Slack channel",
        {
            "type": "object",
            "properties": {
                "channel": {"type": "string", "description": "Channel ID or name"},
                "text": {"type": "string", "description": "Message text"},
                "thread_ts": {"type": "string", "description": "Thread timestamp (optional)"},
            },
            "required": ["channel", "text"],
        },
    )
    def send_message(params: dict[str, Any]) -> dict[str, Any]:
        return _placeholder(
            f"Would send message to {params.get('channel')}: \"{params.get('text')}\"",
            "Slack API",
        )
