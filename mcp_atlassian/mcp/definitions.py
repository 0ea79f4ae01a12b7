from typing import Any, Dict, List

from mcp_atlassian.core.config import AtlassianConfig
from mcp_atlassian.tools.field_filtering import resolve_search_fields

_INCLUDE_ALL_FIELDS = {
    "type": "boolean",
    "default": False,
    "description": "Return every field the API offers instead of the trimmed default projection.",
}
_ADDITIONAL_EXPAND = {
    "type": "array",
    "items": {"type": "string"},
    "description": "Extra expand/include names to request on top of the defaults (e.g., ['labels']).",
}
_RICH_TEXT = ["string", "object"]


def _search_fields_description(config: AtlassianConfig) -> str:
    fields = resolve_search_fields(None, config)
    return (
        f"Optional: Array of field names to return. If not specified, returns {len(fields)} "
        f"default fields: {', '.join(fields)}\n\n"
        "To minimize tokens, specify only the fields you need "
        '(e.g., ["key","summary","status","assignee"]).'
    )


def build_tool_schemas(config: AtlassianConfig) -> List[Dict[str, Any]]:
    """Tool descriptors in catalog order. The jira_search field hint depends on config."""
    return [
        {
            "name": "jira_get_issue",
            "description": "Get Jira issue by key",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "issue_key": {"type": "string", "description": "Issue key (e.g., 'PROJECT-123'). Case-sensitive."},
                    "include_all_fields": _INCLUDE_ALL_FIELDS,
                    "additional_fields": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Extra field names to return alongside the essential fields.",
                    },
                },
                "required": ["issue_key"],
            },
        },
        {
            "name": "jira_search",
            "description": "Search Jira issues using JQL",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "jql": {
                        "type": "string",
                        "description": "JQL query. Must include search condition before ORDER BY (e.g., 'project = KEY ORDER BY created DESC'). ORDER BY only works with orderable fields (dates, versions).",
                    },
                    "limit": {"type": "number", "default": 20, "description": "Maximum results (default: 20)"},
                    "fields": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": _search_fields_description(config),
                    },
                },
                "required": ["jql"],
            },
        },
        {
            "name": "jira_create_issue",
            "description": "Create Jira issue",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "project_key": {"type": "string", "description": "Project key"},
                    "summary": {"type": "string", "description": "Issue summary"},
                    "issue_type": {"type": "string", "description": "Issue type name (e.g., 'Task', 'Bug', 'Story')."},
                    "description": {
                        "type": _RICH_TEXT,
                        "description": "Issue description - accepts plain text (string, auto-converted to ADF) or ADF object",
                    },
                },
                "required": ["project_key", "summary", "issue_type"],
            },
        },
        {
            "name": "jira_update_issue",
            "description": "Update Jira issue",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "issue_key": {"type": "string", "description": "Issue key"},
                    "fields": {
                        "type": "object",
                        "description": "Fields to update as JSON object (e.g., {\"summary\": \"New title\"}). Custom fields use 'customfield_*' format. The 'description' field accepts plain text (auto-converted to ADF) or ADF object.",
                    },
                },
                "required": ["issue_key", "fields"],
            },
        },
        {
            "name": "jira_add_comment",
            "description": "Add comment to Jira issue",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "issue_key": {"type": "string", "description": "Issue key"},
                    "comment": {
                        "type": _RICH_TEXT,
                        "description": "Comment text - accepts plain text (string, auto-converted to ADF) or ADF object",
                    },
                },
                "required": ["issue_key", "comment"],
            },
        },
        {
            "name": "jira_update_comment",
            "description": "Update an existing comment on a Jira issue with rich text formatting (ADF)",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "issue_key": {"type": "string", "description": "Issue key (e.g., 'PROJ-123')"},
                    "comment_id": {
                        "type": "string",
                        "description": "Comment ID to update (obtained from comment object's 'id' field)",
                    },
                    "body": {
                        "type": _RICH_TEXT,
                        "description": "Comment body - accepts plain text (string, auto-converted to ADF) or ADF object",
                    },
                },
                "required": ["issue_key", "comment_id", "body"],
            },
        },
        {
            "name": "jira_transition_issue",
            "description": "Transition Jira issue status",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "issue_key": {"type": "string", "description": "Issue key"},
                    "transition_id": {
                        "type": "string",
                        "description": "Transition ID. Get available transition IDs using jira_get_transitions for the issue's current status.",
                    },
                },
                "required": ["issue_key", "transition_id"],
            },
        },
        {
            "name": "jira_get_transitions",
            "description": "Get Jira issue transitions",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "issue_key": {"type": "string", "description": "Issue key"},
                },
                "required": ["issue_key"],
            },
        },
        {
            "name": "confluence_search",
            "description": "Search Confluence using CQL",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "CQL query. Format: field operator value (e.g., 'type=page AND space=\"SPACE\"'). Use text ~ \"keyword\" for text search.",
                    },
                    "limit": {"type": "number", "default": 10, "description": "Max results"},
                    "include_all_fields": _INCLUDE_ALL_FIELDS,
                    "additional_expand": _ADDITIONAL_EXPAND,
                },
                "required": ["query"],
            },
        },
        {
            "name": "confluence_get_page",
            "description": "Get Confluence page by ID",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "page_id": {"type": "string", "description": "Page ID"},
                    "include_all_fields": _INCLUDE_ALL_FIELDS,
                    "additional_expand": _ADDITIONAL_EXPAND,
                },
                "required": ["page_id"],
            },
        },
        {
            "name": "confluence_get_page_children",
            "description": "Get page child pages",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "page_id": {"type": "string", "description": "Page ID"},
                    "include_all_fields": _INCLUDE_ALL_FIELDS,
                    "additional_expand": _ADDITIONAL_EXPAND,
                },
                "required": ["page_id"],
            },
        },
        {
            "name": "confluence_get_comments",
            "description": "Get page comments",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "page_id": {"type": "string", "description": "Page ID"},
                    "include_all_fields": _INCLUDE_ALL_FIELDS,
                    "additional_expand": _ADDITIONAL_EXPAND,
                },
                "required": ["page_id"],
            },
        },
        {
            "name": "confluence_create_page",
            "description": "Create Confluence page",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "space_key": {"type": "string", "description": "Space key"},
                    "title": {"type": "string", "description": "Page title"},
                    "content": {"type": "string", "description": "Page content in HTML storage format."},
                    "parent_id": {"type": "string", "description": "Parent page ID"},
                    "include_all_fields": _INCLUDE_ALL_FIELDS,
                    "additional_expand": _ADDITIONAL_EXPAND,
                },
                "required": ["space_key", "title", "content"],
            },
        },
        {
            "name": "confluence_update_page",
            "description": "Update Confluence page",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "page_id": {"type": "string", "description": "Page ID"},
                    "title": {"type": "string", "description": "Page title"},
                    "content": {"type": "string", "description": "Page content in HTML storage format"},
                    "version_number": {
                        "type": "number",
                        "description": "Current version number (optional). When omitted it is retrieved from the page; the update is sent as this number plus one.",
                    },
                    "include_all_fields": _INCLUDE_ALL_FIELDS,
                    "additional_expand": _ADDITIONAL_EXPAND,
                },
                "required": ["page_id", "title", "content"],
            },
        },
    ]


READ_ONLY_TOOLS = {
    "jira_get_issue", "jira_search", "jira_get_transitions",
    "confluence_search", "confluence_get_page", "confluence_get_page_children",
    "confluence_get_comments",
}
