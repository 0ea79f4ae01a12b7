"""
Jira Cloud tools (REST API v3).
"""

import logging
from typing import Any, Dict

from mcp_atlassian.core.config import AtlassianConfig
from mcp_atlassian.errors import InvalidArgumentError
from mcp_atlassian.tools.adf import normalize_document
from mcp_atlassian.tools.base import (
    ToolHandler,
    bool_arg,
    int_arg,
    str_arg,
    str_list_arg,
)
from mcp_atlassian.tools.field_filtering import (
    JIRA_EXPAND,
    issue_query_params,
    project_scope,
    resolve_search_fields,
)

logger = logging.getLogger("McpAtlassian.tools.jira")

ISSUE_PATH = "/rest/api/3/issue"
SEARCH_PATH = "/rest/api/3/search/jql"
DEFAULT_SEARCH_LIMIT = 20


def _issue_path(issue_key: str, *suffix: str) -> str:
    return "/".join((ISSUE_PATH, issue_key) + suffix)


class GetIssueHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        issue_key = str_arg(arguments, "issue_key")
        params = issue_query_params(
            config,
            include_all_fields=bool_arg(arguments, "include_all_fields"),
            additional_fields=str_list_arg(arguments, "additional_fields"),
        )
        data = self.http.request_json(
            "GET", _issue_path(issue_key), params=params or None, failure="Failed to get issue"
        )
        return {"success": True, "issue": data}


class SearchHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        jql = project_scope(config).apply(str_arg(arguments, "jql"))
        limit = int_arg(arguments, "limit", DEFAULT_SEARCH_LIMIT)
        fields = resolve_search_fields(str_list_arg(arguments, "fields"), config)
        logger.debug("Jira search with %d fields: %s", len(fields), ",".join(fields))

        data = self.http.request_json(
            "GET",
            SEARCH_PATH,
            params={
                "jql": jql,
                "maxResults": str(limit),
                "fields": ",".join(fields),
                "expand": JIRA_EXPAND,
            },
            failure="Search failed",
            include_detail=True,
        )
        data = data if isinstance(data, dict) else {}
        return {
            "success": True,
            "issues": data.get("issues", []),
            "total": data.get("total"),
        }


class CreateIssueHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        body = {
            "fields": {
                "project": {"key": str_arg(arguments, "project_key")},
                "summary": str_arg(arguments, "summary"),
                "issuetype": {"name": str_arg(arguments, "issue_type")},
                "description": normalize_document(arguments.get("description"), "description"),
            }
        }
        data = self.http.request_json(
            "POST", ISSUE_PATH, body=body, failure="Failed to create issue", include_detail=True
        )
        logger.info("Created Jira issue %s", data.get("key") if isinstance(data, dict) else "?")
        return {"success": True, "issue": data}


class UpdateIssueHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        issue_key = str_arg(arguments, "issue_key")
        fields = arguments.get("fields")
        if not isinstance(fields, dict):
            raise InvalidArgumentError("argument 'fields' must be an object")
        if "description" in fields:
            fields = dict(fields)
            fields["description"] = normalize_document(fields["description"], "fields.description")

        self.http.request_json(
            "PUT", _issue_path(issue_key), body={"fields": fields}, failure="Failed to update issue"
        )
        return {"success": True, "message": f"Issue {issue_key} updated"}


class AddCommentHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        issue_key = str_arg(arguments, "issue_key")
        body = {"body": normalize_document(arguments.get("comment"), "comment")}
        data = self.http.request_json(
            "POST", _issue_path(issue_key, "comment"), body=body, failure="Failed to add comment"
        )
        return {"success": True, "comment": data}


class UpdateCommentHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        issue_key = str_arg(arguments, "issue_key")
        comment_id = str_arg(arguments, "comment_id")
        body = {"body": normalize_document(arguments.get("body"), "body")}
        data = self.http.request_json(
            "PUT",
            _issue_path(issue_key, "comment", comment_id),
            body=body,
            failure="Failed to update comment",
        )
        return {"success": True, "comment": data}


class TransitionIssueHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        issue_key = str_arg(arguments, "issue_key")
        transition_id = str_arg(arguments, "transition_id")
        self.http.request_json(
            "POST",
            _issue_path(issue_key, "transitions"),
            body={"transition": {"id": transition_id}},
            failure="Failed to transition issue",
        )
        return {"success": True, "message": f"Issue {issue_key} transitioned"}


class GetTransitionsHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        issue_key = str_arg(arguments, "issue_key")
        data = self.http.request_json(
            "GET", _issue_path(issue_key, "transitions"), failure="Failed to get transitions"
        )
        data = data if isinstance(data, dict) else {}
        return {"success": True, "transitions": data.get("transitions", [])}
