"""
Confluence Cloud tools.

Search uses the v1 CQL endpoint; page reads and writes use the v2 API.
"""

import logging
from typing import Any, Dict, Optional

from mcp_atlassian.core.config import AtlassianConfig
from mcp_atlassian.errors import RemoteError
from mcp_atlassian.tools.base import (
    ToolHandler,
    bool_arg,
    int_arg,
    optional_str_arg,
    str_arg,
    str_list_arg,
)
from mcp_atlassian.tools.field_filtering import (
    confluence_search_expand,
    confluence_v2_params,
    space_scope,
)

logger = logging.getLogger("McpAtlassian.tools.confluence")

SEARCH_PATH = "/wiki/rest/api/search"
PAGES_PATH = "/wiki/api/v2/pages"
SPACES_PATH = "/wiki/api/v2/spaces"
DEFAULT_SEARCH_LIMIT = 10


def _page_path(page_id: str, suffix: Optional[str] = None) -> str:
    path = f"{PAGES_PATH}/{page_id}"
    return f"{path}/{suffix}" if suffix else path


def _v2_params(arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, str]:
    return confluence_v2_params(
        config,
        include_all_fields=bool_arg(arguments, "include_all_fields"),
        additional_includes=str_list_arg(arguments, "additional_expand"),
    )


def _results(data: Any) -> Any:
    if isinstance(data, dict):
        return data.get("results", [])
    return []


def _storage_body(content: str) -> Dict[str, str]:
    return {"representation": "storage", "value": content}


class SearchHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        cql = space_scope(config).apply(str_arg(arguments, "query"))
        params = {
            "cql": cql,
            "limit": str(int_arg(arguments, "limit", DEFAULT_SEARCH_LIMIT)),
            "expand": confluence_search_expand(
                include_all_fields=bool_arg(arguments, "include_all_fields"),
                additional_expand=str_list_arg(arguments, "additional_expand"),
            ),
        }
        data = self.http.request_json("GET", SEARCH_PATH, params=params, failure="Search failed")
        data = data if isinstance(data, dict) else {}
        return {
            "success": True,
            "results": data.get("results", []),
            "total": data.get("totalSize"),
        }


class GetPageHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        page_id = str_arg(arguments, "page_id")
        data = self.http.request_json(
            "GET", _page_path(page_id), params=_v2_params(arguments, config), failure="Failed to get page"
        )
        return {"success": True, "page": data}


class GetPageChildrenHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        page_id = str_arg(arguments, "page_id")
        data = self.http.request_json(
            "GET",
            _page_path(page_id, "children"),
            params=_v2_params(arguments, config),
            failure="Failed to get child pages",
        )
        return {"success": True, "children": _results(data)}


class GetCommentsHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        page_id = str_arg(arguments, "page_id")
        data = self.http.request_json(
            "GET",
            _page_path(page_id, "footer-comments"),
            params=_v2_params(arguments, config),
            failure="Failed to get comments",
        )
        return {"success": True, "comments": _results(data)}


class CreatePageHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        space_key = str_arg(arguments, "space_key")
        title = str_arg(arguments, "title")
        content = str_arg(arguments, "content")
        parent_id = optional_str_arg(arguments, "parent_id")

        space_id = self._resolve_space_id(space_key)
        body: Dict[str, Any] = {
            "spaceId": space_id,
            "title": title,
            "body": _storage_body(content),
        }
        if parent_id:
            body["parentId"] = parent_id

        data = self.http.request_json(
            "POST",
            PAGES_PATH,
            params=_v2_params(arguments, config),
            body=body,
            failure="Failed to create page",
            include_detail=True,
        )
        logger.info("Created Confluence page '%s' in space %s", title, space_key)
        return {"success": True, "page": data}

    def _resolve_space_id(self, space_key: str) -> str:
        data = self.http.request_json(
            "GET",
            SPACES_PATH,
            params={"keys": space_key},
            failure=f"Failed to get space ID for key '{space_key}'",
        )
        results = _results(data)
        if results and isinstance(results[0], dict) and results[0].get("id") is not None:
            return str(results[0]["id"])
        raise RemoteError(f"Space '{space_key}' not found", path=SPACES_PATH, payload=data)


class UpdatePageHandler(ToolHandler):
    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        page_id = str_arg(arguments, "page_id")
        title = str_arg(arguments, "title")
        content = str_arg(arguments, "content")

        if arguments.get("version_number") is not None:
            current_version = int_arg(arguments, "version_number", 1)
        else:
            current_version = self._current_version(page_id)

        body = {
            "id": page_id,
            "title": title,
            "body": _storage_body(content),
            "version": {"number": current_version + 1},
        }
        data = self.http.request_json(
            "PUT",
            _page_path(page_id),
            params=_v2_params(arguments, config),
            body=body,
            failure="Failed to update page",
            include_detail=True,
        )
        return {"success": True, "page": data}

    def _current_version(self, page_id: str) -> int:
        page = self.http.request_json(
            "GET",
            _page_path(page_id),
            params={"include-version": "true"},
            failure="Failed to get page for update",
        )
        version = page.get("version") if isinstance(page, dict) else None
        number = version.get("number") if isinstance(version, dict) else None
        if isinstance(number, bool) or not isinstance(number, int):
            raise RemoteError("Failed to get current version", path=_page_path(page_id), payload=page)
        return number
