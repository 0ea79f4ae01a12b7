"""Shared fixtures for mcp-atlassian tests."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Tuple
from urllib.parse import urlparse

import pytest
import requests

from mcp_atlassian.core.config import AtlassianConfig
from mcp_atlassian.core.http import AtlassianHttp


def requests_response(status_code: int, payload: Any, url: str = "https://acme.atlassian.net") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if payload is None:
        raw = b""
    elif isinstance(payload, (dict, list)):
        raw = json.dumps(payload).encode("utf-8")
    else:
        raw = str(payload).encode("utf-8")
    response._content = raw
    response.url = url
    response.headers["Content-Type"] = "application/json"
    return response


class StubSession:
    """Records requests and answers from a (METHOD, path) mapping."""

    def __init__(self, mapping: Dict[Tuple[str, str], Any]):
        self.mapping = mapping
        self.calls: List[Dict[str, Any]] = []
        self.headers: Dict[str, str] = {}
        self.closed = False

    def request(self, *, method: str, url: str, json: Any, params: Any, timeout: float):
        path = urlparse(url).path
        key = (method.upper(), path)
        self.calls.append(
            {
                "method": method.upper(),
                "url": url,
                "path": path,
                "json": json,
                "params": params,
                "timeout": timeout,
            }
        )
        result = self.mapping[key]
        if isinstance(result, Exception):
            raise result
        return result

    def close(self) -> None:
        self.closed = True


def make_config(**overrides) -> AtlassianConfig:
    values = {
        "atlassian_domain": "acme.atlassian.net",
        "atlassian_email": "bot@acme.io",
        "atlassian_api_token": "secret-token",
    }
    values.update(overrides)
    return AtlassianConfig(**values)


@pytest.fixture
def config() -> AtlassianConfig:
    return make_config()


@pytest.fixture
def make_http():
    def _make(mapping: Dict[Tuple[str, str], Any], cfg: AtlassianConfig = None):
        cfg = cfg or make_config()
        stub = StubSession(mapping)
        return AtlassianHttp(cfg.endpoint(), session=stub), stub

    return _make


@pytest.fixture(autouse=True)
def _clear_atlassian_env(monkeypatch):
    for name in (
        "ATLASSIAN_DOMAIN",
        "ATLASSIAN_EMAIL",
        "ATLASSIAN_API_TOKEN",
        "MAX_CONNECTIONS",
        "REQUEST_TIMEOUT_MS",
        "JIRA_PROJECTS_FILTER",
        "CONFLUENCE_SPACES_FILTER",
        "JIRA_SEARCH_DEFAULT_FIELDS",
        "JIRA_SEARCH_CUSTOM_FIELDS",
        "JIRA_CUSTOM_FIELDS",
        "CONFLUENCE_CUSTOM_INCLUDES",
        "RESPONSE_EXCLUDE_FIELDS",
        "LOG_LEVEL",
        "JSON_LOGS",
        "MCP_TOOL_CALL_WARN_MS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
