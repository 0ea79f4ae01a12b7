"""Tests for stderr logging setup and tool-call telemetry."""

import json
import logging
import sys

import pytest

from mcp_atlassian.core.log import JsonFormatter, configure_logging, resolve_level
from mcp_atlassian.mcp.metrics import ToolCallMetrics


@pytest.mark.parametrize("raw, level", [
    (None, logging.WARNING),
    ("warn", logging.WARNING),
    ("INFO", logging.INFO),
    ("trace", logging.DEBUG),
    ("nonsense", logging.WARNING),
])
def test_resolve_level(raw, level):
    assert resolve_level(raw) == level


def test_configure_logging_targets_stderr(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "info")
    configure_logging()
    root = logging.getLogger()
    assert root.level == logging.INFO
    assert all(getattr(handler, "stream", None) is sys.stderr for handler in root.handlers)


def test_json_logs_from_env(monkeypatch):
    monkeypatch.setenv("JSON_LOGS", "true")
    configure_logging()
    assert isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)


@pytest.mark.parametrize("raw", ["0", "false", "off", ""])
def test_json_logs_disabled_values(monkeypatch, raw):
    monkeypatch.setenv("JSON_LOGS", raw)
    configure_logging()
    assert not isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)


def test_json_logs_accepts_padded_yes(monkeypatch):
    monkeypatch.setenv("JSON_LOGS", " Yes ")
    configure_logging()
    assert isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)


def test_json_formatter_includes_extras():
    record = logging.LogRecord("McpAtlassian.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.tool = "jira_search"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["tool"] == "jira_search"


def test_metrics_outcome_and_size(caplog):
    metrics = ToolCallMetrics(3, "jira_search")
    message = {"jsonrpc": "2.0", "id": 3, "error": {"code": -32603, "message": "boom"}}
    metrics.record_response(message, json.dumps(message))

    with caplog.at_level(logging.INFO, logger="McpAtlassian.mcp.metrics"):
        metrics.log_telemetry(warn_threshold_ms=60000)

    assert metrics.get_outcome() == "error"
    assert metrics.response_bytes == len(json.dumps(message)) + 1
    assert "name=jira_search" in caplog.text
    assert "outcome=error" in caplog.text


def test_slow_calls_log_warning(caplog):
    metrics = ToolCallMetrics(1, "confluence_search")
    with caplog.at_level(logging.INFO, logger="McpAtlassian.mcp.metrics"):
        metrics.log_telemetry(warn_threshold_ms=0)
    assert caplog.records[-1].levelno == logging.WARNING
