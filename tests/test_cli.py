"""Tests for the mcp-atlassian command line entry point."""

import io
import json
import logging
import sys

import pytest

from conftest import make_config
from mcp_atlassian import cli


@pytest.fixture
def patched_config(monkeypatch):
    config = make_config(atlassian_api_token="tok-123", jira_projects_filter=["OPS"])
    monkeypatch.setattr(cli, "_load_config", lambda: config)
    return config


def test_check_config_prints_summary_without_token(patched_config, capsys):
    assert cli.main(["check-config"]) == 0
    out = capsys.readouterr().out
    summary = json.loads(out)
    assert summary["base_url"] == "https://acme.atlassian.net"
    assert summary["jira_projects_filter"] == ["OPS"]
    assert len(summary["jira_search_fields"]) == 17
    assert "tok-123" not in out


def test_check_config_fails_on_invalid_env(capsys, monkeypatch):
    monkeypatch.setattr("mcp_atlassian.core.config.load_dotenv", lambda: False)
    assert cli.main(["check-config"]) == 1
    assert "Configuration error" in capsys.readouterr().err


def test_list_tools(patched_config, capsys):
    assert cli.main(["list-tools"]) == 0
    tools = json.loads(capsys.readouterr().out)
    assert len(tools) == 14


def test_serve_is_the_default_command(patched_config, monkeypatch):
    stdin = io.TextIOWrapper(io.BytesIO(b'{"jsonrpc":"2.0","id":1,"method":"prompts/list"}\n'), encoding="utf-8")
    stdout = io.StringIO()
    monkeypatch.setattr(sys, "stdin", stdin)
    monkeypatch.setattr(sys, "stdout", stdout)

    assert cli.main([]) == 0

    assert json.loads(stdout.getvalue()) == {"jsonrpc": "2.0", "id": 1, "result": {"prompts": []}}


def test_log_level_flag(patched_config, capsys):
    cli.main(["--log-level", "debug", "check-config"])
    assert logging.getLogger().level == logging.DEBUG
