"""Tests for trimming read-only tool results."""

from conftest import make_config
from mcp_atlassian.tools.response_optimizer import (
    DEFAULT_EXCLUDE_FIELDS,
    OptimizationStats,
    ResponseOptimizer,
)


class _RecordingObserver:
    def __init__(self):
        self.records = []

    def record(self, stats: OptimizationStats) -> None:
        self.records.append(stats)


def test_default_exclude_list_size():
    assert len(DEFAULT_EXCLUDE_FIELDS) == 27
    assert "avatarUrls" in DEFAULT_EXCLUDE_FIELDS
    assert "edituiv2" in DEFAULT_EXCLUDE_FIELDS


def test_removes_excluded_fields_and_empty_strings_recursively():
    observer = _RecordingObserver()
    optimizer = ResponseOptimizer(observer=observer)
    payload = {
        "self": "https://acme.atlassian.net/rest/api/3/issue/1",
        "key": "A-1",
        "fields": {
            "assignee": {"displayName": "Ana", "avatarUrls": {"48x48": "u"}, "accountType": "atlassian"},
            "summary": "",
            "resolution": None,
            "labels": ["", "x"],
        },
        "comments": [{"body": "hi", "iconUrl": "i", "note": ""}],
    }

    result = optimizer.optimize(payload)

    assert result == {
        "key": "A-1",
        "fields": {
            "assignee": {"displayName": "Ana"},
            "resolution": None,
            "labels": ["", "x"],
        },
        "comments": [{"body": "hi"}],
    }
    stats = observer.records[-1]
    assert stats.fields_removed == 4
    assert stats.empty_strings_removed == 2
    assert stats.processing_time_ms >= 0.0


def test_config_override_replaces_defaults():
    optimizer = ResponseOptimizer.from_config(make_config(response_exclude_fields=["secret"]))
    result = optimizer.optimize({"secret": 1, "self": "kept", "n": 2})
    assert result == {"self": "kept", "n": 2}


def test_primitives_pass_through():
    optimizer = ResponseOptimizer()
    assert optimizer.optimize("text") == "text"
    assert optimizer.optimize([1, 2]) == [1, 2]
