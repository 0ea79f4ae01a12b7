"""Tests for field projection and query scoping."""

import pytest

from conftest import make_config
from mcp_atlassian.tools.field_filtering import (
    DEFAULT_SEARCH_FIELDS,
    ESSENTIAL_FIELDS,
    ScopeFilter,
    confluence_search_expand,
    confluence_v2_params,
    issue_query_params,
    project_scope,
    resolve_search_fields,
    space_scope,
)


class TestResolveSearchFields:
    def test_builtin_defaults(self):
        fields = resolve_search_fields(None, make_config())
        assert fields == list(DEFAULT_SEARCH_FIELDS)
        assert len(fields) == 17
        assert "description" not in fields
        assert "id" not in fields

    def test_explicit_list_wins_over_everything(self):
        cfg = make_config(
            jira_search_default_fields=["key", "status"],
            jira_search_custom_fields=["customfield_10015"],
        )
        assert resolve_search_fields(["summary"], cfg) == ["summary"]

    def test_config_override_replaces_defaults(self):
        cfg = make_config(
            jira_search_default_fields=["key", "summary"],
            jira_search_custom_fields=["customfield_10015"],
        )
        assert resolve_search_fields(None, cfg) == ["key", "summary"]

    def test_custom_fields_extend_defaults_without_duplicates(self):
        cfg = make_config(jira_search_custom_fields=["customfield_10015", "status", "customfield_10015"])
        fields = resolve_search_fields(None, cfg)
        assert fields[:17] == list(DEFAULT_SEARCH_FIELDS)
        assert fields[17:] == ["customfield_10015"]

    def test_empty_explicit_list_counts_as_absent(self):
        cfg = make_config(jira_search_default_fields=["key"])
        assert resolve_search_fields([], cfg) == ["key"]


class TestIssueQueryParams:
    def test_essential_fields_and_expand(self):
        params = issue_query_params(make_config())
        assert params["fields"].split(",") == list(ESSENTIAL_FIELDS)
        assert params["expand"] == "-renderedFields"

    def test_custom_fields_filtered_by_prefix(self):
        cfg = make_config(jira_custom_fields=["customfield_10001", "storypoints"])
        fields = issue_query_params(cfg)["fields"].split(",")
        assert "customfield_10001" in fields
        assert "storypoints" not in fields

    def test_additional_fields_are_deduplicated(self):
        fields = issue_query_params(make_config(), additional_fields=["labels", "key"])["fields"].split(",")
        assert fields.count("key") == 1
        assert fields[-1] == "labels"

    def test_include_all_fields_disables_filtering(self):
        assert issue_query_params(make_config(), include_all_fields=True) == {}


class TestConfluenceParams:
    def test_v2_defaults(self):
        assert confluence_v2_params(make_config()) == {"body-format": "storage", "include-version": "true"}

    def test_v2_include_all_and_custom(self):
        cfg = make_config(confluence_custom_includes=["likes"])
        params = confluence_v2_params(cfg, include_all_fields=True, additional_includes=["labels", "versions"])
        assert params["include-labels"] == "true"
        assert params["include-properties"] == "true"
        assert params["include-operations"] == "true"
        assert params["include-likes"] == "true"
        assert params["include-versions"] == "true"

    def test_search_expand_variants(self):
        assert confluence_search_expand() == "body.storage,version"
        assert confluence_search_expand(True) == "body.storage,version,space,history,metadata"
        assert confluence_search_expand(False, ["ancestors", "version"]) == "body.storage,version,ancestors"


class TestScopeFilter:
    def test_rewrites_unscoped_query(self):
        scope = ScopeFilter("project", ("A", "B"))
        assert scope.apply("status = Open") == 'project IN ("A","B") AND (status = Open)'

    @pytest.mark.parametrize(
        "query",
        ["project = X", "PROJECT=X AND status = Open", "Project in (X, Y)", "assignee = me AND project  = X"],
    )
    def test_existing_scope_is_left_alone(self, query):
        assert ScopeFilter("project", ("A",)).apply(query) == query

    def test_empty_allow_list_never_rewrites(self):
        assert ScopeFilter("project").apply("status = Open") == "status = Open"

    def test_space_scope_from_config(self):
        scope = space_scope(make_config(confluence_spaces_filter=["DOCS"]))
        assert scope.apply('text ~ "release"') == 'space IN ("DOCS") AND (text ~ "release")'
        assert scope.apply('space = "ENG"') == 'space = "ENG"'

    def test_keyword_inside_literal_is_treated_as_scoped(self):
        scope = project_scope(make_config(jira_projects_filter=["A"]))
        query = 'summary ~ "project plan"'
        assert scope.apply(query) == query
