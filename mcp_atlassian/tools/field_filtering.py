"""
Field projection for Jira and Confluence reads, plus project/space scoping
of search queries.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from mcp_atlassian.core.config import AtlassianConfig

logger = logging.getLogger("McpAtlassian.tools.fields")

# Search results skip the description body and the redundant numeric id.
DEFAULT_SEARCH_FIELDS: Tuple[str, ...] = (
    "key",
    "summary",
    "status",
    "priority",
    "issuetype",
    "assignee",
    "reporter",
    "creator",
    "created",
    "updated",
    "duedate",
    "resolutiondate",
    "project",
    "labels",
    "components",
    "parent",
    "subtasks",
)

ESSENTIAL_FIELDS: Tuple[str, ...] = (
    "id",
    "key",
    "summary",
    "description",
    "issuetype",
    "status",
    "priority",
    "assignee",
    "reporter",
    "creator",
    "created",
    "updated",
    "project",
)

JIRA_EXPAND = "-renderedFields"
CUSTOM_FIELD_PREFIX = "customfield_"

CONFLUENCE_BASIC_EXPAND = "body.storage,version"
CONFLUENCE_FULL_EXPAND = "body.storage,version,space,history,metadata"
CONFLUENCE_ALL_INCLUDES: Tuple[str, ...] = ("labels", "properties", "operations")


def _dedupe(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def resolve_search_fields(
    explicit: Optional[Sequence[str]], config: AtlassianConfig
) -> List[str]:
    """
    Pick the field projection for a Jira search.

    First non-empty source wins, with no merging between tiers:
    the call's own list, JIRA_SEARCH_DEFAULT_FIELDS, the built-in list
    extended with JIRA_SEARCH_CUSTOM_FIELDS, the built-in list.
    """
    if explicit:
        return list(explicit)
    if config.jira_search_default_fields:
        return list(config.jira_search_default_fields)
    if config.jira_search_custom_fields:
        return _dedupe(list(DEFAULT_SEARCH_FIELDS) + list(config.jira_search_custom_fields))
    return list(DEFAULT_SEARCH_FIELDS)


def valid_custom_fields(config: AtlassianConfig) -> List[str]:
    valid = []
    for name in config.jira_custom_fields:
        if name.startswith(CUSTOM_FIELD_PREFIX):
            valid.append(name)
        else:
            logger.warning(
                "Ignoring JIRA_CUSTOM_FIELDS entry '%s'; expected a %s* id", name, CUSTOM_FIELD_PREFIX
            )
    return valid


def issue_query_params(
    config: AtlassianConfig,
    include_all_fields: bool = False,
    additional_fields: Optional[Sequence[str]] = None,
) -> Dict[str, str]:
    """Query parameters for a single-issue read."""
    if include_all_fields:
        return {}
    fields = list(ESSENTIAL_FIELDS) + valid_custom_fields(config)
    if additional_fields:
        fields.extend(additional_fields)
    return {"fields": ",".join(_dedupe(fields)), "expand": JIRA_EXPAND}


def confluence_v2_params(
    config: AtlassianConfig,
    include_all_fields: bool = False,
    additional_includes: Optional[Sequence[str]] = None,
) -> Dict[str, str]:
    """Query parameters for Confluence v2 page endpoints."""
    params = {"body-format": "storage", "include-version": "true"}
    includes: List[str] = []
    if include_all_fields:
        includes.extend(CONFLUENCE_ALL_INCLUDES)
    includes.extend(config.confluence_custom_includes)
    if additional_includes:
        includes.extend(additional_includes)
    for name in _dedupe(includes):
        key = name if name.startswith("include-") else f"include-{name}"
        params[key] = "true"
    return params


def confluence_search_expand(
    include_all_fields: bool = False, additional_expand: Optional[Sequence[str]] = None
) -> str:
    """The ``expand`` value for the v1 content search."""
    base = CONFLUENCE_FULL_EXPAND if include_all_fields else CONFLUENCE_BASIC_EXPAND
    parts = base.split(",")
    if additional_expand:
        parts.extend(additional_expand)
    return ",".join(_dedupe(parts))


@dataclass(frozen=True)
class ScopeFilter:
    """
    Restrict a JQL/CQL query to an allow-list of projects or spaces.

    Queries that already mention the dimension are left alone, so an explicit
    scope from the caller always wins. Detection is a keyword sniff, not a
    parse, and can be fooled by the word appearing inside a string literal.
    """

    dimension: str
    allowed: Tuple[str, ...] = ()

    def mentions_dimension(self, query: str) -> bool:
        lowered = query.lower()
        dim = self.dimension.lower()
        return f"{dim} " in lowered or f"{dim}=" in lowered or f"{dim} in" in lowered

    def apply(self, query: str) -> str:
        if not self.allowed or self.mentions_dimension(query):
            return query
        values = ",".join(f'"{value}"' for value in self.allowed)
        return f"{self.dimension} IN ({values}) AND ({query})"


def project_scope(config: AtlassianConfig) -> ScopeFilter:
    return ScopeFilter("project", tuple(config.jira_projects_filter))


def space_scope(config: AtlassianConfig) -> ScopeFilter:
    return ScopeFilter("space", tuple(config.confluence_spaces_filter))
