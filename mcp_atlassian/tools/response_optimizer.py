"""
Response trimming for read-only tools.

Atlassian payloads carry a lot of UI and API bookkeeping (avatar URLs, self
links, workflow flags) that costs tokens and tells a model nothing. The
optimizer strips those keys, and empty-string values, at every depth.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol, Tuple

from mcp_atlassian.core.config import AtlassianConfig

logger = logging.getLogger("McpAtlassian.tools.optimizer")

DEFAULT_EXCLUDE_FIELDS: Tuple[str, ...] = (
    "avatarUrls",
    "iconUrl",
    "profilePicture",
    "icon",
    "self",
    "expand",
    "avatarId",
    "accountType",
    "projectTypeKey",
    "simplified",
    "_expandable",
    "childTypes",
    "macroRenderedOutput",
    "restrictions",
    "breadcrumbs",
    "entityType",
    "iconCssClass",
    "colorName",
    "hasScreen",
    "isAvailable",
    "isConditional",
    "isGlobal",
    "isInitial",
    "isLooped",
    "friendlyLastModified",
    "editui",
    "edituiv2",
)


@dataclass
class OptimizationStats:
    fields_removed: int = 0
    empty_strings_removed: int = 0
    processing_time_ms: float = 0.0


class OptimizationObserver(Protocol):
    def record(self, stats: OptimizationStats) -> None:
        ...


class NullObserver:
    def record(self, stats: OptimizationStats) -> None:
        return None


class ResponseOptimizer:
    """Removes excluded keys and empty strings in place. Nulls are kept."""

    def __init__(
        self,
        exclude_fields: Optional[Iterable[str]] = None,
        observer: Optional[OptimizationObserver] = None,
    ):
        fields = DEFAULT_EXCLUDE_FIELDS if exclude_fields is None else exclude_fields
        self.exclude_fields = frozenset(fields)
        self.observer = observer or NullObserver()

    @classmethod
    def from_config(
        cls, config: AtlassianConfig, observer: Optional[OptimizationObserver] = None
    ) -> "ResponseOptimizer":
        if config.response_exclude_fields:
            logger.info(
                "Using %d custom response exclude fields from config",
                len(config.response_exclude_fields),
            )
            return cls(config.response_exclude_fields, observer=observer)
        logger.debug("Using %d default response exclude fields", len(DEFAULT_EXCLUDE_FIELDS))
        return cls(observer=observer)

    def optimize(self, value: Any) -> Any:
        started = time.perf_counter()
        stats = OptimizationStats()
        self._optimize(value, stats)
        stats.processing_time_ms = (time.perf_counter() - started) * 1000.0
        self.observer.record(stats)
        return value

    def _optimize(self, value: Any, stats: OptimizationStats) -> None:
        if isinstance(value, dict):
            for key in [k for k in value if k in self.exclude_fields]:
                del value[key]
                stats.fields_removed += 1
            for key in [k for k, v in value.items() if v == "" and isinstance(v, str)]:
                del value[key]
                stats.empty_strings_removed += 1
            for nested in value.values():
                self._optimize(nested, stats)
        elif isinstance(value, list):
            for item in value:
                self._optimize(item, stats)
