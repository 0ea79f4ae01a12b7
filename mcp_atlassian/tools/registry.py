"""
Static tool registry.

The set of tools is fixed at startup: each name maps to its descriptor and
handler, and a call is a lookup, a required-argument check and a single
handler invocation.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type

from mcp_atlassian.core.config import AtlassianConfig
from mcp_atlassian.core.http import AtlassianHttp
from mcp_atlassian.errors import MissingArgumentError, UnknownToolError
from mcp_atlassian.mcp.definitions import READ_ONLY_TOOLS, build_tool_schemas
from mcp_atlassian.tools import confluence, jira
from mcp_atlassian.tools.base import ToolHandler
from mcp_atlassian.tools.response_optimizer import OptimizationObserver, ResponseOptimizer

logger = logging.getLogger("McpAtlassian.tools.registry")

HANDLER_CLASSES: Dict[str, Type[ToolHandler]] = {
    "jira_get_issue": jira.GetIssueHandler,
    "jira_search": jira.SearchHandler,
    "jira_create_issue": jira.CreateIssueHandler,
    "jira_update_issue": jira.UpdateIssueHandler,
    "jira_add_comment": jira.AddCommentHandler,
    "jira_update_comment": jira.UpdateCommentHandler,
    "jira_transition_issue": jira.TransitionIssueHandler,
    "jira_get_transitions": jira.GetTransitionsHandler,
    "confluence_search": confluence.SearchHandler,
    "confluence_get_page": confluence.GetPageHandler,
    "confluence_get_page_children": confluence.GetPageChildrenHandler,
    "confluence_get_comments": confluence.GetCommentsHandler,
    "confluence_create_page": confluence.CreatePageHandler,
    "confluence_update_page": confluence.UpdatePageHandler,
}


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: Dict[str, Any] = field(hash=False)
    required: Tuple[str, ...] = ()
    read_only: bool = False

    @classmethod
    def from_schema(cls, schema: Dict[str, Any]) -> "ToolDescriptor":
        input_schema = schema["inputSchema"]
        return cls(
            name=schema["name"],
            description=schema["description"],
            input_schema=input_schema,
            required=tuple(input_schema.get("required", ())),
            read_only=schema["name"] in READ_ONLY_TOOLS,
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolRegistry:
    """
    Usage:
        registry = ToolRegistry(config, AtlassianHttp(config.endpoint()))
        registry.call("jira_get_issue", {"issue_key": "PROJ-1"})
    """

    def __init__(
        self,
        config: AtlassianConfig,
        http: AtlassianHttp,
        optimizer: Optional[ResponseOptimizer] = None,
        observer: Optional[OptimizationObserver] = None,
    ):
        self.config = config
        self.optimizer = optimizer or ResponseOptimizer.from_config(config, observer=observer)
        self._tools: Dict[str, Tuple[ToolDescriptor, ToolHandler]] = {}
        for schema in build_tool_schemas(config):
            descriptor = ToolDescriptor.from_schema(schema)
            handler = HANDLER_CLASSES[descriptor.name](http)
            self._tools[descriptor.name] = (descriptor, handler)
        self._catalog = [descriptor.to_wire() for descriptor, _ in self._tools.values()]
        logger.debug("Registered %d tools", len(self._tools))

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> List[str]:
        return list(self._tools)

    def descriptor(self, name: str) -> ToolDescriptor:
        try:
            return self._tools[name][0]
        except KeyError:
            raise UnknownToolError(name) from None

    def list_tools(self) -> List[Dict[str, Any]]:
        return self._catalog

    def call(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """Run ``name`` once. Raises DispatchError before the handler runs."""
        entry = self._tools.get(name)
        if entry is None:
            raise UnknownToolError(name)
        descriptor, handler = entry
        arguments = arguments if arguments is not None else {}

        for required in descriptor.required:
            if arguments.get(required) is None:
                raise MissingArgumentError(required)

        result = handler.execute(arguments, self.config)
        if descriptor.read_only:
            result = self.optimizer.optimize(result)
        return result
