"""
Shared plumbing for tool handlers.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp_atlassian.core.config import AtlassianConfig
from mcp_atlassian.core.http import AtlassianHttp
from mcp_atlassian.errors import InvalidArgumentError


class ToolHandler:
    """
    One tool's behaviour. Subclasses implement ``execute`` and talk to the
    site only through ``self.http``.
    """

    def __init__(self, http: AtlassianHttp):
        self.http = http

    def execute(self, arguments: Dict[str, Any], config: AtlassianConfig) -> Dict[str, Any]:
        raise NotImplementedError


def str_arg(arguments: Dict[str, Any], name: str) -> str:
    """A required identifier-like argument; numbers are accepted as ids."""
    value = arguments.get(name)
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise InvalidArgumentError(f"argument '{name}' must be a string")


def optional_str_arg(arguments: Dict[str, Any], name: str) -> Optional[str]:
    if arguments.get(name) is None:
        return None
    return str_arg(arguments, name)


def bool_arg(arguments: Dict[str, Any], name: str, default: bool = False) -> bool:
    value = arguments.get(name)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise InvalidArgumentError(f"argument '{name}' must be a boolean")
    return value


def int_arg(arguments: Dict[str, Any], name: str, default: int) -> int:
    value = arguments.get(name)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise InvalidArgumentError(f"argument '{name}' must be an integer")
    if value < 1:
        raise InvalidArgumentError(f"argument '{name}' must be positive")
    return int(value)


def str_list_arg(arguments: Dict[str, Any], name: str) -> Optional[List[str]]:
    value = arguments.get(name)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidArgumentError(f"argument '{name}' must be an array of strings")
    return value
