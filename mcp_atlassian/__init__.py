"""
mcp-atlassian: Jira and Confluence tools over the Model Context Protocol
"""

from mcp_atlassian.errors import (
    AtlassianMcpError,
    ConfigurationError,
    DispatchError,
    DocumentError,
    ProtocolError,
    RemoteError,
    TransportError,
)
from mcp_atlassian.version import __version__

__all__ = [
    "__version__",
    "AtlassianMcpError",
    "ConfigurationError",
    "ProtocolError",
    "DispatchError",
    "DocumentError",
    "TransportError",
    "RemoteError",
]
