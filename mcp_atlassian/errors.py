"""
mcp-atlassian exceptions.

Every error that can surface on the JSON-RPC wire carries the code it maps
to, so the protocol layer never has to guess.
"""

from __future__ import annotations

from typing import Any, Optional

from mcp_atlassian.mcp.protocol import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST


class AtlassianMcpError(RuntimeError):
    """Base class for gateway errors."""

    code = INTERNAL_ERROR


class ConfigurationError(ValueError):
    """Raised at startup when the environment does not describe a usable site."""


class ProtocolError(AtlassianMcpError):
    """Raised when an inbound envelope is not a valid JSON-RPC 2.0 request."""

    code = INVALID_REQUEST

    def __init__(self, detail: str, msg_id: Any = None) -> None:
        self.msg_id = msg_id
        super().__init__(f"Invalid Request: {detail}" if detail else "Invalid Request")


class DispatchError(AtlassianMcpError):
    """Raised when a tools/call cannot be routed to a handler."""

    code = INVALID_PARAMS


class UnknownToolError(DispatchError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown tool: {name}")


class MissingArgumentError(DispatchError):
    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"missing required argument: {argument}")


class InvalidArgumentError(AtlassianMcpError):
    """Raised inside a handler when a supplied argument has the wrong JSON type."""


class DocumentError(AtlassianMcpError):
    """Raised when a rich-text value cannot be turned into an ADF document."""

    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        self.detail = detail
        super().__init__(f"field '{field}': {detail}")


class TransportError(AtlassianMcpError):
    """Raised when the Atlassian site cannot be reached or times out."""


class RemoteError(AtlassianMcpError):
    """Raised when the Atlassian site answers with a non-success status."""

    def __init__(
        self,
        detail: str,
        *,
        status_code: Optional[int] = None,
        path: Optional[str] = None,
        payload: Optional[Any] = None,
    ) -> None:
        self.status_code = status_code
        self.path = path
        self.payload = payload
        super().__init__(detail)
