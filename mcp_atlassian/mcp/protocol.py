"""
MCP protocol constants and JSON-RPC envelope helpers.
"""

import math
from typing import Any, Dict, Optional

PROTOCOL_VERSION_2024 = "2024-11-05"
PROTOCOL_VERSION_2025 = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS = (PROTOCOL_VERSION_2025, PROTOCOL_VERSION_2024)
JSONRPC_VERSION = "2.0"

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

SERVER_NAME = "mcp-atlassian"


def negotiate_protocol_version(version: Optional[str]) -> str:
    """Echo a supported client version, otherwise answer with the newest one."""
    if isinstance(version, str) and version in SUPPORTED_PROTOCOL_VERSIONS:
        return version
    return SUPPORTED_PROTOCOL_VERSIONS[0]


def success_response(msg_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": msg_id, "result": result}


def error_response(msg_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": msg_id,
        "error": {
            "code": code,
            "message": message,
        },
    }


def is_valid_id(value: Any) -> bool:
    # bool is an int subclass but is not a legal JSON-RPC id
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        # inf and nan have no JSON spelling to echo back
        return math.isfinite(value)
    return value is None or isinstance(value, (str, int))
