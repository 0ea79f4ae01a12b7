import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from mcp_atlassian.core.config import AtlassianConfig
from mcp_atlassian.errors import AtlassianMcpError, DispatchError
from mcp_atlassian.version import __version__

from .protocol import INTERNAL_ERROR, INVALID_PARAMS, SERVER_NAME, negotiate_protocol_version
from .utils import format_tool_result_text

logger = logging.getLogger("McpAtlassian.mcp.handlers")

SendErrorFn = Callable[[Any, int, str], None]
SendResultFn = Callable[[Any, Any], None]


@dataclass
class SessionState:
    """Per-connection handshake state. Tracked for logging only; it gates nothing."""
    initialized: bool = False
    protocol_version: Optional[str] = None
    client_info: Dict[str, Any] = field(default_factory=dict)


def build_initialize_instructions(config: Optional[AtlassianConfig]) -> str:
    lines = [
        "Jira and Confluence tools for a single Atlassian Cloud site.",
        "Rich-text Jira fields (description, comment, body) accept plain text or an ADF document.",
        "Read tools return a trimmed field projection; pass include_all_fields for the full payload.",
    ]
    if config is not None:
        if config.jira_projects_filter:
            lines.append(
                "Jira searches are limited to projects: " + ", ".join(config.jira_projects_filter)
                + " unless the JQL names a project."
            )
        if config.confluence_spaces_filter:
            lines.append(
                "Confluence searches are limited to spaces: " + ", ".join(config.confluence_spaces_filter)
                + " unless the CQL names a space."
            )
    return "\n".join(lines)


def handle_initialize(
    msg_id: Any,
    params: Any,
    session: SessionState,
    send_error_fn: SendErrorFn,
    send_result_fn: SendResultFn,
    config: Optional[AtlassianConfig] = None,
):
    """Handle protocol negotiation. Unknown versions fall back rather than fail."""
    if params is None:
        params = {}
    if not isinstance(params, dict):
        send_error_fn(msg_id, INVALID_PARAMS, "Invalid params: initialize params must be an object")
        return

    requested_version = params.get("protocolVersion")
    negotiated_version = negotiate_protocol_version(requested_version)
    if requested_version != negotiated_version:
        logger.info(
            "Client requested protocol %r; answering with %s", requested_version, negotiated_version
        )

    session.protocol_version = negotiated_version
    client_info = params.get("clientInfo")
    session.client_info = client_info if isinstance(client_info, dict) else {}
    logger.info(
        "Initialize from client=%s version=%s protocol=%s",
        session.client_info.get("name", "unknown"),
        session.client_info.get("version", "unknown"),
        negotiated_version,
    )

    result = {
        "protocolVersion": negotiated_version,
        "capabilities": {
            "tools": {},
        },
        "serverInfo": {"name": SERVER_NAME, "version": __version__},
        "instructions": build_initialize_instructions(config),
    }
    send_result_fn(msg_id, result)


def handle_initialized(session: SessionState) -> None:
    session.initialized = True
    logger.info("Client initialized connection")


def handle_list_tools(msg_id: Any, registry, send_result_fn: SendResultFn):
    """List the static tool catalog. Served whether or not the handshake finished."""
    send_result_fn(msg_id, {"tools": registry.list_tools()})


def handle_list_prompts(msg_id: Any, send_result_fn: SendResultFn):
    send_result_fn(msg_id, {"prompts": []})


def handle_list_resources(msg_id: Any, send_result_fn: SendResultFn):
    send_result_fn(msg_id, {"resources": []})


def validate_tools_call_params(msg_id: Any, params: Any, send_error_fn: SendErrorFn) -> Optional[Dict[str, Any]]:
    if not isinstance(params, dict):
        send_error_fn(msg_id, INVALID_PARAMS, "Invalid params: tools/call params must be an object")
        return None
    name = params.get("name")
    if not isinstance(name, str) or not name.strip():
        send_error_fn(msg_id, INVALID_PARAMS, "Invalid params: tools/call requires non-empty string name")
        return None
    arguments = params.get("arguments", {})
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        send_error_fn(msg_id, INVALID_PARAMS, "Invalid params: tools/call arguments must be an object")
        return None
    return {"name": name, "arguments": arguments}


def handle_call_tool(
    msg_id: Any,
    name: str,
    arguments: Dict[str, Any],
    registry,
    send_error_fn: SendErrorFn,
    send_result_fn: SendResultFn,
):
    """Run one tool and report its result or failure. Never raises."""
    try:
        result = registry.call(name, arguments)
    except DispatchError as exc:
        logger.info("tools/call %s rejected: %s", name, exc)
        send_error_fn(msg_id, exc.code, str(exc))
        return
    except AtlassianMcpError as exc:
        logger.warning("tools/call %s failed: %s", name, exc)
        send_error_fn(msg_id, INTERNAL_ERROR, str(exc))
        return
    except Exception as exc:
        logger.exception("tools/call %s raised unexpectedly", name)
        send_error_fn(msg_id, INTERNAL_ERROR, str(exc) or type(exc).__name__)
        return

    send_result_fn(
        msg_id,
        {
            "content": [
                {
                    "type": "text",
                    "text": format_tool_result_text(result),
                }
            ]
        },
    )
