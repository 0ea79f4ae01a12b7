import sys
import json
import logging
from typing import Any, BinaryIO, Dict, List, Optional, TextIO

from mcp_atlassian.core.config import AtlassianConfig
from mcp_atlassian.errors import ProtocolError

from .handlers import (
    SessionState,
    handle_call_tool,
    handle_initialize,
    handle_initialized,
    handle_list_prompts,
    handle_list_resources,
    handle_list_tools,
    validate_tools_call_params,
)
from .metrics import DEFAULT_WARN_THRESHOLD_MS, ToolCallMetrics
from .protocol import (
    INTERNAL_ERROR,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    error_response,
    is_valid_id,
    success_response,
)
from .utils import env_float, safe_json_dumps

logger = logging.getLogger("McpAtlassian.mcp.server")

INITIALIZED_METHODS = ("initialized", "notifications/initialized")


class McpServer:
    """
    Newline-delimited JSON-RPC 2.0 over stdio.

    One request is read, handled and answered before the next line is read,
    so responses leave in request order.
    """
    def __init__(
        self,
        registry,
        config: Optional[AtlassianConfig] = None,
        session: Optional[SessionState] = None,
        warn_threshold_ms: Optional[float] = None,
    ):
        self.registry = registry
        self.config = config
        self.session = session or SessionState()
        if warn_threshold_ms is None:
            warn_threshold_ms = env_float("MCP_TOOL_CALL_WARN_MS", DEFAULT_WARN_THRESHOLD_MS)
        self.warn_threshold_ms = warn_threshold_ms
        self.transport_closed = False

    # ------------------------------------------------------------------
    # Pure core
    # ------------------------------------------------------------------

    def process_line(self, line) -> Optional[Dict[str, Any]]:
        """
        Handle one inbound line and return the response envelope, or None
        when nothing must be written (notifications).
        """
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError:
                return error_response(None, PARSE_ERROR, "Parse error")
        try:
            msg = json.loads(line)
        except (json.JSONDecodeError, RecursionError):
            logger.warning("Discarding unparseable line (%d chars)", len(line))
            return error_response(None, PARSE_ERROR, "Parse error")
        return self.process_message(msg)

    def process_message(self, msg: Any) -> Optional[Dict[str, Any]]:
        try:
            self._validate_envelope(msg)
        except ProtocolError as exc:
            logger.info("Rejected envelope: %s", exc)
            return error_response(exc.msg_id, exc.code, str(exc))

        method = msg["method"]
        if "id" not in msg:
            self._handle_notification(method)
            return None

        msg_id = msg["id"]
        try:
            return self._dispatch(msg_id, method, msg.get("params"))
        except Exception:
            logger.exception("Unexpected error while dispatching %s", method)
            return error_response(msg_id, INTERNAL_ERROR, "Internal error")

    def _validate_envelope(self, msg: Any) -> None:
        if not isinstance(msg, dict):
            raise ProtocolError("")
        msg_id = msg.get("id")
        if not is_valid_id(msg_id):
            raise ProtocolError("id must be a string, number or null")
        if msg.get("jsonrpc") != JSONRPC_VERSION:
            raise ProtocolError('jsonrpc must be "2.0"', msg_id)
        if not isinstance(msg.get("method"), str):
            raise ProtocolError("missing method", msg_id)
        params = msg.get("params")
        if params is not None and not isinstance(params, (dict, list)):
            raise ProtocolError("params must be an object or array", msg_id)

    def _handle_notification(self, method: str) -> None:
        if method in INITIALIZED_METHODS:
            handle_initialized(self.session)
            return
        logger.debug("Ignoring notification %s", method)

    def _dispatch(self, msg_id: Any, method: str, params: Any) -> Optional[Dict[str, Any]]:
        responses: List[Dict[str, Any]] = []

        def send_result(rid: Any, result: Any) -> None:
            responses.append(success_response(rid, result))

        def send_error(rid: Any, code: int, message: str) -> None:
            responses.append(error_response(rid, code, message))

        if method == "initialize":
            handle_initialize(msg_id, params, self.session, send_error, send_result, config=self.config)
        elif method in INITIALIZED_METHODS:
            # Never answered, even when the client attached an id.
            handle_initialized(self.session)
            return None
        elif method == "tools/list":
            handle_list_tools(msg_id, self.registry, send_result)
        elif method == "tools/call":
            self._call_tool(msg_id, params, send_error, send_result, responses)
        elif method == "prompts/list":
            handle_list_prompts(msg_id, send_result)
        elif method == "resources/list":
            handle_list_resources(msg_id, send_result)
        else:
            send_error(msg_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        return responses[0] if responses else None

    def _call_tool(self, msg_id, params, send_error, send_result, responses) -> None:
        validated = validate_tools_call_params(msg_id, params, send_error)
        if validated is None:
            return
        metrics = ToolCallMetrics(msg_id, validated["name"])
        handle_call_tool(
            msg_id,
            validated["name"],
            validated["arguments"],
            self.registry,
            send_error,
            send_result,
        )
        if responses:
            metrics.record_response(responses[0], safe_json_dumps(responses[0]))
        metrics.log_telemetry(self.warn_threshold_ms)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def send_rpc(self, message: Dict[str, Any], output: TextIO) -> None:
        """Serialize and write one JSON-RPC message as a single line."""
        if self.transport_closed:
            return
        try:
            output.write(safe_json_dumps(message) + "\n")
            output.flush()
        except (BrokenPipeError, OSError) as exc:
            self.transport_closed = True
            logger.warning("MCP stdio transport closed while sending: %s", exc)

    def serve(self, stream: Optional[BinaryIO] = None, output: Optional[TextIO] = None) -> None:
        """Read lines until EOF or a closed transport."""
        if stream is None:
            stream = sys.stdin.buffer
        if output is None:
            output = sys.stdout

        logger.info("MCP server listening on stdio")
        while not self.transport_closed:
            line = stream.readline()
            if not line:
                break
            if not line.strip():
                continue
            try:
                response = self.process_line(line)
            except Exception:
                logger.exception("Loop error")
                response = error_response(None, INTERNAL_ERROR, "Internal error")
            if response is not None:
                self.send_rpc(response, output)
        logger.info("MCP server stopped (stdin closed)")
