import time
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger("McpAtlassian.mcp.metrics")

DEFAULT_WARN_THRESHOLD_MS = 30000.0


class ToolCallMetrics:
    """
    Tracks latency and payload size for a single tools/call.
    """
    def __init__(self, msg_id: Any, name: str):
        self.msg_id = msg_id
        self.name = name
        self.response_bytes = 0
        self.saw_error = False
        self.error_code: Optional[int] = None
        self.started_monotonic = time.monotonic()

    def record_response(self, message: Dict[str, Any], serialized: str) -> None:
        """Record the JSON-RPC response sent for this call."""
        # +1 for the newline delimiter added by the transport
        self.response_bytes = len(serialized.encode("utf-8")) + 1
        error = message.get("error")
        if isinstance(error, dict):
            self.saw_error = True
            self.error_code = error.get("code")

    def get_outcome(self) -> str:
        return "error" if self.saw_error else "success"

    def elapsed_ms(self) -> float:
        return max(0.0, (time.monotonic() - self.started_monotonic) * 1000.0)

    def log_telemetry(self, warn_threshold_ms: float = DEFAULT_WARN_THRESHOLD_MS) -> None:
        elapsed_ms = self.elapsed_ms()
        outcome = self.get_outcome()
        log_method = logger.warning if elapsed_ms >= warn_threshold_ms else logger.info
        log_method(
            "Tool call telemetry: name=%s id=%r outcome=%s elapsed_ms=%.1f response_bytes=%d error_code=%s",
            self.name,
            self.msg_id,
            outcome,
            elapsed_ms,
            self.response_bytes,
            "n/a" if self.error_code is None else self.error_code,
            extra={"tool": self.name, "request_id": self.msg_id, "outcome": outcome, "elapsed_ms": round(elapsed_ms, 1)},
        )
