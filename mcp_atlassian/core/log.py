"""
Logging setup for the stdio gateway.

stdout carries the JSON-RPC stream, so every handler installed here writes
to stderr.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from mcp_atlassian.mcp.utils import env_flag

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_LEVEL = "warning"

_LEVEL_ALIASES = {
    "warn": "warning",
    "trace": "debug",
    "fatal": "critical",
}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key in ("tool", "request_id", "outcome", "elapsed_ms"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def resolve_level(raw: Optional[str]) -> int:
    name = (raw or DEFAULT_LOG_LEVEL).strip().lower()
    name = _LEVEL_ALIASES.get(name, name)
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """
    Route all gateway logging to stderr.

    ``level`` falls back to LOG_LEVEL and ``json_logs`` to JSON_LOGS.
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL")
    if json_logs is None:
        json_logs = env_flag("JSON_LOGS", False)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_logs else logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=resolve_level(level), handlers=[handler], force=True)
