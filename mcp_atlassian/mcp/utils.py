import json
import os
from typing import Any


def env_flag(key: str, default: bool) -> bool:
    """Helper to parse boolean flags from environment variables."""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


def env_float(key: str, default: float) -> float:
    val = os.environ.get(key)
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


def safe_json_dumps(payload: Any, indent=None) -> str:
    # Compact form on the wire; pretty form in tool text
    separators = (",", ":") if indent is None else None
    try:
        return json.dumps(payload, indent=indent, separators=separators, ensure_ascii=False)
    except (TypeError, ValueError):
        return json.dumps(str(payload), indent=indent, separators=separators, ensure_ascii=False)


def format_tool_result_text(result: Any) -> str:
    """Pretty-printed JSON text for a tool's content block."""
    return safe_json_dumps(result, indent=2)
