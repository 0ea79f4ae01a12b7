"""
Outbound HTTP to the Atlassian site.

A single pooled ``requests.Session`` per process. Each call is one attempt
bounded by the configured timeout; failures are surfaced as gateway errors
rather than retried.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter

from mcp_atlassian.errors import RemoteError, TransportError

logger = logging.getLogger("McpAtlassian.http")


@dataclass(frozen=True)
class Endpoint:
    base_url: str
    auth_header: str
    timeout_seconds: float
    max_connections: int = 100

    def __repr__(self) -> str:
        return f"Endpoint(base_url={self.base_url!r}, timeout_seconds={self.timeout_seconds!r})"


def _decode_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _remote_error_text(payload: Any) -> Optional[str]:
    """Pull the human readable part out of an Atlassian error body."""
    if isinstance(payload, dict):
        messages = payload.get("errorMessages")
        if isinstance(messages, list) and messages:
            return "; ".join(str(m) for m in messages)
        errors = payload.get("errors")
        if isinstance(errors, dict) and errors:
            return json.dumps(errors, sort_keys=True)
        if isinstance(errors, list) and errors:
            return "; ".join(str(e.get("title", e)) if isinstance(e, dict) else str(e) for e in errors)
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message
        return json.dumps(payload, sort_keys=True)
    if isinstance(payload, str) and payload:
        return payload
    return None


class AtlassianHttp:
    """
    Thin REST collaborator used by every tool handler.

    Usage:
        http = AtlassianHttp(config.endpoint())
        status, body = http.invoke("GET", "/rest/api/3/issue/PROJ-1")
    """

    def __init__(self, endpoint: Endpoint, session: Optional[requests.Session] = None):
        self.endpoint = endpoint
        self._owns_session = session is None
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=endpoint.max_connections,
                pool_maxsize=endpoint.max_connections,
            )
            session.mount("https://", adapter)
        self._session = session
        self._session.headers.update(
            {
                "Authorization": endpoint.auth_header,
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "AtlassianHttp":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.endpoint.base_url}{path}"

    def invoke(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Any] = None,
    ) -> Tuple[int, Any]:
        """Perform one request and return ``(status, decoded body)``."""
        method = method.upper()
        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = self._session.request(
                method=method,
                url=self._url(path),
                json=body,
                params=params,
                timeout=self.endpoint.timeout_seconds,
            )
        except requests.Timeout as exc:
            raise TransportError(
                f"Request timed out after {self.endpoint.timeout_seconds:g}s: {method} {path}"
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(f"Failed to reach Atlassian at {self.endpoint.base_url}: {exc}") from exc

        logger.debug("%s %s -> %d", method, path, response.status_code)
        return response.status_code, _decode_body(response)

    def request_json(
        self,
        method: str,
        path: str,
        *,
        failure: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Any] = None,
        include_detail: bool = False,
    ) -> Any:
        """
        Invoke and unwrap a 2xx body.

        Non-success statuses raise ``RemoteError`` with ``failure`` as the
        prefix; ``include_detail`` appends the remote error text instead of
        the bare status code.
        """
        status, payload = self.invoke(method, path, params=params, body=body)
        if 200 <= status < 300:
            return payload
        detail = _remote_error_text(payload) if include_detail else None
        suffix = detail if detail else str(status)
        logger.info("%s %s failed with status %d", method, path, status)
        raise RemoteError(f"{failure}: {suffix}", status_code=status, path=path, payload=payload)
