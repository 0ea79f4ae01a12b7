"""
mcp-atlassian Configuration
---------------------------
Site credentials, connection limits and field-projection overrides for the
gateway. Loaded once at startup from environment variables (and a local
``.env`` file, when present) and treated as read-only afterwards.
"""

import base64
import logging
import os
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from mcp_atlassian.core.http import Endpoint
from mcp_atlassian.errors import ConfigurationError

logger = logging.getLogger("McpAtlassian.Config")

DEFAULT_MAX_CONNECTIONS = 100
DEFAULT_REQUEST_TIMEOUT_MS = 30000
MIN_CONNECTIONS, MAX_CONNECTIONS = 1, 1000
MIN_TIMEOUT_MS, MAX_TIMEOUT_MS = 100, 60000


def parse_list(raw: Optional[str]) -> List[str]:
    """Split a comma separated value, trimming entries and dropping empties."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_optional_list(raw: Optional[str]) -> Optional[List[str]]:
    values = parse_list(raw)
    return values or None


def _parse_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from None


class AtlassianConfig(BaseModel):
    """Immutable gateway configuration."""

    model_config = {"frozen": True}

    atlassian_domain: str
    atlassian_email: str
    atlassian_api_token: str = Field(repr=False)
    max_connections: int = Field(
        default=DEFAULT_MAX_CONNECTIONS, ge=MIN_CONNECTIONS, le=MAX_CONNECTIONS
    )
    request_timeout_ms: int = Field(
        default=DEFAULT_REQUEST_TIMEOUT_MS, ge=MIN_TIMEOUT_MS, le=MAX_TIMEOUT_MS
    )
    jira_projects_filter: Tuple[str, ...] = ()
    confluence_spaces_filter: Tuple[str, ...] = ()
    jira_search_default_fields: Optional[Tuple[str, ...]] = None
    jira_search_custom_fields: Tuple[str, ...] = ()
    jira_custom_fields: Tuple[str, ...] = ()
    confluence_custom_includes: Tuple[str, ...] = ()
    response_exclude_fields: Optional[Tuple[str, ...]] = None

    @field_validator("atlassian_domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("ATLASSIAN_DOMAIN cannot be empty")
        host = v
        for prefix in ("https://", "http://"):
            if host.startswith(prefix):
                host = host[len(prefix):]
        if ".atlassian.net" not in host:
            raise ValueError(
                f"ATLASSIAN_DOMAIN must be an Atlassian Cloud domain (*.atlassian.net), got '{v}'"
            )
        return v

    @field_validator("atlassian_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("ATLASSIAN_EMAIL cannot be empty")
        if "@" not in v:
            raise ValueError(f"ATLASSIAN_EMAIL must be a valid email address, got '{v}'")
        return v

    @field_validator("atlassian_api_token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("ATLASSIAN_API_TOKEN cannot be empty")
        return v

    @property
    def base_url(self) -> str:
        domain = self.atlassian_domain.rstrip("/")
        if domain.startswith("https://"):
            return domain
        if domain.startswith("http://"):
            return "https://" + domain[len("http://"):]
        return f"https://{domain}"

    @property
    def timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000.0

    def auth_header(self) -> str:
        credentials = f"{self.atlassian_email}:{self.atlassian_api_token}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return f"Basic {encoded}"

    def endpoint(self) -> Endpoint:
        return Endpoint(
            base_url=self.base_url,
            auth_header=self.auth_header(),
            timeout_seconds=self.timeout_seconds,
            max_connections=self.max_connections,
        )

    def describe(self) -> dict:
        """Non-secret summary used by startup logging and ``check-config``."""
        return {
            "base_url": self.base_url,
            "email": self.atlassian_email,
            "max_connections": self.max_connections,
            "request_timeout_ms": self.request_timeout_ms,
            "jira_projects_filter": list(self.jira_projects_filter),
            "confluence_spaces_filter": list(self.confluence_spaces_filter),
            "jira_custom_fields": list(self.jira_custom_fields),
            "confluence_custom_includes": list(self.confluence_custom_includes),
        }

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "AtlassianConfig":
        """
        Load configuration from environment variables.

        Required:
        - ATLASSIAN_DOMAIN: Site domain, e.g. yourcompany.atlassian.net
        - ATLASSIAN_EMAIL: Account email used for Basic auth
        - ATLASSIAN_API_TOKEN: API token for that account

        Optional:
        - MAX_CONNECTIONS: HTTP connection pool size (1-1000, default 100)
        - REQUEST_TIMEOUT_MS: Per-request timeout (100-60000, default 30000)
        - JIRA_PROJECTS_FILTER: Comma separated project keys searches are scoped to
        - CONFLUENCE_SPACES_FILTER: Comma separated space keys searches are scoped to
        - JIRA_SEARCH_DEFAULT_FIELDS: Replaces the built-in search field list
        - JIRA_SEARCH_CUSTOM_FIELDS: Appended to the built-in search field list
        - JIRA_CUSTOM_FIELDS: customfield_* ids added to single-issue reads
        - CONFLUENCE_CUSTOM_INCLUDES: Extra v2 include-* flags for page reads
        - RESPONSE_EXCLUDE_FIELDS: Replaces the response optimizer exclude list
        """
        if load_dotenv_file:
            load_dotenv()

        try:
            config = cls(
                atlassian_domain=os.environ.get("ATLASSIAN_DOMAIN", ""),
                atlassian_email=os.environ.get("ATLASSIAN_EMAIL", ""),
                atlassian_api_token=os.environ.get("ATLASSIAN_API_TOKEN", ""),
                max_connections=_parse_int_env("MAX_CONNECTIONS", DEFAULT_MAX_CONNECTIONS),
                request_timeout_ms=_parse_int_env("REQUEST_TIMEOUT_MS", DEFAULT_REQUEST_TIMEOUT_MS),
                jira_projects_filter=parse_list(os.environ.get("JIRA_PROJECTS_FILTER")),
                confluence_spaces_filter=parse_list(os.environ.get("CONFLUENCE_SPACES_FILTER")),
                jira_search_default_fields=_parse_optional_list(
                    os.environ.get("JIRA_SEARCH_DEFAULT_FIELDS")
                ),
                jira_search_custom_fields=parse_list(os.environ.get("JIRA_SEARCH_CUSTOM_FIELDS")),
                jira_custom_fields=parse_list(os.environ.get("JIRA_CUSTOM_FIELDS")),
                confluence_custom_includes=parse_list(os.environ.get("CONFLUENCE_CUSTOM_INCLUDES")),
                response_exclude_fields=_parse_optional_list(
                    os.environ.get("RESPONSE_EXCLUDE_FIELDS")
                ),
            )
        except ValidationError as exc:
            raise ConfigurationError(_format_validation_error(exc)) from None

        logger.debug("Loaded configuration for %s", config.base_url)
        return config


def _format_validation_error(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = str(error.get("msg", "invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        env_name = location.upper()
        messages.append(message if env_name in message else f"{env_name}: {message}")
    return "; ".join(messages)
