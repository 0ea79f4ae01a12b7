"""
mcp-atlassian CLI.

Usage:
    mcp-atlassian                 # same as `mcp-atlassian serve`
    mcp-atlassian serve [--log-level LEVEL]
    mcp-atlassian check-config
    mcp-atlassian list-tools

Commands:
    serve           Run the MCP JSON-RPC server on stdin/stdout.
    check-config    Validate the environment and print the resolved,
                    non-secret settings.
    list-tools      Print the tool catalog as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from mcp_atlassian.core.config import AtlassianConfig
from mcp_atlassian.core.http import AtlassianHttp
from mcp_atlassian.core.log import configure_logging
from mcp_atlassian.errors import ConfigurationError
from mcp_atlassian.mcp.server import McpServer
from mcp_atlassian.tools.field_filtering import resolve_search_fields
from mcp_atlassian.tools.registry import ToolRegistry
from mcp_atlassian.version import __version__

logger = logging.getLogger("McpAtlassian.cli")


def _load_config() -> Optional[AtlassianConfig]:
    try:
        return AtlassianConfig.from_env()
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        print(f"Configuration error: {exc}", file=sys.stderr)
        return None


def cmd_serve(args: argparse.Namespace) -> int:
    config = _load_config()
    if config is None:
        return 1

    logger.info("Starting mcp-atlassian %s for %s", __version__, config.base_url)
    with AtlassianHttp(config.endpoint()) as http:
        registry = ToolRegistry(config, http)
        server = McpServer(registry, config=config)
        try:
            server.serve()
        except KeyboardInterrupt:
            logger.info("Interrupted; shutting down")
    return 0


def cmd_check_config(args: argparse.Namespace) -> int:
    config = _load_config()
    if config is None:
        return 1
    summary = config.describe()
    summary["jira_search_fields"] = resolve_search_fields(None, config)
    print(json.dumps(summary, indent=2))
    return 0


def cmd_list_tools(args: argparse.Namespace) -> int:
    config = _load_config()
    if config is None:
        return 1
    with AtlassianHttp(config.endpoint()) as http:
        registry = ToolRegistry(config, http)
        print(json.dumps(registry.list_tools(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-atlassian",
        description="MCP server exposing Jira and Confluence tools over stdio.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  mcp-atlassian\n"
               "  mcp-atlassian serve --log-level debug\n"
               "  mcp-atlassian check-config\n",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=None,
        metavar="LEVEL",
        help="Log level for stderr output (default: LOG_LEVEL or warning).",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Emit log records as JSON lines (default: JSON_LOGS).",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("serve", help="Run the stdio MCP server (default).")
    subparsers.add_parser("check-config", help="Validate configuration and print resolved settings.")
    subparsers.add_parser("list-tools", help="Print the tool catalog as JSON.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_logs=args.json_logs)

    if args.command in (None, "serve"):
        return cmd_serve(args)
    if args.command == "check-config":
        return cmd_check_config(args)
    if args.command == "list-tools":
        return cmd_list_tools(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
