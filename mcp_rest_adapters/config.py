"""Command-line and environment configuration for the adapter servers."""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from . import __version__
from .errors import ConfigError

DEFAULT_COLLAB_URL = "http://localhost:8000"
LOG_LEVEL_ENV = "MCP_ADAPTER_LOG_LEVEL"
LOG_FORMAT = "%(name)s - %(message)s"


@dataclass(frozen=True)
class TodoistSettings:
    """Startup configuration for the Todoist server."""

    token: str
    debug: bool = False


@dataclass(frozen=True)
class CollabSettings:
    """Startup configuration for the collab server."""

    api_key: str
    api_url: str = DEFAULT_COLLAB_URL
    use_method_call: bool = True
    debug: bool = False


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def build_todoist_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="todoist-mcp-lite",
        description="MCP server exposing the Todoist REST API v2 as a single tool",
    )
    parser.add_argument(
        "--token",
        help="Todoist API token (default: $TODOIST_API_TOKEN)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log outbound requests and responses to stderr",
    )
    parser.add_argument("--version", "-v", action="version", version=__version__)
    return parser


def build_collab_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lamdera-collab-mcp",
        description="MCP server for the Lamdera-collab project/task/document backend",
    )
    parser.add_argument(
        "--key",
        help="Collab API key (default: $COLLAB_API_KEY)",
    )
    parser.add_argument(
        "--url",
        help=f"Collab backend base URL (default: $COLLAB_API_URL or {DEFAULT_COLLAB_URL})",
    )
    parser.add_argument(
        "--direct",
        action="store_true",
        help="Call named RPC endpoints directly instead of the methodCall envelope",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log outbound requests and responses to stderr",
    )
    parser.add_argument("--version", "-v", action="version", version=__version__)
    return parser


def load_todoist_settings(
    argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None
) -> TodoistSettings:
    """Parse CLI arguments, falling back to the environment.

    Raises:
        ConfigError: If no API token is available.
    """
    environ = os.environ if environ is None else environ
    args = build_todoist_parser().parse_args(argv)
    token = args.token or environ.get("TODOIST_API_TOKEN")
    if not token:
        raise ConfigError("TODOIST_API_TOKEN required via env or --token flag")
    return TodoistSettings(token=token, debug=args.debug)


def load_collab_settings(
    argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None
) -> CollabSettings:
    """Parse CLI arguments, falling back to the environment.

    Raises:
        ConfigError: If no API key is available.
    """
    environ = os.environ if environ is None else environ
    args = build_collab_parser().parse_args(argv)
    api_key = args.key or environ.get("COLLAB_API_KEY")
    if not api_key:
        raise ConfigError("API key required. Use --key <api-key>")
    return CollabSettings(
        api_key=api_key,
        api_url=args.url or environ.get("COLLAB_API_URL") or DEFAULT_COLLAB_URL,
        use_method_call=not (args.direct or _env_flag(environ.get("COLLAB_DIRECT"))),
        debug=args.debug,
    )


def configure_logging(debug: bool = False) -> None:
    """Send logs to stderr; stdout carries the MCP protocol."""
    level = "DEBUG" if debug else os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
