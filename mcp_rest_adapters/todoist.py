"""
Todoist MCP Server (lite)

Exposes the Todoist REST API v2 through a single passthrough tool.
https://developer.todoist.com/rest/v2

Usage:
    todoist-mcp-lite --token <token>
    TODOIST_API_TOKEN=<token> python -m mcp_rest_adapters.todoist

Tool call:
    todoist_api(endpoint="/tasks", method="POST", body={"content": "Buy milk"})
    -> {"status": 200, "ok": true, "data": {...}}
"""

import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

from mcp.types import Tool

from .backends import TodoistBackend
from .config import TodoistSettings, configure_logging, load_todoist_settings
from .dispatch import Dispatcher, TodoistDispatcher
from .errors import ConfigError
from .server import create_server, serve
from .tools import TODOIST_TOOLS

SERVER_NAME = "todoist-mcp-lite"


class TodoistAdapter:
    """Resolves ``todoist_api`` calls and returns the normalized HTTP result."""

    name = SERVER_NAME

    def __init__(
        self,
        backend: TodoistBackend,
        dispatcher: Optional[Dispatcher] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.backend = backend
        self.dispatcher: Dispatcher = dispatcher or TodoistDispatcher()
        self.logger = logger or logging.getLogger(SERVER_NAME)
        self.tools: List[Tool] = TODOIST_TOOLS

    @classmethod
    def from_settings(cls, settings: TodoistSettings) -> "TodoistAdapter":
        logger = logging.getLogger(SERVER_NAME)
        return cls(TodoistBackend(settings.token, logger=logger), logger=logger)

    async def call(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        resolution = self.dispatcher.resolve(name, arguments)
        result = await self.backend.request(resolution)
        return result.model_dump()


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = load_todoist_settings(argv)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    configure_logging(settings.debug)
    logger = logging.getLogger(SERVER_NAME)
    logger.info(f"Starting {SERVER_NAME} MCP server (Todoist REST API v2)...")
    return serve(create_server(TodoistAdapter.from_settings(settings)))


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
