"""
Lamdera-collab MCP Server

Exposes the collab backend's projects, tasks, documents, comments and review
workflow as one MCP tool per RPC. Calls go through the ``methodCall``
envelope unless ``--direct`` is given.

Usage:
    lamdera-collab-mcp --key <api-key> [--url http://localhost:8000] [--direct] [--debug]
"""

import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

from mcp.types import Tool

from .backends import CollabBackend, DirectRpc, EnvelopeRpc
from .config import CollabSettings, configure_logging, load_collab_settings
from .dispatch import CollabDispatcher, Dispatcher
from .errors import ConfigError
from .server import create_server, serve
from .tools import COLLAB_TOOLS

SERVER_NAME = "lamdera-collab-mcp"


class CollabAdapter:
    """Maps collab tool calls onto backend RPCs through the dispatch table."""

    name = SERVER_NAME

    def __init__(
        self,
        backend: CollabBackend,
        dispatcher: Optional[Dispatcher] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(SERVER_NAME)
        self.backend = backend
        self.dispatcher: Dispatcher = dispatcher or CollabDispatcher(logger=self.logger)
        self.tools: List[Tool] = COLLAB_TOOLS

    @classmethod
    def from_settings(cls, settings: CollabSettings) -> "CollabAdapter":
        logger = logging.getLogger(SERVER_NAME)
        strategy = EnvelopeRpc() if settings.use_method_call else DirectRpc()
        backend = CollabBackend(settings.api_url, settings.api_key, strategy, logger=logger)
        return cls(backend, logger=logger)

    async def call(self, name: str, arguments: Dict[str, Any]) -> Any:
        resolution = self.dispatcher.resolve(name, arguments)
        result = await self.backend.call(resolution.endpoint, resolution.body)
        if resolution.post_process is not None:
            return resolution.post_process(arguments, result)
        return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = load_collab_settings(argv)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        print(
            "Usage: lamdera-collab-mcp --key <api-key> [--url <url>] [--direct] [--debug] [--version]",
            file=sys.stderr,
        )
        return 1

    configure_logging(settings.debug)
    logger = logging.getLogger(SERVER_NAME)
    mode = "methodCall envelope" if settings.use_method_call else "direct endpoints"
    logger.info(f"Starting {SERVER_NAME} MCP server ({settings.api_url}, {mode})...")
    return serve(create_server(CollabAdapter.from_settings(settings)))


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
