"""
Binds a tool adapter to an MCP server over stdio.

An adapter advertises its tools and executes calls; this module turns its
results and errors into MCP tool responses. Business errors never become
protocol faults: the caller always gets a text content item back.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Protocol

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from . import __version__
from .errors import AdapterError

logger = logging.getLogger(__name__)


class ToolAdapter(Protocol):
    name: str
    tools: List[Tool]
    logger: logging.Logger

    async def call(self, name: str, arguments: Dict[str, Any]) -> Any:  # pragma: no cover - typing only
        ...


def _build_tool_response(text: str, *, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def render_result(result: Any) -> str:
    """Pretty-print a tool result as JSON."""
    return json.dumps(result, indent=2, ensure_ascii=False)


async def handle_tool_call(
    adapter: ToolAdapter, name: str, arguments: Dict[str, Any]
) -> CallToolResult:
    """Run one tool call and wrap the outcome as a single text content item."""
    adapter.logger.info(f"Tool called: {name} with args: {arguments}")

    try:
        result = await adapter.call(name, arguments or {})
    except AdapterError as e:
        adapter.logger.info(f"Tool {name} failed: {e.message}")
        return _build_tool_response(f"Error: {e.message}", is_error=True)
    except Exception as e:
        adapter.logger.exception(f"Tool {name} failed")
        return _build_tool_response(f"Error: {str(e)}", is_error=True)

    return _build_tool_response(render_result(result))


def create_server(adapter: ToolAdapter) -> Server:
    """Create an MCP server that lists and dispatches the adapter's tools."""
    app = Server(adapter.name, version=__version__)

    @app.list_tools()
    async def list_tools() -> List[Tool]:
        return list(adapter.tools)

    # Arguments are checked by the adapter's dispatcher, which also accepts
    # values the advertised schemas are stricter about (lowercase methods).
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Dict[str, Any]) -> CallToolResult:
        return await handle_tool_call(adapter, name, arguments)

    return app


async def run_stdio(app: Server) -> None:
    """Serve over stdio until the client disconnects."""
    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    except Exception as e:
        logger.error("Fatal error in main loop: %s", e)
        logger.exception("Full traceback:")
        raise


def serve(app: Server) -> int:
    """Run the server to completion and return a process exit code."""
    try:
        asyncio.run(run_stdio(app))
    except KeyboardInterrupt:
        return 0
    except Exception:
        return 1
    return 0
