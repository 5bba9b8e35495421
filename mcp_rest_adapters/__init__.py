"""MCP adapters for the Todoist REST API and the Lamdera-collab RPC backend."""

__version__ = "1.1.2"

__all__ = ["__version__"]
