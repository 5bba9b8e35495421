"""Errors raised by the adapters and reported back to MCP callers as text."""

from typing import Optional


class AdapterError(RuntimeError):
    """Base class for errors that are returned to the caller as tool content."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownToolError(AdapterError):
    """Raised when a tool call names a tool the adapter does not advertise."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class InvalidArgumentsError(AdapterError):
    """Raised when tool arguments cannot be turned into a backend request."""


class BackendError(AdapterError):
    """Raised when the collab backend reports a failure or cannot be reached."""

    def __init__(
        self, message: str, *, status: int = 0, error_type: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.status = status
        self.error_type = error_type


class ConfigError(AdapterError):
    """Raised at startup when a required credential is missing."""


class ProjectLookupError(AdapterError):
    """Raised when a git remote URL does not identify exactly one project."""
