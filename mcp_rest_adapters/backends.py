"""
Backend clients: how a resolved tool call becomes an HTTP request.

The Todoist client returns the normalized ``HttpResult`` as-is. The collab
client speaks the backend's POST-only RPC convention and reduces the result to
the response payload, raising ``BackendError`` on failure.
"""

import base64
import json
import logging
from typing import Any, Dict, Optional, Protocol, Tuple

from . import __version__
from .dispatch import Resolution
from .errors import BackendError
from .schemas import HttpResult
from .transport import TIMEOUT_SECONDS, execute, extract_error_message

TODOIST_BASE_URL = "https://api.todoist.com/rest/v2"
TODOIST_USER_AGENT = f"todoist-mcp-lite/{__version__}"
COLLAB_USER_AGENT = f"lamdera-collab-mcp/{__version__}"
METHOD_CALL_ENDPOINT = "methodCall"
EMPTY_SUCCESS = {"success": True, "message": "Operation completed"}


def encode_json(value: Any) -> bytes:
    """Compact UTF-8 JSON, as the collab backend receives it."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def mask_secret(secret: str, visible: int = 10) -> str:
    return f"{secret[:visible]}..."


# =============================================================================
# Todoist
# =============================================================================

class TodoistBackend:
    """Bearer-token client for the Todoist REST API v2."""

    def __init__(
        self,
        token: str,
        base_url: str = TODOIST_BASE_URL,
        timeout: float = TIMEOUT_SECONDS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.token = token
        self.base_url = base_url
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "User-Agent": TODOIST_USER_AGENT,
        }

    async def request(self, resolution: Resolution) -> HttpResult:
        url = f"{self.base_url}{resolution.endpoint}"
        body = encode_json(resolution.body) if resolution.body else None
        self.logger.debug(f"Calling: {resolution.method} {url} (token={mask_secret(self.token)})")
        result = await execute(url, resolution.method, self.headers, body, timeout=self.timeout)
        self.logger.debug(f"Response status: {result.status}")
        return result


# =============================================================================
# Collab
# =============================================================================

class RpcStrategy(Protocol):
    def prepare(self, endpoint: str, payload: Dict[str, Any]) -> Tuple[str, bytes]:  # pragma: no cover - typing only
        ...


class DirectRpc:
    """POST the payload to the named endpoint."""

    def prepare(self, endpoint: str, payload: Dict[str, Any]) -> Tuple[str, bytes]:
        return endpoint, encode_json(payload)


class EnvelopeRpc:
    """POST every call to ``methodCall`` as a base64-encoded ``{endpoint, payload}``."""

    def prepare(self, endpoint: str, payload: Dict[str, Any]) -> Tuple[str, bytes]:
        envelope = encode_json({"endpoint": endpoint, "payload": payload})
        return METHOD_CALL_ENDPOINT, encode_json(base64.b64encode(envelope).decode("ascii"))


class CollabBackend:
    """Client for the collab backend's ``/_r/<endpoint>/`` RPC routes."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        strategy: Optional[RpcStrategy] = None,
        timeout: float = TIMEOUT_SECONDS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.strategy = strategy or EnvelopeRpc()
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
            "User-Agent": COLLAB_USER_AGENT,
        }

    async def call(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke one RPC and return its decoded payload."""
        route, body = self.strategy.prepare(endpoint, params or {})
        url = f"{self.api_url}/_r/{route}/"

        self.logger.debug(f"Calling: {url} ({endpoint})")
        self.logger.debug(f"Headers: x-api-key={mask_secret(self.api_key)}")
        self.logger.debug(f"Body: {body.decode('utf-8')}")

        result = await execute(url, "POST", self.headers, body, timeout=self.timeout)

        self.logger.debug(f"Response status: {result.status}")
        if isinstance(result.data, str):
            self.logger.debug(f"Response text: {result.data[:200]}")
        return self._unwrap(result, url)

    def _unwrap(self, result: HttpResult, url: str) -> Any:
        error_type = result.error_type
        if error_type == "TimeoutError":
            raise BackendError(
                "Request timeout - backend may be restarting", error_type=error_type
            )
        if error_type is not None:
            raise BackendError(
                result.data["error"], status=result.status, error_type=error_type
            )
        if not result.ok:
            raise BackendError(extract_error_message(result, url), status=result.status)

        data = result.data
        if data is None or (isinstance(data, str) and not data.strip()):
            return dict(EMPTY_SUCCESS)
        if isinstance(data, str):
            if "timeout" in data:
                raise BackendError("Backend timeout - server may be restarting", status=result.status)
            raise BackendError(f"Invalid response format: {data[:100]}", status=result.status)
        return data
