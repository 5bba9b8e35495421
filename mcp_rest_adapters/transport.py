"""
HTTP request executor and response normalizer.

Every outbound call made by the adapters goes through :func:`execute`, which
never raises for transport problems: timeouts, network failures and unreadable
bodies all come back as an :class:`HttpResult` with ``ok=False``.
"""

import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import Callable, Mapping, Optional, Tuple

import anyio
import anyio.to_thread

from .schemas import HttpResult

logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = 15.0
ERROR_SNIPPET_LENGTH = 200
CLOUDFLARE_MARKERS = ("<!DOCTYPE html>", "Just a moment")


# =============================================================================
# Response Normalizer
# =============================================================================

def _parse_json(text: str) -> Tuple[object, bool]:
    """Parse JSON, falling back to the raw text. The flag is True on success."""
    try:
        return json.loads(text), True
    except ValueError:
        return text, False


def normalize(status: int, reason: str, read_body: Callable[[], bytes]) -> HttpResult:
    """Turn a raw HTTP response into an HttpResult.

    The body is always read as text first; JSON is attempted only when the
    body is non-empty.
    """
    try:
        raw = read_body()
    except (OSError, http.client.HTTPException) as e:
        logger.debug(f"Failed to read response body (status {status}): {e}")
        return HttpResult.failure(str(e), "ResponseParseError", status=status)

    text = raw.decode("utf-8", errors="replace")
    data, json_body = _parse_json(text) if text else (None, False)
    return HttpResult(
        status=status,
        ok=200 <= status < 300,
        data=data,
        reason=reason or "",
        json_body=json_body,
    )


def extract_error_message(result: HttpResult, url: str = "") -> str:
    """Pick a human-readable message out of a failed backend response."""
    fallback = f"{result.status}: {result.reason}"
    data = result.data

    if isinstance(data, dict):
        for key in ("error", "message", "details"):
            value = data.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value)
        return fallback

    # Raw text is shown only for bodies that were not JSON.
    if not result.json_body and isinstance(data, str) and data.strip():
        if any(marker in data for marker in CLOUDFLARE_MARKERS):
            return (
                "Cloudflare protection page returned. This usually means the "
                f"endpoint path is incorrect. Used: {url}"
            )
        return data[:ERROR_SNIPPET_LENGTH]

    return fallback


# =============================================================================
# Request Executor
# =============================================================================

def _send(request: urllib.request.Request, timeout: float) -> HttpResult:
    """Blocking send; HTTP error statuses are responses, not failures."""
    try:
        response = urllib.request.urlopen(request, timeout=timeout)
    except urllib.error.HTTPError as e:
        try:
            return normalize(e.code, e.reason, e.read)
        finally:
            e.close()

    with response:
        return normalize(response.status, response.reason, response.read)


def _is_timeout(error: BaseException) -> bool:
    if isinstance(error, TimeoutError):
        return True
    return isinstance(error, urllib.error.URLError) and isinstance(error.reason, TimeoutError)


async def execute(
    url: str,
    method: str,
    headers: Mapping[str, str],
    body: Optional[bytes] = None,
    timeout: float = TIMEOUT_SECONDS,
) -> HttpResult:
    """Issue one HTTP request and normalize the outcome.

    Args:
        url: Absolute request URL.
        method: HTTP verb, any case.
        headers: Request headers.
        body: Encoded request body, or None to send no body.
        timeout: Total deadline in seconds.

    Returns:
        HttpResult; transport failures are classified as TimeoutError or
        NetworkError with ``status=0``.
    """
    method = method.upper()
    logger.debug(f"{method} {url}")

    try:
        request = urllib.request.Request(url, data=body, headers=dict(headers), method=method)
        with anyio.fail_after(timeout):
            result = await anyio.to_thread.run_sync(
                _send, request, timeout, abandon_on_cancel=True
            )
    except (OSError, ValueError, http.client.HTTPException) as e:
        if _is_timeout(e):
            message = str(e) or f"Request timed out after {timeout:g}s"
            logger.debug(f"{method} {url} timed out: {message}")
            return HttpResult.failure(message, "TimeoutError")
        reason = e.reason if isinstance(e, urllib.error.URLError) else e
        logger.debug(f"{method} {url} failed: {reason}")
        return HttpResult.failure(str(reason), "NetworkError")

    logger.debug(f"{method} {url} -> {result.status}")
    return result
