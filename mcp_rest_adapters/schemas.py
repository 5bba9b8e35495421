"""
Pydantic models shared by the adapters.

These models describe the values that cross module boundaries:

1. ``HttpResult`` - the uniform shape every outbound HTTP call resolves to
2. ``WorkerAttribution`` - optional actor metadata attached to collab mutations

Usage:
    result = HttpResult(status=200, ok=True, data={"id": 1})
    result.model_dump()   # {"status": 200, "ok": True, "data": {"id": 1}}
"""

from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, Field, PrivateAttr


# =============================================================================
# HTTP Results
# =============================================================================

class HttpResult(BaseModel):
    """Normalized outcome of a single HTTP request."""

    status: int = Field(description="HTTP status code, or 0 when no response was received")
    ok: bool = Field(description="True when the status is in the 2xx range")
    data: Any = Field(None, description="Parsed JSON body, raw text, or null for an empty body")
    reason: str = Field("", exclude=True, description="HTTP reason phrase (not serialized)")
    json_body: bool = Field(False, exclude=True, description="True when the body parsed as JSON")

    _transport_failure: bool = PrivateAttr(False)

    @classmethod
    def failure(cls, error: str, error_type: str, status: int = 0) -> "HttpResult":
        """Build a result for a request that produced no usable response."""
        result = cls(status=status, ok=False, data={"error": error, "type": error_type})
        result._transport_failure = True
        return result

    @property
    def error_type(self) -> Optional[str]:
        """Transport-level classification, if this result was built by ``failure``."""
        if not self._transport_failure:
            return None
        return self.data["type"]


# =============================================================================
# Collab Schemas
# =============================================================================

WorkerType = Literal["dev", "pm", "reviewer"]


class WorkerAttribution(BaseModel):
    """The actor that performed a mutation on the collab backend."""

    worker_type: WorkerType = Field(description="Kind of worker: dev, pm or reviewer")
    name: str = Field(description="Worker display name")

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> Optional["WorkerAttribution"]:
        """
        Build attribution from tool arguments.

        Both ``worker_type`` and ``worker_name`` must be supplied; with only
        one of them no attribution is produced.
        """
        worker_type = arguments.get("worker_type")
        worker_name = arguments.get("worker_name")
        if not (worker_type and worker_name):
            return None
        return cls(worker_type=worker_type, name=worker_name)

    def as_params(self) -> Dict[str, str]:
        return self.model_dump()
