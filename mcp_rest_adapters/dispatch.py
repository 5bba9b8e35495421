"""
Tool dispatch: turns a tool call into the backend request that serves it.

Two dispatchers share the ``resolve(name, arguments) -> Resolution`` interface:

- ``TodoistDispatcher``: one passthrough tool whose arguments already name the
  REST endpoint, verb and body.
- ``CollabDispatcher``: one tool per collab RPC, driven by the ``COLLAB_RULES``
  table. Adding a tool is a new ``DispatchRule`` entry.
"""

import copy
import logging
import re
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Mapping,
    NamedTuple,
    Optional,
    Protocol,
    Tuple,
    Union,
)

from pydantic import ValidationError

from .errors import InvalidArgumentsError, ProjectLookupError, UnknownToolError
from .schemas import WorkerAttribution
from .tools import HTTP_METHODS

CREATED_BY = "created_by_worker"
MODIFIED_BY = "last_modified_by_worker"

_MISSING = object()

Arguments = Mapping[str, Any]
ParamBuilder = Callable[[Arguments, Optional[WorkerAttribution]], Dict[str, Any]]
PostProcess = Callable[[Arguments, Any], Any]


class Resolution(NamedTuple):
    """Where and how a tool call is sent."""

    endpoint: str
    method: str
    body: Optional[Dict[str, Any]]
    post_process: Optional[PostProcess] = None


class Dispatcher(Protocol):
    def resolve(self, name: str, arguments: Arguments) -> Resolution:  # pragma: no cover - typing only
        ...


# =============================================================================
# Todoist (passthrough)
# =============================================================================

class TodoistDispatcher:
    """Resolves the single ``todoist_api`` tool straight from its arguments."""

    TOOL_NAME = "todoist_api"

    def resolve(self, name: str, arguments: Arguments) -> Resolution:
        if name != self.TOOL_NAME:
            raise UnknownToolError(name)

        endpoint = arguments.get("endpoint")
        method = arguments.get("method")
        if not isinstance(endpoint, str) or not endpoint:
            raise InvalidArgumentsError("Missing 'endpoint' argument")
        if not isinstance(method, str) or not method:
            raise InvalidArgumentsError("Missing 'method' argument")

        method = method.upper()
        if method not in HTTP_METHODS:
            raise InvalidArgumentsError(
                f"Unsupported method '{method}'. Use one of: {', '.join(HTTP_METHODS)}"
            )

        body = arguments.get("body")
        if body is not None and not isinstance(body, dict):
            raise InvalidArgumentsError("'body' must be an object")

        return Resolution(endpoint=endpoint, method=method, body=body or None)


# =============================================================================
# Collab (named tools)
# =============================================================================

def camel_case(name: str) -> str:
    """``list_projects`` -> ``listProjects``."""
    return re.sub(r"_([a-z])", lambda match: match.group(1).upper(), name)


@dataclass(frozen=True)
class Param:
    """One field of an RPC payload.

    A field with a default is always sent, taking the default when the
    argument is absent or null. A field without a default is sent only when
    the caller supplied it. ``truthy_only`` fields are sent only when the
    argument is truthy.
    """

    name: str
    default: Any = _MISSING
    source: Optional[str] = None
    truthy_only: bool = False

    def apply(self, arguments: Arguments, params: Dict[str, Any]) -> None:
        key = self.source or self.name
        value = arguments.get(key)

        if self.truthy_only:
            if value:
                params[self.name] = value
            return

        if value is None and self.default is not _MISSING:
            value = copy.deepcopy(self.default)
        elif key not in arguments:
            return
        params[self.name] = value


@dataclass(frozen=True)
class DispatchRule:
    """Static mapping from one tool to one collab RPC."""

    tool_name: str
    params: Union[Tuple[Param, ...], ParamBuilder] = ()
    endpoint: Union[str, Callable[[Arguments], str], None] = None
    attribution_key: Optional[str] = None
    post_process: Optional[PostProcess] = None
    method: str = "POST"

    def resolve_endpoint(self, arguments: Arguments) -> str:
        if self.endpoint is None:
            return camel_case(self.tool_name)
        if callable(self.endpoint):
            return self.endpoint(arguments)
        return self.endpoint

    def build_params(
        self, arguments: Arguments, attribution: Optional[WorkerAttribution]
    ) -> Dict[str, Any]:
        if callable(self.params):
            return self.params(arguments, attribution)

        params: Dict[str, Any] = {}
        for param in self.params:
            param.apply(arguments, params)
        if self.attribution_key and attribution is not None:
            params[self.attribution_key] = attribution.as_params()
        return params


def _move_endpoint(arguments: Arguments) -> str:
    position = arguments.get("position")
    if position == "top":
        return "moveTaskToTop"
    if position == "bottom":
        return "moveTaskToBottom"
    raise InvalidArgumentsError(f"Invalid position {position!r}: expected 'top' or 'bottom'")


def _comment_endpoint(arguments: Arguments) -> str:
    return "updateComment" if arguments.get("comment_id") is not None else "createComment"


def _comment_params(
    arguments: Arguments, attribution: Optional[WorkerAttribution]
) -> Dict[str, Any]:
    if arguments.get("comment_id") is not None:
        return {"comment_id": arguments["comment_id"], "content": arguments.get("content")}

    if arguments.get("task_id") is None:
        raise InvalidArgumentsError("task_id is required when creating a new comment")
    params: Dict[str, Any] = {"task_id": arguments["task_id"], "content": arguments.get("content")}
    if arguments.get("parent_comment_id") is not None:
        params["parent_comment_id"] = arguments["parent_comment_id"]
    if attribution is not None:
        params[CREATED_BY] = attribution.as_params()
    return params


def _git_remote_params(arguments: Arguments, _attribution: Optional[WorkerAttribution]) -> Dict[str, Any]:
    return {"git_remote_url": arguments.get("git_remote_url"), "active_only": True}


def _single_project(arguments: Arguments, response: Any) -> Any:
    """Reduce a listProjects response to the one project matching a git remote."""
    url = arguments.get("git_remote_url")
    projects = response.get("data") if isinstance(response, dict) else None
    if not isinstance(projects, list):
        projects = []

    if len(projects) == 1:
        return projects[0]
    if len(projects) > 1:
        raise ProjectLookupError(
            f"Multiple projects found with git remote URL {url}. Found {len(projects)} projects."
        )
    raise ProjectLookupError(f"No project found with git remote URL {url}")


def _by_id(key: str) -> Tuple[Param, ...]:
    return (Param(key),)


COLLAB_RULES: Tuple[DispatchRule, ...] = (
    # Projects
    DispatchRule(
        "list_projects",
        (Param("active_only", True), Param("limit", 20), Param("git_remote_url", truthy_only=True)),
    ),
    DispatchRule("get_project", _by_id("project_id")),
    DispatchRule(
        "create_project",
        (
            Param("name"),
            Param("description", ""),
            Param("tags", []),
            Param("git_remote_url", truthy_only=True),
        ),
        attribution_key=CREATED_BY,
    ),
    DispatchRule(
        "update_project",
        (
            Param("project_id"),
            Param("name"),
            Param("description", ""),
            Param("tags", []),
            Param("git_remote_url", truthy_only=True),
        ),
        attribution_key=MODIFIED_BY,
    ),
    DispatchRule(
        "get_project_by_git_remote",
        _git_remote_params,
        endpoint="listProjects",
        post_process=_single_project,
    ),
    # Tasks
    DispatchRule("list_tasks", (Param("project_id"), Param("status"), Param("limit", 50))),
    DispatchRule("get_task", _by_id("task_id")),
    DispatchRule(
        "create_task",
        (
            Param("project_id"),
            Param("title"),
            Param("description", ""),
            Param("task_type"),
            Param("status", "todo"),
            Param("priority", "medium"),
            Param("tags", []),
        ),
        attribution_key=CREATED_BY,
    ),
    DispatchRule(
        "update_task",
        (
            Param("task_id"),
            Param("title", ""),
            Param("description", ""),
            Param("status", "todo"),
            Param("priority", "medium"),
        ),
        attribution_key=MODIFIED_BY,
    ),
    DispatchRule("move_task_to_top_or_bottom", _by_id("task_id"), endpoint=_move_endpoint),
    DispatchRule("task_reject_review", (Param("task_id"), Param("reviewer_comment"))),
    DispatchRule("take_next_task", (Param("project_id"), Param("force", False))),
    DispatchRule("take_next_review_task", (Param("project_id"), Param("force", False))),
    # Documents
    DispatchRule("search_documents", (Param("query"), Param("project_id"), Param("limit", 20))),
    DispatchRule("get_document", _by_id("document_id")),
    DispatchRule(
        "create_document",
        (
            Param("title"),
            Param("content", ""),
            Param("document_type", source="type"),
            Param("project_id"),
        ),
        attribution_key=CREATED_BY,
    ),
    DispatchRule(
        "update_document",
        (
            Param("document_id"),
            Param("title"),
            Param("content"),
            Param("document_type", source="type"),
        ),
        attribution_key=MODIFIED_BY,
    ),
    # Comments
    DispatchRule(
        "list_task_comments", (Param("task_id"), Param("limit", 20), Param("page", 1))
    ),
    DispatchRule("upsert_comment", _comment_params, endpoint=_comment_endpoint),
    # Activity
    DispatchRule("get_recent_activity"),
    DispatchRule("get_task_status_analytics", _by_id("project_id")),
)


class CollabDispatcher:
    """Resolves collab tool calls through a table of dispatch rules."""

    def __init__(
        self,
        rules: Iterable[DispatchRule] = COLLAB_RULES,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.rules: Dict[str, DispatchRule] = {rule.tool_name: rule for rule in rules}
        self.logger = logger or logging.getLogger(__name__)

    def _attribution(self, name: str, arguments: Arguments) -> Optional[WorkerAttribution]:
        has_type = bool(arguments.get("worker_type"))
        has_name = bool(arguments.get("worker_name"))
        if has_type != has_name:
            missing = "worker_name" if has_type else "worker_type"
            self.logger.warning(
                f"{name}: worker attribution dropped because {missing} is missing"
            )
        try:
            return WorkerAttribution.from_arguments(arguments)
        except ValidationError as e:
            raise InvalidArgumentsError(f"Invalid worker attribution: {e.errors()[0]['msg']}") from e

    def resolve(self, name: str, arguments: Arguments) -> Resolution:
        rule = self.rules.get(name)
        if rule is None:
            raise UnknownToolError(name)

        attribution = self._attribution(name, arguments)
        endpoint = rule.resolve_endpoint(arguments)
        params = rule.build_params(arguments, attribution)
        self.logger.debug(f"Resolved {name} -> {endpoint} with params: {params}")
        return Resolution(
            endpoint=endpoint,
            method=rule.method,
            body=params,
            post_process=rule.post_process,
        )
