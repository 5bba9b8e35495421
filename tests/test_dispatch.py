"""Tests for tool -> backend request resolution."""

import logging

import pytest

from mcp_rest_adapters.dispatch import (
    COLLAB_RULES,
    CollabDispatcher,
    TodoistDispatcher,
    camel_case,
)
from mcp_rest_adapters.errors import (
    InvalidArgumentsError,
    ProjectLookupError,
    UnknownToolError,
)
from mcp_rest_adapters.tools import COLLAB_TOOLS


@pytest.fixture
def collab():
    return CollabDispatcher()


# =============================================================================
# Todoist passthrough
# =============================================================================

def test_todoist_resolves_arguments_directly():
    resolution = TodoistDispatcher().resolve(
        "todoist_api", {"endpoint": "/tasks", "method": "post", "body": {"content": "X"}}
    )
    assert resolution.endpoint == "/tasks"
    assert resolution.method == "POST"
    assert resolution.body == {"content": "X"}


@pytest.mark.parametrize("body", [None, {}])
def test_todoist_empty_body_is_dropped(body):
    arguments = {"endpoint": "/projects", "method": "GET"}
    if body is not None:
        arguments["body"] = body
    assert TodoistDispatcher().resolve("todoist_api", arguments).body is None


@pytest.mark.parametrize(
    "arguments",
    [
        {"method": "GET"},
        {"endpoint": "/tasks"},
        {"endpoint": "/tasks", "method": "TRACE"},
        {"endpoint": "/tasks", "method": "POST", "body": "content=X"},
    ],
)
def test_todoist_rejects_invalid_arguments(arguments):
    with pytest.raises(InvalidArgumentsError):
        TodoistDispatcher().resolve("todoist_api", arguments)


def test_todoist_unknown_tool():
    with pytest.raises(UnknownToolError) as exc_info:
        TodoistDispatcher().resolve("todoist", {})
    assert exc_info.value.message == "Unknown tool: todoist"


# =============================================================================
# Collab table
# =============================================================================

def test_every_advertised_tool_has_a_rule():
    assert {tool.name for tool in COLLAB_TOOLS} == {rule.tool_name for rule in COLLAB_RULES}


@pytest.mark.parametrize(
    "name, endpoint",
    [
        ("list_projects", "listProjects"),
        ("get_task_status_analytics", "getTaskStatusAnalytics"),
        ("take_next_review_task", "takeNextReviewTask"),
        ("task_reject_review", "taskRejectReview"),
    ],
)
def test_camel_case(name, endpoint):
    assert camel_case(name) == endpoint


def test_unknown_tool(collab):
    with pytest.raises(UnknownToolError, match="Unknown tool: drop_tables"):
        collab.resolve("drop_tables", {})


def test_list_projects_defaults(collab):
    resolution = collab.resolve("list_projects", {})
    assert resolution.endpoint == "listProjects"
    assert resolution.method == "POST"
    assert resolution.body == {"active_only": True, "limit": 20}


def test_list_projects_keeps_explicit_false_and_git_remote(collab):
    resolution = collab.resolve(
        "list_projects",
        {"active_only": False, "limit": 5, "git_remote_url": "git@github.com:acme/app.git"},
    )
    assert resolution.body == {
        "active_only": False,
        "limit": 5,
        "git_remote_url": "git@github.com:acme/app.git",
    }


def test_empty_git_remote_is_omitted(collab):
    resolution = collab.resolve("create_project", {"name": "App", "git_remote_url": ""})
    assert resolution.body == {"name": "App", "description": "", "tags": []}


def test_list_tasks_defaults(collab):
    resolution = collab.resolve("list_tasks", {"project_id": 3})
    assert resolution.body == {"project_id": 3, "limit": 50}


def test_create_task_defaults_and_attribution(collab):
    resolution = collab.resolve(
        "create_task",
        {
            "project_id": 1,
            "title": "Ship it",
            "task_type": "story",
            "worker_type": "pm",
            "worker_name": "Ada",
        },
    )
    assert resolution.endpoint == "createTask"
    assert resolution.body == {
        "project_id": 1,
        "title": "Ship it",
        "description": "",
        "task_type": "story",
        "status": "todo",
        "priority": "medium",
        "tags": [],
        "created_by_worker": {"worker_type": "pm", "name": "Ada"},
    }


def test_default_lists_are_not_shared(collab):
    first = collab.resolve("create_project", {"name": "a"}).body
    first["tags"].append("mutated")
    second = collab.resolve("create_project", {"name": "b"}).body
    assert second["tags"] == []


def test_update_tools_use_last_modified_key(collab):
    resolution = collab.resolve(
        "update_task", {"task_id": 9, "status": "done", "worker_type": "dev", "worker_name": "Lin"}
    )
    assert resolution.body["last_modified_by_worker"] == {"worker_type": "dev", "name": "Lin"}
    assert "created_by_worker" not in resolution.body
    assert resolution.body["status"] == "done"
    assert resolution.body["priority"] == "medium"


def test_lone_worker_field_is_dropped_with_warning(collab, caplog):
    with caplog.at_level(logging.WARNING):
        resolution = collab.resolve("create_project", {"name": "App", "worker_type": "dev"})

    assert "created_by_worker" not in resolution.body
    assert "worker_name is missing" in caplog.text


def test_invalid_worker_type_is_rejected(collab):
    with pytest.raises(InvalidArgumentsError):
        collab.resolve("create_project", {"name": "App", "worker_type": "ceo", "worker_name": "X"})


def test_documents_rename_type(collab):
    created = collab.resolve(
        "create_document", {"title": "Plan", "type": "plan", "project_id": 2}
    )
    assert created.body == {"title": "Plan", "content": "", "document_type": "plan", "project_id": 2}

    updated = collab.resolve(
        "update_document",
        {"document_id": 4, "title": "Spec", "content": "...", "type": "specification"},
    )
    assert updated.endpoint == "updateDocument"
    assert updated.body == {
        "document_id": 4,
        "title": "Spec",
        "content": "...",
        "document_type": "specification",
    }
    assert "type" not in updated.body


def test_take_next_task_force_default(collab):
    assert collab.resolve("take_next_task", {"project_id": 1}).body == {"project_id": 1, "force": False}


def test_get_recent_activity_has_empty_params(collab):
    resolution = collab.resolve("get_recent_activity", {})
    assert resolution.endpoint == "getRecentActivity"
    assert resolution.body == {}


def test_arguments_are_not_mutated(collab):
    arguments = {"name": "App", "worker_type": "dev", "worker_name": "Lin"}
    collab.resolve("create_project", arguments)
    assert arguments == {"name": "App", "worker_type": "dev", "worker_name": "Lin"}


# =============================================================================
# Merged tools
# =============================================================================

@pytest.mark.parametrize("position, endpoint", [("top", "moveTaskToTop"), ("bottom", "moveTaskToBottom")])
def test_move_task_endpoint(collab, position, endpoint):
    resolution = collab.resolve("move_task_to_top_or_bottom", {"task_id": 5, "position": position})
    assert resolution.endpoint == endpoint
    assert resolution.body == {"task_id": 5}


@pytest.mark.parametrize("position", ["middle", None, "TOP"])
def test_move_task_invalid_position(collab, position):
    with pytest.raises(InvalidArgumentsError):
        collab.resolve("move_task_to_top_or_bottom", {"task_id": 5, "position": position})


def test_upsert_comment_updates_when_comment_id_given(collab):
    resolution = collab.resolve(
        "upsert_comment",
        {
            "comment_id": 42,
            "content": "edited",
            "task_id": 7,
            "parent_comment_id": 3,
            "worker_type": "dev",
            "worker_name": "Lin",
        },
    )
    assert resolution.endpoint == "updateComment"
    assert resolution.body == {"comment_id": 42, "content": "edited"}


def test_upsert_comment_creates_without_comment_id(collab):
    resolution = collab.resolve(
        "upsert_comment",
        {
            "task_id": 7,
            "content": "hello",
            "parent_comment_id": 3,
            "worker_type": "reviewer",
            "worker_name": "Rae",
        },
    )
    assert resolution.endpoint == "createComment"
    assert resolution.body == {
        "task_id": 7,
        "content": "hello",
        "parent_comment_id": 3,
        "created_by_worker": {"worker_type": "reviewer", "name": "Rae"},
    }


def test_upsert_comment_create_requires_task_id(collab):
    with pytest.raises(InvalidArgumentsError, match="task_id"):
        collab.resolve("upsert_comment", {"content": "orphan"})


# =============================================================================
# Composite git remote lookup
# =============================================================================

GIT_URL = "https://github.com/acme/app.git"


def test_git_remote_lookup_queries_list_projects(collab):
    resolution = collab.resolve("get_project_by_git_remote", {"git_remote_url": GIT_URL})
    assert resolution.endpoint == "listProjects"
    assert resolution.body == {"git_remote_url": GIT_URL, "active_only": True}
    assert resolution.post_process is not None


def test_git_remote_lookup_single_match(collab):
    resolution = collab.resolve("get_project_by_git_remote", {"git_remote_url": GIT_URL})
    project = {"id": 1, "name": "App"}
    assert resolution.post_process({"git_remote_url": GIT_URL}, {"data": [project]}) == project


@pytest.mark.parametrize("response", [{"data": []}, {}, None, {"data": "oops"}])
def test_git_remote_lookup_no_match(collab, response):
    resolution = collab.resolve("get_project_by_git_remote", {"git_remote_url": GIT_URL})
    with pytest.raises(ProjectLookupError) as exc_info:
        resolution.post_process({"git_remote_url": GIT_URL}, response)
    assert exc_info.value.message == f"No project found with git remote URL {GIT_URL}"


def test_git_remote_lookup_ambiguous(collab):
    resolution = collab.resolve("get_project_by_git_remote", {"git_remote_url": GIT_URL})
    with pytest.raises(ProjectLookupError) as exc_info:
        resolution.post_process({"git_remote_url": GIT_URL}, {"data": [{"id": 1}, {"id": 2}, {"id": 3}]})
    assert "Multiple projects found" in exc_info.value.message
    assert "Found 3 projects." in exc_info.value.message
