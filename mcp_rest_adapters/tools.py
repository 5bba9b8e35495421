"""
Tool metadata advertised by the adapters.

Descriptions and input schemas are read by LLM agents to decide how to call
each tool, so the text here is kept exactly as the agents expect it.
"""

from typing import Any, Dict, List, Sequence

from mcp.types import Tool

TODOIST_API_DOCS = "https://developer.todoist.com/rest/v2"
HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


# =============================================================================
# Todoist
# =============================================================================

TODOIST_TOOLS: List[Tool] = [
    Tool(
        name="todoist_api",
        description=f"""Direct Todoist REST API v2 access. Common uses:
1. GET /tasks - List tasks (filter: project_id, label, filter query)
2. POST /tasks - Create task (required: content, optional: due_string, project_id, priority 1-4, labels array)
3. POST /tasks/:id/close - Complete task
4. DELETE /tasks/:id - Delete task
5. GET /projects - List projects
Response: {{status: number, ok: boolean, data: object|array|string}}. Full docs: {TODOIST_API_DOCS}""",
        inputSchema={
            "type": "object",
            "properties": {
                "endpoint": {"type": "string", "description": "API endpoint (e.g., /tasks, /projects/123)"},
                "method": {"type": "string", "enum": HTTP_METHODS},
                "body": {"type": "object", "description": "Request body (optional)"},
            },
            "required": ["endpoint", "method"],
        },
    ),
]


# =============================================================================
# Lamdera-collab
# =============================================================================

WORKER_PROPERTIES: Dict[str, Any] = {
    "worker_type": {"type": "string", "enum": ["dev", "pm", "reviewer"]},
    "worker_name": {"type": "string"},
}
TASK_TYPES = ["epic", "story", "task", "bug", "component"]
TASK_STATUSES = ["todo", "in_progress", "ready_for_review", "under_review", "done", "blocked", "abandoned"]
TASK_PRIORITIES = ["low", "medium", "high", "critical"]
DOCUMENT_TYPES = ["plan", "specification", "notes", "code", "other"]
STRING_LIST = {"type": "array", "items": {"type": "string"}}
GIT_REMOTE_HINT = "Use 'git remote get-url origin' to get the current repo's remote URL."


def _schema(properties: Dict[str, Any], required: Sequence[str] = ()) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "object"}
    if required:
        schema["required"] = list(required)
    schema["properties"] = properties
    return schema


def _by_id(key: str) -> Dict[str, Any]:
    return _schema({key: {"type": "number"}}, [key])


def _take_next(name: str, description: str) -> Tool:
    return Tool(
        name=name,
        description=description,
        inputSchema=_schema(
            {"project_id": {"type": "number"}, "force": {"type": "boolean", "default": False}},
            ["project_id"],
        ),
    )


COLLAB_TOOLS: List[Tool] = [
    # Projects
    Tool(
        name="list_projects",
        description=(
            "List projects. To find the project for the current git repository, first run "
            "'git remote get-url origin' locally to get the remote URL, then use the "
            "git_remote_url parameter to filter projects by that URL."
        ),
        inputSchema=_schema({
            "active_only": {"type": "boolean", "default": True},
            "limit": {"type": "number", "default": 20},
            "git_remote_url": {
                "type": "string",
                "description": f"Filter projects by git remote URL. {GIT_REMOTE_HINT}",
            },
        }),
    ),
    Tool(name="get_project", description="Get project by ID", inputSchema=_by_id("project_id")),
    Tool(
        name="create_project",
        description="Create project. Use git_remote_url to associate the project with a git repository.",
        inputSchema=_schema(
            {
                "name": {"type": "string"},
                "description": {"type": "string"},
                "tags": STRING_LIST,
                "git_remote_url": {
                    "type": "string",
                    "description": (
                        "Git remote URL to associate with this project. "
                        "Use 'git remote get-url origin' to get current repo's URL."
                    ),
                },
                **WORKER_PROPERTIES,
            },
            ["name"],
        ),
    ),
    Tool(
        name="get_project_by_git_remote",
        description=(
            "Find a project by its git remote URL. First run 'git remote get-url origin' locally "
            "to get the remote URL of your current repository, then use this tool to find the "
            "associated project."
        ),
        inputSchema=_schema(
            {
                "git_remote_url": {
                    "type": "string",
                    "description": (
                        "The git remote URL to search for. Get this by running "
                        "'git remote get-url origin' in your repository."
                    ),
                },
            },
            ["git_remote_url"],
        ),
    ),
    Tool(
        name="update_project",
        description="Update project",
        inputSchema=_schema(
            {
                "project_id": {"type": "number"},
                "name": {"type": "string"},
                "description": {"type": "string"},
                "tags": STRING_LIST,
                "git_remote_url": {"type": "string"},
            },
            ["project_id", "name"],
        ),
    ),
    # Tasks
    Tool(
        name="list_tasks",
        description=(
            "List tasks in a project. Tasks are returned sorted by their order (priority). "
            "Lower order numbers = higher priority. Use take_next_task to automatically pick "
            "and start working on the highest priority Todo task."
        ),
        inputSchema=_schema({
            "project_id": {"type": "number"},
            "status": STRING_LIST,
            "limit": {"type": "number", "default": 50},
        }),
    ),
    Tool(name="get_task", description="Get task by ID", inputSchema=_by_id("task_id")),
    Tool(
        name="create_task",
        description="Create task",
        inputSchema=_schema(
            {
                "project_id": {"type": "number"},
                "title": {"type": "string"},
                "description": {"type": "string"},
                "task_type": {"type": "string", "enum": TASK_TYPES},
                "status": {"type": "string", "enum": TASK_STATUSES, "default": "todo"},
                "priority": {"type": "string", "enum": TASK_PRIORITIES, "default": "medium"},
                "tags": STRING_LIST,
                **WORKER_PROPERTIES,
            },
            ["project_id", "title", "task_type"],
        ),
    ),
    Tool(
        name="update_task",
        description=(
            "Update task properties including status transitions. Common workflows: Mark work "
            "complete (InProgress → ReadyForReview), Approve review (UnderReview → Done), Block "
            "task (any status → Blocked), Abandon task (any status → Abandoned). Use "
            "take_next_task for Todo→InProgress, take_next_review_task for "
            "ReadyForReview→UnderReview, and task_reject_review for UnderReview→Todo."
        ),
        inputSchema=_schema(
            {
                "task_id": {"type": "number"},
                "title": {"type": "string"},
                "description": {"type": "string"},
                "status": {"type": "string", "enum": TASK_STATUSES},
                "priority": {"type": "string", "enum": TASK_PRIORITIES},
                **WORKER_PROPERTIES,
            },
            ["task_id"],
        ),
    ),
    # Documents
    Tool(
        name="search_documents",
        description="Search documents",
        inputSchema=_schema(
            {
                "query": {"type": "string"},
                "project_id": {"type": "number"},
                "limit": {"type": "number", "default": 20},
            },
            ["query"],
        ),
    ),
    Tool(name="get_document", description="Get document by ID", inputSchema=_by_id("document_id")),
    Tool(
        name="create_document",
        description="Create document",
        inputSchema=_schema(
            {
                "title": {"type": "string"},
                "content": {"type": "string"},
                "type": {"type": "string", "enum": DOCUMENT_TYPES},
                "project_id": {"type": "number"},
                **WORKER_PROPERTIES,
            },
            ["title", "type", "project_id"],
        ),
    ),
    Tool(
        name="update_document",
        description="Update document",
        inputSchema=_schema(
            {
                "document_id": {"type": "number"},
                "title": {"type": "string"},
                "content": {"type": "string"},
                "type": {"type": "string", "enum": DOCUMENT_TYPES},
                **WORKER_PROPERTIES,
            },
            ["document_id", "title", "content", "type"],
        ),
    ),
    # Comments
    Tool(
        name="list_task_comments",
        description="List task comments",
        inputSchema=_schema(
            {
                "task_id": {"type": "number"},
                "limit": {"type": "number", "default": 20},
                "page": {"type": "number", "default": 1},
            },
            ["task_id"],
        ),
    ),
    Tool(
        name="upsert_comment",
        description=(
            "Create a new comment or update an existing one. If comment_id is provided, updates "
            "the existing comment. Otherwise creates a new comment on the specified task."
        ),
        inputSchema=_schema(
            {
                "comment_id": {
                    "type": "number",
                    "description": "Optional - provide to update an existing comment",
                },
                "task_id": {
                    "type": "number",
                    "description": "Required when creating a new comment (not needed for updates)",
                },
                "content": {"type": "string"},
                "parent_comment_id": {
                    "type": "number",
                    "description": "Optional - for threaded comments (only for new comments)",
                },
                **WORKER_PROPERTIES,
            },
            ["content"],
        ),
    ),
    # Activity
    Tool(name="get_recent_activity", description="Get recent activity", inputSchema=_schema({})),
    Tool(
        name="get_task_status_analytics",
        description=(
            "Get task status analytics including counts per status and timing data for "
            "InProgress and Review tasks"
        ),
        inputSchema=_schema({"project_id": {"type": "number"}}),
    ),
    _take_next(
        "take_next_task",
        "Get the next task to work on: Automatically selects the highest priority (lowest "
        "order number) Todo task in the project and marks it as InProgress. This is the primary "
        "way to pick which task to work on next. Returns the task with all its comments. The "
        "system will NOT let you pick new tickets if there are tasks InProgress OR UnderReview "
        "(use force=true to override)."
    ),
    _take_next(
        "take_next_review_task",
        "Get the next task to review: Automatically selects the highest priority (lowest order "
        "number) task that's ReadyForReview and marks it as UnderReview for you to review. Use "
        "this when you want to review tasks rather than work on new ones. Returns the task with "
        "all its comments. Only one task can be UnderReview per project (use force=true to "
        "override)."
    ),
    # Task ordering
    Tool(
        name="move_task_to_top_or_bottom",
        description="Move a task to the top or bottom of the order within its project",
        inputSchema=_schema(
            {
                "task_id": {"type": "number", "description": "The ID of the task to move"},
                "position": {
                    "type": "string",
                    "enum": ["top", "bottom"],
                    "description": (
                        "Where to move the task - 'top' for highest priority or 'bottom' for "
                        "lowest priority"
                    ),
                },
            },
            ["task_id", "position"],
        ),
    ),
    Tool(
        name="task_reject_review",
        description=(
            "Reject a task that's UnderReview back to Todo with a comment explaining why. The task "
            "will be moved to the front of the Todo queue (highest priority). This creates a "
            "comment with the rejection reason for tracking purposes."
        ),
        inputSchema=_schema(
            {
                "task_id": {
                    "type": "number",
                    "description": "The ID of the UnderReview task to reject back to Todo",
                },
                "reviewer_comment": {
                    "type": "string",
                    "description": "The reason for rejecting the task - will be added as a comment",
                },
            },
            ["task_id", "reviewer_comment"],
        ),
    ),
]
