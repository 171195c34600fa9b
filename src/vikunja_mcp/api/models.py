"""Data models for Vikunja API requests and responses.

The client is a pure request/response relay, so these models are deliberately
permissive: every field is optional and unknown fields are kept
(``extra="allow"``) so a value read from the server can be sent back without
losing data. Outbound payloads are serialized with ``exclude_none=True``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from pydantic.config import ConfigDict

from vikunja_mcp.api.exceptions import VikunjaAPIError

logger = logging.getLogger(__name__)


class VikunjaModel(BaseModel):
    """Base model for all Vikunja DTOs."""

    model_config = ConfigDict(extra="allow", use_enum_values=True)


def dump_payload(model: BaseModel) -> dict[str, Any]:
    """Serialize a request model into a JSON-compatible dictionary.

    ``model_dump_json`` handles datetimes and enums; parsing it back yields a
    plain dict that httpx can encode.
    """
    return json.loads(model.model_dump_json(exclude_none=True))


class RelationKind(StrEnum):
    """Kinds of relations between two tasks."""

    UNKNOWN = "unknown"
    SUBTASK = "subtask"
    PARENTTASK = "parenttask"
    RELATED = "related"
    DUPLICATEOF = "duplicateof"
    DUPLICATES = "duplicates"
    BLOCKING = "blocking"
    BLOCKED = "blocked"
    PRECEDES = "precedes"
    FOLLOWS = "follows"
    COPIEDFROM = "copiedfrom"
    COPIEDTO = "copiedto"


class Message(VikunjaModel):
    """Generic ``{"message": ...}`` response returned by deletions."""

    message: str | None = None


class User(VikunjaModel):
    """A Vikunja user as embedded in tasks, comments and assignee lists."""

    id: int | None = None
    username: str | None = None
    name: str | None = None
    email: str | None = None
    created: datetime | None = None
    updated: datetime | None = None


class Label(VikunjaModel):
    """A label that can be attached to tasks."""

    id: int | None = None
    title: str | None = None
    description: str | None = None
    hex_color: str | None = None
    created_by: User | None = None
    created: datetime | None = None
    updated: datetime | None = None


class TaskLabel(VikunjaModel):
    """Association between a task and a single label."""

    label_id: int | None = None
    created: datetime | None = None


class LabelTaskBulk(VikunjaModel):
    """Replacement set of labels for a task."""

    labels: list[Label] = Field(default_factory=list)


class TaskAssignment(VikunjaModel):
    """Association between a task and an assigned user."""

    user_id: int | None = None
    created: datetime | None = None


class BulkAssignees(VikunjaModel):
    """Set of users to assign to a task in one request."""

    assignees: list[User] = Field(default_factory=list)


class TaskComment(VikunjaModel):
    """A comment on a task."""

    id: int | None = None
    comment: str | None = None
    author: User | None = None
    created: datetime | None = None
    updated: datetime | None = None


class TaskRelation(VikunjaModel):
    """A directed relation from one task to another."""

    task_id: int | None = None
    other_task_id: int | None = None
    relation_kind: RelationKind | None = None
    created_by: User | None = None
    created: datetime | None = None


class TaskAttachment(VikunjaModel):
    """Metadata of a file attached to a task."""

    id: int | None = None
    task_id: int | None = None
    file: dict[str, Any] | None = None
    created_by: User | None = None
    created: datetime | None = None


class TaskFields(VikunjaModel):
    """Fields shared by single-project tasks and cross-project bulk tasks."""

    id: int | None = None
    title: str | None = None
    description: str | None = None
    done: bool | None = None
    done_at: datetime | None = None
    due_date: datetime | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    priority: int | None = None
    percent_done: float | None = None
    hex_color: str | None = None
    repeat_after: int | None = None
    repeat_mode: int | None = None
    bucket_id: int | None = None
    position: float | None = None
    identifier: str | None = None
    index: int | None = None
    assignees: list[User] | None = None
    labels: list[Label] | None = None
    attachments: list[TaskAttachment] | None = None
    related_tasks: dict[str, list[dict[str, Any]]] | None = None
    created: datetime | None = None
    updated: datetime | None = None
    created_by: User | None = None


class Task(TaskFields):
    """A task belonging to a single project."""

    project_id: int | None = None


class BulkTask(TaskFields):
    """A task payload applied to several projects at once."""

    project_ids: list[int] = Field(default_factory=list)


class TaskBulkOperation(VikunjaModel):
    """Set one field to the same value on many tasks."""

    task_ids: list[int]
    field: str
    value: Any = None


class PaginationParams(VikunjaModel):
    """Pagination and free-text search query parameters."""

    model_config = ConfigDict(extra="forbid")

    page: int | None = Field(default=None, ge=1)
    per_page: int | None = Field(default=None, ge=1)
    s: str | None = Field(default=None, description="Free-text search")


class TaskQueryParams(PaginationParams):
    """Query parameters accepted by the task list endpoints."""

    sort_by: str | None = None
    order_by: Literal["asc", "desc"] | None = None
    filter: str | None = Field(default=None, description="Vikunja filter expression")
    filter_include_nulls: bool | None = None


def query_params(params: BaseModel | None) -> dict[str, Any] | None:
    """Convert a query-parameter model into request params, keeping field order."""
    if params is None:
        return None
    return params.model_dump(exclude_none=True) or None


def parse_response(result_type: Any, data: Any, endpoint: str) -> Any:
    """Validate a JSON response against ``result_type``.

    Args:
        result_type: Model class or generic such as ``list[Task]``
        data: Parsed JSON returned by the API
        endpoint: Endpoint the data came from, for error context

    Returns:
        The validated model instance(s)

    Raises:
        VikunjaAPIError: When the response does not match the expected shape
    """
    try:
        return TypeAdapter(result_type).validate_python(data)
    except ValidationError as error:
        logger.exception("Failed to parse response data from %s", endpoint)
        kind = getattr(result_type, "__name__", str(result_type))
        raise VikunjaAPIError.create_parse_error(endpoint, expected=kind) from error
