"""Assignee, label and comment tool handlers for Vikunja MCP integration.

Assignee and label changes go through the client's authentication header
fallback; an exhausted fallback surfaces as an
``assignee_authentication_error`` or ``label_authentication_error`` result.
"""

import logging
from typing import Any

from fastmcp import Context

from vikunja_mcp.api.client import VikunjaClient
from vikunja_mcp.api.exceptions import VikunjaAPIError
from vikunja_mcp.api.models import TaskComment, TaskLabel
from vikunja_mcp.tools.tasks_common import (
    api_error_result,
    failure,
    serialize_model,
    unexpected_error_result,
    validate_ids,
)

logger = logging.getLogger(__name__)


async def assign_user_tool(
    vikunja_client: VikunjaClient, ctx: Context, task_id: int, user_id: int
) -> dict[str, Any]:
    """Assign a user to a task."""
    invalid = await validate_ids(ctx, task_id=task_id, user_id=user_id)
    if invalid is not None:
        return invalid

    await ctx.info(f"Assigning user {user_id} to task {task_id}")
    try:
        assignment = await vikunja_client.assign_user_to_task(task_id, user_id)
    except VikunjaAPIError as e:
        return await api_error_result(ctx, e, "assignee addition")
    except Exception as e:
        return await unexpected_error_result(ctx, "assignee addition", e)

    return {
        "success": True,
        "task_id": task_id,
        "assignment": serialize_model(assignment),
        "message": "User assigned successfully",
    }


async def remove_user_tool(
    vikunja_client: VikunjaClient, ctx: Context, task_id: int, user_id: int
) -> dict[str, Any]:
    """Remove a user from the assignees of a task."""
    invalid = await validate_ids(ctx, task_id=task_id, user_id=user_id)
    if invalid is not None:
        return invalid

    await ctx.info(f"Removing user {user_id} from task {task_id}")
    try:
        await vikunja_client.remove_user_from_task(task_id, user_id)
    except VikunjaAPIError as e:
        return await api_error_result(ctx, e, "assignee removal")
    except Exception as e:
        return await unexpected_error_result(ctx, "assignee removal", e)

    return {
        "success": True,
        "task_id": task_id,
        "message": "User removed successfully",
    }


async def add_label_tool(
    vikunja_client: VikunjaClient, ctx: Context, task_id: int, label_id: int
) -> dict[str, Any]:
    """Attach an existing label to a task."""
    invalid = await validate_ids(ctx, task_id=task_id, label_id=label_id)
    if invalid is not None:
        return invalid

    await ctx.info(f"Adding label {label_id} to task {task_id}")
    try:
        task_label = await vikunja_client.add_label_to_task(task_id, TaskLabel(label_id=label_id))
    except VikunjaAPIError as e:
        return await api_error_result(ctx, e, "label addition")
    except Exception as e:
        return await unexpected_error_result(ctx, "label addition", e)

    return {
        "success": True,
        "task_id": task_id,
        "label": serialize_model(task_label),
        "message": "Label added successfully",
    }


async def remove_label_tool(
    vikunja_client: VikunjaClient, ctx: Context, task_id: int, label_id: int
) -> dict[str, Any]:
    """Detach a label from a task."""
    invalid = await validate_ids(ctx, task_id=task_id, label_id=label_id)
    if invalid is not None:
        return invalid

    await ctx.info(f"Removing label {label_id} from task {task_id}")
    try:
        await vikunja_client.remove_label_from_task(task_id, label_id)
    except VikunjaAPIError as e:
        return await api_error_result(ctx, e, "label removal")
    except Exception as e:
        return await unexpected_error_result(ctx, "label removal", e)

    return {
        "success": True,
        "task_id": task_id,
        "message": "Label removed successfully",
    }


async def create_comment_tool(
    vikunja_client: VikunjaClient, ctx: Context, task_id: int, comment: str
) -> dict[str, Any]:
    """Add a comment to a task."""
    invalid = await validate_ids(ctx, task_id=task_id)
    if invalid is not None:
        return invalid

    if not comment or not comment.strip():
        error_msg = "Comment cannot be empty"
        await ctx.error(error_msg)
        logger.warning("Empty comment provided for task %s", task_id)
        return failure("validation_error", error_msg)

    try:
        created = await vikunja_client.create_task_comment(task_id, TaskComment(comment=comment))
    except VikunjaAPIError as e:
        return await api_error_result(ctx, e, "comment creation")
    except Exception as e:
        return await unexpected_error_result(ctx, "comment creation", e)

    return {
        "success": True,
        "task_id": task_id,
        "comment": serialize_model(created),
        "message": "Comment created successfully",
    }
