"""Task create, update, delete and done-state tool handlers."""

import logging
from typing import Any

from fastmcp import Context
from pydantic import ValidationError

from vikunja_mcp.api.client import VikunjaClient
from vikunja_mcp.api.exceptions import VikunjaAPIError
from vikunja_mcp.api.models import Task
from vikunja_mcp.tools.tasks_common import (
    api_error_result,
    failure,
    serialize_model,
    unexpected_error_result,
    validate_ids,
)

logger = logging.getLogger(__name__)


async def create_task_tool(  # noqa: PLR0913
    vikunja_client: VikunjaClient,
    ctx: Context,
    project_id: int,
    title: str,
    description: str | None = None,
    due_date: str | None = None,
    priority: int | None = None,
) -> dict[str, Any]:
    """Create a new task in a Vikunja project.

    Args:
        vikunja_client: Injected Vikunja API client
        ctx: MCP context for logging and communication
        project_id: Project to create the task in
        title: Task title (required)
        description: Task description (optional)
        due_date: Due date as an ISO 8601 timestamp (optional)
        priority: Priority from 0 (unset) to 5 (do now) (optional)

    Returns:
        dict[str, Any]: Result with the created task or an error description
    """
    invalid = await validate_ids(ctx, project_id=project_id)
    if invalid is not None:
        return invalid

    if not title or not title.strip():
        error_msg = "Task title cannot be empty"
        await ctx.error(error_msg)
        return failure("validation_error", error_msg)

    try:
        task = Task(title=title, description=description, due_date=due_date, priority=priority)
    except ValidationError as e:
        error_msg = f"Task validation failed: {e}"
        await ctx.error(error_msg)
        logger.warning("Task validation failed for new task in project %s", project_id)
        return failure("validation_error", error_msg)

    await ctx.info(f"Creating task in project {project_id}")
    try:
        created = await vikunja_client.create_task(project_id, task)
    except VikunjaAPIError as e:
        return await api_error_result(ctx, e, "task creation")
    except Exception as e:
        return await unexpected_error_result(ctx, "task creation", e)

    await ctx.info(f"Successfully created task {created.id}")
    return {
        "success": True,
        "task_id": created.id,
        "task": serialize_model(created),
        "message": "Task created successfully",
    }


async def update_task_tool(  # noqa: PLR0913
    vikunja_client: VikunjaClient,
    ctx: Context,
    task_id: int,
    title: str | None = None,
    description: str | None = None,
    due_date: str | None = None,
    priority: int | None = None,
) -> dict[str, Any]:
    """Update fields of an existing task.

    Vikunja replaces the whole task on update, so the current task is read
    first and only the given fields are changed before it is sent back.

    Args:
        vikunja_client: Injected Vikunja API client
        ctx: MCP context for logging and communication
        task_id: Task to update (required)
        title: New title (optional)
        description: New description (optional)
        due_date: New due date as an ISO 8601 timestamp (optional)
        priority: New priority (optional)

    Returns:
        dict[str, Any]: Result with the updated task or an error description
    """
    invalid = await validate_ids(ctx, task_id=task_id)
    if invalid is not None:
        return invalid

    changes = {
        key: value
        for key, value in {
            "title": title,
            "description": description,
            "due_date": due_date,
            "priority": priority,
        }.items()
        if value is not None
    }
    if not changes:
        error_msg = "At least one field must be provided for update"
        await ctx.error(error_msg)
        logger.warning("No fields provided for task update: %s", task_id)
        return failure("validation_error", error_msg)

    await ctx.info(f"Updating task {task_id}")
    try:
        current = await vikunja_client.get_task(task_id)
        updated_task = Task.model_validate({**current.model_dump(), **changes})
        updated = await vikunja_client.update_task(task_id, updated_task)
    except ValidationError as e:
        error_msg = f"Task validation failed: {e}"
        await ctx.error(error_msg)
        return failure("validation_error", error_msg)
    except VikunjaAPIError as e:
        return await api_error_result(ctx, e, "task update")
    except Exception as e:
        return await unexpected_error_result(ctx, "task update", e)

    await ctx.info(f"Successfully updated task {task_id}")
    return {
        "success": True,
        "task_id": task_id,
        "task": serialize_model(updated),
        "message": "Task updated successfully",
    }


async def delete_task_tool(
    vikunja_client: VikunjaClient, ctx: Context, task_id: int
) -> dict[str, Any]:
    """Delete a task permanently.

    Returns:
        dict[str, Any]: Confirmation or an error description
    """
    invalid = await validate_ids(ctx, task_id=task_id)
    if invalid is not None:
        return invalid

    await ctx.info(f"Deleting task {task_id}")
    try:
        await vikunja_client.delete_task(task_id)
    except VikunjaAPIError as e:
        return await api_error_result(ctx, e, "task deletion")
    except Exception as e:
        return await unexpected_error_result(ctx, "task deletion", e)

    await ctx.info(f"Successfully deleted task {task_id}")
    return {
        "success": True,
        "task_id": task_id,
        "message": "Task deleted successfully",
    }


async def set_task_done_tool(
    vikunja_client: VikunjaClient, ctx: Context, task_id: int, done: bool = True
) -> dict[str, Any]:
    """Mark a task as done, or as not done when ``done`` is False."""
    invalid = await validate_ids(ctx, task_id=task_id)
    if invalid is not None:
        return invalid

    state = "done" if done else "undone"
    await ctx.info(f"Marking task {task_id} as {state}")
    try:
        if done:
            task = await vikunja_client.mark_task_done(task_id)
        else:
            task = await vikunja_client.mark_task_undone(task_id)
    except VikunjaAPIError as e:
        return await api_error_result(ctx, e, f"marking task {state}")
    except Exception as e:
        return await unexpected_error_result(ctx, f"marking task {state}", e)

    return {
        "success": True,
        "task_id": task_id,
        "task": serialize_model(task),
        "message": f"Task marked as {state}",
    }
