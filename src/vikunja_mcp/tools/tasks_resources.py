"""Task resource handlers for Vikunja MCP integration.

These functions implement the MCP resource endpoints for listing tasks and
retrieving single tasks. Client errors are reported through the MCP context
and re-raised unchanged.
"""

from __future__ import annotations

import logging
from typing import Any

from fastmcp import Context

from vikunja_mcp.api.client import VikunjaClient
from vikunja_mcp.api.exceptions import VikunjaAPIError
from vikunja_mcp.api.models import Task
from vikunja_mcp.tools.tasks_common import classify_error, parse_id, serialize_model

logger = logging.getLogger(__name__)


def _tasks_payload(resource_type: str, tasks: list[Task], **metadata: Any) -> dict[str, Any]:
    return {
        "resource_type": resource_type,
        "total_count": len(tasks),
        "tasks": [serialize_model(task) for task in tasks],
        "metadata": metadata,
    }


async def _report(ctx: Context, error: VikunjaAPIError, what: str) -> None:
    kind, prefix = classify_error(error)
    await ctx.error(f"Failed to retrieve {what}: {prefix}: {error}")
    logger.warning("Resource read of %s failed with %s", what, kind)


async def get_tasks_resource(vikunja_client: VikunjaClient, ctx: Context) -> dict[str, Any]:
    """MCP resource providing access to all tasks visible to the token.

    Args:
        vikunja_client: Injected Vikunja API client
        ctx: MCP context providing logging and execution context

    Returns:
        dict[str, Any]: JSON structure containing task data with metadata

    Raises:
        VikunjaAPIError: If the Vikunja API request fails
    """
    await ctx.info("Retrieving tasks from Vikunja API")
    try:
        tasks = await vikunja_client.get_all_tasks()
    except VikunjaAPIError as e:
        await _report(ctx, e, "tasks")
        raise

    await ctx.info(f"Successfully retrieved {len(tasks)} tasks from Vikunja")
    return _tasks_payload("vikunja_tasks", tasks)


async def get_project_tasks_resource(
    vikunja_client: VikunjaClient, ctx: Context, project_id: str
) -> dict[str, Any]:
    """MCP resource providing access to the tasks of one project.

    Raises:
        VikunjaBadRequestError: If project_id is not a positive integer
        VikunjaAPIError: If the Vikunja API request fails
    """
    parsed_project_id = parse_id("project_id", project_id)
    await ctx.info(f"Retrieving tasks of project {parsed_project_id}")
    try:
        tasks = await vikunja_client.get_project_tasks(parsed_project_id)
    except VikunjaAPIError as e:
        await _report(ctx, e, f"tasks of project {parsed_project_id}")
        raise

    return _tasks_payload("vikunja_project_tasks", tasks, project_id=parsed_project_id)


async def get_task_resource(
    vikunja_client: VikunjaClient, ctx: Context, task_id: str
) -> dict[str, Any]:
    """MCP resource providing access to a single task by ID.

    Args:
        vikunja_client: Injected Vikunja API client
        ctx: MCP context providing logging and execution context
        task_id: Task ID taken from the resource URI

    Returns:
        dict[str, Any]: JSON structure containing single task data

    Raises:
        VikunjaBadRequestError: If task_id is not a positive integer
        VikunjaNotFoundError: If the task does not exist
        VikunjaAPIError: If the Vikunja API request fails
    """
    try:
        parsed_task_id = parse_id("task_id", task_id)
    except VikunjaAPIError as e:
        await ctx.error(str(e))
        raise

    await ctx.info(f"Retrieving task {parsed_task_id} from Vikunja API")
    try:
        task = await vikunja_client.get_task(parsed_task_id)
    except VikunjaAPIError as e:
        await _report(ctx, e, f"task {parsed_task_id}")
        raise

    return {
        "resource_type": "vikunja_task",
        "task": serialize_model(task),
    }
