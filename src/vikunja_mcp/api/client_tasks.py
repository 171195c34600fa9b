"""Tasks mixin for Vikunja API client.

This module provides the TasksClientMixin class containing task CRUD,
done-state and bulk operations, designed to be composed with BaseClient.
"""

import logging
from typing import TYPE_CHECKING, cast

from vikunja_mcp.api.models import (
    BulkTask,
    Message,
    Task,
    TaskBulkOperation,
    TaskQueryParams,
    dump_payload,
    parse_response,
    query_params,
)

if TYPE_CHECKING:
    from vikunja_mcp.api.protocols import BaseClientProtocol

# Configure logger to write to stderr
logger = logging.getLogger(__name__)


class TasksClientMixin:
    """Mixin providing task-related operations for Vikunja API client.

    Create-style endpoints use PUT and update-style endpoints use POST, as
    fixed by the Vikunja API.
    """

    def _get_base_client(self) -> "BaseClientProtocol":
        """Get type-safe access to base client methods."""
        return cast("BaseClientProtocol", self)

    async def _list_tasks(self, endpoint: str, params: TaskQueryParams | None) -> list[Task]:
        response_data = await self._get_base_client().make_request(
            "GET", endpoint, params=query_params(params)
        )
        tasks: list[Task] = parse_response(list[Task], response_data, endpoint)
        logger.debug("Successfully retrieved %d tasks from %s", len(tasks), endpoint)
        return tasks

    async def get_all_tasks(self, params: TaskQueryParams | None = None) -> list[Task]:
        """Retrieve tasks across all projects.

        Args:
            params: Optional pagination, search, sort and filter parameters,
                passed through verbatim as query parameters

        Returns:
            list[Task]: Tasks visible to the authenticated user
        """
        return await self._list_tasks("tasks", params)

    async def get_project_tasks(
        self, project_id: int, params: TaskQueryParams | None = None
    ) -> list[Task]:
        """Retrieve the tasks of a single project.

        Args:
            project_id: Project ID
            params: Optional pagination, search, sort and filter parameters

        Returns:
            list[Task]: Tasks of the project
        """
        return await self._list_tasks(f"projects/{project_id}/tasks", params)

    async def create_task(self, project_id: int, task: Task) -> Task:
        """Create a new task in a project.

        Args:
            project_id: Project the task is created in
            task: Task data

        Returns:
            Task: Created task with its server-assigned ID

        Raises:
            VikunjaBadRequestError: Invalid task data (400)
            VikunjaAuthenticationError: Invalid token or no access (401/403)
            VikunjaNotFoundError: Project not found (404)
            VikunjaServerError: Server error occurred (5xx)
            VikunjaNetworkError: Network connectivity error
            VikunjaAPIError: Other API errors
        """
        endpoint = f"projects/{project_id}/tasks"
        response_data = await self._get_base_client().make_request(
            "PUT", endpoint, data=dump_payload(task)
        )
        created: Task = parse_response(Task, response_data, endpoint)
        logger.debug("Successfully created task: %s", created.id)
        return created

    async def get_task(self, task_id: int) -> Task:
        """Retrieve a single task by ID.

        Args:
            task_id: Task ID

        Returns:
            Task: Task details

        Raises:
            VikunjaNotFoundError: Task not found (404)
            VikunjaAuthenticationError: Invalid token or no access (401/403)
            VikunjaNetworkError: Network connectivity error
            VikunjaAPIError: Other API errors
        """
        endpoint = f"tasks/{task_id}"
        response_data = await self._get_base_client().make_request("GET", endpoint)
        return parse_response(Task, response_data, endpoint)

    async def update_task(self, task_id: int, task: Task) -> Task:
        """Update an existing task.

        Vikunja replaces the task with the submitted fields, so callers
        usually send a task previously read with ``get_task``.

        Args:
            task_id: Task ID
            task: Updated task data

        Returns:
            Task: Updated task
        """
        endpoint = f"tasks/{task_id}"
        response_data = await self._get_base_client().make_request(
            "POST", endpoint, data=dump_payload(task)
        )
        updated: Task = parse_response(Task, response_data, endpoint)
        logger.debug("Successfully updated task: %s", task_id)
        return updated

    async def delete_task(self, task_id: int) -> Message:
        """Delete a task.

        Args:
            task_id: Task ID

        Returns:
            Message: Confirmation message from the server
        """
        endpoint = f"tasks/{task_id}"
        response_data = await self._get_base_client().make_request("DELETE", endpoint)
        logger.debug("Successfully deleted task: %s", task_id)
        return parse_response(Message, response_data, endpoint)

    async def mark_task_done(self, task_id: int) -> Task:
        """Mark a task as done."""
        endpoint = f"tasks/{task_id}/done"
        response_data = await self._get_base_client().make_request("POST", endpoint)
        return parse_response(Task, response_data, endpoint)

    async def mark_task_undone(self, task_id: int) -> Task:
        """Mark a task as not done."""
        endpoint = f"tasks/{task_id}/undone"
        response_data = await self._get_base_client().make_request("POST", endpoint)
        return parse_response(Task, response_data, endpoint)

    async def bulk_update_tasks(self, operation: TaskBulkOperation) -> list[Task]:
        """Set the same field value on several tasks.

        Args:
            operation: Task IDs plus the field and value to apply

        Returns:
            list[Task]: The updated tasks
        """
        response_data = await self._get_base_client().make_request(
            "POST", "tasks/bulk", data=dump_payload(operation)
        )
        tasks: list[Task] = parse_response(list[Task], response_data, "tasks/bulk")
        logger.debug("Bulk updated %d tasks", len(tasks))
        return tasks

    async def update_tasks_across_projects(self, bulk_task: BulkTask) -> Task:
        """Update or create a task across several projects at once.

        Args:
            bulk_task: Task data with ``project_ids`` instead of ``project_id``

        Returns:
            Task: The resulting task data
        """
        response_data = await self._get_base_client().make_request(
            "POST", "tasks/bulk", data=dump_payload(bulk_task)
        )
        return parse_response(Task, response_data, "tasks/bulk")
