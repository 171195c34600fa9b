"""Task management tools for Vikunja MCP integration.

This module exposes the TaskTools class and delegates implementation of
individual handlers to smaller modules.
"""

import logging
from typing import Any

from fastmcp import FastMCP
from fastmcp.server.context import Context as ServerContext

from vikunja_mcp.api.client import VikunjaClient
from vikunja_mcp.tools.tasks_collaboration import (
    add_label_tool as add_label_tool_fn,
)
from vikunja_mcp.tools.tasks_collaboration import (
    assign_user_tool as assign_user_tool_fn,
)
from vikunja_mcp.tools.tasks_collaboration import (
    create_comment_tool as create_comment_tool_fn,
)
from vikunja_mcp.tools.tasks_collaboration import (
    remove_label_tool as remove_label_tool_fn,
)
from vikunja_mcp.tools.tasks_collaboration import (
    remove_user_tool as remove_user_tool_fn,
)
from vikunja_mcp.tools.tasks_crud import create_task_tool as create_task_tool_fn
from vikunja_mcp.tools.tasks_crud import delete_task_tool as delete_task_tool_fn
from vikunja_mcp.tools.tasks_crud import set_task_done_tool as set_task_done_tool_fn
from vikunja_mcp.tools.tasks_crud import update_task_tool as update_task_tool_fn
from vikunja_mcp.tools.tasks_resources import (
    get_project_tasks_resource as get_project_tasks_resource_fn,
)
from vikunja_mcp.tools.tasks_resources import get_task_resource as get_task_resource_fn
from vikunja_mcp.tools.tasks_resources import get_tasks_resource as get_tasks_resource_fn

# Configure logger to write to stderr
logger = logging.getLogger(__name__)


class TaskTools:
    """Task management tools and resources for Vikunja integration.

    Each public method binds the injected client to a handler function and
    is registered with the FastMCP instance on construction.
    """

    def __init__(self, mcp_instance: FastMCP, vikunja_client: VikunjaClient) -> None:
        """Initialize TaskTools with MCP instance and Vikunja client.

        Args:
            mcp_instance: FastMCP server instance for registering resources
            vikunja_client: Vikunja API client for data retrieval
        """
        self.mcp = mcp_instance
        self.vikunja_client = vikunja_client
        self._register_resources()
        self._register_tools()

    async def get_tasks_resource(self, ctx: ServerContext) -> dict[str, Any]:
        """All tasks visible to the configured token."""
        return await get_tasks_resource_fn(self.vikunja_client, ctx)

    async def get_project_tasks_resource(
        self, project_id: str, ctx: ServerContext
    ) -> dict[str, Any]:
        """Tasks of a single project."""
        return await get_project_tasks_resource_fn(self.vikunja_client, ctx, project_id)

    async def get_task_resource(self, task_id: str, ctx: ServerContext) -> dict[str, Any]:
        """A single task by ID."""
        return await get_task_resource_fn(self.vikunja_client, ctx, task_id)

    async def create_task_tool(  # noqa: PLR0913
        self,
        ctx: ServerContext,
        project_id: int,
        title: str,
        description: str | None = None,
        due_date: str | None = None,
        priority: int | None = None,
    ) -> dict[str, Any]:
        """Create a new task in a Vikunja project."""
        return await create_task_tool_fn(
            self.vikunja_client, ctx, project_id, title, description, due_date, priority
        )

    async def update_task_tool(  # noqa: PLR0913
        self,
        ctx: ServerContext,
        task_id: int,
        title: str | None = None,
        description: str | None = None,
        due_date: str | None = None,
        priority: int | None = None,
    ) -> dict[str, Any]:
        """Update fields of an existing Vikunja task."""
        return await update_task_tool_fn(
            self.vikunja_client, ctx, task_id, title, description, due_date, priority
        )

    async def delete_task_tool(self, ctx: ServerContext, task_id: int) -> dict[str, Any]:
        """Delete a Vikunja task."""
        return await delete_task_tool_fn(self.vikunja_client, ctx, task_id)

    async def set_task_done_tool(
        self, ctx: ServerContext, task_id: int, done: bool = True
    ) -> dict[str, Any]:
        """Mark a Vikunja task as done or not done."""
        return await set_task_done_tool_fn(self.vikunja_client, ctx, task_id, done)

    async def assign_user_tool(
        self, ctx: ServerContext, task_id: int, user_id: int
    ) -> dict[str, Any]:
        """Assign a user to a Vikunja task."""
        return await assign_user_tool_fn(self.vikunja_client, ctx, task_id, user_id)

    async def remove_user_tool(
        self, ctx: ServerContext, task_id: int, user_id: int
    ) -> dict[str, Any]:
        """Remove a user from the assignees of a Vikunja task."""
        return await remove_user_tool_fn(self.vikunja_client, ctx, task_id, user_id)

    async def add_label_tool(
        self, ctx: ServerContext, task_id: int, label_id: int
    ) -> dict[str, Any]:
        """Attach an existing label to a Vikunja task."""
        return await add_label_tool_fn(self.vikunja_client, ctx, task_id, label_id)

    async def remove_label_tool(
        self, ctx: ServerContext, task_id: int, label_id: int
    ) -> dict[str, Any]:
        """Detach a label from a Vikunja task."""
        return await remove_label_tool_fn(self.vikunja_client, ctx, task_id, label_id)

    async def create_comment_tool(
        self, ctx: ServerContext, task_id: int, comment: str
    ) -> dict[str, Any]:
        """Add a comment to a Vikunja task."""
        return await create_comment_tool_fn(self.vikunja_client, ctx, task_id, comment)

    def _register_resources(self) -> None:
        """Register task resources with the FastMCP instance."""
        self.mcp.resource("vikunja://tasks")(self.get_tasks_resource)
        self.mcp.resource("vikunja://tasks/{task_id}")(self.get_task_resource)
        self.mcp.resource("vikunja://projects/{project_id}/tasks")(
            self.get_project_tasks_resource
        )

    def _register_tools(self) -> None:
        """Register task tools with the FastMCP instance."""
        self.mcp.tool(self.create_task_tool, name="create_task")
        self.mcp.tool(self.update_task_tool, name="update_task")
        self.mcp.tool(self.delete_task_tool, name="delete_task")
        self.mcp.tool(self.set_task_done_tool, name="set_task_done")
        self.mcp.tool(self.assign_user_tool, name="assign_user_to_task")
        self.mcp.tool(self.remove_user_tool, name="remove_user_from_task")
        self.mcp.tool(self.add_label_tool, name="add_label_to_task")
        self.mcp.tool(self.remove_label_tool, name="remove_label_from_task")
        self.mcp.tool(self.create_comment_tool, name="create_task_comment")
        logger.debug("Registered Vikunja task tools and resources")
