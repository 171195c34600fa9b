"""Comments mixin for Vikunja API client."""

import logging
from typing import TYPE_CHECKING

from vikunja_mcp.api.models import Message, TaskComment, dump_payload, parse_response

if TYPE_CHECKING:
    from vikunja_mcp.api.protocols import BaseClientProtocol

logger = logging.getLogger(__name__)


class CommentsClientMixin:
    """Mixin providing task comment CRUD for the Vikunja API client."""

    async def get_task_comments(self: "BaseClientProtocol", task_id: int) -> list[TaskComment]:
        """List all comments on a task."""
        endpoint = f"tasks/{task_id}/comments"
        response_data = await self.make_request("GET", endpoint)
        return parse_response(list[TaskComment], response_data, endpoint)

    async def create_task_comment(
        self: "BaseClientProtocol", task_id: int, comment: TaskComment
    ) -> TaskComment:
        """Create a comment on a task.

        Args:
            task_id: Task ID
            comment: Comment data; only ``comment`` is required

        Returns:
            TaskComment: Created comment with author and timestamps
        """
        endpoint = f"tasks/{task_id}/comments"
        response_data = await self.make_request("PUT", endpoint, data=dump_payload(comment))
        created: TaskComment = parse_response(TaskComment, response_data, endpoint)
        logger.debug("Created comment %s on task %s", created.id, task_id)
        return created

    async def get_task_comment(
        self: "BaseClientProtocol", task_id: int, comment_id: int
    ) -> TaskComment:
        """Retrieve a single comment of a task."""
        endpoint = f"tasks/{task_id}/comments/{comment_id}"
        response_data = await self.make_request("GET", endpoint)
        return parse_response(TaskComment, response_data, endpoint)

    async def update_task_comment(
        self: "BaseClientProtocol", task_id: int, comment_id: int, comment: TaskComment
    ) -> TaskComment:
        """Update the text of a comment."""
        endpoint = f"tasks/{task_id}/comments/{comment_id}"
        response_data = await self.make_request("POST", endpoint, data=dump_payload(comment))
        return parse_response(TaskComment, response_data, endpoint)

    async def delete_task_comment(
        self: "BaseClientProtocol", task_id: int, comment_id: int
    ) -> Message:
        """Delete a comment."""
        endpoint = f"tasks/{task_id}/comments/{comment_id}"
        response_data = await self.make_request("DELETE", endpoint)
        logger.debug("Deleted comment %s on task %s", comment_id, task_id)
        return parse_response(Message, response_data, endpoint)
