"""Assignees mixin for Vikunja API client.

Adding and removing assignees goes through the authentication header
fallback (see ``auth_fallback``); a cascade that is rejected on every
variant raises ``AssigneeAuthenticationError``.
"""

import logging
from typing import TYPE_CHECKING

from vikunja_mcp.api.auth_fallback import call_with_auth_fallback
from vikunja_mcp.api.exceptions import AssigneeAuthenticationError
from vikunja_mcp.api.models import (
    BulkAssignees,
    Message,
    PaginationParams,
    TaskAssignment,
    User,
    dump_payload,
    parse_response,
    query_params,
)

if TYPE_CHECKING:
    from vikunja_mcp.api.protocols import BaseClientProtocol

logger = logging.getLogger(__name__)


class AssigneesClientMixin:
    """Mixin providing task assignee operations for the Vikunja API client."""

    async def get_task_assignees(
        self: "BaseClientProtocol", task_id: int, params: PaginationParams | None = None
    ) -> list[User]:
        """List the users assigned to a task.

        Args:
            task_id: Task ID
            params: Optional pagination and search parameters

        Returns:
            list[User]: Assigned users
        """
        endpoint = f"tasks/{task_id}/assignees"
        response_data = await self.make_request("GET", endpoint, params=query_params(params))
        return parse_response(list[User], response_data, endpoint)

    async def assign_user_to_task(
        self: "BaseClientProtocol", task_id: int, user_id: int
    ) -> TaskAssignment:
        """Add a user as an assignee of a task.

        Args:
            task_id: Task ID
            user_id: User ID

        Returns:
            TaskAssignment: The created assignment

        Raises:
            AssigneeAuthenticationError: Every auth header variant was rejected
            VikunjaAPIError: Any non-authentication failure, on first occurrence
        """
        endpoint = f"tasks/{task_id}/assignees"
        payload = {"user_id": user_id}

        async def _assign(auth_headers: dict[str, str] | None) -> object:
            return await self.make_request("PUT", endpoint, data=payload, auth_headers=auth_headers)

        response_data = await call_with_auth_fallback(
            _assign, self.token, AssigneeAuthenticationError.from_error
        )
        logger.debug("Assigned user %s to task %s", user_id, task_id)
        return parse_response(TaskAssignment, response_data, endpoint)

    async def bulk_assign_users_to_task(
        self: "BaseClientProtocol", task_id: int, assignees: BulkAssignees
    ) -> TaskAssignment:
        """Add several users as assignees of a task in one request.

        Args:
            task_id: Task ID
            assignees: Users to assign

        Returns:
            TaskAssignment: Assignment result

        Raises:
            AssigneeAuthenticationError: Every auth header variant was rejected
            VikunjaAPIError: Any non-authentication failure, on first occurrence
        """
        endpoint = f"tasks/{task_id}/assignees/bulk"
        payload = dump_payload(assignees)

        async def _bulk_assign(auth_headers: dict[str, str] | None) -> object:
            return await self.make_request(
                "POST", endpoint, data=payload, auth_headers=auth_headers
            )

        response_data = await call_with_auth_fallback(
            _bulk_assign, self.token, AssigneeAuthenticationError.from_error
        )
        return parse_response(TaskAssignment, response_data, endpoint)

    async def remove_user_from_task(
        self: "BaseClientProtocol", task_id: int, user_id: int
    ) -> Message:
        """Remove a user from the assignees of a task.

        Raises:
            AssigneeAuthenticationError: Every auth header variant was rejected
            VikunjaAPIError: Any non-authentication failure, on first occurrence
        """
        endpoint = f"tasks/{task_id}/assignees/{user_id}"

        async def _unassign(auth_headers: dict[str, str] | None) -> object:
            return await self.make_request("DELETE", endpoint, auth_headers=auth_headers)

        response_data = await call_with_auth_fallback(
            _unassign, self.token, AssigneeAuthenticationError.from_error
        )
        logger.debug("Removed user %s from task %s", user_id, task_id)
        return parse_response(Message, response_data, endpoint)
