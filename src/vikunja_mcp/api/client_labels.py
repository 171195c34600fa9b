"""Labels mixin for Vikunja API client.

Label mutations go through the authentication header fallback (see
``auth_fallback``); a cascade that is rejected on every variant raises
``LabelAuthenticationError``.
"""

import logging
from typing import TYPE_CHECKING

from vikunja_mcp.api.auth_fallback import call_with_auth_fallback
from vikunja_mcp.api.exceptions import LabelAuthenticationError
from vikunja_mcp.api.models import (
    Label,
    LabelTaskBulk,
    Message,
    PaginationParams,
    TaskLabel,
    dump_payload,
    parse_response,
    query_params,
)

if TYPE_CHECKING:
    from vikunja_mcp.api.protocols import BaseClientProtocol

logger = logging.getLogger(__name__)


class LabelsClientMixin:
    """Mixin providing task label operations for the Vikunja API client."""

    async def get_task_labels(
        self: "BaseClientProtocol", task_id: int, params: PaginationParams | None = None
    ) -> list[Label]:
        """List the labels attached to a task.

        Args:
            task_id: Task ID
            params: Optional pagination and search parameters

        Returns:
            list[Label]: Labels on the task
        """
        endpoint = f"tasks/{task_id}/labels"
        response_data = await self.make_request("GET", endpoint, params=query_params(params))
        return parse_response(list[Label], response_data, endpoint)

    async def add_label_to_task(
        self: "BaseClientProtocol", task_id: int, label_task: TaskLabel
    ) -> TaskLabel:
        """Attach a label to a task.

        Args:
            task_id: Task ID
            label_task: Label association, identified by ``label_id``

        Returns:
            TaskLabel: The created association

        Raises:
            LabelAuthenticationError: Every auth header variant was rejected
            VikunjaAPIError: Any non-authentication failure, on first occurrence
        """
        endpoint = f"tasks/{task_id}/labels"
        payload = dump_payload(label_task)

        async def _add(auth_headers: dict[str, str] | None) -> object:
            return await self.make_request("PUT", endpoint, data=payload, auth_headers=auth_headers)

        response_data = await call_with_auth_fallback(
            _add, self.token, LabelAuthenticationError.from_error
        )
        logger.debug("Added label %s to task %s", label_task.label_id, task_id)
        return parse_response(TaskLabel, response_data, endpoint)

    async def remove_label_from_task(
        self: "BaseClientProtocol", task_id: int, label_id: int
    ) -> Message:
        """Detach a label from a task.

        Raises:
            LabelAuthenticationError: Every auth header variant was rejected
            VikunjaAPIError: Any non-authentication failure, on first occurrence
        """
        endpoint = f"tasks/{task_id}/labels/{label_id}"

        async def _remove(auth_headers: dict[str, str] | None) -> object:
            return await self.make_request("DELETE", endpoint, auth_headers=auth_headers)

        response_data = await call_with_auth_fallback(
            _remove, self.token, LabelAuthenticationError.from_error
        )
        logger.debug("Removed label %s from task %s", label_id, task_id)
        return parse_response(Message, response_data, endpoint)

    async def update_task_labels(
        self: "BaseClientProtocol", task_id: int, labels: LabelTaskBulk
    ) -> LabelTaskBulk:
        """Replace all labels of a task with the given set.

        Args:
            task_id: Task ID
            labels: The complete set of labels the task should carry

        Returns:
            LabelTaskBulk: The label set stored by the server

        Raises:
            LabelAuthenticationError: Every auth header variant was rejected
            VikunjaAPIError: Any non-authentication failure, on first occurrence
        """
        endpoint = f"tasks/{task_id}/labels/bulk"
        payload = dump_payload(labels)

        async def _replace(auth_headers: dict[str, str] | None) -> object:
            return await self.make_request(
                "POST", endpoint, data=payload, auth_headers=auth_headers
            )

        response_data = await call_with_auth_fallback(
            _replace, self.token, LabelAuthenticationError.from_error
        )
        return parse_response(LabelTaskBulk, response_data, endpoint)
