"""Task relations mixin for Vikunja API client."""

from typing import TYPE_CHECKING

from vikunja_mcp.api.models import (
    Message,
    RelationKind,
    TaskRelation,
    dump_payload,
    parse_response,
)

if TYPE_CHECKING:
    from vikunja_mcp.api.protocols import BaseClientProtocol


class RelationsClientMixin:
    """Mixin providing task relation operations for the Vikunja API client."""

    async def create_task_relation(
        self: "BaseClientProtocol", task_id: int, relation: TaskRelation
    ) -> TaskRelation:
        """Relate a task to another task.

        Args:
            task_id: Task the relation starts from
            relation: Relation data with ``other_task_id`` and ``relation_kind``

        Returns:
            TaskRelation: The created relation
        """
        endpoint = f"tasks/{task_id}/relations"
        response_data = await self.make_request("PUT", endpoint, data=dump_payload(relation))
        return parse_response(TaskRelation, response_data, endpoint)

    async def delete_task_relation(
        self: "BaseClientProtocol",
        task_id: int,
        relation_kind: RelationKind | str,
        other_task_id: int,
    ) -> Message:
        """Remove a relation between two tasks.

        Args:
            task_id: Task the relation starts from
            relation_kind: Kind of relation to remove
            other_task_id: The related task

        Returns:
            Message: Confirmation message from the server
        """
        kind = RelationKind(relation_kind).value
        endpoint = f"tasks/{task_id}/relations/{kind}/{other_task_id}"
        response_data = await self.make_request("DELETE", endpoint)
        return parse_response(Message, response_data, endpoint)
