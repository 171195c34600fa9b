"""Composed Vikunja API client with modular functionality.

This module provides the VikunjaClient class that combines the base HTTP
infrastructure with feature-specific mixins for a complete API client.
"""

from types import TracebackType

from vikunja_mcp.api.client_assignees import AssigneesClientMixin
from vikunja_mcp.api.client_attachments import AttachmentsClientMixin
from vikunja_mcp.api.client_base import BaseClient
from vikunja_mcp.api.client_comments import CommentsClientMixin
from vikunja_mcp.api.client_labels import LabelsClientMixin
from vikunja_mcp.api.client_relations import RelationsClientMixin
from vikunja_mcp.api.client_tasks import TasksClientMixin


class VikunjaClient(
    BaseClient,
    TasksClientMixin,
    AssigneesClientMixin,
    CommentsClientMixin,
    LabelsClientMixin,
    RelationsClientMixin,
    AttachmentsClientMixin,
):
    """Complete Vikunja task API client.

    Composes the base HTTP client with all task-related mixins. The MCP server
    shares one instance between tool calls and closes its connection pool
    once, when the server shuts down. Standalone callers can use ``async with``
    or ``aclose()`` instead.
    """

    def __str__(self) -> str:
        """Return string representation without exposing API token."""
        return f"VikunjaClient(base_url={self._base_url}, token=***redacted***)"

    def __repr__(self) -> str:
        """Return repr without exposing API token."""
        return f"VikunjaClient(base_url='{self._base_url}', token='***redacted***')"

    async def __aenter__(self) -> "VikunjaClient":
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await super().__aexit__(exc_type, exc_val, exc_tb)


__all__ = ["VikunjaClient"]
