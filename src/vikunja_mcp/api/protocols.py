"""Protocol definitions for Vikunja API client mixins.

This module provides typing protocols that enable mixins to reference
base client methods without circular imports, supporting strict pyright
type checking of the composed client.
"""

from typing import Any, Protocol

import httpx


class BaseClientProtocol(Protocol):
    """Protocol defining the interface that mixins can depend on."""

    @property
    def token(self) -> str | None:
        """API token fixed at construction."""
        ...

    async def make_request(  # noqa: PLR0913
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        params: dict[str, Any] | None = None,
        auth_headers: dict[str, str] | None = None,
    ) -> Any:
        """Make an authenticated JSON request to the Vikunja API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: API endpoint (without base URL)
            data: JSON data for request body
            params: Query parameters
            auth_headers: Replacement for the standard bearer header

        Returns:
            Any: Parsed JSON response
        """
        ...

    async def download(self, endpoint: str) -> bytes:
        """Fetch a binary resource with default authentication."""
        ...

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the underlying HTTP client."""
        ...

    def _build_url(self, endpoint: str) -> str:
        """Join the base URL and an endpoint path."""
        ...

    def _get_bearer_header(self) -> dict[str, str]:
        """Standard bearer header, or nothing when no token is configured."""
        ...
