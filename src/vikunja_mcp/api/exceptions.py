"""Custom exceptions for Vikunja API operations.

This module defines the exception hierarchy for Vikunja API errors. Every
error carries the request context (endpoint, method, status code and the raw
response body) so callers can log or display it without re-issuing the call.
Bearer tokens must never be part of an error message.
"""

from typing import Any

NETWORK_ERROR_STATUS = 0


def api_path(endpoint: str) -> str:
    """Return ``endpoint`` as an API path with exactly one leading slash."""
    return "/" + endpoint.lstrip("/") if endpoint else endpoint


class VikunjaAPIError(Exception):
    """Base exception for all Vikunja API errors (any non-2xx status)."""

    def __init__(  # noqa: PLR0913
        self,
        message: str,
        endpoint: str = "",
        method: str = "",
        status_code: int | None = None,
        response: Any = None,
    ) -> None:
        """Initialize Vikunja API error.

        Args:
            message: Error message (must not contain the API token)
            endpoint: API endpoint that was called, stored as ``/tasks/...``
            method: HTTP method used
            status_code: HTTP status code, 0 for transport failures
            response: Parsed error body returned by the server, if any
        """
        self.endpoint = api_path(endpoint)
        self.method = method
        self.status_code = status_code
        self.response = response
        super().__init__(message)

    @property
    def message(self) -> str:
        """Error message without request context."""
        return str(self)

    @classmethod
    def create_parse_error(
        cls,
        endpoint: str,
        *,
        method: str = "",
        status_code: int | None = None,
        **context: str | int,
    ) -> "VikunjaAPIError":
        """Create an error for response parsing failures with safe context.

        Args:
            endpoint: API endpoint that failed
            method: HTTP method used, when known
            status_code: Status to report; ``None`` when no request context applies
            **context: Additional safe context information

        Returns:
            VikunjaAPIError with contextual message and ``{"message": ...}`` body
        """
        context_parts = [f"endpoint={api_path(endpoint)}"]
        context_parts.extend(f"{key}={value}" for key, value in context.items())
        safe_context = ", ".join(context_parts)
        message = f"Failed to parse response ({safe_context})"
        return cls(message, endpoint, method, status_code, {"message": message})


class VikunjaNetworkError(VikunjaAPIError):
    """Raised when the request never produced an HTTP response."""

    def __init__(
        self,
        message: str = "Network error",
        endpoint: str = "",
        method: str = "",
    ) -> None:
        """Initialize network error.

        Args:
            message: Error message describing network issue
            endpoint: API endpoint that was called
            method: HTTP method used
        """
        super().__init__(
            message,
            endpoint,
            method,
            status_code=NETWORK_ERROR_STATUS,
            response={"message": message},
        )


class VikunjaTimeoutError(VikunjaNetworkError):
    """Raised when the HTTP client times out waiting for the server."""

    def __init__(
        self,
        message: str = "Request timeout",
        endpoint: str = "",
        method: str = "",
    ) -> None:
        """Initialize timeout error.

        Args:
            message: Error message about timeout
            endpoint: API endpoint that was called
            method: HTTP method used
        """
        super().__init__(message, endpoint, method)


class VikunjaBadRequestError(VikunjaAPIError):
    """Raised when request parameters are invalid (400 Bad Request)."""

    @classmethod
    def invalid_id(cls, name: str, value: object) -> "VikunjaBadRequestError":
        """Create an error for a missing or non-positive numeric ID.

        Args:
            name: Parameter name, e.g. ``task_id``
            value: The rejected value

        Returns:
            VikunjaBadRequestError with status 400
        """
        return cls(f"{name} must be a positive integer, got {value!r}", status_code=400)


class VikunjaAuthenticationError(VikunjaAPIError):
    """Raised when the server rejects the credentials (401 or 403)."""


class VikunjaNotFoundError(VikunjaAPIError):
    """Raised when a resource is not found (404 Not Found)."""


class VikunjaRateLimitError(VikunjaAPIError):
    """Raised when rate limit is exceeded (429 Too Many Requests)."""


class VikunjaServerError(VikunjaAPIError):
    """Raised when server returns 5xx errors."""


class _FallbackAuthenticationError(VikunjaAuthenticationError):
    """Authentication error raised once every header variant was rejected."""

    operation = "API"

    @classmethod
    def from_error(cls, error: VikunjaAPIError) -> "_FallbackAuthenticationError":
        """Wrap the last rejected attempt, keeping its request context.

        Args:
            error: Error raised by the final attempt

        Returns:
            Specialized authentication error embedding the final error
        """
        message = (
            f"{cls.operation} operation failed due to authentication issue. "
            "This may occur even with valid tokens. "
            f"Original error: {error}"
        )
        return cls(
            message,
            error.endpoint,
            error.method,
            error.status_code,
            error.response,
        )


class AssigneeAuthenticationError(_FallbackAuthenticationError):
    """Raised when an assignee operation fails with every auth header variant."""

    operation = "Assignee"


class LabelAuthenticationError(_FallbackAuthenticationError):
    """Raised when a label operation fails with every auth header variant."""

    operation = "Label"
