"""Common helpers for task tools.

Provides shared serialization, ID validation and error-to-result mapping used
by the task resource and tool handlers.
"""

from __future__ import annotations

import logging
from typing import Any

from fastmcp import Context
from pydantic import BaseModel

from vikunja_mcp.api.exceptions import (
    AssigneeAuthenticationError,
    LabelAuthenticationError,
    VikunjaAPIError,
    VikunjaAuthenticationError,
    VikunjaBadRequestError,
    VikunjaNetworkError,
    VikunjaNotFoundError,
    VikunjaRateLimitError,
    VikunjaServerError,
    VikunjaTimeoutError,
)

logger = logging.getLogger(__name__)

# Most specific first: the first matching class decides the error kind.
_ERROR_KINDS: tuple[tuple[type[VikunjaAPIError], str, str], ...] = (
    (AssigneeAuthenticationError, "assignee_authentication_error", "Authentication failed"),
    (LabelAuthenticationError, "label_authentication_error", "Authentication failed"),
    (VikunjaAuthenticationError, "authentication_error", "Authentication failed"),
    (VikunjaNotFoundError, "not_found_error", "Not found"),
    (VikunjaBadRequestError, "validation_error", "Invalid request"),
    (VikunjaRateLimitError, "rate_limit_error", "Rate limit exceeded"),
    (VikunjaTimeoutError, "timeout_error", "Request timeout"),
    (VikunjaNetworkError, "network_error", "Network error"),
    (VikunjaServerError, "server_error", "Server error"),
)


def serialize_model(model: BaseModel) -> dict[str, Any]:
    """Convert a response model to a JSON-ready dictionary without empty fields."""
    return model.model_dump(mode="json", exclude_none=True)


def classify_error(error: VikunjaAPIError) -> tuple[str, str]:
    """Return the ``(error_kind, message_prefix)`` describing an API error."""
    for error_type, kind, prefix in _ERROR_KINDS:
        if isinstance(error, error_type):
            return kind, prefix
    return "api_error", "API error"


def failure(kind: str, message: str) -> dict[str, Any]:
    """Build the standard failed-tool result."""
    return {"success": False, "error": kind, "message": message}


async def api_error_result(ctx: Context, error: VikunjaAPIError, action: str) -> dict[str, Any]:
    """Report an API error through the MCP context and build the tool result.

    Args:
        ctx: MCP context for logging
        error: The error raised by the client
        action: Short description of the attempted action, for logs

    Returns:
        dict[str, Any]: Failed tool result with error kind and message
    """
    kind, prefix = classify_error(error)
    error_msg = f"{prefix}: {error}"
    await ctx.error(error_msg)
    logger.warning("%s failed with %s (status %s)", action, kind, error.status_code)
    return failure(kind, error_msg)


async def unexpected_error_result(ctx: Context, action: str, error: Exception) -> dict[str, Any]:
    """Report an unexpected exception and build the tool result."""
    error_msg = f"Unexpected error during {action}: {error}"
    await ctx.error(error_msg)
    logger.exception("Unexpected error during %s", action)
    return failure("unexpected_error", error_msg)


async def validate_ids(ctx: Context, **ids: int) -> dict[str, Any] | None:
    """Check that every ID is a positive integer.

    Returns:
        dict[str, Any] | None: A validation failure result, or None when all
        IDs are valid
    """
    for name, value in ids.items():
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            error = VikunjaBadRequestError.invalid_id(name, value)
            await ctx.error(str(error))
            logger.warning("Invalid %s provided: %r", name, value)
            return failure("validation_error", str(error))
    return None


def parse_id(name: str, value: str) -> int:
    """Parse an ID taken from a resource URI.

    Raises:
        VikunjaBadRequestError: If the value is not a positive integer
    """
    try:
        parsed = int(value)
    except (TypeError, ValueError) as error:
        raise VikunjaBadRequestError.invalid_id(name, value) from error
    if parsed < 1:
        raise VikunjaBadRequestError.invalid_id(name, value)
    return parsed
