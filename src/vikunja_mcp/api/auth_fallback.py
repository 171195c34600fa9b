"""Authentication header fallback for assignee and label endpoints.

Vikunja (or a proxy in front of it) has been observed rejecting the standard
``Authorization: Bearer`` header on assignee and label mutations even when
the token is valid. The endpoints accept the same token presented in one of
two other ways, so those calls try the header variants in a fixed order:

1. the client's default headers (``Authorization: Bearer <token>``)
2. ``X-API-Token: <token>`` with no ``Bearer`` prefix
3. ``authorization: Bearer <token>`` with a lowercase header name

Only 401/403 responses move on to the next variant. Any other failure
is raised unchanged, and there is no delay between attempts. When every
variant is rejected the last error is wrapped by the caller-supplied factory.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from vikunja_mcp.api.client_base import AUTH_FAILURE_STATUS_CODES
from vikunja_mcp.api.exceptions import VikunjaAPIError, VikunjaAuthenticationError

T = TypeVar("T")

HeaderVariant = Callable[[str], dict[str, str]] | None
"""Builds replacement auth headers from the token; ``None`` keeps the defaults."""

RequestAction = Callable[[dict[str, str] | None], Awaitable[T]]

logger = logging.getLogger(__name__)


def api_token_header(token: str) -> dict[str, str]:
    """Present the raw token in the ``X-API-Token`` header."""
    return {"X-API-Token": token}


def lowercase_bearer_header(token: str) -> dict[str, str]:
    """Present the bearer token under a lowercase ``authorization`` header."""
    return {"authorization": f"Bearer {token}"}


AUTH_HEADER_VARIANTS: tuple[HeaderVariant, ...] = (
    None,
    api_token_header,
    lowercase_bearer_header,
)


def is_auth_failure(error: VikunjaAPIError) -> bool:
    """Return True for errors caused by a rejected credential (401/403)."""
    return (
        isinstance(error, VikunjaAuthenticationError)
        or error.status_code in AUTH_FAILURE_STATUS_CODES
    )


async def call_with_auth_fallback(
    action: "RequestAction[T]",
    token: str | None,
    error_factory: Callable[[VikunjaAPIError], VikunjaAuthenticationError],
    variants: Sequence[HeaderVariant] = AUTH_HEADER_VARIANTS,
) -> T:
    """Run ``action`` once per header variant until one is not rejected.

    Args:
        action: Performs the request with the given replacement auth headers
            (``None`` means the client's default headers).
        token: API token the variants are built from.
        error_factory: Builds the error raised when every variant fails.
        variants: Ordered header variants to try.

    Returns:
        The result of the first attempt that succeeds.

    Raises:
        VikunjaAuthenticationError: As built by ``error_factory`` when the
            last variant is also rejected with 401/403.
        VikunjaAPIError: Any non-authentication failure, unchanged.
        ValueError: If ``variants`` is empty.
    """
    last_error: VikunjaAPIError | None = None
    for attempt, variant in enumerate(variants, start=1):
        auth_headers = None if variant is None else variant(token or "")
        try:
            result = await action(auth_headers)
        except VikunjaAPIError as error:
            if not is_auth_failure(error):
                raise
            last_error = error
            if attempt < len(variants):
                logger.warning(
                    "%s %s rejected with status %s; retrying with alternate auth header "
                    "(attempt %d of %d)",
                    error.method,
                    error.endpoint,
                    error.status_code,
                    attempt + 1,
                    len(variants),
                )
        else:
            if attempt > 1:
                logger.warning(
                    "Request succeeded only with auth header fallback (attempt %d of %d)",
                    attempt,
                    len(variants),
                )
            return result

    if last_error is None:
        msg = "At least one header variant is required"
        raise ValueError(msg)

    logger.error("All auth header variants rejected for %s %s", last_error.method, last_error.endpoint)
    raise error_factory(last_error) from last_error
