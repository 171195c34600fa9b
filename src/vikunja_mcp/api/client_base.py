"""Base client for Vikunja API with HTTP plumbing and authentication.

This module provides the BaseClient class containing the HTTP infrastructure
shared by the feature-specific mixins: connection management, default
authentication headers, JSON encoding and the mapping of HTTP failures onto
the exception hierarchy. Requests are sent exactly once; the only retries in
the client are the header fallbacks in ``auth_fallback``.
"""

import logging
import types
from typing import Any, NoReturn

import httpx

from vikunja_mcp.api.exceptions import (
    NETWORK_ERROR_STATUS,
    VikunjaAPIError,
    VikunjaAuthenticationError,
    VikunjaBadRequestError,
    VikunjaNetworkError,
    VikunjaNotFoundError,
    VikunjaRateLimitError,
    VikunjaServerError,
    VikunjaTimeoutError,
)
from vikunja_mcp.config import ServerConfig

# HTTP status code constants
_HTTP_NO_CONTENT = 204
_HTTP_BAD_REQUEST = 400
_HTTP_UNAUTHORIZED = 401
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404
_HTTP_TOO_MANY_REQUESTS = 429
_HTTP_INTERNAL_SERVER_ERROR = 500
_HTTP_MAX_SERVER_ERROR = 600

AUTH_FAILURE_STATUS_CODES = frozenset({_HTTP_UNAUTHORIZED, _HTTP_FORBIDDEN})

_REDACTED = "***redacted***"

# Configure logger to write to stderr
logger = logging.getLogger(__name__)


def extract_error_body(response: httpx.Response) -> tuple[str, Any]:
    """Read the error message and body from a failed response.

    Returns:
        tuple[str, Any]: The server's ``message`` (or a generic fallback) and
        the parsed JSON body, or ``{"message": fallback}`` when the body is
        not JSON.
    """
    fallback = f"API request failed with status {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback, {"message": fallback}

    if isinstance(body, dict) and body.get("message"):
        return str(body["message"]), body
    return fallback, body


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of ``headers`` safe for logging."""
    redacted: dict[str, str] = {}
    for name, value in headers.items():
        lowered = name.lower()
        if lowered == "authorization":
            redacted[name] = f"Bearer {_REDACTED}"
        elif lowered == "x-api-token":
            redacted[name] = _REDACTED
        else:
            redacted[name] = value
    return redacted


class BaseClient:
    """Base client providing HTTP plumbing and authentication for Vikunja API.

    This class contains the core HTTP infrastructure that can be composed
    with feature-specific mixins. It holds no state besides its configuration
    and a lazily created ``httpx.AsyncClient``.
    """

    def __init__(self, config: ServerConfig) -> None:
        """Initialize the base Vikunja API client.

        Args:
            config: Server configuration containing API token and base URL
        """
        self._config = config
        self._base_url = str(config.vikunja_base_url).rstrip("/")
        self._api_token = config.vikunja_api_token
        self._http_client: httpx.AsyncClient | None = None

    @property
    def token(self) -> str | None:
        """API token fixed at construction."""
        return self._api_token

    def __str__(self) -> str:
        """Return string representation without exposing API token."""
        return f"BaseClient(base_url={self._base_url}, token=***redacted***)"

    def __repr__(self) -> str:
        """Return repr without exposing API token."""
        return f"BaseClient(base_url='{self._base_url}', token='***redacted***')"

    async def __aenter__(self) -> "BaseClient":
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Async context manager exit with cleanup."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the connection pool; a later request opens a new one."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client with proper configuration.

        Returns:
            httpx.AsyncClient: Configured async HTTP client
        """
        if self._http_client is None:
            timeout = httpx.Timeout(
                connect=self._config.timeout_connect,
                read=self._config.timeout_read,
                write=10.0,
                pool=10.0,
            )

            limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
            )

            headers = {"User-Agent": self._config.http_user_agent}

            self._http_client = httpx.AsyncClient(
                timeout=timeout,
                limits=limits,
                follow_redirects=True,
                headers=headers,
            )

        return self._http_client

    def _build_url(self, endpoint: str) -> str:
        """Join the base URL and an endpoint path."""
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    def _get_bearer_header(self) -> dict[str, str]:
        """Standard bearer header, or nothing when no token is configured."""
        if not self._api_token:
            return {}
        return {"Authorization": f"Bearer {self._api_token}"}

    def _get_auth_headers(self, auth_headers: dict[str, str] | None = None) -> dict[str, str]:
        """Get authentication headers for a JSON request.

        Args:
            auth_headers: Replacement for the standard bearer header. Used by
                the authentication fallback to present the token differently.

        Returns:
            Dict[str, str]: Headers including authentication and Content-Type
        """
        headers = dict(self._get_bearer_header() if auth_headers is None else auth_headers)
        headers["Content-Type"] = "application/json"
        return headers

    def _get_redacted_headers(self, auth_headers: dict[str, str] | None = None) -> dict[str, str]:
        """Get headers with redacted token for logging.

        Returns:
            Dict[str, str]: Headers with redacted authentication values
        """
        return redact_headers(self._get_auth_headers(auth_headers))

    def _handle_http_error(self, response: httpx.Response, method: str, endpoint: str) -> NoReturn:
        """Raise the exception matching a non-2xx response.

        Args:
            response: The failed HTTP response
            method: HTTP method used
            endpoint: API endpoint called

        Raises:
            VikunjaBadRequestError: For 400 Bad Request
            VikunjaAuthenticationError: For 401 Unauthorized and 403 Forbidden
            VikunjaNotFoundError: For 404 Not Found
            VikunjaRateLimitError: For 429 Too Many Requests
            VikunjaServerError: For 5xx server errors
            VikunjaAPIError: For other HTTP errors
        """
        status_code = response.status_code
        message, body = extract_error_body(response)
        context = (message, endpoint, method, status_code, body)

        if status_code == _HTTP_BAD_REQUEST:
            logger.error("Bad request to Vikunja API - invalid parameters: %s", message)
            raise VikunjaBadRequestError(*context)
        if status_code in AUTH_FAILURE_STATUS_CODES:
            logger.error("Authentication failed with Vikunja API (%s %s)", method, endpoint)
            raise VikunjaAuthenticationError(*context)
        if status_code == _HTTP_NOT_FOUND:
            logger.error("Resource not found: %s %s", method, endpoint)
            raise VikunjaNotFoundError(*context)
        if status_code == _HTTP_TOO_MANY_REQUESTS:
            logger.error("Rate limit exceeded for Vikunja API")
            raise VikunjaRateLimitError(*context)
        if _HTTP_INTERNAL_SERVER_ERROR <= status_code < _HTTP_MAX_SERVER_ERROR:
            logger.error("Vikunja API server error: %s", status_code)
            raise VikunjaServerError(*context)
        logger.error("Vikunja API error: %s", status_code)
        raise VikunjaAPIError(*context)

    async def _send(  # noqa: PLR0913
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        params: dict[str, Any] | None = None,
        auth_headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one authenticated request and return the successful response.

        Raises:
            VikunjaNetworkError: Network connectivity error (status 0)
            VikunjaTimeoutError: Request timeout (status 0)
            VikunjaAPIError: Any non-2xx response, as its typed subclass
        """
        method_upper = method.upper()
        url = self._build_url(endpoint)
        headers = self._get_auth_headers(auth_headers)
        if params is not None:
            params = {key: value for key, value in params.items() if value is not None}

        logger.debug(
            "Making %s request to %s with headers: %s",
            method_upper,
            url,
            self._get_redacted_headers(auth_headers),
        )

        try:
            response = await self._get_http_client().request(
                method=method_upper,
                url=url,
                headers=headers,
                json=data,
                params=params or None,
            )
        except httpx.TimeoutException as error:
            logger.exception("Request timeout")
            raise VikunjaTimeoutError(str(error) or "Request timeout", endpoint, method_upper) from error
        except httpx.TransportError as error:
            logger.exception("Network error")
            raise VikunjaNetworkError(str(error) or "Network error", endpoint, method_upper) from error

        if not response.is_success:
            self._handle_http_error(response, method_upper, endpoint)

        logger.debug("Successful API response: %s", response.status_code)
        return response

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
            params: Query parameters; ``None`` values are dropped
            auth_headers: Replacement for the standard bearer header

        Returns:
            Any: Parsed JSON response (object or list), ``{}`` for 204

        Raises:
            VikunjaBadRequestError: Invalid request parameters
            VikunjaAuthenticationError: Authentication failed (401/403)
            VikunjaNotFoundError: Resource not found
            VikunjaRateLimitError: Rate limit exceeded
            VikunjaServerError: Server error
            VikunjaNetworkError: Network connectivity error
            VikunjaTimeoutError: Request timeout
            VikunjaAPIError: Other API errors
        """
        response = await self._send(method, endpoint, data, params, auth_headers)

        if response.status_code == _HTTP_NO_CONTENT:
            return {}

        try:
            return response.json()
        except ValueError as error:
            logger.exception("Vikunja API returned a non-JSON success response")
            raise VikunjaAPIError.create_parse_error(
                endpoint,
                method=method.upper(),
                status_code=NETWORK_ERROR_STATUS,
                status=response.status_code,
            ) from error

    async def download(self, endpoint: str) -> bytes:
        """Fetch a binary resource (e.g. an attachment) with default authentication.

        Args:
            endpoint: API endpoint (without base URL)

        Returns:
            bytes: Raw response body
        """
        response = await self._send("GET", endpoint)
        return response.content

    async def test_connectivity(self) -> bool:
        """Test connectivity to the Vikunja API.

        Fetches the current user to verify that the token is valid and the
        API is accessible.

        Returns:
            bool: True if connectivity test succeeds, False otherwise
        """
        try:
            result = await self.make_request("GET", "user")
        except VikunjaAPIError as e:
            logger.warning("Vikunja API connectivity test failed: %s", e)
            return False
        else:
            if isinstance(result, dict) and "id" in result:
                logger.info("Vikunja API connectivity test successful")
                return True
            logger.warning("Vikunja API connectivity test failed: unexpected response")
            return False
