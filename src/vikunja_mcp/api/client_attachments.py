"""Attachments mixin for Vikunja API client.

Uploads are multipart requests, so they bypass ``make_request`` (which always
sends JSON) and classify HTTP failures themselves.
"""

import logging
from collections.abc import Sequence
from typing import IO, TYPE_CHECKING

import httpx

from vikunja_mcp.api.client_base import AUTH_FAILURE_STATUS_CODES, extract_error_body
from vikunja_mcp.api.exceptions import (
    NETWORK_ERROR_STATUS,
    VikunjaAPIError,
    VikunjaAuthenticationError,
    VikunjaNetworkError,
    VikunjaTimeoutError,
)
from vikunja_mcp.api.models import (
    Message,
    PaginationParams,
    TaskAttachment,
    parse_response,
    query_params,
)

if TYPE_CHECKING:
    from vikunja_mcp.api.protocols import BaseClientProtocol

logger = logging.getLogger(__name__)

# (filename, content, content type) as accepted by httpx multipart encoding
AttachmentFile = tuple[str, bytes | IO[bytes], str]

_UPLOAD_FIELD = "files"


class AttachmentsClientMixin:
    """Mixin providing task attachment operations for the Vikunja API client."""

    async def get_task_attachments(
        self: "BaseClientProtocol", task_id: int, params: PaginationParams | None = None
    ) -> list[TaskAttachment]:
        """List the attachments of a task."""
        endpoint = f"tasks/{task_id}/attachments"
        response_data = await self.make_request("GET", endpoint, params=query_params(params))
        return parse_response(list[TaskAttachment], response_data, endpoint)

    async def upload_task_attachment(
        self: "BaseClientProtocol", task_id: int, files: Sequence[AttachmentFile]
    ) -> Message:
        """Upload one or more files as attachments of a task.

        The multipart body is sent as-is with no explicit Content-Type so
        httpx can set the boundary. The bearer header is only sent when a
        token is configured.

        Args:
            task_id: Task ID
            files: Files to upload as ``(filename, content, content_type)``

        Returns:
            Message: Upload result reported by the server

        Raises:
            VikunjaAuthenticationError: Upload rejected with 401/403
            VikunjaNetworkError: Network connectivity error (status 0)
            VikunjaAPIError: Any other non-2xx response
        """
        endpoint = f"tasks/{task_id}/attachments"
        method = "PUT"
        multipart = [(_UPLOAD_FIELD, file) for file in files]

        try:
            response = await self._get_http_client().request(
                method=method,
                url=self._build_url(endpoint),
                headers=self._get_bearer_header(),
                files=multipart,
            )
        except httpx.TimeoutException as error:
            logger.exception("Attachment upload timed out")
            raise VikunjaTimeoutError(str(error) or "Request timeout", endpoint, method) from error
        except httpx.TransportError as error:
            logger.exception("Network error during attachment upload")
            raise VikunjaNetworkError(str(error) or "Network error", endpoint, method) from error

        if not response.is_success:
            message, body = extract_error_body(response)
            logger.error("Attachment upload to task %s failed: %s", task_id, response.status_code)
            if response.status_code in AUTH_FAILURE_STATUS_CODES:
                raise VikunjaAuthenticationError(
                    message, endpoint, method, response.status_code, body
                )
            raise VikunjaAPIError(message, endpoint, method, response.status_code, body)

        try:
            response_data = response.json()
        except ValueError as error:
            logger.exception("Attachment upload to task %s returned a non-JSON body", task_id)
            raise VikunjaAPIError.create_parse_error(
                endpoint,
                method=method,
                status_code=NETWORK_ERROR_STATUS,
                status=response.status_code,
                task_id=task_id,
            ) from error

        logger.debug("Uploaded %d attachment(s) to task %s", len(multipart), task_id)
        return parse_response(Message, response_data, endpoint)

    async def get_task_attachment(
        self: "BaseClientProtocol", task_id: int, attachment_id: int
    ) -> bytes:
        """Download the content of an attachment."""
        return await self.download(f"tasks/{task_id}/attachments/{attachment_id}")

    async def delete_task_attachment(
        self: "BaseClientProtocol", task_id: int, attachment_id: int
    ) -> Message:
        """Delete an attachment."""
        endpoint = f"tasks/{task_id}/attachments/{attachment_id}"
        response_data = await self.make_request("DELETE", endpoint)
        return parse_response(Message, response_data, endpoint)
