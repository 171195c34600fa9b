"""Tests for the authentication header fallback on assignee and label endpoints."""

from __future__ import annotations

import logging

import httpx
import pytest
from pytest_mock import MockerFixture

from vikunja_mcp.api.auth_fallback import (
    AUTH_HEADER_VARIANTS,
    api_token_header,
    call_with_auth_fallback,
    is_auth_failure,
    lowercase_bearer_header,
)
from vikunja_mcp.api.exceptions import (
    AssigneeAuthenticationError,
    LabelAuthenticationError,
    VikunjaAPIError,
    VikunjaAuthenticationError,
    VikunjaNotFoundError,
    VikunjaServerError,
)
from vikunja_mcp.api.models import (
    BulkAssignees,
    Label,
    LabelTaskBulk,
    TaskAssignment,
    TaskLabel,
    User,
)
from tests.test_api_client_common import (
    HTTP_CREATED,
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_OK,
    HTTP_UNAUTHORIZED,
    TEST_TOKEN,
    install_transport,
    make_client,
    request_json,
    respond_in_sequence,
    respond_with,
)

FORBIDDEN_BODY = {"code": 11, "message": "Forbidden"}


def _auth_error(status_code: int = HTTP_FORBIDDEN) -> VikunjaAuthenticationError:
    return VikunjaAuthenticationError(
        "Forbidden", "tasks/5/assignees", "PUT", status_code, FORBIDDEN_BODY
    )


def _assert_header_cascade(requests: list[httpx.Request]) -> None:
    """Check the three attempts presented the token in the expected order."""
    assert len(requests) == 3  # noqa: PLR2004
    first, second, third = (request.headers for request in requests)
    assert first["Authorization"] == f"Bearer {TEST_TOKEN}"
    assert "X-API-Token" not in first
    assert second["X-API-Token"] == TEST_TOKEN
    assert "Authorization" not in second
    assert third["authorization"] == f"Bearer {TEST_TOKEN}"
    assert "X-API-Token" not in third


class TestCallWithAuthFallback:
    """Behavior of the generic cascade helper."""

    def test_variant_order(self) -> None:
        """Default headers first, then X-API-Token, then lowercase bearer."""
        assert AUTH_HEADER_VARIANTS == (None, api_token_header, lowercase_bearer_header)
        assert api_token_header("abc") == {"X-API-Token": "abc"}
        assert lowercase_bearer_header("abc") == {"authorization": "Bearer abc"}

    def test_is_auth_failure(self) -> None:
        """Only authentication errors or 401/403 statuses count as auth failures."""
        assert is_auth_failure(_auth_error())
        assert is_auth_failure(VikunjaAPIError("x", status_code=HTTP_UNAUTHORIZED))
        assert not is_auth_failure(VikunjaServerError("x", status_code=HTTP_INTERNAL_SERVER_ERROR))
        assert not is_auth_failure(VikunjaAPIError("x"))

    @pytest.mark.asyncio
    async def test_first_attempt_success(self, mocker: MockerFixture) -> None:
        """A successful first attempt runs the action once with default headers."""
        action = mocker.AsyncMock(return_value={"ok": True})

        result = await call_with_auth_fallback(
            action, TEST_TOKEN, AssigneeAuthenticationError.from_error
        )

        assert result == {"ok": True}
        action.assert_awaited_once_with(None)

    @pytest.mark.asyncio
    async def test_second_attempt_success(self, mocker: MockerFixture) -> None:
        """One rejection moves to the X-API-Token header."""
        action = mocker.AsyncMock(side_effect=[_auth_error(), {"ok": True}])

        result = await call_with_auth_fallback(
            action, TEST_TOKEN, AssigneeAuthenticationError.from_error
        )

        assert result == {"ok": True}
        assert action.await_count == 2  # noqa: PLR2004
        assert action.await_args_list[1].args == ({"X-API-Token": TEST_TOKEN},)

    @pytest.mark.asyncio
    async def test_third_attempt_success(self, mocker: MockerFixture) -> None:
        """Two rejections move to the lowercase bearer header."""
        action = mocker.AsyncMock(
            side_effect=[_auth_error(HTTP_UNAUTHORIZED), _auth_error(), {"ok": True}]
        )

        result = await call_with_auth_fallback(
            action, TEST_TOKEN, LabelAuthenticationError.from_error
        )

        assert result == {"ok": True}
        assert action.await_count == 3  # noqa: PLR2004
        assert action.await_args_list[2].args == ({"authorization": f"Bearer {TEST_TOKEN}"},)

    @pytest.mark.asyncio
    async def test_exhausted_raises_factory_error(self, mocker: MockerFixture) -> None:
        """Three rejections raise the factory error chained to the last failure."""
        last = _auth_error()
        action = mocker.AsyncMock(side_effect=[_auth_error(), _auth_error(), last])

        with pytest.raises(AssigneeAuthenticationError) as exc_info:
            await call_with_auth_fallback(
                action, TEST_TOKEN, AssigneeAuthenticationError.from_error
            )

        assert action.await_count == 3  # noqa: PLR2004
        assert exc_info.value.__cause__ is last

    @pytest.mark.asyncio
    async def test_non_auth_error_short_circuits(self, mocker: MockerFixture) -> None:
        """A non-auth failure is raised unchanged without further attempts."""
        server_error = VikunjaServerError("boom", status_code=HTTP_INTERNAL_SERVER_ERROR)
        action = mocker.AsyncMock(side_effect=server_error)

        with pytest.raises(VikunjaServerError) as exc_info:
            await call_with_auth_fallback(
                action, TEST_TOKEN, AssigneeAuthenticationError.from_error
            )

        assert exc_info.value is server_error
        action.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_non_auth_error_after_fallback(self, mocker: MockerFixture) -> None:
        """A non-auth failure on a later attempt also ends the cascade."""
        not_found = VikunjaNotFoundError("missing", status_code=HTTP_NOT_FOUND)
        action = mocker.AsyncMock(side_effect=[_auth_error(), not_found])

        with pytest.raises(VikunjaNotFoundError):
            await call_with_auth_fallback(
                action, TEST_TOKEN, LabelAuthenticationError.from_error
            )

        assert action.await_count == 2  # noqa: PLR2004

    @pytest.mark.asyncio
    async def test_fallback_success_logs_warning(
        self, mocker: MockerFixture, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A success that needed a fallback is logged at WARNING."""
        action = mocker.AsyncMock(side_effect=[_auth_error(), {"ok": True}])

        with caplog.at_level(logging.WARNING, logger="vikunja_mcp.api.auth_fallback"):
            await call_with_auth_fallback(
                action, TEST_TOKEN, AssigneeAuthenticationError.from_error
            )

        assert any("auth header fallback" in record.message for record in caplog.records)
        assert all(TEST_TOKEN not in record.message for record in caplog.records)

    @pytest.mark.asyncio
    async def test_empty_variants_rejected(self, mocker: MockerFixture) -> None:
        """At least one variant is required."""
        action = mocker.AsyncMock()

        with pytest.raises(ValueError, match="At least one header variant"):
            await call_with_auth_fallback(
                action, TEST_TOKEN, AssigneeAuthenticationError.from_error, ()
            )

        action.assert_not_awaited()


class TestSpecializedErrors:
    """Messages and context of the specialized authentication errors."""

    def test_assignee_error_message(self) -> None:
        """The assignee error explains the failure and embeds the last error."""
        error = AssigneeAuthenticationError.from_error(_auth_error())

        assert str(error).startswith("Assignee operation failed due to authentication issue.")
        assert "This may occur even with valid tokens." in str(error)
        assert "Original error: Forbidden" in str(error)
        assert error.status_code == HTTP_FORBIDDEN
        assert error.endpoint == "/tasks/5/assignees"
        assert error.method == "PUT"
        assert error.response == FORBIDDEN_BODY
        assert isinstance(error, VikunjaAuthenticationError)

    def test_label_error_message(self) -> None:
        """The label error names the label operation."""
        error = LabelAuthenticationError.from_error(_auth_error(HTTP_UNAUTHORIZED))

        assert str(error).startswith("Label operation failed due to authentication issue.")
        assert error.status_code == HTTP_UNAUTHORIZED


class TestClientCascade:
    """The cascade as seen on the wire through the client."""

    @pytest.mark.asyncio
    async def test_assign_user_rejected_three_times(self, mocker: MockerFixture) -> None:
        """assign_user_to_task(5, 9) against three 403s sends three requests and fails."""
        client = make_client()
        requests = install_transport(mocker, client, respond_with(HTTP_FORBIDDEN, FORBIDDEN_BODY))

        with pytest.raises(AssigneeAuthenticationError) as exc_info:
            await client.assign_user_to_task(5, 9)

        assert len(requests) == 3  # noqa: PLR2004
        for request in requests:
            assert request.method == "PUT"
            assert request.url.path == "/api/v1/tasks/5/assignees"
            assert request_json(request) == {"user_id": 9}

        first, second, third = (request.headers for request in requests)
        assert first["Authorization"] == f"Bearer {TEST_TOKEN}"
        assert "X-API-Token" not in first
        assert second["X-API-Token"] == TEST_TOKEN
        assert "Authorization" not in second
        assert third["authorization"] == f"Bearer {TEST_TOKEN}"
        assert "X-API-Token" not in third
        assert third["Content-Type"] == "application/json"

        error = exc_info.value
        assert "Assignee operation failed due to authentication issue" in str(error)
        assert error.status_code == HTTP_FORBIDDEN
        assert error.response == FORBIDDEN_BODY

    @pytest.mark.asyncio
    async def test_assign_user_succeeds_on_second_variant(self, mocker: MockerFixture) -> None:
        """A 401 followed by success returns the assignment."""
        client = make_client()
        requests = install_transport(
            mocker,
            client,
            respond_in_sequence(
                httpx.Response(HTTP_UNAUTHORIZED, json={"message": "Unauthorized"}),
                httpx.Response(HTTP_CREATED, json={"user_id": 9}),
            ),
        )

        assignment = await client.assign_user_to_task(5, 9)

        assert isinstance(assignment, TaskAssignment)
        assert assignment.user_id == 9  # noqa: PLR2004
        assert len(requests) == 2  # noqa: PLR2004

    @pytest.mark.asyncio
    async def test_assign_user_server_error_not_retried(self, mocker: MockerFixture) -> None:
        """A 500 on the first attempt is raised after a single request."""
        client = make_client()
        requests = install_transport(
            mocker, client, respond_with(HTTP_INTERNAL_SERVER_ERROR, {"message": "boom"})
        )

        with pytest.raises(VikunjaServerError):
            await client.assign_user_to_task(5, 9)

        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_add_label_rejected_three_times(self, mocker: MockerFixture) -> None:
        """Label additions surface a LabelAuthenticationError after three rejections."""
        client = make_client()
        requests = install_transport(mocker, client, respond_with(HTTP_UNAUTHORIZED, {}))

        with pytest.raises(LabelAuthenticationError) as exc_info:
            await client.add_label_to_task(5, TaskLabel(label_id=3))

        assert len(requests) == 3  # noqa: PLR2004
        assert str(exc_info.value).startswith("Label operation failed due to authentication issue.")
        assert exc_info.value.status_code == HTTP_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_remove_label_succeeds_on_third_variant(self, mocker: MockerFixture) -> None:
        """Label removal succeeds with the lowercase bearer header."""
        client = make_client()
        requests = install_transport(
            mocker,
            client,
            respond_in_sequence(
                httpx.Response(HTTP_FORBIDDEN, json=FORBIDDEN_BODY),
                httpx.Response(HTTP_FORBIDDEN, json=FORBIDDEN_BODY),
                httpx.Response(HTTP_OK, json={"message": "Successfully deleted."}),
            ),
        )

        result = await client.remove_label_from_task(5, 3)

        assert result.message == "Successfully deleted."
        assert len(requests) == 3  # noqa: PLR2004
        assert requests[2].method == "DELETE"
        assert requests[2].url.path == "/api/v1/tasks/5/labels/3"

    @pytest.mark.asyncio
    async def test_get_labels_is_not_retried(self, mocker: MockerFixture) -> None:
        """Read-only endpoints do not use the fallback."""
        client = make_client()
        requests = install_transport(mocker, client, respond_with(HTTP_FORBIDDEN, FORBIDDEN_BODY))

        with pytest.raises(VikunjaAuthenticationError) as exc_info:
            await client.get_task_labels(5)

        assert not isinstance(exc_info.value, LabelAuthenticationError)
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_bulk_assign_rejected_three_times(self, mocker: MockerFixture) -> None:
        """Bulk assignment walks all three header variants before failing."""
        client = make_client()
        requests = install_transport(
            mocker, client, respond_with(HTTP_UNAUTHORIZED, {"message": "Unauthorized"})
        )

        with pytest.raises(AssigneeAuthenticationError) as exc_info:
            await client.bulk_assign_users_to_task(
                5, BulkAssignees(assignees=[User(id=9), User(id=10)])
            )

        _assert_header_cascade(requests)
        for request in requests:
            assert request.method == "POST"
            assert request.url.path == "/api/v1/tasks/5/assignees/bulk"
            assert request_json(request) == {"assignees": [{"id": 9}, {"id": 10}]}

        error = exc_info.value
        assert str(error).startswith("Assignee operation failed due to authentication issue.")
        assert error.status_code == HTTP_UNAUTHORIZED
        assert error.endpoint == "/tasks/5/assignees/bulk"
        assert error.method == "POST"

    @pytest.mark.asyncio
    async def test_remove_user_rejected_three_times(self, mocker: MockerFixture) -> None:
        """Removing an assignee fails with the assignee error after three 403s."""
        client = make_client()
        requests = install_transport(mocker, client, respond_with(HTTP_FORBIDDEN, FORBIDDEN_BODY))

        with pytest.raises(AssigneeAuthenticationError) as exc_info:
            await client.remove_user_from_task(5, 9)

        _assert_header_cascade(requests)
        for request in requests:
            assert request.method == "DELETE"
            assert request.url.path == "/api/v1/tasks/5/assignees/9"

        error = exc_info.value
        assert error.status_code == HTTP_FORBIDDEN
        assert error.endpoint == "/tasks/5/assignees/9"
        assert error.response == FORBIDDEN_BODY

    @pytest.mark.asyncio
    async def test_update_labels_rejected_three_times(self, mocker: MockerFixture) -> None:
        """Replacing the label set fails with the label error after three 403s."""
        client = make_client()
        requests = install_transport(mocker, client, respond_with(HTTP_FORBIDDEN, FORBIDDEN_BODY))

        with pytest.raises(LabelAuthenticationError) as exc_info:
            await client.update_task_labels(5, LabelTaskBulk(labels=[Label(id=3), Label(id=4)]))

        _assert_header_cascade(requests)
        for request in requests:
            assert request.method == "POST"
            assert request.url.path == "/api/v1/tasks/5/labels/bulk"
            assert request_json(request) == {"labels": [{"id": 3}, {"id": 4}]}

        error = exc_info.value
        assert str(error).startswith("Label operation failed due to authentication issue.")
        assert error.status_code == HTTP_FORBIDDEN
        assert error.endpoint == "/tasks/5/labels/bulk"
