"""Tests for Vikunja DTO serialization and validation."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from vikunja_mcp.api.exceptions import VikunjaAPIError
from vikunja_mcp.api.models import (
    PaginationParams,
    RelationKind,
    Task,
    TaskQueryParams,
    TaskRelation,
    dump_payload,
    parse_response,
    query_params,
)

# ruff: noqa: PLR2004 - Magic values are acceptable in test files


class TestDumpPayload:
    """Outbound payload serialization."""

    def test_none_fields_are_excluded(self) -> None:
        """Unset fields are not sent."""
        assert dump_payload(Task(title="Only title")) == {"title": "Only title"}

    def test_datetimes_and_enums_are_json_values(self) -> None:
        """Datetimes become ISO strings and enums their values."""
        payload = dump_payload(
            TaskRelation(
                other_task_id=6,
                relation_kind=RelationKind.PRECEDES,
                created=datetime(2025, 8, 20, 10, 0, tzinfo=UTC),
            )
        )

        assert payload == {
            "other_task_id": 6,
            "relation_kind": "precedes",
            "created": "2025-08-20T10:00:00Z",
        }

    def test_unknown_fields_round_trip(self) -> None:
        """Server fields the model does not declare are sent back unchanged."""
        task = Task.model_validate({"id": 1, "title": "A", "cover_image_attachment_id": 7})

        assert dump_payload(task) == {"id": 1, "title": "A", "cover_image_attachment_id": 7}


class TestQueryParams:
    """Query-parameter models."""

    def test_none_when_no_params(self) -> None:
        """No model or an empty model produces no params."""
        assert query_params(None) is None
        assert query_params(TaskQueryParams()) is None

    def test_field_order_is_kept(self) -> None:
        """Parameters keep their declaration order."""
        params = TaskQueryParams(filter="done = false", page=1, order_by="desc", sort_by="id")

        assert list(query_params(params) or {}) == ["page", "sort_by", "order_by", "filter"]

    def test_invalid_order_by_rejected(self) -> None:
        """order_by only accepts asc or desc."""
        with pytest.raises(ValidationError):
            TaskQueryParams(order_by="up")  # type: ignore[arg-type]

    def test_page_must_be_positive(self) -> None:
        """Pages start at 1."""
        with pytest.raises(ValidationError):
            PaginationParams(page=0)

    def test_unknown_params_rejected(self) -> None:
        """Query models do not accept arbitrary parameters."""
        with pytest.raises(ValidationError):
            PaginationParams(limit=10)  # type: ignore[call-arg]


class TestParseResponse:
    """Inbound response validation."""

    def test_parses_list(self) -> None:
        """Generic list types are supported."""
        tasks = parse_response(list[Task], [{"id": 1}, {"id": 2}], "tasks")

        assert [task.id for task in tasks] == [1, 2]

    def test_wrong_shape_raises_parse_error(self) -> None:
        """A mismatching response raises a parse error naming the endpoint."""
        with pytest.raises(VikunjaAPIError) as exc_info:
            parse_response(list[Task], {"id": 1}, "tasks")

        assert "Failed to parse response" in str(exc_info.value)
        assert "endpoint=/tasks" in str(exc_info.value)
        assert exc_info.value.endpoint == "/tasks"
        assert exc_info.value.status_code is None
