"""Unit tests for API response utilities.

This module tests the ORJSONResponse class which serializes structured
response bodies and the interface document.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import pytest
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pytest_mock import MockerFixture

from hubkit.api.utils.responses import ORJSONResponse


class Item(BaseModel):
    """Pydantic model rendered by the response class."""

    id: UUID
    name: str
    created_at: datetime


@pytest.mark.unit
class TestORJSONResponse:
    """Test suite for ORJSONResponse class."""

    def test_initialization(self) -> None:
        """Test ORJSONResponse initializes correctly with proper media type."""
        response = ORJSONResponse(content={"test": "data"})

        assert response.media_type == "application/json"
        assert isinstance(response, JSONResponse)

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ({}, b"{}"),
            ({"z": 1, "a": 2}, b'{"z":1,"a":2}'),
            ([1, "two", None], b'[1,"two",null]'),
            (None, b"null"),
            ({"unicode": "ok ✓"}, '{"unicode":"ok ✓"}'.encode()),
        ],
    )
    def test_render(self, content: Any, expected: bytes) -> None:  # noqa: ANN401
        """Test rendering keeps insertion order and emits compact JSON."""
        assert ORJSONResponse(content=content).body == expected

    def test_render_with_pydantic_model(self) -> None:
        """Test rendering of Pydantic BaseModel instances in JSON mode."""
        item = Item(
            id=UUID("12345678-1234-5678-1234-567812345678"),
            name="Widget",
            created_at=datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC),
        )

        body = ORJSONResponse(content=item).body

        assert body == (
            b'{"id":"12345678-1234-5678-1234-567812345678","name":"Widget",'
            b'"created_at":"2024-01-01T12:00:00Z"}'
        )

    def test_render_passes_content_to_orjson(self, mocker: MockerFixture) -> None:
        """Test that non-model content is handed to orjson unchanged."""
        mock_orjson = mocker.patch("hubkit.api.utils.responses.orjson")
        mock_orjson.dumps.return_value = b'{"mocked": "result"}'

        response = ORJSONResponse.__new__(ORJSONResponse)
        content = {"b": 2, "a": 1}

        assert response.render(content) == b'{"mocked": "result"}'
        mock_orjson.dumps.assert_called_once_with(content)

    def test_serialization_error_propagates(self) -> None:
        """Test that unserializable content raises."""
        with pytest.raises(TypeError):
            ORJSONResponse(content={"s": {1, 2}})

    @pytest.mark.parametrize(
        ("status_code", "headers"),
        [
            (200, None),
            (201, {"X-Custom-Header": "value"}),
            (500, {"x-correlation-id": "abc"}),
        ],
    )
    def test_constructor_parameters(
        self,
        status_code: int,
        headers: dict[str, str] | None,
    ) -> None:
        """Test that ORJSONResponse accepts JSONResponse constructor parameters."""
        response = ORJSONResponse(
            content={"test": "data"},
            status_code=status_code,
            headers=headers,
        )

        assert response.status_code == status_code
        if headers:
            for key, value in headers.items():
                assert response.headers.get(key) == value
