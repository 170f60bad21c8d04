"""Unit tests for hubkit/pipeline/responses.py."""

from typing import Any

import pytest

from hubkit.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from hubkit.pipeline.models import HttpResponse
from hubkit.pipeline.responses import build_error_response, with_correlation_header


@pytest.mark.unit
class TestBuildErrorResponse:
    """Test cases for error normalization."""

    def test_known_error_is_verbatim(self) -> None:
        """Test that code, message and details pass through unchanged."""
        response = build_error_response(
            ConflictError("Email taken", details={"field": "email"}), "cid-1"
        )

        assert response.status == 409
        assert response.headers == {"x-correlation-id": "cid-1"}
        assert response.json_body == {
            "error": {
                "code": "CONFLICT",
                "message": "Email taken",
                "details": {"field": "email"},
            },
            "correlationId": "cid-1",
        }

    def test_unknown_error_is_generic(
        self, log_records: list[dict[str, Any]]
    ) -> None:
        """Test that unexpected faults never leak their message."""
        response = build_error_response(
            RuntimeError("connection string postgres://u:p@db"), "cid-2"
        )

        assert response.status == 500
        assert response.json_body == {
            "error": {"code": "INTERNAL_ERROR", "message": "Internal server error"},
            "correlationId": "cid-2",
        }
        assert "postgres" not in str(response.json_body)

        record = log_records[-1]
        assert record["level"].name == "ERROR"
        assert record["exception"] is not None
        assert record["extra"]["error_type"] == "RuntimeError"

    def test_unknown_error_logs_redacted_headers(
        self, make_request: Any, log_records: list[dict[str, Any]]
    ) -> None:
        """Test that request headers are logged with credentials redacted."""
        request = make_request(
            headers={"authorization": "Bearer abc.def.ghi", "accept": "text/plain"}
        )

        build_error_response(ValueError("boom"), "cid", request=request)

        extra = log_records[-1]["extra"]
        assert extra["request_method"] == "GET"
        assert extra["request_path"] == "/items"
        assert extra["request_headers"] == {
            "authorization": "[REDACTED]",
            "accept": "text/plain",
        }

    def test_log_levels_follow_severity(
        self, log_records: list[dict[str, Any]]
    ) -> None:
        """Test that expected errors warn and alerting errors log at ERROR."""
        build_error_response(NotFoundError(), "cid")
        build_error_response(ForbiddenError(), "cid")

        assert [r["level"].name for r in log_records[-2:]] == ["WARNING", "ERROR"]

    def test_custom_header(self) -> None:
        """Test that the configured correlation header name is used."""
        response = build_error_response(NotFoundError(), "cid", "x-request-id")
        assert response.headers == {"x-request-id": "cid"}


@pytest.mark.unit
class TestWithCorrelationHeader:
    """Test cases for stamping the correlation header."""

    def test_adds_header(self) -> None:
        """Test that the header is added and other headers kept."""
        response = with_correlation_header(
            HttpResponse(headers={"cache-control": "no-store"}, json_body={}), "cid"
        )
        assert response.headers == {
            "cache-control": "no-store",
            "x-correlation-id": "cid",
        }
        assert response.has_json_body

    def test_replaces_differently_cased_header(self) -> None:
        """Test that a handler-set header cannot disagree with the request id."""
        response = with_correlation_header(
            HttpResponse(headers={"X-Correlation-ID": "other"}), "cid"
        )
        assert response.headers == {"x-correlation-id": "cid"}

    def test_unchanged_when_already_set(self) -> None:
        """Test that an already correct response is returned as-is."""
        original = HttpResponse(headers={"x-correlation-id": "cid"})
        assert with_correlation_header(original, "cid") is original
