"""Error normalization for every pipeline exit.

All error responses share one envelope::

    {"error": {"code": ..., "message": ..., "details": ...}, "correlationId": ...}

Known ``HubKitError`` instances keep their status, code, message and details.
Anything else becomes a generic ``INTERNAL_ERROR``; the original fault is
logged with sanitized context but never sent to the client.
"""

from typing import Any

from loguru import logger

from hubkit.core.constants import CORRELATION_ID_HEADER
from hubkit.core.error_context import sanitize_error_context, sanitize_headers
from hubkit.core.exceptions import HubKitError, InternalError
from hubkit.pipeline.models import HttpRequest, HttpResponse


def build_error_response(
    exc: Exception,
    correlation_id: str,
    header: str = CORRELATION_ID_HEADER,
    request: HttpRequest | None = None,
) -> HttpResponse:
    """Map an exception to an enveloped error response.

    Args:
        exc: The error raised by a stage or by the business handler.
        correlation_id: The request's correlation identifier.
        header: Name of the correlation header to set.
        request: The request being handled, used for log context only.

    Returns:
        HttpResponse: The error response.
    """
    context: dict[str, Any] = {}
    if request is not None:
        context = {"request_method": request.method, "request_path": request.path}

    if isinstance(exc, HubKitError):
        error = exc
        if error.is_expected:
            logger.warning(
                "Request rejected with {}: {}",
                error.code,
                error.message,
                status_code=error.status_code,
                **context,
            )
        else:
            logger.error(
                "Request rejected with {}: {}",
                error.code,
                error.message,
                status_code=error.status_code,
                severity=error.severity.value,
                **context,
            )
    else:
        if request is not None:
            context["request_headers"] = sanitize_headers(request.headers)
        logger.opt(exception=exc).error(
            "Unhandled error in request handler",
            **sanitize_error_context(exc, context),
        )
        error = InternalError(cause=exc)

    return HttpResponse(
        status=error.status_code,
        headers={header: correlation_id},
        json_body={"error": error.to_dict(), "correlationId": correlation_id},
    )


def with_correlation_header(
    response: HttpResponse, correlation_id: str, header: str = CORRELATION_ID_HEADER
) -> HttpResponse:
    """Return ``response`` with the correlation header set.

    A header already set to the same value leaves the response untouched.
    """
    if response.headers.get(header) == correlation_id:
        return response
    headers = {k: v for k, v in response.headers.items() if k.lower() != header}
    headers[header] = correlation_id
    return response.model_copy(update={"headers": headers})
