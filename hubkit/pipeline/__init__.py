"""Request-handling pipeline: correlation, auth, validation and error mapping."""

from hubkit.pipeline.handler import BusinessHandler, Pipeline, create_handler
from hubkit.pipeline.health import HEALTH_RESPONSE_SCHEMA, create_health_handler
from hubkit.pipeline.models import (
    FileField,
    HandlerConfig,
    HandlerContext,
    HttpRequest,
    HttpResponse,
    PipelineState,
    UploadedFile,
)
from hubkit.pipeline.responses import build_error_response, with_correlation_header
from hubkit.pipeline.stages import DEFAULT_STAGES, Stage, StageResult

__all__ = [
    "DEFAULT_STAGES",
    "HEALTH_RESPONSE_SCHEMA",
    "BusinessHandler",
    "FileField",
    "HandlerConfig",
    "HandlerContext",
    "HttpRequest",
    "HttpResponse",
    "Pipeline",
    "PipelineState",
    "Stage",
    "StageResult",
    "UploadedFile",
    "build_error_response",
    "create_handler",
    "create_health_handler",
    "with_correlation_header",
]
