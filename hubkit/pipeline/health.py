"""Health check handler for load balancers and orchestrators."""

import time
from datetime import UTC, datetime

from hubkit.pipeline.handler import Pipeline, create_handler
from hubkit.pipeline.models import HandlerConfig, HandlerContext, HttpResponse
from hubkit.schema import enum, number, obj, string

HEALTH_RESPONSE_SCHEMA = obj(
    {
        "status": enum("healthy", description="Service status"),
        "timestamp": string(format="date-time", description="Current server time"),
        "uptime": number(minimum=0, description="Seconds since the service started"),
    },
    description="Health check result",
)


def create_health_handler(*, enable_logging: bool = False) -> Pipeline:
    """Create a pipeline answering ``{status, timestamp, uptime}``.

    Uptime is measured from the moment this function is called.

    Args:
        enable_logging: Emit the per-request completion line.

    Returns:
        Pipeline: The health check handler.
    """
    started = time.monotonic()

    async def health(_: HandlerContext) -> HttpResponse:
        return HttpResponse(
            status=200,
            json_body={
                "status": "healthy",
                "timestamp": datetime.now(UTC).isoformat(),
                "uptime": round(time.monotonic() - started, 3),
            },
        )

    return create_handler(health, HandlerConfig(enable_logging=enable_logging))
