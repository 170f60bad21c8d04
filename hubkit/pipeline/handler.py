"""Composition of pipeline stages around a business handler.

``create_handler`` wraps an async business function
``(HandlerContext) -> HttpResponse`` into a ``Pipeline``: an async callable
``(HttpRequest) -> HttpResponse`` that never raises. Stages are folded in
order; the first stage to return a response ends the request. Errors raised
by the business handler (or any unexpected fault) are caught once, here, and
mapped to the error envelope.
"""

import time
from collections.abc import Awaitable, Callable, Sequence

from loguru import logger

from hubkit.core.constants import MILLISECONDS_PER_SECOND
from hubkit.core.context import RequestContext
from hubkit.pipeline.models import (
    HandlerConfig,
    HandlerContext,
    HttpRequest,
    HttpResponse,
    PipelineState,
)
from hubkit.pipeline.responses import build_error_response, with_correlation_header
from hubkit.pipeline.stages import DEFAULT_STAGES, Stage, resolve_correlation

type BusinessHandler = Callable[[HandlerContext], Awaitable[HttpResponse]]


class Pipeline:
    """A business handler wrapped with correlation, auth and validation.

    Args:
        handler: The business function to invoke once every stage passed.
        config: Per-route configuration.
        stages: Stages to fold, in order. Correlation is always resolved
            first, even when ``stages`` omits it.
    """

    def __init__(
        self,
        handler: BusinessHandler,
        config: HandlerConfig,
        stages: Sequence[Stage] = DEFAULT_STAGES,
    ) -> None:
        self.handler = handler
        self.config = config
        self.stages = tuple(s for s in stages if s is not resolve_correlation)

    async def __call__(self, request: HttpRequest) -> HttpResponse:
        """Handle one request.

        Args:
            request: The inbound request.

        Returns:
            HttpResponse: The handler's response or an error response, always
                carrying the correlation header.
        """
        start_time = time.perf_counter()
        header = self.config.correlation_header

        initial = await resolve_correlation(PipelineState(request, self.config))
        if isinstance(initial, HttpResponse):
            return initial
        correlation_id = initial.correlation_id

        with (
            logger.contextualize(correlation_id=correlation_id),
            RequestContext.bind(correlation_id),
        ):
            try:
                response = await self._run(initial)
                if response.has_json_body:
                    # Encode here so unserializable bodies fail inside the boundary
                    _ = response.json_bytes
            except Exception as exc:  # noqa: BLE001 - the pipeline boundary
                response = build_error_response(exc, correlation_id, header, request)

            response = with_correlation_header(response, correlation_id, header)

            if self.config.enable_logging:
                duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
                logger.info(
                    "Request completed",
                    method=request.method,
                    path=request.path,
                    status_code=response.status,
                    duration_ms=round(duration_ms, 2),
                )

        return response

    async def _run(self, state: PipelineState) -> HttpResponse:
        for stage in self.stages:
            outcome = await stage(state)
            if isinstance(outcome, HttpResponse):
                return outcome
            state = outcome

        result = await self.handler(state.to_context())
        if not isinstance(result, HttpResponse):
            msg = f"Handler returned {type(result).__name__}, expected HttpResponse"
            raise TypeError(msg)
        return result


def create_handler(
    handler: BusinessHandler, config: HandlerConfig | None = None
) -> Pipeline:
    """Wrap ``handler`` in the default request pipeline.

    Args:
        handler: Async business function receiving the validated context.
        config: Per-route configuration; defaults to no auth and no schemas.

    Returns:
        Pipeline: Async callable turning an ``HttpRequest`` into a response.
    """
    return Pipeline(handler, config or HandlerConfig())
