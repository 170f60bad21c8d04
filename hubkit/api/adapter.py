"""Host adapter between Starlette/FastAPI and the request pipeline.

FastAPI matches URLs to endpoints; everything after that (correlation,
auth, validation, error mapping) happens in the pipeline. The adapter only
converts request and response objects.
"""

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response

from hubkit.contract.routes import RouteBuilder
from hubkit.core.constants import JSON_CONTENT_TYPE
from hubkit.pipeline.handler import Pipeline
from hubkit.pipeline.models import HttpRequest, HttpResponse

type Endpoint = Callable[[Request], Awaitable[Response]]


async def to_http_request(request: Request) -> HttpRequest:
    """Convert a Starlette request into the pipeline's ``HttpRequest``.

    Repeated query keys become lists in order of appearance.

    Args:
        request: The incoming Starlette request.

    Returns:
        HttpRequest: The request as seen by the pipeline.
    """
    query: dict[str, str | list[str]] = {}
    for key, value in request.query_params.multi_items():
        existing = query.get(key)
        if existing is None:
            query[key] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            query[key] = [existing, value]

    return HttpRequest(
        method=request.method,
        url=str(request.url),
        headers=dict(request.headers),
        query=query,
        path_params={k: str(v) for k, v in request.path_params.items()},
        body=await request.body(),
    )


def to_response(response: HttpResponse) -> Response:
    """Convert the pipeline's ``HttpResponse`` into a Starlette response.

    Args:
        response: The pipeline result.

    Returns:
        Response: The encoded JSON body for structured responses, the raw
            body otherwise.
    """
    if response.has_json_body:
        return Response(
            content=response.json_bytes,
            status_code=response.status,
            headers=response.headers,
            media_type=JSON_CONTENT_TYPE,
        )
    return Response(
        content=response.body or b"",
        status_code=response.status,
        headers=response.headers,
    )


def endpoint_for(pipeline: Pipeline) -> Endpoint:
    """Expose ``pipeline`` as a FastAPI endpoint."""

    async def endpoint(request: Request) -> Response:
        return to_response(await pipeline(await to_http_request(request)))

    return endpoint


def mount_routes(app: FastAPI, builder: RouteBuilder) -> None:
    """Register every route of ``builder`` on ``app``.

    Args:
        app: The FastAPI application.
        builder: Routes to mount, each wrapped in its pipeline.
    """
    for route in builder.routes:
        app.add_api_route(
            route.path,
            endpoint_for(builder.create_handler(route)),
            methods=[route.method],
            summary=route.summary,
            include_in_schema=False,
        )
