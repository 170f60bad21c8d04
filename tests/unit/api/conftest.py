"""Fixtures for host adapter tests."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from hubkit.api.main import create_app, create_builder
from hubkit.contract.routes import Route, RouteBuilder
from hubkit.core.config import AuthConfig, LogConfig, Settings
from hubkit.pipeline.models import HandlerContext, HttpResponse
from hubkit.schema import integer, obj, optional, string
from hubkit.security.auth import JwtConfig


async def get_item(context: HandlerContext) -> HttpResponse:
    """Echo the validated path and query values."""
    return HttpResponse(
        json_body={"id": context.path_params["item_id"], "query": context.query}
    )


async def create_item(context: HandlerContext) -> HttpResponse:
    """Echo the validated body with the caller's subject."""
    subject = context.principal.subject_id if context.principal else None
    return HttpResponse(status=201, json_body={"item": context.body, "owner": subject})


@pytest.fixture
def settings(jwt_config: JwtConfig) -> Settings:
    """Settings with token verification and quiet logging.

    Returns:
        Settings: Application settings for tests.
    """
    return Settings(
        app_name="Test API",
        app_version="9.9.9",
        auth_config=AuthConfig(jwt_secret=jwt_config.secret),
        log_config=LogConfig(log_level="WARNING", enable_request_logging=False),
    )


@pytest.fixture
def builder(settings: Settings) -> RouteBuilder:
    """A builder with one public and one protected route."""
    builder = create_builder(settings)
    builder.route(
        Route(
            method="GET",
            path="/items/{item_id}",
            handler=get_item,
            summary="Get item",
            path_schema=obj({"item_id": integer(minimum=1)}),
            query_schema=obj({"verbose": optional(string())}),
        )
    )
    builder.route(
        Route(
            method="POST",
            path="/items",
            handler=create_item,
            summary="Create item",
            body_schema=obj({"name": string(minimum=1)}),
            required_roles=["admin"],
        )
    )
    return builder


@pytest.fixture
def app(
    settings: Settings, builder: RouteBuilder, reset_logging_state: None
) -> FastAPI:
    """The application under test."""
    _ = reset_logging_state
    return create_app(settings, builder)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client talking to ``app`` in-process.

    Yields:
        AsyncClient: Client bound to the test application.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
