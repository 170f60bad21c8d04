"""Fixtures for integration tests.

The application declares a small user service the way a caller of hub-kit
would: routes with schemas, role requirements and an upload endpoint.
"""

import sys
from collections.abc import AsyncGenerator, Generator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from loguru import logger

from hubkit import FileField, Route, RouteBuilder, create_route_handler
from hubkit.api.main import create_app, create_builder
from hubkit.core.config import AuthConfig, LogConfig, Settings
from hubkit.core.logging import _state
from hubkit.schema import integer, obj, optional, string
from hubkit.security.auth import JwtConfig
from tests.integration.users_service import USER_SCHEMA, UserStore


@pytest.fixture
def store() -> UserStore:
    """A fresh in-memory user store."""
    return UserStore()


@pytest.fixture
def settings(jwt_config: JwtConfig) -> Settings:
    """Application settings signing tokens with the test secret."""
    return Settings(
        app_name="Users",
        app_version="1.0.0",
        app_description="User service",
        auth_config=AuthConfig(jwt_secret=jwt_config.secret),
        log_config=LogConfig(log_level="INFO"),
    )


@pytest.fixture
def builder(settings: Settings, store: UserStore) -> RouteBuilder:
    """Routes of the user service."""
    builder = create_builder(settings)
    builder.route(
        Route(
            method="POST",
            path="/users",
            handler=create_route_handler(store.signup, success_status=201),
            summary="Sign up",
            tags=("users",),
            body_schema=obj(
                {"email": string(format="email"), "password": string(minimum=1)}
            ),
            response_schema=USER_SCHEMA,
        )
    )
    builder.route(
        Route(
            method="GET",
            path="/users",
            handler=store.list_users,
            summary="List users",
            tags=("users",),
            query_schema=obj({"limit": optional(integer(minimum=1), default=10)}),
            requires_auth=True,
        )
    )
    builder.route(
        Route(
            method="DELETE",
            path="/users/{user_id}",
            handler=store.delete_user,
            summary="Delete user",
            tags=("users",),
            success_status=204,
            required_roles=["admin"],
        )
    )
    builder.route(
        Route(
            method="POST",
            path="/users/me/avatar",
            handler=store.upload_avatar,
            summary="Upload avatar",
            form_fields_schema=obj({"caption": optional(string(maximum=50))}),
            file_fields=(FileField("avatar", "Avatar image"),),
            requires_auth=True,
            success_status=200,
        )
    )
    return builder


@pytest.fixture
def log_records(app: FastAPI) -> Generator[list[dict[str, Any]]]:
    """Capture loguru records after the application configured logging.

    Args:
        app: The application, so its logging setup runs first.

    Yields:
        list[dict[str, Any]]: The captured records, in emission order.
    """
    _ = app
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level=0)
    yield records
    logger.remove(handler_id)


@pytest.fixture
def app(settings: Settings, builder: RouteBuilder) -> Generator[FastAPI]:
    """The user service application.

    Yields:
        FastAPI: The configured application.
    """
    _state.configured = False
    yield create_app(settings, builder)
    _state.configured = False
    _state.sensitive_fields = ()
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client talking to the application in-process.

    Yields:
        AsyncClient: Client bound to the application.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
