"""FastAPI application factory.

``create_app`` wires a ``RouteBuilder``'s routes into FastAPI and serves:
- the compiled interface document at ``settings.openapi_url``
- the health check at ``settings.health_url``

FastAPI's own schema generation and docs pages are disabled; the document
served is the one compiled from the routes' schema descriptors.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from hubkit.api.adapter import endpoint_for, mount_routes
from hubkit.api.utils.responses import ORJSONResponse
from hubkit.contract.compiler import (
    ContractCompiler,
    OpenApiConfig,
    ResponseSpec,
    RouteDefinition,
)
from hubkit.contract.routes import RouteBuilder
from hubkit.core.config import Settings, get_settings
from hubkit.core.logging import setup_logging
from hubkit.pipeline.health import HEALTH_RESPONSE_SCHEMA, create_health_handler


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Log application startup and shutdown.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.
    """
    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown complete")


def openapi_config(settings: Settings) -> OpenApiConfig:
    """Build document metadata from settings."""
    return OpenApiConfig(
        title=settings.app_name,
        version=settings.app_version,
        description=settings.app_description,
        servers=settings.servers,
    )


def create_builder(settings: Settings) -> RouteBuilder:
    """Create a route builder configured from settings."""
    return RouteBuilder(
        compiler=ContractCompiler(openapi_config(settings)),
        jwt_config=settings.auth_config.to_jwt_config(),
        enable_logging=settings.log_config.enable_request_logging,
    )


def create_app(
    settings: Settings | None = None, builder: RouteBuilder | None = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().
        builder: Routes to serve. A builder configured from settings (with no
            routes) is used when omitted.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    if builder is None:
        builder = create_builder(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    mount_routes(application, builder)

    compiler = builder.compiler

    if settings.health_url:
        application.add_api_route(
            settings.health_url,
            endpoint_for(
                create_health_handler(
                    enable_logging=settings.log_config.enable_request_logging
                )
            ),
            methods=["GET"],
            include_in_schema=False,
        )
        if compiler is not None:
            compiler.register_route(
                RouteDefinition(
                    method="GET",
                    path=settings.health_url,
                    summary="Health check",
                    tags=("health",),
                    responses={
                        200: ResponseSpec("Service is healthy", HEALTH_RESPONSE_SCHEMA)
                    },
                )
            )

    if settings.openapi_url and compiler is not None:

        async def openapi() -> ORJSONResponse:
            """Serve the compiled interface document."""
            return ORJSONResponse(compiler.generate_document())

        application.add_api_route(
            settings.openapi_url, openapi, methods=["GET"], include_in_schema=False
        )

    return application
