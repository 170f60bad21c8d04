"""Interface document compiler and the route builder feeding it."""

from hubkit.contract.compiler import (
    DEFAULT_SECURITY_SCHEMES,
    ERROR_RESPONSE_SCHEMA,
    ContractCompiler,
    OpenApiConfig,
    ResponseSpec,
    RouteDefinition,
    RouteRegistry,
    generate_document,
)
from hubkit.contract.fragments import render_schema
from hubkit.contract.routes import (
    Route,
    RouteBuilder,
    create_route_handler,
    documented_responses,
    route_definition,
)

__all__ = [
    "DEFAULT_SECURITY_SCHEMES",
    "ERROR_RESPONSE_SCHEMA",
    "ContractCompiler",
    "OpenApiConfig",
    "ResponseSpec",
    "Route",
    "RouteBuilder",
    "RouteDefinition",
    "RouteRegistry",
    "create_route_handler",
    "documented_responses",
    "generate_document",
    "render_schema",
    "route_definition",
]
