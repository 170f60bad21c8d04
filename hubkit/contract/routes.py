"""Route builder: one declaration feeding both the pipeline and the contract.

A ``Route`` names its schemas once. ``RouteBuilder.route`` stores it and
registers the matching ``RouteDefinition`` (with auto-documented error
responses) with a ``ContractCompiler``; ``RouteBuilder.create_handler``
builds the runtime ``Pipeline`` from the very same descriptor objects.

Example::

    builder = RouteBuilder(compiler=compiler, jwt_config=jwt_config)
    builder.route(
        Route(
            method="POST",
            path="/items",
            handler=create_route_handler(create_item, success_status=201),
            body_schema=obj({"name": string(minimum=1)}),
            requires_auth=True,
        )
    )
"""

from collections.abc import Awaitable, Callable, Collection
from dataclasses import dataclass
from typing import Any

from loguru import logger

from hubkit.contract.compiler import (
    ERROR_RESPONSE_SCHEMA,
    ContractCompiler,
    ResponseSpec,
    RouteDefinition,
)
from hubkit.core.exceptions import UnauthorizedError
from hubkit.pipeline.handler import BusinessHandler, Pipeline
from hubkit.pipeline.models import (
    FileField,
    HandlerConfig,
    HandlerContext,
    HttpResponse,
)
from hubkit.schema import ObjectSchema, Schema
from hubkit.security.auth import JwtConfig


@dataclass(frozen=True, slots=True)
class Route:
    """A route declaration: handler, schemas, auth and documentation.

    ``required_roles`` implies ``requires_auth``. ``success_status``
    defaults to 201 for POST and 200 otherwise. ``enable_logging`` of None
    inherits the builder's setting.
    """

    method: str
    path: str
    handler: BusinessHandler
    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()
    body_schema: Schema | None = None
    query_schema: Schema | None = None
    path_schema: Schema | None = None
    form_fields_schema: ObjectSchema | None = None
    file_fields: tuple[FileField, ...] = ()
    response_schema: Schema | None = None
    success_status: int | None = None
    requires_auth: bool = False
    required_roles: Collection[str] = frozenset()
    skip_body_parsing: bool = False
    enable_logging: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "file_fields", tuple(self.file_fields))
        object.__setattr__(
            self, "required_roles", frozenset(str(r) for r in self.required_roles)
        )

    @property
    def needs_auth(self) -> bool:
        return self.requires_auth or bool(self.required_roles)

    @property
    def status(self) -> int:
        if self.success_status is not None:
            return self.success_status
        return 201 if self.method == "POST" else 200

    @property
    def has_input_schema(self) -> bool:
        return (
            any(
                s is not None
                for s in (
                    self.body_schema,
                    self.query_schema,
                    self.path_schema,
                    self.form_fields_schema,
                )
            )
            or bool(self.file_fields)
        )


def documented_responses(route: Route) -> dict[int, ResponseSpec]:
    """Responses documented for ``route``: success plus the errors it can yield."""
    responses = {
        route.status: ResponseSpec("Successful response", route.response_schema)
    }
    if route.needs_auth:
        responses[401] = ResponseSpec("Unauthorized", ERROR_RESPONSE_SCHEMA)
    if route.required_roles:
        responses[403] = ResponseSpec("Forbidden", ERROR_RESPONSE_SCHEMA)
    if route.has_input_schema:
        responses[422] = ResponseSpec("Validation error", ERROR_RESPONSE_SCHEMA)
    return responses


def route_definition(route: Route) -> RouteDefinition:
    """Build the contract registration for ``route``."""
    return RouteDefinition(
        method=route.method,
        path=route.path,
        summary=route.summary,
        description=route.description,
        tags=route.tags,
        body_schema=route.body_schema,
        query_schema=route.query_schema,
        path_schema=route.path_schema,
        form_fields_schema=route.form_fields_schema,
        file_fields=route.file_fields,
        responses=documented_responses(route),
        requires_auth=route.needs_auth,
        required_roles=frozenset(route.required_roles),
    )


class RouteBuilder:
    """Registers routes and builds their request pipelines.

    Args:
        compiler: Compiler receiving a ``RouteDefinition`` per route.
        jwt_config: Token configuration for routes requiring auth.
        enable_logging: Default for per-request completion logging.
    """

    def __init__(
        self,
        compiler: ContractCompiler | None = None,
        jwt_config: JwtConfig | None = None,
        *,
        enable_logging: bool = True,
    ) -> None:
        self.compiler = compiler
        self.jwt_config = jwt_config
        self.enable_logging = enable_logging
        self._routes: dict[tuple[str, str], Route] = {}

    def route(self, route: Route) -> Route:
        """Store ``route`` and document it; a repeated (method, path) replaces it."""
        key = (route.method, route.path)
        if key in self._routes and self.compiler is None:
            logger.warning(
                "Route {} {} registered more than once; replacing earlier definition",
                route.method,
                route.path,
            )
        self._routes[key] = route
        if self.compiler is not None:
            self.compiler.register_route(route_definition(route))
        return route

    def get_route(self, method: str, path: str) -> Route | None:
        return self._routes.get((method.upper(), path))

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes.values())

    def handler_config(self, route: Route) -> HandlerConfig:
        """Translate ``route`` into pipeline configuration.

        Raises:
            ValueError: If the route requires auth and no ``jwt_config`` is set.
        """
        if route.needs_auth and self.jwt_config is None:
            msg = (
                f"Route {route.method} {route.path} requires authentication "
                "but the builder has no jwt_config"
            )
            raise ValueError(msg)

        return HandlerConfig(
            jwt_config=self.jwt_config if route.needs_auth else None,
            required_roles=frozenset(route.required_roles),
            body_schema=route.body_schema,
            query_schema=route.query_schema,
            path_schema=route.path_schema,
            form_fields_schema=route.form_fields_schema,
            file_fields=route.file_fields,
            enable_logging=(
                self.enable_logging
                if route.enable_logging is None
                else route.enable_logging
            ),
            skip_body_parsing=route.skip_body_parsing,
        )

    def create_handler(self, route: Route) -> Pipeline:
        """Build the request pipeline for ``route``."""
        return Pipeline(route.handler, self.handler_config(route))


type ServiceFunction = Callable[..., Awaitable[Any]]


def create_route_handler(
    service_fn: ServiceFunction,
    success_status: int = 200,
    *,
    pass_user: bool = False,
) -> BusinessHandler:
    """Adapt a plain service function into a business handler.

    The service receives the validated body, plus the caller's subject id
    when ``pass_user`` is set; its return value becomes the JSON body.

    Args:
        service_fn: ``async (body) -> result`` or ``async (body, user_id) -> result``.
        success_status: Status of the successful response.
        pass_user: Pass the authenticated subject id as second argument.

    Returns:
        BusinessHandler: The adapted handler.
    """

    async def handler(context: HandlerContext) -> HttpResponse:
        if pass_user:
            if context.principal is None:
                raise UnauthorizedError("Authentication required")
            result = await service_fn(context.body, context.principal.subject_id)
        else:
            result = await service_fn(context.body)
        return HttpResponse(status=success_status, json_body=result)

    return handler
