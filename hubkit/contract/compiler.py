"""Interface document compiler.

Routes are collected in a caller-owned ``RouteRegistry`` and rendered into
an OpenAPI 3.0 document by ``generate_document``, a pure function of the
configuration, the registry and the security schemes. ``ContractCompiler``
bundles the three for convenience.

Key components:
- **RouteDefinition**: Everything documented about one (path, method) pair
- **RouteRegistry**: Ordered registrations, last write wins per (path, method)
- **generate_document**: Deterministic document rendering
- **ERROR_RESPONSE_SCHEMA**: The error envelope every operation may return
"""

import copy
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

from loguru import logger
from pydantic import BaseModel, Field

from hubkit.contract.fragments import render_schema
from hubkit.core.config import ServerConfig
from hubkit.core.constants import (
    BEARER_SECURITY_SCHEME,
    JSON_CONTENT_TYPE,
    MULTIPART_CONTENT_TYPE,
    OPENAPI_VERSION,
)
from hubkit.core.exceptions import ErrorCode
from hubkit.core.types import Fragment
from hubkit.pipeline.models import FileField
from hubkit.schema import (
    NullableSchema,
    ObjectSchema,
    OptionalSchema,
    Schema,
    array,
    enum,
    obj,
    optional,
    string,
    union,
)

PATH_PARAM_PATTERN: Final = re.compile(r"\{([^{}]+)\}")

ERROR_RESPONSE_SCHEMA: Final = obj(
    {
        "error": obj(
            {
                "code": enum(*(code.value for code in ErrorCode)),
                "message": string(),
                "details": optional(
                    union(
                        array(obj({"path": string(), "message": string()})),
                        obj({}),
                    )
                ),
            }
        ),
        "correlationId": string(),
    },
    description="Error response",
)

DEFAULT_SECURITY_SCHEMES: Final[Mapping[str, Fragment]] = MappingProxyType(
    {
        BEARER_SECURITY_SCHEME: {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
)


class OpenApiConfig(BaseModel):
    """Document-level metadata copied verbatim into ``info`` and ``servers``."""

    title: str = Field(..., description="API title")
    version: str = Field(..., description="API version")
    description: str | None = Field(default=None, description="API description")
    servers: list[ServerConfig] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ResponseSpec:
    """One documented response of an operation."""

    description: str
    schema: Schema | None = None


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """Documentation for one operation.

    Immutable once constructed; ``responses`` maps status codes to
    ``ResponseSpec`` in the order they should be documented.
    """

    method: str
    path: str
    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()
    body_schema: Schema | None = None
    query_schema: Schema | None = None
    path_schema: Schema | None = None
    form_fields_schema: ObjectSchema | None = None
    file_fields: tuple[FileField, ...] = ()
    responses: Mapping[int, ResponseSpec] = field(default_factory=dict)
    requires_auth: bool = False
    required_roles: frozenset[str] = frozenset()
    security_scheme: str = BEARER_SECURITY_SCHEME

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "file_fields", tuple(self.file_fields))
        object.__setattr__(self, "responses", MappingProxyType(dict(self.responses)))
        object.__setattr__(
            self, "required_roles", frozenset(str(r) for r in self.required_roles)
        )

    @property
    def key(self) -> tuple[str, str]:
        return (self.path, self.method)


class RouteRegistry:
    """Ordered collection of route definitions keyed by (path, method).

    Registering the same pair again replaces the definition in place (it
    keeps its original position) and logs a warning.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], RouteDefinition] = {}

    def register(self, route: RouteDefinition) -> None:
        """Add or replace ``route``."""
        if route.key in self._routes:
            logger.warning(
                "Route {} {} registered more than once; replacing earlier definition",
                route.method,
                route.path,
                method=route.method,
                path=route.path,
            )
        self._routes[route.key] = route

    def get(self, method: str, path: str) -> RouteDefinition | None:
        return self._routes.get((path, method.upper()))

    def __iter__(self) -> Iterator[RouteDefinition]:
        return iter(tuple(self._routes.values()))

    def __len__(self) -> int:
        return len(self._routes)


def generate_document(
    config: OpenApiConfig,
    registry: RouteRegistry,
    security_schemes: Mapping[str, Fragment] = DEFAULT_SECURITY_SCHEMES,
) -> dict[str, Any]:
    """Render the interface document.

    Paths and operations follow registration order. Every call builds a new
    structure, so repeated calls without new registrations are equal.

    Args:
        config: Document metadata.
        registry: The routes to document.
        security_schemes: Reusable security schemes by name.

    Returns:
        dict[str, Any]: The OpenAPI 3.0 document.
    """
    info: dict[str, Any] = {"title": config.title, "version": config.version}
    if config.description:
        info["description"] = config.description

    paths: dict[str, dict[str, Any]] = {}
    for route in registry:
        paths.setdefault(route.path, {})[route.method.lower()] = _operation(route)

    return {
        "openapi": OPENAPI_VERSION,
        "info": info,
        "servers": [server.model_dump(exclude_none=True) for server in config.servers],
        "paths": paths,
        "components": {"securitySchemes": copy.deepcopy(dict(security_schemes))},
    }


def _object_of(schema: Schema | None) -> ObjectSchema | None:
    while isinstance(schema, (OptionalSchema, NullableSchema)):
        schema = schema.inner
    return schema if isinstance(schema, ObjectSchema) else None


def _parameter(name: str, location: str, prop: Schema | None, required: bool) -> Fragment:  # noqa: FBT001
    schema = render_schema(prop) if prop is not None else {"type": "string"}
    parameter: Fragment = {"name": name, "in": location, "required": required}
    if "description" in schema:
        parameter["description"] = schema["description"]
    parameter["schema"] = schema
    return parameter


def _parameters(route: RouteDefinition) -> list[Fragment]:
    parameters: list[Fragment] = []

    path_object = _object_of(route.path_schema)
    path_props = path_object.properties if path_object else {}
    names = list(dict.fromkeys(PATH_PARAM_PATTERN.findall(route.path)))
    names.extend(name for name in path_props if name not in names)
    # Path parameters are always required by the template
    parameters.extend(
        _parameter(name, "path", path_props.get(name), required=True) for name in names
    )

    query_object = _object_of(route.query_schema)
    if query_object is not None:
        parameters.extend(
            _parameter(name, "query", prop, query_object.is_required(name))
            for name, prop in query_object.properties.items()
        )
    return parameters


def _file_fragment(file_field: FileField) -> Fragment:
    binary: Fragment = {"type": "string", "format": "binary"}
    fragment = {"type": "array", "items": binary} if file_field.multiple else binary
    fragment["description"] = file_field.description or "File to upload"
    return fragment


def _request_body(route: RouteDefinition) -> Fragment | None:
    if route.file_fields or route.form_fields_schema is not None:
        properties: dict[str, Fragment] = {}
        required: list[str] = []
        for file_field in route.file_fields:
            properties[file_field.name] = _file_fragment(file_field)
            if file_field.required:
                required.append(file_field.name)

        form_object = _object_of(route.form_fields_schema)
        if form_object is not None:
            for name, prop in form_object.properties.items():
                properties[name] = render_schema(prop)
                if form_object.is_required(name):
                    required.append(name)

        schema: Fragment = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
        return {
            "required": True,
            "content": {MULTIPART_CONTENT_TYPE: {"schema": schema}},
        }

    if route.body_schema is None:
        return None
    return {
        "required": not isinstance(route.body_schema, OptionalSchema),
        "content": {JSON_CONTENT_TYPE: {"schema": render_schema(route.body_schema)}},
    }


def _responses(route: RouteDefinition) -> dict[str, Fragment]:
    if not route.responses:
        return {"200": {"description": "Success"}}

    responses: dict[str, Fragment] = {}
    for status, spec in route.responses.items():
        response: Fragment = {"description": spec.description}
        if spec.schema is not None:
            response["content"] = {
                JSON_CONTENT_TYPE: {"schema": render_schema(spec.schema)}
            }
        responses[str(status)] = response
    return responses


def _operation(route: RouteDefinition) -> Fragment:
    operation: Fragment = {}
    if route.summary:
        operation["summary"] = route.summary
    if route.description:
        operation["description"] = route.description
    if route.tags:
        operation["tags"] = list(route.tags)

    parameters = _parameters(route)
    if parameters:
        operation["parameters"] = parameters

    request_body = _request_body(route)
    if request_body is not None:
        operation["requestBody"] = request_body

    operation["responses"] = _responses(route)
    if route.requires_auth:
        operation["security"] = [{route.security_scheme: []}]
    return operation


class ContractCompiler:
    """Accumulates route registrations and renders the interface document.

    A ``bearerAuth`` scheme (HTTP bearer, JWT format) is registered by
    default; ``add_security_scheme`` adds or replaces schemes by name.

    Args:
        config: Document metadata.
        registry: Registry to render; a new one is created when omitted.
    """

    def __init__(
        self, config: OpenApiConfig, registry: RouteRegistry | None = None
    ) -> None:
        self.config = config
        self.registry = registry if registry is not None else RouteRegistry()
        self._security_schemes: dict[str, Fragment] = copy.deepcopy(
            dict(DEFAULT_SECURITY_SCHEMES)
        )

    def register_route(self, route: RouteDefinition) -> None:
        """Register ``route``; a repeated (path, method) replaces the earlier one."""
        self.registry.register(route)

    def add_security_scheme(self, name: str, definition: Mapping[str, Any]) -> None:
        """Register a reusable security scheme referenced by ``name``."""
        self._security_schemes[name] = copy.deepcopy(dict(definition))

    @property
    def security_schemes(self) -> Mapping[str, Fragment]:
        return MappingProxyType(self._security_schemes)

    def generate_document(self) -> dict[str, Any]:
        """Render the current registrations. See ``generate_document``."""
        return generate_document(self.config, self.registry, self._security_schemes)
