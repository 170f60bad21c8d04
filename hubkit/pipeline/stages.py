"""Individual request pipeline stages.

Each stage is an async function ``(PipelineState) -> PipelineState |
HttpResponse``. Returning a state hands control to the next stage; returning
a response ends the request there. Stages skip themselves when the route's
``HandlerConfig`` does not ask for them, so the default stage list can be
used for every route.

Order (see ``DEFAULT_STAGES``):

1. ``resolve_correlation`` - reuse or generate the correlation identifier
2. ``authenticate_request`` - verify the bearer token into a ``Principal``
3. ``authorize_request`` - check the principal's role
4. ``validate_body`` - parse and validate JSON or multipart bodies
5. ``validate_query`` - validate the query map (with coercion)
6. ``validate_path`` - validate path captures (with coercion)
"""

import dataclasses
from collections import Counter
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any, Final

import orjson
from starlette.datastructures import Headers, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from hubkit.core.constants import (
    AUTHORIZATION_HEADER,
    CONTENT_TYPE_HEADER,
    MULTIPART_CONTENT_TYPE,
)
from hubkit.core.context import generate_correlation_id
from hubkit.core.exceptions import (
    BadRequestError,
    HubKitError,
    UnauthorizedError,
    ValidationError,
)
from hubkit.pipeline.models import HttpResponse, PipelineState, UploadedFile
from hubkit.pipeline.responses import build_error_response
from hubkit.schema import MISSING, Invalid, Schema, Violation, validate
from hubkit.security.auth import authenticate, authorize, extract_bearer_token

type StageResult = PipelineState | HttpResponse
type Stage = Callable[[PipelineState], Awaitable[StageResult]]

VALIDATION_FAILED_MESSAGE: Final = "Request validation failed"


def reject(state: PipelineState, exc: HubKitError) -> HttpResponse:
    """Terminate the request with the error response for ``exc``."""
    return build_error_response(
        exc, state.correlation_id, state.config.correlation_header, state.request
    )


async def resolve_correlation(state: PipelineState) -> StageResult:
    """Read the inbound correlation identifier or generate a new one."""
    inbound = state.request.header(state.config.correlation_header)
    correlation_id = inbound.strip() if inbound and inbound.strip() else None
    return dataclasses.replace(
        state, correlation_id=correlation_id or generate_correlation_id()
    )


async def authenticate_request(state: PipelineState) -> StageResult:
    """Authenticate the caller when the route has a ``jwt_config``."""
    jwt_config = state.config.jwt_config
    if jwt_config is None:
        return state

    header = state.request.header(AUTHORIZATION_HEADER)
    try:
        if not header:
            raise UnauthorizedError("Missing authorization header")
        token = extract_bearer_token(header)
        if token is None:
            raise UnauthorizedError("Invalid authorization header format")
        principal = authenticate(token, jwt_config)
    except UnauthorizedError as exc:
        return reject(state, exc)

    return dataclasses.replace(state, principal=principal)


async def authorize_request(state: PipelineState) -> StageResult:
    """Check the principal against the route's required roles."""
    if not state.config.required_roles:
        return state
    if state.principal is None:
        return reject(state, UnauthorizedError("Authentication required"))

    try:
        authorize(state.principal, state.config.required_roles)
    except HubKitError as exc:
        return reject(state, exc)
    return state


def _validated(schema: Schema, value: Any, *, coerce: bool = False) -> Any:  # noqa: ANN401
    outcome = validate(schema, value, coerce=coerce)
    if isinstance(outcome, Invalid):
        raise ValidationError(VALIDATION_FAILED_MESSAGE, outcome.violations)
    return None if outcome.value is MISSING else outcome.value


async def validate_body(state: PipelineState) -> StageResult:
    """Parse the body and validate it against the route's schemas.

    Multipart routes (``file_fields`` or ``form_fields_schema``) parse form
    data; every other route with a ``body_schema`` parses JSON. An empty
    body counts as absent. Unreadable bodies yield 400, schema violations 422.
    """
    config = state.config
    if config.skip_body_parsing:
        return state

    try:
        if config.accepts_multipart:
            return await _validate_multipart(state)
        if config.body_schema is None:
            return state

        raw = state.request.body
        if raw.strip():
            try:
                parsed: Any = orjson.loads(raw)
            except orjson.JSONDecodeError as e:
                raise BadRequestError("Request body must be valid JSON", cause=e) from e
        else:
            parsed = MISSING
        body = _validated(config.body_schema, parsed)
    except HubKitError as exc:
        return reject(state, exc)

    return dataclasses.replace(state, body=body)


async def _single_chunk(body: bytes) -> AsyncGenerator[bytes]:
    yield body


async def _validate_multipart(state: PipelineState) -> StageResult:
    config = state.config
    content_type = state.request.header(CONTENT_TYPE_HEADER) or ""
    if not content_type.lower().startswith(MULTIPART_CONTENT_TYPE):
        raise BadRequestError("Content-Type must be multipart/form-data")

    parser = MultiPartParser(
        Headers({CONTENT_TYPE_HEADER: content_type}),
        _single_chunk(state.request.body),
    )
    try:
        form = await parser.parse()
    except (MultiPartException, KeyError, ValueError) as e:
        raise BadRequestError("Invalid multipart/form-data request", cause=e) from e

    files: list[UploadedFile] = []
    fields: dict[str, str | list[str]] = {}
    try:
        for name, item in form.multi_items():
            if isinstance(item, UploadFile):
                files.append(
                    UploadedFile(
                        field_name=name,
                        filename=item.filename,
                        content_type=item.content_type,
                        content=await item.read(),
                    )
                )
                continue
            existing = fields.get(name)
            if existing is None:
                fields[name] = item
            elif isinstance(existing, list):
                existing.append(item)
            else:
                fields[name] = [existing, item]
    finally:
        await form.close()

    violations: list[Violation] = []
    form_fields: Any = fields
    if config.form_fields_schema is not None:
        outcome = validate(config.form_fields_schema, fields, coerce=True)
        if isinstance(outcome, Invalid):
            violations.extend(outcome.violations)
        else:
            form_fields = outcome.value

    received = Counter(f.field_name for f in files)
    for field in config.file_fields:
        if field.required and not received[field.name]:
            violations.append(Violation(field.name, f"{field.name} is required"))
        elif not field.multiple and received[field.name] > 1:
            violations.append(
                Violation(field.name, f"{field.name} accepts a single file")
            )
    if violations:
        raise ValidationError(VALIDATION_FAILED_MESSAGE, violations)

    return dataclasses.replace(state, files=tuple(files), form_fields=form_fields)


async def validate_query(state: PipelineState) -> StageResult:
    """Validate the query map, coercing text to the declared types."""
    if state.config.query_schema is None:
        return state
    try:
        query = _validated(state.config.query_schema, state.request.query, coerce=True)
    except HubKitError as exc:
        return reject(state, exc)
    return dataclasses.replace(state, query=query)


async def validate_path(state: PipelineState) -> StageResult:
    """Validate path-template captures, coercing text to the declared types."""
    if state.config.path_schema is None:
        return state
    try:
        path_params = _validated(
            state.config.path_schema, state.request.path_params, coerce=True
        )
    except HubKitError as exc:
        return reject(state, exc)
    return dataclasses.replace(state, path_params=path_params)


DEFAULT_STAGES: Final[tuple[Stage, ...]] = (
    resolve_correlation,
    authenticate_request,
    authorize_request,
    validate_body,
    validate_query,
    validate_path,
)
