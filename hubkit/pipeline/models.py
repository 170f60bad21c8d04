"""Request, response and context shapes exchanged with the host runtime.

The host (see ``hubkit.api.adapter``) converts its own request object into an
``HttpRequest`` and turns the returned ``HttpResponse`` back into a wire
response. Business handlers only ever see a ``HandlerContext``.
"""

from collections.abc import Collection, Mapping
from dataclasses import dataclass
from functools import cached_property
from typing import Any
from urllib.parse import urlsplit

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator

from hubkit.core.constants import CORRELATION_ID_HEADER
from hubkit.schema import ObjectSchema, Schema
from hubkit.security.auth import JwtConfig, Principal


class HttpRequest(BaseModel):
    """Inbound request as supplied by the host runtime."""

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    query: dict[str, str | list[str]] = Field(default_factory=dict)
    path_params: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @field_validator("method")
    @classmethod
    def upper_method(cls, v: str) -> str:
        """Normalize the method to upper case."""
        return v.upper()

    @field_validator("headers")
    @classmethod
    def lower_header_names(cls, v: dict[str, str]) -> dict[str, str]:
        """Store header names lower-cased for case-insensitive lookup."""
        return {name.lower(): value for name, value in v.items()}

    @property
    def path(self) -> str:
        """The path component of the URL."""
        return urlsplit(self.url).path or "/"

    def header(self, name: str) -> str | None:
        """Look up a header case-insensitively.

        Args:
            name: Header name in any case.

        Returns:
            str | None: The header value, or None when absent.
        """
        return self.headers.get(name.lower())


class HttpResponse(BaseModel):
    """Outbound response: a status, headers and a JSON or raw body.

    ``json_body`` is used when it was supplied (even when it is ``None``,
    which serializes as ``null``); otherwise ``body`` carries raw bytes.
    """

    model_config = ConfigDict(frozen=True)

    status: int = 200
    headers: dict[str, str] = Field(default_factory=dict)
    json_body: Any = None
    body: bytes | None = None

    @property
    def has_json_body(self) -> bool:
        """Whether the response carries a structured body."""
        return "json_body" in self.model_fields_set

    @cached_property
    def json_bytes(self) -> bytes:
        """``json_body`` encoded with orjson, computed once.

        Raises:
            TypeError: If the body holds values orjson cannot serialize
                (``Decimal``, sets, non-string keys).
        """
        content = self.json_body
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json")
        return orjson.dumps(content)


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """One file part of a multipart request."""

    field_name: str
    filename: str | None
    content_type: str | None
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class FileField:
    """A file input accepted by a multipart route.

    Attributes:
        name: Form field name.
        description: Documentation for the field.
        required: Whether at least one file must be sent under ``name``.
        multiple: Whether several files may be sent under ``name``.
    """

    name: str
    description: str | None = None
    required: bool = True
    multiple: bool = False


@dataclass(frozen=True, slots=True)
class HandlerContext:
    """Everything a business handler may read about the current request.

    Values are already validated (and, for query and path, coerced). Parts
    without a schema are ``None``.
    """

    request: HttpRequest
    correlation_id: str
    body: Any = None
    query: Any = None
    path_params: Any = None
    principal: Principal | None = None
    files: tuple[UploadedFile, ...] = ()
    form_fields: Mapping[str, Any] | None = None

    def files_for(self, name: str) -> list[UploadedFile]:
        """Return the uploaded files sent under ``name``."""
        return [f for f in self.files if f.field_name == name]


@dataclass(frozen=True, slots=True)
class HandlerConfig:
    """Per-route pipeline configuration.

    Raises:
        ValueError: If roles are required without a ``jwt_config``.
    """

    jwt_config: JwtConfig | None = None
    required_roles: frozenset[str] = frozenset()
    body_schema: Schema | None = None
    query_schema: Schema | None = None
    path_schema: Schema | None = None
    form_fields_schema: ObjectSchema | None = None
    file_fields: tuple[FileField, ...] = ()
    enable_logging: bool = False
    skip_body_parsing: bool = False
    correlation_header: str = CORRELATION_ID_HEADER

    def __post_init__(self) -> None:
        object.__setattr__(self, "required_roles", _frozen(self.required_roles))
        object.__setattr__(self, "file_fields", tuple(self.file_fields))
        object.__setattr__(self, "correlation_header", self.correlation_header.lower())
        if self.required_roles and self.jwt_config is None:
            msg = "required_roles need a jwt_config to authenticate the caller"
            raise ValueError(msg)

    @property
    def requires_auth(self) -> bool:
        return self.jwt_config is not None

    @property
    def accepts_multipart(self) -> bool:
        return bool(self.file_fields) or self.form_fields_schema is not None


def _frozen(roles: Collection[str]) -> frozenset[str]:
    return frozenset(str(role) for role in roles)


@dataclass(frozen=True, slots=True)
class PipelineState:
    """The value threaded through the pipeline stages for one request."""

    request: HttpRequest
    config: HandlerConfig
    correlation_id: str = ""
    principal: Principal | None = None
    body: Any = None
    query: Any = None
    path_params: Any = None
    files: tuple[UploadedFile, ...] = ()
    form_fields: Mapping[str, Any] | None = None

    def to_context(self) -> HandlerContext:
        """Freeze the state into the context handed to the business handler."""
        return HandlerContext(
            request=self.request,
            correlation_id=self.correlation_id,
            body=self.body,
            query=self.query,
            path_params=self.path_params,
            principal=self.principal,
            files=self.files,
            form_fields=self.form_fields,
        )
