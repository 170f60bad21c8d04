"""Composable, immutable descriptions of data shapes.

A ``Schema`` is a closed union of seven node kinds. The same descriptor object
is handed to the request pipeline (to validate requests at runtime) and to the
contract compiler (to document the API), so a shape is described exactly once.

Descriptors are frozen after construction: mappings are wrapped in read-only
proxies and sequences become tuples. They can be shared freely between route
registrations and read concurrently.

Building descriptors is usually done through the helper functions::

    from hubkit.schema import obj, optional, string

    login_body = obj({
        "email": string(format="email"),
        "password": string(minimum=1),
        "remember": optional(boolean(), default=False),
    })

Cyclic descriptors cannot be constructed through this API and are not
supported by the validator or the renderer.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Final


class _Missing:
    """Marker for an absent value (a key not present at all)."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


class PrimitiveKind(StrEnum):
    """Base types a primitive descriptor can describe."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"


class StringFormat(StrEnum):
    """String formats understood by the validator."""

    EMAIL = "email"
    UUID = "uuid"
    DATE_TIME = "date-time"
    DATE = "date"
    URI = "uri"


# Accepted spellings for formats
_FORMAT_ALIASES: Final[dict[str, StringFormat]] = {
    "datetime": StringFormat.DATE_TIME,
    "url": StringFormat.URI,
}


@dataclass(frozen=True, slots=True)
class Constraints:
    """Constraints checked once the base type of a primitive matches.

    ``minimum``/``maximum`` bound the length of strings and the value of
    numbers. ``pattern`` is searched (not anchored) in strings; it is compiled
    here, so an invalid expression fails when the descriptor is built.
    """

    minimum: float | None = None
    maximum: float | None = None
    pattern: str | None = None
    format: StringFormat | None = None
    compiled_pattern: re.Pattern[str] | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.pattern is None:
            return
        try:
            compiled = re.compile(self.pattern)
        except re.error as e:
            msg = f"Invalid pattern {self.pattern!r}: {e}"
            raise ValueError(msg) from e
        object.__setattr__(self, "compiled_pattern", compiled)


@dataclass(frozen=True, slots=True)
class PrimitiveSchema:
    """A string, number, integer or boolean value."""

    kind: PrimitiveKind
    constraints: Constraints = field(default_factory=Constraints)
    description: str | None = None


@dataclass(frozen=True, slots=True)
class EnumSchema:
    """A value that must equal one of a fixed, ordered set of literals."""

    values: tuple[Any, ...]
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.values:
            msg = "EnumSchema requires at least one value"
            raise ValueError(msg)
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True, slots=True)
class ArraySchema:
    """A list whose elements all match ``item``."""

    item: "Schema"
    min_items: int | None = None
    max_items: int | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class ObjectSchema:
    """A mapping with named, ordered properties.

    ``required`` must be a subset of the property names. Unknown keys in a
    validated value are dropped from the result.

    Instances are immutable but not hashable: ``properties`` is held in a
    read-only mapping proxy.
    """

    __hash__ = None  # type: ignore[assignment]

    properties: Mapping[str, "Schema"]
    required: frozenset[str] = frozenset()
    description: str | None = None

    def __post_init__(self) -> None:
        properties = MappingProxyType(dict(self.properties))
        required = frozenset(self.required)
        unknown = required - properties.keys()
        if unknown:
            msg = f"Required names are not properties: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        object.__setattr__(self, "properties", properties)
        object.__setattr__(self, "required", required)

    def is_required(self, name: str) -> bool:
        """Whether a value must supply ``name``.

        Optional-wrapped properties are never required, even when listed.
        """
        return name in self.required and not isinstance(
            self.properties[name], OptionalSchema
        )


@dataclass(frozen=True, slots=True)
class OptionalSchema:
    """A value that may be absent; ``default`` fills in for an absent value."""

    inner: "Schema"
    default: Any = MISSING


@dataclass(frozen=True, slots=True)
class NullableSchema:
    """A value that may be an explicit null."""

    inner: "Schema"


@dataclass(frozen=True, slots=True)
class UnionSchema:
    """A value that must match at least one of ``variants``."""

    variants: tuple["Schema", ...]
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.variants:
            msg = "UnionSchema requires at least one variant"
            raise ValueError(msg)
        object.__setattr__(self, "variants", tuple(self.variants))


type Schema = (
    ObjectSchema
    | ArraySchema
    | PrimitiveSchema
    | EnumSchema
    | OptionalSchema
    | NullableSchema
    | UnionSchema
)


def _normalize_format(value: str | None) -> StringFormat | None:
    if value is None:
        return None
    return _FORMAT_ALIASES.get(value) or StringFormat(value)


def string(
    *,
    minimum: int | None = None,
    maximum: int | None = None,
    pattern: str | None = None,
    format: str | None = None,  # noqa: A002 - mirrors the contract keyword
    description: str | None = None,
) -> PrimitiveSchema:
    """Describe a string, optionally bounded in length and formatted."""
    return PrimitiveSchema(
        PrimitiveKind.STRING,
        Constraints(minimum, maximum, pattern, _normalize_format(format)),
        description,
    )


def number(
    *,
    minimum: float | None = None,
    maximum: float | None = None,
    description: str | None = None,
) -> PrimitiveSchema:
    """Describe a number (integers and floats, never booleans)."""
    return PrimitiveSchema(
        PrimitiveKind.NUMBER, Constraints(minimum, maximum), description
    )


def integer(
    *,
    minimum: int | None = None,
    maximum: int | None = None,
    description: str | None = None,
) -> PrimitiveSchema:
    """Describe a whole number."""
    return PrimitiveSchema(
        PrimitiveKind.INTEGER, Constraints(minimum, maximum), description
    )


def boolean(*, description: str | None = None) -> PrimitiveSchema:
    """Describe a boolean."""
    return PrimitiveSchema(PrimitiveKind.BOOLEAN, Constraints(), description)


def enum(*values: Any, description: str | None = None) -> EnumSchema:  # noqa: ANN401
    """Describe a value restricted to ``values`` (compared strictly)."""
    return EnumSchema(tuple(values), description)


def array(
    item: Schema,
    *,
    min_items: int | None = None,
    max_items: int | None = None,
    description: str | None = None,
) -> ArraySchema:
    """Describe a list of ``item``."""
    return ArraySchema(item, min_items, max_items, description)


def obj(
    properties: Mapping[str, Schema],
    *,
    required: frozenset[str] | set[str] | None = None,
    description: str | None = None,
) -> ObjectSchema:
    """Describe an object.

    When ``required`` is omitted every property that is not wrapped in
    ``optional()`` is required.
    """
    if required is None:
        required = {
            name
            for name, schema in properties.items()
            if not isinstance(schema, OptionalSchema)
        }
    return ObjectSchema(properties, frozenset(required), description)


def optional(inner: Schema, *, default: Any = MISSING) -> OptionalSchema:  # noqa: ANN401
    """Allow ``inner`` to be absent."""
    return OptionalSchema(inner, default)


def nullable(inner: Schema) -> NullableSchema:
    """Allow ``inner`` to be null."""
    return NullableSchema(inner)


def union(*variants: Schema, description: str | None = None) -> UnionSchema:
    """Accept any one of ``variants``."""
    return UnionSchema(tuple(variants), description)
