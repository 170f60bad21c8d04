"""Validation of raw values against schema descriptors.

``validate`` never raises for bad input: every problem becomes a
``Violation`` and the whole value is checked in one pass, so a client sees
every correction it needs at once. The function is pure; descriptors are
only read.

Query strings and path captures arrive as text. Passing ``coerce=True``
converts strings to integers, numbers and booleans where the descriptor asks
for them, and wraps a lone value into a list for array descriptors.
"""

import copy
import math
import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Final, assert_never
from urllib.parse import urlsplit

from hubkit.schema.descriptors import (
    MISSING,
    ArraySchema,
    EnumSchema,
    NullableSchema,
    ObjectSchema,
    OptionalSchema,
    PrimitiveKind,
    PrimitiveSchema,
    Schema,
    StringFormat,
    UnionSchema,
)

EMAIL_PATTERN: Final = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
DATE_PATTERN: Final = re.compile(r"^\d{4}-\d{2}-\d{2}$")
INTEGER_PATTERN: Final = re.compile(r"^[+-]?\d+$")
_ARTICLES: Final = {
    PrimitiveKind.STRING: "a",
    PrimitiveKind.NUMBER: "a",
    PrimitiveKind.INTEGER: "an",
    PrimitiveKind.BOOLEAN: "a",
}


@dataclass(frozen=True, slots=True)
class Violation:
    """One validation failure, identified by dotted field path."""

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Render the violation as it appears in error details."""
        return {"path": self.path, "message": self.message}


@dataclass(frozen=True, slots=True)
class Valid:
    """Successful outcome carrying the validated (and coerced) value."""

    value: Any

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Invalid:
    """Failed outcome carrying every violation, in discovery order."""

    violations: tuple[Violation, ...]

    @property
    def is_valid(self) -> bool:
        return False


type Outcome = Valid | Invalid


def validate(
    schema: Schema,
    value: Any = MISSING,  # noqa: ANN401
    *,
    coerce: bool = False,
) -> Outcome:
    """Validate ``value`` against ``schema``.

    Args:
        schema: The descriptor to validate against.
        value: The raw value; ``MISSING`` means absent.
        coerce: Convert text to the primitive types the descriptor expects.

    Returns:
        Outcome: ``Valid`` with the cleaned value, or ``Invalid`` with all
            violations.
    """
    violations: list[Violation] = []
    result = _validate(schema, value, "", coerce, violations)
    if violations:
        return Invalid(tuple(violations))
    return Valid(result)


def _join(path: str, segment: str | int) -> str:
    return f"{path}.{segment}" if path else str(segment)


def _label(path: str) -> str:
    return path or "value"


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


def _literal_equal(expected: object, actual: object) -> bool:
    # True == 1 in Python; literals of different JSON types never match
    if isinstance(expected, bool) or isinstance(actual, bool):
        return (
            isinstance(expected, bool)
            and isinstance(actual, bool)
            and expected == actual
        )
    return expected == actual


def _validate(
    schema: Schema,
    value: Any,  # noqa: ANN401
    path: str,
    coerce: bool,  # noqa: FBT001
    violations: list[Violation],
) -> Any:  # noqa: ANN401
    match schema:
        case OptionalSchema(inner=inner, default=default):
            if value is MISSING:
                return MISSING if default is MISSING else copy.deepcopy(default)
            return _validate(inner, value, path, coerce, violations)

        case NullableSchema(inner=inner):
            if value is None:
                return None
            return _validate(inner, value, path, coerce, violations)

        case _ if value is MISSING:
            violations.append(Violation(path, f"{_label(path)} is required"))
            return MISSING

        case ObjectSchema():
            return _validate_object(schema, value, path, coerce, violations)

        case ArraySchema():
            return _validate_array(schema, value, path, coerce, violations)

        case PrimitiveSchema():
            return _validate_primitive(schema, value, path, coerce, violations)

        case EnumSchema(values=values):
            for candidate in values:
                if _literal_equal(candidate, value) or (
                    coerce and isinstance(value, str) and _text_matches(candidate, value)
                ):
                    return candidate
            allowed = ", ".join(repr(v) for v in values)
            violations.append(
                Violation(path, f"{_label(path)} must be one of: {allowed}")
            )
            return value

        case UnionSchema(variants=variants):
            for variant in variants:
                attempt: list[Violation] = []
                result = _validate(variant, value, path, coerce, attempt)
                if not attempt:
                    return result
            violations.append(
                Violation(path, f"{_label(path)} does not match any allowed variant")
            )
            return value

        case _:
            assert_never(schema)


def _text_matches(candidate: object, text: str) -> bool:
    if isinstance(candidate, bool):
        return text.lower() == str(candidate).lower()
    return str(candidate) == text


def _validate_object(
    schema: ObjectSchema,
    value: Any,  # noqa: ANN401
    path: str,
    coerce: bool,  # noqa: FBT001
    violations: list[Violation],
) -> Any:  # noqa: ANN401
    if not isinstance(value, Mapping):
        violations.append(
            Violation(
                path, f"{_label(path)} must be an object, received {_type_name(value)}"
            )
        )
        return value

    result: dict[str, Any] = {}
    for name, prop in schema.properties.items():
        child_path = _join(path, name)
        if name not in value:
            if schema.is_required(name):
                violations.append(Violation(child_path, f"{child_path} is required"))
                continue
            if isinstance(prop, OptionalSchema) and prop.default is not MISSING:
                result[name] = copy.deepcopy(prop.default)
            continue

        cleaned = _validate(prop, value[name], child_path, coerce, violations)
        if cleaned is not MISSING:
            result[name] = cleaned
    return result


def _validate_array(
    schema: ArraySchema,
    value: Any,  # noqa: ANN401
    path: str,
    coerce: bool,  # noqa: FBT001
    violations: list[Violation],
) -> Any:  # noqa: ANN401
    if coerce and isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        violations.append(
            Violation(
                path, f"{_label(path)} must be an array, received {_type_name(value)}"
            )
        )
        return value

    label = _label(path)
    if schema.min_items is not None and len(value) < schema.min_items:
        violations.append(
            Violation(path, f"{label} must contain at least {schema.min_items} items")
        )
    if schema.max_items is not None and len(value) > schema.max_items:
        violations.append(
            Violation(path, f"{label} must contain at most {schema.max_items} items")
        )

    return [
        _validate(schema.item, element, _join(path, index), coerce, violations)
        for index, element in enumerate(value)
    ]


def _coerce_text(kind: PrimitiveKind, text: str) -> Any:  # noqa: ANN401
    stripped = text.strip()
    if kind is PrimitiveKind.INTEGER and INTEGER_PATTERN.match(stripped):
        return int(stripped)
    if kind is PrimitiveKind.NUMBER:
        if INTEGER_PATTERN.match(stripped):
            return int(stripped)
        try:
            parsed = float(stripped)
        except ValueError:
            return text
        return parsed if math.isfinite(parsed) else text
    if kind is PrimitiveKind.BOOLEAN and stripped.lower() in {"true", "false"}:
        return stripped.lower() == "true"
    return text


def _validate_primitive(
    schema: PrimitiveSchema,
    value: Any,  # noqa: ANN401
    path: str,
    coerce: bool,  # noqa: FBT001
    violations: list[Violation],
) -> Any:  # noqa: ANN401
    kind = schema.kind
    if coerce and isinstance(value, str) and kind is not PrimitiveKind.STRING:
        value = _coerce_text(kind, value)

    label = _label(path)
    is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
    is_whole = is_number and (isinstance(value, int) or value.is_integer())
    matches = {
        PrimitiveKind.STRING: isinstance(value, str),
        PrimitiveKind.NUMBER: is_number,
        PrimitiveKind.INTEGER: is_whole,
        PrimitiveKind.BOOLEAN: isinstance(value, bool),
    }[kind]
    if not matches:
        violations.append(
            Violation(
                path,
                f"{label} must be {_ARTICLES[kind]} {kind}, received {_type_name(value)}",
            )
        )
        return value

    if kind is PrimitiveKind.INTEGER:
        value = int(value)

    constraints = schema.constraints
    if isinstance(value, str):
        if constraints.minimum is not None and len(value) < constraints.minimum:
            violations.append(
                Violation(
                    path,
                    f"{label} must be at least {int(constraints.minimum)} characters",
                )
            )
        if constraints.maximum is not None and len(value) > constraints.maximum:
            violations.append(
                Violation(
                    path,
                    f"{label} must be at most {int(constraints.maximum)} characters",
                )
            )
        if constraints.compiled_pattern is not None and not (
            constraints.compiled_pattern.search(value)
        ):
            violations.append(
                Violation(path, f"{label} must match pattern {constraints.pattern}")
            )
        if constraints.format is not None and not _matches_format(
            constraints.format, value
        ):
            violations.append(
                Violation(path, f"{label} must be a valid {constraints.format}")
            )
    elif is_number:
        if constraints.minimum is not None and value < constraints.minimum:
            violations.append(
                Violation(
                    path,
                    f"{label} must be greater than or equal to {constraints.minimum:g}",
                )
            )
        if constraints.maximum is not None and value > constraints.maximum:
            violations.append(
                Violation(
                    path,
                    f"{label} must be less than or equal to {constraints.maximum:g}",
                )
            )
    return value


def _matches_format(fmt: StringFormat, value: str) -> bool:
    match fmt:
        case StringFormat.EMAIL:
            return EMAIL_PATTERN.match(value) is not None
        case StringFormat.UUID:
            try:
                return str(uuid.UUID(value)) == value.lower()
            except ValueError:
                return False
        case StringFormat.DATE_TIME:
            if "T" not in value.upper():
                return False
            try:
                datetime.fromisoformat(value)
            except ValueError:
                return False
            return True
        case StringFormat.DATE:
            if not DATE_PATTERN.match(value):
                return False
            try:
                date.fromisoformat(value)
            except ValueError:
                return False
            return True
        case StringFormat.URI:
            parts = urlsplit(value)
            return bool(parts.scheme and parts.netloc)
        case _:
            assert_never(fmt)
