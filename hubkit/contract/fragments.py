"""Rendering of schema descriptors into interface-document fragments.

``render_schema`` walks a descriptor with one exhaustive ``match`` and
returns a fresh dict on every call, so callers may mutate what they get back
without affecting other operations that share the descriptor.
"""

import copy
from typing import Any, assert_never

from hubkit.core.types import Fragment
from hubkit.schema import (
    MISSING,
    ArraySchema,
    EnumSchema,
    NullableSchema,
    ObjectSchema,
    OptionalSchema,
    PrimitiveKind,
    PrimitiveSchema,
    Schema,
    UnionSchema,
)


def render_schema(schema: Schema) -> Fragment:
    """Render ``schema`` as an OpenAPI 3.0 schema object.

    Args:
        schema: The descriptor to render. Must not be cyclic.

    Returns:
        Fragment: The rendered fragment.
    """
    match schema:
        case ObjectSchema(properties=properties, description=description):
            fragment: Fragment = {
                "type": "object",
                "properties": {
                    name: render_schema(prop) for name, prop in properties.items()
                },
            }
            required = [name for name in properties if schema.is_required(name)]
            if required:
                fragment["required"] = required
            return _describe(fragment, description)

        case ArraySchema(item=item, min_items=min_items, max_items=max_items):
            fragment = {"type": "array", "items": render_schema(item)}
            if min_items is not None:
                fragment["minItems"] = min_items
            if max_items is not None:
                fragment["maxItems"] = max_items
            return _describe(fragment, schema.description)

        case PrimitiveSchema(kind=kind, constraints=constraints):
            fragment = {"type": str(kind)}
            if kind is PrimitiveKind.STRING:
                if constraints.minimum is not None:
                    fragment["minLength"] = int(constraints.minimum)
                if constraints.maximum is not None:
                    fragment["maxLength"] = int(constraints.maximum)
                if constraints.pattern is not None:
                    fragment["pattern"] = constraints.pattern
                if constraints.format is not None:
                    fragment["format"] = str(constraints.format)
            elif kind is not PrimitiveKind.BOOLEAN:
                if constraints.minimum is not None:
                    fragment["minimum"] = constraints.minimum
                if constraints.maximum is not None:
                    fragment["maximum"] = constraints.maximum
            return _describe(fragment, schema.description)

        case EnumSchema(values=values):
            fragment = {"enum": list(values)}
            literal_type = _literal_type(values)
            if literal_type is not None:
                fragment = {"type": literal_type, **fragment}
            return _describe(fragment, schema.description)

        case OptionalSchema(inner=inner, default=default):
            fragment = render_schema(inner)
            if default is not MISSING:
                fragment["default"] = copy.deepcopy(default)
            return fragment

        case NullableSchema(inner=inner):
            fragment = render_schema(inner)
            fragment["nullable"] = True
            return fragment

        case UnionSchema(variants=variants):
            fragment = {"anyOf": [render_schema(v) for v in variants]}
            return _describe(fragment, schema.description)

        case _:
            assert_never(schema)


def _describe(fragment: Fragment, description: str | None) -> Fragment:
    if description:
        fragment["description"] = description
    return fragment


def _literal_type(values: tuple[Any, ...]) -> str | None:
    kinds = set()
    for value in values:
        if isinstance(value, bool):
            kinds.add("boolean")
        elif isinstance(value, int):
            kinds.add("integer")
        elif isinstance(value, float):
            kinds.add("number")
        elif isinstance(value, str):
            kinds.add("string")
        else:
            return None
    if kinds == {"integer", "number"}:
        return "number"
    return kinds.pop() if len(kinds) == 1 else None
