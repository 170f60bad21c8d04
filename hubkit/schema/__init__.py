"""Schema descriptors and their validator.

Describe a data shape once with the builder functions and use the resulting
descriptor both for runtime validation (``validate``) and for contract
rendering (``hubkit.contract.fragments``).
"""

from hubkit.schema.descriptors import (
    MISSING,
    ArraySchema,
    Constraints,
    EnumSchema,
    NullableSchema,
    ObjectSchema,
    OptionalSchema,
    PrimitiveKind,
    PrimitiveSchema,
    Schema,
    StringFormat,
    UnionSchema,
    array,
    boolean,
    enum,
    integer,
    nullable,
    number,
    obj,
    optional,
    string,
    union,
)
from hubkit.schema.validator import Invalid, Outcome, Valid, Violation, validate

__all__ = [
    "MISSING",
    "ArraySchema",
    "Constraints",
    "EnumSchema",
    "Invalid",
    "NullableSchema",
    "ObjectSchema",
    "OptionalSchema",
    "Outcome",
    "PrimitiveKind",
    "PrimitiveSchema",
    "Schema",
    "StringFormat",
    "UnionSchema",
    "Valid",
    "Violation",
    "array",
    "boolean",
    "enum",
    "integer",
    "nullable",
    "number",
    "obj",
    "optional",
    "string",
    "union",
    "validate",
]
