"""Unit tests for hubkit/schema/descriptors.py."""

import dataclasses

import pytest

from hubkit.schema import (
    MISSING,
    ArraySchema,
    EnumSchema,
    ObjectSchema,
    OptionalSchema,
    PrimitiveKind,
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


@pytest.mark.unit
class TestBuilders:
    """Test cases for the descriptor builder functions."""

    def test_string_constraints(self) -> None:
        """Test that string() records constraints and format."""
        schema = string(minimum=1, maximum=10, pattern="^a", format="email")

        assert schema.kind is PrimitiveKind.STRING
        assert schema.constraints.minimum == 1
        assert schema.constraints.maximum == 10
        assert schema.constraints.pattern == "^a"
        assert schema.constraints.format is StringFormat.EMAIL

    @pytest.mark.parametrize(
        ("spelling", "expected"),
        [
            ("datetime", StringFormat.DATE_TIME),
            ("date-time", StringFormat.DATE_TIME),
            ("url", StringFormat.URI),
            ("uuid", StringFormat.UUID),
        ],
    )
    def test_format_aliases(self, spelling: str, expected: StringFormat) -> None:
        """Test accepted format spellings."""
        assert string(format=spelling).constraints.format is expected

    def test_unknown_format_rejected(self) -> None:
        """Test that unsupported formats fail at construction."""
        with pytest.raises(ValueError, match="ipv4"):
            string(format="ipv4")

    def test_primitive_kinds(self) -> None:
        """Test the kinds produced by each primitive builder."""
        assert number().kind is PrimitiveKind.NUMBER
        assert integer().kind is PrimitiveKind.INTEGER
        assert boolean().kind is PrimitiveKind.BOOLEAN

    def test_obj_infers_required(self) -> None:
        """Test that non-optional properties are required by default."""
        schema = obj({"name": string(), "nickname": optional(string())})
        assert schema.required == frozenset({"name"})

    def test_obj_explicit_required(self) -> None:
        """Test that an explicit required set is kept."""
        schema = obj({"a": string(), "b": string()}, required={"b"})
        assert schema.required == frozenset({"b"})

    def test_obj_preserves_property_order(self) -> None:
        """Test that property order is insertion order."""
        schema = obj({"z": string(), "a": string(), "m": string()})
        assert list(schema.properties) == ["z", "a", "m"]

    def test_other_builders(self) -> None:
        """Test the composite builders."""
        assert isinstance(array(string(), min_items=1), ArraySchema)
        assert isinstance(enum("a", "b"), EnumSchema)
        assert isinstance(union(string(), number()), UnionSchema)
        assert nullable(string()).inner == string()
        assert optional(string()).default is MISSING


@pytest.mark.unit
class TestInvariants:
    """Test cases for descriptor construction invariants."""

    def test_required_must_be_properties(self) -> None:
        """Test that required names outside the properties are rejected."""
        with pytest.raises(ValueError, match="missing"):
            ObjectSchema({"name": string()}, frozenset({"name", "missing"}))

    def test_empty_enum_rejected(self) -> None:
        """Test that an enum needs at least one value."""
        with pytest.raises(ValueError, match="at least one value"):
            enum()

    def test_empty_union_rejected(self) -> None:
        """Test that a union needs at least one variant."""
        with pytest.raises(ValueError, match="at least one variant"):
            union()

    def test_descriptors_are_frozen(self) -> None:
        """Test that descriptors cannot be mutated."""
        schema = obj({"name": string()})

        with pytest.raises(dataclasses.FrozenInstanceError):
            schema.required = frozenset()  # type: ignore[misc]
        with pytest.raises(TypeError):
            schema.properties["other"] = string()  # type: ignore[index]

    def test_properties_are_copied(self) -> None:
        """Test that mutating the source mapping does not leak in."""
        properties = {"name": string()}
        schema = obj(properties)
        properties["extra"] = string()
        assert "extra" not in schema.properties

    def test_optional_never_required(self) -> None:
        """Test that optional wrapping wins over an explicit required set."""
        schema = ObjectSchema(
            {"nickname": optional(string())}, frozenset({"nickname"})
        )
        assert not schema.is_required("nickname")

    def test_missing_is_singleton_and_falsy(self) -> None:
        """Test the absent-value marker."""
        assert type(MISSING)() is MISSING
        assert not MISSING
        assert repr(MISSING) == "MISSING"

    def test_optional_schema_default(self) -> None:
        """Test optional defaults."""
        assert OptionalSchema(string(), "x").default == "x"

    def test_invalid_pattern_rejected(self) -> None:
        """Test that a malformed regular expression fails at construction."""
        with pytest.raises(ValueError, match="Invalid pattern"):
            string(pattern="[a-z")

    def test_pattern_is_compiled(self) -> None:
        """Test that a valid pattern is compiled once and kept out of equality."""
        schema = string(pattern="^[a-z]+$")

        assert schema.constraints.compiled_pattern is not None
        assert schema.constraints.compiled_pattern.pattern == "^[a-z]+$"
        assert schema == string(pattern="^[a-z]+$")

    def test_object_schema_is_unhashable(self) -> None:
        """Test that hashing an object descriptor is refused explicitly."""
        schema = obj({"name": string()})

        assert ObjectSchema.__hash__ is None
        with pytest.raises(TypeError, match="unhashable"):
            hash(schema)
