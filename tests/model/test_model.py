# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""High-level tests demonstrating how to construct the resource metadata model."""

import pytest
from pydantic import TypeAdapter, ValidationError

from rpcshape.model import (
    Action,
    ActionType,
    Aggregate,
    AggregateKind,
    AnyTypeRef,
    Argument,
    ArrayTypeRef,
    Attribute,
    Cardinality,
    FieldSpec,
    MapTypeRef,
    PrimitiveType,
    PrimitiveTypeRef,
    Relationship,
    Resource,
    ResourceTypeRef,
    TypeRef,
    UnionMember,
    UnionTypeRef,
    primitive,
    unwrap_array,
)


def test_primitive_attribute() -> None:
    """An attribute can hold a primitive type."""
    attr = Attribute(name="title", type=PrimitiveTypeRef(primitive=PrimitiveType.STRING), allow_nil=False)
    assert attr.name == "title"
    assert isinstance(attr.type, PrimitiveTypeRef)
    assert attr.type.primitive == PrimitiveType.STRING
    assert attr.public


def test_primitive_shorthand_with_enumerated_values() -> None:
    ref = primitive("atom", one_of=["low", "high"])
    assert ref.primitive == PrimitiveType.ATOM
    assert ref.one_of == ["low", "high"]


def test_type_refs_are_discriminated_by_kind() -> None:
    """A type reference given as plain data is parsed into the class named by its kind."""
    adapter = TypeAdapter(TypeRef)
    ref = adapter.validate_python(
        {"kind": "array", "item": {"kind": "union", "members": [{"name": "n", "type": {"kind": "any"}}]}}
    )
    assert isinstance(ref, ArrayTypeRef)
    assert isinstance(ref.item, UnionTypeRef)
    assert isinstance(ref.item.members[0].type, AnyTypeRef)


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValidationError):
        TypeAdapter(TypeRef).validate_python({"kind": "matrix"})


def test_unwrap_array_strips_one_level() -> None:
    nested = ArrayTypeRef(item=ArrayTypeRef(item=primitive("integer")))
    inner, is_array = unwrap_array(nested)
    assert is_array
    assert isinstance(inner, ArrayTypeRef)

    scalar, is_array = unwrap_array(primitive("integer"))
    assert not is_array
    assert scalar == primitive("integer")


def test_map_with_field_specs() -> None:
    ref = MapTypeRef(fields=[FieldSpec(name="url", type=primitive("string"), allow_nil=False)])
    assert ref.fields[0].name == "url"
    assert not ref.fields[0].allow_nil


def test_union_members_keep_declaration_order() -> None:
    union = UnionTypeRef(
        members=[
            UnionMember(name="text", type=ResourceTypeRef(name="TextContent")),
            UnionMember(name="note", type=primitive("string")),
        ]
    )
    assert [m.name for m in union.members] == ["text", "note"]


class TestArgument:
    def test_required_without_nil_or_default(self) -> None:
        arg = Argument(name="limit", type=primitive("integer"), allow_nil=False)
        assert arg.is_required

    def test_nullable_argument_is_optional(self) -> None:
        arg = Argument(name="limit", type=primitive("integer"))
        assert not arg.is_required

    def test_defaulted_argument_is_optional(self) -> None:
        arg = Argument(name="prefix", type=primitive("string"), allow_nil=False, has_default=True, default="")
        assert not arg.is_required


class TestRelationship:
    @pytest.mark.parametrize(
        "cardinality, is_many",
        [
            (Cardinality.BELONGS_TO, False),
            (Cardinality.HAS_ONE, False),
            (Cardinality.HAS_MANY, True),
            (Cardinality.MANY_TO_MANY, True),
        ],
    )
    def test_is_many(self, cardinality: Cardinality, is_many: bool) -> None:
        rel = Relationship(name="r", destination="Other", cardinality=cardinality)
        assert rel.is_many is is_many


def test_resource_schema_name_defaults_to_name() -> None:
    assert Resource(name="Todo").schema_name == "Todo"
    assert Resource(name="Todo", type_name="TodoItem").schema_name == "TodoItem"


def test_resource_with_all_field_kinds() -> None:
    """A resource collects attributes, aggregates, relationships, and actions."""
    resource = Resource(
        name="Todo",
        attributes=[Attribute(name="id", type=primitive("uuid"), allow_nil=False)],
        aggregates=[Aggregate(name="comment_count", kind=AggregateKind.COUNT, relationship_path=["comments"])],
        relationships=[Relationship(name="comments", destination="Comment", cardinality=Cardinality.HAS_MANY)],
        actions=[
            Action(name="read"),
            Action(name="latest", type=ActionType.ACTION, returns=ResourceTypeRef(name="Todo")),
        ],
        field_names={"archived?": "isArchived"},
    )
    assert resource.actions[0].type is ActionType.READ
    assert isinstance(resource.actions[1].returns, ResourceTypeRef)
    assert resource.field_names == {"archived?": "isArchived"}
