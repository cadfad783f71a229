# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type references for fields, arguments, and action return values."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class PrimitiveType(Enum):
    """Scalar types a field, argument, or union member can hold."""

    STRING = "string"
    CI_STRING = "ci_string"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    UUID = "uuid"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    UTC_DATETIME = "utc_datetime"
    NAIVE_DATETIME = "naive_datetime"
    DURATION = "duration"
    BINARY = "binary"
    ATOM = "atom"
    TERM = "term"


class PrimitiveTypeRef(BaseModel):
    """Reference to a scalar type, optionally restricted to enumerated values."""

    kind: Literal["primitive"] = "primitive"
    primitive: PrimitiveType
    one_of: list[str] = _Field(default_factory=list)


class ArrayTypeRef(BaseModel):
    """Reference to an array of another type."""

    kind: Literal["array"] = "array"
    item: TypeRef


class FieldSpec(BaseModel):
    """A named, typed slot of a map, keyword list, tuple, or typed struct."""

    name: str
    type: TypeRef
    allow_nil: bool = True


class MapTypeRef(BaseModel):
    """Reference to a map. An empty ``fields`` list means an open map."""

    kind: Literal["map"] = "map"
    fields: list[FieldSpec] = _Field(default_factory=list)


class KeywordTypeRef(BaseModel):
    """Reference to a keyword list; behaves like a map with declared keys."""

    kind: Literal["keyword"] = "keyword"
    fields: list[FieldSpec] = _Field(default_factory=list)


class TupleTypeRef(BaseModel):
    """Reference to a fixed-arity tuple whose positional slots are named."""

    kind: Literal["tuple"] = "tuple"
    fields: list[FieldSpec] = _Field(default_factory=list)


class StructTypeRef(BaseModel):
    """Reference to a struct value, optionally an instance of a resource."""

    kind: Literal["struct"] = "struct"
    instance_of: str | None = None


class TypedStructTypeRef(BaseModel):
    """Reference to a typed struct registered in the catalog by name."""

    kind: Literal["typed_struct"] = "typed_struct"
    name: str


class UnionMember(BaseModel):
    """One named, independently typed member of a tagged union."""

    name: str
    type: TypeRef


class UnionTypeRef(BaseModel):
    """Reference to a tagged union of named members."""

    kind: Literal["union"] = "union"
    members: list[UnionMember] = _Field(default_factory=list)


class ResourceTypeRef(BaseModel):
    """Reference to a resource, used for embedded values and action returns."""

    kind: Literal["resource"] = "resource"
    name: str


class AnyTypeRef(BaseModel):
    """Reference to an untyped value."""

    kind: Literal["any"] = "any"


# A type reference: scalar, container, structured, or resource-shaped.
TypeRef = Annotated[
    PrimitiveTypeRef
    | ArrayTypeRef
    | MapTypeRef
    | KeywordTypeRef
    | TupleTypeRef
    | StructTypeRef
    | TypedStructTypeRef
    | UnionTypeRef
    | ResourceTypeRef
    | AnyTypeRef,
    _Field(discriminator="kind"),
]


class TypedStructDef(BaseModel):
    """A fixed-shape value type with named members, distinct from a resource.

    Attributes:
        name: Catalog-wide name of the struct.
        fields: The struct's members.
        field_names: Mapping from internal member names to the external names
            exposed to clients. Independent of any resource's mapping.
    """

    name: str
    fields: list[FieldSpec] = _Field(default_factory=list)
    field_names: dict[str, str] = _Field(default_factory=dict)


def primitive(kind: PrimitiveType | str, *, one_of: list[str] | None = None) -> PrimitiveTypeRef:
    """Shorthand for building a :class:`PrimitiveTypeRef`."""
    return PrimitiveTypeRef(primitive=PrimitiveType(kind), one_of=list(one_of or []))


def unwrap_array(type_ref: Any) -> tuple[Any, bool]:
    """Strip one array level from *type_ref*.

    Returns:
        The element type and whether an array was stripped.
    """
    if isinstance(type_ref, ArrayTypeRef):
        return type_ref.item, True
    return type_ref, False


# Resolve forward references for models that use TypeRef.
ArrayTypeRef.model_rebuild()
FieldSpec.model_rebuild()
MapTypeRef.model_rebuild()
KeywordTypeRef.model_rebuild()
TupleTypeRef.model_rebuild()
UnionMember.model_rebuild()
UnionTypeRef.model_rebuild()
TypedStructDef.model_rebuild()
