# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Metadata model for resources and the types their fields carry."""

from rpcshape.model.naming import FieldFormatter, format_field, from_camel, to_camel
from rpcshape.model.resources import (
    Action,
    ActionType,
    Aggregate,
    AggregateKind,
    Argument,
    Attribute,
    Calculation,
    Cardinality,
    Relationship,
    Resource,
)
from rpcshape.model.types import (
    AnyTypeRef,
    ArrayTypeRef,
    FieldSpec,
    KeywordTypeRef,
    MapTypeRef,
    PrimitiveType,
    PrimitiveTypeRef,
    ResourceTypeRef,
    StructTypeRef,
    TupleTypeRef,
    TypedStructDef,
    TypedStructTypeRef,
    TypeRef,
    UnionMember,
    UnionTypeRef,
    primitive,
    unwrap_array,
)

__all__ = [
    # Naming
    "FieldFormatter",
    "format_field",
    "from_camel",
    "to_camel",
    # Type system
    "PrimitiveType",
    "PrimitiveTypeRef",
    "ArrayTypeRef",
    "FieldSpec",
    "MapTypeRef",
    "KeywordTypeRef",
    "TupleTypeRef",
    "StructTypeRef",
    "TypedStructTypeRef",
    "TypedStructDef",
    "UnionMember",
    "UnionTypeRef",
    "ResourceTypeRef",
    "AnyTypeRef",
    "TypeRef",
    "primitive",
    "unwrap_array",
    # Resources
    "Argument",
    "Attribute",
    "Calculation",
    "AggregateKind",
    "Aggregate",
    "Cardinality",
    "Relationship",
    "ActionType",
    "Action",
    "Resource",
]
