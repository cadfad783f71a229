# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Return type descriptors and field classification.

Both the field processor and the schema generator decide how to treat a field
by asking this module, so the two can never disagree about what kind of
field something is.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from rpcshape.catalog.catalog import Catalog
from rpcshape.model.resources import Action, ActionType, Aggregate, AggregateKind, Resource
from rpcshape.model.types import (
    AnyTypeRef,
    ArrayTypeRef,
    KeywordTypeRef,
    MapTypeRef,
    PrimitiveType,
    PrimitiveTypeRef,
    ResourceTypeRef,
    StructTypeRef,
    TupleTypeRef,
    TypedStructTypeRef,
    TypeRef,
    UnionTypeRef,
    unwrap_array,
)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class ResourceReturn:
    """A position holding records of a resource (one, or a list when *array*)."""

    resource: str
    array: bool = False


@dataclass(frozen=True)
class TypeReturn:
    """A position holding a value of a non-resource type, with its constraints."""

    type: TypeRef


@dataclass(frozen=True)
class AnyReturn:
    """A position holding an untyped value."""


ReturnType = ResourceReturn | TypeReturn | AnyReturn


class FieldClassification(Enum):
    """What kind of field a name refers to on a resource."""

    ATTRIBUTE = "attribute"
    CALCULATION = "calculation"
    CALCULATION_WITH_ARGS = "calculation_with_args"
    CALCULATION_COMPLEX = "calculation_complex"
    AGGREGATE = "aggregate"
    COMPLEX_AGGREGATE = "complex_aggregate"
    RELATIONSHIP = "relationship"
    EMBEDDED_RESOURCE = "embedded_resource"
    EMBEDDED_RESOURCE_ARRAY = "embedded_resource_array"
    UNION_ATTRIBUTE = "union_attribute"
    TYPED_STRUCT = "typed_struct"
    TUPLE = "tuple"
    NOT_FOUND = "not_found"


def return_type_for(type_ref: TypeRef | None) -> ReturnType:
    """Build the descriptor for a position holding a value of *type_ref*."""
    if type_ref is None or isinstance(type_ref, AnyTypeRef):
        return AnyReturn()
    if isinstance(type_ref, ResourceTypeRef):
        return ResourceReturn(type_ref.name)
    if isinstance(type_ref, ArrayTypeRef) and isinstance(type_ref.item, ResourceTypeRef):
        return ResourceReturn(type_ref.item.name, array=True)
    return TypeReturn(type_ref)


def descriptor_of(resource: Resource, action: Action) -> ReturnType:
    """Return the descriptor for the result of *action* on *resource*.

    Read actions return a list of records unless they are ``get`` actions;
    create, update and destroy return the affected record. Generic actions
    return their declared type, or an untyped value when they declare none.
    """
    if action.type is ActionType.ACTION:
        return return_type_for(action.returns)
    is_list = action.type is ActionType.READ and not action.get
    return ResourceReturn(resource.name, array=is_list)


def classify(catalog: Catalog, resource: Resource, field_name: str) -> FieldClassification:
    """Classify *field_name* on *resource*.

    The name may be internal or external; it is resolved through the
    resource's field name mapping first, so aliases classify identically.
    """
    name = catalog.original_field_name(resource, field_name)

    attribute = catalog.attribute(resource, name)
    if attribute is not None:
        return _classify_attribute_type(catalog, attribute.type)

    calculation = catalog.calculation(resource, name)
    if calculation is not None:
        if calculation.arguments:
            return FieldClassification.CALCULATION_WITH_ARGS
        if requires_selection(catalog, calculation.type):
            return FieldClassification.CALCULATION_COMPLEX
        return FieldClassification.CALCULATION

    aggregate = catalog.aggregate(resource, name)
    if aggregate is not None:
        agg_type = aggregate_type(catalog, resource, aggregate)
        if agg_type is not None and requires_selection(catalog, agg_type):
            return FieldClassification.COMPLEX_AGGREGATE
        return FieldClassification.AGGREGATE

    if catalog.relationship(resource, name) is not None:
        return FieldClassification.RELATIONSHIP

    return FieldClassification.NOT_FOUND


def requires_selection(catalog: Catalog, type_ref: TypeRef | None) -> bool:
    """Return True if a value of *type_ref* can only be requested with nested fields.

    Scalars, open maps, keyword lists and tuples without declared fields, and
    structs that are not resource instances can be requested whole.
    """
    inner, _ = unwrap_array(type_ref)
    if isinstance(inner, (ResourceTypeRef, UnionTypeRef, TypedStructTypeRef)):
        return True
    if isinstance(inner, (MapTypeRef, KeywordTypeRef, TupleTypeRef)):
        return bool(inner.fields)
    if isinstance(inner, StructTypeRef):
        return inner.instance_of is not None and catalog.has_resource(inner.instance_of)
    if isinstance(inner, ArrayTypeRef):
        return requires_selection(catalog, inner)
    return False


def selection_reason(catalog: Catalog, type_ref: TypeRef | None) -> str:
    """Name the kind of value that makes *type_ref* need a nested selection.

    Used as the ``reason`` of ``requires_field_selection`` for slots and
    union members. Records of a non-embedded resource report ``relationship``.
    """
    inner, _ = unwrap_array(type_ref)
    if isinstance(inner, ArrayTypeRef):
        return selection_reason(catalog, inner)
    if isinstance(inner, UnionTypeRef):
        return "union"
    if isinstance(inner, TypedStructTypeRef):
        return "typed_struct"
    if isinstance(inner, (MapTypeRef, KeywordTypeRef, TupleTypeRef)):
        return "tuple"
    if embedded_resource_name(catalog, inner) is not None:
        return "embedded"
    return "relationship"


def embedded_resource_name(catalog: Catalog, type_ref: TypeRef) -> str | None:
    """Return the embedded resource a (possibly array) type refers to, if any."""
    inner, _ = unwrap_array(type_ref)
    if isinstance(inner, ResourceTypeRef) and catalog.is_embedded(inner.name):
        return inner.name
    if isinstance(inner, StructTypeRef) and inner.instance_of and catalog.is_embedded(inner.instance_of):
        return inner.instance_of
    return None


def with_embedded_resources(catalog: Catalog, names: Iterable[str]) -> list[str]:
    """Return *names* followed by the embedded resources reachable from them.

    Embedded resources are found through attribute, calculation and aggregate
    types, including union members, container slots and typed struct fields,
    and through the fields of embedded resources found this way.
    Relationships are not followed. Unknown names are kept as given.
    """
    result = list(dict.fromkeys(names))
    queue = list(result)
    while queue:
        resource = catalog.resource(queue.pop(0))
        if resource is None:
            continue
        types = [a.type for a in catalog.attributes(resource)]
        types += [c.type for c in catalog.calculations(resource)]
        types += [aggregate_type(catalog, resource, a) for a in catalog.aggregates(resource)]
        for type_ref in types:
            for name in _embedded_in(catalog, type_ref):
                if name not in result:
                    result.append(name)
                    queue.append(name)
    return result


def aggregate_type(catalog: Catalog, resource: Resource, aggregate: Aggregate) -> TypeRef | None:
    """Return the value type of *aggregate*, or None if it cannot be resolved.

    ``count`` is an integer and ``exists`` a boolean. ``avg`` is a float.
    ``sum``, ``min``, ``max`` and ``first`` take the type of the summarized
    field, and ``list`` an array of it.
    """
    if aggregate.type is not None:
        return aggregate.type
    if aggregate.kind is AggregateKind.COUNT:
        return PrimitiveTypeRef(primitive=PrimitiveType.INTEGER)
    if aggregate.kind is AggregateKind.EXISTS:
        return PrimitiveTypeRef(primitive=PrimitiveType.BOOLEAN)
    if aggregate.kind is AggregateKind.AVG:
        return PrimitiveTypeRef(primitive=PrimitiveType.FLOAT)

    field_type = _summarized_field_type(catalog, resource, aggregate)
    if field_type is None:
        return None
    if aggregate.kind is AggregateKind.LIST:
        return ArrayTypeRef(item=field_type)
    return field_type


# ################
# Implementation
# ################


def _classify_attribute_type(catalog: Catalog, type_ref: TypeRef) -> FieldClassification:
    inner, is_array = unwrap_array(type_ref)
    if embedded_resource_name(catalog, type_ref) is not None:
        if is_array:
            return FieldClassification.EMBEDDED_RESOURCE_ARRAY
        return FieldClassification.EMBEDDED_RESOURCE
    if isinstance(inner, UnionTypeRef):
        return FieldClassification.UNION_ATTRIBUTE
    if isinstance(inner, TypedStructTypeRef):
        return FieldClassification.TYPED_STRUCT
    if isinstance(inner, (KeywordTypeRef, TupleTypeRef)) and inner.fields:
        return FieldClassification.TUPLE
    return FieldClassification.ATTRIBUTE


def _embedded_in(catalog: Catalog, type_ref: TypeRef | None) -> list[str]:
    inner, _ = unwrap_array(type_ref)
    if isinstance(inner, ArrayTypeRef):
        return _embedded_in(catalog, inner)
    embedded = embedded_resource_name(catalog, inner)
    if embedded is not None:
        return [embedded]
    if isinstance(inner, UnionTypeRef):
        return [name for member in inner.members for name in _embedded_in(catalog, member.type)]
    if isinstance(inner, (MapTypeRef, KeywordTypeRef, TupleTypeRef)):
        return [name for spec in inner.fields for name in _embedded_in(catalog, spec.type)]
    if isinstance(inner, TypedStructTypeRef):
        struct = catalog.typed_struct(inner.name)
        if struct is None:
            return []
        return [name for spec in struct.fields for name in _embedded_in(catalog, spec.type)]
    return []


def _summarized_field_type(catalog: Catalog, resource: Resource, aggregate: Aggregate) -> TypeRef | None:
    """Walk the aggregate's relationship path and return the summarized field's type."""
    current: Resource | None = resource
    for rel_name in aggregate.relationship_path:
        if current is None:
            return None
        relationship = catalog.relationship(current, rel_name)
        if relationship is None:
            return None
        current = catalog.resource(relationship.destination)
    if current is None or aggregate.field is None:
        return None

    attribute = catalog.attribute(current, aggregate.field)
    if attribute is not None:
        return attribute.type
    calculation = catalog.calculation(current, aggregate.field)
    if calculation is not None:
        return calculation.type
    nested = catalog.aggregate(current, aggregate.field)
    if nested is not None:
        return aggregate_type(catalog, current, nested)
    return None
