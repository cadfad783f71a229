# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""TypeScript schema generation for resources.

For every exposed resource the generator emits:

- ``<Name>FieldName``: the union of field names a client can request without
  a nested selection.
- ``<Name>ResourceSchema``: one member per field. Structured fields carry a
  metadata object (``__type``, ``__array``, ``__resource``, ``__returnType``,
  ``__args``, ``__primitiveFields``) from which client-side types compute
  the result of a field selection.
- ``<Name>InputSchema``: for embedded resources only, the shape of a write
  payload.

Fields referring to resources outside the allow-list are left out, so
internal resources never leak into generated code. Field classification is
shared with the field processor, keeping the generated types and the
accepted selections in agreement.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from rpcshape.catalog.catalog import Catalog
from rpcshape.codegen.type_mapper import SchemaGenerationError, TypeMapper
from rpcshape.model.naming import FieldFormatter
from rpcshape.model.resources import Aggregate, Calculation, Relationship, Resource
from rpcshape.model.types import (
    ArrayTypeRef,
    KeywordTypeRef,
    MapTypeRef,
    ResourceTypeRef,
    StructTypeRef,
    TupleTypeRef,
    TypedStructTypeRef,
    TypeRef,
    UnionMember,
    UnionTypeRef,
    unwrap_array,
)
from rpcshape.processing.descriptors import (
    FieldClassification,
    aggregate_type,
    classify,
    embedded_resource_name,
    requires_selection,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def generate_field_name_union_type(
    catalog: Catalog,
    resource: Resource,
    formatter: FieldFormatter = FieldFormatter.CAMEL_CASE,
) -> str:
    """Return the ``<Name>FieldName`` type alias for *resource*."""
    return _SchemaGenerator(catalog, None, formatter).field_name_union_type(resource)


def generate_unified_resource_schema(
    catalog: Catalog,
    resource: Resource,
    allowed_resources: Iterable[str] | None = None,
    formatter: FieldFormatter = FieldFormatter.CAMEL_CASE,
) -> str:
    """Return the ``<Name>ResourceSchema`` type for *resource*."""
    return _SchemaGenerator(catalog, allowed_resources, formatter).unified_resource_schema(resource)


def generate_input_schema(
    catalog: Catalog,
    resource: Resource,
    formatter: FieldFormatter = FieldFormatter.CAMEL_CASE,
) -> str:
    """Return the ``<Name>InputSchema`` type for an embedded *resource*."""
    return _SchemaGenerator(catalog, None, formatter).input_schema(resource)


def generate_all_schemas_for_resource(
    catalog: Catalog,
    resource: Resource,
    allowed_resources: Iterable[str] | None = None,
    formatter: FieldFormatter = FieldFormatter.CAMEL_CASE,
) -> str:
    """Return every schema type generated for one resource.

    Args:
        catalog: The metadata catalog.
        resource: The resource to render.
        allowed_resources: Names of resources that may be referenced from
            the generated types. ``None`` allows every catalog resource.
        formatter: Naming convention applied to field names.

    Raises:
        SchemaGenerationError: If the resource refers to metadata missing
            from the catalog.
    """
    return _SchemaGenerator(catalog, allowed_resources, formatter).resource_schemas(resource)


def generate_all_schemas(
    catalog: Catalog,
    roots: Iterable[str] | None = None,
    allowed_resources: Iterable[str] | None = None,
    formatter: FieldFormatter = FieldFormatter.CAMEL_CASE,
) -> str:
    """Generate schemas for *roots* and every allowed resource reachable from them.

    Each resource is emitted exactly once, in the order it is first
    discovered, however many fields refer to it. The output is
    byte-identical for the same catalog and arguments.

    Args:
        catalog: The metadata catalog.
        roots: Resources to start from. ``None`` starts from every
            non-embedded resource in catalog order.
        allowed_resources: Exposure allow-list. ``None`` allows every
            catalog resource. Roots outside the allow-list are skipped.
        formatter: Naming convention applied to field names.

    Raises:
        SchemaGenerationError: If a root is unknown or the catalog is missing
            referenced metadata.
    """
    generator = _SchemaGenerator(catalog, allowed_resources, formatter)
    if roots is None:
        root_names = [r.name for r in catalog.resources if not r.embedded]
    else:
        root_names = list(roots)

    chunks = [generator.resource_schemas(resource) for resource in generator.reachable(root_names)]
    return "\n\n".join(chunks) + "\n" if chunks else ""


# ################
# Implementation
# ################


class _SchemaGenerator:
    """Renders schema text for resources of one catalog."""

    def __init__(
        self,
        catalog: Catalog,
        allowed_resources: Iterable[str] | None,
        formatter: FieldFormatter,
    ) -> None:
        self.catalog = catalog
        self.mapper = TypeMapper(catalog, formatter)
        if allowed_resources is None:
            self.allowed = {r.name for r in catalog.resources}
        else:
            self.allowed = set(allowed_resources)

    # -------- graph --------

    def reachable(self, root_names: list[str]) -> list[Resource]:
        """Return the allowed resources reachable from *root_names*, in discovery order."""
        order: list[Resource] = []
        emitted: set[str] = set()
        queue: list[str] = []
        for name in root_names:
            if not self.catalog.has_resource(name):
                raise SchemaGenerationError(f"Resource '{name}' is not part of the catalog")
            if name in self.allowed:
                queue.append(name)

        while queue:
            name = queue.pop(0)
            if name in emitted:
                continue
            emitted.add(name)
            resource = self._resource(name)
            order.append(resource)
            queue.extend(ref for ref in self._referenced_resources(resource) if ref not in emitted)
        return order

    def _referenced_resources(self, resource: Resource) -> list[str]:
        refs: list[str] = []
        for relationship in self.catalog.relationships(resource):
            refs.append(relationship.destination)
        for attribute in self.catalog.attributes(resource):
            refs.extend(self._type_resources(attribute.type))
        for calculation in self.catalog.calculations(resource):
            refs.extend(self._type_resources(calculation.type))
        for aggregate in self.catalog.aggregates(resource):
            refs.extend(self._type_resources(aggregate_type(self.catalog, resource, aggregate)))
        return [ref for ref in refs if ref in self.allowed]

    def _type_resources(self, type_ref: TypeRef | None) -> list[str]:
        if isinstance(type_ref, ArrayTypeRef):
            return self._type_resources(type_ref.item)
        if isinstance(type_ref, ResourceTypeRef):
            return [type_ref.name]
        if isinstance(type_ref, StructTypeRef):
            if type_ref.instance_of is not None and self.catalog.has_resource(type_ref.instance_of):
                return [type_ref.instance_of]
            return []
        if isinstance(type_ref, UnionTypeRef):
            return [ref for member in type_ref.members for ref in self._type_resources(member.type)]
        if isinstance(type_ref, (MapTypeRef, KeywordTypeRef, TupleTypeRef)):
            return [ref for spec in type_ref.fields for ref in self._type_resources(spec.type)]
        if isinstance(type_ref, TypedStructTypeRef):
            struct = self.catalog.typed_struct(type_ref.name)
            if struct is None:
                raise SchemaGenerationError(f"Typed struct '{type_ref.name}' is not part of the catalog")
            return [ref for spec in struct.fields for ref in self._type_resources(spec.type)]
        return []

    # -------- per-resource schemas --------

    def resource_schemas(self, resource: Resource) -> str:
        logger.debug("Generating schemas for %s", resource.name)
        sections = [
            f"// {resource.schema_name} Schema\n"
            f"{self.field_name_union_type(resource)}\n"
            f"{self.unified_resource_schema(resource)}"
        ]
        if resource.embedded:
            sections.append(self.input_schema(resource))
        return "\n\n".join(sections)

    def field_name_union_type(self, resource: Resource) -> str:
        union = self._name_union(self._external(resource, name) for name in self._primitive_fields(resource))
        return f"export type {resource.schema_name}FieldName = {union};"

    def unified_resource_schema(self, resource: Resource) -> str:
        primitive_union = self._name_union(
            self._external(resource, name) for name in self._primitive_fields(resource)
        )
        lines = [
            '  __type: "Resource";',
            f"  __primitiveFields: {primitive_union};",
        ]
        lines += self._primitive_field_lines(resource)
        lines += self._relationship_lines(resource)
        lines += self._embedded_lines(resource)
        lines += self._complex_calculation_lines(resource)
        lines += self._union_lines(resource)
        lines += self._structured_attribute_lines(resource)
        body = "\n".join(lines)
        return f"export type {resource.schema_name}ResourceSchema = {{\n{body}\n}};"

    def input_schema(self, resource: Resource) -> str:
        lines = []
        for attribute in self.catalog.attributes(resource):
            name = self._external(resource, attribute.name)
            ts = self.mapper.ts_type(attribute.type, input_form=True)
            if attribute.allow_nil:
                lines.append(f"  {name}?: {ts} | null;")
            elif attribute.default is not None:
                lines.append(f"  {name}?: {ts};")
            else:
                lines.append(f"  {name}: {ts};")
        body = "\n".join(lines)
        return f"export type {resource.schema_name}InputSchema = {{\n{body}\n}};"

    # -------- sections --------

    def _primitive_fields(self, resource: Resource) -> list[str]:
        return [name for name, _ in self._simple_fields(resource)]

    def _primitive_field_lines(self, resource: Resource) -> list[str]:
        return [line for _, line in self._simple_fields(resource)]

    def _simple_fields(self, resource: Resource) -> list[tuple[str, str]]:
        """Return (name, schema line) for each field requestable without a selection."""
        fields = []
        for attribute in self.catalog.attributes(resource):
            if self._classify(resource, attribute.name) is not FieldClassification.ATTRIBUTE:
                continue
            if self._references_allowed(attribute.type):
                line = self._value_line(resource, attribute.name, attribute.type, attribute.allow_nil)
                fields.append((attribute.name, line))
        for calculation in self.catalog.calculations(resource):
            if self._classify(resource, calculation.name) is not FieldClassification.CALCULATION:
                continue
            if self._references_allowed(calculation.type):
                line = self._value_line(resource, calculation.name, calculation.type, calculation.allow_nil)
                fields.append((calculation.name, line))
        for aggregate in self.catalog.aggregates(resource):
            if self._classify(resource, aggregate.name) is not FieldClassification.AGGREGATE:
                continue
            if self._references_allowed(self._aggregate_type(resource, aggregate)):
                fields.append((aggregate.name, self._aggregate_line(resource, aggregate)))
        return fields

    def _relationship_lines(self, resource: Resource) -> list[str]:
        lines = []
        for relationship in self.catalog.relationships(resource):
            if not self.catalog.has_resource(relationship.destination):
                raise SchemaGenerationError(
                    f"Relationship '{relationship.name}' on resource '{resource.name}' points to "
                    f"unknown resource '{relationship.destination}'"
                )
            if relationship.destination not in self.allowed:
                continue
            name = self._external(resource, relationship.name)
            lines.append(f"  {name}: {self._relationship_metadata(relationship)};")
        return lines

    def _relationship_metadata(self, relationship: Relationship) -> str:
        schema = self.mapper.resource_type(relationship.destination)
        if relationship.is_many:
            return f'{{ __type: "Relationship"; __array: true; __resource: {schema}; }}'
        if relationship.allow_nil:
            schema = f"{schema} | null"
        return f'{{ __type: "Relationship"; __resource: {schema}; }}'

    def _embedded_lines(self, resource: Resource) -> list[str]:
        lines = []
        for attribute in self.catalog.attributes(resource):
            classification = self._classify(resource, attribute.name)
            if classification not in (
                FieldClassification.EMBEDDED_RESOURCE,
                FieldClassification.EMBEDDED_RESOURCE_ARRAY,
            ):
                continue
            embedded = embedded_resource_name(self.catalog, attribute.type)
            if embedded not in self.allowed:
                continue
            schema = self.mapper.resource_type(embedded)
            name = self._external(resource, attribute.name)
            if classification is FieldClassification.EMBEDDED_RESOURCE_ARRAY:
                lines.append(f'  {name}: {{ __type: "Relationship"; __array: true; __resource: {schema}; }};')
            else:
                if attribute.allow_nil:
                    schema = f"{schema} | null"
                lines.append(f'  {name}: {{ __type: "Relationship"; __resource: {schema}; }};')
        return lines

    def _complex_calculation_lines(self, resource: Resource) -> list[str]:
        lines = []
        for calculation in self.catalog.calculations(resource):
            classification = self._classify(resource, calculation.name)
            if classification not in (
                FieldClassification.CALCULATION_COMPLEX,
                FieldClassification.CALCULATION_WITH_ARGS,
            ):
                continue
            if not self._references_allowed(calculation.type):
                continue
            lines.append(f"  {self._external(resource, calculation.name)}: {self._calculation_metadata(calculation)};")
        for aggregate in self.catalog.aggregates(resource):
            if self._classify(resource, aggregate.name) is not FieldClassification.COMPLEX_AGGREGATE:
                continue
            agg_type = self._aggregate_type(resource, aggregate)
            if not self._references_allowed(agg_type):
                continue
            return_type = self.mapper.ts_type(agg_type)
            if aggregate.include_nil:
                return_type = f"{return_type} | null"
            name = self._external(resource, aggregate.name)
            lines.append(f'  {name}: {{ __type: "ComplexCalculation"; __returnType: {return_type}; }};')
        return lines

    def _calculation_metadata(self, calculation: Calculation) -> str:
        return_type = self.mapper.ts_type(calculation.type)
        if calculation.allow_nil:
            return_type = f"{return_type} | null"
        if not calculation.arguments:
            return f'{{ __type: "ComplexCalculation"; __returnType: {return_type}; }}'
        args = self._args_type(calculation)
        return f'{{ __type: "ComplexCalculation"; __returnType: {return_type}; __args: {args}; }}'

    def _args_type(self, calculation: Calculation) -> str:
        members = []
        for argument in calculation.arguments:
            name = self.mapper.format(argument.name)
            ts = self.mapper.ts_type(argument.type, input_form=True)
            if argument.allow_nil:
                ts = f"{ts} | null"
            optional = "?" if argument.has_default or argument.default is not None else ""
            members.append(f"{name}{optional}: {ts}")
        return "{ " + "; ".join(members) + " }"

    def _union_lines(self, resource: Resource) -> list[str]:
        lines = []
        for attribute in self.catalog.attributes(resource):
            if self._classify(resource, attribute.name) is not FieldClassification.UNION_ATTRIBUTE:
                continue
            union, is_array = unwrap_array(attribute.type)
            metadata = self._union_metadata(union, is_array)
            if attribute.allow_nil:
                metadata = f"{metadata} | null"
            lines.append(f"  {self._external(resource, attribute.name)}: {metadata};")
        return lines

    def _union_metadata(self, union: UnionTypeRef, is_array: bool) -> str:
        primitive_members = [m.name for m in union.members if not requires_selection(self.catalog, m.type)]
        parts = []
        if is_array:
            parts.append("__array: true;")
        parts.append('__type: "Union";')
        parts.append(f"__primitiveFields: {self._name_union(self.mapper.format(n) for n in primitive_members)};")
        for member in union.members:
            member_type = self._union_member_type(member)
            if member_type is not None:
                parts.append(f"{self.mapper.format(member.name)}?: {member_type};")
        return "{ " + " ".join(parts) + " }"

    def _union_member_type(self, member: UnionMember) -> str | None:
        embedded = embedded_resource_name(self.catalog, member.type)
        if embedded is not None:
            if embedded not in self.allowed:
                return None
            return self.mapper.ts_type(member.type)
        return self.mapper.ts_type(member.type)

    def _structured_attribute_lines(self, resource: Resource) -> list[str]:
        lines = []
        for attribute in self.catalog.attributes(resource):
            if self._classify(resource, attribute.name) not in (
                FieldClassification.TYPED_STRUCT,
                FieldClassification.TUPLE,
            ):
                continue
            if not self._references_allowed(attribute.type):
                continue
            lines.append(self._value_line(resource, attribute.name, attribute.type, attribute.allow_nil))
        return lines

    # -------- helpers --------

    def _value_line(self, resource: Resource, name: str, type_ref: TypeRef, allow_nil: bool) -> str:
        ts = self.mapper.ts_type(type_ref)
        if allow_nil:
            ts = f"{ts} | null"
        return f"  {self._external(resource, name)}: {ts};"

    def _aggregate_line(self, resource: Resource, aggregate: Aggregate) -> str:
        ts = self.mapper.ts_type(self._aggregate_type(resource, aggregate))
        name = self._external(resource, aggregate.name)
        if aggregate.include_nil:
            return f"  {name}?: {ts} | null;"
        return f"  {name}: {ts};"

    def _aggregate_type(self, resource: Resource, aggregate: Aggregate) -> TypeRef:
        agg_type = aggregate_type(self.catalog, resource, aggregate)
        if agg_type is None:
            raise SchemaGenerationError(
                f"Cannot resolve the type of aggregate '{aggregate.name}' on resource '{resource.name}'"
            )
        return agg_type

    def _references_allowed(self, type_ref: TypeRef | None) -> bool:
        return all(ref in self.allowed for ref in self._type_resources(type_ref))

    def _classify(self, resource: Resource, name: str) -> FieldClassification:
        return classify(self.catalog, resource, name)

    def _external(self, resource: Resource, name: str) -> str:
        return self.mapper.format(self.catalog.mapped_field_name(resource, name))

    def _name_union(self, names: Iterable[str]) -> str:
        quoted = [f'"{name}"' for name in names]
        return " | ".join(quoted) if quoted else "never"

    def _resource(self, name: str) -> Resource:
        resource = self.catalog.resource(name)
        if resource is None:
            raise SchemaGenerationError(f"Resource '{name}' is not part of the catalog")
        return resource
