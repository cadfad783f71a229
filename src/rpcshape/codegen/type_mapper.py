# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mapping from catalog type references to TypeScript type expressions."""

from __future__ import annotations

from rpcshape.catalog.catalog import Catalog
from rpcshape.model.naming import FieldFormatter, format_field
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
    TypedStructTypeRef,
    TypeRef,
    UnionTypeRef,
)

# ###############
# Public Interface
# ###############


class SchemaGenerationError(Exception):
    """Raised when the catalog cannot be rendered into type definitions."""


PRIMITIVE_TS_TYPES: dict[PrimitiveType, str] = {
    PrimitiveType.STRING: "string",
    PrimitiveType.CI_STRING: "string",
    PrimitiveType.INTEGER: "number",
    PrimitiveType.FLOAT: "number",
    PrimitiveType.DECIMAL: "string",
    PrimitiveType.BOOLEAN: "boolean",
    PrimitiveType.UUID: "string",
    PrimitiveType.DATE: "string",
    PrimitiveType.TIME: "string",
    PrimitiveType.DATETIME: "string",
    PrimitiveType.UTC_DATETIME: "string",
    PrimitiveType.NAIVE_DATETIME: "string",
    PrimitiveType.DURATION: "string",
    PrimitiveType.BINARY: "string",
    PrimitiveType.ATOM: "string",
    PrimitiveType.TERM: "any",
}


class TypeMapper:
    """Renders type references as TypeScript, in output or input form.

    Output form refers to resources through their ``ResourceSchema``; input
    form refers to embedded resources through their ``InputSchema`` since
    write payloads carry plain values rather than selections.
    """

    def __init__(self, catalog: Catalog, formatter: FieldFormatter = FieldFormatter.CAMEL_CASE) -> None:
        self.catalog = catalog
        self.formatter = formatter

    def ts_type(self, type_ref: TypeRef | None, *, input_form: bool = False) -> str:
        if type_ref is None or isinstance(type_ref, AnyTypeRef):
            return "any"
        if isinstance(type_ref, PrimitiveTypeRef):
            if type_ref.one_of:
                return " | ".join(f'"{value}"' for value in type_ref.one_of)
            return PRIMITIVE_TS_TYPES[type_ref.primitive]
        if isinstance(type_ref, ArrayTypeRef):
            return f"Array<{self.ts_type(type_ref.item, input_form=input_form)}>"
        if isinstance(type_ref, (MapTypeRef, KeywordTypeRef)):
            if not type_ref.fields:
                return "Record<string, any>"
            return self.object_type(type_ref.fields, input_form=input_form)
        if isinstance(type_ref, TupleTypeRef):
            if not type_ref.fields:
                return "any[]"
            return self.object_type(type_ref.fields, input_form=input_form)
        if isinstance(type_ref, StructTypeRef):
            if type_ref.instance_of is not None and self.catalog.has_resource(type_ref.instance_of):
                return self.resource_type(type_ref.instance_of, input_form=input_form)
            return "Record<string, any>"
        if isinstance(type_ref, TypedStructTypeRef):
            return self.typed_struct_type(type_ref.name, input_form=input_form)
        if isinstance(type_ref, UnionTypeRef):
            if not type_ref.members:
                return "never"
            return " | ".join(
                f"{{ {self.format(m.name)}: {self.ts_type(m.type, input_form=input_form)} }}"
                for m in type_ref.members
            )
        if isinstance(type_ref, ResourceTypeRef):
            return self.resource_type(type_ref.name, input_form=input_form)
        raise SchemaGenerationError(f"Unsupported type reference: {type_ref!r}")

    def resource_type(self, name: str, *, input_form: bool = False) -> str:
        """Return the schema type name for resource *name*."""
        resource = self.catalog.resource(name)
        if resource is None:
            raise SchemaGenerationError(f"Resource '{name}' is referenced but not part of the catalog")
        if input_form and resource.embedded:
            return f"{resource.schema_name}InputSchema"
        return f"{resource.schema_name}ResourceSchema"

    def typed_struct_type(self, name: str, *, input_form: bool = False) -> str:
        struct = self.catalog.typed_struct(name)
        if struct is None:
            raise SchemaGenerationError(f"Typed struct '{name}' is referenced but not part of the catalog")
        return self.object_type(struct.fields, struct.field_names, input_form=input_form)

    def object_type(
        self,
        fields: list[FieldSpec],
        field_names: dict[str, str] | None = None,
        *,
        input_form: bool = False,
    ) -> str:
        """Render named slots as an inline object type."""
        mapping = field_names or {}
        members = []
        for spec in fields:
            name = self.format(mapping.get(spec.name, spec.name))
            ts = self.ts_type(spec.type, input_form=input_form)
            if spec.allow_nil:
                ts = f"{ts} | null"
            members.append(f"{name}: {ts}")
        if not members:
            return "{}"
        return "{ " + "; ".join(members) + " }"

    def format(self, name: str) -> str:
        """Format an external name with the configured field formatter."""
        return format_field(name, self.formatter)
