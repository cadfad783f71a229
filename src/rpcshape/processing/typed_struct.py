# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Field selection for typed structs."""

from __future__ import annotations

from typing import Any

from rpcshape.catalog.catalog import Catalog, CatalogError
from rpcshape.model.resources import Resource
from rpcshape.model.types import TypedStructDef, TypedStructTypeRef, unwrap_array
from rpcshape.processing.errors import ErrorKind, FieldProcessingError
from rpcshape.processing.tuples import process_named_slots
from rpcshape.processing.utilities import FieldsResult, ProcessFields, build_path, slot_resolver
from rpcshape.processing.validator import validate_non_empty_fields

# ###############
# Public Interface
# ###############


def process_typed_struct(
    catalog: Catalog,
    resource: Resource,
    field_name: str,
    nested_fields: Any,
    path: list[str],
    result: FieldsResult,
    process_fields: ProcessFields,
) -> None:
    """Process a typed struct attribute of *resource* into *result*."""
    attribute = catalog.attribute(resource, field_name)
    inner, _ = unwrap_array(attribute.type if attribute is not None else None)
    if not isinstance(inner, TypedStructTypeRef):
        raise FieldProcessingError(ErrorKind.UNKNOWN_FIELD, build_path(path, field_name), field=field_name)

    validate_non_empty_fields(nested_fields, field_name, path, "typed_struct")
    members = process_typed_struct_fields(catalog, inner.name, nested_fields, path + [field_name], process_fields)
    result.select.append(field_name)
    result.template.append((field_name, members.template))


def process_typed_struct_fields(
    catalog: Catalog,
    struct_name: str,
    requested: Any,
    path: list[str],
    process_fields: ProcessFields,
) -> FieldsResult:
    """Process a member selection against the typed struct *struct_name*.

    Requested names are resolved through the struct's own external name
    table, independent of the resource that holds the struct.
    """
    struct = _struct_def(catalog, struct_name)
    resolve = slot_resolver((spec.name for spec in struct.fields), catalog.struct_field_lookup(struct.name))
    return process_named_slots(
        catalog,
        struct.fields,
        requested,
        path,
        process_fields,
        resolve=resolve,
        kind="typed_struct_field",
    )


# ################
# Implementation
# ################


def _struct_def(catalog: Catalog, name: str) -> TypedStructDef:
    struct = catalog.typed_struct(name)
    if struct is None:
        raise CatalogError(f"Typed struct '{name}' is not part of the catalog")
    return struct
