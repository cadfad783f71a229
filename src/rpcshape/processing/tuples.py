# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Field selection for values with named slots: tuples, keyword lists and maps."""

from __future__ import annotations

from typing import Any

from rpcshape.catalog.catalog import Catalog
from rpcshape.model.resources import Resource
from rpcshape.model.types import FieldSpec, KeywordTypeRef, TupleTypeRef, unwrap_array
from rpcshape.processing.descriptors import requires_selection, return_type_for, selection_reason
from rpcshape.processing.errors import ErrorKind, FieldProcessingError, requires_field_selection
from rpcshape.processing.utilities import (
    FieldsResult,
    ProcessFields,
    build_path,
    iter_entries,
    slot_resolver,
)
from rpcshape.processing.validator import NameResolver, check_for_duplicate_fields, validate_non_empty_fields

# ###############
# Public Interface
# ###############


def process_tuple_type(
    catalog: Catalog,
    resource: Resource,
    field_name: str,
    nested_fields: Any,
    path: list[str],
    result: FieldsResult,
    process_fields: ProcessFields,
) -> None:
    """Process a tuple or keyword attribute of *resource* into *result*.

    The attribute is selected whole; the requested slots only shape the
    template.
    """
    attribute = catalog.attribute(resource, field_name)
    inner, _ = unwrap_array(attribute.type if attribute is not None else None)
    if not isinstance(inner, (TupleTypeRef, KeywordTypeRef)):
        raise FieldProcessingError(ErrorKind.UNKNOWN_FIELD, build_path(path, field_name), field=field_name)

    validate_non_empty_fields(nested_fields, field_name, path, "tuple")
    slots = process_tuple_fields(catalog, inner.fields, nested_fields, path + [field_name], process_fields)
    result.select.append(field_name)
    result.template.append((field_name, slots.template))


def process_tuple_fields(
    catalog: Catalog,
    specs: list[FieldSpec],
    requested: Any,
    path: list[str],
    process_fields: ProcessFields,
) -> FieldsResult:
    """Process a slot selection against the declared slots of a tuple."""
    return process_named_slots(
        catalog,
        specs,
        requested,
        path,
        process_fields,
        resolve=slot_resolver(spec.name for spec in specs),
        kind="tuple_field",
    )


def process_named_slots(
    catalog: Catalog,
    specs: list[FieldSpec],
    requested: Any,
    path: list[str],
    process_fields: ProcessFields,
    *,
    resolve: NameResolver,
    kind: str,
) -> FieldsResult:
    """Match a selection against a list of named slot specs.

    Requested names are resolved with *resolve* and reported in the template
    under their declared names. A structured slot must be given nested
    fields. *kind* names the container in unknown-slot and shape errors.

    Raises:
        FieldProcessingError: for duplicate, unknown or under-specified slots.
    """
    if not isinstance(requested, list):
        field_name = path[-1] if path else None
        raise FieldProcessingError(
            ErrorKind.UNSUPPORTED_FIELD_COMBINATION,
            build_path(path),
            field=field_name,
            detail={"kind": kind},
        )
    check_for_duplicate_fields(requested, path, resolve)

    by_name = {spec.name: spec for spec in specs}
    result = FieldsResult()
    for entry in iter_entries(requested):
        spec = by_name.get(resolve(entry.name))
        if spec is None:
            raise FieldProcessingError(
                ErrorKind.UNKNOWN_FIELD,
                build_path(path, entry.name),
                field=entry.name,
                detail={"kind": kind},
            )
        if entry.leaf:
            if requires_selection(catalog, spec.type):
                reason = selection_reason(catalog, spec.type)
                raise requires_field_selection(reason, build_path(path, spec.name), field=spec.name)
            result.template.append(spec.name)
        else:
            nested = process_fields(return_type_for(spec.type), entry.nested, path + [spec.name])
            result.template.append((spec.name, nested.template))
    return result
