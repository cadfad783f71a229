# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Validation of client field selections and their translation into fetch plans.

Given a resource, one of its actions and a client selection, the processor
walks the selection against the action's return type and produces a
:class:`~rpcshape.processing.utilities.ProjectionPlan`: the attributes to
select, the fields to load and the template that shapes the response.

Every rejected selection is raised as a :class:`FieldProcessingError` at the
point it is detected; :func:`process` is the only place that catches it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from rpcshape.catalog.catalog import Catalog, CatalogError
from rpcshape.model.resources import Resource
from rpcshape.model.types import (
    AnyTypeRef,
    ArrayTypeRef,
    KeywordTypeRef,
    MapTypeRef,
    ResourceTypeRef,
    StructTypeRef,
    TupleTypeRef,
    TypedStructTypeRef,
    TypeRef,
    UnionTypeRef,
)
from rpcshape.processing.calculation import process_calculation_complex, process_calculation_with_args
from rpcshape.processing.descriptors import (
    AnyReturn,
    FieldClassification,
    ResourceReturn,
    ReturnType,
    TypeReturn,
    classify,
    descriptor_of,
    embedded_resource_name,
    return_type_for,
)
from rpcshape.processing.errors import ErrorKind, FieldProcessingError, ProcessingErrorInfo, requires_field_selection
from rpcshape.processing.tuples import process_named_slots, process_tuple_fields, process_tuple_type
from rpcshape.processing.typed_struct import process_typed_struct, process_typed_struct_fields
from rpcshape.processing.union import process_union_attribute, process_union_members
from rpcshape.processing.utilities import (
    FieldsResult,
    ProjectionPlan,
    SelectionEntry,
    build_load_spec,
    build_path,
    iter_entries,
    normalize_selection,
    slot_resolver,
)
from rpcshape.processing.validator import check_for_duplicate_fields, validate_non_empty_fields

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of processing one selection: a plan or an error, never both.

    Attributes:
        plan: The projection plan, if the selection was accepted.
        error: The reason the selection was rejected, otherwise.
    """

    plan: ProjectionPlan | None = None
    error: ProcessingErrorInfo | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def process(
    catalog: Catalog,
    resource: Resource | str,
    action_name: str,
    selection: Any,
    allowed_resources: Iterable[str] | None = None,
) -> ProcessResult:
    """Validate *selection* for *action_name* on *resource* and plan its fetch.

    Args:
        catalog: The metadata catalog the resource belongs to.
        resource: The resource, or its name.
        action_name: Name of the action whose result is being shaped.
        selection: The client's field selection: a list of names, mappings
            and (name, nested) pairs, or a single mapping.
        allowed_resources: Resources a selection may reach from *resource*.
            ``None`` allows every catalog resource. Fields leading to any
            other resource are reported as unknown.

    Returns:
        A :class:`ProcessResult` holding either the plan or the first error
        found. No partial plan is ever returned.

    Raises:
        CatalogError: If the resource, or a typed struct it refers to, is
            missing from the catalog.
    """
    target = _lookup_resource(catalog, resource)
    try:
        plan = _FieldProcessor(catalog, allowed_resources).run(target, action_name, selection)
    except FieldProcessingError as exc:
        logger.debug("Rejected selection for %s.%s: %s", target.name, action_name, exc)
        return ProcessResult(error=exc.info)
    return ProcessResult(plan=plan)


# ################
# Implementation
# ################


def _lookup_resource(catalog: Catalog, resource: Resource | str) -> Resource:
    name = resource if isinstance(resource, str) else resource.name
    found = catalog.resource(name)
    if found is None:
        raise CatalogError(f"Resource '{name}' is not part of the catalog")
    return found


class _FieldProcessor:
    """Recursive dispatcher over return type descriptors."""

    def __init__(self, catalog: Catalog, allowed_resources: Iterable[str] | None = None) -> None:
        self._catalog = catalog
        self._allowed = None if allowed_resources is None else set(allowed_resources)

    def run(self, resource: Resource, action_name: str, selection: Any) -> ProjectionPlan:
        action = self._catalog.action(resource, action_name)
        if action is None:
            raise FieldProcessingError(ErrorKind.ACTION_NOT_FOUND, "", field=action_name)

        if self._allowed is not None:
            self._allowed.add(resource.name)
        descriptor = descriptor_of(resource, action)
        logger.debug("Processing %s.%s returning %s", resource.name, action_name, descriptor)
        result = self.process_fields(descriptor, normalize_selection(selection), [])
        return ProjectionPlan(select=result.select, load=result.load, template=result.template)

    # -------- dispatch --------

    def process_fields(self, return_type: ReturnType, fields: Any, path: list[str]) -> FieldsResult:
        """Process *fields* at a position holding a value described by *return_type*."""
        if isinstance(return_type, ResourceReturn):
            return self._process_resource_fields(self._resource(return_type.resource, path), fields, path)
        if isinstance(return_type, TypeReturn):
            return self._process_type(return_type.type, fields, path)
        if isinstance(return_type, AnyReturn):
            return _process_generic(fields, path)
        raise TypeError(f"Unexpected return type descriptor: {return_type!r}")

    def _process_type(self, type_ref: TypeRef, fields: Any, path: list[str]) -> FieldsResult:
        if isinstance(type_ref, ArrayTypeRef):
            return self.process_fields(return_type_for(type_ref.item), fields, path)
        if isinstance(type_ref, ResourceTypeRef):
            return self._process_resource_fields(self._resource(type_ref.name, path), fields, path)
        if isinstance(type_ref, (MapTypeRef, KeywordTypeRef)):
            if not type_ref.fields:
                return _process_generic(fields, path)
            return process_named_slots(
                self._catalog,
                type_ref.fields,
                normalize_selection(fields),
                path,
                self.process_fields,
                resolve=slot_resolver(spec.name for spec in type_ref.fields),
                kind="map_field",
            )
        if isinstance(type_ref, TupleTypeRef):
            if not type_ref.fields:
                return _process_generic(fields, path)
            return process_tuple_fields(
                self._catalog, type_ref.fields, normalize_selection(fields), path, self.process_fields
            )
        if isinstance(type_ref, StructTypeRef):
            if type_ref.instance_of is not None and self._catalog.has_resource(type_ref.instance_of):
                return self._process_resource_fields(self._resource(type_ref.instance_of, path), fields, path)
            return _process_generic(fields, path)
        if isinstance(type_ref, TypedStructTypeRef):
            fields = normalize_selection(fields)
            validate_non_empty_fields(fields, path[-1] if path else None, path[:-1], "typed_struct")
            return process_typed_struct_fields(self._catalog, type_ref.name, fields, path, self.process_fields)
        if isinstance(type_ref, UnionTypeRef):
            return process_union_members(self._catalog, type_ref, fields, path, self.process_fields)
        if isinstance(type_ref, AnyTypeRef):
            return _process_generic(fields, path)

        # Plain scalar.
        if fields:
            raise FieldProcessingError(
                ErrorKind.INVALID_FIELD_SELECTION,
                build_path(path),
                field=path[-1] if path else None,
            )
        return FieldsResult()

    # -------- resources --------

    def _process_resource_fields(self, resource: Resource, fields: Any, path: list[str]) -> FieldsResult:
        fields = normalize_selection(fields)
        if not isinstance(fields, list):
            raise FieldProcessingError(
                ErrorKind.UNSUPPORTED_FIELD_COMBINATION,
                build_path(path),
                field=path[-1] if path else None,
                detail={"kind": "resource"},
            )
        check_for_duplicate_fields(fields, path, lambda name: self._catalog.original_field_name(resource, name))

        result = FieldsResult()
        for entry in iter_entries(fields):
            name = self._catalog.original_field_name(resource, entry.name)
            classification = classify(self._catalog, resource, name)
            if classification is FieldClassification.RELATIONSHIP and not self._leads_to_exposed(resource, name):
                classification = FieldClassification.NOT_FOUND
            if classification is FieldClassification.NOT_FOUND:
                raise FieldProcessingError(
                    ErrorKind.UNKNOWN_FIELD,
                    build_path(path, entry.name),
                    field=entry.name,
                    detail={"resource": resource.name},
                )
            if entry.leaf:
                _process_leaf(classification, name, path, result)
            else:
                self._process_nested(resource, classification, name, entry, path, result)
        return result

    def _process_nested(
        self,
        resource: Resource,
        classification: FieldClassification,
        name: str,
        entry: SelectionEntry,
        path: list[str],
        result: FieldsResult,
    ) -> None:
        catalog = self._catalog
        nested = entry.nested
        if classification is FieldClassification.RELATIONSHIP:
            self._process_relationship(resource, name, nested, path, result)
        elif classification in (FieldClassification.EMBEDDED_RESOURCE, FieldClassification.EMBEDDED_RESOURCE_ARRAY):
            self._process_embedded(resource, name, nested, path, result)
        elif classification is FieldClassification.CALCULATION_WITH_ARGS:
            process_calculation_with_args(catalog, resource, name, nested, path, result, self.process_fields)
        elif classification is FieldClassification.CALCULATION_COMPLEX:
            process_calculation_complex(catalog, resource, name, nested, path, result, self.process_fields)
        elif classification is FieldClassification.COMPLEX_AGGREGATE:
            process_calculation_complex(
                catalog, resource, name, nested, path, result, self.process_fields, aggregate=True
            )
        elif classification is FieldClassification.UNION_ATTRIBUTE:
            process_union_attribute(catalog, resource, name, nested, path, result, self.process_fields)
        elif classification is FieldClassification.TYPED_STRUCT:
            process_typed_struct(catalog, resource, name, nested, path, result, self.process_fields)
        elif classification is FieldClassification.TUPLE:
            process_tuple_type(catalog, resource, name, nested, path, result, self.process_fields)
        else:
            raise FieldProcessingError(
                ErrorKind.FIELD_DOES_NOT_SUPPORT_NESTING,
                build_path(path, name),
                field=name,
                detail={"classification": classification.value},
            )

    def _process_relationship(
        self, resource: Resource, name: str, nested: Any, path: list[str], result: FieldsResult
    ) -> None:
        relationship = self._catalog.relationship(resource, name)
        fields = normalize_selection(nested)
        validate_non_empty_fields(fields, name, path, "relationship")

        destination = self._resource(relationship.destination, path + [name])
        sub = self._process_resource_fields(destination, fields, path + [name])
        result.load.append(build_load_spec(name, sub.select, sub.load))
        result.template.append((name, sub.template))

    def _process_embedded(
        self, resource: Resource, name: str, nested: Any, path: list[str], result: FieldsResult
    ) -> None:
        attribute = self._catalog.attribute(resource, name)
        fields = normalize_selection(nested)
        validate_non_empty_fields(fields, name, path, "embedded")

        embedded = self._resource(embedded_resource_name(self._catalog, attribute.type), path + [name])
        sub = self._process_resource_fields(embedded, fields, path + [name])
        # Embedded attributes come with the value; only calculations and aggregates need loading.
        result.select.append(name)
        if sub.load:
            result.load.append((name, sub.load))
        result.template.append((name, sub.template))

    def _leads_to_exposed(self, resource: Resource, name: str) -> bool:
        relationship = self._catalog.relationship(resource, name)
        return self._exposed(relationship.destination)

    def _exposed(self, name: str | None) -> bool:
        if name is None or not self._catalog.has_resource(name):
            return False
        return self._allowed is None or name in self._allowed

    def _resource(self, name: str | None, path: list[str]) -> Resource:
        """Return the resource a selection at *path* descends into.

        A resource missing from the catalog or outside the allow-list is
        reported as an unknown field at *path*.
        """
        if not self._exposed(name):
            raise FieldProcessingError(ErrorKind.UNKNOWN_FIELD, build_path(path), field=path[-1] if path else None)
        return self._catalog.resource(name)


_LEAF_SELECTION_REASONS = {
    FieldClassification.CALCULATION_COMPLEX: "complex_calculation",
    FieldClassification.COMPLEX_AGGREGATE: "complex_aggregate",
    FieldClassification.RELATIONSHIP: "relationship",
    FieldClassification.EMBEDDED_RESOURCE: "embedded",
    FieldClassification.EMBEDDED_RESOURCE_ARRAY: "embedded",
    FieldClassification.UNION_ATTRIBUTE: "union",
    FieldClassification.TYPED_STRUCT: "typed_struct",
    FieldClassification.TUPLE: "tuple",
}


def _process_leaf(classification: FieldClassification, name: str, path: list[str], result: FieldsResult) -> None:
    if classification is FieldClassification.ATTRIBUTE:
        result.select.append(name)
        result.template.append(name)
    elif classification in (FieldClassification.CALCULATION, FieldClassification.AGGREGATE):
        result.load.append(name)
        result.template.append(name)
    elif classification is FieldClassification.CALCULATION_WITH_ARGS:
        raise FieldProcessingError(ErrorKind.CALCULATION_REQUIRES_ARGS, build_path(path, name), field=name)
    else:
        raise requires_field_selection(_LEAF_SELECTION_REASONS[classification], build_path(path, name), field=name)


def _process_generic(fields: Any, path: list[str]) -> FieldsResult:
    """Copy a selection on an untyped value into the template as-is.

    The selection still has to be well formed: names, mappings and pairs
    only, each name once, with lists as nested selections.
    """
    result = FieldsResult()
    fields = normalize_selection(fields)
    if not fields:
        return result
    if not isinstance(fields, list):
        raise FieldProcessingError(
            ErrorKind.UNSUPPORTED_FIELD_COMBINATION,
            build_path(path),
            field=path[-1] if path else None,
            detail={"kind": "any"},
        )
    check_for_duplicate_fields(fields, path)
    for entry in iter_entries(fields):
        if entry.leaf:
            result.template.append(entry.name)
        else:
            nested = _process_generic(entry.nested, path + [entry.name])
            result.template.append((entry.name, nested.template))
    return result
