# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Field selection for calculations and aggregates with structured results.

A calculation that takes arguments is requested with an object carrying the
argument values and, when its result is structured, a field selection::

    {"summary": {"args": {"maxLength": 80}, "fields": ["text", "truncated"]}}

Calculations and aggregates without arguments but with a structured result
take a plain field list.
"""

from __future__ import annotations

import logging
from typing import Any

from rpcshape.catalog.catalog import Catalog
from rpcshape.model.resources import Argument, Calculation, Resource
from rpcshape.model.types import ArrayTypeRef, MapTypeRef, PrimitiveType, PrimitiveTypeRef, TypeRef
from rpcshape.processing.descriptors import aggregate_type, requires_selection, return_type_for
from rpcshape.processing.errors import ErrorKind, FieldProcessingError
from rpcshape.processing.utilities import (
    FieldsResult,
    ProcessFields,
    build_path,
    normalize_selection,
    slot_resolver,
)
from rpcshape.processing.validator import validate_non_empty_fields

logger = logging.getLogger(__name__)

_ARGS_KEY = "args"
_FIELDS_KEY = "fields"

# ###############
# Public Interface
# ###############


def is_calculation_with_args(nested_fields: Any) -> bool:
    """Return True if *nested_fields* has the ``{"args": ..., "fields": ...}`` form."""
    return (
        isinstance(nested_fields, dict)
        and _ARGS_KEY in nested_fields
        and set(nested_fields) <= {_ARGS_KEY, _FIELDS_KEY}
    )


def process_calculation_with_args(
    catalog: Catalog,
    resource: Resource,
    calc_name: str,
    nested_fields: Any,
    path: list[str],
    result: FieldsResult,
    process_fields: ProcessFields,
) -> None:
    """Process a calculation that declares arguments into *result*.

    The load entry carries the resolved argument values under internal
    names. Structured results additionally need a non-empty ``fields``
    selection, which is processed against the calculation's return type.
    """
    calculation = _calculation(catalog, resource, calc_name, path)
    field_path = build_path(path, calc_name)
    if not is_calculation_with_args(nested_fields):
        raise _invalid_args(calc_name, field_path, "expected an object with 'args' and optional 'fields'")

    args = _resolve_arguments(calculation, nested_fields[_ARGS_KEY], calc_name, field_path)

    needs_fields = requires_selection(catalog, calculation.type)
    requested = nested_fields.get(_FIELDS_KEY)
    if needs_fields:
        requested = normalize_selection(requested)
        if requested is None:
            raise FieldProcessingError(
                ErrorKind.REQUIRES_FIELD_SELECTION,
                field_path,
                field=calc_name,
                detail={"reason": "complex_calculation"},
            )
        validate_non_empty_fields(requested, calc_name, path, "complex_calculation")
    elif requested is None:
        requested = []

    nested = process_fields(return_type_for(calculation.type), requested, path + [calc_name])
    spec: dict[str, Any] = {_ARGS_KEY: args}
    combined = nested.select + nested.load
    if combined:
        spec[_FIELDS_KEY] = combined
    result.load.append((calc_name, spec))

    if needs_fields:
        result.template.append((calc_name, nested.template))
    else:
        result.template.append(calc_name)


def process_calculation_complex(
    catalog: Catalog,
    resource: Resource,
    field_name: str,
    nested_fields: Any,
    path: list[str],
    result: FieldsResult,
    process_fields: ProcessFields,
    *,
    aggregate: bool = False,
) -> None:
    """Process a calculation or aggregate returning a structured value.

    The selection is either a field list or ``{"fields": [...]}``; it is
    processed against the field's own return type.
    """
    kind = "complex_aggregate" if aggregate else "complex_calculation"
    field_path = build_path(path, field_name)

    if isinstance(nested_fields, dict) and _FIELDS_KEY in nested_fields:
        if _ARGS_KEY in nested_fields:
            raise _invalid_args(field_name, field_path, "field does not take arguments")
        nested_fields = nested_fields[_FIELDS_KEY]

    return_type = _complex_return_type(catalog, resource, field_name, aggregate)
    requested = normalize_selection(nested_fields)
    validate_non_empty_fields(requested, field_name, path, kind)

    logger.debug("Processing %s %s", kind, field_path)
    nested = process_fields(return_type_for(return_type), requested, path + [field_name])
    combined = nested.select + nested.load
    result.load.append((field_name, combined) if combined else field_name)
    result.template.append((field_name, nested.template))


# ################
# Implementation
# ################


def _calculation(catalog: Catalog, resource: Resource, name: str, path: list[str]) -> Calculation:
    calculation = catalog.calculation(resource, name)
    if calculation is None:
        raise FieldProcessingError(ErrorKind.UNKNOWN_FIELD, build_path(path, name), field=name)
    return calculation


def _complex_return_type(catalog: Catalog, resource: Resource, name: str, aggregate: bool) -> TypeRef | None:
    if aggregate:
        agg = catalog.aggregate(resource, name)
        return aggregate_type(catalog, resource, agg) if agg is not None else None
    calculation = catalog.calculation(resource, name)
    return calculation.type if calculation is not None else None


def _invalid_args(calc_name: str, field_path: str, problem: str, **detail: Any) -> FieldProcessingError:
    return FieldProcessingError(
        ErrorKind.INVALID_CALCULATION_ARGS,
        field_path,
        field=calc_name,
        detail={"problem": problem, **detail},
    )


def _resolve_arguments(calculation: Calculation, raw_args: Any, calc_name: str, field_path: str) -> dict[str, Any]:
    if not isinstance(raw_args, dict):
        raise _invalid_args(calc_name, field_path, "'args' must be an object")

    declared = {argument.name: argument for argument in calculation.arguments}
    resolve = slot_resolver(declared)
    resolved: dict[str, Any] = {}
    for requested, value in raw_args.items():
        name = resolve(requested) if isinstance(requested, str) else requested
        argument = declared.get(name)
        if argument is None:
            raise _invalid_args(calc_name, field_path, "unknown argument", argument=str(requested))
        if name in resolved:
            raise _invalid_args(calc_name, field_path, "argument given twice", argument=name)
        problem = _check_value(argument, value)
        if problem is not None:
            raise _invalid_args(calc_name, field_path, problem, argument=name)
        resolved[name] = value

    for argument in calculation.arguments:
        if argument.name not in resolved and argument.is_required:
            raise _invalid_args(calc_name, field_path, "missing required argument", argument=argument.name)
    return resolved


def _check_value(argument: Argument, value: Any) -> str | None:
    """Return a description of why *value* does not fit *argument*, or None."""
    if value is None:
        return None if argument.allow_nil else "argument does not accept null"
    if not _value_matches(argument.type, value):
        return f"value {value!r} does not match the argument type"
    return None


_STRING_LIKE = {
    PrimitiveType.STRING,
    PrimitiveType.CI_STRING,
    PrimitiveType.UUID,
    PrimitiveType.DATE,
    PrimitiveType.TIME,
    PrimitiveType.DATETIME,
    PrimitiveType.UTC_DATETIME,
    PrimitiveType.NAIVE_DATETIME,
    PrimitiveType.BINARY,
}


def _value_matches(type_ref: TypeRef, value: Any) -> bool:
    if isinstance(type_ref, ArrayTypeRef):
        return isinstance(value, list) and all(v is None or _value_matches(type_ref.item, v) for v in value)
    if isinstance(type_ref, MapTypeRef):
        return isinstance(value, dict)
    if not isinstance(type_ref, PrimitiveTypeRef):
        return True

    kind = type_ref.primitive
    if type_ref.one_of:
        return isinstance(value, str) and value in type_ref.one_of
    if kind in _STRING_LIKE or kind is PrimitiveType.ATOM:
        return isinstance(value, str)
    if kind is PrimitiveType.BOOLEAN:
        return isinstance(value, bool)
    if kind is PrimitiveType.INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if kind in (PrimitiveType.FLOAT, PrimitiveType.DURATION):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind is PrimitiveType.DECIMAL:
        return isinstance(value, (int, float, str)) and not isinstance(value, bool)
    return True
