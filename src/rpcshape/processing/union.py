# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Field selection for tagged union values.

A union selection names the members the client wants back. Members holding
plain values are requested with a bare name; members holding structured
values (embedded resources, typed structs, constrained maps) need a nested
field list::

    ["note", {"text": ["id", "text"]}]

A single mapping is shorthand for a one-element list.
"""

from __future__ import annotations

import logging
from typing import Any

from rpcshape.catalog.catalog import Catalog
from rpcshape.model.resources import Resource
from rpcshape.model.types import UnionMember, UnionTypeRef, unwrap_array
from rpcshape.processing.descriptors import (
    embedded_resource_name,
    requires_selection,
    return_type_for,
    selection_reason,
)
from rpcshape.processing.errors import ErrorKind, FieldProcessingError, requires_field_selection
from rpcshape.processing.utilities import (
    FieldsResult,
    ProcessFields,
    build_path,
    normalize_selection,
    slot_resolver,
)
from rpcshape.processing.validator import check_for_duplicate_fields, validate_non_empty_fields

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def process_union_attribute(
    catalog: Catalog,
    resource: Resource,
    field_name: str,
    nested_fields: Any,
    path: list[str],
    result: FieldsResult,
    process_fields: ProcessFields,
) -> None:
    """Process a union-typed attribute of *resource* into *result*.

    The attribute itself is always selected, since selecting it fetches the
    whole union value. Only embedded resource members with loadable fields
    add a load entry.
    """
    attribute = catalog.attribute(resource, field_name)
    union = _union_of(attribute.type if attribute is not None else None)
    if union is None:
        raise FieldProcessingError(ErrorKind.UNKNOWN_FIELD, build_path(path, field_name), field=field_name)

    members = process_union_members(catalog, union, nested_fields, path + [field_name], process_fields)
    result.select.append(field_name)
    if members.load:
        result.load.append((field_name, members.load))
    result.template.append((field_name, members.template))


def process_union_members(
    catalog: Catalog,
    union: UnionTypeRef,
    nested_fields: Any,
    union_path: list[str],
    process_fields: ProcessFields,
) -> FieldsResult:
    """Process a member selection against *union*.

    *union_path* is the path of the union value itself; member paths extend
    it with the member name. The returned result carries no select entries.
    """
    fields = normalize_selection(nested_fields)
    field_name = union_path[-1] if union_path else None
    validate_non_empty_fields(fields, field_name, union_path[:-1], "union")

    by_name = {member.name: member for member in union.members}
    resolve = slot_resolver(by_name)
    check_for_duplicate_fields(fields, union_path, resolve)

    result = FieldsResult()
    for entry in fields:
        if isinstance(entry, str):
            member = _member(by_name, resolve(entry), entry, union_path)
            _process_member_leaf(catalog, member, union_path, result)
        elif isinstance(entry, dict):
            for requested, member_fields in entry.items():
                member = _member(by_name, resolve(requested), requested, union_path)
                _process_member_fields(catalog, member, member_fields, union_path, result, process_fields)
        else:
            raise FieldProcessingError(
                ErrorKind.INVALID_UNION_FIELD_FORMAT,
                build_path(union_path),
                field=field_name,
                detail={"value": repr(entry)},
            )
    return result


# ################
# Implementation
# ################


def _union_of(type_ref: Any) -> UnionTypeRef | None:
    inner, _ = unwrap_array(type_ref)
    if isinstance(inner, UnionTypeRef):
        return inner
    return None


def _member(by_name: dict[str, UnionMember], resolved: str, requested: str, union_path: list[str]) -> UnionMember:
    member = by_name.get(resolved)
    if member is None:
        raise FieldProcessingError(
            ErrorKind.UNKNOWN_FIELD,
            build_path(union_path, requested),
            field=requested,
            detail={"kind": "union_member"},
        )
    return member


def _process_member_leaf(catalog: Catalog, member: UnionMember, union_path: list[str], result: FieldsResult) -> None:
    if requires_selection(catalog, member.type):
        reason = selection_reason(catalog, member.type)
        raise requires_field_selection(reason, build_path(union_path, member.name), field=member.name)
    result.template.append(member.name)


def _process_member_fields(
    catalog: Catalog,
    member: UnionMember,
    member_fields: Any,
    union_path: list[str],
    result: FieldsResult,
    process_fields: ProcessFields,
) -> None:
    member_path = union_path + [member.name]
    logger.debug("Processing union member %s", build_path(member_path))
    nested = process_fields(return_type_for(member.type), member_fields, member_path)

    # The union value is fetched whole; only embedded resources have loadable fields of their own.
    if embedded_resource_name(catalog, member.type) is not None and nested.load:
        result.load.append((member.name, nested.load))
    result.template.append((member.name, nested.template))
