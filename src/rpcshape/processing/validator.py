# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural checks applied to a selection before it is processed."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from rpcshape.processing.errors import ErrorKind, FieldProcessingError, requires_field_selection
from rpcshape.processing.utilities import build_path

# ###############
# Public Interface
# ###############

NameResolver = Callable[[str], str]


def validate_non_empty_fields(nested_fields: Any, field_name: str | None, path: list[str], kind: str) -> None:
    """Require *nested_fields* to be a non-empty list.

    Raises:
        FieldProcessingError: ``unsupported_field_combination`` if the nested
            selection is not a list, ``requires_field_selection`` if it is empty.
    """
    field_path = build_path(path, field_name)
    if not isinstance(nested_fields, list):
        raise FieldProcessingError(
            ErrorKind.UNSUPPORTED_FIELD_COMBINATION,
            field_path,
            field=field_name,
            detail={"kind": kind},
        )
    if not nested_fields:
        raise requires_field_selection(kind, field_path, field=field_name)


def check_for_duplicate_fields(fields: list[Any], path: list[str], resolve: NameResolver | None = None) -> None:
    """Reject a selection level that names the same field more than once.

    Names are resolved through *resolve* (typically a field name mapping)
    before comparison, so an internal name and its external alias count as
    the same field.

    Raises:
        FieldProcessingError: ``invalid_field_type`` for an entry that is not
            a name, a mapping or a (name, nested) pair; ``duplicate_field``
            for the first name seen twice.
    """
    seen: set[str] = set()
    for entry in fields:
        for name in _extract_field_names(entry, path):
            resolved = resolve(name) if resolve is not None else name
            if resolved in seen:
                raise FieldProcessingError(
                    ErrorKind.DUPLICATE_FIELD,
                    build_path(path, resolved),
                    field=resolved,
                )
            seen.add(resolved)


# ################
# Implementation
# ################


def _extract_field_names(entry: Any, path: list[str]) -> list[str]:
    if isinstance(entry, str):
        return [_require_name(entry, path)]
    if isinstance(entry, dict):
        return [_require_name(key, path) for key in entry]
    if isinstance(entry, tuple) and len(entry) == 2:
        return [_require_name(entry[0], path)]
    raise FieldProcessingError(ErrorKind.INVALID_FIELD_TYPE, build_path(path), detail={"value": repr(entry)})


def _require_name(name: Any, path: list[str]) -> str:
    if not isinstance(name, str) or not name:
        raise FieldProcessingError(ErrorKind.INVALID_FIELD_TYPE, build_path(path), detail={"value": repr(name)})
    return name
