# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Errors raised while validating a client field selection."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as _field
from enum import Enum
from typing import Any

# ###############
# Public Interface
# ###############


class ErrorKind(Enum):
    """Kinds of rejected field selections."""

    ACTION_NOT_FOUND = "action_not_found"
    UNKNOWN_FIELD = "unknown_field"
    REQUIRES_FIELD_SELECTION = "requires_field_selection"
    DUPLICATE_FIELD = "duplicate_field"
    INVALID_FIELD_TYPE = "invalid_field_type"
    INVALID_FIELD_SELECTION = "invalid_field_selection"
    FIELD_DOES_NOT_SUPPORT_NESTING = "field_does_not_support_nesting"
    CALCULATION_REQUIRES_ARGS = "calculation_requires_args"
    INVALID_CALCULATION_ARGS = "invalid_calculation_args"
    UNSUPPORTED_FIELD_COMBINATION = "unsupported_field_combination"
    INVALID_UNION_FIELD_FORMAT = "invalid_union_field_format"


@dataclass(frozen=True)
class ProcessingErrorInfo:
    """Structured description of a rejected selection, returned to the caller.

    Attributes:
        kind: What went wrong.
        path: Dotted field path from the action root to the offending field.
        field: Name of the offending field, when there is one.
        detail: Additional machine-readable context (e.g. the reason a
            selection is required, or the offending argument).
    """

    kind: ErrorKind
    path: str
    field: str | None = None
    detail: dict[str, Any] = _field(default_factory=dict)

    @property
    def message(self) -> str:
        """Human-readable description of the error."""
        return _describe(self)

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a JSON-compatible object."""
        data: dict[str, Any] = {"kind": self.kind.value, "path": self.path}
        if self.field is not None:
            data["field"] = self.field
        if self.detail:
            data["detail"] = dict(self.detail)
        return data


class FieldProcessingError(Exception):
    """Raised at the point a selection is found invalid.

    Only :func:`rpcshape.processing.process` catches it; callers receive
    the wrapped :class:`ProcessingErrorInfo`.
    """

    def __init__(
        self,
        kind: ErrorKind,
        path: str,
        *,
        field: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        self.info = ProcessingErrorInfo(kind=kind, path=path, field=field, detail=dict(detail or {}))
        super().__init__(self.info.message)

    @property
    def kind(self) -> ErrorKind:
        return self.info.kind

    @property
    def path(self) -> str:
        return self.info.path


def requires_field_selection(reason: str, path: str, field: str | None = None) -> FieldProcessingError:
    """Build the error for a field that was requested without a nested selection."""
    return FieldProcessingError(
        ErrorKind.REQUIRES_FIELD_SELECTION,
        path,
        field=field,
        detail={"reason": reason},
    )


# ################
# Implementation
# ################


def _describe(info: ProcessingErrorInfo) -> str:
    kind = info.kind
    where = f"'{info.path}'" if info.path else "the selection root"
    if kind is ErrorKind.ACTION_NOT_FOUND:
        return f"Action '{info.field}' not found"
    if kind is ErrorKind.UNKNOWN_FIELD:
        return f"Unknown field {where}"
    if kind is ErrorKind.REQUIRES_FIELD_SELECTION:
        reason = info.detail.get("reason", "field")
        return f"Field {where} ({reason}) requires a nested field selection"
    if kind is ErrorKind.DUPLICATE_FIELD:
        return f"Field {where} was requested multiple times"
    if kind is ErrorKind.INVALID_FIELD_TYPE:
        return f"Invalid field entry {info.detail.get('value')!r} at {where}"
    if kind is ErrorKind.INVALID_FIELD_SELECTION:
        return f"Field selection is not allowed on {where}"
    if kind is ErrorKind.FIELD_DOES_NOT_SUPPORT_NESTING:
        return f"Field {where} does not support nested field selection"
    if kind is ErrorKind.CALCULATION_REQUIRES_ARGS:
        return f"Calculation {where} requires arguments"
    if kind is ErrorKind.INVALID_CALCULATION_ARGS:
        problem = info.detail.get("problem")
        suffix = f": {problem}" if problem else ""
        return f"Invalid calculation arguments for {where}{suffix}"
    if kind is ErrorKind.UNSUPPORTED_FIELD_COMBINATION:
        return f"Unsupported nested selection for {where}; expected a list of fields"
    return f"Invalid union member selection for {where}"
