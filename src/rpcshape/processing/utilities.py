# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Plan types and small formatting helpers shared by the field processors."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from dataclasses import field as _field
from typing import Any, NamedTuple

from rpcshape.model.naming import from_camel

# ###############
# Public Interface
# ###############

# A load item is a bare field name, a (name, nested load items) pair, or a
# (name, {"args": ..., "fields": ...}) pair for calculations with arguments.
LoadItem = str | tuple[str, Any]

# A template item is a bare field name or a (name, nested template) pair.
TemplateItem = str | tuple[str, list[Any]]


@dataclass
class FieldsResult:
    """The (select, load, template) triple produced for one selection level."""

    select: list[str] = _field(default_factory=list)
    load: list[LoadItem] = _field(default_factory=list)
    template: list[TemplateItem] = _field(default_factory=list)


@dataclass(frozen=True)
class ProjectionPlan:
    """The processed form of a client selection.

    Attributes:
        select: Attribute names fetched directly, without a sub-plan.
        load: Fields the execution engine has to materialize.
        template: Response shape mirroring the requested order and nesting.
    """

    select: list[str]
    load: list[LoadItem]
    template: list[TemplateItem]

    def to_dict(self) -> dict[str, Any]:
        """Render the plan as a JSON-compatible object."""
        return {
            "select": list(self.select),
            "load": [_item_to_json(item) for item in self.load],
            "template": [_item_to_json(item) for item in self.template],
        }


# Re-enters the dispatcher for a nested position: (descriptor, selection, path).
ProcessFields = Callable[[Any, Any, list[str]], FieldsResult]


class SelectionEntry(NamedTuple):
    """One requested field at a selection level."""

    name: str
    nested: Any
    leaf: bool


def normalize_selection(fields: Any) -> Any:
    """Treat a bare mapping as a one-element selection list."""
    if isinstance(fields, dict) and fields:
        return [fields]
    return fields


def iter_entries(fields: list[Any]) -> Iterator[SelectionEntry]:
    """Yield the requested fields of a selection level in request order.

    Bare names are leaves; mapping items and (name, nested) pairs carry a
    nested selection. Entries of any other shape are expected to have been
    rejected by the duplicate check already.
    """
    for entry in fields:
        if isinstance(entry, str):
            yield SelectionEntry(entry, None, True)
        elif isinstance(entry, dict):
            for name, nested in entry.items():
                yield SelectionEntry(name, nested, False)
        elif isinstance(entry, tuple) and len(entry) == 2:
            yield SelectionEntry(entry[0], entry[1], False)


def slot_resolver(known: Iterable[str], external_to_internal: dict[str, str] | None = None) -> Callable[[str], str]:
    """Build a resolver mapping requested slot or member names to declared names.

    A name is looked up verbatim, then through *external_to_internal*, then
    in its snake_case form. Unresolvable names are returned unchanged.
    """
    known_names = set(known)
    mapping = external_to_internal or {}

    def _resolve(name: str) -> str:
        if name in known_names:
            return name
        if name in mapping:
            return mapping[name]
        snake = from_camel(name)
        if snake in known_names:
            return snake
        return mapping.get(snake, name)

    return _resolve


def build_path(path: list[str], field_name: str | None = None) -> str:
    """Join *path* (and optionally *field_name*) into a dotted field path."""
    parts = [str(p) for p in path]
    if field_name is not None:
        parts.append(str(field_name))
    return ".".join(parts)


def build_load_spec(field_name: str, nested_select: list[str], nested_load: list[LoadItem]) -> LoadItem:
    """Combine a nested level's select and load lists into one load item."""
    return (field_name, list(nested_select) + list(nested_load))


# ################
# Implementation
# ################


def _item_to_json(item: Any) -> Any:
    if isinstance(item, tuple):
        name, nested = item
        if isinstance(nested, list):
            return {name: [_item_to_json(n) for n in nested]}
        if isinstance(nested, dict):
            return {name: {k: ([_item_to_json(n) for n in v] if isinstance(v, list) else v) for k, v in nested.items()}}
        return {name: nested}
    return item
