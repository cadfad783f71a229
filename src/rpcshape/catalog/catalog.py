# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Read-only metadata catalog consulted by the field processor and the schema generator.

The catalog is built once from a list of resources and typed structs and is
never mutated afterwards. Field and argument name mappings are indexed in
both directions at construction time, so lookups in either direction are
constant time.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rpcshape.model.naming import from_camel, to_camel
from rpcshape.model.resources import Action, Aggregate, Attribute, Calculation, Relationship, Resource
from rpcshape.model.types import TypedStructDef

# ###############
# Public Interface
# ###############


class CatalogError(Exception):
    """Raised when a catalog cannot be loaded or is internally inconsistent."""


class Catalog:
    """Immutable lookup structure over resources and typed structs."""

    def __init__(
        self,
        resources: list[Resource],
        typed_structs: list[TypedStructDef] | None = None,
    ) -> None:
        self._resources: dict[str, Resource] = {}
        self._indexes: dict[str, _ResourceIndex] = {}
        for resource in resources:
            if resource.name in self._resources:
                raise CatalogError(f"Duplicate resource name '{resource.name}'")
            self._resources[resource.name] = resource
            self._indexes[resource.name] = _build_index(resource)

        self._typed_structs: dict[str, TypedStructDef] = {}
        self._struct_external_to_internal: dict[str, dict[str, str]] = {}
        for struct in typed_structs or []:
            if struct.name in self._typed_structs:
                raise CatalogError(f"Duplicate typed struct name '{struct.name}'")
            self._typed_structs[struct.name] = struct
            self._struct_external_to_internal[struct.name] = _invert(
                struct.field_names, f"field names of typed struct '{struct.name}'"
            )

    # -------- resources --------

    @property
    def resources(self) -> list[Resource]:
        """All resources in declaration order."""
        return list(self._resources.values())

    def resource(self, name: str) -> Resource | None:
        """Return the resource called *name*, or None."""
        return self._resources.get(name)

    def has_resource(self, name: str) -> bool:
        return name in self._resources

    def is_embedded(self, name: str) -> bool:
        """Return True if *name* is a resource stored inline in other resources."""
        resource = self._resources.get(name)
        return resource is not None and resource.embedded

    def typed_struct(self, name: str) -> TypedStructDef | None:
        return self._typed_structs.get(name)

    def struct_field_lookup(self, name: str) -> dict[str, str]:
        """Return the external-to-internal member name table of a typed struct."""
        return dict(self._struct_external_to_internal.get(name, {}))

    # -------- public fields --------

    def attributes(self, resource: Resource) -> list[Attribute]:
        """Public attributes of *resource* in declaration order."""
        return list(self._index(resource).attributes.values())

    def calculations(self, resource: Resource) -> list[Calculation]:
        """Public calculations of *resource* in declaration order."""
        return list(self._index(resource).calculations.values())

    def aggregates(self, resource: Resource) -> list[Aggregate]:
        """Public aggregates of *resource* in declaration order."""
        return list(self._index(resource).aggregates.values())

    def relationships(self, resource: Resource) -> list[Relationship]:
        """Public relationships of *resource* in declaration order."""
        return list(self._index(resource).relationships.values())

    def attribute(self, resource: Resource, name: str) -> Attribute | None:
        return self._index(resource).attributes.get(name)

    def calculation(self, resource: Resource, name: str) -> Calculation | None:
        return self._index(resource).calculations.get(name)

    def aggregate(self, resource: Resource, name: str) -> Aggregate | None:
        return self._index(resource).aggregates.get(name)

    def relationship(self, resource: Resource, name: str) -> Relationship | None:
        return self._index(resource).relationships.get(name)

    def action(self, resource: Resource, name: str) -> Action | None:
        return self._index(resource).actions.get(name)

    # -------- name mappings --------

    def mapped_field_name(self, resource: Resource, field_name: str) -> str:
        """Return the external name of an internal field, or the name itself."""
        return self._index(resource).internal_to_external.get(field_name, field_name)

    def original_field_name(self, resource: Resource, field_name: str) -> str:
        """Return the internal name for an external field name.

        A snake_case name is additionally tried in its camelCase form and a
        camelCase name in its snake_case form, since mappings may be declared
        in either convention and clients send formatted names. Without a
        mapping, the first form naming a declared field is returned; names
        matching nothing are returned unchanged.
        """
        index = self._index(resource)
        candidates = _name_candidates(field_name)
        for candidate in candidates:
            original = index.external_to_internal.get(candidate)
            if original is not None:
                return original
        for candidate in candidates:
            if index.has_field(candidate):
                return candidate
        return field_name

    def mapped_argument_name(self, resource: Resource, action_name: str, argument_name: str) -> str:
        """Return the external name of an action argument, or the name itself."""
        mapping = self._index(resource).argument_internal_to_external.get(action_name, {})
        return mapping.get(argument_name, argument_name)

    def original_argument_name(self, resource: Resource, action_name: str, argument_name: str) -> str:
        """Return the internal name for an external action argument name."""
        mapping = self._index(resource).argument_external_to_internal.get(action_name, {})
        return mapping.get(argument_name, argument_name)

    def _index(self, resource: Resource) -> _ResourceIndex:
        try:
            return self._indexes[resource.name]
        except KeyError:
            raise CatalogError(f"Resource '{resource.name}' is not part of the catalog") from None


# ################
# Implementation
# ################


@dataclass
class _ResourceIndex:
    """Per-resource lookup tables, built once."""

    attributes: dict[str, Attribute] = field(default_factory=dict)
    calculations: dict[str, Calculation] = field(default_factory=dict)
    aggregates: dict[str, Aggregate] = field(default_factory=dict)
    relationships: dict[str, Relationship] = field(default_factory=dict)
    actions: dict[str, Action] = field(default_factory=dict)
    internal_to_external: dict[str, str] = field(default_factory=dict)
    external_to_internal: dict[str, str] = field(default_factory=dict)
    argument_internal_to_external: dict[str, dict[str, str]] = field(default_factory=dict)
    argument_external_to_internal: dict[str, dict[str, str]] = field(default_factory=dict)

    def has_field(self, name: str) -> bool:
        return (
            name in self.attributes
            or name in self.calculations
            or name in self.aggregates
            or name in self.relationships
        )


def _build_index(resource: Resource) -> _ResourceIndex:
    index = _ResourceIndex(
        attributes={a.name: a for a in resource.attributes if a.public},
        calculations={c.name: c for c in resource.calculations if c.public},
        aggregates={a.name: a for a in resource.aggregates if a.public},
        relationships={r.name: r for r in resource.relationships if r.public},
        actions={a.name: a for a in resource.actions},
    )

    index.internal_to_external = dict(resource.field_names)
    index.external_to_internal = _invert(resource.field_names, f"field names of resource '{resource.name}'")

    for action_name, mapping in resource.argument_names.items():
        index.argument_internal_to_external[action_name] = dict(mapping)
        index.argument_external_to_internal[action_name] = _invert(
            mapping, f"argument names of action '{action_name}' on resource '{resource.name}'"
        )
    return index


def _name_candidates(name: str) -> list[str]:
    candidates = [name]
    if "_" in name:
        candidates.append(to_camel(name))
    snake = from_camel(name)
    if snake != name:
        candidates.append(snake)
    return candidates


def _invert(mapping: dict[str, str], label: str) -> dict[str, str]:
    """Invert a name mapping, rejecting two internal names mapped to one external name."""
    inverted: dict[str, str] = {}
    for internal, external in mapping.items():
        if external in inverted:
            raise CatalogError(f"External name '{external}' is used twice in {label}")
        inverted[external] = internal
    return inverted
