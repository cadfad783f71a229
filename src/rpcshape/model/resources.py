# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resource metadata: attributes, calculations, aggregates, relationships, and actions."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import Field as _Field

from rpcshape.model.types import TypeRef

# ###############
# Public Interface
# ###############


class Argument(BaseModel):
    """A named input to a calculation or an action."""

    name: str
    type: TypeRef
    allow_nil: bool = True
    default: Any = None
    has_default: bool = False

    @property
    def is_required(self) -> bool:
        """Return True if a caller must supply a value for this argument."""
        return not self.allow_nil and not self.has_default and self.default is None


class Attribute(BaseModel):
    """A stored field of a resource."""

    name: str
    type: TypeRef
    allow_nil: bool = True
    default: Any = None
    public: bool = True


class Calculation(BaseModel):
    """A derived field, optionally parameterized by arguments."""

    name: str
    type: TypeRef
    allow_nil: bool = True
    public: bool = True
    arguments: list[Argument] = _Field(default_factory=list)


class AggregateKind(Enum):
    """Summaries an aggregate can compute over a relationship."""

    COUNT = "count"
    EXISTS = "exists"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"
    FIRST = "first"
    LIST = "list"


class Aggregate(BaseModel):
    """A derived field summarizing the records behind a relationship path.

    Attributes:
        kind: The summary to compute.
        relationship_path: Relationship names walked from the owning resource.
        field: Field of the destination resource being summarized; unused
            for ``count`` and ``exists``.
        type: Explicit value type; when unset the type is derived from
            *kind* and the destination field.
        include_nil: Whether the value may be absent.
    """

    name: str
    kind: AggregateKind
    relationship_path: list[str] = _Field(default_factory=list)
    field: str | None = None
    type: TypeRef | None = None
    include_nil: bool = False
    public: bool = True


class Cardinality(Enum):
    """Relationship cardinalities."""

    BELONGS_TO = "belongs_to"
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    MANY_TO_MANY = "many_to_many"


class Relationship(BaseModel):
    """A link from one resource to another."""

    name: str
    destination: str
    cardinality: Cardinality = Cardinality.BELONGS_TO
    allow_nil: bool = True
    public: bool = True

    @property
    def is_many(self) -> bool:
        """Return True if the relationship yields a list of records."""
        return self.cardinality in (Cardinality.HAS_MANY, Cardinality.MANY_TO_MANY)


class ActionType(Enum):
    """Kinds of actions a resource exposes."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DESTROY = "destroy"
    ACTION = "action"


class Action(BaseModel):
    """An operation clients can invoke on a resource.

    Attributes:
        type: The action kind. Generic actions (``action``) describe their
            result with *returns*; the others return records of the resource.
        get: For read actions, whether a single record is returned.
        returns: Result type of a generic action.
    """

    name: str
    type: ActionType = ActionType.READ
    get: bool = False
    returns: TypeRef | None = None
    arguments: list[Argument] = _Field(default_factory=list)


class Resource(BaseModel):
    """Immutable description of a record type exposed to clients.

    Attributes:
        name: Catalog-wide identity of the resource.
        type_name: Name used for generated type definitions.
        embedded: Whether the resource is stored inline in other resources
            rather than queried on its own.
        field_names: Mapping from internal field names to external names.
        argument_names: Per-action mapping from internal argument names to
            external names.
    """

    name: str
    type_name: str | None = None
    embedded: bool = False
    attributes: list[Attribute] = _Field(default_factory=list)
    calculations: list[Calculation] = _Field(default_factory=list)
    aggregates: list[Aggregate] = _Field(default_factory=list)
    relationships: list[Relationship] = _Field(default_factory=list)
    actions: list[Action] = _Field(default_factory=list)
    field_names: dict[str, str] = _Field(default_factory=dict)
    argument_names: dict[str, dict[str, str]] = _Field(default_factory=dict)

    @property
    def schema_name(self) -> str:
        """Return the name used for this resource's generated types."""
        return self.type_name or self.name


# Resolve forward references for models that use TypeRef.
Argument.model_rebuild()
Attribute.model_rebuild()
Calculation.model_rebuild()
Aggregate.model_rebuild()
Action.model_rebuild()
Resource.model_rebuild()
