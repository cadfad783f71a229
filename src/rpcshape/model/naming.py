# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Naming conventions applied to internal names before they reach clients."""

from __future__ import annotations

import re
from enum import Enum

# ###############
# Public Interface
# ###############


class FieldFormatter(Enum):
    """Supported output naming conventions."""

    CAMEL_CASE = "camel_case"
    SNAKE_CASE = "snake_case"
    PASCAL_CASE = "pascal_case"


def format_field(name: str, formatter: FieldFormatter = FieldFormatter.CAMEL_CASE) -> str:
    """Format an internal name according to *formatter*.

    A trailing ``?`` or ``!`` is kept as-is; names that must be valid
    identifiers should be renamed through a field name mapping instead.
    """
    if formatter is FieldFormatter.CAMEL_CASE:
        return to_camel(name)
    if formatter is FieldFormatter.PASCAL_CASE:
        camel = to_camel(name)
        return camel[:1].upper() + camel[1:]
    return from_camel(name)


def to_camel(name: str) -> str:
    """Convert snake_case to lowerCamelCase."""
    if not name:
        return name
    parts = name.split("_")
    head = parts[0]
    return head + "".join(_capitalize(p) for p in parts[1:])


def from_camel(name: str) -> str:
    """Convert lower/upper camelCase to snake_case."""
    if not name:
        return name
    return _CAMEL_BOUNDARY.sub("_", name).lower()


# ################
# Implementation
# ################

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _capitalize(part: str) -> str:
    # str.capitalize() would lowercase the rest of an already camelCased part.
    return part[:1].upper() + part[1:]
