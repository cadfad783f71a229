# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""YAML loader for resource catalogs."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rpcshape.catalog.catalog import Catalog, CatalogError
from rpcshape.model.resources import Resource
from rpcshape.model.types import TypedStructDef

# ###############
# Public Interface
# ###############


class CatalogDocument(BaseModel):
    """Top-level structure of a catalog file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    resources: list[Resource] = Field(default_factory=list)
    typed_structs: list[TypedStructDef] = Field(alias="typed-structs", default_factory=list)


def load_catalog(path: Path) -> Catalog:
    """Load and validate a catalog file.

    An empty file is treated as an empty catalog.

    Args:
        path: Path to the catalog YAML file.

    Returns:
        A :class:`Catalog` built from the file's resources and typed structs.

    Raises:
        CatalogError: If the file cannot be read, contains invalid YAML,
            or does not conform to the catalog schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog '{path}': {exc}") from exc

    return parse_catalog(raw, source_label=str(path))


def parse_catalog(text: str, source_label: str = "<string>") -> Catalog:
    """Parse catalog YAML text into a :class:`Catalog`."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CatalogError(f"Invalid YAML in catalog '{source_label}': {exc}") from exc

    if data is None:
        data = {}

    try:
        document = CatalogDocument.model_validate(data)
    except ValidationError as exc:
        raise CatalogError(f"Invalid catalog '{source_label}': {exc}") from exc

    return Catalog(document.resources, document.typed_structs)
