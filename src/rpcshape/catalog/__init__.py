# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Read-only resource metadata catalog and its YAML loader."""

from rpcshape.catalog.catalog import Catalog, CatalogError
from rpcshape.catalog.loader import CatalogDocument, load_catalog, parse_catalog

__all__ = [
    "Catalog",
    "CatalogDocument",
    "CatalogError",
    "load_catalog",
    "parse_catalog",
]
