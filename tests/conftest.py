# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures: the todo application catalog under tests/data/."""

from pathlib import Path

import pytest

from rpcshape.catalog import Catalog, load_catalog

DATA_DIR = Path(__file__).parent / "data"
CATALOG_FILE = DATA_DIR / "catalog.yaml"


@pytest.fixture(scope="session")
def catalog() -> Catalog:
    """The fixture catalog, loaded once per test session."""
    return load_catalog(CATALOG_FILE)


@pytest.fixture
def catalog_file() -> Path:
    return CATALOG_FILE
