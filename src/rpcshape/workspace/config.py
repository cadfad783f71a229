# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the rpcshape project configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from rpcshape.model.naming import FieldFormatter

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = "rpcshape.yaml"
DEFAULT_OUTPUT = "rpcshape-generated.ts"


class ProjectConfigError(Exception):
    """Raised when a project configuration file is invalid or cannot be loaded."""


@dataclass
class ProjectConfig:
    """The parsed configuration for an rpcshape project.

    Attributes:
        catalog: Path of the catalog YAML file, relative to the project root.
        output: Path of the generated TypeScript file, relative to the project root.
        field_formatter: Naming convention for generated field names.
        resources: Exposure allow-list and generation roots. Empty means
            every non-embedded resource of the catalog.
    """

    catalog: str
    output: str = DEFAULT_OUTPUT
    field_formatter: FieldFormatter = FieldFormatter.CAMEL_CASE
    resources: list[str] = field(default_factory=list)


def load_project_config(path: Path) -> ProjectConfig:
    """Load and parse an rpcshape project configuration file.

    Args:
        path: Path to the ``rpcshape.yaml`` file.

    Returns:
        A ProjectConfig instance populated from the file.

    Raises:
        ProjectConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ProjectConfigError(f"Project config file not found: {path}") from None
    except OSError as exc:
        raise ProjectConfigError(f"Cannot read project config file: {exc}") from exc

    return parse_project_config(text, source_label=str(path))


def parse_project_config(text: str, source_label: str = "<string>") -> ProjectConfig:
    """Parse project config YAML text into a ProjectConfig.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        ProjectConfigError: If the YAML is invalid or required fields are missing.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ProjectConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise ProjectConfigError(f"{source_label}: project config must be a YAML mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ProjectConfigError(f"{source_label}: unknown field(s) {', '.join(map(repr, unknown))}")

    catalog = _require_string(data, "catalog", source_label)
    output = _require_string(data, "output", source_label) if "output" in data else DEFAULT_OUTPUT

    formatter = FieldFormatter.CAMEL_CASE
    if "field-formatter" in data:
        raw_formatter = _require_string(data, "field-formatter", source_label)
        try:
            formatter = FieldFormatter(raw_formatter)
        except ValueError:
            choices = ", ".join(f.value for f in FieldFormatter)
            raise ProjectConfigError(
                f"{source_label}: 'field-formatter' must be one of {choices}, got '{raw_formatter}'"
            ) from None

    resources: list[str] = []
    if "resources" in data:
        raw_resources = data["resources"]
        if not isinstance(raw_resources, list) or not all(isinstance(r, str) for r in raw_resources):
            raise ProjectConfigError(f"{source_label}: 'resources' must be a list of resource names")
        resources = list(raw_resources)

    return ProjectConfig(catalog=catalog, output=output, field_formatter=formatter, resources=resources)


# ################
# Implementation
# ################

_KNOWN_KEYS = {"catalog", "output", "field-formatter", "resources"}


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a required string field from a mapping, raising ProjectConfigError if missing."""
    if key not in mapping:
        raise ProjectConfigError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str) or not value:
        raise ProjectConfigError(f"{source_label}: '{key}' must be a non-empty string")
    return value
