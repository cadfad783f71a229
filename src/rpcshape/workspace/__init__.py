# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Project configuration."""

from rpcshape.workspace.config import (
    CONFIG_FILE_NAME,
    DEFAULT_OUTPUT,
    ProjectConfig,
    ProjectConfigError,
    load_project_config,
    parse_project_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_OUTPUT",
    "ProjectConfig",
    "ProjectConfigError",
    "load_project_config",
    "parse_project_config",
]
