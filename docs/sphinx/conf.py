# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the rpcshape documentation."""

project = "rpcshape"
author = "rpcshape Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc"]

html_theme = "alabaster"
