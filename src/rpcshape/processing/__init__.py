# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Per-request validation of client field selections."""

from rpcshape.processing.descriptors import (
    AnyReturn,
    FieldClassification,
    ResourceReturn,
    ReturnType,
    TypeReturn,
    classify,
    descriptor_of,
    requires_selection,
    return_type_for,
    with_embedded_resources,
)
from rpcshape.processing.errors import ErrorKind, FieldProcessingError, ProcessingErrorInfo
from rpcshape.processing.processor import ProcessResult, process
from rpcshape.processing.utilities import ProjectionPlan

__all__ = [
    "AnyReturn",
    "ErrorKind",
    "FieldClassification",
    "FieldProcessingError",
    "ProcessResult",
    "ProcessingErrorInfo",
    "ProjectionPlan",
    "ResourceReturn",
    "ReturnType",
    "TypeReturn",
    "classify",
    "descriptor_of",
    "process",
    "requires_selection",
    "return_type_for",
    "with_embedded_resources",
]
