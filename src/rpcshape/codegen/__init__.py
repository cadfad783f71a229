# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""TypeScript schema generation for the exposed resource graph."""

from rpcshape.codegen.schemas import (
    generate_all_schemas,
    generate_all_schemas_for_resource,
    generate_field_name_union_type,
    generate_input_schema,
    generate_unified_resource_schema,
)
from rpcshape.codegen.type_mapper import SchemaGenerationError, TypeMapper

__all__ = [
    "SchemaGenerationError",
    "TypeMapper",
    "generate_all_schemas",
    "generate_all_schemas_for_resource",
    "generate_field_name_union_type",
    "generate_input_schema",
    "generate_unified_resource_schema",
]
