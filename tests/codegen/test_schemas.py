# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for TypeScript schema generation."""

import re

import pytest

from rpcshape.catalog import Catalog
from rpcshape.codegen import (
    SchemaGenerationError,
    generate_all_schemas,
    generate_all_schemas_for_resource,
    generate_field_name_union_type,
    generate_input_schema,
    generate_unified_resource_schema,
)
from rpcshape.model import Attribute, FieldFormatter, Relationship, Resource, ResourceTypeRef, primitive
from rpcshape.processing import process

# ###############
# Helpers
# ###############


def _resource(catalog: Catalog, name: str) -> Resource:
    resource = catalog.resource(name)
    assert resource is not None, f"fixture catalog has no resource {name!r}"
    return resource


def _schema_lines(catalog: Catalog, name: str, allowed: list[str] | None = None) -> list[str]:
    schema = generate_unified_resource_schema(catalog, _resource(catalog, name), allowed)
    return schema.splitlines()


# ###############
# Field Name Unions
# ###############


class TestFieldNameUnion:
    def test_simple_resource(self, catalog: Catalog) -> None:
        result = generate_field_name_union_type(catalog, _resource(catalog, "AuditLog"))
        assert result == 'export type AuditLogFieldName = "id" | "message";'

    def test_only_fields_requestable_without_selection(self, catalog: Catalog) -> None:
        result = generate_field_name_union_type(catalog, _resource(catalog, "Todo"))
        assert result == (
            'export type TodoFieldName = "id" | "title" | "description" | "completed" | "priority" | "tags"'
            ' | "isOverdue" | "daysUntilDue" | "commentCount" | "hasComments" | "latestCommentBody"'
            ' | "commentAuthors" | "averageRating" | "highestRating";'
        )

    def test_mapped_names(self, catalog: Catalog) -> None:
        result = generate_field_name_union_type(catalog, _resource(catalog, "Task"))
        assert result == 'export type TaskFieldName = "id" | "title" | "isArchived";'

    @pytest.mark.parametrize(
        "formatter, expected",
        [
            (FieldFormatter.SNAKE_CASE, '"id" | "title" | "is_archived"'),
            (FieldFormatter.PASCAL_CASE, '"Id" | "Title" | "IsArchived"'),
        ],
    )
    def test_formatter(self, catalog: Catalog, formatter: FieldFormatter, expected: str) -> None:
        result = generate_field_name_union_type(catalog, _resource(catalog, "Task"), formatter)
        assert result == f"export type TaskFieldName = {expected};"

    def test_private_fields_are_excluded(self, catalog: Catalog) -> None:
        result = generate_field_name_union_type(catalog, _resource(catalog, "User"))
        assert "passwordHash" not in result


# ###############
# Unified Resource Schemas
# ###############


class TestUnifiedSchema:
    def test_simple_resource(self, catalog: Catalog) -> None:
        result = generate_unified_resource_schema(catalog, _resource(catalog, "AuditLog"))
        assert result == (
            "export type AuditLogResourceSchema = {\n"
            '  __type: "Resource";\n'
            '  __primitiveFields: "id" | "message";\n'
            "  id: string;\n"
            "  message: string | null;\n"
            "};"
        )

    def test_primitive_attributes(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "Todo")
        assert "  title: string;" in lines
        assert "  description: string | null;" in lines
        assert '  priority: "low" | "medium" | "high" | null;' in lines
        assert "  tags: Array<string> | null;" in lines
        assert "  isOverdue: boolean | null;" in lines

    def test_aggregates(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "Todo")
        assert "  commentCount: number;" in lines
        assert "  hasComments: boolean;" in lines
        assert "  latestCommentBody?: string | null;" in lines
        assert "  commentAuthors: Array<string>;" in lines
        assert "  averageRating: number;" in lines

    def test_relationships(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "Todo")
        assert '  user: { __type: "Relationship"; __resource: UserResourceSchema; };' in lines
        assert '  comments: { __type: "Relationship"; __array: true; __resource: TodoCommentResourceSchema; };' in lines

    def test_nullable_relationship(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "User")
        assert '  profile: { __type: "Relationship"; __resource: ProfileResourceSchema | null; };' in lines

    def test_embedded_resources(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "Todo")
        assert '  metadata: { __type: "Relationship"; __resource: TodoMetadataResourceSchema | null; };' in lines
        assert (
            '  attachments: { __type: "Relationship"; __array: true; __resource: AttachmentResourceSchema; };'
            in lines
        )

    def test_calculation_with_arguments(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "Todo")
        assert (
            '  formattedTitle: { __type: "ComplexCalculation"; __returnType: string; '
            "__args: { uppercase: boolean; prefix?: string | null }; };"
        ) in lines
        assert (
            '  self: { __type: "ComplexCalculation"; __returnType: TodoResourceSchema | null; '
            "__args: { prefix: string | null }; };"
        ) in lines

    def test_complex_calculation(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "Todo")
        assert (
            '  latestComment: { __type: "ComplexCalculation"; __returnType: TodoCommentResourceSchema | null; };'
        ) in lines

    def test_complex_aggregate(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "User")
        assert (
            '  latestTodoMetadata: { __type: "ComplexCalculation"; __returnType: TodoMetadataResourceSchema; };'
        ) in lines

    def test_union_attribute(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "Todo")
        assert (
            '  content: { __type: "Union"; __primitiveFields: "note" | "priorityValue" | "data"; '
            "text?: TextContentResourceSchema; checklist?: ChecklistContentResourceSchema; note?: string; "
            "priorityValue?: number; link?: { url: string; title: string | null }; "
            "data?: Record<string, any>; } | null;"
        ) in lines

    def test_structured_attributes(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "Todo")
        assert "  coordinates: { latitude: number; longitude: number } | null;" in lines
        assert "  options: { notify: boolean | null; channel: string | null } | null;" in lines
        assert any(line.startswith("  stats: { viewCount: number;") for line in lines)

    def test_section_order(self, catalog: Catalog) -> None:
        names = [line.split(":")[0].strip().rstrip("?") for line in _schema_lines(catalog, "Todo")[3:-1]]
        assert names.index("highestRating") < names.index("user")
        assert names.index("auditLogs") < names.index("metadata")
        assert names.index("attachments") < names.index("formattedTitle")
        assert names.index("summaryContent") < names.index("content")
        assert names.index("content") < names.index("coordinates")


class TestAllowList:
    def test_relationships_to_hidden_resources_are_omitted(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "Todo", allowed=["Todo", "User"])
        names = [line.split(":")[0].strip() for line in lines]
        assert "user" in names
        assert "comments" not in names
        assert "auditLogs" not in names

    def test_hidden_embedded_resources_are_omitted(self, catalog: Catalog) -> None:
        lines = _schema_lines(catalog, "Todo", allowed=["Todo", "User", "TextContent"])
        names = [line.split(":")[0].strip() for line in lines]
        assert "metadata" not in names
        assert "latestComment" not in names
        content = next(line for line in lines if line.startswith("  content:"))
        assert "text?: TextContentResourceSchema;" in content
        assert "checklist?" not in content

    def test_attribute_typed_as_hidden_resource_is_omitted(self) -> None:
        owner = Resource(
            name="Owner",
            attributes=[
                Attribute(name="id", type=primitive("uuid"), allow_nil=False),
                Attribute(name="keeper", type=ResourceTypeRef(name="Hidden")),
            ],
        )
        hidden = Resource(name="Hidden", attributes=[Attribute(name="id", type=primitive("uuid"))])
        catalog = Catalog([owner, hidden])

        assert "keeper: HiddenResourceSchema" in generate_unified_resource_schema(catalog, owner)
        output = generate_all_schemas(catalog, roots=["Owner"], allowed_resources=["Owner"])
        assert "Hidden" not in output
        assert "keeper" not in output
        assert '__primitiveFields: "id";' in output

    def test_unknown_relationship_destination(self) -> None:
        orphan = Resource(name="Orphan", relationships=[Relationship(name="parent", destination="Missing")])
        catalog = Catalog([orphan])
        with pytest.raises(SchemaGenerationError, match="unknown resource 'Missing'"):
            generate_unified_resource_schema(catalog, orphan)


# ###############
# Input Schemas
# ###############


class TestInputSchema:
    def test_embedded_resource(self, catalog: Catalog) -> None:
        result = generate_input_schema(catalog, _resource(catalog, "TodoMetadata"))
        assert result == (
            "export type TodoMetadataInputSchema = {\n"
            "  category: string;\n"
            "  priorityScore?: number;\n"
            "  labels?: Array<string> | null;\n"
            "};"
        )

    def test_all_schemas_for_embedded_resource(self, catalog: Catalog) -> None:
        result = generate_all_schemas_for_resource(catalog, _resource(catalog, "Attachment"))
        assert result.startswith("// Attachment Schema\nexport type AttachmentFieldName = ")
        assert "export type AttachmentResourceSchema = {" in result
        assert result.endswith(
            "export type AttachmentInputSchema = {\n"
            "  filename: string;\n"
            "  size?: number | null;\n"
            "  mimeType?: string;\n"
            "};"
        )

    def test_no_input_schema_for_regular_resources(self, catalog: Catalog) -> None:
        result = generate_all_schemas_for_resource(catalog, _resource(catalog, "Todo"))
        assert "InputSchema = {" not in result


# ###############
# Whole Catalog
# ###############


class TestGenerateAll:
    def test_each_resource_is_emitted_once(self, catalog: Catalog) -> None:
        output = generate_all_schemas(catalog)
        for resource in catalog.resources:
            assert output.count(f"// {resource.name} Schema\n") == 1
        assert output.endswith("};\n")

    def test_discovery_order_from_root(self, catalog: Catalog) -> None:
        output = generate_all_schemas(catalog, roots=["Profile"])
        headers = [line[3:-7] for line in output.splitlines() if line.startswith("// ")]
        assert headers == [
            "Profile",
            "User",
            "Todo",
            "TodoMetadata",
            "TodoComment",
            "AuditLog",
            "Attachment",
            "TextContent",
            "ChecklistContent",
        ]

    def test_allow_list_limits_the_graph(self, catalog: Catalog) -> None:
        output = generate_all_schemas(catalog, roots=["Todo"], allowed_resources=["Todo", "User"])
        headers = [line for line in output.splitlines() if line.startswith("// ")]
        assert headers == ["// Todo Schema", "// User Schema"]
        assert "ProfileResourceSchema" not in output

    def test_hidden_root_produces_nothing(self, catalog: Catalog) -> None:
        assert generate_all_schemas(catalog, roots=["Task"], allowed_resources=[]) == ""

    def test_unknown_root(self, catalog: Catalog) -> None:
        with pytest.raises(SchemaGenerationError, match="'Ghost'"):
            generate_all_schemas(catalog, roots=["Ghost"])

    def test_output_is_deterministic(self, catalog: Catalog) -> None:
        assert generate_all_schemas(catalog) == generate_all_schemas(catalog)


# ###############
# Agreement With Field Processing
# ###############


class TestProcessorAgreement:
    def test_open_containers_are_primitive_fields(self, catalog: Catalog) -> None:
        comment = _resource(catalog, "TodoComment")
        assert '"reactions" | "span"' in generate_field_name_union_type(catalog, comment)
        lines = _schema_lines(catalog, "TodoComment")
        assert "  reactions: Record<string, any> | null;" in lines
        assert "  span: any[] | null;" in lines

    def test_every_field_name_is_selectable(self, catalog: Catalog) -> None:
        for resource in catalog.resources:
            if resource.embedded or catalog.action(resource, "read") is None:
                continue
            names = re.findall(r'"([^"]+)"', generate_field_name_union_type(catalog, resource))
            result = process(catalog, resource.name, "read", names)
            assert result.ok, f"{resource.name}: {result.error}"
