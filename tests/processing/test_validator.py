# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for selection validation helpers."""

import pytest

from rpcshape.processing.errors import ErrorKind, FieldProcessingError
from rpcshape.processing.validator import check_for_duplicate_fields, validate_non_empty_fields

# ###############
# Helpers
# ###############


def _raises(kind: ErrorKind, fn, *args, **kwargs) -> FieldProcessingError:
    with pytest.raises(FieldProcessingError) as exc_info:
        fn(*args, **kwargs)
    assert exc_info.value.kind is kind, exc_info.value.info
    return exc_info.value


# ###############
# Non-empty Check
# ###############


class TestValidateNonEmptyFields:
    def test_non_empty_list_passes(self) -> None:
        validate_non_empty_fields(["id"], "user", [], "relationship")

    def test_empty_list_requires_selection(self) -> None:
        err = _raises(
            ErrorKind.REQUIRES_FIELD_SELECTION, validate_non_empty_fields, [], "user", ["todo"], "relationship"
        )
        assert err.path == "todo.user"
        assert err.info.field == "user"
        assert err.info.detail == {"reason": "relationship"}

    def test_non_list_is_unsupported(self) -> None:
        err = _raises(
            ErrorKind.UNSUPPORTED_FIELD_COMBINATION, validate_non_empty_fields, "id", "user", [], "relationship"
        )
        assert err.path == "user"

    def test_none_is_unsupported(self) -> None:
        _raises(ErrorKind.UNSUPPORTED_FIELD_COMBINATION, validate_non_empty_fields, None, "user", [], "relationship")


# ###############
# Duplicate Check
# ###############


class TestCheckForDuplicateFields:
    def test_distinct_fields_pass(self) -> None:
        check_for_duplicate_fields(["id", {"user": ["name"]}, ("comments", ["body"])], [])

    def test_repeated_leaf(self) -> None:
        err = _raises(ErrorKind.DUPLICATE_FIELD, check_for_duplicate_fields, ["id", "title", "id"], ["todo"])
        assert err.path == "todo.id"
        assert err.info.field == "id"

    def test_leaf_and_nested_entry_collide(self) -> None:
        _raises(ErrorKind.DUPLICATE_FIELD, check_for_duplicate_fields, ["user", {"user": ["id"]}], [])

    def test_pair_and_mapping_collide(self) -> None:
        _raises(ErrorKind.DUPLICATE_FIELD, check_for_duplicate_fields, [("user", ["id"]), {"user": ["name"]}], [])

    def test_aliases_collide_after_resolution(self) -> None:
        aliases = {"isArchived": "archived?"}
        err = _raises(
            ErrorKind.DUPLICATE_FIELD,
            check_for_duplicate_fields,
            ["archived?", "isArchived"],
            [],
            lambda name: aliases.get(name, name),
        )
        assert err.info.field == "archived?"

    def test_first_repeated_name_is_reported(self) -> None:
        err = _raises(ErrorKind.DUPLICATE_FIELD, check_for_duplicate_fields, ["a", "b", "b", "a"], [])
        assert err.info.field == "b"

    @pytest.mark.parametrize("entry", [42, None, ("only-one",), {1: ["x"]}, ""])
    def test_invalid_entries(self, entry: object) -> None:
        _raises(ErrorKind.INVALID_FIELD_TYPE, check_for_duplicate_fields, ["id", entry], ["todo"])
