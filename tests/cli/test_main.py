# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the rpcshape CLI entry point."""

import json
import shutil
import sys
from pathlib import Path

import pytest

from rpcshape.cli.main import main

# ###############
# Helpers
# ###############


def _run(monkeypatch: pytest.MonkeyPatch, *argv: str) -> int:
    """Run the CLI with *argv* and return its exit code."""
    monkeypatch.setattr(sys, "argv", ["rpcshape", *argv])
    with pytest.raises(SystemExit) as exc_info:
        main()
    return exc_info.value.code


def _make_project(tmp_path: Path, catalog_file: Path, extra: str = "") -> Path:
    """Create a project directory holding the fixture catalog."""
    shutil.copy(catalog_file, tmp_path / "resources.yaml")
    (tmp_path / "rpcshape.yaml").write_text(f"catalog: resources.yaml\n{extra}", encoding="utf-8")
    return tmp_path


def _check_fields(monkeypatch: pytest.MonkeyPatch, project: Path, resource: str, fields: str) -> int:
    argv = ["check-fields", str(project), "--resource", resource, "--action", "read", "--fields", fields]
    return _run(monkeypatch, *argv)


# ###############
# Public Interface
# ###############


def test_main_no_args_prints_help_and_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    """main() with no subcommand prints help and exits with code 0."""
    assert _run(monkeypatch) == 0


# -------- init tests --------


def test_init_creates_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """init writes an rpcshape.yaml pointing at the catalog."""
    assert _run(monkeypatch, "init", str(tmp_path), "--catalog", "meta/catalog.yaml") == 0
    content = (tmp_path / "rpcshape.yaml").read_text()
    assert "catalog: meta/catalog.yaml" in content
    assert "output: rpcshape-generated.ts" in content


def test_init_default_directory_uses_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert _run(monkeypatch, "init") == 0
    assert (tmp_path / "rpcshape.yaml").exists()


def test_init_fails_if_project_already_exists(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "rpcshape.yaml").write_text("catalog: resources.yaml\n")
    assert _run(monkeypatch, "init", str(tmp_path)) == 1


def test_init_fails_if_directory_does_not_exist(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    assert _run(monkeypatch, "init", str(tmp_path / "nonexistent")) == 1


# -------- generate tests --------


def test_generate_writes_configured_output(
    tmp_path: Path, catalog_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    project = _make_project(tmp_path, catalog_file)
    assert _run(monkeypatch, "generate", str(project)) == 0
    text = (project / "rpcshape-generated.ts").read_text()
    assert "export type TodoResourceSchema = {" in text
    assert "export type TaskFieldName = " in text


def test_generate_to_stdout(
    tmp_path: Path, catalog_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _make_project(tmp_path, catalog_file, "field-formatter: snake_case\n")
    assert _run(monkeypatch, "generate", str(project), "--stdout") == 0
    out = capsys.readouterr().out
    assert "comment_count: number;" in out
    assert not (project / "rpcshape-generated.ts").exists()


def test_generate_output_override(tmp_path: Path, catalog_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    project = _make_project(tmp_path, catalog_file)
    target = tmp_path / "out" / "types.ts"
    assert _run(monkeypatch, "generate", str(project), "--output", str(target)) == 0
    assert target.exists()


def test_generate_respects_resource_allow_list(
    tmp_path: Path, catalog_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _make_project(tmp_path, catalog_file, "resources:\n  - Task\n")
    assert _run(monkeypatch, "generate", str(project), "--stdout") == 0
    out = capsys.readouterr().out
    assert out.startswith("// Task Schema\n")
    assert "TodoResourceSchema" not in out


def test_generate_includes_embedded_resources_of_allowed_roots(
    tmp_path: Path, catalog_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _make_project(tmp_path, catalog_file, "resources:\n  - Todo\n")
    assert _run(monkeypatch, "generate", str(project), "--stdout") == 0
    out = capsys.readouterr().out
    assert "// TodoMetadata Schema\n" in out
    assert "export type TodoMetadataInputSchema = {" in out
    assert 'metadata: { __type: "Relationship"; __resource: TodoMetadataResourceSchema | null; };' in out
    assert "// User Schema\n" not in out
    assert "UserResourceSchema" not in out


def test_generate_without_project(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(monkeypatch, "generate", str(tmp_path)) == 1
    assert "rpcshape init" in capsys.readouterr().err


def test_generate_with_missing_catalog(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "rpcshape.yaml").write_text("catalog: missing.yaml\n")
    assert _run(monkeypatch, "generate", str(tmp_path)) == 1
    assert "missing.yaml" in capsys.readouterr().err


def test_generate_with_unknown_allow_listed_resource(
    tmp_path: Path, catalog_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _make_project(tmp_path, catalog_file, "resources:\n  - Ghost\n")
    assert _run(monkeypatch, "generate", str(project)) == 1
    assert "Ghost" in capsys.readouterr().err


# -------- check-fields tests --------


def test_check_fields_prints_plan(
    tmp_path: Path, catalog_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _make_project(tmp_path, catalog_file)
    fields = json.dumps(["id", {"user": ["name"]}])
    assert _check_fields(monkeypatch, project, "Todo", fields) == 0
    plan = json.loads(capsys.readouterr().out)
    assert plan == {"select": ["id"], "load": [{"user": ["name"]}], "template": ["id", {"user": ["name"]}]}


def test_check_fields_reports_rejection(
    tmp_path: Path, catalog_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _make_project(tmp_path, catalog_file)
    fields = json.dumps(["id", "bogus"])
    assert _check_fields(monkeypatch, project, "Todo", fields) == 1
    captured = capsys.readouterr()
    assert json.loads(captured.out)["kind"] == "unknown_field"
    assert "Unknown field 'bogus'" in captured.err


def test_check_fields_invalid_json(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _check_fields(monkeypatch, tmp_path, "Todo", "[id") == 1
    assert "--fields is not valid JSON" in capsys.readouterr().err


def test_check_fields_unknown_resource(
    tmp_path: Path, catalog_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _make_project(tmp_path, catalog_file)
    assert _check_fields(monkeypatch, project, "Ghost", "[]") == 1
    assert "Ghost" in capsys.readouterr().err


def test_check_fields_respects_resource_allow_list(
    tmp_path: Path, catalog_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _make_project(tmp_path, catalog_file, "resources:\n  - Todo\n")
    assert _check_fields(monkeypatch, project, "Todo", json.dumps([{"metadata": ["category"]}])) == 0
    capsys.readouterr()

    assert _check_fields(monkeypatch, project, "Todo", json.dumps([{"user": ["name"]}])) == 1
    error = json.loads(capsys.readouterr().out)
    assert error["kind"] == "unknown_field"
    assert error["path"] == "user"
