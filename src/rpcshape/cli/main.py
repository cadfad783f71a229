# Copyright 2026 rpcshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the rpcshape command-line interface."""

import argparse
import json
import logging
import sys
from pathlib import Path

from yachalk import chalk

from rpcshape.catalog import Catalog, CatalogError, load_catalog
from rpcshape.codegen import SchemaGenerationError, generate_all_schemas
from rpcshape.processing import process, with_embedded_resources
from rpcshape.workspace.config import CONFIG_FILE_NAME, ProjectConfig, ProjectConfigError, load_project_config

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the rpcshape CLI."""
    parser = argparse.ArgumentParser(
        prog="rpcshape",
        description="rpcshape: typed client schemas and field selection plans for resource RPC",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a new rpcshape project",
        description=f"Create a {CONFIG_FILE_NAME} project configuration in a directory.",
    )
    init_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to initialize the project in (default: current directory)",
    )
    init_parser.add_argument(
        "--catalog",
        default="resources.yaml",
        help="Catalog file to reference from the configuration (default: resources.yaml)",
    )

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate TypeScript schemas for the exposed resources",
        description="Generate TypeScript resource schemas from the project's catalog.",
    )
    generate_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the rpcshape project (default: current directory)",
    )
    generate_parser.add_argument(
        "--output",
        help="Output file, overriding the configured one",
    )
    generate_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Write the generated schemas to standard output instead of a file",
    )

    # check-fields subcommand
    check_parser = subparsers.add_parser(
        "check-fields",
        help="Validate a field selection and print its fetch plan",
        description="Run a client field selection through the field processor.",
    )
    check_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the rpcshape project (default: current directory)",
    )
    check_parser.add_argument("--resource", required=True, help="Resource the action belongs to")
    check_parser.add_argument("--action", required=True, help="Action whose result is selected")
    check_parser.add_argument("--fields", required=True, help="Field selection as JSON")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "init":
        return _cmd_init(args)
    if args.command == "generate":
        return _cmd_generate(args)
    if args.command == "check-fields":
        return _cmd_check_fields(args)
    return 0


def _error(message: str) -> None:
    print(chalk.red(f"Error: {message}"), file=sys.stderr)


def _cmd_init(args: argparse.Namespace) -> int:
    """Handle the init subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.exists():
        _error(f"directory '{directory}' does not exist.")
        return 1

    config_file = directory / CONFIG_FILE_NAME
    if config_file.exists():
        _error(f"project already exists at '{config_file}'.")
        return 1

    config_content = (
        "# rpcshape project configuration\n"
        f"catalog: {args.catalog}\n"
        "output: rpcshape-generated.ts\n"
        "field-formatter: camel_case\n"
    )
    config_file.write_text(config_content, encoding="utf-8")
    print(chalk.green(f"Initialized rpcshape project at '{config_file}'."))
    return 0


def _load_project(directory_arg: str) -> tuple[Path, ProjectConfig, Catalog] | None:
    """Load the configuration and catalog of a project, reporting errors."""
    directory = Path(directory_arg).resolve()

    if not directory.exists():
        _error(f"directory '{directory}' does not exist.")
        return None

    config_file = directory / CONFIG_FILE_NAME
    if not config_file.exists():
        _error(f"no rpcshape project found at '{directory}'. Run 'rpcshape init' to create one.")
        return None

    try:
        config = load_project_config(config_file)
        catalog = load_catalog(directory / config.catalog)
    except (ProjectConfigError, CatalogError) as exc:
        _error(str(exc))
        return None

    unknown = [name for name in config.resources if not catalog.has_resource(name)]
    if unknown:
        _error(f"unknown resource(s) in '{CONFIG_FILE_NAME}': {', '.join(unknown)}")
        return None

    return directory, config, catalog


def _exposed_resources(config: ProjectConfig, catalog: Catalog) -> list[str] | None:
    """Return the configured resources plus the embedded resources they use, or None for all."""
    if not config.resources:
        return None
    return with_embedded_resources(catalog, config.resources)


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    loaded = _load_project(args.directory)
    if loaded is None:
        return 1
    directory, config, catalog = loaded

    try:
        text = generate_all_schemas(
            catalog,
            roots=config.resources or None,
            allowed_resources=_exposed_resources(config, catalog),
            formatter=config.field_formatter,
        )
    except SchemaGenerationError as exc:
        _error(str(exc))
        return 1

    if args.stdout:
        sys.stdout.write(text)
        return 0

    output = Path(args.output) if args.output else directory / config.output
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    print(chalk.green(f"Wrote TypeScript schemas to '{output}'."))
    return 0


def _cmd_check_fields(args: argparse.Namespace) -> int:
    """Handle the check-fields subcommand."""
    try:
        selection = json.loads(args.fields)
    except json.JSONDecodeError as exc:
        _error(f"--fields is not valid JSON: {exc}")
        return 1

    loaded = _load_project(args.directory)
    if loaded is None:
        return 1
    _, config, catalog = loaded

    try:
        result = process(catalog, args.resource, args.action, selection, _exposed_resources(config, catalog))
    except CatalogError as exc:
        _error(str(exc))
        return 1

    if not result.ok:
        _error(result.error.message)
        print(json.dumps(result.error.to_dict(), indent=2))
        return 1

    print(json.dumps(result.plan.to_dict(), indent=2))
    return 0
