"""
tsbridge command line.

    tsbridge generate app.models:Person web/src/models/Person.tsx --generator "withform(3)"
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from tsbridge import __version__
from tsbridge.core.errors import TsBridgeError
from tsbridge.emit import (
    GeneratorConfig,
    GeneratorRegistry,
    load_generator_config,
    parse_generator_directive,
)
from tsbridge.emit.registry import generate as generate_typescript
from tsbridge.ingest import import_type, read_type
from tsbridge.writer import write_result

app = typer.Typer(
    help="Generate TypeScript declarations, resolvers and forms from Python types",
    no_args_is_help=True,
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tsbridge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """Generate TypeScript from Python types."""


def _build_config(
    config_path: Path,
    generator: str | None,
    namespaces: bool | None,
    properties: bool | None,
    fields: bool | None,
    camel_case: bool | None,
) -> GeneratorConfig:
    """File configuration with command-line overrides applied."""
    base = load_generator_config(config_path)
    overrides: dict[str, Any] = {}

    if generator is not None:
        kind, columns = parse_generator_directive(generator)
        overrides["generator"] = kind
        if columns is not None:
            overrides["column_count"] = columns
    if namespaces is not None:
        overrides["enable_namespace_wrapping"] = namespaces
    if properties is not None:
        overrides["emit_properties"] = properties
    if fields is not None:
        overrides["emit_fields"] = fields
    if camel_case is not None:
        overrides["camel_case_names"] = camel_case

    return GeneratorConfig.create(**{**base.model_dump(), **overrides})


@app.command()
def generate(
    type_reference: Annotated[
        str, typer.Argument(help="Root type as 'package.module:TypeName'")
    ],
    output: Annotated[Path, typer.Argument(help="File the root namespace is written to")],
    generator: Annotated[
        str | None,
        typer.Option(
            "--generator",
            "-g",
            help="plain, withresolver or withform(<columns>)",
        ),
    ] = None,
    namespaces: Annotated[
        bool | None,
        typer.Option("--namespaces/--no-namespaces", help="Wrap modules in 'export namespace' blocks"),
    ] = None,
    properties: Annotated[
        bool | None,
        typer.Option("--properties/--no-properties", help="Emit property members"),
    ] = None,
    fields: Annotated[
        bool | None,
        typer.Option("--fields/--no-fields", help="Emit field members (class constants)"),
    ] = None,
    camel_case: Annotated[
        bool | None,
        typer.Option("--camel-case/--no-camel-case", help="Emit member names in camelCase"),
    ] = None,
    config_path: Annotated[
        Path,
        typer.Option("--config", "-c", help="pyproject.toml holding a [tool.tsbridge] table"),
    ] = Path("pyproject.toml"),
    app_dir: Annotated[
        Path,
        typer.Option("--app-dir", help="Directory prepended to sys.path before importing the type"),
    ] = Path("."),
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Generate TypeScript for a Python type and everything it references."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    sys.path.insert(0, str(app_dir.resolve()))

    try:
        config = _build_config(config_path, generator, namespaces, properties, fields, camel_case)
        root = read_type(import_type(type_reference))
        result = generate_typescript(root, config)
        written = write_result(result, output)
    except TsBridgeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    table = Table(title=f"tsbridge ({config.generator.value})")
    table.add_column("File")
    table.add_column("Status")
    for entry in written:
        table.add_row(str(entry.path), "[green]written[/green]" if entry.written else "[dim]unchanged[/dim]")
    console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


@app.command(name="generators")
def list_generators() -> None:
    """List available generators."""
    for name in GeneratorRegistry.list_generators():
        console.print(f"  {name}")


if __name__ == "__main__":
    app()
