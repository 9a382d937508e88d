"""mech-boilerplate CLI.

Checks YAML macro files without launching a browser:
- validate: register every declared method on a scratch client class
- list: show the declared methods as a table
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mech_boilerplate.client import BoilerplateClient
from mech_boilerplate.errors import ConfigError
from mech_boilerplate.macros import load_macro_file

app = typer.Typer(help="Inspect mech-boilerplate macro files")
console = Console()


# --------------- helpers -----------------


def _add_import_paths(paths: List[Path]) -> None:
    # Callable references in macro files are imported from the user's project
    for p in reversed(paths):
        resolved = str(p.resolve())
        if resolved not in sys.path:
            sys.path.insert(0, resolved)


def _load(files: List[Path], import_paths: List[Path]) -> type:
    _add_import_paths(import_paths)
    client_cls = type("MacroFileClient", (BoilerplateClient,), {})
    for path in files:
        load_macro_file(client_cls, path)
    return client_cls


def _describe_location(assertion) -> str:
    if assertion is None:
        return ""
    pattern = getattr(assertion, "pattern", None)
    return f"/{pattern}/" if pattern is not None else str(assertion)


# --------------- commands -----------------

FILES_ARGUMENT = typer.Argument(
    ..., exists=True, dir_okay=False, readable=True, help="Macro YAML files"
)
IMPORT_PATH_OPTION = typer.Option(
    [Path(".")],
    "--import-path",
    "-I",
    help="Directories to import referenced callables from",
)


@app.command("validate")
def validate(
    files: List[Path] = FILES_ARGUMENT,
    import_path: List[Path] = IMPORT_PATH_OPTION,
):
    """Check that every declared method registers cleanly."""
    try:
        client_cls = _load(files, import_path)
    except ConfigError as e:
        console.print(f"[red]✗[/] {escape(str(e))}")
        raise typer.Exit(code=1)
    count = len(client_cls.macros())
    console.print(f"[green]✓[/] {count} method(s) valid in {len(files)} file(s)")


@app.command("list")
def list_methods(
    files: List[Path] = FILES_ARGUMENT,
    import_path: List[Path] = IMPORT_PATH_OPTION,
):
    """Show the methods declared in macro files."""
    try:
        client_cls = _load(files, import_path)
    except ConfigError as e:
        console.print(f"[red]✗[/] {escape(str(e))}")
        raise typer.Exit(code=1)

    table = Table(title="Generated methods")
    table.add_column("Method", style="cyan", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Description")
    table.add_column("Location")
    for name, spec in sorted(client_cls.macros().items()):
        table.add_row(
            escape(name),
            spec.kind,
            escape(spec.description),
            escape(_describe_location(spec.assert_location)),
        )
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
