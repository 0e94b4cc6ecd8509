"""jvl index / hover / complete commands - query one file's symbol index."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from jaivalens.cli.utils import open_table
from jaivalens.index.scope import resolve

_tree_argument = click.argument(
    "tree", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
_source_option = click.option(
    "--source",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Source file the tree was parsed from (default: TREE without .json)",
)
_lib_option = click.option(
    "--lib",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Persisted library table (from 'jvl dump-lib')",
)


def _scope_label(scope: tuple[int, int]) -> str:
    return "global" if scope == (-1, -1) else f"{scope[0]}-{scope[1]}"


@click.command()
@_tree_argument
@_source_option
@_lib_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def index_command(
    ctx: click.Context, tree: Path, source: Path | None, lib: Path | None, as_json: bool
) -> None:
    """Build and print the symbol index for TREE (a token-tree JSON dump)."""
    table, path = open_table(ctx.obj["config"], tree, source=source, lib=lib)
    index = table.index_for(path)

    if as_json:
        payload = {
            name: [
                {
                    "scope": list(r.scope),
                    "line": r.declaration_line,
                    "kind": r.kind.value,
                    "hover": r.hover,
                }
                for r in records
            ]
            for name, records in index.items()
        }
        click.echo(json.dumps(payload, indent=2))
        return

    console = Console()
    if not len(index):
        console.print("[yellow]No symbols[/yellow]")
        return
    out = Table(title=str(path))
    out.add_column("Name", style="cyan")
    out.add_column("Scope")
    out.add_column("Line", justify="right")
    out.add_column("Kind")
    out.add_column("Hover")
    for name, records in index.items():
        for r in records:
            out.add_row(
                name, _scope_label(r.scope), str(r.declaration_line), r.kind.value, r.hover
            )
    console.print(out)


@click.command()
@_tree_argument
@click.argument("name")
@click.option("--line", "-l", type=int, required=True, help="1-based query line")
@_source_option
@_lib_option
@click.pass_context
def hover_command(
    ctx: click.Context, tree: Path, name: str, line: int, source: Path | None, lib: Path | None
) -> None:
    """Print what NAME refers to at --line of TREE."""
    table, path = open_table(ctx.obj["config"], tree, source=source, lib=lib)
    record = resolve(table.index_for(path), name, line)
    if record is None:
        raise click.ClickException(f"'{name}' is not visible at line {line}")
    click.echo(record.hover)


@click.command()
@_tree_argument
@click.option("--line", "-l", type=int, required=True, help="1-based query line")
@_source_option
@_lib_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def complete_command(
    ctx: click.Context,
    tree: Path,
    line: int,
    source: Path | None,
    lib: Path | None,
    as_json: bool,
) -> None:
    """Print completion suggestions for --line of TREE, tightest scope first."""
    table, path = open_table(ctx.obj["config"], tree, source=source, lib=lib)
    items = table.completions(path, line)
    if as_json:
        click.echo(json.dumps([item.to_dict() for item in items], indent=2))
        return
    for item in items:
        click.echo(f"{item.label}\t{item.kind.value}\t{item.insert_text}")
