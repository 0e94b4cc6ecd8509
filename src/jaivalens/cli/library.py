"""jvl dump-lib command - write a persisted index table."""

from pathlib import Path

import click

from jaivalens.cli.utils import read_tree, source_path_for
from jaivalens.index.persist import dump_table
from jaivalens.index.registry import IndexTable


@click.command()
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.argument(
    "trees", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.pass_context
def dump_lib_command(ctx: click.Context, output: Path, trees: tuple[Path, ...]) -> None:
    """Index TREES in order and write their exported symbols to OUTPUT.

    Each TREE is keyed by its source path (TREE without .json). Trees are
    registered in the order given, so list dependencies first.
    """
    table = IndexTable(config=ctx.obj["config"])
    for tree in trees:
        table.register(source_path_for(tree), read_tree(tree))
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(dump_table(table, indent=2), encoding="utf-8")
    click.echo(f"Wrote {len(table)} file(s) to {output}")
