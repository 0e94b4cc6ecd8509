"""CLI utilities."""

from pathlib import Path

import click

from jaivalens.config.models import JaivaLensConfig
from jaivalens.core.errors import TokenTreeError
from jaivalens.index.persist import load_table
from jaivalens.index.registry import IndexTable, load_token_tree_file


def source_path_for(tree_path: Path, source: Path | None = None) -> Path:
    """Absolute source path a token tree describes.

    Defaults to the tree's own path with a trailing ``.json`` removed, so
    ``main.jiv.json`` describes ``main.jiv``.
    """
    if source is not None:
        return source.resolve()
    resolved = tree_path.resolve()
    if resolved.suffix == ".json":
        return resolved.with_suffix("")
    return resolved


def read_tree(tree_path: Path) -> object:
    """Load a token tree, surfacing read errors as click errors."""
    try:
        return load_token_tree_file(tree_path)
    except TokenTreeError as e:
        raise click.ClickException(str(e)) from e


def open_table(
    config: JaivaLensConfig,
    tree_path: Path,
    *,
    source: Path | None = None,
    lib: Path | None = None,
) -> tuple[IndexTable, Path]:
    """Build a table holding the library (if given) and one registered file."""
    table = IndexTable(config=config)
    if lib is not None:
        table.load_library(load_table(lib.read_text(encoding="utf-8")))
    path = source_path_for(tree_path, source)
    table.register(path, read_tree(tree_path))
    return table, path
