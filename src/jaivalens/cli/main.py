"""JaivaLens CLI - jvl command."""

from pathlib import Path

import click

from jaivalens import __version__
from jaivalens.cli.library import dump_lib_command
from jaivalens.cli.query import complete_command, hover_command, index_command
from jaivalens.config import load_config
from jaivalens.core.errors import ConfigError
from jaivalens.core.logging import configure_logging, set_request_id


@click.group()
@click.version_option(version=__version__, prog_name="jvl")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding .jaivalens/config.yaml (default: current directory)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_root: Path | None) -> None:
    """JaivaLens - scope-aware hover and completion for Jaiva token trees."""
    ctx.ensure_object(dict)
    try:
        config = load_config(config_root)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    configure_logging(config.logging, verbose=verbose)
    set_request_id()
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


cli.add_command(index_command, name="index")
cli.add_command(hover_command, name="hover")
cli.add_command(complete_command, name="complete")
cli.add_command(dump_lib_command, name="dump-lib")


if __name__ == "__main__":
    cli()
