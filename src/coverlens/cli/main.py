"""CoverLens CLI - coverlens command."""

from pathlib import Path

import click

from coverlens.cli.lines import lines_command
from coverlens.cli.tree import tree_command
from coverlens.config.loader import load_config
from coverlens.core.errors import ConfigError
from coverlens.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="coverlens")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file (default: ./coverlens.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """CoverLens - line coverage and coverage trees from OpenCover reports."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    if verbose:
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


cli.add_command(lines_command, name="lines")
cli.add_command(tree_command, name="tree")


if __name__ == "__main__":
    cli()
