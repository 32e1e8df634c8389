"""MemoGalaxy CLI — a terminal front end for the mood diary."""

import click

from memogalaxy import __version__


@click.group()
@click.version_option(version=__version__, package_name="memogalaxy")
@click.option(
    "--config",
    "config_file",
    envvar="MEMOGALAXY_CONFIG",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML or JSON config file (default: ~/.memogalaxy/config.yaml).",
)
@click.option(
    "--data-dir",
    envvar="MEMOGALAXY_DATA_DIR",
    type=click.Path(file_okay=False),
    default=None,
    help="Where entries, backups and logs are kept.",
)
@click.pass_context
def main(ctx: click.Context, config_file: str | None, data_dir: str | None) -> None:
    """MemoGalaxy — your mood diary in the terminal."""
    from memogalaxy.core.cli.common import load_config
    from memogalaxy.core.utils.logging import configure_logging

    config = load_config(config_file, data_dir)
    configure_logging(config)
    ctx.obj = config


# Register subcommands
from .backup_cmd import backup, restore
from .entry_cmd import add, comment, delete, list_entries, show
from .palette_cmd import colors, moods

main.add_command(list_entries)
main.add_command(show)
main.add_command(add)
main.add_command(comment)
main.add_command(delete)
main.add_command(moods)
main.add_command(colors)
main.add_command(backup)
main.add_command(restore)
