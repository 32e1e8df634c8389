"""Backup commands: zip the diary, restore it from a zip."""

from __future__ import annotations

from pathlib import Path

import click

from memogalaxy.core.cli.common import with_store
from memogalaxy.core.exceptions import BackupError
from memogalaxy.diary import create_backup, restore_into_store


@click.command()
@click.option(
    "--dest",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the archive (default: the configured backup_dir).",
)
@click.pass_obj
def backup(config, dest: Path | None) -> None:
    """Save every entry into a zip archive."""
    target = dest or Path(config.get_backup_dir())
    try:
        archive = create_backup(config.get_entries_dir(), target)
    except BackupError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Backup written to {archive}")


@click.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--replace", is_flag=True, help="Remove current entries before restoring.")
@click.pass_obj
def restore(config, archive: Path, replace: bool) -> None:
    """Restore entries from a backup archive."""

    try:
        entries = with_store(config, lambda store: restore_into_store(store, archive, replace=replace))
    except BackupError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Restored diary now holds {len(entries)} entries")
