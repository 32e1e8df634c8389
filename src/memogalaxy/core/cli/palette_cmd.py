"""Reference commands: the built-in moods and preset accent colors."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from memogalaxy.diary import PRESET_COLORS, Mood, default_color


@click.command()
def moods() -> None:
    """List the built-in moods and their default colors."""
    table = Table(title="Moods")
    table.add_column("Name")
    table.add_column("Mood")
    table.add_column("Default color")
    for mood in Mood:
        hex_value = default_color(mood)
        table.add_row(mood.name.lower(), mood.value, f"[{hex_value}]{hex_value}[/]")
    Console().print(table)


@click.command()
def colors() -> None:
    """List the preset accent colors."""
    table = Table(title="Preset colors")
    table.add_column("Name")
    table.add_column("Hex")
    for name, hex_value in PRESET_COLORS:
        table.add_row(name, f"[{hex_value}]{hex_value}[/]")
    Console().print(table)
