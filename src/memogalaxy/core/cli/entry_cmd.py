"""Diary commands: list, show, add, comment, delete."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from memogalaxy.core.cli.common import display_settings, find_entry, with_store
from memogalaxy.diary import (
    DEFAULT_ACCENT_OPACITY,
    DEFAULT_IMAGE_QUALITY,
    Entry,
    Mood,
    compress_image,
    parse_hex,
    resolve_accent,
    to_hex,
)


def _resolve_mood(value: str) -> str:
    """Accept a mood name (``happy``) or any marker text (``🌧️``)."""
    value = value.strip()
    if not value:
        raise click.BadParameter("mood cannot be empty", param_hint="--mood")
    member = Mood.__members__.get(value.upper())
    return member.value if member else value


def _normalize_color(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        parse_hex(value)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--color") from e
    return "#" + value.strip().lstrip("#").upper()


def _load_photo(path: Path, quality: float) -> bytes:
    try:
        return compress_image(path.read_bytes(), quality)
    except ValueError as e:
        raise click.BadParameter(f"{path}: {e}", param_hint="--image") from e


def _format_date(entry: Entry, date_format: str) -> str:
    return entry.created_at.astimezone().strftime(date_format)


@click.command("list")
@click.option("--limit", "-n", type=click.IntRange(min=1), default=None, help="Show at most N entries.")
@click.pass_obj
def list_entries(config, limit: int | None) -> None:
    """List diary entries, newest first."""
    display = display_settings(config)

    async def _entries(store):
        return store.entries

    entries = with_store(config, _entries)
    console = Console()
    if not entries:
        console.print("[dim]No entries yet. Add one with 'memogalaxy add'.[/dim]")
        return

    table = Table(title="Mood diary")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Mood")
    table.add_column("Title")
    table.add_column("Comments", justify="right")

    for entry in entries[:limit]:
        accent = to_hex(resolve_accent(entry))
        table.add_row(
            entry.id[:8],
            _format_date(entry, display.date_format),
            Text(entry.mood),
            Text(entry.title, style=f"bold {accent}"),
            str(len(entry.comments)),
        )
    console.print(table)


@click.command()
@click.argument("entry_id")
@click.pass_obj
def show(config, entry_id: str) -> None:
    """Show one entry with its comments."""
    display = display_settings(config)

    async def _find(store):
        return find_entry(store, entry_id)

    entry = with_store(config, _find)
    accent = to_hex(resolve_accent(entry))

    body = Text()
    photos = f"[{len(entry.images)} photo(s)]\n" if entry.images else ""
    if display.image_before_text:
        body.append(photos, style="italic")
    body.append(entry.content)
    if not display.image_before_text and photos:
        body.append("\n" + photos.rstrip("\n"), style="italic")

    console = Console()
    console.print(
        Panel(
            body,
            title=escape(f"{entry.mood} {entry.title}"),
            subtitle=_format_date(entry, display.date_format),
            border_style=accent,
        )
    )
    for c in entry.comments:
        console.print(f"  [dim]{c.created_at.astimezone().strftime(display.date_format)}[/dim]  {escape(c.text)}")
    console.print(f"[dim]id: {entry.id}[/dim]")


@click.command()
@click.option("--title", "-t", required=True, help="Entry title.")
@click.option("--content", "-m", default=None, help="Entry text. Prompted for when omitted.")
@click.option("--mood", default="happy", show_default=True, help="Mood name (happy, sad, ...) or any emoji.")
@click.option("--color", default=None, help="Accent color as #RGB, #RRGGBB or #AARRGGBB.")
@click.option(
    "--opacity",
    type=click.FloatRange(0.0, 1.0),
    default=DEFAULT_ACCENT_OPACITY,
    show_default=True,
    help="Accent opacity.",
)
@click.option(
    "--image",
    "images",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Attach a photo. Repeat for more than one.",
)
@click.option(
    "--image-quality",
    type=click.FloatRange(0.1, 1.0),
    default=DEFAULT_IMAGE_QUALITY,
    show_default=True,
    help="JPEG quality photos are re-encoded at, 0.1 (smallest) to 1.0.",
)
@click.pass_obj
def add(
    config,
    title: str,
    content: str | None,
    mood: str,
    color: str | None,
    opacity: float,
    images: tuple[Path, ...],
    image_quality: float,
) -> None:
    """Write a new diary entry."""
    if content is None:
        content = click.prompt("Content")
    entry = Entry.create(
        title,
        content,
        _resolve_mood(mood),
        images=[_load_photo(p, image_quality) for p in images],
        accent_color=_normalize_color(color),
        accent_opacity=opacity,
    )

    with_store(config, lambda store: store.add(entry))
    click.echo(f"Added entry {entry.id[:8]}: {entry.mood} {entry.title}")


@click.command()
@click.argument("entry_id")
@click.argument("text")
@click.pass_obj
def comment(config, entry_id: str, text: str) -> None:
    """Append a comment to an entry."""

    async def _comment(store):
        entry = find_entry(store, entry_id)
        await store.update(entry.with_comment(text))
        return entry

    entry = with_store(config, _comment)
    click.echo(f"Commented on {entry.id[:8]}: {entry.title}")


@click.command()
@click.argument("entry_id")
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation.")
@click.pass_obj
def delete(config, entry_id: str, yes: bool) -> None:
    """Delete an entry and its file."""

    async def _delete(store):
        entry = find_entry(store, entry_id)
        if not yes:
            click.confirm(f"Delete '{entry.title}'?", abort=True)
        await store.delete(entry)
        return entry

    entry = with_store(config, _delete)
    click.echo(f"Deleted entry {entry.id[:8]}: {entry.title}")
