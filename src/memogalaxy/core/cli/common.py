"""Shared setup logic for CLI commands."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import click

from memogalaxy.core.config import Config
from memogalaxy.core.exceptions import ConfigurationError
from memogalaxy.diary import Entry, EntryStore

MEMOGALAXY_DIR = Path.home() / ".memogalaxy"
CONFIG_PATH = MEMOGALAXY_DIR / "config.yaml"

T = TypeVar("T")


def load_config(config_file: str | None = None, data_dir: str | None = None) -> Config:
    """Load config from *config_file*, falling back to ~/.memogalaxy/config.yaml."""
    try:
        return Config(config_file=config_file or str(CONFIG_PATH), data_dir=data_dir)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


def display_settings(config: Config):
    """Validated ``display`` section of the config."""
    try:
        return config.validated().display
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


def with_store(config: Config, action: Callable[[EntryStore], Awaitable[T]]) -> T:
    """Open the diary, run ``await action(store)``, close the diary, return the result.

    Each command gets a fresh event loop; nothing here runs inside another one.
    """

    async def _run() -> T:
        store = await EntryStore.open(config.get_entries_dir())
        try:
            return await action(store)
        finally:
            await store.close()

    return asyncio.run(_run())


def find_entry(store: EntryStore, ref: str) -> Entry:
    """Look up an entry by full id or an unambiguous id prefix."""
    entry = store.get(ref)
    if entry is not None:
        return entry

    matches = [e for e in store.entries if e.id.startswith(ref)]
    if not matches:
        raise click.ClickException(f"No entry with id '{ref}'.")
    if len(matches) > 1:
        raise click.ClickException(f"Id prefix '{ref}' matches {len(matches)} entries; use more characters.")
    return matches[0]
