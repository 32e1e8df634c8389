"""Backup and restore of the diary's storage root.

A backup is a zip archive holding the ``<id>.json`` records side by side.
Restoring unpacks those records into the storage root; the store then
reloads so the restored entries show up.
"""

from __future__ import annotations

import asyncio
import zipfile
import zlib
from datetime import datetime
from pathlib import Path

from loguru import logger

from memogalaxy.core.exceptions import BackupError
from memogalaxy.core.storage import LocalStorage

from .models import Entry
from .store import RECORD_SUFFIX, EntryStore

BACKUP_PREFIX = "memogalaxy-backup"


def _is_record_name(name: str) -> bool:
    return name.endswith(RECORD_SUFFIX) and "/" not in name and "\\" not in name and not name.startswith(".")


def create_backup(entries_dir: str | Path, backup_dir: str | Path) -> Path:
    """Zip every record in *entries_dir* into a timestamped archive.

    Returns:
        Path of the new archive inside *backup_dir*.

    Raises:
        BackupError: If *entries_dir* is missing or the archive can't be written.
    """
    src = Path(entries_dir).expanduser()
    if not src.is_dir():
        raise BackupError(f"Entries directory not found: {src}")

    dest_dir = Path(backup_dir).expanduser()
    dest_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    archive = dest_dir / f"{BACKUP_PREFIX}-{timestamp}.zip"

    records = sorted(p for p in src.iterdir() if p.is_file() and _is_record_name(p.name))
    try:
        with zipfile.ZipFile(archive, "x", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in records:
                zf.write(path, arcname=path.name)
    except OSError as e:
        raise BackupError(f"Cannot write backup {archive}: {e}") from e

    logger.info(f"Backed up {len(records)} records to {archive}")
    return archive


def restore_backup(archive: str | Path, entries_dir: str | Path, *, replace: bool = False) -> int:
    """Unpack the records in *archive* into *entries_dir*.

    Records with the same name are overwritten. With ``replace=True`` every
    record missing from the archive is removed, so the directory matches it.
    Nothing on disk changes unless every member of the archive reads back
    intact.

    Returns:
        Number of records restored.

    Raises:
        BackupError: If the archive is missing, not a zip file, or damaged.
    """
    src = Path(archive).expanduser()
    if not src.is_file():
        raise BackupError(f"Backup not found: {src}")

    dest = Path(entries_dir).expanduser()
    dest.mkdir(parents=True, exist_ok=True)

    # Every member is read (and CRC-checked) before the directory is touched.
    try:
        with zipfile.ZipFile(src) as zf:
            members = zf.namelist()
            payloads = {name: zf.read(name) for name in members if _is_record_name(name)}
    except (zipfile.BadZipFile, zlib.error, EOFError) as e:
        raise BackupError(f"Not a valid backup archive: {src}: {e}") from e
    except OSError as e:
        raise BackupError(f"Cannot read backup {src}: {e}") from e

    skipped = len(members) - len(payloads)
    if skipped:
        logger.warning(f"Ignoring {skipped} unexpected member(s) in {src}")

    try:
        if replace:
            for old in dest.glob(f"*{RECORD_SUFFIX}"):
                if old.name not in payloads:
                    old.unlink()
        for name, data in payloads.items():
            (dest / name).write_bytes(data)
    except OSError as e:
        raise BackupError(f"Cannot restore {src} into {dest}: {e}") from e

    logger.info(f"Restored {len(payloads)} records from {src}")
    return len(payloads)


async def restore_into_store(store: EntryStore, archive: str | Path, *, replace: bool = False) -> list[Entry]:
    """Restore *archive* into the store's directory and reload the store."""
    if not isinstance(store.storage, LocalStorage):
        raise BackupError("Restore needs a store backed by a local directory")
    await asyncio.to_thread(restore_backup, archive, store.storage.base_path, replace=replace)
    return await store.load()
