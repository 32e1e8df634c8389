"""
Local filesystem storage backend.

Each key is one file directly under ``base_path``. Writes go through a
temp file in the same directory and are renamed into place, so a crash
mid-write never leaves a half-written record behind.
"""

import os
from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles
import aiofiles.os
from loguru import logger

from .base import StorageBackend, StorageError, StorageKeyError, StoragePermissionError

_TMP_SUFFIX = ".tmp"


class LocalStorage(StorageBackend):
    """Records as files directly inside one directory."""

    def __init__(self, base_path: str | Path = "~/.memogalaxy-data/entries"):
        self.base_path = Path(base_path).expanduser().resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, key: str) -> Path:
        """Resolve a storage key to an absolute path directly under ``base_path``.

        Rejects unsafe keys (empty, absolute, traversal, nested, hidden and
        backslash-delimited) to prevent writes outside ``base_path``.
        """
        raw_key = key.strip()
        if not raw_key:
            raise StoragePermissionError("Storage key cannot be empty.")
        if "\x00" in raw_key:
            raise StoragePermissionError("Storage key cannot contain null bytes.")
        if "\\" in raw_key or "/" in raw_key:
            raise StoragePermissionError(f"Unsafe storage key '{key}': keys cannot contain path separators.")
        if raw_key.startswith((".", "~")):
            raise StoragePermissionError(f"Unsafe storage key '{key}': hidden or home-relative names are not allowed.")

        full_path = (self.base_path / raw_key).resolve()
        if full_path.parent != self.base_path:
            raise StoragePermissionError(f"Unsafe storage key '{key}': path traversal is not allowed.")
        return full_path

    async def save(self, key: str, data: bytes) -> None:
        path = self._get_full_path(key)
        tmp_path = path.with_name(f".{path.name}{_TMP_SUFFIX}")
        path.parent.mkdir(parents=True, exist_ok=True)

        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
                await f.flush()
            await aiofiles.os.replace(tmp_path, path)  # atomic on POSIX
        except PermissionError as e:
            await self._discard(tmp_path)
            raise StoragePermissionError(f"Cannot write to {path}: {e}") from e
        except BaseException:
            await self._discard(tmp_path)
            raise

    async def load(self, key: str) -> bytes:
        path = self._get_full_path(key)
        if not path.is_file():
            raise StorageKeyError(f"Key not found: {key}")

        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot read {path}: {e}") from e

    async def exists(self, key: str) -> bool:
        return self._get_full_path(key).is_file()

    async def delete(self, key: str) -> bool:
        path = self._get_full_path(key)
        if not path.exists():
            return False
        await aiofiles.os.remove(path)
        return True

    async def list_keys(self, suffix: str = "", limit: int | None = None) -> AsyncIterator[str]:
        try:
            names = sorted(entry.name for entry in os.scandir(self.base_path) if entry.is_file())
        except OSError as e:
            raise StorageError(f"Cannot list {self.base_path}: {e}") from e

        count = 0
        for name in names:
            if name.startswith(".") or name.endswith(_TMP_SUFFIX):
                continue
            if suffix and not name.endswith(suffix):
                continue
            yield name
            count += 1
            if limit and count >= limit:
                return

    @staticmethod
    async def _discard(path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove temp file {path}: {e}")
