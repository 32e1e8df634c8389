"""EntryStore — the diary's in-memory collection and its JSON files.

Each entry lives in its own ``<id>.json`` record under the storage root.
The store keeps the full collection in memory, newest first, and is the
only writer of that collection:

- ``load()`` re-reads every record and replaces the collection wholesale.
- ``add()`` / ``update()`` / ``delete()`` change one entry and write (or
  remove) just that entry's record.
- ``persist()`` rewrites every record.

All of these hold one ``asyncio.Lock`` while they touch the collection, so
a load that is still reading files can never interleave with a mutation.
Record I/O goes through the aiofiles thread pool and does not block the
event loop.

A broken record never takes the diary down: read, decode, write and delete
failures are logged and skipped. Callers learn about changes through the
event bus (``subscribe()``), which receives a snapshot of the collection.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from loguru import logger

from memogalaxy.core.events import (
    APP_RESUMED,
    DIARY_ENTRY_ADDED,
    DIARY_ENTRY_DELETED,
    DIARY_ENTRY_UPDATED,
    DIARY_EVENTS,
    DIARY_LOADED,
    Event,
    EventBus,
    Hook,
)
from memogalaxy.core.exceptions import DuplicateEntryError, EntryDecodeError
from memogalaxy.core.storage import LocalStorage, StorageBackend, StorageError

from .models import Entry, decode_entry, encode_entry

RECORD_SUFFIX = ".json"


def record_key(entry_id: str) -> str:
    """Storage key (file name) for the entry with *entry_id*."""
    return f"{entry_id}{RECORD_SUFFIX}"


def _newest_first(entries: list[Entry]) -> list[Entry]:
    return sorted(entries, key=lambda e: (e.created_at, e.id), reverse=True)


class EntryStore:
    """Owns the diary's entries and keeps them in sync with disk.

    Example::

        store = await EntryStore.open("~/.memogalaxy-data/entries")
        await store.add(Entry.create("Day One", "Sunny.", Mood.HAPPY))
        store.entries  # newest first
    """

    def __init__(self, storage: StorageBackend | str | Path, bus: EventBus | None = None) -> None:
        """
        Args:
            storage: A storage backend, or a directory for a ``LocalStorage``.
            bus: Event bus for change notifications and the resume signal.
                A private bus is created when omitted.
        """
        self._storage = storage if isinstance(storage, StorageBackend) else LocalStorage(storage)
        self._bus = bus or EventBus()
        self._entries: list[Entry] = []
        self._lock = asyncio.Lock()
        self._closed = False
        self._background_tasks: set[asyncio.Task] = set()
        self._bus.on(APP_RESUMED, self._on_resume)

    @classmethod
    async def open(cls, storage: StorageBackend | str | Path, bus: EventBus | None = None) -> EntryStore:
        """Create a store and wait for its first load."""
        store = cls(storage, bus)
        await store.load()
        return store

    # -- Read access ---------------------------------------------------------

    @property
    def entries(self) -> tuple[Entry, ...]:
        """Snapshot of the collection, newest first."""
        return tuple(self._entries)

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> Entry | None:
        """Return the entry with *entry_id*, or None."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    # -- Subscriptions -------------------------------------------------------

    def subscribe(self, hook: Hook) -> None:
        """Call *hook* with an ``Event`` after every load and mutation."""
        for name in DIARY_EVENTS:
            self._bus.on(name, hook)

    def unsubscribe(self, hook: Hook) -> None:
        for name in DIARY_EVENTS:
            self._bus.off(name, hook)

    # -- Loading -------------------------------------------------------------

    async def load(self) -> list[Entry]:
        """Re-read every record and replace the collection with the result.

        Unreadable records are skipped. If the storage root itself cannot be
        listed, returns an empty list and leaves the collection untouched.

        Returns:
            The loaded entries, newest first.
        """
        async with self._lock:
            loaded = await self._read_all()
            if loaded is None:
                return []
            if self._closed:
                logger.debug(f"Store closed during load, discarding {len(loaded)} entries")
                return loaded
            self._entries = list(loaded)
            snapshot = self.entries

        logger.info(f"Loaded {len(loaded)} diary entries")
        await self._publish(DIARY_LOADED, snapshot)
        return loaded

    def schedule_load(self) -> asyncio.Task:
        """Start ``load()`` in the background and return its task.

        Mutations issued before the task finishes wait on the store lock, so
        they are applied after the loaded collection is in place.
        """
        task = asyncio.get_running_loop().create_task(self.load())
        self._background_tasks.add(task)  # prevent GC of fire-and-forget tasks
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def reload_on_resume(self) -> list[Entry]:
        """Pick up changes made to the storage root while the app was away."""
        logger.debug("App resumed, reloading diary")
        return await self.load()

    async def _on_resume(self, event: Event) -> None:
        if not self._closed:
            await self.reload_on_resume()

    async def _read_all(self) -> list[Entry] | None:
        try:
            keys = [key async for key in self._storage.list_keys(suffix=RECORD_SUFFIX)]
        except (StorageError, OSError) as e:
            logger.error(f"Cannot list diary records: {e}")
            return None

        entries: list[Entry] = []
        for key in keys:
            try:
                entry = decode_entry(await self._storage.load(key))
            except (StorageError, OSError, EntryDecodeError) as e:
                logger.warning(f"Skipping diary record {key}: {e}")
                continue
            if record_key(entry.id) != key:
                logger.warning(f"Skipping diary record {key}: it holds entry {entry.id}")
                continue
            entries.append(entry)
        return _newest_first(entries)

    # -- Mutations -----------------------------------------------------------

    async def add(self, entry: Entry) -> None:
        """Insert a new entry and write its record.

        New entries normally carry the current time and go to the head of
        the collection; an older one is slotted in at its sorted position.

        Raises:
            DuplicateEntryError: If an entry with the same id already exists.
        """
        async with self._lock:
            if self.get(entry.id) is not None:
                raise DuplicateEntryError(entry.id)

            key = (entry.created_at, entry.id)
            index = 0
            while index < len(self._entries) and (self._entries[index].created_at, self._entries[index].id) > key:
                index += 1
            self._entries.insert(index, entry)
            await self._write(entry)
            snapshot = self.entries

        await self._publish(DIARY_ENTRY_ADDED, snapshot, entry.id)

    async def update(self, entry: Entry) -> bool:
        """Replace the stored entry that has ``entry.id``, keeping its position.

        Returns:
            True if an entry was replaced, False if the id is unknown.

        Raises:
            ValueError: If the replacement changes ``created_at``.
        """
        async with self._lock:
            for index, existing in enumerate(self._entries):
                if existing.id == entry.id:
                    break
            else:
                logger.debug(f"Ignoring update for unknown entry {entry.id}")
                return False

            if existing.created_at != entry.created_at:
                raise ValueError(f"created_at of entry {entry.id} cannot change")

            self._entries[index] = entry
            await self._write(entry)
            snapshot = self.entries

        await self._publish(DIARY_ENTRY_UPDATED, snapshot, entry.id)
        return True

    async def delete(self, entry: Entry) -> bool:
        """Remove the entry with ``entry.id`` from memory and disk.

        Returns:
            True if something was removed, False if the id is unknown.
        """
        async with self._lock:
            remaining = [e for e in self._entries if e.id != entry.id]
            if len(remaining) == len(self._entries):
                return False
            self._entries = remaining
            await self._remove(entry.id)
            snapshot = self.entries

        await self._publish(DIARY_ENTRY_DELETED, snapshot, entry.id)
        return True

    async def persist(self) -> int:
        """Rewrite the record of every entry in memory.

        Returns:
            Number of records written successfully.
        """
        async with self._lock:
            written = 0
            for entry in self._entries:
                if await self._write(entry):
                    written += 1
        return written

    async def close(self) -> None:
        """Stop reacting to resume signals and ignore any load still running."""
        self._closed = True
        self._bus.off(APP_RESUMED, self._on_resume)

    # -- Internal helpers ----------------------------------------------------

    async def _write(self, entry: Entry) -> bool:
        key = record_key(entry.id)
        try:
            await self._storage.save(key, encode_entry(entry))
        except (StorageError, OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save diary record {key}: {e}")
            return False
        return True

    async def _remove(self, entry_id: str) -> None:
        key = record_key(entry_id)
        try:
            await self._storage.delete(key)
        except (StorageError, OSError) as e:
            logger.error(f"Failed to delete diary record {key}: {e}")

    async def _publish(self, name: str, snapshot: tuple[Entry, ...], entry_id: str | None = None) -> None:
        payload: dict = {"entries": snapshot}
        if entry_id is not None:
            payload["entry_id"] = entry_id
        await self._bus.emit(Event(name=name, payload=payload, source="diary"))
