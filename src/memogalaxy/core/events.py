"""Publish/subscribe between the diary store and whatever displays it.

The store announces every load and mutation as an ``Event`` whose payload
holds a snapshot of the collection. The host application announces that it
came back to the foreground with ``APP_RESUMED``, which makes attached
stores reload.

Usage::

    from memogalaxy.core.events import DIARY_ENTRY_ADDED, Event, EventBus

    bus = EventBus()

    async def redraw(event: Event) -> None:
        print(f"{len(event.payload['entries'])} entries")

    bus.on(DIARY_ENTRY_ADDED, redraw)
    await bus.emit(Event(name=DIARY_ENTRY_ADDED, payload={"entries": ()}, source="diary"))
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from time import time
from typing import Any

from loguru import logger

DIARY_LOADED = "diary.loaded"
DIARY_ENTRY_ADDED = "diary.entry.added"
DIARY_ENTRY_UPDATED = "diary.entry.updated"
DIARY_ENTRY_DELETED = "diary.entry.deleted"
APP_RESUMED = "app.resumed"

DIARY_EVENTS = (DIARY_LOADED, DIARY_ENTRY_ADDED, DIARY_ENTRY_UPDATED, DIARY_ENTRY_DELETED)

# Registration key for hooks that see every event.
ANY_EVENT = "*"


@dataclass(frozen=True)
class Event:
    """Something that happened, plus whatever data the emitter attached."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time)
    source: str = ""


Hook = Callable[[Event], Awaitable[None] | None]


def _hook_name(hook: Hook) -> str:
    return getattr(hook, "__qualname__", repr(hook))


class EventBus:
    """Routes events to the hooks registered for their name.

    Hooks are plain or coroutine functions and run in registration order,
    name-specific hooks before ``on_all`` hooks. Registering the same hook
    twice for one name has no effect. A hook that raises is logged and the
    remaining hooks still run.
    """

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = {}
        self._pending: set[asyncio.Task] = set()

    def on(self, event_name: str, hook: Hook) -> None:
        hooks = self._hooks.setdefault(event_name, [])
        if hook not in hooks:
            hooks.append(hook)

    def on_all(self, hook: Hook) -> None:
        self.on(ANY_EVENT, hook)

    def off(self, event_name: str, hook: Hook) -> bool:
        """Unregister *hook*; returns False if it was not registered."""
        hooks = self._hooks.get(event_name, [])
        if hook not in hooks:
            return False
        hooks.remove(hook)
        return True

    def off_all(self, hook: Hook) -> bool:
        return self.off(ANY_EVENT, hook)

    def hooks_for(self, event_name: str) -> list[Hook]:
        """Hooks an event called *event_name* would reach, in call order."""
        if event_name == ANY_EVENT:
            return list(self._hooks.get(ANY_EVENT, ()))
        return [*self._hooks.get(event_name, ()), *self._hooks.get(ANY_EVENT, ())]

    async def emit(self, event: Event) -> None:
        """Run every matching hook, awaiting the async ones one by one."""
        for hook in self.hooks_for(event.name):
            try:
                result = hook(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.warning(f"Hook {_hook_name(hook)} failed on {event.name}: {exc}")

    def emit_sync(self, event: Event) -> None:
        """Emit from code that cannot await.

        Sync hooks run immediately. Async hooks become tasks on the running
        loop; with no loop running they are skipped with a warning.
        """
        try:
            loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for hook in self.hooks_for(event.name):
            if loop is None and inspect.iscoroutinefunction(hook):
                logger.warning(f"Skipping async hook {_hook_name(hook)} for {event.name}: no running event loop")
                continue
            try:
                result = hook(event)
            except Exception as exc:
                logger.warning(f"Hook {_hook_name(hook)} failed on {event.name}: {exc}")
                continue
            if inspect.isawaitable(result) and loop is not None:
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Background hook failed: {task.exception()}")
