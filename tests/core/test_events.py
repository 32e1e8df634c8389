"""Tests for memogalaxy.core.events."""

from __future__ import annotations

import asyncio
from dataclasses import FrozenInstanceError

import pytest

from memogalaxy.core.events import (
    APP_RESUMED,
    DIARY_ENTRY_ADDED,
    DIARY_ENTRY_DELETED,
    DIARY_EVENTS,
    DIARY_LOADED,
    Event,
    EventBus,
)

pytestmark = pytest.mark.smoke


@pytest.fixture
def bus():
    return EventBus()


class TestEvent:
    def test_defaults(self):
        evt = Event(name=APP_RESUMED)
        assert evt.payload == {}
        assert evt.source == ""
        assert evt.timestamp > 0

    def test_frozen(self):
        evt = Event(name=DIARY_LOADED, payload={"entries": ()})
        with pytest.raises(FrozenInstanceError):
            evt.name = "changed"  # type: ignore[misc]


class TestRegistration:
    async def test_hook_sees_event_until_removed(self, bus):
        seen: list[Event] = []
        bus.on(DIARY_ENTRY_ADDED, seen.append)

        added = Event(name=DIARY_ENTRY_ADDED, payload={"entry_id": "abc"}, source="diary")
        await bus.emit(added)
        assert seen == [added]

        assert bus.off(DIARY_ENTRY_ADDED, seen.append) is True
        await bus.emit(added)
        assert seen == [added]

    async def test_other_names_are_not_delivered(self, bus):
        seen: list[str] = []
        bus.on(DIARY_ENTRY_DELETED, lambda e: seen.append(e.name))
        await bus.emit(Event(name=DIARY_ENTRY_ADDED))
        assert seen == []

    async def test_duplicate_registration_runs_once(self, bus):
        calls: list[str] = []

        def hook(event: Event) -> None:
            calls.append(event.name)

        bus.on(DIARY_LOADED, hook)
        bus.on(DIARY_LOADED, hook)
        await bus.emit(Event(name=DIARY_LOADED))

        assert calls == [DIARY_LOADED]
        assert bus.off(DIARY_LOADED, hook) is True
        assert bus.off(DIARY_LOADED, hook) is False

    def test_removing_unknown_hook_is_quiet(self, bus):
        assert bus.off(DIARY_LOADED, print) is False
        assert bus.off_all(print) is False

    async def test_wildcard_sees_every_diary_event(self, bus):
        names: list[str] = []
        bus.on_all(lambda e: names.append(e.name))
        for name in DIARY_EVENTS:
            await bus.emit(Event(name=name))
        assert names == list(DIARY_EVENTS)

        bus.off_all(names.append)  # different callable, nothing removed
        assert len(bus.hooks_for(DIARY_LOADED)) == 1

    def test_specific_hooks_run_before_wildcards(self, bus):
        order: list[str] = []
        bus.on_all(lambda e: order.append("any"))
        bus.on(DIARY_LOADED, lambda e: order.append("loaded"))

        bus.emit_sync(Event(name=DIARY_LOADED))
        assert order == ["loaded", "any"]


class TestEmit:
    async def test_async_hooks_are_awaited_in_order(self, bus):
        order: list[str] = []

        async def slow(event: Event) -> None:
            await asyncio.sleep(0.01)
            order.append("slow")

        def fast(event: Event) -> None:
            order.append("fast")

        bus.on(APP_RESUMED, slow)
        bus.on(APP_RESUMED, fast)
        await bus.emit(Event(name=APP_RESUMED))
        assert order == ["slow", "fast"]

    async def test_nobody_listening(self, bus):
        await bus.emit(Event(name="nobody.listening"))

    async def test_failing_hook_does_not_stop_the_rest(self, bus):
        ran: list[str] = []

        def broken(event: Event) -> None:
            raise RuntimeError("boom")

        async def fine(event: Event) -> None:
            ran.append("fine")

        bus.on(DIARY_ENTRY_ADDED, broken)
        bus.on(DIARY_ENTRY_ADDED, fine)
        await bus.emit(Event(name=DIARY_ENTRY_ADDED))
        assert ran == ["fine"]


class TestEmitSync:
    def test_runs_sync_hooks_immediately(self, bus):
        seen: list[Event] = []
        bus.on(APP_RESUMED, seen.append)
        evt = Event(name=APP_RESUMED, source="host")
        bus.emit_sync(evt)
        assert seen == [evt]

    async def test_async_hooks_become_tasks(self, bus):
        done = asyncio.Event()

        async def reload(event: Event) -> None:
            done.set()

        bus.on(APP_RESUMED, reload)
        bus.emit_sync(Event(name=APP_RESUMED))
        assert not done.is_set()
        await asyncio.wait_for(done.wait(), timeout=1)

    def test_async_hooks_skipped_without_loop(self, bus):
        called: list[str] = []

        async def reload(event: Event) -> None:
            called.append("reload")

        bus.on(APP_RESUMED, reload)
        bus.emit_sync(Event(name=APP_RESUMED))
        assert called == []

    async def test_background_failure_is_contained(self, bus):
        ran = asyncio.Event()

        async def failing(event: Event) -> None:
            ran.set()
            raise RuntimeError("boom")

        bus.on(APP_RESUMED, failing)
        bus.emit_sync(Event(name=APP_RESUMED))
        await asyncio.wait_for(ran.wait(), timeout=1)
        await asyncio.sleep(0)


def test_well_known_names_are_all_diary_or_resume():
    from memogalaxy.core import events

    names = {v for k, v in vars(events).items() if k.isupper() and isinstance(v, str) and k != "ANY_EVENT"}
    assert names == {*DIARY_EVENTS, APP_RESUMED}
