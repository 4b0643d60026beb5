from __future__ import annotations

import asyncio

from src.church_checkin.church_checkin.checkin.notifications import NotificationBus
from src.church_checkin.church_checkin.core.enums import NotificationKind


def test_single_slot_replaces_previous_message():
    bus = NotificationBus(duration=10)
    bus.warning("first")
    current = bus.error("second")

    assert bus.current == current
    assert bus.current.kind == NotificationKind.ERROR
    assert bus.current.message == "second"


def test_message_auto_clears():
    async def scenario():
        bus = NotificationBus(duration=0.02)
        bus.success("done")
        before = bus.current
        await asyncio.sleep(0.05)
        return before, bus.current

    before, after = asyncio.run(scenario())

    assert before.message == "done"
    assert after is None


def test_replaced_message_gets_its_own_full_duration():
    async def scenario():
        bus = NotificationBus(duration=0.1)
        bus.success("first")
        await asyncio.sleep(0.06)
        bus.warning("second")
        await asyncio.sleep(0.06)
        mid = bus.current
        await asyncio.sleep(0.1)
        return mid, bus.current

    mid, end = asyncio.run(scenario())

    assert mid.message == "second"
    assert end is None


def test_dismiss_ignores_stale_ids():
    bus = NotificationBus(duration=10)
    old = bus.success("old")
    bus.warning("new")

    bus.dismiss(old.id)
    assert bus.current.message == "new"

    bus.dismiss()
    assert bus.current is None


def test_listeners_see_every_change():
    seen = []
    bus = NotificationBus(duration=10)
    unsubscribe = bus.subscribe(seen.append)

    bus.success("hello")
    bus.dismiss()
    unsubscribe()
    bus.error("unseen")

    assert [n.message if n else None for n in seen] == ["hello", None]
