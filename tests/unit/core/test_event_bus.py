"""Tests for EventBus delivery, filtering, thread publishing and overflow."""

from __future__ import annotations

import asyncio
import threading

from oplushw.core import events
from oplushw.core.event_bus import EventBus
from oplushw.core.models.event import Event
from tests.helpers.runtime import wait_for


class TestDelivery:
    async def test_async_subscriber_receives_payload(self, event_bus: EventBus):
        got: list[Event] = []

        async def on_applied(event: Event) -> None:
            got.append(event)

        event_bus.subscribe(events.SLIDER_MODE_APPLIED, on_applied)
        await event_bus.publish(events.SLIDER_MODE_APPLIED, {"position": "top", "mode": "SILENT"})

        await wait_for(lambda: len(got) == 1)
        assert got[0].event_type == events.SLIDER_MODE_APPLIED
        assert got[0].payload == {"position": "top", "mode": "SILENT"}

    async def test_sync_subscriber(self, event_bus: EventBus):
        got: list[str] = []
        event_bus.subscribe(events.SERVICE_STARTED, lambda e: got.append(e.event_type))
        await event_bus.publish(events.SERVICE_STARTED)
        await wait_for(lambda: got == [events.SERVICE_STARTED])

    async def test_every_subscriber_in_order(self, event_bus: EventBus):
        order: list[str] = []
        event_bus.subscribe(events.MEDIA_MUTE_CHANGED, lambda _e: order.append("panel"))
        event_bus.subscribe(events.MEDIA_MUTE_CHANGED, lambda _e: order.append("log"))
        await event_bus.publish(events.MEDIA_MUTE_CHANGED, {"muted": True})
        await wait_for(lambda: len(order) == 2)
        assert order == ["panel", "log"]

    async def test_other_types_not_delivered(self, event_bus: EventBus):
        got: list[Event] = []
        event_bus.subscribe(events.SLIDER_DIALOG_SHOWN, got.append)
        await event_bus.publish(events.GESTURE_ACTION_PERFORMED, {"action": "camera"})
        await asyncio.sleep(0.05)
        assert got == []

    async def test_unsubscribe(self, event_bus: EventBus):
        got: list[Event] = []
        sub_id = event_bus.subscribe(events.SERVICE_STOPPED, got.append)
        event_bus.unsubscribe(sub_id)
        event_bus.unsubscribe(sub_id)
        await event_bus.publish(events.SERVICE_STOPPED)
        await asyncio.sleep(0.05)
        assert got == []


class TestFilter:
    async def test_filter_on_payload(self, event_bus: EventBus):
        got: list[Event] = []
        event_bus.subscribe(
            events.GESTURE_ACTION_PERFORMED, got.append, filter_dict={"action": "camera", "success": True}
        )
        await event_bus.publish(events.GESTURE_ACTION_PERFORMED, {"action": "camera", "success": False})
        await event_bus.publish(events.GESTURE_ACTION_PERFORMED, {"action": "flashlight", "success": True})
        await event_bus.publish(events.GESTURE_ACTION_PERFORMED, {"action": "camera", "success": True})
        await wait_for(lambda: len(got) == 1)
        await asyncio.sleep(0.05)
        assert len(got) == 1
        assert got[0].payload == {"action": "camera", "success": True}


class TestThreadPublishing:
    async def test_worker_thread_publish(self, event_bus: EventBus):
        got: list[Event] = []
        event_bus.subscribe(events.SLIDER_MODE_APPLIED, got.append)

        worker = threading.Thread(
            target=event_bus.publish_threadsafe,
            args=(events.SLIDER_MODE_APPLIED, {"position": "bottom"}),
            name="pipeline-alert_slider",
        )
        worker.start()
        await asyncio.to_thread(worker.join)

        await wait_for(lambda: len(got) == 1)
        assert got[0].payload == {"position": "bottom"}

    def test_publish_before_start_is_dropped(self):
        bus = EventBus()
        assert bus.publish_threadsafe(events.SERVICE_STARTED) is False
        assert bus.pending == 0

    async def test_publish_after_stop_is_dropped(self):
        bus = EventBus()
        await bus.start()
        await bus.stop()
        assert bus.publish_threadsafe(events.SERVICE_STOPPED) is False


class TestFailingSubscriber:
    async def test_raising_subscriber_removed(self, event_bus: EventBus):
        calls = 0
        healthy: list[Event] = []

        async def torn_down_label(_e: Event) -> None:
            nonlocal calls
            calls += 1
            raise RuntimeError("The client this element belongs to has been deleted.")

        event_bus.subscribe(events.SLIDER_MODE_APPLIED, torn_down_label)
        event_bus.subscribe(events.SLIDER_MODE_APPLIED, healthy.append)

        await event_bus.publish(events.SLIDER_MODE_APPLIED)
        await event_bus.publish(events.SLIDER_MODE_APPLIED)
        await wait_for(lambda: len(healthy) == 2)
        assert calls == 1


class TestLifecycle:
    async def test_start_is_idempotent(self):
        bus = EventBus()
        await bus.start()
        try:
            await bus.start()
            assert bus.is_running
        finally:
            await bus.stop()
        assert not bus.is_running

    async def test_stop_clears_subscriptions(self):
        bus = EventBus()
        await bus.start()
        got: list[Event] = []
        bus.subscribe(events.SERVICE_STARTED, got.append)
        await bus.stop()
        await bus.start()
        try:
            await bus.publish(events.SERVICE_STARTED)
            await asyncio.sleep(0.05)
            assert got == []
        finally:
            await bus.stop()


class TestOverflow:
    async def test_oldest_event_discarded(self):
        bus = EventBus(queue_size=2)
        await bus.start()
        try:
            got: list[int] = []
            bus.subscribe(events.SLIDER_MODE_APPLIED, lambda e: got.append(e.payload["n"]))

            # publish() never yields, so the consumer cannot drain in between.
            for n in (1, 2, 3):
                await bus.publish(events.SLIDER_MODE_APPLIED, {"n": n})
            assert bus.dropped == 1

            await wait_for(lambda: len(got) == 2)
            assert got == [2, 3]
        finally:
            await bus.stop()
