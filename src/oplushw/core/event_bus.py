"""EventBus — publishes slider and gesture outcomes to async subscribers.

The bus lives on the asyncio loop that started it (NiceGUI's loop in
production, the test loop under pytest).  The slider and gesture workers
are plain threads, so they publish through :meth:`EventBus.publish_threadsafe`;
async code on the loop awaits :meth:`EventBus.publish`.

Subscribers may be plain functions or coroutines.  One that raises is
removed so a torn-down UI element cannot break delivery for everyone
else.  An optional ``filter_dict`` restricts delivery to events whose
payload contains all of its key/value pairs.

The queue is bounded; when full, the oldest undelivered event is discarded
and counted in :attr:`EventBus.dropped`.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

from oplushw.core.models.event import Event

_log = logging.getLogger(__name__)

Handler = Callable[[Event], Any]


@dataclass
class _Subscriber:
    handler: Handler
    filter_dict: dict[str, Any] = field(default_factory=dict)

    def wants(self, event: Event) -> bool:
        payload = event.payload
        return all(payload.get(k) == v for k, v in self.filter_dict.items())


class EventBus:
    """Bounded async pub/sub keyed by event type.

    Args:
        queue_size: Events held before the oldest is discarded.
    """

    def __init__(self, queue_size: int = 1000) -> None:
        self._queue_size = queue_size
        self._queue: asyncio.Queue[Event] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._consumer: asyncio.Task[None] | None = None
        # event_type -> {sub_id: subscriber}, insertion ordered
        self._by_type: dict[str, dict[str, _Subscriber]] = {}
        self._type_of: dict[str, str] = {}
        self.dropped = 0

    @property
    def is_running(self) -> bool:
        return self._consumer is not None

    @property
    def pending(self) -> int:
        """Events queued but not yet delivered."""
        return 0 if self._queue is None else self._queue.qsize()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Bind to the running loop and start delivering.  Idempotent."""
        if self._consumer is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self._queue_size)
        self._consumer = asyncio.create_task(self._deliver_forever(), name="event-bus")
        _log.info("Event bus started (queue_size=%d)", self._queue_size)

    async def stop(self) -> None:
        """Stop delivering and drop every subscription.

        Events still queued are discarded.
        """
        consumer, self._consumer = self._consumer, None
        if consumer is not None:
            consumer.cancel()
            try:
                await consumer
            except asyncio.CancelledError:
                pass
        self._loop = None
        self._by_type.clear()
        self._type_of.clear()
        _log.info("Event bus stopped")

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish(self, event_type: str, payload: dict[str, Any] | None = None) -> None:
        """Queue an event.  Must be awaited on the bus loop after :meth:`start`."""
        assert self._queue is not None, "EventBus.start() has not been called"
        self._enqueue(Event(event_type=event_type, payload=payload or {}))

    def publish_threadsafe(self, event_type: str, payload: dict[str, Any] | None = None) -> bool:
        """Queue an event from any thread.

        Returns ``False`` (and drops the event) when the bus is not running,
        so a worker finishing after shutdown never raises.
        """
        loop = self._loop
        if loop is None or loop.is_closed():
            _log.debug("Bus not running, dropped %s", event_type)
            return False
        event = Event(event_type=event_type, payload=payload or {})
        loop.call_soon_threadsafe(self._enqueue, event)
        return True

    def _enqueue(self, event: Event) -> None:
        queue = self._queue
        if queue is None:
            return
        if queue.full():
            try:
                discarded = queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            else:
                self.dropped += 1
                _log.warning("Event queue full, discarded %s", discarded.event_type)
        queue.put_nowait(event)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(
        self,
        event_type: str,
        handler: Handler,
        filter_dict: dict[str, Any] | None = None,
    ) -> str:
        """Deliver *event_type* events to *handler*; returns an id for :meth:`unsubscribe`."""
        sub_id = uuid.uuid4().hex
        self._by_type.setdefault(event_type, {})[sub_id] = _Subscriber(handler, dict(filter_dict or {}))
        self._type_of[sub_id] = event_type
        return sub_id

    def unsubscribe(self, sub_id: str) -> None:
        event_type = self._type_of.pop(sub_id, None)
        if event_type is not None:
            self._by_type.get(event_type, {}).pop(sub_id, None)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def _deliver_forever(self) -> None:
        assert self._queue is not None
        while True:
            event = await self._queue.get()
            await self._deliver(event)

    async def _deliver(self, event: Event) -> None:
        subscribers = list(self._by_type.get(event.event_type, {}).items())
        for sub_id, subscriber in subscribers:
            if not subscriber.wants(event):
                continue
            try:
                result = subscriber.handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                _log.exception(
                    "Subscriber %r failed on %s, unsubscribing", subscriber.handler, event.event_type
                )
                self.unsubscribe(sub_id)
