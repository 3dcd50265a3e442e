"""Single-slot, latest-wins event pipeline with one worker thread per source.

Physical switches and gestures only care about the final state, so an
event that arrives while an older one is still waiting *replaces* it.
The producer (the key broker's delivery thread) never blocks on the
worker, and the worker never runs its handler concurrently with itself.

State per source::

    IDLE ──submit──▶ ENQUEUED ──take──▶ PROCESSING ──done──▶ IDLE
                                            │
                                 submit ────┘  (stays PROCESSING; the
                                                newer value is taken on
                                                the next iteration)

There is no cancelled state: a value that has been taken always runs to
completion.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Callable, Generic, TypeVar

from oplushw.log_config.logger import ContextualLogger, get_logger

T = TypeVar("T")

_EMPTY = object()


class PipelineState(str, Enum):
    IDLE = "idle"
    ENQUEUED = "enqueued"
    PROCESSING = "processing"


class SlotClosed(Exception):
    """Raised by :meth:`LatestValueSlot.take` once the slot is closed and empty."""


class LatestValueSlot(Generic[T]):
    """A capacity-1 buffer whose producer overwrites instead of waiting."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._value: object = _EMPTY
        self._closed = False

    @property
    def pending(self) -> bool:
        with self._cond:
            return self._value is not _EMPTY

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def offer(self, value: T) -> bool:
        """Store *value*, replacing any unconsumed one.

        Returns ``True`` if an unconsumed value was overwritten.  Values
        offered after :meth:`close` are discarded.
        """
        with self._cond:
            if self._closed:
                return False
            replaced = self._value is not _EMPTY
            self._value = value
            self._cond.notify()
            return replaced

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a value is pending or the slot is closed.

        Returns ``True`` if a value is pending.
        """
        with self._cond:
            self._cond.wait_for(lambda: self._value is not _EMPTY or self._closed, timeout)
            return self._value is not _EMPTY

    def take(self, timeout: float | None = None) -> T:
        """Wait for and remove the latest value.

        Raises:
            SlotClosed: If the slot was closed while empty.
            TimeoutError: If *timeout* elapsed with nothing to take.
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._value is not _EMPTY or self._closed, timeout
            )
            if not ready:
                raise TimeoutError(f"No value within {timeout}s")
            if self._value is _EMPTY:
                raise SlotClosed()
            value, self._value = self._value, _EMPTY
            return value  # type: ignore[return-value]

    def close(self) -> None:
        """Wake any waiter; pending values are discarded."""
        with self._cond:
            self._closed = True
            self._value = _EMPTY
            self._cond.notify_all()


class SourceWorker(Generic[T]):
    """Drains a :class:`LatestValueSlot` on a dedicated daemon thread.

    Args:
        name: Source name, used for the thread name and log context.
        handler: Called with each taken value.  Exceptions are logged and
            the worker carries on with the next value.
    """

    def __init__(self, name: str, handler: Callable[[T], None]) -> None:
        self._name = name
        self._handler = handler
        self._slot: LatestValueSlot[T] = LatestValueSlot()
        self._thread: threading.Thread | None = None
        self._state = PipelineState.IDLE
        self._state_lock = threading.Lock()
        self._log = ContextualLogger(get_logger(__name__), source=name)

        self.processed = 0
        self.coalesced = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> PipelineState:
        with self._state_lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.is_running:
            return
        self._slot = LatestValueSlot()
        self._thread = threading.Thread(
            target=self._run, name=f"pipeline-{self._name}", daemon=True
        )
        self._thread.start()
        self._log.debug("Worker started")

    def stop(self, timeout: float = 5.0) -> None:
        """Close the slot and wait for the in-flight value to finish."""
        self._slot.close()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                self._log.warning("Worker did not stop within %.1fs", timeout)
            self._thread = None
        self._log.debug("Worker stopped (processed=%d coalesced=%d)", self.processed, self.coalesced)

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def submit(self, value: T) -> None:
        """Hand *value* to the worker without blocking."""
        with self._state_lock:
            if self._slot.offer(value):
                self.coalesced += 1
                self._log.debug("Replaced an unprocessed event")
            if self._state is PipelineState.IDLE:
                self._state = PipelineState.ENQUEUED

    # ------------------------------------------------------------------
    # Consumer loop
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while True:
            if not self._slot.wait():
                break
            # Taking the value and entering PROCESSING happen under the lock
            # submit() holds, so a concurrent submit sees one or the other.
            with self._state_lock:
                try:
                    value = self._slot.take(timeout=0)
                except SlotClosed:
                    break
                self._state = PipelineState.PROCESSING
            try:
                self._handler(value)
            except Exception:
                self._log.exception("Handler raised for %r", value)
            finally:
                with self._state_lock:
                    self.processed += 1
                    self._state = (
                        PipelineState.ENQUEUED if self._slot.pending else PipelineState.IDLE
                    )
