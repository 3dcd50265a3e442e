"""Tests for the latest-wins slot and per-source worker threads."""

from __future__ import annotations

import threading
import time

import pytest

from oplushw.core.event_pipeline import (
    LatestValueSlot,
    PipelineState,
    SlotClosed,
    SourceWorker,
)
from tests.helpers.runtime import wait_for_sync


class TestLatestValueSlot:
    def test_take_returns_offered_value(self):
        slot: LatestValueSlot[int] = LatestValueSlot()
        assert slot.offer(1) is False
        assert slot.take(timeout=0.1) == 1
        assert slot.pending is False

    def test_newer_value_replaces_older(self):
        slot: LatestValueSlot[int] = LatestValueSlot()
        slot.offer(1)
        assert slot.offer(2) is True
        assert slot.take(timeout=0.1) == 2
        with pytest.raises(TimeoutError):
            slot.take(timeout=0.05)

    def test_take_times_out_when_empty(self):
        with pytest.raises(TimeoutError):
            LatestValueSlot().take(timeout=0.01)

    def test_close_wakes_waiter(self):
        slot: LatestValueSlot[int] = LatestValueSlot()
        raised = threading.Event()

        def waiter():
            try:
                slot.take()
            except SlotClosed:
                raised.set()

        t = threading.Thread(target=waiter)
        t.start()
        time.sleep(0.05)
        slot.close()
        t.join(timeout=1.0)
        assert raised.is_set()

    def test_wait_reports_pending(self):
        slot: LatestValueSlot[int] = LatestValueSlot()
        assert slot.wait(timeout=0.01) is False
        slot.offer(3)
        assert slot.wait(timeout=0.01) is True
        slot.close()
        assert slot.wait() is False

    def test_offer_after_close_is_discarded(self):
        slot: LatestValueSlot[int] = LatestValueSlot()
        slot.close()
        slot.offer(5)
        assert slot.pending is False
        assert slot.closed is True


class TestSourceWorker:
    def test_processes_submitted_value(self):
        seen: list[int] = []
        worker: SourceWorker[int] = SourceWorker("test", seen.append)
        worker.start()
        try:
            worker.submit(7)
            wait_for_sync(lambda: seen == [7], timeout=2.0, interval=0.01)
            wait_for_sync(lambda: worker.state is PipelineState.IDLE, timeout=2.0, interval=0.01)
        finally:
            worker.stop()
        assert worker.processed == 1

    def test_burst_during_processing_coalesces_to_latest(self):
        """Values submitted while the handler runs collapse into the newest one."""
        gate = threading.Event()
        started = threading.Event()
        seen: list[int] = []

        def handler(value: int) -> None:
            seen.append(value)
            if value == 0:
                started.set()
                gate.wait(timeout=2.0)

        worker: SourceWorker[int] = SourceWorker("burst", handler)
        worker.start()
        try:
            worker.submit(0)
            assert started.wait(timeout=2.0)
            assert worker.state is PipelineState.PROCESSING

            for value in range(1, 6):
                worker.submit(value)
            assert worker.state is PipelineState.PROCESSING
            gate.set()

            wait_for_sync(lambda: len(seen) == 2, timeout=2.0, interval=0.01)
            time.sleep(0.05)
        finally:
            worker.stop()

        assert seen == [0, 5]
        assert worker.coalesced == 4

    def test_taken_value_is_never_reported_enqueued(self, monkeypatch):
        """A state read racing with take() sees PROCESSING, not a stale ENQUEUED."""
        observed: list[PipelineState] = []
        read = threading.Event()
        worker: SourceWorker[int] = SourceWorker("atomic", lambda _v: read.wait(timeout=2.0))
        original_take = LatestValueSlot.take

        def take_then_read_state(slot, timeout=None):
            value = original_take(slot, timeout)

            def read_state():
                observed.append(worker.state)
                read.set()

            reader = threading.Thread(target=read_state)
            reader.start()
            reader.join(timeout=0.05)
            return value

        monkeypatch.setattr(LatestValueSlot, "take", take_then_read_state)
        worker.start()
        try:
            worker.submit(1)
            wait_for_sync(lambda: worker.processed == 1, timeout=2.0, interval=0.01)
            wait_for_sync(lambda: len(observed) == 1, timeout=2.0, interval=0.01)
        finally:
            worker.stop()
        assert observed == [PipelineState.PROCESSING]

    def test_handler_is_never_reentered(self):
        active = 0
        max_active = 0
        lock = threading.Lock()

        def handler(_value: int) -> None:
            nonlocal active, max_active
            with lock:
                active += 1
                max_active = max(max_active, active)
            time.sleep(0.005)
            with lock:
                active -= 1

        worker: SourceWorker[int] = SourceWorker("serial", handler)
        worker.start()
        try:
            producers = [
                threading.Thread(target=lambda: [worker.submit(i) for i in range(50)])
                for _ in range(4)
            ]
            for p in producers:
                p.start()
            for p in producers:
                p.join()
            wait_for_sync(lambda: worker.state is PipelineState.IDLE, timeout=3.0, interval=0.01)
        finally:
            worker.stop()
        assert max_active == 1

    def test_handler_exception_does_not_kill_worker(self, caplog):
        seen: list[int] = []

        def handler(value: int) -> None:
            if value == 1:
                raise RuntimeError("boom")
            seen.append(value)

        worker: SourceWorker[int] = SourceWorker("errors", handler)
        worker.start()
        try:
            worker.submit(1)
            wait_for_sync(lambda: worker.processed == 1, timeout=2.0, interval=0.01)
            worker.submit(2)
            wait_for_sync(lambda: seen == [2], timeout=2.0, interval=0.01)
        finally:
            worker.stop()
        assert "[source=errors]" in caplog.text

    def test_submit_never_blocks_on_slow_handler(self):
        gate = threading.Event()
        worker: SourceWorker[int] = SourceWorker("slow", lambda _v: gate.wait(timeout=2.0))
        worker.start()
        try:
            worker.submit(0)
            start = time.monotonic()
            for value in range(100):
                worker.submit(value)
            assert time.monotonic() - start < 0.5
        finally:
            gate.set()
            worker.stop()

    def test_stop_joins_thread(self):
        worker: SourceWorker[int] = SourceWorker("stop", lambda _v: None)
        worker.start()
        assert worker.is_running
        worker.stop()
        assert not worker.is_running

    def test_restart_after_stop(self):
        seen: list[int] = []
        worker: SourceWorker[int] = SourceWorker("restart", seen.append)
        worker.start()
        worker.stop()
        worker.start()
        try:
            worker.submit(3)
            wait_for_sync(lambda: seen == [3], timeout=2.0, interval=0.01)
        finally:
            worker.stop()
