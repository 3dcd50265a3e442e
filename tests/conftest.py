"""Shared pytest fixtures for oplushw tests."""

from __future__ import annotations

import pytest

from oplushw.core.event_bus import EventBus
from oplushw.core.models.config import OplusHwConfig
from oplushw.platform.mock.mock_factory import MockPlatformFactory


@pytest.fixture
async def event_bus():
    """Provide a started EventBus that is stopped after the test."""
    bus = EventBus(queue_size=100)
    await bus.start()
    yield bus
    await bus.stop()


@pytest.fixture(scope="session")
def oplushw_config() -> OplusHwConfig:
    """Session-scoped default config (no file I/O)."""
    return OplusHwConfig()


@pytest.fixture
def fast_config() -> OplusHwConfig:
    """Config with short timings so threaded tests finish quickly."""
    return OplusHwConfig(
        slider={"dialog_timeout_ms": 200, "zen_poll_interval_ms": 5, "zen_commit_timeout_ms": 200},
        system={"dev_mode": True, "test_mode": True},
    )


@pytest.fixture
def mock_factory() -> MockPlatformFactory:
    """Fresh in-memory platform."""
    return MockPlatformFactory()
