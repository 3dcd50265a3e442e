"""Mock platform backend for development and testing."""

from oplushw.platform.mock.mock_factory import MockPlatformFactory
from oplushw.platform.mock.mock_platform import (
    InMemoryDialogSurface,
    MockAudio,
    MockInputDevices,
    MockKeyBroker,
    MockKeyguard,
    MockNotifications,
    MockPower,
    MockSettings,
    MockShortcuts,
    MockTouchscreen,
    MockTriState,
    MockVibrator,
    MockWakeLock,
)

__all__ = [
    "InMemoryDialogSurface",
    "MockAudio",
    "MockInputDevices",
    "MockKeyBroker",
    "MockKeyguard",
    "MockNotifications",
    "MockPlatformFactory",
    "MockPower",
    "MockSettings",
    "MockShortcuts",
    "MockTouchscreen",
    "MockTriState",
    "MockVibrator",
    "MockWakeLock",
]
