"""MockPlatformFactory — creates in-memory platform services for dev and test.

All created instances are stored as public attributes so the dev panel
and tests can access ``simulate_*()`` helpers directly.
"""

from __future__ import annotations

from oplushw.core.interfaces.platform import (
    AudioInterface,
    DialogSurfaceInterface,
    InputDeviceInterface,
    KeyBrokerInterface,
    KeyguardInterface,
    NotificationInterface,
    PlatformFactory,
    PowerInterface,
    SettingsInterface,
    ShortcutInterface,
    TouchscreenGestureInterface,
    TriStateInterface,
    VibratorInterface,
)
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
)


class MockPlatformFactory(PlatformFactory):
    """Factory that returns in-memory mock implementations.

    After creation, the individual mock objects are available as attributes
    (e.g. ``factory.broker``, ``factory.audio``) for direct access in
    the dev panel and tests.

    By default ``create_dialog_surface()`` returns an
    :class:`InMemoryDialogSurface`.  Call :meth:`set_dialog_surface` to
    inject a different implementation (e.g. :class:`NiceGUIDialogSurface`)
    before the service is started.
    """

    def __init__(self) -> None:
        self.broker = MockKeyBroker()
        self.input_devices = MockInputDevices()
        self.tri_state = MockTriState(self.broker)
        self.settings = MockSettings()
        self.audio = MockAudio()
        self.notifications = MockNotifications()
        self.vibrator = MockVibrator()
        self.power = MockPower()
        self.keyguard = MockKeyguard()
        self.shortcuts = MockShortcuts()
        self.touchscreen = MockTouchscreen()
        self._dialog_surface: DialogSurfaceInterface = InMemoryDialogSurface()
        self.cleaned_up = False

    def set_dialog_surface(self, surface: DialogSurfaceInterface) -> None:
        """Replace the default :class:`InMemoryDialogSurface` with *surface*.

        Must be called **before** :class:`KeyHandlerService` is started.
        """
        self._dialog_surface = surface

    @property
    def dialog_surface(self) -> DialogSurfaceInterface:
        return self._dialog_surface

    # -- Factory interface --

    def create_key_broker(self) -> KeyBrokerInterface:
        return self.broker

    def create_input_devices(self) -> InputDeviceInterface:
        return self.input_devices

    def create_tri_state(self) -> TriStateInterface:
        return self.tri_state

    def create_settings(self) -> SettingsInterface:
        return self.settings

    def create_audio(self) -> AudioInterface:
        return self.audio

    def create_notifications(self) -> NotificationInterface:
        return self.notifications

    def create_vibrator(self) -> VibratorInterface:
        return self.vibrator

    def create_power(self) -> PowerInterface:
        return self.power

    def create_keyguard(self) -> KeyguardInterface:
        return self.keyguard

    def create_shortcuts(self) -> ShortcutInterface:
        return self.shortcuts

    def create_touchscreen(self) -> TouchscreenGestureInterface:
        return self.touchscreen

    def create_dialog_surface(self) -> DialogSurfaceInterface:
        return self._dialog_surface

    def cleanup(self) -> None:
        self.cleaned_up = True
