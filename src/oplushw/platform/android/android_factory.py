"""AndroidPlatformFactory — creates framework-backed services on a device.

All components are created eagerly from the hosting process's
application context.  The dialog surface is injected from
:func:`oplushw.main.main` via :meth:`set_dialog_surface`; the Android
layer never draws its own UI.
"""

from __future__ import annotations

import logging as _logging
from typing import Any

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
from oplushw.core.models.config import OplusHwConfig
from oplushw.platform.android.android_platform import (
    AndroidAudio,
    AndroidInputDevices,
    AndroidKeyBroker,
    AndroidKeyguard,
    AndroidNotifications,
    AndroidPower,
    AndroidSettings,
    AndroidShortcuts,
    AndroidTouchscreen,
    AndroidVibrator,
    ProcTriState,
    application_context,
)

_log = _logging.getLogger(__name__)


class AndroidPlatformFactory(PlatformFactory):
    """Factory that creates pyjnius-backed platform services.

    Args:
        config: Full service configuration (``slider.position_file``).
        context: Android context; defaults to the current application.
    """

    def __init__(self, config: OplusHwConfig, context: Any = None) -> None:
        context = context if context is not None else application_context()

        self._broker = AndroidKeyBroker()
        self._input_devices = AndroidInputDevices(context)
        self._tri_state = ProcTriState(config.slider.position_file)
        self._settings = AndroidSettings(context)
        self._audio = AndroidAudio(context)
        self._notifications = AndroidNotifications(context)
        self._vibrator = AndroidVibrator(context)
        self._power = AndroidPower(context)
        self._keyguard = AndroidKeyguard(context)
        self._shortcuts = AndroidShortcuts(context)
        self._touchscreen = AndroidTouchscreen(context)
        self._dialog_surface: DialogSurfaceInterface | None = None

        _log.info("AndroidPlatformFactory ready")

    # -- Dialog surface injection (called from main.py) --

    def set_dialog_surface(self, surface: DialogSurfaceInterface) -> None:
        self._dialog_surface = surface

    # -- Factory interface --

    def create_key_broker(self) -> KeyBrokerInterface:
        return self._broker

    def create_input_devices(self) -> InputDeviceInterface:
        return self._input_devices

    def create_tri_state(self) -> TriStateInterface:
        return self._tri_state

    def create_settings(self) -> SettingsInterface:
        return self._settings

    def create_audio(self) -> AudioInterface:
        return self._audio

    def create_notifications(self) -> NotificationInterface:
        return self._notifications

    def create_vibrator(self) -> VibratorInterface:
        return self._vibrator

    def create_power(self) -> PowerInterface:
        return self._power

    def create_keyguard(self) -> KeyguardInterface:
        return self._keyguard

    def create_shortcuts(self) -> ShortcutInterface:
        return self._shortcuts

    def create_touchscreen(self) -> TouchscreenGestureInterface:
        return self._touchscreen

    def create_dialog_surface(self) -> DialogSurfaceInterface:
        if self._dialog_surface is None:
            raise RuntimeError(
                "Dialog surface not injected — call set_dialog_surface() before start()"
            )
        return self._dialog_surface

    # -- Lifecycle --

    def cleanup(self) -> None:
        """Stop the audio mute poller."""
        try:
            self._audio.cleanup()
        except Exception:
            _log.exception("Error cleaning up audio")
        _log.info("AndroidPlatformFactory cleanup complete")
