"""GestureController — runs the action saved for a touchscreen gesture."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from oplushw.core import events
from oplushw.core.action_store import ActionStore
from oplushw.core.event_bus import EventBus
from oplushw.core.interfaces.platform import (
    AudioInterface,
    KeyguardInterface,
    PowerInterface,
    ShortcutInterface,
    TouchscreenGestureInterface,
    VibratorInterface,
)
from oplushw.core.models.actions import (
    Action,
    Camera,
    Flashlight,
    NextTrack,
    NoAction,
    OpenApp,
    PreviousTrack,
    Pulse,
    TogglePlayback,
    VolumeDown,
    VolumeUp,
    WakeUp,
    with_vibrate,
)
from oplushw.core.models.gesture import GestureCode, TouchscreenGesture
from oplushw.core.models.state import (
    AudioRingerMode,
    AudioStream,
    HapticEffect,
    MediaKey,
    VolumeAdjust,
)

_log = logging.getLogger(__name__)

WAKE_LOCK_TAG = "GestureController:GestureWakeLock"
WAKE_REASON = "touchscreen-gesture-wakeup"


class GestureController:
    """Maps gesture scan codes to actions and performs them.

    Args:
        store: Saved action lookup.
        touchscreen: Hardware gesture enablement.
        shortcuts: System shortcut targets.
        audio: Music volume and ringer mode (for haptic suppression).
        power: Wake control and the gesture wake lock.
        keyguard: Lock state (single tap only wakes when unlocked).
        vibrator: Haptic feedback.
        wake_lock_timeout: Upper bound on the wake lock, in seconds.
        event_bus: Optional bus for ``gesture.*`` events.
    """

    def __init__(
        self,
        store: ActionStore,
        touchscreen: TouchscreenGestureInterface,
        shortcuts: ShortcutInterface,
        audio: AudioInterface,
        power: PowerInterface,
        keyguard: KeyguardInterface,
        vibrator: VibratorInterface,
        wake_lock_timeout: float = 10.0,
        event_bus: EventBus | None = None,
    ) -> None:
        self._store = store
        self._touchscreen = touchscreen
        self._shortcuts = shortcuts
        self._audio = audio
        self._power = power
        self._keyguard = keyguard
        self._vibrator = vibrator
        self._wake_lock_timeout = wake_lock_timeout
        self._bus = event_bus

        self._wake_lock = power.new_wake_lock(WAKE_LOCK_TAG)
        self._lock = threading.Lock()
        self._setting_keys: dict[int, str] = {}

        self._handlers: dict[type, Callable[[Action], bool]] = {
            Flashlight: lambda _a: self._shortcuts.toggle_flashlight(),
            Camera: lambda _a: self._launch_camera(),
            TogglePlayback: lambda _a: self._shortcuts.dispatch_media_key(MediaKey.PLAY_PAUSE),
            PreviousTrack: lambda _a: self._shortcuts.dispatch_media_key(MediaKey.PREVIOUS),
            NextTrack: lambda _a: self._shortcuts.dispatch_media_key(MediaKey.NEXT),
            VolumeDown: lambda _a: self._adjust_volume(VolumeAdjust.LOWER),
            VolumeUp: lambda _a: self._adjust_volume(VolumeAdjust.RAISE),
            WakeUp: lambda _a: self._wake_up(),
            Pulse: lambda _a: self._pulse(),
            OpenApp: lambda a: self._open_app(a.package_name),  # type: ignore[attr-defined]
        }

    @property
    def setting_keys(self) -> dict[int, str]:
        with self._lock:
            return dict(self._setting_keys)

    # ------------------------------------------------------------------
    # Hardware enablement
    # ------------------------------------------------------------------

    def enable_gestures(self) -> None:
        """Enable each hardware gesture whose saved action does something."""
        if not self._touchscreen.is_supported():
            _log.info("Touchscreen gestures not supported")
            return

        dt2w = False
        keys: dict[int, str] = {}
        for gesture in self._touchscreen.get_gestures():
            keys[gesture.keycode] = gesture.setting_key
            action = self._store.resolve_for_scan_code(gesture.setting_key, gesture.keycode)
            self._touchscreen.set_gesture_enabled(gesture, not isinstance(action, NoAction))
            if gesture.is_double_tap and isinstance(action, WakeUp):
                dt2w = True

        with self._lock:
            self._setting_keys = keys
        self._write_dt2w(dt2w)
        _log.info("Enabled touchscreen gestures (%d known, dt2w=%s)", len(keys), dt2w)

    def save_action(self, gesture: TouchscreenGesture, action: Action) -> None:
        """Persist *action* for *gesture* and update the hardware to match."""
        self._store.save(gesture.setting_key, action)
        self._touchscreen.set_gesture_enabled(gesture, not isinstance(action, NoAction))
        with self._lock:
            self._setting_keys[gesture.keycode] = gesture.setting_key
        if gesture.is_double_tap:
            self._write_dt2w(isinstance(action, WakeUp))

    def set_vibrate(self, gesture: TouchscreenGesture, vibrate: bool) -> Action:
        """Toggle haptic feedback on the action saved for *gesture*."""
        current = self._store.resolve_for_scan_code(gesture.setting_key, gesture.keycode)
        updated = with_vibrate(current, vibrate)
        if updated is not current:
            self._store.save(gesture.setting_key, updated)
        return updated

    # ------------------------------------------------------------------
    # Key handling (gesture worker thread)
    # ------------------------------------------------------------------

    def handle_scan_code(self, scan_code: int) -> bool:
        """Perform the action for *scan_code*.  Returns ``True`` on success."""
        if scan_code == GestureCode.SINGLE_TAP and not self._keyguard.is_device_locked():
            return self._wake_up()

        with self._lock:
            key = self._setting_keys.get(scan_code)
        if key is None:
            _log.debug("Ignoring scan code %d (no gesture mapped)", scan_code)
            return False

        try:
            if not self._wake_lock.is_held:
                self._wake_lock.acquire(self._wake_lock_timeout)
            action = self._store.resolve_for_scan_code(key, scan_code)
            return self.perform_action(action, scan_code=scan_code)
        finally:
            if self._wake_lock.is_held:
                self._wake_lock.release()

    def perform_action(self, action: Action, scan_code: int | None = None) -> bool:
        if isinstance(action, NoAction):
            return False
        handler = self._handlers.get(type(action))
        if handler is None:
            raise TypeError(f"No handler for action {action!r}")

        success = handler(action)
        vibrated = False
        if success and action.vibrate:
            vibrated = self._haptic_feedback()

        _log.info("Gesture action %s success=%s vibrated=%s", action.name, success, vibrated)
        if self._bus is not None:
            self._bus.publish_threadsafe(
                events.GESTURE_ACTION_PERFORMED,
                {
                    "scan_code": scan_code,
                    "action": action.name,
                    "success": success,
                    "vibrated": vibrated,
                },
            )
        return success

    # ------------------------------------------------------------------
    # Action targets
    # ------------------------------------------------------------------

    def _wake_up(self) -> bool:
        self._power.wake_up(WAKE_REASON)
        return True

    def _launch_camera(self) -> bool:
        self._wake_up()
        return self._shortcuts.send_camera_gesture()

    def _adjust_volume(self, direction: VolumeAdjust) -> bool:
        self._audio.adjust_stream_volume(AudioStream.MUSIC, direction)
        return True

    def _pulse(self) -> bool:
        if not self._shortcuts.is_pulse_enabled():
            return False
        return self._shortcuts.send_pulse()

    def _open_app(self, package_name: str) -> bool:
        if package_name in self._shortcuts.hidden_packages():
            _log.info("Not opening hidden package %s", package_name)
            return False
        if not self._shortcuts.launch_app(package_name):
            _log.error("Failed to launch %s", package_name)
            return False
        self._wake_up()
        return True

    def _haptic_feedback(self) -> bool:
        if self._audio.get_ringer_mode() == AudioRingerMode.SILENT:
            return False
        if not self._vibrator.has_vibrator():
            return False
        self._vibrator.vibrate(HapticEffect.HEAVY_CLICK)
        return True

    def _write_dt2w(self, enabled: bool) -> None:
        self._store.set_double_tap_to_wake(enabled)
