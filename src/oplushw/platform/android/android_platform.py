"""Android platform implementations via pyjnius.

Each class implements the corresponding ABC from
:mod:`oplushw.core.interfaces.platform` by calling the framework service
through ``jnius.autoclass``.  Several of the services used here are
hidden APIs, so this backend only works inside a platform-signed
process on an OPlus device.

.. note::

   The ``jnius`` import is guarded so the module can be imported (but
   not instantiated) off-device for testing with ``unittest.mock.patch``.
"""

from __future__ import annotations

import logging as _logging
import threading
from typing import Any

from oplushw.core.interfaces.platform import (
    AudioInterface,
    InputDeviceInterface,
    KeyBrokerInterface,
    KeyguardInterface,
    KeyHandler,
    MuteCallback,
    NotificationInterface,
    PowerInterface,
    RegistrationError,
    SettingsInterface,
    ShortcutInterface,
    TouchscreenGestureInterface,
    TriStateInterface,
    VibratorInterface,
    WakeLock,
)
from oplushw.core.models.event import KeyEvent
from oplushw.core.models.gesture import TouchscreenGesture
from oplushw.core.models.state import (
    USER_CURRENT,
    AudioRingerMode,
    AudioStream,
    HapticEffect,
    KeyAction,
    MediaKey,
    SettingsNamespace,
    SliderPosition,
    VolumeAdjust,
    ZenMode,
)

_log = _logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Lazy imports, patched by unit tests off-device.
# The names below become module-level attributes that tests can
# ``@patch("oplushw.platform.android.android_platform.autoclass")`` etc.
# ---------------------------------------------------------------------------
try:
    from jnius import PythonJavaClass, autoclass, java_method  # type: ignore[import-untyped]
except ImportError:  # pragma: no cover (not on Android)
    PythonJavaClass = None  # type: ignore[assignment,misc]
    autoclass = None  # type: ignore[assignment]
    java_method = None  # type: ignore[assignment]

DEVICE_KEY_MANAGER = "device_key_manager"
PULSE_ACTION = "com.android.systemui.doze.pulse"
STATUS_BAR_SERVICE_PERMISSION = "android.permission.STATUS_BAR_SERVICE"

# android.os.VibrationEffect predefined ids
_EFFECT_IDS: dict[HapticEffect, int] = {
    HapticEffect.DOUBLE_CLICK: 1,
    HapticEffect.HEAVY_CLICK: 5,
}

_PARTIAL_WAKE_LOCK = 1
_WAKE_REASON_GESTURE = 4
_FEATURE_TOUCHSCREEN_GESTURES = 0x80000
_LAUNCH_FLAGS = 0x10000000 | 0x20000000 | 0x04000000  # NEW_TASK | SINGLE_TOP | CLEAR_TOP


def application_context() -> Any:
    """Return the ``android.content.Context`` of the hosting process."""
    if autoclass is None:
        raise ImportError("pyjnius is not installed")
    activity_thread = autoclass("android.app.ActivityThread")
    context = activity_thread.currentApplication()
    if context is None:
        raise RuntimeError("No Android application context in this process")
    return context


def _system_service(context: Any, name: str) -> Any:
    Context = autoclass("android.content.Context")
    return context.getSystemService(getattr(Context, name))


def _make_key_handler_proxy(callback: KeyHandler) -> Any:
    """Wrap *callback* in a Java ``IKeyHandler`` implementation."""

    class _KeyHandlerProxy(PythonJavaClass):  # type: ignore[misc,valid-type]
        __javainterfaces__ = ["com/android/internal/os/IKeyHandler"]
        __javacontext__ = "app"

        def __init__(self, cb: KeyHandler) -> None:
            super().__init__()
            self._cb = cb
            self._binder = autoclass("android.os.Binder")()

        @java_method("(Landroid/view/KeyEvent;)V")
        def handleKeyEvent(self, event: Any) -> None:  # noqa: N802
            self._cb(
                KeyEvent(
                    scan_code=event.getScanCode(),
                    action=KeyAction(event.getAction()),
                    device_id=event.getDeviceId(),
                )
            )

        @java_method("()Landroid/os/IBinder;")
        def asBinder(self) -> Any:  # noqa: N802
            return self._binder

    return _KeyHandlerProxy(callback)


# ---------------------------------------------------------------------------
# Key broker / input devices
# ---------------------------------------------------------------------------

class AndroidKeyBroker(KeyBrokerInterface):
    """``IDeviceKeyManager`` binder service."""

    def __init__(self) -> None:
        self._tokens: dict[str, Any] = {}
        self._proxies: dict[str, Any] = {}

    def _manager(self) -> Any:
        service_manager = autoclass("android.os.ServiceManager")
        binder = service_manager.getService(DEVICE_KEY_MANAGER)
        if binder is None:
            raise RegistrationError("Device key manager service not found")
        stub = autoclass("com.android.internal.os.IDeviceKeyManager$Stub")
        return stub.asInterface(binder)

    def register_key_handler(
        self,
        token: str,
        handler: KeyHandler,
        scan_codes: frozenset[int],
        actions: frozenset[KeyAction],
        device_id: int,
    ) -> None:
        manager = self._manager()
        binder = autoclass("android.os.Binder")()
        proxy = _make_key_handler_proxy(handler)
        try:
            manager.registerKeyHandler(
                binder,
                proxy,
                sorted(scan_codes),
                sorted(int(a) for a in actions),
                device_id,
            )
        except Exception as exc:
            raise RegistrationError(f"registerKeyHandler failed: {exc}") from exc
        self._tokens[token] = binder
        self._proxies[token] = proxy

    def unregister_key_handler(self, token: str) -> None:
        binder = self._tokens.pop(token, None)
        self._proxies.pop(token, None)
        if binder is None:
            return
        self._manager().unregisterKeyHandler(binder)


class AndroidInputDevices(InputDeviceInterface):
    def __init__(self, context: Any) -> None:
        self._input_manager = _system_service(context, "INPUT_SERVICE")

    def get_input_device_ids(self) -> list[int]:
        return list(self._input_manager.getInputDeviceIds())

    def get_input_device_name(self, device_id: int) -> str | None:
        device = self._input_manager.getInputDevice(device_id)
        return None if device is None else device.getName()


class ProcTriState(TriStateInterface):
    """Reads the kernel's ``tri_state`` node (``1`` top, ``2`` middle, ``3`` bottom)."""

    def __init__(self, path: str = "/proc/tristatekey/tri_state") -> None:
        self._path = path

    def read_position(self) -> SliderPosition | None:
        try:
            with open(self._path) as f:
                raw = f.read()
        except OSError:
            _log.exception("Failed to read %s", self._path)
            return None
        position = SliderPosition.from_proc_value(raw)
        if position is None:
            _log.error("Unexpected tri_state value %r", raw)
        return position


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class AndroidSettings(SettingsInterface):
    """``Settings.System`` / ``Settings.Secure`` for a given user."""

    def __init__(self, context: Any) -> None:
        self._resolver = context.getContentResolver()
        self._tables = {
            SettingsNamespace.SYSTEM: autoclass("android.provider.Settings$System"),
            SettingsNamespace.SECURE: autoclass("android.provider.Settings$Secure"),
        }

    def get_string(
        self, namespace: SettingsNamespace, key: str, user: int = USER_CURRENT
    ) -> str | None:
        return self._tables[namespace].getStringForUser(self._resolver, key, user)

    def put_string(
        self, namespace: SettingsNamespace, key: str, value: str, user: int = USER_CURRENT
    ) -> None:
        self._tables[namespace].putStringForUser(self._resolver, key, value, user)

    def get_int(
        self, namespace: SettingsNamespace, key: str, default: int, user: int = USER_CURRENT
    ) -> int:
        return self._tables[namespace].getIntForUser(self._resolver, key, default, user)

    def put_int(
        self, namespace: SettingsNamespace, key: str, value: int, user: int = USER_CURRENT
    ) -> None:
        self._tables[namespace].putIntForUser(self._resolver, key, value, user)


# ---------------------------------------------------------------------------
# Audio / notifications / haptics
# ---------------------------------------------------------------------------

class AndroidAudio(AudioInterface):
    """``AudioManager`` with a polling thread for music mute changes.

    Args:
        context: Application context.
        poll_interval: Seconds between mute state checks.
    """

    def __init__(self, context: Any, poll_interval: float = 0.25) -> None:
        self._audio = _system_service(context, "AUDIO_SERVICE")
        self._poll_interval = poll_interval
        self._callbacks: list[MuteCallback] = []
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_muted = False

    def set_ringer_mode(self, mode: AudioRingerMode) -> None:
        self._audio.setRingerModeInternal(int(mode))

    def get_ringer_mode(self) -> AudioRingerMode:
        return AudioRingerMode(self._audio.getRingerModeInternal())

    def adjust_volume(self, direction: VolumeAdjust) -> None:
        self._audio.adjustVolume(int(direction), 0)

    def adjust_stream_volume(self, stream: AudioStream, direction: VolumeAdjust) -> None:
        self._audio.adjustStreamVolume(int(stream), int(direction), 0)

    def register_mute_callback(self, callback: MuteCallback) -> None:
        with self._lock:
            self._callbacks.append(callback)
            if self._thread is None:
                self._last_muted = self._is_music_muted()
                self._stop_event.clear()
                self._thread = threading.Thread(
                    target=self._poll_loop, name="audio-mute-poll", daemon=True
                )
                self._thread.start()

    def unregister_mute_callback(self, callback: MuteCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def cleanup(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        _log.debug("AndroidAudio cleaned up")

    def _is_music_muted(self) -> bool:
        return bool(self._audio.isStreamMute(int(AudioStream.MUSIC)))

    def _poll_loop(self) -> None:
        while not self._stop_event.wait(self._poll_interval):
            try:
                muted = self._is_music_muted()
            except Exception:
                _log.exception("Failed to read music mute state")
                continue
            if muted == self._last_muted:
                continue
            self._last_muted = muted
            with self._lock:
                callbacks = list(self._callbacks)
            for callback in callbacks:
                try:
                    callback(int(AudioStream.MUSIC), muted)
                except Exception:
                    _log.exception("Mute callback raised")


class AndroidNotifications(NotificationInterface):
    def __init__(self, context: Any) -> None:
        self._notifications = _system_service(context, "NOTIFICATION_SERVICE")

    def set_zen_mode(self, mode: ZenMode, reason: str) -> None:
        self._notifications.setZenMode(int(mode), None, reason)

    def get_zen_mode(self) -> ZenMode:
        return ZenMode(self._notifications.getZenMode())


class AndroidVibrator(VibratorInterface):
    def __init__(self, context: Any) -> None:
        self._vibrator = _system_service(context, "VIBRATOR_SERVICE")
        self._effect_class = autoclass("android.os.VibrationEffect")

    def has_vibrator(self) -> bool:
        return bool(self._vibrator.hasVibrator())

    def vibrate(self, effect: HapticEffect) -> None:
        self._vibrator.vibrate(self._effect_class.createPredefined(_EFFECT_IDS[effect]))


# ---------------------------------------------------------------------------
# Power / keyguard
# ---------------------------------------------------------------------------

class AndroidWakeLock(WakeLock):
    def __init__(self, java_lock: Any) -> None:
        self._lock = java_lock

    @property
    def is_held(self) -> bool:
        return bool(self._lock.isHeld())

    def acquire(self, timeout_seconds: float) -> None:
        self._lock.acquire(int(timeout_seconds * 1000))

    def release(self) -> None:
        self._lock.release()


class AndroidPower(PowerInterface):
    def __init__(self, context: Any) -> None:
        self._power = _system_service(context, "POWER_SERVICE")
        self._clock = autoclass("android.os.SystemClock")

    def is_interactive(self) -> bool:
        return bool(self._power.isInteractive())

    def wake_up(self, reason: str) -> None:
        self._power.wakeUp(self._clock.uptimeMillis(), _WAKE_REASON_GESTURE, reason)

    def new_wake_lock(self, tag: str) -> WakeLock:
        return AndroidWakeLock(self._power.newWakeLock(_PARTIAL_WAKE_LOCK, tag))


class AndroidKeyguard(KeyguardInterface):
    def __init__(self, context: Any) -> None:
        self._keyguard = _system_service(context, "KEYGUARD_SERVICE")

    def is_device_locked(self) -> bool:
        return bool(self._keyguard.isDeviceLocked())


# ---------------------------------------------------------------------------
# Gesture targets
# ---------------------------------------------------------------------------

class AndroidShortcuts(ShortcutInterface):
    """System shortcuts reached through broadcasts and hidden helpers."""

    def __init__(self, context: Any) -> None:
        self._context = context
        self._intent_class = autoclass("android.content.Intent")
        self._user_handle = autoclass("android.os.UserHandle")
        self._clock = autoclass("android.os.SystemClock")
        self._key_event = autoclass("android.view.KeyEvent")

    def toggle_flashlight(self) -> bool:
        autoclass("com.android.internal.util.flamingo.FlamingoUtils").toggleCameraFlash()
        return True

    def send_camera_gesture(self) -> bool:
        intent = self._intent_class(self._intent_class.ACTION_SCREEN_CAMERA_GESTURE)
        self._context.sendBroadcastAsUser(
            intent, self._user_handle.SYSTEM, STATUS_BAR_SERVICE_PERMISSION
        )
        return True

    def dispatch_media_key(self, key: MediaKey) -> bool:
        helper = autoclass("android.media.session.MediaSessionLegacyHelper").getHelper(self._context)
        if helper is None:
            _log.warning("Unable to send media key event")
            return False
        now = self._clock.uptimeMillis()
        down = self._key_event(now, now, int(KeyAction.DOWN), int(key), 0)
        helper.sendMediaButtonEvent(down, True)
        helper.sendMediaButtonEvent(self._key_event.changeAction(down, int(KeyAction.UP)), True)
        return True

    def is_pulse_enabled(self) -> bool:
        config = autoclass("android.hardware.display.AmbientDisplayConfiguration")(self._context)
        return bool(config.pulseOnNotificationEnabled(USER_CURRENT))

    def send_pulse(self) -> bool:
        self._context.sendBroadcastAsUser(self._intent_class(PULSE_ACTION), self._user_handle.SYSTEM)
        return True

    def hidden_packages(self) -> set[str]:
        app_lock = self._context.getSystemService(autoclass("android.app.AppLockManager"))
        if app_lock is None:
            return set()
        return {str(p) for p in app_lock.getHiddenPackages().toArray()}

    def launch_app(self, package_name: str) -> bool:
        intent = self._context.getPackageManager().getLaunchIntentForPackage(package_name)
        if intent is None:
            _log.error("Failed to find launch intent for package %s", package_name)
            return False
        intent.addFlags(_LAUNCH_FLAGS)
        try:
            self._context.startActivityAsUser(intent, None, self._user_handle.SYSTEM)
        except Exception:
            _log.exception("Activity not found to launch in %s", package_name)
            return False
        return True


class AndroidTouchscreen(TouchscreenGestureInterface):
    """``LineageHardwareManager`` touchscreen gesture feature."""

    def __init__(self, context: Any) -> None:
        self._manager = autoclass(
            "com.android.internal.lineage.hardware.LineageHardwareManager"
        ).getInstance(context)
        self._java_gestures: dict[int, Any] = {}

    def is_supported(self) -> bool:
        return bool(self._manager.isSupported(_FEATURE_TOUCHSCREEN_GESTURES))

    def get_gestures(self) -> list[TouchscreenGesture]:
        gestures = []
        for java_gesture in self._manager.getTouchscreenGestures():
            gesture = TouchscreenGesture(
                id=java_gesture.id, name=java_gesture.name, keycode=java_gesture.keycode
            )
            self._java_gestures[gesture.id] = java_gesture
            gestures.append(gesture)
        return gestures

    def set_gesture_enabled(self, gesture: TouchscreenGesture, enabled: bool) -> None:
        java_gesture = self._java_gestures.get(gesture.id)
        if java_gesture is None:
            _log.warning("Unknown touchscreen gesture %s", gesture.name)
            return
        self._manager.setTouchscreenGestureEnabled(java_gesture, enabled)
