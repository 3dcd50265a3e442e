"""Mock platform implementations for development and testing.

Each class implements the corresponding ABC from
:mod:`oplushw.core.interfaces.platform` with in-memory state and
``simulate_*()`` helpers for the dev panel and tests.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from oplushw.core.interfaces.platform import (
    AudioInterface,
    DialogSurfaceInterface,
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
from oplushw.core.models.gesture import GestureCode, TouchscreenGesture
from oplushw.core.models.state import (
    ANY_DEVICE,
    USER_CURRENT,
    AudioRingerMode,
    AudioStream,
    HapticEffect,
    KeyAction,
    MediaKey,
    RingerMode,
    SettingsNamespace,
    SliderPosition,
    VolumeAdjust,
    ZenMode,
)

_log = logging.getLogger(__name__)

TRI_STATE_DEVICE_ID = 5
TOUCHPANEL_DEVICE_ID = 3

# Scan codes the tri-state key reports for each position.
SLIDER_SCAN_CODES: dict[SliderPosition, int] = {
    SliderPosition.TOP: 601,
    SliderPosition.MIDDLE: 602,
    SliderPosition.BOTTOM: 603,
}


# ---------------------------------------------------------------------------
# Key broker / input devices
# ---------------------------------------------------------------------------

@dataclass
class _BrokerEntry:
    handler: KeyHandler
    scan_codes: frozenset[int]
    actions: frozenset[KeyAction]
    device_id: int

    def matches(self, event: KeyEvent) -> bool:
        if self.scan_codes and event.scan_code not in self.scan_codes:
            return False
        if event.action not in self.actions:
            return False
        return self.device_id == ANY_DEVICE or self.device_id == event.device_id


class MockKeyBroker(KeyBrokerInterface):
    """In-memory key broker.  Delivery happens on the caller's thread.

    Attributes:
        available: When ``False``, every registration raises
            :class:`RegistrationError` (broker service missing).
    """

    def __init__(self) -> None:
        self.available = True
        self._entries: dict[str, _BrokerEntry] = {}
        self._lock = threading.Lock()

    @property
    def tokens(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def register_key_handler(
        self,
        token: str,
        handler: KeyHandler,
        scan_codes: frozenset[int],
        actions: frozenset[KeyAction],
        device_id: int,
    ) -> None:
        if not self.available:
            raise RegistrationError("device_key_manager service not found")
        with self._lock:
            self._entries[token] = _BrokerEntry(handler, frozenset(scan_codes), frozenset(actions), device_id)

    def unregister_key_handler(self, token: str) -> None:
        with self._lock:
            self._entries.pop(token, None)

    # -- Simulation helpers --

    def simulate_key(
        self,
        scan_code: int,
        action: KeyAction = KeyAction.DOWN,
        device_id: int = ANY_DEVICE,
    ) -> int:
        """Deliver a key event to every matching handler.  Returns the match count."""
        event = KeyEvent(scan_code=scan_code, action=action, device_id=device_id)
        with self._lock:
            targets = [e.handler for e in self._entries.values() if e.matches(event)]
        for handler in targets:
            handler(event)
        if not targets:
            _log.debug("No key handler for scan code %d", scan_code)
        return len(targets)

    def simulate_gesture(self, code: GestureCode | int) -> int:
        """Deliver a gesture key-up from the touch panel."""
        return self.simulate_key(int(code), KeyAction.UP, TOUCHPANEL_DEVICE_ID)


class MockInputDevices(InputDeviceInterface):
    """Fixed list of input devices; the tri-state key is included by default."""

    def __init__(self, devices: dict[int, str] | None = None) -> None:
        if devices is None:
            devices = {
                1: "gpio-keys",
                TOUCHPANEL_DEVICE_ID: "touchpanel",
                TRI_STATE_DEVICE_ID: "oplus,hall_tri_state_key",
            }
        self.devices = devices

    def get_input_device_ids(self) -> list[int]:
        return sorted(self.devices)

    def get_input_device_name(self, device_id: int) -> str | None:
        return self.devices.get(device_id)


class MockTriState(TriStateInterface):
    """In-memory slider with ``simulate_position`` helper.

    Args:
        broker: Where the slider's key-down is delivered.
        initial: Position reported before any simulated move.
    """

    def __init__(
        self,
        broker: MockKeyBroker,
        initial: SliderPosition | None = SliderPosition.BOTTOM,
        device_id: int = TRI_STATE_DEVICE_ID,
    ) -> None:
        self._broker = broker
        self._position = initial
        self._device_id = device_id

    def read_position(self) -> SliderPosition | None:
        return self._position

    def simulate_position(self, position: SliderPosition | None) -> None:
        """Move the slider and fire its key-down.

        ``None`` makes the position unreadable (and sends no key).
        """
        self._position = position
        if position is not None:
            self._broker.simulate_key(SLIDER_SCAN_CODES[position], KeyAction.DOWN, self._device_id)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class MockSettings(SettingsInterface):
    """Dict-backed settings store, keyed by ``(namespace, user, key)``."""

    def __init__(self) -> None:
        self._values: dict[tuple[str, int, str], str] = {}
        self._lock = threading.Lock()

    def get_string(
        self, namespace: SettingsNamespace, key: str, user: int = USER_CURRENT
    ) -> str | None:
        with self._lock:
            return self._values.get((namespace.value, user, key))

    def put_string(
        self, namespace: SettingsNamespace, key: str, value: str, user: int = USER_CURRENT
    ) -> None:
        with self._lock:
            self._values[(namespace.value, user, key)] = value

    def get_int(
        self, namespace: SettingsNamespace, key: str, default: int, user: int = USER_CURRENT
    ) -> int:
        raw = self.get_string(namespace, key, user)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            return default

    def put_int(
        self, namespace: SettingsNamespace, key: str, value: int, user: int = USER_CURRENT
    ) -> None:
        self.put_string(namespace, key, str(value), user)


# ---------------------------------------------------------------------------
# Audio / notifications / haptics
# ---------------------------------------------------------------------------

class MockAudio(AudioInterface):
    """In-memory audio service.

    Attributes:
        ringer_mode: Current ringer mode.
        music_muted: Current music stream mute state.
        music_volume: Music stream index (0–15).
        volume_calls: Every :meth:`adjust_volume` direction, in order.
        stream_calls: Every ``(stream, direction)`` passed to
            :meth:`adjust_stream_volume`.
    """

    MAX_VOLUME = 15

    def __init__(self) -> None:
        self.ringer_mode = AudioRingerMode.NORMAL
        self.music_muted = False
        self.music_volume = 7
        self.ringer_calls: list[AudioRingerMode] = []
        self.volume_calls: list[VolumeAdjust] = []
        self.stream_calls: list[tuple[AudioStream, VolumeAdjust]] = []
        self._callbacks: list[MuteCallback] = []

    def set_ringer_mode(self, mode: AudioRingerMode) -> None:
        self.ringer_mode = mode
        self.ringer_calls.append(mode)

    def get_ringer_mode(self) -> AudioRingerMode:
        return self.ringer_mode

    def adjust_volume(self, direction: VolumeAdjust) -> None:
        self.volume_calls.append(direction)
        self._adjust_music(direction)

    def adjust_stream_volume(self, stream: AudioStream, direction: VolumeAdjust) -> None:
        self.stream_calls.append((stream, direction))
        if stream == AudioStream.MUSIC:
            self._adjust_music(direction)

    def register_mute_callback(self, callback: MuteCallback) -> None:
        self._callbacks.append(callback)

    def unregister_mute_callback(self, callback: MuteCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    # -- Simulation helpers --

    def simulate_external_unmute(self) -> None:
        """Unmute music as if the user pressed a volume key."""
        self._set_muted(False)

    def simulate_external_mute(self) -> None:
        self._set_muted(True)

    # -- Internal --

    def _adjust_music(self, direction: VolumeAdjust) -> None:
        if direction == VolumeAdjust.MUTE:
            self._set_muted(True)
        elif direction == VolumeAdjust.UNMUTE:
            self._set_muted(False)
        elif direction == VolumeAdjust.RAISE:
            self.music_volume = min(self.MAX_VOLUME, self.music_volume + 1)
        elif direction == VolumeAdjust.LOWER:
            self.music_volume = max(0, self.music_volume - 1)

    def _set_muted(self, muted: bool) -> None:
        if self.music_muted == muted:
            return
        self.music_muted = muted
        for callback in list(self._callbacks):
            callback(int(AudioStream.MUSIC), muted)


class MockNotifications(NotificationInterface):
    """In-memory zen state with optional commit lag.

    Attributes:
        commit_delay: Seconds before a requested zen mode takes effect.
        stuck: When ``True``, requests are recorded but never committed.
        requests: Every ``(mode, reason)`` passed to :meth:`set_zen_mode`.
    """

    def __init__(self) -> None:
        self.commit_delay = 0.0
        self.stuck = False
        self.requests: list[tuple[ZenMode, str]] = []
        self._zen = ZenMode.OFF
        self._lock = threading.Lock()

    def set_zen_mode(self, mode: ZenMode, reason: str) -> None:
        self.requests.append((mode, reason))
        if self.stuck:
            return
        if self.commit_delay > 0:
            timer = threading.Timer(self.commit_delay, self._commit, args=(mode,))
            timer.daemon = True
            timer.start()
        else:
            self._commit(mode)

    def get_zen_mode(self) -> ZenMode:
        with self._lock:
            return self._zen

    # -- Simulation helpers --

    def simulate_commit_lag(self, seconds: float) -> None:
        self.commit_delay = max(0.0, seconds)

    def simulate_stuck(self, stuck: bool = True) -> None:
        self.stuck = stuck

    def _commit(self, mode: ZenMode) -> None:
        with self._lock:
            self._zen = mode


class MockVibrator(VibratorInterface):
    """Records played effects."""

    def __init__(self, has_vibrator: bool = True) -> None:
        self.present = has_vibrator
        self.effects: list[HapticEffect] = []

    def has_vibrator(self) -> bool:
        return self.present

    def vibrate(self, effect: HapticEffect) -> None:
        self.effects.append(effect)


# ---------------------------------------------------------------------------
# Power / keyguard
# ---------------------------------------------------------------------------

class MockWakeLock(WakeLock):
    """Counts acquisitions and releases."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        self.acquire_count = 0
        self.release_count = 0
        self.last_timeout: float | None = None
        self._held = False

    @property
    def is_held(self) -> bool:
        return self._held

    def acquire(self, timeout_seconds: float) -> None:
        self._held = True
        self.acquire_count += 1
        self.last_timeout = timeout_seconds

    def release(self) -> None:
        self._held = False
        self.release_count += 1


class MockPower(PowerInterface):
    """Screen state with ``simulate_screen`` helper."""

    def __init__(self, interactive: bool = True) -> None:
        self.interactive = interactive
        self.wake_reasons: list[str] = []
        self.wake_locks: dict[str, MockWakeLock] = {}

    def is_interactive(self) -> bool:
        return self.interactive

    def wake_up(self, reason: str) -> None:
        self.wake_reasons.append(reason)
        self.interactive = True

    def new_wake_lock(self, tag: str) -> MockWakeLock:
        lock = MockWakeLock(tag)
        self.wake_locks[tag] = lock
        return lock

    def simulate_screen(self, on: bool) -> None:
        self.interactive = on


class MockKeyguard(KeyguardInterface):
    def __init__(self, locked: bool = False) -> None:
        self.locked = locked

    def is_device_locked(self) -> bool:
        return self.locked

    def simulate_lock(self, locked: bool) -> None:
        self.locked = locked


# ---------------------------------------------------------------------------
# Gesture targets
# ---------------------------------------------------------------------------

class MockShortcuts(ShortcutInterface):
    """Records triggered shortcuts.

    Attributes:
        calls: Ordered ``(name, argument)`` tuples.
        media_session_available: When ``False``, media keys fail.
        pulse_enabled: Ambient pulse setting.
        hidden: Packages hidden by app lock.
        missing: Packages with no launch activity.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []
        self.flashlight_on = False
        self.media_session_available = True
        self.pulse_enabled = True
        self.hidden: set[str] = set()
        self.missing: set[str] = set()

    def toggle_flashlight(self) -> bool:
        self.flashlight_on = not self.flashlight_on
        self.calls.append(("flashlight", self.flashlight_on))
        return True

    def send_camera_gesture(self) -> bool:
        self.calls.append(("camera", None))
        return True

    def dispatch_media_key(self, key: MediaKey) -> bool:
        if not self.media_session_available:
            return False
        self.calls.append(("media_key", key))
        return True

    def is_pulse_enabled(self) -> bool:
        return self.pulse_enabled

    def send_pulse(self) -> bool:
        self.calls.append(("pulse", None))
        return True

    def hidden_packages(self) -> set[str]:
        return set(self.hidden)

    def launch_app(self, package_name: str) -> bool:
        if package_name in self.missing:
            return False
        self.calls.append(("launch_app", package_name))
        return True


class MockTouchscreen(TouchscreenGestureInterface):
    """Touch panel that supports every :class:`GestureCode`."""

    def __init__(self, supported: bool = True) -> None:
        self.supported = supported
        self.gestures = [
            TouchscreenGesture(id=i, name=code.title, keycode=int(code))
            for i, code in enumerate(GestureCode)
        ]
        self.enabled: dict[int, bool] = {}

    def is_supported(self) -> bool:
        return self.supported

    def get_gestures(self) -> list[TouchscreenGesture]:
        return list(self.gestures)

    def set_gesture_enabled(self, gesture: TouchscreenGesture, enabled: bool) -> None:
        self.enabled[gesture.keycode] = enabled

    def gesture_for(self, code: GestureCode | int) -> TouchscreenGesture:
        return next(g for g in self.gestures if g.keycode == int(code))


# ---------------------------------------------------------------------------
# Dialog
# ---------------------------------------------------------------------------

class InMemoryDialogSurface(DialogSurfaceInterface):
    """Records dialog calls so tests can assert without a UI loop.

    Attributes:
        showing: ``True`` between :meth:`show` and :meth:`dismiss`.
        call_log: Ordered list of ``(method_name, args)`` tuples.
    """

    def __init__(self) -> None:
        self.showing = False
        self.last_mode: RingerMode | None = None
        self.last_position: SliderPosition | None = None
        self.rotation = 0
        self.call_log: list[tuple[str, dict[str, object]]] = []

    def show(self, mode: RingerMode, position: SliderPosition) -> None:
        self.showing = True
        self.last_mode = mode
        self.last_position = position
        self.call_log.append(("show", {"mode": mode, "position": position}))

    def dismiss(self) -> None:
        self.showing = False
        self.call_log.append(("dismiss", {}))

    def update_configuration(self, rotation: int) -> None:
        self.rotation = rotation
        self.call_log.append(("update_configuration", {"rotation": rotation}))

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.call_log if name == method)
