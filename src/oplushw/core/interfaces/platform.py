"""Platform abstraction interfaces (ABCs).

Every framework service the core talks to has a matching abstract base
class here.  The Android (pyjnius) and Mock backends both implement these
interfaces, so the core runs unchanged on a device, in the dev panel and
under pytest.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from oplushw.core.models.event import KeyEvent
from oplushw.core.models.gesture import TouchscreenGesture
from oplushw.core.models.state import (
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

KeyHandler = Callable[[KeyEvent], None]
MuteCallback = Callable[[int, bool], None]


class RegistrationError(RuntimeError):
    """The key broker is unavailable or rejected a registration."""


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class KeyBrokerInterface(ABC):
    """System service that forwards selected hardware key events to us."""

    @abstractmethod
    def register_key_handler(
        self,
        token: str,
        handler: KeyHandler,
        scan_codes: frozenset[int],
        actions: frozenset[KeyAction],
        device_id: int,
    ) -> None:
        """Subscribe *handler* under *token*.

        An empty *scan_codes* set means every scan code of the device.

        Raises:
            RegistrationError: If the broker is unavailable or refuses.
        """

    @abstractmethod
    def unregister_key_handler(self, token: str) -> None:
        """Drop the subscription identified by *token*."""


class InputDeviceInterface(ABC):
    """Enumeration of input devices."""

    @abstractmethod
    def get_input_device_ids(self) -> list[int]:
        """Return the ids of all attached input devices."""

    @abstractmethod
    def get_input_device_name(self, device_id: int) -> str | None:
        """Return the name of *device_id*, or ``None`` if it vanished."""


class TriStateInterface(ABC):
    """Reads the current resting position of the alert slider."""

    @abstractmethod
    def read_position(self) -> SliderPosition | None:
        """Return the position, or ``None`` if it cannot be determined."""


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class SettingsInterface(ABC):
    """Per-user persisted key/value settings."""

    @abstractmethod
    def get_string(
        self, namespace: SettingsNamespace, key: str, user: int = USER_CURRENT
    ) -> str | None:
        """Return the stored string for *key*, or ``None``."""

    @abstractmethod
    def put_string(
        self, namespace: SettingsNamespace, key: str, value: str, user: int = USER_CURRENT
    ) -> None:
        """Store *value* under *key*."""

    @abstractmethod
    def get_int(
        self, namespace: SettingsNamespace, key: str, default: int, user: int = USER_CURRENT
    ) -> int:
        """Return the stored integer for *key*, or *default*."""

    @abstractmethod
    def put_int(
        self, namespace: SettingsNamespace, key: str, value: int, user: int = USER_CURRENT
    ) -> None:
        """Store integer *value* under *key*."""


# ---------------------------------------------------------------------------
# Audio / notifications / haptics
# ---------------------------------------------------------------------------

class AudioInterface(ABC):
    """Ringer mode and stream volume control."""

    @abstractmethod
    def set_ringer_mode(self, mode: AudioRingerMode) -> None:
        """Set the internal ringer mode."""

    @abstractmethod
    def get_ringer_mode(self) -> AudioRingerMode:
        """Return the current ringer mode."""

    @abstractmethod
    def adjust_volume(self, direction: VolumeAdjust) -> None:
        """Adjust the suggested stream (used for media mute / unmute)."""

    @abstractmethod
    def adjust_stream_volume(self, stream: AudioStream, direction: VolumeAdjust) -> None:
        """Adjust *stream* by one step (or mute / unmute it)."""

    @abstractmethod
    def register_mute_callback(self, callback: MuteCallback) -> None:
        """Register *callback(stream, muted)* for stream mute changes."""

    @abstractmethod
    def unregister_mute_callback(self, callback: MuteCallback) -> None:
        """Remove a callback added with :meth:`register_mute_callback`."""


class NotificationInterface(ABC):
    """Do-not-disturb (zen) state."""

    @abstractmethod
    def set_zen_mode(self, mode: ZenMode, reason: str) -> None:
        """Request a zen mode change.  Takes effect asynchronously."""

    @abstractmethod
    def get_zen_mode(self) -> ZenMode:
        """Return the zen mode currently in effect."""


class VibratorInterface(ABC):
    """Haptic feedback."""

    @abstractmethod
    def has_vibrator(self) -> bool:
        """Return ``True`` if the device can vibrate."""

    @abstractmethod
    def vibrate(self, effect: HapticEffect) -> None:
        """Play a predefined haptic *effect*."""


# ---------------------------------------------------------------------------
# Power / keyguard
# ---------------------------------------------------------------------------

class WakeLock(ABC):
    """A partial wake lock."""

    @abstractmethod
    def acquire(self, timeout_seconds: float) -> None:
        """Acquire the lock, auto-releasing after *timeout_seconds*."""

    @abstractmethod
    def release(self) -> None:
        """Release the lock."""

    @property
    @abstractmethod
    def is_held(self) -> bool:
        """``True`` while the lock is held."""


class PowerInterface(ABC):
    """Screen state and wake control."""

    @abstractmethod
    def is_interactive(self) -> bool:
        """Return ``True`` if the screen is on and interactive."""

    @abstractmethod
    def wake_up(self, reason: str) -> None:
        """Turn the screen on."""

    @abstractmethod
    def new_wake_lock(self, tag: str) -> WakeLock:
        """Create a partial wake lock named *tag*."""


class KeyguardInterface(ABC):
    """Lock screen state."""

    @abstractmethod
    def is_device_locked(self) -> bool:
        """Return ``True`` if the device is locked."""


# ---------------------------------------------------------------------------
# Gesture targets
# ---------------------------------------------------------------------------

class ShortcutInterface(ABC):
    """System shortcuts a gesture can trigger.

    Each trigger returns ``True`` on success and ``False`` if the target
    is unavailable.
    """

    @abstractmethod
    def toggle_flashlight(self) -> bool:
        """Toggle the camera flash torch."""

    @abstractmethod
    def send_camera_gesture(self) -> bool:
        """Ask the system UI to open the camera."""

    @abstractmethod
    def dispatch_media_key(self, key: MediaKey) -> bool:
        """Send a down/up pair of *key* to the active media session."""

    @abstractmethod
    def is_pulse_enabled(self) -> bool:
        """Return ``True`` if ambient pulse on notification is enabled."""

    @abstractmethod
    def send_pulse(self) -> bool:
        """Request an ambient display pulse."""

    @abstractmethod
    def hidden_packages(self) -> set[str]:
        """Return packages hidden by app lock."""

    @abstractmethod
    def launch_app(self, package_name: str) -> bool:
        """Start the launch activity of *package_name*."""


class TouchscreenGestureInterface(ABC):
    """Touch panel gesture enablement."""

    @abstractmethod
    def is_supported(self) -> bool:
        """Return ``True`` if the panel supports gestures."""

    @abstractmethod
    def get_gestures(self) -> list[TouchscreenGesture]:
        """Return the gestures the panel can recognise."""

    @abstractmethod
    def set_gesture_enabled(self, gesture: TouchscreenGesture, enabled: bool) -> None:
        """Enable or disable recognition of *gesture*."""


# ---------------------------------------------------------------------------
# Dialog
# ---------------------------------------------------------------------------

class DialogSurfaceInterface(ABC):
    """Renders the alert slider confirmation dialog."""

    @abstractmethod
    def show(self, mode: RingerMode, position: SliderPosition) -> None:
        """Show *mode*'s icon and title next to *position*."""

    @abstractmethod
    def dismiss(self) -> None:
        """Hide the dialog."""

    @abstractmethod
    def update_configuration(self, rotation: int) -> None:
        """Re-layout for a display *rotation* (degrees)."""


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

class PlatformFactory(ABC):
    """Creates all platform interface implementations for the current device."""

    @abstractmethod
    def create_key_broker(self) -> KeyBrokerInterface: ...

    @abstractmethod
    def create_input_devices(self) -> InputDeviceInterface: ...

    @abstractmethod
    def create_tri_state(self) -> TriStateInterface: ...

    @abstractmethod
    def create_settings(self) -> SettingsInterface: ...

    @abstractmethod
    def create_audio(self) -> AudioInterface: ...

    @abstractmethod
    def create_notifications(self) -> NotificationInterface: ...

    @abstractmethod
    def create_vibrator(self) -> VibratorInterface: ...

    @abstractmethod
    def create_power(self) -> PowerInterface: ...

    @abstractmethod
    def create_keyguard(self) -> KeyguardInterface: ...

    @abstractmethod
    def create_shortcuts(self) -> ShortcutInterface: ...

    @abstractmethod
    def create_touchscreen(self) -> TouchscreenGestureInterface: ...

    @abstractmethod
    def create_dialog_surface(self) -> DialogSurfaceInterface: ...

    def cleanup(self) -> None:
        """Release platform resources.  No-op by default (mock)."""
