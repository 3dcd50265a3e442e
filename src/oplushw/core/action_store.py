"""Saved-preference resolution for gestures and slider positions.

Reads never raise: a missing, blank or unparseable value resolves to the
compile-time default for the gesture or position.
"""

from __future__ import annotations

import logging

from oplushw.core.interfaces.platform import SettingsInterface
from oplushw.core.models.actions import (
    Action,
    ActionParseError,
    Flashlight,
    NextTrack,
    NoAction,
    PreviousTrack,
    Pulse,
    TogglePlayback,
    WakeUp,
    deserialize,
    serialize,
)
from oplushw.core.models.gesture import GestureCode
from oplushw.core.models.state import RingerMode, SettingsNamespace, SliderPosition

_log = logging.getLogger(__name__)

MUTE_MEDIA_WITH_SILENT = "config_mute_media"
DOUBLE_TAP_TO_WAKE = "double_tap_to_wake"

_DEFAULT_ACTIONS: dict[int, Action] = {
    GestureCode.DOUBLE_TAP: WakeUp(vibrate=False),
    GestureCode.SINGLE_TAP: Pulse(vibrate=False),
    GestureCode.DOUBLE_SWIPE: TogglePlayback(vibrate=True),
    GestureCode.DOWN_ARROW: Flashlight(vibrate=True),
    GestureCode.LEFT_ARROW: PreviousTrack(vibrate=True),
    GestureCode.RIGHT_ARROW: NextTrack(vibrate=True),
}
_NO_ACTION = NoAction()


def default_for(key: GestureCode | SliderPosition | int) -> Action | RingerMode:
    """Return the built-in default for a gesture scan code or slider position.

    Unknown scan codes map to :class:`NoAction`.
    """
    if isinstance(key, SliderPosition):
        return key.default_mode
    return _DEFAULT_ACTIONS.get(int(key), _NO_ACTION)


def default_action_for(scan_code: int) -> Action:
    """Typed shorthand for :func:`default_for` on a scan code."""
    return _DEFAULT_ACTIONS.get(scan_code, _NO_ACTION)


class ActionStore:
    """Reads and writes the user's gesture actions and slider modes.

    Args:
        settings: Per-user settings backend.
    """

    def __init__(self, settings: SettingsInterface) -> None:
        self._settings = settings

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def resolve_saved(self, key: str, default: Action) -> Action:
        """Return the action saved under *key*, or *default*."""
        raw = self._settings.get_string(SettingsNamespace.SECURE, key)
        if raw is None or not raw.strip():
            return default
        try:
            return deserialize(raw)
        except ActionParseError as exc:
            _log.error("Ignoring saved action for %s: %s", key, exc)
            return default

    def resolve_for_scan_code(self, key: str, scan_code: int) -> Action:
        return self.resolve_saved(key, default_action_for(scan_code))

    def save(self, key: str, action: Action) -> None:
        """Persist *action* under *key*."""
        self._settings.put_string(SettingsNamespace.SECURE, key, serialize(action))
        _log.debug("Saved %s = %s", key, action)

    # ------------------------------------------------------------------
    # Alert slider
    # ------------------------------------------------------------------

    def resolve_mode(self, position: SliderPosition) -> RingerMode:
        """Return the mode saved for *position*, or the position default."""
        raw = self._settings.get_string(SettingsNamespace.SYSTEM, position.mode_key)
        if raw is None or not raw.strip():
            return position.default_mode
        try:
            return RingerMode[raw.strip()]
        except KeyError:
            _log.error("Unrecognised mode %r for %s, using default", raw, position.value)
            return position.default_mode

    def save_mode(self, position: SliderPosition, mode: RingerMode) -> None:
        self._settings.put_string(SettingsNamespace.SYSTEM, position.mode_key, mode.name)

    def is_mute_media_enabled(self) -> bool:
        return self._settings.get_int(SettingsNamespace.SYSTEM, MUTE_MEDIA_WITH_SILENT, 0) == 1

    def is_double_tap_to_wake_enabled(self) -> bool:
        return self._settings.get_int(SettingsNamespace.SECURE, DOUBLE_TAP_TO_WAKE, 0) == 1

    def set_double_tap_to_wake(self, enabled: bool) -> None:
        self._settings.put_int(SettingsNamespace.SECURE, DOUBLE_TAP_TO_WAKE, 1 if enabled else 0)
