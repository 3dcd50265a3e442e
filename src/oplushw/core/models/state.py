"""Runtime enumerations shared by the core and the platform backends."""

from __future__ import annotations

from enum import Enum, IntEnum


class RingerMode(str, Enum):
    """User-selectable alert slider modes.

    The member *name* is what gets persisted in settings.
    """

    NORMAL = "normal"
    PRIORITY = "priority"
    VIBRATE = "vibrate"
    SILENT = "silent"
    DND = "dnd"

    @property
    def title(self) -> str:
        return _MODE_TITLES[self]

    @property
    def icon(self) -> str:
        return _MODE_ICONS[self]


_MODE_TITLES: dict[RingerMode, str] = {
    RingerMode.NORMAL: "Ring",
    RingerMode.PRIORITY: "Priority only",
    RingerMode.VIBRATE: "Vibrate",
    RingerMode.SILENT: "Silent",
    RingerMode.DND: "Do not disturb",
}

_MODE_ICONS: dict[RingerMode, str] = {
    RingerMode.NORMAL: "notifications_active",
    RingerMode.PRIORITY: "priority_high",
    RingerMode.VIBRATE: "vibration",
    RingerMode.SILENT: "notifications_off",
    RingerMode.DND: "do_not_disturb_on",
}


class SliderPosition(str, Enum):
    """The three rest positions of the tri-state key."""

    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"

    @property
    def mode_key(self) -> str:
        """System settings key holding the saved mode for this position."""
        return f"config_{self.value}_position"

    @property
    def default_mode(self) -> RingerMode:
        return _DEFAULT_MODES[self]

    @classmethod
    def from_proc_value(cls, raw: str) -> SliderPosition | None:
        """Map the kernel's ``tri_state`` value (``"1"``..``"3"``) to a position."""
        return _PROC_VALUES.get(raw.strip())


_DEFAULT_MODES: dict[SliderPosition, RingerMode] = {
    SliderPosition.TOP: RingerMode.SILENT,
    SliderPosition.MIDDLE: RingerMode.VIBRATE,
    SliderPosition.BOTTOM: RingerMode.NORMAL,
}

_PROC_VALUES: dict[str, SliderPosition] = {
    "1": SliderPosition.TOP,
    "2": SliderPosition.MIDDLE,
    "3": SliderPosition.BOTTOM,
}


# ---------------------------------------------------------------------------
# Platform constants (numeric values match the Android framework)
# ---------------------------------------------------------------------------

class AudioRingerMode(IntEnum):
    SILENT = 0
    VIBRATE = 1
    NORMAL = 2


class ZenMode(IntEnum):
    OFF = 0
    IMPORTANT_INTERRUPTIONS = 1
    NO_INTERRUPTIONS = 2


class HapticEffect(str, Enum):
    HEAVY_CLICK = "heavy_click"
    DOUBLE_CLICK = "double_click"


class KeyAction(IntEnum):
    DOWN = 0
    UP = 1


class AudioStream(IntEnum):
    MUSIC = 3


class VolumeAdjust(IntEnum):
    LOWER = -1
    RAISE = 1
    MUTE = -100
    UNMUTE = 100


class MediaKey(IntEnum):
    PLAY_PAUSE = 85
    NEXT = 87
    PREVIOUS = 88


class SettingsNamespace(str, Enum):
    SYSTEM = "system"
    SECURE = "secure"


USER_CURRENT = -2
ANY_DEVICE = -1
