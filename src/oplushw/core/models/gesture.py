"""Touchscreen gesture scan codes and hardware gesture descriptors."""

from __future__ import annotations

import re
from enum import IntEnum

from pydantic import BaseModel, ConfigDict

_SCANCODE_START = 246
_WHITESPACE = re.compile(r"\s+")


class GestureCode(IntEnum):
    """Scan codes reported by the touch panel for recognised gestures."""

    DOUBLE_TAP = _SCANCODE_START + 1
    DOWN_ARROW = _SCANCODE_START + 2
    UP_ARROW = _SCANCODE_START + 3
    RIGHT_ARROW = _SCANCODE_START + 4
    LEFT_ARROW = _SCANCODE_START + 5
    LETTER_O = _SCANCODE_START + 6
    DOUBLE_SWIPE = _SCANCODE_START + 7
    RIGHT_SWIPE = _SCANCODE_START + 8
    LEFT_SWIPE = _SCANCODE_START + 9
    DOWN_SWIPE = _SCANCODE_START + 10
    UP_SWIPE = _SCANCODE_START + 11
    LETTER_M = _SCANCODE_START + 12
    LETTER_W = _SCANCODE_START + 13
    FINGERPRINT_DOWN = _SCANCODE_START + 14
    FINGERPRINT_UP = _SCANCODE_START + 15
    SINGLE_TAP = _SCANCODE_START + 16
    HEART = _SCANCODE_START + 17
    LETTER_S = _SCANCODE_START + 18

    @property
    def title(self) -> str:
        return _TITLES.get(self, self.name.replace("_", " ").capitalize())


_TITLES: dict[GestureCode, str] = {
    GestureCode.DOUBLE_TAP: "Double tap",
    GestureCode.DOWN_ARROW: "Down arrow",
    GestureCode.UP_ARROW: "Up arrow",
    GestureCode.RIGHT_ARROW: "Right arrow",
    GestureCode.LEFT_ARROW: "Left arrow",
    GestureCode.LETTER_O: "Letter O",
    GestureCode.DOUBLE_SWIPE: "Two finger swipe",
    GestureCode.RIGHT_SWIPE: "Swipe right",
    GestureCode.LEFT_SWIPE: "Swipe left",
    GestureCode.DOWN_SWIPE: "Swipe down",
    GestureCode.UP_SWIPE: "Swipe up",
    GestureCode.LETTER_M: "Letter M",
    GestureCode.LETTER_W: "Letter W",
    GestureCode.FINGERPRINT_DOWN: "Fingerprint swipe down",
    GestureCode.FINGERPRINT_UP: "Fingerprint swipe up",
    GestureCode.SINGLE_TAP: "Single tap",
    GestureCode.HEART: "Heart",
    GestureCode.LETTER_S: "Letter S",
}

GESTURE_SCAN_CODES: frozenset[int] = frozenset(int(g) for g in GestureCode)


class TouchscreenGesture(BaseModel):
    """A gesture as reported by the touchscreen hardware HAL."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    keycode: int

    @property
    def setting_key(self) -> str:
        """Secure settings key holding the serialized action for this gesture."""
        return "ts_gesture_" + _WHITESPACE.sub("_", self.name.lower())

    @property
    def is_double_tap(self) -> bool:
        return self.keycode == GestureCode.DOUBLE_TAP

    @property
    def title(self) -> str:
        try:
            return GestureCode(self.keycode).title
        except ValueError:
            return self.name
