"""Pydantic models for configuration, actions, events, and platform state."""
from oplushw.core.models.actions import (
    Action,
    ActionParseError,
    NoAction,
    OpenApp,
    Shortcut,
    deserialize,
    serialize,
)
from oplushw.core.models.config import GestureConfig, OplusHwConfig, SliderConfig, SystemConfig
from oplushw.core.models.event import Event, KeyEvent
from oplushw.core.models.gesture import GestureCode, TouchscreenGesture
from oplushw.core.models.state import RingerMode, SliderPosition

__all__ = [
    "Action",
    "ActionParseError",
    "NoAction",
    "OpenApp",
    "Shortcut",
    "deserialize",
    "serialize",
    "OplusHwConfig",
    "SliderConfig",
    "GestureConfig",
    "SystemConfig",
    "Event",
    "KeyEvent",
    "GestureCode",
    "TouchscreenGesture",
    "RingerMode",
    "SliderPosition",
]
