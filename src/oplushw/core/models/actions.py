"""Gesture actions — a tagged union of frozen pydantic models.

Every action carries a single ``vibrate`` flag; :class:`OpenApp`
additionally names the package to launch.  The persisted form is a
compact JSON object::

    {"name":"toggle_playback","vibrate":true}
    {"name":"open_app","vibrate":false,"package":"org.example.app"}

Unknown extra keys are ignored on read and a missing or ``null``
``vibrate`` means ``True``.  An unknown ``name`` is a parse failure, never a new variant.
"""

from __future__ import annotations

import json
import re
from typing import Annotated, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

_INTERIOR_CAPITAL = re.compile(r"(?<=[a-zA-Z])([A-Z])")


class ActionParseError(ValueError):
    """Raised when a persisted action string cannot be decoded."""


def variant_name(identifier: str) -> str:
    """Return the persisted name for a variant identifier.

    ``"TogglePlayback"`` → ``"toggle_playback"``.
    """
    return _INTERIOR_CAPITAL.sub(r"_\1", identifier).lower()


class _BaseAction(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    title: ClassVar[str] = ""
    icon: ClassVar[str] = ""

    vibrate: bool = True

    @field_validator("vibrate", mode="before")
    @classmethod
    def _null_means_enabled(cls, value: object) -> object:
        return True if value is None else value


class NoAction(_BaseAction):
    """Gesture disabled.  Never vibrates."""

    title: ClassVar[str] = "Do nothing"
    icon: ClassVar[str] = "block"

    name: Literal["none"] = "none"
    vibrate: bool = False

    @field_validator("vibrate")
    @classmethod
    def _never_vibrates(cls, _value: bool) -> bool:
        return False


class Shortcut(_BaseAction):
    """Built-in action with fixed title and icon."""


class Flashlight(Shortcut):
    title: ClassVar[str] = "Toggle flashlight"
    icon: ClassVar[str] = "flashlight_on"
    name: Literal["flashlight"] = "flashlight"


class Camera(Shortcut):
    title: ClassVar[str] = "Open camera"
    icon: ClassVar[str] = "photo_camera"
    name: Literal["camera"] = "camera"


class TogglePlayback(Shortcut):
    title: ClassVar[str] = "Play / pause music"
    icon: ClassVar[str] = "play_arrow"
    name: Literal["toggle_playback"] = "toggle_playback"


class PreviousTrack(Shortcut):
    title: ClassVar[str] = "Previous track"
    icon: ClassVar[str] = "skip_previous"
    name: Literal["previous_track"] = "previous_track"


class NextTrack(Shortcut):
    title: ClassVar[str] = "Next track"
    icon: ClassVar[str] = "skip_next"
    name: Literal["next_track"] = "next_track"


class VolumeDown(Shortcut):
    title: ClassVar[str] = "Volume down"
    icon: ClassVar[str] = "volume_down"
    name: Literal["volume_down"] = "volume_down"


class VolumeUp(Shortcut):
    title: ClassVar[str] = "Volume up"
    icon: ClassVar[str] = "volume_up"
    name: Literal["volume_up"] = "volume_up"


class WakeUp(Shortcut):
    title: ClassVar[str] = "Wake up"
    icon: ClassVar[str] = "light_mode"
    name: Literal["wake_up"] = "wake_up"


class Pulse(Shortcut):
    title: ClassVar[str] = "Ambient display"
    icon: ClassVar[str] = "light_mode"
    name: Literal["pulse"] = "pulse"


class OpenApp(_BaseAction):
    """Launch an installed application by package name."""

    title: ClassVar[str] = "Open app"
    icon: ClassVar[str] = "apps"

    name: Literal["open_app"] = "open_app"
    package_name: str = Field(alias="package", min_length=1)


Action = Annotated[
    Union[
        NoAction,
        Flashlight,
        Camera,
        TogglePlayback,
        PreviousTrack,
        NextTrack,
        VolumeDown,
        VolumeUp,
        WakeUp,
        Pulse,
        OpenApp,
    ],
    Field(discriminator="name"),
]

# Variant identifier → class.  Adding a variant means adding it here and
# to the ``Action`` union above.
_VARIANTS: dict[str, type[_BaseAction]] = {
    "None": NoAction,
    "Flashlight": Flashlight,
    "Camera": Camera,
    "TogglePlayback": TogglePlayback,
    "PreviousTrack": PreviousTrack,
    "NextTrack": NextTrack,
    "VolumeDown": VolumeDown,
    "VolumeUp": VolumeUp,
    "WakeUp": WakeUp,
    "Pulse": Pulse,
    "OpenApp": OpenApp,
}


def _build_name_table() -> dict[str, type[_BaseAction]]:
    table: dict[str, type[_BaseAction]] = {}
    for identifier, cls in _VARIANTS.items():
        expected = variant_name(identifier)
        declared = cls.model_fields["name"].default
        if declared != expected:
            raise TypeError(
                f"Action variant {cls.__name__} declares name {declared!r}, expected {expected!r}"
            )
        table[expected] = cls
    return table


ACTION_TYPES: dict[str, type[_BaseAction]] = _build_name_table()
SHORTCUT_NAMES: tuple[str, ...] = tuple(
    name for name, cls in ACTION_TYPES.items() if issubclass(cls, Shortcut)
)

_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def serialize(action: _BaseAction) -> str:
    """Encode *action* in its persisted form.

    Raises:
        TypeError: If *action* is not one of the registered variants.
    """
    if ACTION_TYPES.get(getattr(action, "name", None)) is not type(action):
        raise TypeError(f"Not a registered action variant: {action!r}")
    payload: dict[str, object] = {"name": action.name, "vibrate": action.vibrate}
    if isinstance(action, OpenApp):
        payload["package"] = action.package_name
    return json.dumps(payload, separators=(",", ":"))


def deserialize(text: str) -> Action:
    """Decode a persisted action string.

    Raises:
        ActionParseError: On malformed JSON, a missing or unknown ``name``,
            or an ``open_app`` without ``package``.
    """
    try:
        return _ADAPTER.validate_json(text)
    except ValidationError as exc:
        raise ActionParseError(
            f"Cannot parse action {text!r} ({exc.error_count()} error(s))"
        ) from exc


def create_shortcut(name: str, vibrate: bool) -> Shortcut:
    """Build the shortcut registered under *name*.

    Raises:
        ActionParseError: If *name* is not a shortcut.
    """
    cls = ACTION_TYPES.get(name)
    if cls is None or not issubclass(cls, Shortcut):
        raise ActionParseError(f"Unknown shortcut {name!r}")
    return cls(vibrate=vibrate)


def with_vibrate(action: Action, vibrate: bool) -> Action:
    """Return a copy of *action* with its ``vibrate`` flag replaced."""
    if isinstance(action, NoAction):
        return action
    return action.model_copy(update={"vibrate": vibrate})
