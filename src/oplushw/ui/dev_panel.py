"""Dev panel — platform simulation controls for development off-device.

Provides a virtual alert slider, gesture buttons, screen / lock toggles
and live readouts of the ringer, zen and media state.  Routes all actions
through the mock platform objects so the key broker, the pipeline workers
and the controllers are exercised exactly as on a device.

Only rendered when the platform factory is :class:`MockPlatformFactory`.
"""

from __future__ import annotations

import logging as _logging

from nicegui import ui

from oplushw.core import events
from oplushw.core.action_store import MUTE_MEDIA_WITH_SILENT
from oplushw.core.event_bus import EventBus
from oplushw.core.models.event import Event
from oplushw.core.models.gesture import GestureCode
from oplushw.core.models.state import SettingsNamespace, SliderPosition
from oplushw.platform.mock.mock_factory import MockPlatformFactory

_log = _logging.getLogger(__name__)

_SECTION_LABEL = "color: #888888; font-size: 12px; font-weight: bold;"
_READOUT = (
    "font-family: 'Courier New', monospace; font-size: 13px; color: #ffffff; "
    "background: #111111; padding: 2px 8px; border-radius: 4px; min-width: 160px;"
)

# Gestures offered as buttons; the rest are reachable from the keyboard.
_GESTURE_BUTTONS: tuple[GestureCode, ...] = (
    GestureCode.DOUBLE_TAP,
    GestureCode.SINGLE_TAP,
    GestureCode.DOUBLE_SWIPE,
    GestureCode.DOWN_ARROW,
    GestureCode.LEFT_ARROW,
    GestureCode.RIGHT_ARROW,
    GestureCode.LETTER_O,
    GestureCode.LETTER_M,
)

_SLIDER_KEYS: dict[str, SliderPosition] = {
    "1": SliderPosition.TOP,
    "2": SliderPosition.MIDDLE,
    "3": SliderPosition.BOTTOM,
}


class DevPanel:
    """Platform simulation panel wired to mock platform objects.

    Args:
        factory: The :class:`MockPlatformFactory` whose objects drive
            the simulation.
        event_bus: The global event bus for subscribing to output events.
    """

    def __init__(self, factory: MockPlatformFactory, event_bus: EventBus) -> None:
        self._factory = factory
        self._bus = event_bus

        self._mode_label: ui.label | None = None
        self._zen_label: ui.label | None = None
        self._media_label: ui.label | None = None
        self._gesture_label: ui.label | None = None
        self._slider_buttons: dict[SliderPosition, ui.button] = {}

    def build(self) -> None:
        """Render the dev panel inline."""
        with ui.column().classes("w-full items-center").style("gap: 6px; padding: 4px 0;"):
            ui.separator().style("background: #444444; margin: 0;")
            with ui.row().classes("w-full items-start justify-between").style(
                "padding: 2px 12px; gap: 16px; flex-wrap: wrap;"
            ):
                self._build_slider()
                self._build_gestures()
                self._build_device_state()
                self._build_readouts()

        self._bus.subscribe(events.SLIDER_MODE_APPLIED, self._on_mode_applied)
        self._bus.subscribe(events.SLIDER_ZEN_COMMIT_TIMED_OUT, self._on_zen_timeout)
        self._bus.subscribe(events.MEDIA_MUTE_CHANGED, self._on_media_changed)
        self._bus.subscribe(events.GESTURE_ACTION_PERFORMED, self._on_gesture_performed)

        self._build_keyboard_handler()

    # ------------------------------------------------------------------
    # Build sections
    # ------------------------------------------------------------------

    def _build_slider(self) -> None:
        with ui.column().classes("items-center").style("gap: 6px;"):
            ui.label("ALERT SLIDER").style(_SECTION_LABEL)
            for key, position in _SLIDER_KEYS.items():
                self._slider_buttons[position] = ui.button(
                    position.value.title(),
                    on_click=lambda _, p=position: self._on_slider_click(p),
                ).style(
                    "background: #333333 !important; color: white; min-width: 96px;"
                ).tooltip(f"Move slider to {position.value} (key: {key})")
            self._highlight_slider(self._factory.tri_state.read_position())

    def _build_gestures(self) -> None:
        with ui.column().classes("items-start").style("gap: 6px;"):
            ui.label("GESTURES").style(_SECTION_LABEL)
            for row in range(0, len(_GESTURE_BUTTONS), 2):
                with ui.row().style("gap: 6px;"):
                    for code in _GESTURE_BUTTONS[row:row + 2]:
                        ui.button(
                            code.title,
                            on_click=lambda _, c=code: self._on_gesture_click(c),
                        ).props("dense").style("min-width: 128px;")

    def _build_device_state(self) -> None:
        with ui.column().classes("items-start").style("gap: 4px;"):
            ui.label("DEVICE").style(_SECTION_LABEL)
            ui.switch(
                "Screen on",
                value=self._factory.power.is_interactive(),
                on_change=lambda e: self._factory.power.simulate_screen(bool(e.value)),
            )
            ui.switch(
                "Locked",
                value=self._factory.keyguard.is_device_locked(),
                on_change=lambda e: self._factory.keyguard.simulate_lock(bool(e.value)),
            )
            ui.switch(
                "Mute media in silent",
                value=self._mute_media_enabled(),
                on_change=lambda e: self._set_mute_media(bool(e.value)),
            )
            ui.switch(
                "Zen commit stuck",
                value=self._factory.notifications.stuck,
                on_change=lambda e: self._factory.notifications.simulate_stuck(bool(e.value)),
            )
            ui.button(
                "Unmute music",
                on_click=lambda _: self._factory.audio.simulate_external_unmute(),
            ).props("dense outline")

    def _build_readouts(self) -> None:
        with ui.column().classes("items-start").style("gap: 4px;"):
            ui.label("STATE").style(_SECTION_LABEL)
            self._mode_label = ui.label("mode: -").style(_READOUT)
            self._zen_label = ui.label(
                f"zen: {self._factory.notifications.get_zen_mode().name}"
            ).style(_READOUT)
            self._media_label = ui.label(self._format_media()).style(_READOUT)
            self._gesture_label = ui.label("gesture: -").style(_READOUT)

    def _build_keyboard_handler(self) -> None:
        """Wire keyboard shortcuts: 1-3 for slider positions, u to unmute."""
        def handle_key(e) -> None:
            if not e.action.keydown:
                return
            key = e.key
            if key in _SLIDER_KEYS:
                self._on_slider_click(_SLIDER_KEYS[key])
            elif key.lower() == "u":
                self._factory.audio.simulate_external_unmute()

        ui.keyboard(on_key=handle_key)

    # ------------------------------------------------------------------
    # Actions (route through mock platform)
    # ------------------------------------------------------------------

    def _on_slider_click(self, position: SliderPosition) -> None:
        self._factory.tri_state.simulate_position(position)
        self._highlight_slider(position)

    def _on_gesture_click(self, code: GestureCode) -> None:
        self._factory.broker.simulate_gesture(code)

    def _mute_media_enabled(self) -> bool:
        return self._factory.settings.get_int(SettingsNamespace.SYSTEM, MUTE_MEDIA_WITH_SILENT, 0) == 1

    def _set_mute_media(self, enabled: bool) -> None:
        self._factory.settings.put_int(
            SettingsNamespace.SYSTEM, MUTE_MEDIA_WITH_SILENT, 1 if enabled else 0
        )

    # ------------------------------------------------------------------
    # Event handlers (update UI from event bus)
    # ------------------------------------------------------------------

    async def _on_mode_applied(self, event: Event) -> None:
        mode = event.payload.get("mode", "-")
        position = event.payload.get("position", "-")
        try:
            if self._mode_label:
                self._mode_label.text = f"mode: {mode} ({position})"
            if self._zen_label:
                self._zen_label.text = f"zen: {self._factory.notifications.get_zen_mode().name}"
            if self._media_label:
                self._media_label.text = self._format_media()
        except RuntimeError:
            _log.debug("readout client gone, ignoring update")

    async def _on_zen_timeout(self, event: Event) -> None:
        try:
            if self._zen_label:
                self._zen_label.text = f"zen: {event.payload.get('zen', '?')} (not committed)"
        except RuntimeError:
            _log.debug("zen_label client gone, ignoring update")

    async def _on_media_changed(self, _event: Event) -> None:
        try:
            if self._media_label:
                self._media_label.text = self._format_media()
        except RuntimeError:
            _log.debug("media_label client gone, ignoring update")

    async def _on_gesture_performed(self, event: Event) -> None:
        action = event.payload.get("action", "?")
        ok = "ok" if event.payload.get("success") else "failed"
        try:
            if self._gesture_label:
                self._gesture_label.text = f"gesture: {action} ({ok})"
        except RuntimeError:
            _log.debug("gesture_label client gone, ignoring update")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _highlight_slider(self, current: SliderPosition | None) -> None:
        for position, button in self._slider_buttons.items():
            color = "#3366cc" if position is current else "#333333"
            try:
                button.style(f"background: {color} !important;")
            except RuntimeError:
                _log.debug("slider button client gone, ignoring update")

    def _format_media(self) -> str:
        audio = self._factory.audio
        state = "muted" if audio.music_muted else f"vol {audio.music_volume}"
        return f"music: {state}"
