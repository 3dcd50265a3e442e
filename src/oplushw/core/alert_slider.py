"""AlertSliderController — turns slider positions into ringer modes."""

from __future__ import annotations

import logging

from oplushw.core import events
from oplushw.core.action_store import ActionStore
from oplushw.core.dialog_presenter import DialogPresenter
from oplushw.core.effect_applier import AppliedEffect, EffectApplier
from oplushw.core.event_bus import EventBus
from oplushw.core.interfaces.platform import TriStateInterface
from oplushw.core.models.state import SliderPosition

_log = logging.getLogger(__name__)


class AlertSliderController:
    """Applies the mode saved for the slider's current position.

    Runs on the slider worker thread; never called concurrently with
    itself.

    Args:
        tri_state: Reports the current slider position.
        store: Saved mode lookup.
        applier: Pushes the mode into audio, zen and haptics.
        presenter: Confirmation dialog.
        event_bus: Optional bus for ``slider.*`` events.
    """

    def __init__(
        self,
        tri_state: TriStateInterface,
        store: ActionStore,
        applier: EffectApplier,
        presenter: DialogPresenter,
        event_bus: EventBus | None = None,
    ) -> None:
        self._tri_state = tri_state
        self._store = store
        self._applier = applier
        self._presenter = presenter
        self._bus = event_bus
        self._last_position: SliderPosition | None = None

    @property
    def last_position(self) -> SliderPosition | None:
        return self._last_position

    def update_mode(self) -> AppliedEffect | None:
        """Read the position and apply its mode with haptic and dialog."""
        position = self._tri_state.read_position()
        if position is None:
            _log.error("Could not read slider position, ignoring key event")
            return None
        return self.handle_position(position)

    def sync(self) -> AppliedEffect | None:
        """Apply the current position silently (no haptic, no dialog)."""
        position = self._tri_state.read_position()
        if position is None:
            _log.warning("Slider position unknown at startup, skipping sync")
            return None
        return self.handle_position(position, vibrate=False, show_dialog=False)

    def handle_position(
        self,
        position: SliderPosition,
        *,
        vibrate: bool = True,
        show_dialog: bool = True,
    ) -> AppliedEffect:
        mode = self._store.resolve_mode(position)
        mute_media = self._store.is_mute_media_enabled()
        _log.info("Slider at %s -> %s", position.value, mode.name)

        result = self._applier.apply(mode, vibrate=vibrate, mute_media=mute_media)
        self._last_position = position

        self._publish(
            events.SLIDER_MODE_APPLIED,
            {
                "position": position.value,
                "mode": mode.name,
                "committed": result.committed,
                "vibrated": result.vibrated,
            },
        )
        if not result.committed:
            self._publish(
                events.SLIDER_ZEN_COMMIT_TIMED_OUT,
                {"mode": mode.name, "zen": result.zen.name},
            )
        if result.muted_media or result.unmuted_media:
            self._publish(events.MEDIA_MUTE_CHANGED, {"muted": result.muted_media})

        if show_dialog and self._presenter.show(mode, position):
            self._publish(
                events.SLIDER_DIALOG_SHOWN,
                {"position": position.value, "mode": mode.name, "title": mode.title},
            )
        return result

    def update_configuration(self, rotation: int) -> None:
        self._presenter.update_configuration(rotation)

    def dispose(self) -> None:
        self._presenter.dispose()
        self._applier.dispose()

    def _publish(self, event_type: str, payload: dict) -> None:
        if self._bus is not None:
            self._bus.publish_threadsafe(event_type, payload)
