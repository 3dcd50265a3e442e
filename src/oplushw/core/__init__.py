"""Core services: event bus, pipeline workers, slider and gesture handling."""

from oplushw.core.action_store import ActionStore
from oplushw.core.alert_slider import AlertSliderController
from oplushw.core.dialog_presenter import DialogPresenter
from oplushw.core.effect_applier import EffectApplier
from oplushw.core.event_bus import EventBus
from oplushw.core.event_pipeline import LatestValueSlot, SourceWorker
from oplushw.core.gesture_controller import GestureController
from oplushw.core.key_handler import KeyHandlerService
from oplushw.core.registration import RegistrationManager

__all__ = [
    "ActionStore",
    "AlertSliderController",
    "DialogPresenter",
    "EffectApplier",
    "EventBus",
    "GestureController",
    "KeyHandlerService",
    "LatestValueSlot",
    "RegistrationManager",
    "SourceWorker",
]
