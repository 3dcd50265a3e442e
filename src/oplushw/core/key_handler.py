"""KeyHandlerService — startup & shutdown of the key event pipeline."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Callable

from oplushw.core import events
from oplushw.core.action_store import ActionStore
from oplushw.core.alert_slider import AlertSliderController
from oplushw.core.dialog_presenter import DialogPresenter
from oplushw.core.effect_applier import EffectApplier
from oplushw.core.event_bus import EventBus
from oplushw.core.event_pipeline import SourceWorker
from oplushw.core.gesture_controller import GestureController
from oplushw.core.interfaces.platform import PlatformFactory, RegistrationError
from oplushw.core.models.config import OplusHwConfig
from oplushw.core.models.event import KeyEvent
from oplushw.core.registration import ALERT_SLIDER, GESTURES, RegistrationManager

_log = logging.getLogger(__name__)


def _exit_process() -> None:
    _log.critical("Exiting after fatal registration error")
    sys.exit(1)


class KeyHandlerService:
    """Top-level orchestrator for the alert slider and gesture pipeline.

    This class only sequences init / teardown and wires components
    together; behaviour lives in the controllers.

    Args:
        config: Validated service configuration.
        event_bus: The global event bus (not yet started).
        platform_factory: Platform-specific backend factory.
        on_fatal: Called after the service has shut itself down because
            the key broker refused a registration.  Defaults to exiting
            the process.
    """

    def __init__(
        self,
        config: OplusHwConfig,
        event_bus: EventBus,
        platform_factory: PlatformFactory,
        on_fatal: Callable[[], object] | None = None,
    ) -> None:
        self._config = config
        self._bus = event_bus
        self._factory = platform_factory
        self._on_fatal = on_fatal or _exit_process

        # Created during start()
        self._store: ActionStore | None = None
        self._slider: AlertSliderController | None = None
        self._gestures: GestureController | None = None
        self._registrations: RegistrationManager | None = None
        self._slider_worker: SourceWorker[KeyEvent] | None = None
        self._gesture_worker: SourceWorker[int] | None = None
        self._running = False

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def action_store(self) -> ActionStore | None:
        return self._store

    @property
    def slider(self) -> AlertSliderController | None:
        """The slider controller (available after ``start()``)."""
        return self._slider

    @property
    def gestures(self) -> GestureController | None:
        """The gesture controller (available after ``start()``)."""
        return self._gestures

    @property
    def registrations(self) -> RegistrationManager | None:
        return self._registrations

    @property
    def slider_worker(self) -> SourceWorker[KeyEvent] | None:
        return self._slider_worker

    @property
    def gesture_worker(self) -> SourceWorker[int] | None:
        return self._gesture_worker

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """Boot the service: bus → controllers → sync → registrations → workers.

        Returns ``False`` if a registration failed (the service has then
        already shut down and ``on_fatal`` has been called).
        """
        _log.info("KeyHandlerService starting …")
        slider_cfg = self._config.slider
        gesture_cfg = self._config.gestures

        # 1. Event bus
        await self._bus.start()

        # 2. Controllers
        audio = self._factory.create_audio()
        power = self._factory.create_power()
        vibrator = self._factory.create_vibrator()
        self._store = ActionStore(self._factory.create_settings())

        applier = EffectApplier(
            audio=audio,
            notifications=self._factory.create_notifications(),
            vibrator=vibrator,
            poll_interval=slider_cfg.zen_poll_interval_ms / 1000.0,
            commit_timeout=slider_cfg.zen_commit_timeout_ms / 1000.0,
            on_media_unmuted=self._on_media_unmuted,
        )
        presenter = DialogPresenter(
            surface=self._factory.create_dialog_surface(),
            power=power,
            timeout_ms=slider_cfg.dialog_timeout_ms,
        )
        self._slider = AlertSliderController(
            tri_state=self._factory.create_tri_state(),
            store=self._store,
            applier=applier,
            presenter=presenter,
            event_bus=self._bus,
        )
        self._gestures = GestureController(
            store=self._store,
            touchscreen=self._factory.create_touchscreen(),
            shortcuts=self._factory.create_shortcuts(),
            audio=audio,
            power=power,
            keyguard=self._factory.create_keyguard(),
            vibrator=vibrator,
            wake_lock_timeout=gesture_cfg.wake_lock_timeout_seconds,
            event_bus=self._bus,
        )

        # 3. Apply the current slider position silently
        if slider_cfg.sync_on_start:
            await asyncio.to_thread(self._slider.sync)

        # 4. Hardware gesture enablement
        if gesture_cfg.enabled:
            await asyncio.to_thread(self._gestures.enable_gestures)

        # 5. Workers, then broker registrations
        self._slider_worker = SourceWorker(ALERT_SLIDER, self._process_slider_event)
        self._gesture_worker = SourceWorker(GESTURES, self._gestures.handle_scan_code)
        self._slider_worker.start()
        self._gesture_worker.start()
        self._running = True

        self._registrations = RegistrationManager(
            self._factory.create_key_broker(),
            self._factory.create_input_devices(),
            slider_cfg.tri_state_device_names,
        )
        try:
            self._register()
        except RegistrationError as exc:
            _log.error("Key handler registration failed: %s", exc)
            await self._bus.publish(events.SERVICE_REGISTRATION_FAILED, {"error": str(exc)})
            await self.shutdown(reason="registration failed")
            self._on_fatal()
            return False

        platform_type = "mock" if self._config.system.dev_mode else "android"
        await self._bus.publish(events.SERVICE_STARTED, {"platform": platform_type})
        _log.info("KeyHandlerService started (platform=%s)", platform_type)
        return True

    def _register(self) -> None:
        assert self._registrations is not None
        device_id = self._registrations.find_tri_state_device()
        if device_id is not None:
            self._registrations.register_alert_slider(self._on_slider_key, device_id)
        else:
            _log.error("Tri-state key not found, alert slider disabled")
        if self._config.gestures.enabled:
            self._registrations.register_gestures(self._on_gesture_key)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def shutdown(self, reason: str = "user request") -> None:
        """Graceful shutdown: unregister → stop workers → dispose → stop bus."""
        _log.info("KeyHandlerService shutting down: %s", reason)
        if self._bus.is_running:
            await self._bus.publish(events.SERVICE_STOPPED, {"reason": reason})

        if self._registrations is not None:
            await asyncio.to_thread(self._registrations.unregister_all)

        for worker in (self._slider_worker, self._gesture_worker):
            if worker is not None:
                await asyncio.to_thread(worker.stop)
        self._running = False

        if self._slider is not None:
            self._slider.dispose()

        # Let the consumer deliver SERVICE_STOPPED before cancelling it.
        await asyncio.sleep(0)
        await self._bus.stop()

        self._factory.cleanup()
        _log.info("KeyHandlerService shutdown complete")

    def update_configuration(self, rotation: int) -> None:
        if self._slider is not None:
            self._slider.update_configuration(rotation)

    # ------------------------------------------------------------------
    # Broker callbacks (broker delivery thread; must not block)
    # ------------------------------------------------------------------

    def _on_slider_key(self, event: KeyEvent) -> None:
        if self._slider_worker is not None:
            self._slider_worker.submit(event)

    def _on_gesture_key(self, event: KeyEvent) -> None:
        if self._gesture_worker is not None:
            self._gesture_worker.submit(event.scan_code)

    # ------------------------------------------------------------------
    # Worker handlers
    # ------------------------------------------------------------------

    def _process_slider_event(self, _event: KeyEvent) -> None:
        assert self._slider is not None
        self._slider.update_mode()

    def _on_media_unmuted(self) -> None:
        self._bus.publish_threadsafe(events.MEDIA_MUTE_CHANGED, {"muted": False})
