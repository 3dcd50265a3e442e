"""RegistrationManager — key broker subscriptions for the slider and gestures."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field

from oplushw.core.interfaces.platform import (
    InputDeviceInterface,
    KeyBrokerInterface,
    KeyHandler,
    RegistrationError,
)
from oplushw.core.models.gesture import GESTURE_SCAN_CODES
from oplushw.core.models.state import ANY_DEVICE, KeyAction

_log = logging.getLogger(__name__)

ALERT_SLIDER = "alert_slider"
GESTURES = "gestures"

DEFAULT_TRI_STATE_NAMES = ("oplus,hall_tri_state_key", "oplus,tri-state-key")


@dataclass(frozen=True)
class Registration:
    """A live key broker subscription."""

    source: str
    scan_codes: frozenset[int]
    actions: frozenset[KeyAction]
    device_id: int
    token: str = field(default_factory=lambda: uuid.uuid4().hex)


class RegistrationManager:
    """Keeps at most one broker subscription per source.

    Args:
        broker: The platform key broker.
        input_devices: Used to locate the tri-state key device.
        device_names: Names identifying the tri-state key.
    """

    def __init__(
        self,
        broker: KeyBrokerInterface,
        input_devices: InputDeviceInterface,
        device_names: list[str] | tuple[str, ...] = DEFAULT_TRI_STATE_NAMES,
    ) -> None:
        self._broker = broker
        self._input_devices = input_devices
        self._device_names = tuple(device_names)
        self._lock = threading.Lock()
        self._registrations: dict[str, Registration] = {}

    @property
    def registrations(self) -> dict[str, Registration]:
        with self._lock:
            return dict(self._registrations)

    def find_tri_state_device(self) -> int | None:
        """Return the id of the first input device that is the tri-state key."""
        for device_id in self._input_devices.get_input_device_ids():
            name = self._input_devices.get_input_device_name(device_id)
            if name in self._device_names:
                _log.debug("Tri-state key is device %d (%s)", device_id, name)
                return device_id
        _log.warning("No tri-state key among input devices (looked for %s)", self._device_names)
        return None

    def register_alert_slider(self, handler: KeyHandler, device_id: int) -> Registration:
        """Receive every key-down from *device_id*."""
        return self._register(
            Registration(
                source=ALERT_SLIDER,
                scan_codes=frozenset(),
                actions=frozenset({KeyAction.DOWN}),
                device_id=device_id,
            ),
            handler,
        )

    def register_gestures(self, handler: KeyHandler) -> Registration:
        """Receive key-ups for all gesture scan codes from any device."""
        return self._register(
            Registration(
                source=GESTURES,
                scan_codes=GESTURE_SCAN_CODES,
                actions=frozenset({KeyAction.UP}),
                device_id=ANY_DEVICE,
            ),
            handler,
        )

    def unregister(self, source: str) -> None:
        with self._lock:
            registration = self._registrations.pop(source, None)
        if registration is not None:
            self._broker.unregister_key_handler(registration.token)
            _log.info("Unregistered %s", source)

    def unregister_all(self) -> None:
        """Drop every subscription.  Broker errors are logged, not raised."""
        with self._lock:
            registrations = list(self._registrations.values())
            self._registrations.clear()
        for registration in registrations:
            try:
                self._broker.unregister_key_handler(registration.token)
                _log.info("Unregistered %s", registration.source)
            except Exception:
                _log.exception("Failed to unregister %s", registration.source)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _register(self, registration: Registration, handler: KeyHandler) -> Registration:
        self.unregister(registration.source)
        try:
            self._broker.register_key_handler(
                registration.token,
                handler,
                registration.scan_codes,
                registration.actions,
                registration.device_id,
            )
        except RegistrationError:
            raise
        except Exception as exc:
            raise RegistrationError(f"Failed to register {registration.source}: {exc}") from exc
        with self._lock:
            self._registrations[registration.source] = registration
        _log.info(
            "Registered %s (device=%d scan_codes=%d actions=%s)",
            registration.source,
            registration.device_id,
            len(registration.scan_codes),
            sorted(a.name for a in registration.actions),
        )
        return registration
