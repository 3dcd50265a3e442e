"""DialogPresenter — transient confirmation dialog for the alert slider.

At most one dismissal is ever pending.  Each :meth:`show` replaces the
previous one, so two quick slider moves produce a single dismissal
``timeout`` after the second move.
"""

from __future__ import annotations

import logging
import threading

from oplushw.core.interfaces.platform import DialogSurfaceInterface, PowerInterface
from oplushw.core.models.state import RingerMode, SliderPosition

_log = logging.getLogger(__name__)


class DialogPresenter:
    """Shows the mode dialog and dismisses it after *timeout_ms*.

    Args:
        surface: Where the dialog is rendered.
        power: Used to skip the dialog while the screen is off.
        timeout_ms: Delay between the last show and the dismissal.
    """

    def __init__(
        self,
        surface: DialogSurfaceInterface,
        power: PowerInterface,
        timeout_ms: int = 1000,
    ) -> None:
        self._surface = surface
        self._power = power
        self._timeout = timeout_ms / 1000.0
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._showing = False

    @property
    def is_showing(self) -> bool:
        with self._lock:
            return self._showing

    @property
    def dismissal_pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def show(self, mode: RingerMode, position: SliderPosition) -> bool:
        """Render *mode* for *position*.  Returns ``False`` if the screen is off."""
        with self._lock:
            self._cancel_locked()
            if not self._power.is_interactive():
                _log.debug("Screen off, not showing dialog for %s", mode.name)
                return False
            self._surface.show(mode, position)
            self._showing = True
            self._schedule_locked()
            return True

    def dismiss(self) -> None:
        with self._lock:
            self._cancel_locked()
            self._dismiss_locked()

    def update_configuration(self, rotation: int) -> None:
        """Forward a rotation change.

        The surface re-renders a visible dialog for the new rotation, so its
        dismissal is re-armed for a full timeout from now.
        """
        with self._lock:
            self._cancel_locked()
            self._surface.update_configuration(rotation)
            if self._showing:
                self._schedule_locked()

    def dispose(self) -> None:
        self.dismiss()

    # ------------------------------------------------------------------
    # Internal (caller holds self._lock)
    # ------------------------------------------------------------------

    def _schedule_locked(self) -> None:
        self._generation += 1
        timer = threading.Timer(self._timeout, self._on_timeout, args=(self._generation,))
        timer.daemon = True
        timer.name = "dialog-dismiss"
        self._timer = timer
        timer.start()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _dismiss_locked(self) -> None:
        if self._showing:
            self._surface.dismiss()
            self._showing = False

    def _on_timeout(self, generation: int) -> None:
        with self._lock:
            # A newer show() may have replaced this timer after it fired.
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
            self._dismiss_locked()
