"""NiceGUIDialogSurface — thread-safe slider dialog rendering via NiceGUI.

The dialog presenter calls ``show()`` / ``dismiss()`` from the slider
worker and from its dismissal timer thread.  All calls are marshalled to
the NiceGUI / asyncio event loop via ``asyncio.run_coroutine_threadsafe``.

The dialog renders into a container element bound during page setup by
calling :meth:`bind_container`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from nicegui import ui

from oplushw.core.interfaces.platform import DialogSurfaceInterface
from oplushw.core.models.state import RingerMode, SliderPosition

_log = logging.getLogger(__name__)

_DIALOG_STYLE = (
    "background: rgba(32, 33, 36, 0.92); color: #ffffff; border-radius: 24px; "
    "padding: 10px 18px; display: flex; align-items: center; gap: 10px; "
    "font-size: 16px; min-width: 180px;"
)

# Vertical placement of the dialog for each slider position, portrait.
_ALIGN: dict[SliderPosition, str] = {
    SliderPosition.TOP: "flex-start",
    SliderPosition.MIDDLE: "center",
    SliderPosition.BOTTOM: "flex-end",
}


def placement_style(position: SliderPosition, rotation: int) -> str:
    """Return the container CSS placing the dialog next to the slider.

    The slider sits on the right edge in portrait; rotating the display
    moves it to the top (90°), left (180°) or bottom (270°).
    """
    align = _ALIGN[position]
    rotation %= 360
    if rotation == 90:
        return f"display: flex; flex-direction: row; justify-content: {_flip(align)}; align-items: flex-start;"
    if rotation == 180:
        return f"display: flex; flex-direction: column; justify-content: {_flip(align)}; align-items: flex-start;"
    if rotation == 270:
        return f"display: flex; flex-direction: row; justify-content: {align}; align-items: flex-end;"
    return f"display: flex; flex-direction: column; justify-content: {align}; align-items: flex-end;"


def _flip(align: str) -> str:
    return {"flex-start": "flex-end", "flex-end": "flex-start"}.get(align, align)


class NiceGUIDialogSurface(DialogSurfaceInterface):
    """Renders the alert slider dialog into NiceGUI container(s).

    Supports multiple connected clients — each calls :meth:`bind_container`
    and all bound containers are updated in parallel.
    """

    def __init__(self) -> None:
        self._containers: set[ui.element] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._rotation = 0
        self._current: tuple[RingerMode, SliderPosition] | None = None

    @property
    def rotation(self) -> int:
        return self._rotation

    def bind_container(self, container: ui.element) -> None:
        """Bind a NiceGUI container element and capture the event loop.

        Must be called from the NiceGUI event-loop context (e.g. inside
        ``@ui.page``).
        """
        self._containers.add(container)
        self._loop = asyncio.get_event_loop()
        _log.debug("NiceGUIDialogSurface bound container (total=%d)", len(self._containers))

    def unbind_container(self, container: ui.element) -> None:
        self._containers.discard(container)

    # ------------------------------------------------------------------
    # DialogSurfaceInterface implementation
    # ------------------------------------------------------------------

    def show(self, mode: RingerMode, position: SliderPosition) -> None:
        self._current = (mode, position)
        self._run_on_loop(self._render(mode, position, self._rotation))

    def dismiss(self) -> None:
        self._current = None
        self._run_on_loop(self._render_clear())

    def update_configuration(self, rotation: int) -> None:
        self._rotation = rotation % 360
        if self._current is not None:
            mode, position = self._current
            self._run_on_loop(self._render(mode, position, self._rotation))

    # ------------------------------------------------------------------
    # Async renderers (run on NiceGUI event loop)
    # ------------------------------------------------------------------

    async def _render(self, mode: RingerMode, position: SliderPosition, rotation: int) -> None:
        for container in list(self._containers):
            try:
                container.clear()
                container.style(placement_style(position, rotation))
                with container:
                    with ui.element("div").style(_DIALOG_STYLE):
                        ui.icon(mode.icon).classes("text-2xl")
                        ui.label(mode.title)
            except RuntimeError:
                self._containers.discard(container)

    async def _render_clear(self) -> None:
        for container in list(self._containers):
            try:
                container.clear()
            except RuntimeError:
                self._containers.discard(container)

    # ------------------------------------------------------------------
    # Thread-safety helper
    # ------------------------------------------------------------------

    def _run_on_loop(self, coro: Any) -> None:
        """Marshal a coroutine to the NiceGUI event loop."""
        if self._loop is None or not self._containers or self._loop.is_closed():
            _log.debug("NiceGUIDialogSurface: no loop/containers, dropping render")
            coro.close()
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._loop.create_task(coro)
        else:
            asyncio.run_coroutine_threadsafe(coro, self._loop)
