"""oplushw — Application entry point (NiceGUI composition root).

Wires together: Config → EventBus → PlatformFactory → KeyHandlerService → UI.
NiceGUI owns the event loop; ``app.on_startup`` / ``app.on_shutdown``
handle lifecycle.
"""

from __future__ import annotations

import logging as _logging

from nicegui import app, ui

from oplushw.config.config_manager import load_config
from oplushw.core.event_bus import EventBus
from oplushw.log_config.logger import setup_logging
from oplushw.platform.factory import create_platform_factory

_log = _logging.getLogger(__name__)

_PAGE_STYLE = "background: #000000; min-height: 100vh;"
_DIALOG_AREA_STYLE = (
    "width: 100%; max-width: 480px; aspect-ratio: 9/16; max-height: 70vh; "
    "border: 1px solid #333333; border-radius: 18px; padding: 16px; box-sizing: border-box;"
)


def main() -> None:
    """Synchronous entry point — bootstraps and starts NiceGUI."""

    # 1. Load configuration, then logging at the configured level
    config = load_config()
    setup_logging(log_level=config.system.log_level, log_dir=config.system.log_dir)
    _log.info("Starting oplushw")

    # 2. Create event bus
    bus = EventBus(queue_size=config.system.event_bus_queue_size)

    # 3. Create platform factory (mock off-device, Android on a device)
    factory = create_platform_factory(config)

    # 4. Inject the NiceGUI dialog surface into whichever factory was created.
    from oplushw.platform.mock.mock_factory import MockPlatformFactory
    from oplushw.ui.dialog_surface import NiceGUIDialogSurface

    dialog_surface = NiceGUIDialogSurface()
    factory.set_dialog_surface(dialog_surface)  # type: ignore[attr-defined]

    # 5. Create the service; a fatal registration error stops NiceGUI
    from oplushw.core.key_handler import KeyHandlerService

    service = KeyHandlerService(
        config=config,
        event_bus=bus,
        platform_factory=factory,
        on_fatal=app.shutdown,
    )

    # 6. Page: dialog area, plus the dev panel on the mock platform
    dev_panel = None
    if isinstance(factory, MockPlatformFactory):
        from oplushw.ui.dev_panel import DevPanel

        dev_panel = DevPanel(factory=factory, event_bus=bus)

    @ui.page("/")
    def _index() -> None:
        ui.query("body").style(_PAGE_STYLE)
        with ui.column().classes("w-full items-center").style("padding: 12px;"):
            with ui.element("div").style(_DIALOG_AREA_STYLE) as container:
                pass
            dialog_surface.bind_container(container)
            if dev_panel is not None:
                dev_panel.build()

    # 7. Wire lifecycle hooks
    async def on_startup() -> None:
        _log.info("NiceGUI startup — starting key handler service")
        if await service.start():
            _log.info("oplushw running on http://localhost:%d", config.system.webui_port)

    async def on_shutdown() -> None:
        if service.is_running:
            _log.info("NiceGUI shutdown — stopping key handler service")
            await service.shutdown(reason="nicegui shutdown")
        _log.info("oplushw stopped")

    app.on_startup(on_startup)
    app.on_shutdown(on_shutdown)

    # 8. Launch NiceGUI (blocks forever)
    ui.run(
        port=config.system.webui_port,
        title="oplushw",
        reload=False,
        show=False,
    )


if __name__ == "__main__":
    main()
