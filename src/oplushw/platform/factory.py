"""Platform factory — platform detection and factory creation.

Selects Android on a device, Mock on everything else (desktop, CI).
"""

from __future__ import annotations

import logging
import os

from oplushw.core.interfaces.platform import PlatformFactory
from oplushw.core.models.config import OplusHwConfig

_log = logging.getLogger(__name__)


def _is_android() -> bool:
    """Return ``True`` if running inside an Android runtime."""
    return bool(os.environ.get("ANDROID_ROOT")) and bool(os.environ.get("ANDROID_DATA"))


def create_platform_factory(config: OplusHwConfig) -> PlatformFactory:
    """Return the appropriate :class:`PlatformFactory` for the platform.

    * On Android (and not ``dev_mode``) → ``AndroidPlatformFactory``.
    * Everywhere else → ``MockPlatformFactory``; ``dev_mode`` is forced on.
    """
    on_android = _is_android()
    if not config.system.dev_mode and on_android:
        try:
            from oplushw.platform.android.android_factory import AndroidPlatformFactory

            _log.info("Using AndroidPlatformFactory")
            return AndroidPlatformFactory(config)
        except ImportError:
            _log.warning("pyjnius not available, falling back to mock")

    from oplushw.platform.mock.mock_factory import MockPlatformFactory

    _log.info("Using MockPlatformFactory (dev_mode=%s, is_android=%s)",
              config.system.dev_mode, on_android)
    config.system.dev_mode = True
    return MockPlatformFactory()
