"""Platform abstraction: factory + backends (android, mock)."""

from oplushw.platform.factory import create_platform_factory

__all__ = ["create_platform_factory"]
