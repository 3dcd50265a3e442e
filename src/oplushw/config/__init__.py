"""Configuration: config manager and the default JSON file."""

from oplushw.config.config_manager import load_config

__all__ = ["load_config"]
