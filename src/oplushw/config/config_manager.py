"""Config manager — read ``oplushw_config.json``, apply env overrides, validate."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Mapping

from oplushw.core.models.config import OplusHwConfig

_log = logging.getLogger(__name__)

CONFIG_FILE_ENV = "OPLUSHW_CONFIG_FILE"

# Packaged defaults, installed alongside this module.
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "oplushw_config.json"


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# Env var -> (section, field, parser)
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "OPLUSHW_LOG_LEVEL": ("system", "log_level", str.strip),
    "OPLUSHW_DEV_MODE": ("system", "dev_mode", _flag),
    "OPLUSHW_TEST_MODE": ("system", "test_mode", _flag),
    "OPLUSHW_WEBUI_PORT": ("system", "webui_port", int),
    "OPLUSHW_ZEN_COMMIT_TIMEOUT_MS": ("slider", "zen_commit_timeout_ms", int),
}


def load_config(config_path: Path | str | None = None) -> OplusHwConfig:
    """Build the validated service configuration.

    The file is *config_path* if given, else ``$OPLUSHW_CONFIG_FILE``, else
    the packaged ``oplushw_config.json``.  Sections missing from the file
    take their model defaults.

    Raises:
        FileNotFoundError: The chosen file does not exist.
        pydantic.ValidationError: A value is out of range or a key is unknown.
    """
    path = config_file_path(config_path)
    _log.info("Loading config from %s", path)
    raw: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    apply_env_overrides(raw, os.environ)
    return OplusHwConfig.model_validate(raw)


def apply_env_overrides(raw: dict[str, Any], environ: Mapping[str, str]) -> None:
    """Overlay the ``OPLUSHW_*`` variables present in *environ* onto *raw*."""
    for name, (section, field, parse) in ENV_OVERRIDES.items():
        if name not in environ:
            continue
        raw.setdefault(section, {})[field] = parse(environ[name])
        _log.debug("%s overrides %s.%s", name, section, field)


def config_file_path(config_path: Path | str | None = None) -> Path:
    if config_path is None:
        config_path = os.environ.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_PATH
    path = Path(config_path)
    if not path.is_file():
        raise FileNotFoundError(
            f"Config file not found: {path} "
            f"(pass a path or set {CONFIG_FILE_ENV})"
        )
    return path
