"""Configuration Pydantic models: OplusHwConfig, SliderConfig, GestureConfig, SystemConfig."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SliderConfig(BaseModel):
    """Alert slider timing and device discovery."""

    model_config = ConfigDict(extra="forbid")

    dialog_timeout_ms: int = Field(default=1000, ge=0, description="Dialog auto-dismiss delay")
    zen_poll_interval_ms: int = Field(
        default=10, gt=0, description="Interval between zen-mode commit checks"
    )
    zen_commit_timeout_ms: int = Field(
        default=2000, gt=0, description="Give up waiting for the zen-mode commit after this long"
    )
    position_file: str = Field(
        default="/proc/tristatekey/tri_state",
        description="Kernel node reporting the slider position (1=top, 2=middle, 3=bottom)",
    )
    tri_state_device_names: list[str] = Field(
        default_factory=lambda: ["oplus,hall_tri_state_key", "oplus,tri-state-key"],
        description="Input device names identifying the tri-state key",
    )
    sync_on_start: bool = Field(
        default=True, description="Apply the current position silently when the service starts"
    )


class GestureConfig(BaseModel):
    """Touchscreen gesture handling."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = Field(default=True, description="Register for gesture scan codes")
    wake_lock_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Upper bound on the wake lock held while handling a gesture"
    )


class SystemConfig(BaseModel):
    """Non-hardware runtime settings."""

    model_config = ConfigDict(extra="forbid")

    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: str = Field(default="logs", description="Directory for rotating log files")
    event_bus_queue_size: int = Field(default=1000, description="Max queued events")
    webui_port: int = Field(default=8080, description="NiceGUI listen port (dev panel)")
    dev_mode: bool = Field(default=False, description="Use mock platform + dev panel")
    test_mode: bool = Field(default=False, description="Running under pytest")


class OplusHwConfig(BaseModel):
    """Top-level configuration loaded from ``oplushw_config.json``."""

    model_config = ConfigDict(extra="forbid")

    slider: SliderConfig = Field(default_factory=SliderConfig)
    gestures: GestureConfig = Field(default_factory=GestureConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)
