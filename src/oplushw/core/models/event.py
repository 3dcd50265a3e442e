"""Pydantic models for event bus messages and raw key events."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from oplushw.core.models.state import ANY_DEVICE, KeyAction


class Event(BaseModel):
    """Structured event flowing through the async event bus."""

    event_type: str = Field(description="Dot-separated event type, e.g. 'slider.mode.applied'")
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class KeyEvent(BaseModel):
    """A key event delivered by the platform key broker."""

    model_config = ConfigDict(frozen=True)

    scan_code: int = Field(description="Hardware scan code")
    action: KeyAction = Field(default=KeyAction.DOWN)
    device_id: int = Field(default=ANY_DEVICE, description="Input device that produced the event")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
