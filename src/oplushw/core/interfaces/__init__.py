"""Platform abstraction interfaces."""

from oplushw.core.interfaces.platform import (
    AudioInterface,
    DialogSurfaceInterface,
    InputDeviceInterface,
    KeyBrokerInterface,
    KeyguardInterface,
    NotificationInterface,
    PlatformFactory,
    PowerInterface,
    RegistrationError,
    SettingsInterface,
    ShortcutInterface,
    TouchscreenGestureInterface,
    TriStateInterface,
    VibratorInterface,
    WakeLock,
)

__all__ = [
    "AudioInterface",
    "DialogSurfaceInterface",
    "InputDeviceInterface",
    "KeyBrokerInterface",
    "KeyguardInterface",
    "NotificationInterface",
    "PlatformFactory",
    "PowerInterface",
    "RegistrationError",
    "SettingsInterface",
    "ShortcutInterface",
    "TouchscreenGestureInterface",
    "TriStateInterface",
    "VibratorInterface",
    "WakeLock",
]
