"""EffectApplier — pushes a :class:`RingerMode` into audio, zen and haptics.

Zen mode changes are committed asynchronously by the notification
service, so :meth:`EffectApplier.apply` polls until the requested level is
observed.  The poll is bounded; a timeout is reported in the result and
the remaining steps still run.

Media mute policy (when enabled by the user):

* entering SILENT mutes music and records that *we* muted it;
* entering NORMAL / PRIORITY / VIBRATE unmutes exactly once if we did;
* an unmute observed from anywhere else clears the record, so a manual
  unmute is never undone later.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from oplushw.core.interfaces.platform import (
    AudioInterface,
    NotificationInterface,
    VibratorInterface,
)
from oplushw.core.models.state import (
    AudioRingerMode,
    AudioStream,
    HapticEffect,
    RingerMode,
    VolumeAdjust,
    ZenMode,
)

_log = logging.getLogger(__name__)

_ZEN_REASON = "AlertSliderController"


class MediaPolicy(str, Enum):
    UNMUTE_IF_MUTED = "unmute_if_muted"
    MUTE = "mute"
    NONE = "none"


class CommitResult(str, Enum):
    COMMITTED = "committed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class ModeEffect:
    ringer: AudioRingerMode
    zen: ZenMode
    haptic: HapticEffect | None
    media: MediaPolicy


MODE_EFFECTS: dict[RingerMode, ModeEffect] = {
    RingerMode.NORMAL: ModeEffect(
        AudioRingerMode.NORMAL, ZenMode.OFF, HapticEffect.HEAVY_CLICK, MediaPolicy.UNMUTE_IF_MUTED
    ),
    RingerMode.PRIORITY: ModeEffect(
        AudioRingerMode.NORMAL,
        ZenMode.IMPORTANT_INTERRUPTIONS,
        HapticEffect.HEAVY_CLICK,
        MediaPolicy.UNMUTE_IF_MUTED,
    ),
    RingerMode.VIBRATE: ModeEffect(
        AudioRingerMode.VIBRATE, ZenMode.OFF, HapticEffect.DOUBLE_CLICK, MediaPolicy.UNMUTE_IF_MUTED
    ),
    RingerMode.SILENT: ModeEffect(AudioRingerMode.SILENT, ZenMode.OFF, None, MediaPolicy.MUTE),
    RingerMode.DND: ModeEffect(
        AudioRingerMode.NORMAL, ZenMode.NO_INTERRUPTIONS, None, MediaPolicy.NONE
    ),
}


@dataclass(frozen=True)
class AppliedEffect:
    """What :meth:`EffectApplier.apply` actually did."""

    mode: RingerMode
    zen: ZenMode
    commit: CommitResult
    vibrated: bool
    muted_media: bool
    unmuted_media: bool

    @property
    def committed(self) -> bool:
        return self.commit is CommitResult.COMMITTED


def poll_until(
    predicate: Callable[[], bool],
    interval: float,
    timeout: float,
) -> bool:
    """Call *predicate* every *interval* seconds until it returns ``True``.

    Returns ``False`` if *timeout* seconds pass first.  The predicate is
    always evaluated at least once.
    """
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() >= deadline:
            return False
        time.sleep(interval)
    return True


class MuteState:
    """The "music was muted by us" flag.

    Written by the slider worker and by the audio service's mute-change
    callback; every access goes through one lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._was_muted = False

    @property
    def was_muted(self) -> bool:
        with self._lock:
            return self._was_muted

    def mark_muted(self) -> None:
        with self._lock:
            self._was_muted = True

    def clear(self) -> None:
        with self._lock:
            self._was_muted = False

    def take(self) -> bool:
        """Clear the flag and return its previous value."""
        with self._lock:
            was_muted, self._was_muted = self._was_muted, False
            return was_muted


class EffectApplier:
    """Applies a slider mode to the platform's audio subsystems.

    Args:
        audio: Ringer and volume control.
        notifications: Zen mode control.
        vibrator: Haptic feedback.
        poll_interval: Seconds between zen commit checks.
        commit_timeout: Seconds to wait for the zen commit.
        on_media_unmuted: Optional hook called after an external unmute
            clears the mute record.
    """

    def __init__(
        self,
        audio: AudioInterface,
        notifications: NotificationInterface,
        vibrator: VibratorInterface,
        poll_interval: float = 0.01,
        commit_timeout: float = 2.0,
        on_media_unmuted: Callable[[], None] | None = None,
    ) -> None:
        self._audio = audio
        self._notifications = notifications
        self._vibrator = vibrator
        self._poll_interval = poll_interval
        self._commit_timeout = commit_timeout
        self._on_media_unmuted = on_media_unmuted
        self.mute_state = MuteState()

        self._audio.register_mute_callback(self._on_stream_mute_changed)

    def dispose(self) -> None:
        self._audio.unregister_mute_callback(self._on_stream_mute_changed)

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    def apply(
        self,
        mode: RingerMode,
        *,
        vibrate: bool = True,
        mute_media: bool = False,
    ) -> AppliedEffect:
        """Apply *mode* and wait for the zen change to be observed."""
        effect = MODE_EFFECTS[mode]

        self._audio.set_ringer_mode(effect.ringer)
        commit = self.set_zen_mode(effect.zen)

        vibrated = False
        if vibrate and effect.haptic is not None and self._vibrator.has_vibrator():
            self._vibrator.vibrate(effect.haptic)
            vibrated = True

        muted = unmuted = False
        if mute_media:
            if effect.media is MediaPolicy.MUTE:
                self._audio.adjust_volume(VolumeAdjust.MUTE)
                self.mute_state.mark_muted()
                muted = True
            elif effect.media is MediaPolicy.UNMUTE_IF_MUTED and self.mute_state.take():
                self._audio.adjust_volume(VolumeAdjust.UNMUTE)
                unmuted = True

        _log.info(
            "Applied %s (zen=%s commit=%s vibrated=%s muted=%s unmuted=%s)",
            mode.name, effect.zen.name, commit.value, vibrated, muted, unmuted,
        )
        return AppliedEffect(
            mode=mode,
            zen=effect.zen,
            commit=commit,
            vibrated=vibrated,
            muted_media=muted,
            unmuted_media=unmuted,
        )

    def set_zen_mode(self, zen: ZenMode) -> CommitResult:
        """Request *zen* and poll until the notification service reports it."""
        self._notifications.set_zen_mode(zen, _ZEN_REASON)
        committed = poll_until(
            lambda: self._notifications.get_zen_mode() == zen,
            self._poll_interval,
            self._commit_timeout,
        )
        if committed:
            return CommitResult.COMMITTED
        _log.warning(
            "Zen mode %s not observed within %.2fs (current=%s)",
            zen.name, self._commit_timeout, self._notifications.get_zen_mode().name,
        )
        return CommitResult.TIMED_OUT

    # ------------------------------------------------------------------
    # Audio callback (platform thread)
    # ------------------------------------------------------------------

    def _on_stream_mute_changed(self, stream: int, muted: bool) -> None:
        if stream != AudioStream.MUSIC or muted:
            return
        if self.mute_state.take():
            _log.debug("Music unmuted externally, cleared mute record")
        if self._on_media_unmuted is not None:
            self._on_media_unmuted()
