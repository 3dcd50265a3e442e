"""Tests for EffectApplier — ringer, zen commit-wait, haptics and media mute."""

from __future__ import annotations

import logging
import time

import pytest

from oplushw.core.effect_applier import (
    MODE_EFFECTS,
    CommitResult,
    EffectApplier,
    MediaPolicy,
    MuteState,
    poll_until,
)
from oplushw.core.models.state import (
    AudioRingerMode,
    HapticEffect,
    RingerMode,
    VolumeAdjust,
    ZenMode,
)
from oplushw.platform.mock.mock_platform import MockAudio, MockNotifications, MockVibrator


@pytest.fixture
def audio() -> MockAudio:
    return MockAudio()


@pytest.fixture
def notifications() -> MockNotifications:
    return MockNotifications()


@pytest.fixture
def vibrator() -> MockVibrator:
    return MockVibrator()


@pytest.fixture
def applier(audio, notifications, vibrator) -> EffectApplier:
    applier = EffectApplier(audio, notifications, vibrator, poll_interval=0.005, commit_timeout=0.2)
    yield applier
    applier.dispose()


class TestModeTable:
    @pytest.mark.parametrize(
        ("mode", "ringer", "zen", "haptic", "media"),
        [
            (RingerMode.NORMAL, AudioRingerMode.NORMAL, ZenMode.OFF, HapticEffect.HEAVY_CLICK, MediaPolicy.UNMUTE_IF_MUTED),
            (RingerMode.PRIORITY, AudioRingerMode.NORMAL, ZenMode.IMPORTANT_INTERRUPTIONS, HapticEffect.HEAVY_CLICK, MediaPolicy.UNMUTE_IF_MUTED),
            (RingerMode.VIBRATE, AudioRingerMode.VIBRATE, ZenMode.OFF, HapticEffect.DOUBLE_CLICK, MediaPolicy.UNMUTE_IF_MUTED),
            (RingerMode.SILENT, AudioRingerMode.SILENT, ZenMode.OFF, None, MediaPolicy.MUTE),
            (RingerMode.DND, AudioRingerMode.NORMAL, ZenMode.NO_INTERRUPTIONS, None, MediaPolicy.NONE),
        ],
    )
    def test_mapping(self, mode, ringer, zen, haptic, media):
        effect = MODE_EFFECTS[mode]
        assert (effect.ringer, effect.zen, effect.haptic, effect.media) == (ringer, zen, haptic, media)

    def test_every_mode_covered(self):
        assert set(MODE_EFFECTS) == set(RingerMode)


class TestPollUntil:
    def test_immediate_success(self):
        assert poll_until(lambda: True, 0.01, 0.0) is True

    def test_times_out(self):
        start = time.monotonic()
        assert poll_until(lambda: False, 0.01, 0.05) is False
        assert time.monotonic() - start >= 0.05

    def test_eventual_success(self):
        calls = iter([False, False, True])
        assert poll_until(lambda: next(calls), 0.001, 1.0) is True


class TestMuteState:
    def test_take_clears(self):
        state = MuteState()
        state.mark_muted()
        assert state.take() is True
        assert state.take() is False
        assert state.was_muted is False


class TestApply:
    def test_vibrate_mode(self, applier, audio, notifications, vibrator):
        result = applier.apply(RingerMode.VIBRATE)
        assert audio.ringer_mode is AudioRingerMode.VIBRATE
        assert notifications.get_zen_mode() is ZenMode.OFF
        assert vibrator.effects == [HapticEffect.DOUBLE_CLICK]
        assert result.committed
        assert result.vibrated

    def test_priority_sets_zen(self, applier, notifications, vibrator):
        result = applier.apply(RingerMode.PRIORITY)
        assert notifications.get_zen_mode() is ZenMode.IMPORTANT_INTERRUPTIONS
        assert notifications.requests[-1][1] == "AlertSliderController"
        assert vibrator.effects == [HapticEffect.HEAVY_CLICK]
        assert result.zen is ZenMode.IMPORTANT_INTERRUPTIONS

    def test_dnd_no_haptic(self, applier, audio, notifications, vibrator):
        applier.apply(RingerMode.DND, mute_media=True)
        assert audio.ringer_mode is AudioRingerMode.NORMAL
        assert notifications.get_zen_mode() is ZenMode.NO_INTERRUPTIONS
        assert vibrator.effects == []
        assert audio.volume_calls == []

    def test_vibrate_false_suppresses_haptic(self, applier, vibrator):
        result = applier.apply(RingerMode.NORMAL, vibrate=False)
        assert vibrator.effects == []
        assert result.vibrated is False

    def test_no_vibrator(self, applier, vibrator):
        vibrator.present = False
        assert applier.apply(RingerMode.NORMAL).vibrated is False
        assert vibrator.effects == []

    def test_waits_for_delayed_commit(self, applier, notifications, vibrator):
        notifications.simulate_commit_lag(0.05)
        result = applier.apply(RingerMode.DND)
        assert result.commit is CommitResult.COMMITTED
        assert notifications.get_zen_mode() is ZenMode.NO_INTERRUPTIONS

    def test_haptic_follows_commit(self, applier, notifications, vibrator):
        """The haptic is played only after the zen change is observed."""
        notifications.simulate_commit_lag(0.05)
        seen_zen: list[ZenMode] = []
        original = vibrator.vibrate

        def record(effect):
            seen_zen.append(notifications.get_zen_mode())
            original(effect)

        vibrator.vibrate = record
        applier.apply(RingerMode.PRIORITY)
        assert seen_zen == [ZenMode.IMPORTANT_INTERRUPTIONS]

    def test_stuck_commit_times_out(self, applier, audio, notifications, vibrator, caplog):
        notifications.simulate_stuck()
        with caplog.at_level(logging.WARNING):
            result = applier.apply(RingerMode.PRIORITY)
        assert result.commit is CommitResult.TIMED_OUT
        assert not result.committed
        assert "not observed" in caplog.text
        # Remaining steps still run.
        assert vibrator.effects == [HapticEffect.HEAVY_CLICK]
        assert audio.ringer_mode is AudioRingerMode.NORMAL


class TestMediaMute:
    def test_silent_mutes_and_normal_unmutes_once(self, applier, audio):
        applier.apply(RingerMode.SILENT, mute_media=True)
        assert audio.volume_calls == [VolumeAdjust.MUTE]
        assert applier.mute_state.was_muted is True

        result = applier.apply(RingerMode.NORMAL, mute_media=True)
        assert result.unmuted_media
        assert audio.volume_calls == [VolumeAdjust.MUTE, VolumeAdjust.UNMUTE]
        assert applier.mute_state.was_muted is False

        applier.apply(RingerMode.VIBRATE, mute_media=True)
        assert audio.volume_calls.count(VolumeAdjust.UNMUTE) == 1

    def test_silent_without_policy_leaves_media(self, applier, audio):
        applier.apply(RingerMode.SILENT, mute_media=False)
        assert audio.volume_calls == []
        assert applier.mute_state.was_muted is False

    def test_no_unmute_if_never_muted(self, applier, audio):
        applier.apply(RingerMode.NORMAL, mute_media=True)
        assert audio.volume_calls == []

    def test_external_unmute_clears_flag(self, applier, audio):
        applier.apply(RingerMode.SILENT, mute_media=True)
        audio.simulate_external_unmute()
        assert applier.mute_state.was_muted is False

        applier.apply(RingerMode.NORMAL, mute_media=True)
        assert VolumeAdjust.UNMUTE not in audio.volume_calls

    def test_external_mute_is_ignored(self, applier, audio):
        audio.simulate_external_mute()
        assert applier.mute_state.was_muted is False

    def test_unmute_hook_called(self, audio, notifications, vibrator):
        calls: list[bool] = []
        applier = EffectApplier(
            audio, notifications, vibrator, on_media_unmuted=lambda: calls.append(True)
        )
        audio.simulate_external_mute()
        audio.simulate_external_unmute()
        assert calls == [True]
        applier.dispose()

    def test_dispose_unsubscribes(self, audio, notifications, vibrator):
        applier = EffectApplier(audio, notifications, vibrator)
        applier.apply(RingerMode.SILENT, mute_media=True)
        applier.dispose()
        audio.simulate_external_unmute()
        assert applier.mute_state.was_muted is True
