"""Tests for the in-memory platform used off-device."""

from __future__ import annotations

import pytest

from oplushw.core.interfaces.platform import RegistrationError
from oplushw.core.models.event import KeyEvent
from oplushw.core.models.gesture import GestureCode
from oplushw.core.models.state import (
    ANY_DEVICE,
    AudioStream,
    KeyAction,
    SettingsNamespace,
    SliderPosition,
    VolumeAdjust,
    ZenMode,
)
from oplushw.platform.mock.mock_factory import MockPlatformFactory
from oplushw.platform.mock.mock_platform import (
    SLIDER_SCAN_CODES,
    TOUCHPANEL_DEVICE_ID,
    TRI_STATE_DEVICE_ID,
    InMemoryDialogSurface,
    MockAudio,
    MockKeyBroker,
    MockNotifications,
    MockSettings,
)
from tests.helpers.runtime import wait_for_sync


class TestMockKeyBroker:
    def test_scan_code_and_action_filter(self):
        broker = MockKeyBroker()
        got: list[KeyEvent] = []
        broker.register_key_handler(
            "t", got.append, frozenset({247}), frozenset({KeyAction.UP}), ANY_DEVICE
        )
        assert broker.simulate_key(247, KeyAction.DOWN) == 0
        assert broker.simulate_key(248, KeyAction.UP) == 0
        assert broker.simulate_key(247, KeyAction.UP, device_id=9) == 1
        assert got[0].device_id == 9

    def test_empty_scan_codes_match_any_code_on_device(self):
        broker = MockKeyBroker()
        got: list[KeyEvent] = []
        broker.register_key_handler(
            "t", got.append, frozenset(), frozenset({KeyAction.DOWN}), TRI_STATE_DEVICE_ID
        )
        assert broker.simulate_key(601, KeyAction.DOWN, TRI_STATE_DEVICE_ID) == 1
        assert broker.simulate_key(601, KeyAction.DOWN, 1) == 0

    def test_unavailable_broker_refuses(self):
        broker = MockKeyBroker()
        broker.available = False
        with pytest.raises(RegistrationError):
            broker.register_key_handler(
                "t", lambda _e: None, frozenset(), frozenset({KeyAction.DOWN}), ANY_DEVICE
            )

    def test_unregister_unknown_token_is_harmless(self):
        MockKeyBroker().unregister_key_handler("nope")

    def test_simulate_gesture_sends_key_up_from_touchpanel(self):
        broker = MockKeyBroker()
        got: list[KeyEvent] = []
        broker.register_key_handler(
            "g", got.append, frozenset({int(GestureCode.LETTER_O)}),
            frozenset({KeyAction.UP}), ANY_DEVICE,
        )
        broker.simulate_gesture(GestureCode.LETTER_O)
        assert len(got) == 1
        assert got[0].scan_code == int(GestureCode.LETTER_O)
        assert got[0].action is KeyAction.UP
        assert got[0].device_id == TOUCHPANEL_DEVICE_ID


class TestMockTriState:
    def test_simulate_position_fires_key(self):
        factory = MockPlatformFactory()
        got: list[KeyEvent] = []
        factory.broker.register_key_handler(
            "s", got.append, frozenset(), frozenset({KeyAction.DOWN}), TRI_STATE_DEVICE_ID
        )
        factory.tri_state.simulate_position(SliderPosition.TOP)
        assert factory.tri_state.read_position() is SliderPosition.TOP
        assert got[0].scan_code == SLIDER_SCAN_CODES[SliderPosition.TOP]

    def test_unreadable_position_sends_nothing(self):
        factory = MockPlatformFactory()
        assert factory.tri_state.read_position() is SliderPosition.BOTTOM
        factory.tri_state.simulate_position(None)
        assert factory.tri_state.read_position() is None


class TestMockSettings:
    def test_namespaces_are_separate(self):
        settings = MockSettings()
        settings.put_string(SettingsNamespace.SYSTEM, "k", "system")
        settings.put_string(SettingsNamespace.SECURE, "k", "secure")
        assert settings.get_string(SettingsNamespace.SYSTEM, "k") == "system"
        assert settings.get_string(SettingsNamespace.SECURE, "k") == "secure"

    def test_int_default(self):
        settings = MockSettings()
        assert settings.get_int(SettingsNamespace.SYSTEM, "missing", 4) == 4
        settings.put_int(SettingsNamespace.SYSTEM, "present", 1)
        assert settings.get_int(SettingsNamespace.SYSTEM, "present", 4) == 1


class TestMockAudio:
    def test_mute_callbacks_fire_on_change_only(self):
        audio = MockAudio()
        seen: list[tuple[int, bool]] = []
        audio.register_mute_callback(lambda s, m: seen.append((s, m)))

        audio.adjust_volume(VolumeAdjust.MUTE)
        audio.adjust_volume(VolumeAdjust.MUTE)
        audio.simulate_external_unmute()

        assert seen == [(int(AudioStream.MUSIC), True), (int(AudioStream.MUSIC), False)]

    def test_unregistered_callback_not_called(self):
        audio = MockAudio()
        seen: list[bool] = []

        def cb(_stream: int, muted: bool) -> None:
            seen.append(muted)

        audio.register_mute_callback(cb)
        audio.unregister_mute_callback(cb)
        audio.simulate_external_mute()
        assert seen == []

    def test_stream_volume_clamped(self):
        audio = MockAudio()
        for _ in range(20):
            audio.adjust_stream_volume(AudioStream.MUSIC, VolumeAdjust.RAISE)
        assert audio.music_volume == MockAudio.MAX_VOLUME


class TestMockNotifications:
    def test_commit_lag(self):
        notifications = MockNotifications()
        notifications.simulate_commit_lag(0.05)
        notifications.set_zen_mode(ZenMode.NO_INTERRUPTIONS, "test")
        assert notifications.get_zen_mode() is ZenMode.OFF
        wait_for_sync(lambda: notifications.get_zen_mode() is ZenMode.NO_INTERRUPTIONS, timeout=2.0)

    def test_stuck_never_commits(self):
        notifications = MockNotifications()
        notifications.simulate_stuck()
        notifications.set_zen_mode(ZenMode.IMPORTANT_INTERRUPTIONS, "test")
        assert notifications.get_zen_mode() is ZenMode.OFF
        assert notifications.requests == [(ZenMode.IMPORTANT_INTERRUPTIONS, "test")]


class TestMockFactory:
    def test_create_returns_shared_instances(self):
        factory = MockPlatformFactory()
        assert factory.create_key_broker() is factory.broker
        assert factory.create_audio() is factory.audio
        assert factory.create_power() is factory.power
        assert isinstance(factory.create_dialog_surface(), InMemoryDialogSurface)

    def test_set_dialog_surface(self):
        factory = MockPlatformFactory()
        surface = InMemoryDialogSurface()
        factory.set_dialog_surface(surface)
        assert factory.create_dialog_surface() is surface

    def test_cleanup(self):
        factory = MockPlatformFactory()
        factory.cleanup()
        assert factory.cleaned_up
