"""Tests for KeyHandlerService — startup order, registration and shutdown."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from oplushw.core import events
from oplushw.core.event_bus import EventBus
from oplushw.core.key_handler import KeyHandlerService
from oplushw.core.models.config import OplusHwConfig
from oplushw.core.models.gesture import GestureCode
from oplushw.core.models.state import AudioRingerMode, RingerMode, SliderPosition
from oplushw.core.registration import ALERT_SLIDER, GESTURES
from oplushw.platform.mock.mock_factory import MockPlatformFactory
from oplushw.platform.mock.mock_platform import MockInputDevices
from tests.helpers.runtime import EventRecorder, wait_for


@pytest.fixture
def bus() -> EventBus:
    return EventBus(queue_size=100)


@pytest.fixture
def received(bus: EventBus) -> EventRecorder:
    return EventRecorder(
        bus,
        events.SERVICE_STARTED,
        events.SERVICE_STOPPED,
        events.SERVICE_REGISTRATION_FAILED,
        events.SLIDER_MODE_APPLIED,
        events.GESTURE_ACTION_PERFORMED,
    )


@pytest.fixture
def on_fatal() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(fast_config: OplusHwConfig, bus, mock_factory, on_fatal) -> KeyHandlerService:
    return KeyHandlerService(
        config=fast_config,
        event_bus=bus,
        platform_factory=mock_factory,
        on_fatal=on_fatal,
    )


class TestProperties:
    def test_nothing_built_before_start(self, service: KeyHandlerService):
        assert service.slider is None
        assert service.gestures is None
        assert service.registrations is None
        assert service.action_store is None
        assert not service.is_running


class TestStart:
    async def test_start_registers_both_sources(self, service, mock_factory, received):
        assert await service.start() is True
        try:
            assert service.is_running
            assert set(service.registrations.registrations) == {ALERT_SLIDER, GESTURES}
            assert len(mock_factory.broker.tokens) == 2
            assert service.slider_worker.is_running
            assert service.gesture_worker.is_running
            await wait_for(lambda: received.seen(events.SERVICE_STARTED))
            assert received.payloads(events.SERVICE_STARTED) == [{"platform": "mock"}]
        finally:
            await service.shutdown()

    async def test_start_syncs_silently(self, service, mock_factory):
        mock_factory.tri_state._position = SliderPosition.MIDDLE
        await service.start()
        try:
            assert mock_factory.audio.ringer_mode is AudioRingerMode.VIBRATE
            assert mock_factory.vibrator.effects == []
            assert mock_factory.dialog_surface.call_log == []
            assert service.slider.last_position is SliderPosition.MIDDLE
        finally:
            await service.shutdown()

    async def test_start_enables_gestures(self, service, mock_factory):
        await service.start()
        try:
            assert mock_factory.touchscreen.enabled[int(GestureCode.DOUBLE_TAP)] is True
        finally:
            await service.shutdown()

    async def test_gestures_disabled_in_config(self, fast_config, bus, mock_factory, on_fatal):
        fast_config.gestures.enabled = False
        service = KeyHandlerService(fast_config, bus, mock_factory, on_fatal=on_fatal)
        await service.start()
        try:
            assert set(service.registrations.registrations) == {ALERT_SLIDER}
            assert mock_factory.touchscreen.enabled == {}
        finally:
            await service.shutdown()

    async def test_missing_tri_state_skips_slider_only(self, service, mock_factory):
        mock_factory.input_devices = MockInputDevices({1: "gpio-keys", 3: "touchpanel"})
        assert await service.start() is True
        try:
            assert set(service.registrations.registrations) == {GESTURES}
        finally:
            await service.shutdown()


class TestRegistrationFailure:
    async def test_failure_is_fatal(self, service, mock_factory, on_fatal, bus):
        mock_factory.broker.available = False

        assert await service.start() is False

        on_fatal.assert_called_once_with()
        assert not service.is_running
        assert not bus.is_running
        assert mock_factory.cleaned_up
        assert not service.slider_worker.is_running

    async def test_default_on_fatal_exits(self, fast_config, bus, mock_factory):
        mock_factory.broker.available = False
        service = KeyHandlerService(fast_config, bus, mock_factory)
        with pytest.raises(SystemExit) as exc_info:
            await service.start()
        assert exc_info.value.code == 1


class TestKeyDelivery:
    async def test_slider_key_applies_mode(self, service, mock_factory, received):
        await service.start()
        try:
            mock_factory.tri_state.simulate_position(SliderPosition.TOP)
            await wait_for(lambda: mock_factory.audio.ringer_mode is AudioRingerMode.SILENT)
            await wait_for(lambda: any(
                p["position"] == "top" for p in received.payloads(events.SLIDER_MODE_APPLIED)
            ))
            await wait_for(lambda: mock_factory.dialog_surface.last_mode is RingerMode.SILENT)
        finally:
            await service.shutdown()

    async def test_gesture_key_runs_action(self, service, mock_factory, received):
        await service.start()
        try:
            assert mock_factory.broker.simulate_gesture(GestureCode.DOWN_ARROW) == 1
            await wait_for(lambda: received.seen(events.GESTURE_ACTION_PERFORMED))
            assert mock_factory.shortcuts.flashlight_on
        finally:
            await service.shutdown()


class TestShutdown:
    async def test_shutdown_releases_everything(self, service, mock_factory):
        await service.start()
        await service.shutdown(reason="test")

        assert mock_factory.broker.tokens == []
        assert not service.slider_worker.is_running
        assert not service.gesture_worker.is_running
        assert not service.is_running
        assert mock_factory.cleaned_up

    async def test_keys_after_shutdown_are_not_delivered(self, service, mock_factory):
        await service.start()
        await service.shutdown()
        assert mock_factory.broker.simulate_gesture(GestureCode.DOWN_ARROW) == 0
        assert mock_factory.shortcuts.calls == []

    async def test_update_configuration_reaches_dialog(self, service, mock_factory):
        await service.start()
        try:
            service.update_configuration(90)
            assert mock_factory.dialog_surface.rotation == 90
        finally:
            await service.shutdown()
