"""Tests for NiceGUIDialogSurface placement and loop marshalling."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from oplushw.core.models.state import RingerMode, SliderPosition
from oplushw.ui.dialog_surface import NiceGUIDialogSurface, placement_style


class TestPlacementStyle:
    @pytest.mark.parametrize(
        ("position", "justify"),
        [
            (SliderPosition.TOP, "flex-start"),
            (SliderPosition.MIDDLE, "center"),
            (SliderPosition.BOTTOM, "flex-end"),
        ],
    )
    def test_portrait_follows_slider(self, position, justify):
        style = placement_style(position, 0)
        assert "flex-direction: column" in style
        assert f"justify-content: {justify}" in style
        assert "align-items: flex-end" in style

    def test_upside_down_mirrors(self):
        style = placement_style(SliderPosition.TOP, 180)
        assert "justify-content: flex-end" in style
        assert "align-items: flex-start" in style

    def test_landscape_uses_row(self):
        assert "flex-direction: row" in placement_style(SliderPosition.MIDDLE, 90)
        assert "flex-direction: row" in placement_style(SliderPosition.MIDDLE, 270)

    def test_rotation_wraps(self):
        assert placement_style(SliderPosition.TOP, 450) == placement_style(SliderPosition.TOP, 90)


class TestNiceGUIDialogSurface:
    def test_unbound_surface_drops_renders(self):
        surface = NiceGUIDialogSurface()
        surface.show(RingerMode.SILENT, SliderPosition.TOP)
        surface.dismiss()

    def test_update_configuration_records_rotation(self):
        surface = NiceGUIDialogSurface()
        surface.update_configuration(450)
        assert surface.rotation == 90

    def test_unbind_container(self):
        surface = NiceGUIDialogSurface()
        container = MagicMock()
        surface._containers.add(container)
        surface.unbind_container(container)
        assert not surface._containers
