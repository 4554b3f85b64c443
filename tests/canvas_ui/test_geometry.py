"""
Unit tests for the pure geometry helpers behind the renderers.
"""

import math

import numpy as np
import pytest

from canvas_ui.renderers.diagram_renderer import flow_position, path_point
from canvas_ui.renderers.dial_renderer import DialGeometry
from canvas_ui.renderers.oven_renderer import heater_bar_color_name, interior_color


@pytest.mark.unit
class TestDialGeometry:

    def test_default_layout(self):
        geometry = DialGeometry()
        assert geometry.center == (220.0, 245.0)
        assert np.isclose(geometry.radius, 168.0)

    def test_angles_map_to_screen(self):
        geometry = DialGeometry()
        cx, cy = geometry.center
        assert np.allclose(geometry.point_at(0.0, 10.0), (cx + 10.0, cy))
        assert np.allclose(geometry.point_at(math.pi / 2, 10.0), (cx, cy - 10.0))
        assert np.allclose(geometry.point_at(math.pi, 10.0), (cx - 10.0, cy))

    @pytest.mark.parametrize("angle", [0.1, 1.0, math.pi / 2, 2.5, 3.0])
    def test_angle_at_inverts_point_at(self, angle):
        geometry = DialGeometry()
        x, y = geometry.point_at(angle, 120.0)
        assert np.isclose(geometry.angle_at(x, y), angle)

    def test_handle_sits_outside_track(self):
        geometry = DialGeometry()
        cx, cy = geometry.center
        hx, hy = geometry.handle_position(math.pi / 3)
        assert np.isclose(math.hypot(hx - cx, hy - cy), geometry.radius + geometry.handle_offset)


@pytest.mark.unit
class TestFlowAnimation:

    def test_flow_position_wraps(self):
        assert flow_position(0.0) == 0.0
        assert np.isclose(flow_position(0.5, speed=1.0), 0.5)
        assert np.isclose(flow_position(1.25, speed=1.0), 0.25)
        assert np.isclose(flow_position(0.0, phase=0.33), 0.33)

    def test_path_point_by_arc_length(self):
        path = [(0.0, 0.0), (10.0, 0.0), (10.0, 30.0)]
        assert path_point(path, 0.0) == (0.0, 0.0)
        assert np.allclose(path_point(path, 0.25), (10.0, 0.0))
        assert np.allclose(path_point(path, 0.5), (10.0, 10.0))
        assert np.allclose(path_point(path, 1.0), (10.0, 30.0))

    def test_path_point_clamps_fraction(self):
        path = [(0.0, 0.0), (10.0, 0.0)]
        assert np.allclose(path_point(path, 2.0), (10.0, 0.0))
        assert np.allclose(path_point(path, -1.0), (0.0, 0.0))

    def test_degenerate_paths(self):
        assert path_point([(3.0, 4.0)], 0.5) == (3.0, 4.0)
        assert path_point([(3.0, 4.0), (3.0, 4.0)], 0.5) == (3.0, 4.0)


@pytest.mark.unit
class TestOvenColors:

    def test_interior_heats_to_red(self):
        cold = interior_color(0.0)
        hot = interior_color(1.0)
        assert (cold.red(), cold.green(), cold.blue()) == (50, 50, 30)
        assert (hot.red(), hot.green(), hot.blue()) == (250, 30, 20)

    def test_heater_bar_thresholds(self):
        assert heater_bar_color_name(90) == 'error'
        assert heater_bar_color_name(60) == 'warning'
        assert heater_bar_color_name(20) == 'success'
