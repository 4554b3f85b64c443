"""
Unit tests for the pointer plant and its integration step.
"""

import math

import numpy as np
import pytest

from blocks.pointer import PointerPlant
from simlib.models.state import PointerParams, PointerState
from simlib.numeric.control import (
    gravity_torque, pointer_step, predict_settling_angle, steady_state_error_degrees
)


@pytest.mark.unit
class TestPointerStep:
    """Test the rotational integration step."""

    def test_vertical_arm_at_rest_stays_put(self):
        angle, velocity = pointer_step(math.pi / 2, 0.0, 0.0, 0.5, 0.12, 0.02, 1.0 / 60.0)
        assert np.isclose(angle, math.pi / 2)
        assert np.isclose(velocity, 0.0)

    def test_gravity_pulls_towards_vertical(self):
        assert gravity_torque(math.pi / 4, 0.5) < 0.0
        assert gravity_torque(3 * math.pi / 4, 0.5) > 0.0
        _, velocity = pointer_step(math.pi / 4, 0.0, 0.0, 0.5, 0.12, 0.02, 1.0 / 60.0)
        assert velocity < 0.0

    def test_semi_implicit_euler(self):
        # accel = 1.2 / 0.12 = 10; v = 1.0; angle = 1.0 + 0.1
        angle, velocity = pointer_step(1.0, 0.0, 1.2, 0.0, 0.12, 0.0, 0.1)
        assert np.isclose(velocity, 1.0)
        assert np.isclose(angle, 1.1)

    def test_bounce_at_lower_stop(self):
        angle, velocity = pointer_step(0.01, -2.0, 0.0, 0.0, 0.12, 0.0, 0.1)
        assert angle == 0.0
        assert np.isclose(velocity, 1.0), "Velocity reflects with restitution 0.5"

    def test_bounce_at_upper_stop(self):
        angle, velocity = pointer_step(math.pi - 0.01, 2.0, 0.0, 0.0, 0.12, 0.0, 0.1, restitution=0.25)
        assert angle == math.pi
        assert np.isclose(velocity, -0.5)

    def test_angle_stays_in_range_under_full_torque(self):
        angle, velocity = math.pi / 2, 0.0
        for _ in range(600):
            angle, velocity = pointer_step(angle, velocity, 2.0, 0.0, 0.12, 0.02, 1.0 / 60.0)
            assert 0.0 <= angle <= math.pi


@pytest.mark.unit
class TestPointerPlant:
    """Test the plant block around pointer_step."""

    def test_initial_state(self):
        plant = PointerPlant(start_angle=1.0)
        state = plant.initial_state(PointerParams())
        assert state == PointerState(angle=1.0)

    def test_step_keeps_controller_fields(self):
        plant = PointerPlant()
        state = PointerState(angle=1.0, integral=0.3, prev_error=0.2)
        new_state = plant.step(state, 1.0, PointerParams(), 1.0 / 60.0)
        assert new_state.integral == 0.3
        assert new_state.prev_error == 0.2
        assert new_state.angle != 1.0

    def test_measure_without_noise_is_exact(self):
        plant = PointerPlant()
        assert plant.measure(PointerState(angle=1.234), PointerParams()) == 1.234

    def test_measure_noise_is_bounded(self):
        plant = PointerPlant(seed=7)
        params = PointerParams(measurement_noise=0.05)
        readings = [plant.measure(PointerState(angle=1.0), params) for _ in range(200)]
        assert all(abs(r - 1.0) <= 0.025 for r in readings)
        assert len(set(readings)) > 1

    def test_limits_and_power(self):
        plant = PointerPlant()
        params = PointerParams(max_torque=2.0)
        assert plant.control_limits(params).output_limits == (-2.0, 2.0)
        assert np.isclose(plant.power(1.0, params), 0.5)
        assert np.isclose(plant.power(-2.0, params), -1.0)

    def test_target_range(self):
        params = PointerParams()
        lo, hi = PointerPlant().target_range(params)
        assert np.isclose(lo, math.pi / 4)
        assert np.isclose(hi, 3 * math.pi / 4)


@pytest.mark.unit
class TestSettlingPrediction:
    """Test the P-only steady-state predictor."""

    def test_zero_gain_is_undefined(self):
        target = 3 * math.pi / 4
        assert predict_settling_angle(target, 0.5, 0.0) is None
        assert steady_state_error_degrees(target, 0.5, 0.0) == 0.0

    def test_tiny_gain_below_guard_is_undefined(self):
        assert predict_settling_angle(1.0, 0.5, 1e-9) is None

    def test_no_mass_settles_on_target(self):
        assert predict_settling_angle(1.2, 0.0, 1.5) == 1.2
        assert steady_state_error_degrees(1.2, 0.0, 1.5) == 0.0

    def test_low_gain_heavy_mass_stays_finite_and_in_range(self):
        settling = predict_settling_angle(3 * math.pi / 4, 1.0, 0.1)
        assert math.isfinite(settling)
        assert 0.0 <= settling <= math.pi
        assert math.isfinite(steady_state_error_degrees(3 * math.pi / 4, 1.0, 0.1))

    def test_mass_sags_towards_vertical(self):
        target = math.pi / 4
        settling = predict_settling_angle(target, 0.5, 1.5)
        assert settling < target
        assert np.isclose(settling, target - 0.5 * math.cos(settling) / 1.5, atol=1e-3)
