"""
Unit tests for the PID update equation and the PIDController block.
"""

import numpy as np
import pytest

from blocks.base_block import ControlLimits
from blocks.pid import PIDController
from simlib.models.state import ControllerGains, PointerState
from simlib.numeric.control import clamp, pid_step


@pytest.mark.unit
class TestPidStep:
    """Test the pure controller update."""

    def test_proportional_only(self):
        step = pid_step(1.0, 0.25, kp=2.0, ki=0.0, kd=0.0, integral=0.0, prev_error=0.75,
                        dt=0.1, integral_limit=10.0, output_limits=(-5.0, 5.0))
        # error = 0.75; u = 2 * 0.75 = 1.5
        assert np.isclose(step.error, 0.75)
        assert np.isclose(step.output, 1.5)
        assert step.d_term == 0.0

    def test_integral_accumulates_error_times_dt(self):
        step = pid_step(1.0, 0.0, kp=0.0, ki=2.0, kd=0.0, integral=0.5, prev_error=1.0,
                        dt=0.1, integral_limit=10.0, output_limits=(-5.0, 5.0))
        assert np.isclose(step.integral, 0.6)
        assert np.isclose(step.i_term, 1.2)

    def test_integral_is_clamped(self):
        step = pid_step(100.0, 0.0, kp=0.0, ki=1.0, kd=0.0, integral=9.5, prev_error=100.0,
                        dt=0.1, integral_limit=10.0, output_limits=(-50.0, 50.0))
        assert step.integral == 10.0, f"Integral should saturate at 10, got {step.integral}"

        step = pid_step(-100.0, 0.0, kp=0.0, ki=1.0, kd=0.0, integral=-9.5, prev_error=-100.0,
                        dt=0.1, integral_limit=10.0, output_limits=(-50.0, 50.0))
        assert step.integral == -10.0

    def test_derivative_uses_previous_error(self):
        step = pid_step(1.0, 0.0, kp=0.0, ki=0.0, kd=0.5, integral=0.0, prev_error=0.8,
                        dt=0.1, integral_limit=10.0, output_limits=(-5.0, 5.0))
        # (1.0 - 0.8) / 0.1 = 2.0
        assert np.isclose(step.d_term, 1.0)

    def test_output_is_saturated_but_terms_are_not(self):
        step = pid_step(10.0, 0.0, kp=3.0, ki=0.0, kd=0.0, integral=0.0, prev_error=10.0,
                        dt=0.1, integral_limit=10.0, output_limits=(-2.0, 2.0))
        assert step.output == 2.0
        assert np.isclose(step.p_term, 30.0)

    def test_conditional_integration_outside_band(self):
        step = pid_step(350.0, 70.0, kp=0.0, ki=1.0, kd=0.0, integral=12.0, prev_error=280.0,
                        dt=1.0 / 30.0, integral_limit=1000.0, output_limits=(0.0, 200.0),
                        integration_band=50.0)
        assert step.integral == 12.0, "Integral must hold while |error| is outside the band"

    def test_conditional_integration_inside_band(self):
        step = pid_step(350.0, 340.0, kp=0.0, ki=1.0, kd=0.0, integral=12.0, prev_error=10.0,
                        dt=0.5, integral_limit=1000.0, output_limits=(0.0, 200.0),
                        integration_band=50.0)
        assert np.isclose(step.integral, 17.0)

    def test_clamp(self):
        assert clamp(5.0, 0.0, 1.0) == 1.0
        assert clamp(-5.0, 0.0, 1.0) == 0.0
        assert clamp(0.5, 0.0, 1.0) == 0.5


@pytest.mark.unit
class TestPIDController:
    """Test the controller block wrapping pid_step."""

    limits = ControlLimits(integral_limit=10.0, output_limits=(-2.0, 2.0))

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError):
            PIDController("PD")

    def test_p_mode_ignores_ki_and_kd(self):
        controller = PIDController("P")
        assert controller.effective_gains(ControllerGains(1.0, 2.0, 3.0)) == (1.0, 0.0, 0.0)

    def test_pi_mode_ignores_kd(self):
        controller = PIDController("PI")
        assert controller.effective_gains(ControllerGains(1.0, 2.0, 3.0)) == (1.0, 2.0, 0.0)

    def test_step_threads_integral_and_prev_error(self):
        controller = PIDController("PID")
        state = PointerState(angle=1.0, integral=0.2, prev_error=0.1)
        result, new_state = controller.step(state, 1.5, 1.0, ControllerGains(1.0, 1.0, 0.0),
                                            self.limits, 0.1)
        assert np.isclose(new_state.integral, 0.25)
        assert np.isclose(new_state.prev_error, 0.5)
        assert new_state.angle == 1.0, "Controller must not move the plant"
        assert state.integral == 0.2, "Input state must not be mutated"
