"""
End-to-end closed-loop runs of the pointer and oven plants.

These drive the same SimulationDriver the widgets use, headless, for long
enough to reach steady state and compare against the analytic predictions.
"""

import math

import numpy as np
import pytest

from blocks.pid import PIDController
from blocks.pointer import PointerPlant
from simlib.engine.simulation_driver import SimulationDriver
from simlib.models.state import ControllerGains, PointerParams
from simlib.numeric.control import predict_settling_angle, steady_state_error_degrees

# Long enough for the lightly damped pointer to ring down completely
SETTLE_SECONDS = 300.0


def pointer_loop(mode, gains, mass):
    params = PointerParams(mass=mass, min_target=0.0, max_target=math.pi)
    return SimulationDriver(PointerPlant(), PIDController(mode), gains, params, target=3 * math.pi / 4)


@pytest.mark.integration
class TestPointerScenarios:
    """P, PI and PID loops on the pointer."""

    def test_p_without_mass_reaches_target(self):
        driver = pointer_loop("P", ControllerGains(kp=1.5), mass=0.0)
        driver.run_for(SETTLE_SECONDS)
        assert abs(driver.state.angle - driver.target) < 1e-4
        assert abs(driver.state.angular_velocity) < 1e-4

    def test_p_with_mass_settles_at_prediction(self):
        driver = pointer_loop("P", ControllerGains(kp=1.5), mass=0.5)
        driver.run_for(SETTLE_SECONDS)
        predicted = predict_settling_angle(driver.target, 0.5, 1.5)
        assert np.isclose(driver.state.angle, predicted, atol=1e-3), \
            f"Settled at {driver.state.angle:.4f}, predicted {predicted:.4f}"
        # The mass drags the arm past the target, away from vertical
        assert driver.state.angle > driver.target

    def test_p_offset_matches_readout(self):
        driver = pointer_loop("P", ControllerGains(kp=1.5), mass=0.5)
        driver.run_for(SETTLE_SECONDS)
        offset = math.degrees(driver.target - driver.state.angle)
        assert np.isclose(offset, steady_state_error_degrees(driver.target, 0.5, 1.5), atol=0.1)

    def test_pi_removes_offset(self):
        driver = pointer_loop("PI", ControllerGains(kp=3.5, ki=0.15), mass=0.8)
        driver.run_for(SETTLE_SECONDS)
        assert abs(driver.state.angle - driver.target) < 1e-3

    def test_pid_settles_faster_than_pi(self):
        pi = pointer_loop("PI", ControllerGains(kp=2.0, ki=0.3), mass=0.5)
        pid = pointer_loop("PID", ControllerGains(kp=2.0, ki=0.3, kd=0.8), mass=0.5)
        pi.run_for(5.0)
        pid.run_for(5.0)
        pi_ripple = np.ptp(pi.history.measured()[-60:])
        pid_ripple = np.ptp(pid.history.measured()[-60:])
        assert pid_ripple < pi_ripple

    def test_angle_never_leaves_dial(self):
        driver = pointer_loop("PID", ControllerGains(kp=5.0, ki=2.0, kd=0.0), mass=1.0)
        driver.set_target(math.pi)
        for _ in range(1200):
            driver.tick()
            assert 0.0 <= driver.state.angle <= math.pi


@pytest.mark.integration
class TestOvenScenarios:
    """PI temperature control of the oven."""

    def test_reaches_setpoint(self, oven_driver):
        oven_driver.run_for(200.0)
        assert abs(oven_driver.state.temperature - 350.0) < 2.0

    def test_recovers_from_open_door(self, oven_driver):
        oven_driver.run_for(200.0)
        oven_driver.set_params(door_open=True)
        oven_driver.run_for(5.0)
        dipped = oven_driver.state.temperature
        oven_driver.run_for(200.0)
        assert dipped < 349.0
        assert abs(oven_driver.state.temperature - 350.0) < 2.0

    def test_conditional_integration_holds_integral_far_from_target(self, oven_driver):
        oven_driver.set_params(conditional_integration=True)
        oven_driver.tick()
        assert oven_driver.state.integral == 0.0

        oven_driver.set_params(conditional_integration=False)
        oven_driver.reset()
        oven_driver.tick()
        assert oven_driver.state.integral > 0.0

    def test_conditional_integration_still_settles(self, oven_driver):
        oven_driver.set_params(conditional_integration=True)
        oven_driver.run_for(200.0)
        assert abs(oven_driver.state.temperature - 350.0) < 2.0
