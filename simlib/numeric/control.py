"""
Discrete-time controller and plant update equations.

Every function here is pure: it takes the previous state plus parameters and
returns the next state. The simulation driver threads state through these
calls once per frame with a fixed time step.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# Below this the proportional gain is treated as zero by the settling predictor
KP_EPSILON = 1e-6


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value into the closed interval [lo, hi]."""
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class PIDStep:
    """Result of one controller update."""
    output: float
    integral: float
    error: float
    p_term: float
    i_term: float
    d_term: float


def pid_step(target: float, measured: float, kp: float, ki: float, kd: float,
             integral: float, prev_error: float, dt: float,
             integral_limit: float,
             output_limits: Tuple[float, float],
             integration_band: Optional[float] = None) -> PIDStep:
    """
    Advance a P/PI/PID controller by one tick.

    Args:
        target: Setpoint.
        measured: Measured process value.
        kp, ki, kd: Controller gains (zero for unused terms).
        integral: Accumulated error*dt from the previous tick.
        prev_error: Error from the previous tick.
        dt: Fixed, non-zero time step.
        integral_limit: Symmetric saturation bound for the integral.
        output_limits: (lo, hi) saturation of the controller output.
        integration_band: When set, the integral only accumulates while
            |error| is below this value (conditional integration).

    Returns:
        PIDStep with the clamped output, the new integral and the error to
        feed back as prev_error on the next tick.
    """
    error = target - measured

    if integration_band is None or abs(error) < integration_band:
        integral = clamp(integral + error * dt, -integral_limit, integral_limit)
    else:
        integral = clamp(integral, -integral_limit, integral_limit)

    derivative = (error - prev_error) / dt

    p_term = kp * error
    i_term = ki * integral
    d_term = kd * derivative
    lo, hi = output_limits
    output = clamp(p_term + i_term + d_term, lo, hi)

    return PIDStep(output=output, integral=integral, error=error,
                   p_term=p_term, i_term=i_term, d_term=d_term)


def gravity_torque(angle: float, mass: float) -> float:
    """Torque exerted by a hanging mass; zero with the arm vertical."""
    return -mass * math.cos(angle)


def pointer_step(angle: float, velocity: float, torque: float, mass: float,
                 inertia: float, friction: float, dt: float,
                 restitution: float = 0.5) -> Tuple[float, float]:
    """
    Integrate the rotational pointer one tick (semi-implicit Euler).

    The angle is confined to [0, pi]. Leaving the range clamps the angle to
    the boundary and reflects the velocity scaled by ``restitution``.

    Returns:
        (angle, velocity) after the step.
    """
    accel = (torque + gravity_torque(angle, mass) - friction * velocity) / inertia
    velocity = velocity + accel * dt
    angle = angle + velocity * dt

    if angle < 0.0:
        angle = 0.0
        velocity = -velocity * restitution
    elif angle > math.pi:
        angle = math.pi
        velocity = -velocity * restitution

    return angle, velocity


def heater_duty(output: float, max_output: float = 200.0) -> float:
    """Map the oven controller output onto a 0-100 % heater duty."""
    return clamp(output, 0.0, max_output) / 2.0


def oven_step(temperature: float, duty: float, thermal_mass: float,
              heat_loss_coeff: float, heater_power: float, ambient: float,
              dt: float, time_scale: float = 60.0, door_open: bool = False,
              door_loss_multiplier: float = 5.0) -> float:
    """Advance the oven temperature (deg F) by one tick for the given duty."""
    heat_in = duty / 100.0 * heater_power
    loss_multiplier = door_loss_multiplier if door_open else 1.0
    heat_loss = heat_loss_coeff * (temperature - ambient) * loss_multiplier
    return temperature + ((heat_in - heat_loss) / thermal_mass) * dt * time_scale


def predict_settling_angle(target: float, mass: float, kp: float,
                           iterations: int = 15) -> Optional[float]:
    """
    Predict where a P-only loop settles under a hanging-mass load.

    Solves settling = target - mass*cos(settling)/kp by fixed-point iteration
    starting from the target. The iteration contracts for the gain ranges the
    widgets expose; it is not a general root finder.

    Returns:
        The settling angle clamped to [0, pi], or None when kp is too close
        to zero for the offset to be defined.
    """
    if abs(kp) < KP_EPSILON:
        return None
    if abs(mass) < 1e-12:
        return target

    settling = target
    for _ in range(iterations):
        settling = target - mass * math.cos(settling) / kp
    return clamp(settling, 0.0, math.pi)


def steady_state_error_degrees(target: float, mass: float, kp: float,
                               iterations: int = 15) -> float:
    """Offset between target and predicted settling angle, in degrees.

    Reported as 0.0 when the prediction is undefined (kp near zero).
    """
    settling = predict_settling_angle(target, mass, kp, iterations)
    if settling is None:
        return 0.0
    return math.degrees(target - settling)
