import logging
import math
from dataclasses import replace

import numpy as np

from blocks.base_block import BasePlant, ControlLimits
from simlib.models.state import PointerState
from simlib.numeric.control import pointer_step

logger = logging.getLogger(__name__)


class PointerPlant(BasePlant):
    """
    Motor-driven pointer on a half dial with an optional hanging mass.

    The angle runs from 0 (pointing right) to pi (pointing left); pi/2 is
    straight up. A hanging mass pulls the arm back towards vertical with a
    torque of -mass*cos(angle).
    """

    def __init__(self, start_angle=math.pi / 2, seed=None):
        self.start_angle = start_angle
        self._rng = np.random.default_rng(seed)

    @property
    def block_name(self):
        return "Pointer"

    def initial_state(self, params):
        return PointerState(angle=self.start_angle)

    def step(self, state, control, params, dt):
        angle, velocity = pointer_step(
            state.angle, state.angular_velocity, control, params.mass,
            params.inertia, params.friction, dt, params.restitution,
        )
        return replace(state, angle=angle, angular_velocity=velocity)

    def measure(self, state, params):
        if params.measurement_noise > 0:
            return state.angle + (self._rng.random() - 0.5) * params.measurement_noise
        return state.angle

    def control_limits(self, params):
        return ControlLimits(
            integral_limit=params.integral_limit,
            output_limits=(-params.max_torque, params.max_torque),
        )

    def target_range(self, params):
        return params.min_target, params.max_target
