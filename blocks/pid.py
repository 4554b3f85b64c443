import logging
from dataclasses import replace

from blocks.base_block import BaseController
from simlib.numeric.control import pid_step

logger = logging.getLogger(__name__)


class PIDController(BaseController):
    """
    P, PI or PID controller with integral clamping.

    The mode decides which gains take part: a P controller ignores Ki and Kd
    even if they are set, so the same gains record can be shared between
    widget variants.
    """

    MODES = ("P", "PI", "PID")

    def __init__(self, mode="PID"):
        if mode not in self.MODES:
            raise ValueError(f"Unknown controller mode: {mode}")
        self.mode = mode

    @property
    def block_name(self):
        return self.mode

    def effective_gains(self, gains):
        """Gains with the terms this mode does not use forced to zero."""
        ki = gains.ki if self.mode in ("PI", "PID") else 0.0
        kd = gains.kd if self.mode == "PID" else 0.0
        return gains.kp, ki, kd

    def step(self, state, target, measured, gains, limits, dt):
        kp, ki, kd = self.effective_gains(gains)
        result = pid_step(
            target, measured, kp, ki, kd,
            integral=state.integral,
            prev_error=state.prev_error,
            dt=dt,
            integral_limit=limits.integral_limit,
            output_limits=limits.output_limits,
            integration_band=limits.integration_band,
        )
        return result, replace(state, integral=result.integral, prev_error=result.error)
