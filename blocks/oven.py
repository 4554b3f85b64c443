import logging
from dataclasses import replace

from blocks.base_block import BasePlant, ControlLimits
from simlib.models.state import OvenState
from simlib.numeric.control import heater_duty, oven_step

logger = logging.getLogger(__name__)


class OvenPlant(BasePlant):
    """
    Lumped thermal model of an oven with an electric heater.

    The controller output is clamped to [0, 200] and halved into a heater
    duty in percent. Opening the door multiplies the heat loss.
    """

    @property
    def block_name(self):
        return "Oven"

    def initial_state(self, params):
        return OvenState(temperature=params.ambient)

    def step(self, state, control, params, dt):
        temperature = oven_step(
            state.temperature, heater_duty(control, params.max_output),
            params.thermal_mass, params.heat_loss_coeff, params.heater_power,
            params.ambient, dt, params.time_scale,
            params.door_open, params.door_loss_multiplier,
        )
        return replace(state, temperature=temperature)

    def control_limits(self, params):
        band = params.integration_band if params.conditional_integration else None
        return ControlLimits(
            integral_limit=params.integral_limit,
            output_limits=(0.0, params.max_output),
            integration_band=band,
        )

    def target_range(self, params):
        return params.min_target, params.max_target

    def power(self, control, params):
        return heater_duty(control, params.max_output) / 100.0

    @staticmethod
    def glow_intensity(temperature, ambient):
        """0 at ambient, 1 at 400 F above ambient."""
        return max(0.0, min((temperature - ambient) / 400.0, 1.0))
