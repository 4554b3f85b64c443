"""
Unit tests for the oven thermal model and heater mapping.
"""

import numpy as np
import pytest

from blocks.oven import OvenPlant
from simlib.models.state import OvenParams, OvenState
from simlib.numeric.control import heater_duty, oven_step


@pytest.mark.unit
class TestHeaterDuty:

    def test_half_of_clamped_output(self):
        assert heater_duty(100.0) == 50.0
        assert heater_duty(200.0) == 100.0

    def test_saturates(self):
        assert heater_duty(500.0) == 100.0
        assert heater_duty(-20.0) == 0.0


@pytest.mark.unit
class TestOvenStep:

    def test_ambient_with_heater_off_is_steady(self):
        assert oven_step(70.0, 0.0, 50.0, 0.02, 100.0, 70.0, 1.0 / 30.0) == 70.0

    def test_heating_rate(self):
        # (100 - 0) / 50 * (1/30) * 60 = 4 degrees per tick
        t = oven_step(70.0, 100.0, 50.0, 0.02, 100.0, 70.0, 1.0 / 30.0)
        assert np.isclose(t, 74.0)

    def test_cools_towards_ambient(self):
        t = oven_step(370.0, 0.0, 50.0, 0.02, 100.0, 70.0, 1.0 / 30.0)
        # loss = 0.02 * 300 = 6 -> -6 / 50 * 2 = -0.24
        assert np.isclose(t, 369.76)

    def test_open_door_multiplies_loss(self):
        closed = oven_step(370.0, 0.0, 50.0, 0.02, 100.0, 70.0, 1.0 / 30.0)
        opened = oven_step(370.0, 0.0, 50.0, 0.02, 100.0, 70.0, 1.0 / 30.0, door_open=True)
        assert np.isclose(370.0 - opened, 5 * (370.0 - closed))


@pytest.mark.unit
class TestOvenPlant:

    def test_starts_at_ambient(self):
        state = OvenPlant().initial_state(OvenParams(ambient=65.0))
        assert state == OvenState(temperature=65.0)

    def test_step_uses_heater_duty(self):
        plant = OvenPlant()
        params = OvenParams()
        state = plant.step(OvenState(temperature=70.0), 400.0, params, 1.0 / 30.0)
        assert np.isclose(state.temperature, 74.0), "Output above 200 must saturate at 100 % duty"

    def test_power_is_duty_fraction(self):
        plant = OvenPlant()
        assert np.isclose(plant.power(100.0, OvenParams()), 0.5)
        assert plant.power(-10.0, OvenParams()) == 0.0

    def test_integration_band_only_when_enabled(self):
        plant = OvenPlant()
        assert plant.control_limits(OvenParams()).integration_band is None
        limits = plant.control_limits(OvenParams(conditional_integration=True, integration_band=40.0))
        assert limits.integration_band == 40.0
        assert limits.output_limits == (0.0, 200.0)

    def test_glow_intensity(self):
        assert OvenPlant.glow_intensity(70.0, 70.0) == 0.0
        assert np.isclose(OvenPlant.glow_intensity(270.0, 70.0), 0.5)
        assert OvenPlant.glow_intensity(900.0, 70.0) == 1.0
        assert OvenPlant.glow_intensity(20.0, 70.0) == 0.0
