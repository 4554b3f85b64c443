"""
Simulation State Records

Plain value records for plant state, controller gains and plant parameters.
Each widget owns one of each; nothing here is shared between widgets.
"""

import math
from dataclasses import dataclass, replace

import numpy as np

from simlib.numeric.filters import design_fir


@dataclass
class PointerState:
    """Rotational pointer: angle in radians, confined to [0, pi]."""
    angle: float = math.pi / 2
    angular_velocity: float = 0.0
    integral: float = 0.0
    prev_error: float = 0.0

    @property
    def measured(self) -> float:
        return self.angle


@dataclass
class OvenState:
    """Oven chamber temperature in degrees Fahrenheit."""
    temperature: float = 70.0
    integral: float = 0.0
    prev_error: float = 0.0

    @property
    def measured(self) -> float:
        return self.temperature


@dataclass(frozen=True)
class ControllerGains:
    """Gains read by the controller each tick. Replaced, never mutated."""
    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0

    def with_gain(self, name: str, value: float) -> "ControllerGains":
        """Return a copy with one gain changed."""
        return replace(self, **{name: float(value)})


@dataclass(frozen=True)
class PointerParams:
    """Physical constants of the motor-driven pointer."""
    inertia: float = 0.12
    friction: float = 0.02
    max_torque: float = 2.0
    mass: float = 0.0
    restitution: float = 0.5
    integral_limit: float = 10.0
    measurement_noise: float = 0.0
    min_target: float = math.pi / 4
    max_target: float = 3 * math.pi / 4


@dataclass(frozen=True)
class OvenParams:
    """Thermal constants of the oven and its heater."""
    thermal_mass: float = 50.0
    heat_loss_coeff: float = 0.02
    heater_power: float = 100.0
    ambient: float = 70.0
    door_open: bool = False
    door_loss_multiplier: float = 5.0
    time_scale: float = 60.0
    integral_limit: float = 1000.0
    max_output: float = 200.0
    conditional_integration: bool = False
    integration_band: float = 50.0
    min_target: float = 70.0
    max_target: float = 500.0


@dataclass
class TickTelemetry:
    """Values computed during the last tick, kept for readouts."""
    error: float = 0.0
    p_term: float = 0.0
    i_term: float = 0.0
    d_term: float = 0.0
    output: float = 0.0
    power: float = 0.0
    measured: float = 0.0


@dataclass(frozen=True)
class FilterSpec:
    """FIR design parameters; coefficients are derived from these."""
    kind: str = "lowpass"
    cutoff: float = 0.25
    taps: int = 15
    window: str = "hamming"
    bandwidth: float = 0.1

    def coefficients(self) -> np.ndarray:
        return design_fir(self.kind, self.cutoff, self.taps, self.window, self.bandwidth)


@dataclass(frozen=True)
class IIRSpec:
    """IIR smoother parameters."""
    alpha: float = 0.2
    order: int = 1

