from abc import ABC, abstractmethod
from typing import NamedTuple, Optional, Tuple


class ControlLimits(NamedTuple):
    """Saturation limits a plant imposes on the controller driving it."""
    integral_limit: float
    output_limits: Tuple[float, float]
    integration_band: Optional[float] = None


class BasePlant(ABC):
    """
    Abstract base class for simulated plants.

    A plant owns no state of its own. The driver hands it the previous state
    and the controller output and keeps whatever it returns.
    """

    @property
    @abstractmethod
    def block_name(self):
        """The user-facing name of the plant."""
        pass

    @abstractmethod
    def initial_state(self, params):
        """
        The state the plant starts from after mount or reset.

        :param params: The plant's parameter record.
        :return: A fresh state record.
        """
        pass

    @abstractmethod
    def step(self, state, control, params, dt):
        """
        Advance the physical state by one tick.

        :param state: State after the controller update (integral and
            prev_error already refreshed).
        :param control: The saturated controller output.
        :param params: The plant's parameter record.
        :param dt: Fixed time step.
        :return: The next state record.
        """
        pass

    @abstractmethod
    def control_limits(self, params) -> ControlLimits:
        """Integral and output saturation for controllers driving this plant."""
        pass

    @abstractmethod
    def target_range(self, params) -> Tuple[float, float]:
        """Legal range of the setpoint."""
        pass

    def measure(self, state, params):
        """
        The value the controller sees. Plants with sensor noise override this.

        :return: The measured process value.
        """
        return state.measured

    def power(self, control, params):
        """
        Controller output as a signed fraction of the actuator's range, for
        readouts and the power indicator.
        """
        lo, hi = self.control_limits(params).output_limits
        span = max(abs(lo), abs(hi))
        return control / span if span else 0.0


class BaseController(ABC):
    """
    Abstract base class for controllers.
    """

    @property
    @abstractmethod
    def block_name(self):
        """The user-facing name of the controller."""
        pass

    @abstractmethod
    def step(self, state, target, measured, gains, limits, dt):
        """
        Compute one control update.

        :param state: Plant state carrying ``integral`` and ``prev_error``.
        :param target: Current setpoint.
        :param measured: Measured process value.
        :param gains: ControllerGains in effect for this tick.
        :param limits: ControlLimits from the plant.
        :param dt: Fixed time step.
        :return: Tuple of (PIDStep, state with updated integral/prev_error).
        """
        pass
