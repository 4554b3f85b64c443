"""
Simulation Driver - per-frame stepping of one widget's simulation.

The driver owns the authoritative plant state. Each scheduled frame it runs
at most one fixed-step tick (controller update, then plant update) and
records the result in the history buffer. Rendering reads the state after
the tick has been committed.
"""

import logging
from dataclasses import replace
from typing import Any, Callable, List, Optional, Tuple

from simlib.models.history import HistoryBuffer
from simlib.models.state import ControllerGains, TickTelemetry
from simlib.numeric.control import PIDStep, clamp

logger = logging.getLogger(__name__)

DEFAULT_DT = 1.0 / 60.0


class FrameDriver:
    """
    Run/pause state and simulated clock for a frame-driven widget.

    Simulated time only advances on executed ticks: while paused, held or
    ineligible (hidden) nothing accumulates, and there is no catch-up when
    the widget becomes eligible again.

    Attributes:
        dt: Fixed time step per tick (seconds of simulated time)
        running: Whether ticks execute (paused widgets still redraw)
        eligible: Host-supplied visibility flag; False suspends everything
        hold: Temporarily suspends ticking, e.g. while a handle is dragged
        sim_time: Simulated time accumulated over executed ticks
        tick_count: Number of executed ticks since the last reset
    """

    def __init__(self, dt: float = DEFAULT_DT, running: bool = True) -> None:
        if dt <= 0:
            raise ValueError(f"Time step must be positive, got {dt}")
        self.dt: float = dt
        self.running: bool = running
        self.eligible: bool = True
        self.hold: bool = False
        self.sim_time: float = 0.0
        self.tick_count: int = 0

    def start(self):
        if not self.running:
            logger.debug(f"{type(self).__name__} started at t={self.sim_time:.3f}")
        self.running = True

    def pause(self):
        if self.running:
            logger.debug(f"{type(self).__name__} paused at t={self.sim_time:.3f}")
        self.running = False

    def toggle(self) -> bool:
        """Flip between running and paused; returns the new running flag."""
        if self.running:
            self.pause()
        else:
            self.start()
        return self.running

    def set_eligible(self, eligible: bool):
        if eligible != self.eligible:
            logger.debug(f"{type(self).__name__} eligibility -> {eligible}")
        self.eligible = bool(eligible)

    @property
    def can_tick(self) -> bool:
        return self.running and self.eligible and not self.hold

    def tick(self):
        """Advance the simulated clock by one step."""
        self.sim_time += self.dt
        self.tick_count += 1

    def frame(self) -> bool:
        """
        Run one scheduled frame.

        Returns:
            True if a tick was executed. The caller redraws whenever the
            driver is eligible, ticked or not.
        """
        if not self.can_tick:
            return False
        self.tick()
        return True

    def reset_clock(self):
        self.sim_time = 0.0
        self.tick_count = 0


class SimulationDriver(FrameDriver):
    """
    Closed-loop driver: one plant, one controller, one history buffer.

    Gains, plant parameters and the target are replaced as whole values and
    read once at the start of each tick, so a change made between frames
    applies from the next tick onwards and never half-way through one.

    Attributes:
        plant: BasePlant implementation
        controller: BaseController implementation
        gains: ControllerGains in effect
        params: Plant parameter record (PointerParams / OvenParams)
        target: Current setpoint, always within the plant's target range
        state: Authoritative plant state
        history: Bounded (measured, target) history
        telemetry: Values from the most recent tick, for readouts
    """

    def __init__(self, plant: Any, controller: Any, gains: ControllerGains,
                 params: Any, target: float, dt: float = DEFAULT_DT,
                 history_capacity: int = 200, initial_state: Any = None,
                 running: bool = True) -> None:
        super().__init__(dt, running)
        self.plant = plant
        self.controller = controller
        self.gains: ControllerGains = gains
        self.params = params
        self.target: float = self._clamp_target(target)
        self.history = HistoryBuffer(history_capacity)
        self.telemetry = TickTelemetry()
        self._initial_state = initial_state
        self.state = initial_state if initial_state is not None else plant.initial_state(params)
        self._tick_listeners: List[Callable[["SimulationDriver", PIDStep], None]] = []

    # -- parameter updates -------------------------------------------------

    def _clamp_target(self, value: float) -> float:
        lo, hi = self.plant.target_range(self.params)
        return clamp(float(value), lo, hi)

    def set_target(self, value: float) -> float:
        """Set the setpoint (clamped to the legal range) and return it."""
        self.target = self._clamp_target(value)
        return self.target

    def set_gains(self, gains: ControllerGains):
        self.gains = gains

    def set_gain(self, name: str, value: float):
        self.gains = self.gains.with_gain(name, value)

    def set_params(self, **changes):
        """Replace plant parameters, e.g. ``set_params(mass=0.5)``."""
        self.params = replace(self.params, **changes)
        self.target = self._clamp_target(self.target)

    def add_tick_listener(self, listener: Callable[["SimulationDriver", PIDStep], None]):
        """Call ``listener(driver, step)`` after every committed tick."""
        self._tick_listeners.append(listener)

    # -- stepping ----------------------------------------------------------

    def advance(self, state: Any, target: float, gains: ControllerGains,
                params: Any) -> Tuple[Any, PIDStep]:
        """
        Pure composition of one tick: measure, controller step, plant step.

        Nothing on the driver is modified; ``tick`` commits the result.
        """
        measured = self.plant.measure(state, params)
        limits = self.plant.control_limits(params)
        result, state = self.controller.step(state, target, measured, gains, limits, self.dt)
        state = self.plant.step(state, result.output, params, self.dt)
        return state, result

    def tick(self):
        gains, params, target = self.gains, self.params, self.target
        state, result = self.advance(self.state, target, gains, params)

        self.state = state
        self.history.push(state.measured, target)
        self.telemetry = TickTelemetry(
            error=result.error,
            p_term=result.p_term,
            i_term=result.i_term,
            d_term=result.d_term,
            output=result.output,
            power=self.plant.power(result.output, params),
            measured=state.measured,
        )
        super().tick()

        for listener in self._tick_listeners:
            listener(self, result)

    def run_for(self, seconds: float) -> int:
        """Execute ticks back to back for ``seconds`` of simulated time.

        Ignores run/pause and eligibility; used for headless evaluation.
        """
        steps = int(round(seconds / self.dt))
        for _ in range(steps):
            self.tick()
        return steps

    def reset(self, state: Optional[Any] = None):
        """
        Re-create the initial state, clear history and the simulated clock.

        Args:
            state: Optional explicit start state, remembered for later resets.
        """
        if state is not None:
            self._initial_state = state
        if self._initial_state is not None:
            self.state = replace(self._initial_state)
        else:
            self.state = self.plant.initial_state(self.params)
        self.history.clear()
        self.telemetry = TickTelemetry()
        self.reset_clock()
        logger.debug(f"{self.plant.block_name} driver reset")
