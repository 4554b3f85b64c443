"""
Challenge scoring for the tuning and filter-design widgets.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Set

from simlib.engine.simulation_driver import SimulationDriver
from simlib.models.challenge import Challenge, FilterChallenge, Outcome, RunResult
from simlib.models.state import PointerState
from simlib.numeric.filters import frequency_response, response_index

logger = logging.getLogger(__name__)

# Float slack when comparing accumulated dwell time against the requirement
TIME_EPSILON = 1e-9


class SettleEvaluator:
    """
    Decides when a step response has settled.

    A run passes once |error| and |velocity| have both stayed below their
    thresholds for ``dwell`` seconds without interruption. Any sample that
    breaks the condition restarts the dwell. Runs longer than ``max_time``
    time out.

    All times are simulated seconds (accumulated tick ``dt``), not wall time.
    """

    def __init__(self, tolerance=0.02, velocity_threshold=0.1, dwell=0.5, max_time=15.0):
        self.tolerance = tolerance
        self.velocity_threshold = velocity_threshold
        self.dwell = dwell
        self.max_time = max_time
        self.outcome = Outcome.IDLE
        self.elapsed = 0.0
        self.stable_since: Optional[float] = None
        self.result_time: Optional[float] = None

    def start(self):
        self.outcome = Outcome.RUNNING
        self.elapsed = 0.0
        self.stable_since = None
        self.result_time = None

    def cancel(self):
        self.outcome = Outcome.IDLE
        self.stable_since = None

    @property
    def dwell_progress(self) -> float:
        """Fraction of the dwell completed so far, for the progress ring."""
        if self.stable_since is None or self.dwell <= 0:
            return 0.0
        return min(1.0, (self.elapsed - self.stable_since) / self.dwell)

    def observe(self, error: float, velocity: float, dt: float) -> Outcome:
        """Feed one tick of the run; returns the outcome after it."""
        if self.outcome != Outcome.RUNNING:
            return self.outcome

        self.elapsed += dt
        if abs(error) < self.tolerance and abs(velocity) < self.velocity_threshold:
            if self.stable_since is None:
                self.stable_since = self.elapsed
            if self.elapsed - self.stable_since >= self.dwell - TIME_EPSILON:
                self.outcome = Outcome.PASSED
                self.result_time = self.elapsed
                return self.outcome
        else:
            self.stable_since = None

        if self.elapsed > self.max_time:
            self.outcome = Outcome.TIMED_OUT
        return self.outcome


class ResultLog:
    """Run results, most recent first, capped at ``limit`` entries."""

    def __init__(self, limit=10):
        self.limit = limit
        self.results: List[RunResult] = []

    def record(self, result: RunResult):
        self.results.insert(0, result)
        del self.results[self.limit:]

    def clear(self):
        self.results.clear()

    def __len__(self):
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    def best_time(self, challenge: str) -> Optional[float]:
        times = [r.time for r in self.results if r.challenge == challenge and r.time is not None]
        return min(times) if times else None


def par_grade(time: Optional[float], par_time: float) -> str:
    """Short verdict comparing a settle time against the challenge's par."""
    if time is None:
        return "timed out"
    if time <= par_time:
        return "under par"
    return "over par"


class TuningChallengeSession:
    """
    Runs tuning challenges on a pointer driver.

    Starting a run resets the plant to the challenge's start angle, target
    and mass, then scores every tick with a SettleEvaluator. When the run
    passes or times out the driver is paused and a RunResult with the gains
    in effect is logged.
    """

    def __init__(self, driver: SimulationDriver, challenges: Sequence[Challenge],
                 evaluator: Optional[SettleEvaluator] = None, result_limit: int = 10):
        if not challenges:
            raise ValueError("At least one challenge is required")
        self.driver = driver
        self.challenges = list(challenges)
        self.evaluator = evaluator or SettleEvaluator()
        self.log = ResultLog(result_limit)
        self.index = 0
        self.driver.add_tick_listener(self._on_tick)
        self._load_challenge()

    @property
    def challenge(self) -> Challenge:
        return self.challenges[self.index]

    @property
    def outcome(self) -> Outcome:
        return self.evaluator.outcome

    @property
    def elapsed(self) -> float:
        return self.evaluator.elapsed

    def select(self, index: int):
        """Switch challenge; any run in progress is abandoned."""
        self.index = max(0, min(len(self.challenges) - 1, int(index)))
        self.evaluator.cancel()
        self._load_challenge()
        logger.info(f"Selected challenge '{self.challenge.name}'")

    def _load_challenge(self):
        ch = self.challenge
        self.driver.pause()
        self.driver.set_params(mass=ch.mass)
        self.driver.set_target(ch.target_angle)
        self.driver.reset(PointerState(angle=ch.start_angle))

    def start(self):
        """idle -> running from the challenge's declared start condition."""
        self._load_challenge()
        self.evaluator.start()
        self.driver.start()
        logger.info(f"Challenge '{self.challenge.name}' started with "
                    f"Kp={self.driver.gains.kp:.2f} Ki={self.driver.gains.ki:.2f} Kd={self.driver.gains.kd:.2f}")

    def _on_tick(self, driver, step):
        if self.evaluator.outcome != Outcome.RUNNING:
            return
        error = driver.target - driver.state.angle
        outcome = self.evaluator.observe(error, driver.state.angular_velocity, driver.dt)
        if outcome in (Outcome.PASSED, Outcome.TIMED_OUT):
            driver.pause()
            gains = driver.gains
            result = RunResult(self.challenge.name, gains.kp, gains.ki, gains.kd,
                               self.evaluator.result_time)
            self.log.record(result)
            if result.passed:
                logger.info(f"Challenge '{self.challenge.name}' passed in {result.time:.2f}s "
                            f"({par_grade(result.time, self.challenge.par_time)})")
            else:
                logger.info(f"Challenge '{self.challenge.name}' timed out")


class FilterChallengeEvaluator:
    """
    Frequency-response check for the filter-design challenges.

    A design passes when every signal tone keeps at least ``pass_threshold``
    of its amplitude and every noise tone is attenuated to at most
    ``reject_threshold``. Completion is recorded once per challenge id.
    """

    def __init__(self, challenges: Iterable[FilterChallenge],
                 pass_threshold=0.5, reject_threshold=0.3, points=100):
        self.challenges = list(challenges)
        self.pass_threshold = pass_threshold
        self.reject_threshold = reject_threshold
        self.points = points
        self.completed: Set[str] = set()

    def is_passing(self, coeffs, challenge: FilterChallenge) -> bool:
        response = frequency_response(coeffs, self.points)
        for freq in challenge.signal_freqs:
            if response[response_index(freq, self.points)] < self.pass_threshold:
                return False
        for freq in challenge.noise_freqs:
            if response[response_index(freq, self.points)] > self.reject_threshold:
                return False
        return True

    def evaluate(self, coeffs, challenge: FilterChallenge) -> bool:
        """Check the current design; marks the challenge complete when it passes."""
        passing = self.is_passing(coeffs, challenge)
        if passing and challenge.id not in self.completed:
            self.completed.add(challenge.id)
            logger.info(f"Filter challenge '{challenge.id}' completed")
        return passing

    def is_complete(self, challenge_id: str) -> bool:
        return challenge_id in self.completed

    @property
    def all_complete(self) -> bool:
        return all(ch.id in self.completed for ch in self.challenges)
