"""
Tuning challenge runs end to end: session, settle evaluator and driver.
"""

import math

import pytest

from blocks.pid import PIDController
from blocks.pointer import PointerPlant
from simlib.engine.simulation_driver import SimulationDriver
from simlib.models.challenge import DEFAULT_CHALLENGES, Challenge, Outcome
from simlib.models.state import ControllerGains, PointerParams
from simlib.services.challenge_service import SettleEvaluator, TuningChallengeSession

MAX_FRAMES = 2000


@pytest.fixture
def session():
    params = PointerParams(friction=0.3, min_target=0.0, max_target=math.pi)
    driver = SimulationDriver(PointerPlant(), PIDController("PID"), ControllerGains(kp=5.0, kd=1.0),
                              params, target=math.pi / 2, running=False)
    challenges = [Challenge.from_dict(d) for d in DEFAULT_CHALLENGES]
    return TuningChallengeSession(driver, challenges, SettleEvaluator(), result_limit=10)


def run_to_completion(session):
    frames = 0
    while session.outcome == Outcome.RUNNING and frames < MAX_FRAMES:
        session.driver.frame()
        frames += 1
    return session.outcome


@pytest.mark.integration
class TestTuningSession:

    def test_requires_challenges(self):
        driver = SimulationDriver(PointerPlant(), PIDController("PID"), ControllerGains(),
                                  PointerParams(), target=1.0)
        with pytest.raises(ValueError):
            TuningChallengeSession(driver, [])

    def test_loading_a_challenge_pauses_at_start_condition(self, session):
        challenge = session.challenge
        assert not session.driver.running
        assert session.driver.state.angle == challenge.start_angle
        assert session.driver.target == challenge.target_angle
        assert session.outcome == Outcome.IDLE

    def test_well_tuned_pd_passes_basics(self, session):
        session.start()
        assert run_to_completion(session) == Outcome.PASSED
        result = session.log.results[0]
        assert result.passed
        assert result.challenge == "Basics"
        assert (result.kp, result.ki, result.kd) == (5.0, 0.0, 1.0)
        # Passing includes the full dwell after first entering the band
        assert session.evaluator.dwell <= result.time < session.evaluator.max_time
        assert not session.driver.running, "Driver pauses when the run ends"

    def test_result_time_is_simulated_seconds(self, session):
        session.start()
        frames = 0
        while session.outcome == Outcome.RUNNING and frames < MAX_FRAMES:
            session.driver.frame()
            frames += 1
        result = session.log.results[0]
        assert math.isclose(result.time, session.driver.sim_time)
        assert math.isclose(result.time, frames * session.driver.dt)

    def test_p_only_times_out_on_heavy(self, session):
        session.select(3)
        session.driver.set_gains(ControllerGains(kp=5.0))
        session.start()
        assert run_to_completion(session) == Outcome.TIMED_OUT
        result = session.log.results[0]
        assert not result.passed
        assert result.challenge == "Heavy"
        assert session.elapsed > session.evaluator.max_time

    def test_zero_gain_times_out(self, session):
        session.driver.set_gains(ControllerGains(kp=0.0))
        session.start()
        assert run_to_completion(session) == Outcome.TIMED_OUT
        assert session.driver.state.angle == session.challenge.start_angle

    def test_select_abandons_run(self, session):
        session.start()
        for _ in range(10):
            session.driver.frame()
        session.select(1)
        assert session.outcome == Outcome.IDLE
        assert not session.driver.running
        assert session.driver.params.mass == session.challenge.mass
        assert session.driver.state.angle == session.challenge.start_angle
        assert len(session.log) == 0

    def test_restart_resets_plant(self, session):
        session.start()
        run_to_completion(session)
        session.start()
        assert session.outcome == Outcome.RUNNING
        assert session.elapsed == 0.0
        assert session.driver.state.angle == session.challenge.start_angle
        assert session.driver.sim_time == 0.0

    def test_results_accumulate_most_recent_first(self, session):
        session.start()
        run_to_completion(session)
        session.select(1)
        session.start()
        run_to_completion(session)
        assert [r.challenge for r in session.log] == ["Weighted", "Basics"]
