"""
Tuning challenge widget: pick a scenario, set Kp/Ki/Kd, press Start and
try to settle the pointer on the target before the time limit.
"""

import logging
import math
from typing import Any, Dict, Optional
from PyQt5.QtWidgets import (
    QHBoxLayout, QVBoxLayout, QLabel, QPushButton, QListWidget, QButtonGroup, QProgressBar
)
from PyQt5.QtCore import QRectF

from blocks.pid import PIDController
from blocks.pointer import PointerPlant
from simlib.config_manager import get_config
from simlib.engine.simulation_driver import SimulationDriver
from simlib.models.challenge import Challenge, Outcome
from simlib.models.state import ControllerGains, PointerParams
from simlib.services.challenge_service import SettleEvaluator, TuningChallengeSession, par_grade
from canvas_ui.renderers.canvas_renderer import mono_font
from canvas_ui.renderers.dial_renderer import DialRenderer
from canvas_ui.widgets.simulation_canvas import SimulationWidget
from canvas_ui.widgets.tuning_panel import TuningPanel

logger = logging.getLogger(__name__)

OUTCOME_BANNERS = {
    Outcome.PASSED: ("PASSED", 'success'),
    Outcome.TIMED_OUT: ("TIMED OUT", 'error'),
}


class TuningChallengeWidget(SimulationWidget):

    def __init__(self, config: Optional[Dict[str, Any]] = None, parent=None):
        manager = get_config()
        self.settings = s = manager.section("tuning_challenge", config)
        ps = manager.section("pointer")
        challenges = [Challenge.from_dict(c) for c in s["challenges"]]

        params = PointerParams(
            inertia=ps["inertia"], friction=s["friction"], max_torque=ps["max_torque"],
            restitution=ps["restitution"], integral_limit=ps["integral_limit"],
            min_target=0.0, max_target=math.pi,
        )
        driver = SimulationDriver(
            PointerPlant(), PIDController("PID"),
            ControllerGains(kp=s["kp"], ki=s["ki"], kd=s["kd"]), params,
            target=challenges[0].target_angle, dt=manager.get("simulation.dt", 1.0 / 60.0),
            running=False,
        )
        super().__init__(driver, parent)

        evaluator = SettleEvaluator(
            tolerance=s["tolerance"], velocity_threshold=s["velocity_threshold"],
            dwell=s["dwell"], max_time=s["max_time"],
        )
        self.session = TuningChallengeSession(driver, challenges, evaluator, s["result_limit"])
        self._shown_latest = None

        self.dial_renderer = DialRenderer()
        self.dial_view = self.add_view(self.render_dial, s["canvas"])
        self._build_ui()
        self.after_frame(False)

    def _build_ui(self):
        layout = QHBoxLayout(self)
        left = QVBoxLayout()
        left.addWidget(self.dial_view)
        self.dwell_bar = QProgressBar()
        self.dwell_bar.setRange(0, 100)
        self.dwell_bar.setTextVisible(False)
        self.dwell_bar.setFixedHeight(6)
        left.addWidget(self.dwell_bar)
        layout.addLayout(left)

        right = QVBoxLayout()
        picker = QHBoxLayout()
        self.challenge_group = QButtonGroup(self)
        for index, challenge in enumerate(self.session.challenges):
            button = QPushButton(challenge.name)
            button.setCheckable(True)
            button.setToolTip(challenge.description)
            button.setChecked(index == 0)
            self.challenge_group.addButton(button, index)
            picker.addWidget(button)
        self.challenge_group.buttonClicked[int].connect(self.select_challenge)
        right.addLayout(picker)

        self.description_label = QLabel()
        right.addWidget(self.description_label)

        ranges = self.settings["ranges"]
        self.panel = TuningPanel(self)
        self.panel.add_slider("kp", "Kp", self.driver.gains.kp, ranges["kp"], step=0.1, decimals=1)
        self.panel.add_slider("ki", "Ki", self.driver.gains.ki, ranges["ki"], step=0.05)
        self.panel.add_slider("kd", "Kd", self.driver.gains.kd, ranges["kd"], step=0.05)
        self.panel.value_changed.connect(self.on_parameter_changed)
        right.addWidget(self.panel)

        self.start_button = QPushButton("Start")
        self.start_button.clicked.connect(self.start)
        right.addWidget(self.start_button)

        self.status_label = QLabel()
        self.status_label.setFont(mono_font(10, bold=True))
        right.addWidget(self.status_label)

        right.addWidget(QLabel("Results"))
        self.results_list = QListWidget()
        self.results_list.setFont(mono_font(9))
        right.addWidget(self.results_list, stretch=1)
        layout.addLayout(right, stretch=1)

    # ── Actions ──

    def on_parameter_changed(self, name, value):
        self.driver.set_gain(name, value)

    def select_challenge(self, index):
        self.session.select(index)
        self.after_frame(False)
        self.dial_view.update()

    def start(self):
        self.session.start()
        self.after_frame(False)

    # ── Frame hooks ──

    def after_frame(self, ticked):
        challenge = self.session.challenge
        best = self.session.log.best_time(challenge.name)
        best_text = f", best {best:.2f}s" if best is not None else ""
        self.description_label.setText(f"{challenge.description}  (par {challenge.par_time:.1f}s{best_text})")
        self.dwell_bar.setValue(int(self.session.evaluator.dwell_progress * 100))

        outcome = self.session.outcome
        if outcome == Outcome.RUNNING:
            self.status_label.setText(f"Running  {self.session.elapsed:5.2f}s")
        elif outcome == Outcome.PASSED:
            time = self.session.evaluator.result_time
            self.status_label.setText(f"PASSED in {time:.2f}s ({par_grade(time, challenge.par_time)})")
        elif outcome == Outcome.TIMED_OUT:
            self.status_label.setText("TIMED OUT")
        else:
            self.status_label.setText("Ready")
        self.start_button.setEnabled(outcome != Outcome.RUNNING)

        latest = self.session.log.results[0] if len(self.session.log) else None
        if latest is not self._shown_latest:
            self._refresh_results()

    def _refresh_results(self):
        self._shown_latest = self.session.log.results[0] if len(self.session.log) else None
        self.results_list.clear()
        for result in self.session.log:
            verdict = f"{result.time:5.2f}s" if result.passed else "  --  "
            self.results_list.addItem(
                f"{result.challenge:<9} {verdict}  Kp={result.kp:.1f} Ki={result.ki:.2f} Kd={result.kd:.2f}")

    def render_dial(self, painter, width, height):
        d = self.driver
        self.dial_renderer.draw_challenge_dial(painter, width, height, d.state.angle, d.target, d.params.mass)
        banner = OUTCOME_BANNERS.get(self.session.outcome)
        if banner is not None:
            text, color_name = banner
            self.dial_renderer.canvas_renderer.draw_banner(
                painter, QRectF(width / 2 - 60, 10, 120, 26), text, color_name)
