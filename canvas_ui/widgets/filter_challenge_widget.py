"""
Filter design challenge: choose filter type, cutoff and taps so every
signal tone passes and every noise tone is rejected.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Optional
from PyQt5.QtWidgets import QHBoxLayout, QVBoxLayout, QLabel, QPushButton, QComboBox, QButtonGroup

from simlib.config_manager import get_config
from simlib.engine.simulation_driver import FrameDriver
from simlib.models.challenge import FilterChallenge
from simlib.models.state import FilterSpec
from simlib.numeric.filters import FILTER_KINDS, apply_fir, frequency_response
from simlib.numeric.signals import challenge_signal
from simlib.services.challenge_service import FilterChallengeEvaluator
from canvas_ui.renderers.filter_renderer import FilterRenderer
from canvas_ui.widgets.simulation_canvas import SimulationWidget
from canvas_ui.widgets.tuning_panel import TuningPanel

logger = logging.getLogger(__name__)


class FilterChallengeWidget(SimulationWidget):

    def __init__(self, config: Optional[Dict[str, Any]] = None, parent=None):
        manager = get_config()
        self.settings = s = manager.section("filter_challenge", config)
        super().__init__(FrameDriver(manager.get("simulation.dt", 1.0 / 60.0)), parent)

        self.challenges = [FilterChallenge.from_dict(c) for c in s["challenges"]]
        if not self.challenges:
            raise ValueError("At least one filter challenge is required")
        self.evaluator = FilterChallengeEvaluator(
            self.challenges, pass_threshold=s["pass_threshold"], reject_threshold=s["reject_threshold"])
        self.index = 0
        self.spec = FilterSpec(kind=s["kind"], cutoff=s["cutoff"], taps=int(s["taps"]),
                               window="hamming", bandwidth=s["bandwidth"])
        self._coeffs = self.spec.coefficients()
        self.passing = False

        self.renderer = FilterRenderer()
        self.view = self.add_view(self.render_canvas, s["canvas"])
        self._build_ui()
        self.evaluate()

    @property
    def challenge(self) -> FilterChallenge:
        return self.challenges[self.index]

    def _build_ui(self):
        layout = QVBoxLayout(self)

        picker = QHBoxLayout()
        self.challenge_group = QButtonGroup(self)
        self.challenge_buttons = []
        for index, challenge in enumerate(self.challenges):
            button = QPushButton(challenge.name)
            button.setCheckable(True)
            button.setChecked(index == 0)
            self.challenge_group.addButton(button, index)
            self.challenge_buttons.append(button)
            picker.addWidget(button)
        self.challenge_group.buttonClicked[int].connect(self.select_challenge)
        layout.addLayout(picker)

        self.description_label = QLabel(self.challenge.description)
        layout.addWidget(self.description_label)
        layout.addWidget(self.view)

        controls = QHBoxLayout()
        controls.addWidget(QLabel("Type:"))
        self.kind_combo = QComboBox()
        self.kind_combo.addItems(FILTER_KINDS)
        self.kind_combo.setCurrentText(self.spec.kind)
        self.kind_combo.currentTextChanged.connect(self.set_kind)
        controls.addWidget(self.kind_combo)
        self.run_button = QPushButton("Pause")
        self.run_button.clicked.connect(self._on_run_clicked)
        controls.addWidget(self.run_button)
        controls.addStretch(1)
        self.progress_label = QLabel()
        controls.addWidget(self.progress_label)
        layout.addLayout(controls)

        ranges = self.settings["ranges"]
        self.panel = TuningPanel(self)
        self.panel.add_slider("cutoff", "Cutoff", self.spec.cutoff, ranges["cutoff"], step=0.01)
        self.panel.add_slider("taps", "Taps", self.spec.taps, ranges["taps"], step=2)
        self.panel.value_changed.connect(self.on_parameter_changed)
        layout.addWidget(self.panel)

    def _on_run_clicked(self):
        running = self.toggle_running()
        self.run_button.setText("Pause" if running else "Play")

    # ── Design changes ──

    def _update_spec(self, **changes):
        self.spec = replace(self.spec, **changes)
        self._coeffs = self.spec.coefficients()
        self.evaluate()
        self.view.update()

    def on_parameter_changed(self, name, value):
        if name == "taps":
            self._update_spec(taps=int(round(value)))
        elif name == "cutoff":
            self._update_spec(cutoff=value)

    def set_kind(self, kind):
        self._update_spec(kind=kind)

    def select_challenge(self, index):
        self.index = max(0, min(len(self.challenges) - 1, int(index)))
        self.description_label.setText(self.challenge.description)
        logger.info(f"Filter challenge '{self.challenge.id}' selected")
        self.evaluate()
        self.view.update()

    # ── Scoring ──

    def evaluate(self) -> bool:
        self.passing = self.evaluator.evaluate(self._coeffs, self.challenge)
        for button, challenge in zip(self.challenge_buttons, self.challenges):
            mark = "✓ " if self.evaluator.is_complete(challenge.id) else ""
            button.setText(f"{mark}{challenge.name}")
        done = sum(1 for ch in self.challenges if self.evaluator.is_complete(ch.id))
        text = f"{done}/{len(self.challenges)} complete"
        if self.evaluator.all_complete:
            text += " - all challenges solved!"
        self.progress_label.setText(text)
        return self.passing

    def after_frame(self, ticked):
        self.evaluate()

    def render_canvas(self, painter, width, height):
        ch = self.challenge
        signal = challenge_signal(self.driver.sim_time, ch.signal_freqs, ch.noise_freqs)
        self.renderer.draw_filter_challenge(
            painter, width, height, ch.name, frequency_response(self._coeffs, self.evaluator.points),
            self.spec.cutoff, ch.signal_freqs, ch.noise_freqs,
            signal, apply_fir(signal, self._coeffs), self.passing,
        )
