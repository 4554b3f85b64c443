"""
FIR filter demo: windowed-sinc lowpass with adjustable taps, cutoff and
window, shown as coefficients, frequency response and a filtered signal.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Optional
from PyQt5.QtWidgets import QHBoxLayout, QVBoxLayout, QLabel, QPushButton, QComboBox

from simlib.config_manager import get_config
from simlib.engine.simulation_driver import FrameDriver
from simlib.models.state import FilterSpec
from simlib.numeric.filters import WINDOW_TYPES, apply_fir, frequency_response
from simlib.numeric.signals import NoiseTable, fir_demo_signal
from canvas_ui.renderers.filter_renderer import FilterRenderer
from canvas_ui.widgets.simulation_canvas import SimulationWidget
from canvas_ui.widgets.tuning_panel import TuningPanel

logger = logging.getLogger(__name__)


class FIRFilterWidget(SimulationWidget):

    def __init__(self, config: Optional[Dict[str, Any]] = None, parent=None):
        manager = get_config()
        self.settings = s = manager.section("fir_demo", config)
        super().__init__(FrameDriver(manager.get("simulation.dt", 1.0 / 60.0)), parent)

        self.spec = FilterSpec(kind="lowpass", cutoff=s["cutoff"], taps=int(s["taps"]), window=s["window"])
        self.noise = NoiseTable()
        self.renderer = FilterRenderer()
        self._coeffs = self.spec.coefficients()
        self.view = self.add_view(self.render_canvas, s["canvas"])
        self._build_ui()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.addWidget(self.view)

        ranges = self.settings["ranges"]
        self.panel = TuningPanel(self)
        self.panel.add_slider("taps", "Taps", self.spec.taps, ranges["taps"], step=2)
        self.panel.add_slider("cutoff", "Cutoff", self.spec.cutoff, ranges["cutoff"], step=0.01)
        self.panel.value_changed.connect(self.on_parameter_changed)
        layout.addWidget(self.panel)

        controls = QHBoxLayout()
        controls.addWidget(QLabel("Window:"))
        self.window_combo = QComboBox()
        self.window_combo.addItems(WINDOW_TYPES)
        self.window_combo.setCurrentText(self.spec.window)
        self.window_combo.currentTextChanged.connect(self.set_window)
        controls.addWidget(self.window_combo)
        self.run_button = QPushButton("Pause")
        self.run_button.clicked.connect(self._on_run_clicked)
        controls.addWidget(self.run_button)
        reset_button = QPushButton("Reset")
        reset_button.clicked.connect(self.reset)
        controls.addWidget(reset_button)
        controls.addStretch(1)
        layout.addLayout(controls)

    def _on_run_clicked(self):
        running = self.toggle_running()
        self.run_button.setText("Pause" if running else "Play")

    def _update_spec(self, **changes):
        self.spec = replace(self.spec, **changes)
        self._coeffs = self.spec.coefficients()
        self.view.update()

    def on_parameter_changed(self, name, value):
        if name == "taps":
            self._update_spec(taps=int(round(value)))
        elif name == "cutoff":
            self._update_spec(cutoff=value)

    def set_window(self, window):
        self._update_spec(window=window)

    def reset(self):
        self.driver.reset_clock()
        self.panel.rows["taps"].reset()
        self.panel.rows["cutoff"].reset()
        self.window_combo.setCurrentText(self.settings["window"])
        self._update_spec(window=self.settings["window"])

    @property
    def coefficients(self):
        return self._coeffs

    def render_canvas(self, painter, width, height):
        signal = fir_demo_signal(self.driver.sim_time, self.noise)
        self.renderer.draw_fir_demo(
            painter, width, height, self._coeffs, frequency_response(self._coeffs),
            signal, apply_fir(signal, self._coeffs), self.spec.cutoff, self.spec.window,
        )
