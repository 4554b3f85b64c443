"""
IIR filter demo: first or second order exponential smoother with the
recursive block diagram, its closed-form response and a filtered signal.
"""

import logging
from typing import Any, Dict, Optional
from PyQt5.QtWidgets import QHBoxLayout, QVBoxLayout, QPushButton, QButtonGroup, QCheckBox

from simlib.config_manager import get_config
from simlib.engine.simulation_driver import FrameDriver
from simlib.models.state import IIRSpec
from simlib.numeric.filters import apply_iir, iir_frequency_response
from simlib.numeric.signals import NoiseTable, iir_demo_signal
from canvas_ui.renderers.filter_renderer import FilterRenderer
from canvas_ui.widgets.simulation_canvas import SimulationWidget
from canvas_ui.widgets.tuning_panel import TuningPanel

logger = logging.getLogger(__name__)


class IIRFilterWidget(SimulationWidget):

    def __init__(self, config: Optional[Dict[str, Any]] = None, parent=None):
        manager = get_config()
        self.settings = s = manager.section("iir_demo", config)
        super().__init__(FrameDriver(manager.get("simulation.dt", 1.0 / 60.0)), parent)

        self.spec = IIRSpec(alpha=s["alpha"], order=int(s["order"]))
        self.show_feedback = True
        self.noise = NoiseTable()
        self.renderer = FilterRenderer()
        self.view = self.add_view(self.render_canvas, s["canvas"])
        self._build_ui()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.addWidget(self.view)

        self.panel = TuningPanel(self)
        self.panel.add_slider("alpha", "α (smoothing)", self.spec.alpha, self.settings["ranges"]["alpha"],
                              step=0.01)
        self.panel.value_changed.connect(self.on_parameter_changed)
        layout.addWidget(self.panel)

        controls = QHBoxLayout()
        self.order_group = QButtonGroup(self)
        for order in (1, 2):
            button = QPushButton(f"Order {order}")
            button.setCheckable(True)
            button.setChecked(order == self.spec.order)
            self.order_group.addButton(button, order)
            controls.addWidget(button)
        self.order_group.buttonClicked[int].connect(self.set_order)

        feedback_box = QCheckBox("Show feedback")
        feedback_box.setChecked(self.show_feedback)
        feedback_box.toggled.connect(self.set_show_feedback)
        controls.addWidget(feedback_box)

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

    def on_parameter_changed(self, name, value):
        if name == "alpha":
            self.spec = IIRSpec(alpha=value, order=self.spec.order)
            self.view.update()

    def set_order(self, order):
        self.spec = IIRSpec(alpha=self.spec.alpha, order=int(order))
        self.view.update()

    def set_show_feedback(self, show):
        self.show_feedback = bool(show)
        self.view.update()

    def reset(self):
        self.driver.reset_clock()
        self.panel.rows["alpha"].reset()
        order = int(self.settings["order"])
        self.order_group.button(order).setChecked(True)
        self.set_order(order)

    def render_canvas(self, painter, width, height):
        signal = iir_demo_signal(self.driver.sim_time, self.noise)
        alpha, order = self.spec.alpha, self.spec.order
        self.renderer.draw_iir_demo(
            painter, width, height, alpha, order, iir_frequency_response(alpha, order),
            signal, apply_iir(signal, alpha, order), show_feedback=self.show_feedback,
        )
