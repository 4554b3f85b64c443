"""
Oven temperature controller widget: PI control of a heater with presets,
an openable door and optional conditional integration.
"""

import logging
from typing import Any, Dict, Optional
from PyQt5.QtWidgets import QHBoxLayout, QVBoxLayout, QLabel, QPushButton

from blocks.oven import OvenPlant
from blocks.pid import PIDController
from simlib.config_manager import get_config
from simlib.engine.simulation_driver import SimulationDriver
from simlib.models.state import ControllerGains, OvenParams
from simlib.numeric.control import heater_duty
from canvas_ui.renderers.canvas_renderer import mono_font
from canvas_ui.renderers.oven_renderer import OvenRenderer
from canvas_ui.renderers.plot_renderer import PlotRenderer
from canvas_ui.widgets.simulation_canvas import SimulationWidget
from canvas_ui.widgets.tuning_panel import TuningPanel

logger = logging.getLogger(__name__)

TEMPERATURE_TICKS = tuple((t, f"{t}°") for t in (0, 125, 250, 375, 500))


class OvenControllerWidget(SimulationWidget):
    """PI-controlled oven; the plant runs 60x faster than wall time."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, parent=None):
        manager = get_config()
        self.settings = s = manager.section("oven", config)
        params = OvenParams(
            thermal_mass=s["thermal_mass"], heat_loss_coeff=s["heat_loss_coeff"],
            heater_power=s["heater_power"], ambient=s["ambient"],
            door_loss_multiplier=s["door_loss_multiplier"], time_scale=s["time_scale"],
            integral_limit=s["integral_limit"], integration_band=s["integration_band"],
            min_target=s["ambient"], max_target=s["plot_range"][1],
        )
        driver = SimulationDriver(
            OvenPlant(), PIDController("PI"), ControllerGains(kp=s["kp"], ki=s["ki"]),
            params, target=s["target"], dt=s["dt"], history_capacity=int(s["history_capacity"]),
        )
        super().__init__(driver, parent)

        self.oven_renderer = OvenRenderer()
        self.plot_renderer = PlotRenderer()
        self.oven_view = self.add_view(self.render_oven, s["canvas"])
        self.plot_view = self.add_view(self.render_plot, s["plot"])
        self._build_ui()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        canvases = QHBoxLayout()
        canvases.addWidget(self.oven_view)
        canvases.addWidget(self.plot_view)
        layout.addLayout(canvases)

        presets = QHBoxLayout()
        presets.addWidget(QLabel("Preset:"))
        for preset in self.settings["presets"]:
            button = QPushButton(f"{preset['name']} ({preset['temp']}°F)")
            button.clicked.connect(lambda _checked=False, t=preset["temp"]: self.set_target(t))
            presets.addWidget(button)
        presets.addStretch(1)
        layout.addLayout(presets)

        ranges = self.settings["ranges"]
        self.panel = TuningPanel(self)
        self.panel.add_slider("kp", "Kp", self.driver.gains.kp, ranges["kp"], step=0.5, decimals=1)
        self.panel.add_slider("ki", "Ki", self.driver.gains.ki, ranges["ki"], step=0.05)
        self.panel.value_changed.connect(self.on_parameter_changed)
        layout.addWidget(self.panel)

        buttons = QHBoxLayout()
        self.run_button = QPushButton("Pause")
        self.run_button.clicked.connect(self._on_run_clicked)
        buttons.addWidget(self.run_button)
        reset_button = QPushButton("Reset")
        reset_button.clicked.connect(self.reset)
        buttons.addWidget(reset_button)
        self.door_button = QPushButton("Open Door")
        self.door_button.setCheckable(True)
        self.door_button.toggled.connect(self.set_door_open)
        buttons.addWidget(self.door_button)
        self.conditional_button = QPushButton("Conditional I: OFF")
        self.conditional_button.setCheckable(True)
        self.conditional_button.toggled.connect(self.set_conditional_integration)
        buttons.addWidget(self.conditional_button)
        buttons.addStretch(1)
        layout.addLayout(buttons)

        self.status_label = QLabel()
        self.status_label.setFont(mono_font(10))
        layout.addWidget(self.status_label)

    def _on_run_clicked(self):
        running = self.toggle_running()
        self.run_button.setText("Pause" if running else "Play")

    def on_parameter_changed(self, name, value):
        self.driver.set_gain(name, value)

    def set_target(self, temperature):
        target = self.driver.set_target(temperature)
        logger.info(f"Oven target -> {target:.0f}F")

    def set_door_open(self, is_open):
        self.driver.set_params(door_open=bool(is_open))
        self.door_button.setText("Close Door" if is_open else "Open Door")

    def set_conditional_integration(self, enabled):
        self.driver.set_params(conditional_integration=bool(enabled))
        self.conditional_button.setText(f"Conditional I: {'ON' if enabled else 'OFF'}")

    def reset(self):
        self.driver.reset()
        self.after_frame(False)
        for view in self.views:
            view.update()

    def heater_duty(self) -> float:
        return heater_duty(self.driver.telemetry.output, self.driver.params.max_output)

    def after_frame(self, ticked):
        t = self.driver.telemetry
        error = self.driver.target - self.driver.state.temperature
        self.status_label.setText(
            f"Error {error:+.0f}°F   P {t.p_term:.1f}   I {t.i_term:.1f}   Heater {self.heater_duty():.0f}%")

    def render_oven(self, painter, width, height):
        d = self.driver
        self.oven_renderer.draw_oven(
            painter, width, height, d.state.temperature, d.target, self.heater_duty(),
            OvenPlant.glow_intensity(d.state.temperature, d.params.ambient),
            door_open=d.params.door_open,
        )
        self.oven_renderer.canvas_renderer.draw_readouts(painter, [
            ("Error", d.target - d.state.temperature, "+.0f"),
            ("P term", d.telemetry.p_term, ".1f"),
            ("I term", d.telemetry.i_term, ".1f"),
        ], 30, 242)

    def render_plot(self, painter, width, height):
        history = self.driver.history
        self.plot_renderer.draw_history_plot(
            painter, width, height, history.measured(), history.targets(),
            tuple(self.settings["plot_range"]), title="Temperature over time",
            y_ticks=TEMPERATURE_TICKS, measured_label="Temp", measured_color='error',
        )
