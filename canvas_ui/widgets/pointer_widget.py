"""
Pointer controller widgets (P, PI, PID).

A motor turns a pointer on a half dial towards a draggable target. The P
variant can hang a mass off the arm to show steady-state error; PI and PID
add the integral (and derivative) term, and PID can add sensor noise.
"""

import logging
import math
from typing import Any, Dict, Optional
from PyQt5.QtWidgets import QHBoxLayout, QVBoxLayout, QLabel, QPushButton, QGridLayout
from PyQt5.QtCore import Qt

from blocks.pid import PIDController
from blocks.pointer import PointerPlant
from simlib.config_manager import get_config
from simlib.engine.simulation_driver import SimulationDriver
from simlib.models.state import ControllerGains, PointerParams
from simlib.numeric.control import predict_settling_angle, steady_state_error_degrees
from canvas_ui.interactions.interaction_manager import TargetInteraction
from canvas_ui.renderers.canvas_renderer import mono_font
from canvas_ui.renderers.dial_renderer import DialGeometry, DialRenderer
from canvas_ui.renderers.plot_renderer import PlotRenderer
from canvas_ui.widgets.simulation_canvas import SimulationWidget
from canvas_ui.widgets.tuning_panel import TuningPanel

logger = logging.getLogger(__name__)

MASS_MARKER_THRESHOLD = 0.01
SECTION_BY_MODE = {"P": "p_controller", "PI": "pi_controller", "PID": "pid_controller"}


class PointerControllerWidget(SimulationWidget):
    """
    Args:
        mode: "P", "PI" or "PID"
        config: Static host configuration overriding the config-file
            section for this mode (e.g. ``{"kp": 2.0, "show_mass": True}``)
    """

    def __init__(self, mode: str = "P", config: Optional[Dict[str, Any]] = None, parent=None):
        if mode not in SECTION_BY_MODE:
            raise ValueError(f"Unknown controller mode: {mode}")
        manager = get_config()
        self.mode = mode
        self.settings = manager.section(SECTION_BY_MODE[mode], config)
        self.pointer_settings = manager.section("pointer", (config or {}).get("pointer"))

        # P widgets only carry a mass when the host asks for one
        self.show_mass = mode != "P" or bool(self.settings.get("show_mass", False))
        mass = self.settings.get("mass", 0.0) if self.show_mass else 0.0

        ps = self.pointer_settings
        params = PointerParams(
            inertia=ps["inertia"], friction=ps["friction"], max_torque=ps["max_torque"],
            mass=mass, restitution=ps["restitution"], integral_limit=ps["integral_limit"],
            min_target=ps["min_target"], max_target=ps["max_target"],
        )
        gains = ControllerGains(
            kp=self.settings.get("kp", 1.0),
            ki=self.settings.get("ki", 0.0),
            kd=self.settings.get("kd", 0.0),
        )
        driver = SimulationDriver(
            PointerPlant(start_angle=ps["start_angle"]), PIDController(mode), gains, params,
            target=ps["target"], dt=manager.get("simulation.dt", 1.0 / 60.0),
            history_capacity=int(ps["history_capacity"]),
        )
        super().__init__(driver, parent)

        self.dial_renderer = DialRenderer()
        self.plot_renderer = PlotRenderer()
        self.geometry = DialGeometry(*ps["canvas"])
        self.noise_enabled = False

        self.dial_view = self.add_view(self.render_dial, ps["canvas"])
        self.plot_view = self.add_view(self.render_plot, ps["plot"])
        self.interaction = TargetInteraction(driver, self.geometry, ps["hover_radius"])
        self.dial_view.interaction = self.interaction
        self.dial_view.setMouseTracking(True)

        self._build_ui()
        if self.mode == "PID" and self.settings.get("noise", False):
            self.noise_button.setChecked(True)
        logger.info(f"{mode} pointer widget created (Kp={gains.kp}, mass={mass})")

    # ── UI ──

    def _build_ui(self):
        layout = QVBoxLayout(self)
        canvases = QHBoxLayout()
        canvases.addWidget(self.dial_view)
        canvases.addWidget(self.plot_view)
        layout.addLayout(canvases)

        ranges = self.settings.get("ranges", {})
        self.panel = TuningPanel(self)
        self.panel.add_slider("kp", "Kp", self.driver.gains.kp, ranges.get("kp", [0.1, 5.0]), decimals=1)
        if self.mode in ("PI", "PID"):
            self.panel.add_slider("ki", "Ki", self.driver.gains.ki, ranges.get("ki", [0.0, 2.0]))
        if self.mode == "PID":
            self.panel.add_slider("kd", "Kd", self.driver.gains.kd, ranges.get("kd", [0.0, 2.0]))
        if self.show_mass:
            self.panel.add_slider("mass", "Mass", self.driver.params.mass, ranges.get("mass", [0.0, 1.0]))
        self.panel.value_changed.connect(self.on_parameter_changed)
        layout.addWidget(self.panel)

        buttons = QHBoxLayout()
        self.run_button = QPushButton("Pause")
        self.run_button.clicked.connect(self._on_run_clicked)
        buttons.addWidget(self.run_button)
        reset_button = QPushButton("Reset")
        reset_button.clicked.connect(self.reset)
        buttons.addWidget(reset_button)
        if self.mode == "PID":
            self.noise_button = QPushButton("Noise OFF")
            self.noise_button.setCheckable(True)
            self.noise_button.toggled.connect(self.set_noise)
            buttons.addWidget(self.noise_button)
        buttons.addStretch(1)
        layout.addLayout(buttons)

        grid = QGridLayout()
        self.readouts = {}
        names = ["Error", "P"]
        if self.mode in ("PI", "PID"):
            names.append("I")
        if self.mode == "PID":
            names.append("D")
        if self.show_mass:
            names.append("SSE" if self.mode == "P" else "P-only SSE")
        for col, name in enumerate(names):
            title = QLabel(name)
            title.setAlignment(Qt.AlignCenter)
            value = QLabel("0.00")
            value.setFont(mono_font(11, bold=True))
            value.setAlignment(Qt.AlignCenter)
            grid.addWidget(title, 0, col)
            grid.addWidget(value, 1, col)
            self.readouts[name] = value
        layout.addLayout(grid)

    def _on_run_clicked(self):
        running = self.toggle_running()
        self.run_button.setText("Pause" if running else "Play")

    # ── Parameter changes ──

    def on_parameter_changed(self, name, value):
        if name in ("kp", "ki", "kd"):
            self.driver.set_gain(name, value)
        elif name == "mass":
            self.driver.set_params(mass=value)
        logger.debug(f"{self.mode} {name} -> {value:.3f}")

    def set_noise(self, enabled):
        self.noise_enabled = bool(enabled)
        amplitude = self.pointer_settings["noise_amplitude"] if self.noise_enabled else 0.0
        self.driver.set_params(measurement_noise=amplitude)
        if hasattr(self, "noise_button"):
            self.noise_button.setText("Noise ON" if self.noise_enabled else "Noise OFF")

    def reset(self):
        self.driver.reset()
        self.driver.set_target(self.pointer_settings["target"])
        self.after_frame(False)
        for view in self.views:
            view.update()

    # ── Frame hooks ──

    def predicted_settling(self) -> Optional[float]:
        """Settling angle under P-only control, shown when a mass is attached."""
        mass = self.driver.params.mass
        if self.mode != "P" or mass <= MASS_MARKER_THRESHOLD:
            return None
        return predict_settling_angle(self.driver.target, mass, self.driver.gains.kp)

    def after_frame(self, ticked):
        t = self.driver.telemetry
        error_deg = abs(math.degrees(self.driver.target - self.driver.state.angle))
        self.readouts["Error"].setText(f"{error_deg:.1f}°")
        self.readouts["P"].setText(f"{abs(t.p_term):.2f}")
        if "I" in self.readouts:
            self.readouts["I"].setText(f"{abs(t.i_term):.2f}")
        if "D" in self.readouts:
            self.readouts["D"].setText(f"{abs(t.d_term):.2f}")
        sse_key = "SSE" if self.mode == "P" else "P-only SSE"
        if sse_key in self.readouts:
            sse = steady_state_error_degrees(self.driver.target, self.driver.params.mass, self.driver.gains.kp)
            self.readouts[sse_key].setText(f"{abs(sse):.1f}°")

    def term_values(self):
        """(label, value, colour) rows for the controller terms this mode uses."""
        t = self.driver.telemetry
        rows = [("P", t.p_term, 'term_p')]
        if self.mode in ("PI", "PID"):
            rows.append(("I", t.i_term, 'term_i'))
        if self.mode == "PID":
            rows.append(("D", t.d_term, 'term_d'))
        return rows

    # ── Rendering ──

    def render_dial(self, painter, width, height):
        d = self.driver
        self.dial_renderer.draw_dial(
            painter, self.geometry, d.state.angle, d.target,
            power=d.telemetry.power,
            hovering=self.interaction.hovering,
            predicted_settling=self.predicted_settling(),
            mass=d.params.mass,
            mouse_pos=self.interaction.mouse_pos,
            in_canvas=self.interaction.in_canvas,
            target_range=(d.params.min_target, d.params.max_target),
        )
        self.plot_renderer.draw_term_bars(painter, 24, 14, 70, self.term_values(), d.params.max_torque)

    def render_plot(self, painter, width, height):
        history = self.driver.history
        self.plot_renderer.draw_history_plot(
            painter, width, height, history.measured(), history.targets(),
            (0.0, math.pi), capacity=history.capacity,
            status=None if self.driver.running else "paused",
        )
