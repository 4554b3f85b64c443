"""
Animated block diagrams. Nothing is simulated: the frame clock only moves
the flow dots along the signal paths.
"""

import logging
from typing import Any, Dict, Optional
from PyQt5.QtWidgets import QVBoxLayout, QLabel
from PyQt5.QtCore import Qt

from simlib.config_manager import get_config
from simlib.engine.simulation_driver import FrameDriver
from canvas_ui.renderers.diagram_renderer import DiagramRenderer
from canvas_ui.widgets.simulation_canvas import SimulationWidget

logger = logging.getLogger(__name__)

CAPTIONS = {
    "control_loop": "The controller compares the setpoint with the measured position "
                    "and drives the plant to close the error.",
    "cascade": "Both loops use Σ to compute error. The position loop's bias shifts the "
               "nominal 0° to create a target θ.",
}


class DiagramWidget(SimulationWidget):
    """
    Args:
        kind: "control_loop" or "cascade"
    """

    def __init__(self, kind: str = "control_loop", config: Optional[Dict[str, Any]] = None, parent=None):
        if kind not in CAPTIONS:
            raise ValueError(f"Unknown diagram kind: {kind}")
        self.settings = s = get_config().section("diagrams", config)
        # One frame advances the animation clock by a fixed step
        super().__init__(FrameDriver(dt=s["time_step"]), parent)
        self.kind = kind
        self.renderer = DiagramRenderer(flow_speed=s["flow_speed"])
        self.view = self.add_view(self.render_canvas, s[f"{kind}_canvas"])

        layout = QVBoxLayout(self)
        layout.addWidget(self.view)
        caption = QLabel(CAPTIONS[kind])
        caption.setWordWrap(True)
        caption.setAlignment(Qt.AlignCenter)
        layout.addWidget(caption)

    @property
    def time(self) -> float:
        return self.driver.sim_time

    def render_canvas(self, painter, width, height):
        if self.kind == "cascade":
            self.renderer.draw_cascade(painter, width, height, self.time)
        else:
            self.renderer.draw_control_loop(painter, width, height, self.time)
