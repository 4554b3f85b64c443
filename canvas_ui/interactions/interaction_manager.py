
import logging
import math
from enum import Enum
from typing import Optional, Tuple
from PyQt5.QtCore import QPointF

from canvas_ui.renderers.dial_renderer import DialGeometry

logger = logging.getLogger(__name__)


class State(Enum):
    """State enumeration for target-handle interactions."""
    IDLE = "idle"
    HOVERING = "hovering"
    DRAGGING = "dragging"


class TargetInteraction:
    """
    Mouse handling for the draggable target handle of a pointer widget.
    Decouples event handling from rendering: the canvas converts events to
    logical coordinates and forwards them here, then repaints from
    ``state``, ``mouse_pos`` and ``in_canvas``.

    While dragging, the driver's ``hold`` flag is set so the simulation does
    not advance under the user's hand.
    """

    def __init__(self, driver, geometry: Optional[DialGeometry] = None, hover_radius: float = 20.0):
        self.driver = driver
        self.geometry = geometry or DialGeometry()
        self.hover_radius = hover_radius
        self.state = State.IDLE

        # Pointer context for the guide line
        self.mouse_pos: Optional[Tuple[float, float]] = None
        self.in_canvas = False
        self._press_off_handle = False

    def set_state(self, new_state):
        """Transition to a new state."""
        if new_state != self.state:
            logger.debug(f"State transition: {self.state} -> {new_state}")
        self.state = new_state
        self.driver.hold = new_state == State.DRAGGING

    @property
    def hovering(self) -> bool:
        return self.state in (State.HOVERING, State.DRAGGING)

    def is_near_handle(self, pos: QPointF, scale: float = 1.0) -> bool:
        """Within ``hover_radius`` (scaled from display to logical pixels) of the handle."""
        hx, hy = self.geometry.handle_position(self.driver.target)
        return math.hypot(pos.x() - hx, pos.y() - hy) < self.hover_radius * scale

    def target_from_position(self, pos: QPointF) -> float:
        """Inverse of the drawing projection; the driver clamps to the legal range."""
        return self.geometry.angle_at(pos.x(), pos.y())

    def handle_mouse_press(self, pos: QPointF, scale: float = 1.0):
        self._track(pos)
        if self.is_near_handle(pos, scale):
            self._press_off_handle = False
            self.set_state(State.DRAGGING)
        else:
            self._press_off_handle = True

    def handle_mouse_move(self, pos: QPointF, scale: float = 1.0):
        self._track(pos)
        if self.state == State.DRAGGING:
            self.driver.set_target(self.target_from_position(pos))
            return
        self.set_state(State.HOVERING if self.is_near_handle(pos, scale) else State.IDLE)

    def handle_mouse_release(self, pos: QPointF, scale: float = 1.0):
        """End a drag, or treat a press-and-release away from the handle as a click."""
        self._track(pos)
        if self.state == State.DRAGGING:
            self.set_state(State.HOVERING if self.is_near_handle(pos, scale) else State.IDLE)
        elif self._press_off_handle:
            target = self.driver.set_target(self.target_from_position(pos))
            logger.debug(f"Target set by click: {target:.3f} rad")
        self._press_off_handle = False

    def handle_enter(self):
        self.in_canvas = True

    def handle_leave(self):
        self.in_canvas = False
        self.mouse_pos = None
        self._press_off_handle = False
        self.set_state(State.IDLE)

    def _track(self, pos: QPointF):
        self.mouse_pos = (pos.x(), pos.y())
        self.in_canvas = True
