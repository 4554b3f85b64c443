"""
Simulation canvas widgets.

CanvasView is a passive drawing surface with a fixed logical size: each
repaint renders into a QImage scaled by the device pixel ratio (capped) and
blits it into the widget. SimulationWidget owns a driver and the QTimer
frame loop that ticks it and repaints its views.
"""

import logging
from typing import Callable, List, Optional, Tuple
from PyQt5.QtWidgets import QWidget, QSizePolicy
from PyQt5.QtCore import Qt, QTimer, QPointF, QRectF, QSize
from PyQt5.QtGui import QPainter, QImage

from simlib.config_manager import get_config

logger = logging.getLogger(__name__)

RenderFn = Callable[[QPainter, float, float], None]


class CanvasView(QWidget):
    """
    Fixed-logical-size drawing surface.

    Args:
        render_fn: ``render_fn(painter, width, height)`` paints one frame in
            logical coordinates; it must not mutate simulation state.
        logical_size: (width, height) of the logical canvas
        max_dpr: Upper bound for the backing-image scale factor
    """

    def __init__(self, render_fn: RenderFn, logical_size: Tuple[int, int],
                 max_dpr: float = 2.0, parent=None):
        super().__init__(parent)
        self.render_fn = render_fn
        self.logical_width, self.logical_height = logical_size
        self.max_dpr = max_dpr
        self.interaction = None

        self.setMinimumSize(self.logical_width // 2, self.logical_height // 2)
        self.setSizePolicy(QSizePolicy.Preferred, QSizePolicy.Preferred)
        self.setAttribute(Qt.WA_OpaquePaintEvent)

    def sizeHint(self):
        return QSize(self.logical_width, self.logical_height)

    # ── Geometry ──

    def target_rect(self) -> QRectF:
        """Aspect-preserving rectangle the logical canvas occupies in the widget."""
        if self.width() <= 0 or self.height() <= 0:
            return QRectF()
        scale = min(self.width() / self.logical_width, self.height() / self.logical_height)
        w, h = self.logical_width * scale, self.logical_height * scale
        return QRectF((self.width() - w) / 2, (self.height() - h) / 2, w, h)

    def display_to_logical(self, pos) -> QPointF:
        rect = self.target_rect()
        if rect.isEmpty():
            return QPointF(pos.x(), pos.y())
        return QPointF((pos.x() - rect.left()) * self.logical_width / rect.width(),
                       (pos.y() - rect.top()) * self.logical_height / rect.height())

    def logical_scale(self) -> float:
        """Average display-to-logical scale, for hit radii given in display pixels."""
        rect = self.target_rect()
        if rect.isEmpty():
            return 1.0
        return (self.logical_width / rect.width() + self.logical_height / rect.height()) / 2

    def device_pixel_ratio(self) -> float:
        return min(float(self.devicePixelRatioF()), self.max_dpr)

    # ── Rendering ──

    def render_image(self, dpr: Optional[float] = None) -> QImage:
        """Render one frame into a new backing image (logical size x dpr)."""
        dpr = self.device_pixel_ratio() if dpr is None else min(dpr, self.max_dpr)
        image = QImage(int(self.logical_width * dpr), int(self.logical_height * dpr),
                       QImage.Format_ARGB32_Premultiplied)
        image.setDevicePixelRatio(dpr)
        painter = QPainter(image)
        try:
            self.render_fn(painter, float(self.logical_width), float(self.logical_height))
        finally:
            painter.end()
        return image

    def paintEvent(self, event):
        """Paint the backing image scaled into the widget."""
        rect = self.target_rect()
        if rect.isEmpty():
            return
        try:
            image = self.render_image()
            painter = QPainter(self)
            painter.setRenderHint(QPainter.SmoothPixmapTransform)
            painter.fillRect(self.rect(), self.palette().window())
            painter.drawImage(rect, image)
            painter.end()
        except Exception as e:
            logger.error(f"Error in canvas paintEvent: {str(e)}")

    # ── Mouse forwarding ──

    def mousePressEvent(self, event):
        if self.interaction is not None and event.button() == Qt.LeftButton:
            self.interaction.handle_mouse_press(self.display_to_logical(event.pos()), self.logical_scale())
            self.update()

    def mouseMoveEvent(self, event):
        if self.interaction is not None:
            self.interaction.handle_mouse_move(self.display_to_logical(event.pos()), self.logical_scale())
            self.setCursor(Qt.PointingHandCursor if self.interaction.hovering else Qt.CrossCursor)
            self.update()

    def mouseReleaseEvent(self, event):
        if self.interaction is not None and event.button() == Qt.LeftButton:
            self.interaction.handle_mouse_release(self.display_to_logical(event.pos()), self.logical_scale())
            self.update()

    def enterEvent(self, event):
        if self.interaction is not None:
            self.interaction.handle_enter()
        super().enterEvent(event)

    def leaveEvent(self, event):
        if self.interaction is not None:
            self.interaction.handle_leave()
            self.update()
        super().leaveEvent(event)


class SimulationWidget(QWidget):
    """
    Base class for every widget in the gallery: one driver, one frame timer,
    one or more CanvasViews.

    The timer runs only while the widget is shown. Each timeout runs at most
    one driver tick, then ``after_frame`` refreshes readouts and the views
    repaint. Hidden widgets are ineligible and do no work.
    """

    def __init__(self, driver, parent=None):
        super().__init__(parent)
        config = get_config()
        self.driver = driver
        self.max_dpr = config.get("simulation.max_device_pixel_ratio", 2.0)
        self.views: List[CanvasView] = []

        self._timer = QTimer(self)
        self._timer.setInterval(int(config.get("simulation.frame_interval_ms", 16)))
        self._timer.timeout.connect(self.on_frame)
        self.driver.set_eligible(False)

    def add_view(self, render_fn: RenderFn, logical_size: Tuple[int, int]) -> CanvasView:
        view = CanvasView(render_fn, tuple(logical_size), self.max_dpr, self)
        self.views.append(view)
        return view

    @property
    def timer_active(self) -> bool:
        return self._timer.isActive()

    def on_frame(self):
        """One scheduled frame: tick (if allowed), then redraw."""
        if not self.driver.eligible:
            return
        ticked = self.driver.frame()
        self.after_frame(ticked)
        for view in self.views:
            view.update()

    def after_frame(self, ticked: bool):
        """Hook for subclasses to refresh labels after each frame."""

    def showEvent(self, event):
        self.driver.set_eligible(True)
        self._timer.start()
        super().showEvent(event)

    def hideEvent(self, event):
        self._timer.stop()
        self.driver.set_eligible(False)
        super().hideEvent(event)

    def toggle_running(self) -> bool:
        running = self.driver.toggle()
        logger.info(f"{type(self).__name__} {'running' if running else 'paused'}")
        return running
