"""
Oven Renderer Module
Draws the oven body with a temperature-dependent interior glow, the heater
coil, the door-open overlay, the temperature readout and the heater bar.
"""

import logging
from PyQt5.QtGui import QPainter, QPen, QColor, QPainterPath, QBrush
from PyQt5.QtCore import Qt, QPointF, QRectF
from canvas_ui.themes.theme_manager import theme_manager
from canvas_ui.renderers.canvas_renderer import CanvasRenderer, mono_font

logger = logging.getLogger(__name__)

OVEN_RECT = QRectF(30, 30, 180, 140)
COIL_THRESHOLD = 10.0
OVERSHOOT_MARGIN = 20.0


def interior_color(glow: float) -> QColor:
    """Dull brown when cold, bright orange-red at full glow."""
    glow = max(0.0, min(1.0, glow))
    return QColor(
        int(min(255, 50 + glow * 200)),
        int(max(30, 50 - glow * 20)),
        int(max(20, 30 - glow * 10)),
    )


def heater_bar_color_name(duty: float) -> str:
    if duty > 80:
        return 'error'
    if duty > 50:
        return 'warning'
    return 'success'


class OvenRenderer:
    """Renderer for the oven widget's left canvas."""

    def __init__(self):
        self.canvas_renderer = CanvasRenderer()

    def draw_oven(self, painter: QPainter, width: float, height: float,
                  temperature: float, target: float, duty: float, glow: float,
                  door_open: bool = False):
        """
        Args:
            duty: Heater duty in percent (0..100)
            glow: Interior glow intensity in [0, 1]
        """
        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            self.canvas_renderer.fill_background(painter, width, height, 'canvas_background_alt')
            oven = OVEN_RECT
            interior = oven.adjusted(8, 8, -8, -8)

            painter.fillRect(oven, theme_manager.get_color('oven_body'))
            painter.setPen(QPen(theme_manager.get_color('oven_edge'), 3))
            painter.setBrush(Qt.NoBrush)
            painter.drawRect(oven)
            painter.fillRect(interior, interior_color(glow))

            if duty > COIL_THRESHOLD:
                self._draw_coil(painter, oven, duty)

            if door_open:
                painter.fillRect(interior, QColor(100, 200, 255, 64))
                self.canvas_renderer.draw_text(
                    painter, oven.center().x(), oven.center().y(), "DOOR OPEN",
                    theme_manager.get_color('measured'), mono_font(9, bold=True), align='center')

            self._draw_readout(painter, oven, temperature, target)
            self._draw_heater_bar(painter, oven, duty)
        except Exception as e:
            logger.error(f"Error drawing oven: {str(e)}")
        finally:
            painter.restore()

    def _draw_coil(self, painter, oven, duty):
        path = QPainterPath()
        y = oven.bottom() - 20
        for i in range(4):
            x = oven.left() + 15 + i * 40
            path.moveTo(x, y)
            path.cubicTo(QPointF(x + 8, y - 8), QPointF(x + 16, y + 8), QPointF(x + 24, y))
        color = QColor(255, int(max(0, min(255, 255 - duty * 2))), 0)
        color.setAlphaF(max(0.0, min(1.0, duty / 100.0)))
        painter.setPen(QPen(color, 3))
        painter.setBrush(Qt.NoBrush)
        painter.drawPath(path)

    def _draw_readout(self, painter, oven, temperature, target):
        box = QRectF(oven.right() + 15, oven.top(), 80, 50)
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(QColor('#000000')))
        painter.drawRoundedRect(box, 8, 8)

        hot = temperature > target + OVERSHOOT_MARGIN
        self.canvas_renderer.draw_text(
            painter, box.center().x(), oven.top() + 33, f"{round(temperature)}°F",
            theme_manager.get_color('error' if hot else 'success'),
            mono_font(14, bold=True), align='center')
        self.canvas_renderer.draw_text(
            painter, box.center().x(), oven.top() + 65, f"Target: {round(target)}°F",
            theme_manager.get_color('label'), mono_font(8), align='center')

    def _draw_heater_bar(self, painter, oven, duty):
        bar = QRectF(oven.left(), oven.bottom() + 20, oven.width(), 14)
        painter.setPen(Qt.NoPen)
        painter.setBrush(theme_manager.get_color('oven_body'))
        painter.drawRoundedRect(bar, 4, 4)

        fraction = max(0.0, min(1.0, duty / 100.0))
        if fraction > 0:
            painter.setBrush(theme_manager.get_color(heater_bar_color_name(duty)))
            painter.drawRoundedRect(QRectF(bar.left(), bar.top(), bar.width() * fraction, bar.height()), 4, 4)

        self.canvas_renderer.draw_text(
            painter, oven.left(), bar.bottom() + 16, f"Heater: {round(duty)}%",
            theme_manager.get_color('label'), mono_font(8))
