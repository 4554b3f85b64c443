"""
Canvas Renderer Module
Shared drawing helpers used by every widget skin: background, plot grid,
fixed-range polylines, legends, banners and numeric readouts.
"""

import logging
from typing import Iterable, Optional, Sequence, Tuple
from PyQt5.QtGui import QPainter, QPen, QColor, QFont, QPolygonF, QBrush
from PyQt5.QtCore import Qt, QPointF, QRectF
from canvas_ui.themes.theme_manager import theme_manager

logger = logging.getLogger(__name__)


def make_font(size: float, bold: bool = False, family: str = "Sans Serif",
              italic: bool = False) -> QFont:
    font = QFont(family)
    font.setPointSizeF(size)
    font.setBold(bold)
    font.setItalic(italic)
    return font


def mono_font(size: float, bold: bool = False) -> QFont:
    font = make_font(size, bold, "Monospace")
    font.setStyleHint(QFont.Monospace)
    return font


def value_to_y(value: float, top: float, height: float, lo: float, hi: float) -> float:
    """Map ``value`` in [lo, hi] onto a plot spanning ``top``..``top+height`` (y grows down)."""
    if hi == lo:
        return top + height
    return top + height * (1.0 - (value - lo) / (hi - lo))


class CanvasRenderer:
    """Renderer for elements every widget canvas shares."""

    def fill_background(self, painter: QPainter, width: float, height: float,
                        color_name: str = 'canvas_background'):
        painter.fillRect(QRectF(0, 0, width, height), theme_manager.get_color(color_name))

    def draw_grid_lines(self, painter: QPainter, rect: QRectF, divisions: int = 4,
                        include_edges: bool = False, color_name: str = 'grid_lines'):
        """Horizontal guide lines splitting ``rect`` into ``divisions`` bands."""
        painter.save()
        try:
            painter.setPen(QPen(theme_manager.get_color(color_name), 1))
            start, stop = (0, divisions + 1) if include_edges else (1, divisions)
            for i in range(start, stop):
                y = rect.top() + rect.height() * i / divisions
                painter.drawLine(QPointF(rect.left(), y), QPointF(rect.right(), y))
        finally:
            painter.restore()

    def draw_polyline(self, painter: QPainter, values: Sequence[float], rect: QRectF,
                      lo: float, hi: float, color: QColor, width: float = 2.0,
                      dashed: bool = False, spread: Optional[int] = None):
        """
        Draw ``values`` left to right across ``rect`` on a fixed [lo, hi] scale.

        Args:
            spread: Number of x slots; defaults to len(values) - 1 so the
                trace always spans the full width.
        """
        n = len(values)
        if n < 2:
            return
        slots = spread if spread else n - 1
        points = QPolygonF()
        for i, v in enumerate(values):
            x = rect.left() + rect.width() * i / slots
            points.append(QPointF(x, value_to_y(v, rect.top(), rect.height(), lo, hi)))

        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            pen = QPen(color, width, Qt.DashLine if dashed else Qt.SolidLine)
            pen.setCapStyle(Qt.RoundCap)
            pen.setJoinStyle(Qt.RoundJoin)
            if dashed:
                pen.setDashPattern([2, 2])
            painter.setPen(pen)
            painter.setBrush(Qt.NoBrush)
            painter.drawPolyline(points)
        finally:
            painter.restore()

    def draw_text(self, painter: QPainter, x: float, y: float, text: str, color: QColor,
                  font: QFont, align: str = 'left'):
        """Draw text with its baseline at ``y``; ``align`` is left, center or right."""
        painter.save()
        try:
            painter.setFont(font)
            painter.setPen(color)
            width = painter.fontMetrics().horizontalAdvance(text)
            if align == 'center':
                x -= width / 2
            elif align == 'right':
                x -= width
            painter.drawText(QPointF(x, y), text)
        finally:
            painter.restore()

    def draw_legend(self, painter: QPainter, items: Iterable[Tuple[str, QColor]], x: float, y: float,
                    spacing: float = 12.0, font: Optional[QFont] = None):
        """Colour swatch + label pairs laid out left to right from (x, y)."""
        font = font or make_font(9)
        painter.save()
        try:
            painter.setFont(font)
            metrics = painter.fontMetrics()
            for label, color in items:
                painter.fillRect(QRectF(x, y - 8, 10, 10), color)
                painter.setPen(color)
                painter.drawText(QPointF(x + 14, y + 1), label)
                x += 14 + metrics.horizontalAdvance(label) + spacing
        finally:
            painter.restore()

    def draw_banner(self, painter: QPainter, rect: QRectF, text: str, color_name: str):
        """Rounded status banner, e.g. PASSED / TIMED OUT."""
        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            color = theme_manager.get_color(color_name)
            painter.setBrush(QBrush(theme_manager.get_color(color_name, 0.15)))
            painter.setPen(QPen(color, 1.5))
            painter.drawRoundedRect(rect, 6, 6)
            painter.setFont(mono_font(10, bold=True))
            painter.drawText(rect, Qt.AlignCenter, text)
        except Exception as e:
            logger.error(f"Error drawing banner: {str(e)}")
        finally:
            painter.restore()

    @staticmethod
    def sign_color(value: float, threshold: float = 1e-3) -> QColor:
        """Green for positive, red for negative, muted near zero."""
        if value > threshold:
            return theme_manager.get_color('success_light')
        if value < -threshold:
            return theme_manager.get_color('error_light')
        return theme_manager.get_color('text_muted')

    def draw_readouts(self, painter: QPainter, readouts: Sequence[Tuple[str, float, str]],
                      x: float, y: float, line_height: float = 14.0):
        """
        Stack ``(label, value, fmt)`` readouts vertically, each value coloured
        by its sign.
        """
        painter.save()
        try:
            label_font = mono_font(8)
            painter.setFont(label_font)
            for i, (label, value, fmt) in enumerate(readouts):
                yy = y + i * line_height
                painter.setPen(theme_manager.get_color('text_muted'))
                painter.drawText(QPointF(x, yy), label)
                painter.setPen(self.sign_color(value))
                painter.drawText(QPointF(x + 58, yy), format(value, fmt))
        finally:
            painter.restore()
