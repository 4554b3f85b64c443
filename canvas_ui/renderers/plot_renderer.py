"""
Plot Renderer Module
Time-series plots with a fixed y range: measured trace plus a dashed target.
"""

import logging
import math
from typing import Optional, Sequence, Tuple
from PyQt5.QtGui import QPainter, QPen
from PyQt5.QtCore import Qt, QPointF, QRectF
from canvas_ui.themes.theme_manager import theme_manager
from canvas_ui.renderers.canvas_renderer import CanvasRenderer, make_font, mono_font, value_to_y

logger = logging.getLogger(__name__)

ANGLE_TICKS = ((0.0, "0°"), (math.pi / 2, "90°"), (math.pi, "180°"))


class PlotRenderer:
    """Renderer for fixed-range history plots."""

    def __init__(self):
        self.canvas_renderer = CanvasRenderer()

    def draw_history_plot(self, painter: QPainter, width: float, height: float,
                          measured: Sequence[float], targets: Sequence[float],
                          value_range: Tuple[float, float], capacity: Optional[int] = None,
                          title: str = "Position over time",
                          y_ticks: Sequence[Tuple[float, str]] = ANGLE_TICKS,
                          padding: float = 46.0, measured_label: str = "Pointer",
                          measured_color: str = 'measured', status: Optional[str] = None):
        """
        Plot the history buffer left to right.

        With ``capacity`` the x axis spans that many samples, so the trace
        grows in from the left until the buffer is full and then scrolls.
        Without it the trace always spans the full width. Measured values
        are clipped to the plot range.
        """
        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            self.canvas_renderer.fill_background(painter, width, height)
            lo, hi = value_range
            rect = QRectF(padding, padding * 0.6, width - padding * 1.4, height - padding * 1.4)

            self._draw_axes(painter, rect, lo, hi, y_ticks)

            slots = max(capacity - 1, 1) if capacity else None
            clipped = [min(max(v, lo), hi) for v in measured]
            self.canvas_renderer.draw_polyline(
                painter, targets, rect, lo, hi, theme_manager.get_color('target'),
                width=2.0, dashed=True, spread=slots)
            self.canvas_renderer.draw_polyline(
                painter, clipped, rect, lo, hi, theme_manager.get_color(measured_color),
                width=2.5, spread=slots)

            self.canvas_renderer.draw_text(
                painter, rect.left(), rect.top() - 10, title,
                theme_manager.get_color('text_secondary'), make_font(10, bold=True))
            self.canvas_renderer.draw_legend(
                painter,
                [("Target", theme_manager.get_color('target')),
                 (measured_label, theme_manager.get_color(measured_color))],
                rect.left(), rect.bottom() + 22)
            if status:
                self.canvas_renderer.draw_text(
                    painter, rect.right(), rect.top() - 10, status,
                    theme_manager.get_color('text_muted'), mono_font(8), align='right')
        except Exception as e:
            logger.error(f"Error drawing history plot: {str(e)}")
        finally:
            painter.restore()

    def _draw_axes(self, painter, rect, lo, hi, y_ticks):
        painter.setPen(QPen(theme_manager.get_color('axis'), 1))
        painter.drawLine(rect.bottomLeft(), rect.topLeft())
        painter.drawLine(rect.bottomLeft(), rect.bottomRight())

        label_font = mono_font(8)
        grid_pen = QPen(theme_manager.get_color('grid_lines'), 1, Qt.DashLine)
        for value, label in y_ticks:
            y = value_to_y(value, rect.top(), rect.height(), lo, hi)
            painter.setPen(grid_pen)
            painter.drawLine(QPointF(rect.left(), y), QPointF(rect.right(), y))
            self.canvas_renderer.draw_text(
                painter, rect.left() - 6, y + 4, label,
                theme_manager.get_color('text_muted'), label_font, align='right')

    def draw_term_bars(self, painter: QPainter, x: float, y: float, width: float,
                       terms: Sequence[Tuple[str, float, str]], scale: float):
        """
        Horizontal bars for the P, I and D contributions, centred on a zero
        line; ``scale`` is the magnitude that fills half the width.
        """
        painter.save()
        try:
            half = width / 2.0
            zero_x = x + half
            bar_height = 10
            for i, (label, value, color_name) in enumerate(terms):
                yy = y + i * (bar_height + 8)
                frac = 0.0 if scale <= 0 else max(-1.0, min(1.0, value / scale))
                painter.fillRect(QRectF(x, yy, width, bar_height), theme_manager.get_color('track'))
                left = zero_x if frac >= 0 else zero_x + frac * half
                painter.fillRect(QRectF(left, yy, abs(frac) * half, bar_height),
                                 theme_manager.get_color(color_name))
                self.canvas_renderer.draw_text(
                    painter, x - 6, yy + bar_height - 1, label,
                    theme_manager.get_color(color_name), mono_font(8, bold=True), align='right')
                self.canvas_renderer.draw_text(
                    painter, x + width + 6, yy + bar_height - 1, f"{value:+.2f}",
                    CanvasRenderer.sign_color(value), mono_font(8))
            painter.setPen(QPen(theme_manager.get_color('zero_line'), 1))
            painter.drawLine(QPointF(zero_x, y - 2),
                             QPointF(zero_x, y + len(terms) * (bar_height + 8) - 6))
        except Exception as e:
            logger.error(f"Error drawing term bars: {str(e)}")
        finally:
            painter.restore()
