"""
Filter Renderer Module
Three views share one layout vocabulary: a titled section with either a
frequency-response plot (0 .. 0.5 cycles/sample) or a centred time-domain
signal plot.

- FIR demo: coefficient stems, frequency response, input vs filtered
- IIR demo: recursive block diagram, response, input vs filtered
- Filter challenge: signal/noise zones, response, live signal, pass banner
"""

import logging
from typing import Optional, Sequence
import numpy as np
from PyQt5.QtGui import QPainter, QPen, QColor, QPolygonF, QBrush
from PyQt5.QtCore import Qt, QPointF, QRectF
from canvas_ui.themes.theme_manager import theme_manager
from canvas_ui.renderers.canvas_renderer import CanvasRenderer, make_font, mono_font

logger = logging.getLogger(__name__)

PADDING = 50.0
SIGNAL_SCALE = 0.35
ZONE_HALF_WIDTH = 15.0
IIR_PLOT_CAP = 1.2


def _trace(values: Sequence[float], rect: QRectF, to_y) -> QPolygonF:
    """x runs over ``len(values)`` equal slots starting at the left edge."""
    n = len(values)
    points = QPolygonF()
    for i, v in enumerate(values):
        points.append(QPointF(rect.left() + rect.width() * i / n, to_y(float(v))))
    return points


class FilterRenderer:
    """Renderer for the FIR, IIR and filter-challenge canvases."""

    def __init__(self):
        self.canvas_renderer = CanvasRenderer()

    # -- shared pieces -----------------------------------------------------

    def _section_title(self, painter, x, y, text):
        self.canvas_renderer.draw_text(painter, x, y, text, theme_manager.get_color('label'), mono_font(9))

    def _stroke(self, painter, polygon, color, width, dashed=False):
        pen = QPen(color, width, Qt.DashLine if dashed else Qt.SolidLine)
        pen.setJoinStyle(Qt.RoundJoin)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)
        painter.drawPolyline(polygon)

    def _draw_response(self, painter, rect, response, color, scale=1.0, cap=None,
                       cutoff: Optional[float] = None, axis_label="0.5"):
        """Response plot; y = min(r, cap) * scale of the plot height."""
        self.canvas_renderer.draw_grid_lines(painter, rect, 4, include_edges=True, color_name='plot_grid')

        if cutoff is not None:
            x = rect.left() + cutoff / 0.5 * rect.width()
            painter.setPen(QPen(theme_manager.get_color('target', 0.5), 1, Qt.DashLine))
            painter.drawLine(QPointF(x, rect.top()), QPointF(x, rect.bottom()))

        def to_y(r):
            if cap is not None:
                r = min(r, cap)
            return rect.bottom() - r * rect.height() * scale

        self._stroke(painter, _trace(response, rect, to_y), color, 2)

        font = mono_font(7)
        muted = theme_manager.get_color('text_muted')
        self.canvas_renderer.draw_text(painter, rect.left(), rect.bottom() + 12, "0", muted, font, 'center')
        self.canvas_renderer.draw_text(painter, rect.right(), rect.bottom() + 12, axis_label, muted, font, 'center')

    def _draw_signals(self, painter, rect, signal, filtered, input_color, output_color,
                      input_width=1.5):
        center = rect.center().y()
        scale = rect.height() * SIGNAL_SCALE

        def to_y(v):
            return center - v * scale

        self._stroke(painter, _trace(signal, rect, to_y), input_color, input_width)
        self._stroke(painter, _trace(filtered, rect, to_y), output_color, 2)

    def _draw_line_legend(self, painter, items, x, y):
        painter.setFont(make_font(8))
        for label, swatch, text_color, offset in items:
            painter.fillRect(QRectF(x + offset, y - 8, 12, 3), swatch)
            painter.setPen(text_color)
            painter.drawText(QPointF(x + offset + 16, y), label)

    def _sections(self, width, height):
        plot_width = width - 2 * PADDING
        section_height = (height - 70) / 3
        sec1 = 30.0
        sec2 = sec1 + section_height + 10
        sec3 = sec2 + section_height + 10
        return plot_width, section_height, sec1, sec2, sec3

    # -- FIR demo ----------------------------------------------------------

    def draw_fir_demo(self, painter: QPainter, width: float, height: float,
                      coeffs: Sequence[float], response: Sequence[float],
                      signal: Sequence[float], filtered: Sequence[float],
                      cutoff: float, window: str):
        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            self.canvas_renderer.fill_background(painter, width, height, 'canvas_background_alt')
            plot_width, section_height, sec1, sec2, sec3 = self._sections(width, height)
            taps = len(coeffs)

            self._section_title(painter, PADDING, sec1, f"FIR Coefficients ({taps} taps, {window} window)")
            self._draw_coefficients(painter, coeffs, PADDING, plot_width, sec1 + section_height / 2 + 10,
                                    section_height * 0.35)

            self._section_title(painter, PADDING, sec2, "Frequency Response")
            response = np.asarray(response, dtype=float)
            peak = float(response.max()) if response.size else 0.0
            normalized = response / peak if peak > 0 else response
            rect = QRectF(PADDING, sec2 + 15, plot_width, section_height - 25)
            self._draw_response(painter, rect, normalized, theme_manager.get_color('target'),
                                scale=1.0, cutoff=cutoff)

            self._section_title(painter, PADDING, sec3, "Signal: Before & After")
            rect = QRectF(PADDING, sec3 + 15, plot_width, section_height - 25)
            self._draw_signals(painter, rect, signal, filtered,
                               theme_manager.get_color('measured_dark', 0.4),
                               theme_manager.get_color('success'))

            self._draw_line_legend(painter, [
                ("Input", theme_manager.get_color('measured_dark', 0.6), theme_manager.get_color('measured_dark'), 0),
                ("Filtered", theme_manager.get_color('success'), theme_manager.get_color('success'), 70),
            ], PADDING, height - 8)
        except Exception as e:
            logger.error(f"Error drawing FIR demo: {str(e)}")
        finally:
            painter.restore()

    def _draw_coefficients(self, painter, coeffs, left, plot_width, center_y, max_height):
        taps = len(coeffs)
        if taps == 0:
            return
        bar_width = min(25.0, (plot_width - 40) / taps)
        total = bar_width * taps
        start_x = left + (plot_width - total) / 2

        painter.setPen(QPen(theme_manager.get_color('zero_line'), 1))
        painter.drawLine(QPointF(start_x - 10, center_y), QPointF(start_x + total + 10, center_y))

        peak = max(abs(float(c)) for c in coeffs)
        if peak <= 0:
            return
        for i, c in enumerate(coeffs):
            bar = float(c) / peak * max_height
            top = center_y - bar if bar >= 0 else center_y
            color = theme_manager.get_color('measured_dark' if c >= 0 else 'error')
            painter.fillRect(QRectF(start_x + i * bar_width + 2, top, bar_width - 4, abs(bar)), color)

    # -- IIR demo ----------------------------------------------------------

    def draw_iir_demo(self, painter: QPainter, width: float, height: float,
                      alpha: float, order: int, response: Sequence[float],
                      signal: Sequence[float], filtered: Sequence[float],
                      show_feedback: bool = True):
        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            self.canvas_renderer.fill_background(painter, width, height, 'canvas_background_alt')
            plot_width, section_height, sec1, sec2, sec3 = self._sections(width, height)

            self._section_title(painter, PADDING, sec1, f"IIR Filter (Order {order}) - Recursive Structure")
            self._draw_recursive_diagram(painter, sec1 + section_height / 2, alpha, show_feedback)

            self._section_title(painter, PADDING, sec2, "Frequency Response")
            rect = QRectF(PADDING, sec2 + 15, plot_width, section_height - 25)
            self._draw_response(painter, rect, response, theme_manager.get_color('accent_purple'),
                                scale=0.8, cap=IIR_PLOT_CAP, axis_label="0.5 (Nyquist)")

            self._section_title(painter, PADDING, sec3, "Signal Processing")
            rect = QRectF(PADDING, sec3 + 15, plot_width, section_height - 25)
            self._draw_signals(painter, rect, signal, filtered,
                               theme_manager.get_color('measured_dark', 0.4),
                               theme_manager.get_color('success'))

            self._draw_line_legend(painter, [
                ("Input", theme_manager.get_color('measured_dark', 0.6), theme_manager.get_color('measured_dark'), 0),
                ("Output", theme_manager.get_color('success'), theme_manager.get_color('success'), 70),
                ("Response", theme_manager.get_color('accent_purple'), theme_manager.get_color('accent_purple'), 150),
            ], PADDING, height - 8)
        except Exception as e:
            logger.error(f"Error drawing IIR demo: {str(e)}")
        finally:
            painter.restore()

    def _draw_recursive_diagram(self, painter, y, alpha, show_feedback):
        """x[n] -> sum -> alpha gain -> y[n], with the z^-1 feedback path below."""
        box_w, box_h = 50.0, 30.0
        start_x = PADDING + 30
        sum_x = start_x + 70
        gain_x = sum_x + 80
        delay_x = gain_x + 80
        output_x = delay_x + 80

        input_color = theme_manager.get_color('measured_dark')
        wire = theme_manager.get_color('label')
        orange = theme_manager.get_color('target')
        purple = theme_manager.get_color('accent_purple')

        painter.setPen(QPen(input_color, 2))
        painter.drawLine(QPointF(start_x, y), QPointF(sum_x - 15, y))
        painter.setPen(Qt.NoPen)
        painter.setBrush(input_color)
        painter.drawPolygon(QPolygonF([QPointF(sum_x - 20, y - 5), QPointF(sum_x - 15, y), QPointF(sum_x - 20, y + 5)]))
        self.canvas_renderer.draw_text(painter, start_x - 10, y - 10, "x[n]", input_color, mono_font(9), 'center')

        painter.setPen(QPen(orange, 2))
        painter.setBrush(Qt.NoBrush)
        painter.drawEllipse(QPointF(sum_x, y), 15, 15)
        self.canvas_renderer.draw_text(painter, sum_x, y + 5, "Σ", orange, make_font(12), 'center')

        painter.setPen(QPen(wire, 2))
        painter.drawLine(QPointF(sum_x + 15, y), QPointF(gain_x - box_w / 2, y))

        gain_rect = QRectF(gain_x - box_w / 2, y - box_h / 2, box_w, box_h)
        painter.fillRect(gain_rect, theme_manager.get_color('oven_body'))
        painter.setPen(QPen(theme_manager.get_color('measured'), 2))
        painter.drawRect(gain_rect)
        self.canvas_renderer.draw_text(painter, gain_x, y + 5, f"α={alpha:.2f}",
                                       theme_manager.get_color('measured'), mono_font(9), 'center')

        painter.setPen(QPen(wire, 2))
        painter.drawLine(QPointF(gain_x + box_w / 2, y), QPointF(output_x, y))
        self.canvas_renderer.draw_text(painter, output_x + 20, y - 10, "y[n]",
                                       theme_manager.get_color('success'), mono_font(9), 'center')

        if show_feedback:
            feedback_y = y + 50
            pen = QPen(purple, 2, Qt.DashLine)
            pen.setDashPattern([2, 2])
            painter.setPen(pen)
            path = QPolygonF([QPointF(delay_x, y), QPointF(delay_x, feedback_y),
                              QPointF(sum_x, feedback_y), QPointF(sum_x, y + 15)])
            painter.drawPolyline(path)

            delay_rect = QRectF(delay_x - 25, feedback_y - 12, 50, 24)
            painter.fillRect(delay_rect, theme_manager.get_color('oven_body'))
            painter.setPen(QPen(purple, 2))
            painter.drawRect(delay_rect)
            self.canvas_renderer.draw_text(painter, delay_x, feedback_y + 4, "z⁻¹", purple, mono_font(9), 'center')
            self.canvas_renderer.draw_text(painter, sum_x - 40, feedback_y + 4, "× (1-α)", purple, mono_font(8), 'center')

    # -- Filter challenge --------------------------------------------------

    def draw_filter_challenge(self, painter: QPainter, width: float, height: float,
                              name: str, response: Sequence[float], cutoff: float,
                              signal_freqs: Sequence[float], noise_freqs: Sequence[float],
                              signal: Sequence[float], filtered: Sequence[float],
                              passing: bool):
        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            self.canvas_renderer.fill_background(painter, width, height, 'canvas_background_alt')
            plot_width = width - 2 * PADDING
            section_height = (height - 60) / 2
            sec1 = 25.0
            sec2 = sec1 + section_height + 15
            trace_color = theme_manager.get_color('success' if passing else 'target')

            self._section_title(painter, PADDING, sec1, f"Challenge: {name}")
            rect = QRectF(PADDING, sec1 + 15, plot_width, section_height - 20)
            self._draw_zones(painter, rect, signal_freqs, theme_manager.get_color('success', 0.15))
            self._draw_zones(painter, rect, noise_freqs, theme_manager.get_color('error', 0.15))

            response = np.asarray(response, dtype=float)
            peak = float(response.max()) if response.size else 0.0
            normalized = response / peak if peak > 0 else response
            self._draw_response(painter, rect, normalized, trace_color, scale=0.9, cutoff=cutoff)

            self._section_title(painter, PADDING, sec2, "Live Signal")
            rect = QRectF(PADDING, sec2 + 15, plot_width, section_height - 25)
            self._draw_signals(painter, rect, signal, filtered,
                               theme_manager.get_color('label', 0.3), trace_color, input_width=1)

            if passing:
                self.canvas_renderer.draw_text(painter, width - PADDING, sec1, "✓ PASSED",
                                               theme_manager.get_color('success'),
                                               mono_font(10, bold=True), 'right')

            legend_y = height - 8
            painter.setFont(make_font(8))
            painter.fillRect(QRectF(PADDING, legend_y - 8, 12, 12), theme_manager.get_color('success', 0.4))
            painter.setPen(theme_manager.get_color('success'))
            painter.drawText(QPointF(PADDING + 16, legend_y), "Pass band")
            painter.fillRect(QRectF(PADDING + 90, legend_y - 8, 12, 12), theme_manager.get_color('error', 0.4))
            painter.setPen(theme_manager.get_color('error'))
            painter.drawText(QPointF(PADDING + 106, legend_y), "Stop band")
        except Exception as e:
            logger.error(f"Error drawing filter challenge: {str(e)}")
        finally:
            painter.restore()

    def _draw_zones(self, painter, rect, freqs, color: QColor):
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(color))
        for freq in freqs:
            x = rect.left() + freq / 0.5 * rect.width()
            painter.drawRect(QRectF(x - ZONE_HALF_WIDTH, rect.top(), 2 * ZONE_HALF_WIDTH, rect.height()))
