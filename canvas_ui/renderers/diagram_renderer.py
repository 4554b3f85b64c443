"""
Diagram Renderer Module
Static block diagrams (single PID loop, cascaded position/angle loops) with
decorative dots flowing along each signal path.
"""

import logging
import math
from typing import Sequence, Tuple
from PyQt5.QtGui import QPainter, QPen, QColor, QPolygonF
from PyQt5.QtCore import Qt, QPointF, QRectF
from canvas_ui.themes.theme_manager import theme_manager
from canvas_ui.renderers.canvas_renderer import CanvasRenderer, make_font, mono_font

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

DOT_RADIUS = 2.5
FLOW_SPEED = 0.8
FEEDBACK_SPEED = 0.2


def flow_position(time: float, speed: float = FLOW_SPEED, phase: float = 0.0) -> float:
    """Fraction in [0, 1) along a path; purely a function of animation time."""
    return (time * speed + phase) % 1.0


def path_point(points: Sequence[Point], fraction: float) -> Point:
    """Point at ``fraction`` of the total arc length of a polyline."""
    if len(points) == 1:
        return points[0]
    lengths = [math.hypot(x2 - x1, y2 - y1) for (x1, y1), (x2, y2) in zip(points, points[1:])]
    total = sum(lengths)
    if total <= 0:
        return points[0]
    distance = max(0.0, min(1.0, fraction)) * total
    for (x1, y1), (x2, y2), length in zip(points, points[1:], lengths):
        if distance <= length and length > 0:
            t = distance / length
            return x1 + (x2 - x1) * t, y1 + (y2 - y1) * t
        distance -= length
    return points[-1]


class DiagramRenderer:
    """Renderer for the control-loop and cascade diagrams."""

    def __init__(self, flow_speed: float = FLOW_SPEED):
        self.canvas_renderer = CanvasRenderer()
        self.flow_speed = flow_speed

    # -- primitives --------------------------------------------------------

    def _flow_dot(self, painter, path, color, time, phase, speed=None, opacity=0.7):
        speed = self.flow_speed if speed is None else speed
        x, y = path_point(path, flow_position(time, speed, phase))
        dot = QColor(color)
        dot.setAlphaF(opacity)
        painter.setPen(Qt.NoPen)
        painter.setBrush(dot)
        painter.drawEllipse(QPointF(x, y), DOT_RADIUS, DOT_RADIUS)

    def _arrow_line(self, painter, start, end, color, label=None, label_y=None, head=7.0):
        x1, y1 = start
        x2, y2 = end
        painter.setPen(QPen(color, 1.5))
        painter.drawLine(QPointF(x1, y1), QPointF(x2, y2))

        angle = math.atan2(y2 - y1, x2 - x1)
        painter.setPen(Qt.NoPen)
        painter.setBrush(color)
        painter.drawPolygon(QPolygonF([
            QPointF(x2, y2),
            QPointF(x2 - head * math.cos(angle - 0.4), y2 - head * math.sin(angle - 0.4)),
            QPointF(x2 - head * math.cos(angle + 0.4), y2 - head * math.sin(angle + 0.4)),
        ]))

        if label and label_y is not None:
            self.canvas_renderer.draw_text(painter, (x1 + x2) / 2, label_y, label, color, mono_font(7), 'center')

    def _box(self, painter, center_x, center_y, width, height, color, title, subtitle,
             title_dy=-4, subtitle_dy=10, radius=6):
        rect = QRectF(center_x - width / 2, center_y - height / 2, width, height)
        painter.setPen(QPen(color, 2))
        painter.setBrush(theme_manager.get_color('dial_body'))
        painter.drawRoundedRect(rect, radius, radius)
        self.canvas_renderer.draw_text(painter, center_x, center_y + title_dy, title, color,
                                       make_font(8, bold=True), 'center')
        self.canvas_renderer.draw_text(painter, center_x, center_y + subtitle_dy, subtitle,
                                       theme_manager.get_color('tick_major'), mono_font(6.5), 'center')

    def _sum(self, painter, x, y, radius, color, symbol="Σ"):
        painter.setPen(QPen(color, 2))
        painter.setBrush(theme_manager.get_color('dial_body'))
        painter.drawEllipse(QPointF(x, y), radius, radius)
        self.canvas_renderer.draw_text(painter, x, y + radius * 0.36, symbol, color,
                                       make_font(radius * 0.7, bold=True), 'center')

    def _feedback(self, painter, path, color, arrow_tip):
        painter.setPen(QPen(color, 1.5))
        painter.setBrush(Qt.NoBrush)
        painter.drawPolyline(QPolygonF([QPointF(x, y) for x, y in path]))
        tx, ty = arrow_tip
        painter.setPen(Qt.NoPen)
        painter.setBrush(color)
        painter.drawPolygon(QPolygonF([QPointF(tx, ty), QPointF(tx - 4, ty + 7), QPointF(tx + 4, ty + 7)]))

    # -- single PID loop ---------------------------------------------------

    def draw_control_loop(self, painter: QPainter, width: float, height: float, time: float):
        """Setpoint -> sum -> controller -> plant, with measured feedback."""
        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            self.canvas_renderer.fill_background(painter, width, height)
            y = height / 2 - 8
            box_h = 44
            sum_x, controller_x, plant_x = 90.0, 220.0, 400.0

            setpoint = theme_manager.get_color('target')
            error = theme_manager.get_color('error')
            torque = theme_manager.get_color('accent_purple')
            feedback = theme_manager.get_color('success')

            self.canvas_renderer.draw_text(painter, 30, y - 12, "Setpoint", setpoint,
                                           make_font(7.5, bold=True), 'center')
            painter.setPen(Qt.NoPen)
            painter.setBrush(setpoint)
            painter.drawEllipse(QPointF(30, y), 4, 4)

            path = [(34, y), (sum_x - 14, y)]
            self._arrow_line(painter, *path, setpoint)
            self._flow_dot(painter, path, setpoint, time, 0.0)

            self._sum(painter, sum_x, y, 14, error)

            path = [(sum_x + 14, y), (controller_x - 60, y)]
            self._arrow_line(painter, *path, error, "error", y - 12)
            self._flow_dot(painter, path, error, time, 0.25)

            self._box(painter, controller_x, y, 120, box_h + 8, torque,
                      "Controller", "Kp·e + Ki·∫e + Kd·ė", title_dy=-6, subtitle_dy=11)

            path = [(controller_x + 60, y), (plant_x - 50, y)]
            self._arrow_line(painter, *path, torque, "torque", y - 12)
            self._flow_dot(painter, path, torque, time, 0.5)

            self._box(painter, plant_x, y, 100, box_h, theme_manager.get_color('measured_dark'),
                      "Plant", "(motor + pointer)")

            feedback_y = y + 52
            path = [(plant_x + 50, y), (plant_x + 70, y), (plant_x + 70, feedback_y),
                    (sum_x, feedback_y), (sum_x, y + 14)]
            self._feedback(painter, path, feedback, (sum_x, y + 14))
            self.canvas_renderer.draw_text(painter, sum_x - 20, y + 24, "−", feedback,
                                           make_font(8, bold=True), 'center')
            self.canvas_renderer.draw_text(painter, (plant_x + 70 + sum_x) / 2, feedback_y + 12,
                                           "measured position", feedback, mono_font(7), 'center')
            for i in range(3):
                self._flow_dot(painter, path, feedback, time, i * 0.33, speed=FEEDBACK_SPEED, opacity=0.6)
        except Exception as e:
            logger.error(f"Error drawing control loop diagram: {str(e)}")
        finally:
            painter.restore()

    # -- cascade -----------------------------------------------------------

    def draw_cascade(self, painter: QPainter, width: float, height: float, time: float):
        """Outer position PD biasing the inner angle PD of a cart-pendulum."""
        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            self.canvas_renderer.fill_background(painter, width, height)
            box_w, box_h = 90.0, 44.0
            y = height / 2 + 5
            pos_sum_x, pos_loop_x = 75.0, 175.0
            angle_sum_x, angle_err_sum_x = 295.0, 415.0
            angle_loop_x, plant_x = 530.0, 700.0

            orange = theme_manager.get_color('target')
            red = theme_manager.get_color('error')
            emerald = theme_manager.get_color('accent_emerald')
            amber = theme_manager.get_color('accent_amber')
            blue = theme_manager.get_color('measured_dark')
            purple = theme_manager.get_color('accent_purple')
            grey = theme_manager.get_color('label')

            # Position error junction, fed from above by the target
            target_y = y - 48
            self.canvas_renderer.draw_text(painter, pos_sum_x, target_y - 8, "Target x", orange,
                                           make_font(7, bold=True), 'center')
            painter.setPen(Qt.NoPen)
            painter.setBrush(orange)
            painter.drawEllipse(QPointF(pos_sum_x, target_y + 4), 3, 3)
            path = [(pos_sum_x, target_y + 7), (pos_sum_x, y - 11)]
            self._arrow_line(painter, *path, orange, head=6)
            self._flow_dot(painter, path, orange, time, 0.0)

            self._sum(painter, pos_sum_x, y, 11, red)
            self.canvas_renderer.draw_text(painter, pos_sum_x - 16, y + 4, "−", emerald,
                                           make_font(7, bold=True), 'center')

            path = [(pos_sum_x + 11, y), (pos_loop_x - box_w / 2, y)]
            self._arrow_line(painter, *path, red, "error x", y - 10, head=6)
            self._flow_dot(painter, path, red, time, 0.15)

            self._box(painter, pos_loop_x, y, box_w, box_h, emerald, "Position PD", "Kp_x · Kd_x", radius=8)

            path = [(pos_loop_x + box_w / 2, y), (angle_sum_x - 11, y)]
            self._arrow_line(painter, *path, emerald, "bias", y - 10, head=6)
            self._flow_dot(painter, path, emerald, time, 0.3)

            # Bias added to the nominal upright angle
            nominal_y = y - 48
            self.canvas_renderer.draw_text(painter, angle_sum_x, nominal_y - 2, "θ = 0°", grey,
                                           make_font(7, bold=True), 'center')
            path = [(angle_sum_x, nominal_y + 6), (angle_sum_x, y - 11)]
            self._arrow_line(painter, *path, grey, head=6)
            self._flow_dot(painter, path, grey, time, 0.2)
            self._sum(painter, angle_sum_x, y, 11, amber, "+")

            path = [(angle_sum_x + 11, y), (angle_err_sum_x - 11, y)]
            self._arrow_line(painter, *path, amber, "target θ", y - 10, head=6)
            self._flow_dot(painter, path, amber, time, 0.4)

            self._sum(painter, angle_err_sum_x, y, 11, red)
            self.canvas_renderer.draw_text(painter, angle_err_sum_x - 16, y + 4, "−", blue,
                                           make_font(7, bold=True), 'center')

            path = [(angle_err_sum_x + 11, y), (angle_loop_x - box_w / 2, y)]
            self._arrow_line(painter, *path, red, "error θ", y - 10, head=6)
            self._flow_dot(painter, path, red, time, 0.5)

            self._box(painter, angle_loop_x, y, box_w, box_h, blue, "Angle PD", "Kp_θ · Kd_θ", radius=8)

            path = [(angle_loop_x + box_w / 2, y), (plant_x - box_w / 2, y)]
            self._arrow_line(painter, *path, blue, "force", y - 10, head=6)
            self._flow_dot(painter, path, blue, time, 0.6)

            self._box(painter, plant_x, y, box_w, box_h, purple, "Plant", "cart + pendulum", radius=8)

            # Outer loop feeds back cart position, inner loop the angle
            pos_feedback_y = y + 60
            path = [(plant_x, y + box_h / 2), (plant_x, pos_feedback_y),
                    (pos_sum_x, pos_feedback_y), (pos_sum_x, y + 11)]
            self._feedback(painter, path, emerald, (pos_sum_x, y + 11))
            self._flow_dot(painter, path, emerald, time, 0.0)
            self.canvas_renderer.draw_text(painter, (plant_x + pos_sum_x) / 2, pos_feedback_y + 12,
                                           "measured x", emerald, mono_font(7), 'center')

            angle_feedback_y = y + 38
            path = [(plant_x - 15, y + box_h / 2), (plant_x - 15, angle_feedback_y),
                    (angle_err_sum_x, angle_feedback_y), (angle_err_sum_x, y + 11)]
            self._feedback(painter, path, blue, (angle_err_sum_x, y + 11))
            self._flow_dot(painter, path, blue, time, 0.5)
            self.canvas_renderer.draw_text(painter, (plant_x - 15 + angle_err_sum_x) / 2, angle_feedback_y + 12,
                                           "measured θ", blue, mono_font(7), 'center')
        except Exception as e:
            logger.error(f"Error drawing cascade diagram: {str(e)}")
        finally:
            painter.restore()
