"""
Dial Renderer Module
Draws the motor-driven pointer: semicircular track, legal target zone, error
arc, predicted settling marker, draggable target handle, motor body, arm with
counterweight, hanging mass and the torque indicator. Also draws the compact
full-circle dial used by the tuning challenge.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple
from PyQt5.QtGui import QPainter, QPen, QColor, QPainterPath, QRadialGradient, QBrush, QPolygonF
from PyQt5.QtCore import Qt, QPointF, QRectF
from canvas_ui.themes.theme_manager import theme_manager
from canvas_ui.renderers.canvas_renderer import CanvasRenderer

logger = logging.getLogger(__name__)

MOTOR_RADIUS = 28
FIN_COUNT = 12
COUNTERWEIGHT_LENGTH = 24
SSE_ARC_THRESHOLD = 0.02


@dataclass(frozen=True)
class DialGeometry:
    """
    Projection between pointer angles and logical canvas coordinates.

    Angles are measured counter-clockwise from the positive x axis, so 0 is
    the right end of the track, pi/2 straight up and pi the left end. The
    renderer and the target interaction both use this so that dragging is
    the exact inverse of drawing.
    """
    width: float = 440.0
    height: float = 280.0
    bottom_margin: float = 35.0
    handle_offset: float = 25.0

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2.0, self.height - self.bottom_margin

    @property
    def radius(self) -> float:
        return min(self.width, self.height * 1.5) * 0.4

    def point_at(self, angle: float, distance: float) -> Tuple[float, float]:
        cx, cy = self.center
        return cx + math.cos(angle) * distance, cy - math.sin(angle) * distance

    def handle_position(self, target: float) -> Tuple[float, float]:
        return self.point_at(target, self.radius + self.handle_offset)

    def angle_at(self, x: float, y: float) -> float:
        """Angle of the ray from the dial centre through (x, y); not clamped."""
        cx, cy = self.center
        return -math.atan2(y - cy, x - cx)


def _arc_rect(cx: float, cy: float, r: float) -> QRectF:
    return QRectF(cx - r, cy - r, 2 * r, 2 * r)


def _deg16(radians: float) -> int:
    """Qt arc angles are in 1/16th of a degree, counter-clockwise."""
    return int(round(math.degrees(radians) * 16))


class DialRenderer:
    """Renderer for pointer-on-dial widgets."""

    def __init__(self):
        self.canvas_renderer = CanvasRenderer()

    def draw_dial(self, painter: QPainter, geometry: DialGeometry, angle: float, target: float,
                  power: float = 0.0, hovering: bool = False,
                  predicted_settling: Optional[float] = None, mass: float = 0.0,
                  mouse_pos: Optional[Tuple[float, float]] = None, in_canvas: bool = False,
                  target_range: Tuple[float, float] = (math.pi / 4, 3 * math.pi / 4)):
        """Full repaint of the half-dial pointer canvas."""
        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            self.canvas_renderer.fill_background(painter, geometry.width, geometry.height)
            cx, cy = geometry.center
            radius = geometry.radius

            self._draw_track(painter, cx, cy, radius)
            if predicted_settling is not None:
                self._draw_settling_marker(painter, cx, cy, radius, target, predicted_settling)
            self._draw_target_zone(painter, cx, cy, radius, target_range)
            self._draw_error_arc(painter, cx, cy, radius, angle, target)
            self._draw_end_stops(painter, cx, cy, radius)
            self._draw_target_handle(painter, cx, cy, radius, geometry.handle_offset, target, hovering)
            if in_canvas and mouse_pos is not None and not hovering:
                self._draw_guide_line(painter, geometry, target, mouse_pos)
            self._draw_motor(painter, cx, cy)
            self._draw_arm(painter, cx, cy, radius, angle)
            if mass > 0:
                self._draw_hanging_mass(painter, geometry, angle, mass)
            if abs(power) > 0.1:
                self._draw_power_arrow(painter, cx, cy, power)
        except Exception as e:
            logger.error(f"Error drawing dial: {str(e)}")
        finally:
            painter.restore()

    def _draw_track(self, painter, cx, cy, radius):
        pen = QPen(theme_manager.get_color('track'), 3)
        pen.setCapStyle(Qt.RoundCap)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)
        painter.drawArc(_arc_rect(cx, cy, radius), 0, 180 * 16)

    def _draw_settling_marker(self, painter, cx, cy, radius, target, predicted):
        settling = max(0.0, min(math.pi, predicted))
        if abs(target - settling) > SSE_ARC_THRESHOLD:
            lo = min(settling, target)
            pen = QPen(theme_manager.get_color('error', 0.35), 8)
            pen.setCapStyle(Qt.RoundCap)
            painter.setPen(pen)
            painter.drawArc(_arc_rect(cx, cy, radius - 6), _deg16(lo), _deg16(abs(target - settling)))

        painter.save()
        try:
            painter.translate(cx, cy)
            painter.rotate(-math.degrees(settling))
            pen = QPen(theme_manager.get_color('error'), 3)
            pen.setCapStyle(Qt.RoundCap)
            painter.setPen(pen)
            painter.drawLine(QPointF(radius - 12, 0), QPointF(radius + 12, 0))
            painter.drawLine(QPointF(radius + 12, -6), QPointF(radius + 12, 6))
        finally:
            painter.restore()

    def _draw_target_zone(self, painter, cx, cy, radius, target_range):
        lo, hi = target_range
        painter.setPen(QPen(theme_manager.get_color('target', 0.3), 6))
        painter.drawArc(_arc_rect(cx, cy, radius + 8), _deg16(lo), _deg16(hi - lo))

    def _draw_error_arc(self, painter, cx, cy, radius, angle, target):
        pen = QPen(theme_manager.get_color('error', 0.3), 20)
        pen.setCapStyle(Qt.FlatCap)
        painter.setPen(pen)
        painter.drawArc(_arc_rect(cx, cy, radius - 15), _deg16(angle), _deg16(target - angle))

    def _draw_end_stops(self, painter, cx, cy, radius):
        painter.setPen(Qt.NoPen)
        painter.setBrush(theme_manager.get_color('end_stop'))
        painter.drawEllipse(QPointF(cx + radius, cy), 4, 4)
        painter.drawEllipse(QPointF(cx - radius, cy), 4, 4)

    def _draw_target_handle(self, painter, cx, cy, radius, offset, target, hovering):
        color = theme_manager.get_color('target_hover' if hovering else 'target')
        painter.save()
        try:
            painter.translate(cx, cy)
            painter.rotate(-math.degrees(target))

            pen = QPen(color, 3, Qt.DashLine)
            pen.setDashPattern([8 / 3, 8 / 3])
            painter.setPen(pen)
            painter.drawLine(QPointF(radius * 0.3, 0), QPointF(radius + offset, 0))

            knob = 14 if hovering else 12
            painter.setPen(QPen(theme_manager.get_color('target_light'), 2))
            painter.setBrush(color)
            painter.drawEllipse(QPointF(radius + offset, 0), knob, knob)

            painter.setPen(Qt.NoPen)
            painter.setBrush(QColor('#ffffff'))
            painter.drawEllipse(QPointF(radius + offset, 0), 3, 3)
        finally:
            painter.restore()

    def _draw_guide_line(self, painter, geometry, target, mouse_pos):
        hx, hy = geometry.handle_position(target)
        mx, my = mouse_pos
        pen = QPen(theme_manager.get_color('target', 0.25), 2, Qt.DashLine)
        pen.setDashPattern([2, 2])
        painter.setPen(pen)
        painter.drawLine(QPointF(mx, my), QPointF(hx, hy))
        painter.setPen(Qt.NoPen)
        painter.setBrush(theme_manager.get_color('target', 0.4))
        painter.drawEllipse(QPointF(mx, my), 4, 4)

    def _draw_motor(self, painter, cx, cy):
        pen = QPen(theme_manager.get_color('motor_fin'), 4)
        pen.setCapStyle(Qt.RoundCap)
        painter.setPen(pen)
        for i in range(FIN_COUNT):
            a = i / FIN_COUNT * 2 * math.pi
            painter.drawLine(
                QPointF(cx + math.cos(a) * (MOTOR_RADIUS - 2), cy + math.sin(a) * (MOTOR_RADIUS - 2)),
                QPointF(cx + math.cos(a) * (MOTOR_RADIUS + 2), cy + math.sin(a) * (MOTOR_RADIUS + 2)),
            )

        gradient = QRadialGradient(QPointF(cx, cy), MOTOR_RADIUS)
        gradient.setColorAt(0.0, theme_manager.get_color('motor_light'))
        gradient.setColorAt(0.7, theme_manager.get_color('motor_fin'))
        gradient.setColorAt(1.0, theme_manager.get_color('motor_dark'))
        painter.setBrush(QBrush(gradient))
        painter.setPen(QPen(theme_manager.get_color('motor_light'), 2))
        painter.drawEllipse(QPointF(cx, cy), MOTOR_RADIUS, MOTOR_RADIUS)

        painter.setPen(Qt.NoPen)
        painter.setBrush(theme_manager.get_color('motor_light'))
        painter.drawEllipse(QPointF(cx, cy), 8, 8)

    def _draw_arm(self, painter, cx, cy, radius, angle):
        painter.save()
        try:
            painter.translate(cx, cy)
            painter.rotate(-math.degrees(angle))
            arm_color = theme_manager.get_color('measured')

            pen = QPen(arm_color, 6)
            pen.setCapStyle(Qt.RoundCap)
            painter.setPen(pen)
            painter.drawLine(QPointF(-COUNTERWEIGHT_LENGTH + 5, 0), QPointF(radius, 0))

            painter.setPen(Qt.NoPen)
            painter.setBrush(theme_manager.get_color('measured_light'))
            painter.drawEllipse(QPointF(radius, 0), 4, 4)

            path = QPainterPath(QPointF(-4, 0))
            path.quadTo(QPointF(-COUNTERWEIGHT_LENGTH, -14), QPointF(-COUNTERWEIGHT_LENGTH, 0))
            path.quadTo(QPointF(-COUNTERWEIGHT_LENGTH, 14), QPointF(-4, 0))
            painter.setBrush(arm_color)
            painter.drawPath(path)

            painter.setBrush(QColor('#000000'))
            painter.drawEllipse(QPointF(0, 0), 3, 3)
        finally:
            painter.restore()

    def _draw_hanging_mass(self, painter, geometry, angle, mass):
        size = 6 + mass * 8
        rope = 15 + mass * 5
        tip_x, tip_y = geometry.point_at(angle, geometry.radius)

        painter.setPen(QPen(theme_manager.get_color('mass_highlight'), 2))
        painter.drawLine(QPointF(tip_x, tip_y), QPointF(tip_x, tip_y + rope))

        mass_y = tip_y + rope + size
        painter.setPen(QPen(theme_manager.get_color('motor_light'), 2))
        painter.setBrush(theme_manager.get_color('mass'))
        painter.drawEllipse(QPointF(tip_x, mass_y), size, size)

        painter.setPen(Qt.NoPen)
        painter.setBrush(theme_manager.get_color('mass_highlight'))
        painter.drawEllipse(QPointF(tip_x - size * 0.3, mass_y - size * 0.3), size * 0.25, size * 0.25)

    def _draw_power_arrow(self, painter, cx, cy, power):
        """Curved arrow inside the motor; length and direction follow the torque."""
        arrow_radius = 24
        arc_length = min(abs(power), 1.0) * math.pi * 0.8
        direction = 1 if power > 0 else -1
        color = theme_manager.get_color('success_light' if power > 0 else 'error_light')
        head_length = 7
        head_width = 4

        # Screen angles, counter-clockwise from +x; the arrow starts at the top
        start = math.pi / 2
        end = start + direction * arc_length
        trim = min(head_length / arrow_radius, arc_length * 0.8)

        pen = QPen(color, 3)
        pen.setCapStyle(Qt.RoundCap)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)
        painter.drawArc(_arc_rect(cx, cy, arrow_radius), _deg16(start),
                        _deg16(direction * (arc_length - trim)))

        if arc_length > 0.2:
            tip = QPointF(cx + math.cos(end) * (arrow_radius - 0.7), cy - math.sin(end) * (arrow_radius - 0.7))
            # Unit tangent in the direction of travel (screen coordinates)
            tx, ty = -math.sin(end) * direction, -math.cos(end) * direction
            back = QPointF(tip.x() - tx * head_length, tip.y() - ty * head_length)
            px, py = -ty, tx
            head = QPolygonF([
                tip,
                QPointF(back.x() + px * head_width, back.y() + py * head_width),
                QPointF(back.x() - px * head_width, back.y() - py * head_width),
            ])
            painter.setPen(Qt.NoPen)
            painter.setBrush(color)
            painter.drawPolygon(head)

    def draw_challenge_dial(self, painter: QPainter, width: float, height: float,
                            angle: float, target: float, mass: float = 0.0):
        """Compact full-circle dial used by the tuning challenge."""
        painter.save()
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            self.canvas_renderer.fill_background(painter, width, height, 'canvas_background_alt')
            cx, cy = width / 2.0, height / 2.0
            radius = min(width, height) / 2.0 - 35

            painter.setPen(Qt.NoPen)
            painter.setBrush(theme_manager.get_color('dial_body'))
            painter.drawEllipse(QPointF(cx, cy), radius + 12, radius + 12)

            for deg in range(0, 181, 15):
                a = math.radians(deg)
                major = deg % 45 == 0
                painter.setPen(QPen(theme_manager.get_color('tick_major' if major else 'tick_minor'),
                                    2 if major else 1))
                painter.drawLine(
                    QPointF(cx + math.cos(a) * (radius - 5), cy - math.sin(a) * (radius - 5)),
                    QPointF(cx + math.cos(a) * (radius + 6), cy - math.sin(a) * (radius + 6)),
                )

            tx, ty = cx + math.cos(target) * radius, cy - math.sin(target) * radius
            painter.setPen(Qt.NoPen)
            painter.setBrush(theme_manager.get_color('target'))
            painter.drawEllipse(QPointF(tx, ty), 8, 8)
            painter.setBrush(QColor('#ffffff'))
            painter.drawEllipse(QPointF(tx, ty), 3, 3)

            if abs(target - angle) > SSE_ARC_THRESHOLD:
                pen = QPen(theme_manager.get_color('error', 0.5), 3)
                pen.setCapStyle(Qt.FlatCap)
                painter.setPen(pen)
                painter.setBrush(Qt.NoBrush)
                painter.drawArc(_arc_rect(cx, cy, radius - 12), _deg16(angle), _deg16(target - angle))

            arm = theme_manager.get_color('measured_dark')
            pen = QPen(arm, 5)
            pen.setCapStyle(Qt.RoundCap)
            painter.setPen(pen)
            length = radius - 18
            px, py = cx + math.cos(angle) * length, cy - math.sin(angle) * length
            wx, wy = cx - math.cos(angle) * 22, cy + math.sin(angle) * 22
            painter.drawLine(QPointF(cx, cy), QPointF(wx, wy))
            painter.drawLine(QPointF(cx, cy), QPointF(px, py))
            painter.setPen(Qt.NoPen)
            painter.setBrush(arm)
            painter.drawEllipse(QPointF(wx, wy), 7, 7)

            if mass > 0:
                size = 6 + mass * 10
                painter.setPen(QPen(QColor('#fca5a5'), 1.5))
                painter.setBrush(theme_manager.get_color('error'))
                painter.drawEllipse(QPointF(px, py), size, size)

            painter.setPen(Qt.NoPen)
            painter.setBrush(theme_manager.get_color('track'))
            painter.drawEllipse(QPointF(cx, cy), 6, 6)
        except Exception as e:
            logger.error(f"Error drawing challenge dial: {str(e)}")
        finally:
            painter.restore()
