"""
Theme Management for the widget gallery
Provides the shared color palette used by every renderer.
"""

from enum import Enum
from typing import Dict, Any, Optional
from PyQt5.QtGui import QColor
from PyQt5.QtCore import QObject, pyqtSignal


class ThemeType(Enum):
    DARK = "dark"
    LIGHT = "light"


class ThemeManager(QObject):
    """Manages the active palette for canvases and panels."""

    theme_changed = pyqtSignal(str)  # Emitted when theme changes

    def __init__(self):
        super().__init__()
        self.current_theme = ThemeType.DARK
        self.themes = {
            ThemeType.DARK: self._create_dark_theme(),
            ThemeType.LIGHT: self._create_light_theme()
        }

    def _create_dark_theme(self) -> Dict[str, Any]:
        """Zinc-on-black palette the widgets were designed for."""
        return {
            # Canvas
            'canvas_background': '#09090b',
            'canvas_background_alt': '#000000',
            'panel_background': '#18181b',
            'grid_lines': '#1a1a1e',
            'axis': '#3f3f46',

            # Text
            'text_primary': '#e4e4e7',
            'text_secondary': '#a1a1aa',
            'text_muted': '#71717a',

            # Dial and motor
            'track': '#27272a',
            'end_stop': '#3f3f46',
            'motor_fin': '#3f3f46',
            'motor_light': '#52525b',
            'motor_dark': '#27272a',
            'dial_body': '#1e293b',
            'tick_major': '#64748b',
            'tick_minor': '#3f3f46',
            'mass': '#71717a',
            'mass_highlight': '#a1a1aa',

            # Traces
            'measured': '#60a5fa',
            'measured_light': '#93c5fd',
            'measured_dark': '#3b82f6',
            'target': '#f97316',
            'target_hover': '#fb923c',
            'target_light': '#fdba74',

            # Status
            'error': '#ef4444',
            'error_light': '#f87171',
            'success': '#22c55e',
            'success_light': '#4ade80',
            'warning': '#f59e0b',

            # Controller terms
            'term_p': '#60a5fa',
            'term_i': '#4ade80',
            'term_d': '#c084fc',

            # Oven
            'oven_body': '#1e293b',
            'oven_edge': '#475569',
            'oven_glass': '#0f172a',

            # Diagrams
            'block_fill': '#18181b',
            'block_border': '#3f3f46',
            'flow_dot': '#f97316',
            'feedback': '#60a5fa',
            'accent_purple': '#a855f7',
            'accent_emerald': '#10b981',
            'accent_amber': '#fbbf24',
            'label': '#94a3b8',
            'zero_line': '#334155',
            'plot_grid': '#1e293b',
        }

    def _create_light_theme(self) -> Dict[str, Any]:
        """Light palette for printing and bright rooms."""
        return {
            'canvas_background': '#fafafa',
            'canvas_background_alt': '#ffffff',
            'panel_background': '#f4f4f5',
            'grid_lines': '#e4e4e7',
            'axis': '#a1a1aa',

            'text_primary': '#18181b',
            'text_secondary': '#52525b',
            'text_muted': '#71717a',

            'track': '#d4d4d8',
            'end_stop': '#a1a1aa',
            'motor_fin': '#a1a1aa',
            'motor_light': '#d4d4d8',
            'motor_dark': '#71717a',
            'dial_body': '#e2e8f0',
            'tick_major': '#475569',
            'tick_minor': '#a1a1aa',
            'mass': '#71717a',
            'mass_highlight': '#d4d4d8',

            'measured': '#2563eb',
            'measured_light': '#3b82f6',
            'measured_dark': '#1d4ed8',
            'target': '#ea580c',
            'target_hover': '#f97316',
            'target_light': '#fdba74',

            'error': '#dc2626',
            'error_light': '#ef4444',
            'success': '#16a34a',
            'success_light': '#22c55e',
            'warning': '#d97706',

            'term_p': '#2563eb',
            'term_i': '#16a34a',
            'term_d': '#9333ea',

            'oven_body': '#cbd5e1',
            'oven_edge': '#64748b',
            'oven_glass': '#e2e8f0',

            'block_fill': '#ffffff',
            'block_border': '#a1a1aa',
            'flow_dot': '#ea580c',
            'feedback': '#2563eb',
            'accent_purple': '#9333ea',
            'accent_emerald': '#059669',
            'accent_amber': '#d97706',
            'label': '#475569',
            'zero_line': '#cbd5e1',
            'plot_grid': '#e2e8f0',
        }

    def get_current_theme(self) -> Dict[str, Any]:
        """Get the current theme colors."""
        return self.themes[self.current_theme]

    def get_color(self, color_name: str, alpha: Optional[float] = None) -> QColor:
        """
        Get a QColor for the named palette entry.

        Args:
            color_name: Palette key; unknown keys yield black.
            alpha: Optional opacity in [0, 1].
        """
        theme = self.get_current_theme()
        color = QColor(theme.get(color_name, '#000000'))
        if alpha is not None:
            color.setAlphaF(max(0.0, min(1.0, alpha)))
        return color

    def get_qss_variables(self) -> Dict[str, str]:
        """Palette entries keyed as ``@name`` for stylesheet substitution, longest first."""
        theme = self.get_current_theme()
        return {f"@{key}": theme[key] for key in sorted(theme, key=len, reverse=True)}

    def set_theme(self, theme_type: ThemeType):
        """Change the current theme."""
        if theme_type != self.current_theme:
            self.current_theme = theme_type
            self.theme_changed.emit(theme_type.value)

    def toggle_theme(self):
        """Toggle between dark and light themes."""
        if self.current_theme == ThemeType.DARK:
            self.set_theme(ThemeType.LIGHT)
        else:
            self.set_theme(ThemeType.DARK)


# Global theme manager instance
theme_manager = ThemeManager()
