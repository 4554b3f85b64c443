"""
Tuning Panel - slider rows for live parameter changes.

Each row clamps its value to a declared [min, max] range and emits it
immediately; the owning widget applies it to the driver, which picks it up
at the start of the next tick.
"""

import logging
from typing import Dict, Optional
from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QToolButton, QFrame, QSlider, QLineEdit
)
from PyQt5.QtCore import pyqtSignal, Qt
from PyQt5.QtGui import QFont

logger = logging.getLogger(__name__)


class ParameterSlider(QFrame):
    """Compact single-line parameter row: label | slider | value | reset."""

    value_changed = pyqtSignal(str, float)  # param_name, value

    def __init__(self, name, label, value, min_val, max_val, step=None, decimals=2,
                 parent=None):
        super().__init__(parent)
        if min_val >= max_val:
            raise ValueError(f"Slider '{name}' needs min < max, got [{min_val}, {max_val}]")
        self.name = name
        self._min = float(min_val)
        self._max = float(max_val)
        self._step = step
        self._decimals = decimals
        self._steps = 1000 if step is None else max(1, int(round((self._max - self._min) / step)))
        self._suppress_signals = False
        self._value = self.clamp(value)
        self._initial_value = self._value

        self.setFrameStyle(QFrame.NoFrame)
        self.setFixedHeight(28)

        row = QHBoxLayout(self)
        row.setContentsMargins(4, 0, 4, 0)
        row.setSpacing(4)

        name_label = QLabel(label)
        name_label.setFixedWidth(110)
        name_label.setToolTip(f"{label}  [{self._fmt_value(self._min)} .. {self._fmt_value(self._max)}]")
        row.addWidget(name_label)

        self._slider = QSlider(Qt.Horizontal)
        self._slider.setRange(0, self._steps)
        self._slider.setValue(self._val_to_slider(self._value))
        self._slider.setFixedHeight(18)
        self._slider.valueChanged.connect(self._on_slider_moved)
        row.addWidget(self._slider, stretch=1)

        self._value_edit = QLineEdit(self._fmt_value(self._value))
        self._value_edit.setFixedWidth(58)
        self._value_edit.setFixedHeight(20)
        self._value_edit.setAlignment(Qt.AlignRight)
        self._value_edit.setFrame(False)
        font = QFont()
        font.setPointSize(11)
        self._value_edit.setFont(font)
        self._value_edit.editingFinished.connect(self._on_value_typed)
        row.addWidget(self._value_edit)

        reset_btn = QToolButton()
        reset_btn.setText("↺")
        reset_btn.setFixedSize(18, 18)
        reset_btn.setToolTip(f"Reset to {self._fmt_value(self._initial_value)}")
        reset_btn.setCursor(Qt.PointingHandCursor)
        reset_btn.clicked.connect(self.reset)
        row.addWidget(reset_btn)

    # ── Value handling ──

    def clamp(self, value):
        value = max(self._min, min(self._max, float(value)))
        if self._step is not None:
            value = self._min + round((value - self._min) / self._step) * self._step
            value = max(self._min, min(self._max, value))
        return value

    def _fmt_value(self, val):
        if self._step is not None and float(self._step).is_integer():
            return str(int(round(val)))
        return f"{val:.{self._decimals}f}"

    def _val_to_slider(self, val):
        ratio = (val - self._min) / (self._max - self._min)
        return int(round(max(0.0, min(1.0, ratio)) * self._steps))

    def _slider_to_val(self, pos):
        return self._min + (pos / self._steps) * (self._max - self._min)

    @property
    def minimum(self):
        return self._min

    @property
    def maximum(self):
        return self._max

    def value(self):
        return self._value

    def set_value(self, value, emit=True):
        """Clamp, display and (optionally) emit ``value``; returns the clamped value."""
        self._value = self.clamp(value)
        self._value_edit.setText(self._fmt_value(self._value))
        self._suppress_signals = True
        self._slider.setValue(self._val_to_slider(self._value))
        self._suppress_signals = False
        if emit:
            self.value_changed.emit(self.name, self._value)
        return self._value

    def reset(self):
        self.set_value(self._initial_value)

    # ── Event handlers ──

    def _on_slider_moved(self, pos):
        if self._suppress_signals:
            return
        self._value = self.clamp(self._slider_to_val(pos))
        self._value_edit.setText(self._fmt_value(self._value))
        self.value_changed.emit(self.name, self._value)

    def _on_value_typed(self):
        """User typed a value; out-of-range input is clamped, not rejected."""
        try:
            val = float(self._value_edit.text())
        except ValueError:
            self._value_edit.setText(self._fmt_value(self._value))
            return
        self.set_value(val)


class TuningPanel(QWidget):
    """Vertical stack of ParameterSlider rows keyed by parameter name."""

    value_changed = pyqtSignal(str, float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.rows: Dict[str, ParameterSlider] = {}
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(2)

    def add_slider(self, name, label, value, value_range, step=None, decimals=2) -> ParameterSlider:
        lo, hi = value_range
        row = ParameterSlider(name, label, value, lo, hi, step=step, decimals=decimals, parent=self)
        row.value_changed.connect(self.value_changed)
        self.rows[name] = row
        self._layout.addWidget(row)
        return row

    def value(self, name) -> Optional[float]:
        row = self.rows.get(name)
        return row.value() if row else None

    def values(self) -> Dict[str, float]:
        return {name: row.value() for name, row in self.rows.items()}
