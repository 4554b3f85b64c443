"""
Main window for the widget gallery: one tab per interactive widget.
"""

import logging
from PyQt5.QtWidgets import QMainWindow, QTabWidget, QLabel
from PyQt5.QtCore import Qt

from simlib.config_manager import get_config
from canvas_ui.themes.theme_manager import theme_manager, ThemeType
from canvas_ui.widgets.pointer_widget import PointerControllerWidget
from canvas_ui.widgets.oven_widget import OvenControllerWidget
from canvas_ui.widgets.tuning_challenge_widget import TuningChallengeWidget
from canvas_ui.widgets.fir_widget import FIRFilterWidget
from canvas_ui.widgets.filter_challenge_widget import FilterChallengeWidget
from canvas_ui.widgets.iir_widget import IIRFilterWidget
from canvas_ui.widgets.diagram_widget import DiagramWidget

logger = logging.getLogger(__name__)


class GalleryWindow(QMainWindow):
    """Hosts every widget in its own tab. Hidden tabs stop their frame timers."""

    def __init__(self, screen_geometry=None):
        super().__init__()
        self.setWindowTitle("Control & Filter Playground")
        width, height = get_config().get("display.window_size", [1120, 860])
        if screen_geometry is not None:
            width = min(width, int(screen_geometry.width() * 0.95))
            height = min(height, int(screen_geometry.height() * 0.95))
        self.resize(width, height)

        self.tabs = QTabWidget()
        self.tabs.setDocumentMode(True)
        self.setCentralWidget(self.tabs)
        self._create_tabs()
        self._create_menu_bar()
        self._create_status_bar()

        theme_manager.theme_changed.connect(self.on_theme_changed)

    def _create_tabs(self):
        pages = [
            ("P Control", lambda: PointerControllerWidget("P")),
            ("PI Control", lambda: PointerControllerWidget("PI")),
            ("PID Control", lambda: PointerControllerWidget("PID")),
            ("Oven", OvenControllerWidget),
            ("Tuning Challenge", TuningChallengeWidget),
            ("FIR Filter", FIRFilterWidget),
            ("Filter Challenge", FilterChallengeWidget),
            ("IIR Filter", IIRFilterWidget),
            ("Control Loop", lambda: DiagramWidget("control_loop")),
            ("Cascade", lambda: DiagramWidget("cascade")),
        ]
        for title, factory in pages:
            self.tabs.addTab(factory(), title)
        logger.info(f"Created {self.tabs.count()} widget tabs")

    def _create_menu_bar(self):
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        file_menu.addAction("E&xit\tCtrl+Q", self.close)

        view_menu = menubar.addMenu("&View")
        view_menu.addAction("Toggle &Theme\tCtrl+T", self.toggle_theme)
        view_menu.addSeparator()
        view_menu.addAction("&Next Tab\tCtrl+Tab", self.next_tab)

    def _create_status_bar(self):
        self.theme_status = QLabel()
        self.theme_status.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self.statusBar().addPermanentWidget(self.theme_status)
        self.on_theme_changed()

    def widget(self, index):
        return self.tabs.widget(index)

    def next_tab(self):
        self.tabs.setCurrentIndex((self.tabs.currentIndex() + 1) % self.tabs.count())

    def toggle_theme(self):
        """Toggle theme."""
        theme_manager.toggle_theme()

    def on_theme_changed(self, *_):
        theme_name = "Dark Theme" if theme_manager.current_theme == ThemeType.DARK else "Light Theme"
        self.theme_status.setText(theme_name)
        # Canvases are painted from the palette, so a repaint picks up the new colors
        for index in range(self.tabs.count()):
            self.tabs.widget(index).update()
