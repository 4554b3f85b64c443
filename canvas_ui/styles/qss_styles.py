"""
QSS Stylesheet definitions for the widget gallery
Keeps tabs, buttons, sliders and readouts in step with the canvas palette.
"""

from canvas_ui.themes.theme_manager import theme_manager


class GalleryStyles:
    """Stylesheet generator for the gallery chrome around each canvas."""

    @staticmethod
    def _replace_theme_variables(qss: str) -> str:
        """Replace theme variables in QSS with actual colors."""
        for var, color in theme_manager.get_qss_variables().items():
            qss = qss.replace(var, color)
        return qss

    @classmethod
    def get_main_window_style(cls) -> str:
        qss = """
        QMainWindow, QWidget {
            background-color: @canvas_background;
            color: @text_primary;
            font-size: 10pt;
        }

        QLabel {
            background-color: transparent;
        }
        """
        return cls._replace_theme_variables(qss)

    @classmethod
    def get_tab_style(cls) -> str:
        qss = """
        QTabWidget::pane {
            border: 1px solid @axis;
            border-radius: 6px;
            top: -1px;
        }

        QTabBar::tab {
            background-color: @panel_background;
            color: @text_secondary;
            border: 1px solid @axis;
            border-bottom: none;
            border-top-left-radius: 6px;
            border-top-right-radius: 6px;
            padding: 6px 14px;
            margin-right: 2px;
        }

        QTabBar::tab:selected {
            background-color: @canvas_background;
            color: @text_primary;
            font-weight: 600;
        }

        QTabBar::tab:hover {
            color: @target_hover;
        }
        """
        return cls._replace_theme_variables(qss)

    @classmethod
    def get_button_style(cls) -> str:
        qss = """
        QPushButton {
            background-color: @panel_background;
            color: @text_primary;
            border: 1px solid @axis;
            border-radius: 6px;
            padding: 5px 12px;
        }

        QPushButton:hover {
            border-color: @target_hover;
        }

        QPushButton:checked {
            background-color: @target;
            border-color: @target_light;
            color: white;
        }

        QPushButton:disabled {
            color: @text_muted;
        }

        QComboBox, QDoubleSpinBox {
            background-color: @panel_background;
            color: @text_primary;
            border: 1px solid @axis;
            border-radius: 4px;
            padding: 2px 6px;
        }
        """
        return cls._replace_theme_variables(qss)

    @classmethod
    def get_slider_style(cls) -> str:
        qss = """
        QSlider::groove:horizontal {
            height: 4px;
            background-color: @track;
            border-radius: 2px;
        }

        QSlider::sub-page:horizontal {
            background-color: @measured;
            border-radius: 2px;
        }

        QSlider::handle:horizontal {
            width: 14px;
            margin: -6px 0;
            border-radius: 7px;
            background-color: @text_primary;
        }

        QProgressBar {
            background-color: @track;
            border: none;
            border-radius: 3px;
            text-align: center;
        }

        QProgressBar::chunk {
            background-color: @success;
            border-radius: 3px;
        }

        QListWidget {
            background-color: @panel_background;
            border: 1px solid @axis;
            border-radius: 4px;
        }
        """
        return cls._replace_theme_variables(qss)

    @classmethod
    def get_complete_stylesheet(cls) -> str:
        styles = [
            cls.get_main_window_style(),
            cls.get_tab_style(),
            cls.get_button_style(),
            cls.get_slider_style(),
        ]
        return "\n\n".join(styles)


def apply_gallery_theme(app):
    """Apply the palette stylesheet to the entire application."""
    app.setStyleSheet(GalleryStyles.get_complete_stylesheet())

    # Update when theme changes
    def on_theme_changed():
        app.setStyleSheet(GalleryStyles.get_complete_stylesheet())

    theme_manager.theme_changed.connect(on_theme_changed)
