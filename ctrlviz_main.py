"""
Control & Filter Playground

Interactive PID, oven, FIR and IIR widgets in a tabbed gallery.
This is the main entry point for the application.
"""

import sys
import os
import logging
from PyQt5.QtWidgets import QApplication
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QFont

from simlib.config_manager import get_config
from simlib.logging_config import setup_logging
from canvas_ui.main_window import GalleryWindow
from canvas_ui.styles.qss_styles import apply_gallery_theme
from canvas_ui.themes.theme_manager import theme_manager, ThemeType

logger = logging.getLogger(__name__)


def setup_application():
    """Setup application-wide settings and styling."""
    # Enable high DPI scaling
    QApplication.setAttribute(Qt.AA_EnableHighDpiScaling, True)
    QApplication.setAttribute(Qt.AA_UseHighDpiPixmaps, True)

    app = QApplication(sys.argv)
    app.setApplicationName("Control & Filter Playground")
    app.setApplicationVersion("1.0.0")

    scaling_factor = get_config().get("display.scaling_factor", 1.0)
    font = QFont()
    font.setPointSize(int(10 * scaling_factor))
    font.setHintingPreference(QFont.PreferDefaultHinting)
    app.setFont(font)

    apply_gallery_theme(app)
    return app


def main():
    """Main application entry point."""
    setup_logging()
    try:
        os.environ["QT_AUTO_SCREEN_SCALE_FACTOR"] = "1"
        logger.info("Starting Control & Filter Playground")

        config = get_config()
        valid, errors = config.validate_config()
        for error in errors:
            logger.warning(f"Configuration problem: {error}")
        if not valid:
            logger.warning("Falling back to built-in defaults")
            config.reset_to_defaults()

        try:
            theme_manager.set_theme(ThemeType(config.get("display.theme", "dark")))
        except ValueError:
            logger.warning(f"Unknown theme '{config.get('display.theme')}', using dark")

        app = setup_application()
        screen_geometry = app.primaryScreen().availableGeometry()

        window = GalleryWindow(screen_geometry)
        window.show()

        window_size = window.geometry()
        x = screen_geometry.x() + (screen_geometry.width() - window_size.width()) // 2
        y = screen_geometry.y() + (screen_geometry.height() - window_size.height()) // 2
        window.move(x, y)

        logger.info(f"Theme: {theme_manager.current_theme.value}")
        exit_code = app.exec_()
        logger.info(f"Exiting with code: {exit_code}")
        return exit_code

    except Exception as e:
        logger.critical(f"Critical error in main: {str(e)}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
