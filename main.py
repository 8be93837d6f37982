# RBN Overlay
# Copyright (C) 2025 [Peter Hirst/WU2C]
#
# Live Reverse Beacon Network overlay: who is hearing YOUR signal.

import argparse
import logging
import sys

from PyQt6.QtWidgets import (QApplication, QMainWindow, QWidget, QHBoxLayout,
                             QVBoxLayout, QLabel)
from PyQt6.QtCore import Qt, QByteArray
from PyQt6.QtGui import QAction, QKeySequence

from config_manager import ConfigManager
from grid_locator import resolve
from logging_config import setup_logging, set_debug_mode
from overlay_control_panel import OverlayControlPanel
from overlay_manager import OverlayLifecycleManager, DEFAULT_HOME
from propagation_map_widget import PropagationMapWidget
from rbn_client import RBNClient
from spot_feed import SpotFeed

logger = logging.getLogger(__name__)


def home_from_grid(grid):
    """Path origin for the configured grid, or the default location."""
    home = resolve(grid or "")
    if home is None:
        logger.warning(f"Grid '{grid}' not usable as home location, using default")
        return DEFAULT_HOME
    return home


class MainWindow(QMainWindow):
    def __init__(self, config: ConfigManager, callsign=None, grid=None):
        super().__init__()
        self.config = config
        self.setWindowTitle("RBN Overlay")
        self.resize(1100, 650)

        geo = self.config.get('WINDOW', 'geometry')
        if geo:
            self.restoreGeometry(QByteArray.fromHex(geo.encode()))

        self.callsign = (callsign or self.config.get('STATION', 'my_callsign', fallback='N0CALL')).upper()
        grid = grid or self.config.get('STATION', 'my_grid', fallback='')
        home = home_from_grid(grid)

        client = RBNClient(
            base_url=self.config.get('FEED', 'base_url', fallback='http://localhost:3000'),
        )
        filter_state = self.config.filter_state()
        self.feed = SpotFeed(client, time_window_minutes=filter_state.time_window_minutes)

        self.init_ui()

        self.map_widget.set_home(home)
        self.panel.set_callsign(self.callsign)

        self.manager = OverlayLifecycleManager(
            self.feed,
            self.map_widget,
            control=self.panel,
            callsign=self.callsign,
            home=home,
            filter_state=filter_state,
            poll_interval_s=self.config.getint('FEED', 'poll_interval_s', fallback=120),
            limit=self.config.getint('FEED', 'limit', fallback=100),
            opacity=self.config.getfloat('APPEARANCE', 'opacity', fallback=0.7),
        )
        self.setup_connections()

    def init_ui(self):
        main_widget = QWidget()
        self.setCentralWidget(main_widget)
        main_layout = QVBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # Info Bar
        self.info_bar = QLabel("RBN overlay off")
        self.info_bar.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.info_bar.setFixedHeight(25)
        self.info_bar.setStyleSheet("background-color: #2A2A2A; color: #AAA; padding: 4px;")
        main_layout.addWidget(self.info_bar)

        body = QHBoxLayout()
        body.setContentsMargins(0, 0, 0, 0)
        self.map_widget = PropagationMapWidget()
        body.addWidget(self.map_widget, stretch=1)

        self.panel = OverlayControlPanel()
        body.addWidget(self.panel, alignment=Qt.AlignmentFlag.AlignTop)
        main_layout.addLayout(body)

        # Menu
        menu = self.menuBar()
        overlay_menu = menu.addMenu("Overlay")

        self.enable_action = QAction("Enable RBN Overlay", self)
        self.enable_action.setCheckable(True)
        self.enable_action.setShortcut(QKeySequence("Ctrl+R"))
        self.enable_action.toggled.connect(self.set_overlay_enabled)
        overlay_menu.addAction(self.enable_action)

        refresh_action = QAction("Refresh Now", self)
        refresh_action.setShortcut(QKeySequence("F5"))
        refresh_action.triggered.connect(lambda: self.manager.refresh_now())
        overlay_menu.addAction(refresh_action)

        debug_action = QAction("Debug Logging", self)
        debug_action.setCheckable(True)
        debug_action.toggled.connect(set_debug_mode)
        overlay_menu.addAction(debug_action)

        overlay_menu.addSeparator()
        exit_action = QAction("Exit", self)
        exit_action.triggered.connect(self.close)
        overlay_menu.addAction(exit_action)

    def setup_connections(self):
        self.panel.band_changed.connect(self.manager.on_band_change)
        self.panel.time_window_changed.connect(self.manager.on_time_window_change)
        self.panel.min_snr_changed.connect(self.manager.on_min_snr_change)
        self.panel.show_paths_changed.connect(self.manager.on_show_paths_change)

        self.manager.filter_changed.connect(self.config.save_filter_state)
        self.manager.status_message.connect(self.update_status_msg)
        self.manager.state_changed.connect(self.on_overlay_state)

    def set_overlay_enabled(self, enabled):
        if enabled:
            self.manager.enable()
        else:
            self.manager.disable()

    def on_overlay_state(self, enabled):
        self.map_widget.placeholder_text = "" if enabled else "RBN overlay is off"
        self.map_widget.update()
        if not enabled:
            self.update_status_msg("RBN overlay off")
        if self.enable_action.isChecked() != enabled:
            self.enable_action.setChecked(enabled)

    def update_status_msg(self, msg):
        self.info_bar.setText(msg)

    def closeEvent(self, event):
        self.manager.shutdown()
        geo = self.saveGeometry().toHex().data().decode()
        self.config.save_setting('WINDOW', 'geometry', geo)
        event.accept()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Live Reverse Beacon Network map overlay")
    parser.add_argument('--callsign', help="Callsign to watch (overrides config)")
    parser.add_argument('--grid', help="Home Maidenhead grid (overrides config)")
    parser.add_argument('--enable', action='store_true', help="Turn the overlay on at startup")
    parser.add_argument('--debug', action='store_true', help="Verbose logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging()
    if args.debug:
        set_debug_mode(True)

    app = QApplication(sys.argv)
    app.setStyle("Fusion")
    window = MainWindow(ConfigManager(), callsign=args.callsign, grid=args.grid)
    window.show()
    if args.enable:
        window.enable_action.setChecked(True)
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
