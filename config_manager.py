# RBN Overlay
# Copyright (C) 2025 [Peter Hirst/WU2C]
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.


import configparser
import logging
import math
import sys
from pathlib import Path

from rbn_models import FilterState, TIME_WINDOW_RANGE, MIN_SNR_RANGE, snap_to_range

logger = logging.getLogger(__name__)

APP_DIR_NAME = "RBN Overlay"
CONFIG_FILE_NAME = 'rbn_overlay.ini'


def get_config_dir():
    """Get platform-appropriate config directory."""
    if sys.platform == "win32":
        # Windows: AppData/Roaming
        base = Path.home() / "AppData" / "Roaming"
    elif sys.platform == "darwin":
        # macOS: ~/Library/Application Support
        base = Path.home() / "Library" / "Application Support"
    else:
        # Linux: ~/.config
        base = Path.home() / ".config"

    config_dir = base / APP_DIR_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


DEFAULT_CONFIG = {
    'STATION': {
        'my_callsign': 'N0CALL',
        'my_grid': 'FN03'
    },
    'FEED': {
        'base_url': 'http://localhost:3000',
        'limit': '100',
        'poll_interval_s': '120'
    },
    'FILTER': {
        'band': 'All',
        'time_window': '30',
        'min_snr': '-10',
        'show_paths': 'true'
    },
    'APPEARANCE': {
        'opacity': '0.7'
    }
}


class ConfigManager:
    def __init__(self, config_file=None):
        self.config_file = Path(config_file) if config_file else get_config_dir() / CONFIG_FILE_NAME
        self.config = configparser.ConfigParser()
        self.load_config()

    def load_config(self):
        if not self.config_file.exists():
            self.create_default_config()
        self.config.read(self.config_file)
        # Fill sections/keys missing from older files
        for section, options in DEFAULT_CONFIG.items():
            if section not in self.config:
                self.config.add_section(section)
            for key, value in options.items():
                self.config[section].setdefault(key, value)

    def create_default_config(self):
        for section, options in DEFAULT_CONFIG.items():
            self.config[section] = options
        self._write()

    def _write(self):
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, 'w') as f:
            self.config.write(f)

    def save_setting(self, section, key, value):
        if section not in self.config:
            self.config.add_section(section)
        self.config[section][str(key)] = str(value)
        self._write()

    def get(self, section, key, fallback=None):
        return self.config.get(section, key, fallback=fallback)

    def getint(self, section, key, fallback=None):
        try:
            return self.config.getint(section, key, fallback=fallback)
        except ValueError:
            logger.warning(f"Invalid integer for [{section}] {key}, using {fallback}")
            return fallback

    def getfloat(self, section, key, fallback=None):
        try:
            return self.config.getfloat(section, key, fallback=fallback)
        except ValueError:
            logger.warning(f"Invalid number for [{section}] {key}, using {fallback}")
            return fallback

    def getboolean(self, section, key, fallback=None):
        try:
            return self.config.getboolean(section, key, fallback=fallback)
        except ValueError:
            logger.warning(f"Invalid boolean for [{section}] {key}, using {fallback}")
            return fallback

    def filter_state(self) -> FilterState:
        defaults = FilterState()
        window = self.getint('FILTER', 'time_window', fallback=defaults.time_window_minutes)
        if window is None or window <= 0:
            window = defaults.time_window_minutes
        min_snr = self.getfloat('FILTER', 'min_snr', fallback=defaults.min_snr_db)
        if min_snr is None or not math.isfinite(min_snr):
            min_snr = defaults.min_snr_db
        # Stored values are hand-editable; keep them on the control steps
        return FilterState(
            selected_band=self.get('FILTER', 'band', fallback=defaults.selected_band),
            time_window_minutes=snap_to_range(window, TIME_WINDOW_RANGE),
            min_snr_db=snap_to_range(min_snr, MIN_SNR_RANGE),
            show_paths=self.getboolean('FILTER', 'show_paths', fallback=defaults.show_paths),
        )

    def save_filter_state(self, state: FilterState):
        if 'FILTER' not in self.config:
            self.config.add_section('FILTER')
        section = self.config['FILTER']
        section['band'] = state.selected_band
        section['time_window'] = str(state.time_window_minutes)
        section['min_snr'] = f"{state.min_snr_db:g}"
        section['show_paths'] = 'true' if state.show_paths else 'false'
        self._write()
