# RBN Overlay
# Copyright (C) 2025 Peter Hirst (WU2C)
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


from PyQt6.QtWidgets import (QFrame, QVBoxLayout, QHBoxLayout, QLabel,
                             QComboBox, QSlider, QCheckBox)
from PyQt6.QtCore import Qt, pyqtSignal

from band_classifier import ALL_BANDS, BAND_NAMES
from rbn_models import FilterState, Stats, TIME_WINDOW_RANGE, MIN_SNR_RANGE, snap_to_range


class OverlayControlPanel(QFrame):
    """
    Filter controls and stats for the RBN overlay.

    Emits one typed signal per control; knows nothing about the overlay
    itself. attach() loads a FilterState without re-emitting.
    """
    band_changed = pyqtSignal(str)
    time_window_changed = pyqtSignal(int)
    min_snr_changed = pyqtSignal(int)
    show_paths_changed = pyqtSignal(bool)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumWidth(250)
        self.setStyleSheet("""
            QFrame { background-color: rgba(0, 0, 0, 217); color: #FFF; border-radius: 8px; }
            QLabel { font-family: 'JetBrains Mono', monospace; font-size: 12px; }
            QComboBox { background: #333; color: #FFF; border: 1px solid #555; padding: 4px; }
        """)
        self._loading = False
        self.init_ui()
        self.setVisible(False)

    def init_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 10, 10, 10)
        layout.setSpacing(6)

        self.lbl_title = QLabel("<b>📡 RBN</b>")
        layout.addWidget(self.lbl_title)

        self.lbl_stats = QLabel()
        self.lbl_stats.setStyleSheet("color: #AAA;")
        layout.addWidget(self.lbl_stats)

        # Band
        layout.addWidget(QLabel("Band:"))
        self.combo_band = QComboBox()
        self.combo_band.addItem("All Bands", ALL_BANDS)
        for band in BAND_NAMES:
            self.combo_band.addItem(band, band)
        self.combo_band.currentIndexChanged.connect(self._on_band)
        layout.addWidget(self.combo_band)

        # Time window
        lo, hi, step = TIME_WINDOW_RANGE
        self.lbl_time = QLabel()
        layout.addWidget(self.lbl_time)
        self.slider_time = QSlider(Qt.Orientation.Horizontal)
        self.slider_time.setRange(lo, hi)
        self.slider_time.setSingleStep(step)
        self.slider_time.setPageStep(step)
        self.slider_time.valueChanged.connect(self._on_time)
        layout.addWidget(self.slider_time)

        # Min SNR
        lo, hi, step = MIN_SNR_RANGE
        self.lbl_snr = QLabel()
        layout.addWidget(self.lbl_snr)
        self.slider_snr = QSlider(Qt.Orientation.Horizontal)
        self.slider_snr.setRange(lo, hi)
        self.slider_snr.setSingleStep(step)
        self.slider_snr.setPageStep(step)
        self.slider_snr.valueChanged.connect(self._on_snr)
        layout.addWidget(self.slider_snr)

        self.chk_paths = QCheckBox("Show Paths")
        self.chk_paths.toggled.connect(self._on_paths)
        layout.addWidget(self.chk_paths)

        footer = QLabel("Data: reversebeacon.net | Update: 2min")
        footer.setStyleSheet("color: #888; font-size: 10px; border-top: 1px solid #444; padding-top: 8px;")
        layout.addWidget(footer)

        self.show_stats(Stats())
        self._update_time_label(self.slider_time.value())
        self._update_snr_label(self.slider_snr.value())

    # ------------------------------------------------------------------
    # Control surface interface
    # ------------------------------------------------------------------

    def attach(self, filter_state: FilterState):
        """Show the panel with the given filter values."""
        self._loading = True
        try:
            idx = self.combo_band.findData(filter_state.selected_band)
            self.combo_band.setCurrentIndex(idx if idx >= 0 else 0)
            self.slider_time.setValue(int(filter_state.time_window_minutes))
            self.slider_snr.setValue(int(filter_state.min_snr_db))
            self.chk_paths.setChecked(filter_state.show_paths)
        finally:
            self._loading = False
        self._update_time_label(self.slider_time.value())
        self._update_snr_label(self.slider_snr.value())
        self.setVisible(True)

    def detach(self):
        self.setVisible(False)

    def show_stats(self, stats: Stats):
        self.lbl_stats.setText(
            f"Spots: <b>{stats.total_spots}</b> | Skimmers: <b>{stats.unique_reporters}</b><br>"
            f"Avg SNR: <b>{stats.average_snr_db} dB</b>"
        )

    def set_callsign(self, callsign: str):
        self.lbl_title.setText(f"<b>📡 RBN: {callsign}</b>")

    # ------------------------------------------------------------------
    # Widget handlers
    # ------------------------------------------------------------------

    def _update_time_label(self, value):
        self.lbl_time.setText(f"Time: {value} min")

    def _update_snr_label(self, value):
        self.lbl_snr.setText(f"Min SNR: {value} dB")

    def _on_band(self, index):
        if self._loading:
            return
        self.band_changed.emit(self.combo_band.itemData(index))

    def _on_time(self, value):
        snapped = snap_to_range(value, TIME_WINDOW_RANGE)
        if snapped != value:
            self.slider_time.setValue(snapped)
            return
        self._update_time_label(value)
        if not self._loading:
            self.time_window_changed.emit(value)

    def _on_snr(self, value):
        snapped = snap_to_range(value, MIN_SNR_RANGE)
        if snapped != value:
            self.slider_snr.setValue(snapped)
            return
        self._update_snr_label(value)
        if not self._loading:
            self.min_snr_changed.emit(value)

    def _on_paths(self, checked):
        if not self._loading:
            self.show_paths_changed.emit(checked)
