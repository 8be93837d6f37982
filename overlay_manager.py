# RBN Overlay - Lifecycle Manager
# Copyright (C) 2025 Peter Hirst (WU2C)
#
# Owns the poll schedule and everything drawn for the RBN overlay.
#
# Threading model:
#   All state lives on the Qt main thread. A poll dispatches the network
#   fetch to a worker (daemon thread by default), which reports back through
#   refresh_finished / refresh_failed. Those signals are queued onto the main
#   thread, where the result is committed only if the PollSession that issued
#   it is still the live one. Disabling the overlay cancels the session, so
#   a response that arrives afterwards is dropped.

import logging
import threading
from dataclasses import replace
from enum import Enum
from typing import Callable, List, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

import great_circle
import signal_classifier
from band_classifier import ALL_BANDS
from grid_locator import Coordinate, bearing, distance_km
from primitive_arena import PrimitiveArena
from rbn_client import DEFAULT_LIMIT
from rbn_models import DrawablePrimitive, FilterState, PrimitiveKind, Spot, Stats
from spot_feed import SpotFeed, PLACEHOLDER_CALLSIGN, is_configured_callsign

logger = logging.getLogger(__name__)

# Path origin when no home location is configured (Toronto)
DEFAULT_HOME = Coordinate(43.6785, -79.2935)

DEFAULT_POLL_INTERVAL = 120  # seconds
DEFAULT_OPACITY = 0.7


class OverlayState(Enum):
    DISABLED = "disabled"
    ENABLED = "enabled"


def run_in_thread(job: Callable[[], None]):
    """Default fetch runner: one daemon thread per poll."""
    t = threading.Thread(target=job, daemon=True)
    t.start()


class PollSession:
    """
    The recurring poll schedule of one enabled period.

    Returned by OverlayLifecycleManager.enable(). Once cancelled it never
    fires again and results fetched under it are discarded.
    """

    def __init__(self, session_id: int, callsign: str, interval_s: float):
        self.session_id = session_id
        self.callsign = callsign
        self.cancelled = False
        self.timer = QTimer()
        self.timer.setInterval(int(interval_s * 1000))

    @property
    def active(self) -> bool:
        return not self.cancelled and self.timer.isActive()

    def start(self):
        if not self.cancelled:
            self.timer.start()

    def cancel(self):
        self.cancelled = True
        self.timer.stop()

    def __repr__(self):
        state = "cancelled" if self.cancelled else "live"
        return f"<PollSession #{self.session_id} {self.callsign} {state}>"


class OverlayLifecycleManager(QObject):
    refresh_finished = pyqtSignal(object, object)  # (PollSession, raw records)
    refresh_failed = pyqtSignal(object, object)    # (PollSession, Exception)
    stats_changed = pyqtSignal(object)             # Stats
    filter_changed = pyqtSignal(object)            # FilterState
    state_changed = pyqtSignal(bool)
    status_message = pyqtSignal(str)

    def __init__(self, feed: SpotFeed, surface, control=None,
                 callsign: str = PLACEHOLDER_CALLSIGN,
                 home: Optional[Coordinate] = None,
                 filter_state: Optional[FilterState] = None,
                 poll_interval_s: float = DEFAULT_POLL_INTERVAL,
                 limit: int = DEFAULT_LIMIT,
                 opacity: float = DEFAULT_OPACITY,
                 fetch_runner: Optional[Callable[[Callable[[], None]], None]] = None):
        """
        Args:
            feed: SpotFeed holding the retained spots
            surface: Drawing surface (add_primitive / remove_primitive)
            control: Optional control surface (attach / show_stats / detach)
            callsign: Station whose signal is being spotted
            home: Path origin; DEFAULT_HOME when None
            filter_state: Initial filters; defaults when None
            poll_interval_s: Seconds between polls while enabled
            limit: Max records requested per poll
            opacity: Overall overlay opacity (0-1)
            fetch_runner: Runs a fetch job; defaults to a daemon thread
        """
        super().__init__()
        self.feed = feed
        self.surface = surface
        self.control = control
        self.callsign = (callsign or "").strip().upper()
        self._home = home or DEFAULT_HOME
        self._filter = filter_state or FilterState(time_window_minutes=feed.time_window_minutes)
        self.feed.set_time_window(self._filter.time_window_minutes)
        self.poll_interval_s = poll_interval_s
        self.limit = limit
        self.opacity = opacity
        self._fetch_runner = fetch_runner or run_in_thread

        self.state = OverlayState.DISABLED
        self.arena = PrimitiveArena(surface)
        self._session: Optional[PollSession] = None
        self._session_counter = 0

        self.refresh_finished.connect(self._on_refresh_finished)
        self.refresh_failed.connect(self._on_refresh_failed)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self.state is OverlayState.ENABLED

    @property
    def session(self) -> Optional[PollSession]:
        return self._session

    @property
    def filter_state(self) -> FilterState:
        return self._filter

    @property
    def home(self) -> Coordinate:
        return self._home

    # ------------------------------------------------------------------
    # Enable / disable
    # ------------------------------------------------------------------

    def enable(self) -> Optional[PollSession]:
        """
        Turn the overlay on.

        Starts the poll session (and one immediate poll) when a callsign is
        configured. Enabling an enabled overlay only redraws.
        """
        if self.enabled:
            self.redraw()
            return self._session

        self.state = OverlayState.ENABLED
        logger.info("[RBN] Overlay enabled")

        if self.control is not None:
            self.control.attach(self._filter)
            self.control.show_stats(self.feed.stats)

        self._start_session()
        self.redraw()
        self.state_changed.emit(True)
        return self._session

    def disable(self):
        """Turn the overlay off. Safe to call repeatedly."""
        if not self.enabled:
            return

        self.state = OverlayState.DISABLED
        self._stop_session()
        removed = self.arena.dispose_all()

        if self.control is not None:
            self.control.detach()

        logger.info(f"[RBN] Overlay disabled ({removed} primitives removed)")
        self.state_changed.emit(False)

    def shutdown(self):
        self.disable()

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _start_session(self) -> Optional[PollSession]:
        if not is_configured_callsign(self.callsign):
            logger.info("[RBN] No valid callsign configured")
            self.status_message.emit("RBN: set your callsign to see spots")
            return None

        self._session_counter += 1
        session = PollSession(self._session_counter, self.callsign, self.poll_interval_s)
        session.timer.timeout.connect(lambda s=session: self._poll(s))
        self._session = session
        session.start()
        logger.debug(f"[RBN] Started {session!r}")

        self._poll(session)
        return session

    def _stop_session(self):
        if self._session is not None:
            self._session.cancel()
            logger.debug(f"[RBN] Stopped {self._session!r}")
            self._session = None

    def refresh_now(self):
        """Poll immediately (e.g. menu action or time window change)."""
        if self.enabled and self._session is not None:
            self._poll(self._session)

    def _poll(self, session: PollSession):
        if not self._is_current(session):
            return

        callsign = session.callsign
        limit = self.limit

        def job():
            try:
                records = self.feed.fetch(callsign, limit)
            except Exception as e:
                self.refresh_failed.emit(session, e)
            else:
                self.refresh_finished.emit(session, records)

        self._fetch_runner(job)

    def _is_current(self, session: PollSession) -> bool:
        return self.enabled and not session.cancelled and session is self._session

    def _on_refresh_finished(self, session: PollSession, records):
        if not self._is_current(session):
            logger.debug(f"[RBN] Discarding response for {session!r}")
            return

        try:
            spots, stats = self.feed.commit(records)
        except Exception as e:
            self.feed.report_failure(e)
            self.status_message.emit("RBN: bad feed data, showing previous spots")
            return

        self._publish_stats(stats)
        self.redraw()

    def _on_refresh_failed(self, session: PollSession, error):
        if not self._is_current(session):
            logger.debug(f"[RBN] Ignoring failure for {session!r}: {error}")
            return
        self.feed.report_failure(error)
        self.status_message.emit("RBN: feed unavailable, showing previous spots")

    def _publish_stats(self, stats: Stats):
        if self.control is not None:
            self.control.show_stats(stats)
        self.stats_changed.emit(stats)
        self.status_message.emit(
            f"RBN: {stats.total_spots} spots from {stats.unique_reporters} skimmers"
        )

    # ------------------------------------------------------------------
    # Redraw
    # ------------------------------------------------------------------

    def eligible_spots(self) -> List[Spot]:
        """Retained spots that pass the band and SNR filters."""
        band = self._filter.selected_band
        min_snr = self._filter.min_snr_db
        result = []
        for spot in self.feed.spots:
            if band != ALL_BANDS and spot.band != band:
                continue
            # Unknown SNR is filtered as 0 dB
            snr = spot.snr_db if spot.snr_db is not None else 0
            if snr < min_snr:
                continue
            result.append(spot)
        return result

    def redraw(self) -> int:
        """
        Destroy the previous pass and draw the current spot set.

        Returns the number of primitives drawn.
        """
        if not self.enabled:
            return 0

        generation = self.arena.begin_pass()
        spots = self.eligible_spots()

        drawn = 0
        for spot in spots:
            position = spot.resolved_position
            if position is None:
                continue
            if self._filter.show_paths:
                self.arena.add(self._path_primitive(spot, position))
            self.arena.add(self._marker_primitive(spot, position))
            drawn += 1

        logger.debug(f"[RBN] Rendering {drawn} spots (pass {generation})")
        return self.arena.count()

    def _path_primitive(self, spot: Spot, position: Coordinate) -> DrawablePrimitive:
        points = great_circle.path(self._home, position)
        return DrawablePrimitive(
            kind=PrimitiveKind.PATH_LINE,
            geometry=tuple(points),
            style={
                'color': signal_classifier.color_for(spot.snr_db),
                'weight': 2,
                'opacity': self.opacity * 0.6,
                'dashed': True,
            },
        )

    def _marker_primitive(self, spot: Spot, position: Coordinate) -> DrawablePrimitive:
        color = signal_classifier.color_for(spot.snr_db)
        return DrawablePrimitive(
            kind=PrimitiveKind.MARKER,
            geometry=(position,),
            style={
                'radius': signal_classifier.size_for(spot.snr_db),
                'fill_color': color,
                'color': '#ffffff',
                'weight': 2,
                'opacity': self.opacity,
                'fill_opacity': self.opacity * 0.8,
            },
            tooltip=self._tooltip(spot, position),
        )

    def _tooltip(self, spot: Spot, position: Coordinate) -> str:
        snr = f"{spot.snr_db:g} dB" if spot.snr_db is not None else "n/a"
        quality = signal_classifier.quality_label(spot.snr_db)
        km = distance_km(self._home, position)
        az = bearing(self._home, position)
        local_time = spot.observed_at.astimezone().strftime('%H:%M:%S')
        return (
            f"📡 {spot.reporter_callsign}\n"
            f"Heard: {self.callsign}\n"
            f"SNR: {snr} ({quality})\n"
            f"Band: {spot.band}\n"
            f"Freq: {spot.frequency_hz:.1f} kHz\n"
            f"Grid: {spot.reporter_locator}\n"
            f"Path: {km:,.0f} km @ {az:.0f}°\n"
            f"Time: {local_time}"
        )

    # ------------------------------------------------------------------
    # Inputs from the control surface / app
    # ------------------------------------------------------------------

    def _set_filter(self, **changes):
        self._filter = replace(self._filter, **changes)
        self.filter_changed.emit(self._filter)

    def on_band_change(self, band: str):
        self._set_filter(selected_band=band)
        self.redraw()

    def on_time_window_change(self, minutes: int):
        self.feed.set_time_window(minutes)
        self._set_filter(time_window_minutes=int(minutes))
        if not self.enabled:
            return
        _, stats = self.feed.reapply_window()
        self._publish_stats(stats)
        self.redraw()
        self.refresh_now()

    def on_min_snr_change(self, min_snr_db: float):
        self._set_filter(min_snr_db=min_snr_db)
        self.redraw()

    def on_show_paths_change(self, show: bool):
        self._set_filter(show_paths=bool(show))
        self.redraw()

    def set_callsign(self, callsign: str):
        """Watch a different callsign; restarts polling when enabled."""
        callsign = (callsign or "").strip().upper()
        if callsign == self.callsign:
            return
        self.callsign = callsign
        self.feed.clear()
        if self.enabled:
            self._stop_session()
            self._publish_stats(self.feed.stats)
            self._start_session()
            self.redraw()

    def set_home(self, home: Optional[Coordinate]):
        self._home = home or DEFAULT_HOME
        self.redraw()

    def set_opacity(self, opacity: float):
        self.opacity = max(0.0, min(1.0, opacity))
        self.redraw()
