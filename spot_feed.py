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

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from rbn_client import RBNClient, RetrievalError, DEFAULT_LIMIT
from rbn_models import Spot, Stats, MalformedRecord

logger = logging.getLogger(__name__)

# Default callsign in a fresh config; means "not configured"
PLACEHOLDER_CALLSIGN = "N0CALL"

DEFAULT_TIME_WINDOW = 30  # minutes


def is_configured_callsign(callsign: Optional[str]) -> bool:
    if not callsign or not callsign.strip():
        return False
    return callsign.strip().upper() != PLACEHOLDER_CALLSIGN


def _round_half_up(value: float) -> float:
    # Halves round away from zero (2.25 -> 2.3), unlike round()
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_stats(spots: Iterable[Spot]) -> Stats:
    """Count, distinct reporters and mean SNR (one decimal) of a spot set."""
    spots = list(spots)
    snrs = [s.snr_db for s in spots if s.snr_db is not None]
    avg = _round_half_up(sum(snrs) / len(snrs)) if snrs else 0
    return Stats(
        total_spots=len(spots),
        unique_reporters=len({s.reporter_callsign for s in spots}),
        average_snr_db=avg,
    )


class SpotFeed:
    """
    Retained set of recent RBN spots plus their statistics.

    fetch() does the network I/O and may run on a worker thread;
    commit() replaces the retained set and must run on the thread that
    owns the feed (the Qt main thread). refresh() does both in one go.
    """

    def __init__(self, client: Optional[RBNClient] = None,
                 time_window_minutes: int = DEFAULT_TIME_WINDOW,
                 on_error: Optional[Callable[[Exception], None]] = None):
        self.client = client or RBNClient()
        self.on_error = on_error
        self._time_window = DEFAULT_TIME_WINDOW
        self.set_time_window(time_window_minutes)

        self._spots: List[Spot] = []
        self._stats = Stats()
        self._last_payload: List[Dict[str, Any]] = []

        self.last_error: Optional[Exception] = None
        self.last_refresh: Optional[datetime] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def spots(self) -> List[Spot]:
        return list(self._spots)

    @property
    def stats(self) -> Stats:
        return self._stats

    @property
    def time_window_minutes(self) -> int:
        return self._time_window

    def set_time_window(self, minutes: int):
        minutes = int(minutes)
        if minutes <= 0:
            raise ValueError(f"time window must be positive, got {minutes}")
        self._time_window = minutes

    def clear(self):
        """Drop retained spots (used when the watched callsign changes)."""
        self._spots = []
        self._stats = Stats()
        self._last_payload = []

    # ------------------------------------------------------------------
    # Refresh cycle
    # ------------------------------------------------------------------

    def fetch(self, callsign: str, limit: int = DEFAULT_LIMIT) -> List[Dict[str, Any]]:
        """Network half of a refresh. Raises RetrievalError."""
        return self.client.fetch_spots(callsign.strip().upper(), limit)

    def commit(self, records: List[Dict[str, Any]],
               now: Optional[datetime] = None) -> Tuple[List[Spot], Stats]:
        """
        Replace the retained set with the in-window spots of a payload.

        Records that cannot be converted are skipped. Spots with a bad
        locator are kept; they count toward Stats but are never drawn.
        """
        payload = list(records)
        result = self._apply_window(payload, now)
        self._last_payload = payload
        self.last_refresh = now or datetime.now(timezone.utc)
        self.last_error = None
        return result

    def reapply_window(self, now: Optional[datetime] = None) -> Tuple[List[Spot], Stats]:
        """Re-filter the last payload, e.g. after the time window changed."""
        return self._apply_window(self._last_payload, now)

    def report_failure(self, error: Exception):
        """Record a failed refresh; retained data stays as it was."""
        self.last_error = error
        if isinstance(error, RetrievalError):
            logger.error(f"[RBN] Error fetching spots: {error}")
        else:
            logger.error(f"[RBN] Parse error: {error}")
        if self.on_error:
            self.on_error(error)

    def refresh(self, reporter_callsign: str, limit: int = DEFAULT_LIMIT,
                now: Optional[datetime] = None) -> Tuple[List[Spot], Stats]:
        """
        Fetch and commit in one step.

        Never raises: on failure, or when no callsign is configured, the
        previous spots and stats are returned unchanged.
        """
        if not is_configured_callsign(reporter_callsign):
            logger.info("[RBN] No valid callsign configured")
            return self.spots, self._stats

        try:
            records = self.fetch(reporter_callsign, limit)
            return self.commit(records, now)
        except Exception as e:
            self.report_failure(e)
            return self.spots, self._stats

    def _apply_window(self, payload: List[Dict[str, Any]],
                      now: Optional[datetime]) -> Tuple[List[Spot], Stats]:
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(minutes=self._time_window)

        recent = []
        skipped = 0
        for record in payload:
            try:
                spot = Spot.from_record(record)
            except MalformedRecord as e:
                skipped += 1
                logger.debug(f"Skipping malformed spot: {e}")
                continue
            if spot.observed_at > cutoff:
                recent.append(spot)

        if skipped:
            logger.debug(f"[RBN] {skipped} malformed records skipped")

        self._spots = recent
        self._stats = compute_stats(recent)
        return self.spots, self._stats
