"""
Data models for the RBN overlay.

RBN Overlay
Copyright (C) 2025 Peter Hirst (WU2C)
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import band_classifier
import grid_locator
from grid_locator import Coordinate

logger = logging.getLogger(__name__)

# Feed records use either spelling for each attribute
FIELD_ALIASES = {
    'timestamp': ('timestamp', 'time'),
    'snr': ('snr', 'db'),
    'callsign': ('callsign', 'de'),
    'grid': ('grid', 'de_grid'),
    'frequency': ('frequency', 'freq'),
}

# Epoch values above this are milliseconds
EPOCH_MS_THRESHOLD = 1e11


class MalformedRecord(ValueError):
    """A feed record could not be converted to a Spot."""


def _first_present(record: Dict[str, Any], name: str):
    for key in FIELD_ALIASES[name]:
        value = record.get(key)
        if value is not None and value != '':
            return value
    return None


def parse_timestamp(value) -> datetime:
    """
    Parse a feed timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings (naive means UTC, "Z" suffix allowed) or
    epoch numbers (seconds, or milliseconds when large).
    """
    if isinstance(value, bool):
        raise MalformedRecord(f"Bad timestamp: {value!r}")
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > EPOCH_MS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedRecord(f"Bad timestamp: {value!r}") from e
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise MalformedRecord(f"Bad timestamp: {value!r}") from e
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    raise MalformedRecord(f"Bad timestamp: {value!r}")


# =============================================================================
# Feed data
# =============================================================================

@dataclass(frozen=True)
class Spot:
    """One skimmer reception report."""
    reporter_callsign: str
    reporter_locator: str
    frequency_hz: float  # kHz on the wire, see band_classifier
    snr_db: Optional[float]
    observed_at: datetime

    @property
    def band(self) -> str:
        return band_classifier.classify(self.frequency_hz)

    @property
    def resolved_position(self) -> Optional[Coordinate]:
        return grid_locator.resolve(self.reporter_locator)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Spot':
        """Build a Spot from a raw feed record; raises MalformedRecord."""
        if not isinstance(record, dict):
            raise MalformedRecord(f"Record is not an object: {record!r}")

        call = _first_present(record, 'callsign')
        if not isinstance(call, str) or not call.strip():
            raise MalformedRecord("Missing reporter callsign")

        ts = _first_present(record, 'timestamp')
        if ts is None:
            raise MalformedRecord("Missing timestamp")

        try:
            freq = float(_first_present(record, 'frequency') or 0)
            snr = _first_present(record, 'snr')
            snr = float(snr) if snr is not None else None
        except (TypeError, ValueError) as e:
            raise MalformedRecord(f"Bad numeric field: {e}") from e

        # float() accepts "nan" and "inf", and so does the JSON decoder
        if not math.isfinite(freq) or (snr is not None and not math.isfinite(snr)):
            raise MalformedRecord(f"Non-finite numeric field: freq={freq!r} snr={snr!r}")

        grid = _first_present(record, 'grid')

        return cls(
            reporter_callsign=call.strip().upper(),
            reporter_locator=str(grid).strip() if grid is not None else '',
            frequency_hz=freq,
            snr_db=snr,
            observed_at=parse_timestamp(ts),
        )


@dataclass(frozen=True)
class Stats:
    """Aggregate view of the retained spot set."""
    total_spots: int = 0
    unique_reporters: int = 0
    average_snr_db: float = 0


# =============================================================================
# User filter state
# =============================================================================

@dataclass(frozen=True)
class FilterState:
    selected_band: str = band_classifier.ALL_BANDS
    time_window_minutes: int = 30
    min_snr_db: float = -10
    show_paths: bool = True

    def __post_init__(self):
        if self.time_window_minutes <= 0:
            raise ValueError(f"time window must be positive, got {self.time_window_minutes}")


# Selectable filter values: (min, max, step)
TIME_WINDOW_RANGE = (10, 120, 10)  # minutes
MIN_SNR_RANGE = (-30, 30, 5)       # dB


def snap_to_range(value, bounds) -> int:
    """Clamp value into bounds and round it to the nearest step."""
    lo, hi, step = bounds
    value = min(max(value, lo), hi)
    return int(lo + round((value - lo) / step) * step)


# =============================================================================
# Drawing primitives
# =============================================================================

class PrimitiveKind(Enum):
    MARKER = "marker"
    PATH_LINE = "path_line"


@dataclass(frozen=True)
class DrawablePrimitive:
    """Something the drawing surface can render."""
    kind: PrimitiveKind
    geometry: Tuple[Coordinate, ...]
    style: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)
    tooltip: str = ""
