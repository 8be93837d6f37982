"""
Tests for feed record parsing and model types.
"""

from datetime import datetime, timezone

import pytest

from grid_locator import Coordinate
from rbn_models import (
    Spot, FilterState, DrawablePrimitive, PrimitiveKind,
    MalformedRecord, parse_timestamp,
)
from common import NOW, make_record


class TestParseTimestamp:

    def test_iso_with_z(self):
        assert parse_timestamp("2025-06-01T11:55:00Z") == datetime(2025, 6, 1, 11, 55, tzinfo=timezone.utc)

    def test_naive_iso_is_utc(self):
        assert parse_timestamp("2025-06-01T11:55:00") == datetime(2025, 6, 1, 11, 55, tzinfo=timezone.utc)

    def test_offset_is_normalised(self):
        parsed = parse_timestamp("2025-06-01T07:55:00-04:00")
        assert parsed == datetime(2025, 6, 1, 11, 55, tzinfo=timezone.utc)
        assert parsed.utcoffset().total_seconds() == 0

    def test_epoch_seconds_and_millis(self):
        seconds = NOW.timestamp()
        assert parse_timestamp(seconds) == NOW
        assert parse_timestamp(int(seconds * 1000)) == NOW

    @pytest.mark.parametrize("value", ["yesterday", "", True, [], {}, 1e30])
    def test_rejects_garbage(self, value):
        with pytest.raises(MalformedRecord):
            parse_timestamp(value)


class TestSpotFromRecord:

    def test_canonical_fields(self):
        spot = Spot.from_record(make_record(call="w3lpl", grid="FM19", freq=14025.0, snr=12))
        assert spot.reporter_callsign == "W3LPL"
        assert spot.reporter_locator == "FM19"
        assert spot.frequency_hz == 14025.0
        assert spot.snr_db == 12.0
        assert spot.band == "20m"
        assert spot.observed_at < NOW

    def test_alternate_field_names(self):
        record = {'de': 'DK8NE', 'de_grid': 'JO31', 'freq': '7012.5', 'db': '-3',
                  'time': "2025-06-01T11:50:00Z"}
        spot = Spot.from_record(record)
        assert spot.reporter_callsign == "DK8NE"
        assert spot.reporter_locator == "JO31"
        assert spot.frequency_hz == 7012.5
        assert spot.snr_db == -3.0
        assert spot.band == "40m"

    def test_missing_snr_is_none(self):
        record = make_record()
        del record['snr']
        assert Spot.from_record(record).snr_db is None

    def test_missing_frequency_is_other_band(self):
        record = make_record()
        del record['frequency']
        assert Spot.from_record(record).band == "Other"

    def test_resolved_position(self):
        spot = Spot.from_record(make_record(grid="FN42"))
        assert spot.resolved_position == Coordinate(42.5, -71.0)

    def test_bad_locator_is_kept_but_unresolved(self):
        spot = Spot.from_record(make_record(grid="ZZ99"))
        assert spot.resolved_position is None
        missing = make_record()
        del missing['grid']
        assert Spot.from_record(missing).reporter_locator == ''

    @pytest.mark.parametrize("record", [
        "not a dict",
        {'grid': 'FN42', 'timestamp': "2025-06-01T11:50:00Z"},
        {'callsign': '   ', 'timestamp': "2025-06-01T11:50:00Z"},
        {'callsign': 'W1AW'},
        {'callsign': 'W1AW', 'timestamp': "nope"},
        {'callsign': 'W1AW', 'timestamp': "2025-06-01T11:50:00Z", 'snr': 'loud'},
        {'callsign': 'W1AW', 'timestamp': "2025-06-01T11:50:00Z", 'frequency': 'forty'},
        {'callsign': 'W1AW', 'timestamp': "2025-06-01T11:50:00Z", 'snr': 'nan'},
        {'callsign': 'W1AW', 'timestamp': "2025-06-01T11:50:00Z", 'snr': float('nan')},
        {'callsign': 'W1AW', 'timestamp': "2025-06-01T11:50:00Z", 'db': '-inf'},
        {'callsign': 'W1AW', 'timestamp': "2025-06-01T11:50:00Z", 'frequency': 'inf'},
    ])
    def test_malformed(self, record):
        with pytest.raises(MalformedRecord):
            Spot.from_record(record)


class TestFilterState:

    def test_defaults(self):
        state = FilterState()
        assert state.selected_band == "All"
        assert state.time_window_minutes == 30
        assert state.min_snr_db == -10
        assert state.show_paths is True

    @pytest.mark.parametrize("window", [0, -5])
    def test_window_must_be_positive(self, window):
        with pytest.raises(ValueError):
            FilterState(time_window_minutes=window)


def test_primitive_equality_ignores_style():
    geometry = (Coordinate(1, 2),)
    a = DrawablePrimitive(PrimitiveKind.MARKER, geometry, {'fill_color': '#ff0000'})
    b = DrawablePrimitive(PrimitiveKind.MARKER, geometry, {'fill_color': '#00ff00'})
    assert a == b
    assert hash(a) == hash(b)
