"""
Tests for band and SNR classification.
"""

import pytest

from band_classifier import classify, BAND_NAMES, OTHER_BAND
from signal_classifier import color_for, size_for, quality_label, NEUTRAL_COLOR


class TestBandClassifier:

    @pytest.mark.parametrize("freq, band", [
        (1810, "160m"),
        (3550, "80m"),
        (5357, "60m"),
        (7000, "40m"),
        (7100, "40m"),
        (10120, "30m"),
        (14000, "20m"),
        (14349, "20m"),
        (18080, "17m"),
        (21025, "15m"),
        (24900, "12m"),
        (28050, "10m"),
        (50100, "6m"),
    ])
    def test_bands(self, freq, band):
        assert classify(freq) == band

    @pytest.mark.parametrize("freq", [7300, 14350, 0, 2000, 144000, -7100])
    def test_upper_bounds_exclusive_and_out_of_band(self, freq):
        assert classify(freq) == OTHER_BAND

    def test_band_order(self):
        assert BAND_NAMES[0] == "160m"
        assert BAND_NAMES[-1] == "6m"
        assert len(BAND_NAMES) == 11


class TestSignalClassifier:

    TIER_SAMPLES = [-5, 5, 15, 25, 35]

    def test_each_tier_has_its_own_color(self):
        colors = [color_for(s) for s in self.TIER_SAMPLES]
        assert len(set(colors)) == 5
        assert NEUTRAL_COLOR not in colors

    def test_sizes_strictly_increase(self):
        sizes = [size_for(s) for s in self.TIER_SAMPLES]
        assert sizes == sorted(sizes)
        assert len(set(sizes)) == 5

    def test_unknown_snr_is_gray_and_smallest(self):
        assert color_for(None) == NEUTRAL_COLOR
        assert size_for(None) == min(size_for(s) for s in self.TIER_SAMPLES)
        assert quality_label(None) == "Unknown"

    @pytest.mark.parametrize("low, high", [(-0.1, 0), (9.9, 10), (19.9, 20), (29.9, 30)])
    def test_tier_boundaries(self, low, high):
        assert color_for(low) != color_for(high)
        assert size_for(low) < size_for(high)

    def test_nan_is_unknown(self):
        nan = float("nan")
        assert color_for(nan) == NEUTRAL_COLOR
        assert size_for(nan) == size_for(None)
        assert quality_label(nan) == "Unknown"

    def test_labels(self):
        assert quality_label(-20) == "Weak"
        assert quality_label(45) == "Excellent"
