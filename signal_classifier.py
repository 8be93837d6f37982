# RBN Overlay
# Copyright (C) 2025 Peter Hirst (WU2C)
#
# SNR -> marker style tiers.

import math
from typing import Optional

NEUTRAL_COLOR = "#888888"

# (upper SNR bound exclusive, color, marker radius, label)
# Last tier has no upper bound.
SNR_TIERS = (
    (0, "#ff3333", 6, "Weak"),         # Red
    (10, "#ff9933", 8, "Fair"),        # Orange
    (20, "#ffcc33", 10, "Good"),       # Yellow
    (30, "#99ff33", 12, "Very good"),  # Light green
    (None, "#33ff33", 14, "Excellent"),  # Bright green
)


def _tier(snr: float):
    for tier in SNR_TIERS:
        upper = tier[0]
        if upper is None or snr < upper:
            return tier
    return SNR_TIERS[-1]


def _unknown(snr) -> bool:
    return snr is None or math.isnan(snr)


def color_for(snr: Optional[float]) -> str:
    """Marker/path color for a spot SNR (gray when unknown)."""
    if _unknown(snr):
        return NEUTRAL_COLOR
    return _tier(snr)[1]


def size_for(snr: Optional[float]) -> float:
    """Marker radius in pixels; unknown SNR gets the smallest size."""
    if _unknown(snr):
        return SNR_TIERS[0][2]
    return _tier(snr)[2]


def quality_label(snr: Optional[float]) -> str:
    if _unknown(snr):
        return "Unknown"
    return _tier(snr)[3]
