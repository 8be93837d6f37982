# RBN Overlay
# Copyright (C) 2025 Peter Hirst (WU2C)
#
# Maidenhead locator geodesy.
# Converts 4/6 character grid locators to the centre coordinate of the
# square, plus bearing/distance helpers used in spot tooltips.

import math
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

# Subsquare size in degrees (5' of longitude, 2.5' of latitude)
SUBSQUARE_LON = 2 / 24
SUBSQUARE_LAT = 1 / 24


@dataclass(frozen=True)
class Coordinate:
    """A geographic position in decimal degrees."""
    latitude: float
    longitude: float


def _letter_index(ch: str, last: str) -> Optional[int]:
    """Index of ch in A..last, or None if outside that range."""
    if 'A' <= ch <= last:
        return ord(ch) - ord('A')
    return None


def resolve(locator: str) -> Optional[Coordinate]:
    """
    Convert a Maidenhead locator to the centre of its square.

    Args:
        locator: 4 or 6 character locator (e.g. "FN20", "fn20xp").
                 Extra characters beyond 6 are ignored.

    Returns:
        Coordinate at the centre of the square/subsquare, or None
        if the locator is too short or has characters out of range.
    """
    if not isinstance(locator, str):
        return None
    grid = locator.strip().upper()
    if len(grid) < 4:
        return None

    # Field: A-R, 20 deg lon x 10 deg lat
    field_lon = _letter_index(grid[0], 'R')
    field_lat = _letter_index(grid[1], 'R')
    if field_lon is None or field_lat is None:
        return None

    # Square: 0-9, 2 deg lon x 1 deg lat
    if not (grid[2].isdigit() and grid[3].isdigit()) or not grid[2:4].isascii():
        return None

    lon = field_lon * 20 - 180 + int(grid[2]) * 2
    lat = field_lat * 10 - 90 + int(grid[3])

    if len(grid) >= 6:
        # Subsquare: A-X
        sub_lon = _letter_index(grid[4], 'X')
        sub_lat = _letter_index(grid[5], 'X')
        if sub_lon is None or sub_lat is None:
            return None
        lon += sub_lon * SUBSQUARE_LON + SUBSQUARE_LON / 2
        lat += sub_lat * SUBSQUARE_LAT + SUBSQUARE_LAT / 2
    else:
        lon += 1
        lat += 0.5

    return Coordinate(latitude=lat, longitude=lon)


def bearing(start: Coordinate, end: Coordinate) -> float:
    """Initial great-circle bearing from start to end, degrees 0-360."""
    lat1 = math.radians(start.latitude)
    lat2 = math.radians(end.latitude)
    dlon = math.radians(end.longitude - start.longitude)

    x = math.sin(dlon) * math.cos(lat2)
    y = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)

    return (math.degrees(math.atan2(x, y)) + 360) % 360


def distance_km(start: Coordinate, end: Coordinate) -> float:
    """Haversine distance in kilometres."""
    lat1 = math.radians(start.latitude)
    lat2 = math.radians(end.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(end.longitude - start.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))
