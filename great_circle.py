# RBN Overlay
# Copyright (C) 2025 Peter Hirst (WU2C)

import math
from typing import List

import numpy as np

from grid_locator import Coordinate

DEFAULT_POINTS = 30

# Below this separation (degrees, both axes) a straight segment is drawn
MIN_INTERPOLATION_DELTA = 0.5


def _is_finite(c: Coordinate) -> bool:
    return math.isfinite(c.latitude) and math.isfinite(c.longitude)


def path(a: Coordinate, b: Coordinate, points: int = DEFAULT_POINTS) -> List[Coordinate]:
    """
    Great circle polyline from a to b.

    Returns points + 1 coordinates evenly spaced along the shortest
    spherical path (slerp over unit vectors). Falls back to the straight
    segment [a, b] for non-finite input, nearly coincident endpoints, and
    antipodal endpoints where the path is undefined.
    """
    if not (_is_finite(a) and _is_finite(b)):
        return [a, b]

    if (abs(b.latitude - a.latitude) < MIN_INTERPOLATION_DELTA
            and abs(b.longitude - a.longitude) < MIN_INTERPOLATION_DELTA):
        return [a, b]

    points = max(1, int(points))

    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)

    # Angular distance, spherical law of cosines
    cos_d = (math.sin(lat1) * math.sin(lat2)
             + math.cos(lat1) * math.cos(lat2) * math.cos(lon2 - lon1))
    d = math.acos(max(-1.0, min(1.0, cos_d)))
    sin_d = math.sin(d)
    if sin_d < 1e-12:
        return [a, b]

    f = np.linspace(0.0, 1.0, points + 1)
    A = np.sin((1 - f) * d) / sin_d
    B = np.sin(f * d) / sin_d

    x = A * math.cos(lat1) * math.cos(lon1) + B * math.cos(lat2) * math.cos(lon2)
    y = A * math.cos(lat1) * math.sin(lon1) + B * math.cos(lat2) * math.sin(lon2)
    z = A * math.sin(lat1) + B * math.sin(lat2)

    lats = np.degrees(np.arctan2(z, np.sqrt(x * x + y * y)))
    lons = np.degrees(np.arctan2(y, x))

    result = [Coordinate(float(lat), float(lon)) for lat, lon in zip(lats[1:-1], lons[1:-1])]
    # Endpoints are the inputs themselves
    return [a] + result + [b]
