from __future__ import annotations

import math
from typing import Sequence

EARTH_RADIUS_KM = 6371
KM_PER_MILE = 1.60934


def haversine_distance(
    coords1: Sequence[float],
    coords2: Sequence[float],
    is_miles: bool = False,
) -> float:
    """
    Great-circle distance between two [latitude, longitude] points in degrees.

    Returns kilometres, or miles when ``is_miles`` is set. Inputs are not
    validated; NaN in gives NaN out.
    """
    lat1, lon1 = float(coords1[0]), float(coords1[1])
    lat2, lon2 = float(coords2[0]), float(coords2[1])

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2 +
        math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
        math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    d = EARTH_RADIUS_KM * c

    if is_miles:
        d /= KM_PER_MILE
    return d
