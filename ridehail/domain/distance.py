"""
Distance calculation using the Haversine formula.

Great-circle distance is only used to reject degenerate bookings (pickup and
drop on top of each other).  Billed distance comes from the client's routing
result and is never re-derived here.

Complexity: O(1) per call.
"""

import math

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **metres** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    return haversine_m(lat1, lng1, lat2, lng2) / 1000.0
