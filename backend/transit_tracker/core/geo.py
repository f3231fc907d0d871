"""Great-circle distance and bearing between (lat, lon) pairs in degrees."""

import math

EARTH_RADIUS_KM = 6371.0

Coord = tuple[float, float]


def distance_km(a: Coord, b: Coord) -> float:
    """Haversine distance in kilometres."""
    lat1, lon1 = a
    lat2, lon2 = b
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    h = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlon / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distance_m(a: Coord, b: Coord) -> float:
    return distance_km(a, b) * 1000.0


def bearing_degrees(a: Coord, b: Coord) -> float:
    """Initial compass bearing from a to b, in [0, 360)."""
    lat1, lon1 = math.radians(a[0]), math.radians(a[1])
    lat2, lon2 = math.radians(b[0]), math.radians(b[1])
    dlon = lon2 - lon1
    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    return normalize_heading(math.degrees(math.atan2(y, x)))


def normalize_heading(deg: float) -> float:
    """Wrap an angle into [0, 360)."""
    deg = deg % 360
    # tiny negatives wrap to exactly 360.0 in floating point
    return 0.0 if deg >= 360 else deg


def angle_difference(a: float, b: float) -> float:
    """Absolute difference between two headings, in [0, 180]."""
    diff = abs(a - b) % 360
    if diff > 180:
        diff = 360 - diff
    return diff


def format_distance(km: float) -> str:
    """Human-readable distance: metres below 1 km, else kilometres."""
    if km < 1:
        return f"{km * 1000:.0f} m"
    return f"{km:.1f} km"
