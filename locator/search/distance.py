"""Great-circle distance helpers."""

import math

EARTH_RADIUS_METERS = 6_371_000
DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1&destination={lat},{lng}"


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the distance in meters between two points given in decimal degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def distance_between(origin, destination) -> float:
    """Distance in meters between two objects exposing ``latitude``/``longitude``."""
    return haversine_distance(origin.latitude, origin.longitude, destination.latitude, destination.longitude)


def format_distance(meters: float) -> str:
    # Half-up rounding, round() would give bankers' rounding.
    rounded = int(math.floor(meters + 0.5))
    if rounded < 1000:
        return f"{rounded} m"
    return f"{meters / 1000:.1f} km"


def directions_url(latitude: float, longitude: float) -> str:
    return DIRECTIONS_URL.format(lat=latitude, lng=longitude)
