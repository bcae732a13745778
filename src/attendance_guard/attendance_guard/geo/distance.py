from __future__ import annotations

import math

from ..core.constants import EARTH_RADIUS_METERS
from .model import Coordinate


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates (haversine, spherical Earth).

    Does not validate ranges; malformed input must be rejected upstream.
    """
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
