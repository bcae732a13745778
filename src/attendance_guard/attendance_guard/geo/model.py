from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True)
class LocationFix:
    """A claimed GPS reading; accuracy is the reported radius in meters."""

    lat: float
    lng: float
    accuracy: Optional[float] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


def parse_stored_location(raw: Any) -> Coordinate:
    """Parse a session location stored as JSON text (or an already-decoded dict).

    Raises ValueError/TypeError/KeyError on malformed data; callers decide how to
    score that.
    """
    data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    if not isinstance(data, dict):
        raise TypeError(f"Unsupported location value: {raw!r}")
    lat, lng = float(data["lat"]), float(data["lng"])
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValueError(f"Non-finite location: {raw!r}")
    return Coordinate(lat=lat, lng=lng)
