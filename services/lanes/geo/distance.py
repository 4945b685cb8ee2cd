"""
Great-circle distance and coarse lat/lng boxes.

Boxes are only a pre-filter for repository queries. Every candidate that
survives a box query is re-measured with haversine before any radius check.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Mean Earth radius in statute miles. One constant for every call site.
EARTH_RADIUS_MILES = 3958.8

# Rough miles-per-degree used to turn a mile radius into a box.
# Longitude degrees shrink with latitude; 53 mi is a mid-US compromise.
MILES_PER_DEGREE_LAT = 69.0
MILES_PER_DEGREE_LNG = 53.0


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles between two decimal-degree points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box (lat/lng)."""
    lat_min: float
    lat_max: float
    lng_min: float
    lng_max: float

    def contains(self, lat: float, lng: float) -> bool:
        """Check if a point falls within this bounding box."""
        return (
            self.lat_min <= lat <= self.lat_max
            and self.lng_min <= lng <= self.lng_max
        )

    @property
    def height(self) -> float:
        return self.lat_max - self.lat_min

    @property
    def width(self) -> float:
        return self.lng_max - self.lng_min

    @classmethod
    def around(cls, lat: float, lng: float, degrees: float) -> BoundingBox:
        """Square box padded by ``degrees`` on every side of a point."""
        return cls(lat - degrees, lat + degrees, lng - degrees, lng + degrees)

    @classmethod
    def around_radius(cls, lat: float, lng: float, miles: float) -> BoundingBox:
        """Box that encloses a circle of ``miles`` around a point."""
        lat_pad = miles / MILES_PER_DEGREE_LAT
        lng_pad = miles / MILES_PER_DEGREE_LNG
        return cls(lat - lat_pad, lat + lat_pad, lng - lng_pad, lng + lng_pad)

    @classmethod
    def spanning(cls, points: list[tuple[float, float]], padding: float = 0.0) -> BoundingBox:
        """Smallest box holding every (lat, lng) point, padded by ``padding`` degrees."""
        lats = [p[0] for p in points]
        lngs = [p[1] for p in points]
        return cls(
            min(lats) - padding,
            max(lats) + padding,
            min(lngs) - padding,
            max(lngs) + padding,
        )
