"""Domain primitives: scalar aliases + small geographic value objects."""

from __future__ import annotations

import math
from dataclasses import dataclass

type ExternalId = str
type InternalId = int
type GroupId = int

EARTH_RADIUS_MILES = 3958.8


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
        )

    def distance_miles(self, other: Coordinates) -> float:
        """Great-circle (haversine) distance to ``other`` in miles."""

        lat1, lat2 = math.radians(self.latitude), math.radians(other.latitude)
        d_lat = lat2 - lat1
        d_lng = math.radians(other.longitude - self.longitude)
        a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
        return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@dataclass(frozen=True, slots=True)
class GeoBounds:
    south: float
    west: float
    north: float
    east: float

    def contains(self, point: Coordinates) -> bool:
        if not self.south <= point.latitude <= self.north:
            return False
        if self.west <= self.east:
            return self.west <= point.longitude <= self.east
        # bounds crossing the antimeridian
        return point.longitude >= self.west or point.longitude <= self.east

    @property
    def center(self) -> Coordinates:
        longitude = (self.west + self.east) / 2
        if self.west > self.east:
            longitude = (self.west + self.east + 360.0) / 2
            if longitude > 180.0:
                longitude -= 360.0
        return Coordinates(latitude=(self.south + self.north) / 2, longitude=longitude)


def format_distance(miles: float) -> str:
    if miles < 0.1:
        return "< 0.1 mi"
    return f"{miles:.1f} mi"
