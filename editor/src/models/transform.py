"""Coordinate data structures shared by the transform engine."""
from dataclasses import dataclass
import math


@dataclass
class Vec2:
    """2D vector for pixel coordinate pairs.

    Used for any x/y pair in flat space:
    - Projected pixels (at a given zoom)
    - Layer points (view zoom, relative to the map pixel origin)
    - Scale vectors (sx, sy)
    """
    x: float
    y: float

    def __iter__(self):
        """Allow tuple unpacking: x, y = vec2"""
        return iter((self.x, self.y))

    def __add__(self, other):
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other):
        return Vec2(self.x - other.x, self.y - other.y)

    def clone(self):
        return Vec2(self.x, self.y)

    def distance_to(self, other) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True)
class LatLng:
    """Geographic coordinate (degrees)."""
    lat: float
    lng: float

    def __iter__(self):
        return iter((self.lat, self.lng))


def midpoint(a: LatLng, b: LatLng) -> LatLng:
    """Arithmetic midpoint of two coordinates."""
    return LatLng((a.lat + b.lat) / 2, (a.lng + b.lng) / 2)


class LatLngBounds:
    """Geographic envelope grown one coordinate at a time."""

    def __init__(self, coords=()):
        self.south_west = None
        self.north_east = None
        for coord in coords:
            self.extend(coord)

    def extend(self, coord: LatLng):
        if self.south_west is None:
            self.south_west = LatLng(coord.lat, coord.lng)
            self.north_east = LatLng(coord.lat, coord.lng)
        else:
            self.south_west = LatLng(min(self.south_west.lat, coord.lat),
                                     min(self.south_west.lng, coord.lng))
            self.north_east = LatLng(max(self.north_east.lat, coord.lat),
                                     max(self.north_east.lng, coord.lng))
        return self

    def is_valid(self) -> bool:
        return self.south_west is not None

    def get_center(self) -> LatLng:
        return midpoint(self.south_west, self.north_east)

    def __repr__(self):
        return f"LatLngBounds({self.south_west}, {self.north_east})"
