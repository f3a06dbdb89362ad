"""Shape geometry variants.

Geometry is a tagged variant: a shape is either point-like (a single
coordinate, e.g. a circle) or ring-like (a list of rings, each an ordered
list of coordinates, e.g. a polygon or polyline). Code that branches on the
kind matches on these two classes and treats anything else as unsupported.
"""
from dataclasses import dataclass, field
from typing import List

import numpy as np

from constants import POINT_BOUNDS_RADIUS
from models.transform import LatLng, Vec2


@dataclass
class PointGeometry:
    """Single coordinate with a display radius (pixels at the natural zoom)."""
    latlng: LatLng
    radius: float = POINT_BOUNDS_RADIUS

    def coords(self):
        return [self.latlng]


@dataclass
class RingGeometry:
    """Ordered rings of coordinates.

    closed=True for polygons (the last vertex connects back to the first),
    False for polylines.
    """
    rings: List[List[LatLng]] = field(default_factory=list)
    closed: bool = True

    def coords(self):
        return [latlng for ring in self.rings for latlng in ring]

    def shape_signature(self):
        """Ring count and per-ring vertex counts."""
        return [len(ring) for ring in self.rings]


def polygon_center(points):
    """Area-weighted centroid of a pixel-space ring.

    Falls back to the first vertex for a ring with zero area.
    """
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(pts) == 0:
        raise ValueError("Cannot compute the center of an empty ring")
    # Relative to the first vertex to keep the products small
    rel = pts - pts[0]
    x, y = rel[:, 0], rel[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    cross = x * y_next - x_next * y
    area = cross.sum() * 0.5
    if area == 0:
        return Vec2(float(pts[0][0]), float(pts[0][1]))
    cx = ((x + x_next) * cross).sum() / (6 * area)
    cy = ((y + y_next) * cross).sum() / (6 * area)
    return Vec2(float(cx + pts[0][0]), float(cy + pts[0][1]))


def polyline_center(points):
    """Point halfway along a pixel-space line."""
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(pts) == 0:
        raise ValueError("Cannot compute the center of an empty line")
    segments = np.diff(pts, axis=0)
    lengths = np.hypot(segments[:, 0], segments[:, 1])
    half = lengths.sum() / 2
    if half == 0:
        return Vec2(float(pts[0][0]), float(pts[0][1]))
    walked = 0.0
    for start, delta, length in zip(pts[:-1], segments, lengths):
        if walked + length >= half:
            ratio = (half - walked) / length
            return Vec2(float(start[0] + delta[0] * ratio),
                        float(start[1] + delta[1] * ratio))
        walked += length
    return Vec2(float(pts[-1][0]), float(pts[-1][1]))
