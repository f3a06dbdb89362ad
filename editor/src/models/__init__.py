"""
Map Path Transform - Data Models

Value types (Vec2, LatLng, Matrix2D), shape geometry variants, transform
options and the host-side Shape.
"""

from .transform import Vec2, LatLng, LatLngBounds
from .matrix import Matrix2D
from .geometry import PointGeometry, RingGeometry
from .options import TransformOptions
from .shape import Shape

__all__ = [
    'Vec2', 'LatLng', 'LatLngBounds', 'Matrix2D',
    'PointGeometry', 'RingGeometry', 'TransformOptions', 'Shape',
]
