"""Affine matrix value type for pixel-space transforms.

A Matrix2D holds six coefficients (a, b, c, d, e, f) describing

    (x, y) -> (a*x + c*y + e, b*x + d*y + f)

Matrices are frozen: every operation returns a new matrix, so a snapshot
taken at gesture start can never be changed by later preview updates.
Non-finite coefficients are not rejected; they propagate to every point the
matrix transforms.
"""
from dataclasses import dataclass
import math

import numpy as np

from models.transform import Vec2


@dataclass(frozen=True)
class Matrix2D:
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    def __iter__(self):
        return iter((self.a, self.b, self.c, self.d, self.e, self.f))

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls):
        return cls()

    @classmethod
    def translation(cls, dx, dy):
        return cls(1, 0, 0, 1, dx, dy)

    @classmethod
    def scaling(cls, sx, sy=None):
        if sy is None:
            sy = sx
        return cls(sx, 0, 0, sy, 0, 0)

    @classmethod
    def scale_about(cls, sx, sy, origin):
        """Scale by (sx, sy) keeping the pixel `origin` fixed."""
        return (cls.translation(origin.x, origin.y)
                .compose(cls.scaling(sx, sy))
                .compose(cls.translation(-origin.x, -origin.y)))

    @classmethod
    def rotate_about(cls, angle, origin):
        """Rotate by `angle` radians around the pixel `origin`.

        Mathematical orientation: a positive angle turns counter-clockwise
        as seen on a Y-down screen. Use flip() to get the rotation that
        follows a pointer angle measured with atan2 in pixel space.
        """
        cos = math.cos(angle)
        sin = math.sin(angle)
        return (cls.translation(origin.x, origin.y)
                .compose(cls(cos, -sin, sin, cos, 0, 0))
                .compose(cls.translation(-origin.x, -origin.y)))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def compose(self, other):
        """Matrix product self x other: the result applies `other` first."""
        a, b, c, d, e, f = self
        oa, ob, oc, od, oe, of = other
        return Matrix2D(
            a * oa + c * ob,
            b * oa + d * ob,
            a * oc + c * od,
            b * oc + d * od,
            a * oe + c * of + e,
            b * oe + d * of + f,
        )

    def translate(self, dx, dy):
        return self.compose(Matrix2D.translation(dx, dy))

    def scale(self, sx, sy, origin):
        return self.compose(Matrix2D.scale_about(sx, sy, origin))

    def rotate(self, angle, origin):
        return self.compose(Matrix2D.rotate_about(angle, origin))

    def flip(self):
        """Reverse the rotation sense: negate b and c, keep the fixed point.

        Pixel space grows downward while rotate_about() works in the
        mathematical orientation, so a pointer-driven rotation is the flipped
        matrix. The translation is recomputed so the point the matrix leaves
        in place stays in place.
        """
        a, b, c, d, e, f = self
        if b == 0 and c == 0:
            return self
        det = (1 - a) * (1 - d) - b * c
        if det == 0:
            return Matrix2D(a, -b, -c, d, e, f)
        px = ((1 - d) * e + c * f) / det
        py = (b * e + (1 - a) * f) / det
        return Matrix2D(a, -b, -c, d,
                        px - (a * px - c * py),
                        py - (-b * px + d * py))

    def inverse(self):
        a, b, c, d, e, f = self
        det = a * d - b * c
        if det == 0:
            raise ZeroDivisionError("Matrix is not invertible")
        return Matrix2D(d / det, -b / det, -c / det, a / det,
                        (c * f - d * e) / det, (b * e - a * f) / det)

    def clone(self):
        return Matrix2D(*self)

    def transform_point(self, point) -> Vec2:
        return Vec2(self.a * point.x + self.c * point.y + self.e,
                    self.b * point.x + self.d * point.y + self.f)

    def transform_points(self, points):
        """Transform an (N, 2) array of pixel points in one pass."""
        pts = np.asarray(points, dtype=float).reshape(-1, 2)
        linear = np.array([[self.a, self.b], [self.c, self.d]])
        return pts @ linear + np.array([self.e, self.f])

    def is_identity(self, tol=1e-9) -> bool:
        return self.almost_equal(IDENTITY, tol)

    def almost_equal(self, other, tol=1e-9) -> bool:
        return all(abs(x - y) <= tol for x, y in zip(self, other))

    def as_tuple(self):
        return tuple(self)


IDENTITY = Matrix2D()
