"""Exceptions raised inside the transform engine.

They never escape the public controller API: the controller turns them into
logged no-ops so a failed gesture leaves the shape unchanged.
"""


class TransformError(Exception):
    """Base class for transform engine errors"""


class UnsupportedGeometryError(TransformError):
    """Geometry kind the mutator does not know how to transform"""

    def __init__(self, geometry):
        super().__init__(f"Unsupported geometry type: {type(geometry).__name__}")
        self.geometry = geometry
