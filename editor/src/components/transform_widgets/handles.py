"""Transform handles built by composition over a draggable marker.

A Marker knows:
- Its authoritative geographic position and its displayed layer point
- How to test if a pointer position hits it
- How to draw itself and which cursor to show

A Handle adds a role (scale corner or rotation edge) and an index on top of
a Marker. GuideSegments are the thin lines joining an edge midpoint to its
rotation handle.
"""

from enum import Enum
import math

from PyQt5.QtCore import QPointF, Qt
from PyQt5.QtGui import QPen, QBrush, QColor

from constants import (
    HANDLE_RADIUS, HANDLE_HIT_TOLERANCE, HANDLE_FILL_COLOR,
    HANDLE_STROKE_COLOR, HANDLE_STROKE_WIDTH, GUIDE_COLOR,
    CORNER_CURSORS, ROTATE_CURSOR
)


CURSOR_SHAPES = {
    'nwse-resize': Qt.SizeFDiagCursor,
    'nesw-resize': Qt.SizeBDiagCursor,
    'all-scroll': Qt.SizeAllCursor,
}


class HandleRole(Enum):
    SCALE = 'scale'
    ROTATE = 'rotate'


class Marker:
    """Draggable marker capability: position, hit area, cursor, paint."""

    def __init__(self, latlng, point, radius=HANDLE_RADIUS,
                 hit_tolerance=HANDLE_HIT_TOLERANCE, cursor=None):
        """
        Args:
            latlng: Authoritative geographic position
            point: Displayed position in layer points
            radius: Visual radius in pixels
            hit_tolerance: Extra pixels for hit detection
            cursor: Cursor name (see CURSOR_SHAPES)
        """
        self.latlng = latlng
        self.point = point
        self.initial_point = None
        self.radius = radius
        self.hit_tolerance = hit_tolerance
        self.cursor = cursor
        self.visible = True

    def cache_point(self):
        self.initial_point = self.point.clone()

    def hit_test(self, point) -> bool:
        if not self.visible:
            return False
        distance = math.hypot(point.x - self.point.x, point.y - self.point.y)
        return distance <= (self.radius + self.hit_tolerance)

    def draw(self, painter):
        if not self.visible:
            return
        painter.setPen(QPen(QColor(*HANDLE_STROKE_COLOR), HANDLE_STROKE_WIDTH))
        painter.setBrush(QBrush(QColor(*HANDLE_FILL_COLOR)))
        painter.drawEllipse(QPointF(self.point.x, self.point.y), float(self.radius), float(self.radius))

    def get_cursor(self):
        """Qt cursor shape to display when hovering over this marker."""
        return CURSOR_SHAPES.get(self.cursor, Qt.ArrowCursor)


class Handle:
    """Scale corner or rotation control composed over a Marker."""

    def __init__(self, role, index, marker):
        self.role = role
        self.index = index
        self.marker = marker

    @classmethod
    def scale(cls, index, latlng, point, radius=HANDLE_RADIUS, hit_tolerance=HANDLE_HIT_TOLERANCE):
        return cls(HandleRole.SCALE, index,
                   Marker(latlng, point, radius, hit_tolerance, CORNER_CURSORS[index % 4]))

    @classmethod
    def rotate(cls, index, latlng, point, radius=HANDLE_RADIUS, hit_tolerance=HANDLE_HIT_TOLERANCE):
        return cls(HandleRole.ROTATE, index,
                   Marker(latlng, point, radius, hit_tolerance, ROTATE_CURSOR))

    @property
    def is_scale(self):
        return self.role is HandleRole.SCALE

    @property
    def is_rotate(self):
        return self.role is HandleRole.ROTATE

    @property
    def latlng(self):
        return self.marker.latlng

    @property
    def point(self):
        return self.marker.point

    @property
    def initial_point(self):
        return self.marker.initial_point

    def __repr__(self):
        return f"Handle({self.role.value}, {self.index}, {self.marker.point})"


class GuideSegment:
    """Line from an edge midpoint to its rotation handle."""

    def __init__(self, start_latlng, end_latlng, start_point, end_point):
        self.latlngs = [start_latlng, end_latlng]
        self.points = [start_point, end_point]
        self.initial_points = None
        self.visible = True

    def cache_points(self):
        self.initial_points = [p.clone() for p in self.points]

    def draw(self, painter):
        if not self.visible:
            return
        start, end = self.points
        painter.setPen(QPen(QColor(*GUIDE_COLOR), 1))
        painter.drawLine(QPointF(start.x, start.y), QPointF(end.x, end.y))
