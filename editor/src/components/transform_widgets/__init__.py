"""
Map Path Transform - Transform Widget Components

- handles.py: Marker, Handle and GuideSegment (composition, no handle subclasses)
- handle_set.py: The scale corners, rotation handles and guides of one shape
- bounding_rect.py: Oriented bounding rectangle the handles hang off
- drag_context.py: Gesture state and pointer events
"""

from .handles import Marker, Handle, HandleRole, GuideSegment
from .handle_set import HandleSet, point_on_line
from .bounding_rect import BoundingRectangle, BoundingRectangleTracker
from .drag_context import GestureState, PointerEvent, TransformState

__all__ = [
    'Marker', 'Handle', 'HandleRole', 'GuideSegment',
    'HandleSet', 'point_on_line',
    'BoundingRectangle', 'BoundingRectangleTracker',
    'GestureState', 'PointerEvent', 'TransformState',
]
