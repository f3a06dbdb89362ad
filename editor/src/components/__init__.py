"""UI components for the map path transform engine

This package contains:
- transform_widgets: Handles, handle set, bounding rectangle and gesture state
- transform_controller: Rotate/scale gesture state machine for one shape
- transform_overlay: Qt widget hosting shapes and routing mouse input
"""

from .transform_controller import TransformController
from .transform_overlay import TransformOverlay

__all__ = [
    'TransformController',
    'TransformOverlay',
]
