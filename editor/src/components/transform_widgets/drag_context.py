"""Gesture state for the transform controller.

One TransformState lives for exactly one gesture: created on pointer-down,
updated on every pointer-move, discarded after the commit on pointer-up.
"""

from dataclasses import dataclass, field
from enum import Enum

from models.matrix import Matrix2D
from models.transform import Vec2


class GestureState(Enum):
    IDLE = 'idle'
    SCALE_DRAGGING = 'scale_dragging'
    ROTATE_DRAGGING = 'rotate_dragging'


@dataclass
class PointerEvent:
    """Pointer input from the host map, in layer points.

    target is the Handle the host already resolved the event to, if any.
    """
    type: str  # 'down', 'move' or 'up'
    point: Vec2
    target: object = None


@dataclass
class TransformState:
    """Everything a single scale or rotate gesture needs."""
    operation: GestureState
    initial_matrix: Matrix2D = field(default_factory=Matrix2D.identity)
    matrix: Matrix2D = field(default_factory=Matrix2D.identity)
    angle: float = 0.0  # radians
    scale: Vec2 = field(default_factory=lambda: Vec2(1.0, 1.0))

    # Geographic origins used for the committed (projected) matrix
    rotation_origin: object = None
    scale_origin: object = None

    # Pixel-space (layer point) origin the live matrix is built around
    origin_point: Vec2 = None
    start_point: Vec2 = None  # pointer position at rotate start

    # Scale gesture
    active_handle: object = None
    origin_handle: object = None
    initial_distance: float = 0.0
    initial_dx: float = 0.0
    initial_dy: float = 0.0

    @property
    def is_scaling(self):
        return self.operation is GestureState.SCALE_DRAGGING

    @property
    def is_rotating(self):
        return self.operation is GestureState.ROTATE_DRAGGING
