"""
Transform Controller - rotate and scale a map shape by dragging handles

Owns the gesture state machine:
- IDLE -> SCALE_DRAGGING on pointer-down over a corner handle
- IDLE -> ROTATE_DRAGGING on pointer-down over a rotation handle
- Either dragging state -> IDLE on pointer-up, after committing the gesture

While dragging only the preview matrix changes (handles, rectangle and shape
are re-rendered through it). The true geometry is written exactly once, on
pointer-up, by the GeometryMutator.
"""

import logging
import math

from constants import MIN_SCALE_RATIO
from models.matrix import Matrix2D
from models.options import TransformOptions
from models.transform import Vec2
from services.geometry_mutator import GeometryMutator
from utils.errors import UnsupportedGeometryError
from components.transform_widgets.bounding_rect import BoundingRectangleTracker
from components.transform_widgets.drag_context import GestureState, TransformState
from components.transform_widgets.handle_set import HandleSet

logger = logging.getLogger(__name__)


def _as_options(options):
	if isinstance(options, TransformOptions):
		return options
	return TransformOptions().merged(options)


class TransformController:
	"""Interactive rotate/scale handler for one Shape.

	Events fired on the shape:
		transformstart {shape}
		transform {shape}
		transformed {shape, matrix, scale, rotation[, translate]}
		rotatestart / rotate / rotateend {shape, rotation}
		scalestart / scale / scaleend {shape, scale}
	"""

	def __init__(self, shape, options=None):
		self.shape = shape
		self.map = None
		self.options = _as_options(options)
		self.enabled = False
		self.handles_visible = True

		# Committed (between gestures) matrix; identity outside a gesture
		self.matrix = Matrix2D.identity()
		self.state = None

		self.tracker = None
		self.handles = None
		self._mutator = GeometryMutator()

	# ------------------------------------------------------------------
	# Public API
	# ------------------------------------------------------------------

	@property
	def gesture(self):
		return self.state.operation if self.state else GestureState.IDLE

	@property
	def dragging(self):
		return self.state is not None

	def enable(self, options=None):
		"""Show handles. No-op for detached shapes and unsupported geometry."""
		if self.shape.map is None:
			logger.debug("enable() ignored: shape is not on a map")
			return self
		if not GeometryMutator.supports(self.shape.geometry):
			logger.warning("enable() ignored: unsupported geometry %s",
				type(self.shape.geometry).__name__)
			return self
		if options:
			self.options = self.options.merged(options)
		if self.enabled:
			return self

		self.map = self.shape.map
		self.tracker = BoundingRectangleTracker(self.map, self._zoom())
		self.handles = HandleSet(self.map, self.options)
		try:
			rect = self.tracker.reset(self.shape)
		except ValueError as e:
			logger.warning("enable() ignored: %s", e)
			self.tracker = self.handles = None
			return self
		self.handles.build(rect, self.options)
		self.handles_visible = True

		self.shape.on('dragstart', self._on_drag_start)
		self.shape.on('dragend', self._on_drag_end)
		self.map.events.on('viewreset', self._on_view_reset)

		self.enabled = True
		logger.debug("Transform enabled for %s", self.shape.kind)
		return self

	def disable(self):
		"""Remove handles. A running gesture is committed first."""
		if not self.enabled:
			return self
		if self.state is not None:
			self.on_pointer_up()

		self.shape.off('dragstart', self._on_drag_start)
		self.shape.off('dragend', self._on_drag_end)
		self.map.events.off('viewreset', self._on_view_reset)

		self.handles.teardown()
		self.tracker.clear()
		self.handles = None
		self.tracker = None
		self.enabled = False
		logger.debug("Transform disabled for %s", self.shape.kind)
		return self

	def set_options(self, options):
		"""Replace options (merged over the defaults), re-enabling if needed."""
		enabled = self.enabled
		if enabled:
			self.disable()
		self.options = _as_options(options)
		if enabled:
			self.enable()
		return self

	def reset(self):
		"""Rebuild rectangle and handles from the current geometry.

		Call after changing the geometry from outside the controller.
		"""
		if not self.enabled:
			return self
		if self.state is not None:
			logger.debug("reset() ignored during an active gesture")
			return self
		rect = self.tracker.reset(self.shape)
		self.handles.build(rect, self.options)
		return self

	def rotate(self, angle, origin=None):
		"""Rotate by `angle` radians (pointer sense) around `origin` (LatLng)."""
		return self.transform(angle, None, origin)

	def scale(self, scale, origin=None):
		"""Scale by a number or Vec2 around `origin` (LatLng)."""
		if isinstance(scale, (int, float)):
			scale = Vec2(float(scale), float(scale))
		return self.transform(0, scale, None, origin)

	def transform(self, angle=0, scale=None, rotation_origin=None, scale_origin=None):
		"""Apply rotation and scale directly to the geometry.

		Origins default to the shape center.
		"""
		if self.shape.map is None:
			logger.debug("transform() ignored: shape is not on a map")
			return self
		if self.state is not None:
			logger.debug("transform() ignored during an active gesture")
			return self
		if not GeometryMutator.supports(self.shape.geometry):
			logger.warning("transform() ignored: unsupported geometry %s",
				type(self.shape.geometry).__name__)
			return self
		if not self.shape.geometry.coords():
			logger.warning("transform() ignored: shape has no coordinates")
			return self

		map_view = self.shape.map
		center = self.shape.get_center()
		rotation_origin = rotation_origin or center
		scale_origin = scale_origin or center
		scale = scale or Vec2(1.0, 1.0)
		angle = angle or 0.0

		projected = self._projected_matrix(angle, scale, rotation_origin, scale_origin)
		try:
			self._mutator.apply(self.shape, projected, map_view.projection, self._zoom())
		except UnsupportedGeometryError as e:
			logger.warning("transform() ignored: %s", e)
			return self

		if self.enabled:
			self.handles.build(self.tracker.reset(self.shape), self.options)

		layer_matrix = self._compose(
			angle, scale,
			map_view.latlng_to_layer_point(rotation_origin),
			map_view.latlng_to_layer_point(scale_origin))
		self.shape.fire('transformed', matrix=layer_matrix, scale=scale.clone(), rotation=angle)
		return self

	# ------------------------------------------------------------------
	# Pointer input
	# ------------------------------------------------------------------

	def dispatch(self, event):
		"""Route a PointerEvent. Returns True if the controller consumed it."""
		if event.type == 'down':
			return self.on_pointer_down(event.point, event.target)
		if event.type == 'move':
			return self.on_pointer_move(event.point)
		if event.type == 'up':
			return self.on_pointer_up(event.point)
		logger.debug("Unknown pointer event type %r", event.type)
		return False

	def on_pointer_down(self, point, handle=None):
		if not self.enabled or not self.handles_visible:
			return False
		if self.state is not None:
			logger.debug("Pointer-down ignored: %s already active", self.state.operation.value)
			return False
		handle = handle or self.handles.handle_at(point)
		if handle is None:
			return False
		if handle.is_scale:
			self._on_scale_start(handle)
		else:
			self._on_rotate_start(point)
		return True

	def on_pointer_move(self, point):
		if self.state is None:
			return False
		if self.state.is_scaling:
			self._on_scale(point)
		else:
			self._on_rotate(point)
		return True

	def on_pointer_up(self, point=None):
		"""Commit whatever the live matrix holds and return to IDLE."""
		if self.state is None:
			return False
		state = self.state
		if state.is_scaling:
			self.handles.show_rotation()
			self._apply(state)
			self.shape.fire('scaleend', scale=state.scale.clone())
		else:
			self._apply(state)
			self.shape.fire('rotateend', rotation=state.angle)
		return True

	# ------------------------------------------------------------------
	# Scale gesture
	# ------------------------------------------------------------------

	def _on_scale_start(self, handle):
		origin_index = (handle.index + 2) % 4
		origin_latlng = self.tracker.rect.corners[origin_index]
		origin_handle = self.handles.scale_handle(origin_index)
		if origin_handle is not None:
			origin_point = origin_handle.point.clone()
		else:
			origin_point = self.map.latlng_to_layer_point(origin_latlng)

		self._begin_gesture()
		self.state = TransformState(
			GestureState.SCALE_DRAGGING,
			initial_matrix=self.matrix,
			matrix=self.matrix,
			scale_origin=origin_latlng,
			origin_point=origin_point,
			active_handle=handle,
			origin_handle=origin_handle,
			initial_distance=origin_point.distance_to(handle.point),
			initial_dx=origin_point.x - handle.point.x,
			initial_dy=origin_point.y - handle.point.y,
		)
		self.handles.cache_points()
		self.handles.hide_rotation()
		logger.debug("Scale start: handle %d, origin %d", handle.index, origin_index)

		self.shape.fire('transformstart')
		self.shape.fire('scalestart', scale=Vec2(1.0, 1.0))

	def _on_scale(self, point):
		state = self.state
		origin = state.origin_point
		if self.options.uniform_scaling:
			ratio_x = ratio_y = self._ratio(origin.distance_to(point), state.initial_distance)
		else:
			ratio_x = self._ratio(origin.x - point.x, state.initial_dx)
			ratio_y = self._ratio(origin.y - point.y, state.initial_dy)

		state.scale = Vec2(ratio_x, ratio_y)
		state.matrix = state.initial_matrix.compose(Matrix2D.scale_about(ratio_x, ratio_y, origin))
		self._update()
		self.shape.fire('scale', scale=state.scale.clone())

	@staticmethod
	def _ratio(distance, initial):
		"""Scale ratio guarded against degenerate handles.

		A zero initial distance or a non-finite result yields 1 (no scale);
		magnitudes below MIN_SCALE_RATIO are clamped, keeping the sign.
		"""
		if initial == 0:
			return 1.0
		ratio = distance / initial
		if not math.isfinite(ratio):
			return 1.0
		if abs(ratio) < MIN_SCALE_RATIO:
			logger.debug("Scale ratio %g clamped to %g", ratio, MIN_SCALE_RATIO)
			return math.copysign(MIN_SCALE_RATIO, ratio)
		return ratio

	# ------------------------------------------------------------------
	# Rotate gesture
	# ------------------------------------------------------------------

	def _on_rotate_start(self, point):
		rotation_origin = self.tracker.center()
		self._begin_gesture()
		self.state = TransformState(
			GestureState.ROTATE_DRAGGING,
			initial_matrix=self.matrix,
			matrix=self.matrix,
			rotation_origin=rotation_origin,
			origin_point=self.map.latlng_to_layer_point(rotation_origin),
			start_point=point.clone(),
		)
		self.handles.cache_points()
		logger.debug("Rotate start around %s", rotation_origin)

		self.shape.fire('transformstart')
		self.shape.fire('rotatestart', rotation=0.0)

	def _on_rotate(self, point):
		state = self.state
		origin = state.origin_point
		start = state.start_point
		state.angle = (math.atan2(point.y - origin.y, point.x - origin.x)
			- math.atan2(start.y - origin.y, start.x - origin.x))
		state.matrix = state.initial_matrix.compose(
			Matrix2D.rotate_about(state.angle, origin).flip())
		self._update()
		self.shape.fire('rotate', rotation=state.angle)

	# ------------------------------------------------------------------
	# Preview and commit
	# ------------------------------------------------------------------

	def _begin_gesture(self):
		self.map.panning_disable()
		self.handles.interactive = False

	def _update(self):
		"""Re-render handles, rectangle and shape through the live matrix."""
		matrix = self.state.matrix
		self.handles.preview_transform(matrix, skip=self.state.origin_handle)
		self.tracker.preview(matrix)
		self.shape.preview_matrix = matrix
		self.shape.fire('transform')

	def _apply(self, state):
		"""Write the gesture into the geometry, then reset to IDLE."""
		projected = self._projected_matrix(
			state.angle, state.scale, state.rotation_origin, state.scale_origin)

		try:
			self._mutator.apply(self.shape, projected, self.map.projection, self._zoom())
			# Rectangle comes back axis aligned around the new geometry
			self.tracker.reset(self.shape)
		except UnsupportedGeometryError as e:
			logger.warning("Gesture discarded: %s", e)
			self.tracker.preview(None)

		self.shape.preview_matrix = None
		self.handles.rebuild(self.tracker.rect)

		self.matrix = Matrix2D.identity()
		self.state = None
		self.handles.interactive = True
		self.map.panning_enable()
		logger.debug("Committed %s: angle=%.4f scale=(%.4f, %.4f)",
			state.operation.value, state.angle, state.scale.x, state.scale.y)

		self.shape.fire('transformed', matrix=state.matrix, scale=state.scale.clone(), rotation=state.angle)

	def _zoom(self):
		return self.shape.map.get_max_zoom(self.options.max_zoom)

	@staticmethod
	def _compose(angle, scale, rotation_point, scale_point):
		"""Scale about `scale_point`, then rotate (pointer sense) about `rotation_point`."""
		matrix = Matrix2D.identity()
		if scale is not None and not (scale.x == 1 and scale.y == 1):
			matrix = matrix.compose(Matrix2D.scale_about(scale.x, scale.y, scale_point))
		if angle:
			matrix = matrix.compose(Matrix2D.rotate_about(angle, rotation_point).flip())
		return matrix

	def _projected_matrix(self, angle, scale, rotation_origin, scale_origin):
		"""Gesture matrix expressed in projected pixels at the natural zoom."""
		projection = self.shape.map.projection
		zoom = self._zoom()
		rotation_point = projection.project(rotation_origin, zoom) if angle else None
		scale_point = None
		if scale is not None and not (scale.x == 1 and scale.y == 1):
			scale_point = projection.project(scale_origin, zoom)
		return self._compose(angle, scale, rotation_point, scale_point)

	# ------------------------------------------------------------------
	# Host events
	# ------------------------------------------------------------------

	def _on_drag_start(self, event):
		"""Hide handles while the host drags the whole shape."""
		self.handles_visible = False
		self.handles.interactive = False

	def _on_drag_end(self, event):
		"""Rebuild rectangle and handles around the moved geometry."""
		matrix = event['matrix']
		self.handles.build(self.tracker.reset(self.shape), self.options)
		self.handles_visible = True
		self.handles.interactive = True

		self.shape.fire('transformed',
			matrix=matrix,
			scale=Vec2(1.0, 1.0),
			rotation=0.0,
			translate=Vec2(matrix.e, matrix.f))

	def _on_view_reset(self, event):
		if self.state is None:
			self.handles.update_points()
