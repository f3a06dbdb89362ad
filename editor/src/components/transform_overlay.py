"""
Transform Overlay - Qt host surface for transformable map shapes

Provides a widget that:
- Paints shapes (through their preview matrix while a gesture runs)
- Paints the dashed bounding rectangle, rotation guides and handles
- Feeds mouse press/move/release to the shape controllers as pointer events
- Drags a shape body or pans the map when no handle is hit
"""

import logging

from PyQt5.QtWidgets import QWidget
from PyQt5.QtCore import Qt, QPointF, pyqtSignal
from PyQt5.QtGui import QPainter, QPen, QBrush, QColor, QPolygonF

from constants import (
	BOUNDS_COLOR, BOUNDS_DASH_PATTERN, SHAPE_STROKE_COLOR,
	SHAPE_FILL_COLOR, SHAPE_STROKE_WIDTH
)
from models.geometry import PointGeometry
from models.transform import Vec2
from components.transform_widgets.drag_context import PointerEvent
from utils.logger import loggerRaise

logger = logging.getLogger(__name__)


class TransformOverlay(QWidget):
	"""Paints shapes with their transform handles and routes mouse input."""

	# Signals
	transformChanged = pyqtSignal(object)  # shape, on every preview update
	transformEnded = pyqtSignal(object, object)  # shape, 'transformed' payload

	def __init__(self, map_view, parent=None):
		super().__init__(parent)
		self.setMouseTracking(True)
		self.map_view = map_view
		self.shapes = []

		# Interaction state
		self._active_controller = None
		self._dragged_shape = None
		self._pan_last = None

		self.map_view.events.on('viewreset', lambda event: self.update())

	def add_shape(self, shape):
		"""Show a shape; enable its controller if it has one."""
		self.shapes.append(shape)
		if shape.map is None:
			shape.add_to(self.map_view)
		shape.on('transform', self._on_shape_transform)
		shape.on('transformed', self._on_shape_transformed)
		if shape.transform is not None:
			shape.transform.enable()
		self.update()
		return shape

	def remove_shape(self, shape):
		if shape not in self.shapes:
			return
		self.shapes.remove(shape)
		shape.off('transform', self._on_shape_transform)
		shape.off('transformed', self._on_shape_transformed)
		shape.remove()
		self.update()

	def _on_shape_transform(self, event):
		self.transformChanged.emit(event['shape'])
		self.update()

	def _on_shape_transformed(self, event):
		self.transformEnded.emit(event['shape'], event)
		self.update()

	# ------------------------------------------------------------------
	# Painting
	# ------------------------------------------------------------------

	def paintEvent(self, event):
		"""Draw shapes, then rectangles and handles on top"""
		painter = QPainter(self)
		painter.setRenderHint(QPainter.Antialiasing)

		for shape in self.shapes:
			self._paint_shape(painter, shape)

		for shape in self.shapes:
			controller = shape.transform
			if controller is None or not controller.enabled or not controller.handles_visible:
				continue
			self._paint_bounds(painter, controller.tracker.layer_points())
			controller.handles.draw(painter)

		painter.end()

	def _paint_shape(self, painter, shape):
		rings = shape.layer_rings()
		if not rings:
			return
		painter.setPen(QPen(QColor(*SHAPE_STROKE_COLOR), SHAPE_STROKE_WIDTH))

		if isinstance(shape.geometry, PointGeometry):
			projection = self.map_view.projection
			natural = self.map_view.get_max_zoom()
			radius = shape.geometry.radius * projection.scale(self.map_view.zoom) / projection.scale(natural)
			cx, cy = rings[0][0]
			painter.setBrush(QBrush(QColor(*SHAPE_FILL_COLOR)))
			painter.drawEllipse(QPointF(cx, cy), radius, radius)
			return

		for ring in rings:
			polygon = QPolygonF([QPointF(x, y) for x, y in ring])
			if shape.geometry.closed:
				painter.setBrush(QBrush(QColor(*SHAPE_FILL_COLOR)))
				painter.drawPolygon(polygon)
			else:
				painter.setBrush(Qt.NoBrush)
				painter.drawPolyline(polygon)

	def _paint_bounds(self, painter, points):
		pen = QPen(QColor(*BOUNDS_COLOR), 1)
		pen.setDashPattern(BOUNDS_DASH_PATTERN)
		painter.setPen(pen)
		painter.setBrush(Qt.NoBrush)
		painter.drawPolygon(QPolygonF([QPointF(p.x, p.y) for p in points]))

	# ------------------------------------------------------------------
	# Mouse input
	# ------------------------------------------------------------------

	def _controllers(self):
		"""Enabled controllers, topmost shape first"""
		for shape in reversed(self.shapes):
			if shape.transform is not None and shape.transform.enabled:
				yield shape.transform

	def _dispatch(self, controller, event):
		try:
			return controller.dispatch(event)
		except Exception as e:
			loggerRaise(e, f"Failed to handle {event.type} on {controller.shape.kind}")

	def mousePressEvent(self, event):
		if event.button() != Qt.LeftButton:
			return
		point = Vec2(event.pos().x(), event.pos().y())

		for controller in self._controllers():
			if self._dispatch(controller, PointerEvent('down', point)):
				self._active_controller = controller
				return

		for shape in reversed(self.shapes):
			if shape.contains_layer_point(point) and shape.drag_start(point):
				self._dragged_shape = shape
				return

		if self.map_view.panning_enabled:
			self._pan_last = point

	def mouseMoveEvent(self, event):
		point = Vec2(event.pos().x(), event.pos().y())

		if self._active_controller is not None:
			self._dispatch(self._active_controller, PointerEvent('move', point))
			return
		if self._dragged_shape is not None:
			self._dragged_shape.drag_move(point)
			self.update()
			return
		if self._pan_last is not None:
			delta = point - self._pan_last
			self._pan_last = point
			self.map_view.pan_by(-delta.x, -delta.y)
			return

		self._update_cursor(point)

	def mouseReleaseEvent(self, event):
		if event.button() != Qt.LeftButton:
			return
		point = Vec2(event.pos().x(), event.pos().y())

		if self._active_controller is not None:
			controller = self._active_controller
			self._active_controller = None
			self._dispatch(controller, PointerEvent('up', point))
		elif self._dragged_shape is not None:
			shape = self._dragged_shape
			self._dragged_shape = None
			shape.drag_end()
		self._pan_last = None
		self.update()

	def _update_cursor(self, point):
		"""Show the hovered handle's cursor"""
		for controller in self._controllers():
			if not controller.handles_visible:
				continue
			handle = controller.handles.handle_at(point)
			if handle is not None:
				self.setCursor(handle.marker.get_cursor())
				return
		self.unsetCursor()
