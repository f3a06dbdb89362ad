"""Bounding rectangle tracking for the transform handles.

The rectangle is the anchor for every handle. It is derived from the shape
geometry on reset. During a gesture it is only previewed through the live
matrix; the controller resets it after every committed transform so no
orientation carries over into the next gesture.
"""

from dataclasses import dataclass, field
import logging

import numpy as np

from models.geometry import PointGeometry, RingGeometry
from models.transform import LatLng, LatLngBounds, Vec2, midpoint
from services.geometry_mutator import GeometryMutator
from utils.errors import UnsupportedGeometryError

logger = logging.getLogger(__name__)


@dataclass
class BoundingRectangle:
	"""Four geographic corners, clockwise on screen from the top-left."""
	geometry: RingGeometry
	bounds: LatLngBounds = field(default_factory=LatLngBounds)

	@classmethod
	def from_corners(cls, corners):
		corners = list(corners)
		return cls(RingGeometry([corners], closed=True), LatLngBounds(corners))

	@property
	def corners(self):
		return self.geometry.rings[0]

	def center(self):
		"""Midpoint of the diagonal between corners 0 and 2."""
		return midpoint(self.corners[0], self.corners[2])

	def edge_midpoint(self, index):
		"""Midpoint of the edge from corner `index` to the next corner."""
		corners = self.corners
		return midpoint(corners[index], corners[(index + 1) % 4])


class BoundingRectangleTracker:
	"""Derives the rectangle from geometry and keeps it in step with gestures."""

	def __init__(self, map_view, zoom):
		"""
		Args:
			map_view: MapView used for projection and layer points
			zoom: Natural zoom the rectangle is computed and committed at
		"""
		self.map = map_view
		self.zoom = zoom
		self.rect = None
		self.preview_matrix = None
		self._mutator = GeometryMutator()

	def compute(self, shape):
		"""Axis-aligned pixel-space envelope of the shape as a BoundingRectangle.

		Raises:
			UnsupportedGeometryError: geometry kind is unknown
		"""
		projection = self.map.projection
		geometry = shape.geometry

		if isinstance(geometry, PointGeometry):
			center = projection.project(geometry.latlng, self.zoom)
			r = geometry.radius
			min_x, min_y, max_x, max_y = center.x - r, center.y - r, center.x + r, center.y + r
		elif isinstance(geometry, RingGeometry):
			coords = geometry.coords()
			if not coords:
				raise ValueError("Cannot bound a geometry without coordinates")
			pts = np.array([tuple(projection.project(latlng, self.zoom)) for latlng in coords])
			min_x, min_y = pts.min(axis=0)
			max_x, max_y = pts.max(axis=0)
		else:
			raise UnsupportedGeometryError(geometry)

		corners = [
			projection.unproject(Vec2(float(x), float(y)), self.zoom)
			for x, y in ((min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y))
		]
		return BoundingRectangle.from_corners(corners)

	def reset(self, shape):
		"""Drop any gesture-distorted rectangle and recompute from geometry."""
		self.rect = self.compute(shape)
		self.preview_matrix = None
		return self.rect

	def clear(self):
		self.rect = None
		self.preview_matrix = None

	def preview(self, matrix):
		"""Render-only transform (layer points) until the next commit."""
		self.preview_matrix = matrix

	def commit(self, projected_matrix):
		"""Write a projected matrix (at the natural zoom) into the corners."""
		self.preview_matrix = None
		self._mutator.apply(self.rect, projected_matrix, self.map.projection, self.zoom)
		return self.rect

	def center(self) -> LatLng:
		return self.rect.center()

	def layer_points(self):
		"""Corner layer points with the preview matrix applied."""
		points = [self.map.latlng_to_layer_point(latlng) for latlng in self.rect.corners]
		if self.preview_matrix is not None:
			points = [self.preview_matrix.transform_point(p) for p in points]
		return points
