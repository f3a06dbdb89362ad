"""Writes a committed matrix into a shape's true coordinates.

Every coordinate goes project -> transform -> unproject at one zoom level,
in ring order, so ring topology and coordinate counts never change.
"""

import logging

from models.geometry import PointGeometry, RingGeometry
from models.transform import LatLngBounds
from utils.errors import UnsupportedGeometryError

logger = logging.getLogger(__name__)


def transform_latlng(latlng, matrix, projection, zoom):
	"""Project, transform and unproject a single coordinate."""
	return projection.unproject(matrix.transform_point(projection.project(latlng, zoom)), zoom)


class GeometryMutator:
	"""Applies matrices to point-like and ring-like geometries in place."""

	@staticmethod
	def supports(geometry) -> bool:
		return isinstance(geometry, (PointGeometry, RingGeometry))

	def apply(self, shape, matrix, projection, zoom):
		"""Transform the geometry of `shape` (or any object with `.geometry`).

		Rebuilds `shape.bounds` as a fold over the transformed coordinates.

		Raises:
			UnsupportedGeometryError: geometry is neither point- nor ring-like
		"""
		geometry = shape.geometry
		bounds = LatLngBounds()

		if matrix.is_identity(tol=0) and self.supports(geometry):
			# Skip the projection round trip so identity leaves coordinates bit-exact
			shape.bounds = LatLngBounds(geometry.coords())
			return shape

		if isinstance(geometry, PointGeometry):
			geometry.latlng = transform_latlng(geometry.latlng, matrix, projection, zoom)
			bounds.extend(geometry.latlng)
		elif isinstance(geometry, RingGeometry):
			for ring in geometry.rings:
				for j, latlng in enumerate(ring):
					ring[j] = transform_latlng(latlng, matrix, projection, zoom)
					bounds.extend(ring[j])
		else:
			raise UnsupportedGeometryError(geometry)

		shape.bounds = bounds
		logger.debug("Applied %s to %s (%d coords)", tuple(matrix), type(geometry).__name__,
			len(geometry.coords()))
		return shape
