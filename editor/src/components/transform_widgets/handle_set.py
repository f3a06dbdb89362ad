"""Handle set - the scale corners, rotation handles and guides of one shape."""

import logging

from models.transform import Vec2
from .handles import Handle, GuideSegment

logger = logging.getLogger(__name__)


def point_on_line(start, final, distance):
	"""Point `distance` pixels beyond `final` on the line from `start`.

	Returns `final` unchanged when start and final coincide.
	"""
	length = start.distance_to(final)
	if length == 0:
		return final.clone()
	ratio = 1 + distance / length
	return Vec2(start.x + (final.x - start.x) * ratio,
	            start.y + (final.y - start.y) * ratio)


class HandleSet:
	"""Owns every handle marker and guide segment drawn for a shape.

	Handles never own geometry: their geographic positions are derived from
	the bounding rectangle and only rewritten by commit().
	"""

	def __init__(self, map_view, options):
		self.map = map_view
		self.options = options
		self.scale_handles = []
		self.rotation_handles = []
		self.guides = []
		self.interactive = True

	@property
	def handles(self):
		return self.scale_handles + self.rotation_handles

	def build(self, rect, options=None):
		"""Create handles for `rect` (a BoundingRectangle)."""
		if options is not None:
			self.options = options
		options = self.options
		self.teardown()

		if options.scaling:
			for i in range(options.edges_count):
				latlng = rect.corners[i]
				self.scale_handles.append(Handle.scale(
					i, latlng, self.map.latlng_to_layer_point(latlng),
					options.handle_radius, options.hit_tolerance))

		if options.rotation:
			self._create_rotation_handles(rect)

		logger.debug("Built %d scale and %d rotation handles",
			len(self.scale_handles), len(self.rotation_handles))
		return self

	def _create_rotation_handles(self, rect):
		"""One rotation handle per edge, pushed outward from the edge midpoint."""
		options = self.options
		midpoints = [self.map.latlng_to_layer_point(rect.edge_midpoint(i)) for i in range(4)]

		for i in range(4):
			mid_point = midpoints[i]
			opposite = midpoints[(i + 2) % 4]
			handle_point = point_on_line(opposite, mid_point, options.handle_length)
			handle_latlng = self.map.layer_point_to_latlng(handle_point)

			self.guides.append(GuideSegment(rect.edge_midpoint(i), handle_latlng, mid_point, handle_point.clone()))
			self.rotation_handles.append(Handle.rotate(
				i, handle_latlng, handle_point,
				options.handle_radius, options.hit_tolerance))

	def rebuild(self, rect):
		return self.build(rect)

	def teardown(self):
		self.scale_handles = []
		self.rotation_handles = []
		self.guides = []

	def cache_points(self):
		"""Remember every displayed point as the base for preview transforms."""
		for handle in self.handles:
			handle.marker.cache_point()
		for guide in self.guides:
			guide.cache_points()

	def preview_transform(self, matrix, skip=None):
		"""Move displayed points through `matrix`; geographic positions stay put."""
		for handle in self.handles:
			if handle is skip or handle.marker.initial_point is None:
				continue
			handle.marker.point = matrix.transform_point(handle.marker.initial_point)
		for guide in self.guides:
			if guide.initial_points is not None:
				guide.points = [matrix.transform_point(p) for p in guide.initial_points]

	def commit(self):
		"""Adopt displayed points as authoritative and drop the cached ones."""
		for handle in self.handles:
			marker = handle.marker
			marker.latlng = self.map.layer_point_to_latlng(marker.point)
			marker.initial_point = None
		for guide in self.guides:
			guide.latlngs = [self.map.layer_point_to_latlng(p) for p in guide.points]
			guide.initial_points = None

	def update_points(self):
		"""Recompute displayed points after the view changed."""
		for handle in self.handles:
			handle.marker.point = self.map.latlng_to_layer_point(handle.marker.latlng)
		for guide in self.guides:
			guide.points = [self.map.latlng_to_layer_point(latlng) for latlng in guide.latlngs]

	def hide_rotation(self):
		for item in self.rotation_handles:
			item.marker.visible = False
		for guide in self.guides:
			guide.visible = False

	def show_rotation(self):
		for item in self.rotation_handles:
			item.marker.visible = True
		for guide in self.guides:
			guide.visible = True

	def scale_handle(self, index):
		for handle in self.scale_handles:
			if handle.index == index:
				return handle
		return None

	def handle_at(self, point):
		"""Find which handle (if any) is at a layer point.

		Rotation handles are checked before corners. Returns None while the
		set is not interactive (a gesture is running).
		"""
		if not self.interactive:
			return None
		for handle in self.rotation_handles + self.scale_handles:
			if handle.marker.hit_test(point):
				return handle
		return None

	def draw(self, painter):
		for guide in self.guides:
			guide.draw(painter)
		for handle in self.handles:
			handle.marker.draw(painter)
