"""Projection adapters and the map view the transform engine talks to.

Provides conversion between:
- Geographic coordinates (LatLng, degrees)
- Projected pixels at an arbitrary zoom (used to commit geometry)
- Layer points (pixels at the view zoom, relative to the map pixel origin)
"""

from abc import ABC, abstractmethod
import logging
import math

from constants import TILE_SIZE, EARTH_RADIUS, MAX_LATITUDE, DEFAULT_MAX_ZOOM
from models.transform import LatLng, Vec2
from utils.events import EventEmitter

logger = logging.getLogger(__name__)


class ProjectionAdapter(ABC):
	"""Maps geographic coordinates to flat pixel space at a zoom level."""

	@abstractmethod
	def project(self, latlng, zoom) -> Vec2:
		"""Project a LatLng to pixels at `zoom`."""
		pass

	@abstractmethod
	def unproject(self, point, zoom) -> LatLng:
		"""Inverse of project()."""
		pass

	def scale(self, zoom):
		"""Pixels per projected unit at `zoom`."""
		return 2 ** zoom


class SphericalMercatorProjection(ProjectionAdapter):
	"""Web Mercator (EPSG:3857) on 256px tiles."""

	def __init__(self, tile_size=TILE_SIZE):
		self.tile_size = tile_size
		self._k = 0.5 / (math.pi * EARTH_RADIUS)

	def scale(self, zoom):
		return self.tile_size * 2 ** zoom

	def project(self, latlng, zoom):
		lat = max(min(MAX_LATITUDE, latlng.lat), -MAX_LATITUDE)
		sin = math.sin(math.radians(lat))
		x = EARTH_RADIUS * math.radians(latlng.lng)
		y = EARTH_RADIUS * math.log((1 + sin) / (1 - sin)) / 2
		s = self.scale(zoom)
		return Vec2(s * (self._k * x + 0.5), s * (-self._k * y + 0.5))

	def unproject(self, point, zoom):
		s = self.scale(zoom)
		x = (point.x / s - 0.5) / self._k
		y = (point.y / s - 0.5) / -self._k
		lat = math.degrees(2 * math.atan(math.exp(y / EARTH_RADIUS)) - math.pi / 2)
		lng = math.degrees(x / EARTH_RADIUS)
		return LatLng(lat, lng)


class SimpleProjection(ProjectionAdapter):
	"""Flat coordinate system for indoor plans and images.

	x = lng * 2^zoom, y = -lat * 2^zoom (pixel Y grows downward).
	"""

	def project(self, latlng, zoom):
		s = self.scale(zoom)
		return Vec2(latlng.lng * s, -latlng.lat * s)

	def unproject(self, point, zoom):
		s = self.scale(zoom)
		return LatLng(-point.y / s, point.x / s)


class MapView:
	"""Minimal host map surface: view zoom, pixel origin and panning state.

	Fires 'viewreset' on the `events` emitter when zoom or origin change.
	"""

	def __init__(self, projection=None, zoom=0, max_zoom=None, pixel_origin=None):
		self.projection = projection or SphericalMercatorProjection()
		self.zoom = zoom
		self.max_zoom = max_zoom
		self.pixel_origin = pixel_origin or Vec2(0.0, 0.0)
		self.panning_enabled = True
		self.events = EventEmitter()

	def get_max_zoom(self, fallback=DEFAULT_MAX_ZOOM):
		return self.max_zoom if self.max_zoom is not None else fallback

	def project(self, latlng, zoom=None):
		return self.projection.project(latlng, self.zoom if zoom is None else zoom)

	def unproject(self, point, zoom=None):
		return self.projection.unproject(point, self.zoom if zoom is None else zoom)

	def latlng_to_layer_point(self, latlng):
		return self.project(latlng) - self.pixel_origin

	def layer_point_to_latlng(self, point):
		return self.unproject(point + self.pixel_origin)

	def panning_enable(self):
		self.panning_enabled = True

	def panning_disable(self):
		self.panning_enabled = False

	def pan_by(self, dx, dy):
		"""Pan by a pixel offset if panning is enabled.

		Returns:
			bool: True if the view moved
		"""
		if not self.panning_enabled:
			logger.debug("Pan ignored while panning is disabled")
			return False
		self.pixel_origin = Vec2(self.pixel_origin.x + dx, self.pixel_origin.y + dy)
		self.events.fire('viewreset', map=self)
		return True

	def set_view(self, zoom, pixel_origin=None):
		self.zoom = zoom
		if pixel_origin is not None:
			self.pixel_origin = pixel_origin
		self.events.fire('viewreset', map=self)
