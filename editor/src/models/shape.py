"""Host-side vector shape: true geometry, map attachment and preview state.

The shape owns its coordinates. A TransformController is only created when
the host asks for one at construction time (`transform=` options); the
controller is then the single writer of the geometry while a gesture runs.
"""
import logging

from models.geometry import PointGeometry, RingGeometry, polygon_center, polyline_center
from models.matrix import Matrix2D
from models.transform import LatLngBounds, Vec2
from utils.events import EventEmitter

logger = logging.getLogger(__name__)


class Shape:
    """Polygon, polyline or circle rendered on a MapView."""

    def __init__(self, geometry, map_view=None, transform=None):
        """
        Args:
            geometry: PointGeometry or RingGeometry
            map_view: MapView the shape is attached to (None = detached)
            transform: None, True, dict or TransformOptions. When given, a
                TransformController is created for this shape.
        """
        self.geometry = geometry
        self.map = map_view
        self.events = EventEmitter()
        self.bounds = LatLngBounds(geometry.coords()) if hasattr(geometry, 'coords') else LatLngBounds()

        # Render-only transform applied to layer points during a gesture
        self.preview_matrix = None

        # Host drag state
        self._drag_start = None
        self._drag_offset = None

        self.transform = None
        if transform is not None and transform is not False:
            from components.transform_controller import TransformController
            options = None if transform is True else transform
            self.transform = TransformController(self, options)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, name, callback):
        self.events.on(name, callback)
        return self

    def off(self, name, callback=None):
        self.events.off(name, callback)
        return self

    def fire(self, name, **payload):
        payload.setdefault('shape', self)
        self.events.fire(name, **payload)
        return self

    # ------------------------------------------------------------------
    # Map attachment
    # ------------------------------------------------------------------

    def add_to(self, map_view):
        self.map = map_view
        return self

    def remove(self):
        if self.transform is not None and self.transform.enabled:
            self.transform.disable()
        self.map = None
        return self

    # ------------------------------------------------------------------
    # Geometry queries
    # ------------------------------------------------------------------

    @property
    def kind(self):
        if isinstance(self.geometry, PointGeometry):
            return 'circle'
        if isinstance(self.geometry, RingGeometry):
            return 'polygon' if self.geometry.closed else 'polyline'
        return type(self.geometry).__name__

    def get_bounds(self):
        if not self.bounds.is_valid():
            self.bounds = LatLngBounds(self.geometry.coords())
        return self.bounds

    def get_center(self):
        """Visual center: circle center, polygon centroid or line midpoint."""
        if isinstance(self.geometry, PointGeometry):
            return self.geometry.latlng
        if self.map is None:
            return self.get_bounds().get_center()
        ring = next((ring for ring in self.geometry.rings if ring), None)
        if ring is None:
            raise ValueError("Cannot compute the center of a shape without coordinates")
        points = [tuple(self.map.latlng_to_layer_point(latlng)) for latlng in ring]
        if self.geometry.closed:
            center = polygon_center(points)
        else:
            center = polyline_center(points)
        return self.map.layer_point_to_latlng(center)

    def layer_rings(self):
        """Rings as layer points with the preview matrix applied.

        A point-like shape yields one single-point ring.
        """
        if self.map is None:
            return []
        coords = [self.geometry.coords()] if isinstance(self.geometry, PointGeometry) else self.geometry.rings
        rings = []
        for ring in coords:
            points = [tuple(self.map.latlng_to_layer_point(latlng)) for latlng in ring]
            if self.preview_matrix is not None and points:
                points = [tuple(p) for p in self.preview_matrix.transform_points(points)]
            rings.append(points)
        return rings

    def contains_layer_point(self, point, tolerance=4):
        """Rough hit test used by the host to start a body drag."""
        rings = self.layer_rings()
        if not rings:
            return False
        if isinstance(self.geometry, PointGeometry):
            cx, cy = rings[0][0]
            projection = self.map.projection
            radius = self.geometry.radius * projection.scale(self.map.zoom) / projection.scale(self.map.get_max_zoom())
            return Vec2(cx, cy).distance_to(point) <= radius + tolerance
        xs = [x for ring in rings for x, _ in ring]
        ys = [y for ring in rings for _, y in ring]
        if not xs:
            return False
        return (min(xs) - tolerance <= point.x <= max(xs) + tolerance
                and min(ys) - tolerance <= point.y <= max(ys) + tolerance)

    # ------------------------------------------------------------------
    # Host drag handler (translation)
    # ------------------------------------------------------------------

    def drag_start(self, point):
        """Start a body drag. Refused while a transform gesture owns the geometry."""
        if self.map is None:
            return False
        if self.transform is not None and self.transform.dragging:
            logger.debug("Body drag refused during a transform gesture")
            return False
        self._drag_start = point.clone()
        self._drag_offset = Vec2(0.0, 0.0)
        self.fire('dragstart')
        return True

    def drag_move(self, point):
        if self._drag_start is None:
            return
        self._drag_offset = point - self._drag_start
        self.preview_matrix = Matrix2D.translation(self._drag_offset.x, self._drag_offset.y)
        self.fire('drag')

    def drag_end(self):
        """Write the drag translation into the geometry and fire 'dragend'.

        The payload matrix is the translation in layer points.
        """
        if self._drag_start is None:
            return
        from services.geometry_mutator import GeometryMutator

        offset = self._drag_offset
        self._drag_start = self._drag_offset = None
        self.preview_matrix = None

        matrix = Matrix2D.translation(offset.x, offset.y)
        if self.transform is not None:
            zoom = self.map.get_max_zoom(self.transform.options.max_zoom)
        else:
            zoom = self.map.get_max_zoom()
        ratio = self.map.projection.scale(zoom) / self.map.projection.scale(self.map.zoom)
        projected = Matrix2D.translation(offset.x * ratio, offset.y * ratio)
        GeometryMutator().apply(self, projected, self.map.projection, zoom)
        logger.debug("Shape dragged by (%.2f, %.2f) layer px", offset.x, offset.y)
        self.fire('dragend', matrix=matrix)
