"""
Shared fixtures for map path transform tests.

Provides a flat map view where layer points equal projected pixels, sample
polygon/polyline/circle shapes and enabled transform controllers.
"""
import sys
import os
import pytest

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

# Widgets are created without a display
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

from models.geometry import PointGeometry, RingGeometry
from models.transform import LatLng


# ── Sample geometry ─────────────────────────────────────────────────────
#
# With SimpleProjection at zoom 0: x = lng, y = -lat

def square_ring():
    """100px square, pixel corners (0,0) (100,0) (100,100) (0,100)"""
    return [LatLng(0, 0), LatLng(0, 100), LatLng(-100, 100), LatLng(-100, 0)]


def wide_ring():
    """200x100px rectangle, pixel corners (0,0) (200,0) (200,100) (0,100)"""
    return [LatLng(0, 0), LatLng(0, 200), LatLng(-100, 200), LatLng(-100, 0)]


def pixel_ring(shape, map_view):
    """First ring of a shape as (x, y) layer point tuples"""
    return [tuple(map_view.latlng_to_layer_point(latlng)) for latlng in shape.geometry.rings[0]]


@pytest.fixture
def map_view():
    """Flat map at zoom 0 whose natural zoom is also 0"""
    from services.projection import MapView, SimpleProjection
    return MapView(SimpleProjection(), zoom=0, max_zoom=0)


@pytest.fixture
def square(map_view):
    """Polygon shape with a transform controller (not yet enabled)"""
    from models.shape import Shape
    return Shape(RingGeometry([square_ring()]), map_view, transform=True)


@pytest.fixture
def wide(map_view):
    from models.shape import Shape
    return Shape(RingGeometry([wide_ring()]), map_view, transform=True)


@pytest.fixture
def polyline(map_view):
    from models.shape import Shape
    ring = [LatLng(0, 0), LatLng(-50, 100), LatLng(0, 200)]
    return Shape(RingGeometry([ring], closed=False), map_view, transform=True)


@pytest.fixture
def circle(map_view):
    from models.shape import Shape
    return Shape(PointGeometry(LatLng(-50, 50), radius=10), map_view, transform=True)


@pytest.fixture
def controller(square):
    """Enabled controller for the square"""
    return square.transform.enable()


@pytest.fixture
def recorder():
    """Collects fired event payloads in order"""
    class Recorder:
        def __init__(self):
            self.events = []

        def listen(self, shape, *names):
            for name in names:
                shape.on(name, self.events.append)
            return self

        @property
        def types(self):
            return [event['type'] for event in self.events]

        def last(self, name):
            for event in reversed(self.events):
                if event['type'] == name:
                    return event
            return None

    return Recorder()


@pytest.fixture
def mercator_view():
    """Web Mercator view at zoom 4 committing at natural zoom 12"""
    from services.projection import MapView, SphericalMercatorProjection
    view = MapView(SphericalMercatorProjection(), zoom=4, max_zoom=12)
    view.pixel_origin = view.project(LatLng(60, -10))
    return view


@pytest.fixture
def mercator_square(mercator_view):
    """Roughly 227 x 161 px polygon on the Mercator view"""
    from models.shape import Shape
    ring = [LatLng(50, 0), LatLng(50, 20), LatLng(40, 20), LatLng(40, 0)]
    return Shape(RingGeometry([ring]), mercator_view, transform=True)
