"""
Tests for the TransformController gesture state machine.

Covers:
- Enable/disable lifecycle, detached shapes and unsupported geometry
- Scale gesture: uniform and non-uniform ratios, origin corner, guards
- Rotate gesture: pointer-following angle around the rectangle center
- Event order and payloads
- Panning suspension during gestures
- Programmatic rotate/scale/transform
- Host body drag and view resets
- Inverse transforms and commits at the natural zoom matching the preview
"""
import math

import pytest

from components.transform_widgets.drag_context import GestureState, PointerEvent
from components.transform_controller import TransformController
from constants import MIN_SCALE_RATIO
from models.geometry import PointGeometry, RingGeometry
from models.options import TransformOptions
from models.shape import Shape
from models.transform import LatLng, Vec2

from conftest import square_ring, pixel_ring


class Blob:
    """Geometry kind the engine does not know"""

    def coords(self):
        return [LatLng(0, 0)]


def assert_ring(actual, expected, tol=1e-6):
    assert len(actual) == len(expected)
    for (ax, ay), (ex, ey) in zip(actual, expected):
        assert ax == pytest.approx(ex, abs=tol)
        assert ay == pytest.approx(ey, abs=tol)


def drag(controller, start, *moves):
    """Pointer down at start, move through moves, pointer up at the last one"""
    assert controller.dispatch(PointerEvent('down', Vec2(*start)))
    for move in moves:
        controller.dispatch(PointerEvent('move', Vec2(*move)))
    controller.dispatch(PointerEvent('up', Vec2(*moves[-1])))


# ══════════════════════════════════════════════════════════════════════════
# Lifecycle
# ══════════════════════════════════════════════════════════════════════════

class TestLifecycle:

    def test_shape_without_transform_has_no_controller(self, map_view):
        assert Shape(RingGeometry([square_ring()]), map_view).transform is None

    def test_transform_options_dict_is_merged(self, map_view):
        shape = Shape(RingGeometry([square_ring()]), map_view, transform={'edges_count': 2})
        assert shape.transform.options.edges_count == 2
        assert shape.transform.options.rotation is True

    def test_enable_builds_handles(self, controller):
        assert controller.enabled
        assert controller.gesture is GestureState.IDLE
        assert len(controller.handles.handles) == 8

    def test_enable_twice_is_harmless(self, controller):
        handles = controller.handles
        controller.enable()
        assert controller.handles is handles

    def test_enable_detached_is_noop(self):
        shape = Shape(RingGeometry([square_ring()]), None, transform=True)
        shape.transform.enable()
        assert not shape.transform.enabled
        assert shape.transform.handles is None

    def test_enable_unsupported_geometry_is_noop(self, map_view):
        shape = Shape(Blob(), map_view, transform=True)
        shape.transform.enable()
        assert not shape.transform.enabled

    def test_disable_removes_handles(self, controller):
        controller.disable()
        assert not controller.enabled
        assert controller.handles is None
        assert controller.tracker is None

    def test_disable_when_disabled_is_noop(self, square):
        square.transform.disable()
        assert not square.transform.enabled

    def test_enable_with_options_merges(self, controller):
        controller.disable()
        controller.enable({'edges_count': 2})
        assert len(controller.handles.scale_handles) == 2

    def test_set_options_rebuilds_handles(self, controller):
        controller.set_options({'rotation': False})
        assert controller.enabled
        assert controller.handles.rotation_handles == []
        assert len(controller.handles.scale_handles) == 4

    def test_set_options_accepts_instance(self, controller):
        controller.set_options(TransformOptions(scaling=False))
        assert controller.handles.scale_handles == []

    def test_removing_shape_disables(self, square, controller):
        square.remove()
        assert not controller.enabled
        assert square.map is None

    def test_reset_is_idempotent(self, controller):
        first = list(controller.reset().tracker.rect.corners)
        second = list(controller.reset().tracker.rect.corners)
        assert first == second


# ══════════════════════════════════════════════════════════════════════════
# Scale gesture
# ══════════════════════════════════════════════════════════════════════════

class TestScaleGesture:

    def test_drag_corner_doubles_about_opposite_corner(self, square, controller, map_view):
        drag(controller, (0, 0), (-100, -100))
        assert_ring(pixel_ring(square, map_view), [(-100, -100), (100, -100), (100, 100), (-100, 100)])

    def test_scale_event_order(self, square, controller, recorder):
        recorder.listen(square, 'transformstart', 'scalestart', 'transform', 'scale',
                        'transformed', 'scaleend', 'rotatestart')
        drag(controller, (0, 0), (-100, -100))
        assert recorder.types == ['transformstart', 'scalestart', 'transform', 'scale',
                                  'transformed', 'scaleend']

    def test_transformed_payload(self, square, controller, recorder):
        recorder.listen(square, 'transformed')
        drag(controller, (0, 0), (-100, -100))
        event = recorder.last('transformed')
        assert event['shape'] is square
        assert event['rotation'] == 0
        assert event['scale'].x == pytest.approx(2)
        assert event['scale'].y == pytest.approx(2)
        assert event['matrix'].transform_point(Vec2(100, 100)).x == pytest.approx(100)

    def test_uniform_scaling_uses_distance(self, square, controller, recorder):
        recorder.listen(square, 'scale')
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        # Moving along x only still scales both axes
        controller.dispatch(PointerEvent('move', Vec2(-100, 100)))
        scale = recorder.last('scale')['scale']
        assert scale.x == pytest.approx(scale.y)
        assert scale.x == pytest.approx(math.hypot(200, 0) / math.hypot(100, 100))

    def test_non_uniform_scaling(self, map_view):
        shape = Shape(RingGeometry([square_ring()]), map_view, transform={'uniform_scaling': False})
        controller = shape.transform.enable()
        drag(controller, (0, 0), (-100, 50))
        assert_ring(pixel_ring(shape, map_view), [(-100, 50), (100, 50), (100, 100), (-100, 100)])

    def test_origin_handle_stays_put_during_preview(self, controller):
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        controller.dispatch(PointerEvent('move', Vec2(-50, -50)))
        assert tuple(controller.handles.scale_handle(2).point) == (100, 100)
        assert controller.handles.scale_handle(0).point.x == pytest.approx(-50)

    def test_preview_does_not_write_geometry(self, square, controller):
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        controller.dispatch(PointerEvent('move', Vec2(-100, -100)))
        assert square.geometry.rings[0][0] == LatLng(0, 0)
        assert square.preview_matrix is not None
        assert square.layer_rings()[0][0] == pytest.approx((-100, -100))

    def test_rotation_handles_hidden_while_scaling(self, controller):
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        assert not any(h.marker.visible for h in controller.handles.rotation_handles)
        controller.dispatch(PointerEvent('up', Vec2(0, 0)))
        assert all(h.marker.visible for h in controller.handles.rotation_handles)

    def test_zero_height_shape_scales_without_nan(self, map_view):
        line = [LatLng(0, 0), LatLng(0, 100)]
        shape = Shape(RingGeometry([line], closed=False), map_view, transform={'uniform_scaling': False})
        controller = shape.transform.enable()
        drag(controller, (0, 0), (-100, 30))
        assert_ring(pixel_ring(shape, map_view), [(-100, 0), (100, 0)])

    def test_collapse_is_clamped(self, square, controller, map_view):
        drag(controller, (0, 0), (100, 100))
        ring = pixel_ring(square, map_view)
        assert all(math.isfinite(v) for point in ring for v in point)
        assert ring[0][0] == pytest.approx(100 - 100 * MIN_SCALE_RATIO)

    def test_circle_moves_center_and_keeps_radius(self, circle, map_view):
        controller = circle.transform.enable()
        drag(controller, (40, 40), (20, 20))
        assert tuple(map_view.latlng_to_layer_point(circle.geometry.latlng)) == pytest.approx((40, 40))
        assert circle.geometry.radius == 10


class TestScaleRatio:

    def test_zero_initial_distance(self):
        assert TransformController._ratio(5, 0) == 1.0

    def test_non_finite(self):
        assert TransformController._ratio(float('nan'), 10) == 1.0
        assert TransformController._ratio(float('inf'), 10) == 1.0

    def test_small_ratio_clamped_with_sign(self):
        assert TransformController._ratio(0, 100) == MIN_SCALE_RATIO
        assert TransformController._ratio(-0.01, 100) == -MIN_SCALE_RATIO

    def test_regular_ratio(self):
        assert TransformController._ratio(-50, 100) == -0.5


# ══════════════════════════════════════════════════════════════════════════
# Rotate gesture
# ══════════════════════════════════════════════════════════════════════════

class TestRotateGesture:

    def test_quarter_turn_swaps_width_and_height(self, wide, map_view):
        controller = wide.transform.enable()
        # Rotation handle 0 sits above the top edge midpoint (100, 0)
        drag(controller, (100, -40), (190, 50))
        assert_ring(pixel_ring(wide, map_view), [(150, -50), (150, 150), (50, 150), (50, -50)])

        controller.reset()
        points = controller.tracker.layer_points()
        assert points[1].x - points[0].x == pytest.approx(100)
        assert points[3].y - points[0].y == pytest.approx(200)

    def test_rotate_event_order_and_angle(self, wide, recorder):
        controller = wide.transform.enable()
        recorder.listen(wide, 'transformstart', 'rotatestart', 'transform', 'rotate',
                        'transformed', 'rotateend', 'scalestart')
        drag(controller, (100, -40), (190, 50))
        assert recorder.types == ['transformstart', 'rotatestart', 'transform', 'rotate',
                                  'transformed', 'rotateend']
        assert recorder.last('rotateend')['rotation'] == pytest.approx(math.pi / 2)

    def test_rectangle_rebuilt_axis_aligned_after_rotation(self, wide, map_view):
        controller = wide.transform.enable()
        drag(controller, (100, -40), (190, 50))
        points = [tuple(p) for p in controller.tracker.layer_points()]
        assert_ring(points, [(50, -50), (150, -50), (150, 150), (50, 150)])
        handle = controller.handles.scale_handle(0)
        assert (handle.point.x, handle.point.y) == pytest.approx((50, -50))

    def test_oblique_rotation_leaves_no_orientation(self, wide, map_view):
        controller = wide.transform.enable()
        # 45 degrees clockwise around the center (100, 50)
        end = (100 + 90 * math.cos(math.pi / 4), 50 - 90 * math.sin(math.pi / 4))
        drag(controller, (100, -40), end)
        committed = [tuple(map_view.latlng_to_layer_point(c)) for c in controller.tracker.rect.corners]
        fresh = controller.tracker.compute(wide)
        expected = [tuple(map_view.latlng_to_layer_point(c)) for c in fresh.corners]
        assert_ring(committed, expected)
        # Axis aligned: top edge horizontal, left edge vertical
        assert committed[0][1] == pytest.approx(committed[1][1])
        assert committed[0][0] == pytest.approx(committed[3][0])

    def test_next_gesture_starts_from_fresh_rectangle(self, wide, map_view):
        controller = wide.transform.enable()
        drag(controller, (100, -40), (190, 50))
        # Corner 0 of the rebuilt rectangle is (50, -50); its origin is (150, 150)
        drag(controller, (50, -50), (-50, -250))
        points = pixel_ring(wide, map_view)
        xs = [x for x, _ in points]
        ys = [y for _, y in points]
        assert (min(xs), max(xs)) == pytest.approx((-50, 150))
        assert (min(ys), max(ys)) == pytest.approx((-250, 150))

    def test_pointer_back_to_start_is_identity(self, wide, map_view):
        controller = wide.transform.enable()
        drag(controller, (100, -40), (190, 50), (100, -40))
        assert_ring(pixel_ring(wide, map_view), [(0, 0), (200, 0), (200, 100), (0, 100)])


# ══════════════════════════════════════════════════════════════════════════
# Gesture state machine
# ══════════════════════════════════════════════════════════════════════════

class TestStateMachine:

    def test_gesture_states(self, controller):
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        assert controller.gesture is GestureState.SCALE_DRAGGING
        assert controller.dragging
        controller.dispatch(PointerEvent('up', Vec2(0, 0)))
        assert controller.gesture is GestureState.IDLE
        assert controller.matrix.is_identity()

    def test_pointer_down_on_empty_space(self, controller, map_view):
        assert not controller.dispatch(PointerEvent('down', Vec2(50, 50)))
        assert controller.gesture is GestureState.IDLE
        assert map_view.panning_enabled

    def test_second_pointer_down_is_ignored(self, controller):
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        assert not controller.dispatch(PointerEvent('down', Vec2(100, 100)))
        assert controller.state.active_handle.index == 0

    def test_move_and_up_without_gesture(self, controller):
        assert not controller.dispatch(PointerEvent('move', Vec2(5, 5)))
        assert not controller.dispatch(PointerEvent('up', Vec2(5, 5)))

    def test_unknown_event_type(self, controller):
        assert not controller.dispatch(PointerEvent('wheel', Vec2(0, 0)))

    def test_explicit_target_handle(self, controller):
        handle = controller.handles.rotation_handles[1]
        assert controller.dispatch(PointerEvent('down', Vec2(999, 999), target=handle))
        assert controller.gesture is GestureState.ROTATE_DRAGGING

    def test_panning_suspended_during_gesture(self, controller, map_view):
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        assert not map_view.panning_enabled
        assert not map_view.pan_by(10, 10)
        controller.dispatch(PointerEvent('up', Vec2(0, 0)))
        assert map_view.panning_enabled

    def test_disable_commits_active_gesture(self, square, controller, map_view, recorder):
        recorder.listen(square, 'transformed')
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        controller.dispatch(PointerEvent('move', Vec2(-100, -100)))
        controller.disable()
        assert recorder.last('transformed') is not None
        assert pixel_ring(square, map_view)[0] == pytest.approx((-100, -100))
        assert map_view.panning_enabled

    def test_reset_ignored_mid_gesture(self, controller):
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        rect = controller.tracker.rect
        controller.reset()
        assert controller.tracker.rect is rect

    def test_view_reset_moves_handles(self, controller, map_view):
        map_view.pan_by(10, 0)
        assert controller.handles.scale_handle(0).point.x == pytest.approx(-10)


# ══════════════════════════════════════════════════════════════════════════
# Programmatic transforms
# ══════════════════════════════════════════════════════════════════════════

class TestProgrammatic:

    def test_scale_about_center(self, square, controller, map_view, recorder):
        recorder.listen(square, 'transformed')
        controller.scale(2)
        assert_ring(pixel_ring(square, map_view), [(-50, -50), (150, -50), (150, 150), (-50, 150)])
        assert recorder.last('transformed')['scale'] == Vec2(2, 2)
        assert controller.tracker.rect.corners[0].lat == pytest.approx(50)

    def test_scale_about_origin(self, square, map_view):
        square.transform.scale(Vec2(2, 3), origin=LatLng(0, 0))
        assert_ring(pixel_ring(square, map_view), [(0, 0), (200, 0), (200, 300), (0, 300)])

    def test_rotate_without_enabling(self, wide, map_view):
        wide.transform.rotate(math.pi / 2)
        assert not wide.transform.enabled
        assert_ring(pixel_ring(wide, map_view), [(150, -50), (150, 150), (50, 150), (50, -50)])

    def test_polyline_center(self, polyline, map_view):
        polyline.transform.scale(2)
        # Midpoint by length of the line is its middle vertex
        assert tuple(map_view.latlng_to_layer_point(polyline.geometry.rings[0][1])) == pytest.approx((100, 50))

    def test_detached_is_noop(self, recorder):
        shape = Shape(RingGeometry([square_ring()]), None, transform=True)
        recorder.listen(shape, 'transformed')
        shape.transform.rotate(1.0)
        assert shape.geometry.rings[0] == square_ring()
        assert recorder.events == []

    def test_unsupported_geometry_is_noop(self, map_view, recorder):
        shape = Shape(Blob(), map_view, transform=True)
        recorder.listen(shape, 'transformed')
        shape.transform.scale(2)
        assert recorder.events == []

    def test_ignored_mid_gesture(self, square, controller):
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        controller.scale(3)
        assert square.geometry.rings[0][0] == LatLng(0, 0)

    def test_enabled_rotate_rebuilds_axis_aligned_rectangle(self, wide, map_view):
        controller = wide.transform.enable()
        controller.rotate(math.pi / 4)
        committed = [tuple(map_view.latlng_to_layer_point(c)) for c in controller.tracker.rect.corners]
        fresh = controller.tracker.compute(wide)
        assert_ring(committed, [tuple(map_view.latlng_to_layer_point(c)) for c in fresh.corners])

    def test_shape_without_rings_is_noop(self, map_view, recorder):
        shape = Shape(RingGeometry([]), map_view, transform=True)
        recorder.listen(shape, 'transformed')
        shape.transform.scale(2)
        shape.transform.rotate(0.5)
        assert shape.geometry.rings == []
        assert recorder.events == []

    def test_empty_first_ring_is_skipped_for_center(self, map_view):
        shape = Shape(RingGeometry([[], square_ring()]), map_view, transform=True)
        shape.transform.scale(2)
        assert shape.geometry.rings[0] == []
        assert shape.geometry.rings[1][0].lat == pytest.approx(50)
        assert shape.geometry.rings[1][0].lng == pytest.approx(-50)


# ══════════════════════════════════════════════════════════════════════════
# Host body drag
# ══════════════════════════════════════════════════════════════════════════

class TestBodyDrag:

    def test_drag_translates_shape_and_rectangle(self, square, controller, map_view, recorder):
        recorder.listen(square, 'dragstart', 'dragend', 'transformed')
        assert square.drag_start(Vec2(50, 50))
        assert not controller.handles_visible
        square.drag_move(Vec2(60, 70))
        square.drag_end()

        assert sorted(recorder.types) == ['dragend', 'dragstart', 'transformed']
        assert square.geometry.rings[0][0] == LatLng(-20, 10)
        assert controller.tracker.rect.corners[0] == LatLng(-20, 10)
        assert tuple(controller.handles.scale_handle(0).point) == (10, 20)
        assert controller.handles_visible
        assert recorder.last('transformed')['translate'] == Vec2(10, 20)

    def test_handles_ignore_pointer_while_dragged(self, square, controller):
        square.drag_start(Vec2(50, 50))
        assert not controller.dispatch(PointerEvent('down', Vec2(0, 0)))

    def test_drag_refused_during_gesture(self, square, controller):
        controller.dispatch(PointerEvent('down', Vec2(0, 0)))
        assert not square.drag_start(Vec2(50, 50))

    def test_drag_refused_when_detached(self):
        shape = Shape(RingGeometry([square_ring()]))
        assert not shape.drag_start(Vec2(0, 0))

    def test_drag_of_plain_shape(self, map_view):
        shape = Shape(PointGeometry(LatLng(-50, 50)), map_view)
        shape.drag_start(Vec2(50, 50))
        shape.drag_move(Vec2(55, 50))
        shape.drag_end()
        assert shape.geometry.latlng == LatLng(-50, 55)

    def test_empty_ring_is_not_hit(self, map_view):
        shape = Shape(RingGeometry([[]]), map_view)
        assert not shape.contains_layer_point(Vec2(0, 0))


# ══════════════════════════════════════════════════════════════════════════
# Inverse transforms
# ══════════════════════════════════════════════════════════════════════════

def assert_latlngs(actual, expected, tol=1e-9):
    for ring, original in zip(actual, expected):
        assert len(ring) == len(original)
        for a, e in zip(ring, original):
            assert a.lat == pytest.approx(e.lat, abs=tol)
            assert a.lng == pytest.approx(e.lng, abs=tol)


class TestInverseTransforms:

    @pytest.fixture(params=['square', 'mercator_square'])
    def shape(self, request):
        return request.getfixturevalue(request.param)

    def test_scale_then_inverse_scale(self, shape):
        original = [list(ring) for ring in shape.geometry.rings]
        shape.transform.scale(2)
        assert shape.geometry.rings[0][0] != original[0][0]
        shape.transform.scale(0.5)
        assert_latlngs(shape.geometry.rings, original)

    def test_non_uniform_scale_then_inverse(self, shape):
        original = [list(ring) for ring in shape.geometry.rings]
        shape.transform.scale(Vec2(2, 4))
        shape.transform.scale(Vec2(0.5, 0.25))
        assert_latlngs(shape.geometry.rings, original)

    def test_rotate_then_inverse_rotate(self, shape):
        original = [list(ring) for ring in shape.geometry.rings]
        shape.transform.rotate(0.7)
        assert shape.geometry.rings[0][0] != original[0][0]
        shape.transform.rotate(-0.7)
        assert_latlngs(shape.geometry.rings, original)

    def test_round_trip_while_enabled(self, shape):
        controller = shape.transform.enable()
        original = [list(ring) for ring in shape.geometry.rings]
        controller.rotate(1.2)
        controller.rotate(-1.2)
        assert_latlngs(shape.geometry.rings, original)
        assert_latlngs([controller.tracker.rect.corners], [controller.tracker.compute(shape).corners])


# ══════════════════════════════════════════════════════════════════════════
# Commit at the natural zoom
# ══════════════════════════════════════════════════════════════════════════
#
# The Mercator view shows zoom 4 while geometry is committed at zoom 12:
# whatever the preview shows must be what lands in the coordinates.

class TestCommitMatchesPreview:

    def _gesture(self, shape, start, end):
        controller = shape.transform.enable()
        assert controller.dispatch(PointerEvent('down', start))
        controller.dispatch(PointerEvent('move', end))
        preview = shape.layer_rings()
        controller.dispatch(PointerEvent('up', end))
        return controller, preview

    def test_scale_gesture(self, mercator_square, mercator_view):
        handles = mercator_square.transform.enable().handles
        handle = handles.scale_handle(0).point
        origin = handles.scale_handle(2).point
        end = Vec2(origin.x + 1.5 * (handle.x - origin.x), origin.y + 1.5 * (handle.y - origin.y))

        controller, preview = self._gesture(mercator_square, handle, end)
        assert preview[0] != pixel_ring(mercator_square, mercator_view)
        assert_ring(mercator_square.layer_rings()[0], preview[0])
        assert_ring(mercator_square.layer_rings()[0][0:1], [tuple(end)])

    def test_rotate_gesture(self, mercator_square):
        handle = mercator_square.transform.enable().handles.rotation_handles[0].point
        controller, preview = self._gesture(mercator_square, handle, Vec2(handle.x + 80, handle.y + 30))
        assert_ring(mercator_square.layer_rings()[0], preview[0])

    def test_body_drag(self, mercator_square, mercator_view):
        mercator_square.transform.enable()
        start = mercator_view.latlng_to_layer_point(mercator_square.get_center())
        mercator_square.drag_start(start)
        mercator_square.drag_move(Vec2(start.x + 30, start.y - 20))
        preview = mercator_square.layer_rings()
        mercator_square.drag_end()
        assert_ring(mercator_square.layer_rings()[0], preview[0])

    def test_handles_rebuilt_fresh_after_commit(self, mercator_square, mercator_view):
        handles = mercator_square.transform.enable().handles
        handle = handles.scale_handle(0).point
        controller, _ = self._gesture(mercator_square, handle, Vec2(handle.x - 40, handle.y - 25))
        rect = controller.tracker.rect
        assert_latlngs([rect.corners], [controller.tracker.compute(mercator_square).corners])
        for handle, corner in zip(controller.handles.scale_handles, rect.corners):
            assert handle.initial_point is None
            assert_ring([tuple(handle.point)], [tuple(mercator_view.latlng_to_layer_point(corner))])
