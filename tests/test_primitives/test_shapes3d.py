"""
Tests for 3D boundary records and arc authoring from center, start and end.
"""

import logging
import math

import numpy as np
import pytest

from sketchregions.cad_types import Vertex
from sketchregions.constants import GeometryType
from sketchregions.primitives import Arc, Circle, Segment
from sketchregions.shapes3d import Arc3D, Circle3D, Line3D, create_arc, shape_to_3d
from sketchregions.workplane import SketchPlane

S = math.sqrt(0.5)


def assert_point(actual, expected, tol=1e-4):
    assert np.allclose(np.asarray(actual, dtype=float), expected, atol=tol), (
        f"{actual} != {expected}"
    )


def angle_close(a, b, tol=1e-6):
    diff = abs(a - b) % (2 * math.pi)
    return min(diff, 2 * math.pi - diff) < tol


@pytest.fixture
def xy():
    return SketchPlane.xy_plane()


class TestShapeTo3D:
    """Test cases for converting plane-local primitives to 3D records."""

    def test_segment(self):
        line = shape_to_3d(Segment((1, 2), (3, 4)), SketchPlane.xz_plane(5.0))
        assert isinstance(line, Line3D)
        assert_point(line.start, (1, 5, 2))
        assert_point(line.end, (3, 5, 4))
        assert line.to_json()["t"] == int(GeometryType.LINE)

    def test_circle(self, xy):
        circle = shape_to_3d(Circle((1, 1), 2), xy)
        assert isinstance(circle, Circle3D)
        assert circle.radius == 2
        assert circle.center_2d == Vertex(1, 1)
        assert set(circle.to_json()) == {"t", "mid_pt", "radius", "midPt2d"}

    def test_full_arc_becomes_circle(self, xy):
        record = shape_to_3d(Circle((0, 0), 1).to_arc(1.0), xy)
        assert isinstance(record, Circle3D)

    def test_arc_fields(self, xy):
        record = shape_to_3d(Arc((0, 0), 2, 0.0, math.pi / 2), xy)
        assert isinstance(record, Arc3D)
        assert_point(record.center, (0, 0, 0))
        assert_point(record.arc_midpoint, (2 * S, 2 * S, 0))
        assert not record.clockwise
        data = record.to_json()
        assert data["t"] == int(GeometryType.ARC)
        assert data["mid_pt"] == {"x": 0.0, "y": 0.0, "z": 0.0}
        assert data["middle"]["x"] == pytest.approx(2 * S)
        assert data["midPt2d"] == {"x": 0.0, "y": 0.0}

    def test_unsupported_type(self, xy):
        with pytest.raises(TypeError):
            shape_to_3d("not a shape", xy)


class TestCreateArc:
    """Test cases for create_arc."""

    def test_quarter_counter_clockwise(self, xy):
        arc = create_arc(xy, (0, 0), (1, 0), (0, 1), math.pi / 2)
        assert not arc.clockwise
        assert arc.radius == pytest.approx(1.0)
        assert_point(arc.start, (1, 0, 0))
        assert_point(arc.end, (0, 1, 0))
        assert_point(arc.arc_midpoint, (S, S, 0))
        assert angle_close(arc.start_angle, 0.0)
        assert angle_close(arc.end_angle, math.pi / 2)

    def test_quarter_reversed_is_clockwise(self, xy):
        arc = create_arc(xy, (0, 0), (0, 1), (1, 0), math.pi / 2)
        assert arc.clockwise
        assert_point(arc.arc_midpoint, (S, S, 0))

    def test_radius_from_start(self, xy):
        arc = create_arc(xy, (0, 0), (0.7, 0.7), (-0.7, 0.7), math.pi / 2)
        radius = math.hypot(0.7, 0.7)
        assert arc.radius == pytest.approx(radius)
        assert_point(arc.arc_midpoint, (0, radius, 0))

    def test_end_is_snapped_onto_circle(self, xy):
        arc = create_arc(xy, (0, 0), (1, 0), (0, 5), math.pi / 2)
        assert_point(arc.end, (0, 1, 0))

    def test_three_quarter_sweep(self, xy):
        arc = create_arc(xy, (0, 0), (S, S), (S, -S), 3 * math.pi / 2)
        assert not arc.clockwise
        assert_point(arc.arc_midpoint, (-1, 0, 0))

    @pytest.mark.parametrize(
        "hint, clockwise, middle_angle",
        [
            (math.radians(190), False, math.radians(232.5)),
            (math.radians(170), True, math.radians(52.5)),
        ],
    )
    def test_hint_selects_closer_sweep(self, xy, hint, clockwise, middle_angle):
        start = (math.cos(math.radians(135)), math.sin(math.radians(135)))
        end = (math.cos(math.radians(330)), math.sin(math.radians(330)))
        arc = create_arc(xy, (0, 0), start, end, hint)
        assert arc.clockwise is clockwise
        assert_point(
            arc.arc_midpoint, (math.cos(middle_angle), math.sin(middle_angle), 0)
        )

    @pytest.mark.parametrize(
        "start_deg, end_deg, hint_deg, clockwise",
        [
            (60, 210, 150, False),
            (210, 60, 150, True),
            (60, 300, 240, False),
            (300, 60, 240, True),
            (120, 300, 180, False),
            (300, 135, 165, True),
        ],
    )
    def test_quadrant_to_quadrant(self, xy, start_deg, end_deg, hint_deg, clockwise):
        start = math.radians(start_deg)
        end = math.radians(end_deg)
        arc = create_arc(
            xy,
            (0, 0),
            (math.cos(start), math.sin(start)),
            (math.cos(end), math.sin(end)),
            math.radians(hint_deg),
        )
        assert arc.clockwise is clockwise
        assert angle_close(arc.start_angle, start)
        assert angle_close(arc.end_angle, end)

    def test_short_clockwise_over_reflex(self, xy):
        start = (math.cos(math.pi / 3), math.sin(math.pi / 3))
        end = (math.cos(5 * math.pi / 3), math.sin(5 * math.pi / 3))
        arc = create_arc(xy, (0, 0), start, end, 2 * math.pi / 3)
        assert arc.clockwise
        assert_point(arc.arc_midpoint, (1, 0, 0))

    def test_offset_center(self, xy):
        arc = create_arc(xy, (2, 3), (3, 3), (2, 4), math.pi / 2)
        assert arc.center_2d == Vertex(2, 3)
        assert_point(arc.center, (2, 3, 0))
        assert_point(arc.arc_midpoint, (2 + S, 3 + S, 0))

    def test_world_coordinates_on_xz(self):
        plane = SketchPlane.xz_plane()
        arc = create_arc(plane, (0, 0, 0), (1, 0, 0), (0, 0, 1), math.pi / 2)
        assert not arc.clockwise
        assert_point(arc.start, (1, 0, 0))
        assert_point(arc.end, (0, 0, 1))
        assert_point(arc.arc_midpoint, (S, 0, S))
        assert arc.center_2d == Vertex(0, 0)

    def test_off_plane_points_are_projected(self, caplog):
        plane = SketchPlane.xy_plane()
        with caplog.at_level(logging.WARNING, logger="sketchregions.shapes3d"):
            arc = create_arc(plane, (0, 0, 0), (1, 0, 0.5), (0, 1, 0), math.pi / 2)
        assert_point(arc.start, (1, 0, 0))
        assert "off the xy plane" in caplog.text
