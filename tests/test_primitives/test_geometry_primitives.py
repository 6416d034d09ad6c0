"""
Unit tests for 2D segments, circles and arcs.
"""

import math

import pytest

from sketchregions.cad_types import Vertex
from sketchregions.exceptions import GeometryError
from sketchregions.primitives import Arc, Circle, Segment


def angle_close(a: float, b: float, tol: float = 1e-6) -> bool:
    diff = abs(a - b) % (2 * math.pi)
    return min(diff, 2 * math.pi - diff) < tol


class TestSegment:
    """Test cases for line segments."""

    def test_zero_length_raises(self):
        with pytest.raises(GeometryError) as exc_info:
            Segment((1, 1), (1, 1))
        assert exc_info.value.operation == "Segment"

    def test_length_and_middle(self):
        s = Segment((0, 0), (3, 4))
        assert s.length == pytest.approx(5.0)
        assert s.middle() == Vertex(1.5, 2.0)

    def test_split_interior_point(self):
        s = Segment((0, 0), (4, 0))
        first, second = s.split((1, 0))
        assert first.start == Vertex(0, 0)
        assert first.end == Vertex(1, 0)
        assert second.start == Vertex(1, 0)
        assert second.end == Vertex(4, 0)

    def test_split_at_endpoint_returns_none(self):
        s = Segment((0, 0), (4, 0))
        assert s.split((0, 0)) is None
        assert s.split((4, 0)) is None

    def test_split_off_segment_returns_none(self):
        s = Segment((0, 0), (4, 0))
        assert s.split((2, 1)) is None
        assert s.split((5, 0)) is None

    def test_sort_points(self):
        s = Segment((4, 0), (0, 0))
        ordered = s.sort_points([(1, 0), (3, 0), (2, 0)])
        assert [p.x for p in ordered] == [3.0, 2.0, 1.0]

    def test_reverse(self):
        r = Segment((0, 0), (1, 2)).reverse()
        assert r.start == Vertex(1, 2)
        assert r.end == Vertex(0, 0)

    def test_square_area_contributions(self):
        square = [
            Segment((0, 0), (2, 0)),
            Segment((2, 0), (2, 2)),
            Segment((2, 2), (0, 2)),
            Segment((0, 2), (0, 0)),
        ]
        assert sum(s.area_contribution() for s in square) == pytest.approx(4.0)


class TestCircle:
    """Test cases for circles."""

    @pytest.mark.parametrize("radius", [0, -1.5])
    def test_non_positive_radius_raises(self, radius):
        with pytest.raises(GeometryError):
            Circle((0, 0), radius)

    def test_contains(self):
        c = Circle((1, 1), 2)
        assert c.contains((3, 1))
        assert not c.contains((1, 1))

    def test_to_arc_is_full_turn(self):
        arc = Circle((0, 0), 1).to_arc(math.pi / 2)
        assert arc.is_full
        assert arc.start == Vertex(0, 1)
        assert arc.end == Vertex(0, 1)

    def test_area(self):
        assert Circle((5, 5), 2).area_contribution() == pytest.approx(4 * math.pi)


class TestArc:
    """Test cases for arcs."""

    def test_from_three_points_counter_clockwise(self):
        arc = Arc.from_three_points((1, 0), (0, 1), (-1, 0))
        assert arc.center == Vertex(0, 0)
        assert arc.radius == pytest.approx(1.0)
        assert arc.counter_clockwise
        assert angle_close(arc.start_angle, 0.0)
        assert angle_close(arc.end_angle, math.pi)

    def test_from_three_points_clockwise(self):
        arc = Arc.from_three_points((-1, 0), (0, 1), (1, 0))
        assert not arc.counter_clockwise
        assert arc.sweep == pytest.approx(math.pi)
        assert arc.middle() == Vertex(0, 1)

    def test_from_three_points_off_origin(self):
        arc = Arc.from_three_points((3, 2), (2, 3), (1, 2))
        assert arc.center == Vertex(2, 2)
        assert arc.radius == pytest.approx(1.0)

    def test_collinear_points_raise(self):
        with pytest.raises(GeometryError) as exc_info:
            Arc.from_three_points((0, 0), (1, 1), (2, 2))
        assert exc_info.value.operation == "Arc.from_three_points"

    def test_coincident_points_raise(self):
        with pytest.raises(GeometryError):
            Arc.from_three_points((0, 0), (0, 0), (1, 1))

    def test_angles_are_normalized(self):
        arc = Arc((0, 0), 1, -math.pi / 2, 5 * math.pi)
        assert arc.start_angle == pytest.approx(3 * math.pi / 2)
        assert arc.end_angle == pytest.approx(math.pi)

    def test_equal_angles_mean_full_turn(self):
        arc = Arc((0, 0), 2, 1.0, 1.0)
        assert arc.is_full
        assert arc.sweep == pytest.approx(2 * math.pi)

    def test_clockwise_sweep_and_middle(self):
        arc = Arc((0, 0), 1, math.pi / 2, 0.0, counter_clockwise=False)
        assert arc.sweep == pytest.approx(math.pi / 2)
        assert arc.signed_sweep == pytest.approx(-math.pi / 2)
        assert arc.middle() == Vertex(math.sqrt(0.5), math.sqrt(0.5))

    def test_split_quarter_arc(self):
        arc = Arc((0, 0), 1, 0.0, math.pi / 2)
        first, second = arc.split((math.sqrt(0.5), math.sqrt(0.5)))
        assert first.start_angle == pytest.approx(0.0)
        assert first.end_angle == pytest.approx(math.pi / 4)
        assert second.start_angle == pytest.approx(math.pi / 4)
        assert second.end_angle == pytest.approx(math.pi / 2)
        assert first.counter_clockwise and second.counter_clockwise

    def test_split_full_arc(self):
        arc = Circle((0, 0), 1).to_arc(0.0)
        first, second = arc.split((-1, 0))
        assert first.sweep == pytest.approx(math.pi)
        assert second.sweep == pytest.approx(math.pi)
        assert second.end == Vertex(1, 0)

    def test_split_outside_range_returns_none(self):
        arc = Arc((0, 0), 1, 0.0, math.pi / 2)
        assert arc.split((-1, 0)) is None
        assert arc.split((1, 0)) is None
        assert arc.split((0.5, 0.5)) is None

    def test_sort_points_follows_direction(self):
        arc = Arc((0, 0), 1, math.pi, 0.0, counter_clockwise=False)
        points = [(math.sqrt(0.5), math.sqrt(0.5)), (0, 1), (-math.sqrt(0.5), math.sqrt(0.5))]
        ordered = arc.sort_points(points)
        assert [round(p.x, 3) for p in ordered] == [-0.707, 0.0, 0.707]

    def test_reverse(self):
        arc = Arc((0, 0), 1, 0.0, math.pi / 2)
        r = arc.reverse()
        assert not r.counter_clockwise
        assert r.start == arc.end
        assert r.end == arc.start
        assert r.middle() == arc.middle()

    def test_contains(self):
        arc = Arc((0, 0), 1, 0.0, math.pi)
        assert arc.contains((0, 1))
        assert not arc.contains((0, -1))
        assert arc.contains((1, 0))

    def test_half_disc_area(self):
        arc = Arc((0, 0), 1, 0.0, math.pi)
        diameter = Segment((-1, 0), (1, 0))
        area = arc.area_contribution() + diameter.area_contribution()
        assert area == pytest.approx(math.pi / 2)

    def test_clockwise_arc_area_is_negative(self):
        arc = Arc((0, 0), 1, math.pi, 0.0, counter_clockwise=False)
        diameter = Segment((1, 0), (-1, 0))
        area = arc.area_contribution() + diameter.area_contribution()
        assert area == pytest.approx(-math.pi / 2)
