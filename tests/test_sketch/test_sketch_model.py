"""
Test cases for the editable sketch model.
"""

import logging

import pytest

from sketchregions.cad_types import Vertex
from sketchregions.constants import (
    SLVS_C_HORIZONTAL,
    SLVS_C_PT_PT_DISTANCE,
    GeometryType,
)
from sketchregions.sketch import (
    Constraint,
    Sketch,
    SketchArc,
    SketchCircle,
    SketchLine,
    SketchPoint,
)
from sketchregions.workplane import SketchPlane


@pytest.fixture
def point_sketch():
    sketch = Sketch()
    sketch.add_entity(GeometryType.POINT, (1, 2, 0))
    return sketch


@pytest.fixture
def line_sketch():
    sketch = Sketch()
    sketch.add_entity(GeometryType.LINE, (1, 2, 0))
    sketch.add_entity(GeometryType.LINE, (3, 4, 0))
    return sketch


@pytest.fixture
def circle_sketch():
    sketch = Sketch()
    sketch.add_entity(GeometryType.CIRCLE, (4, 4, 0), 5.5)
    return sketch


@pytest.fixture
def arc_sketch():
    sketch = Sketch()
    sketch.add_arc((0, 0), (1, 0), (0, 1))
    return sketch


class TestAddEntity:
    """Test cases for adding entities."""

    def test_add_point(self, point_sketch):
        assert point_sketch.points == {1: SketchPoint(1, 1.0, 2.0, 0.0)}

    def test_add_line(self, line_sketch):
        assert line_sketch.lines == {3: SketchLine(3, 1, 2)}
        assert set(line_sketch.points) == {1, 2}

    def test_first_line_call_only_remembers_point(self):
        sketch = Sketch()
        assert sketch.add_entity(GeometryType.LINE, (1, 2, 0)) is None
        assert sketch.points == {}
        assert sketch.last_point_3d == SketchPoint(1, 1.0, 2.0, 0.0)

    def test_line_chaining(self, line_sketch):
        line_sketch.add_entity(GeometryType.LINE, (5, 6, 0))
        assert line_sketch.lines[5] == SketchLine(5, 2, 4)

    def test_add_circle(self, circle_sketch):
        assert circle_sketch.points[1] == SketchPoint(1, 4.0, 4.0, 0.0)
        assert circle_sketch.circles == {2: SketchCircle(2, 1, 5.5)}

    def test_add_arc(self, arc_sketch):
        assert arc_sketch.arcs == {4: SketchArc(4, 1, 2, 3, False)}
        assert arc_sketch.point_2d(2) == Vertex(1, 0)

    def test_arc_through_add_entity_is_rejected(self, caplog):
        sketch = Sketch()
        with caplog.at_level(logging.WARNING, logger="sketchregions.sketch"):
            assert sketch.add_entity(GeometryType.ARC, (0, 0, 0)) is None
        assert sketch.arcs == {}
        assert "add_arc" in caplog.text

    def test_unknown_type_is_logged(self, caplog):
        sketch = Sketch()
        with caplog.at_level(logging.ERROR, logger="sketchregions.sketch"):
            assert sketch.add_entity(42, (0, 0, 0)) is None
        assert "Unknown Type(42)" in caplog.text

    def test_closed_polyline(self):
        sketch = Sketch()
        lines = sketch.add_polyline([(0, 0), (1, 0), (1, 1), (0, 1)], close=True)
        assert len(lines) == 4
        assert len(sketch.points) == 4
        assert lines[-1].p2_id == lines[0].p1_id
        assert sketch.last_point_3d is None

    def test_add_line_is_standalone(self):
        sketch = Sketch()
        first = sketch.add_line((0, 0), (1, 0))
        second = sketch.add_line((0, 1), (1, 1))
        assert {first.p1_id, first.p2_id}.isdisjoint({second.p1_id, second.p2_id})

    def test_plane_local_coordinates_on_xz(self):
        sketch = Sketch(plane=SketchPlane.xz_plane(3.0))
        point = sketch.add_point(1, 2)
        assert point == SketchPoint(1, 1.0, 3.0, 2.0)
        assert sketch.point_2d(1) == Vertex(1, 2)

    def test_revision_increments(self):
        sketch = Sketch()
        assert sketch.revision == 0
        sketch.add_point(0, 0)
        sketch.add_circle((0, 0), 1)
        assert sketch.revision == 2


class TestRemoveEntity:
    """Test cases for removing entities and their dependents."""

    def test_remove_point(self, point_sketch):
        point_sketch.remove_entity(1, GeometryType.POINT)
        assert point_sketch.points == {}

    def test_remove_line(self, line_sketch):
        line_sketch.remove_entity(3, GeometryType.LINE)
        assert line_sketch.lines == {}

    def test_remove_circle_removes_center(self, circle_sketch):
        circle_sketch.remove_entity(2, GeometryType.CIRCLE)
        assert circle_sketch.circles == {}
        assert circle_sketch.points == {}

    def test_remove_circle_center_removes_circle(self, circle_sketch):
        circle_sketch.remove_entity(1, GeometryType.POINT)
        assert circle_sketch.circles == {}

    def test_remove_line_endpoint_removes_line_and_constraints(self, line_sketch):
        line_sketch.add_constraint(SLVS_C_HORIZONTAL, [0, 0, 0, 3, 0])
        line_sketch.add_constraint(SLVS_C_PT_PT_DISTANCE, [5.0, 1, 2, 0, 0])
        line_sketch.remove_entity(1, GeometryType.POINT)
        assert line_sketch.lines == {}
        assert line_sketch.constraints == []
        assert set(line_sketch.points) == {2}

    def test_remove_arc_removes_center(self, arc_sketch):
        arc_sketch.remove_entity(4, GeometryType.ARC)
        assert arc_sketch.arcs == {}
        assert set(arc_sketch.points) == {2, 3}

    def test_remove_arc_endpoint_removes_arc(self, arc_sketch):
        arc_sketch.remove_entity(3, GeometryType.POINT)
        assert arc_sketch.arcs == {}

    def test_remove_missing_circle_is_logged(self, caplog):
        sketch = Sketch()
        with caplog.at_level(logging.ERROR, logger="sketchregions.sketch"):
            sketch.remove_entity(9, GeometryType.CIRCLE)
        assert "could not be found" in caplog.text


class TestUpdates:
    """Test cases for point, line and radius updates."""

    def test_update_point(self, point_sketch):
        point_sketch.update_point(1, [5.4, 6.2, 0.5])
        assert point_sketch.points[1] == SketchPoint(1, 5.4, 6.2, 0.5)

    def test_update_line_points(self, line_sketch):
        line_sketch.update_line_points(3, [5.4, 6.2, 0.5], [6.3, 5.9, 0.3])
        assert line_sketch.points[1] == SketchPoint(1, 5.4, 6.2, 0.5)
        assert line_sketch.points[2] == SketchPoint(2, 6.3, 5.9, 0.3)

    def test_update_circle_radius(self, circle_sketch):
        circle_sketch.update_circle_radius(2, 15.5)
        assert circle_sketch.circles[2] == SketchCircle(2, 1, 15.5)

    def test_reset_last_point(self):
        sketch = Sketch()
        sketch.last_point_3d = SketchPoint(0, 1, 1, 1)
        sketch.reset_last_point()
        assert sketch.last_point_3d is None

    def test_update_entities_circle(self, circle_sketch):
        circle_sketch.update_entities("xz", [{"id": 2, "t": "circle", "v": [1, 27.5]}])
        assert circle_sketch.circles[2].radius == 27.5

    @pytest.mark.parametrize(
        "workplane, expected",
        [
            ("xy", (22.5, 23.5, 0.0)),
            ("xz", (22.5, 2.0, 23.5)),
            ("yz", (1.0, 23.5, 22.5)),
        ],
    )
    def test_update_entities_point(self, point_sketch, workplane, expected):
        point_sketch.update_entities(
            workplane, [{"id": 1, "t": "point", "v": [22.5, 23.5]}]
        )
        point = point_sketch.points[1]
        assert (point.x, point.y, point.z) == expected


class TestConstraints:
    """Test cases for constraint bookkeeping."""

    def test_add_constraint(self, line_sketch):
        constraint = line_sketch.add_constraint(SLVS_C_HORIZONTAL, [0, 0, 0, 1, 0])
        assert constraint == Constraint(0, SLVS_C_HORIZONTAL, [0, 0, 0, 1, 0])
        assert line_sketch.constraint_id_counter == 1

    def test_update_constraint(self, line_sketch):
        line_sketch.add_constraint(SLVS_C_PT_PT_DISTANCE, [55.5, 1, 2, 0, 0])
        line_sketch.update_constraint(0, v=[25.5, 1, 2, 0, 0])
        assert line_sketch.constraints[0].v == [25.5, 1, 2, 0, 0]

    def test_delete_constraint(self, line_sketch):
        line_sketch.add_constraint(SLVS_C_HORIZONTAL, [0, 0, 0, 1, 0])
        line_sketch.delete_constraint(0)
        assert line_sketch.constraints == []

    def test_delete_length_constraint_for_line(self, line_sketch):
        line_sketch.add_constraint(SLVS_C_PT_PT_DISTANCE, [55.5, 1, 2, 0, 0])
        line_sketch.delete_length_constraint_for_line(3)
        assert line_sketch.constraints == []

    def test_set_line_length(self, line_sketch):
        assert line_sketch.line_length(3) is None
        line_sketch.set_line_length(3, 10)
        line_sketch.set_line_length(3, 12.5)
        assert line_sketch.line_length(3) == 12.5
        assert len(line_sketch.constraints) == 1


class TestSerialization:
    """Test cases for sketch snapshots."""

    def test_round_trip(self, line_sketch):
        line_sketch.add_circle((5, 5), 2)
        line_sketch.add_arc((0, 0), (1, 0), (0, 1), clockwise=True)
        line_sketch.add_constraint(SLVS_C_HORIZONTAL, [0, 0, 0, 3, 0])

        data = line_sketch.to_json()
        restored = Sketch.from_dict(data)

        assert restored.points == line_sketch.points
        assert restored.lines == line_sketch.lines
        assert restored.circles == line_sketch.circles
        assert restored.arcs == line_sketch.arcs
        assert restored.constraints == line_sketch.constraints
        assert restored.entity_id_counter == line_sketch.entity_id_counter
        assert restored.constraint_id_counter == 1
        assert restored.revision == 0

    def test_from_dict_line_length(self):
        data = {
            "id": 7,
            "name": "Profile",
            "plane": "xz",
            "points": [
                {"id": 1, "x": 0, "y": 0, "z": 0},
                {"id": 2, "x": 4, "y": 0, "z": 0},
            ],
            "lines": [{"id": 3, "p1_id": 1, "p2_id": 2, "length": 4}],
        }
        sketch = Sketch.from_dict(data)
        assert sketch.plane == SketchPlane("xz")
        assert sketch.entity_id_counter == 4
        assert sketch.line_length(3) == 4.0
        assert sketch.constraints[0].t == SLVS_C_PT_PT_DISTANCE
        assert sketch.revision == 0

    def test_to_json_layout(self, circle_sketch):
        data = circle_sketch.to_json()
        assert data["circles"] == [{"id": 2, "mid_pt_id": 1, "radius": 5.5}]
        assert data["plane"]["plane"] == "xy"
        assert data["entityIdCounter"] == 3
