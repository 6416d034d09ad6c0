"""
Sketch model: points, lines, circles and arcs with integer identities.

The sketch mirrors the editable sketch state of a parametric modeller. Entity
ids are allocated from ``entity_id_counter`` and never reused. Points are
stored in world coordinates; the sketch plane maps them to the plane-local
(u, v) coordinates the region algorithms work with.

Every mutation increments ``revision`` so that results computed from an older
snapshot can be recognized as stale.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from .cad_types import Vector, VectorLike, Vertex
from .constants import (
    PLANE_XY,
    PLANE_XZ,
    PLANE_YZ,
    SLVS_C_PT_PT_DISTANCE,
    GeometryType,
    geometry_type_to_string,
)
from .workplane import SketchPlane

logger = logging.getLogger(__name__)


@dataclass
class SketchPoint:
    id: int
    x: float
    y: float
    z: float

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SketchLine:
    id: int
    p1_id: int
    p2_id: int

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SketchCircle:
    id: int
    mid_pt_id: int
    radius: float

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SketchArc:
    id: int
    mid_pt_id: int
    start_pt_id: int
    end_pt_id: int
    clockwise: bool = False

    def to_json(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Constraint:
    """A solver constraint ``{id, t, v}``.

    ``v`` follows the solver layout ``[value, point_a, point_b, entity_a,
    entity_b]``.
    """

    id: int
    t: int
    v: List[Any] = field(default_factory=lambda: [0, 0, 0, 0, 0])

    def to_json(self) -> Dict[str, Any]:
        return {"id": self.id, "t": self.t, "v": list(self.v)}


SketchEntity = Union[SketchPoint, SketchLine, SketchCircle, SketchArc]


class Sketch:
    def __init__(
        self,
        id: int = 1,
        name: str = "Sketch1",
        plane: Optional[SketchPlane] = None,
    ):
        self.id = id
        self.name = name
        self.plane = plane or SketchPlane.xy_plane()
        self.is_visible = True

        self.entity_id_counter = 1
        self.points: Dict[int, SketchPoint] = {}
        self.lines: Dict[int, SketchLine] = {}
        self.circles: Dict[int, SketchCircle] = {}
        self.arcs: Dict[int, SketchArc] = {}

        # start of the polyline being drawn, not persisted
        self.last_point_3d: Optional[SketchPoint] = None

        self.constraint_id_counter = 0
        self.constraints: List[Constraint] = []

        self.revision = 0

    def __repr__(self):
        return (
            f"Sketch(id={self.id}, name='{self.name}', plane={self.plane}, "
            f"points={len(self.points)}, lines={len(self.lines)}, "
            f"circles={len(self.circles)}, arcs={len(self.arcs)})"
        )

    def _touch(self):
        self.revision += 1

    def _next_id(self) -> int:
        entity_id = self.entity_id_counter
        self.entity_id_counter += 1
        return entity_id

    def _new_point(self, position: VectorLike) -> SketchPoint:
        return SketchPoint(
            self._next_id(), float(position[0]), float(position[1]), float(position[2])
        )

    def _store_point(self, point: SketchPoint):
        self.points[point.id] = point

    # ========== Coordinates ==========

    def point_2d(self, point_id: int) -> Vertex:
        """Plane-local (u, v) coordinates of a point."""
        point = self.points[point_id]
        return self.plane._to_2d((point.x, point.y, point.z))

    def to_world(self, u: float, v: float) -> Vector:
        return self.plane._to_3d(u, v)

    # ========== Entity creation ==========

    def add_entity(
        self,
        entity_type: Union[GeometryType, int],
        position: VectorLike,
        radius: Optional[float] = None,
    ) -> Optional[SketchEntity]:
        """
        Add an entity at a world position.

        * ``POINT`` adds a point.
        * ``LINE`` draws polylines: the first call only remembers the position,
          every further call adds a line from the remembered point to the new
          one. Call :meth:`reset_last_point` to start a new polyline.
        * ``CIRCLE`` adds the center point and a circle of ``radius`` (1 when
          omitted).

        Arcs need three points and are added with :meth:`add_arc`.

        Returns:
            The created point, line or circle, or None when nothing was created
        """
        new_point = self._new_point(position)
        created: Optional[SketchEntity] = None

        if entity_type == GeometryType.LINE:
            if self.last_point_3d is not None:
                if self.last_point_3d.id not in self.points:
                    self._store_point(self.last_point_3d)
                self._store_point(new_point)
                created = SketchLine(
                    self._next_id(), self.last_point_3d.id, new_point.id
                )
                self.lines[created.id] = created
            self.last_point_3d = new_point
        elif entity_type == GeometryType.POINT:
            self._store_point(new_point)
            created = new_point
        elif entity_type == GeometryType.CIRCLE:
            self._store_point(new_point)
            created = SketchCircle(self._next_id(), new_point.id, radius or 1)
            self.circles[created.id] = created
        elif entity_type == GeometryType.ARC:
            logger.warning(
                "Arcs need a center, start and end point, use Sketch.add_arc"
            )
        else:
            logger.error(
                f"The given geometry type {geometry_type_to_string(entity_type)} is not supported"
            )

        self._touch()
        return created

    def add_point(self, u: float, v: float) -> SketchPoint:
        """Add a point given in plane-local coordinates."""
        return self.add_entity(GeometryType.POINT, self.to_world(u, v))

    def add_line(self, start: Sequence[float], end: Sequence[float]) -> SketchLine:
        """Add a standalone line between two plane-local points."""
        self.reset_last_point()
        self.add_entity(GeometryType.LINE, self.to_world(*start))
        line = self.add_entity(GeometryType.LINE, self.to_world(*end))
        self.reset_last_point()
        return line

    def add_polyline(self, points: Sequence[Sequence[float]], close: bool = False):
        """Add connected lines through plane-local points."""
        self.reset_last_point()
        lines = []
        first_id = None
        for u, v in points:
            line = self.add_entity(GeometryType.LINE, self.to_world(u, v))
            if first_id is None:
                first_id = self.last_point_3d.id
            if line is not None:
                lines.append(line)
        if close and len(lines) >= 2:
            closing = SketchLine(self._next_id(), self.last_point_3d.id, first_id)
            self.lines[closing.id] = closing
            lines.append(closing)
            self._touch()
        self.reset_last_point()
        return lines

    def add_circle(self, center: Sequence[float], radius: float) -> SketchCircle:
        """Add a circle around a plane-local center."""
        return self.add_entity(GeometryType.CIRCLE, self.to_world(*center), radius)

    def add_arc(
        self,
        center: Sequence[float],
        start: Sequence[float],
        end: Sequence[float],
        clockwise: bool = False,
    ) -> SketchArc:
        """Add an arc from plane-local center, start and end points.

        The radius is taken from the start point; the end point only fixes
        the end angle.
        """
        center_point = self._new_point(self.to_world(*center))
        start_point = self._new_point(self.to_world(*start))
        end_point = self._new_point(self.to_world(*end))
        for point in (center_point, start_point, end_point):
            self._store_point(point)
        arc = SketchArc(
            self._next_id(), center_point.id, start_point.id, end_point.id, clockwise
        )
        self.arcs[arc.id] = arc
        self._touch()
        return arc

    # ========== Entity removal ==========

    def remove_entity(self, entity_id: int, entity_type: Union[GeometryType, int]):
        """
        Remove an entity and everything that depends on it.

        Removing a point also removes circles and arcs centered on it, lines
        and arcs using it as an endpoint, and the constraints referencing any of
        them. Removing a circle or arc removes its center point as well.
        """
        if entity_type == GeometryType.LINE:
            self.lines.pop(entity_id, None)
            self._delete_constraints_for_entities([entity_id])
        elif entity_type == GeometryType.POINT:
            for circle in [c for c in self.circles.values() if c.mid_pt_id == entity_id]:
                self._delete_circle_by_id(circle.id)
            self._delete_point_by_id(entity_id)
        elif entity_type == GeometryType.CIRCLE:
            circle = self.circles.get(entity_id)
            if circle is None:
                logger.error(f"Circle with id {entity_id} could not be found")
                return
            self._delete_point_by_id(circle.mid_pt_id)
            self._delete_circle_by_id(entity_id)
        elif entity_type == GeometryType.ARC:
            arc = self.arcs.get(entity_id)
            if arc is None:
                logger.error(f"Arc with id {entity_id} could not be found")
                return
            self._delete_arc_by_id(entity_id)
            self._delete_point_by_id(arc.mid_pt_id)
        else:
            logger.error(
                f"The given geometry type {geometry_type_to_string(entity_type)} is not supported"
            )
            return
        self._touch()

    def _delete_point_by_id(self, point_id: int):
        self.points.pop(point_id, None)
        self.constraints = [
            c for c in self.constraints if c.v[1] != point_id and c.v[2] != point_id
        ]
        lines_to_delete = [
            line.id
            for line in self.lines.values()
            if line.p1_id == point_id or line.p2_id == point_id
        ]
        for line_id in lines_to_delete:
            del self.lines[line_id]
        arcs_to_delete = [
            arc.id
            for arc in self.arcs.values()
            if point_id in (arc.mid_pt_id, arc.start_pt_id, arc.end_pt_id)
        ]
        for arc_id in arcs_to_delete:
            del self.arcs[arc_id]
        self._delete_constraints_for_entities(lines_to_delete + arcs_to_delete)

    def _delete_circle_by_id(self, circle_id: int):
        self.circles.pop(circle_id, None)
        self._delete_constraints_for_entities([circle_id])

    def _delete_arc_by_id(self, arc_id: int):
        self.arcs.pop(arc_id, None)
        self._delete_constraints_for_entities([arc_id])

    def _delete_constraints_for_entities(self, entity_ids: List[int]):
        if not entity_ids:
            return
        self.constraints = [
            c
            for c in self.constraints
            if c.v[3] not in entity_ids and c.v[4] not in entity_ids
        ]

    # ========== Entity updates ==========

    def _update_point(self, point_id: int, x: float, y: float, z: float):
        if point_id not in self.points:
            logger.error(f"Point with id {point_id} could not be found")
            return
        self.points[point_id] = SketchPoint(point_id, float(x), float(y), float(z))

    def update_point(self, point_id: int, position: VectorLike):
        self._update_point(point_id, position[0], position[1], position[2])
        self._touch()

    def update_line_points(
        self, line_id: int, new_start: VectorLike, new_end: VectorLike
    ):
        line = self.lines.get(line_id)
        if line is None:
            logger.error(f"Line with id {line_id} could not be found")
            return
        self._update_point(line.p1_id, *new_start[:3])
        self._update_point(line.p2_id, *new_end[:3])
        self._touch()

    def update_circle_radius(self, circle_id: int, new_radius: float):
        circle = self.circles.get(circle_id)
        if circle is None:
            logger.error(f"Circle with id {circle_id} could not be found")
            return
        circle.radius = float(new_radius)
        self._touch()

    def reset_last_point(self):
        self.last_point_3d = None

    def update_entities(self, workplane: str, entities: List[Dict[str, Any]]):
        """
        Apply solved entity values.

        Point values ``v`` are plane-local ``(u, v)`` and only overwrite the
        in-plane world coordinates. A circle's radius is ``v[1]``.
        """
        for element in entities:
            entity_type = element.get("t")
            entity_id = element["id"]
            values = element.get("v", [])
            if entity_type == "point":
                point = self.points.get(entity_id)
                if point is None:
                    logger.error(f"Point with id {entity_id} could not be found")
                    continue
                x, y, z = point.x, point.y, point.z
                if workplane == PLANE_XY:
                    x, y = values[0], values[1]
                elif workplane == PLANE_XZ:
                    x, z = values[0], values[1]
                elif workplane == PLANE_YZ:
                    # u runs along z, v along y
                    y, z = values[1], values[0]
                else:
                    logger.error(f"Invalid workplane {workplane} received")
                    continue
                self._update_point(entity_id, x, y, z)
            elif entity_type == "circle":
                circle = self.circles.get(entity_id)
                if circle is None:
                    logger.error(f"Circle with id {entity_id} could not be found")
                    continue
                circle.radius = float(values[1])
            elif entity_type == "arc":
                logger.warning(
                    f"Arc {entity_id} is defined by its points, update the points instead"
                )
            else:
                logger.error(f"Unknown solver entity type {entity_type}")
        self._touch()

    # ========== Constraints ==========

    def add_constraint(self, t: int, v: List[Any]) -> Constraint:
        constraint = Constraint(self.constraint_id_counter, t, list(v))
        self.constraint_id_counter += 1
        self.constraints.append(constraint)
        self._touch()
        return constraint

    def update_constraint(
        self, constraint_id: int, t: Optional[int] = None, v: Optional[List[Any]] = None
    ):
        for constraint in self.constraints:
            if constraint.id == constraint_id:
                if t is not None:
                    constraint.t = t
                if v is not None:
                    constraint.v = list(v)
                self._touch()
                return
        logger.warning(f"Constraint with id {constraint_id} could not be found")

    def delete_constraint(self, constraint_id: int):
        self.constraints = [c for c in self.constraints if c.id != constraint_id]
        self._touch()

    def _length_constraint_for_line(self, line_id: int) -> Optional[Constraint]:
        line = self.lines.get(line_id)
        if line is None:
            return None
        for c in self.constraints:
            if c.t != SLVS_C_PT_PT_DISTANCE:
                continue
            if {c.v[1], c.v[2]} == {line.p1_id, line.p2_id}:
                return c
        return None

    def line_length(self, line_id: int) -> Optional[float]:
        """User-authored length of a line, if one was set."""
        constraint = self._length_constraint_for_line(line_id)
        return None if constraint is None else float(constraint.v[0])

    def set_line_length(self, line_id: int, length: float) -> Constraint:
        line = self.lines[line_id]
        constraint = self._length_constraint_for_line(line_id)
        if constraint is not None:
            constraint.v[0] = float(length)
            self._touch()
            return constraint
        return self.add_constraint(
            SLVS_C_PT_PT_DISTANCE, [float(length), line.p1_id, line.p2_id, 0, 0]
        )

    def delete_length_constraint_for_line(self, line_id: int):
        constraint = self._length_constraint_for_line(line_id)
        if constraint is not None:
            self.delete_constraint(constraint.id)

    # ========== Serialization ==========

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "plane": self.plane.to_json(),
            "isVisible": self.is_visible,
            "entityIdCounter": self.entity_id_counter,
            "points": [p.to_json() for p in self.points.values()],
            "lines": [line.to_json() for line in self.lines.values()],
            "circles": [c.to_json() for c in self.circles.values()],
            "arcs": [a.to_json() for a in self.arcs.values()],
            "constraintIdCounter": self.constraint_id_counter,
            "constraints": [c.to_json() for c in self.constraints],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Sketch":
        """Create a sketch from its snapshot mapping (see :meth:`to_json`)."""
        sketch = Sketch(
            id=data.get("id", 1),
            name=data.get("name", "Sketch1"),
            plane=SketchPlane.from_dict(data.get("plane", PLANE_XY)),
        )
        sketch.is_visible = data.get("isVisible", True)
        for p in data.get("points", []):
            sketch.points[p["id"]] = SketchPoint(
                p["id"], float(p["x"]), float(p["y"]), float(p.get("z", 0.0))
            )
        for line in data.get("lines", []):
            sketch.lines[line["id"]] = SketchLine(
                line["id"], line["p1_id"], line["p2_id"]
            )
        for c in data.get("circles", []):
            sketch.circles[c["id"]] = SketchCircle(
                c["id"], c["mid_pt_id"], float(c["radius"])
            )
        for a in data.get("arcs", []):
            sketch.arcs[a["id"]] = SketchArc(
                a["id"],
                a["mid_pt_id"],
                a["start_pt_id"],
                a["end_pt_id"],
                bool(a.get("clockwise", False)),
            )
        for c in data.get("constraints", []):
            sketch.constraints.append(Constraint(c["id"], c["t"], list(c["v"])))

        max_id = max(
            [0]
            + list(sketch.points)
            + list(sketch.lines)
            + list(sketch.circles)
            + list(sketch.arcs)
        )
        sketch.entity_id_counter = max(data.get("entityIdCounter", 1), max_id + 1)
        sketch.constraint_id_counter = max(
            [data.get("constraintIdCounter", 0)]
            + [c.id + 1 for c in sketch.constraints]
        )
        for line in data.get("lines", []):
            if line.get("length") is not None:
                sketch.set_line_length(line["id"], line["length"])
        sketch.revision = 0
        return sketch

    @staticmethod
    def from_json(json_data: Dict[str, Any]) -> "Sketch":
        return Sketch.from_dict(json_data)
