"""
Typed 3D boundary records handed to a solid kernel.

A region boundary is a list of ``Line3D``, ``Arc3D`` and ``Circle3D`` records
in world coordinates. ``to_json`` converts them to the external record layout
(``t`` type tag, ``mid_pt`` for the center, ``middle`` for the point on the arc
path, ``midPt2d`` for the plane-local center).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Union

from .cad_types import Vector, VectorLike, Vertex, as_vertex, normalize_angle
from .constants import ANGLE_TOLERANCE, TWO_PI, GeometryType
from .primitives import Arc, Circle, Segment, Shape2D
from .workplane import SketchPlane

logger = logging.getLogger(__name__)


@dataclass
class Line3D:
    start: Vector
    end: Vector

    t = GeometryType.LINE

    def to_json(self) -> Dict[str, Any]:
        return {
            "t": int(self.t),
            "start": self.start.to_json(),
            "end": self.end.to_json(),
        }


@dataclass
class Circle3D:
    center: Vector
    radius: float
    center_2d: Vertex

    t = GeometryType.CIRCLE

    def to_json(self) -> Dict[str, Any]:
        return {
            "t": int(self.t),
            "mid_pt": self.center.to_json(),
            "radius": self.radius,
            "midPt2d": self.center_2d.to_json(),
        }


@dataclass
class Arc3D:
    """An arc in world coordinates.

    ``center`` is the circle center, ``arc_midpoint`` the point on the arc
    path halfway through the sweep. Angles are plane-local and normalized to
    [0, 2pi).
    """

    start: Vector
    end: Vector
    center: Vector
    arc_midpoint: Vector
    radius: float
    start_angle: float
    end_angle: float
    clockwise: bool
    center_2d: Vertex

    t = GeometryType.ARC

    def to_json(self) -> Dict[str, Any]:
        return {
            "t": int(self.t),
            "start": self.start.to_json(),
            "end": self.end.to_json(),
            "mid_pt": self.center.to_json(),
            "middle": self.arc_midpoint.to_json(),
            "radius": self.radius,
            "start_angle": self.start_angle,
            "end_angle": self.end_angle,
            "clockwise": self.clockwise,
            "midPt2d": self.center_2d.to_json(),
        }


Shape3D = Union[Line3D, Arc3D, Circle3D]


def shape_to_3d(shape: Shape2D, plane: SketchPlane) -> Shape3D:
    """Convert a plane-local primitive into its 3D boundary record."""
    if isinstance(shape, Segment):
        return Line3D(plane._to_3d(*shape.start), plane._to_3d(*shape.end))
    if isinstance(shape, Arc) and shape.is_full:
        shape = Circle(shape.center, shape.radius)
    if isinstance(shape, Circle):
        return Circle3D(
            plane._to_3d(*shape.center), shape.radius, Vertex(*shape.center)
        )
    if isinstance(shape, Arc):
        return Arc3D(
            start=plane._to_3d(*shape.start),
            end=plane._to_3d(*shape.end),
            center=plane._to_3d(*shape.center),
            arc_midpoint=plane._to_3d(*shape.middle()),
            radius=shape.radius,
            start_angle=shape.start_angle,
            end_angle=shape.end_angle,
            clockwise=not shape.counter_clockwise,
            center_2d=Vertex(*shape.center),
        )
    raise TypeError(f"Unsupported shape type: {type(shape).__name__}")


def _plane_point(plane: SketchPlane, point) -> Vertex:
    if len(point) == 3:
        if not plane.contains(point):
            distance = plane.distance_to_point(point)
            logger.warning(
                f"Point {[float(c) for c in point]} is {distance:.6f} off the "
                f"{plane.name} plane, projected onto it"
            )
        return plane._to_2d(point)
    return as_vertex(point)


def create_arc(
    plane: SketchPlane,
    center: Union[VectorLike, Vertex],
    start: Union[VectorLike, Vertex],
    end: Union[VectorLike, Vertex],
    angle_hint: float,
) -> Arc3D:
    """
    Author an arc from a center, a start point, an end point and a sweep hint.

    The radius is the distance from ``center`` to ``start``; ``end`` is snapped
    onto that circle along its direction from the center. Of the two arcs
    joining start and end, the one whose sweep is closest to ``angle_hint``
    is chosen (counter-clockwise on a tie). Points may be given in plane-local
    (u, v) or world (x, y, z) coordinates.

    Args:
        plane: Sketch plane the arc is drawn on
        center: Arc center
        start: First point of the arc
        end: Last point of the arc (direction only)
        angle_hint: Approximate swept angle in radians

    Returns:
        Arc3D: The arc in world coordinates
    """
    center_2d = _plane_point(plane, center)
    start_2d = _plane_point(plane, start)
    end_2d = _plane_point(plane, end)

    radius = center_2d.distance_to(start_2d)
    end_angle = end_2d.angle_from(center_2d)
    start_angle = start_2d.angle_from(center_2d)
    circle = Circle(center_2d, radius)
    end_2d = circle.point_at_angle(end_angle)

    ccw_sweep = normalize_angle(end_angle - start_angle) or TWO_PI
    cw_sweep = TWO_PI - ccw_sweep if ccw_sweep < TWO_PI else TWO_PI
    counter_clockwise = (
        abs(ccw_sweep - angle_hint) <= abs(cw_sweep - angle_hint) + ANGLE_TOLERANCE
    )
    if counter_clockwise:
        middle = circle.point_at_angle(start_angle + ccw_sweep / 2)
    else:
        middle = circle.point_at_angle(start_angle - cw_sweep / 2)

    arc = Arc.from_three_points(start_2d, middle, end_2d)
    return shape_to_3d(arc, plane)
