"""
2D geometric primitives of the planar arrangement.

These classes represent 2D geometric entities in the sketch plane's coordinate
system. Segments, circles and arcs can be intersected with each other, split at
points lying on them and sorted along their natural parameter. They are
converted to 3D records (see :mod:`sketchregions.shapes3d`) when a region is
materialized.
"""

import math
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from .cad_types import Vertex, VertexLike, as_vertex, normalize_angle
from .constants import ANGLE_TOLERANCE, EPSILON, TWO_PI
from .exceptions import GeometryError


def _tolerance(scale: float) -> float:
    return EPSILON * max(1.0, abs(scale))


class Segment:
    """A 2D line segment in sketch plane coordinates."""

    def __init__(self, start: VertexLike, end: VertexLike):
        self.start = as_vertex(start)
        self.end = as_vertex(end)
        if self.start == self.end:
            raise GeometryError(
                "Segment", f"start and end point coincide at {self.start}"
            )

    def __repr__(self):
        return f"Segment(start={self.start}, end={self.end})"

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def direction(self) -> np.ndarray:
        """Unit vector pointing from start to end."""
        delta = np.asarray(self.end - self.start, dtype=float)
        return delta / np.linalg.norm(delta)

    def point_at(self, distance: float) -> Vertex:
        """Point at the given arc-length distance from the start."""
        p = np.asarray(self.start, dtype=float) + self.direction * distance
        return Vertex(p[0], p[1])

    def parameter_of(self, point: VertexLike) -> float:
        """Arc-length position of the projection of ``point`` onto the segment."""
        delta = np.asarray(point, dtype=float)[:2] - np.asarray(self.start)
        return float(np.dot(delta, self.direction))

    def distance_to_point(self, point: VertexLike) -> float:
        t = min(max(self.parameter_of(point), 0.0), self.length)
        return self.point_at(t).distance_to(point)

    def contains(self, point: VertexLike) -> bool:
        return self.distance_to_point(point) <= _tolerance(self.length)

    def middle(self) -> Vertex:
        return self.point_at(self.length / 2)

    def reverse(self) -> "Segment":
        return Segment(self.end, self.start)

    def area_contribution(self) -> float:
        """Signed-area term of this segment in a closed boundary (shoelace)."""
        return 0.5 * (self.start.x * self.end.y - self.end.x * self.start.y)

    def split(self, point: VertexLike) -> Optional[Tuple["Segment", "Segment"]]:
        """Split the segment at an interior point.

        Returns None when the point coincides with an endpoint or does not lie
        on the segment.
        """
        point = as_vertex(point)
        if point == self.start or point == self.end or not self.contains(point):
            return None
        return Segment(self.start, point), Segment(point, self.end)

    def sort_points(self, points: Iterable[VertexLike]) -> List[Vertex]:
        return sorted((as_vertex(p) for p in points), key=self.parameter_of)

    def intersect(self, other: "Shape2D") -> List[Vertex]:
        from .intersections import intersect

        return intersect(self, other)


class Circle:
    """A 2D circle in sketch plane coordinates."""

    def __init__(self, center: VertexLike, radius: float):
        self.center = as_vertex(center)
        self.radius = float(radius)
        if not self.radius > 0:
            raise GeometryError("Circle", f"radius must be positive, got {radius}")

    def __repr__(self):
        return f"Circle(center={self.center}, radius={self.radius})"

    def point_at_angle(self, angle: float) -> Vertex:
        return Vertex(
            self.center.x + self.radius * math.cos(angle),
            self.center.y + self.radius * math.sin(angle),
        )

    def contains(self, point: VertexLike) -> bool:
        return abs(self.center.distance_to(point) - self.radius) <= _tolerance(
            self.radius
        )

    def area_contribution(self) -> float:
        return math.pi * self.radius * self.radius

    def to_arc(self, start_angle: float = 0.0) -> "Arc":
        """Full counter-clockwise turn starting (and ending) at ``start_angle``."""
        return Arc(self.center, self.radius, start_angle, start_angle, True)

    def sort_points(self, points: Iterable[VertexLike]) -> List[Vertex]:
        return sorted(
            (as_vertex(p) for p in points), key=lambda p: p.angle_from(self.center)
        )

    def intersect(self, other: "Shape2D") -> List[Vertex]:
        from .intersections import intersect

        return intersect(self, other)


class Arc:
    """A 2D circular arc.

    Angles are measured from the positive u axis of the sketch plane and are
    normalized to [0, 2pi). The arc runs from ``start_angle`` to ``end_angle``
    counter-clockwise, or clockwise when ``counter_clockwise`` is False. Equal
    start and end angles denote a full turn.
    """

    def __init__(
        self,
        center: VertexLike,
        radius: float,
        start_angle: float,
        end_angle: float,
        counter_clockwise: bool = True,
    ):
        self.center = as_vertex(center)
        self.radius = float(radius)
        if not self.radius > 0:
            raise GeometryError("Arc", f"radius must be positive, got {radius}")
        self.start_angle = normalize_angle(start_angle)
        self.end_angle = normalize_angle(end_angle)
        self.counter_clockwise = bool(counter_clockwise)

    def __repr__(self):
        direction = "ccw" if self.counter_clockwise else "cw"
        return (
            f"Arc(center={self.center}, radius={self.radius}, "
            f"start_angle={self.start_angle:.6f}, end_angle={self.end_angle:.6f}, {direction})"
        )

    @classmethod
    def from_three_points(
        cls, start: VertexLike, middle: VertexLike, end: VertexLike
    ) -> "Arc":
        """Build the arc starting at ``start``, passing ``middle`` and ending at ``end``.

        The center is the intersection of the perpendicular bisectors of the
        chords start-middle and middle-end. The arc is counter-clockwise when
        the increasing-angle sweep from start to end passes through the angle
        of ``middle``.

        Raises:
            GeometryError: If the three points are collinear or coincide.
        """
        a = as_vertex(start)
        b = as_vertex(middle)
        c = as_vertex(end)
        bx, by = b.x - a.x, b.y - a.y
        cx, cy = c.x - a.x, c.y - a.y
        d = 2.0 * (bx * cy - by * cx)
        scale = math.hypot(bx, by) * math.hypot(cx, cy)
        if scale == 0 or abs(d) <= 2.0 * EPSILON * scale:
            raise GeometryError(
                "Arc.from_three_points",
                f"points {a}, {b}, {c} are collinear, no circle passes through them",
            )
        b2 = bx * bx + by * by
        c2 = cx * cx + cy * cy
        ux = (cy * b2 - by * c2) / d
        uy = (bx * c2 - cx * b2) / d
        center = Vertex(a.x + ux, a.y + uy)
        radius = center.distance_to(a)

        start_angle = a.angle_from(center)
        end_angle = c.angle_from(center)
        middle_angle = b.angle_from(center)
        counter_clockwise = normalize_angle(
            middle_angle - start_angle
        ) < normalize_angle(end_angle - start_angle)
        return cls(center, radius, start_angle, end_angle, counter_clockwise)

    @property
    def sweep(self) -> float:
        """Unsigned angle swept from start to end in the arc's direction."""
        if self.counter_clockwise:
            sweep = normalize_angle(self.end_angle - self.start_angle)
        else:
            sweep = normalize_angle(self.start_angle - self.end_angle)
        if sweep < ANGLE_TOLERANCE:
            return TWO_PI
        return sweep

    @property
    def signed_sweep(self) -> float:
        return self.sweep if self.counter_clockwise else -self.sweep

    @property
    def is_full(self) -> bool:
        return abs(self.sweep - TWO_PI) < ANGLE_TOLERANCE

    @property
    def start(self) -> Vertex:
        return self.point_at_angle(self.start_angle)

    @property
    def end(self) -> Vertex:
        return self.point_at_angle(self.end_angle)

    def point_at_angle(self, angle: float) -> Vertex:
        return Vertex(
            self.center.x + self.radius * math.cos(angle),
            self.center.y + self.radius * math.sin(angle),
        )

    def offset_of_angle(self, angle: float) -> float:
        """Angle swept from the start until ``angle`` is reached."""
        if self.counter_clockwise:
            return normalize_angle(angle - self.start_angle)
        return normalize_angle(self.start_angle - angle)

    def contains_angle(self, angle: float) -> bool:
        tolerance = _tolerance(self.radius) / self.radius
        offset = self.offset_of_angle(angle)
        return offset <= self.sweep + tolerance or offset >= TWO_PI - tolerance

    def contains(self, point: VertexLike) -> bool:
        point = as_vertex(point)
        if abs(self.center.distance_to(point) - self.radius) > _tolerance(self.radius):
            return False
        return self.contains_angle(point.angle_from(self.center))

    def middle(self) -> Vertex:
        """Point on the arc path halfway through the sweep."""
        return self.point_at_angle(self.start_angle + self.signed_sweep / 2)

    def tangent_angle_at_start(self) -> float:
        """Direction of travel when leaving the start point."""
        turn = math.pi / 2 if self.counter_clockwise else -math.pi / 2
        return normalize_angle(self.start_angle + turn)

    def area_contribution(self) -> float:
        """Signed-area term of this arc in a closed boundary.

        Green's theorem, 1/2 * integral of (x dy - y dx) along the arc.
        """
        a = self.start_angle
        s = self.signed_sweep
        cx, cy, r = self.center.x, self.center.y, self.radius
        return 0.5 * (
            cx * r * (math.sin(a + s) - math.sin(a))
            - cy * r * (math.cos(a + s) - math.cos(a))
            + r * r * s
        )

    def reverse(self) -> "Arc":
        return Arc(
            self.center,
            self.radius,
            self.end_angle,
            self.start_angle,
            not self.counter_clockwise,
        )

    def split(self, point: VertexLike) -> Optional[Tuple["Arc", "Arc"]]:
        """Split the arc at an interior point (in angle space).

        Returns None when the point coincides with an endpoint or does not lie
        on the arc.
        """
        point = as_vertex(point)
        if point == self.start or point == self.end or not self.contains(point):
            return None
        angle = point.angle_from(self.center)
        return (
            Arc(self.center, self.radius, self.start_angle, angle, self.counter_clockwise),
            Arc(self.center, self.radius, angle, self.end_angle, self.counter_clockwise),
        )

    def sort_points(self, points: Iterable[VertexLike]) -> List[Vertex]:
        return sorted(
            (as_vertex(p) for p in points),
            key=lambda p: self.offset_of_angle(p.angle_from(self.center)),
        )

    def intersect(self, other: "Shape2D") -> List[Vertex]:
        from .intersections import intersect

        return intersect(self, other)


Shape2D = Union[Segment, Circle, Arc]
