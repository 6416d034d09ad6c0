"""
Pairwise intersection of 2D primitives.

All functions return a list of :class:`Vertex` (possibly empty). ``intersect``
dispatches on the primitive types and is commutative up to the order of the
returned points.
"""

import math
from typing import List

from .cad_types import Vertex, VertexLike, as_vertex
from .constants import EPSILON
from .primitives import Arc, Circle, Segment, Shape2D


def _cross(ax: float, ay: float, bx: float, by: float) -> float:
    return ax * by - ay * bx


def _unique(points: List[Vertex]) -> List[Vertex]:
    result: List[Vertex] = []
    for p in points:
        if not any(p == q for q in result):
            result.append(p)
    return result


def intersect_segments(a: Segment, b: Segment) -> List[Vertex]:
    """Intersection of two segments.

    Crossing segments give one point. Collinear overlapping segments give the
    endpoints of either segment that lie on the other one.
    """
    px, py = a.start.x, a.start.y
    rx, ry = a.end.x - px, a.end.y - py
    qx, qy = b.start.x, b.start.y
    sx, sy = b.end.x - qx, b.end.y - qy

    denominator = _cross(rx, ry, sx, sy)
    offset_cross = _cross(qx - px, qy - py, rx, ry)
    scale = a.length * b.length

    if abs(denominator) <= EPSILON * scale:
        # parallel; only collinear overlaps produce points
        if abs(offset_cross) > EPSILON * a.length * max(1.0, a.length):
            return []
        candidates = [p for p in (b.start, b.end) if a.contains(p)]
        candidates += [p for p in (a.start, a.end) if b.contains(p)]
        return _unique(candidates)

    t = _cross(qx - px, qy - py, sx, sy) / denominator
    u = offset_cross / denominator
    tol_t = EPSILON / a.length * max(1.0, a.length)
    tol_u = EPSILON / b.length * max(1.0, b.length)
    if -tol_t <= t <= 1 + tol_t and -tol_u <= u <= 1 + tol_u:
        t = min(max(t, 0.0), 1.0)
        return [Vertex(px + t * rx, py + t * ry)]
    return []


def intersect_line_circle(
    segment: Segment, center: VertexLike, radius: float
) -> List[Vertex]:
    """Points of ``segment`` on the circle of ``radius`` around ``center``."""
    center = as_vertex(center)
    direction = segment.direction
    foot_distance = segment.parameter_of(center)
    foot = segment.point_at(foot_distance)
    h = foot.distance_to(center)
    tolerance = EPSILON * max(1.0, radius)

    if h > radius + tolerance:
        return []
    if abs(h - radius) <= tolerance:
        candidates = [foot]
    else:
        half_chord = math.sqrt(radius * radius - h * h)
        candidates = [
            Vertex(
                foot.x - direction[0] * half_chord, foot.y - direction[1] * half_chord
            ),
            Vertex(
                foot.x + direction[0] * half_chord, foot.y + direction[1] * half_chord
            ),
        ]
    return [p for p in candidates if segment.contains(p)]


def intersect_circles(
    center_a: VertexLike, radius_a: float, center_b: VertexLike, radius_b: float
) -> List[Vertex]:
    """Intersection of two full circles. Concentric circles give no points."""
    center_a = as_vertex(center_a)
    center_b = as_vertex(center_b)
    d = center_a.distance_to(center_b)
    tolerance = EPSILON * max(1.0, radius_a, radius_b)

    if d <= tolerance:
        return []
    if d > radius_a + radius_b + tolerance or d < abs(radius_a - radius_b) - tolerance:
        return []

    ux = (center_b.x - center_a.x) / d
    uy = (center_b.y - center_a.y) / d
    a = (radius_a * radius_a - radius_b * radius_b + d * d) / (2 * d)
    h_squared = radius_a * radius_a - a * a
    base = Vertex(center_a.x + a * ux, center_a.y + a * uy)

    tangent = (
        abs(d - (radius_a + radius_b)) <= tolerance
        or abs(d - abs(radius_a - radius_b)) <= tolerance
        or h_squared <= 0
    )
    if tangent:
        return [base]

    h = math.sqrt(h_squared)
    return [
        Vertex(base.x - h * uy, base.y + h * ux),
        Vertex(base.x + h * uy, base.y - h * ux),
    ]


def _on_arc(points: List[Vertex], arc: Arc) -> List[Vertex]:
    return [p for p in points if arc.contains_angle(p.angle_from(arc.center))]


def intersect(a: Shape2D, b: Shape2D) -> List[Vertex]:
    """Intersection points of two primitives of any supported type."""
    if isinstance(a, Segment) and isinstance(b, Segment):
        return intersect_segments(a, b)

    if isinstance(a, Segment) or isinstance(b, Segment):
        segment, other = (a, b) if isinstance(a, Segment) else (b, a)
        points = intersect_line_circle(segment, other.center, other.radius)
        if isinstance(other, Arc):
            points = _on_arc(points, other)
        return points

    if isinstance(a, (Circle, Arc)) and isinstance(b, (Circle, Arc)):
        points = intersect_circles(a.center, a.radius, b.center, b.radius)
        for shape in (a, b):
            if isinstance(shape, Arc):
                points = _on_arc(points, shape)
        return points

    raise TypeError(
        f"Cannot intersect {type(a).__name__} with {type(b).__name__}"
    )
