"""
Arrangement builder.

Turns the lines, circles and arcs of a sketch into a list of flattened 2D
shapes that only touch at shared endpoints: all pairwise intersections are
computed and every shape crossed by another one is split at the crossing
points.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .cad_types import Vertex
from .constants import GRAPH_POINT_TOLERANCE
from .exceptions import GeometryError
from .intersections import intersect
from .primitives import Arc, Circle, Segment, Shape2D
from .sketch import Sketch

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class FlattenShape:
    """A 2D shape of the arrangement.

    ``id`` is the sketch entity id for shapes that were not split, and a fresh
    synthetic id for the pieces of a split shape. ``source_id`` always holds
    the id of the sketch entity the shape comes from.
    """

    id: int
    shape: Shape2D
    source_id: Optional[int] = None

    def __post_init__(self):
        if self.source_id is None:
            self.source_id = self.id

    def __repr__(self):
        return f"FlattenShape(id={self.id}, shape={self.shape!r})"


@dataclass
class IntersectionRecord:
    shape_id: int
    other_shape_id: int
    points: List[Vertex] = field(default_factory=list)


def _near(a: Vertex, b: Vertex, tolerance: float) -> bool:
    return abs(a.x - b.x) < tolerance and abs(a.y - b.y) < tolerance


def _endpoints(shape: Shape2D) -> List[Vertex]:
    if isinstance(shape, (Segment, Arc)):
        return [shape.start, shape.end]
    return []


def _same_piece(a: Shape2D, b: Shape2D, tolerance: float) -> bool:
    """True if two shapes trace the same path, in either direction."""
    if type(a) is not type(b):
        return False
    if isinstance(a, (Arc, Circle)):
        if abs(a.radius - b.radius) >= tolerance:
            return False
        if not _near(a.center, b.center, tolerance):
            return False
        if isinstance(a, Circle):
            return True
        if not _near(a.middle(), b.middle(), tolerance):
            return False
    same = _near(a.start, b.start, tolerance) and _near(a.end, b.end, tolerance)
    flipped = _near(a.start, b.end, tolerance) and _near(a.end, b.start, tolerance)
    return same or flipped


def flatten_sketch(sketch: Sketch) -> List[FlattenShape]:
    """
    Convert the lines, circles and arcs of a sketch into 2D shapes.

    Entities referencing missing points or with degenerate geometry are
    logged and skipped.
    """
    shapes: List[FlattenShape] = []

    for line in sketch.lines.values():
        try:
            segment = Segment(
                sketch.point_2d(line.p1_id), sketch.point_2d(line.p2_id)
            )
        except KeyError as e:
            logger.warning(f"Line {line.id} references missing point {e}, skipped")
            continue
        except GeometryError as e:
            logger.warning(f"Line {line.id} skipped: {e}")
            continue
        shapes.append(FlattenShape(line.id, segment))

    for circle in sketch.circles.values():
        try:
            shape = Circle(sketch.point_2d(circle.mid_pt_id), circle.radius)
        except KeyError as e:
            logger.warning(f"Circle {circle.id} references missing point {e}, skipped")
            continue
        except GeometryError as e:
            logger.warning(f"Circle {circle.id} skipped: {e}")
            continue
        shapes.append(FlattenShape(circle.id, shape))

    for arc in sketch.arcs.values():
        try:
            center = sketch.point_2d(arc.mid_pt_id)
            start = sketch.point_2d(arc.start_pt_id)
            end = sketch.point_2d(arc.end_pt_id)
            shape = Arc(
                center,
                center.distance_to(start),
                start.angle_from(center),
                end.angle_from(center),
                counter_clockwise=not arc.clockwise,
            )
        except KeyError as e:
            logger.warning(f"Arc {arc.id} references missing point {e}, skipped")
            continue
        except GeometryError as e:
            logger.warning(f"Arc {arc.id} skipped: {e}")
            continue
        shapes.append(FlattenShape(arc.id, shape))

    return shapes


class ArrangementBuilder:
    """
    Computes the planar arrangement of a list of shapes.

    After :meth:`build`, ``intersections`` maps every shape id to the
    intersection records collected for it and ``affected`` holds the ids of
    the shapes that were split. Shapes and split pieces tracing a path that is
    already in the result are dropped; ``duplicates`` maps every dropped
    whole shape to the shape it duplicates.

    Args:
        shapes: Flattened input shapes with distinct ids
        next_id: First synthetic id handed to split pieces
        tolerance: Distance under which points are considered the same
    """

    def __init__(
        self,
        shapes: List[FlattenShape],
        next_id: int,
        tolerance: float = GRAPH_POINT_TOLERANCE,
    ):
        self.shapes = shapes
        self.next_id = next_id
        self.tolerance = tolerance
        self.intersections: Dict[int, List[IntersectionRecord]] = {}
        self.affected: Set[int] = set()
        self.duplicates: Dict[int, int] = {}

    def _allocate_id(self) -> int:
        shape_id = self.next_id
        self.next_id += 1
        return shape_id

    def _split_points(self, shape: Shape2D, points: List[Vertex]) -> List[Vertex]:
        own = _endpoints(shape)
        return [p for p in points if not any(_near(p, e, self.tolerance) for e in own)]

    def compute_intersections(self):
        ordered = sorted(self.shapes, key=lambda s: s.id)
        for i, a in enumerate(ordered):
            for b in ordered[i + 1 :]:
                points = intersect(a.shape, b.shape)
                if not points:
                    continue
                for this, other in ((a, b), (b, a)):
                    kept = self._split_points(this.shape, points)
                    if not kept:
                        continue
                    self.intersections.setdefault(this.id, []).append(
                        IntersectionRecord(this.id, other.id, kept)
                    )
                    self.affected.add(this.id)
        logger.debug(
            f"{len(self.affected)} of {len(self.shapes)} shapes are crossed by other shapes"
        )

    def _collect_points(self, shape_id: int) -> List[Vertex]:
        unique: List[Vertex] = []
        for record in self.intersections.get(shape_id, []):
            for p in record.points:
                if not any(_near(p, q, self.tolerance) for q in unique):
                    unique.append(p)
        return unique

    def split_shape(self, flat: FlattenShape) -> List[FlattenShape]:
        """Split one affected shape at all its recorded points, in order."""
        shape = flat.shape
        points = shape.sort_points(self._collect_points(flat.id))

        if isinstance(shape, Circle):
            # a circle has no start point, open it at the first crossing
            shape = shape.to_arc(points[0].angle_from(shape.center))
            points = points[1:]

        pieces: List[Shape2D] = []
        current = shape
        for point in points:
            halves = current.split(point)
            if halves is None:
                logger.warning(
                    f"Shape {flat.id} could not be split at {point}, point skipped"
                )
                continue
            pieces.append(halves[0])
            current = halves[1]
        pieces.append(current)

        return [
            FlattenShape(self._allocate_id(), piece, source_id=flat.source_id)
            for piece in pieces
        ]

    def _find_same(
        self, shape: Shape2D, candidates: List[FlattenShape]
    ) -> Optional[FlattenShape]:
        for other in candidates:
            if _same_piece(shape, other.shape, self.tolerance):
                return other
        return None

    def build(self) -> List[FlattenShape]:
        self.intersections = {}
        self.affected = set()
        self.duplicates = {}
        self.compute_intersections()

        # overlapping shapes yield the same path more than once, keep the first
        kept: List[FlattenShape] = []
        for flat in self.shapes:
            if flat.id in self.affected:
                continue
            same = self._find_same(flat.shape, kept)
            if same is None:
                kept.append(flat)
                continue
            logger.warning(f"Shape {flat.id} duplicates shape {same.id}, dropped")
            self.duplicates[flat.id] = same.id

        result: List[FlattenShape] = []
        for flat in self.shapes:
            if flat.id in self.duplicates:
                continue
            if flat.id not in self.affected:
                result.append(flat)
                continue
            for piece in self.split_shape(flat):
                same = self._find_same(piece.shape, kept)
                if same is not None:
                    logger.warning(
                        f"Piece of shape {flat.id} overlaps shape {same.id}, dropped"
                    )
                    continue
                kept.append(piece)
                result.append(piece)
        return result


def build_arrangement(
    sketch: Sketch, tolerance: float = GRAPH_POINT_TOLERANCE
) -> List[FlattenShape]:
    """Flatten a sketch and split its shapes at all mutual intersections."""
    shapes = flatten_sketch(sketch)
    builder = ArrangementBuilder(shapes, sketch.entity_id_counter, tolerance)
    return builder.build()
