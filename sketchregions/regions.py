"""
Region materialization.

A region is a closed boundary found by the cycle extractor, ordered head to
tail, oriented counter-clockwise in the sketch plane and converted to typed
3D records. Faces found by the planar face traversal can additionally carry
inner boundaries (holes).
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
from matplotlib.path import Path

from .arrangement import FlattenShape
from .cad_types import Vertex
from .constants import GRAPH_POINT_TOLERANCE, TWO_PI
from .cycles import Cycle
from .primitives import Arc, Circle, Segment
from .shapes3d import Shape3D, shape_to_3d
from .sketch import Sketch

logger = logging.getLogger(__name__)

# polygon resolution used for containment tests of curved boundaries
ARC_SAMPLES_PER_TURN = 72


@dataclass(eq=False)
class Region:
    """A closed region of a sketch ready to be handed to a solid kernel."""

    boundary: List[Shape3D]
    area: float
    sketch_ref: int
    index: int
    shapes: List[FlattenShape] = field(default_factory=list)
    inner_boundaries: List[List[Shape3D]] = field(default_factory=list)
    inner_shapes: List[List[FlattenShape]] = field(default_factory=list)
    is_counter_clockwise: bool = True
    sketch_revision: int = 0
    face: Optional[Any] = None

    def __repr__(self):
        return (
            f"Region(index={self.index}, shapes={len(self.boundary)}, "
            f"holes={len(self.inner_boundaries)}, area={self.area:.4f})"
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "cycle": [s.to_json() for s in self.boundary],
            "innerCycles": [[s.to_json() for s in b] for b in self.inner_boundaries],
            "area": self.area,
            "sketch": self.sketch_ref,
            "index": self.index,
        }


def is_stale(region: Region, sketch: Sketch) -> bool:
    """True if ``sketch`` was modified after ``region`` was computed from it."""
    return region.sketch_ref != sketch.id or region.sketch_revision != sketch.revision


def _near(a: Vertex, b: Vertex, tolerance: float) -> bool:
    return abs(a.x - b.x) < tolerance and abs(a.y - b.y) < tolerance


def _reversed(flat: FlattenShape) -> FlattenShape:
    return FlattenShape(flat.id, flat.shape.reverse(), source_id=flat.source_id)


def signed_area(shapes: Sequence[FlattenShape]) -> float:
    """Signed area enclosed by head-to-tail ordered shapes (positive if ccw)."""
    return sum(flat.shape.area_contribution() for flat in shapes)


def chain_shapes(
    shapes: Sequence[FlattenShape], tolerance: float = GRAPH_POINT_TOLERANCE
) -> List[FlattenShape]:
    """
    Order shapes so that each one starts where the previous one ends.

    Shapes are reversed where needed. If the shapes do not form one chain the
    ordered part found so far is returned and an error is logged.
    """
    if len(shapes) <= 1:
        return list(shapes)

    for flat in shapes:
        if isinstance(flat.shape, Circle):
            logger.error(
                f"Circle {flat.id} cannot be part of a boundary with {len(shapes)} shapes"
            )
            return list(shapes)

    chain = [shapes[0]]
    used = {0}
    end = shapes[0].shape.end
    while len(used) < len(shapes):
        found = False
        for i in range(1, len(shapes)):
            if i in used:
                continue
            shape = shapes[i].shape
            if _near(shape.start, end, tolerance):
                chain.append(shapes[i])
                end = shape.end
            elif _near(shape.end, end, tolerance):
                chain.append(_reversed(shapes[i]))
                end = shape.start
            else:
                continue
            used.add(i)
            found = True
            break
        if not found:
            logger.error(
                f"Boundary is not connected, {len(shapes) - len(used)} of "
                f"{len(shapes)} shapes could not be chained"
            )
            break
    return chain


def orient_counter_clockwise(shapes: List[FlattenShape]) -> List[FlattenShape]:
    if signed_area(shapes) >= 0:
        return shapes
    return [_reversed(flat) for flat in reversed(shapes)]


def _to_flat_list(cycle: Union[Cycle, Sequence[FlattenShape]]) -> List[FlattenShape]:
    if isinstance(cycle, Cycle):
        return list(cycle.shapes)
    return list(cycle)


def materialize_cycle(
    sketch: Sketch,
    shapes: Sequence[FlattenShape],
    index: int,
    order: bool = True,
) -> Region:
    """Convert one cycle shape set into a :class:`Region`."""
    shapes = list(shapes)
    if order:
        shapes = orient_counter_clockwise(chain_shapes(shapes))
    area = signed_area(shapes)
    return Region(
        boundary=[shape_to_3d(flat.shape, sketch.plane) for flat in shapes],
        area=abs(area),
        sketch_ref=sketch.id,
        index=index,
        shapes=shapes,
        is_counter_clockwise=area >= 0,
        sketch_revision=sketch.revision,
    )


def materialize(
    sketch: Sketch,
    cycles: Sequence[Union[Cycle, Sequence[FlattenShape]]],
    order: bool = True,
) -> List[Region]:
    """
    Materialize every cycle of a sketch.

    Args:
        sketch: The sketch the cycles were extracted from
        cycles: Shape sets (or :class:`Cycle` objects) in discovery order
        order: Chain and orient each boundary counter-clockwise

    Returns:
        One region per cycle, ``index`` being its position in ``cycles``
    """
    return [
        materialize_cycle(sketch, _to_flat_list(cycle), index, order)
        for index, cycle in enumerate(cycles)
    ]


# ========== Faces with holes ==========


def _polygon(shapes: Sequence[FlattenShape]) -> np.ndarray:
    vertices = []
    for flat in shapes:
        shape = flat.shape
        if isinstance(shape, Segment):
            vertices.append((shape.start.x, shape.start.y))
        elif isinstance(shape, (Arc, Circle)):
            if isinstance(shape, Circle):
                shape = shape.to_arc()
            n = max(4, int(math.ceil(shape.sweep / TWO_PI * ARC_SAMPLES_PER_TURN)))
            for k in range(n):
                p = shape.point_at_angle(shape.start_angle + shape.signed_sweep * k / n)
                vertices.append((p.x, p.y))
    return np.asarray(vertices, dtype=float)


def _sample_point(shapes: Sequence[FlattenShape]) -> Vertex:
    shape = shapes[0].shape
    if isinstance(shape, Circle):
        return shape.point_at_angle(0.0)
    return shape.start


def _contains(region: Region, point: Vertex) -> bool:
    vertices = _polygon(region.shapes)
    if len(vertices) < 3:
        return False
    return bool(Path(vertices).contains_point((point.x, point.y)))


class _Components:
    """Union-find over graph node ids."""

    def __init__(self):
        self.parent: Dict[int, int] = {}

    def find(self, node: int) -> int:
        self.parent.setdefault(node, node)
        while self.parent[node] != node:
            self.parent[node] = self.parent[self.parent[node]]
            node = self.parent[node]
        return node

    def union(self, a: int, b: int):
        self.parent[self.find(a)] = self.find(b)


def materialize_faces(sketch: Sketch, faces: Sequence[Cycle]) -> List[Region]:
    """
    Materialize the result of :func:`~sketchregions.cycles.extract_faces`.

    Every face is materialized with its discovery index. Outer boundaries of
    connected components are then removed from the result and attached as an
    inner boundary to the smallest region of another component enclosing
    them; standalone circles enclosed by such a region become inner
    boundaries as well. The indices of the removed outer faces are not
    reused.
    """
    components = _Components()
    for face in faces:
        for a, b in zip(face.nodes, face.nodes[1:]):
            components.union(a, b)

    def component_of(i: int):
        if faces[i].nodes:
            return components.find(faces[i].nodes[0])
        return ("closed", i)

    regions = [
        materialize_cycle(sketch, face.shapes, index)
        for index, face in enumerate(faces)
    ]
    bounded = [i for i, face in enumerate(faces) if not face.is_outer]
    # area inside the outer boundary, unaffected by holes assigned below
    gross_area = [region.area for region in regions]

    for i, face in enumerate(faces):
        is_closed_shape = not face.nodes
        if not (face.is_outer or is_closed_shape):
            continue
        hole = regions[i]
        point = _sample_point(hole.shapes)
        candidates = [
            j
            for j in bounded
            if j != i
            and component_of(j) != component_of(i)
            and gross_area[j] > gross_area[i]
            and _contains(regions[j], point)
        ]
        if not candidates:
            continue
        parent = regions[min(candidates, key=lambda j: gross_area[j])]
        parent.inner_boundaries.append(hole.boundary)
        parent.inner_shapes.append(hole.shapes)
        parent.area -= gross_area[i]
        logger.debug(f"Region {hole.index} is a hole of region {parent.index}")

    return [regions[i] for i in bounded]
