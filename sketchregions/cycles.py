"""
Cycle extraction from an arrangement.

Two strategies are provided:

* :func:`extract_cycles` builds a point graph (arcs contribute a synthetic
  middle node) and enumerates cycles with a depth-first search. Each back
  edge of the DFS tree yields one cycle.
* :func:`extract_faces` traces the faces of the planar embedding: around
  every node the outgoing half-edges are sorted by angle and each face is
  followed by always turning to the next half-edge clockwise from the one it
  arrived on. Bounded faces come out counter-clockwise; the outer boundary of
  every connected component comes out clockwise and is flagged ``is_outer``.

Standalone circles (and arcs closed on themselves) are not part of any graph
and are returned as single-shape cycles.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .arrangement import FlattenShape
from .cad_types import Vertex, normalize_angle
from .constants import GRAPH_POINT_TOLERANCE
from .point_index import PointIndex
from .primitives import Arc, Circle, Segment

logger = logging.getLogger(__name__)

UNVISITED, IN_PROGRESS, DONE = 0, 1, 2


@dataclass
class Cycle:
    nodes: List[int]
    shapes: List[FlattenShape] = field(default_factory=list)
    is_outer: bool = False

    def __len__(self):
        return len(self.shapes)


def _is_closed(flat: FlattenShape) -> bool:
    shape = flat.shape
    return isinstance(shape, Circle) or (isinstance(shape, Arc) and shape.is_full)


class ArrangementGraph:
    """
    Point-indexed adjacency graph of an arrangement.

    Nodes are 1-based (index 0 is unused). ``adjacency[n]`` lists the
    neighbours of node ``n`` and ``edge_shapes[n][k]`` is the shape realizing
    the edge ``n -> adjacency[n][k]``.
    """

    def __init__(self, tolerance: float = GRAPH_POINT_TOLERANCE):
        self.points = PointIndex(tolerance)
        self.adjacency: List[List[int]] = [[]]
        self.edge_shapes: List[List[FlattenShape]] = [[]]
        self.singletons: List[FlattenShape] = []
        self.edge_count = 0

    @classmethod
    def from_shapes(
        cls, shapes: List[FlattenShape], tolerance: float = GRAPH_POINT_TOLERANCE
    ) -> "ArrangementGraph":
        graph = cls(tolerance)
        for flat in shapes:
            graph.add_shape(flat)
        return graph

    @property
    def node_count(self) -> int:
        return len(self.adjacency) - 1

    def node(self, point: Vertex) -> int:
        node = self.points.find_or_insert(point)
        while len(self.adjacency) <= node:
            self.adjacency.append([])
            self.edge_shapes.append([])
        return node

    def add_edge(self, a: int, b: int, flat: FlattenShape):
        if a == b:
            logger.warning(
                f"Shape {flat.id} collapses onto node {a} and is left out of the graph"
            )
            return
        self.adjacency[a].append(b)
        self.edge_shapes[a].append(flat)
        self.adjacency[b].append(a)
        self.edge_shapes[b].append(flat)
        self.edge_count += 1

    def add_shape(self, flat: FlattenShape):
        shape = flat.shape
        if _is_closed(flat):
            self.singletons.append(flat)
        elif isinstance(shape, Segment):
            self.add_edge(self.node(shape.start), self.node(shape.end), flat)
        elif isinstance(shape, Arc):
            start = self.node(shape.start)
            middle = self.node(shape.middle())
            end = self.node(shape.end)
            self.add_edge(start, middle, flat)
            self.add_edge(middle, end, flat)
        else:
            logger.error(
                f"Shape {flat.id} has unsupported type {type(shape).__name__}, skipped"
            )

    def shape_between(self, a: int, b: int) -> Optional[FlattenShape]:
        try:
            k = self.adjacency[a].index(b)
        except (ValueError, IndexError):
            return None
        return self.edge_shapes[a][k]


def _dfs_cycles(
    adjacency: List[List[int]],
    root: int,
    color: List[int],
    parent: List[int],
    cycles: List[List[int]],
):
    """Iterative DFS from ``root`` recording one node cycle per back edge."""
    parent[root] = 0
    color[root] = IN_PROGRESS
    stack = [(root, iter(adjacency[root]))]
    while stack:
        u, neighbours = stack[-1]
        descended = False
        for v in neighbours:
            if v == parent[u] or color[v] == DONE:
                continue
            if color[v] == IN_PROGRESS:
                # back edge, walk the parents up to v
                cycle = [u]
                current = u
                while current != v:
                    current = parent[current]
                    cycle.append(current)
                cycles.append(cycle)
                continue
            parent[v] = u
            color[v] = IN_PROGRESS
            stack.append((v, iter(adjacency[v])))
            descended = True
            break
        if not descended:
            color[u] = DONE
            stack.pop()


def find_node_cycles(graph: ArrangementGraph, single_root: bool = False) -> List[List[int]]:
    """
    Run the DFS cycle search on ``graph``.

    The search starts at node 1. Unless ``single_root`` is set it is restarted
    from every node that is not finished yet, so disconnected components are
    searched as well.
    """
    cycles: List[List[int]] = []
    if graph.edge_count == 0:
        logger.info("No segment or arc shapes in the graph, cycle search skipped")
        return cycles

    color = [UNVISITED] * len(graph.adjacency)
    parent = [0] * len(graph.adjacency)
    _dfs_cycles(graph.adjacency, 1, color, parent, cycles)
    if not single_root:
        for node in range(2, len(graph.adjacency)):
            if color[node] == UNVISITED:
                _dfs_cycles(graph.adjacency, node, color, parent, cycles)
    logger.debug(f"DFS found {len(cycles)} cycles in {graph.node_count} nodes")
    return cycles


def resolve_shapes(graph: ArrangementGraph, nodes: List[int]) -> List[FlattenShape]:
    """Shapes realizing consecutive node pairs of a cycle, without repeats."""
    shapes: List[FlattenShape] = []
    for i, a in enumerate(nodes):
        b = nodes[(i + 1) % len(nodes)]
        flat = graph.shape_between(a, b)
        if flat is None:
            logger.warning(f"No shape found for edge {a} -> {b} of cycle {nodes}")
            continue
        if not any(flat is s for s in shapes):
            shapes.append(flat)
    return shapes


def find_cycles(
    shapes: List[FlattenShape],
    single_root: bool = False,
    tolerance: float = GRAPH_POINT_TOLERANCE,
) -> List[Cycle]:
    """DFS cycles of the arrangement followed by the standalone closed shapes."""
    graph = ArrangementGraph.from_shapes(shapes, tolerance)
    cycles = [
        Cycle(nodes, resolve_shapes(graph, nodes))
        for nodes in find_node_cycles(graph, single_root)
    ]
    cycles.extend(Cycle([], [flat]) for flat in graph.singletons)
    return cycles


def extract_cycles(
    shapes: List[FlattenShape],
    single_root: bool = False,
    tolerance: float = GRAPH_POINT_TOLERANCE,
) -> List[List[FlattenShape]]:
    """Shape sets of all DFS cycles, then one singleton set per standalone circle."""
    return [cycle.shapes for cycle in find_cycles(shapes, single_root, tolerance)]


# ========== Planar face traversal ==========


@dataclass
class _HalfEdge:
    origin: int
    target: int
    flat: FlattenShape
    forward: bool
    angle: float
    curvature: float


def _departure(flat: FlattenShape, forward: bool) -> Tuple[float, float]:
    """Tangent angle and signed curvature when leaving one end of a shape."""
    shape = flat.shape if forward else flat.shape.reverse()
    if isinstance(shape, Segment):
        direction = shape.direction
        return normalize_angle(math.atan2(direction[1], direction[0])), 0.0
    curvature = 1.0 / shape.radius if shape.counter_clockwise else -1.0 / shape.radius
    return shape.tangent_angle_at_start(), curvature


def _signed_area(half_edges: List[_HalfEdge]) -> float:
    area = 0.0
    for h in half_edges:
        shape = h.flat.shape if h.forward else h.flat.shape.reverse()
        area += shape.area_contribution()
    return area


def extract_faces(
    shapes: List[FlattenShape], tolerance: float = GRAPH_POINT_TOLERANCE
) -> List[Cycle]:
    """
    Trace all faces of the arrangement.

    Returns the bounded faces (counter-clockwise) and the outer boundary of
    every connected component (clockwise, ``is_outer=True``) in discovery
    order, followed by the standalone circles and closed arcs.
    """
    points = PointIndex(tolerance)
    half_edges: List[_HalfEdge] = []
    singletons: List[FlattenShape] = []

    for flat in shapes:
        shape = flat.shape
        if _is_closed(flat):
            singletons.append(flat)
            continue
        if not isinstance(shape, (Segment, Arc)):
            logger.error(
                f"Shape {flat.id} has unsupported type {type(shape).__name__}, skipped"
            )
            continue
        a = points.find_or_insert(shape.start)
        b = points.find_or_insert(shape.end)
        if a == b:
            logger.warning(f"Shape {flat.id} collapses onto node {a}, skipped")
            continue
        angle, curvature = _departure(flat, True)
        half_edges.append(_HalfEdge(a, b, flat, True, angle, curvature))
        angle, curvature = _departure(flat, False)
        half_edges.append(_HalfEdge(b, a, flat, False, angle, curvature))

    # outgoing half-edges around every node, counter-clockwise
    outgoing: Dict[int, List[int]] = {}
    for idx, h in enumerate(half_edges):
        outgoing.setdefault(h.origin, []).append(idx)
    position: Dict[int, int] = {}
    for node, edges in outgoing.items():
        edges.sort(key=lambda i: (half_edges[i].angle, half_edges[i].curvature))
        for k, i in enumerate(edges):
            position[i] = k

    faces: List[Cycle] = []
    visited = [False] * len(half_edges)
    for first in range(len(half_edges)):
        if visited[first]:
            continue
        face: List[int] = []
        current = first
        while not visited[current]:
            visited[current] = True
            face.append(current)
            # the twin of half-edge i is i ^ 1
            twin = current ^ 1
            around = outgoing[half_edges[twin].origin]
            current = around[(position[twin] - 1) % len(around)]

        # edges walked in both directions do not bound the face
        in_face = set(face)
        boundary = [i for i in face if (i ^ 1) not in in_face]
        if not boundary:
            continue
        edges = [half_edges[i] for i in boundary]
        shapes_in_face: List[FlattenShape] = []
        for h in edges:
            if not any(h.flat is s for s in shapes_in_face):
                shapes_in_face.append(h.flat)
        faces.append(
            Cycle(
                nodes=[h.origin for h in edges],
                shapes=shapes_in_face,
                is_outer=_signed_area(edges) < 0,
            )
        )

    logger.debug(
        f"Face traversal found {len(faces)} faces and {len(singletons)} closed shapes"
    )
    faces.extend(Cycle([], [flat]) for flat in singletons)
    return faces
