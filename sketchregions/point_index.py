"""
Tolerance-based deduplication of 2D points into integer node ids.
"""

import math
from typing import Dict, List, Optional, Tuple

from .cad_types import Vertex, VertexLike, as_vertex
from .constants import GRAPH_POINT_TOLERANCE


class PointIndex:
    """
    Assigns 1-based integer ids to points, merging points closer than
    ``tolerance`` (per coordinate) into the first one inserted.

    Points are bucketed into a uniform grid with cell size ``tolerance`` so a
    lookup only inspects the 3x3 block of cells around the query point.
    """

    def __init__(self, tolerance: float = GRAPH_POINT_TOLERANCE):
        if tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")
        self.tolerance = tolerance
        self._points: List[Vertex] = []
        self._cells: Dict[Tuple[int, int], List[int]] = {}

    def __len__(self):
        return len(self._points)

    def _cell(self, point: Vertex) -> Tuple[int, int]:
        return (
            int(math.floor(point.x / self.tolerance)),
            int(math.floor(point.y / self.tolerance)),
        )

    def find(self, point: VertexLike) -> Optional[int]:
        """Id of a stored point within tolerance of ``point``, or None."""
        point = as_vertex(point)
        cx, cy = self._cell(point)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for node in self._cells.get((cx + dx, cy + dy), ()):
                    stored = self._points[node - 1]
                    if (
                        abs(stored.x - point.x) < self.tolerance
                        and abs(stored.y - point.y) < self.tolerance
                    ):
                        return node
        return None

    def find_or_insert(self, point: VertexLike) -> int:
        point = as_vertex(point)
        node = self.find(point)
        if node is not None:
            return node
        self._points.append(point)
        node = len(self._points)
        self._cells.setdefault(self._cell(point), []).append(node)
        return node

    def get(self, node: int) -> Vertex:
        """Representative point of node id ``node`` (1-based)."""
        if node < 1 or node > len(self._points):
            raise KeyError(f"Unknown point node {node}")
        return self._points[node - 1]

    @property
    def points(self) -> List[Vertex]:
        return list(self._points)
