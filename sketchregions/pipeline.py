"""
End-to-end region finding: arrangement, cycles and materialization.
"""

import logging
from typing import Dict, List, Optional, Tuple

from .arrangement import build_arrangement
from .constants import GRAPH_POINT_TOLERANCE, METHOD_DFS, METHOD_FACES, REGION_METHODS
from .cycles import extract_faces, find_cycles
from .kernel import SolidKernel, build_faces
from .regions import Region, materialize, materialize_faces
from .sketch import Sketch

logger = logging.getLogger(__name__)


def find_regions(
    sketch: Sketch,
    method: str = METHOD_DFS,
    single_root: bool = False,
    tolerance: float = GRAPH_POINT_TOLERANCE,
) -> List[Region]:
    """
    Find the closed regions of a sketch.

    Args:
        sketch: Sketch snapshot; must not be modified during the call
        method: ``"dfs"`` for the DFS cycle search, ``"faces"`` for the planar
            face traversal (with holes)
        single_root: Restrict the DFS to the component of node 1
        tolerance: Distance under which points are merged

    Returns:
        The materialized regions
    """
    if method not in REGION_METHODS:
        raise ValueError(f"Unknown region method '{method}'. Expected one of {REGION_METHODS}")

    shapes = build_arrangement(sketch, tolerance)
    logger.debug(f"Sketch {sketch.id}: arrangement has {len(shapes)} shapes")

    if method == METHOD_FACES:
        regions = materialize_faces(sketch, extract_faces(shapes, tolerance))
    else:
        regions = materialize(sketch, find_cycles(shapes, single_root, tolerance))

    logger.info(f"Sketch {sketch.id}: found {len(regions)} regions")
    return regions


def find_regions_with_faces(
    sketch: Sketch,
    kernel: SolidKernel,
    method: str = METHOD_DFS,
    max_workers: Optional[int] = 1,
) -> Tuple[List[Region], Dict[int, Exception]]:
    """Find the regions of a sketch and build their kernel faces."""
    regions = find_regions(sketch, method=method)
    return build_faces(regions, sketch.plane, kernel, max_workers=max_workers)
