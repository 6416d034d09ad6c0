"""
Solid-kernel contract and face building.

A :class:`SolidKernel` turns region boundaries into kernel edges, wires and
planar faces. :func:`build_faces` drives one face construction per region on
a thread pool; a failing region does not affect the others.
"""

import concurrent.futures
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .cad_types import Vector
from .exceptions import KernelError
from .regions import Region
from .shapes3d import Arc3D, Circle3D, Line3D, Shape3D
from .workplane import SketchPlane

logger = logging.getLogger(__name__)


class SolidKernel(ABC):
    """Operations a solid-modelling kernel offers for building planar faces."""

    @abstractmethod
    def make_line_edge(self, start: Vector, end: Vector) -> Any: ...

    @abstractmethod
    def make_arc_edge(self, start: Vector, middle: Vector, end: Vector) -> Any:
        """
        Create an arc edge through three points.

        Args:
            start: First point of the arc
            middle: A point on the arc path between start and end (not the center)
            end: Last point of the arc
        """
        ...

    @abstractmethod
    def make_circle_edge(self, radius: float, center: Vector, direction: Vector) -> Any:
        """Create a full circle edge around ``direction`` (the plane normal)."""
        ...

    @abstractmethod
    def combine_edges_into_wire(self, edges: Sequence[Any]) -> Any: ...

    @abstractmethod
    def create_face_from_wire(self, wire: Any, planar: bool = True) -> Any: ...

    @abstractmethod
    def create_face_from_wires(
        self, outer_wire: Any, inner_wires: Sequence[Any], planar: bool = True
    ) -> Any:
        """Create a face bounded by ``outer_wire`` with ``inner_wires`` as holes."""
        ...

    @abstractmethod
    def face_area(self, face: Any) -> float: ...


def make_edge(shape: Shape3D, plane: SketchPlane, kernel: SolidKernel) -> Any:
    """Issue the kernel call creating the edge of one boundary record."""
    if isinstance(shape, Line3D):
        return kernel.make_line_edge(shape.start, shape.end)
    if isinstance(shape, Arc3D):
        return kernel.make_arc_edge(shape.start, shape.arc_midpoint, shape.end)
    if isinstance(shape, Circle3D):
        return kernel.make_circle_edge(shape.radius, shape.center, plane.normal_vector)
    raise KernelError(f"Unsupported boundary shape {type(shape).__name__}")


def _make_wire(boundary: Sequence[Shape3D], plane: SketchPlane, kernel: SolidKernel):
    edges = [make_edge(shape, plane, kernel) for shape in boundary]
    return kernel.combine_edges_into_wire(edges)


def build_region_face(region: Region, plane: SketchPlane, kernel: SolidKernel) -> Any:
    """
    Build the planar face of one region and store it on ``region.face``.

    One edge call is issued per boundary shape, then one wire call and one
    face call. Inner boundaries become hole wires of the face.

    Raises:
        KernelError: If the boundary is empty or the kernel rejects it
    """
    if not region.boundary:
        raise KernelError(f"Region {region.index} has an empty boundary")

    try:
        wire = _make_wire(region.boundary, plane, kernel)
        if region.inner_boundaries:
            inner_wires = [
                _make_wire(boundary, plane, kernel)
                for boundary in region.inner_boundaries
            ]
            face = kernel.create_face_from_wires(wire, inner_wires, planar=True)
        else:
            face = kernel.create_face_from_wire(wire, planar=True)
    except KernelError:
        raise
    except Exception as e:
        raise KernelError(
            f"Face construction failed for region {region.index} with "
            f"{len(region.boundary)} boundary shape(s): {e}"
        ) from e

    region.face = face
    return face


def build_faces(
    regions: Sequence[Region],
    plane: SketchPlane,
    kernel: SolidKernel,
    max_workers: Optional[int] = 1,
) -> Tuple[List[Region], Dict[int, Exception]]:
    """
    Build the faces of all regions concurrently.

    Args:
        regions: Materialized regions of one sketch snapshot
        plane: Plane of the sketch (normal used for circle edges)
        kernel: Solid kernel issuing the edge/wire/face calls
        max_workers: Size of the thread pool

    Returns:
        The regions whose face was built (in input order) and a mapping from
        region index to the error of every region that failed
    """
    errors: Dict[int, Exception] = {}
    if not regions:
        return [], errors

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_region = {
            executor.submit(build_region_face, region, plane, kernel): region
            for region in regions
        }
        for future in concurrent.futures.as_completed(future_to_region):
            region = future_to_region[future]
            try:
                future.result()
            except Exception as e:
                logger.error(f"Building the face of region {region.index} failed: {e}")
                errors[region.index] = e

    built = [region for region in regions if region.index not in errors]
    logger.info(f"Built {len(built)} of {len(regions)} region faces")
    return built, errors
