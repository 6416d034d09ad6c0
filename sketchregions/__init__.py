"""
sketchregions - closed regions of parametric 2D sketches.

This package computes the planar arrangement of the lines, circles and arcs
of a sketch, extracts its closed regions and hands them to a solid-modelling
kernel as planar faces.
"""

__version__ = "0.1.0"

from .arrangement import FlattenShape, build_arrangement
from .cad_types import Vector, Vertex
from .constants import GeometryType
from .cycles import Cycle, extract_cycles, extract_faces
from .exceptions import GeometryError, KernelError, SketchRegionsError
from .kernel import SolidKernel, build_faces, build_region_face
from .pipeline import find_regions, find_regions_with_faces
from .primitives import Arc, Circle, Segment
from .regions import Region, is_stale, materialize, materialize_faces
from .shapes3d import Arc3D, Circle3D, Line3D, create_arc
from .sketch import Sketch
from .workplane import SketchPlane

__all__ = [
    # Sketch model
    "Sketch",
    "SketchPlane",
    "GeometryType",
    # Geometry types
    "Vector",
    "Vertex",
    "Segment",
    "Circle",
    "Arc",
    "Line3D",
    "Arc3D",
    "Circle3D",
    "create_arc",
    # Algorithms
    "FlattenShape",
    "build_arrangement",
    "Cycle",
    "extract_cycles",
    "extract_faces",
    "Region",
    "materialize",
    "materialize_faces",
    "is_stale",
    "find_regions",
    "find_regions_with_faces",
    # Solid kernel
    "SolidKernel",
    "build_region_face",
    "build_faces",
    # Errors
    "SketchRegionsError",
    "GeometryError",
    "KernelError",
]
