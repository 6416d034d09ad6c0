"""
Workplane module - the coordinate system a sketch is drawn on.

A sketch lives on one of the three principal planes (``xy``, ``xz``, ``yz``)
shifted along the plane normal by an offset. The plane maps 2D sketch
coordinates (u, v) to 3D points and back.
"""

from typing import Any, Dict, Union

from .cad_types import Vector, VectorLike, Vertex
from .constants import EPSILON, PLANE_XY, PLANE_XZ, PLANE_YZ, SKETCH_PLANES

_NORMALS = {
    PLANE_XY: (0.0, 0.0, 1.0),
    PLANE_XZ: (0.0, 1.0, 0.0),
    PLANE_YZ: (1.0, 0.0, 0.0),
}

_LOCAL_X = {
    PLANE_XY: (1.0, 0.0, 0.0),
    PLANE_XZ: (1.0, 0.0, 0.0),
    PLANE_YZ: (0.0, 0.0, 1.0),
}

_LOCAL_Y = {
    PLANE_XY: (0.0, 1.0, 0.0),
    PLANE_XZ: (0.0, 0.0, 1.0),
    PLANE_YZ: (0.0, 1.0, 0.0),
}


class SketchPlane:
    """
    A principal working plane with an offset along its normal.

    The (u, v) axes of the plane map to world axes as follows:

    * ``xy``: u -> x, v -> y, offset -> z
    * ``xz``: u -> x, v -> z, offset -> y
    * ``yz``: u -> z, v -> y, offset -> x
    """

    def __init__(self, name: str = PLANE_XY, offset: float = 0.0):
        name = name.lower()
        if name not in SKETCH_PLANES:
            raise ValueError(
                f"Unknown sketch plane '{name}'. Expected one of {SKETCH_PLANES}"
            )
        self.name = name
        self.offset = float(offset)

    def __repr__(self):
        return f"SketchPlane(name='{self.name}', offset={self.offset})"

    def __eq__(self, other):
        if not isinstance(other, SketchPlane):
            return NotImplemented
        return self.name == other.name and self.offset == other.offset

    # ========== Factory methods for standard planes ==========

    @classmethod
    def xy_plane(cls, offset: float = 0.0) -> "SketchPlane":
        return cls(PLANE_XY, offset)

    @classmethod
    def xz_plane(cls, offset: float = 0.0) -> "SketchPlane":
        return cls(PLANE_XZ, offset)

    @classmethod
    def yz_plane(cls, offset: float = 0.0) -> "SketchPlane":
        return cls(PLANE_YZ, offset)

    # ========== Coordinate system properties and methods ==========

    @property
    def normal_vector(self) -> Vector:
        return Vector(*_NORMALS[self.name])

    @property
    def _local_x(self) -> Vector:
        """World direction of the plane's u axis."""
        return Vector(*_LOCAL_X[self.name])

    @property
    def _local_y(self) -> Vector:
        """World direction of the plane's v axis."""
        return Vector(*_LOCAL_Y[self.name])

    def _to_3d(self, u: float, v: float) -> Vector:
        """Map plane-local (u, v) coordinates to a world point."""
        if self.name == PLANE_XY:
            return Vector(u, v, self.offset)
        if self.name == PLANE_XZ:
            return Vector(u, self.offset, v)
        return Vector(self.offset, v, u)

    def _to_2d(self, point: VectorLike) -> Vertex:
        """Project a world point onto the plane, returning (u, v)."""
        x, y, z = float(point[0]), float(point[1]), float(point[2])
        if self.name == PLANE_XY:
            return Vertex(x, y)
        if self.name == PLANE_XZ:
            return Vertex(x, z)
        return Vertex(z, y)

    def distance_to_point(self, point: VectorLike) -> float:
        """Unsigned distance of a world point from the plane."""
        world = point if isinstance(point, Vector) else Vector(*point)
        return abs(world.offset_along(self.normal_vector) - self.offset)

    def contains(self, point: VectorLike, tolerance: float = EPSILON) -> bool:
        return self.distance_to_point(point) <= tolerance

    def translate_plane(self, distance: float) -> "SketchPlane":
        """
        Create a new plane shifted along the normal.

        Args:
            distance: Signed distance added to the current offset

        Returns:
            New SketchPlane with the same orientation
        """
        return SketchPlane(self.name, self.offset + distance)

    @staticmethod
    def from_dict(data: Union[str, Dict[str, Any]]) -> "SketchPlane":
        """Create a plane from a plane name or a ``{plane, offset}`` mapping."""
        if isinstance(data, str):
            return SketchPlane(data)
        return SketchPlane(data.get("plane", PLANE_XY), data.get("offset", 0.0))

    def to_json(self) -> Dict[str, Any]:
        return {
            "plane": self.name,
            "normalVector": self.normal_vector.to_json(),
            "offset": self.offset,
        }

    @staticmethod
    def from_json(json_data: Dict[str, Any]) -> "SketchPlane":
        return SketchPlane.from_dict(json_data)
