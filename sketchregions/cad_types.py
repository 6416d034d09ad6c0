import math
from typing import Sequence, Tuple, Union

import numpy as np

from .constants import EPSILON, TWO_PI


class Vector(np.ndarray):
    """
    A point or direction in world coordinates.

    Region boundaries are handed to the solid kernel as world points, so two
    vectors compare equal when every coordinate agrees within ``EPSILON``.
    """

    def __new__(cls, x: float, y: float, z: float = 0) -> "Vector":
        return np.asarray([float(x), float(y), float(z)]).view(cls)

    def __repr__(self):
        return f"Vector(x={self.x}, y={self.y}, z={self.z})"

    def __eq__(self, other: object) -> bool:
        return np.allclose(self, other, atol=EPSILON)

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self):
        return hash((round(self.x, 6), round(self.y, 6), round(self.z, 6)))

    @property
    def x(self):
        return float(self[0])

    @property
    def y(self):
        return float(self[1])

    @property
    def z(self):
        return float(self[2])

    def distance_to(self, other: "VectorLike") -> float:
        return float(np.linalg.norm(np.asarray(self) - np.asarray(other, dtype=float)))

    def offset_along(self, direction: "VectorLike") -> float:
        """Signed distance of this point from the origin along a unit direction."""
        return float(np.dot(np.asarray(self), np.asarray(direction, dtype=float)))

    def to_list(self):
        """Coordinates as the ``[x, y, z]`` triple used by kernel calls."""
        return [self.x, self.y, self.z]

    def to_json(self):
        return {"x": self.x, "y": self.y, "z": self.z}

    @staticmethod
    def from_json(json_data):
        # points of a 2D snapshot may omit z
        return Vector(json_data["x"], json_data["y"], json_data.get("z", 0.0))


VectorLike = Union[Tuple[float, float], Tuple[float, float, float], Vector]


class Vertex(np.ndarray):
    """A point in 2D plane-local coordinates."""

    def __new__(cls, x: float, y: float) -> "Vertex":
        return np.asarray([float(x), float(y)]).view(cls)

    def __str__(self):
        return f"Vertex(x={self.x}, y={self.y})"

    def __repr__(self):
        return self.__str__()

    @property
    def x(self):
        return float(self[0])

    @property
    def y(self):
        return float(self[1])

    def to_json(self):
        return {
            "x": float(self.x),
            "y": float(self.y),
        }

    @staticmethod
    def from_json(json_data):
        return Vertex(json_data["x"], json_data["y"])

    def __eq__(self, other):
        tolerance = EPSILON
        if not isinstance(other, Vertex):
            return math.isclose(self.x, other[0], abs_tol=tolerance) and math.isclose(
                self.y, other[1], abs_tol=tolerance
            )
        return math.isclose(self.x, other.x, abs_tol=tolerance) and math.isclose(
            self.y, other.y, abs_tol=tolerance
        )

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash((round(self.x, 6), round(self.y, 6)))

    def distance_to(self, other: "VertexLike") -> float:
        return math.hypot(self.x - other[0], self.y - other[1])

    def angle_from(self, center: "VertexLike") -> float:
        """Angle of this point seen from ``center``, normalized to [0, 2pi)."""
        return normalize_angle(math.atan2(self.y - center[1], self.x - center[0]))


VertexLike = Union[Tuple[float, float], Sequence[float], Vertex]


def as_vertex(point: VertexLike) -> Vertex:
    if isinstance(point, Vertex):
        return point
    return Vertex(point[0], point[1])


def normalize_angle(angle: float) -> float:
    """Map an angle in radians to [0, 2pi)."""
    angle = math.fmod(angle, TWO_PI)
    if angle < 0:
        angle += TWO_PI
    # values within rounding error of 2pi map to 0
    if TWO_PI - angle < 1e-12:
        angle = 0.0
    return angle
