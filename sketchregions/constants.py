import math
from enum import IntEnum


class GeometryType(IntEnum):
    POINT = 0
    LINE = 1
    CIRCLE = 2
    ARC = 3


def geometry_type_to_string(geometry_type) -> str:
    try:
        return GeometryType(geometry_type).name.capitalize()
    except ValueError:
        return f"Unknown Type({geometry_type})"


# Names of the supported working planes
PLANE_XY = "xy"
PLANE_XZ = "xz"
PLANE_YZ = "yz"
SKETCH_PLANES = [PLANE_XY, PLANE_XZ, PLANE_YZ]

# Coordinate equality for points and floats
EPSILON = 1e-6

# Points closer than this collapse into one graph node (3 decimal places)
GRAPH_POINT_TOLERANCE = 1e-3

ANGLE_TOLERANCE = 1e-9

TWO_PI = 2 * math.pi

# Region extraction strategies understood by the pipeline
METHOD_DFS = "dfs"
METHOD_FACES = "faces"
REGION_METHODS = [METHOD_DFS, METHOD_FACES]

# Solver-style constraint types used by the sketch model
SLVS_C_PT_PT_DISTANCE = 100000
SLVS_C_HORIZONTAL = 100021
SLVS_C_VERTICAL = 100022
SLVS_C_PARALLEL = 100024
SLVS_C_PERPENDICULAR = 100025
SLVS_C_ANGLE = 100030
CONSTRAINT_TYPES = [
    SLVS_C_PT_PT_DISTANCE,
    SLVS_C_HORIZONTAL,
    SLVS_C_VERTICAL,
    SLVS_C_PARALLEL,
    SLVS_C_PERPENDICULAR,
    SLVS_C_ANGLE,
]
