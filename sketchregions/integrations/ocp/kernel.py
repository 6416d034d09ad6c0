"""
OcpKernel - OpenCASCADE (OCP) implementation of the solid-kernel contract.
"""

from typing import Any, Sequence

from sketchregions.cad_types import Vector
from sketchregions.exceptions import KernelError
from sketchregions.kernel import SolidKernel


def _pnt(point: Vector):
    from OCP.gp import gp_Pnt

    return gp_Pnt(*point.to_list())


class OcpKernel(SolidKernel):
    """
    Builds OCP edges, wires and planar faces from region boundaries.

    OCP is imported lazily so the package can be used without it.
    """

    def make_line_edge(self, start: Vector, end: Vector):
        from OCP.BRepBuilderAPI import BRepBuilderAPI_MakeEdge

        builder = BRepBuilderAPI_MakeEdge(_pnt(start), _pnt(end))
        if not builder.IsDone():
            raise KernelError(
                f"Line edge construction failed from {start.to_list()} to {end.to_list()}"
            )
        return builder.Edge()

    def make_arc_edge(self, start: Vector, middle: Vector, end: Vector):
        from OCP.BRepBuilderAPI import BRepBuilderAPI_MakeEdge
        from OCP.GC import GC_MakeArcOfCircle

        arc = GC_MakeArcOfCircle(_pnt(start), _pnt(middle), _pnt(end))
        if not arc.IsDone():
            raise KernelError(
                f"Arc construction failed through {start.to_list()}, "
                f"{middle.to_list()}, {end.to_list()}.\n"
                f"This usually means the three points are collinear or coincide."
            )
        return BRepBuilderAPI_MakeEdge(arc.Value()).Edge()

    def make_circle_edge(self, radius: float, center: Vector, direction: Vector):
        from OCP.BRepBuilderAPI import BRepBuilderAPI_MakeEdge
        from OCP.gp import gp_Ax2, gp_Circ, gp_Dir

        if radius <= 0:
            raise KernelError(f"Circle edge needs a positive radius, got {radius}")
        normal = gp_Dir(float(direction[0]), float(direction[1]), float(direction[2]))
        circle_gp = gp_Circ(gp_Ax2(_pnt(center), normal), float(radius))
        return BRepBuilderAPI_MakeEdge(circle_gp).Edge()

    def combine_edges_into_wire(self, edges: Sequence[Any]):
        from OCP.BRepBuilderAPI import BRepBuilderAPI_MakeWire, BRepBuilderAPI_WireError
        from OCP.TopTools import TopTools_ListOfShape

        if not edges:
            raise KernelError("Cannot create wire: no edges given")

        occ_edges_list = TopTools_ListOfShape()
        for edge in edges:
            occ_edges_list.Append(edge)

        wire_builder = BRepBuilderAPI_MakeWire()
        wire_builder.Add(occ_edges_list)
        wire_builder.Build()

        if not wire_builder.IsDone():
            error_code = wire_builder.Error()
            error_messages = {
                BRepBuilderAPI_WireError.BRepBuilderAPI_EmptyWire: "Empty wire - no edges provided",
                BRepBuilderAPI_WireError.BRepBuilderAPI_DisconnectedWire: "Disconnected wire - edges don't connect to form a continuous path",
                BRepBuilderAPI_WireError.BRepBuilderAPI_NonManifoldWire: "Non-manifold wire - more than two edges meet at a vertex",
            }
            error_msg = error_messages.get(error_code, f"Unknown error code: {error_code}")
            raise KernelError(
                f"Wire construction failed with {len(edges)} edge(s): {error_msg}"
            )

        return wire_builder.Wire()

    def create_face_from_wire(self, wire: Any, planar: bool = True):
        from OCP.BRepBuilderAPI import BRepBuilderAPI_MakeFace

        face_builder = BRepBuilderAPI_MakeFace(wire, planar)
        if not face_builder.IsDone():
            raise KernelError(
                f"Face construction failed: BRepBuilderAPI_MakeFace returned error "
                f"{face_builder.Error()}.\n"
                f"This usually means:\n"
                f"  1. The wire is not closed\n"
                f"  2. The edges are self-intersecting\n"
                f"  3. The edges don't form a planar loop"
            )
        return face_builder.Face()

    def create_face_from_wires(
        self, outer_wire: Any, inner_wires: Sequence[Any], planar: bool = True
    ):
        from OCP.BRepBuilderAPI import BRepBuilderAPI_MakeFace
        from OCP.TopoDS import TopoDS

        face_builder = BRepBuilderAPI_MakeFace(outer_wire, planar)
        if not face_builder.IsDone():
            raise KernelError(
                f"Face construction failed for the outer wire: error {face_builder.Error()}"
            )
        for inner_wire in inner_wires:
            # holes run against the outer boundary
            face_builder.Add(TopoDS.Wire_s(inner_wire.Reversed()))
        return face_builder.Face()

    def face_area(self, face: Any) -> float:
        from OCP.BRepGProp import BRepGProp
        from OCP.GProp import GProp_GProps

        props = GProp_GProps()
        BRepGProp.SurfaceProperties_s(face, props)
        return props.Mass()
