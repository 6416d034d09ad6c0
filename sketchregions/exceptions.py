class SketchRegionsError(ValueError):
    """Base class for errors raised by sketchregions."""


class GeometryError(SketchRegionsError):
    """A geometric construction failed (degenerate input)."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation}: {message}")


class KernelError(SketchRegionsError):
    """The solid-modelling kernel rejected an edge, wire or face."""
