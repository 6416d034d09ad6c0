from .kernel import OcpKernel

__all__ = ["OcpKernel"]
