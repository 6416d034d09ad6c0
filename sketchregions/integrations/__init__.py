"""Adapters for external solid-modelling kernels."""
