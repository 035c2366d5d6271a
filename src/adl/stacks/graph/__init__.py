"""Execution-graph backend."""

from .generator import GraphGenerator

__all__ = ["GraphGenerator"]
