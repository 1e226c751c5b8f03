"""
Concave polygon decomposition.

Splits simple polygons into a binary tree of convex pieces by repeatedly
cutting at reflex vertices.
"""

__version__ = "1.0.0"

from .geometry import Vec2, Vertex, LineSegment, BoundingBox
from .config import DecompositionConfig
from .polygon import ConcavePolygon, NodeState

__all__ = [
    "Vec2",
    "Vertex",
    "LineSegment",
    "BoundingBox",
    "DecompositionConfig",
    "ConcavePolygon",
    "NodeState",
]
