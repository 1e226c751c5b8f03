"""
Geometry primitives for polygon decomposition.

Provides the 2D vector, vertex and line segment types used throughout the
decomposition engine, plus ring-level helpers for winding direction and
area.
"""

from dataclasses import dataclass
from typing import Iterable, Optional
import math

import numpy as np


# Squared lengths below this are treated as zero-length directions
ZERO_LENGTH_EPSILON = 1e-30

# Parametric band used when accepting segment intersections
INTERSECTION_TOLERANCE = 1e-2


@dataclass(frozen=True)
class Vec2:
    """A 2D vector / point."""
    x: float
    y: float

    def __iter__(self):
        yield self.x
        yield self.y

    def to_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> "Vec2":
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> "Vec2":
        return Vec2(self.x / scalar, self.y / scalar)

    @staticmethod
    def dot(v1: "Vec2", v2: "Vec2") -> float:
        return v1.x * v2.x + v1.y * v2.y

    @staticmethod
    def cross(v1: "Vec2", v2: "Vec2") -> float:
        """Z component of the 3D cross product of v1 and v2."""
        return v1.x * v2.y - v1.y * v2.x

    @staticmethod
    def square(v: "Vec2") -> float:
        """Squared length."""
        return Vec2.dot(v, v)

    @staticmethod
    def length(v: "Vec2") -> float:
        return math.sqrt(Vec2.square(v))

    @staticmethod
    def norm(v: "Vec2") -> "Vec2":
        """
        Unit vector in the direction of v.

        Near-zero vectors return the zero vector instead of dividing by a
        vanishing magnitude, so callers must tolerate a zero direction.
        """
        if Vec2.square(v) < ZERO_LENGTH_EPSILON:
            return Vec2(0.0, 0.0)
        return v / Vec2.length(v)

    @staticmethod
    def signed_area(v1: "Vec2", v2: "Vec2") -> float:
        """Contribution of edge v1 -> v2 to the ring's signed area sum."""
        return (v2.x - v1.x) * (v2.y + v1.y)


@dataclass(frozen=True)
class Vertex:
    """A polygon vertex."""
    position: Vec2

    @classmethod
    def coerce(cls, item) -> "Vertex":
        """
        Build a vertex from a Vertex, a Vec2 or an (x, y) pair.

        Raises:
            TypeError: if item is not point-like
            ValueError: if a sequence does not hold exactly two coordinates
        """
        if isinstance(item, Vertex):
            return item
        if isinstance(item, Vec2):
            return cls(item)
        try:
            coords = list(item)
        except TypeError:
            raise TypeError(f"Cannot build a vertex from {item!r}") from None
        if len(coords) != 2:
            raise ValueError(f"Expected an (x, y) pair, got {len(coords)} values: {item!r}")
        return cls(Vec2(float(coords[0]), float(coords[1])))

    @staticmethod
    def handedness(v1: "Vertex", v2: "Vertex", v3: "Vertex") -> float:
        """
        Turn direction at v2 for the consecutive vertices v1, v2, v3.

        Returns the cross product of the incoming edge (v1 -> v2) and the
        outgoing edge (v2 -> v3). Negative means the turn at v2 is reflex
        for a right-handed ring.
        """
        edge1 = v2.position - v1.position
        edge2 = v3.position - v2.position
        return Vec2.cross(edge1, edge2)


@dataclass(frozen=True)
class LineSegment:
    """A directed line segment from start to end."""
    start: Vec2
    end: Vec2

    def direction(self) -> Vec2:
        return self.end - self.start

    @staticmethod
    def intersects(s1: "LineSegment", s2: "LineSegment",
                   tolerance: float = INTERSECTION_TOLERANCE,
                   parallel_epsilon: float = ZERO_LENGTH_EPSILON) -> tuple[bool, Optional[Vec2]]:
        """
        Intersect two segments.

        The parameter along s1 is accepted within [0, 1] widened by
        tolerance. Containment in s2 is checked by projecting onto s2:
        points slightly before s2.start are accepted, while points at or
        near s2.end are rejected, so a ring vertex crossed by s1 is
        reported once, on the edge that starts there.

        Args:
            s1: Cutting segment
            s2: Segment tested against (usually a ring edge)
            tolerance: Parametric tolerance band
            parallel_epsilon: Threshold on |cross(d1, d2)| for parallel lines

        Returns:
            (hit, point) where point is None when there is no hit
        """
        p1 = s1.start
        p2 = s2.start
        d1 = s1.direction()
        d2 = s2.direction()

        denom = Vec2.cross(d1, d2)
        if abs(denom) < parallel_epsilon:
            return (False, None)

        t1 = Vec2.cross(p2 - p1, d2) / denom
        if t1 < -tolerance or t1 > 1.0 + tolerance:
            return (False, None)

        intersection = p1 + d1 * t1

        t2 = Vec2.dot(intersection - p2, d2)
        if t2 < -tolerance or t2 / Vec2.square(d2) >= 1.0 - tolerance:
            return (False, None)

        return (True, intersection)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned extent of a set of points."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def size(self) -> float:
        """Larger of width and height."""
        return max(self.width, self.height)

    def expand(self, margin: float) -> "BoundingBox":
        return BoundingBox(self.min_x - margin, self.min_y - margin,
                           self.max_x + margin, self.max_y + margin)

    @classmethod
    def from_points(cls, points: Iterable) -> 'BoundingBox':
        points = [tuple(p) for p in points]
        if not points:
            return cls(0, 0, 0, 0)
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))


def ring_signed_area(vertices: list[Vertex]) -> float:
    """
    Accumulate Vec2.signed_area over every edge of a ring.

    The sum is negative for right-handed (counter-clockwise, y up) rings.
    """
    n = len(vertices)
    total = 0.0
    for i in range(n):
        total += Vec2.signed_area(vertices[i].position, vertices[(i + 1) % n].position)
    return total


def ring_handedness(vertices: list[Vertex]) -> float:
    """Twice the enclosed area, positive for right-handed rings."""
    if len(vertices) < 3:
        return 0.0
    return -ring_signed_area(vertices)


def is_right_handed(vertices: list[Vertex]) -> bool:
    if len(vertices) < 3:
        return False
    return ring_signed_area(vertices) < 0.0


def flip_ring(vertices) -> tuple[Vertex, ...]:
    """
    Reverse a ring's winding, keeping the first vertex in place.

    (v0, v1, ..., vn-1) becomes (v0, vn-1, ..., v1).
    """
    vertices = tuple(vertices)
    if len(vertices) < 3:
        return vertices
    return (vertices[0],) + vertices[:0:-1]


def polygon_area(points) -> float:
    """
    Unsigned area of a ring using the shoelace formula.

    Args:
        points: Sequence of Vertex, Vec2 or (x, y) pairs

    Returns:
        Enclosed area (0.0 for fewer than 3 points)
    """
    coords = [tuple(p.position) if isinstance(p, Vertex) else tuple(p) for p in points]
    if len(coords) < 3:
        return 0.0
    arr = np.asarray(coords, dtype=float)
    x = arr[:, 0]
    y = arr[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)
