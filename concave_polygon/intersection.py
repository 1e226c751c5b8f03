"""
Segment intersection and visibility queries against a vertex ring.

Every query here is a linear scan over the ring's edges; there is no
spatial index.
"""

import logging
import math
from typing import Optional

from .geometry import (
    Vec2,
    Vertex,
    LineSegment,
    INTERSECTION_TOLERANCE,
    ZERO_LENGTH_EPSILON,
)

logger = logging.getLogger(__name__)

# A connection may cross the ring this many times and still count as visible
MAX_VISIBLE_CROSSINGS = 3

# Ray hits closer than this to the ray origin are ignored
RAY_EPSILON = 1e-9


def ring_edge(vertices: list[Vertex], index: int) -> LineSegment:
    """Edge from vertex index to its successor, with wraparound."""
    n = len(vertices)
    return LineSegment(vertices[index % n].position, vertices[(index + 1) % n].position)


def vertices_along_segment(segment: LineSegment,
                           vertices: list[Vertex],
                           tolerance: float = INTERSECTION_TOLERANCE,
                           parallel_epsilon: float = ZERO_LENGTH_EPSILON) -> dict[int, Vec2]:
    """
    Find where a segment crosses the edges of a ring.

    Args:
        segment: Cutting segment
        vertices: Ring vertices
        tolerance: Parametric tolerance passed to LineSegment.intersects
        parallel_epsilon: Parallel rejection threshold

    Returns:
        Mapping of edge index (edge i runs from vertex i to vertex i+1)
        to intersection point, ordered by edge index
    """
    result = {}
    for i in range(len(vertices)):
        hit, point = LineSegment.intersects(segment, ring_edge(vertices, i),
                                            tolerance=tolerance,
                                            parallel_epsilon=parallel_epsilon)
        if hit:
            result[i] = point
    return result


def cull_by_distance(crossings: dict[int, Vec2],
                     origin: Vec2,
                     max_to_keep: int = 2) -> dict[int, Vec2]:
    """
    Keep the crossings nearest to origin.

    Crossings are ranked by squared distance to origin (earlier edge index
    wins ties), the nearest max_to_keep survive, and the survivors are
    returned in edge index order so they can be inserted into the ring
    in sequence.
    """
    if max_to_keep >= len(crossings):
        return dict(sorted(crossings.items()))

    ranked = sorted(crossings.items(), key=lambda item: (Vec2.square(item[1] - origin), item[0]))
    kept = ranked[:max_to_keep]
    return dict(sorted(kept))


def check_visibility(origin: Vec2,
                     vertex: Vertex,
                     vertices: list[Vertex],
                     max_crossings: int = MAX_VISIBLE_CROSSINGS,
                     tolerance: float = INTERSECTION_TOLERANCE,
                     parallel_epsilon: float = ZERO_LENGTH_EPSILON) -> bool:
    """
    Approximate whether vertex can be reached from origin inside the ring.

    The connecting segment is intersected with every edge and accepted
    when it crosses at most max_crossings of them. The edges meeting at
    the two endpoints account for the expected hits. This is a heuristic:
    unusual rings can be both over- and under-admitted.
    """
    connection = LineSegment(origin, vertex.position)
    crossings = vertices_along_segment(connection, vertices,
                                       tolerance=tolerance,
                                       parallel_epsilon=parallel_epsilon)
    logger.debug("Connection %s -> %s crosses %d edge(s)",
                 origin.to_tuple(), vertex.position.to_tuple(), len(crossings))
    return len(crossings) <= max_crossings


def cast_ray(origin: Vec2,
             direction: Vec2,
             vertices: list[Vertex],
             skip_edges: tuple[int, ...] = (),
             touch_tolerance: float = INTERSECTION_TOLERANCE,
             parallel_epsilon: float = ZERO_LENGTH_EPSILON) -> Optional[tuple[int, Vec2]]:
    """
    Find the nearest ring edge hit by a ray.

    Args:
        origin: Ray origin
        direction: Ray direction (need not be normalised)
        vertices: Ring vertices
        skip_edges: Edge indices to ignore, e.g. the edges meeting at origin
        touch_tolerance: Distance behind origin within which an edge still
            counts as passing through it
        parallel_epsilon: Parallel rejection threshold

    Returns:
        (edge_index, point) of the closest crossing in front of origin, or
        None if the ray leaves the ring without crossing an edge. An edge
        passing through origin (a ring touching itself there) is a hit at
        distance 0 and its point is origin itself. A ray passing exactly
        through a vertex is reported on the edge starting at that vertex.
    """
    direction = Vec2.norm(direction)
    if Vec2.square(direction) < ZERO_LENGTH_EPSILON:
        return None

    n = len(vertices)
    skip = {i % n for i in skip_edges} if n else set()
    best = None
    best_t = math.inf

    for i in range(n):
        if i in skip:
            continue
        edge = ring_edge(vertices, i)
        edge_dir = edge.direction()

        denom = Vec2.cross(direction, edge_dir)
        if abs(denom) < parallel_epsilon:
            continue

        offset = edge.start - origin
        t = Vec2.cross(offset, edge_dir) / denom
        s = Vec2.cross(offset, direction) / denom

        if s < -RAY_EPSILON or s >= 1.0 - RAY_EPSILON:
            continue

        if t <= RAY_EPSILON:
            if t < -touch_tolerance:
                continue
            point = origin
            logger.debug("Edge %d touches the ray origin %s", i, origin.to_tuple())
        else:
            point = origin + direction * t

        if t < best_t:
            best_t = t
            best = (i, point)

    return best
