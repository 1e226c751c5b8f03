"""
Reflex vertex detection and cone analysis.

At a reflex vertex the two adjacent edges, extended past the vertex, bound
an open wedge (the cone) pointing into the polygon. Vertices inside the
cone are the candidates for a cut that resolves the reflex angle.
"""

import logging
from typing import Optional

from .geometry import Vec2, Vertex, LineSegment, INTERSECTION_TOLERANCE, ZERO_LENGTH_EPSILON
from .intersection import check_visibility, MAX_VISIBLE_CROSSINGS

logger = logging.getLogger(__name__)


def vertex_handedness(vertices: list[Vertex], index: int) -> float:
    """Handedness at vertex index using its ring neighbours."""
    n = len(vertices)
    return Vertex.handedness(vertices[(index - 1) % n],
                             vertices[index % n],
                             vertices[(index + 1) % n])


def is_reflex(vertices: list[Vertex], index: int) -> bool:
    return vertex_handedness(vertices, index) < 0.0


def find_first_reflex_vertex(vertices: list[Vertex]) -> Optional[int]:
    """Index of the first reflex vertex, or None if the ring is convex."""
    for i in range(len(vertices)):
        if is_reflex(vertices, i):
            return i
    return None


def cone_boundaries(vertices: list[Vertex], index: int) -> tuple[LineSegment, LineSegment]:
    """
    The two segments bounding the cone at vertex index.

    Both run from a neighbour to the vertex, so their directions point
    along the extensions of the adjacent edges.
    """
    n = len(vertices)
    prev_pos = vertices[(index - 1) % n].position
    curr_pos = vertices[index % n].position
    next_pos = vertices[(index + 1) % n].position
    return LineSegment(prev_pos, curr_pos), LineSegment(next_pos, curr_pos)


def is_vertex_in_cone(ls1: LineSegment,
                      ls2: LineSegment,
                      origin: Vec2,
                      vertex: Vertex) -> bool:
    """
    Test whether vertex lies strictly inside the cone at origin.

    Points on either boundary ray are outside.
    """
    relative = vertex.position - origin
    ls1_product = Vec2.cross(relative, ls1.direction())
    ls2_product = Vec2.cross(relative, ls2.direction())
    return ls1_product < 0.0 and ls2_product > 0.0


def find_vertices_in_cone(ls1: LineSegment,
                          ls2: LineSegment,
                          origin: Vec2,
                          vertices: list[Vertex]) -> list[int]:
    return [i for i, vertex in enumerate(vertices)
            if is_vertex_in_cone(ls1, ls2, origin, vertex)]


def get_best_vertex_to_connect(indices: list[int],
                               vertices: list[Vertex],
                               origin: Vec2,
                               max_crossings: int = MAX_VISIBLE_CROSSINGS,
                               tolerance: float = INTERSECTION_TOLERANCE,
                               parallel_epsilon: float = ZERO_LENGTH_EPSILON) -> Optional[int]:
    """
    Choose which cone candidate to connect the reflex vertex at origin to.

    Preference order:
      1. a single candidate, only if visible
      2. a visible reflex candidate whose own cone contains origin
      3. any visible reflex candidate
      4. the candidate closest to origin

    Args:
        indices: Candidate vertex indices (in ring order)
        vertices: Ring vertices
        origin: Position of the reflex vertex being resolved
        max_crossings: Visibility threshold
        tolerance: Intersection tolerance for visibility checks
        parallel_epsilon: Parallel rejection threshold for visibility checks

    Returns:
        Chosen vertex index, or None if no candidate is usable
    """
    def visible(index):
        return check_visibility(origin, vertices[index], vertices,
                                max_crossings=max_crossings,
                                tolerance=tolerance,
                                parallel_epsilon=parallel_epsilon)

    if not indices:
        return None

    if len(indices) == 1:
        index = indices[0]
        if visible(index):
            return index
        logger.debug("Single cone candidate %d is not visible", index)
        return None

    origin_vertex = Vertex(origin)

    # Notch to notch, with each reflex vertex inside the other's cone
    for index in indices:
        if not is_reflex(vertices, index):
            continue
        ls1, ls2 = cone_boundaries(vertices, index)
        if is_vertex_in_cone(ls1, ls2, vertices[index].position, origin_vertex) and visible(index):
            return index

    for index in indices:
        if is_reflex(vertices, index) and visible(index):
            return index

    closest = indices[0]
    min_distance = Vec2.square(vertices[closest].position - origin)
    for index in indices[1:]:
        distance = Vec2.square(vertices[index].position - origin)
        if distance < min_distance:
            min_distance = distance
            closest = index
    return closest
