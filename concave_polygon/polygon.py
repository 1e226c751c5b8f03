"""
Recursive convex decomposition of concave polygons.

A ConcavePolygon is a node in a binary tree. Cutting a node splits its ring
into two rings that share the two cut points and stores them as child
nodes; decomposition repeatedly cuts at the first reflex vertex until no
leaf has one. Callers read the result through flatten_leaves() and the
per-node vertex accessors.
"""

from enum import Enum
import logging
from typing import Iterable, Optional

from .geometry import (
    Vec2,
    Vertex,
    LineSegment,
    flip_ring,
    is_right_handed,
    ring_handedness,
    polygon_area,
)
from .intersection import vertices_along_segment, cull_by_distance, cast_ray
from .cone import (
    find_first_reflex_vertex,
    cone_boundaries,
    find_vertices_in_cone,
    get_best_vertex_to_connect,
)
from .config import DecompositionConfig, SLICE_TOLERANCE

logger = logging.getLogger(__name__)


class NodeState(Enum):
    """Where a node is in the decomposition."""
    UNPROCESSED = "unprocessed"  # Leaf not yet analysed
    CONVEX = "convex"            # Leaf with nothing left to cut
    SPLIT = "split"              # Internal node with two children


def split_ring_by_indices(vertices, index1: int, index2: int) -> Optional[tuple[tuple[Vertex, ...], tuple[Vertex, ...]]]:
    """
    Split a ring along the diagonal between two of its vertices.

    Both resulting rings contain the two cut vertices, so their sizes sum
    to len(vertices) + 2.

    Returns:
        (inner, outer) where inner runs from the lower to the higher index,
        or None if the indices are equal, adjacent or out of range
    """
    vertices = tuple(vertices)
    n = len(vertices)
    a, b = sorted((index1, index2))

    if a < 0 or b >= n or a == b:
        return None
    if b - a == 1 or (a == 0 and b == n - 1):
        return None

    inner = vertices[a:b + 1]
    outer = vertices[:a + 1] + vertices[b:]
    return inner, outer


def split_ring_at_crossings(vertices,
                            crossings: dict[int, Vec2],
                            segment: LineSegment,
                            tolerance: float = SLICE_TOLERANCE) -> tuple[list[Vertex], list[Vertex]]:
    """
    Split a ring where a cut line crosses two of its edges.

    Args:
        vertices: Ring vertices
        crossings: Exactly two entries mapping edge index to crossing point
            (edge i runs from vertex i to vertex i+1)
        segment: The cut line, used for the on-line test
        tolerance: Perpendicular tolerance for the on-line test

    Returns:
        (left, right) rings. Vertices strictly between the two crossing
        edges go left, the rest go right. Both crossing points are
        inserted into both rings in ring order. A vertex that lies on the
        cut line and owns a crossing is replaced by that crossing point.
    """
    (first, _), (second, _) = sorted(crossings.items())
    direction = segment.direction()

    left = []
    right = []

    for i, vertex in enumerate(vertices):
        relative = vertex.position - segment.start
        perp_distance = abs(Vec2.cross(relative, direction))

        if perp_distance > tolerance or i not in crossings:
            if first < i <= second:
                left.append(vertex)
            else:
                right.append(vertex)

        if i in crossings:
            cut_vertex = Vertex(crossings[i])
            left.append(cut_vertex)
            right.append(cut_vertex)

    return left, right


class ConcavePolygon:
    """
    A polygon node that can be cut into two child polygons.

    The ring is normalised to right-handed winding on construction (vertex
    0 stays first). Children inherit the parent's configuration.
    """

    def __init__(self, vertices: Iterable = (), config: Optional[DecompositionConfig] = None):
        self.config = config if config is not None else DecompositionConfig()

        ring = tuple(Vertex.coerce(v) for v in vertices)
        if len(ring) > 2 and not is_right_handed(ring):
            ring = flip_ring(ring)

        self._vertices = ring
        self._children: tuple["ConcavePolygon", ...] = ()
        self._state = NodeState.UNPROCESSED

    def __repr__(self):
        return f"ConcavePolygon({len(self._vertices)} vertices, {self._state.value})"

    def __len__(self):
        return len(self._vertices)

    # --- Queries -----------------------------------------------------------

    @property
    def vertices(self) -> tuple[Vertex, ...]:
        return self._vertices

    @property
    def children(self) -> tuple["ConcavePolygon", ...]:
        return self._children

    @property
    def state(self) -> NodeState:
        return self._state

    @property
    def is_leaf(self) -> bool:
        return self._state is not NodeState.SPLIT

    @property
    def num_children(self) -> int:
        return len(self._children)

    @property
    def point_count(self) -> int:
        return len(self._vertices)

    def get_sub_polygon(self, index: int) -> "ConcavePolygon":
        """Child at index, or this polygon if there is no such child."""
        if 0 <= index < len(self._children):
            return self._children[index]
        return self

    def get_point(self, index: int) -> Vec2:
        """Position of vertex index, or the zero vector if out of range."""
        if 0 <= index < len(self._vertices):
            return self._vertices[index].position
        return Vec2(0.0, 0.0)

    def points(self) -> list[tuple[float, float]]:
        return [v.position.to_tuple() for v in self._vertices]

    def is_right_handed(self) -> bool:
        return is_right_handed(self._vertices)

    def handedness(self) -> float:
        """Twice the signed enclosed area; positive when right-handed."""
        return ring_handedness(self._vertices)

    def area(self) -> float:
        return polygon_area(self._vertices)

    def flatten_leaves(self) -> list["ConcavePolygon"]:
        """All leaves below this node, first child's subtree first."""
        if self._state is NodeState.SPLIT:
            leaves = []
            for child in self._children:
                leaves.extend(child.flatten_leaves())
            return leaves
        return [self]

    def to_dict(self) -> dict:
        """Convert the subtree to nested dictionaries for serialization."""
        return {
            "vertices": [list(p) for p in self.points()],
            "state": self._state.value,
            "children": [child.to_dict() for child in self._children],
        }

    # --- Mutation ----------------------------------------------------------

    def flip(self) -> None:
        """Reverse the ring's winding. Children are left untouched."""
        self._vertices = flip_ring(self._vertices)

    def reset(self) -> None:
        """Discard the whole subtree, leaving an unprocessed leaf."""
        for child in self._children:
            child.reset()
        self._children = ()
        self._state = NodeState.UNPROCESSED

    def slice_by_indices(self, index1: int, index2: int) -> None:
        """
        Cut along the diagonal between two vertices of this ring.

        No-op for split nodes and for equal, adjacent or out-of-range
        indices.
        """
        if self._state is NodeState.SPLIT:
            logger.debug("Ignoring index cut (%d, %d) on a split polygon", index1, index2)
            return

        rings = split_ring_by_indices(self._vertices, index1, index2)
        if rings is None:
            logger.debug("Index cut (%d, %d) is not a diagonal of a %d-vertex ring",
                         index1, index2, len(self._vertices))
            return

        self._set_children(*rings)

    def slice_by_segment(self, segment) -> None:
        """
        Cut along a segment.

        A split node forwards the cut to both children, so a segment can
        carve through an existing decomposition. A leaf is cut at the two
        crossings nearest to segment.start; with fewer than two crossings
        nothing happens.

        Args:
            segment: LineSegment, or a pair of points
        """
        if not isinstance(segment, LineSegment):
            start, end = segment
            segment = LineSegment(Vertex.coerce(start).position, Vertex.coerce(end).position)

        if self._state is NodeState.SPLIT:
            for child in self._children:
                child.slice_by_segment(segment)
            return

        if len(self._vertices) < 3:
            return

        crossings = vertices_along_segment(segment, self._vertices,
                                           tolerance=self.config.intersection_tolerance,
                                           parallel_epsilon=self.config.parallel_epsilon)
        crossings = cull_by_distance(crossings, segment.start, 2)

        if len(crossings) < 2:
            logger.debug("Segment %s -> %s crosses the ring %d time(s); not cutting",
                         segment.start.to_tuple(), segment.end.to_tuple(), len(crossings))
            return

        left, right = split_ring_at_crossings(self._vertices, crossings, segment,
                                              tolerance=self.config.slice_tolerance)
        self._set_children(left, right)

    def decompose(self) -> None:
        """
        Split this polygon into convex pieces.

        Does nothing if the polygon has already been split or found convex.
        """
        self._decompose(0)

    # --- Internals ---------------------------------------------------------

    def _set_children(self, first, second) -> None:
        self._children = (ConcavePolygon(first, self.config),
                          ConcavePolygon(second, self.config))
        self._state = NodeState.SPLIT

    def _decompose(self, depth: int) -> None:
        if self._state is not NodeState.UNPROCESSED:
            return

        # Triangles cannot be reflex
        if len(self._vertices) < 4:
            self._state = NodeState.CONVEX
            return

        if depth >= self.config.max_depth:
            logger.warning("Decomposition depth limit (%d) reached; leaving %r unsplit",
                           self.config.max_depth, self)
            return

        reflex_index = find_first_reflex_vertex(self._vertices)
        if reflex_index is None:
            self._state = NodeState.CONVEX
            return

        logger.debug("Depth %d: reflex vertex %d at %s", depth, reflex_index,
                     self._vertices[reflex_index].position.to_tuple())

        if not self._cut_at_reflex_vertex(reflex_index):
            return

        for child in self._children:
            child._decompose(depth + 1)

    def _cut_at_reflex_vertex(self, reflex_index: int) -> bool:
        """Cut to the best cone candidate, or along the cone bisector."""
        vertices = self._vertices
        origin = vertices[reflex_index].position
        ls1, ls2 = cone_boundaries(vertices, reflex_index)

        candidates = find_vertices_in_cone(ls1, ls2, origin, vertices)
        if candidates:
            best = get_best_vertex_to_connect(candidates, vertices, origin,
                                              max_crossings=self.config.max_visible_crossings,
                                              tolerance=self.config.intersection_tolerance,
                                              parallel_epsilon=self.config.parallel_epsilon)
            if best is not None:
                logger.debug("Connecting reflex vertex %d to vertex %d", reflex_index, best)
                self.slice_by_indices(reflex_index, best)
                if self._state is NodeState.SPLIT:
                    return True

        return self._cut_along_bisector(reflex_index, ls1, ls2)

    def _cut_along_bisector(self, reflex_index: int, ls1: LineSegment, ls2: LineSegment) -> bool:
        """Open the notch with a ray along the cone bisector."""
        vertices = self._vertices
        origin = vertices[reflex_index].position
        direction = Vec2.norm(ls1.direction() + ls2.direction())

        hit = cast_ray(origin, direction, vertices,
                       skip_edges=(reflex_index - 1, reflex_index),
                       touch_tolerance=self.config.intersection_tolerance,
                       parallel_epsilon=self.config.parallel_epsilon)
        if hit is None:
            logger.warning("Ray from reflex vertex %d leaves %r without crossing it; not cutting",
                           reflex_index, self)
            return False

        edge_index, point = hit
        logger.debug("Cutting from reflex vertex %d to edge %d at %s",
                     reflex_index, edge_index, point.to_tuple())

        # point is origin itself when the ring touches itself at the reflex vertex
        crossings = {reflex_index: origin, edge_index: point}
        ray = LineSegment(origin, origin + direction)
        left, right = split_ring_at_crossings(vertices, crossings, ray,
                                              tolerance=self.config.slice_tolerance)
        self._set_children(left, right)
        return True
