"""
Unit tests for the ConcavePolygon tree and the slicing engine.

Covers construction and winding normalisation, index and segment cuts,
queries with out-of-range access, reset, flip and serialization.
"""

import pytest
import math

from concave_polygon.config import DecompositionConfig
from concave_polygon.geometry import Vec2, Vertex, LineSegment
from concave_polygon.polygon import (
    ConcavePolygon,
    NodeState,
    split_ring_by_indices,
    split_ring_at_crossings,
)


def ring(points):
    return [Vertex.coerce(p) for p in points]


def star(points=5, outer=2.0, inner=1.0, clockwise=False):
    verts = []
    for i in range(points * 2):
        radius = outer if i % 2 == 0 else inner
        angle = math.pi * i / points
        if clockwise:
            angle = -angle
        verts.append((radius * math.cos(angle), radius * math.sin(angle)))
    return verts


class TestConstruction:
    """Tests for building polygons and winding normalisation."""

    def test_counter_clockwise_input_kept(self, square):
        poly = ConcavePolygon(square)
        assert poly.points() == [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
        assert poly.is_right_handed() is True

    def test_clockwise_input_flipped(self, square):
        """Clockwise input is reversed with the first vertex kept in place."""
        clockwise = [(0, 0), (0, 1), (1, 1), (1, 0)]
        poly = ConcavePolygon(clockwise)
        assert poly.points() == [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]

    @pytest.mark.parametrize("clockwise", [False, True])
    def test_handedness_positive_after_construction(self, clockwise):
        poly = ConcavePolygon(star(clockwise=clockwise))
        assert poly.handedness() > 0
        assert poly.is_right_handed() is True

    def test_handedness_positive_for_reversed_fixtures(self, l_shape, u_shape, comb):
        for points in (l_shape, u_shape, comb):
            assert ConcavePolygon(points[::-1]).handedness() > 0

    def test_accepts_vertices_and_vec2(self):
        poly = ConcavePolygon([Vertex(Vec2(0, 0)), Vec2(1, 0), (0, 1)])
        assert poly.point_count == 3

    def test_short_rings_are_not_flipped(self):
        poly = ConcavePolygon([(1, 1), (0, 0)])
        assert poly.points() == [(1.0, 1.0), (0.0, 0.0)]
        assert poly.is_right_handed() is False

    def test_starts_as_unprocessed_leaf(self, square):
        poly = ConcavePolygon(square)
        assert poly.state is NodeState.UNPROCESSED
        assert poly.is_leaf
        assert poly.num_children == 0

    def test_default_config(self, square):
        poly = ConcavePolygon(square)
        assert poly.config == DecompositionConfig()

    def test_repr(self, square):
        assert repr(ConcavePolygon(square)) == "ConcavePolygon(4 vertices, unprocessed)"


class TestQueries:
    """Tests for vertex and child accessors."""

    def test_get_point(self, l_shape):
        poly = ConcavePolygon(l_shape)
        assert poly.get_point(3) == Vec2(1, 1)
        assert len(poly) == 6

    def test_get_point_out_of_range_is_zero(self, l_shape):
        poly = ConcavePolygon(l_shape)
        assert poly.get_point(6) == Vec2(0.0, 0.0)
        assert poly.get_point(-1) == Vec2(0.0, 0.0)

    def test_get_sub_polygon_on_leaf_returns_self(self, square):
        poly = ConcavePolygon(square)
        assert poly.get_sub_polygon(0) is poly
        assert poly.get_sub_polygon(1) is poly

    def test_get_sub_polygon_out_of_range_returns_self(self, l_shape):
        poly = ConcavePolygon(l_shape)
        poly.slice_by_indices(0, 3)
        assert poly.get_sub_polygon(0) is poly.children[0]
        assert poly.get_sub_polygon(1) is poly.children[1]
        assert poly.get_sub_polygon(2) is poly
        assert poly.get_sub_polygon(-1) is poly

    def test_vertices_are_read_only(self, square):
        poly = ConcavePolygon(square)
        assert isinstance(poly.vertices, tuple)
        with pytest.raises(AttributeError):
            poly.vertices = ()

    def test_area(self, u_shape):
        assert ConcavePolygon(u_shape).area() == pytest.approx(7.0)


class TestSplitRingByIndices:
    """Tests for split_ring_by_indices."""

    def test_split(self, l_shape):
        verts = ring(l_shape)
        inner, outer = split_ring_by_indices(verts, 3, 0)
        assert inner == tuple(verts[0:4])
        assert outer == (verts[0], verts[3], verts[4], verts[5])

    @pytest.mark.parametrize("i, j", [(2, 2), (2, 3), (3, 2), (0, 5), (5, 0), (0, 6), (-1, 2)])
    def test_invalid_pairs(self, l_shape, i, j):
        """Equal, adjacent (including wraparound) and out-of-range pairs are rejected."""
        assert split_ring_by_indices(ring(l_shape), i, j) is None

    def test_counts_sum_to_n_plus_two(self):
        """Every diagonal of an octagon splits it into rings totalling n + 2 vertices."""
        verts = ring([(math.cos(a), math.sin(a)) for a in (2 * math.pi * k / 8 for k in range(8))])
        n = len(verts)
        for i in range(n):
            for j in range(n):
                result = split_ring_by_indices(verts, i, j)
                if result is None:
                    continue
                inner, outer = result
                assert len(inner) + len(outer) == n + 2


class TestSplitRingAtCrossings:
    """Tests for split_ring_at_crossings."""

    def test_vertical_split_of_square(self, square):
        segment = LineSegment(Vec2(0.5, -1), Vec2(0.5, 2))
        crossings = {0: Vec2(0.5, 0), 2: Vec2(0.5, 1)}
        left, right = split_ring_at_crossings(ring(square), crossings, segment)
        assert [v.position.to_tuple() for v in left] == [(0.5, 0), (1, 0), (1, 1), (0.5, 1)]
        assert [v.position.to_tuple() for v in right] == [(0, 0), (0.5, 0), (0.5, 1), (0, 1)]

    def test_vertex_on_cut_line_is_replaced(self, dart):
        """Cut vertices are not duplicated when the cut starts and ends on them."""
        verts = ring(dart)
        segment = LineSegment(Vec2(2, 1), Vec2(2, 3))
        crossings = {1: Vec2(2, 1), 3: Vec2(2, 3)}
        left, right = split_ring_at_crossings(verts, crossings, segment)
        assert [v.position.to_tuple() for v in left] == [(2, 1), (4, 0), (2, 3)]
        assert [v.position.to_tuple() for v in right] == [(0, 0), (2, 1), (2, 3)]
        assert len(left) + len(right) == len(verts) + 2

    def test_cut_ending_at_its_start_keeps_other_vertices(self, arrow):
        """Both crossings sit on the reflex vertex; only that vertex is replaced."""
        verts = ring(arrow)
        segment = LineSegment(Vec2(1, 1), Vec2(0, 1))
        crossings = {2: Vec2(1, 1), 3: Vec2(1, 1)}
        left, right = split_ring_at_crossings(verts, crossings, segment)
        assert [v.position.to_tuple() for v in left] == [(1, 1), (2, 2), (1, 1)]
        assert [v.position.to_tuple() for v in right] == [(0, 0), (2, 0), (1, 1), (1, 1)]


class TestSliceByIndices:
    """Tests for ConcavePolygon.slice_by_indices."""

    def test_creates_two_children(self, l_shape):
        poly = ConcavePolygon(l_shape)
        poly.slice_by_indices(0, 3)
        assert poly.state is NodeState.SPLIT
        assert poly.num_children == 2
        first, second = poly.children
        assert first.points() == [(0, 0), (2, 0), (2, 1), (1, 1)]
        assert second.points() == [(0, 0), (1, 1), (1, 2), (0, 2)]
        assert first.point_count + second.point_count == poly.point_count + 2

    @pytest.mark.parametrize("i, j", [(1, 1), (1, 2), (2, 1), (0, 5)])
    def test_equal_or_adjacent_is_noop(self, l_shape, i, j):
        poly = ConcavePolygon(l_shape)
        poly.slice_by_indices(i, j)
        assert poly.num_children == 0
        assert poly.state is NodeState.UNPROCESSED

    def test_split_node_ignores_index_cut(self, l_shape):
        """Indices refer to this ring, so a split node is not cut again."""
        poly = ConcavePolygon(l_shape)
        poly.slice_by_indices(0, 3)
        children = poly.children
        poly.slice_by_indices(1, 4)
        assert poly.children is children

    def test_children_inherit_config(self, l_shape):
        config = DecompositionConfig(max_depth=5)
        poly = ConcavePolygon(l_shape, config)
        poly.slice_by_indices(0, 3)
        assert all(child.config is config for child in poly.children)


class TestSliceBySegment:
    """Tests for ConcavePolygon.slice_by_segment."""

    def test_cut_square_in_half(self, square):
        poly = ConcavePolygon(square)
        poly.slice_by_segment(LineSegment(Vec2(0.5, -1), Vec2(0.5, 2)))
        assert poly.num_children == 2
        assert [leaf.area() for leaf in poly.flatten_leaves()] == [pytest.approx(0.5)] * 2

    def test_accepts_point_pair(self, square):
        poly = ConcavePolygon(square)
        poly.slice_by_segment(((0.5, -1), (0.5, 2)))
        assert poly.num_children == 2

    def test_cut_propagates_through_children(self, square):
        """A second cut carves every existing leaf it crosses."""
        poly = ConcavePolygon(square)
        poly.slice_by_segment(LineSegment(Vec2(0.5, -1), Vec2(0.5, 2)))
        poly.slice_by_segment(LineSegment(Vec2(-1, 0.5), Vec2(2, 0.5)))
        leaves = poly.flatten_leaves()
        assert len(leaves) == 4
        for leaf in leaves:
            assert leaf.area() == pytest.approx(0.25)
        assert all(child.num_children == 2 for child in poly.children)

    def test_uses_two_crossings_nearest_to_start(self, u_shape):
        """A line through both arms of a U only cuts the first arm."""
        poly = ConcavePolygon(u_shape)
        poly.slice_by_segment(LineSegment(Vec2(-1, 2), Vec2(4, 2)))
        left, right = poly.children
        assert left.points() == [(1, 2), (1, 3), (0, 3), (0, 2)]
        assert right.point_count == 8
        assert left.area() == pytest.approx(1.0)
        assert right.area() == pytest.approx(6.0)

    def test_missing_segment_is_noop(self, square):
        poly = ConcavePolygon(square)
        poly.slice_by_segment(LineSegment(Vec2(5, 5), Vec2(6, 6)))
        assert poly.num_children == 0
        assert poly.state is NodeState.UNPROCESSED

    def test_single_crossing_is_noop(self, square):
        """A segment starting inside the polygon crosses only once."""
        poly = ConcavePolygon(square)
        poly.slice_by_segment(LineSegment(Vec2(0.5, 0.5), Vec2(0.5, 2)))
        assert poly.num_children == 0

    def test_degenerate_ring_is_noop(self):
        poly = ConcavePolygon([(0, 0), (1, 0)])
        poly.slice_by_segment(LineSegment(Vec2(0.5, -1), Vec2(0.5, 1)))
        assert poly.num_children == 0


class TestTreeUtilities:
    """Tests for flatten_leaves, reset, flip and to_dict."""

    def test_flatten_leaf(self, square):
        poly = ConcavePolygon(square)
        assert poly.flatten_leaves() == [poly]

    def test_flatten_order(self, square):
        """Leaves come first-child subtree first."""
        poly = ConcavePolygon(square)
        poly.slice_by_segment(LineSegment(Vec2(0.5, -1), Vec2(0.5, 2)))
        poly.children[0].slice_by_segment(LineSegment(Vec2(0, 0.5), Vec2(2, 0.5)))
        leaves = poly.flatten_leaves()
        assert leaves == [*poly.children[0].children, poly.children[1]]

    def test_reset(self, l_shape):
        poly = ConcavePolygon(l_shape)
        before = poly.points()
        poly.slice_by_indices(0, 3)
        poly.children[0].slice_by_indices(0, 2)
        poly.reset()
        assert poly.num_children == 0
        assert poly.state is NodeState.UNPROCESSED
        assert poly.points() == before

    def test_flip(self, square):
        """flip reverses the ring in place, independent of construction."""
        poly = ConcavePolygon(square)
        poly.flip()
        assert poly.points() == [(0, 0), (0, 1), (1, 1), (1, 0)]
        assert poly.is_right_handed() is False
        poly.flip()
        assert poly.points() == [(0, 0), (1, 0), (1, 1), (0, 1)]

    def test_to_dict(self, l_shape):
        poly = ConcavePolygon(l_shape)
        poly.slice_by_indices(0, 3)
        data = poly.to_dict()
        assert data["state"] == "split"
        assert data["vertices"][3] == [1.0, 1.0]
        assert len(data["children"]) == 2
        assert data["children"][0]["children"] == []
        assert data["children"][0]["state"] == "unprocessed"
