"""Tests for outline loops and the shapely outline builder."""

from __future__ import annotations

import unittest

from shapely.geometry import LinearRing, Polygon

from padpack.geometry import (
    Bounds, OutlineRegion, OutwardNormalError, Point, Segment,
    construct_outlines, get_outward_normal, outline_bounds,
    point_in_outline, segments_from_vertices, simplify_collinear_segments, split_loops,
)


def _square(x0, y0, x1, y1):
    return segments_from_vertices([Point(x0, y0), Point(x1, y0), Point(x1, y1), Point(x0, y1)])


def _ring(loop):
    return LinearRing([(s.start.x, s.start.y) for s in loop])


class TestLoopHelpers(unittest.TestCase):

    def test_split_loops(self):
        outer = _square(0, 0, 30, 30)
        hole = _square(10, 10, 20, 20)
        rings = split_loops(outer + hole)
        self.assertEqual(len(rings), 2)
        self.assertEqual(rings[0], [Point(0, 0), Point(30, 0), Point(30, 30), Point(0, 30)])
        self.assertEqual(rings[1][0], Point(10, 10))

    def test_split_loops_skips_zero_length_edges(self):
        loop = segments_from_vertices([
            Point(0, 0), Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10),
        ])
        rings = split_loops(loop)
        self.assertEqual(len(rings), 1)
        self.assertEqual(len(rings[0]), 4)

    def test_point_in_outline(self):
        loop = _square(0, 0, 10, 10)
        self.assertEqual(point_in_outline(Point(5, 5), loop), "inside")
        self.assertEqual(point_in_outline(Point(15, 5), loop), "outside")
        self.assertEqual(point_in_outline(Point(0, 5), loop), "boundary")
        self.assertEqual(point_in_outline(Point(10, 10), loop), "boundary")
        self.assertEqual(point_in_outline(Point(5, 5), []), "outside")

    def test_hole_is_outside(self):
        outer = _square(0, 0, 30, 30)
        hole = list(reversed([Segment(s.end, s.start) for s in _square(10, 10, 20, 20)]))
        segments = outer + hole
        self.assertEqual(point_in_outline(Point(15, 15), segments), "outside")
        self.assertEqual(point_in_outline(Point(5, 5), segments), "inside")

    def test_nested_loop_winding_does_not_matter(self):
        region = OutlineRegion(_square(0, 0, 30, 30) + _square(10, 10, 20, 20))
        self.assertEqual(region.locate(Point(15, 15)), "outside")
        self.assertEqual(region.locate(Point(25, 25)), "inside")
        self.assertAlmostEqual(region.area.area, 800.0)
        self.assertEqual(region.bounds, Bounds(0, 30, 0, 30))

    def test_empty_region(self):
        region = OutlineRegion([])
        self.assertIsNone(region.bounds)
        self.assertEqual(region.locate(Point(0, 0)), "outside")

    def test_simplify_merges_collinear_runs(self):
        loop = segments_from_vertices([
            Point(5, 0), Point(10, 0), Point(10, 10), Point(0, 10), Point(0, 0),
        ])
        simplified = simplify_collinear_segments(loop)
        self.assertEqual(len(simplified), 4)
        self.assertIn(Segment(Point(0, 0), Point(10, 0)), simplified)

    def test_simplify_keeps_reversals(self):
        loop = [
            Segment(Point(0, 0), Point(10, 0)),
            Segment(Point(10, 0), Point(5, 0)),
            Segment(Point(5, 0), Point(0, 0)),
        ]
        simplified = simplify_collinear_segments(loop)
        self.assertEqual(len(simplified), 2)
        self.assertIn(Segment(Point(0, 0), Point(10, 0)), simplified)


class TestOutwardNormal(unittest.TestCase):

    def test_square_edges(self):
        loop = _square(0, 0, 10, 10)
        bottom, right, top, left = loop
        self.assertEqual(get_outward_normal(bottom, loop), Point(0, -1))
        self.assertEqual(get_outward_normal(right, loop), Point(1, 0))
        self.assertEqual(get_outward_normal(top, loop), Point(0, 1))
        self.assertEqual(get_outward_normal(left, loop), Point(-1, 0))

    def test_hole_edge_points_into_hole(self):
        outer = _square(0, 0, 30, 30)
        hole = _square(10, 10, 20, 20)
        normal = get_outward_normal(hole[0], outer + hole)
        self.assertEqual(normal, Point(0, 1))

    def test_zero_length_segment(self):
        seg = Segment(Point(1, 1), Point(1, 1))
        self.assertEqual(get_outward_normal(seg, _square(0, 0, 10, 10)), Point(0, 1))

    def test_no_free_side_raises(self):
        buried = Segment(Point(5, 4), Point(5, 6))
        with self.assertRaises(OutwardNormalError):
            get_outward_normal(buried, _square(0, 0, 10, 10))


class TestConstructOutlines(unittest.TestCase):

    def test_single_box(self):
        loops = construct_outlines([Bounds(0, 10, 0, 10)], gap=1.0)
        self.assertEqual(len(loops), 1)
        self.assertEqual(len(loops[0]), 4)
        self.assertTrue(_ring(loops[0]).is_ccw)
        b = outline_bounds(loops[0])
        self.assertAlmostEqual(b.min_x, -1.0, places=9)
        self.assertAlmostEqual(b.max_x, 11.0, places=9)
        self.assertAlmostEqual(b.min_y, -1.0, places=9)
        self.assertAlmostEqual(b.max_y, 11.0, places=9)

    def test_empty(self):
        self.assertEqual(construct_outlines([], gap=1.0), [])

    def test_overlapping_boxes_merge(self):
        loops = construct_outlines([Bounds(0, 10, 0, 10), Bounds(5, 15, 0, 10)], gap=0.0)
        self.assertEqual(len(loops), 1)
        self.assertAlmostEqual(Polygon(_ring(loops[0])).area, 150.0, places=6)

    def test_separate_boxes_give_separate_loops(self):
        loops = construct_outlines([Bounds(0, 1, 0, 1), Bounds(10, 11, 0, 1)], gap=1.0)
        self.assertEqual(len(loops), 2)
        for loop in loops:
            self.assertTrue(_ring(loop).is_ccw)
            self.assertAlmostEqual(Polygon(_ring(loop)).area, 9.0, places=6)

    def test_hole_is_clockwise(self):
        frame = [
            Bounds(0, 30, 0, 10), Bounds(0, 30, 20, 30),
            Bounds(0, 10, 0, 30), Bounds(20, 30, 0, 30),
        ]
        loops = construct_outlines(frame, gap=0.0)
        self.assertEqual(len(loops), 2)
        rings = sorted((_ring(loop) for loop in loops), key=lambda r: Polygon(r).area)
        self.assertFalse(rings[0].is_ccw)
        self.assertAlmostEqual(Polygon(rings[0]).area, 100.0, places=6)
        self.assertTrue(rings[1].is_ccw)
        self.assertAlmostEqual(Polygon(rings[1]).area, 900.0, places=6)
        segments = [s for loop in loops for s in loop]
        self.assertEqual(point_in_outline(Point(15, 15), segments), "outside")
        self.assertEqual(point_in_outline(Point(5, 5), segments), "inside")

    def test_narrow_slot_is_closed(self):
        loops = construct_outlines([Bounds(0, 10, 0, 10), Bounds(10.005, 20, 0, 10)], gap=0.0)
        self.assertEqual(len(loops), 1)
        self.assertEqual(len(loops[0]), 4)
