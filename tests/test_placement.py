"""Tests for pose helpers and the overlap check."""

from __future__ import annotations

import unittest

from padpack.geometry import Bounds, Point
from padpack.models import InputComponent, InputObstacle, InputPad
from padpack.packer import (
    boxes_conflict, check_overlap_with_packed_components, find_collision,
    is_placement_valid, violates_bounds,
)
from padpack.placement import (
    get_component_bounds, get_input_component_bounds, max_pad_half_size,
    place_component, recompute_pad_centers, snap_flush, to_input_component,
    transform_body_bounds,
)


def _component(cid="U1", body=None):
    return InputComponent(
        component_id=cid,
        pads=[
            InputPad("1", "VCC", Point(2, 0), Point(1, 3)),
            InputPad("2", "GND", Point(-2, 0), Point(1, 3)),
        ],
        body_bounds=body,
    )


def _single_pad(cid, size=2.0, body=None):
    return InputComponent(cid, [InputPad("1", "N", Point(0, 0), Point(size, size))], body_bounds=body)


class TestPlaceComponent(unittest.TestCase):

    def test_quarter_turns_swap_pad_size(self):
        comp = _component()
        for rotation in (90, 270):
            placed = place_component(comp, Point(10, 10), rotation)
            for pad, source in zip(placed.pads, comp.pads):
                self.assertEqual(pad.size, Point(source.size.y, source.size.x))
        placed = place_component(comp, Point(10, 10), 180)
        self.assertEqual(placed.pads[0].size, Point(1, 3))

    def test_absolute_centers_follow_rotation(self):
        comp = _component()
        self.assertEqual(place_component(comp, Point(10, 10), 0).pads[0].absolute_center, Point(12, 10))
        self.assertEqual(place_component(comp, Point(10, 10), 90).pads[0].absolute_center, Point(10, 12))
        self.assertEqual(place_component(comp, Point(10, 10), 180).pads[0].absolute_center, Point(8, 10))
        self.assertEqual(place_component(comp, Point(10, 10), 270).pads[0].absolute_center, Point(10, 8))

    def test_rotation_is_normalized(self):
        placed = place_component(_component(), Point(0, 0), -90)
        self.assertEqual(placed.ccw_rotation_offset, 270)
        self.assertEqual(placed.pads[0].absolute_center, Point(0, -2))

    def test_offset_is_kept_unrotated(self):
        placed = place_component(_component(), Point(0, 0), 90)
        self.assertEqual(placed.pads[0].offset, Point(2, 0))

    def test_recompute_and_strip_round_trip(self):
        comp = _component()
        placed = place_component(comp, Point(3, 4), 90)
        again = recompute_pad_centers(placed)
        self.assertEqual(again.pads, placed.pads)
        stripped = to_input_component(placed)
        self.assertEqual(stripped.pads, comp.pads)

    def test_body_bounds_rotate_with_component(self):
        body = Bounds(-3, 3, -1, 1)
        self.assertEqual(
            transform_body_bounds(body, Point(10, 10), 90), Bounds(9, 11, 7, 13),
        )
        placed = place_component(_component(body=body), Point(10, 10), 90)
        self.assertEqual(get_component_bounds(placed), Bounds(8.5, 11.5, 7, 13))

    def test_component_bounds(self):
        bounds = get_input_component_bounds(_component(), 0)
        self.assertEqual(bounds, Bounds(-2.5, 2.5, -1.5, 1.5))
        bounds = get_input_component_bounds(_component(), 90, margin=1)
        self.assertEqual(bounds, Bounds(-2.5, 2.5, -3.5, 3.5))
        self.assertEqual(max_pad_half_size(_component()), 1.5)

    def test_snap_flush(self):
        footprint = Bounds(-2, 2, -1, 1)
        self.assertEqual(snap_flush(Point(5, 0), Point(1, 0), footprint), Point(7, 0))
        self.assertEqual(snap_flush(Point(5, 0), Point(-1, 0), footprint), Point(3, 0))
        self.assertEqual(snap_flush(Point(0, 5), Point(0, 1), footprint), Point(0, 6))
        self.assertEqual(snap_flush(Point(0, 5), Point(0, -1), footprint), Point(0, 4))


class TestOverlap(unittest.TestCase):

    def test_boxes_conflict(self):
        a = Bounds(0, 1, 0, 1)
        self.assertTrue(boxes_conflict(a, Bounds(0.5, 2, 0.5, 2), 0))
        self.assertFalse(boxes_conflict(a, Bounds(1, 2, 0, 1), 0))
        self.assertFalse(boxes_conflict(a, Bounds(2, 3, 2, 3), 1))
        self.assertTrue(boxes_conflict(a, Bounds(2, 3, 2, 3), 1.5))

    def test_pad_gap(self):
        a = place_component(_single_pad("A"), Point(0, 0), 0)
        b = place_component(_single_pad("B"), Point(3, 0), 0)
        self.assertFalse(check_overlap_with_packed_components(b, [a], 1.0))
        self.assertTrue(check_overlap_with_packed_components(b, [a], 1.5))
        overlapping = place_component(_single_pad("C"), Point(1, 0), 0)
        self.assertEqual(find_collision(overlapping, [a], 0), "A")

    def test_body_bounds_collide_even_when_pads_clear(self):
        a = place_component(_single_pad("A", body=Bounds(-5, 5, -1, 1)), Point(0, 0), 0)
        b = place_component(_single_pad("B"), Point(5, 0), 0)
        self.assertEqual(find_collision(b, [a], 0), "A")
        rotated = place_component(_single_pad("A", body=Bounds(-5, 5, -1, 1)), Point(0, 0), 90)
        self.assertIsNone(find_collision(b, [rotated], 0))

    def test_component_does_not_collide_with_itself(self):
        a = place_component(_single_pad("A"), Point(0, 0), 0)
        self.assertIsNone(find_collision(a, [a], 1.0))

    def test_obstacles(self):
        obstacle = InputObstacle("hole", Point(4, 0), 2, 2)
        a = place_component(_single_pad("A"), Point(0, 0), 0)
        self.assertEqual(find_collision(a, [], 0.5, [obstacle]), None)
        self.assertEqual(find_collision(a, [], 2.5, [obstacle]), "hole")

    def test_bounds(self):
        a = place_component(_single_pad("A"), Point(0, 0), 0)
        self.assertFalse(violates_bounds(a, None))
        self.assertFalse(violates_bounds(a, Bounds(-1, 1, -1, 1)))
        self.assertTrue(violates_bounds(a, Bounds(-0.5, 1, -1, 1)))
        self.assertFalse(is_placement_valid(a, [], 0, bounds=Bounds(0, 10, 0, 10)))
        self.assertTrue(is_placement_valid(a, [], 0, bounds=Bounds(-5, 5, -5, 5)))
