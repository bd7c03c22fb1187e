"""Tests for the bounded local translation of a feasible candidate."""

from __future__ import annotations

import unittest

from padpack.config import SOLVER_LIMITS
from padpack.geometry import Point
from padpack.models import InputComponent, InputObstacle, InputPad
from padpack.packer import (
    connection_cost, find_collision, is_placement_valid, refine_translation,
    violates_bounds_outline,
)
from padpack.placement import place_component


def _single(cid, net="N", size=2.0):
    return InputComponent(cid, [InputPad("1", net, Point(0, 0), Point(size, size))])


class TestRefineTranslation(unittest.TestCase):

    def setUp(self):
        self.anchor = place_component(_single("A"), Point(0, 0), 0)
        self.component = _single("B")

    def _start(self, x, rotation=0):
        return place_component(self.component, Point(x, 0), rotation)

    def test_moves_up_to_min_gap_and_lowers_cost(self):
        start = self._start(8)
        refined, cost = refine_translation(start, self.component, [self.anchor], min_gap=1.0)
        self.assertLess(cost, 8.0)
        self.assertAlmostEqual(refined.center.x, 3.0, places=3)
        self.assertAlmostEqual(refined.center.y, 0.0, places=6)
        self.assertAlmostEqual(cost, connection_cost(refined, [self.anchor]))
        self.assertTrue(is_placement_valid(refined, [self.anchor], 1.0))

    def test_keeps_rotation(self):
        start = self._start(8, rotation=90)
        refined, _ = refine_translation(start, self.component, [self.anchor], min_gap=1.0)
        self.assertEqual(refined.ccw_rotation_offset, start.ccw_rotation_offset)

    def test_stays_inside_translation_radius(self):
        start = self._start(50)
        refined, cost = refine_translation(start, self.component, [self.anchor], min_gap=1.0)
        radius = SOLVER_LIMITS.translation_radius
        self.assertLessEqual(refined.center.distance_to(start.center), radius + 1e-6)
        self.assertAlmostEqual(refined.center.x, 50.0 - radius, places=3)
        self.assertLess(cost, 50.0)

    def test_never_steps_onto_an_obstacle(self):
        wall = [InputObstacle("W", Point(4, 0), 2, 2)]
        start = self._start(8)
        refined, cost = refine_translation(
            start, self.component, [self.anchor], min_gap=1.0, obstacles=wall,
        )
        self.assertIsNone(find_collision(refined, [self.anchor], 1.0, wall))
        self.assertAlmostEqual(refined.center.x, 7.0, places=3)
        self.assertLess(cost, 8.0)

    def test_stays_inside_board_outline(self):
        board = [Point(5, -5), Point(20, -5), Point(20, 5), Point(5, 5)]
        start = self._start(8)
        refined, _ = refine_translation(
            start, self.component, [self.anchor], min_gap=1.0, bounds_outline=board,
        )
        self.assertFalse(violates_bounds_outline(refined, board, 1.0))
        self.assertAlmostEqual(refined.center.x, 7.0, places=3)

    def test_never_worse_than_start(self):
        # already as close as min_gap allows
        start = self._start(3)
        refined, cost = refine_translation(start, self.component, [self.anchor], min_gap=1.0)
        self.assertLessEqual(cost, connection_cost(start, [self.anchor]))
        self.assertIs(refined, start)

    def test_no_shared_network_returns_candidate(self):
        stranger = _single("C", net="OTHER")
        start = place_component(stranger, Point(8, 0), 0)
        refined, cost = refine_translation(start, stranger, [self.anchor], min_gap=1.0)
        self.assertIs(refined, start)
        self.assertEqual(cost, 0.0)
