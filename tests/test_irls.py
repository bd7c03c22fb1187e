"""Tests for the Weiszfeld / IRLS optimizers."""

from __future__ import annotations

import unittest

from padpack.geometry import Point
from padpack.solvers import (
    IrlsSolver, MultiOffsetIrlsSolver, OffsetPadPoint, TwoPhaseIrlsSolver, weiszfeld_update,
)


class TestWeiszfeldUpdate(unittest.TestCase):

    def test_squared_update_is_centroid(self):
        terms = [(Point(0, 0), Point(0, 0)), (Point(0, 0), Point(6, 0)), (Point(0, 0), Point(0, 3))]
        p = weiszfeld_update(terms, Point(10, 10), squared=True, epsilon=1e-6)
        self.assertAlmostEqual(p.x, 2.0)
        self.assertAlmostEqual(p.y, 1.0)

    def test_offset_is_subtracted(self):
        terms = [(Point(1, 0), Point(5, 5))]
        p = weiszfeld_update(terms, Point(0, 0), squared=False, epsilon=1e-6)
        self.assertAlmostEqual(p.x, 4.0)
        self.assertAlmostEqual(p.y, 5.0)


class TestIrlsSolver(unittest.TestCase):

    def test_zero_targets_stay_at_initial_position(self):
        solver = IrlsSolver([], Point(3, 4))
        solver.solve()
        self.assertTrue(solver.solved)
        self.assertEqual(solver.get_best_position(), Point(3, 4))
        self.assertEqual(solver.iterations, 0)

    def test_squared_converges_to_centroid(self):
        targets = [Point(0, 0), Point(10, 0), Point(0, 10)]
        solver = IrlsSolver(targets, Point(50, 50), use_squared_distance=True)
        solver.solve()
        best = solver.get_best_position()
        self.assertTrue(solver.solved)
        self.assertAlmostEqual(best.x, 10 / 3, places=6)
        self.assertAlmostEqual(best.y, 10 / 3, places=6)

    def test_unsquared_equal_pull_lands_between_targets(self):
        solver = IrlsSolver([Point(0, 0), Point(10, 0)], Point(5, 5))
        solver.solve()
        best = solver.get_best_position()
        self.assertTrue(solver.solved)
        self.assertAlmostEqual(best.x, 5.0)
        self.assertAlmostEqual(best.y, 0.0)

    def test_constraint_applied_after_each_update(self):
        solver = IrlsSolver(
            [Point(100, 100)], Point(0, 0),
            constraint_fn=lambda p: Point(min(p.x, 50.0), p.y),
        )
        solver.solve()
        best = solver.get_best_position()
        self.assertAlmostEqual(best.x, 50.0)
        self.assertAlmostEqual(best.y, 100.0)

    def test_ceiling_is_a_failure(self):
        # the constraint keeps flipping the position, so it never settles
        flip = {"sign": 1.0}

        def bounce(p: Point) -> Point:
            flip["sign"] *= -1
            return Point(flip["sign"], 0.0)

        solver = IrlsSolver([Point(5, 5)], Point(0, 0), constraint_fn=bounce, max_iterations=10)
        solver.solve()
        self.assertTrue(solver.failed)
        self.assertIn("ran out of iterations", solver.error)


class TestMultiOffsetIrlsSolver(unittest.TestCase):

    def test_single_target_convergence(self):
        solver = MultiOffsetIrlsSolver(
            [OffsetPadPoint("p1", Point(0, 0))],
            {"p1": [Point(100, 100)]},
            Point(0, 0),
        )
        solver.solve()
        best = solver.get_best_position()
        self.assertTrue(solver.solved)
        self.assertAlmostEqual(best.x, 100.0, delta=1e-3)
        self.assertAlmostEqual(best.y, 100.0, delta=1e-3)

    def test_offsets_pull_center(self):
        solver = MultiOffsetIrlsSolver(
            [OffsetPadPoint("a", Point(-1, 0)), OffsetPadPoint("b", Point(1, 0))],
            {"a": [Point(9, 0)], "b": [Point(11, 0)]},
            Point(0, 0),
            use_squared_distance=True,
        )
        solver.solve()
        best = solver.get_best_position()
        self.assertAlmostEqual(best.x, 10.0, places=6)
        self.assertAlmostEqual(best.y, 0.0, places=6)
        self.assertAlmostEqual(solver.get_total_distance(), 0.0, places=6)
        pads = solver.get_offset_pad_positions()
        self.assertAlmostEqual(pads["a"].x, 9.0, places=6)

    def test_step_after_solved_keeps_state(self):
        solver = MultiOffsetIrlsSolver(
            [OffsetPadPoint("p1", Point(0, 0))], {"p1": [Point(1, 1)]}, Point(0, 0),
        )
        solver.solve()
        iterations = solver.iterations
        best = solver.get_best_position()
        solver.step()
        self.assertEqual(solver.iterations, iterations)
        self.assertEqual(solver.get_best_position(), best)


class TestTwoPhaseIrlsSolver(unittest.TestCase):

    def test_second_phase_targets_closest_point(self):
        solver = TwoPhaseIrlsSolver(
            [OffsetPadPoint("p", Point(0, 0))],
            {"p": [Point(0, 0), Point(10, 0), Point(10, 2)]},
            Point(0, 0),
        )
        solver.solve()
        self.assertTrue(solver.solved)
        self.assertEqual(solver.closest_target, Point(10, 0))
        best = solver.get_best_position()
        self.assertAlmostEqual(best.x, 10.0, places=4)
        self.assertAlmostEqual(best.y, 0.0, places=4)
        self.assertIsNotNone(solver.phase1_position)
        self.assertAlmostEqual(solver.phase1_position.x, 20 / 3, places=4)

    def test_no_targets_is_solved_at_initial(self):
        solver = TwoPhaseIrlsSolver([OffsetPadPoint("p", Point(0, 0))], {}, Point(2, 2))
        solver.solve()
        self.assertTrue(solver.solved)
        self.assertEqual(solver.get_best_position(), Point(2, 2))
