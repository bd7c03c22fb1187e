"""Tests for the iterative-solver execution contract."""

from __future__ import annotations

import unittest

from padpack.solvers import BaseSolver, GraphicsObject, color_for_string


class CountingSolver(BaseSolver):
    """Solves after ``needed`` steps and counts its setups."""

    def __init__(self, needed: int = 3) -> None:
        super().__init__()
        self.needed = needed
        self.setup_calls = 0

    def _setup(self) -> None:
        self.setup_calls += 1

    def _step(self) -> None:
        if self.iterations >= self.needed:
            self.solved = True


class ExplodingSolver(BaseSolver):
    def _step(self) -> None:
        raise ValueError("boom")


class StuckSolver(BaseSolver):
    max_iterations = 5


class RescuedSolver(StuckSolver):
    def try_final_acceptance(self) -> None:
        self.solved = True


class TestLifecycle(unittest.TestCase):

    def test_setup_runs_once_lazily(self):
        solver = CountingSolver()
        self.assertEqual(solver.setup_calls, 0)
        solver.step()
        solver.step()
        self.assertEqual(solver.setup_calls, 1)

    def test_explicit_setup_is_idempotent(self):
        solver = CountingSolver()
        solver.setup()
        solver.setup()
        solver.solve()
        self.assertEqual(solver.setup_calls, 1)

    def test_solve_counts_iterations(self):
        solver = CountingSolver(needed=3)
        solver.solve()
        self.assertTrue(solver.solved)
        self.assertFalse(solver.failed)
        self.assertEqual(solver.iterations, 3)
        self.assertEqual(solver.progress, 1.0)
        self.assertIsNotNone(solver.time_to_solve)

    def test_step_after_solved_is_noop(self):
        solver = CountingSolver(needed=1)
        solver.solve()
        solver.step()
        solver.step()
        self.assertEqual(solver.iterations, 1)
        self.assertTrue(solver.solved)


class TestFailures(unittest.TestCase):

    def test_exception_is_recorded_and_reraised(self):
        solver = ExplodingSolver()
        with self.assertRaises(ValueError):
            solver.step()
        self.assertTrue(solver.failed)
        self.assertEqual(solver.error, "ExplodingSolver error: boom")

    def test_failed_solver_does_not_step_again(self):
        solver = ExplodingSolver()
        with self.assertRaises(ValueError):
            solver.step()
        solver.step()
        self.assertEqual(solver.iterations, 1)

    def test_ceiling_fails_with_message(self):
        solver = StuckSolver()
        solver.solve()
        self.assertTrue(solver.failed)
        self.assertEqual(solver.error, "StuckSolver ran out of iterations")
        self.assertEqual(solver.iterations, 6)

    def test_final_acceptance_rescues(self):
        solver = RescuedSolver()
        solver.solve()
        self.assertTrue(solver.solved)
        self.assertFalse(solver.failed)

    def test_fail_sets_terminal_state(self):
        solver = CountingSolver()
        solver.fail("nope")
        solver.step()
        self.assertTrue(solver.failed)
        self.assertEqual(solver.error, "nope")
        self.assertEqual(solver.iterations, 0)


class TestIntrospection(unittest.TestCase):

    def test_active_sub_solver_chain(self):
        parent, child, grandchild = CountingSolver(), CountingSolver(), CountingSolver()
        parent.active_sub_solver = child
        child.active_sub_solver = grandchild
        self.assertEqual(list(parent.iter_active_solvers()), [parent, child, grandchild])

    def test_default_visualize_is_empty(self):
        graphics = CountingSolver().visualize()
        self.assertIsInstance(graphics, GraphicsObject)
        self.assertEqual(graphics.to_dict()["lines"], [])

    def test_color_is_stable_per_id(self):
        self.assertEqual(color_for_string("GND"), color_for_string("GND"))
        self.assertTrue(color_for_string("VCC", 0.5).startswith("hsla("))
