"""Weiszfeld / IRLS optimizers for (squared) geometric-median problems.

Three variants share one weighted-centroid update:

* ``IrlsSolver`` moves a point towards a fixed set of targets.
* ``MultiOffsetIrlsSolver`` moves a *center*; each pad sits at a fixed
  offset from it and has its own targets.
* ``TwoPhaseIrlsSolver`` first minimises the squared sum, then re-targets
  only the closest (pad, target) pair and minimises that distance.

After every update a caller-supplied constraint maps the new position to
the nearest allowed one.  Convergence is declared when the constrained
position moves less than ``epsilon``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional, Sequence

from padpack.config import SOLVER_LIMITS
from padpack.geometry import Point

from .base import BaseSolver, GraphicsObject

ConstraintFn = Callable[[Point], Point]

PAD_COLORS = ("#4CAF50", "#2196F3", "#FF9800", "#9C27B0", "#F44336", "#607D8B")


@dataclass(frozen=True)
class OffsetPadPoint:
    """A pad rigidly attached to the optimized center."""

    pad_id: str
    offset: Point


def weiszfeld_update(
    terms: Iterable[tuple[Point, Point]],
    current: Point,
    *,
    squared: bool,
    epsilon: float,
) -> Point:
    """One weighted-centroid update.

    ``terms`` yields ``(offset, target)`` pairs; the center that would put
    the offset exactly on the target is ``target - offset``.  Weights are
    ``1/d`` (or 1 when ``squared``), with ``irls_close_weight`` used for
    pads already within ``epsilon`` of their target.
    """
    sum_x = sum_y = total = 0.0
    for offset, target in terms:
        pad_x = current.x + offset.x
        pad_y = current.y + offset.y
        if squared:
            weight = 1.0
        else:
            d = math.hypot(pad_x - target.x, pad_y - target.y)
            weight = SOLVER_LIMITS.irls_close_weight if d < epsilon else 1.0 / d
        sum_x += weight * (target.x - offset.x)
        sum_y += weight * (target.y - offset.y)
        total += weight
    if total <= 0:
        return current
    return Point(sum_x / total, sum_y / total)


class _IrlsBase(BaseSolver):
    """Shared state and convergence test of the single-stage optimizers."""

    def __init__(
        self,
        initial_position: Point,
        constraint_fn: Optional[ConstraintFn] = None,
        epsilon: float = SOLVER_LIMITS.irls_epsilon,
        max_iterations: int = SOLVER_LIMITS.irls_max_iterations,
        use_squared_distance: bool = False,
    ) -> None:
        super().__init__()
        self.initial_position = initial_position
        self.current_position = initial_position
        self.constraint_fn = constraint_fn
        self.epsilon = epsilon
        self.max_iterations = max_iterations
        self.use_squared_distance = use_squared_distance
        self.optimal_position: Optional[Point] = None

    def _terms(self) -> list[tuple[Point, Point]]:
        raise NotImplementedError

    def _setup(self) -> None:
        self.current_position = self.initial_position
        self.optimal_position = None
        if not self._terms():
            self.optimal_position = self.current_position
            self.solved = True

    def _step(self) -> None:
        current = self.current_position
        new_position = weiszfeld_update(
            self._terms(), current,
            squared=self.use_squared_distance, epsilon=self.epsilon,
        )
        if self.constraint_fn is not None:
            new_position = self.constraint_fn(new_position)

        if new_position.distance_to(current) < self.epsilon:
            self.optimal_position = new_position
            self.solved = True
            return
        self.current_position = new_position

    def get_best_position(self) -> Point:
        return self.optimal_position or self.current_position

    def get_total_distance(self, position: Optional[Point] = None) -> float:
        """Objective value at ``position`` (default: best position)."""
        pos = position or self.get_best_position()
        total = 0.0
        for offset, target in self._terms():
            dx = pos.x + offset.x - target.x
            dy = pos.y + offset.y - target.y
            total += dx * dx + dy * dy if self.use_squared_distance else math.hypot(dx, dy)
        return total

    def compute_progress(self) -> float:
        if self.solved:
            return 1.0
        initial = self.get_total_distance(self.initial_position)
        if initial == 0:
            return 1.0
        improvement = max(0.0, initial - self.get_total_distance())
        return min(1.0, improvement / initial)


class IrlsSolver(_IrlsBase):
    """Weiszfeld iteration towards a single set of target points."""

    def __init__(self, target_points: Sequence[Point], initial_position: Point, **kwargs) -> None:
        super().__init__(initial_position, **kwargs)
        self.target_points = list(target_points)

    def _terms(self) -> list[tuple[Point, Point]]:
        zero = Point(0.0, 0.0)
        return [(zero, t) for t in self.target_points]

    def visualize(self) -> GraphicsObject:
        graphics = GraphicsObject()
        pos = self.get_best_position()
        for t in self.target_points:
            graphics.points.append({"x": t.x, "y": t.y, "color": "#2196F3"})
            graphics.lines.append({
                "points": [{"x": pos.x, "y": pos.y}, {"x": t.x, "y": t.y}],
                "strokeColor": "rgba(33, 150, 243, 0.3)",
            })
        graphics.points.append({"x": self.current_position.x, "y": self.current_position.y, "color": "#f44336"})
        if self.optimal_position is not None:
            graphics.circles.append({
                "center": {"x": pos.x, "y": pos.y}, "radius": 0.5,
                "fill": "rgba(76, 175, 80, 0.3)",
            })
        return graphics


class MultiOffsetIrlsSolver(_IrlsBase):
    """Optimizes a center so its offset pads approach their own targets."""

    def __init__(
        self,
        offset_pad_points: Sequence[OffsetPadPoint],
        target_point_map: Mapping[str, Sequence[Point]],
        initial_position: Point,
        **kwargs,
    ) -> None:
        super().__init__(initial_position, **kwargs)
        self.offset_pad_points = list(offset_pad_points)
        self.target_point_map = {k: list(v) for k, v in target_point_map.items()}

    def _terms(self) -> list[tuple[Point, Point]]:
        return [
            (pad.offset, target)
            for pad in self.offset_pad_points
            for target in self.target_point_map.get(pad.pad_id, ())
        ]

    def get_offset_pad_positions(self) -> dict[str, Point]:
        pos = self.get_best_position()
        return {pad.pad_id: pos + pad.offset for pad in self.offset_pad_points}

    def visualize(self) -> GraphicsObject:
        graphics = GraphicsObject()
        pos = self.get_best_position()
        for i, pad in enumerate(self.offset_pad_points):
            color = PAD_COLORS[i % len(PAD_COLORS)]
            pad_pos = pos + pad.offset
            for t in self.target_point_map.get(pad.pad_id, ()):
                graphics.points.append({"x": t.x, "y": t.y, "color": color})
                graphics.lines.append({
                    "points": [{"x": pad_pos.x, "y": pad_pos.y}, {"x": t.x, "y": t.y}],
                    "strokeColor": color,
                })
            graphics.points.append({"x": pad_pos.x, "y": pad_pos.y, "color": color, "label": pad.pad_id})
        graphics.points.append({"x": self.current_position.x, "y": self.current_position.y, "color": "#f44336"})
        if self.optimal_position is not None:
            graphics.points.append({
                "x": self.optimal_position.x, "y": self.optimal_position.y,
                "color": "rgba(76, 175, 80, 0.3)",
            })
        return graphics


class TwoPhaseIrlsSolver(BaseSolver):
    """Squared-sum optimization followed by closest-connection optimization.

    Phase 1 is a squared ``MultiOffsetIrlsSolver`` over every target.
    Phase 2 keeps only the (pad, target) pair that is closest at the
    phase-1 optimum and minimises that single unsquared distance.  A
    failure in either phase fails this solver with ``"Phase N failed: ..."``.
    """

    def __init__(
        self,
        offset_pad_points: Sequence[OffsetPadPoint],
        target_point_map: Mapping[str, Sequence[Point]],
        initial_position: Point,
        constraint_fn: Optional[ConstraintFn] = None,
        epsilon: float = SOLVER_LIMITS.irls_epsilon,
        max_iterations: int = SOLVER_LIMITS.irls_max_iterations,
        phase1_epsilon: Optional[float] = None,
        phase2_epsilon: Optional[float] = None,
    ) -> None:
        super().__init__()
        self.offset_pad_points = list(offset_pad_points)
        self.target_point_map = {k: list(v) for k, v in target_point_map.items()}
        self.initial_position = initial_position
        self.current_position = initial_position
        self.constraint_fn = constraint_fn
        self.phase1_epsilon = epsilon if phase1_epsilon is None else phase1_epsilon
        self.phase2_epsilon = epsilon if phase2_epsilon is None else phase2_epsilon
        self.inner_max_iterations = max_iterations
        # each phase enforces its own ceiling
        self.max_iterations = 2 * max_iterations + 2

        self.optimal_position: Optional[Point] = None
        self.current_phase = 1
        self.phase1_position: Optional[Point] = None
        self.closest_pad_id: Optional[str] = None
        self.closest_target: Optional[Point] = None

    def _has_targets(self) -> bool:
        return bool(self.offset_pad_points) and any(
            self.target_point_map.get(pad.pad_id) for pad in self.offset_pad_points
        )

    def _setup(self) -> None:
        if not self._has_targets():
            self.optimal_position = self.initial_position
            self.solved = True
            return
        self.active_sub_solver = MultiOffsetIrlsSolver(
            self.offset_pad_points,
            self.target_point_map,
            self.initial_position,
            constraint_fn=self.constraint_fn,
            epsilon=self.phase1_epsilon,
            max_iterations=self.inner_max_iterations,
            use_squared_distance=True,
        )
        self.active_sub_solver.setup()

    def _step(self) -> None:
        phase = self.active_sub_solver
        if phase is None:
            return
        phase.step()
        self.current_position = phase.get_best_position()

        if phase.failed:
            self.fail(f"Phase {self.current_phase} failed: {phase.error}")
        elif phase.solved and self.current_phase == 1:
            self.phase1_position = phase.get_best_position()
            self._start_phase2()
        elif phase.solved:
            self.optimal_position = phase.get_best_position()
            self.solved = True

    def _start_phase2(self) -> None:
        start = self.phase1_position
        best = math.inf
        for pad in self.offset_pad_points:
            pad_pos = start + pad.offset
            for target in self.target_point_map.get(pad.pad_id, ()):
                d = pad_pos.distance_to(target)
                if d < best:
                    best = d
                    self.closest_pad_id = pad.pad_id
                    self.closest_target = target

        if self.closest_pad_id is None:
            self.optimal_position = start
            self.solved = True
            return

        self.current_phase = 2
        self.active_sub_solver = MultiOffsetIrlsSolver(
            self.offset_pad_points,
            {self.closest_pad_id: [self.closest_target]},
            start,
            constraint_fn=self.constraint_fn,
            epsilon=self.phase2_epsilon,
            max_iterations=self.inner_max_iterations,
            use_squared_distance=False,
        )
        self.active_sub_solver.setup()
        if self.active_sub_solver.solved:
            self.optimal_position = self.active_sub_solver.get_best_position()
            self.solved = True

    def get_best_position(self) -> Point:
        return self.optimal_position or self.current_position

    def get_offset_pad_positions(self) -> dict[str, Point]:
        pos = self.get_best_position()
        return {pad.pad_id: pos + pad.offset for pad in self.offset_pad_points}

    def get_total_distance(self, position: Optional[Point] = None) -> float:
        """Summed squared distance over every (pad, target) pair."""
        pos = position or self.get_best_position()
        total = 0.0
        for pad in self.offset_pad_points:
            pad_pos = pos + pad.offset
            for target in self.target_point_map.get(pad.pad_id, ()):
                dx = pad_pos.x - target.x
                dy = pad_pos.y - target.y
                total += dx * dx + dy * dy
        return total

    def visualize(self) -> GraphicsObject:
        graphics = GraphicsObject()
        graphics.points.append({
            "x": self.current_position.x, "y": self.current_position.y,
            "color": "#FF6B6B" if self.current_phase == 1 else "#4ECDC4",
            "label": f"Phase {self.current_phase}",
        })
        if self.phase1_position is not None and self.current_phase == 2:
            graphics.points.append({
                "x": self.phase1_position.x, "y": self.phase1_position.y,
                "color": "rgba(255, 107, 107, 0.5)", "label": "Phase 1 result",
            })
        if self.closest_target is not None:
            graphics.points.append({
                "x": self.closest_target.x, "y": self.closest_target.y,
                "color": "#FFA500", "label": f"Closest target ({self.closest_pad_id})",
            })
        if self.active_sub_solver is not None:
            graphics.extend(self.active_sub_solver.visualize())
        if self.optimal_position is not None:
            graphics.points.append({
                "x": self.optimal_position.x, "y": self.optimal_position.y,
                "color": "rgba(76, 175, 80, 0.8)", "label": "Final optimal position",
            })
        return graphics
