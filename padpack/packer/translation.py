"""Bounded local translation of a feasible candidate.

Each round pairs every pad with its nearest same-network placed pad,
solves for the center that minimises those connections inside a box
around the starting center, and walks towards that center with a
halving step until a feasible position with a lower cost turns up.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from padpack.config import SOLVER_LIMITS
from padpack.geometry import Bounds, Point, clamp_point_to_bounds
from padpack.models import InputComponent, InputObstacle, PackedComponent
from padpack.placement import place_component
from padpack.solvers import MultiOffsetIrlsSolver, OffsetPadPoint

from .candidates import connection_cost
from .overlap import is_placement_valid

log = logging.getLogger(__name__)

STEP_SCALES = (1.0, 0.5, 0.25, 0.125, 0.0625)
MIN_IMPROVEMENT = 1e-9


def _nearest_targets(
    candidate: PackedComponent, packed_components: Sequence[PackedComponent],
) -> tuple[list[OffsetPadPoint], dict[str, list[Point]]]:
    by_network: dict[str, list[Point]] = {}
    for comp in packed_components:
        for pad in comp.pads:
            by_network.setdefault(pad.network_id, []).append(pad.absolute_center)

    offsets: list[OffsetPadPoint] = []
    targets: dict[str, list[Point]] = {}
    for i, pad in enumerate(candidate.pads):
        pool = by_network.get(pad.network_id)
        if not pool:
            continue
        key = str(i)
        offsets.append(OffsetPadPoint(key, pad.absolute_center - candidate.center))
        targets[key] = [min(pool, key=pad.absolute_center.distance_to)]
    return offsets, targets


def refine_translation(
    candidate: PackedComponent,
    component: InputComponent,
    packed_components: Sequence[PackedComponent],
    *,
    min_gap: float = 0.0,
    obstacles: Sequence[InputObstacle] = (),
    bounds: Optional[Bounds] = None,
    bounds_outline: Optional[Sequence[Point]] = None,
    squared: bool = False,
) -> tuple[PackedComponent, float]:
    """Nudge a feasible ``candidate`` to lower its connection cost.

    Parameters
    ----------
    candidate : PackedComponent
        Feasible starting pose.  Its rotation is kept.
    component : InputComponent
        The unplaced component ``candidate`` was built from.
    packed_components : sequence of PackedComponent
    min_gap, obstacles, bounds, bounds_outline
        Feasibility rules, as for the pack solver.
    squared : bool
        Use squared distances in both the optimizer and the cost.

    Returns
    -------
    (PackedComponent, float)
        The best feasible pose found and its cost.  Never worse than
        ``candidate``.
    """
    radius = SOLVER_LIMITS.translation_radius
    box = Bounds.around(candidate.center, 2 * radius, 2 * radius)
    rotation = candidate.ccw_rotation_offset

    best = candidate
    best_cost = connection_cost(best, packed_components, squared)

    for round_no in range(SOLVER_LIMITS.translation_max_rounds):
        offsets, targets = _nearest_targets(best, packed_components)
        if not offsets:
            break

        solver = MultiOffsetIrlsSolver(
            offsets, targets,
            initial_position=best.center,
            constraint_fn=lambda p: clamp_point_to_bounds(p, box),
            use_squared_distance=squared,
        )
        solver.solve()
        goal = solver.get_best_position()

        accepted = False
        for scale in STEP_SCALES:
            position = best.center + (goal - best.center).scale(scale)
            trial = place_component(component, position, rotation)
            if not is_placement_valid(
                trial, packed_components, min_gap, obstacles, bounds, bounds_outline,
            ):
                continue
            cost = connection_cost(trial, packed_components, squared)
            if cost < best_cost - MIN_IMPROVEMENT:
                best, best_cost = trial, cost
                accepted = True
                break
        if not accepted:
            log.debug(
                "Translation of %s settled after %d round(s), cost %.3f",
                component.component_id, round_no, best_cost,
            )
            break

    return best, best_cost
