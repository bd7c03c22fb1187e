"""Candidate points along the outline and connection costs.

For every outline edge and every network shared with the placed
components, find the best point on the edge:

* ``shortest_connection_along_outline`` takes the edge point nearest to
  any pad rectangle of the network;
* the sum strategies run a ternary search for the point minimising the
  summed (or squared) distance to the network's placed pads.

A fixed-step sample along every edge backs the search up.  Points whose
distance is within ``candidate_band`` of the best are kept, as is the
best point of each edge.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from padpack.config import SOLVER_LIMITS
from padpack.geometry import (
    Point, Segment, nearest_point_on_segment_for_segment_set,
)
from padpack.geometry.primitives import point_segment_distance
from padpack.models import InputComponent, OutputPad, PackedComponent, PackPlacementStrategy


@dataclass(frozen=True)
class CandidatePoint:
    point: Point
    network_id: str
    distance: float
    segment: Optional[Segment] = None


@dataclass
class CandidateSet:
    """Everything evaluated plus the points worth trying."""

    candidate_points: list[CandidatePoint] = field(default_factory=list)
    good_candidates: list[CandidatePoint] = field(default_factory=list)
    best_distance: float = math.inf

    def consider(self, cand: CandidatePoint) -> None:
        band = SOLVER_LIMITS.candidate_band
        self.candidate_points.append(cand)
        if cand.distance < self.best_distance - band:
            self.good_candidates = [cand]
            self.best_distance = cand.distance
        elif cand.distance <= self.best_distance + band:
            self.good_candidates.append(cand)

    def include(self, cand: CandidatePoint) -> None:
        """Add ``cand`` to the good candidates unless already there."""
        band = SOLVER_LIMITS.candidate_band
        for gc in self.good_candidates:
            if (
                gc.network_id == cand.network_id
                and abs(gc.point.x - cand.point.x) < band
                and abs(gc.point.y - cand.point.y) < band
            ):
                return
        self.good_candidates.append(cand)


# ── network helpers ────────────────────────────────────────────────


def shared_network_ids(
    component: InputComponent, packed_components: Sequence[PackedComponent],
) -> list[str]:
    """Networks of ``component`` that already have a placed pad, in pad order."""
    placed = {pad.network_id for comp in packed_components for pad in comp.pads}
    shared: list[str] = []
    for pad in component.pads:
        if pad.network_id in placed and pad.network_id not in shared:
            shared.append(pad.network_id)
    return shared


def network_pads(
    packed_components: Sequence[PackedComponent], network_id: str,
) -> list[OutputPad]:
    return [
        pad for comp in packed_components for pad in comp.pads
        if pad.network_id == network_id
    ]


def get_segments_from_pad(pad: OutputPad, padding: float = 0.0) -> list[Segment]:
    """The four edges of a pad rectangle, optionally grown by ``padding``."""
    b = pad.bounds.inflate(padding)
    bl, br, tr, tl = b.corners()
    return [Segment(bl, br), Segment(br, tr), Segment(tr, tl), Segment(tl, bl)]


# ── costs ──────────────────────────────────────────────────────────


def compute_sum_distance_for_position(
    position: Point, targets: Sequence[Point], squared: bool = False,
) -> float:
    """Summed (or squared) distance from ``position`` to every target."""
    total = 0.0
    for t in targets:
        dx = position.x - t.x
        dy = position.y - t.y
        total += dx * dx + dy * dy if squared else math.hypot(dx, dy)
    return total


def connection_cost(
    candidate: PackedComponent,
    packed_components: Sequence[PackedComponent],
    squared: bool = False,
) -> float:
    """Sum over pads of the distance to the nearest same-network placed pad.

    Pads whose network has nothing placed yet contribute nothing.
    """
    by_network: dict[str, list[Point]] = {}
    for comp in packed_components:
        for pad in comp.pads:
            by_network.setdefault(pad.network_id, []).append(pad.absolute_center)

    cost = 0.0
    for pad in candidate.pads:
        targets = by_network.get(pad.network_id)
        if not targets:
            continue
        nearest = min(pad.absolute_center.distance_to(t) for t in targets)
        cost += nearest * nearest if squared else nearest
    return cost


# ── per-segment search ─────────────────────────────────────────────


def find_optimal_point_on_segment(
    segment: Segment,
    targets: Sequence[Point],
    squared: bool = False,
) -> tuple[Point, float, list[tuple[Point, float]]]:
    """Ternary search along ``segment`` for the minimum summed distance.

    Returns the optimum, its distance and every evaluated (point,
    distance) pair for diagnostics.
    """
    evaluated: list[tuple[Point, float]] = []

    def evaluate(t: float) -> float:
        p = segment.point_at(t)
        d = compute_sum_distance_for_position(p, targets, squared)
        evaluated.append((p, d))
        return d

    left, right = 0.0, 1.0
    for _ in range(SOLVER_LIMITS.ternary_max_iterations):
        if right - left <= SOLVER_LIMITS.ternary_tolerance:
            break
        third = (right - left) / 3
        if evaluate(left + third) > evaluate(right - third):
            left = left + third
        else:
            right = right - third

    best = segment.point_at((left + right) / 2)
    best_distance = compute_sum_distance_for_position(best, targets, squared)
    evaluated.append((best, best_distance))
    return best, best_distance, evaluated


def _distance_to_segments(p: Point, segments: Sequence[Segment]) -> float:
    return min(point_segment_distance(p, s) for s in segments)


def find_candidate_points(
    outlines: Sequence[Sequence[Segment]],
    component: InputComponent,
    packed_components: Sequence[PackedComponent],
    strategy: PackPlacementStrategy,
) -> CandidateSet:
    """Best outline points for each network ``component`` shares."""
    strategy = PackPlacementStrategy(strategy)
    result = CandidateSet()
    networks = shared_network_ids(component, packed_components)
    use_sum = strategy in (
        PackPlacementStrategy.MINIMUM_SUM_DISTANCE_TO_NETWORK,
        PackPlacementStrategy.MINIMUM_SUM_SQUARED_DISTANCE_TO_NETWORK,
    )
    squared = strategy is PackPlacementStrategy.MINIMUM_SUM_SQUARED_DISTANCE_TO_NETWORK

    targets = {
        nid: [pad.absolute_center for pad in network_pads(packed_components, nid)]
        for nid in networks
    }
    pad_segments = {
        nid: [s for pad in network_pads(packed_components, nid) for s in get_segments_from_pad(pad)]
        for nid in networks
    }

    def measure(p: Point, nid: str) -> float:
        if use_sum:
            return compute_sum_distance_for_position(p, targets[nid], squared)
        return _distance_to_segments(p, pad_segments[nid])

    segment_best: list[CandidatePoint] = []
    for loop in outlines:
        for segment in loop:
            best_here: CandidatePoint | None = None
            for nid in networks:
                if use_sum:
                    point, distance, _ = find_optimal_point_on_segment(segment, targets[nid], squared)
                else:
                    point = nearest_point_on_segment_for_segment_set(segment, pad_segments[nid])
                    distance = _distance_to_segments(point, pad_segments[nid])
                cand = CandidatePoint(point, nid, distance, segment)
                result.consider(cand)
                if best_here is None or distance < best_here.distance:
                    best_here = cand

                for t in SOLVER_LIMITS.sample_fractions:
                    p = segment.point_at(t)
                    sample = CandidatePoint(p, nid, measure(p, nid), segment)
                    result.consider(sample)
                    if sample.distance < best_here.distance:
                        best_here = sample
            if best_here is not None:
                segment_best.append(best_here)

    for cand in segment_best:
        result.include(cand)
    return result
