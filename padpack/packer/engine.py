"""Phased pack solver — places components one at a time.

Each component runs through the phases

    idle → show_candidate_points → show_rotations → show_final_placement → idle

``show_candidate_points`` builds the outline of everything placed so far,
collects outline points close to the component's networks and runs one
``OutlineSegmentCandidatePointSolver`` per (edge, rotation) per step.
``show_rotations`` evaluates one rotation per step: every candidate is
placed, overlap-checked and costed, the cheapest few are refined by a
local translation.  ``show_final_placement`` commits the winner.

Components sharing no network with anything placed skip straight to the
disconnected heuristic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from padpack.config import SOLVER_LIMITS
from padpack.geometry import (
    ORIGIN, OutlineRegion, Point, Segment, construct_outlines, get_outward_normal,
    normalize_rotation, rotate_point,
)
from padpack.models import (
    InputComponent, PackedComponent, PackError, PackInput, PackOutput,
    PackPlacementStrategy,
)
from padpack.placement import (
    component_boxes, first_pad_on_network, get_input_component_bounds,
    max_pad_half_size, place_component, snap_flush,
)
from padpack.solvers import BaseSolver, GraphicsObject, OutlineSegmentCandidatePointSolver

from .candidates import CandidateSet, connection_cost, find_candidate_points, shared_network_ids
from .disconnected import place_component_disconnected
from .graphics import draw_obstacles, draw_outlines, draw_packed_component
from .ordering import sort_component_queue
from .overlap import board_polygon, find_collision, violates_bounds, violates_bounds_outline
from .translation import refine_translation

log = logging.getLogger(__name__)


class PackingPhase(str, Enum):
    IDLE = "idle"
    SHOW_CANDIDATE_POINTS = "show_candidate_points"
    SHOW_ROTATIONS = "show_rotations"
    SHOW_FINAL_PLACEMENT = "show_final_placement"


@dataclass
class RotationTrial:
    """One evaluated pose of the component being packed."""

    rotation: float
    candidate: PackedComponent
    cost: float
    source: str
    rejected: Optional[str] = None


class PhasedPackSolver(BaseSolver):
    """Greedy incremental packer over a ``PackInput``.

    ``packed_components`` only ever grows by appending; candidate poses
    are fresh ``PackedComponent`` objects until one is committed.
    """

    def __init__(self, pack_input: PackInput) -> None:
        super().__init__()
        self.pack_input = pack_input
        self.squared = PackPlacementStrategy(
            pack_input.pack_placement_strategy
        ).uses_squared_distance

        self.phase = PackingPhase.IDLE
        self.unpacked_components: list[InputComponent] = []
        self.packed_components: list[PackedComponent] = []
        self.total_components = len(pack_input.components)

        self.current_component: Optional[InputComponent] = None
        self.outlines: list[list[Segment]] = []
        self.candidate_set: Optional[CandidateSet] = None
        self.segment_jobs: list[tuple[Segment, float]] = []
        self.segment_trials: list[RotationTrial] = []
        self.rotation_trials: list[RotationTrial] = []
        self.rejected_trials: list[RotationTrial] = []
        self.best_trial: Optional[RotationTrial] = None
        self._job_index = 0
        self._rotation_index = 0
        self._normals: dict[Segment, Point] = {}
        self._region: Optional[OutlineRegion] = None

    # ── lifecycle ──────────────────────────────────────────────────

    def _setup(self) -> None:
        self.unpacked_components = sort_component_queue(
            self.pack_input.components,
            self.pack_input.pack_order_strategy,
            self.pack_input.pack_first,
        )
        self.packed_components = []
        self.phase = PackingPhase.IDLE

    def _step(self) -> None:
        if self.phase is PackingPhase.IDLE:
            self._start_next_component()
        elif self.phase is PackingPhase.SHOW_CANDIDATE_POINTS:
            self._run_next_segment_job()
        elif self.phase is PackingPhase.SHOW_ROTATIONS:
            self._evaluate_next_rotation()
        elif self.phase is PackingPhase.SHOW_FINAL_PLACEMENT:
            self._commit()

    def compute_progress(self) -> float:
        if self.solved or self.total_components == 0:
            return 1.0
        return len(self.packed_components) / self.total_components

    def get_output(self) -> PackOutput:
        return PackOutput.from_input(self.pack_input, self.packed_components)

    # ── feasibility ────────────────────────────────────────────────

    def _rejection_reason(self, candidate: PackedComponent) -> Optional[str]:
        if violates_bounds(candidate, self.pack_input.bounds):
            return "outside bounds"
        if violates_bounds_outline(candidate, self.pack_input.bounds_outline, self.pack_input.min_gap):
            return "outside bounds outline"
        hit = find_collision(
            candidate, self.packed_components,
            self.pack_input.min_gap, self.pack_input.obstacles,
        )
        if hit is not None:
            return f"overlaps {hit}"
        return None

    # ── idle ───────────────────────────────────────────────────────

    def _reset_component_state(self) -> None:
        self.outlines = []
        self.candidate_set = None
        self.segment_jobs = []
        self.segment_trials = []
        self.rotation_trials = []
        self.rejected_trials = []
        self.best_trial = None
        self.active_sub_solver = None
        self._job_index = 0
        self._rotation_index = 0
        self._normals = {}
        self._region = None

    def _start_next_component(self) -> None:
        if not self.unpacked_components:
            self.solved = True
            return
        component = self.unpacked_components.pop(0)
        self.current_component = component
        self._reset_component_state()

        if not self.packed_components:
            placed = self._place_first(component)
            if placed is not None:
                self.best_trial = RotationTrial(placed.ccw_rotation_offset, placed, 0.0, "first")
                self._commit()
                return

        gap = self.pack_input.min_gap + max_pad_half_size(component)
        boxes = [b for c in self.packed_components for b in component_boxes(c)]
        boxes.extend(o.bounds for o in self.pack_input.obstacles)
        self.outlines = construct_outlines(boxes, gap)

        if not shared_network_ids(component, self.packed_components):
            self._place_disconnected()
            return

        self.candidate_set = find_candidate_points(
            self.outlines, component, self.packed_components,
            self.pack_input.pack_placement_strategy,
        )
        self.segment_jobs = [
            (seg, rotation)
            for loop in self.outlines
            for seg in loop
            for rotation in component.rotations
        ]
        log.debug(
            "%s: %d good candidate point(s), %d segment job(s)",
            component.component_id, len(self.candidate_set.good_candidates),
            len(self.segment_jobs),
        )
        self.phase = PackingPhase.SHOW_CANDIDATE_POINTS

    def _place_first(self, component: InputComponent) -> Optional[PackedComponent]:
        """Origin with the first rotation, else the center of the bounds or board."""
        rotation = component.rotations[0]
        centers = [ORIGIN]
        if self.pack_input.bounds is not None:
            centers.append(self.pack_input.bounds.center)
        if self.pack_input.bounds_outline and len(self.pack_input.bounds_outline) >= 3:
            inner = board_polygon(self.pack_input.bounds_outline).representative_point()
            centers.append(Point(inner.x, inner.y))
        for center in centers:
            placed = place_component(component, center, rotation)
            if self._rejection_reason(placed) is None:
                return placed
        return None

    def _place_disconnected(self) -> None:
        component = self.current_component
        placed = place_component_disconnected(
            component, self.packed_components, self.outlines,
            direction=self.pack_input.disconnected_pack_direction,
            min_gap=self.pack_input.min_gap,
            obstacles=self.pack_input.obstacles,
            bounds=self.pack_input.bounds,
            bounds_outline=self.pack_input.bounds_outline,
        )
        if placed is None:
            self.fail(f"No valid candidates found for component {component.component_id}")
            return
        self.best_trial = RotationTrial(
            placed.ccw_rotation_offset, placed,
            connection_cost(placed, self.packed_components, self.squared), "disconnected",
        )
        self.phase = PackingPhase.SHOW_FINAL_PLACEMENT

    # ── show_candidate_points ──────────────────────────────────────

    def _run_next_segment_job(self) -> None:
        if self._job_index >= len(self.segment_jobs):
            self.active_sub_solver = None
            self.phase = PackingPhase.SHOW_ROTATIONS
            return

        segment, rotation = self.segment_jobs[self._job_index]
        self._job_index += 1
        full_outline = [seg for loop in self.outlines for seg in loop]
        solver = OutlineSegmentCandidatePointSolver(
            outline_segment=segment,
            full_outline=full_outline,
            component_rotation_degrees=rotation,
            pack_strategy=self.pack_input.pack_placement_strategy,
            min_gap=self.pack_input.min_gap,
            packed_components=self.packed_components,
            component_to_pack=self.current_component,
            obstacles=self.pack_input.obstacles,
            global_bounds=self.pack_input.bounds,
            bounds_outline=self.pack_input.bounds_outline,
        )
        self.active_sub_solver = solver
        solver.solve()

        if solver.failed:
            log.debug("Segment solver rejected rot=%g: %s", rotation, solver.error)
            return
        candidate = solver.get_candidate()
        if candidate is not None:
            self.segment_trials.append(RotationTrial(
                candidate.ccw_rotation_offset, candidate,
                connection_cost(candidate, self.packed_components, self.squared),
                "segment_solver",
            ))

    # ── show_rotations ─────────────────────────────────────────────

    def _outward_normal(self, segment: Segment) -> Point:
        if segment not in self._normals:
            if self._region is None:
                self._region = OutlineRegion([seg for loop in self.outlines for seg in loop])
            self._normals[segment] = get_outward_normal(segment, self._region)
        return self._normals[segment]

    def _point_trials(self, rotation: float) -> list[tuple[PackedComponent, str]]:
        """Poses anchored on the good candidate points for one rotation."""
        component = self.current_component
        footprint = get_input_component_bounds(component, rotation)
        poses: list[tuple[PackedComponent, str]] = []
        for cand in self.candidate_set.good_candidates:
            centers: list[tuple[Point, str]] = []
            pad = first_pad_on_network(component, cand.network_id)
            if pad is not None:
                centers.append((cand.point - rotate_point(pad.offset, rotation), "pad_anchor"))
            centers.append((cand.point, "center_anchor"))
            if cand.segment is not None and cand.segment.length > 0:
                normal = self._outward_normal(cand.segment)
                centers.extend(
                    (snap_flush(center, normal, footprint), f"{source}_flush")
                    for center, source in list(centers)
                )
            for center, source in centers:
                poses.append((place_component(component, center, rotation), source))
        return poses

    def _evaluate_next_rotation(self) -> None:
        rotations = self.current_component.rotations
        if self._rotation_index >= len(rotations):
            self._choose_best()
            return
        rotation = rotations[self._rotation_index]
        self._rotation_index += 1
        normalized = normalize_rotation(rotation)

        poses = self._point_trials(rotation)
        poses.extend(
            (t.candidate, t.source) for t in self.segment_trials
            if t.rotation == normalized
        )

        feasible: list[RotationTrial] = []
        for candidate, source in poses:
            reason = self._rejection_reason(candidate)
            if reason is not None:
                self.rejected_trials.append(RotationTrial(normalized, candidate, float("inf"), source, reason))
                continue
            cost = connection_cost(candidate, self.packed_components, self.squared)
            feasible.append(RotationTrial(normalized, candidate, cost, source))
        feasible.sort(key=lambda t: t.cost)

        for trial in feasible[:SOLVER_LIMITS.refine_top_k]:
            refined, cost = refine_translation(
                trial.candidate, self.current_component, self.packed_components,
                min_gap=self.pack_input.min_gap,
                obstacles=self.pack_input.obstacles,
                bounds=self.pack_input.bounds,
                bounds_outline=self.pack_input.bounds_outline,
                squared=self.squared,
            )
            if cost < trial.cost:
                feasible.append(RotationTrial(normalized, refined, cost, f"{trial.source}_refined"))

        log.debug(
            "%s rot=%g: %d feasible, %d rejected so far",
            self.current_component.component_id, normalized,
            len(feasible), len(self.rejected_trials),
        )
        self.rotation_trials.extend(feasible)

    def _choose_best(self) -> None:
        if self.rotation_trials:
            self.best_trial = min(self.rotation_trials, key=lambda t: t.cost)
            self.phase = PackingPhase.SHOW_FINAL_PLACEMENT
            return
        log.debug(
            "No connected candidate for %s; trying the disconnected heuristic",
            self.current_component.component_id,
        )
        self._place_disconnected()

    # ── show_final_placement ───────────────────────────────────────

    def _commit(self) -> None:
        trial = self.best_trial
        placed = trial.candidate
        self.packed_components.append(placed)
        log.info(
            "Packed %s at (%.3f, %.3f) rot=%g° cost=%.3f",
            placed.component_id, placed.center.x, placed.center.y,
            placed.ccw_rotation_offset, trial.cost,
        )
        self.active_sub_solver = None
        self.phase = PackingPhase.IDLE

    # ── diagnostics ────────────────────────────────────────────────

    def visualize(self) -> GraphicsObject:
        graphics = GraphicsObject()
        draw_obstacles(self.pack_input.obstacles, graphics)
        for component in self.packed_components:
            draw_packed_component(component, graphics)
        draw_outlines(self.outlines, graphics)

        if self.phase is PackingPhase.SHOW_CANDIDATE_POINTS:
            if self.candidate_set is not None:
                for cand in self.candidate_set.candidate_points:
                    graphics.points.append({
                        "x": cand.point.x, "y": cand.point.y,
                        "label": f"{cand.network_id} d={cand.distance:.3f}",
                        "color": "rgba(0,0,255,0.3)",
                    })
                for cand in self.candidate_set.good_candidates:
                    graphics.circles.append({
                        "center": {"x": cand.point.x, "y": cand.point.y},
                        "radius": 0.5, "fill": "rgba(0,200,0,0.6)",
                    })
            if self.active_sub_solver is not None:
                graphics.extend(self.active_sub_solver.visualize())
        elif self.phase is PackingPhase.SHOW_ROTATIONS:
            for trial in self.rotation_trials:
                graphics.points.append({
                    "x": trial.candidate.center.x, "y": trial.candidate.center.y,
                    "label": f"rot={trial.rotation:g} cost={trial.cost:.3f} ({trial.source})",
                    "color": "rgba(0,150,0,0.8)",
                })
            for trial in self.rejected_trials:
                graphics.points.append({
                    "x": trial.candidate.center.x, "y": trial.candidate.center.y,
                    "label": f"rot={trial.rotation:g} {trial.rejected}",
                    "color": "rgba(255,0,0,0.5)",
                })
        elif self.phase is PackingPhase.SHOW_FINAL_PLACEMENT and self.best_trial is not None:
            draw_packed_component(self.best_trial.candidate, graphics)
            graphics.texts.append({
                "x": self.best_trial.candidate.center.x,
                "y": self.best_trial.candidate.center.y,
                "text": f"cost={self.best_trial.cost:.3f}",
            })
        return graphics


def pack(pack_input: PackInput) -> PackOutput:
    """Pack every component of ``pack_input``.

    Raises
    ------
    PackError
        When some component has no feasible placement or the solver runs
        out of iterations.
    """
    solver = PhasedPackSolver(pack_input)
    solver.solve()
    if solver.failed:
        component_id = solver.current_component.component_id if solver.current_component else None
        log.warning("Packing stopped after %d component(s): %s",
                    len(solver.packed_components), solver.error)
        raise PackError(component_id, solver.error or "packing failed")
    return solver.get_output()
