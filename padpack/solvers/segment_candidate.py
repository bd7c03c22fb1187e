"""Best position for one rotation of a component along one outline edge.

The free space next to the edge is bounded with the largest-rectangle
solver; the component may slide along the (extended) edge only as far
as that rectangle allows.  An IRLS optimizer then pulls the component
towards the already-placed pads of its networks, while a constraint
keeps it on the edge and flush against the outline.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from padpack.config import SOLVER_LIMITS
from padpack.geometry import (
    Bounds, Point, Segment,
    clamp_point_to_bounds, expand_segment, get_outward_normal, outline_bounds,
    project_point_on_segment, rotate_point,
)
from padpack.models import (
    InputComponent, InputObstacle, PackedComponent, PackPlacementStrategy,
)
from padpack.placement import get_input_component_bounds, place_component, snap_flush

from .base import BaseSolver, GraphicsObject, color_for_string, draw_segment
from .irls import MultiOffsetIrlsSolver, OffsetPadPoint, TwoPhaseIrlsSolver
from .largest_rect import Rect, largest_rect_outside

log = logging.getLogger(__name__)

NOWHERE_TO_FIT = "There is nowhere for the component to fit along this outline section"


def _sign(v: float, tol: float = SOLVER_LIMITS.coordinate_tolerance) -> int:
    return (v > tol) - (v < -tol)


class OutlineSegmentCandidatePointSolver(BaseSolver):
    """Candidate center for ``component_to_pack`` against one outline edge.

    Parameters
    ----------
    outline_segment : Segment
        Edge of the packed-components outline to place against.
    full_outline : sequence of Segment
        Every edge of the outline (all loops), used to find the free side
        of the edge and to bound the free rectangle.
    component_rotation_degrees : float
        Rotation under evaluation.
    pack_strategy : PackPlacementStrategy
        Selects the optimizer: two-phase for the closest-connection
        strategy, squared multi-offset for the squared-sum strategy,
        unsquared multi-offset otherwise.
    min_gap : float
    packed_components : sequence of PackedComponent
        Read only; supplies the target pads.
    component_to_pack : InputComponent
    obstacles : sequence of InputObstacle, optional
        Only drawn by ``visualize``; already part of the outline.
    global_bounds : Bounds, optional
        Hard limit on the component footprint.
    bounds_outline : sequence of Point, optional
        Board polygon; its bounding box clips the viable centers.  The
        exact polygon test is left to the caller.
    """

    def __init__(
        self,
        outline_segment: Segment,
        full_outline: Sequence[Segment],
        component_rotation_degrees: float,
        pack_strategy: PackPlacementStrategy,
        min_gap: float,
        packed_components: Sequence[PackedComponent],
        component_to_pack: InputComponent,
        obstacles: Sequence[InputObstacle] = (),
        global_bounds: Optional[Bounds] = None,
        bounds_outline: Optional[Sequence[Point]] = None,
    ) -> None:
        super().__init__()
        self.outline_segment = outline_segment
        self.full_outline = list(full_outline)
        self.component_rotation_degrees = component_rotation_degrees
        self.pack_strategy = PackPlacementStrategy(pack_strategy)
        self.min_gap = min_gap
        self.packed_components = packed_components
        self.component_to_pack = component_to_pack
        self.obstacles = list(obstacles)
        self.global_bounds = global_bounds
        self.bounds_outline = list(bounds_outline) if bounds_outline else None

        self.outward_normal: Optional[Point] = None
        self.component_bounds: Optional[Bounds] = None
        self.largest_rect: Optional[Rect] = None
        self.largest_rect_origin: Optional[Point] = None
        self.viable_bounds: Optional[Bounds] = None
        self.viable_outline_segment: Optional[Segment] = None
        self.optimal_position: Optional[Point] = None
        self.optimizer: Optional[Union[MultiOffsetIrlsSolver, TwoPhaseIrlsSolver]] = None

    # ── setup ──────────────────────────────────────────────────────

    def _network_targets(self) -> tuple[list[OffsetPadPoint], dict[str, list[Point]]]:
        rotation = self.component_rotation_degrees
        offset_pads = [
            OffsetPadPoint(pad.pad_id, rotate_point(pad.offset, rotation))
            for pad in self.component_to_pack.pads
        ]
        target_map: dict[str, list[Point]] = {}
        for pad in self.component_to_pack.pads:
            target_map[pad.pad_id] = [
                packed_pad.absolute_center
                for comp in self.packed_components
                for packed_pad in comp.pads
                if packed_pad.network_id == pad.network_id
            ]
        return offset_pads, target_map

    def _setup(self) -> None:
        seg = self.outline_segment
        self.outward_normal = get_outward_normal(seg, self.full_outline)
        comp = get_input_component_bounds(self.component_to_pack, self.component_rotation_degrees)
        self.component_bounds = comp

        margin = 2 * max(comp.width, comp.height) + 2 * self.min_gap
        search_bounds = outline_bounds(self.full_outline).inflate(margin)

        mid = seg.midpoint
        self.largest_rect_origin = mid + self.outward_normal.scale(SOLVER_LIMITS.outward_nudge)
        self.largest_rect = largest_rect_outside(
            self.full_outline, self.largest_rect_origin, search_bounds,
        )
        if self.largest_rect is None:
            self.fail(NOWHERE_TO_FIT)
            return
        rect = self.largest_rect.to_bounds()

        along_x = abs(_sign(seg.end.x - seg.start.x))
        along_y = abs(_sign(seg.end.y - seg.start.y))
        viable = Bounds(
            rect.min_x - comp.min_x * along_x,
            rect.max_x - comp.max_x * along_x,
            rect.min_y - comp.min_y * along_y,
            rect.max_y - comp.max_y * along_y,
        )
        limits = []
        if self.global_bounds is not None:
            limits.append(self.global_bounds)
        if self.bounds_outline:
            limits.append(Bounds.from_points(self.bounds_outline))
        for g in limits:
            viable = Bounds(
                max(viable.min_x, g.min_x - comp.min_x),
                min(viable.max_x, g.max_x - comp.max_x),
                max(viable.min_y, g.min_y - comp.min_y),
                min(viable.max_y, g.max_y - comp.max_y),
            )
        self.viable_bounds = viable

        tol = SOLVER_LIMITS.coordinate_tolerance
        fits = (
            viable.width >= -tol and viable.height >= -tol
            and (along_x or rect.width >= comp.width - tol)
            and (along_y or rect.height >= comp.height - tol)
        )
        if not fits:
            self.fail(NOWHERE_TO_FIT)
            return

        expanded = expand_segment(seg, seg.length)
        self.viable_outline_segment = Segment(
            clamp_point_to_bounds(expanded.start, viable),
            clamp_point_to_bounds(expanded.end, viable),
        )
        initial = self.adjust_position_for_outline_collision(
            self.viable_outline_segment.midpoint
        )

        offset_pads, target_map = self._network_targets()
        common = dict(
            initial_position=initial,
            constraint_fn=self._constrain,
            epsilon=SOLVER_LIMITS.irls_epsilon,
            max_iterations=SOLVER_LIMITS.segment_solver_max_iterations,
        )
        if self.pack_strategy is PackPlacementStrategy.MINIMUM_CLOSEST_SUM_SQUARED_DISTANCE:
            self.optimizer = TwoPhaseIrlsSolver(offset_pads, target_map, **common)
        else:
            self.optimizer = MultiOffsetIrlsSolver(
                offset_pads, target_map,
                use_squared_distance=(
                    self.pack_strategy
                    is PackPlacementStrategy.MINIMUM_SUM_SQUARED_DISTANCE_TO_NETWORK
                ),
                **common,
            )
        self.active_sub_solver = self.optimizer

    # ── constraint ─────────────────────────────────────────────────

    def _constrain(self, point: Point) -> Point:
        projected = project_point_on_segment(point, self.viable_outline_segment)
        return self.adjust_position_for_outline_collision(projected)

    def adjust_position_for_outline_collision(self, center: Point) -> Point:
        """Shift ``center`` along the outward normal so the footprint sits
        flush on the free side of the edge line through ``center``."""
        return snap_flush(center, self.outward_normal, self.component_bounds)

    # ── step ───────────────────────────────────────────────────────

    def _step(self) -> None:
        optimizer = self.optimizer
        if optimizer is None:
            self.solved = True
            return
        optimizer.step()
        if optimizer.solved:
            self.optimal_position = optimizer.get_best_position()
            self.solved = True
        elif optimizer.failed:
            self.fail(optimizer.error or "optimizer failed")

    def get_output(self) -> Optional[Point]:
        return self.optimal_position

    def get_candidate(self) -> Optional[PackedComponent]:
        """The component placed at the optimal position, once solved."""
        if self.optimal_position is None:
            return None
        return place_component(
            self.component_to_pack, self.optimal_position, self.component_rotation_degrees,
        )

    # ── diagnostics ────────────────────────────────────────────────

    def visualize(self) -> GraphicsObject:
        graphics = GraphicsObject()
        for obstacle in self.obstacles:
            graphics.rects.append({
                "center": {"x": obstacle.absolute_center.x, "y": obstacle.absolute_center.y},
                "width": obstacle.width, "height": obstacle.height,
                "fill": "rgba(0,0,0,0.1)", "stroke": "#555", "label": obstacle.obstacle_id,
            })
        for box, fill, label in (
            (self.viable_bounds, "rgba(0,255,0,0.1)", "Viable Bounds"),
            (self.largest_rect.to_bounds() if self.largest_rect else None, "rgba(255,0,255,0.4)", None),
        ):
            if box is None:
                continue
            rect = {
                "center": {"x": box.center.x, "y": box.center.y},
                "width": box.width, "height": box.height, "fill": fill,
            }
            if label:
                rect["label"] = label
            graphics.rects.append(rect)
        if self.largest_rect_origin is not None:
            graphics.points.append({
                "x": self.largest_rect_origin.x, "y": self.largest_rect_origin.y,
                "label": "Largest Rect Origin", "color": "rgba(255,0,128,1)",
            })
        if self.viable_outline_segment is not None:
            graphics.lines.append(draw_segment(self.viable_outline_segment, "#2196F3"))
        graphics.lines.append(draw_segment(self.outline_segment, "rgba(255,0,0,1)", dash="3 3"))
        for seg in self.full_outline:
            graphics.lines.append(draw_segment(seg, "rgba(0,0,0,0.5)", dash="4 4"))

        for comp in self.packed_components:
            for pad in comp.pads:
                graphics.rects.append({
                    "center": {"x": pad.absolute_center.x, "y": pad.absolute_center.y},
                    "width": pad.size.x, "height": pad.size.y,
                    "fill": color_for_string(pad.network_id, 0.5), "stroke": "#333",
                    "label": f"{pad.pad_id} ({pad.network_id})",
                })

        if self.optimizer is not None:
            pos = self.optimal_position or self.optimizer.get_best_position()
            placed = place_component(self.component_to_pack, pos, self.component_rotation_degrees)
            for pad in placed.pads:
                graphics.rects.append({
                    "center": {"x": pad.absolute_center.x, "y": pad.absolute_center.y},
                    "width": pad.size.x, "height": pad.size.y,
                    "fill": "rgba(255,0,0,0.5)" if self.failed else color_for_string(pad.network_id, 0.5),
                    "label": f"{pad.pad_id} ({pad.network_id})",
                })
            graphics.extend(self.optimizer.visualize())
        return graphics
