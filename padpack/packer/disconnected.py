"""Placement of components that share no network with anything placed.

Such a component has nothing to be pulled towards, so it is pushed flush
against the outline at the first free spot in the preferred direction.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Sequence

from padpack.config import SOLVER_LIMITS
from padpack.geometry import (
    ORIGIN, Bounds, OutlineRegion, Point, Segment, combine_bounds, get_outward_normal,
)
from padpack.models import (
    DisconnectedPackDirection, InputComponent, InputObstacle, PackedComponent,
)
from padpack.placement import (
    component_boxes, get_input_component_bounds, max_pad_half_size,
    place_component, snap_flush,
)

from .overlap import is_placement_valid

log = logging.getLogger(__name__)


def compute_global_center(packed_components: Sequence[PackedComponent]) -> Point:
    """Mean of the placed centers (origin when nothing is placed)."""
    if not packed_components:
        return ORIGIN
    n = len(packed_components)
    return Point(
        sum(c.center.x for c in packed_components) / n,
        sum(c.center.y for c in packed_components) / n,
    )


def direction_sort_key(
    direction: DisconnectedPackDirection, center: Point,
) -> Callable[[Point], float]:
    """Key that puts the most preferred point first."""
    direction = DisconnectedPackDirection(direction)
    if direction is DisconnectedPackDirection.LEFT:
        return lambda p: p.x
    if direction is DisconnectedPackDirection.RIGHT:
        return lambda p: -p.x
    if direction is DisconnectedPackDirection.DOWN:
        return lambda p: p.y
    if direction is DisconnectedPackDirection.UP:
        return lambda p: -p.y
    return lambda p: p.distance_to(center)


def outline_sample_centers(
    outlines: Sequence[Sequence[Segment]],
    component: InputComponent,
    rotation_deg: float,
) -> list[Point]:
    """Centers flush against every outline edge at the sample fractions."""
    footprint = get_input_component_bounds(component, rotation_deg)
    region = OutlineRegion([seg for loop in outlines for seg in loop])
    centers: list[Point] = []
    for seg in region.segments:
        normal = get_outward_normal(seg, region)
        for t in SOLVER_LIMITS.sample_fractions:
            centers.append(snap_flush(seg.point_at(t), normal, footprint))
    return centers


def grid_center(placed_count: int) -> Point:
    """Next free cell of a square grid, used when there is no outline."""
    grid_size = math.ceil(math.sqrt(placed_count + 1))
    col = placed_count % grid_size
    row = placed_count // grid_size
    return Point(col * SOLVER_LIMITS.grid_spacing, row * SOLVER_LIMITS.grid_spacing)


def _clear_of_everything(
    component: InputComponent,
    rotation_deg: float,
    packed_components: Sequence[PackedComponent],
    obstacles: Sequence[InputObstacle],
    direction: DisconnectedPackDirection,
    min_gap: float,
) -> Point:
    """A center past the extreme of every placed box in ``direction``."""
    boxes: list[Bounds] = [b for c in packed_components for b in component_boxes(c)]
    boxes.extend(o.bounds for o in obstacles)
    if not boxes:
        return ORIGIN
    extent = combine_bounds(boxes)
    footprint = get_input_component_bounds(component, rotation_deg)
    gap = min_gap + max_pad_half_size(component)
    mid = extent.center

    direction = DisconnectedPackDirection(direction)
    if direction is DisconnectedPackDirection.LEFT:
        return Point(extent.min_x - gap - footprint.max_x, mid.y)
    if direction is DisconnectedPackDirection.UP:
        return Point(mid.x, extent.max_y + gap - footprint.min_y)
    if direction is DisconnectedPackDirection.DOWN:
        return Point(mid.x, extent.min_y - gap - footprint.max_y)
    return Point(extent.max_x + gap - footprint.min_x, mid.y)


def place_component_disconnected(
    component: InputComponent,
    packed_components: Sequence[PackedComponent],
    outlines: Sequence[Sequence[Segment]],
    *,
    direction: DisconnectedPackDirection = DisconnectedPackDirection.NEAREST_TO_CENTER,
    min_gap: float = 0.0,
    obstacles: Sequence[InputObstacle] = (),
    bounds: Optional[Bounds] = None,
    bounds_outline: Optional[Sequence[Point]] = None,
) -> Optional[PackedComponent]:
    """First feasible (center, rotation) in the preferred direction.

    Returns ``None`` only when even the fallback beyond every placed box
    leaves ``bounds`` or ``bounds_outline`` or collides.
    """
    key = direction_sort_key(direction, compute_global_center(packed_components))

    candidates: list[tuple[Point, float]] = []
    for rotation in component.rotations:
        if outlines:
            centers = outline_sample_centers(outlines, component, rotation)
        else:
            centers = [grid_center(len(packed_components))]
        candidates.extend((c, rotation) for c in centers)
    candidates.sort(key=lambda item: key(item[0]))

    for center, rotation in candidates:
        placed = place_component(component, center, rotation)
        if is_placement_valid(
            placed, packed_components, min_gap, obstacles, bounds, bounds_outline,
        ):
            return placed
        log.debug(
            "Disconnected candidate for %s at (%.3f, %.3f) rot=%g rejected",
            component.component_id, center.x, center.y, rotation,
        )

    rotation = component.rotations[0]
    center = _clear_of_everything(
        component, rotation, packed_components, obstacles, direction, min_gap,
    )
    placed = place_component(component, center, rotation)
    if not is_placement_valid(
        placed, packed_components, min_gap, obstacles, bounds, bounds_outline,
    ):
        log.warning(
            "No valid placement for %s, even beyond every placed box at (%.3f, %.3f)",
            component.component_id, center.x, center.y,
        )
        return None
    log.warning(
        "Every outline candidate for %s overlaps; placed it at (%.3f, %.3f) instead",
        component.component_id, center.x, center.y,
    )
    return placed
