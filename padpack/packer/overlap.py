"""Collision checks between a candidate and the committed components."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Sequence

from shapely.geometry import Polygon
from shapely.geometry import box as shapely_box

from padpack.config import SOLVER_LIMITS
from padpack.geometry import Bounds, Point, box_gap
from padpack.models import InputObstacle, PackedComponent
from padpack.placement import component_boxes, get_component_bounds


def boxes_conflict(a: Bounds, b: Bounds, min_gap: float) -> bool:
    """True if two boxes overlap or sit closer than ``min_gap``.

    The gap is measured along whichever axis the boxes do not overlap;
    a 1e-6 slack absorbs floating-point noise from rotations.
    """
    tol = SOLVER_LIMITS.overlap_tolerance
    overlap_x = min(a.max_x, b.max_x) - max(a.min_x, b.min_x)
    overlap_y = min(a.max_y, b.max_y) - max(a.min_y, b.min_y)
    if overlap_x > tol and overlap_y > tol:
        return True
    return box_gap(a, b) + tol < min_gap


def find_collision(
    component: PackedComponent,
    packed_components: Sequence[PackedComponent],
    min_gap: float,
    obstacles: Sequence[InputObstacle] = (),
) -> Optional[str]:
    """Id of the first component or obstacle ``component`` collides with.

    Every pad box and the rotated body box of ``component`` is compared
    with every pad box and body box of each packed component, so a body
    that reaches past its pads is still kept clear of its neighbours.
    """
    boxes = component_boxes(component)
    if not boxes:
        return None
    reach = get_component_bounds(component, margin=min_gap)

    for other in packed_components:
        if other is component:
            continue
        if not _near(reach, get_component_bounds(other)):
            continue
        for mine in boxes:
            for theirs in component_boxes(other):
                if boxes_conflict(mine, theirs, min_gap):
                    return other.component_id

    for obstacle in obstacles:
        obstacle_box = obstacle.bounds
        if not _near(reach, obstacle_box):
            continue
        if any(boxes_conflict(mine, obstacle_box, min_gap) for mine in boxes):
            return obstacle.obstacle_id
    return None


def check_overlap_with_packed_components(
    component: PackedComponent,
    packed_components: Sequence[PackedComponent],
    min_gap: float,
    obstacles: Sequence[InputObstacle] = (),
) -> bool:
    """True when ``component`` violates ``min_gap`` against anything placed."""
    return find_collision(component, packed_components, min_gap, obstacles) is not None


def violates_bounds(component: PackedComponent, bounds: Optional[Bounds]) -> bool:
    """True when the footprint leaves the global ``bounds``."""
    if bounds is None:
        return False
    return not bounds.contains_bounds(
        get_component_bounds(component), SOLVER_LIMITS.overlap_tolerance,
    )


@lru_cache(maxsize=8)
def _board_polygon(points: tuple[Point, ...]) -> Polygon:
    poly = Polygon([(p.x, p.y) for p in points])
    if not poly.is_valid:
        poly = poly.buffer(0)
    return poly.buffer(SOLVER_LIMITS.overlap_tolerance, join_style="mitre")


def board_polygon(bounds_outline: Sequence[Point]) -> Polygon:
    """Shapely polygon of a board outline, grown by the overlap tolerance."""
    return _board_polygon(tuple(bounds_outline))


def violates_bounds_outline(
    component: PackedComponent,
    bounds_outline: Optional[Sequence[Point]],
    min_gap: float = 0.0,
) -> bool:
    """True when a pad or body box, grown by ``min_gap``, leaves the board outline.

    Outlines with fewer than three vertices constrain nothing.
    """
    if not bounds_outline or len(bounds_outline) < 3:
        return False
    board = board_polygon(bounds_outline)
    for b in component_boxes(component):
        grown = b.inflate(min_gap)
        if not board.covers(shapely_box(grown.min_x, grown.min_y, grown.max_x, grown.max_y)):
            return True
    return False


def _near(a: Bounds, b: Bounds) -> bool:
    tol = SOLVER_LIMITS.overlap_tolerance
    return (
        a.min_x <= b.max_x + tol and b.min_x <= a.max_x + tol
        and a.min_y <= b.max_y + tol and b.min_y <= a.max_y + tol
    )


def is_placement_valid(
    component: PackedComponent,
    packed_components: Sequence[PackedComponent],
    min_gap: float,
    obstacles: Sequence[InputObstacle] = (),
    bounds: Optional[Bounds] = None,
    bounds_outline: Optional[Sequence[Point]] = None,
) -> bool:
    """Clear of everything placed and inside ``bounds`` and ``bounds_outline``."""
    if violates_bounds(component, bounds):
        return False
    if violates_bounds_outline(component, bounds_outline, min_gap):
        return False
    return not check_overlap_with_packed_components(
        component, packed_components, min_gap, obstacles,
    )
