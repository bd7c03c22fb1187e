"""Largest axis-aligned rectangle outside a rectilinear outline.

Given a point known to lie outside the outline, find the maximum-area
rectangle that contains the point, stays inside a global box, and does
not overlap the outline interior.

Method
------
1. Scan the row ``y = origin.y``: the even-odd crossings of vertical
   edges give the occupied x-intervals; their complement inside the
   global box gives the free intervals.  Keep the one holding origin.x.
2. Vertical edges strictly inside that interval cut it into slabs.
3. Each slab shoots a ray up and down from its midpoint to the nearest
   horizontal edges (or the global box).
4. Every contiguous run of slabs through origin.x spans
   ``min(tops) - max(bottoms)`` vertically; the widest area wins.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from padpack.config import SOLVER_LIMITS
from padpack.geometry import Bounds, Point, Segment, segments_from_vertices

from .base import BaseSolver, GraphicsObject


@dataclass(frozen=True)
class Rect:
    """Rectangle by lower-left corner and size."""

    x: float
    y: float
    w: float
    h: float

    def to_bounds(self) -> Bounds:
        return Bounds(self.x, self.x + self.w, self.y, self.y + self.h)

    def contains_point(self, p: Point, tol: float = 0.0) -> bool:
        return self.to_bounds().contains_point(p, tol)


def _almost_equal(a: float, b: float) -> bool:
    return abs(a - b) <= SOLVER_LIMITS.coordinate_tolerance


def _clean_edges(segments: Sequence[Segment]) -> list[Segment]:
    """Drop zero-length edges."""
    return [
        s for s in segments
        if not (_almost_equal(s.start.x, s.end.x) and _almost_equal(s.start.y, s.end.y))
    ]


def _is_vertical(s: Segment) -> bool:
    return _almost_equal(s.start.x, s.end.x)


def _is_horizontal(s: Segment) -> bool:
    return _almost_equal(s.start.y, s.end.y)


def occupied_intervals_at_y(edges: Sequence[Segment], y: float) -> list[tuple[float, float]]:
    """Even-odd occupied x-intervals of the row ``y`` (half-open in y)."""
    xs = sorted(
        e.start.x for e in edges
        if _is_vertical(e) and min(e.start.y, e.end.y) <= y < max(e.start.y, e.end.y)
    )
    return [(xs[i], xs[i + 1]) for i in range(0, len(xs) - 1, 2)]


def free_intervals_at_y(
    edges: Sequence[Segment], y: float, x_min: float, x_max: float,
) -> list[tuple[float, float]]:
    """Complement of the occupied intervals within ``[x_min, x_max]``."""
    free: list[tuple[float, float]] = []
    prev = x_min
    for left, right in occupied_intervals_at_y(edges, y):
        left, right = max(x_min, left), min(x_max, right)
        if right <= left:
            continue
        if left > prev:
            free.append((prev, left))
        prev = max(prev, right)
    if prev < x_max:
        free.append((prev, x_max))
    return free


def largest_rect_outside(
    segments: Sequence[Segment], origin: Point, bounds: Bounds,
) -> Optional[Rect]:
    """Compute the rectangle; ``None`` when origin is not in free space."""
    tol = SOLVER_LIMITS.coordinate_tolerance
    edges = _clean_edges(segments)

    interval = next(
        (
            (left, right)
            for left, right in free_intervals_at_y(edges, origin.y, bounds.min_x, bounds.max_x)
            if left - tol <= origin.x <= right + tol
        ),
        None,
    )
    if interval is None:
        return None
    x_left, x_right = interval

    xset = {x_left, x_right}
    for e in edges:
        if _is_vertical(e) and x_left < e.start.x < x_right:
            xset.add(e.start.x)
    xs = sorted(xset)
    slabs = len(xs) - 1
    if slabs <= 0:
        return None

    tops = [-math.inf] * slabs
    bots = [math.inf] * slabs
    horizontals = [e for e in edges if _is_horizontal(e)]
    for i in range(slabs):
        xm = 0.5 * (xs[i] + xs[i + 1])
        if xm in xset:
            xm += SOLVER_LIMITS.slab_nudge

        above = bounds.max_y
        below = bounds.min_y
        for e in horizontals:
            lo, hi = sorted((e.start.x, e.end.x))
            if lo - tol <= xm <= hi + tol:
                y = e.start.y
                if y > origin.y:
                    above = min(above, y)
                elif y < origin.y:
                    below = max(below, y)
        if below < above:
            tops[i], bots[i] = above, below

    s0 = next(
        (i for i in range(slabs) if xs[i] - tol <= origin.x <= xs[i + 1] + tol),
        None,
    )
    if s0 is None:
        return None

    best: Optional[Rect] = None
    best_area = -1.0
    for i in range(s0 + 1):
        min_top = math.inf
        max_bot = -math.inf
        for j in range(i, slabs):
            min_top = min(min_top, tops[j])
            max_bot = max(max_bot, bots[j])
            if j < s0:
                continue
            height = min_top - max_bot
            if height <= 0:
                continue
            width = xs[j + 1] - xs[i]
            if width * height > best_area:
                best_area = width * height
                best = Rect(xs[i], max_bot, width, height)
    return best


class LargestRectOutsideOutlineSolver(BaseSolver):
    """Single-step solver wrapper around :func:`largest_rect_outside`."""

    def __init__(self, full_outline: Sequence[Segment], origin: Point, global_bounds: Bounds) -> None:
        super().__init__()
        self.full_outline = list(full_outline)
        self.origin = origin
        self.global_bounds = global_bounds
        self.result: Optional[Rect] = None

    @classmethod
    def from_vertices(cls, vertices: Sequence[Point], origin: Point, global_bounds: Bounds):
        return cls(segments_from_vertices(vertices), origin, global_bounds)

    def _step(self) -> None:
        self.result = largest_rect_outside(self.full_outline, self.origin, self.global_bounds)
        self.solved = True

    def get_largest_rect(self) -> Optional[Rect]:
        if not self.solved:
            self.solve()
        return self.result

    def visualize(self) -> GraphicsObject:
        graphics = GraphicsObject()
        for seg in self.full_outline:
            graphics.lines.append({
                "points": [
                    {"x": seg.start.x, "y": seg.start.y},
                    {"x": seg.end.x, "y": seg.end.y},
                ],
                "strokeColor": "#1f2937",
            })
        b = self.global_bounds
        graphics.rects.append({
            "center": {"x": b.center.x, "y": b.center.y},
            "width": b.width, "height": b.height,
            "stroke": "rgba(100, 116, 139, 0.5)",
        })
        graphics.points.append({"x": self.origin.x, "y": self.origin.y, "color": "#ef4444", "label": "origin"})
        if self.result is not None:
            r = self.result
            graphics.rects.append({
                "center": {"x": r.x + r.w / 2, "y": r.y + r.h / 2},
                "width": r.w, "height": r.h,
                "fill": "rgba(34, 197, 94, 0.25)", "stroke": "#16a34a",
            })
        return graphics
