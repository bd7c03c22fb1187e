"""Outline construction — union of inflated rectangles into closed loops.

Every occupied rectangle (pad, body box, obstacle) is grown by the gap,
the rectangles are merged with shapely, and each resulting ring becomes
a loop of segments.  Exterior rings come out counter-clockwise and hole
rings clockwise, so the winding alone says which side is free space.
"""

from __future__ import annotations

import logging
from typing import Iterable

from shapely.geometry import Polygon, box as shapely_box
from shapely.geometry.polygon import orient
from shapely.ops import unary_union

from padpack.config import SOLVER_LIMITS

from .outline import EPS, simplify_collinear_segments, segments_from_vertices
from .primitives import Bounds, Point, Segment

log = logging.getLogger(__name__)


def _ring_to_loop(coords) -> list[Segment]:
    pts: list[Point] = []
    for x, y in coords:
        p = Point(float(x), float(y))
        if not pts or p.distance_to(pts[-1]) > EPS:
            pts.append(p)
    if len(pts) > 1 and pts[0].distance_to(pts[-1]) <= EPS:
        pts.pop()
    return simplify_collinear_segments(segments_from_vertices(pts))


def _polygons(geom) -> list[Polygon]:
    if geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom]
    return [g for g in getattr(geom, "geoms", []) if isinstance(g, Polygon)]


def construct_outlines(boxes: Iterable[Bounds], gap: float) -> list[list[Segment]]:
    """Build the outline loops around ``boxes`` inflated by ``gap``.

    Parameters
    ----------
    boxes : iterable of Bounds
        Occupied rectangles in world coordinates.
    gap : float
        Clearance added on every side before the union.  Corners stay
        square, so rectilinear input gives rectilinear loops.

    Returns
    -------
    list of loops
        One loop per exterior ring (CCW) and per hole (CW), in the order
        shapely reports them.  Empty when ``boxes`` is empty.
    """
    shapes = [
        shapely_box(b.min_x - gap, b.min_y - gap, b.max_x + gap, b.max_y + gap)
        for b in boxes
    ]
    if not shapes:
        return []

    # close slivers between nearly touching rectangles
    half = SOLVER_LIMITS.sliver_width / 2
    merged = unary_union(shapes).buffer(half, join_style="mitre").buffer(-half, join_style="mitre")
    loops: list[list[Segment]] = []
    for poly in _polygons(merged):
        poly = orient(poly, sign=1.0)
        loops.append(_ring_to_loop(poly.exterior.coords))
        for hole in poly.interiors:
            loops.append(_ring_to_loop(hole.coords))

    log.debug(
        "Outline of %d rectangles (gap %.3f): %d loops, %d segments",
        len(shapes), gap, len(loops), sum(len(l) for l in loops),
    )
    return [loop for loop in loops if loop]
