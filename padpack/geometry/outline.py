"""
Outline loop utilities.

An outline is a closed loop of segments.  Loops wound counter-clockwise
bound occupied space; clockwise loops bound free pockets inside it.
Most helpers also accept the concatenated segments of several loops,
in which case the even-odd rule gives the occupied region.
"""

from __future__ import annotations

import math
from functools import reduce
from typing import Literal, Optional, Sequence, Union

from shapely.geometry import MultiLineString, Polygon
from shapely.geometry import Point as ShapelyPoint

from .primitives import Bounds, Point, Segment

Location = Literal["inside", "outside", "boundary"]

EPS = 1e-9
NORMAL_STEP_HALVINGS = 12


class OutwardNormalError(ValueError):
    """Neither perpendicular of an outline edge leads out of the outline."""


# ── loop conversion ────────────────────────────────────────────────


def segments_from_vertices(vertices: Sequence[Point]) -> list[Segment]:
    """Close a vertex ring into a loop of segments."""
    n = len(vertices)
    if n < 2:
        return []
    return [Segment(vertices[i], vertices[(i + 1) % n]) for i in range(n)]


def split_loops(segments: Sequence[Segment]) -> list[list[Point]]:
    """Recover the vertex rings of concatenated loops.

    A ring ends where a segment returns to the ring's first vertex or
    where the next segment does not start at the previous end.
    Zero-length segments are skipped.
    """
    rings: list[list[Point]] = []
    ring: list[Point] = []
    for seg in segments:
        if seg.length == 0:
            continue
        if ring and not _connected(ring[-1], seg.start):
            rings.append(ring)
            ring = []
        if not ring:
            ring.append(seg.start)
        ring.append(seg.end)
        if len(ring) > 2 and _connected(ring[-1], ring[0]):
            ring.pop()
            rings.append(ring)
            ring = []
    if ring:
        rings.append(ring)
    return rings


def outline_bounds(segments: Sequence[Segment]) -> Bounds:
    return Bounds.from_points(
        p for seg in segments for p in (seg.start, seg.end)
    )


# ── point location ─────────────────────────────────────────────────


class OutlineRegion:
    """The occupied region of one or more outline loops, in shapely.

    Each ring becomes a polygon and the polygons are combined with
    symmetric differences, which is the even-odd rule: a loop nested in
    another bounds a free pocket whatever its winding.  Build once and
    ``locate`` many points.
    """

    def __init__(self, segments: Sequence[Segment]) -> None:
        self.segments = [seg for seg in segments if seg.length > 0]
        self.bounds: Optional[Bounds] = None
        self.area = Polygon()
        self.edges: Optional[MultiLineString] = None
        if not self.segments:
            return

        polygons = []
        for ring in split_loops(self.segments):
            if len(ring) < 3:
                continue
            poly = Polygon([(p.x, p.y) for p in ring])
            if not poly.is_valid:
                poly = poly.buffer(0)
            polygons.append(poly)
        if polygons:
            self.area = reduce(lambda a, b: a.symmetric_difference(b), polygons)
        self.edges = MultiLineString([
            [(seg.start.x, seg.start.y), (seg.end.x, seg.end.y)] for seg in self.segments
        ])
        self.bounds = outline_bounds(self.segments)

    def locate(self, p: Point) -> Location:
        if self.edges is None:
            return "outside"
        pt = ShapelyPoint(p.x, p.y)
        if self.edges.distance(pt) <= EPS:
            return "boundary"
        return "inside" if self.area.contains(pt) else "outside"


def point_in_outline(p: Point, segments: Sequence[Segment]) -> Location:
    """Locate ``p`` against an outline using the even-odd rule."""
    return OutlineRegion(segments).locate(p)


def get_outward_normal(
    segment: Segment,
    full_outline: Union[Sequence[Segment], OutlineRegion],
) -> Point:
    """Unit normal of ``segment`` pointing into free space.

    Tests a point a short distance to either side of the midpoint.  The
    distance scales with the outline size and is halved a few times
    before giving up, so narrow slots next to the edge still resolve.
    Pass a prebuilt ``OutlineRegion`` when testing many edges of the
    same outline.

    Raises
    ------
    OutwardNormalError
        If no test point on either side lands outside the outline.
    """
    length = segment.length
    if length == 0:
        return Point(0.0, 1.0)

    region = full_outline if isinstance(full_outline, OutlineRegion) else OutlineRegion(full_outline)
    dir_x = (segment.end.x - segment.start.x) / length
    dir_y = (segment.end.y - segment.start.y) / length
    left = Point(-dir_y, dir_x)
    right = Point(dir_y, -dir_x)
    mid = segment.midpoint

    box = region.bounds or Bounds(0, 1, 0, 1)
    scale = max(box.width, box.height) or 1.0
    distance = max(1e-4, 1e-3 * scale)

    for _ in range(NORMAL_STEP_HALVINGS):
        if region.locate(mid + left.scale(distance)) == "outside":
            return left
        if region.locate(mid + right.scale(distance)) == "outside":
            return right
        distance /= 2

    raise OutwardNormalError(
        f"no outward side for edge ({segment.start.x:g}, {segment.start.y:g})"
        f" -> ({segment.end.x:g}, {segment.end.y:g})"
    )


# ── simplification ─────────────────────────────────────────────────


def _is_left(a: Point, b: Point, p: Point) -> float:
    return (b.x - a.x) * (p.y - a.y) - (b.y - a.y) * (p.x - a.x)


def _connected(a: Point, b: Point) -> bool:
    return abs(a.x - b.x) < EPS and abs(a.y - b.y) < EPS


def _continues(start: Point, end: Point, nxt: Point, tolerance: float) -> bool:
    """True when ``nxt`` extends start->end straight ahead."""
    cross = _is_left(start, end, nxt)
    len1 = math.hypot(end.x - start.x, end.y - start.y)
    len2 = math.hypot(nxt.x - end.x, nxt.y - end.y)
    if abs(cross) >= max(tolerance, tolerance * len1 * len2):
        return False
    # a reversal is collinear too, but must not be merged
    return (end.x - start.x) * (nxt.x - end.x) + (end.y - start.y) * (nxt.y - end.y) > 0


def simplify_collinear_segments(
    loop: Sequence[Segment], tolerance: float = 1e-10,
) -> list[Segment]:
    """Merge consecutive collinear segments of a closed loop."""
    if len(loop) <= 1:
        return list(loop)

    simplified: list[Segment] = []
    start, end = loop[0].start, loop[0].end
    for seg in loop[1:]:
        if _connected(end, seg.start) and _continues(start, end, seg.end, tolerance):
            end = seg.end
            continue
        simplified.append(Segment(start, end))
        start, end = seg.start, seg.end

    if (
        len(loop) > 2 and simplified
        and _connected(end, simplified[0].start)
        and _continues(start, end, simplified[0].end, tolerance)
    ):
        simplified[0] = Segment(start, simplified[0].end)
    else:
        simplified.append(Segment(start, end))
    return simplified
