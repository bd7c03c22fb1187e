"""Point, segment and bounds value types plus the pure helpers on them.

Everything here is stateless.  Angles are in degrees, counter-clockwise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence


# ── Value types ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Point:
    """A position (or a vector) in the plane."""

    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    def dot(self, other: Point) -> float:
        return self.x * other.x + self.y * other.y

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


ORIGIN = Point(0.0, 0.0)


@dataclass(frozen=True)
class Segment:
    """Directed segment from ``start`` to ``end``."""

    start: Point
    end: Point

    @property
    def direction(self) -> Point:
        return self.end - self.start

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def midpoint(self) -> Point:
        return Point(
            (self.start.x + self.end.x) / 2,
            (self.start.y + self.end.y) / 2,
        )

    def point_at(self, t: float) -> Point:
        """Point at parameter ``t`` (0 = start, 1 = end)."""
        return Point(
            self.start.x + (self.end.x - self.start.x) * t,
            self.start.y + (self.end.y - self.start.y) * t,
        )


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box ``[min_x, max_x] × [min_y, max_y]``."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def inflate(self, margin: float) -> Bounds:
        return Bounds(
            self.min_x - margin, self.max_x + margin,
            self.min_y - margin, self.max_y + margin,
        )

    def contains_point(self, p: Point, tol: float = 0.0) -> bool:
        return (
            self.min_x - tol <= p.x <= self.max_x + tol
            and self.min_y - tol <= p.y <= self.max_y + tol
        )

    def contains_bounds(self, other: Bounds, tol: float = 0.0) -> bool:
        return (
            other.min_x >= self.min_x - tol and other.max_x <= self.max_x + tol
            and other.min_y >= self.min_y - tol and other.max_y <= self.max_y + tol
        )

    def corners(self) -> tuple[Point, Point, Point, Point]:
        """Corners in counter-clockwise order starting bottom-left."""
        return (
            Point(self.min_x, self.min_y),
            Point(self.max_x, self.min_y),
            Point(self.max_x, self.max_y),
            Point(self.min_x, self.max_y),
        )

    @classmethod
    def around(cls, center: Point, width: float, height: float) -> Bounds:
        """Box of the given size centred on ``center``."""
        return cls(
            center.x - width / 2, center.x + width / 2,
            center.y - height / 2, center.y + height / 2,
        )

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> Bounds:
        pts = list(points)
        if not pts:
            raise ValueError("Bounds.from_points needs at least one point")
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        return cls(min(xs), max(xs), min(ys), max(ys))


# ── Rotation ───────────────────────────────────────────────────────


def normalize_rotation(degrees: float) -> float:
    """Map any angle to ``[0, 360)``."""
    return degrees % 360.0


def is_quarter_turn(degrees: float) -> bool:
    """True for rotations that swap width and height (90° and 270°)."""
    return math.isclose(normalize_rotation(degrees) % 180.0, 90.0, abs_tol=1e-9)


def rotate_point(p: Point, degrees: float) -> Point:
    """Rotate ``p`` counter-clockwise about the origin.

    Multiples of 90° are resolved exactly so that rectilinear geometry
    stays rectilinear (no 1e-17 residue from ``cos(pi/2)``).
    """
    angle = normalize_rotation(degrees)
    quarter = angle / 90.0
    if math.isclose(quarter, round(quarter), abs_tol=1e-12):
        turns = int(round(quarter)) % 4
        if turns == 0:
            return Point(p.x, p.y)
        if turns == 1:
            return Point(-p.y, p.x)
        if turns == 2:
            return Point(-p.x, -p.y)
        return Point(p.y, -p.x)
    rad = math.radians(angle)
    cos_r = math.cos(rad)
    sin_r = math.sin(rad)
    return Point(p.x * cos_r - p.y * sin_r, p.x * sin_r + p.y * cos_r)


# ── Bounds helpers ─────────────────────────────────────────────────


def combine_bounds(bounds: Sequence[Bounds]) -> Bounds:
    """Smallest box enclosing every box in ``bounds``."""
    if not bounds:
        raise ValueError("combine_bounds needs at least one box")
    return Bounds(
        min(b.min_x for b in bounds),
        max(b.max_x for b in bounds),
        min(b.min_y for b in bounds),
        max(b.max_y for b in bounds),
    )


def box_gap(a: Bounds, b: Bounds) -> float:
    """Chebyshev gap between two boxes (0 when they touch or overlap).

    Returns the separation along whichever axis the boxes do not overlap.
    """
    gap_x = max(a.min_x - b.max_x, b.min_x - a.max_x, 0.0)
    gap_y = max(a.min_y - b.max_y, b.min_y - a.max_y, 0.0)
    return max(gap_x, gap_y)


# ── Segment helpers ────────────────────────────────────────────────


def segment_parameter(p: Point, seg: Segment) -> float:
    """Clamped parameter of the orthogonal projection of ``p`` on ``seg``."""
    d = seg.direction
    len_sq = d.dot(d)
    if len_sq == 0:
        return 0.0
    t = (p - seg.start).dot(d) / len_sq
    return max(0.0, min(1.0, t))


def project_point_on_segment(p: Point, seg: Segment) -> Point:
    """Closest point to ``p`` lying on ``seg``."""
    return seg.point_at(segment_parameter(p, seg))


def point_segment_distance(p: Point, seg: Segment) -> float:
    return p.distance_to(project_point_on_segment(p, seg))


def expand_segment(seg: Segment, amount: float) -> Segment:
    """Extend ``seg`` by ``amount`` beyond both of its endpoints."""
    length = seg.length
    if length == 0:
        return seg
    ux = (seg.end.x - seg.start.x) / length
    uy = (seg.end.y - seg.start.y) / length
    return Segment(
        Point(seg.start.x - ux * amount, seg.start.y - uy * amount),
        Point(seg.end.x + ux * amount, seg.end.y + uy * amount),
    )


def clamp_point_to_bounds(p: Point, bounds: Bounds) -> Point:
    return Point(
        min(max(p.x, bounds.min_x), bounds.max_x),
        min(max(p.y, bounds.min_y), bounds.max_y),
    )


def _closest_point_between(seg_a: Segment, seg_b: Segment) -> tuple[Point, float]:
    """Point on ``seg_a`` closest to ``seg_b`` and the squared distance."""
    eps = 1e-12
    u = seg_a.direction
    v = seg_b.direction
    w0 = seg_a.start - seg_b.start

    a = u.dot(u)
    b = u.dot(v)
    c = v.dot(v)
    d = u.dot(w0)
    e = v.dot(w0)

    denom = a * c - b * b
    s_den = t_den = denom
    if denom < eps:
        # parallel: pin A to its start and project onto B
        s_num, s_den = 0.0, 1.0
        t_num, t_den = e, c
    else:
        s_num = b * e - c * d
        t_num = a * e - b * d
        if s_num < 0:
            s_num, t_num, t_den = 0.0, e, c
        elif s_num > s_den:
            s_num, t_num, t_den = s_den, e + b, c

    if t_num < 0:
        t_num = 0.0
        s_num, s_den = min(max(-d, 0.0), a), a
    elif t_num > t_den:
        t_num = t_den
        s_num, s_den = min(max(-d + b, 0.0), a), a

    s = s_num / s_den if s_den > eps else 0.0
    t = t_num / t_den if t_den > eps else 0.0
    point_a = seg_a.point_at(s)
    diff = point_a - seg_b.point_at(t)
    return point_a, diff.dot(diff)


def nearest_point_on_segment_for_segment_set(
    seg: Segment, others: Sequence[Segment],
) -> Point:
    """Point on ``seg`` closest to any segment of ``others``."""
    if not others:
        raise ValueError("segment set must contain at least one segment")
    best = seg.start
    best_d2 = math.inf
    for other in others:
        point, d2 = _closest_point_between(seg, other)
        if d2 < best_d2:
            best, best_d2 = point, d2
            if d2 == 0:
                break
    return best
