"""Geometry — value types and pure helpers shared by every solver.

Submodules:
  primitives       Point, Segment, Bounds, rotation and segment helpers.
  outline          Loop splitting, point location (shapely), outward normals.
  outline_builder  Union of inflated rectangles into outline loops (shapely).
"""

from .primitives import (
    Point, Segment, Bounds, ORIGIN,
    rotate_point, normalize_rotation, is_quarter_turn,
    combine_bounds, box_gap,
    project_point_on_segment, expand_segment, clamp_point_to_bounds,
    nearest_point_on_segment_for_segment_set,
)
from .outline import (
    OutwardNormalError,
    OutlineRegion, point_in_outline, split_loops, get_outward_normal,
    simplify_collinear_segments, segments_from_vertices, outline_bounds,
)
from .outline_builder import construct_outlines

__all__ = [
    # Primitives
    "Point", "Segment", "Bounds", "ORIGIN",
    "rotate_point", "normalize_rotation", "is_quarter_turn",
    "combine_bounds", "box_gap",
    "project_point_on_segment", "expand_segment", "clamp_point_to_bounds",
    "nearest_point_on_segment_for_segment_set",
    # Outline loops
    "OutwardNormalError",
    "OutlineRegion", "point_in_outline", "split_loops", "get_outward_normal",
    "simplify_collinear_segments", "segments_from_vertices", "outline_bounds",
    # Outline construction
    "construct_outlines",
]
