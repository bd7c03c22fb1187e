"""Solvers — steppable algorithms sharing one execution contract.

Submodules:
  base               BaseSolver lifecycle and the GraphicsObject snapshot.
  irls               Weiszfeld/IRLS optimizers (single, multi-offset, two-phase).
  largest_rect       Largest free rectangle outside a rectilinear outline.
  segment_candidate  Optimal component position along one outline edge.
"""

from .base import BaseSolver, GraphicsObject, color_for_string, draw_segment
from .irls import (
    IrlsSolver, MultiOffsetIrlsSolver, TwoPhaseIrlsSolver, OffsetPadPoint, weiszfeld_update,
)
from .largest_rect import Rect, LargestRectOutsideOutlineSolver, largest_rect_outside
from .segment_candidate import OutlineSegmentCandidatePointSolver, NOWHERE_TO_FIT

__all__ = [
    # Contract
    "BaseSolver", "GraphicsObject", "color_for_string", "draw_segment",
    # Optimizers
    "IrlsSolver", "MultiOffsetIrlsSolver", "TwoPhaseIrlsSolver",
    "OffsetPadPoint", "weiszfeld_update",
    # Rectangle
    "Rect", "LargestRectOutsideOutlineSolver", "largest_rect_outside",
    # Segment candidates
    "OutlineSegmentCandidatePointSolver", "NOWHERE_TO_FIT",
]
