"""Packer — greedy, incremental placement of components.

Submodules:
  overlap        Pad/body/obstacle clearance checks, global bounds, board outline.
  ordering       Packing queue order (pack_first, pad count).
  candidates     Outline candidate points and connection costs.
  disconnected   Placement of components that share no network.
  translation    Bounded local refinement of a feasible candidate.
  engine         PhasedPackSolver and the ``pack()`` entry point.
  serialization  JSON-safe dict conversion of inputs and outputs.
  graphics       Diagnostic snapshot of placed components.
"""

from .overlap import (
    boxes_conflict, find_collision, check_overlap_with_packed_components,
    violates_bounds, violates_bounds_outline, board_polygon, is_placement_valid,
)
from .ordering import sort_component_queue
from .candidates import (
    CandidatePoint, CandidateSet, connection_cost, find_candidate_points,
    find_optimal_point_on_segment, get_segments_from_pad, shared_network_ids,
)
from .disconnected import compute_global_center, place_component_disconnected
from .translation import refine_translation
from .engine import PackingPhase, PhasedPackSolver, RotationTrial, pack
from .serialization import (
    pack_input_from_dict, pack_input_to_dict,
    pack_output_to_dict, parse_pack_output, pack_output_to_input,
)
from .graphics import get_graphics_from_pack_output

__all__ = [
    # Feasibility
    "boxes_conflict", "find_collision", "check_overlap_with_packed_components",
    "violates_bounds", "violates_bounds_outline", "board_polygon", "is_placement_valid",
    # Queue
    "sort_component_queue",
    # Candidates
    "CandidatePoint", "CandidateSet", "connection_cost", "find_candidate_points",
    "find_optimal_point_on_segment", "get_segments_from_pad", "shared_network_ids",
    "compute_global_center", "place_component_disconnected", "refine_translation",
    # Solver
    "PackingPhase", "PhasedPackSolver", "RotationTrial", "pack",
    # Serialization
    "pack_input_from_dict", "pack_input_to_dict",
    "pack_output_to_dict", "parse_pack_output", "pack_output_to_input",
    "get_graphics_from_pack_output",
]
