"""Shared numeric limits for every solver in the packer.

The IRLS optimizers, the rectangle solver, the segment candidate solver
and the pack pipeline all read their tolerances and iteration ceilings
from this single source of truth, so a tolerance tightened here applies
everywhere at once.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SolverLimits:
    """Tolerances and iteration ceilings.

    Distances are in the caller's plane units (usually millimetres).
    """

    max_iterations: int = 100_000
    """Generic ceiling on ``step()`` calls for any solver."""

    irls_max_iterations: int = 100
    """Ceiling for the Weiszfeld/IRLS optimizers.  Convergence is normally
    reached within a few dozen updates."""

    irls_epsilon: float = 1e-6
    """Movement below this distance means the optimizer has converged.
    Also the distance under which a target gets ``irls_close_weight``."""

    irls_close_weight: float = 1e6
    """Weight substituted for ``1/d`` when a target is closer than epsilon."""

    segment_solver_max_iterations: int = 50
    """Ceiling for the optimizer nested inside a segment candidate solver."""

    coordinate_tolerance: float = 1e-9
    """Two coordinates closer than this are treated as equal."""

    slab_nudge: float = 1e-6
    """Shift applied to a slab midpoint that sits exactly on a vertical edge."""

    outward_nudge: float = 1e-4
    """Distance the rectangle origin is pushed off an outline edge."""

    sliver_width: float = 0.02
    """Free gaps narrower than this are closed when outlines are built."""

    ternary_tolerance: float = 1e-6
    """Parameter-space width at which a ternary search on a segment stops."""

    ternary_max_iterations: int = 100

    candidate_band: float = 1e-6
    """Candidates whose cost is within this band of the best are all kept."""

    sample_step: float = 0.2
    """Fixed parameter step of the safety-net sampling along each edge."""

    translation_radius: float = 10.0
    """Maximum distance the refinement may move a candidate from its start."""

    translation_max_rounds: int = 30

    refine_top_k: int = 3
    """Feasible candidates per rotation that get a translation refinement."""

    overlap_tolerance: float = 1e-6
    """Slack allowed when comparing a gap against ``min_gap``."""

    grid_spacing: float = 20.0
    """Spacing of the fallback grid when no outline exists."""

    # ── Derived helpers ────────────────────────────────────────────

    @property
    def sample_fractions(self) -> tuple[float, ...]:
        """Parameters t in [0, 1] visited by the safety-net sampling."""
        count = int(round(1.0 / self.sample_step))
        return tuple(i / count for i in range(count + 1))


SOLVER_LIMITS = SolverLimits()
