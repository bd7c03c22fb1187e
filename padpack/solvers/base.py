"""Iterative-solver execution contract shared by every algorithm.

A solver is set up lazily once, then advanced one unit of work per
``step()`` until it is ``solved`` or ``failed``.  ``solve()`` just loops
``step()``, so any solver can be driven interactively (one step per
redraw) or run to completion with identical results.
"""

from __future__ import annotations

import logging
import time
import zlib
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from padpack.config import SOLVER_LIMITS

log = logging.getLogger(__name__)


# ── Diagnostic snapshot ────────────────────────────────────────────


@dataclass
class GraphicsObject:
    """Geometric primitives describing a solver's current state.

    Purely observational: each entry is a JSON-safe dict, e.g.
    ``{"points": [{"x": 0, "y": 0}, ...], "strokeColor": "red"}`` for a
    line or ``{"center": {...}, "width": 1, "height": 2}`` for a rect.
    """

    lines: list[dict] = field(default_factory=list)
    points: list[dict] = field(default_factory=list)
    rects: list[dict] = field(default_factory=list)
    circles: list[dict] = field(default_factory=list)
    texts: list[dict] = field(default_factory=list)

    def extend(self, other: GraphicsObject) -> GraphicsObject:
        self.lines.extend(other.lines)
        self.points.extend(other.points)
        self.rects.extend(other.rects)
        self.circles.extend(other.circles)
        self.texts.extend(other.texts)
        return self

    def to_dict(self) -> dict:
        return {
            "lines": list(self.lines),
            "points": list(self.points),
            "rects": list(self.rects),
            "circles": list(self.circles),
            "texts": list(self.texts),
        }


def color_for_string(value: str, alpha: float = 1.0) -> str:
    """Stable colour for an identifier (same id, same hue on every run)."""
    hue = zlib.crc32(value.encode("utf-8")) % 360
    return f"hsla({hue}, 100%, 50%, {alpha:g})"


def draw_segment(segment, color: str, dash: Optional[str] = None) -> dict:
    """Line entry for a ``Segment``."""
    line = {
        "points": [
            {"x": segment.start.x, "y": segment.start.y},
            {"x": segment.end.x, "y": segment.end.y},
        ],
        "strokeColor": color,
    }
    if dash:
        line["strokeDash"] = dash
    return line


# ── Base solver ────────────────────────────────────────────────────


class BaseSolver:
    """Uniform ``setup / step / solve`` lifecycle.

    Subclasses override ``_setup`` and ``_step`` (never ``step``), may
    override ``try_final_acceptance`` to rescue a best-effort result at
    the iteration ceiling, and ``compute_progress`` to report a 0..1
    progress estimate.
    """

    max_iterations: int = SOLVER_LIMITS.max_iterations

    def __init__(self) -> None:
        self.solved = False
        self.failed = False
        self.error: Optional[str] = None
        self.iterations = 0
        self.progress = 0.0
        self.stats: dict[str, Any] = {}
        self.time_to_solve: Optional[float] = None
        self.active_sub_solver: Optional[BaseSolver] = None
        self._setup_done = False

    # ── lifecycle ──────────────────────────────────────────────────

    def setup(self) -> None:
        """Run ``_setup`` exactly once."""
        if self._setup_done:
            return
        self._setup()
        self._setup_done = True

    def step(self) -> None:
        """Advance by one unit of work.  No-op once solved or failed."""
        try:
            if not self._setup_done:
                self.setup()
            if self.solved or self.failed:
                return
            self.iterations += 1
            self._step()
        except Exception as exc:
            self.error = f"{type(self).__name__} error: {exc}"
            self.failed = True
            log.error(self.error)
            raise

        if self._over_ceiling():
            self.try_final_acceptance()
        if self._over_ceiling():
            self.fail(f"{type(self).__name__} ran out of iterations")

        self.progress = self.compute_progress()

    def solve(self) -> None:
        """Step until solved or failed."""
        started = time.perf_counter()
        while not self.solved and not self.failed:
            self.step()
        self.time_to_solve = time.perf_counter() - started

    def fail(self, message: str) -> None:
        """Enter the terminal failed state with ``message``."""
        self.error = message
        self.failed = True
        log.debug(message)

    def _over_ceiling(self) -> bool:
        return (
            not self.solved and not self.failed
            and self.iterations > self.max_iterations
        )

    # ── hooks ──────────────────────────────────────────────────────

    def _setup(self) -> None:
        pass

    def _step(self) -> None:
        pass

    def try_final_acceptance(self) -> None:
        """Last chance to mark a best-so-far result as solved."""

    def compute_progress(self) -> float:
        if self.solved:
            return 1.0
        return self.progress

    # ── introspection ──────────────────────────────────────────────

    def iter_active_solvers(self) -> Iterator[BaseSolver]:
        """Yield this solver and then each nested active sub-solver."""
        solver: Optional[BaseSolver] = self
        seen: set[int] = set()
        while solver is not None and id(solver) not in seen:
            seen.add(id(solver))
            yield solver
            solver = solver.active_sub_solver

    def visualize(self) -> GraphicsObject:
        return GraphicsObject()

    def __repr__(self) -> str:
        state = "solved" if self.solved else "failed" if self.failed else "running"
        return f"<{type(self).__name__} {state} iterations={self.iterations}>"
