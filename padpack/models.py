"""Packing data model: pads, components, obstacles, inputs and outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from padpack.geometry import Bounds, Point


# ── Strategies ─────────────────────────────────────────────────────


class PackOrderStrategy(str, Enum):
    """Order in which components leave the queue (by pad count)."""

    LARGEST_TO_SMALLEST = "largest_to_smallest"
    SMALLEST_TO_LARGEST = "smallest_to_largest"


class PackPlacementStrategy(str, Enum):
    """Cost that a connected component minimises along the outline."""

    SHORTEST_CONNECTION_ALONG_OUTLINE = "shortest_connection_along_outline"
    MINIMUM_SUM_DISTANCE_TO_NETWORK = "minimum_sum_distance_to_network"
    MINIMUM_SUM_SQUARED_DISTANCE_TO_NETWORK = "minimum_sum_squared_distance_to_network"
    MINIMUM_CLOSEST_SUM_SQUARED_DISTANCE = "minimum_closest_sum_squared_distance"

    @property
    def uses_squared_distance(self) -> bool:
        return self in (
            PackPlacementStrategy.MINIMUM_SUM_SQUARED_DISTANCE_TO_NETWORK,
            PackPlacementStrategy.MINIMUM_CLOSEST_SUM_SQUARED_DISTANCE,
        )


class DisconnectedPackDirection(str, Enum):
    """Where components without shared networks are preferably put."""

    NEAREST_TO_CENTER = "nearest_to_center"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


DEFAULT_ROTATIONS = (0.0, 90.0, 180.0, 270.0)


# ── Input dataclasses ──────────────────────────────────────────────


@dataclass(frozen=True)
class InputPad:
    """A rectangular pad at a fixed offset from its component center."""

    pad_id: str
    network_id: str
    offset: Point
    size: Point     # x = width, y = height (unrotated)


@dataclass
class InputComponent:
    """A component waiting to be packed."""

    component_id: str
    pads: list[InputPad]
    available_rotation_degrees: Optional[Sequence[float]] = None
    body_bounds: Optional[Bounds] = None   # local, relative to center

    @property
    def rotations(self) -> tuple[float, ...]:
        """Candidate rotations, defaulting to the four quarter turns."""
        if self.available_rotation_degrees:
            return tuple(float(r) for r in self.available_rotation_degrees)
        return DEFAULT_ROTATIONS

    @property
    def network_ids(self) -> set[str]:
        return {pad.network_id for pad in self.pads}


@dataclass(frozen=True)
class InputObstacle:
    """A fixed keep-out rectangle in world coordinates."""

    obstacle_id: str
    absolute_center: Point
    width: float
    height: float

    @property
    def bounds(self) -> Bounds:
        return Bounds.around(self.absolute_center, self.width, self.height)


# ── Placed dataclasses ─────────────────────────────────────────────


@dataclass(frozen=True)
class OutputPad:
    """A pad with its world position.

    ``offset`` is the unrotated local offset; ``size`` is already swapped
    for quarter-turn rotations.  Never edited in place: a new pose gives
    new pads.
    """

    pad_id: str
    network_id: str
    offset: Point
    size: Point
    absolute_center: Point

    @property
    def bounds(self) -> Bounds:
        return Bounds.around(self.absolute_center, self.size.x, self.size.y)


@dataclass
class PackedComponent:
    """A component with a committed (or candidate) pose.

    Build through ``padpack.placement.place_component`` so that the pads
    always agree with ``center`` and ``ccw_rotation_offset``.
    """

    component_id: str
    pads: list[OutputPad]
    center: Point
    ccw_rotation_offset: float
    available_rotation_degrees: Optional[Sequence[float]] = None
    body_bounds: Optional[Bounds] = None   # local, unrotated

    @property
    def network_ids(self) -> set[str]:
        return {pad.network_id for pad in self.pads}


@dataclass
class PackInput:
    """Everything the packer needs.  Read-only during a run."""

    components: list[InputComponent]
    min_gap: float = 0.0
    pack_order_strategy: PackOrderStrategy = PackOrderStrategy.LARGEST_TO_SMALLEST
    pack_placement_strategy: PackPlacementStrategy = (
        PackPlacementStrategy.SHORTEST_CONNECTION_ALONG_OUTLINE
    )
    disconnected_pack_direction: DisconnectedPackDirection = (
        DisconnectedPackDirection.NEAREST_TO_CENTER
    )
    pack_first: Optional[list[str]] = None
    obstacles: list[InputObstacle] = field(default_factory=list)
    bounds: Optional[Bounds] = None
    bounds_outline: Optional[list[Point]] = None   # board polygon, keep inside


@dataclass
class PackOutput:
    """The input settings plus every component in packing order."""

    components: list[PackedComponent]
    min_gap: float = 0.0
    pack_order_strategy: PackOrderStrategy = PackOrderStrategy.LARGEST_TO_SMALLEST
    pack_placement_strategy: PackPlacementStrategy = (
        PackPlacementStrategy.SHORTEST_CONNECTION_ALONG_OUTLINE
    )
    disconnected_pack_direction: DisconnectedPackDirection = (
        DisconnectedPackDirection.NEAREST_TO_CENTER
    )
    pack_first: Optional[list[str]] = None
    obstacles: list[InputObstacle] = field(default_factory=list)
    bounds: Optional[Bounds] = None
    bounds_outline: Optional[list[Point]] = None   # board polygon, keep inside

    @classmethod
    def from_input(cls, pack_input: PackInput, components: list[PackedComponent]) -> PackOutput:
        return cls(
            components=list(components),
            min_gap=pack_input.min_gap,
            pack_order_strategy=pack_input.pack_order_strategy,
            pack_placement_strategy=pack_input.pack_placement_strategy,
            disconnected_pack_direction=pack_input.disconnected_pack_direction,
            pack_first=list(pack_input.pack_first) if pack_input.pack_first else None,
            obstacles=list(pack_input.obstacles),
            bounds=pack_input.bounds,
            bounds_outline=list(pack_input.bounds_outline) if pack_input.bounds_outline else None,
        )

    def get_component(self, component_id: str) -> PackedComponent:
        for comp in self.components:
            if comp.component_id == component_id:
                return comp
        raise KeyError(component_id)


# ── Errors ─────────────────────────────────────────────────────────


class PackError(Exception):
    """Raised by ``pack()`` when a component cannot be placed anywhere."""

    def __init__(self, component_id: Optional[str], reason: str) -> None:
        self.component_id = component_id
        self.reason = reason
        if component_id is None:
            super().__init__(f"Cannot pack: {reason}")
        else:
            super().__init__(f"Cannot pack '{component_id}': {reason}")
