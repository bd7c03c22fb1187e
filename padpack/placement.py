"""Pose helpers: put an input component at a center and rotation.

``place_component`` is the one place where pad world positions are
derived, so a placed component's pads always agree with its pose.
"""

from __future__ import annotations

from typing import Optional

from padpack.geometry import (
    Bounds, Point, combine_bounds, is_quarter_turn, normalize_rotation, rotate_point,
)
from padpack.models import InputComponent, InputPad, OutputPad, PackedComponent


def rotated_pad_size(size: Point, rotation_deg: float) -> Point:
    """Pad size after rotation (width/height swap at 90° and 270°)."""
    if is_quarter_turn(rotation_deg):
        return Point(size.y, size.x)
    return size


def place_component(
    component: InputComponent, center: Point, rotation_deg: float,
) -> PackedComponent:
    """Return a fresh PackedComponent for ``component`` at the given pose."""
    rotation = normalize_rotation(rotation_deg)
    pads = [
        OutputPad(
            pad_id=pad.pad_id,
            network_id=pad.network_id,
            offset=pad.offset,
            size=rotated_pad_size(pad.size, rotation),
            absolute_center=center + rotate_point(pad.offset, rotation),
        )
        for pad in component.pads
    ]
    return PackedComponent(
        component_id=component.component_id,
        pads=pads,
        center=center,
        ccw_rotation_offset=rotation,
        available_rotation_degrees=component.available_rotation_degrees,
        body_bounds=component.body_bounds,
    )


def to_input_component(packed: PackedComponent) -> InputComponent:
    """Strip the pose from a placed component."""
    return InputComponent(
        component_id=packed.component_id,
        pads=[
            InputPad(
                pad_id=pad.pad_id,
                network_id=pad.network_id,
                offset=pad.offset,
                size=rotated_pad_size(pad.size, packed.ccw_rotation_offset),
            )
            for pad in packed.pads
        ],
        available_rotation_degrees=packed.available_rotation_degrees,
        body_bounds=packed.body_bounds,
    )


def recompute_pad_centers(packed: PackedComponent) -> PackedComponent:
    """Re-derive every pad from the component's current center and rotation."""
    return place_component(
        to_input_component(packed), packed.center, packed.ccw_rotation_offset,
    )


def transform_body_bounds(
    body_bounds: Bounds, center: Point, rotation_deg: float,
) -> Bounds:
    """World-space box around a local body box after rotation."""
    return Bounds.from_points(
        center + rotate_point(corner, rotation_deg) for corner in body_bounds.corners()
    )


def component_boxes(packed: PackedComponent) -> list[Bounds]:
    """World-space pad boxes followed by the body box, if any."""
    boxes = [pad.bounds for pad in packed.pads]
    if packed.body_bounds is not None:
        boxes.append(
            transform_body_bounds(packed.body_bounds, packed.center, packed.ccw_rotation_offset)
        )
    return boxes


def get_component_bounds(packed: PackedComponent, margin: float = 0.0) -> Bounds:
    """World-space footprint (pads and body), optionally inflated."""
    boxes = component_boxes(packed)
    if not boxes:
        return Bounds(packed.center.x, packed.center.x, packed.center.y, packed.center.y).inflate(margin)
    return combine_bounds(boxes).inflate(margin)


def get_input_component_bounds(
    component: InputComponent, rotation_deg: float = 0.0, margin: float = 0.0,
) -> Bounds:
    """Footprint relative to the center for the given rotation."""
    placed = place_component(component, Point(0.0, 0.0), rotation_deg)
    return get_component_bounds(placed, margin)


def max_pad_half_size(component: InputComponent) -> float:
    """Largest half of any pad side (0 when there are no pads)."""
    return max((max(p.size.x, p.size.y) / 2 for p in component.pads), default=0.0)


def first_pad_on_network(
    component: InputComponent, network_id: str,
) -> Optional[InputPad]:
    return next((p for p in component.pads if p.network_id == network_id), None)


def snap_flush(center: Point, normal: Point, footprint: Bounds) -> Point:
    """Move ``center`` along the dominant axis of ``normal`` so that the
    footprint (relative to the center) starts on the line through ``center``.

    The result sits flush against an edge whose free side ``normal``
    points to.
    """
    if abs(normal.x) > abs(normal.y):
        x = center.x - footprint.min_x if normal.x > 0 else center.x - footprint.max_x
        return Point(x, center.y)
    y = center.y - footprint.min_y if normal.y > 0 else center.y - footprint.max_y
    return Point(center.x, y)
