"""Pack serialization — JSON-safe dict conversion."""

from __future__ import annotations

from typing import Any, Optional

from padpack.geometry import Bounds, Point
from padpack.models import (
    DisconnectedPackDirection, InputComponent, InputObstacle, InputPad,
    OutputPad, PackedComponent, PackInput, PackOrderStrategy, PackOutput,
    PackPlacementStrategy,
)
from padpack.placement import to_input_component


# ── small values ───────────────────────────────────────────────────


def _point(p: Point) -> dict:
    return {"x": p.x, "y": p.y}


def _parse_point(data: dict) -> Point:
    return Point(float(data["x"]), float(data["y"]))


def _bounds(b: Bounds) -> dict:
    return {"min_x": b.min_x, "max_x": b.max_x, "min_y": b.min_y, "max_y": b.max_y}


def _parse_bounds(data: Optional[dict]) -> Optional[Bounds]:
    if data is None:
        return None
    return Bounds(
        float(data["min_x"]), float(data["max_x"]),
        float(data["min_y"]), float(data["max_y"]),
    )


def _obstacle(o: InputObstacle) -> dict:
    return {
        "obstacle_id": o.obstacle_id,
        "absolute_center": _point(o.absolute_center),
        "width": o.width,
        "height": o.height,
    }


def _parse_obstacle(data: dict) -> InputObstacle:
    return InputObstacle(
        obstacle_id=data["obstacle_id"],
        absolute_center=_parse_point(data["absolute_center"]),
        width=float(data["width"]),
        height=float(data["height"]),
    )


def _settings(obj: PackInput | PackOutput) -> dict:
    d: dict[str, Any] = {
        "min_gap": obj.min_gap,
        "pack_order_strategy": PackOrderStrategy(obj.pack_order_strategy).value,
        "pack_placement_strategy": PackPlacementStrategy(obj.pack_placement_strategy).value,
        "disconnected_pack_direction": DisconnectedPackDirection(obj.disconnected_pack_direction).value,
        "obstacles": [_obstacle(o) for o in obj.obstacles],
    }
    if obj.pack_first:
        d["pack_first"] = list(obj.pack_first)
    if obj.bounds is not None:
        d["bounds"] = _bounds(obj.bounds)
    if obj.bounds_outline:
        d["bounds_outline"] = [_point(p) for p in obj.bounds_outline]
    return d


def _parse_settings(data: dict) -> dict:
    return {
        "min_gap": float(data.get("min_gap", 0.0)),
        "pack_order_strategy": PackOrderStrategy(
            data.get("pack_order_strategy", PackOrderStrategy.LARGEST_TO_SMALLEST.value)
        ),
        "pack_placement_strategy": PackPlacementStrategy(
            data.get(
                "pack_placement_strategy",
                PackPlacementStrategy.SHORTEST_CONNECTION_ALONG_OUTLINE.value,
            )
        ),
        "disconnected_pack_direction": DisconnectedPackDirection(
            data.get(
                "disconnected_pack_direction",
                DisconnectedPackDirection.NEAREST_TO_CENTER.value,
            )
        ),
        "pack_first": list(data["pack_first"]) if data.get("pack_first") else None,
        "obstacles": [_parse_obstacle(o) for o in data.get("obstacles", [])],
        "bounds": _parse_bounds(data.get("bounds")),
        "bounds_outline": (
            [_parse_point(p) for p in data["bounds_outline"]]
            if data.get("bounds_outline") else None
        ),
    }


# ── components ─────────────────────────────────────────────────────


def _component_extras(d: dict, rotations, body_bounds: Optional[Bounds]) -> dict:
    if rotations:
        d["available_rotation_degrees"] = [float(r) for r in rotations]
    if body_bounds is not None:
        d["body_bounds"] = _bounds(body_bounds)
    return d


def input_component_to_dict(c: InputComponent) -> dict:
    d = {
        "component_id": c.component_id,
        "pads": [
            {
                "pad_id": p.pad_id,
                "network_id": p.network_id,
                "offset": _point(p.offset),
                "size": _point(p.size),
            }
            for p in c.pads
        ],
    }
    return _component_extras(d, c.available_rotation_degrees, c.body_bounds)


def parse_input_component(data: dict) -> InputComponent:
    rotations = data.get("available_rotation_degrees")
    return InputComponent(
        component_id=data["component_id"],
        pads=[
            InputPad(
                pad_id=p["pad_id"],
                network_id=p["network_id"],
                offset=_parse_point(p["offset"]),
                size=_parse_point(p["size"]),
            )
            for p in data["pads"]
        ],
        available_rotation_degrees=[float(r) for r in rotations] if rotations else None,
        body_bounds=_parse_bounds(data.get("body_bounds")),
    )


def packed_component_to_dict(c: PackedComponent) -> dict:
    d = {
        "component_id": c.component_id,
        "center": _point(c.center),
        "ccw_rotation_offset": c.ccw_rotation_offset,
        "pads": [
            {
                "pad_id": p.pad_id,
                "network_id": p.network_id,
                "offset": _point(p.offset),
                "size": _point(p.size),
                "absolute_center": _point(p.absolute_center),
            }
            for p in c.pads
        ],
    }
    return _component_extras(d, c.available_rotation_degrees, c.body_bounds)


def parse_packed_component(data: dict) -> PackedComponent:
    rotations = data.get("available_rotation_degrees")
    return PackedComponent(
        component_id=data["component_id"],
        pads=[
            OutputPad(
                pad_id=p["pad_id"],
                network_id=p["network_id"],
                offset=_parse_point(p["offset"]),
                size=_parse_point(p["size"]),
                absolute_center=_parse_point(p["absolute_center"]),
            )
            for p in data["pads"]
        ],
        center=_parse_point(data["center"]),
        ccw_rotation_offset=float(data["ccw_rotation_offset"]),
        available_rotation_degrees=[float(r) for r in rotations] if rotations else None,
        body_bounds=_parse_bounds(data.get("body_bounds")),
    )


# ── inputs and outputs ─────────────────────────────────────────────


def pack_input_to_dict(pack_input: PackInput) -> dict:
    """Serialize a PackInput to a JSON-safe dict."""
    return {
        "components": [input_component_to_dict(c) for c in pack_input.components],
        **_settings(pack_input),
    }


def pack_input_from_dict(data: dict) -> PackInput:
    """Parse a pack input dict.  Missing settings take their defaults."""
    return PackInput(
        components=[parse_input_component(c) for c in data["components"]],
        **_parse_settings(data),
    )


def pack_output_to_dict(output: PackOutput) -> dict:
    """Serialize a PackOutput to a JSON-safe dict."""
    return {
        "components": [packed_component_to_dict(c) for c in output.components],
        **_settings(output),
    }


def parse_pack_output(data: dict) -> PackOutput:
    """Parse a dict written by ``pack_output_to_dict``."""
    return PackOutput(
        components=[parse_packed_component(c) for c in data["components"]],
        **_parse_settings(data),
    )


def pack_output_to_input(output: PackOutput) -> PackInput:
    """Strip the placements so the same board can be packed again."""
    return PackInput(
        components=[to_input_component(c) for c in output.components],
        min_gap=output.min_gap,
        pack_order_strategy=output.pack_order_strategy,
        pack_placement_strategy=output.pack_placement_strategy,
        disconnected_pack_direction=output.disconnected_pack_direction,
        pack_first=list(output.pack_first) if output.pack_first else None,
        obstacles=list(output.obstacles),
        bounds=output.bounds,
        bounds_outline=list(output.bounds_outline) if output.bounds_outline else None,
    )
