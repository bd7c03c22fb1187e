"""Diagnostic drawing of placed components and finished pack runs."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from padpack.geometry import Bounds, Segment, segments_from_vertices
from padpack.models import InputObstacle, PackedComponent, PackOutput
from padpack.placement import transform_body_bounds
from padpack.solvers import GraphicsObject, color_for_string, draw_segment


def _rect(box: Bounds, **style) -> dict:
    return {
        "center": {"x": box.center.x, "y": box.center.y},
        "width": box.width,
        "height": box.height,
        **style,
    }


def draw_packed_component(
    component: PackedComponent, graphics: Optional[GraphicsObject] = None,
) -> GraphicsObject:
    """Pads coloured by network, the body box outlined, the center labelled."""
    graphics = graphics or GraphicsObject()
    if component.body_bounds is not None:
        body = transform_body_bounds(
            component.body_bounds, component.center, component.ccw_rotation_offset,
        )
        graphics.rects.append(_rect(body, fill="rgba(0,0,0,0.05)", stroke="#999"))
    for pad in component.pads:
        graphics.rects.append(_rect(
            pad.bounds,
            fill=color_for_string(pad.network_id, 0.5),
            stroke="#333",
            label=f"{pad.pad_id} ({pad.network_id})",
        ))
    graphics.points.append({
        "x": component.center.x,
        "y": component.center.y,
        "label": f"{component.component_id} rot={component.ccw_rotation_offset:g}",
    })
    return graphics


def draw_obstacles(
    obstacles: Iterable[InputObstacle], graphics: Optional[GraphicsObject] = None,
) -> GraphicsObject:
    graphics = graphics or GraphicsObject()
    for obstacle in obstacles:
        graphics.rects.append(_rect(
            obstacle.bounds, fill="rgba(0,0,0,0.1)", stroke="#555", label=obstacle.obstacle_id,
        ))
    return graphics


def draw_outlines(
    outlines: Sequence[Sequence[Segment]], graphics: Optional[GraphicsObject] = None,
) -> GraphicsObject:
    graphics = graphics or GraphicsObject()
    for loop in outlines:
        for seg in loop:
            graphics.lines.append(draw_segment(seg, "rgba(0,0,0,0.5)", dash="4 4"))
    return graphics


def get_graphics_from_pack_output(output: PackOutput) -> GraphicsObject:
    """Snapshot of a finished run: bounds, board outline, obstacles and every component."""
    graphics = GraphicsObject()
    if output.bounds is not None:
        graphics.rects.append(_rect(output.bounds, stroke="#f00", label="bounds"))
    if output.bounds_outline:
        for seg in segments_from_vertices(output.bounds_outline):
            graphics.lines.append(draw_segment(seg, "#f00"))
    draw_obstacles(output.obstacles, graphics)
    for component in output.components:
        draw_packed_component(component, graphics)
    return graphics
