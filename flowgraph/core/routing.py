"""
Edge Router
===========

Chooses which side of each node an edge attaches to, from the nodes' live
bounding boxes, and produces the cubic curve between the two anchors.

    source LEFT of target  -> source.RIGHT  --> target.LEFT
    source RIGHT of target -> source.LEFT   --> target.RIGHT
    source ABOVE target    -> source.BOTTOM --> target.TOP
    source BELOW target    -> source.TOP    --> target.BOTTOM

The dominant axis of the center-to-center delta decides between horizontal
and vertical; ties go horizontal. Results are recomputed on every call,
since node positions change interactively.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple
import math

from ..config import RoutingConfig
from ..contracts.base import Address, Position
from ..contracts.graph import FlowGraph, GraphEdge


class AnchorSide(Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class NodeBox:
    """Live bounding box: top-left position plus measured size."""
    x: float
    y: float
    width: float = 150.0
    height: float = 40.0

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    @classmethod
    def at(cls, position: Position, size: Optional[Tuple[float, float]] = None,
           config: Optional[RoutingConfig] = None) -> NodeBox:
        config = config or RoutingConfig()
        width, height = size or (config.default_width, config.default_height)
        return cls(position.x, position.y, width, height)


@dataclass(frozen=True)
class EdgeRoute:
    source_x: float
    source_y: float
    target_x: float
    target_y: float
    source_side: AnchorSide
    target_side: AnchorSide

    @property
    def is_horizontal(self) -> bool:
        return self.source_side in (AnchorSide.LEFT, AnchorSide.RIGHT)


@dataclass(frozen=True)
class BezierPath:
    """Cubic curve between two anchors with its label point."""
    route: EdgeRoute
    source_control: Tuple[float, float]
    target_control: Tuple[float, float]
    label_x: float
    label_y: float

    @property
    def svg(self) -> str:
        r = self.route
        return (
            f"M{r.source_x},{r.source_y} "
            f"C{self.source_control[0]},{self.source_control[1]} "
            f"{self.target_control[0]},{self.target_control[1]} "
            f"{r.target_x},{r.target_y}"
        )


def route_edge(source: NodeBox, target: NodeBox) -> EdgeRoute:
    s_cx, s_cy = source.center
    t_cx, t_cy = target.center
    dx = t_cx - s_cx
    dy = t_cy - s_cy

    if abs(dx) >= abs(dy):
        if dx >= 0:
            return EdgeRoute(
                source.x + source.width, s_cy, target.x, t_cy,
                AnchorSide.RIGHT, AnchorSide.LEFT
            )
        return EdgeRoute(
            source.x, s_cy, target.x + target.width, t_cy,
            AnchorSide.LEFT, AnchorSide.RIGHT
        )

    if dy >= 0:
        return EdgeRoute(
            s_cx, source.y + source.height, t_cx, target.y,
            AnchorSide.BOTTOM, AnchorSide.TOP
        )
    return EdgeRoute(
        s_cx, source.y, t_cx, target.y + target.height,
        AnchorSide.TOP, AnchorSide.BOTTOM
    )


def _control_offset(distance: float, curvature: float) -> float:
    if distance >= 0:
        return 0.5 * distance
    return curvature * 25 * math.sqrt(-distance)


def _control_point(side: AnchorSide, x1: float, y1: float, x2: float, y2: float,
                   curvature: float) -> Tuple[float, float]:
    if side is AnchorSide.LEFT:
        return x1 - _control_offset(x1 - x2, curvature), y1
    if side is AnchorSide.RIGHT:
        return x1 + _control_offset(x2 - x1, curvature), y1
    if side is AnchorSide.TOP:
        return x1, y1 - _control_offset(y1 - y2, curvature)
    return x1, y1 + _control_offset(y2 - y1, curvature)


def bezier_path(route: EdgeRoute, curvature: float = 0.25) -> BezierPath:
    """Control points pull each end away from its anchor side."""
    sx, sy, tx, ty = route.source_x, route.source_y, route.target_x, route.target_y
    s_ctrl = _control_point(route.source_side, sx, sy, tx, ty, curvature)
    t_ctrl = _control_point(route.target_side, tx, ty, sx, sy, curvature)

    # point at t = 0.5 on the cubic
    label_x = sx * 0.125 + s_ctrl[0] * 0.375 + t_ctrl[0] * 0.375 + tx * 0.125
    label_y = sy * 0.125 + s_ctrl[1] * 0.375 + t_ctrl[1] * 0.375 + ty * 0.125

    return BezierPath(
        route=route,
        source_control=s_ctrl,
        target_control=t_ctrl,
        label_x=label_x,
        label_y=label_y
    )


class EdgeRouter:
    """Routes every edge of a graph against current node boxes."""

    def __init__(self, config: Optional[RoutingConfig] = None):
        self._config = config or RoutingConfig()

    def box_for(self, position: Position,
                size: Optional[Tuple[float, float]] = None) -> NodeBox:
        return NodeBox.at(position, size, self._config)

    def route(self, edge: GraphEdge, boxes: Mapping[Address, NodeBox]) -> Optional[BezierPath]:
        """None when either endpoint has no box."""
        source = boxes.get(edge.source)
        target = boxes.get(edge.target)
        if source is None or target is None:
            return None
        return bezier_path(route_edge(source, target), self._config.curvature)

    def route_graph(
        self,
        graph: FlowGraph,
        sizes: Optional[Mapping[Address, Tuple[float, float]]] = None
    ) -> Dict[str, BezierPath]:
        """Route all edges using node positions and measured sizes."""
        sizes = sizes or {}
        boxes = {
            node.id: self.box_for(node.position, sizes.get(node.id))
            for node in graph.nodes
        }
        routes: Dict[str, BezierPath] = {}
        for edge in graph.iter_edges():
            path = self.route(edge, boxes)
            if path is not None:
                routes[edge.id] = path
        return routes
