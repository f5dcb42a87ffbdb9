"""
Graph Visualization Contracts

Responsibility:
Renderable views of a FlowGraph. Pure data; the mapper builds them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class EdgeColor(Enum):
    """Color hint relative to the active pivot."""
    GREEN = "green"   # incoming: target is the pivot
    AMBER = "amber"   # outgoing


class NodeAffordance(Enum):
    """What the expand control of a node shows."""
    NONE = "none"            # origin: never expandable
    EXPANDABLE = "expandable"
    LOADING = "loading"
    EXPANDED = "expanded"


class AddressFormat(Enum):
    P2PKH = "P2PKH"
    P2SH = "P2SH"
    BECH32 = "Bech32"


@dataclass(frozen=True)
class RenderNode:
    """Renderable graph node."""
    node_id: str
    label: str
    role: str
    x: float
    y: float
    is_origin: bool
    affordance: NodeAffordance
    address_format: AddressFormat

    def to_dict(self) -> dict:
        return {
            'id': self.node_id,
            'label': self.label,
            'role': self.role,
            'position': {'x': self.x, 'y': self.y},
            'is_origin': self.is_origin,
            'affordance': self.affordance.value,
            'address_format': self.address_format.value,
        }


@dataclass(frozen=True)
class RenderEdge:
    """Renderable graph edge."""
    edge_id: str
    source_id: str
    target_id: str
    label: str
    animated: bool
    color: EdgeColor

    def to_dict(self) -> dict:
        return {
            'id': self.edge_id,
            'source': self.source_id,
            'target': self.target_id,
            'label': self.label,
            'animated': self.animated,
            'color': self.color.value,
        }


@dataclass(frozen=True)
class RoutedEdge:
    """Anchor sides and curve geometry for one edge at one moment."""
    edge_id: str
    source_side: str
    target_side: str
    path: str
    label_x: float
    label_y: float

    def to_dict(self) -> dict:
        return {
            'id': self.edge_id,
            'source_side': self.source_side,
            'target_side': self.target_side,
            'path': self.path,
            'label': {'x': self.label_x, 'y': self.label_y},
        }


@dataclass(frozen=True)
class GraphView:
    """
    Pre-layouted graph for one active pivot.
    Node and edge order follow the graph's insertion order.
    """
    pivot: str
    nodes: Tuple[RenderNode, ...]
    edges: Tuple[RenderEdge, ...]
    routes: Tuple[RoutedEdge, ...] = field(default_factory=tuple)
    fingerprint: Optional[str] = None

    def node(self, node_id: str) -> Optional[RenderNode]:
        for n in self.nodes:
            if n.node_id == node_id:
                return n
        return None

    def edge(self, edge_id: str) -> Optional[RenderEdge]:
        for e in self.edges:
            if e.edge_id == edge_id:
                return e
        return None

    def to_dict(self) -> dict:
        return {
            'pivot': self.pivot,
            'fingerprint': self.fingerprint,
            'nodes': [n.to_dict() for n in self.nodes],
            'edges': [e.to_dict() for e in self.edges],
            'routes': [r.to_dict() for r in self.routes],
        }
