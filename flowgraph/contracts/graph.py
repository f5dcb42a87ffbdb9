"""
Graph Contracts

Nodes, edges and the append-only FlowGraph container.

IDENTITY RULES:
===============
- One node per distinct address (node id == address)
- Edge id is derived from (txid, source, target) only, so the same transfer
  has the same id no matter which pivot discovered it
- Edge identity, not the (source, target) pair, is the uniqueness key
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple
import hashlib
import json

from .base import Address, NodeRole, Position


@dataclass(frozen=True)
class GraphNode:
    """One address in the graph."""
    id: Address
    is_origin: bool = False
    role: NodeRole = NodeRole.SENDER
    position: Position = field(default_factory=Position)

    def moved_to(self, position: Position, role: Optional[NodeRole] = None) -> GraphNode:
        return replace(self, position=position, role=role or self.role)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'is_origin': self.is_origin,
            'role': self.role.value,
            'position': {'x': self.position.x, 'y': self.position.y},
        }


@dataclass(frozen=True)
class GraphEdge:
    """One transfer of value from source to target inside one transaction."""
    id: str
    source: Address
    target: Address
    value_satoshis: int
    confirmed: bool

    def __post_init__(self):
        if self.value_satoshis < 0:
            raise ValueError(f"Edge {self.id} has negative value {self.value_satoshis}")

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'source': self.source,
            'target': self.target,
            'value_satoshis': self.value_satoshis,
            'confirmed': self.confirmed,
        }


class FlowGraph:
    """
    Insertion-ordered node and edge set anchored at a pivot address.

    GUARANTEES:
    ===========
    1. First write wins: adding an existing node id or edge id is a no-op
    2. Nothing is ever removed; a new root replaces the whole graph
    3. Iteration order is insertion order, so serialization is stable
    """

    def __init__(self, pivot: Address):
        self._pivot = pivot
        self._nodes: Dict[Address, GraphNode] = {}
        self._edges: Dict[str, GraphEdge] = {}

    @property
    def pivot(self) -> Address:
        """The address this graph was built around."""
        return self._pivot

    @property
    def origin(self) -> Optional[Address]:
        for node in self._nodes.values():
            if node.is_origin:
                return node.id
        return None

    @property
    def nodes(self) -> Tuple[GraphNode, ...]:
        return tuple(self._nodes.values())

    @property
    def edges(self) -> Tuple[GraphEdge, ...]:
        return tuple(self._edges.values())

    @property
    def node_ids(self) -> FrozenSet[Address]:
        return frozenset(self._nodes)

    @property
    def edge_ids(self) -> FrozenSet[str]:
        return frozenset(self._edges)

    def node(self, address: Address) -> Optional[GraphNode]:
        return self._nodes.get(address)

    def has_node(self, address: Address) -> bool:
        return address in self._nodes

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self._edges

    def add_node(self, node: GraphNode) -> bool:
        """Add node unless its id is present. Returns True if added."""
        if node.id in self._nodes:
            return False
        self._nodes[node.id] = node
        return True

    def add_edge(self, edge: GraphEdge) -> bool:
        """Add edge unless its id is present. Returns True if added."""
        if edge.id in self._edges:
            return False
        self._edges[edge.id] = edge
        return True

    def update_node(self, node: GraphNode):
        """Replace the record of an existing node (position/role only)."""
        current = self._nodes.get(node.id)
        if current is None:
            raise KeyError(node.id)
        if current.is_origin != node.is_origin:
            raise ValueError(f"is_origin of {node.id} cannot change")
        self._nodes[node.id] = node

    def edges_touching(self, address: Address) -> List[GraphEdge]:
        return [
            e for e in self._edges.values()
            if e.source == address or e.target == address
        ]

    def iter_edges(self) -> Iterator[GraphEdge]:
        return iter(self._edges.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, address: object) -> bool:
        return address in self._nodes

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            'pivot': self._pivot,
            'nodes': [n.to_dict() for n in self._nodes.values()],
            'edges': [e.to_dict() for e in self._edges.values()],
        }

    def fingerprint(self) -> str:
        """SHA-256 of the canonical serialization."""
        content = json.dumps(self.to_dict(), sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(content.encode('utf-8')).hexdigest()

    def __repr__(self) -> str:
        return (
            f"FlowGraph(pivot={self._pivot!r}, nodes={len(self._nodes)}, "
            f"edges={len(self._edges)})"
        )
