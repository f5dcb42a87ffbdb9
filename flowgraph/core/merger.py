"""
Graph Merger

Appends an expansion subgraph to a live graph without duplicating identity.

GUARANTEES:
===========
1. Only node ids and edge ids not already in the live graph are appended
2. Existing nodes are never moved, re-roled or re-flagged
3. Merging the same subgraph twice is a no-op the second time
4. The merged id sets do not depend on the order merges are applied in
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Set, Tuple

from ..contracts.base import Address, NodeRole
from ..contracts.graph import FlowGraph, GraphEdge, GraphNode
from .layout import LayoutEngine


@dataclass(frozen=True)
class MergeReport:
    """What a merge appended."""
    pivot: Address
    added_nodes: Tuple[GraphNode, ...] = field(default_factory=tuple)
    added_edges: Tuple[GraphEdge, ...] = field(default_factory=tuple)

    @property
    def is_noop(self) -> bool:
        return not self.added_nodes and not self.added_edges


class GraphMerger:

    def __init__(self, layout: Optional[LayoutEngine] = None):
        self._layout = layout or LayoutEngine()

    def merge(self, graph: FlowGraph, subgraph: FlowGraph) -> MergeReport:
        """
        Merge `subgraph` (pivoted at P) into `graph` in place.

        Raises ValueError if P is not already a node of `graph`.
        """
        pivot = subgraph.pivot
        anchor = graph.node(pivot)
        if anchor is None:
            raise ValueError(f"Subgraph pivot {pivot} is not in the graph")

        seen_nodes = graph.node_ids
        seen_edges = graph.edge_ids

        new_nodes = [n for n in subgraph.nodes if n.id not in seen_nodes]
        new_edges = [e for e in subgraph.edges if e.id not in seen_edges]

        suppliers: Set[Address] = {
            e.source for e in subgraph.iter_edges() if e.target == pivot
        }

        positions = self._layout.radial_positions(anchor.position, len(new_nodes))
        placed = []
        for node, position in zip(new_nodes, positions):
            role = NodeRole.SENDER if node.id in suppliers else NodeRole.RECEIVER
            placed.append(GraphNode(
                id=node.id,
                is_origin=False,
                role=role,
                position=position
            ))

        for node in placed:
            graph.add_node(node)
        for edge in new_edges:
            graph.add_edge(edge)

        return MergeReport(
            pivot=pivot,
            added_nodes=tuple(placed),
            added_edges=tuple(new_edges)
        )
