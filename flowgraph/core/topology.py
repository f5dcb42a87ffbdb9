"""
Topology Engine
===============

Structural analysis of a money-flow graph using graph topology.

This engine computes TOPOLOGY (geometry), not RISK (judgment).

ALLOWED:
- Connected components (clusters of linked addresses)
- Path finding (how value could have travelled between two addresses)
- Structural metrics (density, total value)

FORBIDDEN:
- Mutating the FlowGraph it reads
- Scoring addresses
"""

from __future__ import annotations
from typing import List, Optional, Set
from dataclasses import dataclass
import networkx as nx

from ..contracts.base import Address
from ..contracts.graph import FlowGraph


@dataclass(frozen=True)
class GraphMetrics:
    """Immutable structural metrics for a flow graph."""
    node_count: int
    edge_count: int
    density: float
    component_count: int
    total_value_satoshis: int

    def to_dict(self) -> dict:
        return {
            'node_count': self.node_count,
            'edge_count': self.edge_count,
            'density': self.density,
            'component_count': self.component_count,
            'total_value_satoshis': self.total_value_satoshis,
        }


class TopologyEngine:
    """
    Read-only NetworkX view over a FlowGraph.

    A MultiDiGraph keeps one networkx edge per transfer, keyed by edge id,
    so parallel transfers between the same pair stay distinct.
    """

    def __init__(self):
        self._graph = nx.MultiDiGraph()

    def build_graph(self, graph: FlowGraph) -> None:
        """
        Build from a FlowGraph.

        Replaces internal graph state.
        """
        self._graph = nx.MultiDiGraph()

        for node in graph.nodes:
            self._graph.add_node(node.id, role=node.role.value, is_origin=node.is_origin)

        for edge in graph.iter_edges():
            self._graph.add_edge(
                edge.source,
                edge.target,
                key=edge.id,
                value=edge.value_satoshis,
                confirmed=edge.confirmed
            )

    def get_connected_components(self) -> List[Set[Address]]:
        """Weakly connected components; returned in arbitrary order."""
        if not self._graph:
            return []
        return [set(c) for c in nx.weakly_connected_components(self._graph)]

    def compute_metrics(self) -> GraphMetrics:
        if not self._graph:
            return GraphMetrics(0, 0, 0.0, 0, 0)

        total_value = sum(v for _, _, v in self._graph.edges(data='value', default=0))
        return GraphMetrics(
            node_count=self._graph.number_of_nodes(),
            edge_count=self._graph.number_of_edges(),
            density=nx.density(self._graph),
            component_count=nx.number_weakly_connected_components(self._graph),
            total_value_satoshis=total_value
        )

    def trace_path(self, start: Address, end: Address) -> Optional[List[Address]]:
        """
        Shortest chain of addresses linking two addresses, ignoring direction.

        A geometric trace only; it does not claim that the same coins moved.
        """
        try:
            return nx.shortest_path(self._graph.to_undirected(as_view=True), source=start, target=end)
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None

    def flows_between(self, a: Address, b: Address) -> List[str]:
        """Edge ids of every transfer between two addresses, either direction."""
        edge_ids = []
        for u, v in ((a, b), (b, a)):
            if self._graph.has_edge(u, v):
                edge_ids.extend(self._graph[u][v].keys())
        return edge_ids

    def clear(self):
        self._graph.clear()


def analyze(graph: FlowGraph) -> TopologyEngine:
    """Convenience: an engine already built from `graph`."""
    engine = TopologyEngine()
    engine.build_graph(graph)
    return engine
