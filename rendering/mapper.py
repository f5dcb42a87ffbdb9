"""
Graph to View Mapper

Converts a live FlowGraph plus its expansion state into a GraphView.

MAPPING BOUNDARY:
=================
This is the ONLY place where graph entities become render DTOs.

MAPPING RULES:
==============
1. Labels: address truncated to first 8 + "…" + last 6 characters
2. Edge label: value in BTC with 4 decimals and a " BTC" suffix
3. Unconfirmed edges are animated, confirmed ones static
4. GREEN when the edge's target is the active pivot, AMBER otherwise
5. Preserve graph ordering
"""

from __future__ import annotations
from typing import Mapping, Optional, Tuple

from flowgraph.contracts import Address, FlowGraph, GraphEdge, GraphNode, SATOSHIS_PER_BTC
from flowgraph.core.routing import EdgeRouter
from flowgraph.expansion.state import ExpansionState, ExpansionStateStore

from .visualization import (
    AddressFormat, EdgeColor, GraphView, NodeAffordance, RenderEdge, RenderNode, RoutedEdge
)


def truncate_address(address: Address) -> str:
    if len(address) <= 14:
        return address
    return f"{address[:8]}…{address[-6:]}"


def format_btc(value_satoshis: int) -> str:
    return f"{value_satoshis / SATOSHIS_PER_BTC:.4f} BTC"


def detect_address_format(address: Address) -> AddressFormat:
    if address.startswith("1"):
        return AddressFormat.P2PKH
    if address.startswith("3"):
        return AddressFormat.P2SH
    return AddressFormat.BECH32


class GraphViewMapper:
    """
    Maps a FlowGraph to a GraphView.

    The store is optional; without it every non-origin node is EXPANDABLE.
    """

    def __init__(self, router: Optional[EdgeRouter] = None):
        self._router = router or EdgeRouter()

    def to_view(
        self,
        graph: FlowGraph,
        store: Optional[ExpansionStateStore] = None,
        pivot: Optional[Address] = None,
        sizes: Optional[Mapping[Address, Tuple[float, float]]] = None
    ) -> GraphView:
        """
        Build the view for `pivot` (defaults to the graph's pivot).

        Passing `sizes` (measured width/height per node) also routes every edge.
        """
        pivot = pivot or graph.pivot
        nodes = tuple(self.map_node(n, store) for n in graph.nodes)
        edges = tuple(self.map_edge(e, pivot) for e in graph.iter_edges())
        routes = self.route(graph, sizes) if sizes is not None else ()

        return GraphView(
            pivot=pivot,
            nodes=nodes,
            edges=edges,
            routes=routes,
            fingerprint=graph.fingerprint()
        )

    def map_node(self, node: GraphNode, store: Optional[ExpansionStateStore] = None) -> RenderNode:
        return RenderNode(
            node_id=node.id,
            label=truncate_address(node.id) if node.id else "?",
            role=node.role.value,
            x=node.position.x,
            y=node.position.y,
            is_origin=node.is_origin,
            affordance=self._affordance(node, store),
            address_format=detect_address_format(node.id)
        )

    def map_edge(self, edge: GraphEdge, pivot: Address) -> RenderEdge:
        return RenderEdge(
            edge_id=edge.id,
            source_id=edge.source,
            target_id=edge.target,
            label=format_btc(edge.value_satoshis),
            animated=not edge.confirmed,
            color=EdgeColor.GREEN if edge.target == pivot else EdgeColor.AMBER
        )

    def route(
        self,
        graph: FlowGraph,
        sizes: Optional[Mapping[Address, Tuple[float, float]]] = None
    ) -> Tuple[RoutedEdge, ...]:
        """Recomputed on every call from current node positions."""
        routed = []
        for edge_id, path in self._router.route_graph(graph, sizes).items():
            routed.append(RoutedEdge(
                edge_id=edge_id,
                source_side=path.route.source_side.value,
                target_side=path.route.target_side.value,
                path=path.svg,
                label_x=path.label_x,
                label_y=path.label_y
            ))
        return tuple(routed)

    def _affordance(self, node: GraphNode, store: Optional[ExpansionStateStore]) -> NodeAffordance:
        if node.is_origin:
            return NodeAffordance.NONE
        if store is None:
            return NodeAffordance.EXPANDABLE
        state = store.state_of(node.id)
        if state is ExpansionState.LOADING:
            return NodeAffordance.LOADING
        if state is ExpansionState.EXPANDED:
            return NodeAffordance.EXPANDED
        return NodeAffordance.EXPANDABLE
