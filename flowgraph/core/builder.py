"""
Graph Builder

Folds a transaction list through the classifier into a FlowGraph.

INVARIANT: build_graph(txs, pivot) is a PURE FUNCTION
Same transactions in the same order -> identical graph and fingerprint.
"""

from __future__ import annotations
from typing import Iterable

from ..contracts.base import Address, NodeRole
from ..contracts.transactions import Transaction
from ..contracts.graph import FlowGraph, GraphNode
from .classifier import classify_transaction


def build_graph(
    transactions: Iterable[Transaction],
    pivot: Address,
    is_root: bool = True
) -> FlowGraph:
    """
    Build the graph of flows touching `pivot` within `transactions`.

    The pivot is seeded first with the ORIGIN role. `is_origin` is only set
    for a root build; expansion subgraphs leave it false so that merging
    never produces a second origin.

    Nodes and edges: first write wins. A later contribution with an edge id
    already seen is discarded, never summed into the existing edge.
    """
    graph = FlowGraph(pivot)
    graph.add_node(GraphNode(id=pivot, is_origin=is_root, role=NodeRole.ORIGIN))

    for tx in transactions:
        for contribution in classify_transaction(tx, pivot):
            graph.add_node(contribution.node)
            graph.add_edge(contribution.edge)

    return graph
