"""
Layout Engine
=============

Deterministic initial positions. This is a rendering default, not a
physics simulation: nodes may be moved interactively afterwards.

ROOT LAYOUT:
    origin at (0, 0), senders in a left column, receivers in a right column,
    each column centered vertically on y = 0.

EXPANSION LAYOUT:
    new nodes evenly spaced on a circle around the expanded node's current
    position. Previously placed nodes are never moved.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import math

from ..config import LayoutConfig
from ..contracts.base import Address, NodeRole, Position
from ..contracts.graph import FlowGraph


class LayoutEngine:

    def __init__(self, config: Optional[LayoutConfig] = None):
        self._config = config or LayoutConfig()

    @property
    def config(self) -> LayoutConfig:
        return self._config

    def column_y(self, index: int, total: int) -> float:
        """Vertical position of the index-th of `total` nodes in a column."""
        return ((total - 1) / -2 + index) * self._config.row_spacing

    def partition(self, graph: FlowGraph) -> Tuple[List[Address], List[Address]]:
        """
        Split the pivot's counterparties into (senders, receivers).

        An address on both sides goes to the side carrying more value;
        equal volume goes to the sender column.
        """
        pivot = graph.pivot
        sent: Dict[Address, int] = {}
        received: Dict[Address, int] = {}

        for edge in graph.iter_edges():
            if edge.target == pivot and edge.source != pivot:
                sent[edge.source] = sent.get(edge.source, 0) + edge.value_satoshis
            elif edge.source == pivot and edge.target != pivot:
                received[edge.target] = received.get(edge.target, 0) + edge.value_satoshis

        senders = []
        receivers = []
        for node in graph.nodes:
            if node.id == pivot:
                continue
            is_sender = node.id in sent
            is_receiver = node.id in received

            if is_sender and is_receiver:
                if sent[node.id] >= received[node.id]:
                    senders.append(node.id)
                else:
                    receivers.append(node.id)
            elif is_sender:
                senders.append(node.id)
            elif is_receiver:
                receivers.append(node.id)

        return senders, receivers

    def layout_root(self, graph: FlowGraph) -> FlowGraph:
        """Assign column positions and roles in place. Returns the same graph."""
        pivot_node = graph.node(graph.pivot)
        if pivot_node is not None:
            graph.update_node(pivot_node.moved_to(Position(0.0, 0.0), NodeRole.ORIGIN))

        senders, receivers = self.partition(graph)

        for i, address in enumerate(senders):
            position = Position(self._config.column_x_left, self.column_y(i, len(senders)))
            graph.update_node(graph.node(address).moved_to(position, NodeRole.SENDER))

        for i, address in enumerate(receivers):
            position = Position(self._config.column_x_right, self.column_y(i, len(receivers)))
            graph.update_node(graph.node(address).moved_to(position, NodeRole.RECEIVER))

        return graph

    def radial_positions(self, center: Position, count: int) -> List[Position]:
        """The i-th of `count` points at angle 2*pi*i/count around `center`."""
        radius = self._config.expansion_radius
        positions = []
        for i in range(count):
            angle = 2 * math.pi * i / count
            positions.append(Position(
                center.x + radius * math.cos(angle),
                center.y + radius * math.sin(angle)
            ))
        return positions
