"""
Core Engine

Pure, synchronous graph operations. Nothing here performs I/O or awaits.
"""

from .classifier import (
    FlowContribution, TransactionSummary, DirectionFilter, StatusFilter,
    make_edge_id, classify_direction, classify_transaction, summarize_transaction, filter_summaries
)
from .builder import build_graph
from .counterparties import Counterparty, extract_counterparties
from .layout import LayoutEngine
from .merger import GraphMerger, MergeReport
from .routing import (
    AnchorSide, NodeBox, EdgeRoute, BezierPath, EdgeRouter, route_edge, bezier_path
)
from .topology import GraphMetrics, TopologyEngine, analyze

__all__ = [
    'FlowContribution', 'TransactionSummary', 'DirectionFilter', 'StatusFilter',
    'make_edge_id', 'classify_direction', 'classify_transaction', 'summarize_transaction',
    'filter_summaries',
    'build_graph',
    'Counterparty', 'extract_counterparties',
    'LayoutEngine',
    'GraphMerger', 'MergeReport',
    'AnchorSide', 'NodeBox', 'EdgeRoute', 'BezierPath', 'EdgeRouter', 'route_edge', 'bezier_path',
    'GraphMetrics', 'TopologyEngine', 'analyze',
]
