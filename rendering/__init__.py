"""
Rendering Layer

Responsibility:
Read-only render DTOs for a graph session.

PRINCIPLES:
1. Immutable (Frozen)
2. No graph mutation
3. Geometry recomputed on request, never cached
"""

from .visualization import (
    EdgeColor, NodeAffordance, AddressFormat,
    RenderNode, RenderEdge, RoutedEdge, GraphView
)
from .mapper import GraphViewMapper, truncate_address, format_btc, detect_address_format

__all__ = [
    'EdgeColor', 'NodeAffordance', 'AddressFormat',
    'RenderNode', 'RenderEdge', 'RoutedEdge', 'GraphView',
    'GraphViewMapper', 'truncate_address', 'format_btc', 'detect_address_format',
]
