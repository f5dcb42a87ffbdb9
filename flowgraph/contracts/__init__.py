"""
Contracts Module

Explicit data types shared by every layer. No layer may import
implementation details from another layer; they exchange these types only.

DESIGN PRINCIPLES:
==================
1. Record types are immutable (frozen dataclasses)
2. Identity is content-derived (address, txid-source-target)
3. FlowGraph is the single mutable container and is append-only
"""

from .base import (
    Address, SATOSHIS_PER_BTC, ErrorCode, Error, Direction, NodeRole, Position
)
from .transactions import (
    PrevOut, TxInput, TxOutput, TxStatus, Transaction, ChainStats, AddressInfo
)
from .graph import GraphNode, GraphEdge, FlowGraph
from .provider import FetchStatus, FetchResult, FetchFailure, ChainDataProvider

__all__ = [
    'Address', 'SATOSHIS_PER_BTC', 'ErrorCode', 'Error', 'Direction', 'NodeRole', 'Position',
    'PrevOut', 'TxInput', 'TxOutput', 'TxStatus', 'Transaction', 'ChainStats', 'AddressInfo',
    'GraphNode', 'GraphEdge', 'FlowGraph',
    'FetchStatus', 'FetchResult', 'FetchFailure', 'ChainDataProvider',
]
