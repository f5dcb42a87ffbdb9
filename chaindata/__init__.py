"""
Chain Data Ingestion

Providers that turn an address into its transaction history.
All of them implement flowgraph.contracts.ChainDataProvider.
"""

from .fetcher import BlockstreamFetcher, parse_transactions, parse_address_info
from .mock import StaticChainData

__all__ = ['BlockstreamFetcher', 'parse_transactions', 'parse_address_info', 'StaticChainData']
