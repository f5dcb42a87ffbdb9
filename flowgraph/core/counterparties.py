"""Counterparty ranking by transferred volume."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List

from ..contracts.base import Address
from ..contracts.transactions import Transaction
from .classifier import classify_transaction

TOP_N = 10


@dataclass(frozen=True)
class Counterparty:
    address: Address
    interaction_count: int
    total_volume_satoshis: int

    def to_dict(self) -> dict:
        return {
            'address': self.address,
            'interaction_count': self.interaction_count,
            'total_volume_satoshis': self.total_volume_satoshis,
        }


def extract_counterparties(
    transactions: Iterable[Transaction],
    own_address: Address,
    top_n: int = TOP_N
) -> List[Counterparty]:
    """
    Top counterparties of `own_address` by total volume, descending.

    Each qualifying input/output counts as one interaction, even when the
    same address appears twice in one transaction. Ties keep first-seen order.
    """
    counts: Dict[Address, int] = {}
    volumes: Dict[Address, int] = {}

    for tx in transactions:
        for contribution in classify_transaction(tx, own_address):
            addr = contribution.node.id
            counts[addr] = counts.get(addr, 0) + 1
            volumes[addr] = volumes.get(addr, 0) + contribution.edge.value_satoshis

    ranked = [
        Counterparty(address=addr, interaction_count=counts[addr], total_volume_satoshis=volumes[addr])
        for addr in counts
    ]
    # sorted() is stable, so equal volumes keep insertion order
    ranked = sorted(ranked, key=lambda c: c.total_volume_satoshis, reverse=True)
    return ranked[:top_n]
