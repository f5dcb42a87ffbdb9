"""
Transaction Classifier
======================

Pure functions deciding how one transaction relates to a pivot address.

DIRECTION RULE:
===============
A transaction is OUTGOING from the pivot if any input spends an output
owned by the pivot; otherwise it is INCOMING.

- Outgoing: every output paying someone other than the pivot is a flow
  pivot -> output address (change back to the pivot is ignored).
- Incoming: every input funded by someone other than the pivot is a flow
  input address -> pivot.

Inputs without a resolvable prior output and outputs without an address
(non-standard scripts) contribute nothing. A transaction that does not
reference the pivot at all yields nothing; it is not an error.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from ..contracts.base import Address, Direction, NodeRole
from ..contracts.transactions import Transaction
from ..contracts.graph import GraphNode, GraphEdge


@dataclass(frozen=True)
class FlowContribution:
    """A counterparty node and the edge linking it to the pivot."""
    node: GraphNode
    edge: GraphEdge
    direction: Direction


@dataclass(frozen=True)
class TransactionSummary:
    """Per-transaction view used by transaction listings."""
    txid: str
    direction: Direction
    value_satoshis: int
    fee: int
    confirmed: bool
    block_time: Optional[int]


class DirectionFilter(Enum):
    ALL = "all"
    IN = "in"
    OUT = "out"


class StatusFilter(Enum):
    ALL = "all"
    CONFIRMED = "confirmed"
    UNCONFIRMED = "unconfirmed"


def make_edge_id(txid: str, source: Address, target: Address) -> str:
    """Content-derived edge identity."""
    return f"{txid}-{source}-{target}"


def classify_direction(tx: Transaction, pivot: Address) -> Direction:
    if any(inp.address == pivot for inp in tx.inputs):
        return Direction.OUTGOING
    return Direction.INCOMING


def classify_transaction(tx: Transaction, pivot: Address) -> List[FlowContribution]:
    """
    Emit one contribution per counterparty input/output.

    Order follows the transaction's own input/output order.
    """
    direction = classify_direction(tx, pivot)
    contributions = []

    if direction is Direction.OUTGOING:
        for out in tx.outputs:
            target = out.address
            if not target or target == pivot:
                continue
            contributions.append(FlowContribution(
                node=GraphNode(id=target, role=NodeRole.RECEIVER),
                edge=GraphEdge(
                    id=make_edge_id(tx.txid, pivot, target),
                    source=pivot,
                    target=target,
                    value_satoshis=out.value,
                    confirmed=tx.confirmed
                ),
                direction=direction
            ))
    else:
        for inp in tx.inputs:
            source = inp.address
            if not source or source == pivot:
                continue
            contributions.append(FlowContribution(
                node=GraphNode(id=source, role=NodeRole.SENDER),
                edge=GraphEdge(
                    id=make_edge_id(tx.txid, source, pivot),
                    source=source,
                    target=pivot,
                    value_satoshis=inp.value,
                    confirmed=tx.confirmed
                ),
                direction=direction
            ))

    return contributions


def summarize_transaction(tx: Transaction, pivot: Address) -> TransactionSummary:
    """
    Net value of a transaction from the pivot's point of view.

    Incoming: sum of outputs paying the pivot.
    Outgoing: sum of outputs paying anyone else.
    """
    direction = classify_direction(tx, pivot)
    if direction is Direction.INCOMING:
        value = sum(out.value for out in tx.outputs if out.address == pivot)
    else:
        value = sum(out.value for out in tx.outputs if out.address != pivot)

    return TransactionSummary(
        txid=tx.txid,
        direction=direction,
        value_satoshis=value,
        fee=tx.fee,
        confirmed=tx.confirmed,
        block_time=tx.status.block_time
    )


def filter_summaries(
    summaries: Iterable[TransactionSummary],
    direction: DirectionFilter = DirectionFilter.ALL,
    status: StatusFilter = StatusFilter.ALL
) -> List[TransactionSummary]:
    """Keep summaries matching both filters, in their original order."""
    kept = []
    for s in summaries:
        if status is StatusFilter.CONFIRMED and not s.confirmed:
            continue
        if status is StatusFilter.UNCONFIRMED and s.confirmed:
            continue
        if direction is not DirectionFilter.ALL and s.direction.value != direction.value:
            continue
        kept.append(s)
    return kept
