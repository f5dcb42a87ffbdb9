"""
Test Fixtures

Explicit, hand-built transactions for deterministic testing.
No random generation, no network.
"""

from typing import Iterable, Optional, Tuple

from flowgraph.contracts import (
    Address, PrevOut, Transaction, TxInput, TxOutput, TxStatus
)


# =============================================================================
# BUILDERS
# =============================================================================

def make_tx(
    txid: str,
    inputs: Iterable[Tuple[Optional[Address], int]] = (),
    outputs: Iterable[Tuple[Optional[Address], int]] = (),
    confirmed: bool = True,
    fee: int = 0,
    block_time: Optional[int] = None
) -> Transaction:
    """Build a Transaction from (address, value) pairs."""
    return Transaction(
        txid=txid,
        fee=fee,
        inputs=tuple(TxInput(prevout=PrevOut(address=a, value=v)) for a, v in inputs),
        outputs=tuple(TxOutput(address=a, value=v) for a, v in outputs),
        status=TxStatus(confirmed=confirmed, block_time=block_time)
    )


def tx_payload(
    txid: str,
    inputs: Iterable[Tuple[Optional[Address], int]] = (),
    outputs: Iterable[Tuple[Optional[Address], int]] = (),
    confirmed: bool = True,
    fee: int = 0
) -> dict:
    """The same transaction in the provider's JSON shape."""
    return {
        "txid": txid,
        "fee": fee,
        "vin": [
            {"prevout": {"scriptpubkey_address": a, "value": v}} for a, v in inputs
        ],
        "vout": [
            {"scriptpubkey_address": a, "value": v} for a, v in outputs
        ],
        "status": {"confirmed": confirmed, "block_time": 1700000000 if confirmed else None},
    }


# =============================================================================
# SCENARIO: P pays Q, R pays P
# =============================================================================

P = "P"
Q = "Q"
R = "R"

# P -> Q, 0.5 BTC, unconfirmed
T1 = make_tx("T1", inputs=[(P, 60_000_000)], outputs=[(Q, 50_000_000)], confirmed=False)

# R -> P, 0.3 BTC, confirmed
T2 = make_tx("T2", inputs=[(R, 30_000_000)], outputs=[(P, 30_000_000)], confirmed=True)

ROOT_HISTORY = (T1, T2)

# Q's own history: it received T1 and paid S
S = "S"
T3 = make_tx("T3", inputs=[(Q, 50_000_000)], outputs=[(S, 45_000_000), (Q, 4_000_000)])
Q_HISTORY = (T1, T3)

# R's own history: it paid P and received from U
U = "U"
T4 = make_tx("T4", inputs=[(U, 70_000_000)], outputs=[(R, 40_000_000)])
R_HISTORY = (T2, T4)


def scenario_histories() -> dict:
    return {P: list(ROOT_HISTORY), Q: list(Q_HISTORY), R: list(R_HISTORY)}
