"""
Transaction Contracts

Immutable records for the chain data a provider returns.

The field layout follows the Esplora/Blockstream REST schema:
    vin[].prevout.scriptpubkey_address / value
    vout[].scriptpubkey_address / value
    status.confirmed / status.block_time

Missing addresses are preserved as None. They are skipped later by the
classifier, never rejected here.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .base import Address


def _record(value: object, what: str) -> dict:
    if not isinstance(value, dict):
        raise TypeError(f"Expected a JSON object for {what}, got {type(value).__name__}")
    return value


def _amount(value: object) -> int:
    amount = int(value or 0)
    if amount < 0:
        raise ValueError(f"Negative amount {amount}")
    return amount


@dataclass(frozen=True)
class PrevOut:
    """The output an input spends, when the provider could resolve it."""
    address: Optional[Address]
    value: int = 0


@dataclass(frozen=True)
class TxInput:
    prevout: Optional[PrevOut] = None

    @property
    def address(self) -> Optional[Address]:
        return self.prevout.address if self.prevout else None

    @property
    def value(self) -> int:
        return self.prevout.value if self.prevout else 0


@dataclass(frozen=True)
class TxOutput:
    address: Optional[Address]
    value: int = 0


@dataclass(frozen=True)
class TxStatus:
    confirmed: bool
    block_time: Optional[int] = None


@dataclass(frozen=True)
class Transaction:
    """One transaction as returned by the chain data provider."""
    txid: str
    fee: int
    inputs: Tuple[TxInput, ...]
    outputs: Tuple[TxOutput, ...]
    status: TxStatus

    @property
    def confirmed(self) -> bool:
        return self.status.confirmed

    @classmethod
    def from_dict(cls, payload: dict) -> Transaction:
        """
        Parse a provider JSON record.

        Raises KeyError/TypeError/ValueError on records without a txid, with
        non-object entries, or with non-numeric or negative values; the
        fetcher reports those as parse errors.
        """
        payload = _record(payload, "transaction")

        inputs = []
        for vin in payload.get("vin") or []:
            prevout = _record(vin, "vin entry").get("prevout")
            if prevout is None:
                inputs.append(TxInput(prevout=None))
                continue
            prevout = _record(prevout, "prevout")
            inputs.append(TxInput(prevout=PrevOut(
                address=prevout.get("scriptpubkey_address"),
                value=_amount(prevout.get("value"))
            )))

        outputs = []
        for vout in payload.get("vout") or []:
            vout = _record(vout, "vout entry")
            outputs.append(TxOutput(
                address=vout.get("scriptpubkey_address"),
                value=_amount(vout.get("value"))
            ))

        status = _record(payload.get("status") or {}, "status")
        return cls(
            txid=str(payload["txid"]),
            fee=_amount(payload.get("fee")),
            inputs=tuple(inputs),
            outputs=tuple(outputs),
            status=TxStatus(
                confirmed=bool(status.get("confirmed", False)),
                block_time=status.get("block_time")
            )
        )


# =============================================================================
# ADDRESS SUMMARY
# =============================================================================

@dataclass(frozen=True)
class ChainStats:
    funded_txo_sum: int = 0
    spent_txo_sum: int = 0
    tx_count: int = 0

    @property
    def balance(self) -> int:
        return self.funded_txo_sum - self.spent_txo_sum

    @classmethod
    def from_dict(cls, payload: Optional[dict]) -> ChainStats:
        payload = _record(payload or {}, "stats")
        return cls(
            funded_txo_sum=_amount(payload.get("funded_txo_sum")),
            spent_txo_sum=_amount(payload.get("spent_txo_sum")),
            tx_count=_amount(payload.get("tx_count"))
        )


@dataclass(frozen=True)
class AddressInfo:
    """Confirmed and mempool totals for one address."""
    address: Address
    chain_stats: ChainStats = field(default_factory=ChainStats)
    mempool_stats: ChainStats = field(default_factory=ChainStats)

    @property
    def balance_satoshis(self) -> int:
        return self.chain_stats.balance + self.mempool_stats.balance

    @classmethod
    def from_dict(cls, payload: dict) -> AddressInfo:
        return cls(
            address=str(payload["address"]),
            chain_stats=ChainStats.from_dict(payload.get("chain_stats")),
            mempool_stats=ChainStats.from_dict(payload.get("mempool_stats"))
        )
