"""
Static Chain Data Provider
==========================

In-memory provider for tests, demos and offline runs.

GUARANTEES:
- Same address -> identical transaction list on every call
- Explicit failure modes can be triggered per address
- No network access
"""

from __future__ import annotations
import asyncio
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Set

from flowgraph.contracts import (
    Address, AddressInfo, Transaction,
    ChainDataProvider, FetchFailure, FetchResult, FetchStatus
)


class StaticChainData(ChainDataProvider):
    """
    Serves transactions from a dict keyed by address.

    Unknown addresses return an empty history, like the real API does for
    an address that never transacted.
    """

    def __init__(
        self,
        histories: Optional[Mapping[Address, Iterable[Transaction]]] = None,
        infos: Optional[Mapping[Address, AddressInfo]] = None,
        failing: Iterable[Address] = (),
        failure_status: FetchStatus = FetchStatus.HTTP_ERROR,
        delays: Optional[Mapping[Address, float]] = None
    ):
        self._histories: Dict[Address, List[Transaction]] = {
            addr: list(txs) for addr, txs in (histories or {}).items()
        }
        self._infos = dict(infos or {})
        self._failing: Set[Address] = set(failing)
        self._failure_status = failure_status
        self._delays = dict(delays or {})
        self.calls: List[Address] = []

    def fail(self, address: Address):
        self._failing.add(address)

    def recover(self, address: Address):
        self._failing.discard(address)

    async def fetch_transactions(self, address: Address) -> List[Transaction]:
        self.calls.append(address)
        delay = self._delays.get(address, 0.0)
        await asyncio.sleep(delay)
        if address in self._failing:
            raise FetchFailure(self._failure(address, f"/address/{address}/txs"))
        return list(self._histories.get(address, []))

    async def fetch_address_info(self, address: Address) -> AddressInfo:
        if address in self._failing:
            raise FetchFailure(self._failure(address, f"/address/{address}"))
        return self._infos.get(address, AddressInfo(address=address))

    def _failure(self, address: Address, path: str) -> FetchResult:
        now = datetime.now(timezone.utc)
        return FetchResult(
            address=address,
            url=f"static:{path}",
            status=self._failure_status,
            attempted_at=now,
            completed_at=now,
            http_status=503 if self._failure_status is FetchStatus.HTTP_ERROR else None,
            error_message=f"Simulated {self._failure_status.value}"
        )
