"""
Expansion State Store

Per-address expansion state for one graph session.

    UNEXPANDED --start_loading--> LOADING --mark_expanded+stop_loading--> EXPANDED
                                     |
                                     +----stop_loading (failure)-----> UNEXPANDED

Every operation is idempotent and safe to call outside that flow; the
store never raises for an unknown or repeated address. It is owned by a
single session, never shared as a module-level singleton.
"""

from __future__ import annotations
from enum import Enum
from typing import FrozenSet, Optional, Set

from ..contracts.base import Address


class ExpansionState(Enum):
    UNEXPANDED = "unexpanded"
    LOADING = "loading"
    EXPANDED = "expanded"


class ExpansionStateStore:

    def __init__(self):
        self._loading: Set[Address] = set()
        self._expanded: Set[Address] = set()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start_loading(self, address: Address):
        self._loading.add(address)

    def stop_loading(self, address: Address):
        self._loading.discard(address)

    def mark_expanded(self, address: Address):
        self._expanded.add(address)

    def reset(self):
        self._loading.clear()
        self._expanded.clear()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def loading(self) -> FrozenSet[Address]:
        return frozenset(self._loading)

    @property
    def expanded(self) -> FrozenSet[Address]:
        return frozenset(self._expanded)

    def is_loading(self, address: Address) -> bool:
        return address in self._loading

    def is_expanded(self, address: Address) -> bool:
        return address in self._expanded

    def state_of(self, address: Address) -> ExpansionState:
        # loading wins while a fetch is in flight, even after a prior expansion
        if address in self._loading:
            return ExpansionState.LOADING
        if address in self._expanded:
            return ExpansionState.EXPANDED
        return ExpansionState.UNEXPANDED

    def can_expand(self, address: Address, origin: Optional[Address]) -> bool:
        """Expansion is offered for non-origin, not expanded, not loading addresses."""
        return (
            address != origin
            and address not in self._expanded
            and address not in self._loading
        )
