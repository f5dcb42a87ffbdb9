"""
Graph Session
=============

Owns one live FlowGraph and its ExpansionStateStore, and coordinates the
asynchronous fetch-and-merge of expansions into it.

SCHEDULING MODEL:
=================
- Single-threaded asyncio; one task per address being expanded
- Suspension only at the provider fetch; build/merge/layout run to
  completion once data arrives
- Concurrent expansions may complete in any order; ids are content-derived,
  so the final node and edge id sets do not depend on that order
- A new root bumps the session generation. Fetches that resolve for an
  older generation are discarded without touching the new state

Every expansion ends in exactly one ExpansionOutcome, which is returned to
the awaiting caller, put on the bounded `events` queue (oldest entry
dropped when full) and recorded in the audit log.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
import asyncio
import logging

from ..config import FlowGraphConfig
from ..contracts.base import Address, Error, ErrorCode
from ..contracts.graph import FlowGraph
from ..contracts.provider import ChainDataProvider, FetchFailure
from ..contracts.transactions import Transaction
from ..core.builder import build_graph
from ..core.layout import LayoutEngine
from ..core.merger import GraphMerger, MergeReport
from ..observability import AuditEventType, AuditLog, SessionMetrics
from .state import ExpansionStateStore

logger = logging.getLogger(__name__)


class ExpansionStatus(Enum):
    MERGED = "merged"
    FAILED = "failed"
    DISCARDED = "discarded"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ExpansionOutcome:
    """Terminal result of one expansion request."""
    address: Address
    status: ExpansionStatus
    generation: int
    added_node_ids: Tuple[Address, ...] = field(default_factory=tuple)
    added_edge_ids: Tuple[str, ...] = field(default_factory=tuple)
    error: Optional[Error] = None

    @classmethod
    def merged(cls, generation: int, report: MergeReport) -> ExpansionOutcome:
        return cls(
            address=report.pivot,
            status=ExpansionStatus.MERGED,
            generation=generation,
            added_node_ids=tuple(n.id for n in report.added_nodes),
            added_edge_ids=tuple(e.id for e in report.added_edges)
        )

    def to_dict(self) -> dict:
        return {
            'address': self.address,
            'status': self.status.value,
            'generation': self.generation,
            'added_node_ids': list(self.added_node_ids),
            'added_edge_ids': list(self.added_edge_ids),
            'error': self.error.message if self.error else None,
        }


class GraphSession:
    """
    Expansion coordinator for one view.

    The graph and store are mutated only here (through GraphMerger and
    ExpansionStateStore). Callers read them, never write them.
    """

    def __init__(
        self,
        provider: ChainDataProvider,
        config: Optional[FlowGraphConfig] = None,
        name: str = "session"
    ):
        self._provider = provider
        self._config = config or FlowGraphConfig()
        self._layout = LayoutEngine(self._config.layout)
        self._merger = GraphMerger(self._layout)
        self._store = ExpansionStateStore()

        self._graph: Optional[FlowGraph] = None
        self._root: Optional[Address] = None
        self._root_transactions: Tuple[Transaction, ...] = ()
        self._generation = 0
        self._tasks: Dict[Address, asyncio.Task] = {}

        self.audit = AuditLog(name)
        self.metrics = SessionMetrics()
        self.events: asyncio.Queue = asyncio.Queue(maxsize=self._config.session.event_buffer)

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def graph(self) -> Optional[FlowGraph]:
        return self._graph

    @property
    def root(self) -> Optional[Address]:
        return self._root

    @property
    def store(self) -> ExpansionStateStore:
        return self._store

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def root_transactions(self) -> Tuple[Transaction, ...]:
        return self._root_transactions

    def in_flight(self) -> List[Address]:
        return [a for a, t in self._tasks.items() if not t.done()]

    # -------------------------------------------------------------------------
    # Root lifecycle
    # -------------------------------------------------------------------------

    async def load_root(self, address: Address) -> Optional[FlowGraph]:
        """
        Fetch and build the root graph for `address`, replacing any current one.

        Raises FetchFailure if the provider fails; the session is then left
        without a graph. Returns None (and raises nothing) if another root
        replaced this one while the fetch was pending.
        """
        generation = self._begin_root(address)
        try:
            transactions = await self._provider.fetch_transactions(address)
        except FetchFailure as failure:
            if generation != self._generation:
                return None
            self.metrics.increment("root_failures")
            self.audit.record(
                AuditEventType.ROOT_FAILED, address, generation, error=failure.to_error()
            )
            raise

        if generation != self._generation:
            self.audit.record(AuditEventType.EXPANSION_DISCARDED, address, generation, kind="root")
            return None
        return self._install_root(address, transactions)

    def load_root_from(self, address: Address, transactions: Iterable[Transaction]) -> FlowGraph:
        """Replace the root from already-fetched transactions."""
        self._begin_root(address)
        return self._install_root(address, transactions)

    def reset(self):
        """Drop the graph and all expansion state."""
        previous = self._root or ""
        self._generation += 1
        self._graph = None
        self._root = None
        self._root_transactions = ()
        self._store.reset()
        self._tasks = {}
        self.audit.record(AuditEventType.SESSION_RESET, previous, self._generation)

    def _begin_root(self, address: Address) -> int:
        self.reset()
        self._root = address
        return self._generation

    def _install_root(self, address: Address, transactions: Iterable[Transaction]) -> FlowGraph:
        transactions = tuple(transactions)
        graph = build_graph(transactions, address, is_root=True)
        self._layout.layout_root(graph)

        self._graph = graph
        self._root_transactions = transactions
        self.metrics.increment("roots_loaded")
        self.audit.record(
            AuditEventType.ROOT_LOADED, address, self._generation,
            nodes=len(graph.nodes), edges=len(graph.edges)
        )
        return graph

    # -------------------------------------------------------------------------
    # Expansion
    # -------------------------------------------------------------------------

    def request_expansion(self, address: Address) -> asyncio.Task:
        """
        Schedule expansion of `address` and return its task.

        A request for an address whose expansion is still in flight returns
        the existing task instead of starting a second fetch. Must be called
        from a running event loop.
        """
        existing = self._tasks.get(address)
        if existing is not None and not existing.done():
            return existing

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._expand(address, self._generation))
        self._tasks[address] = task
        return task

    async def expand(self, address: Address) -> ExpansionOutcome:
        return await self.request_expansion(address)

    async def expand_many(self, addresses: Iterable[Address]) -> List[ExpansionOutcome]:
        """Expand concurrently; outcomes are returned in request order."""
        tasks = [self.request_expansion(a) for a in addresses]
        return list(await asyncio.gather(*tasks))

    async def _expand(self, address: Address, generation: int) -> ExpansionOutcome:
        try:
            return await self._run_expansion(address, generation)
        finally:
            current = asyncio.current_task()
            if self._tasks.get(address) is current:
                del self._tasks[address]

    async def _run_expansion(self, address: Address, generation: int) -> ExpansionOutcome:
        if generation != self._generation:
            return self._discard(address, generation)

        graph = self._graph
        if graph is None or not graph.has_node(address):
            return self._skip(address, generation, "not in graph")
        if address == graph.origin:
            return self._skip(address, generation, "origin")
        if not self._store.can_expand(address, graph.origin):
            return self._skip(address, generation, self._store.state_of(address).value)

        self._store.start_loading(address)
        self.metrics.increment("expansions_started")
        self.audit.record(AuditEventType.EXPANSION_STARTED, address, generation)

        try:
            return await self._fetch_and_merge(address, generation)
        finally:
            # a newer generation owns the store; its loading set is not ours to touch
            if generation == self._generation:
                self._store.stop_loading(address)

    async def _fetch_and_merge(self, address: Address, generation: int) -> ExpansionOutcome:
        try:
            transactions = await self._provider.fetch_transactions(address)
        except FetchFailure as failure:
            if generation != self._generation:
                return self._discard(address, generation)
            return self._fail(address, generation, failure.to_error())
        except Exception as e:
            if generation != self._generation:
                return self._discard(address, generation)
            logger.exception("Provider raised while fetching %s", address)
            return self._fail(address, generation, Error.now(
                ErrorCode.PROVIDER_FAULT, f"{type(e).__name__}: {e}"
            ).with_context("address", address))

        if generation != self._generation:
            return self._discard(address, generation)

        try:
            subgraph = build_graph(transactions, address, is_root=False)
            report = self._merger.merge(self._graph, subgraph)
        except ValueError as e:
            return self._fail(address, generation, Error.now(
                ErrorCode.MALFORMED_PAYLOAD, str(e)
            ).with_context("address", address))

        self._store.mark_expanded(address)

        self.metrics.increment("expansions_merged")
        self.metrics.increment("nodes_added", len(report.added_nodes))
        self.metrics.increment("edges_added", len(report.added_edges))
        self.audit.record(
            AuditEventType.EXPANSION_MERGED, address, generation,
            nodes_added=len(report.added_nodes), edges_added=len(report.added_edges)
        )
        return self._emit(ExpansionOutcome.merged(generation, report))

    def _fail(self, address: Address, generation: int, error: Error) -> ExpansionOutcome:
        self.metrics.increment("expansions_failed")
        self.audit.record(AuditEventType.EXPANSION_FAILED, address, generation, error=error)
        return self._emit(ExpansionOutcome(
            address=address, status=ExpansionStatus.FAILED, generation=generation, error=error
        ))

    def _skip(self, address: Address, generation: int, reason: str) -> ExpansionOutcome:
        self.audit.record(AuditEventType.EXPANSION_SKIPPED, address, generation, reason=reason)
        return self._emit(ExpansionOutcome(
            address=address, status=ExpansionStatus.SKIPPED, generation=generation
        ))

    def _discard(self, address: Address, generation: int) -> ExpansionOutcome:
        self.metrics.increment("expansions_discarded")
        error = Error.now(
            ErrorCode.STALE_SESSION,
            f"Result for {address} belongs to generation {generation}, "
            f"session is at {self._generation}"
        )
        self.audit.record(AuditEventType.EXPANSION_DISCARDED, address, generation, error=error)
        return self._emit(ExpansionOutcome(
            address=address, status=ExpansionStatus.DISCARDED, generation=generation, error=error
        ))

    def _emit(self, outcome: ExpansionOutcome) -> ExpansionOutcome:
        if self.events.full():
            self.events.get_nowait()
            self.metrics.increment("events_dropped")
        self.events.put_nowait(outcome)
        return outcome
