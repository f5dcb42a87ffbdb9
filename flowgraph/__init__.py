"""
Flow Graph Engine

Builds a directed money-flow graph around a Bitcoin address and grows it
on demand by expanding discovered counterparties. Each layer communicates
only through the contracts package.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Immutable transaction records, graph nodes/edges, error records
   - FlowGraph: append-only container owned by one session

2. CORE ENGINE (core/)
   - Responsibility: classification, graph building, aggregation,
     layout, merging, edge routing, topology
   - Pure and synchronous; never performs I/O

3. EXPANSION (expansion/)
   - Responsibility: per-address expansion state and the asynchronous
     fetch-and-merge coordinator (GraphSession)
   - The only layer that mutates a live FlowGraph (through GraphMerger)

4. OBSERVABILITY (observability/)
   - Append-only audit log and counters for session events

5. API (api/)
   - HTTP surface over graph sessions

CONSTRAINTS ENFORCED:
=====================
- Deterministic: identical transactions always build identical graphs
- Content-derived identity: edge ids depend only on (txid, source, target)
- Append-only: nodes and edges are never removed from a live graph
- Explicit errors: fetch failures are typed, malformed records are skipped
"""

__version__ = "0.1.0"
