"""
Graph Invariant Tests

Structural properties that must hold after any sequence of operations:
- exactly one origin node, which is the root address
- every edge endpoint is a node of the graph
- node ids and edge ids are unique
- an address is never both loading and expanded at rest
"""

import asyncio

import pytest
from hypothesis import given, settings, strategies as st
from hypothesis.strategies import composite

from chaindata import StaticChainData
from flowgraph.core.builder import build_graph
from flowgraph.core.layout import LayoutEngine
from flowgraph.core.merger import GraphMerger
from flowgraph.expansion import GraphSession

from tests.fixtures import P, Q, R, S, U, make_tx, scenario_histories


def assert_graph_invariants(session):
    graph = session.graph
    node_ids = [n.id for n in graph.nodes]
    edge_ids = [e.id for e in graph.edges]

    assert [n.id for n in graph.nodes if n.is_origin] == [session.root]
    assert len(node_ids) == len(set(node_ids))
    assert len(edge_ids) == len(set(edge_ids))
    for edge in graph.edges:
        assert edge.source in graph
        assert edge.target in graph
        assert edge.value_satoshis >= 0
    assert not (session.store.loading & session.store.expanded)


SEQUENCES = [
    [Q],
    [Q, R],
    [R, Q, Q],
    [Q, S, R, U],
    [P, Q, P],
]


@pytest.mark.parametrize("sequence", SEQUENCES)
def test_invariants_after_sequential_expansion(sequence):
    async def scenario():
        session = GraphSession(StaticChainData(scenario_histories()))
        await session.load_root(P)
        assert_graph_invariants(session)
        for address in sequence:
            await session.expand(address)
            assert_graph_invariants(session)

    asyncio.run(scenario())


@pytest.mark.parametrize("sequence", SEQUENCES)
def test_invariants_after_concurrent_expansion(sequence):
    async def scenario():
        session = GraphSession(StaticChainData(scenario_histories(), failing=[R]))
        await session.load_root(P)
        await session.expand_many(sequence)
        assert_graph_invariants(session)
        assert session.in_flight() == []

    asyncio.run(scenario())


def test_nodes_never_removed():
    async def scenario():
        session = GraphSession(StaticChainData(scenario_histories()))
        await session.load_root(P)
        seen = set(session.graph.node_ids)
        for address in (Q, R, S, U):
            await session.expand(address)
            assert seen <= session.graph.node_ids
            seen = set(session.graph.node_ids)

    asyncio.run(scenario())


# =============================================================================
# STRATEGIES (Generators)
# =============================================================================

ADDRESSES = ["A", "B", "C", "D", "E", P]


@composite
def transactions(draw, txid):
    entry = st.tuples(st.sampled_from(ADDRESSES + [None]), st.integers(min_value=0, max_value=10**9))
    return make_tx(
        txid,
        inputs=draw(st.lists(entry, min_size=1, max_size=4)),
        outputs=draw(st.lists(entry, min_size=1, max_size=4)),
        confirmed=draw(st.booleans())
    )


@composite
def histories(draw):
    count = draw(st.integers(min_value=0, max_value=6))
    return [draw(transactions(f"tx{i}")) for i in range(count)]


@given(histories())
def test_built_graph_touches_only_pivot(history):
    graph = LayoutEngine().layout_root(build_graph(history, P))

    assert graph.origin == P
    assert graph.node(P).position.x == 0.0
    for edge in graph.edges:
        assert P in (edge.source, edge.target)
        assert edge.source != edge.target
        assert edge.source in graph and edge.target in graph


@settings(max_examples=50)
@given(histories(), st.lists(st.sampled_from(["A", "B", "C"]), min_size=1, max_size=3, unique=True),
       st.randoms())
def test_merge_order_does_not_change_id_sets(history, pivots, rnd):
    """Merging the same subgraphs in any order yields the same node and edge ids."""
    root = build_graph(history, P)
    subgraphs = [build_graph(history, a, is_root=False) for a in pivots if a in root]

    def merged(order):
        graph = LayoutEngine().layout_root(build_graph(history, P))
        for sub in order:
            GraphMerger().merge(graph, sub)
        return graph

    shuffled = list(subgraphs)
    rnd.shuffle(shuffled)
    a, b = merged(subgraphs), merged(shuffled)

    assert a.node_ids == b.node_ids
    assert a.edge_ids == b.edge_ids
    assert [n.id for n in a.nodes if n.is_origin] == [P]
