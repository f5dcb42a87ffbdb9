"""
Expansion State Store Tests
"""

from flowgraph.expansion.state import ExpansionState, ExpansionStateStore


class TestExpansionStateStore:

    def test_initially_unexpanded(self):
        store = ExpansionStateStore()
        assert store.state_of("A") is ExpansionState.UNEXPANDED
        assert store.can_expand("A", origin="O")

    def test_origin_never_expandable(self):
        assert not ExpansionStateStore().can_expand("O", origin="O")

    def test_success_flow(self):
        store = ExpansionStateStore()
        store.start_loading("A")
        assert store.state_of("A") is ExpansionState.LOADING
        assert not store.can_expand("A", origin="O")

        store.mark_expanded("A")
        store.stop_loading("A")
        assert store.state_of("A") is ExpansionState.EXPANDED
        assert not store.can_expand("A", origin="O")

    def test_failure_returns_to_unexpanded(self):
        store = ExpansionStateStore()
        store.start_loading("A")
        store.stop_loading("A")
        assert store.state_of("A") is ExpansionState.UNEXPANDED
        assert store.can_expand("A", origin="O")

    def test_operations_are_idempotent(self):
        store = ExpansionStateStore()
        store.stop_loading("never-started")
        store.mark_expanded("A")
        store.mark_expanded("A")
        assert store.expanded == frozenset({"A"})

    def test_loading_takes_priority(self):
        store = ExpansionStateStore()
        store.mark_expanded("A")
        store.start_loading("A")
        assert store.state_of("A") is ExpansionState.LOADING

    def test_reset_clears_everything(self):
        store = ExpansionStateStore()
        store.start_loading("A")
        store.mark_expanded("B")
        store.reset()
        assert store.loading == frozenset()
        assert store.expanded == frozenset()
