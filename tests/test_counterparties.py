"""
Counterparty Extraction Tests
"""

from flowgraph.core.counterparties import TOP_N, extract_counterparties

from .fixtures import P, Q, R, ROOT_HISTORY, make_tx


class TestExtractCounterparties:

    def test_empty_history(self):
        assert extract_counterparties([], P) == []

    def test_root_scenario_ranked_by_volume(self):
        ranked = extract_counterparties(ROOT_HISTORY, P)

        assert [c.address for c in ranked] == [Q, R]
        assert ranked[0].total_volume_satoshis == 50_000_000
        assert ranked[1].total_volume_satoshis == 30_000_000
        assert all(c.interaction_count == 1 for c in ranked)

    def test_counts_each_input_and_output(self):
        txs = [
            make_tx("A", inputs=[(P, 100)], outputs=[(Q, 10), (Q, 20)]),
            make_tx("B", inputs=[(Q, 5)], outputs=[(P, 5)]),
        ]
        ranked = extract_counterparties(txs, P)

        assert len(ranked) == 1
        assert ranked[0].interaction_count == 3
        assert ranked[0].total_volume_satoshis == 35

    def test_ties_keep_first_seen_order(self):
        tx = make_tx("T", inputs=[(P, 100)], outputs=[("B", 10), ("A", 10), ("C", 10)])
        assert [c.address for c in extract_counterparties([tx], P)] == ["B", "A", "C"]

    def test_truncated_to_top_n(self):
        outputs = [(f"addr{i:02d}", 100 + i) for i in range(15)]
        tx = make_tx("BIG", inputs=[(P, 10_000)], outputs=outputs)
        ranked = extract_counterparties([tx], P)

        assert len(ranked) == TOP_N
        assert ranked[0].address == "addr14"

    def test_custom_limit(self):
        assert len(extract_counterparties(ROOT_HISTORY, P, top_n=1)) == 1

    def test_own_address_never_listed(self):
        tx = make_tx("C", inputs=[(P, 100)], outputs=[(Q, 60), (P, 40)])
        assert P not in [c.address for c in extract_counterparties([tx], P)]
