"""
Blockstream Fetcher Tests
=========================

HTTP behavior is exercised through httpx.MockTransport; no network access.

AXIOM UNDER TEST:
=================
Every failure surfaces as a typed FetchResult / FetchFailure.
No partial transaction lists, no silent empty results.
"""

import asyncio

import httpx
import pytest

from chaindata import BlockstreamFetcher, parse_transactions
from flowgraph.config import ProviderConfig
from flowgraph.contracts import ErrorCode, FetchFailure, FetchStatus

from .fixtures import P, Q, R, tx_payload


ROOT_PAYLOAD = [
    tx_payload("T1", inputs=[(P, 60_000_000)], outputs=[(Q, 50_000_000)], confirmed=False),
    tx_payload("T2", inputs=[(R, 30_000_000)], outputs=[(P, 30_000_000)]),
]


def fetcher_for(handler) -> BlockstreamFetcher:
    return BlockstreamFetcher(base_url="https://example.test/api", transport=httpx.MockTransport(handler))


def json_handler(payload, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)
    return handler


class TestSuccessfulFetch:

    def test_parses_transactions(self):
        fetcher = fetcher_for(json_handler(ROOT_PAYLOAD))
        txs = asyncio.run(fetcher.fetch_transactions(P))

        assert [tx.txid for tx in txs] == ["T1", "T2"]
        assert txs[0].confirmed is False
        assert txs[0].outputs[0].address == Q
        assert txs[1].inputs[0].value == 30_000_000

    def test_requests_address_txs_path(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        asyncio.run(fetcher_for(handler).fetch_transactions(P))

        assert str(seen[0].url) == f"https://example.test/api/address/{P}/txs"
        assert seen[0].headers["user-agent"].startswith("FlowGraph/")

    def test_empty_history_is_success(self):
        result, txs = asyncio.run(fetcher_for(json_handler([])).fetch(P))
        assert result.is_success
        assert txs == []
        assert result.items_count == 0

    def test_address_info(self):
        payload = {
            "address": P,
            "chain_stats": {"funded_txo_sum": 100, "spent_txo_sum": 40, "tx_count": 3},
            "mempool_stats": {"funded_txo_sum": 5, "spent_txo_sum": 0, "tx_count": 1},
        }
        info = asyncio.run(fetcher_for(json_handler(payload)).fetch_address_info(P))
        assert info.balance_satoshis == 65
        assert info.chain_stats.tx_count == 3

    def test_sync_fetch(self):
        result, txs = fetcher_for(json_handler(ROOT_PAYLOAD)).fetch_sync(P)
        assert result.status is FetchStatus.SUCCESS
        assert len(txs) == 2

    def test_null_addresses_preserved(self):
        payload = [{
            "txid": "CB",
            "vin": [{"prevout": None}],
            "vout": [{"scriptpubkey_address": None, "value": 0}, {"scriptpubkey_address": P, "value": 10}],
            "status": {"confirmed": True},
        }]
        txs = asyncio.run(fetcher_for(json_handler(payload)).fetch_transactions(P))
        assert txs[0].inputs[0].address is None
        assert txs[0].outputs[0].address is None


class TestFailedFetch:

    def test_http_error_raises(self):
        fetcher = fetcher_for(json_handler({"error": "rate limited"}, status_code=429))
        with pytest.raises(FetchFailure) as exc:
            asyncio.run(fetcher.fetch_transactions(P))

        failure = exc.value
        assert failure.status is FetchStatus.HTTP_ERROR
        assert failure.result.http_status == 429
        assert failure.to_error().code is ErrorCode.HTTP_ERROR
        assert P in str(failure)

    def test_malformed_payload_is_parse_error(self):
        fetcher = fetcher_for(json_handler({"not": "a list"}))
        result, txs = asyncio.run(fetcher.fetch(P))
        assert result.status is FetchStatus.PARSE_ERROR
        assert txs == []
        assert result.to_error().code is ErrorCode.MALFORMED_PAYLOAD

    def test_record_without_txid_is_parse_error(self):
        fetcher = fetcher_for(json_handler([{"vin": [], "vout": []}]))
        result, _ = asyncio.run(fetcher.fetch(P))
        assert result.status is FetchStatus.PARSE_ERROR

    @pytest.mark.parametrize("record", [
        {"txid": "a", "vin": ["x"], "vout": []},
        {"txid": "a", "vin": [{"prevout": "x"}], "vout": []},
        {"txid": "a", "vin": [], "vout": [42]},
        {"txid": "a", "vin": [], "vout": [], "status": "confirmed"},
    ])
    def test_non_object_entry_is_parse_error(self, record):
        fetcher = fetcher_for(json_handler([record]))
        result, txs = asyncio.run(fetcher.fetch(P))
        assert result.status is FetchStatus.PARSE_ERROR
        assert result.to_error().code is ErrorCode.MALFORMED_PAYLOAD
        assert txs == []

    def test_negative_prevout_value_is_parse_error(self):
        record = tx_payload("N", inputs=[(R, -5)], outputs=[(P, 5)])
        with pytest.raises(FetchFailure) as exc:
            asyncio.run(fetcher_for(json_handler([record])).fetch_transactions(P))
        assert exc.value.status is FetchStatus.PARSE_ERROR

    def test_negative_output_value_is_parse_error(self):
        record = tx_payload("N", inputs=[(R, 5)], outputs=[(P, -5)])
        result, _ = asyncio.run(fetcher_for(json_handler([record])).fetch(P))
        assert result.status is FetchStatus.PARSE_ERROR

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(FetchFailure) as exc:
            asyncio.run(fetcher_for(handler).fetch_transactions(P))
        assert exc.value.status is FetchStatus.TIMEOUT

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        result, txs = fetcher_for(handler).fetch_sync(P)
        assert result.status is FetchStatus.NETWORK_ERROR
        assert result.to_error().code is ErrorCode.SOURCE_UNREACHABLE
        assert txs == []


class TestParsing:

    def test_parse_rejects_non_list(self):
        with pytest.raises(ValueError):
            parse_transactions({"txid": "x"})

    def test_from_config(self):
        fetcher = BlockstreamFetcher.from_config(
            ProviderConfig(base_url="https://mirror.test/api/"),
            transport=httpx.MockTransport(json_handler([]))
        )
        result, _ = asyncio.run(fetcher.fetch(P))
        assert result.url == f"https://mirror.test/api/address/{P}/txs"
