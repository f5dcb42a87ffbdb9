"""
Blockstream Fetcher

Fetches address transaction histories from an Esplora-compatible REST API
(blockstream.info by default).

PRINCIPLES:
===========
1. Failed fetches are first-class results, never silent
2. A response either parses completely or is a PARSE_ERROR
3. No retries here; the caller retries by re-issuing the operation
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple, TypeVar
import logging

import httpx

from flowgraph.config import ProviderConfig
from flowgraph.contracts import (
    Address, AddressInfo, Transaction,
    ChainDataProvider, FetchFailure, FetchResult, FetchStatus
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_transactions(payload: object) -> List[Transaction]:
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON list of transactions, got {type(payload).__name__}")
    return [Transaction.from_dict(item) for item in payload]


def parse_address_info(payload: object) -> AddressInfo:
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
    return AddressInfo.from_dict(payload)


class BlockstreamFetcher(ChainDataProvider):
    """
    Fetches and parses address data.

    GUARANTEES:
    ===========
    1. fetch()/fetch_sync() always return a FetchResult
    2. fetch_transactions() raises FetchFailure instead of returning partial data
    """

    def __init__(
        self,
        base_url: str = ProviderConfig.base_url,
        timeout: float = ProviderConfig.timeout,
        user_agent: str = ProviderConfig.user_agent,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        # httpx.MockTransport serves both the sync and async clients
        self._transport = transport

    @classmethod
    def from_config(cls, config: ProviderConfig, transport: Optional[httpx.BaseTransport] = None) -> BlockstreamFetcher:
        return cls(
            base_url=config.base_url,
            timeout=config.timeout,
            user_agent=config.user_agent,
            transport=transport
        )

    # -------------------------------------------------------------------------
    # ChainDataProvider
    # -------------------------------------------------------------------------

    async def fetch_transactions(self, address: Address) -> List[Transaction]:
        result, transactions = await self.fetch(address)
        if not result.is_success:
            raise FetchFailure(result)
        return transactions

    async def fetch_address_info(self, address: Address) -> AddressInfo:
        result, info = await self.fetch_info(address)
        if not result.is_success:
            raise FetchFailure(result)
        return info

    # -------------------------------------------------------------------------
    # Result-returning API
    # -------------------------------------------------------------------------

    async def fetch(self, address: Address) -> Tuple[FetchResult, List[Transaction]]:
        """
        Fetch the transaction list of an address.

        Returns:
            - FetchResult (always)
            - List[Transaction] (empty unless the result is SUCCESS)
        """
        result, transactions = await self._request(
            address, f"/address/{address}/txs", parse_transactions
        )
        return result, transactions or []

    async def fetch_info(self, address: Address) -> Tuple[FetchResult, Optional[AddressInfo]]:
        return await self._request(address, f"/address/{address}", parse_address_info)

    def fetch_sync(self, address: Address) -> Tuple[FetchResult, List[Transaction]]:
        """Synchronous version of fetch."""
        url = f"{self._base_url}/address/{address}/txs"
        attempted_at = _utcnow()

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(url, headers=self._headers(), follow_redirects=True)
        except httpx.TimeoutException:
            return self._timeout_result(address, url, attempted_at), []
        except httpx.HTTPError as e:
            return self._network_error_result(address, url, attempted_at, e), []

        result, transactions = self._interpret(address, url, attempted_at, response, parse_transactions)
        return result, transactions or []

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _headers(self) -> dict:
        return {'User-Agent': self._user_agent, 'Accept': 'application/json'}

    async def _request(
        self,
        address: Address,
        path: str,
        parse: Callable[[object], T]
    ) -> Tuple[FetchResult, Optional[T]]:
        url = f"{self._base_url}{path}"
        attempted_at = _utcnow()

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(url, headers=self._headers(), follow_redirects=True)
        except httpx.TimeoutException:
            return self._timeout_result(address, url, attempted_at), None
        except httpx.HTTPError as e:
            return self._network_error_result(address, url, attempted_at, e), None

        return self._interpret(address, url, attempted_at, response, parse)

    def _interpret(
        self,
        address: Address,
        url: str,
        attempted_at: datetime,
        response: httpx.Response,
        parse: Callable[[object], T]
    ) -> Tuple[FetchResult, Optional[T]]:
        completed_at = _utcnow()

        if response.status_code != 200:
            logger.warning("HTTP %s fetching %s", response.status_code, url)
            return FetchResult(
                address=address,
                url=url,
                status=FetchStatus.HTTP_ERROR,
                attempted_at=attempted_at,
                completed_at=completed_at,
                http_status=response.status_code,
                error_message=f"HTTP {response.status_code}"
            ), None

        try:
            parsed = parse(response.json())
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Unparseable response from %s: %s", url, e)
            return FetchResult(
                address=address,
                url=url,
                status=FetchStatus.PARSE_ERROR,
                attempted_at=attempted_at,
                completed_at=_utcnow(),
                http_status=response.status_code,
                error_message=str(e)
            ), None

        return FetchResult(
            address=address,
            url=url,
            status=FetchStatus.SUCCESS,
            attempted_at=attempted_at,
            completed_at=completed_at,
            http_status=response.status_code,
            items_count=len(parsed) if isinstance(parsed, list) else 1
        ), parsed

    def _timeout_result(self, address: Address, url: str, attempted_at: datetime) -> FetchResult:
        logger.warning("Timed out fetching %s", url)
        return FetchResult(
            address=address,
            url=url,
            status=FetchStatus.TIMEOUT,
            attempted_at=attempted_at,
            completed_at=_utcnow(),
            error_message="Request timed out"
        )

    def _network_error_result(self, address: Address, url: str, attempted_at: datetime,
                              error: Exception) -> FetchResult:
        logger.warning("Network error fetching %s: %s", url, error)
        return FetchResult(
            address=address,
            url=url,
            status=FetchStatus.NETWORK_ERROR,
            attempted_at=attempted_at,
            completed_at=_utcnow(),
            error_message=str(error) or type(error).__name__
        )
