"""
Chain Data Provider Contract
============================

Abstract interface the expansion layer uses to obtain transactions.

BOUNDARY ENFORCEMENT:
- Providers are stateless fetch handlers
- Every attempt produces a FetchResult, success or not
- A failed fetch raises FetchFailure; partial transaction lists are never returned
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .base import Address, Error, ErrorCode
from .transactions import AddressInfo, Transaction


class FetchStatus(Enum):
    """Status of a fetch attempt."""
    SUCCESS = "success"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"
    NETWORK_ERROR = "network_error"


_ERROR_CODES = {
    FetchStatus.TIMEOUT: ErrorCode.TIMEOUT,
    FetchStatus.HTTP_ERROR: ErrorCode.HTTP_ERROR,
    FetchStatus.PARSE_ERROR: ErrorCode.MALFORMED_PAYLOAD,
    FetchStatus.NETWORK_ERROR: ErrorCode.SOURCE_UNREACHABLE,
}


@dataclass(frozen=True)
class FetchResult:
    """
    Record of one fetch attempt.

    INVARIANT: status SUCCESS <=> error_message is None
    """
    address: Address
    url: str
    status: FetchStatus
    attempted_at: datetime
    completed_at: datetime
    http_status: Optional[int] = None
    items_count: int = 0
    error_message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status is FetchStatus.SUCCESS

    def to_error(self) -> Error:
        code = _ERROR_CODES.get(self.status, ErrorCode.SOURCE_UNREACHABLE)
        error = Error(code=code, message=self.error_message or self.status.value,
                      timestamp=self.completed_at)
        error = error.with_context("address", self.address).with_context("url", self.url)
        if self.http_status is not None:
            error = error.with_context("http_status", str(self.http_status))
        return error


class FetchFailure(Exception):
    """The provider was unreachable or returned a non-success response."""

    def __init__(self, result: FetchResult):
        super().__init__(
            f"Failed to fetch transactions for address {result.address}: "
            f"{result.error_message or result.status.value}"
        )
        self.result = result

    @property
    def address(self) -> Address:
        return self.result.address

    @property
    def status(self) -> FetchStatus:
        return self.result.status

    def to_error(self) -> Error:
        return self.result.to_error()


class ChainDataProvider(ABC):
    """Source of transaction history for an address."""

    @abstractmethod
    async def fetch_transactions(self, address: Address) -> List[Transaction]:
        """Ordered transaction list. Raises FetchFailure on any failure."""

    @abstractmethod
    async def fetch_address_info(self, address: Address) -> AddressInfo:
        """Funding totals for an address. Raises FetchFailure on any failure."""
