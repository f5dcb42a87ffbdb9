"""
Base Contracts and Shared Types

Foundational types used across all layers.
All types here are IMMUTABLE and represent pure data.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- All record types are frozen dataclasses
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Tuple
from enum import Enum, auto


# Opaque, case-sensitive identifier. Never normalized.
Address = str

SATOSHIS_PER_BTC = 100_000_000


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes.
    Every recoverable failure in the engine maps to one of these.
    """
    # Provider errors
    SOURCE_UNREACHABLE = auto()
    HTTP_ERROR = auto()
    TIMEOUT = auto()
    MALFORMED_PAYLOAD = auto()
    PROVIDER_FAULT = auto()

    # Graph errors
    PIVOT_NOT_IN_GRAPH = auto()
    STALE_SESSION = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def now(code: ErrorCode, message: str) -> Error:
        return Error(code=code, message=message, timestamp=datetime.now(timezone.utc))

    def with_context(self, key: str, value: str) -> Error:
        """Return new Error with additional context (immutable)."""
        return Error(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            context=self.context + ((key, value),)
        )


# =============================================================================
# DIRECTION AND ROLE
# =============================================================================

class Direction(Enum):
    """Direction of a transaction relative to a pivot address."""
    INCOMING = "in"
    OUTGOING = "out"


class NodeRole(Enum):
    """Role of a node relative to the pivot that placed it."""
    ORIGIN = "origin"
    SENDER = "sender"
    RECEIVER = "receiver"


# =============================================================================
# GEOMETRY
# =============================================================================

@dataclass(frozen=True)
class Position:
    """Top-left corner of a node in canvas coordinates."""
    x: float = 0.0
    y: float = 0.0

    def offset(self, dx: float, dy: float) -> Position:
        return Position(self.x + dx, self.y + dy)
