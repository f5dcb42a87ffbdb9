"""
Observability & Audit Layer

RESPONSIBILITY: Record what a graph session did, in order.
OUTPUTS: AuditLog entries, SessionMetrics counters

WHAT THIS LAYER MUST NOT DO:
============================
- Modify graph or expansion state
- Make decisions based on logged data

Every audit entry is also forwarded to the stdlib `logging` logger of
this module, so deployments can route session events like any other log.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple
import logging

from ..contracts.base import Address, Error

logger = logging.getLogger(__name__)


# =============================================================================
# AUDIT ENTRIES
# =============================================================================

class AuditEventType(Enum):
    """Explicit audit event types."""
    ROOT_LOADED = "root_loaded"
    ROOT_FAILED = "root_failed"
    SESSION_RESET = "session_reset"
    EXPANSION_STARTED = "expansion_started"
    EXPANSION_MERGED = "expansion_merged"
    EXPANSION_FAILED = "expansion_failed"
    EXPANSION_DISCARDED = "expansion_discarded"
    EXPANSION_SKIPPED = "expansion_skipped"


_FAILURE_EVENTS = frozenset({
    AuditEventType.ROOT_FAILED,
    AuditEventType.EXPANSION_FAILED,
})


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    sequence: int
    event_type: AuditEventType
    address: Address
    timestamp: datetime
    generation: int
    details: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
    error: Optional[Error] = None

    def detail(self, key: str) -> Optional[str]:
        for k, v in self.details:
            if k == key:
                return v
        return None


class AuditLog:
    """
    Append-only collector of session events.

    Entries are never modified or removed; sequence numbers are gap-free.
    """

    def __init__(self, name: str = "session"):
        self._name = name
        self._entries: List[AuditLogEntry] = []

    def record(
        self,
        event_type: AuditEventType,
        address: Address,
        generation: int,
        error: Optional[Error] = None,
        **details: object
    ) -> AuditLogEntry:
        entry = AuditLogEntry(
            sequence=len(self._entries) + 1,
            event_type=event_type,
            address=address,
            timestamp=datetime.now(timezone.utc),
            generation=generation,
            details=tuple((k, str(v)) for k, v in sorted(details.items())),
            error=error
        )
        self._entries.append(entry)

        level = logging.WARNING if event_type in _FAILURE_EVENTS else logging.INFO
        logger.log(
            level, "[%s] %s %s gen=%d %s",
            self._name, event_type.value, address, generation,
            error.message if error else dict(entry.details)
        )
        return entry

    def get_entries(
        self,
        event_type: Optional[AuditEventType] = None,
        address: Optional[Address] = None
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered."""
        entries = self._entries
        if event_type:
            entries = [e for e in entries if e.event_type == event_type]
        if address:
            entries = [e for e in entries if e.address == address]
        return list(entries)

    @property
    def entry_count(self) -> int:
        return len(self._entries)


# =============================================================================
# COUNTERS
# =============================================================================

class SessionMetrics:
    """Monotonic counters for one session's lifetime (survive root resets)."""

    COUNTERS = (
        "roots_loaded",
        "root_failures",
        "expansions_started",
        "expansions_merged",
        "expansions_failed",
        "expansions_discarded",
        "nodes_added",
        "edges_added",
        "events_dropped",
    )

    def __init__(self):
        self._values: Dict[str, int] = {name: 0 for name in self.COUNTERS}

    def increment(self, name: str, amount: int = 1):
        if name not in self._values:
            raise KeyError(f"Unknown counter: {name}")
        self._values[name] += amount

    def get(self, name: str) -> int:
        return self._values[name]

    def snapshot(self) -> Dict[str, int]:
        return dict(self._values)


__all__ = ['AuditEventType', 'AuditLogEntry', 'AuditLog', 'SessionMetrics']
