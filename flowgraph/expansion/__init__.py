"""
Expansion Layer

Per-address expansion state and the session that coordinates
asynchronous fetch-and-merge into a live graph.
"""

from .state import ExpansionState, ExpansionStateStore
from .session import ExpansionStatus, ExpansionOutcome, GraphSession

__all__ = [
    'ExpansionState', 'ExpansionStateStore',
    'ExpansionStatus', 'ExpansionOutcome', 'GraphSession',
]
