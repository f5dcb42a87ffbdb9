"""
Read/expand HTTP API over graph sessions.
"""

from .server import ExpandRequest, create_app

__all__ = ['ExpandRequest', 'create_app']
