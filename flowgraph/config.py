"""
Configuration

Dataclass configuration for every layer, composed by FlowGraphConfig.
Environment overrides are read once, by FlowGraphConfig.from_env().
"""

from __future__ import annotations
from dataclasses import dataclass
import os

from . import __version__


@dataclass(frozen=True)
class ProviderConfig:
    """Chain data provider endpoint."""
    base_url: str = "https://blockstream.info/api"
    timeout: float = 30.0
    user_agent: str = f"FlowGraph/{__version__}"


@dataclass(frozen=True)
class LayoutConfig:
    """Initial placement constants (canvas units)."""
    column_x_left: float = -440.0
    column_x_right: float = 440.0
    row_spacing: float = 90.0
    expansion_radius: float = 260.0


@dataclass(frozen=True)
class RoutingConfig:
    """Fallback node size for unmeasured nodes and curve tension."""
    default_width: float = 150.0
    default_height: float = 40.0
    curvature: float = 0.25


@dataclass(frozen=True)
class SessionConfig:
    """Per-session limits. The oldest outcome is dropped once the buffer is full."""
    event_buffer: int = 256


@dataclass
class FlowGraphConfig:
    """Unified configuration for the engine."""
    provider: ProviderConfig = None
    layout: LayoutConfig = None
    routing: RoutingConfig = None
    session: SessionConfig = None

    def __post_init__(self):
        self.provider = self.provider or ProviderConfig()
        self.layout = self.layout or LayoutConfig()
        self.routing = self.routing or RoutingConfig()
        self.session = self.session or SessionConfig()

    @classmethod
    def from_env(cls) -> FlowGraphConfig:
        """
        Build config honoring:
            FLOWGRAPH_API_BASE_URL, FLOWGRAPH_TIMEOUT, FLOWGRAPH_EXPANSION_RADIUS
        """
        provider = ProviderConfig(
            base_url=os.environ.get("FLOWGRAPH_API_BASE_URL", ProviderConfig.base_url).rstrip("/"),
            timeout=float(os.environ.get("FLOWGRAPH_TIMEOUT", ProviderConfig.timeout)),
        )
        layout = LayoutConfig(
            expansion_radius=float(
                os.environ.get("FLOWGRAPH_EXPANSION_RADIUS", LayoutConfig.expansion_radius)
            ),
        )
        return cls(provider=provider, layout=layout)
