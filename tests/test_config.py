"""
Configuration Tests
"""

from flowgraph.config import FlowGraphConfig, LayoutConfig, ProviderConfig, SessionConfig


class TestFlowGraphConfig:

    def test_defaults(self):
        config = FlowGraphConfig()
        assert config.provider.base_url == "https://blockstream.info/api"
        assert config.layout.column_x_left == -440.0
        assert config.layout.row_spacing == 90.0
        assert config.routing.default_width == 150.0
        assert config.session.event_buffer == 256

    def test_explicit_sections_kept(self):
        config = FlowGraphConfig(layout=LayoutConfig(row_spacing=10.0))
        assert config.layout.row_spacing == 10.0
        assert config.provider == ProviderConfig()

    def test_session_section_kept(self):
        config = FlowGraphConfig(session=SessionConfig(event_buffer=8))
        assert config.session.event_buffer == 8
        assert config.layout == LayoutConfig()

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("FLOWGRAPH_API_BASE_URL", "http://localhost:3000/")
        monkeypatch.setenv("FLOWGRAPH_TIMEOUT", "5")
        monkeypatch.setenv("FLOWGRAPH_EXPANSION_RADIUS", "120")

        config = FlowGraphConfig.from_env()
        assert config.provider.base_url == "http://localhost:3000"
        assert config.provider.timeout == 5.0
        assert config.layout.expansion_radius == 120.0

    def test_env_absent_uses_defaults(self, monkeypatch):
        for name in ("FLOWGRAPH_API_BASE_URL", "FLOWGRAPH_TIMEOUT", "FLOWGRAPH_EXPANSION_RADIUS"):
            monkeypatch.delenv(name, raising=False)
        assert FlowGraphConfig.from_env() == FlowGraphConfig()
