# tests/test_config.py
"""
Tests for client configuration loading.
"""

import pytest

from noderpc import ClientConfig, ConfigurationError, HttpTransport, create_client

from conftest import FakeTransport


class TestClientConfig:

    def test_defaults(self):
        config = ClientConfig()

        assert config.transport == "ws"
        assert config.timeout is None
        assert config.logging.log_level == "INFO"
        assert config.to_options() == {"transport": "ws"}

    def test_from_env(self):
        config = ClientConfig.from_env({
            "NODERPC_TRANSPORT": "http",
            "NODERPC_URI": "http://localhost:8090",
            "NODERPC_TIMEOUT": "2.5",
            "NODERPC_LOG_LEVEL": "DEBUG",
            "NODERPC_LOG_STRUCTURED": "true",
            "NODERPC_LOG_CONSOLE": "false",
        })

        assert config.transport == "http"
        assert config.uri == "http://localhost:8090"
        assert config.timeout == 2.5
        assert config.logging.log_level == "DEBUG"
        assert config.logging.structured_format is True
        assert config.logging.console_enabled is False

    def test_from_env_rejects_bad_values(self):
        with pytest.raises(ConfigurationError):
            ClientConfig.from_env({"NODERPC_TIMEOUT": "soon"})

    def test_from_file(self, tmp_path):
        path = tmp_path / "client.yaml"
        path.write_text(
            "transport: ws\n"
            "websocket: wss://node.example\n"
            "timeout: 10\n"
            "logging:\n"
            "  log_level: WARNING\n"
        )

        config = ClientConfig.from_file(path)

        assert config.websocket == "wss://node.example"
        assert config.timeout == 10.0
        assert config.logging.log_level == "WARNING"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "client.yaml"
        path.write_text("")

        assert ClientConfig.from_file(path) == ClientConfig()

    def test_merge_ignores_unset_overrides(self):
        config = ClientConfig(transport="ws", websocket="wss://a").merge(transport="http", websocket=None)

        assert config.transport == "http"
        assert config.websocket == "wss://a"


class TestCreateClient:

    def test_from_env_vars(self, registry):
        client = create_client(env_vars={
            "NODERPC_TRANSPORT": "http",
            "NODERPC_URI": "http://localhost:8090",
        })

        assert isinstance(client.transport, HttpTransport)
        assert client.transport.uri == "http://localhost:8090"
        assert len(client.methods) == len(registry)

    def test_overrides_win(self):
        client = create_client(env_vars={"NODERPC_TRANSPORT": "ws"}, transport="http")

        assert isinstance(client.transport, HttpTransport)

    def test_custom_catalog(self, tmp_path):
        catalog = tmp_path / "methods.yaml"
        catalog.write_text("- {api: condenser_api, method: get_block, params: [block_num]}\n")

        client = create_client(env_vars={"NODERPC_CATALOG_PATH": str(catalog)})

        assert list(client.methods.methods) == ["get_block"]

    def test_unknown_log_level(self):
        with pytest.raises(ConfigurationError):
            create_client(env_vars={"NODERPC_LOG_LEVEL": "LOUD"})

    def test_transport_class_override(self):
        client = create_client(env_vars={"NODERPC_URI": "http://localhost:8090"}, transport=FakeTransport)

        assert isinstance(client.transport, FakeTransport)
        assert client.transport.options["uri"] == "http://localhost:8090"

    def test_transport_instance_override(self, transport):
        client = create_client(env_vars={}, transport=transport)

        assert client.transport is transport
