# tests/test_registry.py
"""
Tests for the method catalog.
"""

import pytest

from noderpc import ConfigurationError, MethodRegistry
from noderpc.api.registry import UNSUPPORTED_METHODS, local_name
from noderpc.types import MethodDescriptor
from noderpc.utils.naming import snake_case


class TestNaming:

    @pytest.mark.parametrize("remote, local", [
        ("get_block", "get_block"),
        ("getDynamicGlobalProperties", "get_dynamic_global_properties"),
        ("get_discussions_by_trending30", "get_discussions_by_trending30"),
        ("broadcast-block", "broadcast_block"),
    ])
    def test_snake_case(self, remote, local):
        assert snake_case(remote) == local

    def test_override_wins(self):
        descriptor = MethodDescriptor(api="market_history_api", method="get_order_book",
                                      params=("limit",), method_name="get_market_order_book")
        assert local_name(descriptor) == "get_market_order_book"


class TestMethodRegistry:

    def test_default_catalog_loads(self, registry):
        assert len(registry) > 80
        block = registry.get("get_block")
        assert block.api == "database_api"
        assert block.params == ("block_num",)
        assert registry.get("get_dynamic_global_properties").params == ()

    def test_default_catalog_excludes_unsupported(self, registry):
        for name in UNSUPPORTED_METHODS:
            assert name not in registry
        assert "broadcast_transaction_synchronous" in registry

    def test_params_keep_catalog_order(self, registry):
        assert registry.get("get_followers").params == (
            "following", "start_follower", "follow_type", "limit",
        )

    def test_descriptors_are_immutable(self, registry):
        with pytest.raises(AttributeError):
            registry.get("get_block").api = "other_api"

    def test_duplicate_local_names_rejected(self):
        with pytest.raises(ConfigurationError):
            MethodRegistry.from_entries([
                {"api": "database_api", "method": "get_order_book", "params": ["limit"]},
                {"api": "market_history_api", "method": "get_order_book", "params": ["limit"]},
            ])

    def test_camel_case_remote_names(self):
        registry = MethodRegistry.from_entries([
            {"api": "database_api", "method": "getAccountCount"},
        ])
        assert registry.names() == ["get_account_count"]
        assert registry.get("get_account_count").method == "getAccountCount"

    def test_explicit_exclusion(self):
        registry = MethodRegistry.from_entries([
            {"api": "a", "method": "one"},
            {"api": "a", "method": "two"},
        ], exclude=["two"])
        assert registry.names() == ["one"]

    def test_load_custom_file(self, tmp_path):
        path = tmp_path / "methods.yaml"
        path.write_text(
            "- {api: condenser_api, method: get_block, params: [block_num]}\n"
            "- {api: condenser_api, method: broadcast_transaction, params: [trx]}\n"
        )

        registry = MethodRegistry.load(path)

        assert registry.names() == ["get_block"]

    def test_invalid_catalog_rejected(self, tmp_path):
        path = tmp_path / "methods.yaml"
        path.write_text("methods:\n  - {api: database_api}\n")

        with pytest.raises(ConfigurationError):
            MethodRegistry.load(path)
