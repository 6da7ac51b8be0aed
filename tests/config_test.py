"""Tests for BridgeConfig and environment parsing."""

import pytest

from colbridge import BridgeConfig
from colbridge.config import CAPABILITIES, DECIMAL, LAZY, OBJECT, parse_capabilities


class TestParseCapabilities:
    def test_all(self):
        assert parse_capabilities("all") == CAPABILITIES
        assert parse_capabilities(" ALL ") == CAPABILITIES

    def test_list(self):
        assert parse_capabilities("dtype-decimal, lazy,") == {DECIMAL, LAZY}

    def test_empty(self):
        assert parse_capabilities("") == frozenset()


class TestBridgeConfig:
    def test_defaults(self):
        config = BridgeConfig()
        assert config.host_module == "polars"
        assert config.capabilities == CAPABILITIES

    def test_none_is_always_enabled(self):
        assert BridgeConfig(capabilities=frozenset()).enabled(None)

    def test_unknown_capability(self):
        with pytest.raises(ValueError, match="Unknown capabilities"):
            BridgeConfig(capabilities={"dtype-quaternion"})

    def test_without(self):
        config = BridgeConfig().without(OBJECT, LAZY)
        assert not config.enabled(OBJECT)
        assert not config.enabled(LAZY)
        assert config.enabled(DECIMAL)

    def test_from_env(self):
        config = BridgeConfig.from_env(
            {"COLBRIDGE_HOST_MODULE": "myhost", "COLBRIDGE_CAPABILITIES": "lazy"}
        )
        assert config.host_module == "myhost"
        assert config.capabilities == {LAZY}

    def test_from_env_defaults(self):
        assert BridgeConfig.from_env({}) == BridgeConfig()

    def test_from_env_disables_everything(self):
        assert BridgeConfig.from_env({"COLBRIDGE_CAPABILITIES": ""}).capabilities == frozenset()

    def test_from_process_environment(self, monkeypatch):
        monkeypatch.setenv("COLBRIDGE_CAPABILITIES", "object")
        monkeypatch.delenv("COLBRIDGE_HOST_MODULE", raising=False)
        assert BridgeConfig.from_env() == BridgeConfig(capabilities={OBJECT})
