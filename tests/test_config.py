"""Tests for environment-driven settings."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from dymension_bridge.chains import Network
from dymension_bridge.config import BridgeSettings, load_settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "NETWORK",
        "HUB_REST_URL",
        "IGP_HOOKS",
        "RPC_URLS",
        "LOG_LEVEL",
        "DEFAULT_GAS_LIMIT",
        "SOLANA_WARP_PROGRAMS",
        "CONFIGURE_LOGGING",
    ):
        monkeypatch.delenv(f"DYM_BRIDGE_{name}", raising=False)
    load_settings.cache_clear()
    yield monkeypatch
    load_settings.cache_clear()


class TestBridgeSettings:
    """Test defaults, environment overrides and validation."""

    def test_defaults(self, clean_env):
        """Test mainnet defaults."""
        settings = BridgeSettings(_env_file=None)
        assert settings.network_enum == Network.MAINNET
        assert settings.default_gas_limit == 200_000
        assert settings.ibc_timeout_hours == 1
        assert settings.resolved_hub_rest_url() == "https://dymension-rest.publicnode.com"

    def test_env_overrides(self, clean_env):
        """Test DYM_BRIDGE_ variables are read, including JSON maps."""
        clean_env.setenv("DYM_BRIDGE_NETWORK", "testnet")
        clean_env.setenv("DYM_BRIDGE_HUB_REST_URL", "https://rest.example/")
        clean_env.setenv("DYM_BRIDGE_IGP_HOOKS", '{"KAS": "0x01"}')
        clean_env.setenv("DYM_BRIDGE_LOG_LEVEL", "debug")
        clean_env.setenv("DYM_BRIDGE_SOLANA_WARP_PROGRAMS", '{"SOL": "0xab"}')
        clean_env.setenv("DYM_BRIDGE_CONFIGURE_LOGGING", "true")
        settings = BridgeSettings(_env_file=None)
        assert settings.network_enum == Network.TESTNET
        assert settings.hub_rest_url == "https://rest.example"
        assert settings.igp_hooks == {"KAS": "0x01"}
        assert settings.log_level == "DEBUG"
        assert settings.solana_warp_programs == {"SOL": "0xab"}
        assert settings.configure_logging is True

    def test_testnet_rest_default(self, clean_env):
        """Test the testnet public node is used when no URL is set."""
        settings = BridgeSettings(_env_file=None, network="testnet")
        assert "testnet" in settings.resolved_hub_rest_url()

    def test_rpc_urls(self, clean_env):
        """Test overrides win over built-in RPC defaults, which are mainnet only."""
        settings = BridgeSettings(_env_file=None, rpc_urls={"ethereum": "https://my-node"})
        assert settings.rpc_url("ethereum") == "https://my-node"
        assert settings.rpc_url("base") == "https://mainnet.base.org"
        assert settings.rpc_url("kaspa") is None

        testnet = BridgeSettings(_env_file=None, network="testnet", rpc_urls={"base": "https://sepolia.base"})
        assert testnet.rpc_url("ethereum") is None
        assert testnet.rpc_url("base") == "https://sepolia.base"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("default_gas_limit", 0),
            ("ibc_timeout_hours", -1),
            ("fee_cache_ttl_seconds", -5),
            ("log_level", "LOUD"),
            ("network", "devnet"),
        ],
    )
    def test_invalid_values(self, clean_env, field, value):
        """Test validators reject bad values."""
        with pytest.raises(ValidationError):
            BridgeSettings(_env_file=None, **{field: value})

    def test_load_settings_is_cached(self, clean_env):
        """Test settings are loaded once per process."""
        assert load_settings() is load_settings()

    def test_load_settings_env_file(self, clean_env, tmp_path):
        """Test loading from an explicit env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("DYM_BRIDGE_DEFAULT_GAS_LIMIT=300000\n")
        assert load_settings(str(env_file)).default_gas_limit == 300_000
