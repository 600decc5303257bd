"""Tests for the chain and token registries."""
from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

import pytest

from dymension_bridge.chains import (
    DOMAINS,
    DirectChain,
    HubChain,
    IndirectChain,
    Network,
    chain_names,
    get_chain,
    get_channel_from_hub,
    get_channel_to_hub,
    get_hub,
    get_protocol_domain,
    is_direct_chain,
    is_indirect_chain,
)
from dymension_bridge.address import solana_to_canonical
from dymension_bridge.exceptions import (
    ConfigurationError,
    InvalidFormatError,
    UnknownEntityError,
    UnsupportedRouteError,
)
from dymension_bridge.tokens import (
    HUB_TOKEN_IDS,
    from_base_units,
    get_hub_denom,
    get_hub_token_id,
    get_igp_hook_id,
    get_solana_warp_program_id,
    get_token,
    get_token_address,
    is_token_available_on_chain,
    normalize_solana_program_id,
    to_base_units,
    tokens_on_chain,
)

SOLANA_KEY = "HN7cABqLq46Es1jh92dQQisAq662SmxELLLsHHe4YWrH"


class TestChainRegistry:
    """Test chain lookups."""

    def test_get_chain_is_case_insensitive(self):
        """Test lookups by any-case name."""
        assert get_chain("Ethereum").name == "ethereum"

    def test_unknown_chain(self):
        """Test unknown chains raise with the supported list."""
        with pytest.raises(UnknownEntityError) as exc_info:
            get_chain("polygon")
        assert exc_info.value.entity_type == "chain"
        assert "ethereum" in exc_info.value.message

    def test_hub(self):
        """Test the registry carries exactly one Hub."""
        hub = get_hub()
        assert isinstance(hub, HubChain)
        assert hub.address_prefix == "dym"
        assert hub.domain(Network.MAINNET) == DOMAINS["DYMENSION_MAINNET"]
        assert hub.domain(Network.TESTNET) == DOMAINS["DYMENSION_TESTNET"]

    def test_registry_without_hub(self):
        """Test a registry missing the Hub is a configuration error."""
        with pytest.raises(ConfigurationError):
            get_hub({"ethereum": get_chain("ethereum")})

    def test_protocol_domains(self):
        """Test Hyperlane domains per network."""
        assert get_protocol_domain("ethereum") == 1
        assert get_protocol_domain("base") == 8453
        assert get_protocol_domain("kaspa", Network.TESTNET) == DOMAINS["KASPA_TESTNET"]
        assert get_protocol_domain("solana", Network.TESTNET) == DOMAINS["SOLANA_TESTNET"]
        # No separate testnet domain falls back to mainnet
        assert get_protocol_domain("bsc", Network.TESTNET) == 56

    def test_indirect_chain_has_no_domain(self):
        """Test IBC chains cannot be addressed over Hyperlane."""
        with pytest.raises(UnsupportedRouteError):
            get_protocol_domain("osmosis")

    def test_channels(self):
        """Test IBC channel lookups in both directions."""
        assert get_channel_from_hub("osmosis") == "channel-2"
        assert get_channel_to_hub("osmosis") == "channel-19774"
        with pytest.raises(UnsupportedRouteError):
            get_channel_from_hub("ethereum")
        with pytest.raises(UnsupportedRouteError):
            get_channel_to_hub("kaspa")

    def test_chain_kinds(self):
        """Test direct/indirect classification."""
        assert is_direct_chain("solana")
        assert not is_direct_chain("noble")
        assert is_indirect_chain("celestia")
        assert set(chain_names(kind=IndirectChain)) == {"osmosis", "cosmoshub", "celestia", "noble"}
        assert "dymension" not in chain_names(kind=DirectChain)


class TestTokenRegistry:
    """Test token lookups."""

    def test_get_token(self):
        """Test lookup normalizes the symbol."""
        assert get_token("kas").decimals == 8

    def test_unknown_token(self):
        """Test unknown tokens raise."""
        with pytest.raises(UnknownEntityError):
            get_token("DOGE")

    def test_token_address(self):
        """Test native addresses per chain and network."""
        assert get_token_address("KAS", "kaspa") == "native"
        assert get_token_address("USDC", "solana", Network.TESTNET) == "CpMah17kQEL2wqyMKt3mZBdTnZbkbfx4nqmQMFDP5vwp"
        with pytest.raises(UnknownEntityError):
            get_token_address("ETH", "solana")

    def test_availability(self):
        """Test availability checks never raise."""
        assert is_token_available_on_chain("KAS", "ethereum")
        assert not is_token_available_on_chain("KAS", "solana")
        assert not is_token_available_on_chain("DOGE", "ethereum")
        assert set(tokens_on_chain("solana")) == {"SOL", "USDC", "USDT"}

    def test_hub_token_id(self):
        """Test configured and unconfigured warp routes."""
        assert get_hub_token_id("KAS").startswith("0x726f757465725f617070")
        with pytest.raises(UnknownEntityError):
            get_hub_token_id("SOL")

    def test_hub_token_ids(self):
        """Test the map only holds configured warp routes."""
        assert HUB_TOKEN_IDS["KAS"] == get_hub_token_id("KAS")
        assert "SOL" not in HUB_TOKEN_IDS

    def test_hub_denom(self):
        """Test native and synthetic Hub denoms."""
        assert get_hub_denom("DYM") == "adym"
        assert get_hub_denom("KAS") == f"hyperlane/{get_hub_token_id('KAS')}"

    def test_igp_hook_override(self):
        """Test settings overrides take precedence."""
        assert get_igp_hook_id("KAS") is None
        assert get_igp_hook_id("KAS", overrides={"KAS": "0x01"}) == "0x01"

    def test_solana_warp_program(self):
        """Test warp programs are looked up per network, overrides first."""
        sol = replace(get_token("SOL"), warp_programs={Network.TESTNET: SOLANA_KEY})
        tokens = {"SOL": sol}
        assert get_solana_warp_program_id("SOL", Network.TESTNET, tokens) == SOLANA_KEY
        with pytest.raises(ConfigurationError):
            get_solana_warp_program_id("SOL", Network.MAINNET, tokens)
        with pytest.raises(ConfigurationError):
            get_solana_warp_program_id("SOL")

        program = get_solana_warp_program_id("sol", overrides={"SOL": "0x" + "07" * 32})
        assert solana_to_canonical(program).value == b"\x07" * 32

    def test_solana_warp_program_format(self):
        """Test program ids must be 32-byte keys."""
        with pytest.raises(InvalidFormatError):
            normalize_solana_program_id("0x1234")
        assert normalize_solana_program_id(SOLANA_KEY) == SOLANA_KEY


class TestUnitConversion:
    """Test human/base unit conversion."""

    def test_to_base_units(self):
        """Test scaling decimal strings."""
        assert to_base_units("1.5", 18) == 1_500_000_000_000_000_000
        assert to_base_units("40", 8) == 4_000_000_000
        assert to_base_units(0, 6) == 0

    def test_too_many_decimals(self):
        """Test precision beyond the token's decimals is rejected."""
        with pytest.raises(InvalidFormatError):
            to_base_units("0.0000001", 6)

    def test_invalid_amounts(self):
        """Test negative and non-numeric amounts."""
        with pytest.raises(InvalidFormatError):
            to_base_units("-1", 6)
        with pytest.raises(InvalidFormatError):
            to_base_units("abc", 6)

    def test_from_base_units(self):
        """Test converting back to a Decimal."""
        assert from_base_units(1_500_000, 6) == Decimal("1.5")
