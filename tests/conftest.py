import logging

import pytest

from dymension_bridge.address import bech32_to_canonical, canonical_to_bech32
from dymension_bridge.chains import CHAINS, IndirectChain, Network
from dymension_bridge.config import BridgeSettings
from dymension_bridge.logging_config import clear_context
from dymension_bridge.tokens import TOKENS, TokenDescriptor

EVM_ADDRESS = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb2"
HUB_ADDRESS = "dym1g8sf7w4cz5gtupa6y62h3q6a4gjv37pgefnpt5"
SOLANA_ADDRESS = "HN7cABqLq46Es1jh92dQQisAq662SmxELLLsHHe4YWrH"
KASPA_TESTNET_ADDRESS = "kaspatest:qzlq49spp66vkjjex0w7z8708f6zteqwr6swy33fmy4za866ne90vhy54uh3j"
KASPA_MAINNET_ADDRESS = "kaspa:prztt2hd2txge07syjvhaz5j6l9ql6djhc9equela058rjm6vww0uwre5dulh"

FIXED_NOW = 1_700_000_000.0

TEST_USDC_ID = "0x" + "ab" * 32
TEST_HOOK_ID = "0x" + "cd" * 32
TEST_USDC_WARP_PROGRAM = "0x" + "ef" * 32


def rebech(address: str, prefix: str) -> str:
    """Same account under another bech32 prefix."""
    return canonical_to_bech32(bech32_to_canonical(address), prefix)


@pytest.fixture(autouse=True)
def reset_log_context():
    """Reset logging context variables between tests."""
    clear_context()
    yield
    clear_context()


@pytest.fixture
def restore_root_logger():
    """Put the root logger's handlers and level back after the test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def evm_address():
    return EVM_ADDRESS


@pytest.fixture
def hub_address():
    return HUB_ADDRESS


@pytest.fixture
def solana_address():
    return SOLANA_ADDRESS


@pytest.fixture
def kaspa_address():
    return KASPA_MAINNET_ADDRESS


@pytest.fixture
def kaspa_testnet_address():
    return KASPA_TESTNET_ADDRESS


@pytest.fixture
def fixed_clock():
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def osmo_address():
    return rebech(HUB_ADDRESS, "osmo")


@pytest.fixture
def noble_address():
    return rebech(HUB_ADDRESS, "noble")


@pytest.fixture
def rollapp_address():
    return rebech(HUB_ADDRESS, "rol")


@pytest.fixture
def rollapp_chain():
    """An EIBC-enabled rollapp."""
    return IndirectChain(
        name="rollappx",
        display_name="RollApp X",
        address_prefix="rol",
        forward_channel_out="channel-100",
        forward_channel_in="channel-0",
        chain_id="rollappx_1-1",
        incentivized=True,
    )


@pytest.fixture
def test_chains(rollapp_chain):
    chains = dict(CHAINS)
    chains[rollapp_chain.name] = rollapp_chain
    return chains


@pytest.fixture
def test_tokens():
    """Registry with a USDC warp route configured on the Hub."""
    tokens = dict(TOKENS)
    tokens["USDC"] = TokenDescriptor(
        symbol="USDC",
        display_name="USD Coin",
        decimals=6,
        hub_token_id=TEST_USDC_ID,
        hub_denom="ibc/USDC",
        igp_hook_id=TEST_HOOK_ID,
        warp_programs={Network.MAINNET: TEST_USDC_WARP_PROGRAM},
        addresses={
            "ethereum": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            "solana": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
            "noble": "uusdc",
            "osmosis": "ibc/USDC-OSMO",
            "rollappx": "ibc/USDC-ROL",
        },
    )
    return tokens


@pytest.fixture
def settings():
    return BridgeSettings(
        _env_file=None,
        hub_rest_url="https://hub.test",
        igp_hooks={"KAS": TEST_HOOK_ID},
        json_logs=False,
    )
