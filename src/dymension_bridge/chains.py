"""Chain registry for the Dymension bridge.

Every supported chain is exactly one of three kinds:

- ``HubChain``: the Dymension Hub itself, the settlement point for every
  forwarded transfer.
- ``DirectChain``: reachable from the Hub through the Hyperlane envelope
  protocol (EVM chains, Solana, Kaspa).
- ``IndirectChain``: reachable only over IBC after landing on the Hub
  (Cosmos chains and rollapps).

Channels are named from the Hub's perspective.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union

from .exceptions import ConfigurationError, UnknownEntityError, UnsupportedRouteError


class Network(str, Enum):
    """Network variant."""
    MAINNET = "mainnet"
    TESTNET = "testnet"


class AddressFormat(str, Enum):
    """Native address encoding of a chain."""
    EVM = "evm"
    BECH32 = "bech32"
    BASE58 = "base58"
    KASPA = "kaspa"


@dataclass(frozen=True, slots=True)
class HubChain:
    name: str
    display_name: str
    address_prefix: str
    protocol_domain: int
    testnet_domain: int
    chain_id: str
    testnet_chain_id: str
    address_format: AddressFormat = AddressFormat.BECH32

    def domain(self, network: Network = Network.MAINNET) -> int:
        if network == Network.TESTNET:
            return self.testnet_domain
        return self.protocol_domain


@dataclass(frozen=True, slots=True)
class DirectChain:
    name: str
    display_name: str
    address_prefix: str
    address_format: AddressFormat
    protocol_domain: int
    testnet_domain: Optional[int] = None

    def domain(self, network: Network = Network.MAINNET) -> int:
        if network == Network.TESTNET and self.testnet_domain:
            return self.testnet_domain
        return self.protocol_domain


@dataclass(frozen=True, slots=True)
class IndirectChain:
    """A chain reached over IBC from the Hub.

    ``incentivized`` marks a rollapp-style chain whose withdrawals to the Hub
    go through the incentivized (EIBC) fulfilment path and carry an EIBC fee
    plus a delayed-ack fee on the first hop.
    """
    name: str
    display_name: str
    address_prefix: str
    forward_channel_out: str
    forward_channel_in: str
    chain_id: str
    testnet_chain_id: Optional[str] = None
    address_format: AddressFormat = AddressFormat.BECH32
    incentivized: bool = False


ChainDescriptor = Union[HubChain, DirectChain, IndirectChain]


# Hyperlane domain IDs for supported chains
DOMAINS: dict[str, int] = {
    "DYMENSION_MAINNET": 1570310961,
    "DYMENSION_TESTNET": 482195613,
    "KASPA_MAINNET": 1082673309,
    "KASPA_TESTNET": 80808082,
    "ETHEREUM": 1,
    "BASE": 8453,
    "BSC": 56,
    "SOLANA_MAINNET": 1399811149,
    "SOLANA_TESTNET": 1399811150,
}

NATIVE_HUB_DENOM = "adym"

# Kaspa escrow addresses receiving deposits bound for the Hub
KASPA_ESCROW: dict[Network, str] = {
    Network.MAINNET: "kaspa:prztt2hd2txge07syjvhaz5j6l9ql6djhc9equela058rjm6vww0uwre5dulh",
    Network.TESTNET: "kaspatest:pzwcd30pvdn0k4snvj5awkmlm6srzuw8d8e766ff5vwceg2akta3799nq2a3p",
}

SOMPI_PER_KAS = 100_000_000
KASPA_MIN_DEPOSIT_SOMPI = 40 * SOMPI_PER_KAS

HUB_REST_ENDPOINTS: dict[Network, str] = {
    Network.MAINNET: "https://dymension-rest.publicnode.com",
    Network.TESTNET: "https://dymension-testnet-rest.publicnode.com",
}

# Mainnet JSON-RPC endpoints
DEFAULT_RPC_URLS: dict[str, str] = {
    "ethereum": "https://eth.llamarpc.com",
    "base": "https://mainnet.base.org",
    "bsc": "https://bsc.drpc.org",
}


CHAINS: dict[str, ChainDescriptor] = {
    "dymension": HubChain(
        name="dymension",
        display_name="Dymension",
        address_prefix="dym",
        protocol_domain=DOMAINS["DYMENSION_MAINNET"],
        testnet_domain=DOMAINS["DYMENSION_TESTNET"],
        chain_id="dymension_1100-1",
        testnet_chain_id="blumbus_111-1",
    ),
    "ethereum": DirectChain(
        name="ethereum",
        display_name="Ethereum",
        address_prefix="0x",
        address_format=AddressFormat.EVM,
        protocol_domain=DOMAINS["ETHEREUM"],
    ),
    "base": DirectChain(
        name="base",
        display_name="Base",
        address_prefix="0x",
        address_format=AddressFormat.EVM,
        protocol_domain=DOMAINS["BASE"],
    ),
    "bsc": DirectChain(
        name="bsc",
        display_name="BNB Smart Chain",
        address_prefix="0x",
        address_format=AddressFormat.EVM,
        protocol_domain=DOMAINS["BSC"],
    ),
    "solana": DirectChain(
        name="solana",
        display_name="Solana",
        address_prefix="",
        address_format=AddressFormat.BASE58,
        protocol_domain=DOMAINS["SOLANA_MAINNET"],
        testnet_domain=DOMAINS["SOLANA_TESTNET"],
    ),
    "kaspa": DirectChain(
        name="kaspa",
        display_name="Kaspa",
        address_prefix="kaspa",
        address_format=AddressFormat.KASPA,
        protocol_domain=DOMAINS["KASPA_MAINNET"],
        testnet_domain=DOMAINS["KASPA_TESTNET"],
    ),
    "osmosis": IndirectChain(
        name="osmosis",
        display_name="Osmosis",
        address_prefix="osmo",
        forward_channel_out="channel-2",
        forward_channel_in="channel-19774",
        chain_id="osmosis-1",
        testnet_chain_id="osmo-test-5",
    ),
    "cosmoshub": IndirectChain(
        name="cosmoshub",
        display_name="Cosmos Hub",
        address_prefix="cosmos",
        forward_channel_out="channel-1",
        forward_channel_in="channel-794",
        chain_id="cosmoshub-4",
    ),
    "celestia": IndirectChain(
        name="celestia",
        display_name="Celestia",
        address_prefix="celestia",
        forward_channel_out="channel-4",
        forward_channel_in="channel-27",
        chain_id="celestia",
        testnet_chain_id="mocha-4",
    ),
    "noble": IndirectChain(
        name="noble",
        display_name="Noble",
        address_prefix="noble",
        forward_channel_out="channel-6",
        forward_channel_in="channel-62",
        chain_id="noble-1",
        testnet_chain_id="grand-1",
    ),
}


def get_chain(name: str, chains: Mapping[str, ChainDescriptor] = CHAINS) -> ChainDescriptor:
    """Get a chain descriptor by name.

    Raises:
        UnknownEntityError: If the chain is not in the registry
    """
    try:
        return chains[name.lower()]
    except KeyError:
        raise UnknownEntityError(
            "chain",
            name,
            f"Unknown chain: {name}. Supported: {', '.join(sorted(chains))}",
        ) from None


def get_hub(chains: Mapping[str, ChainDescriptor] = CHAINS) -> HubChain:
    """Return the registry's single Hub descriptor."""
    for chain in chains.values():
        if isinstance(chain, HubChain):
            return chain
    raise ConfigurationError("Registry has no Hub chain")


def get_protocol_domain(
    name: str,
    network: Network = Network.MAINNET,
    chains: Mapping[str, ChainDescriptor] = CHAINS,
) -> int:
    """Get the Hyperlane domain for a Hub or direct chain.

    Raises:
        UnsupportedRouteError: If the chain is only reachable over IBC
    """
    chain = get_chain(name, chains)
    if isinstance(chain, IndirectChain):
        raise UnsupportedRouteError(
            get_hub(chains).name,
            name,
            f"Chain {name} is an IBC chain and has no Hyperlane domain",
        )
    return chain.domain(network)


def get_channel_from_hub(name: str, chains: Mapping[str, ChainDescriptor] = CHAINS) -> str:
    """IBC channel on the Hub leading to ``name``."""
    chain = get_chain(name, chains)
    if not isinstance(chain, IndirectChain):
        raise UnsupportedRouteError(
            get_hub(chains).name, name, f"Chain {name} is not an IBC chain"
        )
    return chain.forward_channel_out


def get_channel_to_hub(name: str, chains: Mapping[str, ChainDescriptor] = CHAINS) -> str:
    """IBC channel on ``name`` leading to the Hub."""
    chain = get_chain(name, chains)
    if not isinstance(chain, IndirectChain):
        raise UnsupportedRouteError(
            name, get_hub(chains).name, f"Chain {name} is not an IBC chain"
        )
    return chain.forward_channel_in


def is_direct_chain(name: str, chains: Mapping[str, ChainDescriptor] = CHAINS) -> bool:
    return isinstance(get_chain(name, chains), DirectChain)


def is_indirect_chain(name: str, chains: Mapping[str, ChainDescriptor] = CHAINS) -> bool:
    return isinstance(get_chain(name, chains), IndirectChain)


def chain_names(
    chains: Mapping[str, ChainDescriptor] = CHAINS,
    kind: Optional[type] = None,
) -> list[str]:
    """All chain names, optionally filtered by descriptor type."""
    return [name for name, chain in chains.items() if kind is None or isinstance(chain, kind)]


__all__ = [
    "Network",
    "AddressFormat",
    "HubChain",
    "DirectChain",
    "IndirectChain",
    "ChainDescriptor",
    "DOMAINS",
    "NATIVE_HUB_DENOM",
    "KASPA_ESCROW",
    "SOMPI_PER_KAS",
    "KASPA_MIN_DEPOSIT_SOMPI",
    "HUB_REST_ENDPOINTS",
    "DEFAULT_RPC_URLS",
    "CHAINS",
    "get_chain",
    "get_hub",
    "get_protocol_domain",
    "get_channel_from_hub",
    "get_channel_to_hub",
    "is_direct_chain",
    "is_indirect_chain",
    "chain_names",
]
