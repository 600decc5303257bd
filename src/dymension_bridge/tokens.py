"""Token registry for bridgeable assets.

Addresses are native per chain: ERC-20 contracts on EVM chains, mints on
Solana, denoms on Cosmos chains, and ``native`` where the token is the
chain's own asset. Token IDs are the Hub warp-route identifiers.

A Solana mint is not the program a deposit is sent to: Sealevel warp routes
are their own programs, looked up per network in ``warp_programs``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_DOWN
from typing import Mapping, Optional

from .address import canonical_to_solana, is_canonical, solana_to_canonical
from .chains import NATIVE_HUB_DENOM, Network
from .exceptions import ConfigurationError, InvalidFormatError, UnknownEntityError

NATIVE = "native"
UNCONFIGURED_TOKEN_ID = "0x" + "00" * 32


@dataclass(frozen=True, slots=True)
class TokenDescriptor:
    """Metadata for a bridgeable token."""
    symbol: str
    display_name: str
    decimals: int
    hub_token_id: str
    addresses: Mapping[str, str]
    testnet_addresses: Mapping[str, str] = field(default_factory=dict)
    hub_denom: Optional[str] = None
    igp_hook_id: Optional[str] = None
    # Sealevel warp-route program per network
    warp_programs: Mapping[Network, str] = field(default_factory=dict)

    @property
    def is_configured_on_hub(self) -> bool:
        return self.hub_token_id.lower() != UNCONFIGURED_TOKEN_ID

    def address_on(self, chain: str, network: Network = Network.MAINNET) -> Optional[str]:
        if network == Network.TESTNET and chain in self.testnet_addresses:
            return self.testnet_addresses[chain]
        return self.addresses.get(chain)


TOKENS: dict[str, TokenDescriptor] = {
    "KAS": TokenDescriptor(
        symbol="KAS",
        display_name="Kaspa",
        decimals=8,
        hub_token_id="0x726f757465725f61707000000000000000000000000000020000000000000000",
        addresses={
            "ethereum": "0x18e6C30487e61B117bDE1218aEf2D9Bd7742c4CF",
            "base": "0x9c3dfFBE238B3A472233151a49A99431966De087",
            "bsc": "0x8AC2505B0Fe4F73c7A0FCc5c63DB2bCBb1221357",
            "kaspa": NATIVE,
        },
        testnet_addresses={"kaspa": NATIVE},
    ),
    "ETH": TokenDescriptor(
        symbol="ETH",
        display_name="Ethereum",
        decimals=18,
        hub_token_id="0x726f757465725f61707000000000000000000000000000020000000000000002",
        addresses={"ethereum": "0x4E19c3E50a9549970f5b7fDAb76c9bE71C878641"},
    ),
    "DYM": TokenDescriptor(
        symbol="DYM",
        display_name="Dymension",
        decimals=18,
        hub_token_id="0x726f757465725f61707000000000000000000000000000010000000000000001",
        hub_denom=NATIVE_HUB_DENOM,
        addresses={
            "ethereum": "0x408C4ECBe5D68a135be87e01aDaf91906e982127",
            "base": "0x19CCc0859A26fF815E48aA89820691c306253C5a",
            "bsc": "0x98ddD4fDff5a2896D1Bd6A1d668FD3D305E8E724",
            "dymension": NATIVE,
        },
    ),
    "SOL": TokenDescriptor(
        symbol="SOL",
        display_name="Solana",
        decimals=9,
        hub_token_id=UNCONFIGURED_TOKEN_ID,
        addresses={"solana": "So11111111111111111111111111111111111111112"},
        testnet_addresses={"solana": "So11111111111111111111111111111111111111112"},
    ),
    "USDC": TokenDescriptor(
        symbol="USDC",
        display_name="USD Coin",
        decimals=6,
        hub_token_id=UNCONFIGURED_TOKEN_ID,
        addresses={
            "solana": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
            "noble": "uusdc",
        },
        testnet_addresses={"solana": "CpMah17kQEL2wqyMKt3mZBdTnZbkbfx4nqmQMFDP5vwp"},
    ),
    "USDT": TokenDescriptor(
        symbol="USDT",
        display_name="Tether USD",
        decimals=6,
        hub_token_id=UNCONFIGURED_TOKEN_ID,
        addresses={"solana": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"},
        testnet_addresses={"solana": "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU"},
    ),
}

# Symbols with a configured Hub warp route
HUB_TOKEN_IDS: dict[str, str] = {
    symbol: token.hub_token_id for symbol, token in TOKENS.items() if token.is_configured_on_hub
}


def get_token(symbol: str, tokens: Mapping[str, TokenDescriptor] = TOKENS) -> TokenDescriptor:
    """Get token metadata by symbol.

    Raises:
        UnknownEntityError: If the token is not in the registry
    """
    try:
        return tokens[symbol.upper()]
    except KeyError:
        raise UnknownEntityError(
            "token",
            symbol,
            f"Unknown token: {symbol}. Supported: {', '.join(sorted(tokens))}",
        ) from None


def get_token_address(
    symbol: str,
    chain: str,
    network: Network = Network.MAINNET,
    tokens: Mapping[str, TokenDescriptor] = TOKENS,
) -> str:
    """Native address of a token on a chain, testnet overrides first.

    Raises:
        UnknownEntityError: If the token does not exist on the chain
    """
    token = get_token(symbol, tokens)
    address = token.address_on(chain, network)
    if not address:
        raise UnknownEntityError(
            "token",
            f"{token.symbol}@{chain}",
            f"Token {token.symbol} not available on chain {chain}",
        )
    return address


def is_token_available_on_chain(
    symbol: str,
    chain: str,
    network: Network = Network.MAINNET,
    tokens: Mapping[str, TokenDescriptor] = TOKENS,
) -> bool:
    token = tokens.get(symbol.upper())
    if token is None:
        return False
    return token.address_on(chain, network) is not None


def tokens_on_chain(
    chain: str,
    network: Network = Network.MAINNET,
    tokens: Mapping[str, TokenDescriptor] = TOKENS,
) -> list[str]:
    return [symbol for symbol, token in tokens.items() if token.address_on(chain, network)]


def get_hub_token_id(symbol: str, tokens: Mapping[str, TokenDescriptor] = TOKENS) -> str:
    """Hub warp token ID.

    Raises:
        UnknownEntityError: If the token has no Hub warp route yet
    """
    token = get_token(symbol, tokens)
    if not token.is_configured_on_hub:
        raise UnknownEntityError(
            "hub_token_id",
            token.symbol,
            f"Token {token.symbol} has no Hub token ID configured",
        )
    return token.hub_token_id


def get_hub_denom(symbol: str, tokens: Mapping[str, TokenDescriptor] = TOKENS) -> str:
    """Bank denom of a token on the Hub.

    Warp-route synthetic tokens live under ``hyperlane/<token id>``.
    """
    token = get_token(symbol, tokens)
    if token.hub_denom:
        return token.hub_denom
    return f"hyperlane/{get_hub_token_id(symbol, tokens)}"


def get_igp_hook_id(
    symbol: str,
    tokens: Mapping[str, TokenDescriptor] = TOKENS,
    overrides: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """IGP hook used when the Hub dispatches this token outbound."""
    token = get_token(symbol, tokens)
    if overrides and token.symbol in overrides:
        return overrides[token.symbol]
    return token.igp_hook_id


def get_solana_warp_program_id(
    symbol: str,
    network: Network = Network.MAINNET,
    tokens: Mapping[str, TokenDescriptor] = TOKENS,
    overrides: Optional[Mapping[str, str]] = None,
) -> str:
    """Sealevel warp-route program that deposits ``symbol`` to the Hub.

    Overrides (symbol to program id) win over the registry. An id may be a
    base58 public key or the 0x-prefixed 32-byte router address the Hub
    records for the route; the result is always base58.

    Raises:
        ConfigurationError: If no program is known for the token and network
        InvalidFormatError: If the id is not a 32-byte key
    """
    token = get_token(symbol, tokens)
    network = Network(network)
    program_id = (overrides or {}).get(token.symbol) or token.warp_programs.get(network)
    if not program_id:
        raise ConfigurationError(
            f"No Solana warp program configured for {token.symbol} on {network.value}",
            details={"token": token.symbol, "network": network.value},
        )
    return normalize_solana_program_id(program_id)


def normalize_solana_program_id(program_id: str) -> str:
    if program_id.startswith("0x") and is_canonical(program_id):
        return canonical_to_solana(program_id)
    return canonical_to_solana(solana_to_canonical(program_id))


def to_base_units(amount: str | int | Decimal, decimals: int) -> int:
    """Convert a human amount (e.g. "1.5") into integer base units.

    Raises:
        InvalidFormatError: If the amount is negative or has more precision
            than the token supports
    """
    try:
        value = Decimal(str(amount))
    except ArithmeticError:
        raise InvalidFormatError(
            f"Invalid amount: {amount}", expected="decimal number", value=str(amount)
        ) from None
    if not value.is_finite() or value < 0:
        raise InvalidFormatError(
            f"Invalid amount: {amount}", expected="non-negative decimal", value=str(amount)
        )
    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value(rounding=ROUND_DOWN):
        raise InvalidFormatError(
            f"Amount {amount} has more than {decimals} decimal places",
            expected=f"at most {decimals} decimal places",
            value=str(amount),
        )
    return int(scaled)


def from_base_units(amount: int, decimals: int) -> Decimal:
    """Convert integer base units back into a human-readable Decimal."""
    return Decimal(amount).scaleb(-decimals)


__all__ = [
    "NATIVE",
    "UNCONFIGURED_TOKEN_ID",
    "TokenDescriptor",
    "TOKENS",
    "HUB_TOKEN_IDS",
    "get_token",
    "get_token_address",
    "is_token_available_on_chain",
    "tokens_on_chain",
    "get_hub_token_id",
    "get_hub_denom",
    "get_igp_hook_id",
    "get_solana_warp_program_id",
    "normalize_solana_program_id",
    "to_base_units",
    "from_base_units",
]
