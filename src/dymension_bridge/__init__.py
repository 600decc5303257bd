"""dymension-bridge: build cross-chain transfers through the Dymension Hub.

Covers Hyperlane-connected chains (EVM, Solana, Kaspa) and IBC chains,
including two-hop transfers that the Hub forwards on arrival.
"""
from .address import CanonicalAddress, to_canonical
from .chains import CHAINS, AddressFormat, DirectChain, HubChain, IndirectChain, Network, get_chain
from .client import BridgeClient
from .config import BridgeSettings, load_settings
from .exceptions import (
    BridgeException,
    ConfigurationError,
    FeeQuoteError,
    InsufficientBudgetError,
    InvalidFormatError,
    UnknownEntityError,
    UnsupportedRouteError,
)
from .fees.forwarding import ForwardingPlan, RouteKind, forward, send_amount_for_desired_forward
from .router import FeeQuote, Route, RouteMode, TransferRequest, TransferResult, TransferRouter, classify_route
from .tokens import TOKENS, TokenDescriptor, get_token

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CanonicalAddress",
    "to_canonical",
    "CHAINS",
    "AddressFormat",
    "DirectChain",
    "HubChain",
    "IndirectChain",
    "Network",
    "get_chain",
    "BridgeClient",
    "BridgeSettings",
    "load_settings",
    "BridgeException",
    "ConfigurationError",
    "FeeQuoteError",
    "InsufficientBudgetError",
    "InvalidFormatError",
    "UnknownEntityError",
    "UnsupportedRouteError",
    "ForwardingPlan",
    "RouteKind",
    "forward",
    "send_amount_for_desired_forward",
    "FeeQuote",
    "Route",
    "RouteMode",
    "TransferRequest",
    "TransferResult",
    "TransferRouter",
    "classify_route",
    "TOKENS",
    "TokenDescriptor",
    "get_token",
]
