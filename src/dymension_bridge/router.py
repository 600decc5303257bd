"""Transfer router.

Turns a transfer request into the unsigned call a wallet signs on the
source chain. Three route shapes exist:

- from the Hub: a Hyperlane ``MsgRemoteTransfer`` or an IBC ``MsgTransfer``
- to the Hub: the source chain's native deposit call
- via the Hub: a deposit to the Hub carrying forwarding metadata (or a
  completion memo) that the Hub executes on arrival

Fees are never fetched here; the caller passes a FeeQuote.
See client.BridgeClient for the async facade that resolves one.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Union

from .address import (
    CanonicalAddress,
    bech32_to_canonical,
    is_valid_bech32_address,
    is_valid_evm_address,
    is_valid_kaspa_address,
    solana_to_canonical,
    to_canonical,
)
from .adapters.evm import EvmCall, transfer_remote_call, transfer_remote_memo_call
from .adapters.hub import HubRemoteTransferMsg, IbcTransferMsg
from .adapters.kaspa import KaspaDeposit, build_kaspa_deposit
from .adapters.solana import (
    SolanaInstruction,
    transfer_remote_instruction,
    transfer_remote_memo_instruction,
)
from .chains import (
    CHAINS,
    AddressFormat,
    ChainDescriptor,
    DirectChain,
    HubChain,
    IndirectChain,
    Network,
    get_chain,
    get_hub,
)
from .exceptions import InvalidFormatError, UnknownEntityError, UnsupportedRouteError
from .fees.bridging import DEFAULT_EIBC_FEE_PERCENT, Rate, bridging_fee
from .fees.breakdown import FeeBreakdown, estimate_single_hop
from .fees.forwarding import ForwardingPlan, Hop1Rates, Hop2Params, RouteKind, forward
from .tokens import (
    TOKENS,
    TokenDescriptor,
    get_hub_denom,
    get_hub_token_id,
    get_igp_hook_id,
    get_solana_warp_program_id,
    get_token,
    normalize_solana_program_id,
)
from .wire.forwarding import (
    Coin,
    ForwardingMetadata,
    ForwardInstruction,
    ForwardToDirectChain,
    ForwardToIndirectChain,
    IbcTransferInstruction,
    RemoteTransferInstruction,
)
from .wire.ibc import DEFAULT_IBC_TIMEOUT_HOURS, ibc_timeout_timestamp
from .wire.memo import eibc_fee_memo, incentivized_memo, relay_memo

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 200_000

TransferCall = Union[EvmCall, SolanaInstruction, KaspaDeposit, HubRemoteTransferMsg, IbcTransferMsg]


# =============================================================================
# Request / quote / result types
# =============================================================================


class RouteMode(str, Enum):
    """Whether a transfer touches the Hub once or forwards through it."""
    DIRECT = "direct"
    VIA_HUB = "via_hub"


@dataclass(frozen=True, slots=True)
class TransferRequest:
    """A user's intent to move ``amount`` base units of ``token``.

    ``fallback_recipient`` is the Hub account that keeps the funds if
    forwarding fails; it defaults to ``sender`` when that is a Hub address.
    ``token_program_id`` overrides the Sealevel warp program for Solana
    sources.
    """
    source: str
    destination: str
    token: str
    amount: int
    recipient: str
    sender: str = ""
    fallback_recipient: Optional[str] = None
    token_program_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class FeeQuote:
    """Fee inputs for one transfer, resolved ahead of routing.

    Rates are fractions (0.001 is 0.1%) except ``eibc_percent``, which is a
    percentage. ``source_gas_payment`` is the IGP payment attached as
    ``value`` to EVM source calls, in the source chain's native currency.
    """
    igp_fee: int = 0
    inbound_rate: Rate = 0
    outbound_rate: Rate = 0
    eibc_percent: Rate = DEFAULT_EIBC_FEE_PERCENT
    delayed_ack_rate: Rate = 0
    source_gas_payment: int = 0
    gas_limit: int = DEFAULT_GAS_LIMIT
    igp_hook_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Route:
    source: str
    destination: str
    mode: RouteMode
    kind: Optional[RouteKind] = None

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "destination": self.destination,
            "mode": self.mode.value,
            "kind": self.kind.value if self.kind else None,
        }


@dataclass(frozen=True, slots=True)
class TransferResult:
    """Everything needed to sign the transfer, plus how fees were split."""
    route: Route
    call: TransferCall
    plan: Optional[ForwardingPlan] = None
    metadata: Optional[bytes] = None
    fees: Optional[FeeBreakdown] = None

    def to_dict(self) -> dict:
        return {
            "route": self.route.to_dict(),
            "call": self.call.to_dict(),
            "plan": self.plan.to_dict() if self.plan else None,
            "metadata": self.metadata.hex() if self.metadata is not None else None,
            "fees": self.fees.to_dict() if self.fees else None,
        }


def classify_route(source: ChainDescriptor, destination: ChainDescriptor) -> Route:
    """Decide route mode and, for forwarded transfers, the route kind.

    Raises:
        UnsupportedRouteError: For same-chain transfers and for IBC to IBC,
            which the Hub cannot forward
    """
    if source.name == destination.name:
        raise UnsupportedRouteError(
            source.name, destination.name, "Source and destination must differ"
        )
    if isinstance(source, HubChain) or isinstance(destination, HubChain):
        return Route(source.name, destination.name, RouteMode.DIRECT)

    to_direct = isinstance(destination, DirectChain)
    if isinstance(source, DirectChain):
        kind = RouteKind.DIRECT_HUB_DIRECT if to_direct else RouteKind.DIRECT_HUB_INDIRECT
    elif source.incentivized:
        kind = RouteKind.INCENTIVIZED_HUB_DIRECT if to_direct else RouteKind.INCENTIVIZED_HUB_INDIRECT
    elif to_direct:
        kind = RouteKind.INDIRECT_HUB_DIRECT
    else:
        raise UnsupportedRouteError(
            source.name,
            destination.name,
            f"Cannot forward {source.name} -> {destination.name}: "
            "IBC to IBC transfers are not forwarded by the Hub",
        )
    return Route(source.name, destination.name, RouteMode.VIA_HUB, kind)


# =============================================================================
# Router
# =============================================================================


class TransferRouter:
    """Builds unsigned transfer calls against a chain and token registry."""

    def __init__(
        self,
        network: Network = Network.MAINNET,
        chains: Mapping[str, ChainDescriptor] = CHAINS,
        tokens: Mapping[str, TokenDescriptor] = TOKENS,
        ibc_timeout_hours: int = DEFAULT_IBC_TIMEOUT_HOURS,
        igp_hook_overrides: Optional[Mapping[str, str]] = None,
        warp_program_overrides: Optional[Mapping[str, str]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.network = Network(network)
        self.chains = chains
        self.tokens = tokens
        self.ibc_timeout_hours = ibc_timeout_hours
        self.igp_hook_overrides = dict(igp_hook_overrides or {})
        self.warp_program_overrides = dict(warp_program_overrides or {})
        self._clock = clock
        self.hub = get_hub(chains)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self, request: TransferRequest) -> tuple[ChainDescriptor, ChainDescriptor, TokenDescriptor]:
        """Check a request before any fee math.

        Token availability on the source chain is checked before the
        recipient, so an unsupported token is reported first.

        Raises:
            UnknownEntityError: Unknown chain or token, or token not on the source chain
            InvalidFormatError: Non-positive amount or malformed recipient
        """
        amount = request.amount
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidFormatError(
                f"Amount must be a positive integer, got {request.amount}",
                expected="positive integer in base units",
                value=str(request.amount),
            )
        source = get_chain(request.source, self.chains)
        destination = get_chain(request.destination, self.chains)
        token = get_token(request.token, self.tokens)

        if not self._token_on_chain(token, source):
            raise UnknownEntityError(
                "token",
                f"{token.symbol}@{source.name}",
                f"Token {token.symbol} not available on {source.name}",
            )
        self.validate_recipient(request.recipient, destination)
        return source, destination, token

    def validate_recipient(self, address: str, chain: ChainDescriptor) -> None:
        """Raise InvalidFormatError unless ``address`` suits ``chain``."""
        fmt = chain.address_format
        if fmt == AddressFormat.EVM:
            valid = address.startswith("0x") and is_valid_evm_address(address)
            expected = "0x-prefixed 20-byte hex address"
        elif fmt == AddressFormat.BECH32:
            valid = is_valid_bech32_address(address, chain.address_prefix)
            expected = f"bech32 address with prefix '{chain.address_prefix}'"
        elif fmt == AddressFormat.KASPA:
            valid = is_valid_kaspa_address(address)
            expected = "Kaspa address with prefix 'kaspa:' or 'kaspatest:'"
        else:
            try:
                solana_to_canonical(address)
                valid = True
            except InvalidFormatError:
                valid = False
            expected = "base58 public key (32-44 characters)"
        if not valid:
            raise InvalidFormatError(
                f"Invalid {chain.display_name} address: {address}. Expected {expected}",
                expected=expected,
                value=address,
            )

    def _token_on_chain(self, token: TokenDescriptor, chain: ChainDescriptor) -> bool:
        if isinstance(chain, HubChain):
            return (
                token.is_configured_on_hub
                or token.hub_denom is not None
                or token.address_on(chain.name, self.network) is not None
            )
        return token.address_on(chain.name, self.network) is not None

    def _hub_fallback(self, request: TransferRequest) -> CanonicalAddress:
        fallback = request.fallback_recipient or request.sender
        if not fallback or not is_valid_bech32_address(fallback, self.hub.address_prefix):
            raise InvalidFormatError(
                "Forwarding through the Hub requires a Hub fallback recipient "
                f"('{self.hub.address_prefix}' bech32 address), got {fallback or 'nothing'}",
                expected=f"bech32 address with prefix '{self.hub.address_prefix}'",
                value=fallback or "",
            )
        return bech32_to_canonical(fallback, self.hub.address_prefix)

    # -------------------------------------------------------------------------
    # Routing
    # -------------------------------------------------------------------------

    def route(self, request: TransferRequest) -> Route:
        source, destination, _ = self.validate(request)
        return classify_route(source, destination)

    def transfer(self, request: TransferRequest, quote: Optional[FeeQuote] = None) -> TransferResult:
        """Build the unsigned call for ``request``.

        Args:
            request: What to move and where
            quote: Fee inputs; zero fees when omitted

        Returns:
            TransferResult with the call, and for forwarded routes the plan
            and encoded forwarding metadata

        Raises:
            UnknownEntityError: Unknown chain/token or missing Hub token ID
            InvalidFormatError: Malformed amount, recipient or fallback
            UnsupportedRouteError: Route the Hub cannot serve
            InsufficientBudgetError: Fees consume the forwarded amount
            ConfigurationError: Solana source without a known warp program
        """
        quote = quote or FeeQuote()
        source, destination, token = self.validate(request)
        route = classify_route(source, destination)
        logger.info(
            f"Routing {request.amount} {token.symbol} {route.source} -> {route.destination} "
            f"({route.mode.value}{', ' + route.kind.value if route.kind else ''})"
        )

        if isinstance(source, HubChain):
            return self._from_hub(request, route, destination, token, quote)
        if isinstance(destination, HubChain):
            return self._to_hub(request, route, source, token, quote)
        return self._via_hub(request, route, source, destination, token, quote)

    # -------------------------------------------------------------------------
    # Shared builders
    # -------------------------------------------------------------------------

    def _hub_domain(self) -> int:
        return self.hub.domain(self.network)

    def _timeout(self) -> int:
        return ibc_timeout_timestamp(self.ibc_timeout_hours, now=self._clock())

    def _hook_id(self, token: TokenDescriptor, quote: FeeQuote) -> Optional[str]:
        return quote.igp_hook_id or get_igp_hook_id(token.symbol, self.tokens, self.igp_hook_overrides)

    def _source_denom(self, token: TokenDescriptor, chain: IndirectChain) -> str:
        return token.address_on(chain.name, self.network) or get_hub_denom(token.symbol, self.tokens)

    def _deposit_call(
        self,
        source: DirectChain,
        token: TokenDescriptor,
        hub_recipient: CanonicalAddress,
        amount: int,
        quote: FeeQuote,
        metadata: Optional[bytes] = None,
        program_id: Optional[str] = None,
    ) -> TransferCall:
        """Native call moving ``amount`` from a direct chain onto the Hub."""
        if source.address_format == AddressFormat.KASPA:
            hub_token_id = CanonicalAddress.from_hex(get_hub_token_id(token.symbol, self.tokens))
            return build_kaspa_deposit(
                hub_recipient, amount, hub_token_id, self.network, metadata or b""
            )

        if source.address_format == AddressFormat.EVM:
            contract = token.address_on(source.name, self.network)
            if metadata is None:
                return transfer_remote_call(
                    source.name, contract, self._hub_domain(), hub_recipient, amount,
                    igp_payment=quote.source_gas_payment,
                )
            return transfer_remote_memo_call(
                source.name, contract, self._hub_domain(), hub_recipient, amount, metadata,
                igp_payment=quote.source_gas_payment,
            )
        if source.address_format == AddressFormat.BASE58:
            warp_program = (
                normalize_solana_program_id(program_id)
                if program_id
                else get_solana_warp_program_id(
                    token.symbol, self.network, self.tokens, self.warp_program_overrides
                )
            )
            if metadata is None:
                return transfer_remote_instruction(warp_program, self._hub_domain(), hub_recipient, amount)
            return transfer_remote_memo_instruction(
                warp_program, self._hub_domain(), hub_recipient, amount, metadata
            )
        raise UnsupportedRouteError(
            source.name, self.hub.name, f"No deposit adapter for {source.address_format.value} chains"
        )

    # -------------------------------------------------------------------------
    # From the Hub
    # -------------------------------------------------------------------------

    def _from_hub(
        self,
        request: TransferRequest,
        route: Route,
        destination: ChainDescriptor,
        token: TokenDescriptor,
        quote: FeeQuote,
    ) -> TransferResult:
        if isinstance(destination, IndirectChain):
            msg = IbcTransferMsg(
                chain=self.hub.name,
                value=IbcTransferInstruction(
                    source_channel=destination.forward_channel_out,
                    token=Coin(get_hub_denom(token.symbol, self.tokens), request.amount),
                    sender=request.sender,
                    receiver=request.recipient,
                    timeout_timestamp=self._timeout(),
                ),
            )
            fees = FeeBreakdown(
                amount=request.amount, bridging_fee=0, igp_fee=0, recipient_receives=request.amount
            )
            return TransferResult(route=route, call=msg, fees=fees)

        outbound_fee = bridging_fee(request.amount, quote.outbound_rate)
        hook_id = self._hook_id(token, quote)
        instruction = RemoteTransferInstruction(
            sender=request.sender,
            token_id=CanonicalAddress.from_hex(get_hub_token_id(token.symbol, self.tokens)),
            destination_domain=destination.domain(self.network),
            recipient=to_canonical(request.recipient, destination.address_format),
            amount=request.amount,
            max_fee=Coin(get_hub_denom(token.symbol, self.tokens), quote.igp_fee + outbound_fee),
            gas_limit=quote.gas_limit,
            custom_hook_id=CanonicalAddress.from_hex(hook_id) if hook_id else None,
        )
        fees = FeeBreakdown(
            amount=request.amount,
            bridging_fee=outbound_fee,
            igp_fee=quote.igp_fee,
            recipient_receives=request.amount,
        )
        return TransferResult(route=route, call=HubRemoteTransferMsg(instruction), fees=fees)

    # -------------------------------------------------------------------------
    # To the Hub
    # -------------------------------------------------------------------------

    def _to_hub(
        self,
        request: TransferRequest,
        route: Route,
        source: ChainDescriptor,
        token: TokenDescriptor,
        quote: FeeQuote,
    ) -> TransferResult:
        if isinstance(source, IndirectChain):
            memo = ""
            if source.incentivized:
                fees = estimate_single_hop(
                    request.amount, quote.delayed_ack_rate, eibc_fee_percent=quote.eibc_percent
                )
                memo = eibc_fee_memo(fees.eibc_fee or 0)
            else:
                fees = FeeBreakdown(
                    amount=request.amount, bridging_fee=0, igp_fee=0, recipient_receives=request.amount
                )
            msg = IbcTransferMsg(
                chain=source.name,
                value=IbcTransferInstruction(
                    source_channel=source.forward_channel_in,
                    token=Coin(self._source_denom(token, source), request.amount),
                    sender=request.sender,
                    receiver=request.recipient,
                    timeout_timestamp=self._timeout(),
                    memo=memo,
                ),
            )
            return TransferResult(route=route, call=msg, fees=fees)

        recipient = bech32_to_canonical(request.recipient, self.hub.address_prefix)
        call = self._deposit_call(
            source, token, recipient, request.amount, quote, program_id=request.token_program_id
        )
        fees = estimate_single_hop(request.amount, quote.inbound_rate)
        return TransferResult(route=route, call=call, fees=fees)

    # -------------------------------------------------------------------------
    # Via the Hub
    # -------------------------------------------------------------------------

    def _via_hub(
        self,
        request: TransferRequest,
        route: Route,
        source: ChainDescriptor,
        destination: ChainDescriptor,
        token: TokenDescriptor,
        quote: FeeQuote,
    ) -> TransferResult:
        fallback = self._hub_fallback(request)
        hop1 = Hop1Rates(
            inbound_rate=quote.inbound_rate,
            eibc_fee_percent=quote.eibc_percent,
            delayed_ack_rate=quote.delayed_ack_rate,
        )
        hub_denom = get_hub_denom(token.symbol, self.tokens)

        if isinstance(destination, DirectChain):
            hook_id = self._hook_id(token, quote)
            hop2 = Hop2Params(
                igp_fee=quote.igp_fee,
                outbound_rate=quote.outbound_rate,
                fee_hook_id=hook_id,
                fee_denom=hub_denom,
            )
            plan = forward(request.amount, route.kind, hop1, hop2)
            instruction: ForwardInstruction = ForwardToDirectChain(
                RemoteTransferInstruction(
                    token_id=CanonicalAddress.from_hex(get_hub_token_id(token.symbol, self.tokens)),
                    destination_domain=destination.domain(self.network),
                    recipient=to_canonical(request.recipient, destination.address_format),
                    amount=plan.forward_amount,
                    max_fee=Coin(plan.hop2_fees.fee_denom, plan.max_fee),
                    gas_limit=quote.gas_limit,
                    custom_hook_id=CanonicalAddress.from_hex(hook_id) if hook_id else None,
                )
            )
        else:
            plan = forward(request.amount, route.kind, hop1)
            instruction = ForwardToIndirectChain(
                IbcTransferInstruction(
                    source_channel=destination.forward_channel_out,
                    token=Coin(hub_denom, plan.forward_amount),
                    sender=request.fallback_recipient or request.sender,
                    receiver=request.recipient,
                    timeout_timestamp=self._timeout(),
                )
            )

        if isinstance(source, DirectChain):
            metadata = ForwardingMetadata.for_instruction(instruction).encode()
            call = self._deposit_call(
                source, token, fallback, request.amount, quote, metadata, request.token_program_id
            )
            logger.debug(f"Forwarding metadata: {len(metadata)} bytes")
            return TransferResult(route=route, call=call, plan=plan, metadata=metadata)

        if source.incentivized:
            memo = incentivized_memo(plan.hop1_fees.eibc_fee or 0, instruction)
        else:
            memo = relay_memo(instruction)
        msg = IbcTransferMsg(
            chain=source.name,
            value=IbcTransferInstruction(
                source_channel=source.forward_channel_in,
                token=Coin(self._source_denom(token, source), request.amount),
                sender=request.sender,
                receiver=request.fallback_recipient or request.sender,
                timeout_timestamp=self._timeout(),
                memo=memo,
            ),
        )
        return TransferResult(route=route, call=msg, plan=plan)


__all__ = [
    "DEFAULT_GAS_LIMIT",
    "TransferCall",
    "RouteMode",
    "TransferRequest",
    "FeeQuote",
    "Route",
    "TransferResult",
    "classify_route",
    "TransferRouter",
]
